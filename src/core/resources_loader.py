"""Chart profile loader.

A chart profile is a YAML file with `ChartSpec` overrides, e.g.:

    metadata:
      version: 0.3.0
    image:
      tag: "26.1.0"
    workflow:
      namespace: identity

Only the keys that differ from the built-in Keycloak + Postgres chart need to
be listed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir
from core.domain.models import ChartSpec
from core.errors import ProfileError

logger = logging.getLogger(__name__)

PROFILE_FILENAME = "chartseed.yaml"


def get_default_profile_path(settings: AppSettings | None = None) -> Path | None:
    """Find a chart profile in the usual places.

    Order:
    1) `CHARTSEED_PROFILE_PATH` (settings.profile_path)
    2) ./chartseed.yaml (cwd)
    3) <user config dir>/chartseed.yaml
    """

    if settings is not None and settings.profile_path is not None:
        return settings.profile_path

    candidates = [
        Path.cwd() / PROFILE_FILENAME,
        get_user_config_dir() / PROFILE_FILENAME,
    ]
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None


def load_chart_spec(path: Path | None = None) -> ChartSpec:
    """Build a `ChartSpec` from a profile file, or the defaults when `path` is None."""

    if path is None:
        return ChartSpec()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileError(f"Cannot read chart profile {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ProfileError(f"Invalid YAML in chart profile {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileError(f"Chart profile {path} must be a mapping, got {type(data).__name__}")

    try:
        spec = ChartSpec.model_validate(data)
    except ValidationError as exc:
        raise ProfileError(f"Invalid chart profile {path}:\n{exc}") from exc

    logger.debug(f"Loaded chart profile from {path}")
    return spec


def resolve_chart_spec(
    profile: Path | None = None,
    *,
    settings: AppSettings | None = None,
) -> ChartSpec:
    """Explicit `profile` wins; otherwise fall back to the default lookup."""

    path = profile or get_default_profile_path(settings)
    return load_chart_spec(path)
