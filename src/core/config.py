"""Core configuration.

Centralises environment variables (pydantic-settings) so the CLI and the
adapters read git/helm/http settings the same way.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "chartseed"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "chartseed"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "chartseed"
    return Path.home() / ".config" / "chartseed"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Write or update variables in the user's global .env."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# chartseed user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application settings.

    Lookup order: process environment, then `.env` in the working directory,
    then the user config `.env` written by `chartseed doctor setup-remote`.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHARTSEED_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    remote_url: str = Field(
        default="https://github.com/Daali76/helm-keycloak.git",
        min_length=1,
        description="Git remote the workspace is force-pushed to.",
    )
    remote_name: str = Field(default="origin", min_length=1)
    branch: str = Field(default="main", min_length=1)
    commit_message: str = Field(
        default="Fresh Start: Keycloak + Postgres (Official Images)",
        min_length=1,
    )
    force_push: bool = Field(
        default=True,
        description="Push with --force, replacing the remote history.",
    )

    profile_path: Path | None = Field(
        default=None,
        description="YAML chart profile applied over the built-in defaults.",
    )

    git_executable: str = Field(default="git", min_length=1)
    helm_executable: str = Field(default="helm", min_length=1)
    kubectl_executable: str = Field(default="kubectl", min_length=1)

    command_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for local git/helm commands (seconds).",
    )
    push_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Timeout for `git push` (seconds).",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the doctor's remote reachability probe.",
    )
    user_agent: str = Field(
        default="chartseed/0.1 (+https://local)",
        min_length=1,
    )
