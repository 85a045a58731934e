"""Rendering of the embedded chart templates (Jinja2).

The templates under `templates/chart/` are Helm templates themselves, so
Jinja2 is configured with square-bracket delimiters and leaves every
`{{ ... }}` for Helm to interpolate at deploy time.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from core.errors import TemplateRenderError

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates" / "chart"


def yaml_quote(value: Any) -> str:
    """Render `value` as a double-quoted YAML scalar."""

    return json.dumps(str(value), ensure_ascii=False)


def _reads_back_as_itself(text: str) -> bool:
    try:
        return yaml.safe_load(text) == text
    except yaml.YAMLError:
        return False


def yaml_scalar(value: Any) -> str:
    """Render `value` plain when it reads back as the same string, quoted otherwise."""

    text = str(value)
    if text and "\n" not in text and text == text.strip() and _reads_back_as_itself(text):
        return text
    return yaml_quote(text)


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        block_start_string="[%",
        block_end_string="%]",
        variable_start_string="[[",
        variable_end_string="]]",
        comment_start_string="[#",
        comment_end_string="#]",
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,
    )
    env.filters["yaml_quote"] = yaml_quote
    env.filters["yaml_scalar"] = yaml_scalar
    return env


def list_templates() -> list[str]:
    """Names of the embedded templates, without the `.j2` suffix."""

    return sorted(name.removesuffix(".j2") for name in _get_env().list_templates(extensions=["j2"]))


def render_template(name: str, **context: Any) -> str:
    """Render the embedded template `name` (e.g. `"values.yaml"`)."""

    try:
        template = _get_env().get_template(f"{name}.j2")
    except TemplateNotFound as exc:
        raise TemplateRenderError(f"Unknown template: {name}") from exc

    try:
        return template.render(**context)
    except TemplateError as exc:
        raise TemplateRenderError(f"Failed to render {name}: {exc}") from exc
