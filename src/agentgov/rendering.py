"""Text templating capability used by the workflow, hook and docs renderers."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol

from jinja2 import Environment, PackageLoader, StrictUndefined


class TemplateRenderer(Protocol):
    """Template name + data bag -> text."""

    def render(self, template_name: str, data: Mapping[str, Any]) -> str: ...


def _json_scalar(value: Any) -> str:
    """Render a value as a JSON literal, safe inside YAML and Python source."""
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


class JinjaRenderer:
    """Renders templates shipped in ``agentgov/templates``."""

    def __init__(self, environment: Environment | None = None) -> None:
        self.environment = environment or Environment(
            loader=PackageLoader("agentgov", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.environment.filters["json"] = _json_scalar

    def render(self, template_name: str, data: Mapping[str, Any]) -> str:
        template = self.environment.get_template(template_name)
        return template.render(**data)


_default_renderer: JinjaRenderer | None = None


def default_renderer() -> JinjaRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = JinjaRenderer()
    return _default_renderer
