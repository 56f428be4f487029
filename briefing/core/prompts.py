"""Jinja2 prompt templates for the Claude-backed capabilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from briefing.core.config import PROJECT_ROOT
from briefing.core.exceptions import ConfigError

TEMPLATE_DIR = PROJECT_ROOT / "templates"


class PromptRenderer:
    """Render prompt templates from ``templates/``.

    Templates are rendered with ``StrictUndefined`` so a missing variable
    fails loudly instead of sending a half-empty prompt.
    """

    def __init__(self, template_dir: Path = TEMPLATE_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )
        self._env.filters["truncate_text"] = self._filter_truncate_text

    @staticmethod
    def _filter_truncate_text(text: str, length: int = 100) -> str:
        """Truncate text to a given length with ellipsis."""
        if len(text) <= length:
            return text
        return text[: length - 3] + "..."

    def render(self, template_path: str, **context: Any) -> str:
        """Render a template relative to ``templates/``.

        Raises:
            ConfigError: If the template does not exist.
        """
        try:
            template = self._env.get_template(template_path)
        except TemplateNotFound as e:
            raise ConfigError(
                f"Prompt template not found: {template_path}",
                {"template": template_path},
            ) from e
        return template.render(**context).strip()
