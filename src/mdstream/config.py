"""Renderer configuration: output width, theme, code style."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from mdstream.highlight import DEFAULT_CODE_STYLE
from mdstream.theme import THEMES, Theme

DEFAULT_WIDTH = 80

_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_int(value: str | None) -> int | None:
    if not value:
        return None
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


@dataclass
class RenderConfig:
    """Settings the renderer is built from.

    ``width`` of ``None`` means "detect from the environment".
    """

    width: int | None = None
    theme: str = "default"
    code_style: str = DEFAULT_CODE_STYLE
    hyperlinks: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RenderConfig:
        """Build a config from ``MDSTREAM_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        config.width = _parse_int(env.get("MDSTREAM_WIDTH"))
        if env.get("MDSTREAM_THEME"):
            config.theme = env["MDSTREAM_THEME"].strip()
        if env.get("MDSTREAM_CODE_STYLE"):
            config.code_style = env["MDSTREAM_CODE_STYLE"].strip()
        hyperlinks = env.get("MDSTREAM_HYPERLINKS")
        if hyperlinks is not None:
            config.hyperlinks = hyperlinks.strip().lower() not in _FALSE_VALUES
        return config

    def resolve_width(self, environ: Mapping[str, str] | None = None) -> int:
        """Return the explicit width, else ``COLUMNS``, else the terminal size, else 80."""
        if self.width is not None and self.width > 0:
            return self.width
        env = os.environ if environ is None else environ
        columns = _parse_int(env.get("COLUMNS"))
        if columns is not None:
            return columns
        try:
            return os.get_terminal_size().columns
        except OSError:
            return DEFAULT_WIDTH

    def build_theme(self) -> Theme:
        factory = THEMES.get(self.theme)
        if factory is None:
            known = ", ".join(sorted(THEMES))
            raise ValueError(f"Unknown theme {self.theme!r} (known: {known})")
        return factory()
