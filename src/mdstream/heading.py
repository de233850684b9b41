"""Heading rendering."""

from __future__ import annotations

from mdstream.inline import render_inline_content
from mdstream.theme import Theme
from mdstream.utils import text_wrap, visible_width


def render_heading(
    level: int,
    content: str,
    width: int,
    margin: str,
    theme: Theme,
    *,
    hyperlinks: bool = True,
) -> list[str]:
    """Render a heading into wrapped lines under *margin*.

    h1 is centred in the available width, h2 is styled in place, h3 and
    deeper are prefixed with a muted ``###`` marker.
    """
    text = render_inline_content(content, theme, hyperlinks=hyperlinks)

    if level <= 1:
        lines = text_wrap(theme.heading_primary(text), width)
        centred: list[str] = []
        for line in lines:
            pad = max(0, (width - visible_width(line)) // 2)
            centred.append(f"{margin}{' ' * pad}{line}")
        return centred

    if level == 2:
        return text_wrap(theme.heading(text), width, margin, margin)

    marker = theme.heading_marker("#" * level)
    hang = " " * (level + 1)
    return text_wrap(theme.heading(text), width, f"{margin}{marker} ", margin + hang)
