"""Style capability consumed by the renderer.

A :class:`Theme` is a bundle of ``str -> str`` functions, one per semantic
style.  The renderer only ever calls them; it never looks at colour values.
Different looks (ANSI colours, no styling at all, test markup) are different
``Theme`` instances, not subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

StyleFn = Callable[[str], str]


def _identity(text: str) -> str:
    return text


def _sgr(on: str, off: str) -> StyleFn:
    """Return a style function wrapping text in *on* ... *off*."""

    def apply(text: str) -> str:
        return f"{on}{text}{off}"

    return apply


def _fg(code: int) -> str:
    return f"\x1b[38;5;{code}m"


_BOLD_OFF = "\x1b[22m"
_FG_OFF = "\x1b[39m"


@dataclass
class Theme:
    """One style function per semantic element."""

    bold: StyleFn = _identity
    italic: StyleFn = _identity
    bold_italic: StyleFn = _identity
    strikethrough: StyleFn = _identity
    underline: StyleFn = _identity
    code: StyleFn = _identity
    link: StyleFn = _identity
    link_url: StyleFn = _identity
    image: StyleFn = _identity
    footnote: StyleFn = _identity
    heading_primary: StyleFn = _identity
    heading: StyleFn = _identity
    heading_marker: StyleFn = _identity
    bullet: StyleFn = _identity
    ordinal: StyleFn = _identity
    table_border: StyleFn = _identity
    table_header: StyleFn = _identity
    blockquote_border: StyleFn = _identity
    hr: StyleFn = _identity
    think_border: StyleFn = _identity
    think: StyleFn = _identity


def plain_theme() -> Theme:
    """Return a theme that applies no styling at all."""
    return Theme()


def default_theme() -> Theme:
    """Return the ANSI 256-colour theme used for terminal output.

    Every style closes only the attributes it opened, so styles nest.
    """
    return Theme(
        bold=_sgr("\x1b[1m", _BOLD_OFF),
        italic=_sgr("\x1b[3m", "\x1b[23m"),
        bold_italic=_sgr("\x1b[1m\x1b[3m", "\x1b[23m" + _BOLD_OFF),
        strikethrough=_sgr("\x1b[9m", "\x1b[29m"),
        underline=_sgr("\x1b[4m", "\x1b[24m"),
        code=_sgr(_fg(215), _FG_OFF),
        link=_sgr(_fg(75) + "\x1b[4m", "\x1b[24m" + _FG_OFF),
        link_url=_sgr(_fg(244), _FG_OFF),
        image=_sgr(_fg(141), _FG_OFF),
        footnote=_sgr(_fg(141), _FG_OFF),
        heading_primary=_sgr(_fg(117) + "\x1b[1m", _BOLD_OFF + _FG_OFF),
        heading=_sgr(_fg(153) + "\x1b[1m", _BOLD_OFF + _FG_OFF),
        heading_marker=_sgr("\x1b[2m", _BOLD_OFF),
        bullet=_sgr(_fg(110), _FG_OFF),
        ordinal=_sgr(_fg(110), _FG_OFF),
        table_border=_sgr(_fg(240), _FG_OFF),
        table_header=_sgr(_fg(153) + "\x1b[1m", _BOLD_OFF + _FG_OFF),
        blockquote_border=_sgr(_fg(244), _FG_OFF),
        hr=_sgr(_fg(240), _FG_OFF),
        think_border=_sgr("\x1b[2m" + _fg(244), _FG_OFF + _BOLD_OFF),
        think=_sgr("\x1b[2m\x1b[3m", "\x1b[23m" + _BOLD_OFF),
    )


THEMES: dict[str, Callable[[], Theme]] = {
    "default": default_theme,
    "plain": plain_theme,
}
