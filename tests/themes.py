"""Themes and helpers shared by the tests: readable tag markup instead of ANSI codes."""

from __future__ import annotations

from mdstream.theme import Theme
from mdstream.utils import iter_segments


def _tag(name: str):
    def apply(text: str) -> str:
        return f"<{name}>{text}</{name}>"

    return apply


def tag_theme() -> Theme:
    """Wrap every style in an XML-ish tag so assertions can see what was styled."""
    return Theme(
        bold=_tag("b"),
        italic=_tag("i"),
        bold_italic=_tag("bi"),
        strikethrough=_tag("s"),
        underline=_tag("u"),
        code=_tag("code"),
        link=_tag("link"),
        link_url=_tag("url"),
        image=_tag("img"),
        footnote=_tag("fn"),
        heading_primary=_tag("h1"),
        heading=_tag("h"),
        heading_marker=_tag("hm"),
        bullet=_tag("bullet"),
        ordinal=_tag("ord"),
        table_border=_tag("tb"),
        table_header=_tag("th"),
        blockquote_border=_tag("bq"),
        hr=_tag("hr"),
        think_border=_tag("tk"),
        think=_tag("think"),
    )


def identity_theme() -> Theme:
    return Theme()


def linked_text(line: str) -> tuple[str, bool]:
    """Return the visible text inside OSC 8 links on *line* and whether a link is left open."""
    inside = []
    open_link = False
    for piece, is_escape in iter_segments(line):
        if is_escape and piece.startswith("\x1b]8;"):
            body = piece[4:].removesuffix("\x07").removesuffix("\x1b\\")
            open_link = bool(body.partition(";")[2])
        elif not is_escape and open_link:
            inside.append(piece)
    return "".join(inside), open_link
