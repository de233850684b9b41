"""Inline content: entity decoding, element styling and inline parsing.

List items, blockquote lines, headings and table cells carry raw inline
markdown.  :func:`parse_inline` turns it into :class:`InlineElement` runs
with markdown-it-py's inline parser, and :func:`style_element` applies the
theme to a run.  The dispatcher uses the same styler for inline events.
"""

from __future__ import annotations

import html
import re

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdstream.events import InlineElement, InlineKind
from mdstream.theme import Theme
from mdstream.utils import OSC8_CLOSE

# Entities are left in place so decoding happens once, in style_element.
_md_inline = MarkdownIt("commonmark").enable("strikethrough").disable("entity")

_FOOTNOTE_RE = re.compile(r"\[\^([^\]\s]+)\]")
_SUPERSCRIPT = str.maketrans("0123456789", "⁰¹²³⁴⁵⁶⁷⁸⁹")


def decode_html_entities(text: str) -> str:
    return html.unescape(text)


def footnote_marker(ref: str) -> str:
    """Return the superscript marker for footnote *ref* (``"12"`` -> ``"¹²"``)."""
    if ref.isdigit():
        return ref.translate(_SUPERSCRIPT)
    return f"[{ref}]"


def hyperlink(url: str, label: str) -> str:
    """Wrap *label* in an OSC 8 hyperlink to *url*."""
    return f"\x1b]8;;{url}\x1b\\{label}{OSC8_CLOSE}"


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------


def style_element(element: InlineElement, theme: Theme, *, hyperlinks: bool = True) -> str:
    """Render one inline element to a styled string."""
    kind = element.kind

    if kind is InlineKind.CODE:
        return theme.code(element.text)
    if kind is InlineKind.FOOTNOTE:
        return theme.footnote(element.text)

    text = decode_html_entities(element.text)

    if kind is InlineKind.TEXT:
        return text
    if kind is InlineKind.BOLD:
        return theme.bold(text)
    if kind is InlineKind.ITALIC:
        return theme.italic(text)
    if kind is InlineKind.BOLD_ITALIC:
        return theme.bold_italic(text)
    if kind is InlineKind.STRIKEOUT:
        return theme.strikethrough(text)
    if kind is InlineKind.UNDERLINE:
        return theme.underline(text)
    if kind is InlineKind.LINK:
        label = theme.link(text)
        if hyperlinks and element.url:
            label = hyperlink(element.url, label)
        return f"{label} {theme.link_url(f'({element.url})')}"
    if kind is InlineKind.IMAGE:
        return theme.image(f"[🖼 {text}]")

    raise ValueError(f"Unhandled inline kind: {kind!r}")


def style_elements(elements: list[InlineElement], theme: Theme, *, hyperlinks: bool = True) -> str:
    return "".join(style_element(e, theme, hyperlinks=hyperlinks) for e in elements)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _InlineState:
    """Open emphasis counters and the link being collected."""

    def __init__(self) -> None:
        self.bold = 0
        self.italic = 0
        self.strike = 0
        self.underline = 0
        self.link_url: str | None = None
        self.link_label: list[str] = []

    def kind(self) -> InlineKind:
        if self.bold and self.italic:
            return InlineKind.BOLD_ITALIC
        if self.bold:
            return InlineKind.BOLD
        if self.italic:
            return InlineKind.ITALIC
        if self.underline:
            return InlineKind.UNDERLINE
        if self.strike:
            return InlineKind.STRIKEOUT
        return InlineKind.TEXT


def _split_footnotes(text: str, kind: InlineKind) -> list[InlineElement]:
    elements: list[InlineElement] = []
    pos = 0
    for match in _FOOTNOTE_RE.finditer(text):
        if match.start() > pos:
            elements.append(InlineElement(kind, text[pos : match.start()]))
        elements.append(InlineElement(InlineKind.FOOTNOTE, footnote_marker(match.group(1))))
        pos = match.end()
    if pos < len(text):
        elements.append(InlineElement(kind, text[pos:]))
    return elements


def _append(elements: list[InlineElement], element: InlineElement) -> None:
    # Merge adjacent runs of the same plain kind so styling stays contiguous.
    if (
        elements
        and elements[-1].kind is element.kind
        and element.kind not in (InlineKind.CODE, InlineKind.LINK, InlineKind.IMAGE, InlineKind.FOOTNOTE)
    ):
        elements[-1] = InlineElement(element.kind, elements[-1].text + element.text)
    else:
        elements.append(element)


def _walk(children: list[Token]) -> list[InlineElement]:
    elements: list[InlineElement] = []
    state = _InlineState()

    for child in children:
        t = child.type

        if t in ("text", "html_inline", "softbreak", "hardbreak"):
            content = " " if t in ("softbreak", "hardbreak") else child.content
            if state.link_url is not None:
                state.link_label.append(content)
                continue
            for element in _split_footnotes(content, state.kind()):
                _append(elements, element)
            continue

        if t == "strong_open":
            if child.markup == "__":
                state.underline += 1
            else:
                state.bold += 1
        elif t == "strong_close":
            if child.markup == "__":
                state.underline = max(0, state.underline - 1)
            else:
                state.bold = max(0, state.bold - 1)
        elif t == "em_open":
            state.italic += 1
        elif t == "em_close":
            state.italic = max(0, state.italic - 1)
        elif t == "s_open":
            state.strike += 1
        elif t == "s_close":
            state.strike = max(0, state.strike - 1)
        elif t == "code_inline":
            if state.link_url is not None:
                state.link_label.append(child.content)
            else:
                _append(elements, InlineElement(InlineKind.CODE, child.content))
        elif t == "link_open":
            state.link_url = str(child.attrGet("href") or "")
            state.link_label = []
        elif t == "link_close":
            if state.link_url is not None:
                label = "".join(state.link_label)
                _append(elements, InlineElement(InlineKind.LINK, label, state.link_url))
            state.link_url = None
            state.link_label = []
        elif t == "image":
            _append(elements, InlineElement(InlineKind.IMAGE, child.content, str(child.attrGet("src") or "")))
        elif child.content:
            _append(elements, InlineElement(state.kind(), child.content))

    return elements


def parse_inline(content: str) -> list[InlineElement]:
    """Parse raw inline markdown into inline elements, in order."""
    if not content:
        return []
    tokens = _md_inline.parseInline(content)
    if not tokens or tokens[0].children is None:
        return [InlineElement(InlineKind.TEXT, content)]
    return _walk(tokens[0].children)


def render_inline_content(content: str, theme: Theme, *, hyperlinks: bool = True) -> str:
    """Parse and style raw inline markdown in one step."""
    return style_elements(parse_inline(content), theme, hyperlinks=hyperlinks)
