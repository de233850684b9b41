"""Event types consumed by the renderer.

Two closed families: :class:`InlineElement` (one styled run of inline text,
tagged by :class:`InlineKind`) and the block/inline *events* that make up a
rendered stream.  ``ParseEvent`` is the union the dispatcher matches on; new
kinds are added by extending these sets, never by subclassing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

# ---------------------------------------------------------------------------
# Inline elements
# ---------------------------------------------------------------------------


class InlineKind(enum.Enum):
    TEXT = "text"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"
    STRIKEOUT = "strikeout"
    UNDERLINE = "underline"
    CODE = "code"
    LINK = "link"
    IMAGE = "image"
    FOOTNOTE = "footnote"


@dataclass(frozen=True)
class InlineElement:
    """One run of inline content.

    ``text`` is the label for links, the alt text for images and the
    already-formatted marker for footnotes.  ``url`` is only meaningful for
    links and images.
    """

    kind: InlineKind
    text: str
    url: str = ""


# ---------------------------------------------------------------------------
# List bullets
# ---------------------------------------------------------------------------


class Bullet(enum.Enum):
    DASH = "-"
    STAR = "*"
    PLUS = "+"
    PLUS_EXPAND = "+>"
    ORDERED = "1."


# ---------------------------------------------------------------------------
# Inline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextEvent:
    text: str


@dataclass(frozen=True)
class InlineCodeEvent:
    code: str


@dataclass(frozen=True)
class BoldEvent:
    text: str


@dataclass(frozen=True)
class ItalicEvent:
    text: str


@dataclass(frozen=True)
class BoldItalicEvent:
    text: str


@dataclass(frozen=True)
class UnderlineEvent:
    text: str


@dataclass(frozen=True)
class StrikeoutEvent:
    text: str


@dataclass(frozen=True)
class LinkEvent:
    text: str
    url: str


@dataclass(frozen=True)
class ImageEvent:
    alt: str
    url: str = ""


@dataclass(frozen=True)
class FootnoteEvent:
    text: str


@dataclass(frozen=True)
class PromptEvent:
    """A shell-style prompt written verbatim."""

    text: str


@dataclass(frozen=True)
class InlineElementsEvent:
    """A run of adjacent inline elements, written one element at a time."""

    elements: tuple[InlineElement, ...] = ()


# ---------------------------------------------------------------------------
# Block events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeadingEvent:
    level: int
    content: str


@dataclass(frozen=True)
class CodeBlockStartEvent:
    language: str | None = None


@dataclass(frozen=True)
class CodeBlockLineEvent:
    line: str


@dataclass(frozen=True)
class CodeBlockEndEvent:
    pass


@dataclass(frozen=True)
class ListItemEvent:
    """One list item.

    ``indent`` is the nesting level reported by the producer.  ``number`` is
    the producer's ordinal for ordered items; the renderer keeps its own
    counter and does not use it.
    """

    indent: int
    content: str
    bullet: Bullet = Bullet.DASH
    number: int | None = None


@dataclass(frozen=True)
class ListEndEvent:
    pass


@dataclass(frozen=True)
class TableHeaderEvent:
    cells: tuple[str, ...] = ()


@dataclass(frozen=True)
class TableRowEvent:
    cells: tuple[str, ...] = ()


@dataclass(frozen=True)
class TableSeparatorEvent:
    pass


@dataclass(frozen=True)
class TableEndEvent:
    pass


@dataclass(frozen=True)
class BlockquoteStartEvent:
    depth: int = 1


@dataclass(frozen=True)
class BlockquoteLineEvent:
    text: str


@dataclass(frozen=True)
class BlockquoteEndEvent:
    pass


@dataclass(frozen=True)
class ThinkBlockStartEvent:
    pass


@dataclass(frozen=True)
class ThinkBlockLineEvent:
    text: str


@dataclass(frozen=True)
class ThinkBlockEndEvent:
    pass


@dataclass(frozen=True)
class HorizontalRuleEvent:
    pass


@dataclass(frozen=True)
class EmptyLineEvent:
    pass


@dataclass(frozen=True)
class NewlineEvent:
    pass


ParseEvent = Union[
    TextEvent,
    InlineCodeEvent,
    BoldEvent,
    ItalicEvent,
    BoldItalicEvent,
    UnderlineEvent,
    StrikeoutEvent,
    LinkEvent,
    ImageEvent,
    FootnoteEvent,
    PromptEvent,
    InlineElementsEvent,
    HeadingEvent,
    CodeBlockStartEvent,
    CodeBlockLineEvent,
    CodeBlockEndEvent,
    ListItemEvent,
    ListEndEvent,
    TableHeaderEvent,
    TableRowEvent,
    TableSeparatorEvent,
    TableEndEvent,
    BlockquoteStartEvent,
    BlockquoteLineEvent,
    BlockquoteEndEvent,
    ThinkBlockStartEvent,
    ThinkBlockLineEvent,
    ThinkBlockEndEvent,
    HorizontalRuleEvent,
    EmptyLineEvent,
    NewlineEvent,
]

# Events that keep a list context alive across a list-end boundary.
LIST_CONTINUATION_EVENTS = (ListItemEvent, ListEndEvent, EmptyLineEvent, NewlineEvent)
