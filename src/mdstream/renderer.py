"""Streaming renderer: turns parse events into terminal output as they arrive.

Each call to :meth:`Renderer.render` consumes one event, writes whatever that
event produces and flushes, so partial output is visible immediately.  The
only output held back is a table, which is buffered until its end event
because column widths depend on every row.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Iterable, TextIO

from mdstream.code import render_code_line
from mdstream.config import RenderConfig
from mdstream.events import (
    LIST_CONTINUATION_EVENTS,
    BlockquoteEndEvent,
    BlockquoteLineEvent,
    BlockquoteStartEvent,
    BoldEvent,
    BoldItalicEvent,
    CodeBlockEndEvent,
    CodeBlockLineEvent,
    CodeBlockStartEvent,
    EmptyLineEvent,
    FootnoteEvent,
    HeadingEvent,
    HorizontalRuleEvent,
    ImageEvent,
    InlineCodeEvent,
    InlineElement,
    InlineElementsEvent,
    InlineKind,
    ItalicEvent,
    LinkEvent,
    ListEndEvent,
    ListItemEvent,
    NewlineEvent,
    ParseEvent,
    PromptEvent,
    StrikeoutEvent,
    TableEndEvent,
    TableHeaderEvent,
    TableRowEvent,
    TableSeparatorEvent,
    TextEvent,
    ThinkBlockEndEvent,
    ThinkBlockLineEvent,
    ThinkBlockStartEvent,
    UnderlineEvent,
)
from mdstream.heading import render_heading
from mdstream.highlight import Highlighter
from mdstream.inline import decode_html_entities, render_inline_content, style_element
from mdstream.lists import ListState, render_list_item
from mdstream.parser import parse_document
from mdstream.table import render_table
from mdstream.theme import Theme, default_theme
from mdstream.utils import text_wrap, visible_width

logger = logging.getLogger(__name__)

BLOCKQUOTE_INDENT = 3
THINK_HEADER = "┌─ thinking ─"

# Inline events that map one-to-one onto an inline element kind.
_INLINE_EVENT_KINDS = {
    BoldEvent: InlineKind.BOLD,
    ItalicEvent: InlineKind.ITALIC,
    BoldItalicEvent: InlineKind.BOLD_ITALIC,
    UnderlineEvent: InlineKind.UNDERLINE,
    StrikeoutEvent: InlineKind.STRIKEOUT,
    FootnoteEvent: InlineKind.FOOTNOTE,
}


@dataclass
class RenderContext:
    """All mutable rendering state, owned by one :class:`Renderer`."""

    in_blockquote: bool = False
    blockquote_depth: int = 0
    language: str | None = None
    code_buffer: str = ""
    in_code_block: bool = False
    table_rows: list[list[str]] = field(default_factory=list)
    list_state: ListState = field(default_factory=ListState)
    column: int = 0
    finished: bool = False


class Renderer:
    """Render parse events to an ANSI text stream.

    Width, theme and highlighter may be swapped between events.  Errors
    raised by *output* (for example ``BrokenPipeError``) propagate out of
    :meth:`render` unchanged; the renderer keeps its state and does not
    retry.

    Example::

        renderer = Renderer(width=80)
        for event in events:
            renderer.render(event)
        renderer.finish()
    """

    def __init__(
        self,
        output: TextIO | None = None,
        width: int = 80,
        theme: Theme | None = None,
        highlighter: Highlighter | None = None,
        *,
        hyperlinks: bool = True,
    ) -> None:
        self.output = output or sys.stdout
        self.width = width
        self.theme = theme or default_theme()
        self.highlighter = highlighter or Highlighter()
        self.hyperlinks = hyperlinks
        self._ctx = RenderContext()

    @classmethod
    def from_config(cls, config: RenderConfig, output: TextIO | None = None) -> Renderer:
        return cls(
            output=output,
            width=config.resolve_width(),
            theme=config.build_theme(),
            highlighter=Highlighter(config.code_style),
            hyperlinks=config.hyperlinks,
        )

    # -- configuration ------------------------------------------------------

    def set_width(self, width: int) -> None:
        self.width = width

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme

    def set_highlighter(self, highlighter: Highlighter) -> None:
        self.highlighter = highlighter

    # -- read-only state ----------------------------------------------------

    @property
    def context(self) -> RenderContext:
        return self._ctx

    @property
    def column(self) -> int:
        return self._ctx.column

    @property
    def code_buffer(self) -> str:
        return self._ctx.code_buffer

    @property
    def finished(self) -> bool:
        return self._ctx.finished

    # -- output helpers -----------------------------------------------------

    def _write(self, text: str) -> None:
        if not text:
            return
        self.output.write(text)
        tail = text.rsplit("\n", 1)
        if len(tail) == 2:
            self._ctx.column = visible_width(tail[1])
        else:
            self._ctx.column += visible_width(text)

    def _writeln(self, text: str = "") -> None:
        self.output.write(text + "\n")
        self._ctx.column = 0

    def _margin(self) -> str:
        ctx = self._ctx
        if not ctx.in_blockquote:
            return ""
        return f"{self.theme.blockquote_border('│')} " * ctx.blockquote_depth

    def _current_width(self) -> int:
        ctx = self._ctx
        indent = ctx.blockquote_depth * BLOCKQUOTE_INDENT if ctx.in_blockquote else 0
        return max(0, self.width - indent)

    def _inline(self, content: str) -> str:
        return render_inline_content(content, self.theme, hyperlinks=self.hyperlinks)

    def _style(self, element: InlineElement) -> str:
        return style_element(element, self.theme, hyperlinks=self.hyperlinks)

    def _flush_table(self) -> None:
        rows = self._ctx.table_rows
        if not rows:
            logger.debug("table end with no buffered rows")
            return
        self._ctx.table_rows = []
        lines = render_table(rows, self._margin(), self.theme, self.width, hyperlinks=self.hyperlinks)
        for line in lines:
            self._writeln(line)

    # -- event dispatch -----------------------------------------------------

    def render(self, event: ParseEvent) -> None:
        """Render one event and flush the output."""
        ctx = self._ctx
        if ctx.finished:
            logger.debug("dropping %s received after finish()", type(event).__name__)
            return

        if not isinstance(event, LIST_CONTINUATION_EVENTS):
            ctx.list_state.reset()

        self._dispatch(event)
        self.output.flush()

    def _dispatch(self, event: ParseEvent) -> None:
        ctx = self._ctx

        # === Inline events ===
        if isinstance(event, TextEvent):
            self._write(self._style(InlineElement(InlineKind.TEXT, event.text)))

        elif isinstance(event, InlineCodeEvent):
            # Code spans from the inline parser stay literal; producer events arrive entity-encoded.
            self._write(self._style(InlineElement(InlineKind.CODE, decode_html_entities(event.code))))

        elif type(event) in _INLINE_EVENT_KINDS:
            kind = _INLINE_EVENT_KINDS[type(event)]
            text = decode_html_entities(event.text) if kind is InlineKind.FOOTNOTE else event.text
            self._write(self._style(InlineElement(kind, text)))

        elif isinstance(event, LinkEvent):
            self._write(self._style(InlineElement(InlineKind.LINK, event.text, event.url)))

        elif isinstance(event, ImageEvent):
            self._write(self._style(InlineElement(InlineKind.IMAGE, event.alt, event.url)))

        elif isinstance(event, PromptEvent):
            self._write(event.text)

        elif isinstance(event, InlineElementsEvent):
            for element in event.elements:
                self._write(self._style(element))

        # === Headings ===
        elif isinstance(event, HeadingEvent):
            lines = render_heading(
                event.level,
                event.content,
                self._current_width(),
                self._margin(),
                self.theme,
                hyperlinks=self.hyperlinks,
            )
            for line in lines:
                self._writeln(line)

        # === Code blocks ===
        elif isinstance(event, CodeBlockStartEvent):
            ctx.language = event.language or None
            ctx.code_buffer = ""
            ctx.in_code_block = True

        elif isinstance(event, CodeBlockLineEvent):
            if not ctx.in_code_block:
                logger.debug("code line outside a code block, rendering as plain text")
            if ctx.code_buffer:
                ctx.code_buffer += "\n"
            ctx.code_buffer += event.line
            lines = render_code_line(
                event.line,
                ctx.language,
                self._margin(),
                self._current_width(),
                self.highlighter,
            )
            for line in lines:
                self._writeln(line)

        elif isinstance(event, CodeBlockEndEvent):
            ctx.language = None
            ctx.code_buffer = ""
            ctx.in_code_block = False

        # === Lists ===
        elif isinstance(event, ListItemEvent):
            lines = render_list_item(
                event.indent,
                event.bullet,
                event.content,
                self._current_width(),
                self._margin(),
                self.theme,
                ctx.list_state,
                hyperlinks=self.hyperlinks,
            )
            for line in lines:
                self._writeln(line)

        elif isinstance(event, ListEndEvent):
            ctx.list_state.mark_pending_reset()

        # === Tables ===
        elif isinstance(event, (TableHeaderEvent, TableRowEvent)):
            ctx.table_rows.append(list(event.cells))

        elif isinstance(event, TableSeparatorEvent):
            pass

        elif isinstance(event, TableEndEvent):
            self._flush_table()

        # === Blockquotes ===
        elif isinstance(event, BlockquoteStartEvent):
            ctx.in_blockquote = True
            ctx.blockquote_depth = max(0, event.depth)

        elif isinstance(event, BlockquoteLineEvent):
            margin = self._margin()
            lines = text_wrap(self._inline(event.text), self._current_width(), margin, margin)
            if not lines:
                self._writeln(margin)
            for line in lines:
                self._writeln(line)

        elif isinstance(event, BlockquoteEndEvent):
            ctx.in_blockquote = False
            ctx.blockquote_depth = 0

        # === Think blocks ===
        elif isinstance(event, ThinkBlockStartEvent):
            self._writeln(self.theme.think_border(THINK_HEADER))
            ctx.in_blockquote = True
            ctx.blockquote_depth = 1

        elif isinstance(event, ThinkBlockLineEvent):
            border = self.theme.think_border("│")
            self._writeln(f"{border} {self.theme.think(self._inline(event.text))}")

        elif isinstance(event, ThinkBlockEndEvent):
            self._writeln(self.theme.think_border("└"))
            ctx.in_blockquote = False
            ctx.blockquote_depth = 0

        # === Other blocks ===
        elif isinstance(event, HorizontalRuleEvent):
            rule = "─" * self._current_width()
            self._writeln(f"{self._margin()}{self.theme.hr(rule)}")

        elif isinstance(event, (EmptyLineEvent, NewlineEvent)):
            self._writeln()

        else:
            logger.debug("ignoring unknown event %r", event)

    def render_all(self, events: Iterable[ParseEvent]) -> None:
        for event in events:
            self.render(event)

    def finish(self) -> None:
        """Signal end of stream: flush any buffered table, then ignore further events."""
        if self._ctx.finished:
            return
        if self._ctx.table_rows:
            self._flush_table()
        self._ctx.finished = True
        self.output.flush()

    def reset(self) -> None:
        """Discard all rendering state, including a finished stream."""
        self._ctx = RenderContext()


def render_markdown(
    markdown: str,
    width: int | None = None,
    output: TextIO | None = None,
    theme: Theme | None = None,
) -> None:
    """Render a complete markdown document in one call."""
    config = RenderConfig(width=width)
    renderer = Renderer.from_config(config, output=output)
    if theme is not None:
        renderer.set_theme(theme)
    renderer.render_all(parse_document(markdown))
    renderer.finish()
