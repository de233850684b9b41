"""Reference event producer built on markdown-it-py.

Turns a complete markdown document into the event stream the renderer
consumes.  The renderer does not depend on this module; any producer that
emits the same events in document order works.
"""

from __future__ import annotations

import logging

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdstream.events import (
    BlockquoteEndEvent,
    BlockquoteLineEvent,
    BlockquoteStartEvent,
    Bullet,
    CodeBlockEndEvent,
    CodeBlockLineEvent,
    CodeBlockStartEvent,
    EmptyLineEvent,
    HeadingEvent,
    HorizontalRuleEvent,
    InlineElementsEvent,
    ListEndEvent,
    ListItemEvent,
    NewlineEvent,
    ParseEvent,
    TableEndEvent,
    TableHeaderEvent,
    TableRowEvent,
    TableSeparatorEvent,
    TextEvent,
    ThinkBlockEndEvent,
    ThinkBlockLineEvent,
    ThinkBlockStartEvent,
)
from mdstream.inline import parse_inline

logger = logging.getLogger(__name__)

_md_parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])

_BULLET_MARKUP = {"-": Bullet.DASH, "*": Bullet.STAR, "+": Bullet.PLUS}

_THINK_OPEN = "<think>"
_THINK_CLOSE = "</think>"


class _PendingItem:
    __slots__ = ("indent", "bullet", "number", "parts")

    def __init__(self, indent: int, bullet: Bullet, number: int | None) -> None:
        self.indent = indent
        self.bullet = bullet
        self.number = number
        self.parts: list[str] = []


class _EventBuilder:
    """Walks the flat markdown-it token list and emits parse events."""

    def __init__(self) -> None:
        self.events: list[ParseEvent] = []
        self._lists: list[Bullet] = []
        self._item: _PendingItem | None = None
        self._quote_depth = 0
        self._in_think = False
        self._blocks = 0

    # -- helpers ------------------------------------------------------------

    def _emit(self, event: ParseEvent) -> None:
        self.events.append(event)

    def _at_top_level(self) -> bool:
        return not self._lists and self._quote_depth == 0 and not self._in_think

    def _block_start(self) -> None:
        """Separate top-level blocks with one blank line."""
        if not self._at_top_level():
            return
        if self._blocks:
            self._emit(EmptyLineEvent())
        self._blocks += 1

    def _flush_item(self) -> None:
        item = self._item
        if item is None:
            return
        self._item = None
        content = " ".join(part for part in item.parts if part)
        self._emit(ListItemEvent(item.indent, content, item.bullet, item.number))

    # -- block handlers -----------------------------------------------------

    def _paragraph(self, inline: Token | None) -> None:
        content = inline.content if inline is not None else ""

        if self._item is not None:
            self._item.parts.append(" ".join(content.split("\n")))
            return

        lines = content.split("\n")
        if self._in_think:
            self._inline_lines(self._think_lines(lines))
            return
        if self._quote_depth:
            for line in lines:
                self._emit(BlockquoteLineEvent(line))
            return

        self._inline_lines(lines)

    def _code(self, token: Token) -> None:
        self._flush_item()
        self._block_start()
        info = token.info.strip().split()[0] if token.info and token.info.strip() else None
        self._emit(CodeBlockStartEvent(info))
        content = token.content[:-1] if token.content.endswith("\n") else token.content
        for line in content.split("\n"):
            self._emit(CodeBlockLineEvent(line))
        self._emit(CodeBlockEndEvent())

    def _html(self, token: Token) -> None:
        lines = token.content.rstrip("\n").split("\n")

        if not self._in_think and lines and lines[0].strip().startswith(_THINK_OPEN):
            self._block_start()
            self._emit(ThinkBlockStartEvent())
            self._in_think = True
            lines[0] = lines[0].strip()[len(_THINK_OPEN) :]

        if not self._in_think:
            self._block_start()
            for line in lines:
                self._emit(TextEvent(line))
                self._emit(NewlineEvent())
            return

        self._inline_lines(self._think_lines(lines))

    def _think_lines(self, lines: list[str]) -> list[str]:
        """Emit think lines up to ``</think>``; return the lines that follow the close."""
        for n, line in enumerate(lines):
            head, closed, tail = line.partition(_THINK_CLOSE)
            text = head.rstrip()
            if text:
                self._emit(ThinkBlockLineEvent(text))
            if closed:
                self._emit(ThinkBlockEndEvent())
                self._in_think = False
                rest = [tail.strip()] if tail.strip() else []
                return rest + lines[n + 1 :]
        return []

    def _inline_lines(self, lines: list[str]) -> None:
        if not lines:
            return
        self._block_start()
        for line in lines:
            self._emit(InlineElementsEvent(tuple(parse_inline(line))))
            self._emit(NewlineEvent())

    def _table(self, tokens: list[Token], start: int) -> int:
        """Emit table events for the table opening at *start*; return the index of ``table_close``."""
        self._block_start()
        row: list[str] = []
        in_head = False
        i = start + 1
        while i < len(tokens):
            tok = tokens[i]
            t = tok.type
            if t == "table_close":
                self._emit(TableEndEvent())
                return i
            if t == "thead_open":
                in_head = True
            elif t == "thead_close":
                in_head = False
                self._emit(TableSeparatorEvent())
            elif t == "tr_open":
                row = []
            elif t == "tr_close":
                self._emit(TableHeaderEvent(tuple(row)) if in_head else TableRowEvent(tuple(row)))
            elif t == "inline":
                row.append(tok.content)
            i += 1
        logger.debug("unterminated table in document")
        self._emit(TableEndEvent())
        return i

    # -- walk ---------------------------------------------------------------

    def walk(self, tokens: list[Token]) -> None:
        i = 0
        n = len(tokens)
        while i < n:
            tok = tokens[i]
            t = tok.type

            if t == "heading_open":
                self._flush_item()
                self._block_start()
                inline = tokens[i + 1] if i + 1 < n and tokens[i + 1].type == "inline" else None
                level = int(tok.tag[1:]) if tok.tag[1:].isdigit() else 1
                self._emit(HeadingEvent(level, inline.content if inline else ""))

            elif t == "paragraph_open":
                inline = tokens[i + 1] if i + 1 < n and tokens[i + 1].type == "inline" else None
                self._paragraph(inline)

            elif t in ("fence", "code_block"):
                self._code(tok)

            elif t in ("bullet_list_open", "ordered_list_open"):
                self._flush_item()
                self._block_start()
                if t == "ordered_list_open":
                    self._lists.append(Bullet.ORDERED)
                else:
                    self._lists.append(_BULLET_MARKUP.get(tok.markup, Bullet.DASH))

            elif t == "list_item_open":
                self._flush_item()
                bullet = self._lists[-1] if self._lists else Bullet.DASH
                number = int(tok.info) if bullet is Bullet.ORDERED and tok.info.isdigit() else None
                self._item = _PendingItem(max(len(self._lists) - 1, 0), bullet, number)

            elif t == "list_item_close":
                self._flush_item()

            elif t in ("bullet_list_close", "ordered_list_close"):
                self._flush_item()
                if self._lists:
                    self._lists.pop()
                if not self._lists:
                    self._emit(ListEndEvent())

            elif t == "blockquote_open":
                self._flush_item()
                self._block_start()
                self._quote_depth += 1
                self._emit(BlockquoteStartEvent(self._quote_depth))

            elif t == "blockquote_close":
                self._quote_depth = max(0, self._quote_depth - 1)
                if self._quote_depth:
                    self._emit(BlockquoteStartEvent(self._quote_depth))
                else:
                    self._emit(BlockquoteEndEvent())

            elif t == "table_open":
                self._flush_item()
                i = self._table(tokens, i)

            elif t == "hr":
                self._flush_item()
                self._block_start()
                self._emit(HorizontalRuleEvent())

            elif t == "html_block":
                self._flush_item()
                self._html(tok)

            i += 1

        self._flush_item()
        if self._in_think:
            self._emit(ThinkBlockEndEvent())
            self._in_think = False


def parse_document(text: str) -> list[ParseEvent]:
    """Parse a complete markdown document into renderer events."""
    builder = _EventBuilder()
    builder.walk(_md_parser.parse(text))
    return builder.events
