"""Tests for mdstream.renderer -- event dispatch end to end."""

from __future__ import annotations

import io
import logging

import pytest

from mdstream.events import (
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
    NewlineEvent,
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
from mdstream.inline import parse_inline
from mdstream.renderer import Renderer, render_markdown
from mdstream.theme import default_theme, plain_theme
from mdstream.utils import RESET, strip_ansi

from .themes import identity_theme, tag_theme

TABLE_EVENTS = [
    TableHeaderEvent(("A", "BB")),
    TableSeparatorEvent(),
    TableRowEvent(("C", "D")),
]

TABLE_LINES = [
    "┌───┬────┐",
    "│ A │ BB │",
    "├───┼────┤",
    "│ C │ D  │",
    "└───┴────┘",
]


def make(width: int = 80, theme=None) -> tuple[Renderer, io.StringIO]:
    out = io.StringIO()
    return Renderer(out, width=width, theme=theme or plain_theme()), out


def lines_of(out: io.StringIO) -> list[str]:
    return out.getvalue().split("\n")[:-1]


class FailingSink(io.StringIO):
    def write(self, text: str) -> int:
        raise BrokenPipeError("reader went away")


class CountingSink(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.flushes = 0

    def flush(self) -> None:
        self.flushes += 1
        super().flush()


# ---------------------------------------------------------------------------
# Inline events
# ---------------------------------------------------------------------------


class TestInlineEvents:
    """Inline events are decoded, styled and written as they arrive."""

    def test_bold_and_italic_end_to_end(self) -> None:
        renderer, out = make(theme=default_theme())
        renderer.render(InlineElementsEvent(tuple(parse_inline("**bold** and *italic*"))))
        assert "\x1b[" in out.getvalue()
        assert strip_ansi(out.getvalue()) == "bold and italic"

    @pytest.mark.parametrize(
        "event,expected",
        [
            (TextEvent("plain"), "plain"),
            (BoldEvent("b"), "<b>b</b>"),
            (ItalicEvent("i"), "<i>i</i>"),
            (BoldItalicEvent("bi"), "<bi>bi</bi>"),
            (UnderlineEvent("u"), "<u>u</u>"),
            (StrikeoutEvent("s"), "<s>s</s>"),
            (InlineCodeEvent("x &amp; y"), "<code>x & y</code>"),
            (InlineCodeEvent("&lt;T&gt;"), "<code><T></code>"),
            (FootnoteEvent("¹"), "<fn>¹</fn>"),
            (FootnoteEvent("&#185;"), "<fn>¹</fn>"),
            (ImageEvent("chart", "c.png"), "<img>[🖼 chart]</img>"),
        ],
    )
    def test_styles(self, event, expected: str) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render(event)
        assert out.getvalue() == expected

    def test_entities_are_decoded(self) -> None:
        renderer, out = make()
        renderer.render(TextEvent("a &lt; b &amp;&amp; c"))
        assert out.getvalue() == "a < b && c"

    def test_parsed_code_span_stays_literal(self) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render(InlineElementsEvent((InlineElement(InlineKind.CODE, "a &amp; b"),)))
        assert out.getvalue() == "<code>a &amp; b</code>"

    def test_link_uses_hyperlink_escape(self) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render(LinkEvent("docs", "https://example.com"))
        text = out.getvalue()
        assert text.startswith("\x1b]8;;https://example.com")
        assert strip_ansi(text) == "<link>docs</link> <url>(https://example.com)</url>"

    def test_link_without_hyperlinks(self) -> None:
        out = io.StringIO()
        renderer = Renderer(out, theme=plain_theme(), hyperlinks=False)
        renderer.render(LinkEvent("docs", "https://example.com"))
        assert out.getvalue() == "docs (https://example.com)"

    def test_prompt_is_written_verbatim(self) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render(PromptEvent("> &amp;"))
        assert out.getvalue() == "> &amp;"

    def test_column_tracking(self) -> None:
        renderer, _ = make()
        renderer.render(TextEvent("hello"))
        renderer.render(BoldEvent(" 世"))
        assert renderer.column == 8
        renderer.render(NewlineEvent())
        assert renderer.column == 0


# ---------------------------------------------------------------------------
# Headings and rules
# ---------------------------------------------------------------------------


class TestBlocks:
    """Headings, rules and blank lines."""

    def test_heading(self) -> None:
        renderer, out = make(width=20)
        renderer.render(HeadingEvent(3, "Section"))
        assert lines_of(out) == ["### Section"]
        assert renderer.column == 0

    def test_horizontal_rule(self) -> None:
        renderer, out = make(width=10)
        renderer.render(HorizontalRuleEvent())
        assert lines_of(out) == ["─" * 10]

    def test_empty_line_and_newline(self) -> None:
        renderer, out = make()
        renderer.render(EmptyLineEvent())
        renderer.render(NewlineEvent())
        assert out.getvalue() == "\n\n"


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------


class TestCodeBlocks:
    """Code lines render immediately and wrap at the width."""

    def test_lines_render_immediately(self) -> None:
        renderer, out = make()
        renderer.render(CodeBlockStartEvent())
        renderer.render(CodeBlockLineEvent("x = 1"))
        assert lines_of(out) == ["x = 1" + RESET]

    def test_buffer_and_language(self) -> None:
        renderer, _ = make()
        renderer.render(CodeBlockStartEvent("python"))
        renderer.render(CodeBlockLineEvent("a = 1"))
        renderer.render(CodeBlockLineEvent("b = 2"))
        assert renderer.code_buffer == "a = 1\nb = 2"
        assert renderer.context.language == "python"
        renderer.render(CodeBlockEndEvent())
        assert renderer.code_buffer == ""
        assert renderer.context.language is None

    def test_highlighted_with_language(self) -> None:
        renderer, out = make()
        renderer.render(CodeBlockStartEvent("python"))
        renderer.render(CodeBlockLineEvent("def f(): pass"))
        text = out.getvalue()
        assert "\x1b[38;2;" in text
        assert strip_ansi(text) == "def f(): pass\n"

    def test_wraps_at_width(self) -> None:
        renderer, out = make(width=8)
        renderer.render(CodeBlockStartEvent())
        renderer.render(CodeBlockLineEvent("    print(1)"))
        assert [strip_ansi(line) for line in lines_of(out)] == ["    prin", "    t(1)"]

    def test_width_is_re_read_per_line(self) -> None:
        renderer, out = make(width=80)
        renderer.render(CodeBlockStartEvent())
        renderer.render(CodeBlockLineEvent("abcdefghij"))
        renderer.set_width(9)
        renderer.render(CodeBlockLineEvent("abcdefghij"))
        assert len(lines_of(out)) == 3

    def test_blockquote_margin(self) -> None:
        renderer, out = make()
        renderer.render(BlockquoteStartEvent(1))
        renderer.render(CodeBlockStartEvent())
        renderer.render(CodeBlockLineEvent("x"))
        assert lines_of(out) == ["│ x" + RESET]

    def test_line_outside_block_degrades(self, caplog: pytest.LogCaptureFixture) -> None:
        renderer, out = make()
        with caplog.at_level(logging.DEBUG, logger="mdstream.renderer"):
            renderer.render(CodeBlockLineEvent("stray"))
        assert lines_of(out) == ["stray" + RESET]
        assert "outside a code block" in caplog.text


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTables:
    """Table rows buffer until the table ends."""

    def test_buffered_until_end(self) -> None:
        renderer, out = make()
        renderer.render_all(TABLE_EVENTS)
        assert out.getvalue() == ""
        renderer.render(TableEndEvent())
        assert lines_of(out) == TABLE_LINES
        assert renderer.context.table_rows == []

    def test_end_without_rows(self) -> None:
        renderer, out = make()
        renderer.render(TableEndEvent())
        assert out.getvalue() == ""

    def test_in_blockquote(self) -> None:
        renderer, out = make()
        renderer.render(BlockquoteStartEvent(1))
        renderer.render_all([*TABLE_EVENTS, TableEndEvent()])
        assert lines_of(out) == ["│ " + line for line in TABLE_LINES]


# ---------------------------------------------------------------------------
# Blockquotes and think blocks
# ---------------------------------------------------------------------------


class TestBlockquotes:
    """Blockquote lines carry one border per nesting level."""

    def test_single_depth(self) -> None:
        renderer, out = make(width=20)
        renderer.render_all([BlockquoteStartEvent(1), BlockquoteLineEvent("quoted text"), BlockquoteEndEvent()])
        assert lines_of(out) == ["│ quoted text"]

    def test_nested_depth(self) -> None:
        renderer, out = make(width=20)
        renderer.render_all([BlockquoteStartEvent(2), BlockquoteLineEvent("x")])
        assert lines_of(out) == ["│ │ x"]

    def test_width_shrinks_per_depth(self) -> None:
        renderer, out = make(width=10)
        renderer.render_all([BlockquoteStartEvent(1), BlockquoteLineEvent("aaa bbb ccc")])
        assert lines_of(out) == ["│ aaa", "│ bbb", "│ ccc"]

    def test_empty_line_keeps_margin(self) -> None:
        renderer, out = make()
        renderer.render_all([BlockquoteStartEvent(1), BlockquoteLineEvent("")])
        assert lines_of(out) == ["│ "]

    def test_inline_markdown(self) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render_all([BlockquoteStartEvent(1), BlockquoteLineEvent("**hi**")])
        assert lines_of(out) == ["<bq>│</bq> <b>hi</b>"]

    def test_end_clears_state(self) -> None:
        renderer, out = make(width=10)
        renderer.render_all([BlockquoteStartEvent(3), BlockquoteEndEvent(), HorizontalRuleEvent()])
        assert lines_of(out) == ["─" * 10]
        assert not renderer.context.in_blockquote

    def test_horizontal_rule_in_blockquote(self) -> None:
        renderer, out = make(width=10)
        renderer.render_all([BlockquoteStartEvent(1), HorizontalRuleEvent()])
        assert lines_of(out) == ["│ " + "─" * 7]

    def test_line_without_start(self) -> None:
        renderer, out = make()
        renderer.render(BlockquoteLineEvent("loose"))
        assert lines_of(out) == ["loose"]


class TestThinkBlocks:
    """Think blocks render with their own border and style."""

    def test_think_block(self) -> None:
        renderer, out = make()
        renderer.render_all([ThinkBlockStartEvent(), ThinkBlockLineEvent("hmm"), ThinkBlockEndEvent()])
        assert lines_of(out) == ["┌─ thinking ─", "│ hmm", "└"]
        assert not renderer.context.in_blockquote

    def test_think_styles(self) -> None:
        renderer, out = make(theme=tag_theme())
        renderer.render(ThinkBlockStartEvent())
        renderer.render(ThinkBlockLineEvent("*why*"))
        assert lines_of(out)[1] == "<tk>│</tk> <think><i>why</i></think>"

    def test_forces_single_depth(self) -> None:
        renderer, out = make(width=10)
        renderer.render_all([BlockquoteStartEvent(3), ThinkBlockStartEvent(), HorizontalRuleEvent()])
        assert lines_of(out)[-1] == "│ " + "─" * 7


# ---------------------------------------------------------------------------
# Stream lifecycle, sink errors
# ---------------------------------------------------------------------------


class TestLifecycle:
    """Flushing, finish and reset, sink failures and late events."""

    def test_flush_after_every_event(self) -> None:
        sink = CountingSink()
        renderer = Renderer(sink, theme=plain_theme())
        renderer.render_all([TextEvent("a"), NewlineEvent(), TableHeaderEvent(("x",))])
        assert sink.flushes == 3

    def test_finish_flushes_buffered_table(self) -> None:
        renderer, out = make()
        renderer.render_all(TABLE_EVENTS)
        renderer.finish()
        assert lines_of(out) == TABLE_LINES
        assert renderer.finished

    def test_events_after_finish_are_ignored(self) -> None:
        renderer, out = make()
        renderer.finish()
        renderer.render_all([TextEvent("late"), HeadingEvent(1, "Late"), NewlineEvent()])
        assert out.getvalue() == ""

    def test_finish_is_idempotent(self) -> None:
        renderer, out = make()
        renderer.render_all(TABLE_EVENTS)
        renderer.finish()
        renderer.finish()
        assert len(lines_of(out)) == 5

    def test_reset_allows_reuse(self) -> None:
        renderer, out = make()
        renderer.finish()
        renderer.reset()
        renderer.render(TextEvent("again"))
        assert out.getvalue() == "again"

    def test_sink_error_propagates(self) -> None:
        renderer = Renderer(FailingSink(), theme=plain_theme())
        with pytest.raises(OSError):
            renderer.render(TextEvent("x"))

    def test_sink_error_keeps_state(self) -> None:
        renderer = Renderer(FailingSink(), theme=plain_theme())
        renderer.render(BlockquoteStartEvent(2))
        with pytest.raises(BrokenPipeError):
            renderer.render(BlockquoteLineEvent("x"))
        assert renderer.context.blockquote_depth == 2

    def test_unknown_event_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        renderer, out = make()
        with caplog.at_level(logging.DEBUG, logger="mdstream.renderer"):
            renderer.render(object())  # type: ignore[arg-type]
        assert out.getvalue() == ""
        assert "unknown event" in caplog.text

    def test_theme_swap_between_events(self) -> None:
        renderer, out = make(theme=identity_theme())
        renderer.render(BoldEvent("a"))
        renderer.set_theme(tag_theme())
        renderer.render(BoldEvent("b"))
        assert out.getvalue() == "a<b>b</b>"


class TestRenderMarkdown:
    """render_markdown parses and renders a whole document."""

    def test_document(self) -> None:
        out = io.StringIO()
        render_markdown("# Hi\n\n**bold** and *italic*\n", width=20, output=out, theme=plain_theme())
        assert lines_of(out) == [" " * 9 + "Hi", "", "bold and italic"]

    def test_table_document(self) -> None:
        out = io.StringIO()
        render_markdown("| A | BB |\n|---|----|\n| C | D |\n", width=40, output=out, theme=plain_theme())
        assert lines_of(out) == TABLE_LINES
