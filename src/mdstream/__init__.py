"""mdstream: streaming markdown-event renderer for ANSI terminals."""

# Configuration
from mdstream.config import DEFAULT_WIDTH, RenderConfig

# Events
from mdstream.events import (
    BlockquoteEndEvent,
    BlockquoteLineEvent,
    BlockquoteStartEvent,
    BoldEvent,
    BoldItalicEvent,
    Bullet,
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

# Syntax highlighting
from mdstream.highlight import DEFAULT_CODE_STYLE, Highlighter

# Inline content
from mdstream.inline import parse_inline, render_inline_content, style_element

# Document parsing
from mdstream.parser import parse_document

# Rendering
from mdstream.renderer import Renderer, RenderContext, render_markdown

# Themes
from mdstream.theme import THEMES, Theme, default_theme, plain_theme

# Utilities
from mdstream.utils import BreakPolicy, split_styled, strip_ansi, text_wrap, visible_width

__all__ = [
    # Config
    "DEFAULT_WIDTH",
    "RenderConfig",
    # Events
    "BlockquoteEndEvent",
    "BlockquoteLineEvent",
    "BlockquoteStartEvent",
    "BoldEvent",
    "BoldItalicEvent",
    "Bullet",
    "CodeBlockEndEvent",
    "CodeBlockLineEvent",
    "CodeBlockStartEvent",
    "EmptyLineEvent",
    "FootnoteEvent",
    "HeadingEvent",
    "HorizontalRuleEvent",
    "ImageEvent",
    "InlineCodeEvent",
    "InlineElement",
    "InlineElementsEvent",
    "InlineKind",
    "ItalicEvent",
    "LinkEvent",
    "ListEndEvent",
    "ListItemEvent",
    "NewlineEvent",
    "ParseEvent",
    "PromptEvent",
    "StrikeoutEvent",
    "TableEndEvent",
    "TableHeaderEvent",
    "TableRowEvent",
    "TableSeparatorEvent",
    "TextEvent",
    "ThinkBlockEndEvent",
    "ThinkBlockLineEvent",
    "ThinkBlockStartEvent",
    "UnderlineEvent",
    # Highlighting
    "DEFAULT_CODE_STYLE",
    "Highlighter",
    # Inline
    "parse_inline",
    "render_inline_content",
    "style_element",
    # Parser
    "parse_document",
    # Renderer
    "RenderContext",
    "Renderer",
    "render_markdown",
    # Themes
    "THEMES",
    "Theme",
    "default_theme",
    "plain_theme",
    # Utilities
    "BreakPolicy",
    "split_styled",
    "strip_ansi",
    "text_wrap",
    "visible_width",
]
