"""Per-line syntax highlighting backed by Pygments."""

from __future__ import annotations

import logging

from pygments import highlight
from pygments.formatters import TerminalTrueColorFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_CODE_STYLE = "monokai"
# Lexers are cached per language hint; the cache is cleared when full.
LEXER_CACHE_MAX = 32


class Highlighter:
    """Turns one raw source line plus a language hint into an ANSI line.

    Lookup and highlighting failures fall back to the unstyled line; they
    are logged at debug level and never raised.
    """

    def __init__(self, style: str = DEFAULT_CODE_STYLE) -> None:
        try:
            self._formatter = TerminalTrueColorFormatter(style=style)
        except ClassNotFound:
            logger.debug("unknown pygments style %r, using 'default'", style)
            self._formatter = TerminalTrueColorFormatter(style="default")
        self._lexers: dict[str, Lexer] = {}

    def _lexer_for(self, language: str) -> Lexer:
        lexer = self._lexers.get(language)
        if lexer is None:
            try:
                lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
            except ClassNotFound:
                logger.debug("no lexer for language %r, highlighting as plain text", language)
                lexer = TextLexer(stripnl=False, ensurenl=False)
            if len(self._lexers) >= LEXER_CACHE_MAX:
                self._lexers.clear()
            self._lexers[language] = lexer
        return lexer

    def highlight_line(self, line: str, language: str | None = None) -> str:
        if not line or not language:
            return line
        try:
            highlighted = highlight(line, self._lexer_for(language.strip().lower()), self._formatter)
        except Exception:
            logger.debug("highlighting failed for language %r", language, exc_info=True)
            return line
        return highlighted.rstrip("\n")
