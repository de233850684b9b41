"""Code block lines: character-boundary wrapping plus per-chunk highlighting."""

from __future__ import annotations

from mdstream.highlight import Highlighter
from mdstream.utils import RESET, visible_width

# Columns reserved on every chunk for the continuation indent of wrapped lines.
CONTINUATION_RESERVE = 4
# Leading indent beyond this does not deepen the continuation indent.
MAX_CONTINUATION_INDENT = 4


def code_wrap(text: str, width: int) -> tuple[int, list[str]]:
    """Split a raw code line into chunks that fit *width*.

    Unlike word wrapping this keeps the leading indentation and breaks at
    fixed character counts.  Returns ``(indent, chunks)`` where *indent* is
    the number of leading whitespace characters; only the first chunk
    carries that indentation.  Trailing whitespace-only chunks are dropped.
    """
    if not text:
        return (0, [""])

    content = text.lstrip()
    indent = len(text) - len(content)
    if not content:
        return (indent, [text])

    chunk_width = width - CONTINUATION_RESERVE - indent
    if chunk_width <= 0:
        chunk_width = width - indent
    if chunk_width <= 0 or len(content) <= chunk_width:
        return (indent, [text])

    chunks = [content[start : start + chunk_width] for start in range(0, len(content), chunk_width)]
    chunks[0] = text[:indent] + chunks[0]

    while len(chunks) > 1 and not chunks[-1].strip():
        chunks.pop()

    return (indent, chunks)


def continuation_indent(indent: int) -> str:
    return "  " * (min(indent, MAX_CONTINUATION_INDENT) // 2 + 1)


def render_code_line(
    line: str,
    language: str | None,
    margin: str,
    width: int,
    highlighter: Highlighter,
) -> list[str]:
    """Wrap, highlight and prefix one code line.

    Each chunk is highlighted on its own, continuation chunks get a small
    indent derived from the original one, and every output line ends with a
    full reset so colours never leak past the margin.  The continuation
    indent shrinks when the chunk plus indent would exceed *width*.
    """
    indent, chunks = code_wrap(line, width)
    lines: list[str] = []
    for i, chunk in enumerate(chunks):
        highlighted = highlighter.highlight_line(chunk, language)
        lead = continuation_indent(indent)[: max(0, width - visible_width(chunk))] if i else ""
        lines.append(f"{margin}{lead}{highlighted}{RESET}")
    return lines
