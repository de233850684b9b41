"""Table layout: column sizing, proportional shrink, cell wrap, box borders."""

from __future__ import annotations

from mdstream.inline import render_inline_content
from mdstream.theme import Theme
from mdstream.utils import BreakPolicy, split_styled, visible_width

MIN_COLUMN_WIDTH = 5


def _decorate(cell: str, theme: Theme, hyperlinks: bool) -> str:
    return render_inline_content(cell.strip(), theme, hyperlinks=hyperlinks)


def column_widths(rows: list[list[str]], margin_width: int, max_width: int) -> list[int]:
    """Return the final width of every column for already-decorated *rows*.

    Natural widths are the widest cell per column.  When the table plus its
    overhead (margin, borders, one space of padding each side) is wider than
    *max_width*, every column shrinks in proportion to its natural width,
    never below :data:`MIN_COLUMN_WIDTH`, even if that still overflows.
    """
    count = max((len(row) for row in rows), default=0)
    widths = [0] * count
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], visible_width(cell))

    overhead = margin_width + 1 + 3 * count
    total = sum(widths)
    if overhead + total > max_width and max_width > overhead and total > 0:
        available = max_width - overhead
        widths = [max(MIN_COLUMN_WIDTH, w * available // total) for w in widths]

    return widths


def _border(widths: list[int], left: str, mid: str, right: str) -> str:
    return left + mid.join("─" * (w + 2) for w in widths) + right


def render_table(
    rows: list[list[str]],
    margin: str,
    theme: Theme,
    max_width: int,
    *,
    hyperlinks: bool = True,
) -> list[str]:
    """Lay out buffered table rows as bordered terminal lines.

    Rows may be ragged; missing cells render empty.  The first row is the
    header when there is more than one row.  Cell content wraps at
    character boundaries inside its column, so a row can span several
    lines.  Returns no lines at all for an empty table.
    """
    decorated = [[_decorate(cell, theme, hyperlinks) for cell in row] for row in rows]
    widths = column_widths(decorated, visible_width(margin), max_width)
    if not widths:
        return []

    bar = theme.table_border("│")
    has_header = len(decorated) > 1
    lines = [margin + theme.table_border(_border(widths, "┌", "┬", "┐"))]

    for row_index, row in enumerate(decorated):
        is_header = has_header and row_index == 0
        cells = [
            split_styled(row[i] if i < len(row) else "", width, BreakPolicy.CHAR) or [""]
            for i, width in enumerate(widths)
        ]
        height = max(len(chunks) for chunks in cells)

        for line_index in range(height):
            parts: list[str] = []
            for chunks, width in zip(cells, widths):
                chunk = chunks[line_index] if line_index < len(chunks) else ""
                padding = " " * max(0, width - visible_width(chunk))
                if is_header and chunk:
                    chunk = theme.table_header(chunk)
                parts.append(f" {chunk}{padding} ")
            lines.append(margin + bar + bar.join(parts) + bar)

        if is_header:
            lines.append(margin + theme.table_border(_border(widths, "├", "┼", "┤")))

    lines.append(margin + theme.table_border(_border(widths, "└", "┴", "┘")))
    return lines
