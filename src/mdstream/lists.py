"""List rendering: nesting stack, markers and pending-reset handling."""

from __future__ import annotations

from mdstream.events import Bullet
from mdstream.inline import render_inline_content
from mdstream.theme import Theme
from mdstream.utils import text_wrap, visible_width

BULLETS = ("•", "◦", "▪", "‣")
PLUS_EXPAND_MARKER = "⊞"


class ListState:
    """Stack of open list levels for the list currently being rendered.

    Each frame is ``(indent, ordered)`` with strictly increasing indents from
    bottom to top, plus a per-frame item counter.  A list-end boundary only
    arms ``pending_reset``; the next event decides whether the list resumes
    (another item) or is abandoned (:meth:`reset`).
    """

    def __init__(self) -> None:
        self._stack: list[tuple[int, bool]] = []
        self._numbers: list[int] = []
        self.pending_reset = False

    @property
    def level(self) -> int:
        return len(self._stack)

    @property
    def frames(self) -> list[tuple[int, bool]]:
        return list(self._stack)

    def push(self, indent: int, ordered: bool) -> None:
        self._stack.append((indent, ordered))
        self._numbers.append(0)

    def pop(self) -> None:
        if self._stack:
            self._stack.pop()
            self._numbers.pop()

    def next_number(self) -> int:
        """Advance and return the counter of the innermost frame."""
        if not self._numbers:
            return 1
        self._numbers[-1] += 1
        return self._numbers[-1]

    def adjust_for_indent(self, indent: int, ordered: bool) -> None:
        """Pop frames deeper than *indent*, then open a frame if *indent* is deeper than the top."""
        while self._stack and self._stack[-1][0] > indent:
            self.pop()
        if not self._stack or indent > self._stack[-1][0]:
            self.push(indent, ordered)

    def reset(self) -> None:
        self._stack.clear()
        self._numbers.clear()
        self.pending_reset = False

    def mark_pending_reset(self) -> None:
        self.pending_reset = True

    def resume_if_pending(self) -> None:
        self.pending_reset = False


def list_marker(bullet: Bullet, state: ListState) -> str:
    """Return the unstyled marker for the next item at the current level.

    Ordered items are numbered from the frame's own counter; the ordinal
    the producer attached to the item is ignored.
    """
    if bullet is Bullet.ORDERED:
        return f"{state.next_number()}."
    if bullet is Bullet.PLUS_EXPAND:
        return PLUS_EXPAND_MARKER
    return BULLETS[max(state.level - 1, 0) % len(BULLETS)]


def render_list_item(
    indent: int,
    bullet: Bullet,
    content: str,
    width: int,
    margin: str,
    theme: Theme,
    state: ListState,
    *,
    hyperlinks: bool = True,
) -> list[str]:
    """Render one list item into prefixed, wrapped lines.

    Each nesting level is 2 columns of padding.  Wrapped lines align under
    the item text rather than under the marker.  An item with no content
    still renders its marker line.
    """
    state.resume_if_pending()
    state.adjust_for_indent(indent, bullet is Bullet.ORDERED)

    marker = list_marker(bullet, state)
    padding = " " * (indent * 2)
    content_indent = indent * 2 + visible_width(marker) + 1

    styled_marker = theme.ordinal(marker) if bullet is Bullet.ORDERED else theme.bullet(marker)
    first_prefix = f"{margin}{padding}{styled_marker} "
    next_prefix = margin + " " * content_indent

    rendered = render_inline_content(content, theme, hyperlinks=hyperlinks)
    return text_wrap(rendered, width, first_prefix, next_prefix) or [first_prefix]
