"""Terminal text utilities: ANSI handling, width measurement, wrapping.

Everything here works on *styled strings*: unicode text with embedded
escape sequences (SGR colours, OSC 8 hyperlinks, APC payloads).  Escape
sequences never contribute to the visible width and are never split.
"""

from __future__ import annotations

import enum
import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

RESET = "\x1b[0m"
OSC8_CLOSE = "\x1b]8;;\x1b\\"

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Escape sequence scanning
# ---------------------------------------------------------------------------


def extract_ansi_code(text: str, pos: int) -> tuple[str, int] | None:
    """Extract the escape sequence starting at *pos* in *text*.

    Returns ``(code, length)`` or ``None`` when *pos* does not start a
    recognised sequence.  Recognised forms:

    * CSI: ``ESC [`` parameters, intermediates, one final byte (``@``-``~``)
    * OSC: ``ESC ]`` ... terminated by ``BEL`` or ``ESC \\``
    * APC: ``ESC _`` ... terminated by ``BEL`` or ``ESC \\``

    A sequence cut off by the end of *text* (a partially streamed chunk) is
    returned whole so that its bytes are never measured as visible text.
    """
    if pos >= len(text) or text[pos] != "\x1b":
        return None
    if pos + 1 >= len(text):
        return (text[pos:], len(text) - pos)

    kind = text[pos + 1]

    if kind == "[":
        i = pos + 2
        while i < len(text):
            cp = ord(text[i])
            if 0x40 <= cp <= 0x7E:
                return (text[pos : i + 1], i + 1 - pos)
            if 0x20 <= cp <= 0x3F:
                i += 1
                continue
            return None
        return (text[pos:], len(text) - pos)

    if kind in "]_":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":
                return (text[pos : i + 1], i + 1 - pos)
            if ch == "\x1b" and i + 1 < len(text) and text[i + 1] == "\\":
                return (text[pos : i + 2], i + 2 - pos)
            i += 1
        return (text[pos:], len(text) - pos)

    return None


def iter_segments(text: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(piece, is_escape)`` runs of *text* in order.

    Plain runs are maximal; every escape sequence is yielded on its own.
    """
    plain_start = 0
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            extracted = extract_ansi_code(text, i)
            if extracted is not None:
                if i > plain_start:
                    yield (text[plain_start:i], False)
                code, length = extracted
                yield (code, True)
                i += length
                plain_start = i
                continue
        i += 1
    if plain_start < len(text):
        yield (text[plain_start:], False)


def strip_ansi(text: str) -> str:
    """Return *text* with every escape sequence removed."""
    return "".join(piece for piece, is_escape in iter_segments(text) if not is_escape)


# ---------------------------------------------------------------------------
# Widths
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control and format characters are 0, East Asian wide characters and
    emoji presentation sequences are 2, everything else defers to wcwidth.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tone modifiers, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
        return 2
    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def _plain_width(text: str) -> int:
    if all(0x20 <= ord(ch) <= 0x7E for ch in text):
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(text))
    return _cache_width(text, total)


def visible_width(text: str) -> int:
    """Return the on-screen column count of *text*.

    Escape sequences are skipped entirely; wide glyphs count 2, control and
    zero-width characters count 0.
    """
    if not text:
        return 0
    if "\x1b" not in text:
        return _plain_width(text)
    return sum(_plain_width(piece) for piece, is_escape in iter_segments(text) if not is_escape)


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------


def tokenize(text: str) -> list[str]:
    """Split a styled string into whitespace-delimited words.

    Escape sequences stay attached to the neighbouring word: a sequence
    preceding a word is carried into it, and trailing sequences after the
    last word are appended to that word.  Whitespace inside the text never
    produces empty or escape-only words.
    """
    words: list[str] = []
    current: list[str] = []
    has_visible = False

    for piece, is_escape in iter_segments(text):
        if is_escape:
            current.append(piece)
            continue
        for ch in piece:
            if ch.isspace():
                if has_visible:
                    words.append("".join(current))
                    current = []
                    has_visible = False
                continue
            current.append(ch)
            has_visible = True

    if current:
        if has_visible:
            words.append("".join(current))
        elif words:
            words[-1] += "".join(current)

    return words


# ---------------------------------------------------------------------------
# SGR state tracking
# ---------------------------------------------------------------------------

_SGR_SET = {
    1: "bold",
    2: "dim",
    3: "italic",
    4: "underline",
    5: "blink",
    7: "inverse",
    8: "hidden",
    9: "strikethrough",
}

_SGR_CLEAR = {
    22: ("bold", "dim"),
    23: ("italic",),
    24: ("underline",),
    25: ("blink",),
    27: ("inverse",),
    28: ("hidden",),
    29: ("strikethrough",),
    39: ("fg",),
    49: ("bg",),
}

_SLOT_ORDER = ("bold", "dim", "italic", "underline", "blink", "inverse", "hidden", "strikethrough", "fg", "bg")


class AnsiCodeTracker:
    """Track which SGR attributes and OSC 8 hyperlink are active after a run of escape codes.

    Used by the splitter to close styles at the end of a wrapped line and
    to re-open them at the start of the next one.  An open hyperlink is
    closed the same way, so the border and prefix of the next line never
    become part of the link.
    """

    def __init__(self) -> None:
        self._active: dict[str, str] = {}
        self._hyperlink: str | None = None

    def _process_osc(self, code: str) -> None:
        # ESC ] 8 ; params ; url ST -- an empty url closes the link.
        if not code.startswith("\x1b]8;"):
            return
        if code.endswith("\x1b\\"):
            body = code[4:-2]
        elif code.endswith("\x07"):
            body = code[4:-1]
        else:
            return
        _, _, url = body.partition(";")
        self._hyperlink = code if url else None

    def process(self, code: str) -> None:
        """Update tracked state from one escape sequence; codes other than SGR and OSC 8 are ignored."""
        if code.startswith("\x1b]"):
            self._process_osc(code)
            return
        if not code.startswith("\x1b[") or not code.endswith("m"):
            return

        body = code[2:-1]
        if not body:
            self._active.clear()
            return

        params = body.split(";")
        i = 0
        while i < len(params):
            try:
                val = int(params[i]) if params[i] else 0
            except ValueError:
                i += 1
                continue

            if val == 0:
                self._active.clear()
            elif val in _SGR_SET:
                self._active[_SGR_SET[val]] = f"\x1b[{val}m"
            elif val in _SGR_CLEAR:
                for slot in _SGR_CLEAR[val]:
                    self._active.pop(slot, None)
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self._active["fg"] = f"\x1b[{val}m"
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self._active["bg"] = f"\x1b[{val}m"
            elif val in (38, 48):
                slot = "fg" if val == 38 else "bg"
                mode = params[i + 1] if i + 1 < len(params) else ""
                if mode == "5" and i + 2 < len(params):
                    self._active[slot] = f"\x1b[{val};5;{params[i + 2]}m"
                    i += 2
                elif mode == "2" and i + 4 < len(params):
                    rgb = ";".join(params[i + 2 : i + 5])
                    self._active[slot] = f"\x1b[{val};2;{rgb}m"
                    i += 4
                else:
                    i += 1
            i += 1

    def clear(self) -> None:
        self._active.clear()
        self._hyperlink = None

    def has_active_codes(self) -> bool:
        return bool(self._active) or self._hyperlink is not None

    def get_active_codes(self) -> str:
        """Return the codes that re-open the current state."""
        codes = "".join(self._active[slot] for slot in _SLOT_ORDER if slot in self._active)
        if self._hyperlink is not None:
            codes += self._hyperlink
        return codes

    def get_line_end_reset(self) -> str:
        """Return what closes the current state at a line end: the hyperlink close, then a reset."""
        close = OSC8_CLOSE if self._hyperlink is not None else ""
        if self._active:
            close += RESET
        return close


# ---------------------------------------------------------------------------
# Style-preserving split
# ---------------------------------------------------------------------------


class BreakPolicy(enum.Enum):
    """Where :func:`split_styled` may break a line."""

    WORD = "word"
    CHAR = "char"


def _char_units(text: str) -> Iterator[str]:
    for piece, is_escape in iter_segments(text):
        if is_escape:
            yield piece
        else:
            yield from grapheme.graphemes(piece)


def split_styled(
    text: str,
    width: int,
    policy: BreakPolicy = BreakPolicy.CHAR,
    *,
    first_width: int | None = None,
) -> list[str]:
    """Split *text* into lines no wider than *width* visible columns.

    With ``BreakPolicy.WORD`` the units are the words from :func:`tokenize`,
    re-joined with single spaces; a word wider than the budget is placed
    alone on its own line unbroken.  With ``BreakPolicy.CHAR`` the units are
    grapheme clusters, so a line breaks at the exact column budget.

    *first_width* overrides the budget of the first line only.  Each line is
    closed with a reset when a style is still active at its end and the next
    line re-opens that style.  Returns an empty list when there is nothing
    visible to lay out, or when *width* is not positive and no
    *first_width* is given.
    """
    if width <= 0 and first_width is None:
        return []

    if policy is BreakPolicy.WORD:
        units: Iterator[str] | list[str] = tokenize(text)
    else:
        units = _char_units(text)

    tracker = AnsiCodeTracker()
    lines: list[str] = []
    current: list[str] = []
    current_width = 0
    has_content = False

    for unit in units:
        unit_width = visible_width(unit)
        budget = first_width if first_width is not None and not lines else width
        joiner = 1 if policy is BreakPolicy.WORD and has_content else 0

        if has_content and unit_width and current_width + joiner + unit_width > budget:
            lines.append("".join(current) + tracker.get_line_end_reset())
            current = [tracker.get_active_codes()]
            current_width = 0
            has_content = False
            joiner = 0

        if joiner:
            current.append(" ")
            current_width += 1
        current.append(unit)
        current_width += unit_width
        if unit_width:
            has_content = True

        if "\x1b" in unit:
            for piece, is_escape in iter_segments(unit):
                if is_escape:
                    tracker.process(piece)

    if has_content:
        lines.append("".join(current) + tracker.get_line_end_reset())

    return lines


# ---------------------------------------------------------------------------
# Word wrap
# ---------------------------------------------------------------------------


def text_wrap(
    text: str,
    width: int,
    first_prefix: str = "",
    next_prefix: str = "",
) -> list[str]:
    """Word-wrap *text* into fully prefixed lines of at most *width* columns.

    The first line carries *first_prefix* and every later line carries
    *next_prefix*; each prefix's visible width comes out of its own line's
    budget.  An empty list means there was nothing to show, which is
    distinct from ``[""]`` (one blank line).
    """
    if width <= 0:
        return []

    first_budget = max(0, width - visible_width(first_prefix))
    next_budget = max(0, width - visible_width(next_prefix))
    lines = split_styled(text, next_budget, BreakPolicy.WORD, first_width=first_budget)
    return [(first_prefix if i == 0 else next_prefix) + line for i, line in enumerate(lines)]
