"""
Display width of codepoints and strings.

Provides:
- char_width(): 0, 1 or 2 columns for a single codepoint
- string_width(): sum of char_width() over a string
- take_by_width(): greedy prefix that fits a column budget

Wide codepoints come from fixed range tables; nonspacing and enclosing marks
of every script (Unicode categories Mn, Me) and format characters (Cf) are
zero width. Widths are measured per codepoint, not per grapheme cluster, so
ZWJ emoji sequences can be measured wider than a terminal draws them.
"""
from __future__ import annotations

import unicodedata
from bisect import bisect_right

# ─────────────────────────────────────────────────────────────────────────────
# Range tables (inclusive, sorted, non-overlapping)
# ─────────────────────────────────────────────────────────────────────────────

_ZERO_WIDTH_RANGES: tuple[tuple[int, int], ...] = (
    (0x0300, 0x036F),    # combining diacritical marks
    (0x1AB0, 0x1AFF),    # combining diacritical marks extended
    (0x1DC0, 0x1DFF),    # combining diacritical marks supplement
    (0x200B, 0x200D),    # ZWSP, ZWNJ, ZWJ
    (0x2060, 0x2060),    # word joiner
    (0x20D0, 0x20FF),    # combining marks for symbols
    (0xFE00, 0xFE0F),    # variation selectors
    (0xFE20, 0xFE2F),    # combining half marks
    (0xFEFF, 0xFEFF),    # BOM / ZWNBSP
    (0xE0100, 0xE01EF),  # variation selectors supplement
)

_WIDE_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x115F),    # Hangul Jamo initials
    (0x231A, 0x231B),    # watch, hourglass
    (0x2329, 0x232A),    # angle brackets
    (0x23E9, 0x23EC),
    (0x23F0, 0x23F0),
    (0x23F3, 0x23F3),
    (0x25FD, 0x25FE),
    (0x2614, 0x2615),
    (0x2648, 0x2653),    # zodiac
    (0x267F, 0x267F),
    (0x2693, 0x2693),
    (0x26A1, 0x26A1),
    (0x26AA, 0x26AB),
    (0x26BD, 0x26BE),
    (0x26C4, 0x26C5),
    (0x26CE, 0x26CE),
    (0x26D4, 0x26D4),
    (0x26EA, 0x26EA),
    (0x26F2, 0x26F3),
    (0x26F5, 0x26F5),
    (0x26FA, 0x26FA),
    (0x26FD, 0x26FD),
    (0x2705, 0x2705),
    (0x270A, 0x270B),
    (0x2728, 0x2728),
    (0x274C, 0x274C),
    (0x274E, 0x274E),
    (0x2753, 0x2755),
    (0x2757, 0x2757),
    (0x2795, 0x2797),
    (0x27B0, 0x27B0),
    (0x27BF, 0x27BF),
    (0x2B1B, 0x2B1C),
    (0x2B50, 0x2B50),
    (0x2B55, 0x2B55),
    (0x2E80, 0xA4CF),    # CJK radicals through Yi
    (0xAC00, 0xD7A3),    # Hangul syllables
    (0xF900, 0xFAFF),    # CJK compatibility ideographs
    (0xFE10, 0xFE19),    # vertical forms
    (0xFE30, 0xFE6F),    # CJK compatibility / small forms
    (0xFF00, 0xFF60),    # fullwidth forms
    (0xFFE0, 0xFFE6),    # fullwidth signs
    (0x1F004, 0x1F004),  # mahjong red dragon
    (0x1F0CF, 0x1F0CF),  # joker
    (0x1F18E, 0x1F18E),
    (0x1F191, 0x1F19A),
    (0x1F200, 0x1F2FF),  # enclosed ideographic supplement
    (0x1F300, 0x1FAFF),  # pictographs, emoticons, transport, supplemental
    (0x20000, 0x2FFFD),  # CJK extension planes
    (0x30000, 0x3FFFD),
)

_ZERO_WIDTH_CATEGORIES = frozenset(("Mn", "Me", "Cf"))

_ZERO_STARTS = [lo for lo, _ in _ZERO_WIDTH_RANGES]
_WIDE_STARTS = [lo for lo, _ in _WIDE_RANGES]


def _in_ranges(cp: int, starts: list[int], ranges: tuple[tuple[int, int], ...]) -> bool:
    i = bisect_right(starts, cp) - 1
    return i >= 0 and cp <= ranges[i][1]


def char_width(ch: str | int) -> int:
    """Return the terminal column width (0, 1 or 2) of a single codepoint."""
    cp = ch if isinstance(ch, int) else ord(ch)
    if cp < 0x0300:
        return 1
    if _in_ranges(cp, _ZERO_STARTS, _ZERO_WIDTH_RANGES):
        return 0
    if unicodedata.category(chr(cp)) in _ZERO_WIDTH_CATEGORIES:
        return 0
    if _in_ranges(cp, _WIDE_STARTS, _WIDE_RANGES):
        return 2
    return 1


def string_width(s: str) -> int:
    """Return the column width of a string with no escape sequences in it."""
    if not s:
        return 0
    if s.isascii():
        return len(s)
    return sum(char_width(ch) for ch in s)


def take_by_width(s: str, max_width: int) -> tuple[str, str]:
    """
    Split s into (prefix, suffix) where prefix is the longest run of leading
    codepoints whose total width is at most max_width.

    prefix + suffix == s always holds. Zero-width codepoints directly after a
    full prefix are kept with it.
    """
    if max_width <= 0 or not s:
        return "", s

    used = 0
    index = 0
    for ch in s:
        w = char_width(ch)
        if used + w > max_width:
            break
        used += w
        index += 1
    return s[:index], s[index:]
