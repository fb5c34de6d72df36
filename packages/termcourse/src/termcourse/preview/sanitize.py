"""
Cleanup of renderer output before it reaches the screen buffer.

External tools emit cursor movement, cursor show/hide, hyperlinks and other
sequences alongside their colour codes. Only SGR colour survives, and only
when the preview is shown in colour.
"""
from __future__ import annotations

from typing import Sequence

from ..ansi import ESC, scrub_controls, strip_escapes, truncate_keeping_escapes, visible_width
from ..width import take_by_width

BLOCK_GLYPHS = frozenset(chr(cp) for cp in range(0x2580, 0x25A0))
MAX_BLOCK_RATIO = 0.55
MAX_DISTINCT_CHARS = 8


def sanitize_output(raw: str, width: int, keep_color: bool) -> list[str]:
    """
    Split renderer output into lines of at most width columns.

    With keep_color, SGR sequences stay and each coloured line ends with a
    reset; otherwise every escape is removed. Trailing blank lines are
    dropped.
    """
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    lines: list[str] = []
    for line in text.split("\n"):
        cleaned = scrub_controls(line, keep_sgr=keep_color)
        if keep_color:
            if visible_width(cleaned) > width or ESC in cleaned:
                cleaned = truncate_keeping_escapes(cleaned, width)
        else:
            cleaned = take_by_width(cleaned, width)[0]
        lines.append(cleaned)

    while lines and not strip_escapes(lines[-1]).strip():
        lines.pop()
    return lines


def passes_quality_filter(lines: Sequence[str]) -> bool:
    """
    Reject previews that are mostly solid block glyphs from a tiny alphabet.

    Such output is what a renderer produces for an image it could not
    resolve at this size: a smear of a couple of shades with no detail.
    """
    chars = "".join(strip_escapes(line) for line in lines)
    if not chars:
        return False
    blocks = sum(1 for ch in chars if ch in BLOCK_GLYPHS)
    ratio = blocks / len(chars)
    distinct = len(set(chars))
    return not (ratio > MAX_BLOCK_RATIO and distinct <= MAX_DISTINCT_CHARS)
