"""
Screen chrome: fixed-width rows, framed header boxes and the progress footer.

Every function here returns rows measured with visible_width(), so callers can
blit them straight into a width-column screen buffer.
"""
from __future__ import annotations

import re
from typing import Sequence

from .ansi import pad_visible, scrub_controls, tokenize, truncate_keeping_escapes, visible_width
from .text import strip_invisible
from .width import string_width, take_by_width

GLYPH_WIDTH = 2

_NEWLINE_RE = re.compile(r"[\r\n]")


def content_width(width: int) -> int:
    """Width available to a post body inside a list row."""
    return max(width - 3, 1)


def truncate_text(text: str, width: int) -> str:
    """Cut plain text to width columns, ending in "..." when it was cut."""
    if string_width(text) <= width:
        return text
    if width <= 3:
        return take_by_width(text, max(width, 0))[0]
    return take_by_width(text, width - 3)[0] + "..."


def _safe_row(text: str) -> str:
    """Keep SGR and OSC 8 tokens; scrub every other escape and control."""
    return "".join(
        tok.text if tok.kind != "text" else scrub_controls(tok.text)
        for tok in tokenize(_NEWLINE_RE.sub(" ", text))
    )


def pad_line(text: str, width: int) -> str:
    """Make a row exactly width visible columns: flatten, scrub, clip, then pad."""
    line = strip_invisible(_safe_row(text))
    if visible_width(line) > width:
        line = truncate_keeping_escapes(line, width)
    return pad_visible(line, width)


def format_line(text: str, width: int, glyph: str | None = None) -> str:
    """Left text padded to the row with a two-column glyph slot on the right."""
    glyph = pad_visible(truncate_keeping_escapes(glyph or " ", GLYPH_WIDTH), GLYPH_WIDTH)
    body_width = max(width - GLYPH_WIDTH - 1, 1)
    body = pad_visible(truncate_keeping_escapes(text, body_width), body_width)
    return f"{body} {glyph}"


def build_header_line(left: str, right: str, width: int) -> str:
    """Help text on the left, right-aligned label (the site) on the right."""
    if not right:
        return truncate_text(left, width)
    right_width = string_width(right)
    if right_width >= width:
        return truncate_text(right, width)
    left_width = width - right_width
    left_text = truncate_text(left, left_width)
    return left_text + " " * (left_width - string_width(left_text)) + right


def frame_box(lines: Sequence[str], width: int) -> list[str]:
    """Draw a single-line box around lines with one column of padding."""
    inner = max(width - 4, 0)
    rows = ["┌" + "─" * max(width - 2, 0) + "┐"]
    for line in lines:
        clipped = truncate_keeping_escapes(line, inner) if visible_width(line) > inner else line
        rows.append("│ " + pad_visible(clipped, inner) + " │")
    rows.append("└" + "─" * max(width - 2, 0) + "┘")
    return rows


def build_progress_footer(total: int, selected: int, width: int) -> list[str]:
    """Boxed "[=====     ] 3/10" bar for the position within a topic."""
    current = selected + 1 if total else 0
    inner = max(width - 4, 1)
    label = f"{current}/{total}"
    label_width = len(label) + 1
    bar_width = max(inner - label_width - 2, 1)
    filled = round(current / total * bar_width) if total else 0
    filled = min(max(filled, 0), bar_width)
    bar = "[" + "=" * filled + " " * (bar_width - filled) + "]"
    footer = bar + label.rjust(label_width)
    return frame_box([footer], width)
