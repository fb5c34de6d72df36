"""Logical-line cleanup for post bodies before wrapping."""
from __future__ import annotations

import re

from .ansi import scrub_controls

_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")
_INVISIBLE_RE = re.compile("[\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]")
_CONTROL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_BREAKS_RE = re.compile("[\r\n\u2028\u2029\u0085]")
_LINE_SEPARATORS = str.maketrans({"\u2028": " ", "\u2029": " ", "\u0085": " "})

EMOTICONS: tuple[tuple[str, str], ...] = (
    (":-)", "\U0001f642"),
    (":)", "\U0001f642"),
    (":-(", "\U0001f641"),
    (":(", "\U0001f641"),
    (";-)", "\U0001f609"),
    (";)", "\U0001f609"),
    (":-D", "\U0001f604"),
    (":D", "\U0001f604"),
    (":-P", "\U0001f61b"),
    (":P", "\U0001f61b"),
    (":heart:", "\u2764\ufe0f"),
    (":pizza:", "\U0001f355"),
    (":smile:", "\U0001f604"),
    (":thumbsup:", "\U0001f44d"),
    (":fire:", "\U0001f525"),
    (":star:", "\u2b50"),
)


def strip_invisible(text: str) -> str:
    """Drop zero-width and bidi formatting characters."""
    return _INVISIBLE_RE.sub("", text)


def strip_control_chars(text: str) -> str:
    """Drop C0 controls, DEL and C1 controls, keeping tab, LF and CR."""
    return _CONTROL_RE.sub("", text)


def plain_text(text: str) -> str:
    """Single-line label text (titles, usernames): escapes, controls and invisible formatting removed."""
    return strip_invisible(scrub_controls(_BREAKS_RE.sub(" ", text)))


def emojify(text: str) -> str:
    for code, glyph in EMOTICONS:
        if code in text:
            text = text.replace(code, glyph)
    return text


def normalize_logical_lines(text: str, emoji: bool = True) -> list[str]:
    """
    Turn a post body into logical lines safe to hand to the wrapper.

    SGR runs are removed before other control characters so no orphaned
    "[31m" text is left behind. Always returns at least one line.
    """
    content = text.replace("\r", "").replace("\t", "  ").translate(_LINE_SEPARATORS)
    content = strip_invisible(content)
    content = _SGR_RE.sub("", content)
    content = strip_control_chars(content)
    lines = content.split("\n")
    if emoji:
        lines = [emojify(line) for line in lines]
    return lines
