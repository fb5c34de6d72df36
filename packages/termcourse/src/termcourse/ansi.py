"""
Escape-aware text measurement.

Only two escape forms are recognised, both zero width:
- SGR: ESC [ params m
- OSC 8 hyperlinks: ESC ] 8 ; params ; target (BEL | ESC \\)

Everything else, including unterminated or malformed sequences, is literal
text and is measured like any other character.

Provides:
- tokenize(): split a string into text / sgr / link tokens
- scrub_controls(): remove every other escape and control character
- visible_width(), strip_escapes(), truncate_keeping_escapes(), pad_visible()
- hyperlink(), highlight(): build the two escape forms
"""
from __future__ import annotations

from typing import Iterator, NamedTuple

from .width import string_width

ESC = "\x1b"
BEL = "\x07"
ST = "\x1b\\"
RESET = "\x1b[0m"
LINK_CLOSE = "\x1b]8;;\x07"

_SGR_PARAM_CHARS = frozenset("0123456789;:")


class Token(NamedTuple):
    kind: str  # "text" | "sgr" | "link"
    text: str


# ─────────────────────────────────────────────────────────────────────────────
# Tokenizer
# ─────────────────────────────────────────────────────────────────────────────

def _match_sgr(s: str, pos: int) -> int:
    """Return the end index of an SGR sequence starting at pos, or -1."""
    j = pos + 2
    n = len(s)
    while j < n and s[j] in _SGR_PARAM_CHARS:
        j += 1
    if j < n and s[j] == "m":
        return j + 1
    return -1


def _match_link(s: str, pos: int) -> int:
    """Return the end index of an OSC 8 sequence starting at pos, or -1."""
    if not s.startswith("8;", pos + 2):
        return -1
    j = pos + 4
    n = len(s)
    while j < n:
        ch = s[j]
        if ch == BEL:
            return j + 1
        if ch == ESC:
            if j + 1 < n and s[j + 1] == "\\":
                return j + 2
            return -1
        if _is_control(ch):
            return -1
        j += 1
    return -1


def tokenize(s: str) -> Iterator[Token]:
    """Yield text, sgr and link tokens. Never raises on malformed input."""
    n = len(s)
    start = 0
    i = s.find(ESC)
    while i != -1:
        end = -1
        kind = ""
        if i + 1 < n:
            nxt = s[i + 1]
            if nxt == "[":
                end, kind = _match_sgr(s, i), "sgr"
            elif nxt == "]":
                end, kind = _match_link(s, i), "link"
        if end == -1:
            i = s.find(ESC, i + 1)
            continue
        if i > start:
            yield Token("text", s[start:i])
        yield Token(kind, s[i:end])
        start = end
        i = s.find(ESC, end)
    if start < n:
        yield Token("text", s[start:])


# ─────────────────────────────────────────────────────────────────────────────
# Measurement
# ─────────────────────────────────────────────────────────────────────────────

def strip_escapes(s: str) -> str:
    """Remove SGR and hyperlink sequences, leaving everything else untouched."""
    if ESC not in s:
        return s
    return "".join(tok.text for tok in tokenize(s) if tok.kind == "text")


def visible_width(s: str) -> int:
    """Terminal columns s occupies once escape sequences are removed."""
    return string_width(strip_escapes(s))


def pad_visible(s: str, width: int) -> str:
    """Right-pad s with spaces to width visible columns."""
    return s + " " * max(0, width - visible_width(s))


def truncate_keeping_escapes(s: str, max_width: int) -> str:
    """
    Cut s to at most max_width visible columns.

    Escape runs are copied through at zero width until the first character
    that does not fit. If any SGR sequence was copied a reset is appended, and
    an unclosed hyperlink is closed, so the result never leaks style.
    """
    out: list[str] = []
    used = 0
    saw_sgr = False
    link_open = False

    for tok in tokenize(s):
        if tok.kind == "sgr":
            out.append(tok.text)
            saw_sgr = True
            continue
        if tok.kind == "link":
            out.append(tok.text)
            link_open = not _is_link_close(tok.text)
            continue

        stopped = False
        for ch in tok.text:
            w = string_width(ch)
            if used + w > max_width:
                stopped = True
                break
            out.append(ch)
            used += w
        if stopped:
            break

    if link_open:
        out.append(LINK_CLOSE)
    if saw_sgr:
        out.append(RESET)
    return "".join(out)


def _is_link_close(seq: str) -> bool:
    """An OSC 8 sequence closes the link when its target is empty."""
    body = seq[2:].removesuffix(BEL).removesuffix(ST)
    _, _, rest = body.partition(";")
    _, _, target = rest.partition(";")
    return target == ""


# ─────────────────────────────────────────────────────────────────────────────
# Scrubbing
# ─────────────────────────────────────────────────────────────────────────────

def _is_control(ch: str) -> bool:
    cp = ord(ch)
    return cp < 0x20 or 0x7F <= cp <= 0x9F


def _skip_string(s: str, j: int) -> int:
    """End of an OSC/DCS/APC/PM/SOS string starting at j (BEL or ST terminated)."""
    n = len(s)
    while j < n:
        if s[j] == BEL:
            return j + 1
        if s[j] == ESC and j + 1 < n and s[j + 1] == "\\":
            return j + 2
        j += 1
    return n


def scrub_controls(s: str, keep_sgr: bool = False) -> str:
    """
    Drop every escape sequence and C0/C1 control from a single line.

    Tabs become one space. With keep_sgr, well-formed SGR sequences are kept;
    cursor movement, screen clears, OSC strings (hyperlinks included), DCS and
    APC payloads are always removed whole.
    """
    out: list[str] = []
    i = 0
    n = len(s)
    while i < n:
        ch = s[i]
        if ch == ESC:
            if i + 1 >= n:
                break
            kind = s[i + 1]
            if kind == "[":
                j = i + 2
                while j < n and "\x30" <= s[j] <= "\x3f":
                    j += 1
                params_end = j
                while j < n and "\x20" <= s[j] <= "\x2f":
                    j += 1
                if j >= n:
                    break
                sgr = s[j] == "m" and params_end == j and all(c in _SGR_PARAM_CHARS for c in s[i + 2:j])
                if keep_sgr and sgr:
                    out.append(s[i:j + 1])
                i = j + 1
            elif kind in "]P_^X":
                i = _skip_string(s, i + 2)
            else:
                i += 2
            continue
        if _is_control(ch):
            if ch == "\t":
                out.append(" ")
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ─────────────────────────────────────────────────────────────────────────────
# Builders
# ─────────────────────────────────────────────────────────────────────────────

def hyperlink(url: str, text: str) -> str:
    """Wrap text in an OSC 8 hyperlink pointing at url."""
    return f"\x1b]8;;{url}\x07{text}{LINK_CLOSE}"


def highlight(s: str) -> str:
    """Render s in inverse video."""
    return f"\x1b[7m{s}{RESET}"
