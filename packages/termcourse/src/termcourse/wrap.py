"""
Word wrapping for post bodies with embedded URLs.

A logical line is split into plain-text and URL segments. Plain text is packed
word by word; URLs are shown percent-decoded inside an OSC 8 hyperlink so the
width budget is spent on what the reader sees, not on the raw href.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Literal
from urllib.parse import unquote

from .ansi import hyperlink
from .width import string_width, take_by_width

URL_RE = re.compile(r"https?://[^\s)\]}>,\x00-\x1f\x7f]+")
_TOKEN_RE = re.compile(r"\S+|\s+")
_URL_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

# Stand-in for a codepoint wider than the whole line.
REPLACEMENT_CHAR = "\ufffd"


@dataclass(frozen=True)
class TextSegment:
    kind: Literal["text", "url"]
    text: str


def segment_line(line: str) -> list[TextSegment]:
    """Split a line into alternating text and URL segments that rejoin to it."""
    segments: list[TextSegment] = []
    pos = 0
    for match in URL_RE.finditer(line):
        if match.start() > pos:
            segments.append(TextSegment("text", line[pos:match.start()]))
        segments.append(TextSegment("url", match.group(0)))
        pos = match.end()
    if pos < len(line):
        segments.append(TextSegment("text", line[pos:]))
    return segments


def tokenize_words(text: str) -> list[str]:
    """Split text into word and whitespace-run tokens."""
    return _TOKEN_RE.findall(text)


def display_url(url: str) -> str:
    """Percent-decode a URL for display, dropping any decoded control chars."""
    return _URL_CONTROL_RE.sub("", unquote(url, errors="replace"))


# ─────────────────────────────────────────────────────────────────────────────
# Line builder
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class _LineBuilder:
    width: int
    links: bool
    url: str | None = None
    output: list[str] = field(default_factory=list)
    # (rendered text, display width, is whitespace)
    fragments: list[tuple[str, int, bool]] = field(default_factory=list)
    used: int = 0

    @property
    def remaining(self) -> int:
        return self.width - self.used

    def flush(self) -> None:
        while self.fragments and self.fragments[-1][2]:
            self.used -= self.fragments.pop()[1]
        if self.fragments:
            self.output.append("".join(text for text, _, _ in self.fragments))
        self.fragments = []
        self.used = 0

    def _render(self, text: str) -> str:
        if self.url is not None and self.links:
            return hyperlink(self.url, text)
        return text

    def append(self, text: str, is_space: bool = False) -> None:
        """Add a piece known to fit on a line of its own."""
        w = string_width(text)
        if self.used + w > self.width:
            self.flush()
        self.fragments.append((self._render(text), w, is_space))
        self.used += w
        if self.used == self.width:
            self.flush()

    def add_space(self, text: str) -> None:
        if self.used == 0:
            return
        w = string_width(text)
        if self.used + w <= self.width:
            self.append(text, is_space=True)
        else:
            self.flush()

    def add_word(self, text: str) -> None:
        w = string_width(text)
        if w <= self.width:
            self.append(text)
            return
        if self.used:
            self.flush()
        self.hard_split(text)

    def hard_split(self, text: str) -> None:
        rest = text
        while rest:
            piece, rest = take_by_width(rest, self.remaining)
            if not piece:
                if self.used:
                    self.flush()
                    continue
                # Wider than an empty line: only possible for width 1.
                piece, rest = REPLACEMENT_CHAR, rest[1:]
            self.append(piece)

    def add_url(self, url: str) -> None:
        display = display_url(url)
        if not display:
            return
        w = string_width(display)
        self.url = url
        try:
            if self.used and w > self.remaining:
                self.flush()
            if w <= self.width:
                self.append(display)
            else:
                self.hard_split(display)
        finally:
            self.url = None


def wrap_line(line: str, width: int, links: bool = True) -> list[str]:
    """
    Wrap one logical line into physical lines of at most width columns.

    Never returns an empty list: an empty line gives [""].
    """
    builder = _LineBuilder(width=max(1, width), links=links)

    for segment in segment_line(line):
        if segment.kind == "url":
            builder.add_url(segment.text)
            continue
        for token in tokenize_words(segment.text):
            if token.isspace():
                builder.add_space(token)
            else:
                builder.add_word(token)

    builder.flush()
    return builder.output or [""]


def wrap_lines(lines: Iterable[str], width: int, links: bool = True) -> list[str]:
    """Wrap several logical lines, keeping their order."""
    wrapped: list[str] = []
    for line in lines:
        wrapped.extend(wrap_line(line, width, links))
    return wrapped
