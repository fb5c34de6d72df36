"""
Viewport allocation for a list of independently scrollable post blocks.

The focused block gets a scrollable window of up to 60% of the budget (never
less than six rows when it has them); its neighbours fill what is left,
alternating above and below, nearest lines first.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .chrome import format_line

MORE_ABOVE = "^^^ more above ^^^"
MORE_BELOW = "vvv more below vvv"
EMPTY_PLACEHOLDER = "No posts."
SELECTED_SHARE = 0.6
SELECTED_MIN_LINES = 6


@dataclass
class ContentBlock:
    """One post: a header row followed by body rows."""

    header: str
    body: list[str] = field(default_factory=list)
    expanded: bool = False
    scroll_offset: int = 0

    @property
    def lines(self) -> list[str]:
        return [self.header, *self.body]

    @property
    def height(self) -> int:
        return 1 + len(self.body)


@dataclass
class Viewport:
    lines: list[str]
    scroll_offset: int = 0
    visible_indices: list[int] = field(default_factory=list)
    more_above: bool = False
    more_below: bool = False


def selected_window_height(budget: int, block_height: int) -> int:
    """Rows the focused block may occupy this frame."""
    budget = max(budget, 1)
    rows = max(int(budget * SELECTED_SHARE), SELECTED_MIN_LINES)
    return min(rows, block_height, budget)


def clamp_scroll_offset(offset: int, block_height: int, window: int) -> int:
    max_scroll = max(block_height - window, 0)
    return min(max(offset, 0), max_scroll)


def _decorate(lines: list[str], more_above: bool, more_below: bool, width: int) -> list[str]:
    if not lines:
        return lines
    out = list(lines)
    if more_above:
        out[0] = format_line(MORE_ABOVE, width)
    if more_below:
        out[-1] = format_line(MORE_BELOW, width)
    return out


def allocate_viewport(
    blocks: Sequence[ContentBlock],
    focus: int,
    budget: int,
    width: int,
) -> Viewport:
    """
    Choose which rows of which blocks are drawn this frame.

    The result never has more than max(budget, 1) lines. The focused block's
    stored scroll_offset is read, clamped and reported back in the result;
    the block itself is not modified.
    """
    budget = max(budget, 1)
    if not blocks:
        return Viewport(lines=[EMPTY_PLACEHOLDER])

    focus = min(max(focus, 0), len(blocks) - 1)
    selected = blocks[focus]
    selected_lines = selected.lines
    window = selected_window_height(budget, len(selected_lines))
    offset = clamp_scroll_offset(selected.scroll_offset, len(selected_lines), window)
    max_scroll = max(len(selected_lines) - window, 0)
    more_above = offset > 0
    more_below = offset < max_scroll

    visible = _decorate(selected_lines[offset:offset + window], more_above, more_below, width)
    rendered: list[tuple[int, list[str]]] = [(focus, visible)]
    remaining = max(budget - (len(visible) + 1), 0)

    step = 1
    while remaining > 0 and (focus - step >= 0 or focus + step < len(blocks)):
        above = focus - step
        if above >= 0:
            lines = blocks[above].lines
            if len(lines) + 1 <= remaining:
                rendered.insert(0, (above, lines))
                remaining -= len(lines) + 1
            else:
                keep = remaining - 1
                if keep > 0:
                    rendered.insert(0, (above, lines[-keep:]))
                remaining = 0
        if remaining <= 0:
            break

        below = focus + step
        if below < len(blocks):
            lines = blocks[below].lines
            if len(lines) + 1 <= remaining:
                rendered.append((below, lines))
                remaining -= len(lines) + 1
            else:
                keep = remaining - 1
                if keep > 0:
                    rendered.append((below, lines[:keep]))
                remaining = 0
        step += 1

    separator = "-" * max(width, 1)
    out: list[str] = []
    for i, (_, lines) in enumerate(rendered):
        if i:
            out.append(separator)
        out.extend(lines)
    if not out:
        out = [EMPTY_PLACEHOLDER]

    return Viewport(
        lines=out[:budget],
        scroll_offset=offset,
        visible_indices=[index for index, _ in rendered],
        more_above=more_above,
        more_below=more_below,
    )
