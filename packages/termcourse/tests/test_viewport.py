"""Tests for termcourse.viewport"""
import pytest

from termcourse.ansi import strip_escapes
from termcourse.viewport import (
    EMPTY_PLACEHOLDER,
    MORE_ABOVE,
    MORE_BELOW,
    ContentBlock,
    allocate_viewport,
    clamp_scroll_offset,
    selected_window_height,
)


def make_block(name: str, body_lines: int, scroll_offset: int = 0) -> ContentBlock:
    return ContentBlock(
        header=f"{name}:h",
        body=[f"{name}:{i}" for i in range(body_lines)],
        scroll_offset=scroll_offset,
    )


class TestWindowHeight:
    def test_sixty_percent_of_budget(self):
        assert selected_window_height(20, 100) == 12

    def test_minimum_six(self):
        assert selected_window_height(8, 100) == 6

    def test_capped_by_block(self):
        assert selected_window_height(20, 4) == 4

    def test_capped_by_budget(self):
        assert selected_window_height(3, 100) == 3

    def test_clamp_scroll_offset(self):
        assert clamp_scroll_offset(-2, 20, 6) == 0
        assert clamp_scroll_offset(50, 20, 6) == 14
        assert clamp_scroll_offset(5, 4, 6) == 0


class TestAllocateViewport:
    def test_no_blocks(self):
        vp = allocate_viewport([], 0, 10, 20)
        assert vp.lines == [EMPTY_PLACEHOLDER]

    def test_single_short_block(self):
        vp = allocate_viewport([make_block("a", 2)], 0, 10, 20)
        assert vp.lines == ["a:h", "a:0", "a:1"]
        assert vp.visible_indices == [0]
        assert not vp.more_above and not vp.more_below

    def test_long_block_shows_more_below(self):
        vp = allocate_viewport([make_block("a", 19)], 0, 10, 40)
        assert len(vp.lines) == 6
        assert vp.lines[0] == "a:h"
        assert strip_escapes(vp.lines[-1]).startswith(MORE_BELOW)
        assert vp.more_below and not vp.more_above

    def test_scroll_offset_clamped_to_end(self):
        vp = allocate_viewport([make_block("a", 19, scroll_offset=100)], 0, 10, 40)
        assert vp.scroll_offset == 14
        assert vp.more_above and not vp.more_below
        assert vp.lines[0].startswith(MORE_ABOVE)
        assert vp.lines[-1] == "a:18"

    def test_indicators_do_not_add_rows(self):
        vp = allocate_viewport([make_block("a", 30, scroll_offset=5)], 0, 10, 40)
        assert vp.more_above and vp.more_below
        assert len(vp.lines) == 6

    def test_neighbours_alternate_with_separators(self):
        blocks = [make_block(str(i), 1) for i in range(5)]
        vp = allocate_viewport(blocks, 2, 20, 6)
        sep = "------"
        assert vp.lines == [
            "0:h", "0:0", sep,
            "1:h", "1:0", sep,
            "2:h", "2:0", sep,
            "3:h", "3:0", sep,
            "4:h", "4:0",
        ]
        assert vp.visible_indices == [0, 1, 2, 3, 4]

    def test_above_neighbour_comes_first(self):
        blocks = [make_block(str(i), 1) for i in range(3)]
        vp = allocate_viewport(blocks, 1, 6, 4)
        # budget 6: focus 2 lines, R = 3, one whole neighbour (above) fits
        assert vp.visible_indices == [0, 1]
        assert vp.lines == ["0:h", "0:0", "----", "1:h", "1:0"]

    def test_partial_neighbour_keeps_nearest_lines(self):
        blocks = [make_block(str(i), 3) for i in range(3)]
        vp = allocate_viewport(blocks, 1, 8, 4)
        assert vp.lines == ["0:1", "0:2", "----", "1:h", "1:0", "1:1", "1:2"]
        assert vp.visible_indices == [0, 1]

    def test_partial_neighbour_below_keeps_top_lines(self):
        blocks = [make_block("0", 3), make_block("1", 3)]
        vp = allocate_viewport(blocks, 0, 8, 4)
        assert vp.lines == ["0:h", "0:0", "0:1", "0:2", "----", "1:h", "1:0"]

    def test_neighbour_skipped_when_only_separator_fits(self):
        blocks = [make_block(str(i), 3) for i in range(3)]
        vp = allocate_viewport(blocks, 1, 6, 4)
        assert vp.visible_indices == [1]
        assert "----" not in vp.lines

    def test_focus_out_of_range_is_clamped(self):
        blocks = [make_block(str(i), 1) for i in range(3)]
        vp = allocate_viewport(blocks, 99, 4, 4)
        assert 2 in vp.visible_indices

    @pytest.mark.parametrize("budget", [-1, 0])
    def test_non_positive_budget(self, budget):
        vp = allocate_viewport([make_block("a", 5)], 0, budget, 10)
        assert len(vp.lines) == 1

    @pytest.mark.parametrize("budget", [1, 2, 5, 7, 10, 13, 25])
    @pytest.mark.parametrize("focus", [0, 2, 4])
    @pytest.mark.parametrize("scroll", [0, 3, 50])
    def test_never_exceeds_budget(self, budget, focus, scroll):
        blocks = [make_block(str(i), n) for i, n in enumerate([0, 4, 12, 2, 30])]
        blocks[focus].scroll_offset = scroll
        vp = allocate_viewport(blocks, focus, budget, 12)
        assert 1 <= len(vp.lines) <= budget
        assert focus in vp.visible_indices

    def test_blocks_not_mutated(self):
        block = make_block("a", 30, scroll_offset=99)
        allocate_viewport([block], 0, 10, 20)
        assert block.scroll_offset == 99
