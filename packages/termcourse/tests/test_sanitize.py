"""Tests for termcourse.preview.sanitize"""
import pytest

from termcourse.ansi import RESET, strip_escapes, visible_width
from termcourse.preview.sanitize import passes_quality_filter, sanitize_output

COLOR = "\x1b[38;5;196m"
UPPER_HALF = "▀"
LOWER_HALF = "▄"
FULL_BLOCK = "█"


class TestSanitizeOutput:
    def test_line_endings_and_trailing_blanks(self):
        assert sanitize_output("a\r\nb\rc\n\n\n", 10, keep_color=False) == ["a", "b", "c"]

    def test_cursor_sequences_removed(self):
        raw = "\x1b[?25l\x1b[2J\x1b[Hab\x1b[?25h"
        assert sanitize_output(raw, 10, keep_color=True) == ["ab"]

    def test_color_kept_and_reset(self):
        (line,) = sanitize_output(f"{COLOR}ab{RESET}", 10, keep_color=True)
        assert line.startswith(COLOR)
        assert line.endswith(RESET)
        assert strip_escapes(line) == "ab"

    def test_truecolor_sgr_kept(self):
        (line,) = sanitize_output("\x1b[38;2;10;20;30mx", 10, keep_color=True)
        assert line.startswith("\x1b[38;2;10;20;30m")

    def test_color_dropped_in_mono(self):
        assert sanitize_output(f"{COLOR}ab{RESET}", 10, keep_color=False) == ["ab"]

    def test_hyperlinks_and_osc_removed(self):
        raw = "\x1b]8;;http://x\x07link\x1b]8;;\x07 \x1b]0;title\x1b\\"
        assert sanitize_output(raw, 20, keep_color=True) == ["link "]

    def test_dcs_and_apc_removed(self):
        raw = "\x1bPq#0;2;0;0;0\x1b\\ok\x1b_Gf=100;AAAA\x1b\\"
        assert sanitize_output(raw, 20, keep_color=False) == ["ok"]

    def test_control_chars_removed_tab_kept_as_space(self):
        assert sanitize_output("a\x07b\tc\x9bd", 20, keep_color=False) == ["ab cd"]

    def test_lines_clipped_mono(self):
        assert sanitize_output("abcdefghij", 4, keep_color=False) == ["abcd"]

    def test_lines_clipped_color(self):
        (line,) = sanitize_output(COLOR + "x" * 10, 4, keep_color=True)
        assert strip_escapes(line) == "xxxx"
        assert line.endswith(RESET)

    def test_wide_glyphs_clipped(self):
        (line,) = sanitize_output("中文中文", 5, keep_color=False)
        assert visible_width(line) <= 5

    def test_escape_only_trailing_line_dropped(self):
        assert sanitize_output(f"ab\n{RESET}\n", 10, keep_color=True) == ["ab"]

    def test_interior_blank_lines_kept(self):
        assert sanitize_output("a\n\nb", 10, keep_color=False) == ["a", "", "b"]

    def test_empty_output(self):
        assert sanitize_output("\n\n", 10, keep_color=False) == []

    @pytest.mark.parametrize("keep_color", [True, False])
    def test_every_line_within_width(self, keep_color):
        raw = "\n".join([COLOR + FULL_BLOCK * 30, "\x1b[1Cabc" * 8, "中" * 20])
        lines = sanitize_output(raw, 12, keep_color)
        assert all(visible_width(line) <= 12 for line in lines)


class TestQualityFilter:
    def test_rejects_two_shade_smear(self):
        assert not passes_quality_filter([UPPER_HALF * 10, LOWER_HALF * 10])

    def test_rejects_with_color_codes(self):
        assert not passes_quality_filter([f"{COLOR}{FULL_BLOCK * 8}{RESET}"])

    def test_accepts_text(self):
        assert passes_quality_filter(["hello world"])

    def test_accepts_detailed_block_art(self):
        glyphs = "".join(chr(0x2580 + i) for i in range(12))
        assert passes_quality_filter([glyphs * 3])

    def test_accepts_few_blocks(self):
        assert passes_quality_filter([FULL_BLOCK * 2 + "....."])

    def test_rejects_empty(self):
        assert not passes_quality_filter([])
        assert not passes_quality_filter(["", ""])
