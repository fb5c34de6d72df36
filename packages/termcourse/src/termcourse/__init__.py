"""
termcourse - layout and viewport rendering for a terminal forum reader.
"""
from .ansi import (
    RESET,
    highlight,
    hyperlink,
    pad_visible,
    scrub_controls,
    strip_escapes,
    tokenize,
    truncate_keeping_escapes,
    visible_width,
)
from .chrome import (
    build_header_line,
    build_progress_footer,
    content_width,
    format_line,
    frame_box,
    pad_line,
    truncate_text,
)
from .config import VERSION, get_config_dir, get_settings_path, setup_debug_logging
from .coordinator import RenderCoordinator
from .models import Post, PostAction, Topic, TopicSummary, topics_from_list
from .settings import Settings, load_settings
from .text import normalize_logical_lines, plain_text
from .viewport import ContentBlock, Viewport, allocate_viewport, clamp_scroll_offset, selected_window_height
from .width import char_width, string_width, take_by_width
from .wrap import TextSegment, segment_line, tokenize_words, wrap_line, wrap_lines

__version__ = VERSION

__all__ = [
    "RESET",
    "ContentBlock",
    "Post",
    "PostAction",
    "RenderCoordinator",
    "Settings",
    "TextSegment",
    "Topic",
    "TopicSummary",
    "VERSION",
    "Viewport",
    "allocate_viewport",
    "build_header_line",
    "build_progress_footer",
    "char_width",
    "clamp_scroll_offset",
    "content_width",
    "format_line",
    "frame_box",
    "get_config_dir",
    "get_settings_path",
    "highlight",
    "hyperlink",
    "load_settings",
    "normalize_logical_lines",
    "pad_line",
    "pad_visible",
    "plain_text",
    "scrub_controls",
    "segment_line",
    "selected_window_height",
    "setup_debug_logging",
    "string_width",
    "strip_escapes",
    "take_by_width",
    "tokenize",
    "tokenize_words",
    "topics_from_list",
    "truncate_keeping_escapes",
    "truncate_text",
    "visible_width",
    "wrap_line",
    "wrap_lines",
]
