"""
RenderCoordinator - turns forum posts into full-screen frames.

Per frame: each post becomes a ContentBlock (header row plus wrapped body,
with the image preview ahead of the body for the focused post), the
ViewportAllocator picks the rows that fit, and the header box and progress
footer are laid around them. Every returned frame is exactly height rows of
exactly width columns.
"""
from __future__ import annotations

import logging
import re
from typing import Mapping, Sequence

from .ansi import highlight, strip_escapes, visible_width
from .chrome import (
    build_header_line,
    build_progress_footer,
    content_width,
    format_line,
    frame_box,
    pad_line,
    truncate_text,
)
from .models import Post, TopicSummary
from .preview.pipeline import ImagePreviewPipeline
from .preview.refs import strip_image_markdown
from .settings import Settings
from .text import normalize_logical_lines, plain_text
from .viewport import ContentBlock, Viewport, allocate_viewport
from .wrap import wrap_lines

debug_logger = logging.getLogger("termcourse.debug")

TOPIC_HELP = "arrows: move | l: like | r: reply topic | p: reply post | esc: back | q: quit"
TOPIC_LIST_HELP = "arrows: move | enter: open | f: filter | p: period | g: refresh | q: quit"
PREVIEW_HINT = "[image] i: toggle preview"
NO_TOPICS = "No topics found."
COLLAPSED_BODY_LINES = 3

LIKED_GLYPH = "\u2764\ufe0f"
UNLIKED_GLYPH = "\U0001f90d"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class RenderCoordinator:
    def __init__(
        self,
        settings: Settings | None = None,
        pipeline: ImagePreviewPipeline | None = None,
        base_url: str = "",
    ) -> None:
        self.settings = settings or Settings()
        self.pipeline = pipeline
        self.base_url = base_url.rstrip("/")
        self.site_label = plain_text(_SCHEME_RE.sub("", self.base_url))

    # ─── Posts ──────────────────────────────────────────────────────────────────

    def has_previewable_image(self, post: Post) -> bool:
        return self.pipeline is not None and self.pipeline.has_previewable_image(post.raw)

    def load_preview(self, post: Post, width: int) -> list[str]:
        """Render the post's first image at body width (blocking)."""
        if self.pipeline is None:
            return []
        return self.pipeline.preview_for_post(post.raw, content_width(width), self.settings.image_max_lines)

    def build_block(
        self,
        post: Post,
        expanded: bool,
        width: int,
        preview_lines: Sequence[str] | None = None,
    ) -> ContentBlock:
        glyph = LIKED_GLYPH if post.liked else UNLIKED_GLYPH
        header = format_line(f"@{plain_text(post.username)}", width, glyph)

        raw = strip_image_markdown(post.raw) if preview_lines else post.raw
        logical = normalize_logical_lines(raw, emoji=self.settings.emoji_enabled)
        body = wrap_lines(logical, content_width(width), links=self.settings.links_enabled)

        if expanded:
            header = highlight(pad_line(header, width))
            if preview_lines:
                body = [*preview_lines, PREVIEW_HINT, *body]
        else:
            body = body[:COLLAPSED_BODY_LINES] or [""]
        return ContentBlock(header=header, body=body, expanded=expanded)

    def render_post_list(
        self,
        posts: Sequence[Post],
        selected: int,
        scroll_offset: int,
        budget: int,
        width: int,
        previews: Mapping[int, Sequence[str]] | None = None,
    ) -> Viewport:
        """Lay out the post list; previews maps post id to rendered preview lines."""
        previews = previews or {}
        blocks = [
            self.build_block(post, i == selected, width, previews.get(post.id) if i == selected else None)
            for i, post in enumerate(posts)
        ]
        if 0 <= selected < len(blocks):
            blocks[selected].scroll_offset = scroll_offset
        return allocate_viewport(blocks, selected, budget, width)

    # ─── Screens ────────────────────────────────────────────────────────────────

    def render_topic_screen(
        self,
        title: str,
        posts: Sequence[Post],
        selected: int,
        scroll_offsets: Mapping[int, int],
        width: int,
        height: int,
        previews: Mapping[int, Sequence[str]] | None = None,
    ) -> list[str]:
        if width < 1 or height < 1:
            return [" "]

        inner = max(width - 4, 0)
        header = frame_box(
            [
                build_header_line(TOPIC_HELP, self.site_label, inner),
                "-" * inner,
                f"Topic: {truncate_text(plain_text(title), max(inner - 7, 0))}",
            ],
            width,
        )
        footer = build_progress_footer(len(posts), selected, width)
        list_height = max(height - len(header) - len(footer), 1)

        viewport = self.render_post_list(
            posts, selected, scroll_offsets.get(selected, 0), list_height, width, previews
        )
        if self.settings.debug and 0 <= selected < len(posts):
            self._debug_focused_block(posts[selected], selected, width, height, previews)

        screen = [" " * width] * height
        for row, line in enumerate(header[:height]):
            screen[row] = pad_line(line, width)

        footer_start = height - len(footer)
        for idx, line in enumerate(viewport.lines[:list_height]):
            row = len(header) + idx
            if row >= min(footer_start, height):
                break
            screen[row] = pad_line(line, width)

        for idx, line in enumerate(footer):
            row = footer_start + idx
            if 0 <= row < height:
                screen[row] = pad_line(line, width)
        return screen

    def render_topic_list_screen(
        self,
        topics: Sequence[TopicSummary],
        selected: int,
        filter_name: str,
        width: int,
        height: int,
        period: str | None = None,
        loading: bool = False,
    ) -> list[str]:
        if width < 1 or height < 1:
            return [" "]

        inner = max(width - 4, 0)
        status = f"Topic List: {plain_text(filter_name).capitalize()}"
        if filter_name == "top" and period:
            status += f" ({plain_text(period).capitalize()})"
        if loading:
            status += " | Loading more..."
        header = frame_box(
            [build_header_line(TOPIC_LIST_HELP, self.site_label, inner), "-" * inner, status],
            width,
        )

        rows: list[str] = []
        if not topics:
            rows.append(NO_TOPICS)
        else:
            max_rows = max(height - len(header), 1)
            start = max(selected - max_rows // 2, 0)
            end = min(start + max_rows, len(topics))
            for index in range(start, end):
                topic = topics[index]
                title = truncate_text(plain_text(topic.title), max(width - 10, 1))
                row = "%3d  %s  (%d replies)" % (index + 1, title, topic.replies)
                rows.append(highlight(pad_line(row, width)) if index == selected else row)

        screen = [" " * width] * height
        for row, line in enumerate([*header, *rows][:height]):
            screen[row] = pad_line(line, width)
        return screen

    # ─── Debug ──────────────────────────────────────────────────────────────────

    def _debug_focused_block(
        self,
        post: Post,
        selected: int,
        width: int,
        height: int,
        previews: Mapping[int, Sequence[str]] | None,
    ) -> None:
        block = self.build_block(post, True, width, (previews or {}).get(post.id))
        debug_logger.debug("screen=%dx%d selected=%d post_id=%s", width, height, selected, post.id)
        debug_logger.debug("raw=%r", post.raw)
        for idx, line in enumerate(block.lines):
            debug_logger.debug(
                "line%d: visible=%d bytes=%d text=%r",
                idx,
                visible_width(line),
                len(line.encode("utf-8")),
                strip_escapes(line),
            )
