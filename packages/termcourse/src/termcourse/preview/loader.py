"""
Asynchronous front end for the preview pipeline.

The UI asks for the preview of whichever post is focused. Work runs in a
worker thread; a newer request supersedes an older one, and a superseded
result is dropped instead of being delivered. The pipeline still caches it.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from .pipeline import ImagePreviewPipeline

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[int, list[str]], None]


class PreviewLoader:
    def __init__(self, pipeline: ImagePreviewPipeline, on_ready: ReadyCallback | None = None) -> None:
        self._pipeline = pipeline
        self._on_ready = on_ready
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self.results: dict[int, list[str]] = {}

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self, post_id: int, raw: str, width: int, max_lines: int) -> asyncio.Task[None] | None:
        """
        Start loading the preview for one post, superseding any earlier request.

        Returns the task doing the work, or None when the result was already
        cached (delivered immediately) or the post has nothing to preview.
        Must be called from the running event loop.
        """
        self.cancel()
        if not self._pipeline.has_previewable_image(raw):
            return None

        cached = self._pipeline.cached_preview(raw, width, max_lines)
        if cached is not None:
            self._deliver(post_id, cached)
            return None

        generation = self._generation
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(generation, post_id, raw, width, max_lines))
        return self._task

    def cancel(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self, generation: int, post_id: int, raw: str, width: int, max_lines: int) -> None:
        lines = await asyncio.to_thread(self._pipeline.preview_for_post, raw, width, max_lines)
        if generation != self._generation:
            logger.debug("Dropping superseded preview for post %s", post_id)
            return
        self._deliver(post_id, lines)

    def _deliver(self, post_id: int, lines: list[str]) -> None:
        self.results[post_id] = lines
        if self._on_ready is not None:
            self._on_ready(post_id, lines)
