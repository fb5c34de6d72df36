"""
Image preview pipeline: post markdown in, sanitized terminal lines out.

    first image reference -> cache -> bounded fetch -> PNG temp file
        -> external renderer -> sanitize -> cap -> quality filter -> cache

Nothing here raises to the caller. Every failure ends as a cached rejection
(the empty tuple) so the same URL is not fetched again at the same size.
"""
from __future__ import annotations

import io
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Sequence

from PIL import Image, UnidentifiedImageError

from ..settings import ImageMode, Settings
from .backends import RendererBackend, RendererError, resolve_backends
from .cache import REJECTED, PreviewCache, PreviewKey
from .fetch import ByteFetcher, FetchError, HttpByteFetcher
from .refs import first_image_reference
from .sanitize import passes_quality_filter, sanitize_output

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


@contextmanager
def _png_file(data: bytes) -> Iterator[str]:
    """Decode image bytes with Pillow and write the first frame as a temporary PNG."""
    with Image.open(io.BytesIO(data)) as img:
        img.seek(0)
        frame = img if img.mode in ("RGB", "RGBA", "L", "LA") else img.convert("RGBA")
        fd, path = tempfile.mkstemp(prefix="termcourse-", suffix=".png")
        try:
            with os.fdopen(fd, "wb") as fh:
                frame.save(fh, format="PNG")
        except BaseException:
            os.unlink(path)
            raise
    try:
        yield path
    finally:
        try:
            os.unlink(path)
        except OSError:
            pass


class ImagePreviewPipeline:
    """
    Turn the first image of a post into at most max_lines lines of glyphs.

    backends is the ordered list from resolve_backends(); an empty list
    disables previews. Only the first backend names the cache key, the
    second one is a fallback tried once when the first yields nothing.
    """

    def __init__(
        self,
        fetcher: ByteFetcher | None,
        backends: Sequence[RendererBackend],
        cache: PreviewCache | None = None,
        mode: ImageMode = "color",
        max_bytes: int = DEFAULT_MAX_BYTES,
        quality_filter: bool = True,
        base_url: str = "",
    ) -> None:
        self._fetcher = fetcher
        self._backends = list(backends)
        self.cache = cache if cache is not None else PreviewCache()
        self.mode: ImageMode = mode
        self.max_bytes = max_bytes
        self.quality_filter = quality_filter
        self.base_url = base_url

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        base_url: str = "",
        fetcher: ByteFetcher | None = None,
        cache: PreviewCache | None = None,
    ) -> "ImagePreviewPipeline":
        backends = resolve_backends(settings.image_backend, timeout=settings.image_render_timeout)
        if backends and fetcher is None:
            fetcher = HttpByteFetcher(timeout=settings.image_fetch_timeout)
        if cache is None:
            cache = PreviewCache(settings.image_cache_size)
        return cls(
            fetcher,
            backends,
            cache=cache,
            mode=settings.image_mode,
            max_bytes=settings.image_max_bytes,
            quality_filter=settings.image_quality_filter,
            base_url=base_url,
        )

    @property
    def backends(self) -> list[RendererBackend]:
        return list(self._backends)

    @property
    def enabled(self) -> bool:
        return bool(self._backends) and self._fetcher is not None

    def close(self) -> None:
        close = getattr(self._fetcher, "close", None)
        if callable(close):
            close()

    # ─── Public API ─────────────────────────────────────────────────────────────

    def has_previewable_image(self, raw: str) -> bool:
        return self.enabled and first_image_reference(raw, self.base_url) is not None

    def preview_for_post(self, raw: str, width: int, max_lines: int) -> list[str]:
        url = first_image_reference(raw, self.base_url)
        if url is None:
            return []
        return self.preview(url, width, max_lines)

    def preview(self, url: str, width: int, max_lines: int) -> list[str]:
        """Rendered lines for url, or [] when disabled, unusable or rejected."""
        if not self.enabled or width < 1 or max_lines < 1:
            return []
        key = PreviewKey(url, width, max_lines, self._backends[0].name)
        return list(self.cache.get_or_compute(key, lambda: self._compute(url, width, max_lines)))

    def cached_preview(self, raw: str, width: int, max_lines: int) -> list[str] | None:
        """Cached lines for the post's image without doing any work; None when not cached."""
        url = first_image_reference(raw, self.base_url)
        if url is None or not self.enabled:
            return None
        cached = self.cache.get(PreviewKey(url, width, max_lines, self._backends[0].name))
        return None if cached is None else list(cached)

    # ─── Stages ─────────────────────────────────────────────────────────────────

    def _compute(self, url: str, width: int, max_lines: int) -> tuple[str, ...]:
        if self._fetcher is None:
            return REJECTED
        try:
            data = self._fetcher.fetch(url, self.max_bytes)
        except FetchError as e:
            logger.warning("Image fetch failed: %s", e)
            return REJECTED

        try:
            with _png_file(data) as path:
                attempts = self._backends[:2]
                for index, backend in enumerate(attempts):
                    lines = self._render_with(backend, path, width, max_lines)
                    if lines:
                        return tuple(lines)
                    if index + 1 < len(attempts):
                        logger.debug("%s gave no usable preview for %s, trying %s",
                                     backend.name, url, attempts[index + 1].name)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            logger.warning("Cannot decode image %s: %s", url, e)
        except (OSError, ValueError) as e:
            logger.warning("Image conversion failed for %s: %s", url, e)
        return REJECTED

    def _render_with(self, backend: RendererBackend, path: str, width: int, max_lines: int) -> list[str]:
        try:
            raw = backend.render(path, width, max_lines, self.mode)
        except RendererError as e:
            logger.warning("Image render failed: %s", e)
            return []

        lines = sanitize_output(raw, width, backend.keeps_color(self.mode))[:max_lines]
        if not lines:
            logger.debug("%s produced no output", backend.name)
            return []
        if self.quality_filter and self.mode != "truecolor" and not passes_quality_filter(lines):
            logger.debug("%s output rejected by quality filter", backend.name)
            return []
        return lines
