"""
termcourse.preview - inline image previews rendered by external tools.
"""
from .backends import (
    AUTO_ORDER,
    ChafaBackend,
    RendererBackend,
    RendererError,
    ViuBackend,
    resolve_backends,
)
from .cache import REJECTED, PreviewCache, PreviewKey
from .fetch import ByteFetcher, FetchError, HttpByteFetcher
from .loader import PreviewLoader
from .pipeline import ImagePreviewPipeline
from .refs import extract_image_references, first_image_reference, resolve_image_url, strip_image_markdown
from .sanitize import passes_quality_filter, sanitize_output

__all__ = [
    "AUTO_ORDER",
    "ByteFetcher",
    "ChafaBackend",
    "FetchError",
    "HttpByteFetcher",
    "ImagePreviewPipeline",
    "PreviewCache",
    "PreviewKey",
    "PreviewLoader",
    "REJECTED",
    "RendererBackend",
    "RendererError",
    "ViuBackend",
    "extract_image_references",
    "first_image_reference",
    "passes_quality_filter",
    "resolve_backends",
    "resolve_image_url",
    "sanitize_output",
    "strip_image_markdown",
]
