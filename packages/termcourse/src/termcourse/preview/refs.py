"""
Image references in raw post markdown.

Forum posts point at images in three ways: markdown image syntax (often with
the forum's "alt|WxH" alt text and upload:// short URLs), inline <img> tags,
and bare links ending in an image extension.
"""
from __future__ import annotations

import re

_MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]\n]*\]\(\s*<?([^\s)>]+)>?(?:\s+[\"'][^\"'\n]*[\"'])?\s*\)")
_HTML_IMAGE_RE = re.compile(r"<img\b[^>]*?\bsrc\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_BARE_IMAGE_RE = re.compile(
    r"(?:https?:|(?<![\w:/]))//[^\s)\]}>\"'<]+?\.(?:png|jpe?g|gif|webp|bmp)(?:\?[^\s)\]}>\"'<]*)?(?=$|[\s)\]}>\"'<,])",
    re.IGNORECASE,
)
_UPLOAD_SCHEME = "upload://"


def resolve_image_url(target: str, base_url: str = "") -> str | None:
    """
    Turn an image target into an absolute http(s) URL.

    Returns None for targets that cannot be resolved (data: URIs, relative
    paths without a base URL, other schemes).
    """
    target = target.strip()
    base = base_url.rstrip("/")
    if not target:
        return None
    if target.startswith(_UPLOAD_SCHEME):
        if not base:
            return None
        return f"{base}/uploads/short-url/{target[len(_UPLOAD_SCHEME):]}"
    if target.startswith("//"):
        return "https:" + target
    lowered = target.lower()
    if lowered.startswith(("http://", "https://")):
        return target
    if target.startswith("/") and base:
        return base + target
    return None


def extract_image_references(raw: str, base_url: str = "") -> list[str]:
    """Return absolute image URLs in order of first appearance, without repeats."""
    found: list[tuple[int, str]] = []
    covered: list[tuple[int, int]] = []
    for pattern in (_MARKDOWN_IMAGE_RE, _HTML_IMAGE_RE):
        for match in pattern.finditer(raw):
            found.append((match.start(), match.group(1)))
            covered.append(match.span())

    for match in _BARE_IMAGE_RE.finditer(raw):
        if any(start <= match.start() < end for start, end in covered):
            continue
        found.append((match.start(), match.group(0)))

    seen: set[str] = set()
    urls: list[str] = []
    for _, target in sorted(found, key=lambda item: item[0]):
        url = resolve_image_url(target, base_url)
        if url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def first_image_reference(raw: str, base_url: str = "") -> str | None:
    """Only the first image of a post is ever previewed."""
    refs = extract_image_references(raw, base_url)
    return refs[0] if refs else None


def strip_image_markdown(raw: str) -> str:
    """Remove markdown and HTML image syntax, leaving surrounding text."""
    return _HTML_TAG_RE.sub("", _MARKDOWN_IMAGE_RE.sub("", raw))
