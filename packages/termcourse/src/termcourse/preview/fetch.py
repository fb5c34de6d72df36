"""
Bounded image download.

HttpByteFetcher streams the response body and gives up as soon as the byte
ceiling or the wall-clock deadline is crossed, rather than after the whole
body has arrived.
"""
from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

import httpx

from ..config import APP_NAME, VERSION

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 65536


class FetchError(Exception):
    """Download failed, timed out, or exceeded the byte ceiling."""


@runtime_checkable
class ByteFetcher(Protocol):
    def fetch(self, url: str, max_bytes: int) -> bytes: ...


class HttpByteFetcher:
    """Fetch bytes over HTTP(S) with httpx."""

    def __init__(
        self,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={"User-Agent": f"{APP_NAME}/{VERSION}", **(headers or {})},
            follow_redirects=True,
            timeout=timeout,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpByteFetcher":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def fetch(self, url: str, max_bytes: int) -> bytes:
        deadline = time.monotonic() + self._timeout
        try:
            with self._client.stream("GET", url) as resp:
                resp.raise_for_status()
                declared = resp.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > max_bytes:
                    raise FetchError(f"{url}: declared size {declared} exceeds {max_bytes} bytes")

                buf = bytearray()
                for chunk in resp.iter_bytes(chunk_size=_CHUNK_SIZE):
                    buf.extend(chunk)
                    if len(buf) > max_bytes:
                        raise FetchError(f"{url}: body exceeds {max_bytes} bytes")
                    if time.monotonic() > deadline:
                        raise FetchError(f"{url}: download took longer than {self._timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"{url}: {e}") from e

        logger.debug("Fetched %d bytes from %s", len(buf), url)
        return bytes(buf)
