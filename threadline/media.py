"""Media fetcher — download images and encode them as base64."""

import asyncio
import base64
import logging
from typing import Optional

import httpx

from .thread.models import EncodedImage, ImageRef

logger = logging.getLogger("threadline.media")

DEFAULT_MEDIA_TYPE = "image/jpeg"

_EXTENSION_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def detect_media_type(content_type: Optional[str], url: str = "") -> str:
    """Pick a media type from the content-type header, falling back to the URL."""
    if content_type:
        main = content_type.split(";", 1)[0].strip().lower()
        if main.startswith("image/"):
            return main

    path = httpx.URL(url).path.lower() if url else ""
    for ext, media_type in _EXTENSION_TYPES.items():
        if path.endswith(ext):
            return media_type
    return DEFAULT_MEDIA_TYPE


class MediaFetcher:
    """Fetches image locators over HTTP and returns base64 payloads.

    Failures never raise: a locator that cannot be fetched (bad scheme,
    non-200 status, timeout, oversized body) resolves to None.

    Usable as an async context manager; a client passed in by the caller
    is not closed by the fetcher.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        max_bytes: int = 10 * 1024 * 1024,
        max_concurrent: int = 4,
    ):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.max_concurrent = max_concurrent

    async def __aenter__(self) -> "MediaFetcher":
        return self

    async def __aexit__(self, *exc):
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_and_encode(self, url: str, sender: str = "") -> Optional[EncodedImage]:
        """Download one image and encode it. Returns None on any failure."""
        scheme = url.split(":", 1)[0].lower() if ":" in url else ""
        if scheme not in ("http", "https"):
            logger.warning(f"Skipping image with unsupported locator: {url}")
            return None

        try:
            async with self.client.stream("GET", url, timeout=self.timeout) as resp:
                if resp.status_code != 200:
                    logger.warning(f"HTTP {resp.status_code} fetching image {url}")
                    return None

                declared = resp.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    logger.warning(f"Image {url} too large ({declared} bytes)")
                    return None

                chunks = []
                size = 0
                async for chunk in resp.aiter_bytes():
                    size += len(chunk)
                    if size > self.max_bytes:
                        logger.warning(f"Image {url} exceeded {self.max_bytes} bytes")
                        return None
                    chunks.append(chunk)

                media_type = detect_media_type(resp.headers.get("content-type"), url)
        except httpx.TimeoutException:
            logger.warning(f"Timed out fetching image {url}")
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Failed to fetch image {url}: {e}")
            return None

        data = base64.b64encode(b"".join(chunks)).decode()
        return EncodedImage(sender=sender, media_type=media_type, data=data, url=url)

    async def fetch_all(self, refs: list[ImageRef]) -> list[EncodedImage]:
        """Fetch refs concurrently; output keeps input order, failures dropped."""
        if not refs:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def _one(ref: ImageRef) -> Optional[EncodedImage]:
            async with semaphore:
                return await self.fetch_and_encode(ref.url, ref.sender)

        results = await asyncio.gather(*(_one(r) for r in refs))
        encoded = [img for img in results if img is not None]
        if len(encoded) < len(refs):
            logger.info(f"Encoded {len(encoded)}/{len(refs)} images")
        return encoded
