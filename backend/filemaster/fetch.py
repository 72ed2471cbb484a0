"""Remote file download used by the "fetch remote file" action."""
from __future__ import annotations

import logging
import time
from pathlib import PurePosixPath
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) FileMaster/1.0 fetch"


class FetchError(Exception):
    """The remote file could not be downloaded."""


class FetchTooLarge(FetchError):
    """The remote body is larger than the configured cap."""


def validate_url(url: str) -> bool:
    try:
        p = urlparse((url or "").strip())
    except ValueError:
        return False
    return p.scheme in ("http", "https") and bool(p.hostname)


def filename_from_url(url: str) -> str:
    """Last path segment of *url*, percent-decoded; ``remote_<ts>`` when there is none."""
    segment = unquote(PurePosixPath(urlparse(url).path).name)
    # a decoded segment may still carry separators
    segment = segment.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if segment in ("", ".", ".."):
        return f"remote_{int(time.time())}"
    return segment


async def download(
    url: str,
    *,
    timeout: float,
    max_bytes: int,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[str, bytes]:
    """GET *url* following redirects; return ``(final_url, body)``.

    Non-2xx statuses and transport errors raise ``FetchError``; a body over
    *max_bytes* (when positive) raises ``FetchTooLarge`` and nothing is kept.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "*/*"}
    client_timeout = httpx.Timeout(timeout, connect=min(timeout, 5.0))
    try:
        async with httpx.AsyncClient(
            timeout=client_timeout, transport=transport, follow_redirects=True
        ) as client:
            async with client.stream("GET", url, headers=headers) as r:
                if not (200 <= r.status_code < 300):
                    raise FetchError(f"bad status {r.status_code}")
                declared = r.headers.get("Content-Length")
                if max_bytes > 0 and declared and declared.isdigit() and int(declared) > max_bytes:
                    raise FetchTooLarge(f"declared size {declared} exceeds {max_bytes}")
                total, chunks = 0, []
                async for c in r.aiter_bytes():
                    total += len(c)
                    if max_bytes > 0 and total > max_bytes:
                        raise FetchTooLarge(f"body exceeds {max_bytes} bytes")
                    chunks.append(c)
                final_url = str(r.url)
    except httpx.HTTPError as exc:
        raise FetchError(f"download: {exc.__class__.__name__}: {exc}") from exc

    logger.debug("fetched %s (%d bytes) from %s", final_url, total, url)
    return final_url, b"".join(chunks)
