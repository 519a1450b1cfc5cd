"""HTTP fetching of recipe pages."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

import httpx

from cookstep.config import settings
from cookstep.utils.exceptions import FetchTimeoutError, ScrapingError

logger = logging.getLogger(__name__)

BROWSER_UAS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_6) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
]


@dataclass
class FetchedPage:
    status: int
    body: str
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def default_headers() -> dict:
    """Browser-like request headers with a rotating User-Agent."""
    return {
        "User-Agent": random.choice(BROWSER_UAS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }


async def fetch_page(
    url: str,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FetchedPage:
    """
    GET a page and return its status and body.

    Non-2xx answers are returned, not raised, so the caller can report the
    upstream status.

    Raises:
        FetchTimeoutError: the request did not finish within the timeout
        ScrapingError: connection or protocol failure
    """
    timeout = settings.fetch_timeout_seconds if timeout is None else timeout

    async def _get(http: httpx.AsyncClient) -> httpx.Response:
        # httpx timeouts are per phase; wait_for bounds the whole download
        return await asyncio.wait_for(
            http.get(url, headers=default_headers(), timeout=timeout),
            timeout=timeout,
        )

    try:
        if client is not None:
            response = await _get(client)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as http:
                response = await _get(http)
    except (httpx.TimeoutException, asyncio.TimeoutError) as e:
        logger.warning(f"Timed out fetching {url} after {timeout}s", extra={"url": url})
        raise FetchTimeoutError(f"Timed out fetching {url}") from e
    except httpx.HTTPError as e:
        logger.warning(f"Network error fetching {url}: {e}", extra={"url": url})
        raise ScrapingError(f"Failed to fetch {url}: {e}") from e

    logger.debug(
        f"Fetched {url}",
        extra={"url": url, "status_code": response.status_code, "bytes": len(response.content)},
    )
    return FetchedPage(status=response.status_code, body=response.text, url=str(response.url))
