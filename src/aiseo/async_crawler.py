"""Asynchronous fetcher for multi-page batches and broken-link checks."""

import asyncio
import logging
import time
from typing import List, Optional, Sequence, Union

import httpx

from aiseo.constants import (
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTML_ACCEPT_HEADER,
    MAX_LINKS_TO_CHECK,
    PROBE_TIMEOUT_SECONDS,
)
from aiseo.crawler import FetchError, FetchErrorKind, decode_body, validate_url
from aiseo.models import FetchResult

logger = logging.getLogger(__name__)


class AsyncWebCrawler:
    """Concurrent page fetcher bounded by a semaphore.

    Same contract and error taxonomy as WebCrawler. Every fetch is also
    bounded by a hard wall-clock timeout, so slow-drip responses cannot
    outlive ``timeout``.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the async crawler.

        Args:
            user_agent: Custom user agent string
            timeout: Per-fetch wall-clock timeout in seconds
            max_redirects: Maximum redirect hops to follow
            max_concurrent: Maximum fetches in flight at once
            transport: Optional httpx transport (used by tests)
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.max_concurrent = max(1, max_concurrent)
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={
                "User-Agent": self.user_agent,
                "Accept": HTML_ACCEPT_HEADER,
                "Accept-Language": "en-US,en;q=0.9",
            },
            transport=self.transport,
        )

    async def fetch(self, url: str, client: Optional[httpx.AsyncClient] = None) -> FetchResult:
        """Fetch a single URL.

        Raises:
            FetchError: On invalid URL, timeout, HTTP error status or network failure
        """
        if client is None:
            async with self._client() as own_client:
                return await self._fetch(url, own_client)
        return await self._fetch(url, client)

    async def _fetch(self, url: str, client: httpx.AsyncClient) -> FetchResult:
        validate_url(url)

        start_time = time.monotonic()
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise FetchError(
                FetchErrorKind.TIMEOUT, url, f"Request timeout after {self.timeout}s"
            )
        except httpx.TooManyRedirects:
            raise FetchError(
                FetchErrorKind.NETWORK_ERROR, url,
                f"Exceeded {self.max_redirects} redirects",
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise FetchError(FetchErrorKind.INVALID_URL, url, str(e))
        except httpx.HTTPError as e:
            raise FetchError(FetchErrorKind.NETWORK_ERROR, url, f"Connection error: {e}")

        response_time = time.monotonic() - start_time

        if response.status_code >= 400:
            raise FetchError(
                FetchErrorKind.HTTP_ERROR, url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(f"Fetched {url} -> {response.url} ({response.status_code}) in {response_time:.2f}s")

        return FetchResult(
            url=url,
            final_url=str(response.url),
            html=decode_body(response.content, response.headers, is_html=True),
            status_code=response.status_code,
            headers=dict(response.headers),
            response_time=response_time,
        )

    async def fetch_many(self, urls: Sequence[str]) -> List[Union[FetchResult, FetchError]]:
        """Fetch URLs concurrently.

        Returns:
            One entry per input URL, in input order: a FetchResult, or the
            FetchError that URL raised. A failure never aborts the batch.
        """
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async with self._client() as client:
            async def bounded(url: str) -> Union[FetchResult, FetchError]:
                async with semaphore:
                    try:
                        return await self._fetch(url, client)
                    except FetchError as e:
                        logger.warning(f"Failed to fetch {url}: {e}")
                        return e

            return list(await asyncio.gather(*(bounded(url) for url in urls)))

    async def check_links(
        self, urls: Sequence[str], limit: int = MAX_LINKS_TO_CHECK
    ) -> List[str]:
        """Return the URLs (of the first ``limit``) that answer with an error.

        Uses HEAD, retrying with GET when the server rejects HEAD.
        """
        to_check = list(urls)[:limit]
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async with self._client() as client:
            async def is_broken(url: str) -> bool:
                async with semaphore:
                    try:
                        response = await asyncio.wait_for(
                            client.head(url), timeout=PROBE_TIMEOUT_SECONDS
                        )
                        if response.status_code in (405, 501):
                            response = await asyncio.wait_for(
                                client.get(url), timeout=PROBE_TIMEOUT_SECONDS
                            )
                    except (asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL) as e:
                        logger.debug(f"Link check failed for {url}: {e}")
                        return True
                    return response.status_code >= 400

            flags = await asyncio.gather(*(is_broken(url) for url in to_check))

        broken = [url for url, flag in zip(to_check, flags) if flag]
        if broken:
            logger.info(f"Found {len(broken)} broken link(s) among {len(to_check)} checked")
        return broken
