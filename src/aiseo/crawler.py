"""Web crawler for fetching pages and probing site-level resources."""

import logging
import re
import time
from enum import Enum
from typing import Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4.dammit import EncodingDetector, UnicodeDammit

from aiseo.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTML_ACCEPT_HEADER,
    PROBE_TIMEOUT_SECONDS,
    READ_CHUNK_SIZE,
    XML_ACCEPT_HEADER,
)
from aiseo.models import FetchResult, SiteSignals
from aiseo.sitemap_parser import SitemapParser

logger = logging.getLogger(__name__)


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    INVALID_URL = "invalid_url"


class FetchError(Exception):
    """Raised when a page cannot be fetched."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.kind = kind
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(f"{kind.value}: {message}")


def validate_url(url: str) -> None:
    """Raise FetchError(INVALID_URL) unless url is absolute http(s)."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FetchError(
            FetchErrorKind.INVALID_URL, url, "URL must be absolute and use http or https"
        )


def site_root(url: str) -> str:
    """Return scheme://host for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


_CHARSET_RE = re.compile(r"charset=[\"']?([\w.:-]+)", re.IGNORECASE)


def decode_body(body: bytes, headers, is_html: bool = False) -> str:
    """Decode a response body to text.

    A charset in the Content-Type header wins, then the document's own
    declaration (``<meta charset>`` or the XML prolog), then UTF-8. Only
    after those does byte sniffing get a say.
    """
    if not body:
        return ""

    encodings = []
    match = _CHARSET_RE.search(headers.get("Content-Type", "") or "")
    if match:
        encodings.append(match.group(1))
    declared = EncodingDetector.find_declared_encoding(body, is_html=is_html)
    if declared:
        encodings.append(declared)

    dammit = UnicodeDammit(
        body,
        known_definite_encodings=encodings,
        user_encodings=["utf-8"],
        is_html=is_html,
    )
    return dammit.unicode_markup or ""


class WebCrawler:
    """Fetches single pages with a timeout and redirect cap.

    No retries happen here; retry policy belongs to the caller.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the web crawler.

        Args:
            user_agent: Custom user agent string (defaults to the analyzer bot UA)
            timeout: Per-request timeout in seconds
            max_redirects: Maximum redirect hops to follow
            session: Optional pre-configured requests session
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self.max_redirects = max_redirects

        self.session = session or requests.Session()
        self.session.max_redirects = max_redirects
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": HTML_ACCEPT_HEADER,
            "Accept-Language": "en-US,en;q=0.9",
        })

    def fetch(self, url: str) -> FetchResult:
        """Fetch a single URL.

        The body is streamed, and reading stops with TIMEOUT once ``timeout``
        seconds have passed since the request started.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchResult with the decoded HTML and the post-redirect URL

        Raises:
            FetchError: On invalid URL, timeout, HTTP error status or network failure
        """
        validate_url(url)

        start_time = time.monotonic()
        deadline = start_time + self.timeout
        try:
            response = self.session.get(
                url, timeout=self.timeout, allow_redirects=True, stream=True
            )
            try:
                if response.status_code >= 400:
                    raise FetchError(
                        FetchErrorKind.HTTP_ERROR, url,
                        f"HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                body = self._read_body(response, url, deadline)
            finally:
                response.close()
        except requests.exceptions.Timeout:
            raise FetchError(
                FetchErrorKind.TIMEOUT, url, f"Request timeout after {self.timeout}s"
            )
        except requests.exceptions.TooManyRedirects:
            raise FetchError(
                FetchErrorKind.NETWORK_ERROR, url,
                f"Exceeded {self.max_redirects} redirects",
            )
        except requests.exceptions.InvalidURL as e:
            raise FetchError(FetchErrorKind.INVALID_URL, url, str(e))
        except requests.exceptions.RequestException as e:
            raise FetchError(FetchErrorKind.NETWORK_ERROR, url, f"Connection error: {e}")

        response_time = time.monotonic() - start_time
        logger.debug(f"Fetched {url} -> {response.url} ({response.status_code}) in {response_time:.2f}s")

        return FetchResult(
            url=url,
            final_url=response.url or url,
            html=decode_body(body, response.headers, is_html=True),
            status_code=response.status_code,
            headers=dict(response.headers),
            response_time=response_time,
        )

    def _read_body(self, response, url: str, deadline: float) -> bytes:
        chunks = []
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise FetchError(
                    FetchErrorKind.TIMEOUT, url, f"Request timeout after {self.timeout}s"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def get_text(self, url: str, timeout: float = PROBE_TIMEOUT_SECONDS) -> Optional[str]:
        """GET a resource and return its body, or None on any failure."""
        try:
            response = self.session.get(
                url,
                timeout=timeout,
                allow_redirects=True,
                headers={"Accept": XML_ACCEPT_HEADER},
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"Probe of {url} failed: {e}")
            return None

        if not response.ok:
            logger.debug(f"Probe of {url} returned HTTP {response.status_code}")
            return None
        return decode_body(response.content, response.headers)

    def probe_site(self, url: str) -> SiteSignals:
        """Check robots.txt and sitemap.xml for the site that serves url.

        Probe failures count as "absent" and never raise.
        """
        root = site_root(url)

        robots_txt = self.get_text(urljoin(root, "/robots.txt"))
        sitemap_xml = self.get_text(urljoin(root, "/sitemap.xml"))
        has_sitemap = bool(sitemap_xml) and not SitemapParser().parse_content(sitemap_xml).is_empty

        return SiteSignals(
            robots_txt=robots_txt,
            has_robots_txt=robots_txt is not None,
            has_sitemap=has_sitemap,
        )
