"""
Page Discovery

Finds candidate pages on a site for multi-page analysis. Strategies are tried
in order and each returns a page list or None to hand over to the next:

1. SitemapStrategy: /sitemap.xml, /sitemap_index.xml, /sitemap-index.xml
2. CrawlStrategy: bounded breadth-first crawl from the root page

When every strategy gives up the result degrades to the root page alone.
Discovery never raises.
"""

import logging
from collections import deque
from typing import List, Optional, Sequence
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from aiseo.constants import (
    DEFAULT_DISCOVERY_MAX_PAGES,
    IGNORED_LINK_SCHEMES,
    MAX_SITEMAP_URLS,
    NON_CONTENT_EXTENSIONS,
    NON_CONTENT_PATH_MARKERS,
    SITEMAP_PATHS,
)
from aiseo.crawler import FetchError, WebCrawler, site_root
from aiseo.models import DiscoveryResult, DiscoverySource
from aiseo.sitemap_parser import SitemapParser

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Strip the fragment and any trailing slash."""
    url, _ = urldefrag(url.strip())
    parsed = urlparse(url)
    normalized = f"{parsed.scheme}://{parsed.netloc}{parsed.path.rstrip('/')}"
    if parsed.query:
        normalized += f"?{parsed.query}"
    return normalized


def ensure_scheme(url: str) -> str:
    """Prefix bare hostnames with https://."""
    url = (url or "").strip()
    if url.lower().startswith(("http://", "https://")):
        return url
    return f"https://{url}"


def is_content_url(url: str) -> bool:
    """False for admin, feed, taxonomy and asset URLs."""
    lower = url.lower()
    if any(marker in lower for marker in NON_CONTENT_PATH_MARKERS):
        return False
    return not urlparse(lower).path.endswith(NON_CONTENT_EXTENSIONS)


class DiscoveryStrategy:
    """One way of finding pages. ``find`` returns None to defer to the next."""

    name: DiscoverySource

    def find(self, discoverer: "PageDiscoverer", root: str) -> Optional[List[str]]:
        raise NotImplementedError


class SitemapStrategy(DiscoveryStrategy):
    name = DiscoverySource.SITEMAP

    def find(self, discoverer: "PageDiscoverer", root: str) -> Optional[List[str]]:
        parser = SitemapParser(fetch_text=discoverer.crawler.get_text)
        base = site_root(root)

        for path in SITEMAP_PATHS:
            sitemap_url = urljoin(base, path)
            urls = parser.parse(sitemap_url, max_urls=MAX_SITEMAP_URLS)
            if not urls:
                logger.debug(f"No entries in {sitemap_url}")
                continue

            pages = discoverer.select(urls, root)
            if len(pages) > 1 or root in {normalize_url(u) for u in urls}:
                logger.info(f"Discovered {len(urls)} URLs from {sitemap_url}")
                return pages
            logger.debug(f"No usable entries in {sitemap_url}")

        discoverer.errors.append("No sitemap found")
        return None


class CrawlStrategy(DiscoveryStrategy):
    name = DiscoverySource.CRAWL

    def find(self, discoverer: "PageDiscoverer", root: str) -> Optional[List[str]]:
        # Links count once seen on a fetched page; fetching a link only widens the search.
        found: List[str] = [root]
        seen = {root}
        queue = deque([root])
        fetches = 0

        while queue and len(found) < discoverer.max_pages and fetches < discoverer.max_pages:
            url = queue.popleft()
            fetches += 1
            try:
                fetched = discoverer.crawler.fetch(url)
            except FetchError as e:
                logger.debug(f"Crawl could not expand {url}: {e}")
                if url == root:
                    discoverer.errors.append(f"Crawl failed: {e}")
                    return None
                continue

            for link in self._links(fetched.html, fetched.final_url):
                if link in seen or not discoverer.in_scope(link, root) or not is_content_url(link):
                    continue
                seen.add(link)
                found.append(link)
                queue.append(link)
                if len(found) >= discoverer.max_pages:
                    break

        if len(found) <= 1:
            discoverer.errors.append("Crawl found no internal links")
            return None
        return discoverer.select(found, root)

    @staticmethod
    def _links(html: str, page_url: str) -> List[str]:
        links: List[str] = []
        soup = BeautifulSoup(html or "", "html.parser")
        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href or href.startswith("#") or href.lower().startswith(IGNORED_LINK_SCHEMES):
                continue
            absolute = urljoin(page_url, href)
            if urlparse(absolute).scheme in ("http", "https"):
                links.append(normalize_url(absolute))
        return links


class PageDiscoverer:
    """Runs the discovery strategies in order."""

    def __init__(
        self,
        crawler: Optional[WebCrawler] = None,
        max_pages: int = DEFAULT_DISCOVERY_MAX_PAGES,
        include_subdomains: bool = False,
        strategies: Optional[Sequence[DiscoveryStrategy]] = None,
    ):
        """Initialize the discoverer.

        Args:
            crawler: Fetcher used for sitemaps and crawling
            max_pages: Maximum pages returned (root included)
            include_subdomains: Treat subdomains of the root host as internal
            strategies: Strategies in priority order (sitemap, then crawl)
        """
        self.crawler = crawler or WebCrawler()
        self.max_pages = max(1, max_pages)
        self.include_subdomains = include_subdomains
        self.strategies = list(strategies) if strategies is not None else [
            SitemapStrategy(),
            CrawlStrategy(),
        ]
        self.errors: List[str] = []

    def discover(self, url: str) -> DiscoveryResult:
        """Discover pages starting from url.

        Returns:
            DiscoveryResult with the root first and at most max_pages entries
        """
        self.errors = []
        root = normalize_url(ensure_scheme(url))

        if not urlparse(root).hostname:
            return DiscoveryResult(
                pages=(root,), source=DiscoverySource.SINGLE, error=f"Invalid URL: {url}"
            )

        for strategy in self.strategies:
            try:
                pages = strategy.find(self, root)
            except Exception as e:
                # Discovery degrades instead of failing the caller
                logger.warning(f"{strategy.name.value} discovery failed for {root}: {e}")
                self.errors.append(f"{strategy.name.value} discovery failed: {e}")
                continue

            if pages:
                logger.info(f"Discovered {len(pages)} pages on {root} via {strategy.name.value}")
                return DiscoveryResult(pages=tuple(pages), source=strategy.name)

        error = "; ".join(self.errors) or "No pages discovered"
        logger.warning(f"Discovery fell back to single page for {root}: {error}")
        return DiscoveryResult(pages=(root,), source=DiscoverySource.SINGLE, error=error)

    def in_scope(self, url: str, root: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        root_host = (urlparse(root).hostname or "").lower()
        if host == root_host:
            return True
        return self.include_subdomains and host.endswith(f".{root_host}")

    def select(self, urls: Sequence[str], root: str) -> List[str]:
        """Filter, dedupe and cap a URL list, root first, order otherwise kept."""
        pages = [root]
        seen = {root}
        for url in urls:
            if len(pages) >= self.max_pages:
                break
            normalized = normalize_url(url)
            if normalized in seen or not self.in_scope(normalized, root):
                continue
            if not is_content_url(normalized):
                continue
            seen.add(normalized)
            pages.append(normalized)
        return pages


def discover(
    url: str,
    max_pages: int = DEFAULT_DISCOVERY_MAX_PAGES,
    crawler: Optional[WebCrawler] = None,
    include_subdomains: bool = False,
) -> DiscoveryResult:
    """Discover up to max_pages pages on the site at url. Never raises."""
    return PageDiscoverer(
        crawler=crawler, max_pages=max_pages, include_subdomains=include_subdomains
    ).discover(url)
