"""XML sitemap parser used for page discovery."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from xml.etree import ElementTree as ET

import requests

from aiseo.constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    MAX_SITEMAP_DEPTH,
    XML_ACCEPT_HEADER,
)

logger = logging.getLogger(__name__)

_LOC_RE = re.compile(r"<loc>\s*([^<]+?)\s*</loc>", re.IGNORECASE)
_SITEMAP_BLOCK_RE = re.compile(r"<sitemap>[\s\S]*?<loc>\s*([^<]+?)\s*</loc>[\s\S]*?</sitemap>", re.IGNORECASE)


@dataclass
class ParsedSitemap:
    """Contents of one sitemap document."""
    urls: List[str] = field(default_factory=list)
    child_sitemaps: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return bool(self.child_sitemaps)

    @property
    def is_empty(self) -> bool:
        return not self.urls and not self.child_sitemaps


def _fetch_with_requests(url: str) -> Optional[str]:
    headers = {
        'User-Agent': DEFAULT_USER_AGENT,
        'Accept': XML_ACCEPT_HEADER,
    }
    try:
        response = requests.get(url, headers=headers, timeout=DEFAULT_REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.info(f"Failed to fetch sitemap {url}: {e}")
        return None
    return response.text


class SitemapParser:
    """
    Parse XML sitemaps to extract page URLs.

    Supports:
    - Standard sitemap.xml files (``<urlset>``)
    - Sitemap index files, whose child sitemaps are fetched recursively
    - Sitemaps wrapped in HTML or carrying a DOCTYPE

    URLs come back in document order with duplicates removed.
    """

    def __init__(self, fetch_text: Optional[Callable[[str], Optional[str]]] = None):
        """
        Initialize the sitemap parser.

        Args:
            fetch_text: Callable returning a URL's body or None on failure
                (defaults to a plain requests GET)
        """
        self.fetch_text = fetch_text or _fetch_with_requests

    def parse(self, sitemap_url: str, max_urls: Optional[int] = None) -> List[str]:
        """
        Fetch a sitemap (or sitemap index) and return its page URLs.

        Args:
            sitemap_url: URL to the sitemap.xml or sitemap index
            max_urls: Maximum number of URLs to return (None for all)

        Returns:
            List of URLs found, empty when the sitemap is missing or unparsable
        """
        urls: List[str] = []
        self._collect(sitemap_url, urls, set(), max_urls, depth=0)
        return urls

    def _collect(
        self,
        sitemap_url: str,
        urls: List[str],
        seen: set,
        max_urls: Optional[int],
        depth: int,
    ) -> None:
        """Recursively fetch and parse sitemaps."""
        if depth > MAX_SITEMAP_DEPTH:
            return
        if max_urls and len(urls) >= max_urls:
            return

        logger.debug(f"Fetching sitemap: {sitemap_url}")
        content = self.fetch_text(sitemap_url)
        if not content:
            return

        parsed = self.parse_content(content)

        for url in parsed.urls:
            if url in seen:
                continue
            seen.add(url)
            urls.append(url)
            if max_urls and len(urls) >= max_urls:
                logger.info(f"Reached max URLs limit ({max_urls})")
                return

        for child_url in parsed.child_sitemaps:
            logger.info(f"Found child sitemap: {child_url}")
            self._collect(child_url, urls, seen, max_urls, depth + 1)

    def parse_content(self, content: str) -> ParsedSitemap:
        """Parse sitemap XML content without any network access."""
        content = self._clean_xml_content(content)
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            logger.warning(f"Sitemap XML is malformed ({e}), falling back to <loc> scan")
            return self._scan_locs(content)

        root_tag = _local_name(root.tag)
        if root_tag == 'sitemapindex':
            return ParsedSitemap(child_sitemaps=self._locs(root, 'sitemap'))
        if root_tag == 'urlset':
            return ParsedSitemap(urls=self._locs(root, 'url'))

        logger.warning(f"Unknown sitemap root element: {root_tag}")
        return ParsedSitemap()

    def _clean_xml_content(self, content: str) -> str:
        """Clean XML content by removing any HTML wrapper."""
        content = content.strip().lstrip('\ufeff')
        content = re.sub(r'<!DOCTYPE[^>]*>', '', content)

        if '<html' in content.lower():
            match = re.search(r'(<\?xml.*?</(?:urlset|sitemapindex)>)', content, re.DOTALL)
            if match:
                return match.group(1)

            match = re.search(r'(<(?:urlset|sitemapindex).*?</(?:urlset|sitemapindex)>)', content, re.DOTALL)
            if match:
                return match.group(1)

        return content

    def _locs(self, root: ET.Element, entry_tag: str) -> List[str]:
        """Collect <loc> text of every <entry_tag> element, in order."""
        locs = []
        for element in root.iter():
            if _local_name(element.tag) != entry_tag:
                continue
            for child in element:
                if _local_name(child.tag) == 'loc' and child.text and child.text.strip():
                    locs.append(child.text.strip())
                    break
        return locs

    def _scan_locs(self, content: str) -> ParsedSitemap:
        children = [m.group(1) for m in _SITEMAP_BLOCK_RE.finditer(content)]
        if children:
            return ParsedSitemap(child_sitemaps=children)
        return ParsedSitemap(urls=[m.group(1) for m in _LOC_RE.finditer(content)])


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ''
    return tag.split('}')[-1] if '}' in tag else tag


def parse_sitemap(sitemap_url: str, max_urls: Optional[int] = None) -> List[str]:
    """
    Convenience function to parse a sitemap.

    Args:
        sitemap_url: URL to the sitemap
        max_urls: Maximum URLs to return

    Returns:
        List of URLs from the sitemap
    """
    return SitemapParser().parse(sitemap_url, max_urls)
