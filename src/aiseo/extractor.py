"""
Signal Extractor

Turns one fetched HTML document into PageFacts:
- Title, meta description, heading tree
- Image and link inventories
- Technical flags (HTTPS, canonical, viewport, robots.txt, sitemap)
- Structured data (JSON-LD and microdata types)
- Content clarity, authorship and citability markers
- AI crawler directives from robots.txt

Extraction is tolerant: malformed HTML never raises, missing elements
become absent values that the scorers report as issues.
"""

import json
import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from aiseo.constants import (
    ANTHROPIC_BOTS,
    GPT_BOT,
    IGNORED_LINK_SCHEMES,
    PERPLEXITY_BOT,
)
from aiseo.models import PageFacts, SiteSignals
from aiseo.robots import parse_robots_txt
from aiseo.scoring import round_half_up_mean

logger = logging.getLogger(__name__)


class SignalExtractor:
    """Extract SEO and LLM readiness signals from HTML."""

    FAQ_HEADING_RE = re.compile(
        r"\b(faqs?|frequently asked questions|common questions|vanliga frågor|frågor och svar)\b",
        re.IGNORECASE,
    )
    DEFINITION_PHRASE_RE = re.compile(
        r"\b(is|are) defined as\b|\brefers to\b|\bis a term (used )?for\b|\bis short for\b",
        re.IGNORECASE,
    )
    QUOTE_RE = re.compile(r"[“\"«„][^“”\"«»„]{10,}[”\"»“]")
    STATISTIC_RE = re.compile(
        r"\d+(?:[.,]\d+)?\s*%"
        r"|\d+(?:[.,]\d+)?\s*(?:thousand|million|billion|trillion|miljon(?:er)?|miljard(?:er)?)\b",
        re.IGNORECASE,
    )
    SCHEMA_ORG_TYPE_RE = re.compile(r"schema\.org/(\w+)", re.IGNORECASE)

    # Elements whose outbound links read as citations rather than navigation
    BODY_COPY_TAGS = ["p", "li", "blockquote", "figcaption", "td"]

    def extract(
        self, html: str, final_url: str, site: Optional[SiteSignals] = None
    ) -> PageFacts:
        """Extract facts from a document.

        Args:
            html: Raw HTML (may be malformed or empty)
            final_url: URL the document was served from, after redirects
            site: robots.txt / sitemap probe results (absent when None)

        Returns:
            PageFacts for the document
        """
        site = site or SiteSignals()
        soup = self._parse(html)
        page_host = (urlparse(final_url).hostname or "").lower()

        title_tag = soup.find("title")
        title = _clean_text(title_tag.get_text()) if title_tag else None

        description_tag = soup.find("meta", attrs={"name": _attr_equals("description")})
        description = None
        if description_tag is not None:
            description = _clean_text(description_tag.get("content") or "")

        h1 = tuple(_clean_text(h.get_text()) for h in soup.find_all("h1"))
        h2 = tuple(_clean_text(h.get_text()) for h in soup.find_all("h2"))
        h3 = tuple(_clean_text(h.get_text()) for h in soup.find_all("h3"))

        images = soup.find_all("img")
        images_with_alt = sum(1 for img in images if (img.get("alt") or "").strip())

        internal_links, external_links, internal_urls = self._inventory_links(soup, final_url, page_host)

        canonical_tag = soup.find("link", rel="canonical")
        canonical = None
        if canonical_tag is not None:
            canonical = (canonical_tag.get("href") or "").strip() or None

        viewport = soup.find("meta", attrs={"name": _attr_equals("viewport")}) is not None

        jsonld_blocks = self._parse_jsonld(soup)
        schema_types = self._schema_types(soup, jsonld_blocks)
        has_schema_org = bool(jsonld_blocks) or soup.find(attrs={"itemtype": True}) is not None

        paragraph_lengths = [
            len(text) for text in (_clean_text(p.get_text()) for p in soup.find_all("p")) if text
        ]
        avg_paragraph_length = round_half_up_mean(paragraph_lengths)

        robots = parse_robots_txt(site.robots_txt) if site.has_robots_txt else None
        source_domains = self._source_domains(soup, final_url, page_host)

        body_text = self._visible_text(soup)

        return PageFacts(
            url=final_url,
            has_title_tag=title_tag is not None,
            title=title or None,
            has_description_tag=description_tag is not None,
            description=description or None,
            h1=h1,
            h2=h2,
            h3=h3,
            images_total=len(images),
            images_with_alt=images_with_alt,
            internal_links=internal_links,
            external_links=external_links,
            internal_urls=internal_urls,
            https=urlparse(final_url).scheme == "https",
            canonical=canonical,
            viewport=viewport,
            has_robots_txt=site.has_robots_txt,
            has_sitemap=site.has_sitemap,
            has_schema_org=has_schema_org,
            schema_types=schema_types,
            paragraph_count=len(paragraph_lengths),
            avg_paragraph_length=avg_paragraph_length,
            has_faq=self._has_faq(soup, schema_types),
            has_definitions=self._has_definitions(soup, body_text),
            has_author=self._has_author(soup, jsonld_blocks),
            has_date=self._has_date(soup, jsonld_blocks),
            has_last_modified=self._has_last_modified(soup, jsonld_blocks),
            allows_gpt_bot=robots.allows(GPT_BOT) if robots else True,
            allows_anthropic_bot=all(robots.allows(bot) for bot in ANTHROPIC_BOTS) if robots else True,
            allows_perplexity_bot=robots.allows(PERPLEXITY_BOT) if robots else True,
            has_quotes=soup.find("blockquote") is not None or bool(self.QUOTE_RE.search(body_text)),
            has_statistics=bool(self.STATISTIC_RE.search(body_text)) or soup.find("table") is not None,
            has_sources=self._has_citation_markup(soup) or bool(source_domains),
            source_domains=source_domains,
        )

    def _parse(self, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html or "", "html.parser")
        except Exception as e:
            # Tolerant parse boundary: an unparsable document yields no facts
            logger.warning(f"HTML parse failed, treating document as empty: {e}")
            return BeautifulSoup("", "html.parser")

    def _inventory_links(self, soup: BeautifulSoup, page_url: str, page_host: str):
        """Count internal vs external links and collect internal URLs."""
        internal = 0
        external = 0
        internal_urls: List[str] = []
        seen = set()

        for link in soup.find_all("a", href=True):
            href = link["href"].strip()
            if not href or href.startswith("#") or href.lower().startswith(IGNORED_LINK_SCHEMES):
                continue

            absolute, _ = urldefrag(urljoin(page_url, href))
            parsed = urlparse(absolute)
            if parsed.scheme not in ("http", "https"):
                continue

            if (parsed.hostname or "").lower() == page_host:
                internal += 1
                if absolute not in seen:
                    seen.add(absolute)
                    internal_urls.append(absolute)
            else:
                external += 1

        return internal, external, tuple(internal_urls)

    def _parse_jsonld(self, soup: BeautifulSoup) -> List[dict]:
        """Parse every JSON-LD block; unparsable blocks are skipped."""
        blocks: List[dict] = []
        for script in soup.find_all("script", attrs={"type": _attr_equals("application/ld+json")}):
            content = script.get_text()
            if not content or not content.strip():
                continue
            try:
                data = json.loads(content)
            except (json.JSONDecodeError, ValueError):
                logger.debug("Skipping unparsable JSON-LD block")
                continue
            blocks.extend(_flatten_jsonld(data))
        return blocks

    def _schema_types(self, soup: BeautifulSoup, blocks: List[dict]) -> tuple:
        types: List[str] = []
        for block in blocks:
            declared = block.get("@type")
            for schema_type in declared if isinstance(declared, list) else [declared]:
                if isinstance(schema_type, str) and schema_type and schema_type not in types:
                    types.append(schema_type)

        for element in soup.find_all(attrs={"itemtype": True}):
            match = self.SCHEMA_ORG_TYPE_RE.search(element.get("itemtype") or "")
            if match and match.group(1) not in types:
                types.append(match.group(1))

        return tuple(types)

    def _has_faq(self, soup: BeautifulSoup, schema_types: tuple) -> bool:
        if "FAQPage" in schema_types:
            return True
        if soup.find("details") is not None:
            return True
        return any(
            self.FAQ_HEADING_RE.search(heading.get_text())
            for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
        )

    def _has_definitions(self, soup: BeautifulSoup, body_text: str) -> bool:
        if soup.find(["dl", "dfn"]) is not None:
            return True
        if soup.find("abbr", title=True) is not None:
            return True
        if soup.find(attrs={"role": "definition"}) is not None:
            return True
        return bool(self.DEFINITION_PHRASE_RE.search(body_text))

    def _has_author(self, soup: BeautifulSoup, blocks: List[dict]) -> bool:
        if soup.find("meta", attrs={"name": _attr_equals("author")}) is not None:
            return True
        if soup.select_one('[rel~="author"], [itemprop="author"], [itemtype*="Person"], [class*="byline"]'):
            return True
        return any("author" in block for block in blocks)

    def _has_date(self, soup: BeautifulSoup, blocks: List[dict]) -> bool:
        if soup.select_one(
            'meta[property="article:published_time"], [itemprop="datePublished"], time[datetime]'
        ):
            return True
        return any("datePublished" in block for block in blocks)

    def _has_last_modified(self, soup: BeautifulSoup, blocks: List[dict]) -> bool:
        if soup.select_one('meta[property="article:modified_time"], [itemprop="dateModified"]'):
            return True
        return any("dateModified" in block for block in blocks)

    def _has_citation_markup(self, soup: BeautifulSoup) -> bool:
        return soup.select_one('cite, a[rel~="cite"], blockquote[cite], sup a') is not None

    def _source_domains(self, soup: BeautifulSoup, page_url: str, page_host: str) -> tuple:
        """Hosts of outbound links placed in body copy, in document order."""
        domains: List[str] = []
        for container in soup.find_all(self.BODY_COPY_TAGS):
            for link in container.find_all("a", href=True):
                href = link["href"].strip()
                if href.lower().startswith(IGNORED_LINK_SCHEMES):
                    continue
                parsed = urlparse(urljoin(page_url, href))
                host = (parsed.hostname or "").lower()
                if parsed.scheme in ("http", "https") and host and host != page_host and host not in domains:
                    domains.append(host)
        return tuple(domains)

    def _visible_text(self, soup: BeautifulSoup) -> str:
        """Body text without scripts and styles (decomposes them from soup)."""
        for element in soup(["script", "style", "noscript", "template"]):
            element.decompose()
        root = soup.body or soup
        return _clean_text(root.get_text(separator=" "))


def _attr_equals(expected: str):
    """Case-insensitive attribute matcher for BeautifulSoup queries."""
    def matcher(value) -> bool:
        return isinstance(value, str) and value.strip().lower() == expected
    return matcher


def _clean_text(text: str) -> str:
    return " ".join(text.split())


def _flatten_jsonld(data) -> Iterable[dict]:
    """Yield top-level JSON-LD objects, unpacking lists and @graph."""
    if isinstance(data, list):
        for item in data:
            yield from _flatten_jsonld(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                yield from _flatten_jsonld(item)


_default_extractor = SignalExtractor()


def extract(html: str, final_url: str, site: Optional[SiteSignals] = None) -> PageFacts:
    """Extract PageFacts from html served at final_url."""
    return _default_extractor.extract(html, final_url, site)
