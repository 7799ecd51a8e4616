"""Tests for the XML sitemap parser."""

from unittest.mock import Mock, patch

import requests

from aiseo.constants import DEFAULT_USER_AGENT, MAX_SITEMAP_DEPTH
from aiseo.sitemap_parser import SitemapParser, parse_sitemap
from conftest import urlset


def sitemap_index(*urls: str) -> str:
    entries = "\n".join(f"  <sitemap><loc>{url}</loc></sitemap>" for url in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n</sitemapindex>"
    )


class TestParseContent:
    """Parsing without network access."""

    def test_urlset_in_document_order(self):
        """Test <url><loc> entries keep their order."""
        parsed = SitemapParser().parse_content(
            urlset("https://example.com/b", "https://example.com/a", "https://example.com/c")
        )

        assert parsed.urls == ["https://example.com/b", "https://example.com/a", "https://example.com/c"]
        assert parsed.is_index is False
        assert parsed.is_empty is False

    def test_sitemap_index(self):
        """Test a sitemap index yields child sitemaps, not pages."""
        parsed = SitemapParser().parse_content(sitemap_index("https://example.com/posts.xml"))

        assert parsed.is_index is True
        assert parsed.urls == []
        assert parsed.child_sitemaps == ["https://example.com/posts.xml"]

    def test_without_namespace(self):
        """Test sitemaps without the sitemaps.org namespace."""
        parsed = SitemapParser().parse_content(
            "<urlset><url><loc> https://example.com/x </loc></url></urlset>"
        )
        assert parsed.urls == ["https://example.com/x"]

    def test_malformed_xml_falls_back_to_scan(self):
        """Test unclosed XML is still scanned for <loc> entries."""
        content = (
            "<urlset><url><loc>https://example.com/a</loc></url>"
            "<url><loc>https://example.com/b</loc>"
        )
        parsed = SitemapParser().parse_content(content)

        assert parsed.urls == ["https://example.com/a", "https://example.com/b"]

    def test_html_wrapped_sitemap(self):
        """Test a sitemap served inside an HTML page."""
        content = "<html><body>" + urlset("https://example.com/a").split("\n", 1)[1] + "</body></html>"
        parsed = SitemapParser().parse_content(content)

        assert parsed.urls == ["https://example.com/a"]

    def test_empty_urlset(self):
        """Test an empty urlset is empty."""
        assert SitemapParser().parse_content("<urlset></urlset>").is_empty is True


class TestParse:
    """Fetching and recursion."""

    def test_index_recursion_dedupes_and_keeps_order(self):
        """Test child sitemaps are followed in order with duplicates removed."""
        documents = {
            "https://example.com/sitemap.xml": sitemap_index(
                "https://example.com/pages.xml", "https://example.com/posts.xml"
            ),
            "https://example.com/pages.xml": urlset("https://example.com/a", "https://example.com/b"),
            "https://example.com/posts.xml": urlset("https://example.com/b", "https://example.com/c"),
        }
        parser = SitemapParser(fetch_text=documents.get)

        urls = parser.parse("https://example.com/sitemap.xml")

        assert urls == ["https://example.com/a", "https://example.com/b", "https://example.com/c"]

    def test_max_urls(self):
        """Test the URL cap."""
        documents = {
            "https://example.com/sitemap.xml": urlset(*(f"https://example.com/{i}" for i in range(10))),
        }
        urls = SitemapParser(fetch_text=documents.get).parse("https://example.com/sitemap.xml", max_urls=3)

        assert urls == ["https://example.com/0", "https://example.com/1", "https://example.com/2"]

    def test_fetch_failure_returns_empty(self):
        """Test a missing sitemap yields no URLs."""
        parser = SitemapParser(fetch_text=lambda url: None)
        assert parser.parse("https://example.com/sitemap.xml") == []

    def test_self_referencing_index_stops_at_depth_limit(self):
        """Test recursion is bounded for an index that lists itself."""
        calls = []

        def fetch(url):
            calls.append(url)
            return sitemap_index("https://example.com/sitemap.xml")

        urls = SitemapParser(fetch_text=fetch).parse("https://example.com/sitemap.xml")

        assert urls == []
        assert len(calls) == MAX_SITEMAP_DEPTH + 1


class TestParseSitemap:
    """The module-level convenience function."""

    @patch("aiseo.sitemap_parser.requests.get")
    def test_fetches_with_requests(self, mock_get):
        """Test the default fetcher sends the bot user agent."""
        mock_get.return_value = Mock(text=urlset("https://example.com/a"))

        urls = parse_sitemap("https://example.com/sitemap.xml")

        assert urls == ["https://example.com/a"]
        assert mock_get.call_args.kwargs["headers"]["User-Agent"] == DEFAULT_USER_AGENT

    @patch("aiseo.sitemap_parser.requests.get")
    def test_request_failure(self, mock_get):
        """Test network errors yield no URLs."""
        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        assert parse_sitemap("https://example.com/sitemap.xml") == []
