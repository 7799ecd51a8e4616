"""Tests for the website analyzer."""

import httpx
import pytest

from aiseo.analyzer import AnalysisOptions, WebsiteAnalyzer
from aiseo.async_crawler import AsyncWebCrawler
from aiseo.config import AnalysisThresholds, Config
from aiseo.crawler import FetchError, FetchErrorKind
from aiseo.constants import LLM_CATEGORY_WEIGHTS
from aiseo.llm import TextProvider
from aiseo.llm_scorer import calculate_overall_llm_score
from aiseo.models import AnalysisReport, DiscoverySource, SiteSignals
from conftest import PLAIN_HTML, RICH_HTML, SITEMAP_XML, FakeCrawler

PAGE_URL = "https://example.com/guides/sourdough"
ALLOW_ALL_SITE = SiteSignals(robots_txt="User-agent: *\nDisallow:", has_robots_txt=True, has_sitemap=True)


def batch_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/blog":
        raise httpx.ReadTimeout("timed out", request=request)
    if path == "/contact":
        return httpx.Response(404)
    return httpx.Response(200, text=PLAIN_HTML)


class RecordingProvider(TextProvider):
    """Provider that records prompts and answers with a fixed rewrite."""

    def __init__(self, response):
        self.response = response
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


def make_analyzer(crawler, text_provider=None, config=None, thresholds=None):
    return WebsiteAnalyzer(
        config=config or Config(llm_provider="none"),
        thresholds=thresholds,
        text_provider=text_provider,
        crawler=crawler,
        async_crawler=AsyncWebCrawler(transport=httpx.MockTransport(batch_handler)),
    )


class TestSinglePage:
    """Single-page analysis."""

    def test_rich_page(self):
        """Test the full pipeline on a well-optimised page."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)

        report = make_analyzer(crawler).analyze(PAGE_URL)

        assert isinstance(report, AnalysisReport)
        assert report.result.url == PAGE_URL
        assert report.result.overall_seo_score == 97
        assert report.result.overall_llm_score == 100
        assert [s.title for s in report.suggestions] == ["Add alt text to images"]
        assert report.pages == ()
        assert report.discovery is None

    def test_plain_page_suggestions_sorted(self):
        """Test suggestions come back high priority first."""
        crawler = FakeCrawler(pages={PAGE_URL: PLAIN_HTML})

        report = make_analyzer(crawler).analyze(PAGE_URL)

        ranks = [s.priority.rank for s in report.suggestions]
        assert ranks == sorted(ranks)
        assert report.suggestions[0].priority.value == "high"

    def test_root_fetch_failure_raises(self):
        """Test the root page failure surfaces as FetchError."""
        with pytest.raises(FetchError) as exc_info:
            make_analyzer(FakeCrawler()).analyze(PAGE_URL)

        assert exc_info.value.kind == FetchErrorKind.HTTP_ERROR

    def test_analysis_is_deterministic(self):
        """Test the same page scores the same twice."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)
        analyzer = make_analyzer(crawler)

        first = analyzer.analyze(PAGE_URL)
        second = analyzer.analyze(PAGE_URL)

        assert first.result.seo == second.result.seo
        assert first.result.llm_readiness == second.result.llm_readiness
        assert first.suggestions == second.suggestions

    def test_custom_llm_weights(self):
        """Test thresholds carry the LLM weights into the overall score."""
        crawler = FakeCrawler(pages={PAGE_URL: PLAIN_HTML}, site=ALLOW_ALL_SITE)
        weights = {
            "structured_data": 0,
            "content_clarity": 0,
            "author_info": 0,
            "ai_crawler_access": 100,
            "citability": 0,
        }

        report = make_analyzer(crawler, thresholds=AnalysisThresholds(llm_weights=weights)).analyze(PAGE_URL)

        assert report.result.overall_llm_score == 100

    def test_partial_llm_weights(self):
        """Test a partial weight map is merged over the defaults."""
        crawler = FakeCrawler(pages={PAGE_URL: PLAIN_HTML}, site=ALLOW_ALL_SITE)
        thresholds = AnalysisThresholds(llm_weights={"citability": 50})

        report = make_analyzer(crawler, thresholds=thresholds).analyze(PAGE_URL)

        expected = calculate_overall_llm_score(
            report.result.llm_readiness, {**LLM_CATEGORY_WEIGHTS, "citability": 50}
        )
        assert report.result.overall_llm_score == expected

    def test_broken_link_check(self):
        """Test broken internal links lower the links score."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)

        report = make_analyzer(crawler).analyze(PAGE_URL, AnalysisOptions(check_broken_links=True))

        links = report.result.seo.links
        assert links.broken == ("https://example.com/contact",)
        assert links.score == 90

    def test_to_dict(self):
        """Test the report serialises with camelCase keys."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)

        data = make_analyzer(crawler).analyze(PAGE_URL).to_dict()

        assert data["result"]["overallSeoScore"] == 97
        assert data["result"]["llmReadiness"]["aiCrawlerAccess"]["allowsGptBot"] is True
        assert data["result"]["seo"]["images"]["withoutAlt"] == 2
        assert data["suggestions"][0]["category"] == "seo"


class TestAsyncAnalysis:
    """Analysis from inside a running event loop."""

    @pytest.mark.asyncio
    async def test_analyze_async(self):
        """Test the coroutine gives the same report as the sync call."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)

        report = await make_analyzer(crawler).analyze_async(PAGE_URL)

        assert report.result.overall_seo_score == 97
        assert report.result.overall_llm_score == 100

    @pytest.mark.asyncio
    async def test_analyze_async_batch(self):
        """Test secondary pages are fetched without nesting event loops."""
        crawler = FakeCrawler(
            pages={"https://example.com": RICH_HTML},
            texts={"https://example.com/sitemap.xml": SITEMAP_XML},
        )

        report = await make_analyzer(crawler).analyze_async(
            "https://example.com", AnalysisOptions(max_pages=3)
        )

        assert report.discovery.source == DiscoverySource.SITEMAP
        assert len(report.pages) == 3

    @pytest.mark.asyncio
    async def test_analyze_async_root_failure(self):
        """Test FetchError propagates out of the coroutine."""
        with pytest.raises(FetchError):
            await make_analyzer(FakeCrawler()).analyze_async(PAGE_URL)


class TestGenerativeSuggestions:
    """Generative enrichment through the analyzer."""

    def test_enriched_descriptions(self):
        """Test the provider rewrites the description only."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)
        provider = RecordingProvider("s1: Describe the crumb photo and the starter photo")

        report = make_analyzer(crawler, text_provider=provider).analyze(
            PAGE_URL, AnalysisOptions(enable_generative_suggestions=True)
        )

        assert len(report.suggestions) == 1
        assert report.suggestions[0].title == "Add alt text to images"
        assert report.suggestions[0].description == "Describe the crumb photo and the starter photo"

    def test_not_called_when_disabled(self):
        """Test the provider is untouched by default."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)
        provider = RecordingProvider("s1: Anything")

        make_analyzer(crawler, text_provider=provider).analyze(PAGE_URL)

        assert provider.prompts == []

    def test_unconfigured_provider_uses_templates(self):
        """Test generative mode without a provider still returns suggestions."""
        crawler = FakeCrawler(pages={PAGE_URL: RICH_HTML}, site=ALLOW_ALL_SITE)

        report = make_analyzer(crawler).analyze(
            PAGE_URL, AnalysisOptions(enable_generative_suggestions=True)
        )

        assert report.suggestions[0].description.startswith("Some images are missing alt text")


class TestMultiPage:
    """Batch analysis of discovered pages."""

    def make_site(self):
        return FakeCrawler(
            texts={"https://example.com/sitemap.xml": SITEMAP_XML},
            pages={"https://example.com/": RICH_HTML},
            site=ALLOW_ALL_SITE,
        )

    def test_batch_with_failed_page(self):
        """Test a timeout on one page is recorded and the rest succeed."""
        report = make_analyzer(self.make_site()).analyze(
            "https://example.com/", AnalysisOptions(max_pages=3)
        )

        assert report.discovery.source == DiscoverySource.SITEMAP
        assert [page.url for page in report.pages] == [
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/blog",
        ]
        assert [page.success for page in report.pages] == [True, True, False]
        assert "timeout" in report.pages[2].error
        assert report.pages[0].result is report.result

    def test_batch_averages_successful_pages(self):
        """Test averages ignore failed pages."""
        report = make_analyzer(self.make_site()).analyze(
            "https://example.com/", AnalysisOptions(max_pages=5)
        )

        successful = report.successful_pages
        assert [page.success for page in report.pages] == [True, True, False, True, False]
        assert len(successful) == 3
        expected = (2 * sum(r.overall_seo_score for r in successful) + 3) // 6
        assert report.average_seo_score == expected

    def test_secondary_pages_reuse_site_signals(self):
        """Test secondary pages share the root's robots.txt and sitemap signals."""
        report = make_analyzer(self.make_site()).analyze(
            "https://example.com/", AnalysisOptions(max_pages=2)
        )

        about = report.pages[1].result
        assert about.seo.technical.robots_txt is True
        assert about.seo.technical.sitemap is True

    def test_single_page_site(self):
        """Test a site without sitemap or links yields only the root."""
        crawler = FakeCrawler(pages={PAGE_URL: PLAIN_HTML}, site=ALLOW_ALL_SITE)

        report = make_analyzer(crawler).analyze(PAGE_URL, AnalysisOptions(max_pages=5))

        assert report.discovery.source == DiscoverySource.SINGLE
        assert len(report.pages) == 1
        assert report.pages[0].success is True


class TestDiscover:
    """Analyzer-level discovery."""

    def test_discover_uses_config_subdomains(self):
        """Test include_subdomains comes from config."""
        crawler = FakeCrawler(texts={
            "https://example.com/sitemap.xml": SITEMAP_XML.replace(
                "https://example.com/contact", "https://shop.example.com/"
            ),
        })
        analyzer = make_analyzer(crawler, config=Config(llm_provider="none", include_subdomains=True))

        result = analyzer.discover("https://example.com")

        assert "https://shop.example.com" in result.pages
