"""Website analyzer that combines fetching, extraction, scoring and suggestions."""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import partial
from typing import List, Optional, Sequence

from aiseo.async_crawler import AsyncWebCrawler
from aiseo.config import AnalysisThresholds, Config, default_thresholds
from aiseo.constants import DEFAULT_DISCOVERY_MAX_PAGES
from aiseo.crawler import FetchError, WebCrawler
from aiseo.discovery import PageDiscoverer, normalize_url
from aiseo.extractor import SignalExtractor
from aiseo.llm import TextProvider, create_text_provider
from aiseo.llm_scorer import LLMReadinessScorer, calculate_overall_llm_score
from aiseo.models import (
    AnalysisReport,
    AnalysisResult,
    DiscoveryResult,
    FetchResult,
    PageAnalysis,
    PageFacts,
    SiteSignals,
)
from aiseo.seo_scorer import SEOScorer, calculate_overall_seo_score
from aiseo.suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOptions:
    """Per-call analysis options."""
    max_pages: int = 1
    enable_generative_suggestions: bool = False
    check_broken_links: bool = False


class WebsiteAnalyzer:
    """Analyzes pages for SEO and LLM readiness."""

    def __init__(
        self,
        config: Optional[Config] = None,
        thresholds: Optional[AnalysisThresholds] = None,
        text_provider: Optional[TextProvider] = None,
        crawler: Optional[WebCrawler] = None,
        async_crawler: Optional[AsyncWebCrawler] = None,
    ):
        """Initialize the analyzer.

        Args:
            config: Network and provider configuration (defaults to environment)
            thresholds: Rubric thresholds and weights
            text_provider: Generative provider for suggestion enrichment
                (built from config on first use when omitted)
            crawler: Synchronous fetcher for the root page and probes
            async_crawler: Concurrent fetcher for batches and link checks
        """
        self.config = config or Config.from_env()
        self.thresholds = thresholds or default_thresholds
        self.text_provider = text_provider

        self.crawler = crawler or WebCrawler(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_redirects=self.config.max_redirects,
        )
        self.async_crawler = async_crawler or AsyncWebCrawler(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_redirects=self.config.max_redirects,
            max_concurrent=self.config.max_concurrent_requests,
        )

        self.extractor = SignalExtractor()
        self.seo_scorer = SEOScorer(self.thresholds)
        self.llm_scorer = LLMReadinessScorer(self.thresholds)

    def analyze(self, url: str, options: Optional[AnalysisOptions] = None) -> AnalysisReport:
        """Analyze a URL, and optionally sibling pages discovered on its site.

        Runs analyze_async in a fresh event loop, so it cannot be called from
        inside a running loop; await analyze_async there instead.

        Args:
            url: Absolute http(s) URL of the root page
            options: Page count, generative enrichment and link checking

        Returns:
            AnalysisReport for the root page; per-page results and discovery
            details are included when options.max_pages > 1

        Raises:
            FetchError: If the root URL cannot be fetched
        """
        return asyncio.run(self.analyze_async(url, options))

    async def analyze_async(
        self, url: str, options: Optional[AnalysisOptions] = None
    ) -> AnalysisReport:
        """Coroutine form of analyze for callers already inside an event loop.

        Blocking work (the root fetch, site checks, discovery and generative
        rewrites) runs in the default executor.
        """
        options = options or AnalysisOptions()
        loop = asyncio.get_running_loop()

        logger.info(f"Analyzing {url}")
        fetched = await loop.run_in_executor(None, self.crawler.fetch, url)
        site = await loop.run_in_executor(None, self.crawler.probe_site, fetched.final_url)

        facts = self.extractor.extract(fetched.html, fetched.final_url, site)
        if options.check_broken_links:
            facts = await self._check_links(facts)
        result = self._score(facts)

        generator = self._suggestion_generator(options)
        suggestions = await loop.run_in_executor(
            None, partial(generator.generate, result, enrich=options.enable_generative_suggestions)
        )
        logger.info(
            f"{fetched.final_url}: SEO {result.overall_seo_score}/100, "
            f"LLM readiness {result.overall_llm_score}/100, {len(suggestions)} suggestions"
        )

        if options.max_pages <= 1:
            return AnalysisReport(result=result, suggestions=tuple(suggestions))

        discovery = await loop.run_in_executor(
            None, partial(self.discover, url, max_pages=options.max_pages)
        )
        root_keys = {normalize_url(url), normalize_url(fetched.final_url)}
        others = [page for page in discovery.pages if normalize_url(page) not in root_keys]
        others = others[: options.max_pages - 1]

        pages = [PageAnalysis(url=url, result=result)]
        if others:
            pages.extend(await self._analyze_pages(others, site, options))

        failed = sum(1 for page in pages if not page.success)
        logger.info(f"Analyzed {len(pages)} pages ({failed} failed)")

        return AnalysisReport(
            result=result,
            suggestions=tuple(suggestions),
            pages=tuple(pages),
            discovery=discovery,
        )

    def discover(self, url: str, max_pages: int = DEFAULT_DISCOVERY_MAX_PAGES) -> DiscoveryResult:
        """Discover pages on the site at url. Never raises."""
        return PageDiscoverer(
            crawler=self.crawler,
            max_pages=max_pages,
            include_subdomains=self.config.include_subdomains,
        ).discover(url)

    async def _analyze_pages(
        self, urls: Sequence[str], site: SiteSignals, options: AnalysisOptions
    ) -> List[PageAnalysis]:
        """Fetch and score secondary pages concurrently, in input order."""
        fetched_pages = await self.async_crawler.fetch_many(urls)

        analyses: List[PageAnalysis] = []
        for url, fetched in zip(urls, fetched_pages):
            if isinstance(fetched, FetchError):
                analyses.append(PageAnalysis(url=url, error=str(fetched)))
                continue
            try:
                analyses.append(PageAnalysis(url=url, result=await self._analyze_fetched(fetched, site, options)))
            except Exception as e:
                # One page never aborts the batch
                logger.warning(f"Analysis of {url} failed: {e}")
                analyses.append(PageAnalysis(url=url, error=str(e)))
        return analyses

    async def _analyze_fetched(
        self, fetched: FetchResult, site: SiteSignals, options: AnalysisOptions
    ) -> AnalysisResult:
        facts = self.extractor.extract(fetched.html, fetched.final_url, site)
        if options.check_broken_links:
            facts = await self._check_links(facts)
        return self._score(facts)

    async def _check_links(self, facts: PageFacts) -> PageFacts:
        broken = await self.async_crawler.check_links(facts.internal_urls)
        return replace(facts, broken_links=tuple(broken), links_checked=True)

    def _score(self, facts: PageFacts) -> AnalysisResult:
        seo = self.seo_scorer.score(facts)
        llm_readiness = self.llm_scorer.score(facts)
        return AnalysisResult(
            url=facts.url,
            fetched_at=datetime.now(timezone.utc),
            seo=seo,
            llm_readiness=llm_readiness,
            overall_seo_score=calculate_overall_seo_score(seo),
            overall_llm_score=calculate_overall_llm_score(llm_readiness, self.thresholds.llm_weights),
        )

    def _suggestion_generator(self, options: AnalysisOptions) -> SuggestionGenerator:
        if options.enable_generative_suggestions and self.text_provider is None:
            self.text_provider = create_text_provider(self.config)
        return SuggestionGenerator(self.text_provider, self.thresholds)


def analyze(url: str, options: Optional[AnalysisOptions] = None) -> AnalysisReport:
    """Analyze url with a default WebsiteAnalyzer.

    Raises:
        FetchError: If the root URL cannot be fetched
    """
    return WebsiteAnalyzer().analyze(url, options)


async def analyze_async(url: str, options: Optional[AnalysisOptions] = None) -> AnalysisReport:
    """Coroutine form of analyze with a default WebsiteAnalyzer."""
    return await WebsiteAnalyzer().analyze_async(url, options)


def discover(url: str, max_pages: int = DEFAULT_DISCOVERY_MAX_PAGES) -> DiscoveryResult:
    """Discover up to max_pages pages on the site at url. Never raises."""
    return WebsiteAnalyzer().discover(url, max_pages=max_pages)
