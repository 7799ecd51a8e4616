"""Shared fixtures for the analyzer test suite."""

import logging
from datetime import datetime, timezone

import pytest

from aiseo.crawler import FetchError, FetchErrorKind
from aiseo.llm_scorer import LLMReadinessScorer, calculate_overall_llm_score
from aiseo.models import AnalysisResult, FetchResult, PageFacts, SiteSignals
from aiseo.seo_scorer import SEOScorer, calculate_overall_seo_score


RICH_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>  Complete Guide to Sourdough Baking at Home for Beginners </title>
  <meta name="description" content="Learn to bake sourdough at home: feeding a starter, shaping loaves and baking with steam, step by step.">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="author" content="Ada Baker">
  <meta property="article:modified_time" content="2024-03-01T10:00:00+00:00">
  <link rel="canonical" href="https://example.com/guides/sourdough">
  <script type="application/ld+json">
    {"@context": "https://schema.org", "@graph": [
      {"@type": "Organization", "name": "Example Bakery"},
      {"@type": "Article", "headline": "Sourdough", "datePublished": "2024-01-15"}
    ]}
  </script>
  <script type="application/ld+json">{not valid json</script>
</head>
<body>
  <h1>Sourdough at Home</h1>
  <h2>Feeding your starter</h2>
  <h2>Frequently Asked Questions</h2>
  <h3>How long does it take?</h3>
  <p>A sourdough starter is a living culture of flour and water. It refers to the wild yeast you grow before baking your first loaf at home.</p>
  <p>According to <a href="https://www.nature.com/articles/sourdough">a study in Nature</a>, 73% of home bakers keep their starter in the fridge between bakes and feed it weekly.</p>
  <blockquote>Patience is the most important ingredient in bread.</blockquote>
  <img src="/img/loaf.jpg" alt="A finished loaf">
  <img src="/img/crumb.jpg" alt="">
  <img src="/img/starter.jpg">
  <a href="/guides/starter">Starter guide</a>
  <a href="https://example.com/contact#form">Contact</a>
  <a href="https://partner.org/flour">Partner</a>
  <a href="mailto:hello@example.com">Email</a>
  <a href="#top">Top</a>
  <a href="javascript:void(0)">Menu</a>
  <time datetime="2024-01-15">January 15, 2024</time>
</body>
</html>
"""

PLAIN_HTML = """<html><head><title>Hi</title></head>
<body><p>Short text.</p></body></html>
"""

ROBOTS_BLOCKING_GPTBOT = """User-agent: GPTBot
Disallow: /

User-agent: *
Allow: /
"""

SITEMAP_XML = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/about</loc></url>
  <url><loc>https://example.com/blog/</loc></url>
  <url><loc>https://example.com/blog/post-1</loc></url>
  <url><loc>https://example.com/contact</loc></url>
</urlset>
"""


def urlset(*urls: str) -> str:
    """Build a sitemap <urlset> document."""
    entries = "\n".join(f"  <url><loc>{url}</loc></url>" for url in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n</urlset>"
    )


def make_facts(**overrides) -> PageFacts:
    """PageFacts for a page that passes every SEO rule, with overrides."""
    values = dict(
        url="https://example.com/",
        has_title_tag=True,
        title="t" * 45,
        has_description_tag=True,
        description="d" * 120,
        h1=("Main heading",),
        h2=("Section",),
        images_total=2,
        images_with_alt=2,
        internal_links=3,
        external_links=1,
        https=True,
        canonical="https://example.com/",
        viewport=True,
        has_robots_txt=True,
        has_sitemap=True,
    )
    values.update(overrides)
    return PageFacts(**values)


def make_llm_ready_facts(**overrides) -> PageFacts:
    """PageFacts that also max out every LLM readiness category."""
    values = dict(
        has_schema_org=True,
        schema_types=("Article",),
        paragraph_count=4,
        avg_paragraph_length=180,
        has_faq=True,
        has_definitions=True,
        has_author=True,
        has_date=True,
        has_last_modified=True,
        has_quotes=True,
        has_statistics=True,
        has_sources=True,
    )
    values.update(overrides)
    return make_facts(**values)


def score_facts(facts: PageFacts) -> AnalysisResult:
    """Score facts with the default rubric."""
    seo = SEOScorer().score(facts)
    llm_readiness = LLMReadinessScorer().score(facts)
    return AnalysisResult(
        url=facts.url,
        fetched_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        seo=seo,
        llm_readiness=llm_readiness,
        overall_seo_score=calculate_overall_seo_score(seo),
        overall_llm_score=calculate_overall_llm_score(llm_readiness),
    )


class FakeCrawler:
    """In-memory stand-in for WebCrawler.

    ``texts`` maps URLs to bodies served by get_text; ``pages`` maps URLs to
    HTML served by fetch. Anything else is a 404.
    """

    def __init__(self, texts=None, pages=None, site=None):
        self.texts = dict(texts or {})
        self.pages = dict(pages or {})
        self.site = site or SiteSignals()
        self.fetched = []

    def get_text(self, url, timeout=5):
        return self.texts.get(url)

    def fetch(self, url):
        self.fetched.append(url)
        if url not in self.pages:
            raise FetchError(FetchErrorKind.HTTP_ERROR, url, "HTTP 404", status_code=404)
        return FetchResult(url=url, final_url=url, html=self.pages[url], status_code=200)

    def probe_site(self, url):
        return self.site


@pytest.fixture
def rich_html():
    return RICH_HTML


@pytest.fixture
def fake_crawler_factory():
    return FakeCrawler


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logging so caplog keeps seeing aiseo records."""
    package_logger = logging.getLogger("aiseo")
    level, handlers, propagate = package_logger.level, list(package_logger.handlers), package_logger.propagate
    yield package_logger
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = propagate
