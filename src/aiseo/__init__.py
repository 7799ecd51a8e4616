"""Website analysis engine scoring pages for SEO and LLM readiness."""

__version__ = "0.1.0"

from aiseo.analyzer import AnalysisOptions, WebsiteAnalyzer, analyze, analyze_async, discover
from aiseo.crawler import FetchError, FetchErrorKind, WebCrawler
from aiseo.async_crawler import AsyncWebCrawler
from aiseo.extractor import SignalExtractor, extract
from aiseo.seo_scorer import SEOScorer
from aiseo.llm_scorer import LLMReadinessScorer
from aiseo.suggestions import SuggestionGenerator
from aiseo.llm import (
    GenerativeUnavailable,
    LLMClient,
    NullTextProvider,
    OllamaClient,
    TextProvider,
)
from aiseo.models import (
    AnalysisReport,
    AnalysisResult,
    DiscoveryResult,
    DiscoverySource,
    LlmReadinessResult,
    PageAnalysis,
    PageFacts,
    Priority,
    SeoResult,
    Suggestion,
    SuggestionCategory,
)
from aiseo.config import AnalysisThresholds, Config, settings

__all__ = [
    "AnalysisOptions",
    "WebsiteAnalyzer",
    "analyze",
    "analyze_async",
    "discover",
    "FetchError",
    "FetchErrorKind",
    "WebCrawler",
    "AsyncWebCrawler",
    "SignalExtractor",
    "extract",
    "SEOScorer",
    "LLMReadinessScorer",
    "SuggestionGenerator",
    "GenerativeUnavailable",
    "LLMClient",
    "NullTextProvider",
    "OllamaClient",
    "TextProvider",
    "AnalysisReport",
    "AnalysisResult",
    "DiscoveryResult",
    "DiscoverySource",
    "LlmReadinessResult",
    "PageAnalysis",
    "PageFacts",
    "Priority",
    "SeoResult",
    "Suggestion",
    "SuggestionCategory",
    "AnalysisThresholds",
    "Config",
    "settings",
]
