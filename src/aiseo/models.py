"""Data models for website analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from aiseo.scoring import round_half_up_mean


class Priority(str, Enum):
    """Suggestion priority, derived from the owning category's score band."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


class SuggestionCategory(str, Enum):
    SEO = "seo"
    LLM = "llm"
    CONTENT = "content"


class DiscoverySource(str, Enum):
    """Where a discovered page list came from."""
    SITEMAP = "sitemap"
    CRAWL = "crawl"
    SINGLE = "single"


# =============================================================================
# Fetching
# =============================================================================

@dataclass(frozen=True)
class FetchResult:
    """Raw outcome of a successful page fetch."""

    url: str
    final_url: str
    html: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    response_time: float = 0.0

    @property
    def was_redirected(self) -> bool:
        return self.final_url != self.url


@dataclass(frozen=True)
class SiteSignals:
    """Site-level facts gathered outside the page itself (robots.txt, sitemap)."""

    robots_txt: Optional[str] = None
    has_robots_txt: bool = False
    has_sitemap: bool = False


# =============================================================================
# Extracted facts
# =============================================================================

@dataclass(frozen=True)
class PageFacts:
    """Structured facts extracted from one fetched document.

    Every field is either a value or its "absent" form (None, False, 0 or an
    empty tuple). Absence is never an error; the scorers turn it into issues.
    """

    url: str

    # Title / description
    has_title_tag: bool = False
    title: Optional[str] = None
    has_description_tag: bool = False
    description: Optional[str] = None

    # Headings, in document order
    h1: tuple[str, ...] = ()
    h2: tuple[str, ...] = ()
    h3: tuple[str, ...] = ()

    # Images
    images_total: int = 0
    images_with_alt: int = 0

    # Links
    internal_links: int = 0
    external_links: int = 0
    internal_urls: tuple[str, ...] = ()
    broken_links: tuple[str, ...] = ()
    links_checked: bool = False

    # Technical
    https: bool = False
    canonical: Optional[str] = None
    viewport: bool = False
    has_robots_txt: bool = False
    has_sitemap: bool = False

    # Structured data
    has_schema_org: bool = False
    schema_types: tuple[str, ...] = ()

    # Content clarity
    paragraph_count: int = 0
    avg_paragraph_length: int = 0
    has_faq: bool = False
    has_definitions: bool = False

    # Authorship
    has_author: bool = False
    has_date: bool = False
    has_last_modified: bool = False

    # AI crawler directives (default-allow)
    allows_gpt_bot: bool = True
    allows_anthropic_bot: bool = True
    allows_perplexity_bot: bool = True

    # Citability
    has_quotes: bool = False
    has_statistics: bool = False
    has_sources: bool = False
    source_domains: tuple[str, ...] = ()

    @property
    def images_without_alt(self) -> int:
        return self.images_total - self.images_with_alt


# =============================================================================
# Category results
# =============================================================================

@dataclass(frozen=True)
class CategoryResult:
    """Score and issues for one rubric category.

    ``issue_codes`` runs parallel to ``issues`` and names the underlying fact
    each issue is about. It is internal and left out of ``to_dict``.
    """

    score: int = 100
    issues: tuple[str, ...] = ()
    issue_codes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = {
            _camel(name): _jsonable(getattr(self, name))
            for name in self.__dataclass_fields__
            if name not in ("score", "issues", "issue_codes")
        }
        data["score"] = self.score
        data["issues"] = list(self.issues)
        return data


@dataclass(frozen=True)
class TitleResult(CategoryResult):
    value: Optional[str] = None
    length: int = 0


@dataclass(frozen=True)
class DescriptionResult(CategoryResult):
    value: Optional[str] = None
    length: int = 0


@dataclass(frozen=True)
class HeadingsResult(CategoryResult):
    h1: tuple[str, ...] = ()
    h2: tuple[str, ...] = ()
    h3: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImagesResult(CategoryResult):
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0


@dataclass(frozen=True)
class LinksResult(CategoryResult):
    internal: int = 0
    external: int = 0
    broken: tuple[str, ...] = ()


@dataclass(frozen=True)
class TechnicalResult(CategoryResult):
    https: bool = False
    canonical: Optional[str] = None
    viewport: bool = False
    robots_txt: bool = False
    sitemap: bool = False


@dataclass(frozen=True)
class StructuredDataResult(CategoryResult):
    has_schema_org: bool = False
    types: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContentClarityResult(CategoryResult):
    avg_paragraph_length: int = 0
    has_faq: bool = False
    has_definitions: bool = False


@dataclass(frozen=True)
class AuthorInfoResult(CategoryResult):
    has_author: bool = False
    has_date: bool = False
    has_last_modified: bool = False


@dataclass(frozen=True)
class AiCrawlerAccessResult(CategoryResult):
    allows_gpt_bot: bool = True
    allows_anthropic_bot: bool = True
    allows_perplexity_bot: bool = True


@dataclass(frozen=True)
class CitabilityResult(CategoryResult):
    has_quotes: bool = False
    has_statistics: bool = False
    has_sources: bool = False


@dataclass(frozen=True)
class SeoResult:
    """The six SEO category blocks."""

    title: TitleResult
    description: DescriptionResult
    headings: HeadingsResult
    images: ImagesResult
    links: LinksResult
    technical: TechnicalResult

    def categories(self) -> dict[str, CategoryResult]:
        """Category blocks keyed by name, in rubric order."""
        return {
            "title": self.title,
            "description": self.description,
            "headings": self.headings,
            "images": self.images,
            "links": self.links,
            "technical": self.technical,
        }

    def to_dict(self) -> dict[str, Any]:
        return {name: block.to_dict() for name, block in self.categories().items()}


@dataclass(frozen=True)
class LlmReadinessResult:
    """The five LLM readiness category blocks."""

    structured_data: StructuredDataResult
    content_clarity: ContentClarityResult
    author_info: AuthorInfoResult
    ai_crawler_access: AiCrawlerAccessResult
    citability: CitabilityResult

    def categories(self) -> dict[str, CategoryResult]:
        """Category blocks keyed by name, in rubric order."""
        return {
            "structured_data": self.structured_data,
            "content_clarity": self.content_clarity,
            "author_info": self.author_info,
            "ai_crawler_access": self.ai_crawler_access,
            "citability": self.citability,
        }

    def to_dict(self) -> dict[str, Any]:
        return {_camel(name): block.to_dict() for name, block in self.categories().items()}


# =============================================================================
# Analysis output
# =============================================================================

@dataclass(frozen=True)
class AnalysisResult:
    """Complete scored analysis of a single page."""

    url: str
    fetched_at: datetime
    seo: SeoResult
    llm_readiness: LlmReadinessResult
    overall_seo_score: int
    overall_llm_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "fetchedAt": self.fetched_at.isoformat(),
            "seo": self.seo.to_dict(),
            "llmReadiness": self.llm_readiness.to_dict(),
            "overallSeoScore": self.overall_seo_score,
            "overallLlmScore": self.overall_llm_score,
        }


@dataclass(frozen=True)
class Suggestion:
    """An actionable improvement backed by an extracted issue."""

    category: SuggestionCategory
    priority: Priority
    title: str
    description: str
    current_value: Optional[str] = None
    suggested_value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "category": self.category.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
        }
        if self.current_value is not None:
            data["currentValue"] = self.current_value
        if self.suggested_value is not None:
            data["suggestedValue"] = self.suggested_value
        return data


@dataclass(frozen=True)
class DiscoveryResult:
    """Pages found on a site, root first."""

    pages: tuple[str, ...]
    source: DiscoverySource
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = {"pages": list(self.pages), "source": self.source.value}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class PageAnalysis:
    """One entry in a multi-page batch: a result or a recorded failure."""

    url: str
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class AnalysisReport:
    """What ``analyze`` hands back: the root page result plus batch extras."""

    result: AnalysisResult
    suggestions: tuple[Suggestion, ...] = ()
    pages: tuple[PageAnalysis, ...] = ()
    discovery: Optional[DiscoveryResult] = None

    @property
    def successful_pages(self) -> list[AnalysisResult]:
        if not self.pages:
            return [self.result]
        return [page.result for page in self.pages if page.result is not None]

    @property
    def average_seo_score(self) -> int:
        return round_half_up_mean([r.overall_seo_score for r in self.successful_pages])

    @property
    def average_llm_score(self) -> int:
        return round_half_up_mean([r.overall_llm_score for r in self.successful_pages])

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "pages": [p.to_dict() for p in self.pages],
            "discovery": self.discovery.to_dict() if self.discovery else None,
            "averageSeoScore": self.average_seo_score,
            "averageLlmScore": self.average_llm_score,
        }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value
