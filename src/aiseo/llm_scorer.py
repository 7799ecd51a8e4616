"""
LLM Readiness Scorer

Scores how well a page serves answer engines and LLMs across five categories:
structured data, content clarity, author info, AI crawler access and
citability. Structured data, clarity, authorship and citability accrue points
from a base; crawler access deducts from 100.
"""

from typing import Mapping, Optional

from aiseo.config import AnalysisThresholds, default_thresholds
from aiseo.constants import (
    AI_CRAWLER_BLOCKED_PENALTY,
    AUTHOR_BASE_SCORE,
    AUTHOR_BYLINE_BONUS,
    AUTHOR_DATE_BONUS,
    AUTHOR_MODIFIED_BONUS,
    CITABILITY_BASE_SCORE,
    CITABILITY_QUOTES_BONUS,
    CITABILITY_SOURCES_BONUS,
    CITABILITY_STATISTICS_BONUS,
    CLARITY_BASE_SCORE,
    CLARITY_DEFINITIONS_BONUS,
    CLARITY_FAQ_BONUS,
    CLARITY_IDEAL_PARAGRAPH_BONUS,
    CLARITY_LONG_PARAGRAPH_PENALTY,
    CLARITY_NO_PARAGRAPHS_PENALTY,
    LLM_CATEGORY_WEIGHTS,
    STRUCTURED_DATA_PRESENT_SCORE,
    USEFUL_SCHEMA_TYPE_BONUS,
    USEFUL_SCHEMA_TYPES,
)
from aiseo.models import (
    AiCrawlerAccessResult,
    AuthorInfoResult,
    CitabilityResult,
    ContentClarityResult,
    LlmReadinessResult,
    PageFacts,
    StructuredDataResult,
)
from aiseo.scoring import ScoreCard, weighted_score


class LLMReadinessScorer:
    """Deterministic scoring of LLM / answer-engine readiness signals."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def score(self, facts: PageFacts) -> LlmReadinessResult:
        """Score every LLM readiness category for one page."""
        return LlmReadinessResult(
            structured_data=self.score_structured_data(facts),
            content_clarity=self.score_content_clarity(facts),
            author_info=self.score_author_info(facts),
            ai_crawler_access=self.score_ai_crawler_access(facts),
            citability=self.score_citability(facts),
        )

    def score_structured_data(self, facts: PageFacts) -> StructuredDataResult:
        card = ScoreCard(start=0)

        if not facts.has_schema_org:
            card.flag("schema_missing", "No Schema.org markup found (JSON-LD or microdata)")
        else:
            card.set(STRUCTURED_DATA_PRESENT_SCORE)
            if any(t in USEFUL_SCHEMA_TYPES for t in facts.schema_types):
                card.add(USEFUL_SCHEMA_TYPE_BONUS)
            else:
                card.flag(
                    "schema_type_generic",
                    "Consider adding Article, FAQPage or another relevant schema type",
                )

        return StructuredDataResult(
            has_schema_org=facts.has_schema_org, types=facts.schema_types, **card.fields()
        )

    def score_content_clarity(self, facts: PageFacts) -> ContentClarityResult:
        card = ScoreCard(start=CLARITY_BASE_SCORE)
        avg = facts.avg_paragraph_length
        t = self.thresholds

        # Ideal average paragraph: 100-300 characters
        if avg > 0:
            if t.paragraph_ideal_min <= avg <= t.paragraph_ideal_max:
                card.add(CLARITY_IDEAL_PARAGRAPH_BONUS)
            elif avg > t.paragraph_too_long:
                card.deduct(
                    CLARITY_LONG_PARAGRAPH_PENALTY, "paragraphs_too_long",
                    f"Paragraphs are too long on average ({avg} characters) - split them up for readability",
                )
        else:
            card.deduct(CLARITY_NO_PARAGRAPHS_PENALTY, "paragraphs_missing", "No text paragraphs found")

        if facts.has_faq:
            card.add(CLARITY_FAQ_BONUS)
        else:
            card.flag("faq_missing", "No FAQ section found - consider adding frequently asked questions")

        if facts.has_definitions:
            card.add(CLARITY_DEFINITIONS_BONUS)

        return ContentClarityResult(
            avg_paragraph_length=avg,
            has_faq=facts.has_faq,
            has_definitions=facts.has_definitions,
            **card.fields(),
        )

    def score_author_info(self, facts: PageFacts) -> AuthorInfoResult:
        card = ScoreCard(start=AUTHOR_BASE_SCORE)

        if facts.has_author:
            card.add(AUTHOR_BYLINE_BONUS)
        else:
            card.flag("author_missing", "No author information found (important for E-E-A-T)")

        if facts.has_date:
            card.add(AUTHOR_DATE_BONUS)
        else:
            card.flag("date_missing", "No publication date found")

        if facts.has_last_modified:
            card.add(AUTHOR_MODIFIED_BONUS)
        else:
            card.flag("modified_missing", "No last-updated date found")

        return AuthorInfoResult(
            has_author=facts.has_author,
            has_date=facts.has_date,
            has_last_modified=facts.has_last_modified,
            **card.fields(),
        )

    def score_ai_crawler_access(self, facts: PageFacts) -> AiCrawlerAccessResult:
        card = ScoreCard()

        if not facts.allows_gpt_bot:
            card.deduct(AI_CRAWLER_BLOCKED_PENALTY, "gptbot_blocked", "GPTBot is blocked in robots.txt")
        if not facts.allows_anthropic_bot:
            card.deduct(
                AI_CRAWLER_BLOCKED_PENALTY, "anthropic_blocked",
                "Anthropic/Claude is blocked in robots.txt",
            )
        if not facts.allows_perplexity_bot:
            card.deduct(
                AI_CRAWLER_BLOCKED_PENALTY, "perplexity_blocked",
                "PerplexityBot is blocked in robots.txt",
            )

        if not card.issues and not facts.has_robots_txt:
            card.flag(
                "robots_txt_missing",
                "No robots.txt - AI crawlers have full access (default)",
            )

        return AiCrawlerAccessResult(
            allows_gpt_bot=facts.allows_gpt_bot,
            allows_anthropic_bot=facts.allows_anthropic_bot,
            allows_perplexity_bot=facts.allows_perplexity_bot,
            **card.fields(),
        )

    def score_citability(self, facts: PageFacts) -> CitabilityResult:
        card = ScoreCard(start=CITABILITY_BASE_SCORE)

        if facts.has_quotes:
            card.add(CITABILITY_QUOTES_BONUS)
        else:
            card.flag("quotes_missing", "No quotes found - consider adding quotable statements")

        if facts.has_statistics:
            card.add(CITABILITY_STATISTICS_BONUS)
        else:
            card.flag("statistics_missing", "No statistics or data found - numbers increase credibility")

        if facts.has_sources:
            card.add(CITABILITY_SOURCES_BONUS)
        else:
            card.flag(
                "sources_missing",
                "No visible sources - link to primary sources for higher credibility",
            )

        return CitabilityResult(
            has_quotes=facts.has_quotes,
            has_statistics=facts.has_statistics,
            has_sources=facts.has_sources,
            **card.fields(),
        )


def calculate_overall_llm_score(
    result: LlmReadinessResult, weights: Optional[Mapping[str, int]] = None
) -> int:
    """Weighted mean of the five LLM readiness category scores (round half up)."""
    scores = {name: block.score for name, block in result.categories().items()}
    return weighted_score(scores, {**LLM_CATEGORY_WEIGHTS, **(weights or {})})
