"""
Suggestion Generator

Turns the issues in an AnalysisResult into a prioritized, deduplicated list of
Suggestions. Every suggestion is backed by an issue the scorers raised;
optional generative enrichment may only reword descriptions.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

import toon

from aiseo.config import AnalysisThresholds, default_thresholds
from aiseo.constants import TITLE_PREVIEW_CHARS
from aiseo.llm import GenerativeUnavailable, NullTextProvider, TextProvider
from aiseo.models import (
    AnalysisResult,
    CategoryResult,
    Priority,
    Suggestion,
    SuggestionCategory,
)

logger = logging.getLogger(__name__)


# Category name -> suggestion category
CATEGORY_MAP = {
    "title": SuggestionCategory.SEO,
    "description": SuggestionCategory.SEO,
    "headings": SuggestionCategory.SEO,
    "images": SuggestionCategory.SEO,
    "links": SuggestionCategory.SEO,
    "technical": SuggestionCategory.SEO,
    "structured_data": SuggestionCategory.LLM,
    "author_info": SuggestionCategory.LLM,
    "ai_crawler_access": SuggestionCategory.LLM,
    "content_clarity": SuggestionCategory.CONTENT,
    "citability": SuggestionCategory.CONTENT,
}

# Issue codes that describe the same underlying fact
SHARED_FACTS = {
    "gptbot_blocked": "ai_crawlers_blocked",
    "anthropic_blocked": "ai_crawlers_blocked",
    "perplexity_blocked": "ai_crawlers_blocked",
}

VIEWPORT_TAG = '<meta name="viewport" content="width=device-width, initial-scale=1">'
DATE_PUBLISHED_TAG = '<time datetime="2024-01-15" itemprop="datePublished">January 15, 2024</time>'
DATE_MODIFIED_TAG = '<meta property="article:modified_time" content="2024-01-15T08:00:00+00:00">'


@dataclass(frozen=True)
class Template:
    """Static wording for one issue code."""

    title: str
    description: str
    current: Optional[Callable[[CategoryResult, AnalysisResult], Optional[str]]] = None
    suggested: Optional[Callable[[CategoryResult, AnalysisResult], Optional[str]]] = None


def _title_preview(block, result) -> Optional[str]:
    if block.value and len(block.value) > TITLE_PREVIEW_CHARS:
        return f"{block.value[:TITLE_PREVIEW_CHARS]}..."
    return block.value


TEMPLATES: Dict[str, Template] = {
    # Title
    "title_missing": Template(
        "Add a title tag",
        "Your page is missing a title tag. This is critical for SEO.",
    ),
    "title_empty": Template(
        "Write a title for your page",
        "Your title tag is empty. Search engines show the title as the headline of your result.",
    ),
    "title_short": Template(
        "Extend your title tag",
        "Your title is too short. An optimal title is 50-60 characters.",
        current=lambda block, result: block.value,
    ),
    "title_long": Template(
        "Shorten your title tag",
        "Your title is too long and may be truncated in search results.",
        current=_title_preview,
    ),
    # Description
    "description_missing": Template(
        "Add a meta description",
        "Your page is missing a meta description. This affects click-through rates in search results.",
    ),
    "description_empty": Template(
        "Write a meta description",
        "Your meta description is empty. Summarize the page in 120-160 characters.",
    ),
    "description_short": Template(
        "Extend your meta description",
        "Your meta description is too short. Optimal length is 120-160 characters.",
        current=lambda block, result: block.value,
    ),
    "description_long": Template(
        "Shorten your meta description",
        "Your meta description is too long and will be cut off in search results.",
        current=lambda block, result: block.value,
    ),
    # Headings
    "h1_missing": Template(
        "Add an H1 heading",
        "Your page is missing an H1 heading. Every page should have exactly one H1.",
    ),
    "h1_multiple": Template(
        "Reduce to one H1 heading",
        "Your page has more than one H1 heading. Best practice is to have only one.",
        current=lambda block, result: " | ".join(block.h1),
    ),
    "h2_missing": Template(
        "Add H2 subheadings",
        "Break your content into sections with H2 subheadings so readers and crawlers can scan it.",
    ),
    # Images
    "images_missing_alt": Template(
        "Add alt text to images",
        "Some images are missing alt text. Describe each image for accessibility and image search.",
        current=lambda block, result: f"{block.without_alt} of {block.total} images without alt text",
    ),
    # Links
    "internal_links_missing": Template(
        "Add internal links",
        "Link to related pages on your site so visitors and crawlers can find more of your content.",
    ),
    "links_broken": Template(
        "Fix broken links",
        "Some internal links return errors. Update or remove them.",
        current=lambda block, result: ", ".join(block.broken),
    ),
    # Technical
    "https_missing": Template(
        "Enable HTTPS",
        "Your page is not using HTTPS. This is critical for security and SEO.",
    ),
    "canonical_missing": Template(
        "Add canonical URL",
        "Specify a canonical URL to avoid duplicate content issues.",
        suggested=lambda block, result: f'<link rel="canonical" href="{result.url}">',
    ),
    "viewport_missing": Template(
        "Add viewport meta tag",
        "Your page is missing viewport configuration for mobile devices.",
        suggested=lambda block, result: VIEWPORT_TAG,
    ),
    "robots_txt_missing": Template(
        "Add a robots.txt file",
        "A robots.txt file tells search engines and AI crawlers which parts of the site they may visit.",
        suggested=lambda block, result: "User-agent: *\nAllow: /",
    ),
    "sitemap_missing": Template(
        "Add an XML sitemap",
        "Publish /sitemap.xml listing your pages so search engines can discover them.",
    ),
    # Structured data
    "schema_missing": Template(
        "Add Schema.org markup",
        "Structured data helps AI understand your content better. Consider using JSON-LD format.",
    ),
    "schema_type_generic": Template(
        "Use a more specific schema type",
        "Article, FAQPage, HowTo, Organization, Person or Product markup tells AI assistants what the page is about.",
        current=lambda block, result: ", ".join(block.types) or None,
    ),
    # Content clarity
    "paragraphs_missing": Template(
        "Write your content in paragraphs",
        "No paragraph text was found. AI assistants quote well-formed paragraphs.",
    ),
    "paragraphs_too_long": Template(
        "Shorten your paragraphs",
        "Long paragraphs are hard to scan and quote. Aim for 100-300 characters per paragraph.",
        current=lambda block, result: f"{block.avg_paragraph_length} characters on average",
    ),
    "faq_missing": Template(
        "Add an FAQ section",
        "FAQ sections are excellent for AI assistants to cite. Consider using FAQPage schema.",
    ),
    # Author info
    "author_missing": Template(
        "Add author information",
        "E-E-A-T signals are important. Show who wrote the content.",
    ),
    "date_missing": Template(
        "Add publication date",
        "Timestamps show that the content is current.",
        suggested=lambda block, result: DATE_PUBLISHED_TAG,
    ),
    "modified_missing": Template(
        "Show when content was last updated",
        "A last-updated date tells readers and AI assistants the content is maintained.",
        suggested=lambda block, result: DATE_MODIFIED_TAG,
    ),
    # AI crawler access
    "ai_crawlers_blocked": Template(
        "Review AI crawler rules",
        "Some AI crawlers are blocked. If you want to appear in AI assistants, consider allowing them.",
    ),
    # Citability
    "quotes_missing": Template(
        "Add quotable statements",
        "Short, self-contained statements are easy for AI assistants to quote.",
    ),
    "statistics_missing": Template(
        "Add statistics and data",
        "Numbers and statistics make content more quotable for AI assistants.",
    ),
    "sources_missing": Template(
        "Add sources and references",
        "Link to primary sources to increase credibility.",
    ),
}


def priority_for_score(score: int, thresholds: AnalysisThresholds = default_thresholds) -> Priority:
    """Priority band of a category score: <40 high, 40-69 medium, >=70 low."""
    if score < thresholds.high_priority_below:
        return Priority.HIGH
    if score < thresholds.medium_priority_below:
        return Priority.MEDIUM
    return Priority.LOW


class SuggestionGenerator:
    """Builds suggestions from scored categories."""

    ENRICHMENT_KEY_RE = re.compile(r"^\s*(s\d+)\s*:")

    def __init__(
        self,
        text_provider: Optional[TextProvider] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        self.text_provider = text_provider or NullTextProvider()
        self.thresholds = thresholds or default_thresholds

    def generate(self, result: AnalysisResult, enrich: bool = False) -> List[Suggestion]:
        """Generate the suggestion list for one analysed page.

        Args:
            result: Scored analysis of the page
            enrich: Ask the text provider to reword descriptions

        Returns:
            Suggestions sorted high -> medium -> low, insertion order within a tier
        """
        suggestions = self._from_issues(result)

        if enrich and suggestions:
            suggestions = self.enrich(suggestions, result)

        return sorted(suggestions, key=lambda s: s.priority.rank)

    def _from_issues(self, result: AnalysisResult) -> List[Suggestion]:
        by_fact: Dict[str, Suggestion] = {}

        categories = list(result.seo.categories().items()) + list(
            result.llm_readiness.categories().items()
        )
        for name, block in categories:
            priority = priority_for_score(block.score, self.thresholds)
            for code in block.issue_codes:
                fact = SHARED_FACTS.get(code, code)
                existing = by_fact.get(fact)
                if existing is not None:
                    if priority.rank < existing.priority.rank:
                        by_fact[fact] = replace(existing, priority=priority)
                    continue

                template = TEMPLATES.get(fact)
                if template is None:
                    logger.debug(f"No suggestion template for issue code '{code}'")
                    continue
                by_fact[fact] = Suggestion(
                    category=CATEGORY_MAP[name],
                    priority=priority,
                    title=template.title,
                    description=template.description,
                    current_value=template.current(block, result) if template.current else None,
                    suggested_value=template.suggested(block, result) if template.suggested else None,
                )

        # dicts keep first-insertion order
        return list(by_fact.values())

    def enrich(self, suggestions: List[Suggestion], result: AnalysisResult) -> List[Suggestion]:
        """Reword suggestion descriptions with the text provider.

        Falls back to the given suggestions on any provider or parse failure.
        """
        if not self.text_provider.available:
            logger.info("Generative provider unavailable, using template suggestions")
            return suggestions

        prompt = self._build_prompt(suggestions, result)
        try:
            response = self.text_provider.generate(prompt)
        except GenerativeUnavailable as e:
            logger.warning(f"Generative suggestions unavailable: {e}")
            return suggestions
        except Exception as e:
            logger.warning(f"Generative provider failed, using templates: {e}")
            return suggestions

        rewrites = self._parse_response(response or "")
        if not rewrites:
            logger.warning("Generative response had no usable descriptions, using templates")
            return suggestions

        enriched = []
        for index, suggestion in enumerate(suggestions, start=1):
            description = rewrites.get(f"s{index}")
            if description:
                suggestion = replace(suggestion, description=description)
            enriched.append(suggestion)
        return enriched

    def _build_prompt(self, suggestions: List[Suggestion], result: AnalysisResult) -> str:
        seo = result.seo
        lines = [
            f"- s{i}: {s.title}. {s.description}"
            for i, s in enumerate(suggestions, start=1)
        ]
        return f"""Rewrite the description of each SEO suggestion below for this page.
Make each one concrete and specific to the page. Do not add new suggestions.

URL: {result.url}
SEO Score: {result.overall_seo_score}/100
LLM Readiness: {result.overall_llm_score}/100
Title: {seo.title.value or "Missing"}
Description: {seo.description.value or "Missing"}
H1: {", ".join(seo.headings.h1) or "Missing"}

Suggestions:
{chr(10).join(lines)}

Return your response in TOON format, one line per suggestion you rewrite:
s1: new description for suggestion 1
s2: new description for suggestion 2

Respond ONLY with the TOON lines."""

    def _parse_response(self, response: str) -> Dict[str, str]:
        """Decode `sN: text` TOON lines into {sN: text}."""
        toon_lines = [
            line.strip() for line in response.strip().split("\n")
            if self.ENRICHMENT_KEY_RE.match(line)
        ]
        if not toon_lines:
            return {}

        try:
            decoded = toon.decode("\n".join(toon_lines))
        except Exception as e:
            logger.debug(f"Could not decode generative response: {e}")
            return {}

        if not isinstance(decoded, dict):
            return {}
        return {
            key: value.strip()
            for key, value in decoded.items()
            if isinstance(value, str) and value.strip()
        }


def generate_suggestions(
    result: AnalysisResult,
    text_provider: Optional[TextProvider] = None,
    enrich: bool = False,
) -> List[Suggestion]:
    """Generate suggestions for a scored page."""
    return SuggestionGenerator(text_provider).generate(result, enrich=enrich)
