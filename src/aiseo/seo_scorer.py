"""SEO scorer: maps extracted facts to six category scores plus an overall score."""

from typing import Optional

from aiseo.config import AnalysisThresholds, default_thresholds
from aiseo.constants import (
    BROKEN_LINK_PENALTY_CAP,
    BROKEN_LINK_PENALTY_PER_LINK,
    DESCRIPTION_LONG_PENALTY,
    DESCRIPTION_SHORT_PENALTY,
    IMAGE_ALT_PENALTY_CAP,
    IMAGE_ALT_PENALTY_PER_IMAGE,
    MISSING_H1_PENALTY,
    MISSING_H2_PENALTY,
    MULTIPLE_H1_PENALTY,
    NO_CANONICAL_PENALTY,
    NO_HTTPS_PENALTY,
    NO_INTERNAL_LINKS_PENALTY,
    NO_ROBOTS_TXT_PENALTY,
    NO_SITEMAP_PENALTY,
    NO_VIEWPORT_PENALTY,
    SEO_CATEGORY_WEIGHTS,
    TITLE_LONG_PENALTY,
    TITLE_SHORT_PENALTY,
)
from aiseo.models import (
    DescriptionResult,
    HeadingsResult,
    ImagesResult,
    LinksResult,
    PageFacts,
    SeoResult,
    TechnicalResult,
    TitleResult,
)
from aiseo.scoring import ScoreCard, weighted_score


class SEOScorer:
    """Deterministic point-deduction scoring of traditional SEO signals."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def score(self, facts: PageFacts) -> SeoResult:
        """Score every SEO category for one page."""
        return SeoResult(
            title=self.score_title(facts),
            description=self.score_description(facts),
            headings=self.score_headings(facts),
            images=self.score_images(facts),
            links=self.score_links(facts),
            technical=self.score_technical(facts),
        )

    def score_title(self, facts: PageFacts) -> TitleResult:
        card = ScoreCard()
        value = facts.title
        length = len(value) if value else 0

        if not facts.has_title_tag:
            card.set(0)
            card.flag("title_missing", "No title tag found")
        elif not value:
            card.set(0)
            card.flag("title_empty", "Title tag is empty")
        elif length < self.thresholds.title_min:
            card.deduct(
                TITLE_SHORT_PENALTY, "title_short",
                f"Title is too short ({length} characters, under {self.thresholds.title_min})",
            )
        elif length > self.thresholds.title_max:
            card.deduct(
                TITLE_LONG_PENALTY, "title_long",
                f"Title is too long ({length} characters, over {self.thresholds.title_max})",
            )

        return TitleResult(value=value, length=length, **card.fields())

    def score_description(self, facts: PageFacts) -> DescriptionResult:
        card = ScoreCard()
        value = facts.description
        length = len(value) if value else 0

        if not facts.has_description_tag:
            card.set(0)
            card.flag("description_missing", "No meta description found")
        elif not value:
            card.set(0)
            card.flag("description_empty", "Meta description is empty")
        elif length < self.thresholds.description_min:
            card.deduct(
                DESCRIPTION_SHORT_PENALTY, "description_short",
                f"Meta description is too short ({length} characters, under {self.thresholds.description_min})",
            )
        elif length > self.thresholds.description_max:
            card.deduct(
                DESCRIPTION_LONG_PENALTY, "description_long",
                f"Meta description is too long ({length} characters, over {self.thresholds.description_max})",
            )

        return DescriptionResult(value=value, length=length, **card.fields())

    def score_headings(self, facts: PageFacts) -> HeadingsResult:
        card = ScoreCard()

        if not facts.h1:
            card.deduct(MISSING_H1_PENALTY, "h1_missing", "No H1 heading found")
        elif len(facts.h1) > 1:
            card.deduct(
                MULTIPLE_H1_PENALTY, "h1_multiple",
                f"Multiple H1 headings found ({len(facts.h1)})",
            )

        if not facts.h2:
            card.deduct(MISSING_H2_PENALTY, "h2_missing", "No H2 headings found")

        return HeadingsResult(h1=facts.h1, h2=facts.h2, h3=facts.h3, **card.fields())

    def score_images(self, facts: PageFacts) -> ImagesResult:
        card = ScoreCard()
        total = facts.images_total
        without_alt = facts.images_without_alt

        if total > 0 and without_alt > 0:
            percentage = (200 * without_alt + total) // (2 * total)
            card.deduct(
                min(IMAGE_ALT_PENALTY_CAP, without_alt * IMAGE_ALT_PENALTY_PER_IMAGE),
                "images_missing_alt",
                f"{without_alt} of {total} images missing alt text ({percentage}%)",
            )

        return ImagesResult(
            total=total, with_alt=facts.images_with_alt, without_alt=without_alt, **card.fields()
        )

    def score_links(self, facts: PageFacts) -> LinksResult:
        card = ScoreCard()

        if facts.internal_links == 0:
            card.deduct(NO_INTERNAL_LINKS_PENALTY, "internal_links_missing", "No internal links found")

        if facts.broken_links:
            count = len(facts.broken_links)
            card.deduct(
                min(BROKEN_LINK_PENALTY_CAP, count * BROKEN_LINK_PENALTY_PER_LINK),
                "links_broken",
                f"{count} broken internal link{'s' if count != 1 else ''} found",
            )

        return LinksResult(
            internal=facts.internal_links,
            external=facts.external_links,
            broken=facts.broken_links,
            **card.fields(),
        )

    def score_technical(self, facts: PageFacts) -> TechnicalResult:
        card = ScoreCard()

        if not facts.https:
            card.deduct(NO_HTTPS_PENALTY, "https_missing", "Page is not using HTTPS")
        if not facts.canonical:
            card.deduct(NO_CANONICAL_PENALTY, "canonical_missing", "No canonical URL specified")
        if not facts.viewport:
            card.deduct(
                NO_VIEWPORT_PENALTY, "viewport_missing", "No viewport meta tag (mobile optimization)"
            )
        if not facts.has_robots_txt:
            card.deduct(NO_ROBOTS_TXT_PENALTY, "robots_txt_missing", "No robots.txt found")
        if not facts.has_sitemap:
            card.deduct(NO_SITEMAP_PENALTY, "sitemap_missing", "No sitemap.xml found")

        return TechnicalResult(
            https=facts.https,
            canonical=facts.canonical,
            viewport=facts.viewport,
            robots_txt=facts.has_robots_txt,
            sitemap=facts.has_sitemap,
            **card.fields(),
        )


def calculate_overall_seo_score(result: SeoResult) -> int:
    """Weighted mean of the six SEO category scores (round half up)."""
    scores = {name: block.score for name, block in result.categories().items()}
    return weighted_score(scores, SEO_CATEGORY_WEIGHTS)
