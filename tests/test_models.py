"""Tests for result models and serialisation."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from aiseo.models import (
    AnalysisReport,
    FetchResult,
    PageAnalysis,
    Priority,
    TitleResult,
)
from conftest import make_facts, make_llm_ready_facts, score_facts


class TestModels:
    """Test cases for the data models."""

    def test_results_are_immutable(self):
        """Test category results cannot be mutated."""
        block = TitleResult(score=70, value="Hi", length=2)

        with pytest.raises(FrozenInstanceError):
            block.score = 100

    def test_category_to_dict_hides_issue_codes(self):
        """Test issue codes stay internal."""
        result = score_facts(make_facts(title="t" * 20))
        data = result.seo.title.to_dict()

        assert data == {
            "value": "t" * 20,
            "length": 20,
            "score": 70,
            "issues": ["Title is too short (20 characters, under 30)"],
        }

    def test_analysis_result_to_dict(self):
        """Test top-level keys and timestamp format."""
        data = score_facts(make_llm_ready_facts()).to_dict()

        assert data["url"] == "https://example.com/"
        assert data["fetchedAt"] == datetime(2024, 1, 15, tzinfo=timezone.utc).isoformat()
        assert set(data["seo"]) == {"title", "description", "headings", "images", "links", "technical"}
        assert set(data["llmReadiness"]) == {
            "structuredData", "contentClarity", "authorInfo", "aiCrawlerAccess", "citability",
        }
        assert data["llmReadiness"]["structuredData"]["types"] == ["Article"]

    def test_priority_rank(self):
        """Test high sorts before low."""
        assert Priority.HIGH.rank < Priority.MEDIUM.rank < Priority.LOW.rank

    def test_fetch_result_redirect_flag(self):
        """Test was_redirected."""
        assert FetchResult("https://a.com/", "https://a.com/", "", 200).was_redirected is False
        assert FetchResult("http://a.com/", "https://a.com/", "", 200).was_redirected is True


class TestAnalysisReport:
    """Test cases for AnalysisReport."""

    def test_single_page_averages(self):
        """Test averages of a single-page report equal its scores."""
        result = score_facts(make_facts())
        report = AnalysisReport(result=result)

        assert report.average_seo_score == result.overall_seo_score
        assert report.average_llm_score == result.overall_llm_score

    def test_failed_pages_excluded(self):
        """Test failed pages are left out of the averages."""
        good = score_facts(make_llm_ready_facts())
        weaker = score_facts(make_facts(title="t" * 20))
        report = AnalysisReport(
            result=good,
            pages=(
                PageAnalysis(url="https://example.com/", result=good),
                PageAnalysis(url="https://example.com/a", result=weaker),
                PageAnalysis(url="https://example.com/b", error="timeout: Request timeout after 10s"),
            ),
        )

        assert report.average_seo_score == 97
        assert report.to_dict()["pages"][2] == {
            "url": "https://example.com/b",
            "success": False,
            "result": None,
            "error": "timeout: Request timeout after 10s",
        }
