"""Tests for configuration and thresholds."""

import json
import logging

from aiseo.config import AnalysisThresholds, Config, normalize_llm_weights
from aiseo.constants import DEFAULT_USER_AGENT, LLM_CATEGORY_WEIGHTS
from aiseo.llm_scorer import LLMReadinessScorer, calculate_overall_llm_score
from conftest import make_facts


class TestConfig:
    """Test cases for Config."""

    def test_defaults(self):
        """Test defaults match the fetcher constants."""
        config = Config()

        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.timeout == 10
        assert config.max_redirects == 5
        assert config.include_subdomains is False

    def test_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("LLM_PROVIDER", "ollama")
        monkeypatch.setenv("OLLAMA_MODEL", "mistral")
        monkeypatch.setenv("TIMEOUT", "2.5")
        monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "8")
        monkeypatch.setenv("INCLUDE_SUBDOMAINS", "1")

        config = Config.from_env()

        assert config.llm_provider == "ollama"
        assert config.ollama_model == "mistral"
        assert config.timeout == 2.5
        assert config.max_concurrent_requests == 8
        assert config.include_subdomains is True


class TestAnalysisThresholds:
    """Test cases for AnalysisThresholds."""

    def test_defaults(self):
        """Test the default rubric bands."""
        thresholds = AnalysisThresholds()

        assert (thresholds.title_min, thresholds.title_max) == (30, 60)
        assert (thresholds.description_min, thresholds.description_max) == (70, 160)
        assert thresholds.llm_weights == LLM_CATEGORY_WEIGHTS
        assert sum(thresholds.llm_weights.values()) == 100

    def test_weights_are_not_shared(self):
        """Test each instance owns its weight dict."""
        first = AnalysisThresholds()
        first.llm_weights["citability"] = 0

        assert AnalysisThresholds().llm_weights["citability"] == 15

    def test_from_env(self, monkeypatch):
        """Test AISEO_THRESHOLD_* overrides, ignoring bad values."""
        monkeypatch.setenv("AISEO_THRESHOLD_TITLE_MAX", "65")
        monkeypatch.setenv("AISEO_THRESHOLD_TITLE_MIN", "not-a-number")
        monkeypatch.setenv("AISEO_THRESHOLD_LLM_WEIGHTS", json.dumps({"structured_data": 100}))

        thresholds = AnalysisThresholds.from_env()

        assert thresholds.title_max == 65
        assert thresholds.title_min == 30
        assert thresholds.llm_weights == {**LLM_CATEGORY_WEIGHTS, "structured_data": 100}

    def test_file_round_trip(self, tmp_path):
        """Test save_to_file and from_file."""
        path = tmp_path / "thresholds.json"
        AnalysisThresholds(description_max=150).save_to_file(str(path))

        loaded = AnalysisThresholds.from_file(str(path))

        assert loaded.description_max == 150
        assert json.loads(path.read_text())["thresholds"]["description_max"] == 150

    def test_from_missing_file(self, tmp_path):
        """Test a missing file gives defaults."""
        assert AnalysisThresholds.from_file(str(tmp_path / "nope.json")) == AnalysisThresholds()


class TestLlmWeights:
    """Validation of user-supplied LLM category weights."""

    def test_partial_map_merges_defaults(self):
        """Test missing categories keep their default weight."""
        thresholds = AnalysisThresholds(llm_weights={"citability": 50})

        assert thresholds.llm_weights == {**LLM_CATEGORY_WEIGHTS, "citability": 50}

    def test_partial_map_scores(self):
        """Test the overall LLM score works with a partial map."""
        thresholds = AnalysisThresholds(llm_weights={"citability": 50})
        result = LLMReadinessScorer(thresholds).score(make_facts())

        assert 0 <= calculate_overall_llm_score(result, thresholds.llm_weights) <= 100

    def test_negative_and_non_integer_rejected(self, caplog):
        """Test bad weights are dropped with a warning."""
        with caplog.at_level(logging.WARNING, logger="aiseo.config"):
            weights = normalize_llm_weights({"citability": -5, "author_info": "high", "bogus": 10})

        assert weights == LLM_CATEGORY_WEIGHTS
        assert "citability" in caplog.text
        assert "bogus" in caplog.text

    def test_non_dict_from_env(self, monkeypatch, caplog):
        """Test a JSON scalar falls back to the default weights."""
        monkeypatch.setenv("AISEO_THRESHOLD_LLM_WEIGHTS", "5")

        with caplog.at_level(logging.WARNING, logger="aiseo.config"):
            thresholds = AnalysisThresholds.from_env()

        assert thresholds.llm_weights == LLM_CATEGORY_WEIGHTS
        assert "expected a JSON object" in caplog.text

    def test_from_file_validates(self, tmp_path):
        """Test weights read from a file are merged too."""
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({"thresholds": {"llm_weights": {"structured_data": 40}}}))

        thresholds = AnalysisThresholds.from_file(str(path))

        assert thresholds.llm_weights == {**LLM_CATEGORY_WEIGHTS, "structured_data": 40}
