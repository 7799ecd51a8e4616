from dotenv import load_dotenv
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
import json
import logging
import os

from aiseo.constants import (
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HIGH_PRIORITY_BELOW,
    LLM_CATEGORY_WEIGHTS,
    MEDIUM_PRIORITY_BELOW,
)

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    # Generative suggestion provider: openai, anthropic, ollama or none
    LLM_API_KEY = os.getenv("LLM_API_KEY")
    LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai")

    OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
    OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2")

    USER_AGENT = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)


settings = Settings()


def normalize_llm_weights(weights) -> dict:
    """Merge user LLM category weights over the defaults.

    Non-dict values, unknown categories and weights that are not
    non-negative integers are ignored with a warning.
    """
    merged = dict(LLM_CATEGORY_WEIGHTS)
    if not isinstance(weights, dict):
        logger.warning(f"Ignoring llm_weights {weights!r}: expected a JSON object")
        return merged

    for name, value in weights.items():
        if name not in merged:
            logger.warning(f"Ignoring unknown llm_weights category {name!r}")
        elif isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning(
                f"Ignoring llm_weights[{name!r}]={value!r}: expected a non-negative integer"
            )
        else:
            merged[name] = value
    return merged


@dataclass
class Config:
    """Configuration for the analysis engine."""
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_provider: str = "openai"
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS
    include_subdomains: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        return cls(
            llm_api_key=os.getenv("LLM_API_KEY"),
            llm_model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            ollama_url=os.getenv("OLLAMA_URL", "http://localhost:11434"),
            ollama_model=os.getenv("OLLAMA_MODEL", "llama3.2"),
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            timeout=float(os.getenv("TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))),
            max_redirects=int(os.getenv("MAX_REDIRECTS", str(DEFAULT_MAX_REDIRECTS))),
            max_concurrent_requests=int(
                os.getenv("MAX_CONCURRENT_REQUESTS", str(DEFAULT_MAX_CONCURRENT_REQUESTS))
            ),
            include_subdomains=os.getenv("INCLUDE_SUBDOMAINS", "0") == "1",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for the SEO and LLM readiness rubrics."""

    # Title / description lengths (characters, inclusive bounds)
    title_min: int = 30
    title_max: int = 60
    description_min: int = 70
    description_max: int = 160

    # Average paragraph length bands (characters)
    paragraph_ideal_min: int = 100
    paragraph_ideal_max: int = 300
    paragraph_too_long: int = 500

    # Suggestion priority bands
    high_priority_below: int = HIGH_PRIORITY_BELOW
    medium_priority_below: int = MEDIUM_PRIORITY_BELOW

    # Percent weights for overallLlmScore
    llm_weights: dict = field(default_factory=lambda: dict(LLM_CATEGORY_WEIGHTS))

    def __post_init__(self):
        self.llm_weights = normalize_llm_weights(self.llm_weights)

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with AISEO_THRESHOLD_
        e.g., AISEO_THRESHOLD_TITLE_MAX=65

        Returns:
            AnalysisThresholds with values from environment
        """
        thresholds = cls()
        prefix = "AISEO_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                field_type = thresholds.__dataclass_fields__[field_name].type
                try:
                    if field_type in (int, "int"):
                        setattr(thresholds, field_name, int(env_value))
                    elif field_type in (dict, "dict"):
                        setattr(thresholds, field_name, json.loads(env_value))
                except ValueError:
                    pass  # Keep default if conversion fails

        thresholds.llm_weights = normalize_llm_weights(thresholds.llm_weights)
        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            AnalysisThresholds with values from file
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                setattr(thresholds, field_name, threshold_config[field_name])

        thresholds.llm_weights = normalize_llm_weights(thresholds.llm_weights)
        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary.

        Returns:
            Dictionary of all threshold values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }

    def save_to_file(self, path: str) -> None:
        """Save current thresholds to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)


# Global default thresholds instance
default_thresholds = AnalysisThresholds()
