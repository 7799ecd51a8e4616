"""Generative text providers used to enrich suggestion descriptions."""

from abc import ABC, abstractmethod
from typing import List, Optional
import os
import time
import logging

import requests

logger = logging.getLogger(__name__)


class GenerativeUnavailable(Exception):
    """Raised when no generative provider can serve a prompt."""


class TextProvider(ABC):
    """Anything that turns a prompt into text."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a completion for prompt.

        Raises:
            GenerativeUnavailable: if the provider cannot answer
        """

    @property
    def available(self) -> bool:
        return True


class NullTextProvider(TextProvider):
    """Provider used when generative suggestions are not configured."""

    def generate(self, prompt: str) -> str:
        raise GenerativeUnavailable("No generative provider configured")

    @property
    def available(self) -> bool:
        return False


class LLMClient(TextProvider):
    """Hosted LLM provider (OpenAI or Anthropic)."""

    SYSTEM_PROMPT = "You are an expert SEO analyst."

    # Errors that retrying will not fix
    NON_RETRYABLE = (
        'invalid api key',
        'authentication',
        'unauthorized',
        'invalid_api_key',
        'model not found',
        'invalid model',
    )

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        provider: str = "openai",
        max_tokens: int = 1024,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        backoff_factor: float = 2.0,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for the provider (falls back to LLM_API_KEY)
            model: Model name to use
            provider: "openai" or "anthropic"
            max_tokens: Maximum tokens in a response
            max_retries: Retry attempts for transient failures
            retry_delay: Initial delay between retries in seconds
            backoff_factor: Multiplier for the delay after each retry
        """
        self.api_key = api_key or os.getenv("LLM_API_KEY")
        self.model = model
        self.provider = provider
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor

        if not self.api_key:
            raise ValueError(
                "API key must be provided or set in LLM_API_KEY environment variable"
            )

    def generate(self, prompt: str) -> str:
        try:
            return self._call_llm(prompt)
        except GenerativeUnavailable:
            raise
        except Exception as e:
            raise GenerativeUnavailable(f"{self.provider} request failed: {e}") from e

    def _call_llm(self, prompt: str) -> str:
        """Call the provider with exponential backoff on transient failures.

        Auth and model errors are raised immediately.
        """
        last_exception = None
        current_delay = self.retry_delay

        for attempt in range(self.max_retries + 1):
            try:
                if self.provider == "openai":
                    return self._call_openai(prompt)
                elif self.provider == "anthropic":
                    return self._call_anthropic(prompt)
                else:
                    raise GenerativeUnavailable(f"Unsupported provider: {self.provider}")

            except GenerativeUnavailable:
                raise
            except Exception as e:
                last_exception = e
                error_str = str(e).lower()

                if any(err in error_str for err in self.NON_RETRYABLE):
                    logger.error(f"Non-retryable LLM error: {e}")
                    raise

                if attempt < self.max_retries:
                    logger.warning(
                        f"LLM call failed (attempt {attempt + 1}/{self.max_retries + 1}): {e}. "
                        f"Retrying in {current_delay:.1f}s..."
                    )
                    time.sleep(current_delay)
                    current_delay *= self.backoff_factor
                else:
                    logger.error(f"LLM call failed after {self.max_retries + 1} attempts: {e}")

        raise last_exception

    def _call_openai(self, prompt: str) -> str:
        try:
            import openai
        except ImportError:
            raise GenerativeUnavailable(
                "openai package not installed. Install with: pip install openai"
            )

        client = openai.OpenAI(api_key=self.api_key)
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.3,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    def _call_anthropic(self, prompt: str) -> str:
        try:
            import anthropic
        except ImportError:
            raise GenerativeUnavailable(
                "anthropic package not installed. Install with: pip install anthropic"
            )

        client = anthropic.Anthropic(api_key=self.api_key)
        response = client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=self.SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text


class OllamaClient(TextProvider):
    """Local Ollama server provider."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def available(self) -> bool:
        """Whether the Ollama server answers on /api/tags."""
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
            return response.ok
        except requests.RequestException:
            return False

    def list_models(self) -> List[str]:
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()
            return [m["name"] for m in response.json().get("models", []) if "name" in m]
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Could not list Ollama models: {e}")
            return []

    def generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.7, "top_p": 0.9},
        }
        try:
            response = self.session.post(
                f"{self.base_url}/api/generate", json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json().get("response", "")
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Ollama request failed: {e}")
            raise GenerativeUnavailable(f"Ollama request failed: {e}") from e


def create_text_provider(config) -> TextProvider:
    """Build the provider named by config.llm_provider.

    Misconfiguration (unknown provider, missing API key) yields a
    NullTextProvider so analysis still completes with template suggestions.
    """
    provider = (config.llm_provider or "none").lower()

    if provider in ("openai", "anthropic"):
        try:
            return LLMClient(
                api_key=config.llm_api_key, model=config.llm_model, provider=provider
            )
        except ValueError as e:
            logger.warning(f"Generative suggestions disabled: {e}")
            return NullTextProvider()

    if provider == "ollama":
        return OllamaClient(base_url=config.ollama_url, model=config.ollama_model)

    if provider != "none":
        logger.warning(f"Unknown LLM provider '{provider}', generative suggestions disabled")
    return NullTextProvider()
