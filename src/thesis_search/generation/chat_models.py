"""
Text generation gateway.

One production implementation covers every supported backend because
OpenAI, Groq and Ollama all expose OpenAI-compatible chat endpoints; a
provider profile picks the base URL, the API key variable and the default
model. Callers depend only on the TextGenerator protocol.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from langchain_openai import ChatOpenAI

from thesis_search.core.errors import ConfigurationError, GenerationServiceError
from thesis_search.core.protocols import TextGenerator
from thesis_search.observability import generation_attributes, get_tracer

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PROVIDER PROFILES
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderProfile:
    name: str
    default_model: str
    api_key_env: str | None
    base_url: str | None = None


PROVIDERS = {
    "openai": ProviderProfile("openai", "gpt-4o-mini", "OPENAI_API_KEY"),
    "groq": ProviderProfile(
        "groq", "llama-3.3-70b-versatile", "GROQ_API_KEY", "https://api.groq.com/openai/v1"
    ),
    # base_url is filled from OLLAMA_BASE_URL at build time
    "ollama": ProviderProfile("ollama", "llama3.2", None),
}


# ---------------------------------------------------------------------------
# CHAT MODEL GENERATOR (Production)
# ---------------------------------------------------------------------------


class ChatOpenAIGenerator:
    """
    TextGenerator backed by langchain-openai's ChatOpenAI.

    Temperature and max tokens are bound per call, so one instance serves
    the rewriter (cold, short), the answer step (warmer, longer) and
    summaries. Failures and timeouts surface as GenerationServiceError.
    """

    def __init__(self, llm: ChatOpenAI, provider: str = "openai"):
        self._llm = llm
        self.provider = provider

    @property
    def model(self) -> str:
        return self._llm.model_name

    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        attrs = generation_attributes(self.model, temperature, max_tokens, system=self.provider)
        with get_tracer().start_span("generation.generate", attributes=attrs) as span:
            try:
                response = self._llm.bind(
                    temperature=temperature, max_tokens=max_tokens
                ).invoke(prompt)
            except Exception as e:
                logger.error(f"Error generating text: {e}")
                span.fail(e)
                raise GenerationServiceError(f"Text generation failed: {e}") from e

        content = response.content
        if not isinstance(content, str):
            # Some providers return content blocks
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        return content

    def check_health(self) -> bool:
        """Tiny completion against the backend. Never raises."""
        try:
            self._llm.bind(temperature=0, max_tokens=5).invoke("Hello")
        except Exception as e:
            logger.error(f"AI service health check failed ({self.provider}): {e}")
            return False
        return True


# ---------------------------------------------------------------------------
# MOCK GENERATOR (Testing)
# ---------------------------------------------------------------------------


class MockTextGenerator:
    """
    Scripted TextGenerator for tests.

    Each call pops the next item of `responses`; an Exception item is
    raised instead of returned. When the script runs out, `default` is
    returned. Every call is recorded in `calls`.
    """

    def __init__(self, responses: Iterable[str | Exception] = (), default: str = "Mock answer."):
        self._responses = list(responses)
        self.default = default
        self.calls: list[dict] = []

    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self._responses:
            item = self._responses.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return self.default

    def check_health(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# FACTORY
# ---------------------------------------------------------------------------


def get_text_generator(config: SearchConfig | None = None) -> TextGenerator:
    """
    Factory function to get the configured text generator.

    Raises:
        ConfigurationError: unknown provider or missing API key
    """
    from thesis_search.config import get_config

    config = config or get_config()
    provider = config.llm_provider

    if provider == "mock":
        return MockTextGenerator()

    profile = PROVIDERS.get(provider)
    if profile is None:
        raise ConfigurationError(f"Unknown LLM provider: {provider}")

    if profile.api_key_env:
        api_key = os.environ.get(profile.api_key_env)
        if not api_key:
            raise ConfigurationError(f"{profile.api_key_env} is required for provider {provider}")
    else:
        api_key = "ollama"  # required by the SDK, ignored by Ollama

    base_url = profile.base_url
    if provider == "ollama":
        base_url = f"{config.ollama_base_url.rstrip('/')}/v1"

    model = config.llm_model or profile.default_model
    logger.info(f"Using AI provider: {provider} ({model})")

    llm = ChatOpenAI(
        model=model,
        api_key=api_key,
        base_url=base_url,
        timeout=config.request_timeout_s,
        max_retries=0,
    )
    return ChatOpenAIGenerator(llm, provider=provider)
