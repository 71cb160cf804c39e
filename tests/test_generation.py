"""
Unit Tests for text generation

ChatOpenAIGenerator is tested with a mocked ChatOpenAI; the factory is
tested for provider selection and configuration errors.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from thesis_search.config import SearchConfig
from thesis_search.core import TextGenerator
from thesis_search.core.errors import ConfigurationError, GenerationServiceError
from thesis_search.generation import (
    ChatOpenAIGenerator,
    MockTextGenerator,
    get_text_generator,
)


@pytest.fixture
def llm():
    llm = MagicMock()
    llm.model_name = "gpt-4o-mini"
    llm.bind.return_value.invoke.return_value = SimpleNamespace(content="Generated text")
    return llm


class TestChatOpenAIGenerator:
    def test_satisfies_protocol(self, llm):
        assert isinstance(ChatOpenAIGenerator(llm), TextGenerator)

    def test_binds_sampling_settings_per_call(self, llm):
        generator = ChatOpenAIGenerator(llm)

        assert generator.generate("prompt", temperature=0.1, max_tokens=60) == "Generated text"
        llm.bind.assert_called_once_with(temperature=0.1, max_tokens=60)
        llm.bind.return_value.invoke.assert_called_once_with("prompt")

    def test_joins_content_blocks(self, llm):
        llm.bind.return_value.invoke.return_value = SimpleNamespace(
            content=[{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}]
        )

        assert ChatOpenAIGenerator(llm).generate("prompt") == "Hello world"

    def test_failure_becomes_service_error(self, llm):
        llm.bind.return_value.invoke.side_effect = TimeoutError("timed out")

        with pytest.raises(GenerationServiceError):
            ChatOpenAIGenerator(llm).generate("prompt")

    def test_model_name(self, llm):
        assert ChatOpenAIGenerator(llm, provider="groq").model == "gpt-4o-mini"

    def test_check_health_uses_tiny_completion(self, llm):
        assert ChatOpenAIGenerator(llm).check_health() is True
        llm.bind.assert_called_once_with(temperature=0, max_tokens=5)

    def test_check_health_reports_failure_without_raising(self, llm):
        llm.bind.return_value.invoke.side_effect = ConnectionError("connection refused")

        assert ChatOpenAIGenerator(llm).check_health() is False


class TestMockTextGenerator:
    def test_is_always_healthy(self):
        assert MockTextGenerator([RuntimeError("unused")]).check_health() is True

    def test_scripted_then_default(self):
        generator = MockTextGenerator(["one"], default="fallback")

        assert generator.generate("a") == "one"
        assert generator.generate("b") == "fallback"
        assert [c["prompt"] for c in generator.calls] == ["a", "b"]

    def test_raises_scripted_exception(self):
        generator = MockTextGenerator([GenerationServiceError("down")])

        with pytest.raises(GenerationServiceError):
            generator.generate("a")


class TestGetTextGenerator:
    def test_mock(self):
        assert isinstance(get_text_generator(SearchConfig(llm_provider="mock")), MockTextGenerator)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            get_text_generator(SearchConfig(llm_provider="anthropic-direct"))

    def test_groq_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            get_text_generator(SearchConfig(llm_provider="groq"))

    def test_groq_profile(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

        generator = get_text_generator(SearchConfig(llm_provider="groq"))

        assert isinstance(generator, ChatOpenAIGenerator)
        assert generator.provider == "groq"
        assert generator.model == "llama-3.3-70b-versatile"

    def test_ollama_needs_no_key(self):
        generator = get_text_generator(
            SearchConfig(llm_provider="ollama", llm_model="mistral", request_timeout_s=5)
        )

        assert generator.provider == "ollama"
        assert generator.model == "mistral"
