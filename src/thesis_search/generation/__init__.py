"""
Generation module - text generation through a provider-agnostic gateway.

1. Protocol (TextGenerator) defines the interface
2. Production implementation (ChatOpenAIGenerator, any OpenAI-compatible provider)
3. Test double (MockTextGenerator)
4. Factory function (get_text_generator)
"""

from thesis_search.generation.chat_models import (
    PROVIDERS,
    ProviderProfile,
    ChatOpenAIGenerator,
    MockTextGenerator,
    get_text_generator,
)

__all__ = [
    "PROVIDERS",
    "ProviderProfile",
    "ChatOpenAIGenerator",
    "MockTextGenerator",
    "get_text_generator",
]
