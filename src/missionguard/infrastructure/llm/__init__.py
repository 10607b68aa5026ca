"""
LLM adapters for mission agents.
"""

from missionguard.config import LLMProviderConfig
from missionguard.domain.interfaces import LLMProviderInterface
from missionguard.infrastructure.llm.fallback import FallbackLLMProvider
from missionguard.infrastructure.llm.mock import MockLLMProvider
from missionguard.infrastructure.llm.openai_compatible import (
    OpenAICompatibleProvider,
    extract_json,
)


def provider_from_config(config: LLMProviderConfig) -> LLMProviderInterface:
    """Build a provider, chained with its fallbacks when configured."""
    providers: list[LLMProviderInterface] = []
    current: LLMProviderConfig | None = config
    while current is not None:
        providers.append(OpenAICompatibleProvider(current))
        current = current.fallback
    if len(providers) == 1:
        return providers[0]
    return FallbackLLMProvider(providers)


__all__ = [
    "FallbackLLMProvider",
    "MockLLMProvider",
    "OpenAICompatibleProvider",
    "extract_json",
    "provider_from_config",
]
