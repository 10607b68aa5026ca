"""Provider chain that moves to the next provider when one is unavailable."""

import logging
from typing import Any

from missionguard.domain.exceptions import ProviderUnavailable
from missionguard.domain.interfaces import LLMProviderInterface

logger = logging.getLogger(__name__)


class FallbackLLMProvider(LLMProviderInterface):
    """
    Tries each provider in order.

    Only ProviderUnavailable moves on to the next provider; any other error
    comes from a reachable provider and is raised as is.
    """

    def __init__(self, providers: list[LLMProviderInterface]):
        if not providers:
            raise ValueError("FallbackLLMProvider needs at least one provider")
        self.providers = list(providers)

    async def prompt_text(self, system: str, user: str) -> str:
        last_error: ProviderUnavailable | None = None
        for i, provider in enumerate(self.providers):
            try:
                return await provider.prompt_text(system, user)
            except ProviderUnavailable as e:
                logger.warning(f"Provider {i} unavailable, trying next: {e}")
                last_error = e
        raise ProviderUnavailable(f"All LLM providers unavailable: {last_error}")

    async def prompt_json(self, prompt: str, system: str | None = None) -> Any:
        last_error: ProviderUnavailable | None = None
        for i, provider in enumerate(self.providers):
            try:
                return await provider.prompt_json(prompt, system)
            except ProviderUnavailable as e:
                logger.warning(f"Provider {i} unavailable, trying next: {e}")
                last_error = e
        raise ProviderUnavailable(f"All LLM providers unavailable: {last_error}")
