"""
Mock provider for testing without an LLM.

Returns predefined responses in sequence.
"""

import copy
from typing import Any

from missionguard.domain.exceptions import ProviderUnavailable
from missionguard.domain.interfaces import LLMProviderInterface


class MockLLMProvider(LLMProviderInterface):
    """Returns predefined responses for testing."""

    def __init__(self, responses: list[Any], unavailable: bool = False):
        """
        Args:
            responses: Responses to return in sequence; an Exception
                instance is raised instead of returned
            unavailable: Raise ProviderUnavailable on every call
        """
        self._responses = responses
        self._unavailable = unavailable
        self._call_count = 0
        self.prompts: list[str] = []

    def _next(self, prompt: str) -> Any:
        if self._unavailable:
            raise ProviderUnavailable("Mock provider unavailable")
        if self._call_count >= len(self._responses):
            raise RuntimeError("MockLLMProvider exhausted responses")
        response = self._responses[self._call_count]
        self._call_count += 1
        self.prompts.append(prompt)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    async def prompt_text(self, system: str, user: str) -> str:
        return str(self._next(user))

    async def prompt_json(self, prompt: str, system: str | None = None) -> Any:
        return self._next(prompt)

    @property
    def call_count(self) -> int:
        """Number of prompts answered so far."""
        return self._call_count

    def reset(self) -> None:
        """Reset the call counter to reuse responses."""
        self._call_count = 0
        self.prompts.clear()
