"""Tests for FallbackLLMProvider."""

import pytest

from missionguard.domain.exceptions import ProviderUnavailable
from missionguard.infrastructure.llm import FallbackLLMProvider, MockLLMProvider


class TestFallbackLLMProvider:
    """Tests for provider chaining."""

    def test_needs_a_provider(self) -> None:
        with pytest.raises(ValueError):
            FallbackLLMProvider([])

    @pytest.mark.asyncio
    async def test_skips_unavailable_provider(self) -> None:
        down = MockLLMProvider([], unavailable=True)
        up = MockLLMProvider([{"answer": 42}, "text"])
        chain = FallbackLLMProvider([down, up])

        assert await chain.prompt_json("p") == {"answer": 42}
        assert await chain.prompt_text("s", "u") == "text"
        assert up.call_count == 2

    @pytest.mark.asyncio
    async def test_first_available_wins(self) -> None:
        first = MockLLMProvider([{"from": "first"}])
        second = MockLLMProvider([{"from": "second"}])

        result = await FallbackLLMProvider([first, second]).prompt_json("p")

        assert result == {"from": "first"}
        assert second.call_count == 0

    @pytest.mark.asyncio
    async def test_all_unavailable(self) -> None:
        chain = FallbackLLMProvider(
            [
                MockLLMProvider([], unavailable=True),
                MockLLMProvider([], unavailable=True),
            ]
        )
        with pytest.raises(ProviderUnavailable, match="All LLM providers"):
            await chain.prompt_json("p")

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self) -> None:
        """A reachable provider's error does not fall through."""
        failing = MockLLMProvider([ValueError("not json")])
        spare = MockLLMProvider([{"ok": True}])

        with pytest.raises(ValueError, match="not json"):
            await FallbackLLMProvider([failing, spare]).prompt_json("p")
        assert spare.call_count == 0
