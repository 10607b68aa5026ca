"""Tests for AgentRuntime error normalization."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from missionguard.agents.scripted import ScriptedAgent
from missionguard.application.agent_runtime import AgentRuntime
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext
from missionguard.domain.exceptions import ProviderUnavailable
from missionguard.domain.models import AgentErrorKind
from missionguard.domain.phases import MissionPhase

PRD = {"title": "Todo", "features": []}

ContextFactory = Callable[..., AgentContext]


def _pm(**kwargs: Any) -> ScriptedAgent:
    return ScriptedAgent(AgentRole.PRODUCT_MANAGER, {"prd": PRD}, **kwargs)


class TestAgentRuntime:
    """Tests for a single agent invocation."""

    @pytest.mark.asyncio
    async def test_success(self, make_context: ContextFactory) -> None:
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))

        result = await AgentRuntime().run(_pm(), context)

        assert result.success
        assert result.data == {"prd": PRD}
        assert result.steps == 1
        assert result.error_kind is None
        assert context.store.has("prd")

    @pytest.mark.asyncio
    async def test_timeout(self, make_context: ContextFactory) -> None:
        """A stalled agent is cut off and its token cancelled."""
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))

        result = await AgentRuntime(timeout_ms=50).run(_pm(delay=5.0), context)

        assert not result.success
        assert result.error_kind is AgentErrorKind.TIMEOUT
        assert "timed out after 50ms" in (result.error or "")
        assert context.token.cancelled
        assert not context.store.has("prd")

    @pytest.mark.asyncio
    async def test_timeout_override(self, make_context: ContextFactory) -> None:
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        result = await AgentRuntime(timeout_ms=10000).run(
            _pm(delay=5.0), context, timeout_ms=50
        )
        assert result.error_kind is AgentErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_ownership_violation(self, make_context: ContextFactory) -> None:
        """Writing another role's artifact is reported, not raised."""
        context = make_context("qa_engineer", MissionPhase.ANALYZE, ("prd",))
        agent = ScriptedAgent(AgentRole.QA_ENGINEER, {"prd": PRD})

        result = await AgentRuntime().run(agent, context)

        assert result.error_kind is AgentErrorKind.OWNERSHIP
        assert "qa_engineer" in (result.error or "")

    @pytest.mark.asyncio
    async def test_schema_violation(self, make_context: ContextFactory) -> None:
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        agent = ScriptedAgent(AgentRole.PRODUCT_MANAGER, {"prd": {"title": ""}})

        result = await AgentRuntime().run(agent, context)

        assert result.error_kind is AgentErrorKind.SCHEMA
        assert "prd" in (result.error or "")

    @pytest.mark.asyncio
    async def test_unavailable_dependency(self, make_context: ContextFactory) -> None:
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        agent = _pm(raises=ProviderUnavailable("ollama is down"))

        result = await AgentRuntime().run(agent, context)

        assert result.error_kind is AgentErrorKind.UNAVAILABLE
        assert result.error == "ollama is down"

    @pytest.mark.asyncio
    async def test_unexpected_error(self, make_context: ContextFactory) -> None:
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        agent = _pm(raises=KeyError("features"))

        result = await AgentRuntime().run(agent, context)

        assert result.error_kind is AgentErrorKind.ERROR
        assert (result.error or "").startswith("KeyError")

    @pytest.mark.asyncio
    async def test_already_cancelled(self, make_context: ContextFactory) -> None:
        """A cancelled token short-circuits the call."""
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        context.token.cancel("mission cancelled")
        agent = _pm()

        result = await AgentRuntime().run(agent, context)

        assert result.error_kind is AgentErrorKind.CANCELLED
        assert agent.calls == 0

    @pytest.mark.asyncio
    async def test_cancelled_mid_call(self, make_context: ContextFactory) -> None:
        """Cancelling the token stops the call before it writes."""
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        agent = _pm(delay=5.0)

        run = asyncio.create_task(AgentRuntime().run(agent, context))
        await asyncio.sleep(0.05)
        context.token.cancel("mission cancelled")
        result = await asyncio.wait_for(run, timeout=1)

        assert result.error_kind is AgentErrorKind.CANCELLED
        assert "mission cancelled" in (result.error or "")
        assert not context.store.has("prd")

    @pytest.mark.asyncio
    async def test_outer_cancellation_waits_for_agent(
        self, make_context: ContextFactory
    ) -> None:
        """Cancelling the caller also cancels and reaps the agent call."""
        context = make_context("product_manager", MissionPhase.ANALYZE, ("prd",))
        unwound: list[str] = []

        class Stalling(ScriptedAgent):
            async def execute(self, context: AgentContext) -> Any:
                try:
                    await asyncio.sleep(5.0)
                finally:
                    unwound.append(self.agent_id)

        run = asyncio.create_task(
            AgentRuntime().run(Stalling(AgentRole.PRODUCT_MANAGER), context)
        )
        await asyncio.sleep(0.05)
        run.cancel()

        with pytest.raises(asyncio.CancelledError):
            await run

        assert unwound == ["product_manager"]
        assert context.token.cancelled
        assert not context.store.has("prd")
