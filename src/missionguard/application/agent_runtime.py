"""
Single agent invocation with timeout and error normalization.

The runtime never retries; retry and repair are decided by the workflow.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from missionguard.domain.exceptions import (
    MissionCancelled,
    OwnershipViolation,
    SchemaViolation,
    ServiceUnavailable,
)
from missionguard.domain.models import AgentErrorKind, AgentResult

if TYPE_CHECKING:
    from missionguard.domain.context import AgentContext
    from missionguard.domain.interfaces import AgentInterface

logger = logging.getLogger(__name__)

DEFAULT_AGENT_TIMEOUT_MS = 60000


class AgentRuntime:
    """Runs one agent call under a time budget and cancellation."""

    def __init__(self, timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def run(
        self,
        agent: AgentInterface,
        context: AgentContext,
        timeout_ms: int | None = None,
    ) -> AgentResult:
        """
        Execute ``agent`` and convert every outcome into an AgentResult.

        The call is raced against its timeout and the context's cancellation
        token. On timeout or cancellation the in-flight task is cancelled and
        its token is cancelled too, so the agent can no longer write.

        Args:
            agent: Agent to invoke
            context: Context bound to the agent; its token must be a per-call child
            timeout_ms: Override for the runtime's default timeout

        Returns:
            AgentResult; never raises for agent failures
        """
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        start = time.monotonic()
        token = context.token

        if token.cancelled:
            return self._failure(
                context, start, f"Cancelled: {token.reason}", AgentErrorKind.CANCELLED
            )

        task = asyncio.create_task(agent.execute(context))
        cancel_wait = asyncio.create_task(token.wait())
        try:
            done, _ = await asyncio.wait(
                {task, cancel_wait},
                timeout=timeout_ms / 1000,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            token.cancel("cancelled")
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise
        finally:
            cancel_wait.cancel()
            await asyncio.gather(cancel_wait, return_exceptions=True)

        if task not in done:
            reason = "cancelled" if token.cancelled else "timeout"
            token.cancel(reason)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            if reason == "timeout":
                logger.warning(
                    f"Agent {agent.agent_id} timed out after {timeout_ms}ms"
                )
                return self._failure(
                    context,
                    start,
                    f"Agent '{agent.agent_id}' timed out after {timeout_ms}ms",
                    AgentErrorKind.TIMEOUT,
                )
            return self._failure(
                context, start, f"Cancelled: {token.reason}", AgentErrorKind.CANCELLED
            )

        try:
            data = task.result()
        except OwnershipViolation as e:
            return self._failure(context, start, str(e), AgentErrorKind.OWNERSHIP)
        except SchemaViolation as e:
            return self._failure(context, start, str(e), AgentErrorKind.SCHEMA)
        except ServiceUnavailable as e:
            return self._failure(context, start, str(e), AgentErrorKind.UNAVAILABLE)
        except (MissionCancelled, asyncio.CancelledError) as e:
            return self._failure(
                context, start, f"Cancelled: {e}", AgentErrorKind.CANCELLED
            )
        except Exception as e:
            logger.exception(f"Agent {agent.agent_id} failed")
            return self._failure(
                context, start, f"{type(e).__name__}: {e}", AgentErrorKind.ERROR
            )

        return AgentResult(
            success=True,
            data=data,
            duration=time.monotonic() - start,
            steps=context.steps,
        )

    @staticmethod
    def _failure(
        context: AgentContext, start: float, error: str, kind: AgentErrorKind
    ) -> AgentResult:
        return AgentResult(
            success=False,
            error=error,
            error_kind=kind,
            duration=time.monotonic() - start,
            steps=context.steps,
        )
