"""
Scripted agent for tests and offline demos.

Writes predefined payloads instead of calling a model, and can be told to
stall or raise on chosen calls.
"""

import asyncio
import copy
from collections.abc import Callable, Mapping
from typing import Any

from missionguard.agents.base import BaseAgent
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext

# A payload, a list of payloads consumed one per call (the last one
# repeats), or a callable building the payload from the context.
Output = Any | list[Any] | Callable[[AgentContext], Any]
Failure = BaseException | Callable[[int], BaseException | None] | None


class ScriptedAgent(BaseAgent):
    """Returns predefined outputs for testing."""

    def __init__(
        self,
        role: AgentRole,
        outputs: Mapping[str, Output] | None = None,
        agent_id: str | None = None,
        delay: float = 0.0,
        raises: Failure = None,
    ) -> None:
        """
        Args:
            role: Role the agent plays
            outputs: artifact type -> Output, written for each matching target
            agent_id: Identity used for ownership (defaults to the role value)
            delay: Seconds to sleep before writing anything
            raises: Exception to raise, or a callable given the 1-based call
                number that returns the exception to raise (None to succeed)
        """
        super().__init__(role, agent_id)
        self.outputs = dict(outputs or {})
        self.delay = delay
        self.raises = raises
        self.contexts: list[AgentContext] = []
        self._per_type_calls: dict[str, int] = {}

    @property
    def calls(self) -> int:
        return len(self.contexts)

    async def execute(self, context: AgentContext) -> Any:
        self.contexts.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)

        failure = self.raises(self.calls) if callable(self.raises) else self.raises
        if failure is not None:
            raise failure

        written: dict[str, Any] = {}
        for artifact_type in context.targets:
            if artifact_type not in self.outputs:
                continue
            data = self._next_output(artifact_type, context)
            context.put(artifact_type, data)
            written[artifact_type] = data
        return written

    def _next_output(self, artifact_type: str, context: AgentContext) -> Any:
        output = self.outputs[artifact_type]
        if callable(output):
            return output(context)
        if isinstance(output, list):
            index = self._per_type_calls.get(artifact_type, 0)
            self._per_type_calls[artifact_type] = index + 1
            return copy.deepcopy(output[min(index, len(output) - 1)])
        return copy.deepcopy(output)
