"""Execution context handed to an agent for one call."""

from dataclasses import dataclass, field
from typing import Any

from missionguard.domain.cancellation import CancellationToken
from missionguard.domain.interfaces import (
    MessageBusInterface,
    RunStoreInterface,
    ToolRegistryInterface,
)
from missionguard.domain.models import (
    ArtifactMetadata,
    Message,
    MissionInput,
    ToolExecutionResult,
)
from missionguard.domain.phases import MissionPhase


@dataclass
class AgentContext:
    """
    Binds an agent to the run store, bus and tools under its own identity.

    Every write goes through ``put`` so that ownership is always checked
    against the calling agent and a cancelled call never writes.
    """

    agent_id: str
    mission: MissionInput
    phase: MissionPhase
    store: RunStoreInterface
    token: CancellationToken
    bus: MessageBusInterface | None = None
    tools: ToolRegistryInterface | None = None
    targets: tuple[str, ...] = ()  # artifact types this call must produce
    feedback: tuple[str, ...] = ()  # error log from rejected attempts
    modifications: dict[str, Any] | None = None
    repairing_phase: MissionPhase | None = None  # set for repair calls
    attempt: int = 0  # repair attempt, 0 for the first run of a phase
    steps: int = field(default=0)

    def put(self, artifact_type: str, data: Any) -> ArtifactMetadata:
        self.token.raise_if_cancelled()
        metadata = self.store.put(artifact_type, data, self.agent_id)
        self.steps += 1
        return metadata

    def get(self, artifact_type: str) -> Any | None:
        return self.store.get(artifact_type)

    def step(self) -> None:
        """Record one unit of agent work (an LLM call, a command, ...)."""
        self.token.raise_if_cancelled()
        self.steps += 1

    def send(self, recipient: str, content: Any) -> Message:
        if self.bus is None:
            raise RuntimeError(f"Agent '{self.agent_id}' has no message bus")
        return self.bus.send(self.agent_id, recipient, content)

    def broadcast(self, content: Any) -> Message:
        if self.bus is None:
            raise RuntimeError(f"Agent '{self.agent_id}' has no message bus")
        return self.bus.broadcast(self.agent_id, content)

    async def request(
        self, recipient: str, content: Any, timeout_ms: int | None = None
    ) -> Any:
        if self.bus is None:
            raise RuntimeError(f"Agent '{self.agent_id}' has no message bus")
        return await self.bus.request(self.agent_id, recipient, content, timeout_ms)

    async def use_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolExecutionResult:
        """Run a registered tool; counts as one step."""
        if self.tools is None:
            raise RuntimeError(f"Agent '{self.agent_id}' has no tool registry")
        self.step()
        return await self.tools.execute(name, arguments or {})
