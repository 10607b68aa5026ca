"""
Domain interfaces (Ports) for mission orchestration.

These abstract base classes define the contracts that implementations must
satisfy. They have no external dependencies and represent the boundaries
between the orchestration core and its collaborators.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from missionguard.domain.agents import AgentRole
    from missionguard.domain.context import AgentContext
    from missionguard.domain.mission_event import MissionEvent, MissionEventType
    from missionguard.domain.models import (
        ArtifactMetadata,
        ExecutionResult,
        GateDecision,
        Message,
        MissionCheckpoint,
        MissionInput,
        MissionResult,
        RunManifest,
        Tool,
        ToolCategory,
        ToolExecutionResult,
        VerificationResult,
    )


class AgentInterface(ABC):
    """
    Port for a mission agent.

    An agent reads and writes artifacts through the context it is given.
    From the workflow's perspective an agent call is atomic: its outcome is
    the set of artifacts it wrote plus the value it returns.

    Note (Idempotency):
        The workflow may invoke an agent again after a gate rejection.
        Agents must tolerate being re-run against their own earlier output.
    """

    @property
    @abstractmethod
    def agent_id(self) -> str:
        pass

    @property
    @abstractmethod
    def role(self) -> "AgentRole":
        pass

    @abstractmethod
    async def execute(self, context: "AgentContext") -> Any:
        """
        Perform the agent's work for the context's phase.

        Args:
            context: Bound run store, bus, cancellation token and phase info

        Returns:
            Free-form result data; artifacts are written via the context
        """
        pass


class RunStoreInterface(ABC):
    """Port for the versioned artifact store of one mission run."""

    @abstractmethod
    def put(self, artifact_type: str, data: Any, agent_id: str) -> "ArtifactMetadata":
        pass

    @abstractmethod
    def get(self, artifact_type: str) -> Any | None:
        pass

    @abstractmethod
    def has(self, artifact_type: str) -> bool:
        pass

    @abstractmethod
    def get_metadata(self, artifact_type: str) -> "ArtifactMetadata | None":
        pass

    @abstractmethod
    def build_manifest(self) -> "RunManifest":
        pass


class MessageBusInterface(ABC):
    """Port for inter-agent communication."""

    @abstractmethod
    def send(
        self,
        sender: str,
        recipient: str,
        content: Any,
        correlation_id: str | None = None,
    ) -> "Message":
        pass

    @abstractmethod
    def broadcast(self, sender: str, content: Any) -> "Message":
        pass

    @abstractmethod
    async def request(
        self,
        sender: str,
        recipient: str,
        content: Any,
        timeout_ms: int | None = None,
    ) -> Any:
        pass

    @abstractmethod
    def reply(self, message_id: str, sender: str, content: Any) -> bool:
        pass


class ToolRegistryInterface(ABC):
    """Port for the tools available to the agents of one mission run."""

    @abstractmethod
    def register(self, tool: "Tool") -> None:
        """Add a tool, replacing any tool of the same name."""
        pass

    @abstractmethod
    def unregister(self, name: str) -> bool:
        pass

    @abstractmethod
    def get(self, name: str) -> "Tool | None":
        pass

    @abstractmethod
    def list_tools(self, category: "ToolCategory | None" = None) -> list["Tool"]:
        pass

    @abstractmethod
    async def execute(
        self, name: str, arguments: dict[str, Any]
    ) -> "ToolExecutionResult":
        """
        Run a tool.

        Unknown tools, missing required arguments and handler errors are
        reported as unsuccessful results rather than raised.
        """
        pass


class GateInterface(ABC):
    """
    Port for admission control.

    Gates are deterministic: the same verification result always yields the
    same decision.
    """

    @abstractmethod
    def evaluate(self, result: "VerificationResult") -> "GateDecision":
        pass


class LLMProviderInterface(ABC):
    """Port for language model access."""

    @abstractmethod
    async def prompt_text(self, system: str, user: str) -> str:
        """
        Args:
            system: System prompt
            user: User prompt

        Returns:
            Raw completion text

        Raises:
            ProviderUnavailable: If the provider cannot be reached
        """
        pass

    @abstractmethod
    async def prompt_json(self, prompt: str, system: str | None = None) -> Any:
        """Like prompt_text, but parses the completion as JSON."""
        pass


class SandboxInterface(ABC):
    """Port for an isolated execution environment."""

    @abstractmethod
    async def execute(self, cmd: str, cwd: str | None = None) -> "ExecutionResult":
        pass

    @abstractmethod
    async def write_files(self, files: dict[str, str]) -> None:
        pass

    @abstractmethod
    async def read_file(self, path: str) -> str:
        pass


class MissionCheckpointStoreInterface(ABC):
    """Persistent storage for mission checkpoints."""

    @abstractmethod
    def store_checkpoint(self, checkpoint: "MissionCheckpoint") -> str:
        """Store a checkpoint and return its ID."""
        pass

    @abstractmethod
    def get_checkpoint(self, checkpoint_id: str) -> "MissionCheckpoint":
        """
        Raises:
            KeyError: If checkpoint not found
        """
        pass

    @abstractmethod
    def get_latest(self, mission_id: str) -> "MissionCheckpoint | None":
        pass

    @abstractmethod
    def list_checkpoints(self, mission_id: str) -> list["MissionCheckpoint"]:
        """Checkpoints of a mission, oldest first."""
        pass

    @abstractmethod
    def list_missions(self) -> list[str]:
        pass


class MissionEventStoreInterface(ABC):
    """Port for persisting and querying mission events."""

    @abstractmethod
    def store_event(self, event: "MissionEvent") -> str:
        """Store an event and return its event_id."""
        pass

    @abstractmethod
    def get_events(
        self,
        mission_id: str,
        event_type: "MissionEventType | None" = None,
    ) -> list["MissionEvent"]:
        """Return events for a mission, ordered by creation time."""
        pass


class DurableEngineInterface(ABC):
    """
    Port for the durable execution engine hosting mission workflows.

    The engine owns checkpointing, restart and delivery of signals and
    queries to running workflows.
    """

    @abstractmethod
    async def start(self, mission: "MissionInput") -> str:
        """Start a mission workflow and return its workflow ID."""
        pass

    @abstractmethod
    async def signal(self, workflow_id: str, name: str, payload: Any = None) -> None:
        pass

    @abstractmethod
    def query(self, workflow_id: str, name: str) -> Any:
        pass

    @abstractmethod
    async def cancel(self, workflow_id: str) -> None:
        pass

    @abstractmethod
    async def result(self, workflow_id: str) -> "MissionResult":
        pass
