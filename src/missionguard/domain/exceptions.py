"""
Domain exceptions for mission orchestration.

These represent business rule violations in the domain layer. The workflow
converts most of them into structured results at the agent and phase
boundaries; only a few reach a terminal mission state.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from missionguard.domain.models import GateDecision, Issue


class OwnershipViolation(Exception):
    """
    Raised when an agent writes an artifact it has no rights to.

    Fatal to the offending call only; the phase treats it as a failed
    agent result and may repair.
    """

    def __init__(self, agent_id: str, artifact_type: str, reason: str):
        """
        Args:
            agent_id: Agent that attempted the write
            artifact_type: Artifact type being written
            reason: Which ownership rule rejected the write
        """
        super().__init__(
            f"Agent '{agent_id}' cannot write '{artifact_type}': {reason}"
        )
        self.agent_id = agent_id
        self.artifact_type = artifact_type
        self.reason = reason


class SchemaViolation(Exception):
    """Raised when artifact data does not conform to its schema."""

    def __init__(self, artifact_type: str, errors: list[tuple[str, str]]):
        """
        Args:
            artifact_type: Artifact type that failed validation
            errors: (json_pointer_path, message) pairs, one per violation
        """
        details = "; ".join(f"{path}: {message}" for path, message in errors)
        super().__init__(f"Artifact '{artifact_type}' failed validation: {details}")
        self.artifact_type = artifact_type
        self.errors = errors


class AgentTimeout(Exception):
    """Raised when an agent call exceeds its time budget."""

    def __init__(self, agent_id: str, timeout_ms: int):
        super().__init__(f"Agent '{agent_id}' timed out after {timeout_ms}ms")
        self.agent_id = agent_id
        self.timeout_ms = timeout_ms


class GateRejection(Exception):
    """Raised when the gate rejects a phase's verification result."""

    def __init__(self, phase: str, decision: "GateDecision"):
        super().__init__(decision.message or f"Gate rejected phase '{phase}'")
        self.phase = phase
        self.decision = decision


class RepairExhausted(Exception):
    """
    Raised when the repair bound is exceeded for a phase.

    Terminal: the mission moves to FAILED with the blocking issues
    recorded in its error list.
    """

    def __init__(self, phase: str, attempts: int, blocking: list["Issue"]):
        """
        Args:
            phase: Phase that could not be repaired
            attempts: Number of repair attempts made
            blocking: Blocking issues from the last gate decision
        """
        super().__init__(
            f"Phase '{phase}' still failing after {attempts} repair attempt(s)"
        )
        self.phase = phase
        self.attempts = attempts
        self.blocking = blocking


class RequestTimeout(Exception):
    """Raised when a bus request receives no reply in time."""

    def __init__(self, message_id: str, recipient: str, timeout_ms: int):
        super().__init__(
            f"Request {message_id} to '{recipient}' timed out after {timeout_ms}ms"
        )
        self.message_id = message_id
        self.recipient = recipient
        self.timeout_ms = timeout_ms


class InvalidTransition(Exception):
    """Raised when the state machine attempts an edge it does not allow."""

    def __init__(self, source: str, target: str):
        super().__init__(f"Invalid phase transition: {source} -> {target}")
        self.source = source
        self.target = target


class ServiceUnavailable(Exception):
    """Base for external collaborators that cannot be reached.

    Unavailability is a mission-level failure, never repaired.
    """

    pass


class ProviderUnavailable(ServiceUnavailable):
    """Raised when no LLM provider can serve a request."""

    pass


class SandboxUnavailable(ServiceUnavailable):
    """Raised when the execution sandbox cannot be reached."""

    pass


class MissionCancelled(Exception):
    """Raised inside agent calls when the mission has been cancelled."""

    pass


class ConfigurationError(Exception):
    """Raised when configuration or agent wiring is invalid."""

    pass
