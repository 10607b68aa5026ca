"""
Domain layer: pure models, phase topology, contracts and ports.

Nothing in this package performs I/O or depends on the application or
infrastructure layers.
"""

from missionguard.domain.agents import AgentRole
from missionguard.domain.cancellation import CancellationToken
from missionguard.domain.context import AgentContext
from missionguard.domain.contracts import build_default_contracts
from missionguard.domain.exceptions import (
    AgentTimeout,
    ConfigurationError,
    GateRejection,
    InvalidTransition,
    MissionCancelled,
    OwnershipViolation,
    ProviderUnavailable,
    RepairExhausted,
    RequestTimeout,
    SandboxUnavailable,
    SchemaViolation,
    ServiceUnavailable,
)
from missionguard.domain.models import (
    AgentContract,
    AgentErrorKind,
    AgentResult,
    Artifact,
    ArtifactMetadata,
    CheckResult,
    ExecutionResult,
    FeedbackSignal,
    GateDecision,
    GateStatus,
    GeneratedFile,
    Issue,
    ManifestStatus,
    Message,
    MissionCheckpoint,
    MissionInput,
    MissionProgress,
    MissionResult,
    MissionState,
    MissionStats,
    Ownership,
    OwnershipLevel,
    RunManifest,
    Severity,
    Tool,
    ToolCategory,
    ToolExecution,
    ToolExecutionResult,
    ToolParameter,
    VerificationResult,
    VerificationSummary,
)
from missionguard.domain.phases import MissionPhase, PhaseDefinition

__all__ = [
    "AgentContext",
    "AgentContract",
    "AgentErrorKind",
    "AgentResult",
    "AgentRole",
    "AgentTimeout",
    "Artifact",
    "ArtifactMetadata",
    "CancellationToken",
    "CheckResult",
    "ConfigurationError",
    "ExecutionResult",
    "FeedbackSignal",
    "GateDecision",
    "GateRejection",
    "GateStatus",
    "GeneratedFile",
    "InvalidTransition",
    "Issue",
    "ManifestStatus",
    "Message",
    "MissionCancelled",
    "MissionCheckpoint",
    "MissionInput",
    "MissionPhase",
    "MissionProgress",
    "MissionResult",
    "MissionState",
    "MissionStats",
    "Ownership",
    "OwnershipLevel",
    "OwnershipViolation",
    "PhaseDefinition",
    "ProviderUnavailable",
    "RepairExhausted",
    "RequestTimeout",
    "RunManifest",
    "SandboxUnavailable",
    "SchemaViolation",
    "ServiceUnavailable",
    "Severity",
    "Tool",
    "ToolCategory",
    "ToolExecution",
    "ToolExecutionResult",
    "ToolParameter",
    "VerificationResult",
    "VerificationSummary",
    "build_default_contracts",
]
