"""
Domain models for mission orchestration.

Value objects are immutable (frozen dataclasses). MissionState is the one
mutable structure: it is owned by a single workflow instance and captured
into immutable checkpoints after every phase transition.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from missionguard.domain.phases import MissionPhase

# =============================================================================
# ARTIFACTS
# =============================================================================


@dataclass(frozen=True)
class Artifact:
    """Versioned, typed output of a phase. One per type per run."""

    type: str
    data: Any
    created_by: str
    version: int  # starts at 1, +1 on every successful overwrite
    created_at: str  # ISO timestamp
    updated_at: str

    def metadata(self) -> "ArtifactMetadata":
        return ArtifactMetadata(
            type=self.type,
            created_by=self.created_by,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class ArtifactMetadata:
    """Artifact without its payload."""

    type: str
    created_by: str
    version: int
    created_at: str
    updated_at: str


class ManifestStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RunManifest:
    """Summary of a run, derived from the run store."""

    run_id: str
    artifacts: tuple[str, ...]
    status: ManifestStatus
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "artifacts": list(self.artifacts),
            "status": self.status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunManifest":
        return cls(
            run_id=data["run_id"],
            artifacts=tuple(data.get("artifacts", ())),
            status=ManifestStatus(data.get("status", "in-progress")),
            created_at=data.get("created_at", ""),
        )


# =============================================================================
# MESSAGES
# =============================================================================


@dataclass(frozen=True)
class Message:
    """A message on the bus. Either addressed or broadcast, never both."""

    id: str
    sender: str
    content: Any
    timestamp: str
    recipient: str | None = None
    broadcast: bool = False
    correlation_id: str | None = None


# =============================================================================
# CONTRACTS
# =============================================================================


class OwnershipLevel(str, Enum):
    """Write rights an agent holds over an artifact type."""

    OWNER = "owner"  # create and overwrite
    PROPOSE_ONLY = "propose-only"  # create only
    READ_ONLY = "read-only"  # no writes


@dataclass(frozen=True)
class Ownership:
    artifact_type: str
    level: OwnershipLevel


@dataclass(frozen=True)
class AgentContract:
    """An agent's ownership rights over artifact types."""

    agent_id: str
    ownership: tuple[Ownership, ...] = ()

    def level_for(self, artifact_type: str) -> OwnershipLevel:
        """Ownership level for a type; read-only when undeclared."""
        for entry in self.ownership:
            if entry.artifact_type == artifact_type:
                return entry.level
        return OwnershipLevel.READ_ONLY


# =============================================================================
# VERIFICATION AND GATING
# =============================================================================


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def is_blocking(self) -> bool:
        return self in (Severity.HIGH, Severity.CRITICAL)


@dataclass(frozen=True)
class Issue:
    """Single finding reported by a verification check."""

    severity: Severity
    message: str
    artifact: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.artifact is not None:
            data["artifact"] = self.artifact
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        return cls(
            severity=Severity(data["severity"]),
            message=data["message"],
            artifact=data.get("artifact"),
        )

    def __str__(self) -> str:
        where = f" [{self.artifact}]" if self.artifact else ""
        return f"{self.severity.value}{where}: {self.message}"


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: str  # "pass" or "fail"
    issues: tuple[Issue, ...] = ()


@dataclass(frozen=True)
class VerificationSummary:
    total: int
    passed: int
    failed: int


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification pass over a phase's artifacts."""

    status: str
    checks: tuple[CheckResult, ...]
    summary: VerificationSummary

    def all_issues(self) -> list[Issue]:
        return [issue for check in self.checks for issue in check.issues]

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "VerificationResult":
        """Build a result whose summary and status are derived from ``checks``."""
        passed = sum(1 for c in checks if c.status == "pass")
        failed = len(checks) - passed
        return cls(
            status="pass" if failed == 0 else "fail",
            checks=tuple(checks),
            summary=VerificationSummary(
                total=len(checks), passed=passed, failed=failed
            ),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerificationResult":
        """Parse a verification artifact payload."""
        checks = tuple(
            CheckResult(
                name=c["name"],
                status=c["status"],
                issues=tuple(Issue.from_dict(i) for i in c.get("issues", ())),
            )
            for c in data.get("checks", ())
        )
        summary_data = data.get("summary")
        if summary_data:
            summary = VerificationSummary(
                total=summary_data["total"],
                passed=summary_data["passed"],
                failed=summary_data["failed"],
            )
        else:
            passed = sum(1 for c in checks if c.status == "pass")
            summary = VerificationSummary(
                total=len(checks), passed=passed, failed=len(checks) - passed
            )
        return cls(status=data.get("status", "pass"), checks=checks, summary=summary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "checks": [
                {
                    "name": c.name,
                    "status": c.status,
                    "issues": [i.to_dict() for i in c.issues],
                }
                for c in self.checks
            ],
            "summary": {
                "total": self.summary.total,
                "passed": self.summary.passed,
                "failed": self.summary.failed,
            },
        }


class GateStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class GateDecision:
    """Admission decision. ``blocking`` only ever holds high/critical issues."""

    status: GateStatus
    blocking: tuple[Issue, ...] = ()
    message: str | None = None

    @property
    def passed(self) -> bool:
        return self.status is GateStatus.PASS


# =============================================================================
# AGENT EXECUTION
# =============================================================================


class AgentErrorKind(str, Enum):
    """Normalized failure categories for a single agent call."""

    TIMEOUT = "timeout"
    OWNERSHIP = "ownership"
    SCHEMA = "schema"
    UNAVAILABLE = "unavailable"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True)
class AgentResult:
    """Structured outcome of one agent invocation."""

    success: bool
    data: Any = None
    error: str | None = None
    error_kind: AgentErrorKind | None = None
    duration: float = 0.0  # seconds
    steps: int = 0


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a sandbox command."""

    stdout: str
    stderr: str
    exit_code: int
    duration: float  # seconds


# =============================================================================
# TOOLS
# =============================================================================


class ToolCategory(str, Enum):
    FILE = "file"
    CODE = "code"
    ANALYSIS = "analysis"
    UTILITY = "utility"


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: str  # JSON type name: string, number, boolean, object, array
    description: str = ""
    required: bool = True


@dataclass(frozen=True)
class Tool:
    """A named capability agents may invoke through the run's tool registry."""

    name: str
    description: str
    category: ToolCategory
    handler: Callable[[dict[str, Any]], Awaitable[Any]]
    parameters: tuple[ToolParameter, ...] = ()


@dataclass(frozen=True)
class ToolExecutionResult:
    """Outcome of a tool call. Failures are reported here, never raised."""

    success: bool
    output: Any = None
    error: str | None = None
    duration: float = 0.0  # seconds


@dataclass(frozen=True)
class ToolExecution:
    """One entry of a registry's execution log."""

    tool_name: str
    arguments: dict[str, Any]
    result: ToolExecutionResult
    timestamp: str  # ISO timestamp


# =============================================================================
# MISSION
# =============================================================================


@dataclass(frozen=True)
class MissionInput:
    mission_id: str
    request: str
    app_name: str = "app"

    def to_dict(self) -> dict[str, str]:
        return {
            "mission_id": self.mission_id,
            "request": self.request,
            "app_name": self.app_name,
        }


@dataclass(frozen=True)
class FeedbackSignal:
    """Human reviewer decision delivered to a parked mission."""

    approved: bool
    comment: str | None = None
    modifications: dict[str, Any] | None = None


@dataclass(frozen=True)
class MissionProgress:
    phase: MissionPhase
    message: str
    progress: int  # 0-100


@dataclass(frozen=True)
class GeneratedFile:
    path: str
    content: str

    @property
    def line_count(self) -> int:
        return len(self.content.splitlines())


@dataclass(frozen=True)
class MissionStats:
    total_files: int
    total_lines: int
    duration: float  # seconds
    iterations: int  # phase executions, repairs included


@dataclass(frozen=True)
class MissionResult:
    """Final outcome of a mission. Always carries a success flag."""

    mission_id: str
    success: bool
    phase: MissionPhase
    files: tuple[GeneratedFile, ...]
    stats: MissionStats
    errors: tuple[str, ...] = ()
    manifest: RunManifest | None = None


@dataclass
class MissionState:
    """Mutable state of a running mission."""

    phase: MissionPhase = MissionPhase.INTAKE
    retry_count: int = 0
    repairing_phase: MissionPhase | None = None
    pending_signal: str | None = None
    manifest: RunManifest | None = None
    errors: list[str] = field(default_factory=list)
    error_log: list[str] = field(default_factory=list)  # latest rejection details
    iterations: int = 0


@dataclass(frozen=True)
class MissionCheckpoint:
    """Immutable snapshot of a mission taken after a phase transition."""

    checkpoint_id: str
    mission_id: str
    created_at: str
    mission: MissionInput
    phase: MissionPhase
    retry_count: int
    repairing_phase: MissionPhase | None
    manifest: RunManifest
    artifacts: tuple[Artifact, ...]
    errors: tuple[str, ...] = ()
    error_log: tuple[str, ...] = ()
    iterations: int = 0
    plan_ref: str = ""  # content hash of the phase plan that produced it
