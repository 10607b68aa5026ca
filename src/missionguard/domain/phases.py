"""
Mission phase topology.

The phase graph is fixed: a total order of working phases, a REPAIR
sub-loop entered from any gate-rejected phase, and the terminal phases
COMPLETE, FAILED and CANCELLED. HUMAN_FEEDBACK is the only optional phase.
"""

import hashlib
import json
from dataclasses import dataclass
from enum import Enum

from missionguard.domain.agents import AgentRole, produces


class MissionPhase(str, Enum):
    """Phases of a mission."""

    INTAKE = "intake"
    ANALYZE = "analyze"
    PLAN = "plan"
    DESIGN = "design"
    GENERATE_FRONTEND = "generate_frontend"
    GENERATE_BACKEND = "generate_backend"
    REVIEW = "review"
    SECURITY_AUDIT = "security_audit"
    HUMAN_FEEDBACK = "human_feedback"
    DEPLOY = "deploy"
    COMPLETE = "complete"
    REPAIR = "repair"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset(
    {MissionPhase.COMPLETE, MissionPhase.FAILED, MissionPhase.CANCELLED}
)

# Total order of working phases, ending in COMPLETE.
PHASE_ORDER: tuple[MissionPhase, ...] = (
    MissionPhase.INTAKE,
    MissionPhase.ANALYZE,
    MissionPhase.PLAN,
    MissionPhase.DESIGN,
    MissionPhase.GENERATE_FRONTEND,
    MissionPhase.GENERATE_BACKEND,
    MissionPhase.REVIEW,
    MissionPhase.SECURITY_AUDIT,
    MissionPhase.HUMAN_FEEDBACK,
    MissionPhase.DEPLOY,
    MissionPhase.COMPLETE,
)

OPTIONAL_PHASES = frozenset({MissionPhase.HUMAN_FEEDBACK})

PHASE_PROGRESS: dict[MissionPhase, int] = {
    MissionPhase.INTAKE: 5,
    MissionPhase.ANALYZE: 15,
    MissionPhase.PLAN: 25,
    MissionPhase.DESIGN: 35,
    MissionPhase.GENERATE_FRONTEND: 50,
    MissionPhase.GENERATE_BACKEND: 60,
    MissionPhase.REVIEW: 70,
    MissionPhase.SECURITY_AUDIT: 80,
    MissionPhase.HUMAN_FEEDBACK: 85,
    MissionPhase.DEPLOY: 95,
    MissionPhase.COMPLETE: 100,
}

PHASE_MESSAGES: dict[MissionPhase, str] = {
    MissionPhase.INTAKE: "Capturing mission brief...",
    MissionPhase.ANALYZE: "Analyzing requirements...",
    MissionPhase.PLAN: "Planning architecture...",
    MissionPhase.DESIGN: "Designing user interface and test plan...",
    MissionPhase.GENERATE_FRONTEND: "Generating frontend code...",
    MissionPhase.GENERATE_BACKEND: "Generating backend code...",
    MissionPhase.REVIEW: "Reviewing generated code...",
    MissionPhase.SECURITY_AUDIT: "Auditing security...",
    MissionPhase.HUMAN_FEEDBACK: "Waiting for human feedback...",
    MissionPhase.DEPLOY: "Deploying application...",
    MissionPhase.COMPLETE: "Mission complete!",
    MissionPhase.REPAIR: "Repairing failed checks...",
    MissionPhase.FAILED: "Mission failed",
    MissionPhase.CANCELLED: "Mission cancelled",
}


def _build_transitions() -> dict[MissionPhase, frozenset[MissionPhase]]:
    working = PHASE_ORDER[:-1]
    edges: dict[MissionPhase, set[MissionPhase]] = {}
    for i, phase in enumerate(working):
        targets = {PHASE_ORDER[i + 1], MissionPhase.REPAIR}
        targets |= {MissionPhase.FAILED, MissionPhase.CANCELLED}
        edges[phase] = targets
    # SECURITY_AUDIT may skip the optional feedback phase
    edges[MissionPhase.SECURITY_AUDIT].add(MissionPhase.DEPLOY)
    edges[MissionPhase.HUMAN_FEEDBACK].discard(MissionPhase.REPAIR)
    # REPAIR resumes the order after the phase it repaired
    edges[MissionPhase.REPAIR] = set(PHASE_ORDER[1:]) | {
        MissionPhase.FAILED,
        MissionPhase.CANCELLED,
    }
    for terminal in TERMINAL_PHASES:
        edges[terminal] = set()
    return {k: frozenset(v) for k, v in edges.items()}


ALLOWED_TRANSITIONS: dict[MissionPhase, frozenset[MissionPhase]] = (
    _build_transitions()
)


def is_allowed(source: MissionPhase, target: MissionPhase) -> bool:
    """Check whether an edge exists in the phase graph."""
    return target in ALLOWED_TRANSITIONS.get(source, frozenset())


def next_phase(
    phase: MissionPhase, include_human_feedback: bool = True
) -> MissionPhase:
    """Return the phase following ``phase`` in the total order.

    Raises:
        ValueError: If ``phase`` is not a working phase
    """
    if phase not in PHASE_ORDER or phase is MissionPhase.COMPLETE:
        raise ValueError(f"{phase.value} has no successor")
    candidate = PHASE_ORDER[PHASE_ORDER.index(phase) + 1]
    if candidate is MissionPhase.HUMAN_FEEDBACK and not include_human_feedback:
        return MissionPhase.DEPLOY
    return candidate


# =============================================================================
# PHASE PLAN
# =============================================================================


class RepairStrategy(str, Enum):
    """How a gate-rejected phase is repaired."""

    RERUN = "rerun"  # re-invoke the phase agents with the error log
    REPAIR_AGENT = "repair_agent"  # repair agent patches targets, then re-verify


@dataclass(frozen=True)
class PhaseDefinition:
    """Static description of one working phase."""

    phase: MissionPhase
    agents: tuple[AgentRole, ...]
    produces: tuple[str, ...]
    verification_artifact: str | None = None
    repair_strategy: RepairStrategy = RepairStrategy.RERUN
    repair_targets: tuple[str, ...] = ()

    def producers_of(self, artifact_type: str) -> tuple[AgentRole, ...]:
        return tuple(
            role
            for role in self.agents
            if artifact_type in produces(role, self.phase.value)
        )


_CODE_TARGETS = ("frontend_code", "backend_code")

DEFAULT_PHASE_PLAN: tuple[PhaseDefinition, ...] = (
    PhaseDefinition(MissionPhase.INTAKE, (AgentRole.INTAKE,), ("mission_brief",)),
    PhaseDefinition(MissionPhase.ANALYZE, (AgentRole.PRODUCT_MANAGER,), ("prd",)),
    PhaseDefinition(
        MissionPhase.PLAN, (AgentRole.ARCHITECT,), ("architecture", "api_contract")
    ),
    PhaseDefinition(
        MissionPhase.DESIGN,
        (AgentRole.DESIGNER, AgentRole.QA_ENGINEER),
        ("ui_spec", "test_plan"),
    ),
    PhaseDefinition(
        MissionPhase.GENERATE_FRONTEND,
        (AgentRole.FRONTEND_ENGINEER,),
        ("frontend_code",),
    ),
    PhaseDefinition(
        MissionPhase.GENERATE_BACKEND,
        (AgentRole.BACKEND_ENGINEER,),
        ("backend_code",),
    ),
    PhaseDefinition(
        MissionPhase.REVIEW,
        (AgentRole.QA_ENGINEER,),
        ("review_report",),
        verification_artifact="review_report",
        repair_strategy=RepairStrategy.REPAIR_AGENT,
        repair_targets=_CODE_TARGETS,
    ),
    PhaseDefinition(
        MissionPhase.SECURITY_AUDIT,
        (AgentRole.SECURITY_ANALYST,),
        ("security_report",),
        verification_artifact="security_report",
        repair_strategy=RepairStrategy.REPAIR_AGENT,
        repair_targets=_CODE_TARGETS,
    ),
    PhaseDefinition(MissionPhase.HUMAN_FEEDBACK, (), ("human_feedback",)),
    PhaseDefinition(MissionPhase.DEPLOY, (AgentRole.DEVOPS_ENGINEER,), ("deployment",)),
)


def build_phase_plan(
    include_human_feedback: bool = True,
) -> tuple[PhaseDefinition, ...]:
    """Return the configured phase set."""
    if include_human_feedback:
        return DEFAULT_PHASE_PLAN
    return tuple(
        d for d in DEFAULT_PHASE_PLAN if d.phase is not MissionPhase.HUMAN_FEEDBACK
    )


def required_artifact_types(plan: tuple[PhaseDefinition, ...]) -> frozenset[str]:
    """Artifact types that must exist for a run of ``plan`` to be complete."""
    return frozenset(t for definition in plan for t in definition.produces)


def compute_plan_ref(plan: tuple[PhaseDefinition, ...]) -> str:
    """Compute a content-addressed hash of a phase plan.

    Produces a deterministic hash by:
    1. Canonical JSON serialization (sorted keys, no whitespace)
    2. SHA-256 hash of the canonical form

    A checkpoint records the hash of the plan it was taken under, so a
    resume can refuse to continue under a different topology.
    """
    structure = [
        {
            "phase": d.phase.value,
            "agents": [r.value for r in d.agents],
            "produces": list(d.produces),
            "verification_artifact": d.verification_artifact,
            "repair_strategy": d.repair_strategy.value,
            "repair_targets": list(d.repair_targets),
        }
        for d in plan
    ]
    canonical = json.dumps(structure, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
