"""
Agent roles and their statically declared capabilities.

The set of roles is closed. Each role declares, per phase, which artifact
types it produces. The workflow checks agent wiring against these
declarations at construction, so a mis-wired mission fails fast instead of
halfway through a run.
"""

from enum import Enum


class AgentRole(str, Enum):
    """Closed set of agent roles taking part in a mission."""

    INTAKE = "intake"
    PRODUCT_MANAGER = "product_manager"
    ARCHITECT = "architect"
    DESIGNER = "designer"
    FRONTEND_ENGINEER = "frontend_engineer"
    BACKEND_ENGINEER = "backend_engineer"
    QA_ENGINEER = "qa_engineer"
    SECURITY_ANALYST = "security_analyst"
    DEVOPS_ENGINEER = "devops_engineer"
    REPAIR = "repair"


# Principal used for artifacts written on behalf of the human reviewer.
HUMAN_PRINCIPAL = "human"


# role -> {phase value -> artifact types produced in that phase}
ROLE_CAPABILITIES: dict[AgentRole, dict[str, tuple[str, ...]]] = {
    AgentRole.INTAKE: {"intake": ("mission_brief",)},
    AgentRole.PRODUCT_MANAGER: {"analyze": ("prd",)},
    AgentRole.ARCHITECT: {"plan": ("architecture", "api_contract")},
    AgentRole.DESIGNER: {"design": ("ui_spec",)},
    AgentRole.QA_ENGINEER: {
        "design": ("test_plan",),
        "review": ("review_report",),
    },
    AgentRole.FRONTEND_ENGINEER: {"generate_frontend": ("frontend_code",)},
    AgentRole.BACKEND_ENGINEER: {"generate_backend": ("backend_code",)},
    AgentRole.SECURITY_ANALYST: {"security_audit": ("security_report",)},
    AgentRole.DEVOPS_ENGINEER: {"deploy": ("deployment",)},
    AgentRole.REPAIR: {"repair": ("frontend_code", "backend_code", "repair_log")},
}


def produces(role: AgentRole, phase: str) -> tuple[str, ...]:
    """Artifact types a role produces in the given phase (empty if none)."""
    return ROLE_CAPABILITIES.get(role, {}).get(phase, ())
