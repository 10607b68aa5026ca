"""
Default ownership contracts for a mission run.

Contracts are built fresh for every run so that no mutable registry is
shared between missions.
"""

from missionguard.domain.agents import HUMAN_PRINCIPAL, AgentRole
from missionguard.domain.models import AgentContract, Ownership, OwnershipLevel

_O = OwnershipLevel.OWNER
_P = OwnershipLevel.PROPOSE_ONLY

_DEFAULT_OWNERSHIP: dict[str, tuple[tuple[str, OwnershipLevel], ...]] = {
    AgentRole.INTAKE.value: (("mission_brief", _O),),
    AgentRole.PRODUCT_MANAGER.value: (("prd", _O),),
    AgentRole.ARCHITECT.value: (("architecture", _O), ("api_contract", _O)),
    AgentRole.DESIGNER.value: (("ui_spec", _O),),
    AgentRole.QA_ENGINEER.value: (("test_plan", _O), ("review_report", _O)),
    AgentRole.FRONTEND_ENGINEER.value: (("frontend_code", _O), ("ui_spec", _P)),
    AgentRole.BACKEND_ENGINEER.value: (("backend_code", _O), ("api_contract", _P)),
    AgentRole.SECURITY_ANALYST.value: (("security_report", _O),),
    AgentRole.DEVOPS_ENGINEER.value: (("deployment", _O),),
    AgentRole.REPAIR.value: (
        ("frontend_code", _O),
        ("backend_code", _O),
        ("repair_log", _O),
    ),
    HUMAN_PRINCIPAL: (("human_feedback", _O),),
}


def build_default_contracts() -> dict[str, AgentContract]:
    """Build the agent_id -> contract mapping for a new run."""
    return {
        agent_id: AgentContract(
            agent_id=agent_id,
            ownership=tuple(Ownership(t, level) for t, level in entries),
        )
        for agent_id, entries in _DEFAULT_OWNERSHIP.items()
    }
