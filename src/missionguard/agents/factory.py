"""Builds the standard agent team for a mission."""

from missionguard.agents.devops import DeployAgent
from missionguard.agents.intake import IntakeAgent
from missionguard.agents.llm_agent import LLMAgent, ReviewerAgent
from missionguard.agents.repair import RepairAgent
from missionguard.config import SandboxConfig
from missionguard.domain.agents import AgentRole
from missionguard.domain.interfaces import (
    AgentInterface,
    LLMProviderInterface,
    SandboxInterface,
)
from missionguard.guards.static_scan import security_scan, syntax_check


def build_default_agents(
    provider: LLMProviderInterface,
    sandbox: SandboxInterface,
    config: SandboxConfig | None = None,
) -> list[AgentInterface]:
    """One agent per role, wired to a shared provider and sandbox.

    The deploy agent runs ``config.build_command`` after writing the files.
    """
    build_command = config.build_command if config else None
    return [
        IntakeAgent(),
        LLMAgent(AgentRole.PRODUCT_MANAGER, provider),
        LLMAgent(AgentRole.ARCHITECT, provider),
        LLMAgent(AgentRole.DESIGNER, provider),
        ReviewerAgent(AgentRole.QA_ENGINEER, provider, checks=(syntax_check,)),
        LLMAgent(AgentRole.FRONTEND_ENGINEER, provider),
        LLMAgent(AgentRole.BACKEND_ENGINEER, provider),
        ReviewerAgent(AgentRole.SECURITY_ANALYST, provider, checks=(security_scan,)),
        DeployAgent(sandbox, build_command=build_command),
        RepairAgent(provider),
    ]
