"""
Concrete mission agents.

One implementation per AgentRole. LLM-backed agents share a provider;
ScriptedAgent stands in for any role in tests and offline runs.
"""

from missionguard.agents.base import BaseAgent
from missionguard.agents.devops import DeployAgent
from missionguard.agents.factory import build_default_agents
from missionguard.agents.intake import IntakeAgent
from missionguard.agents.llm_agent import LLMAgent, ReviewerAgent, parse_issues
from missionguard.agents.prompts import PromptTemplate
from missionguard.agents.repair import RepairAgent
from missionguard.agents.scripted import ScriptedAgent

__all__ = [
    "BaseAgent",
    "DeployAgent",
    "IntakeAgent",
    "LLMAgent",
    "PromptTemplate",
    "RepairAgent",
    "ReviewerAgent",
    "ScriptedAgent",
    "build_default_agents",
    "parse_issues",
]
