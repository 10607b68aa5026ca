"""Intake agent: turns the raw mission request into a mission brief."""

import logging
from typing import Any

from missionguard.agents.base import BaseAgent
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext

logger = logging.getLogger(__name__)


class IntakeAgent(BaseAgent):
    """Deterministic: the brief restates the request and the app name."""

    def __init__(self, agent_id: str | None = None) -> None:
        super().__init__(AgentRole.INTAKE, agent_id)

    async def execute(self, context: AgentContext) -> Any:
        request = context.mission.request.strip()
        if not request:
            raise ValueError("Mission request is empty")
        brief = {
            "request": request,
            "app_name": context.mission.app_name,
            "summary": request.splitlines()[0][:200],
        }
        context.put("mission_brief", brief)
        logger.debug(f"Mission brief written for {context.mission.mission_id}")
        return brief
