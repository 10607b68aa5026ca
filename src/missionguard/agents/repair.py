"""
Repair agent.

Patches the code bundles named by the workflow using the error log of the
rejected phase, then appends an entry to the repair log.
"""

import logging
from typing import Any

from missionguard.agents.base import BaseAgent
from missionguard.agents.prompts import ROLE_TEMPLATES, PromptTemplate
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext
from missionguard.domain.interfaces import LLMProviderInterface

logger = logging.getLogger(__name__)

REPAIR_LOG = "repair_log"


class RepairAgent(BaseAgent):
    """Rewrites failing artifacts, one LLM call per target."""

    def __init__(
        self,
        provider: LLMProviderInterface,
        agent_id: str | None = None,
        template: PromptTemplate | None = None,
    ) -> None:
        super().__init__(AgentRole.REPAIR, agent_id)
        self.provider = provider
        self.template = template or ROLE_TEMPLATES[AgentRole.REPAIR]

    async def execute(self, context: AgentContext) -> Any:
        repaired: list[str] = []
        for artifact_type in context.targets:
            if artifact_type == REPAIR_LOG:
                continue
            current = context.get(artifact_type)
            if current is None:
                continue
            task = (
                f"Fix the {artifact_type} bundle so the issues in HISTORY are "
                'resolved. Shape: {"files": [{"path": "...", "content": "..."}]}'
            )
            prompt = self.template.render(context, task, {artifact_type: current})
            context.step()
            fixed = await self.provider.prompt_json(prompt, system=self.template.role)
            context.put(artifact_type, fixed)
            repaired.append(artifact_type)

        self._append_log(context, repaired)
        logger.info(f"{self.agent_id} repaired {repaired or 'nothing'}")
        return repaired

    @staticmethod
    def _append_log(context: AgentContext, repaired: list[str]) -> None:
        log = context.get(REPAIR_LOG) or {"entries": []}
        phase = context.repairing_phase or context.phase
        log["entries"].append(
            {
                "phase": phase.value,
                "attempt": max(context.attempt, 1),
                "targets": repaired,
                "issues": list(context.feedback),
            }
        )
        context.put(REPAIR_LOG, log)
