"""
LLM-backed agents.

LLMAgent writes each of its target artifacts from one JSON completion.
ReviewerAgent merges deterministic static checks with an optional LLM review
into a verification report.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from missionguard.agents.base import BaseAgent
from missionguard.agents.prompts import (
    ARTIFACT_TASKS,
    ROLE_TEMPLATES,
    PromptTemplate,
    collect_inputs,
)
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext
from missionguard.domain.interfaces import LLMProviderInterface
from missionguard.domain.models import CheckResult, Issue, VerificationResult
from missionguard.guards.static_scan import bundle_files

logger = logging.getLogger(__name__)

StaticCheck = Callable[[list[tuple[str, str]]], CheckResult]

REPORT_TYPES = frozenset({"review_report", "security_report"})


class LLMAgent(BaseAgent):
    """Produces every target artifact with one LLM call each."""

    def __init__(
        self,
        role: AgentRole,
        provider: LLMProviderInterface | None,
        agent_id: str | None = None,
        template: PromptTemplate | None = None,
    ) -> None:
        super().__init__(role, agent_id)
        self.provider = provider
        self.template = template or ROLE_TEMPLATES[role]

    async def execute(self, context: AgentContext) -> Any:
        written: dict[str, Any] = {}
        for artifact_type in context.targets:
            data = await self.generate(context, artifact_type)
            context.put(artifact_type, data)
            written[artifact_type] = data
        return written

    async def generate(self, context: AgentContext, artifact_type: str) -> Any:
        """Prompt the provider for one artifact payload."""
        if self.provider is None:
            raise RuntimeError(
                f"{self.agent_id} needs an LLM provider to write {artifact_type}"
            )
        task = ARTIFACT_TASKS.get(artifact_type, f"Produce the {artifact_type}.")
        prompt = self.template.render(
            context, task, collect_inputs(context, artifact_type)
        )
        context.step()
        logger.debug(f"{self.agent_id} prompting for {artifact_type}")
        return await self.provider.prompt_json(prompt, system=self.template.role)


def parse_issues(payload: Any) -> tuple[Issue, ...]:
    """Read ``{"issues": [...]}`` from a review completion.

    Raises:
        ValueError: If the payload does not have that shape
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("issues"), list):
        raise ValueError("Review response must be an object with an 'issues' list")
    issues = []
    for raw in payload["issues"]:
        try:
            issues.append(Issue.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed review issue {raw!r}: {e}") from e
    return tuple(issues)


class ReviewerAgent(LLMAgent):
    """
    Writes verification reports over the generated code.

    Static checks always run; the LLM review runs when a provider is given.
    Targets that are not reports fall back to plain LLM generation, so QA
    can write its test plan in the design phase with the same agent.
    """

    def __init__(
        self,
        role: AgentRole,
        provider: LLMProviderInterface | None = None,
        checks: Iterable[StaticCheck] = (),
        agent_id: str | None = None,
        template: PromptTemplate | None = None,
    ) -> None:
        super().__init__(role, provider, agent_id, template)
        self.checks = tuple(checks)

    async def generate(self, context: AgentContext, artifact_type: str) -> Any:
        if artifact_type not in REPORT_TYPES:
            return await super().generate(context, artifact_type)

        files = bundle_files(context.get("frontend_code"), context.get("backend_code"))
        results = [check(files) for check in self.checks]
        if self.provider is not None:
            review = await super().generate(context, artifact_type)
            issues = parse_issues(review)
            status = "fail" if any(i.severity.is_blocking for i in issues) else "pass"
            results.append(CheckResult("llm_review", status, issues))
        return VerificationResult.from_checks(results).to_dict()
