"""
Prompt templates for LLM-backed agents.

A template renders the role, the mission request, the upstream artifacts an
artifact type depends on, and the error log of rejected attempts.
"""

import json
from dataclasses import dataclass
from typing import Any

from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext

# =============================================================================
# PROMPT TEMPLATE
# =============================================================================


@dataclass(frozen=True)
class PromptTemplate:
    """Structured prompt template for an agent role."""

    role: str
    constraints: str
    feedback_wrapper: str = (
        "VERIFICATION REJECTION:\n{feedback}\n"
        "Instruction: Address every issue above."
    )

    def render(
        self, context: AgentContext, task: str, inputs: dict[str, Any]
    ) -> str:
        """Render the prompt for one target artifact."""
        parts = [
            f"# ROLE\n{self.role}",
            f"# CONSTRAINTS\n{self.constraints}",
            f"# MISSION\n{context.mission.request}",
        ]

        for artifact_type, data in inputs.items():
            parts.append(f"# INPUT: {artifact_type}\n{json.dumps(data, indent=2)}")

        if context.modifications:
            parts.append(
                "# REQUESTED MODIFICATIONS\n"
                f"{json.dumps(context.modifications, indent=2)}"
            )

        if context.feedback:
            wrapped = self.feedback_wrapper.format(
                feedback="\n".join(f"- {line}" for line in context.feedback)
            )
            parts.append(f"# HISTORY\n{wrapped}")

        parts.append(f"# TASK\n{task}")
        return "\n\n".join(parts)


# =============================================================================
# ROLE AND ARTIFACT DEFINITIONS
# =============================================================================

_JSON_ONLY = "Respond with a single JSON object and nothing else."

ROLE_TEMPLATES: dict[AgentRole, PromptTemplate] = {
    AgentRole.PRODUCT_MANAGER: PromptTemplate(
        role="You are an experienced product manager.",
        constraints=f"Keep scope to what the mission asks for. {_JSON_ONLY}",
    ),
    AgentRole.ARCHITECT: PromptTemplate(
        role="You are an experienced software architect.",
        constraints=f"Prefer simple, conventional designs. {_JSON_ONLY}",
    ),
    AgentRole.DESIGNER: PromptTemplate(
        role="You are an experienced UI/UX designer.",
        constraints=f"Design accessible, responsive pages. {_JSON_ONLY}",
    ),
    AgentRole.QA_ENGINEER: PromptTemplate(
        role="You are an experienced QA engineer.",
        constraints=f"Report only concrete, reproducible problems. {_JSON_ONLY}",
    ),
    AgentRole.FRONTEND_ENGINEER: PromptTemplate(
        role="You are an experienced frontend engineer.",
        constraints=(
            "Implement every page of the UI spec against the API contract. "
            f"{_JSON_ONLY}"
        ),
    ),
    AgentRole.BACKEND_ENGINEER: PromptTemplate(
        role="You are an experienced backend engineer.",
        constraints=(
            "Implement every endpoint of the API contract. Never hardcode "
            f"secrets. {_JSON_ONLY}"
        ),
    ),
    AgentRole.SECURITY_ANALYST: PromptTemplate(
        role="You are an experienced application security engineer.",
        constraints=(
            "Focus on the OWASP Top 10: injection, XSS, broken authentication, "
            f"sensitive data exposure. {_JSON_ONLY}"
        ),
    ),
    AgentRole.REPAIR: PromptTemplate(
        role="You are an experienced engineer fixing rejected code.",
        constraints=(
            "Change only what is needed to resolve the reported issues and "
            f"return every file of the bundle. {_JSON_ONLY}"
        ),
    ),
}

_CODE_BUNDLE_SHAPE = '{"files": [{"path": "...", "content": "..."}]}'
_ISSUES_SHAPE = (
    '{"issues": [{"severity": "low|medium|high|critical", '
    '"message": "...", "artifact": "..."}]}'
)

ARTIFACT_TASKS: dict[str, str] = {
    "prd": (
        "Write the product requirements. Shape: "
        '{"title": "...", "description": "...", '
        '"features": [{"name": "...", "description": "...", '
        '"priority": "must|should|could"}], "user_stories": ["..."]}'
    ),
    "architecture": (
        "Describe the system architecture. Shape: "
        '{"components": [{"name": "...", "responsibility": "..."}], '
        '"stack": {"frontend": "...", "backend": "..."}}'
    ),
    "api_contract": (
        "Define the HTTP API. Shape: "
        '{"endpoints": [{"method": "GET|POST|PUT|PATCH|DELETE", '
        '"path": "/...", "description": "..."}]}'
    ),
    "ui_spec": (
        "Specify the user interface. Shape: "
        '{"pages": [{"name": "...", "components": ["..."]}]}'
    ),
    "test_plan": (
        "Write the test plan. Shape: "
        '{"cases": [{"name": "...", "steps": ["..."], "expected": "..."}]}'
    ),
    "frontend_code": f"Generate the frontend sources. Shape: {_CODE_BUNDLE_SHAPE}",
    "backend_code": f"Generate the backend sources. Shape: {_CODE_BUNDLE_SHAPE}",
    "review_report": f"Review the generated code. Shape: {_ISSUES_SHAPE}",
    "security_report": f"Audit the generated code. Shape: {_ISSUES_SHAPE}",
}

# artifact type -> upstream artifact types rendered into its prompt
ARTIFACT_INPUTS: dict[str, tuple[str, ...]] = {
    "prd": ("mission_brief",),
    "architecture": ("prd",),
    "api_contract": ("prd",),
    "ui_spec": ("prd", "architecture"),
    "test_plan": ("prd", "api_contract"),
    "frontend_code": ("ui_spec", "api_contract"),
    "backend_code": ("architecture", "api_contract"),
    "review_report": ("test_plan", "frontend_code", "backend_code"),
    "security_report": ("frontend_code", "backend_code"),
}


def collect_inputs(context: AgentContext, artifact_type: str) -> dict[str, Any]:
    """Upstream artifacts for ``artifact_type`` that exist in the run store."""
    inputs: dict[str, Any] = {}
    for upstream in ARTIFACT_INPUTS.get(artifact_type, ()):
        data = context.get(upstream)
        if data is not None:
            inputs[upstream] = data
    return inputs
