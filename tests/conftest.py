"""Shared pytest fixtures for missionguard tests."""

from collections.abc import Callable
from typing import Any

import pytest

from missionguard.agents.scripted import ScriptedAgent
from missionguard.application.contract_validator import ContractValidator
from missionguard.application.message_bus import MessageBus
from missionguard.application.run_store import RunStore
from missionguard.config import MissionConfig
from missionguard.domain.agents import AgentRole
from missionguard.domain.cancellation import CancellationToken
from missionguard.domain.context import AgentContext
from missionguard.domain.contracts import build_default_contracts
from missionguard.domain.models import MissionInput
from missionguard.domain.phases import MissionPhase
from missionguard.infrastructure.persistence import (
    InMemoryMissionCheckpointStore,
    InMemoryMissionEventStore,
)


def passing_report(*issues: dict[str, Any]) -> dict[str, Any]:
    """Verification payload whose issues are all non-blocking."""
    return {
        "status": "pass",
        "checks": [{"name": "review", "status": "pass", "issues": list(issues)}],
        "summary": {"total": 1, "passed": 1, "failed": 0},
    }


FRONTEND_BUNDLE = {
    "files": [
        {
            "path": "frontend/src/App.jsx",
            "content": "export default function App() {\n  return null;\n}\n",
        }
    ],
    "framework": "react",
}

BACKEND_BUNDLE = {
    "files": [
        {
            "path": "backend/main.py",
            "content": "def list_todos():\n    return []\n",
        }
    ],
    "framework": "fastapi",
}

DEFAULT_OUTPUTS: dict[AgentRole, dict[str, Any]] = {
    AgentRole.INTAKE: {
        "mission_brief": {"request": "Build a todo app", "app_name": "todo"}
    },
    AgentRole.PRODUCT_MANAGER: {
        "prd": {
            "title": "Todo",
            "features": [{"name": "Add todos", "priority": "must"}],
        }
    },
    AgentRole.ARCHITECT: {
        "architecture": {"components": [{"name": "api"}, {"name": "web"}]},
        "api_contract": {"endpoints": [{"method": "GET", "path": "/todos"}]},
    },
    AgentRole.DESIGNER: {"ui_spec": {"pages": [{"name": "home"}]}},
    AgentRole.QA_ENGINEER: {
        "test_plan": {"cases": [{"name": "lists todos"}]},
        "review_report": passing_report(),
    },
    AgentRole.FRONTEND_ENGINEER: {"frontend_code": FRONTEND_BUNDLE},
    AgentRole.BACKEND_ENGINEER: {"backend_code": BACKEND_BUNDLE},
    AgentRole.SECURITY_ANALYST: {"security_report": passing_report()},
    AgentRole.DEVOPS_ENGINEER: {
        "deployment": {"status": "deployed", "url": None, "files_written": 2}
    },
    AgentRole.REPAIR: {
        "frontend_code": FRONTEND_BUNDLE,
        "backend_code": BACKEND_BUNDLE,
    },
}

TeamFactory = Callable[..., dict[AgentRole, ScriptedAgent]]


@pytest.fixture
def mission() -> MissionInput:
    """The todo app mission used throughout the suite."""
    return MissionInput(
        mission_id="mission-001", request="Build a todo app", app_name="todo"
    )


@pytest.fixture
def fast_config() -> MissionConfig:
    """Small timeouts so failure paths finish quickly."""
    return MissionConfig(
        agent_timeout_ms=1000,
        phase_timeout_ms=2000,
        mission_timeout_ms=10000,
        request_timeout_ms=500,
    )


@pytest.fixture
def team_factory() -> TeamFactory:
    """Build one ScriptedAgent per role.

    Keyword arguments override a role's outputs (``outputs={role: {...}}``)
    or pass ScriptedAgent options (``options={role: {"delay": 1.0}}``).
    """

    def build(
        outputs: dict[AgentRole, dict[str, Any]] | None = None,
        options: dict[AgentRole, dict[str, Any]] | None = None,
    ) -> dict[AgentRole, ScriptedAgent]:
        team: dict[AgentRole, ScriptedAgent] = {}
        for role, defaults in DEFAULT_OUTPUTS.items():
            role_outputs = dict(defaults)
            role_outputs.update((outputs or {}).get(role, {}))
            team[role] = ScriptedAgent(
                role, role_outputs, **(options or {}).get(role, {})
            )
        return team

    return build


@pytest.fixture
def checkpoint_store() -> InMemoryMissionCheckpointStore:
    return InMemoryMissionCheckpointStore()


@pytest.fixture
def event_store() -> InMemoryMissionEventStore:
    return InMemoryMissionEventStore()


@pytest.fixture
def run_store() -> RunStore:
    """Run store with the default contracts and no required types."""
    return RunStore("run-001", ContractValidator(build_default_contracts()))


@pytest.fixture
def make_context(
    mission: MissionInput, run_store: RunStore
) -> Callable[..., AgentContext]:
    """Build an AgentContext bound to the shared run store."""

    def build(
        agent_id: str,
        phase: MissionPhase,
        targets: tuple[str, ...] = (),
        **kwargs: Any,
    ) -> AgentContext:
        kwargs.setdefault("token", CancellationToken().child())
        kwargs.setdefault("bus", MessageBus())
        return AgentContext(
            agent_id=agent_id,
            mission=mission,
            phase=phase,
            store=run_store,
            targets=targets,
            **kwargs,
        )

    return build
