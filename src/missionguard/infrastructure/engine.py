"""
In-process durable engine for mission workflows.

Hosts each mission as an asyncio task and routes signals, queries and
cancellation to it by workflow ID. Durability comes from the checkpoint
store: ``recover()`` restarts every unfinished mission from its latest
checkpoint, which is how a crashed process picks up where it stopped.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from missionguard.application.mission_workflow import MissionWorkflow
from missionguard.config import MissionConfig
from missionguard.domain.interfaces import (
    AgentInterface,
    DurableEngineInterface,
    GateInterface,
    MissionCheckpointStoreInterface,
    MissionEventStoreInterface,
    ToolRegistryInterface,
)
from missionguard.domain.models import MissionCheckpoint, MissionInput, MissionResult
from missionguard.infrastructure.persistence import FilesystemMissionCheckpointStore

logger = logging.getLogger(__name__)

AgentFactory = Callable[[MissionInput], Iterable[AgentInterface]]
ToolsFactory = Callable[[MissionInput], ToolRegistryInterface]


class LocalMissionEngine(DurableEngineInterface):
    """Runs mission workflows in the current event loop."""

    def __init__(
        self,
        agent_factory: AgentFactory,
        config: MissionConfig | None = None,
        checkpoint_store: MissionCheckpointStoreInterface | None = None,
        event_store: MissionEventStoreInterface | None = None,
        gate_factory: Callable[[], GateInterface] | None = None,
        tools_factory: ToolsFactory | None = None,
    ) -> None:
        """
        Args:
            agent_factory: Builds a fresh agent set for each mission
            config: Settings shared by every hosted mission
            checkpoint_store: Required for ``recover()``; defaults to a
                filesystem store under ``config.checkpoint_dir`` when that is set
            event_store: Receives the trace of every hosted mission
            gate_factory: Builds the gate per mission (VerificationGate if omitted)
            tools_factory: Builds the tool registry per mission (built-ins if omitted)
        """
        self._agent_factory = agent_factory
        self.config = config or MissionConfig()
        if checkpoint_store is None and self.config.checkpoint_dir:
            checkpoint_store = FilesystemMissionCheckpointStore(
                self.config.checkpoint_dir
            )
        self._checkpoint_store = checkpoint_store
        self._event_store = event_store
        self._gate_factory = gate_factory
        self._tools_factory = tools_factory
        self._workflows: dict[str, MissionWorkflow] = {}
        self._tasks: dict[str, asyncio.Task[MissionResult]] = {}

    def _launch(
        self, mission: MissionInput, resume_from: MissionCheckpoint | None = None
    ) -> str:
        workflow_id = mission.mission_id
        task = self._tasks.get(workflow_id)
        if task is not None and not task.done():
            raise ValueError(f"Mission '{workflow_id}' is already running")

        workflow = MissionWorkflow(
            mission,
            self._agent_factory(mission),
            config=self.config,
            gate=self._gate_factory() if self._gate_factory else None,
            checkpoint_store=self._checkpoint_store,
            event_store=self._event_store,
            tools=self._tools_factory(mission) if self._tools_factory else None,
        )
        self._workflows[workflow_id] = workflow
        self._tasks[workflow_id] = asyncio.create_task(
            workflow.run(resume_from=resume_from), name=f"mission-{workflow_id}"
        )
        return workflow_id

    async def start(self, mission: MissionInput) -> str:
        workflow_id = self._launch(mission)
        logger.info(f"Started mission workflow {workflow_id}")
        return workflow_id

    async def recover(self) -> list[str]:
        """Restart every unfinished mission from its latest checkpoint.

        Returns:
            Workflow IDs that were restarted
        """
        if self._checkpoint_store is None:
            return []
        resumed: list[str] = []
        for mission_id in self._checkpoint_store.list_missions():
            if mission_id in self._tasks and not self._tasks[mission_id].done():
                continue
            latest = self._checkpoint_store.get_latest(mission_id)
            if latest is None or latest.phase.is_terminal:
                continue
            self._launch(latest.mission, resume_from=latest)
            logger.info(
                f"Recovered mission {mission_id} at phase {latest.phase.value}"
            )
            resumed.append(mission_id)
        return resumed

    def _get(self, workflow_id: str) -> MissionWorkflow:
        if workflow_id not in self._workflows:
            raise KeyError(f"Unknown workflow: {workflow_id}")
        return self._workflows[workflow_id]

    def workflow(self, workflow_id: str) -> MissionWorkflow:
        """
        Raises:
            KeyError: If the workflow was never started by this engine
        """
        return self._get(workflow_id)

    async def signal(self, workflow_id: str, name: str, payload: Any = None) -> None:
        self._get(workflow_id).signal(name, payload)

    def query(self, workflow_id: str, name: str) -> Any:
        return self._get(workflow_id).query(name)

    async def cancel(self, workflow_id: str) -> None:
        self._get(workflow_id).cancel_signal("Cancelled by engine")

    async def result(self, workflow_id: str) -> MissionResult:
        """Wait for a mission's result. Cancelling the wait leaves it running."""
        self._get(workflow_id)
        return await asyncio.shield(self._tasks[workflow_id])

    def running(self) -> list[str]:
        return [wid for wid, task in self._tasks.items() if not task.done()]
