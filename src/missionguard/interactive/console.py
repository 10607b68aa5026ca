"""
Console responder for the human-feedback phase.

Shows the run manifest and generated files, asks for approval, and delivers
the decision to the engine as a ``feedback`` signal.
"""

import asyncio
import logging
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from missionguard.application.message_bus import TOPIC_BROADCAST
from missionguard.application.mission_workflow import (
    CODE_ARTIFACTS,
    SIGNAL_FEEDBACK,
    MissionWorkflow,
)
from missionguard.domain.interfaces import DurableEngineInterface
from missionguard.domain.models import FeedbackSignal, Message
from missionguard.domain.phases import MissionPhase

logger = logging.getLogger(__name__)


class ConsoleFeedbackResponder:
    """
    Human reviewer at a terminal.

    This implementation uses synchronous rich prompts, run in a worker
    thread so the event loop keeps serving other missions.
    """

    def __init__(self, console: Console | None = None, title: str = "MISSION REVIEW"):
        self.console = console or Console()
        self.title = title

    def show(self, workflow: MissionWorkflow) -> None:
        """Render the manifest and file list of a parked mission."""
        mission = workflow.mission
        header = Text(f"{self.title}: {mission.app_name}", style="bold yellow")
        header.append(f"\n{mission.request}", style="dim")
        self.console.print(Panel(header, expand=False))

        manifest = workflow.run_store.build_manifest()
        table = Table(title=f"Run {manifest.run_id} ({manifest.status.value})")
        table.add_column("Artifact", style="cyan")
        table.add_column("Version", justify="right")
        table.add_column("Written by")
        for artifact_type in manifest.artifacts:
            meta = workflow.run_store.get_metadata(artifact_type)
            if meta is not None:
                table.add_row(artifact_type, str(meta.version), meta.created_by)
        self.console.print(table)

        for artifact_type in CODE_ARTIFACTS:
            bundle = workflow.run_store.get(artifact_type) or {}
            paths = [entry["path"] for entry in bundle.get("files", ())]
            if paths:
                self.console.print(f"[dim]{artifact_type}:[/dim] {', '.join(paths)}")

    def ask(self) -> FeedbackSignal:
        """Prompt for a decision and an optional comment."""
        decision = Prompt.ask(
            "\n[bold]Approve this application?[/bold]",
            choices=["y", "n"],
            console=self.console,
        )
        comment = Prompt.ask(
            "[bold]Comment[/bold] (optional)", default="", console=self.console
        )
        return FeedbackSignal(approved=decision == "y", comment=comment or None)

    def review(self, workflow: MissionWorkflow) -> FeedbackSignal:
        self.show(workflow)
        return self.ask()

    async def attach(self, engine: Any, workflow_id: str) -> FeedbackSignal | None:
        """
        Wait for the mission to park at HUMAN_FEEDBACK, then review it.

        Args:
            engine: Engine hosting the mission; must expose ``workflow(id)``
            workflow_id: Mission to review

        Returns:
            The delivered feedback, or None if the mission ended first
        """
        workflow: MissionWorkflow = engine.workflow(workflow_id)
        parked = asyncio.Event()

        def on_broadcast(message: Message) -> None:
            content = message.content
            if isinstance(content, dict) and content.get("to") == (
                MissionPhase.HUMAN_FEEDBACK.value
            ):
                parked.set()

        sub_id = workflow.bus.subscribe(TOPIC_BROADCAST, on_broadcast)
        try:
            if workflow.state.phase is MissionPhase.HUMAN_FEEDBACK:
                parked.set()
            waiter = asyncio.create_task(parked.wait())
            finished = asyncio.ensure_future(engine.result(workflow_id))
            done, _ = await asyncio.wait(
                {waiter, finished}, return_when=asyncio.FIRST_COMPLETED
            )
            for pending in (waiter, finished):
                pending.cancel()
            await asyncio.gather(waiter, finished, return_exceptions=True)
            if waiter not in done:
                return None
        finally:
            workflow.bus.unsubscribe(sub_id)

        feedback = await asyncio.to_thread(self.review, workflow)
        await deliver_feedback(engine, workflow_id, feedback)
        return feedback


async def deliver_feedback(
    engine: DurableEngineInterface, workflow_id: str, feedback: FeedbackSignal
) -> None:
    logger.info(
        f"Delivering feedback to {workflow_id}: "
        f"{'approved' if feedback.approved else 'rejected'}"
    )
    await engine.signal(workflow_id, SIGNAL_FEEDBACK, feedback)
