"""Tests for the console feedback responder."""

import asyncio
import io

import pytest
from rich.console import Console
from rich.prompt import Prompt

from missionguard.application.mission_workflow import MissionWorkflow
from missionguard.config import MissionConfig
from missionguard.domain.models import FeedbackSignal
from missionguard.domain.phases import MissionPhase
from missionguard.infrastructure import LocalMissionEngine
from missionguard.interactive import ConsoleFeedbackResponder, deliver_feedback

WITH_FEEDBACK = MissionConfig(include_human_feedback=True)


@pytest.fixture
def console() -> Console:
    """Console writing to a buffer instead of the terminal."""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def answers(monkeypatch) -> list[str]:
    """Scripted replies for rich prompts, consumed in order."""
    replies: list[str] = []

    def ask(*args, **kwargs):
        return replies.pop(0)

    monkeypatch.setattr(Prompt, "ask", staticmethod(ask))
    return replies


class TestConsoleFeedbackResponder:
    """Rendering and prompting."""

    @pytest.mark.asyncio
    async def test_show_lists_artifacts_and_files(
        self, mission, team_factory, console: Console
    ) -> None:
        workflow = MissionWorkflow(mission, team_factory().values())
        await workflow.run()

        ConsoleFeedbackResponder(console).show(workflow)

        output = console.file.getvalue()
        assert "MISSION REVIEW: todo" in output
        assert "prd" in output
        assert "backend/main.py" in output
        assert "frontend/src/App.jsx" in output

    def test_ask_approval(self, console: Console, answers: list[str]) -> None:
        answers.extend(["y", "ship it"])
        feedback = ConsoleFeedbackResponder(console).ask()
        assert feedback == FeedbackSignal(approved=True, comment="ship it")

    def test_ask_rejection_without_comment(
        self, console: Console, answers: list[str]
    ) -> None:
        answers.extend(["n", ""])
        feedback = ConsoleFeedbackResponder(console).ask()
        assert feedback == FeedbackSignal(approved=False, comment=None)


class TestAttach:
    """Reviewing a mission hosted by an engine."""

    @pytest.mark.asyncio
    async def test_approves_parked_mission(
        self, mission, team_factory, console: Console, answers: list[str]
    ) -> None:
        answers.extend(["y", "looks good"])
        engine = LocalMissionEngine(
            lambda m: team_factory().values(), config=WITH_FEEDBACK
        )
        workflow_id = await engine.start(mission)

        feedback = await asyncio.wait_for(
            ConsoleFeedbackResponder(console).attach(engine, workflow_id), timeout=5
        )
        result = await asyncio.wait_for(engine.result(workflow_id), timeout=2)

        assert feedback is not None and feedback.approved
        assert result.success
        stored = engine.workflow(workflow_id).run_store.get("human_feedback")
        assert stored["comment"] == "looks good"

    @pytest.mark.asyncio
    async def test_rejection_fails_mission(
        self, mission, team_factory, console: Console, answers: list[str]
    ) -> None:
        answers.extend(["n", "wrong colours"])
        engine = LocalMissionEngine(
            lambda m: team_factory().values(), config=WITH_FEEDBACK
        )
        workflow_id = await engine.start(mission)

        await asyncio.wait_for(
            ConsoleFeedbackResponder(console).attach(engine, workflow_id), timeout=5
        )
        result = await asyncio.wait_for(engine.result(workflow_id), timeout=2)

        assert result.phase is MissionPhase.FAILED
        assert "Rejected by human reviewer: wrong colours" in result.errors

    @pytest.mark.asyncio
    async def test_mission_without_feedback_phase(
        self, mission, team_factory, console: Console
    ) -> None:
        engine = LocalMissionEngine(lambda m: team_factory().values())
        workflow_id = await engine.start(mission)

        feedback = await asyncio.wait_for(
            ConsoleFeedbackResponder(console).attach(engine, workflow_id), timeout=5
        )

        assert feedback is None
        assert (await engine.result(workflow_id)).success


class TestDeliverFeedback:
    """Tests for deliver_feedback()."""

    @pytest.mark.asyncio
    async def test_signals_the_engine(self, mission, team_factory) -> None:
        engine = LocalMissionEngine(
            lambda m: team_factory().values(), config=WITH_FEEDBACK
        )
        workflow_id = await engine.start(mission)
        async with asyncio.timeout(2):
            while engine.workflow(workflow_id).state.phase is not (
                MissionPhase.HUMAN_FEEDBACK
            ):
                await asyncio.sleep(0.005)

        await deliver_feedback(engine, workflow_id, FeedbackSignal(approved=True))

        assert (await asyncio.wait_for(engine.result(workflow_id), 2)).success
