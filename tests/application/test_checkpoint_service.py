"""Tests for CheckpointService."""

import pytest

from missionguard.application.checkpoint_service import CheckpointService
from missionguard.application.contract_validator import ContractValidator
from missionguard.application.run_store import RunStore
from missionguard.domain.contracts import build_default_contracts
from missionguard.domain.exceptions import ConfigurationError
from missionguard.domain.models import MissionInput, MissionState
from missionguard.domain.phases import MissionPhase
from missionguard.infrastructure.persistence import InMemoryMissionCheckpointStore

PRD = {"title": "Todo", "features": []}


@pytest.fixture
def service(checkpoint_store: InMemoryMissionCheckpointStore) -> CheckpointService:
    return CheckpointService(checkpoint_store)


class TestCreateCheckpoint:
    """Tests for capturing mission state."""

    def test_captures_state_and_artifacts(
        self, service: CheckpointService, mission: MissionInput, run_store: RunStore
    ) -> None:
        run_store.put("prd", PRD, "product_manager")
        state = MissionState(
            phase=MissionPhase.REPAIR,
            retry_count=2,
            repairing_phase=MissionPhase.REVIEW,
            errors=["boom"],
            error_log=["high: broken import"],
            iterations=7,
        )

        checkpoint = service.create_checkpoint(mission, state, run_store, "ref-1")

        assert checkpoint.mission_id == mission.mission_id
        assert checkpoint.phase is MissionPhase.REPAIR
        assert checkpoint.retry_count == 2
        assert checkpoint.repairing_phase is MissionPhase.REVIEW
        assert checkpoint.error_log == ("high: broken import",)
        assert checkpoint.iterations == 7
        assert [a.type for a in checkpoint.artifacts] == ["prd"]
        assert checkpoint.manifest.artifacts == ("prd",)
        assert checkpoint.plan_ref == "ref-1"

    def test_snapshot_is_isolated_from_later_writes(
        self, service: CheckpointService, mission: MissionInput, run_store: RunStore
    ) -> None:
        run_store.put("prd", PRD, "product_manager")
        checkpoint = service.create_checkpoint(
            mission, MissionState(), run_store, "ref-1"
        )

        run_store.put("prd", {**PRD, "title": "Changed"}, "product_manager")

        assert checkpoint.artifacts[0].data["title"] == "Todo"
        assert checkpoint.artifacts[0].version == 1

    def test_latest_and_listing(
        self, service: CheckpointService, mission: MissionInput, run_store: RunStore
    ) -> None:
        first = service.create_checkpoint(mission, MissionState(), run_store, "r")
        second = service.create_checkpoint(
            mission, MissionState(phase=MissionPhase.ANALYZE), run_store, "r"
        )

        assert service.latest(mission.mission_id) == second
        assert service.list_checkpoints(mission.mission_id) == [first, second]
        assert service.get_checkpoint(first.checkpoint_id) == first
        assert service.latest("unknown") is None

    def test_unknown_checkpoint(self, service: CheckpointService) -> None:
        with pytest.raises(KeyError):
            service.get_checkpoint("missing")


class TestRestore:
    """Tests for rebuilding state from a checkpoint."""

    def test_restore_state(
        self, service: CheckpointService, mission: MissionInput, run_store: RunStore
    ) -> None:
        run_store.put("prd", PRD, "product_manager")
        state = MissionState(phase=MissionPhase.PLAN, iterations=2)
        checkpoint = service.create_checkpoint(mission, state, run_store, "ref")

        fresh = RunStore(
            mission.mission_id, ContractValidator(build_default_contracts())
        )
        restored = CheckpointService.restore_state(checkpoint, fresh)

        assert restored.phase is MissionPhase.PLAN
        assert restored.iterations == 2
        assert restored.pending_signal is None
        assert fresh.get("prd") == PRD

    def test_verify_plan_ref(
        self, service: CheckpointService, mission: MissionInput, run_store: RunStore
    ) -> None:
        checkpoint = service.create_checkpoint(
            mission, MissionState(), run_store, "a" * 64
        )

        CheckpointService.verify_plan_ref(checkpoint, "a" * 64)
        with pytest.raises(ConfigurationError, match="phase plan"):
            CheckpointService.verify_plan_ref(checkpoint, "b" * 64)
