"""Application service for mission checkpoint operations.

Separates checkpoint creation and restore from workflow execution. Each
checkpoint carries the hash of the phase plan it was taken under, which is
verified on resume.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from missionguard.domain.exceptions import ConfigurationError
from missionguard.domain.models import MissionCheckpoint, MissionInput, MissionState

if TYPE_CHECKING:
    from missionguard.application.run_store import RunStore
    from missionguard.domain.interfaces import MissionCheckpointStoreInterface


class CheckpointService:
    """Creates, retrieves and verifies mission checkpoints."""

    def __init__(self, checkpoint_store: MissionCheckpointStoreInterface) -> None:
        """
        Args:
            checkpoint_store: Where checkpoints are persisted.
        """
        self._store = checkpoint_store

    def create_checkpoint(
        self,
        mission: MissionInput,
        state: MissionState,
        run_store: RunStore,
        plan_ref: str,
    ) -> MissionCheckpoint:
        """Capture mission state and run store contents.

        Args:
            mission: The mission being executed.
            state: Current mutable mission state.
            run_store: Store whose artifacts are snapshotted.
            plan_ref: Hash of the phase plan in use.

        Returns:
            The stored MissionCheckpoint.
        """
        checkpoint = MissionCheckpoint(
            checkpoint_id=str(uuid.uuid4()),
            mission_id=mission.mission_id,
            created_at=datetime.now(UTC).isoformat(),
            mission=mission,
            phase=state.phase,
            retry_count=state.retry_count,
            repairing_phase=state.repairing_phase,
            manifest=run_store.build_manifest(),
            artifacts=run_store.snapshot(),
            errors=tuple(state.errors),
            error_log=tuple(state.error_log),
            iterations=state.iterations,
            plan_ref=plan_ref,
        )
        self._store.store_checkpoint(checkpoint)
        return checkpoint

    def latest(self, mission_id: str) -> MissionCheckpoint | None:
        return self._store.get_latest(mission_id)

    def get_checkpoint(self, checkpoint_id: str) -> MissionCheckpoint:
        """
        Raises:
            KeyError: If checkpoint not found.
        """
        return self._store.get_checkpoint(checkpoint_id)

    def list_checkpoints(self, mission_id: str) -> list[MissionCheckpoint]:
        """Checkpoints of a mission, oldest first."""
        return self._store.list_checkpoints(mission_id)

    @staticmethod
    def verify_plan_ref(checkpoint: MissionCheckpoint, plan_ref: str) -> None:
        """
        Raises:
            ConfigurationError: If the checkpoint was taken under another plan.
        """
        if checkpoint.plan_ref and checkpoint.plan_ref != plan_ref:
            raise ConfigurationError(
                f"Checkpoint {checkpoint.checkpoint_id} was taken under phase plan "
                f"{checkpoint.plan_ref[:12]}, current plan is {plan_ref[:12]}"
            )

    @staticmethod
    def restore_state(
        checkpoint: MissionCheckpoint, run_store: RunStore
    ) -> MissionState:
        """Rebuild mission state and run store contents from a checkpoint."""
        run_store.restore(checkpoint.artifacts)
        return MissionState(
            phase=checkpoint.phase,
            retry_count=checkpoint.retry_count,
            repairing_phase=checkpoint.repairing_phase,
            manifest=checkpoint.manifest,
            errors=list(checkpoint.errors),
            error_log=list(checkpoint.error_log),
            iterations=checkpoint.iterations,
        )
