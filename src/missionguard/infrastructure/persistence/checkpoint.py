"""
Checkpoint stores for mission workflows.

A checkpoint captures everything needed to resume a mission: its phase,
repair counters, error log and a full copy of the run store.
"""

import json
import threading
from pathlib import Path
from typing import Any

from missionguard.domain.interfaces import MissionCheckpointStoreInterface
from missionguard.domain.models import (
    Artifact,
    MissionCheckpoint,
    MissionInput,
    RunManifest,
)
from missionguard.domain.phases import MissionPhase


def checkpoint_to_dict(checkpoint: MissionCheckpoint) -> dict[str, Any]:
    """Serialize a checkpoint to a JSON-compatible dict."""
    return {
        "checkpoint_id": checkpoint.checkpoint_id,
        "mission_id": checkpoint.mission_id,
        "created_at": checkpoint.created_at,
        "mission": checkpoint.mission.to_dict(),
        "phase": checkpoint.phase.value,
        "retry_count": checkpoint.retry_count,
        "repairing_phase": (
            checkpoint.repairing_phase.value if checkpoint.repairing_phase else None
        ),
        "manifest": checkpoint.manifest.to_dict(),
        "artifacts": [
            {
                "type": a.type,
                "data": a.data,
                "created_by": a.created_by,
                "version": a.version,
                "created_at": a.created_at,
                "updated_at": a.updated_at,
            }
            for a in checkpoint.artifacts
        ],
        "errors": list(checkpoint.errors),
        "error_log": list(checkpoint.error_log),
        "iterations": checkpoint.iterations,
        "plan_ref": checkpoint.plan_ref,
    }


def dict_to_checkpoint(data: dict[str, Any]) -> MissionCheckpoint:
    """Deserialize a checkpoint from its JSON dict."""
    repairing = data.get("repairing_phase")
    return MissionCheckpoint(
        checkpoint_id=data["checkpoint_id"],
        mission_id=data["mission_id"],
        created_at=data["created_at"],
        mission=MissionInput(**data["mission"]),
        phase=MissionPhase(data["phase"]),
        retry_count=data["retry_count"],
        repairing_phase=MissionPhase(repairing) if repairing else None,
        manifest=RunManifest.from_dict(data["manifest"]),
        artifacts=tuple(Artifact(**a) for a in data.get("artifacts", ())),
        errors=tuple(data.get("errors", ())),
        error_log=tuple(data.get("error_log", ())),
        iterations=data.get("iterations", 0),
        plan_ref=data.get("plan_ref", ""),
    )


class FilesystemMissionCheckpointStore(MissionCheckpointStoreInterface):
    """
    Persistent storage for mission checkpoints.

    Directory structure:
    {base_dir}/
        checkpoints/
            {prefix}/{checkpoint_id}.json
        checkpoint_index.json  # Maps mission_id -> checkpoint_ids
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._checkpoints_dir = self._base_dir / "checkpoints"
        self._index_path = self._base_dir / "checkpoint_index.json"
        self._cache: dict[str, MissionCheckpoint] = {}
        self._lock = threading.Lock()
        self._index: dict[str, Any] = self._load_or_create_index()

    def _load_or_create_index(self) -> dict[str, Any]:
        self._checkpoints_dir.mkdir(parents=True, exist_ok=True)
        if self._index_path.exists():
            with open(self._index_path) as f:
                result: dict[str, Any] = json.load(f)
                return result
        return {
            "version": "1.0",
            "checkpoints": {},  # checkpoint_id -> metadata
            "by_mission": {},  # mission_id -> [checkpoint_ids], oldest first
        }

    def _update_index_atomic(self) -> None:
        """Write index to a temp file, then rename over the old one."""
        temp_path = self._index_path.with_suffix(".tmp")
        with open(temp_path, "w") as f:
            json.dump(self._index, f, indent=2)
        temp_path.replace(self._index_path)

    def _get_checkpoint_path(self, checkpoint_id: str) -> Path:
        return self._checkpoints_dir / checkpoint_id[:2] / f"{checkpoint_id}.json"

    def store_checkpoint(self, checkpoint: MissionCheckpoint) -> str:
        object_path = self._get_checkpoint_path(checkpoint.checkpoint_id)
        object_path.parent.mkdir(parents=True, exist_ok=True)
        with open(object_path, "w") as f:
            json.dump(checkpoint_to_dict(checkpoint), f, indent=2)

        with self._lock:
            self._index["checkpoints"][checkpoint.checkpoint_id] = {
                "path": str(object_path.relative_to(self._base_dir)),
                "mission_id": checkpoint.mission_id,
                "phase": checkpoint.phase.value,
                "created_at": checkpoint.created_at,
            }
            self._index["by_mission"].setdefault(checkpoint.mission_id, []).append(
                checkpoint.checkpoint_id
            )
            self._update_index_atomic()
            self._cache[checkpoint.checkpoint_id] = checkpoint
        return checkpoint.checkpoint_id

    def get_checkpoint(self, checkpoint_id: str) -> MissionCheckpoint:
        """Retrieve checkpoint by ID (cache-first)."""
        if checkpoint_id in self._cache:
            return self._cache[checkpoint_id]
        if checkpoint_id not in self._index["checkpoints"]:
            raise KeyError(f"Checkpoint not found: {checkpoint_id}")

        rel_path = self._index["checkpoints"][checkpoint_id]["path"]
        with open(self._base_dir / rel_path) as f:
            checkpoint = dict_to_checkpoint(json.load(f))
        self._cache[checkpoint_id] = checkpoint
        return checkpoint

    def get_latest(self, mission_id: str) -> MissionCheckpoint | None:
        ids = self._index["by_mission"].get(mission_id)
        if not ids:
            return None
        return self.get_checkpoint(ids[-1])

    def list_checkpoints(self, mission_id: str) -> list[MissionCheckpoint]:
        ids = self._index["by_mission"].get(mission_id, [])
        return [self.get_checkpoint(cid) for cid in ids]

    def list_missions(self) -> list[str]:
        return list(self._index["by_mission"].keys())


class InMemoryMissionCheckpointStore(MissionCheckpointStoreInterface):
    """In-memory checkpoint storage for testing."""

    def __init__(self) -> None:
        self._checkpoints: dict[str, MissionCheckpoint] = {}
        self._by_mission: dict[str, list[str]] = {}

    def store_checkpoint(self, checkpoint: MissionCheckpoint) -> str:
        self._checkpoints[checkpoint.checkpoint_id] = checkpoint
        self._by_mission.setdefault(checkpoint.mission_id, []).append(
            checkpoint.checkpoint_id
        )
        return checkpoint.checkpoint_id

    def get_checkpoint(self, checkpoint_id: str) -> MissionCheckpoint:
        if checkpoint_id not in self._checkpoints:
            raise KeyError(f"Checkpoint not found: {checkpoint_id}")
        return self._checkpoints[checkpoint_id]

    def get_latest(self, mission_id: str) -> MissionCheckpoint | None:
        ids = self._by_mission.get(mission_id)
        return self._checkpoints[ids[-1]] if ids else None

    def list_checkpoints(self, mission_id: str) -> list[MissionCheckpoint]:
        return [self._checkpoints[cid] for cid in self._by_mission.get(mission_id, [])]

    def list_missions(self) -> list[str]:
        return list(self._by_mission.keys())
