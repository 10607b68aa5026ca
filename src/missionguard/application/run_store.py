"""
Versioned artifact store for a single mission run.

Every write is checked against the run's ContractValidator before any state
changes, so a rejected write leaves the store untouched.
"""

from __future__ import annotations

import copy
import logging
import threading
from datetime import UTC, datetime
from typing import Any

from missionguard.application.contract_validator import ContractValidator
from missionguard.domain.interfaces import RunStoreInterface
from missionguard.domain.models import (
    Artifact,
    ArtifactMetadata,
    ManifestStatus,
    RunManifest,
)

logger = logging.getLogger(__name__)


class RunStore(RunStoreInterface):
    """
    In-process artifact store with per-type write serialization.

    Writes to the same artifact type are serialized by a lock scoped to
    this run; writes to different types proceed independently.
    """

    def __init__(
        self,
        run_id: str,
        validator: ContractValidator,
        required_types: frozenset[str] = frozenset(),
    ) -> None:
        """
        Args:
            run_id: Mission run this store belongs to
            validator: Ownership and schema policy for the run
            required_types: Types that must exist for the manifest to be complete
        """
        self.run_id = run_id
        self._validator = validator
        self._required = frozenset(required_types)
        self._artifacts: dict[str, Artifact] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._created_at = datetime.now(UTC).isoformat()

    def _lock_for(self, artifact_type: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(artifact_type, threading.Lock())

    def put(self, artifact_type: str, data: Any, agent_id: str) -> ArtifactMetadata:
        """Create or overwrite an artifact.

        Raises:
            OwnershipViolation: If the agent may not write this type
            SchemaViolation: If the data does not match the type's schema
        """
        with self._lock_for(artifact_type):
            existing = self._artifacts.get(artifact_type)
            self._validator.enforce_ownership(
                agent_id, artifact_type, is_overwrite=existing is not None
            )
            self._validator.contract_validate_artifact(artifact_type, data)

            now = datetime.now(UTC).isoformat()
            artifact = Artifact(
                type=artifact_type,
                data=copy.deepcopy(data),
                created_by=agent_id,
                version=existing.version + 1 if existing else 1,
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._artifacts[artifact_type] = artifact

        logger.debug(
            f"[{self.run_id}] {agent_id} wrote {artifact_type} v{artifact.version}"
        )
        return artifact.metadata()

    def get(self, artifact_type: str) -> Any | None:
        artifact = self._artifacts.get(artifact_type)
        if artifact is None:
            return None
        return copy.deepcopy(artifact.data)

    def has(self, artifact_type: str) -> bool:
        return artifact_type in self._artifacts

    def get_metadata(self, artifact_type: str) -> ArtifactMetadata | None:
        artifact = self._artifacts.get(artifact_type)
        return artifact.metadata() if artifact else None

    def artifact_types(self) -> list[str]:
        return sorted(self._artifacts)

    def build_manifest(self) -> RunManifest:
        present = frozenset(self._artifacts)
        complete = bool(self._required) and self._required <= present
        return RunManifest(
            run_id=self.run_id,
            artifacts=tuple(sorted(present)),
            status=ManifestStatus.COMPLETE if complete else ManifestStatus.IN_PROGRESS,
            created_at=self._created_at,
        )

    def snapshot(self) -> tuple[Artifact, ...]:
        """Immutable copy of every artifact, for checkpointing."""
        return tuple(
            Artifact(
                type=a.type,
                data=copy.deepcopy(a.data),
                created_by=a.created_by,
                version=a.version,
                created_at=a.created_at,
                updated_at=a.updated_at,
            )
            for a in sorted(self._artifacts.values(), key=lambda a: a.type)
        )

    def restore(self, artifacts: tuple[Artifact, ...]) -> None:
        """Replace store contents from a checkpoint snapshot.

        Bypasses ownership checks: the snapshot was validated when written.
        """
        self._artifacts = {
            a.type: Artifact(
                type=a.type,
                data=copy.deepcopy(a.data),
                created_by=a.created_by,
                version=a.version,
                created_at=a.created_at,
                updated_at=a.updated_at,
            )
            for a in artifacts
        }
