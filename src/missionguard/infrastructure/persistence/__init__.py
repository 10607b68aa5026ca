"""
Persistence adapters for checkpoints and mission events.
"""

from missionguard.infrastructure.persistence.checkpoint import (
    FilesystemMissionCheckpointStore,
    InMemoryMissionCheckpointStore,
)
from missionguard.infrastructure.persistence.mission_events import (
    FilesystemMissionEventStore,
    InMemoryMissionEventStore,
)

__all__ = [
    "FilesystemMissionCheckpointStore",
    "FilesystemMissionEventStore",
    "InMemoryMissionCheckpointStore",
    "InMemoryMissionEventStore",
]
