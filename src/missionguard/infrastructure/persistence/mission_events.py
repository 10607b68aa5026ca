"""Mission event store implementations."""

import json
import threading
from pathlib import Path
from typing import Any

from missionguard.domain.interfaces import MissionEventStoreInterface
from missionguard.domain.mission_event import MissionEvent, MissionEventType


class InMemoryMissionEventStore(MissionEventStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self) -> None:
        self._events: list[MissionEvent] = []

    def store_event(self, event: MissionEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        mission_id: str,
        event_type: MissionEventType | None = None,
    ) -> list[MissionEvent]:
        return sorted(
            [
                e
                for e in self._events
                if e.mission_id == mission_id
                and (event_type is None or e.event_type == event_type)
            ],
            key=lambda e: e.created_at,
        )


class FilesystemMissionEventStore(MissionEventStoreInterface):
    """Filesystem implementation storing one JSONL file per mission."""

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self.events_dir = self.base_path / "events"
        self.events_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _get_mission_file(self, mission_id: str) -> Path:
        return self.events_dir / f"{mission_id}.jsonl"

    def store_event(self, event: MissionEvent) -> str:
        line = json.dumps(self._event_to_dict(event)) + "\n"
        with self._lock, open(self._get_mission_file(event.mission_id), "a") as f:
            f.write(line)
        return event.event_id

    def get_events(
        self,
        mission_id: str,
        event_type: MissionEventType | None = None,
    ) -> list[MissionEvent]:
        path = self._get_mission_file(mission_id)
        if not path.exists():
            return []
        events: list[MissionEvent] = []
        with open(path) as f:
            for line in f:
                if not line.strip():
                    continue
                event = self._dict_to_event(json.loads(line))
                if event_type and event.event_type != event_type:
                    continue
                events.append(event)
        return sorted(events, key=lambda e: e.created_at)

    def _event_to_dict(self, event: MissionEvent) -> dict[str, Any]:
        return {
            "event_id": event.event_id,
            "event_type": event.event_type.value,
            "mission_id": event.mission_id,
            "phase": event.phase,
            "summary": event.summary,
            "attempt": event.attempt,
            "created_at": event.created_at,
        }

    def _dict_to_event(self, data: dict[str, Any]) -> MissionEvent:
        return MissionEvent(
            event_id=data["event_id"],
            event_type=MissionEventType(data["event_type"]),
            mission_id=data["mission_id"],
            phase=data["phase"],
            summary=data.get("summary", ""),
            attempt=data.get("attempt"),
            created_at=data.get("created_at", ""),
        )
