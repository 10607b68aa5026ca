"""Mission event emission service."""

import uuid
from datetime import UTC, datetime

from missionguard.domain.interfaces import MissionEventStoreInterface
from missionguard.domain.mission_event import MissionEvent, MissionEventType


class MissionEventEmitter:
    """Emits mission events to a store.

    Provides convenience methods for the events a mission produces while it
    runs, handling ID generation and timestamps.
    """

    def __init__(
        self, event_store: MissionEventStoreInterface, mission_id: str
    ) -> None:
        self._store = event_store
        self._mission_id = mission_id

    def _emit(
        self,
        event_type: MissionEventType,
        phase: str,
        summary: str = "",
        attempt: int | None = None,
    ) -> str:
        return self._store.store_event(
            MissionEvent(
                event_id=str(uuid.uuid4()),
                event_type=event_type,
                mission_id=self._mission_id,
                phase=phase,
                summary=summary[:500],
                attempt=attempt,
                created_at=datetime.now(UTC).isoformat(),
            )
        )

    def phase_start(self, phase: str, attempt: int = 0) -> None:
        """Emit PHASE_START when a phase (or a repair attempt) begins executing."""
        self._emit(MissionEventType.PHASE_START, phase, attempt=attempt)

    def phase_pass(self, phase: str, message: str) -> None:
        self._emit(MissionEventType.PHASE_PASS, phase, summary=message)

    def phase_fail(self, phase: str, attempt: int, feedback: str) -> None:
        self._emit(
            MissionEventType.PHASE_FAIL, phase, summary=feedback, attempt=attempt
        )

    def repair_attempt(self, phase: str, attempt: int, targets: list[str]) -> None:
        self._emit(
            MissionEventType.REPAIR_ATTEMPT,
            phase,
            summary=", ".join(targets),
            attempt=attempt,
        )

    def transition(self, source: str, target: str) -> None:
        self._emit(MissionEventType.TRANSITION, target, summary=f"{source} -> {target}")

    def signal(self, phase: str, name: str) -> None:
        self._emit(MissionEventType.SIGNAL, phase, summary=name)

    def signal_ignored(self, phase: str, name: str, reason: str) -> None:
        self._emit(MissionEventType.SIGNAL_IGNORED, phase, summary=f"{name}: {reason}")

    def mission_end(self, phase: str, success: bool, summary: str = "") -> None:
        outcome = "success" if success else "failure"
        self._emit(
            MissionEventType.MISSION_END,
            phase,
            summary=f"{outcome}: {summary}" if summary else outcome,
        )
