"""Mission execution trace models."""

from dataclasses import dataclass
from enum import Enum


class MissionEventType(str, Enum):
    """Types of mission execution events."""

    PHASE_START = "PHASE_START"
    PHASE_PASS = "PHASE_PASS"
    PHASE_FAIL = "PHASE_FAIL"
    REPAIR_ATTEMPT = "REPAIR_ATTEMPT"
    TRANSITION = "TRANSITION"
    SIGNAL = "SIGNAL"
    SIGNAL_IGNORED = "SIGNAL_IGNORED"
    MISSION_END = "MISSION_END"


@dataclass(frozen=True)
class MissionEvent:
    """Single entry in a mission's execution trace.

    Captures state changes for observability and post-mortem debugging;
    never used to drive execution.
    """

    event_id: str
    event_type: MissionEventType
    mission_id: str
    phase: str
    summary: str = ""
    attempt: int | None = None
    created_at: str = ""  # ISO 8601
