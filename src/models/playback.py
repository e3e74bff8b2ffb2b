"""
Playback run data models

Holds the run state owned by the playback state machine, the inbound events it
consumes and the outbound commands it produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from models.queue_item import ItemKind, QueueItem


class HandleState(Enum):
    """State reported by a player handle"""
    UNSTARTED = "unstarted"
    CUED = "cued"
    PLAYING = "playing"
    PAUSED = "paused"
    BUFFERING = "buffering"
    ENDED = "ended"


class PlaybackPhase(Enum):
    """Resting phases of a run"""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    LOOP_PENDING = "loop_pending"


@dataclass
class RunState:
    """
    State of one playback run.

    A new instance is created for every run; the idle instance created at
    startup only exists so that stop and event handling have something to
    inspect before the first run.
    """
    run_id: int = 0
    queue: List[QueueItem] = field(default_factory=list)
    current_index: int = -1
    is_stopped: bool = True
    phase: PlaybackPhase = PlaybackPhase.IDLE
    pending_loop_timer: Optional[Any] = None

    @property
    def current_item(self) -> Optional[QueueItem]:
        if 0 <= self.current_index < len(self.queue):
            return self.queue[self.current_index]
        return None


# === Inbound events ===

@dataclass(frozen=True)
class HandleReady:
    slot_id: str


@dataclass(frozen=True)
class HandleStateChanged:
    """State change of a handle; position fields are filled for collections."""
    slot_id: str
    state: HandleState
    position: Optional[int] = None
    collection_length: Optional[int] = None


@dataclass(frozen=True)
class HandleFailed:
    slot_id: str
    code: int


@dataclass(frozen=True)
class HandleMissing:
    slot_id: str


@dataclass(frozen=True)
class LoopTimerElapsed:
    run_id: int
    slot_id: str


# === Outbound commands ===

@dataclass(frozen=True)
class LoadItem:
    slot_id: str
    item_id: str
    kind: ItemKind


@dataclass(frozen=True)
class PlayItem:
    slot_id: str


@dataclass(frozen=True)
class RestartItem:
    """Re-cue the current item from its start (seek or jump to first position)"""
    slot_id: str
    kind: ItemKind


@dataclass(frozen=True)
class ScheduleLoop:
    run_id: int
    slot_id: str
    delay_seconds: int


@dataclass(frozen=True)
class CancelLoop:
    pass


@dataclass(frozen=True)
class StopHandles:
    pass


@dataclass(frozen=True)
class ReportStatus:
    message: str
    active_slot_id: Optional[str] = None


@dataclass(frozen=True)
class RunStarted:
    run_id: int
    item_count: int


@dataclass(frozen=True)
class RunEnded:
    run_id: int
    finished: bool


@dataclass(frozen=True)
class ReportError:
    """A non-fatal error to surface (the run continues)"""
    slot_id: str
    message: str
    code: Optional[int] = None
