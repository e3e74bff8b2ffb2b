"""
Schedule Service Module

Starts and stops playback at configured times of day.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Tuple
import logging

from core.event_bus import EventType
from models.schedule import ScheduleEntry

if TYPE_CHECKING:
    from app.protocols import IEventBus, IRunControl
    from core.ports.system import IWakeLock
    from core.ports.timing import ICancelToken, IClock, ITaskScheduler
    from services.status_service import StatusService

logger = logging.getLogger(__name__)

START = "start"
STOP = "stop"


class ScheduleService:
    """
    Schedule Service

    Polls the clock while enabled and compares the current time of day, at
    minute resolution, with every entry. A minute stays matched for all of its
    polls, so each (entry, edge) pair fires at most once per calendar minute.
    Fired pairs are keyed by the entry's times, so replacing the schedule
    mid-minute does not fire an unchanged entry again.

    Example:
        scheduler = ScheduleService(playback, task_scheduler, clock, status, event_bus)
        scheduler.set_entries([ScheduleEntry.from_dict({"start": "08:00", "stop": "18:00"})])
        scheduler.enable()
    """

    def __init__(
        self,
        playback: "IRunControl",
        task_scheduler: "ITaskScheduler",
        clock: "IClock",
        status: "StatusService",
        event_bus: "IEventBus",
        wake_lock: Optional["IWakeLock"] = None,
        entries: Iterable[ScheduleEntry] = (),
        poll_interval_seconds: float = 1.0,
    ):
        self._playback = playback
        self._scheduler = task_scheduler
        self._clock = clock
        self._status = status
        self._event_bus = event_bus
        self._wake_lock = wake_lock
        self._entries: List[ScheduleEntry] = list(entries)
        self._poll_interval = poll_interval_seconds if poll_interval_seconds > 0 else 1.0

        self._poll_token: Optional["ICancelToken"] = None
        self._fired_minute = ""
        self._fired: Set[Tuple[ScheduleEntry, str]] = set()

    @property
    def enabled(self) -> bool:
        return self._poll_token is not None

    @property
    def entries(self) -> List[ScheduleEntry]:
        return list(self._entries)

    def set_entries(self, entries: Iterable[ScheduleEntry]) -> None:
        self._entries = list(entries)

    def enable(self) -> None:
        """Start polling and hold the wake lock until disabled."""
        if self.enabled:
            return
        if self._wake_lock is not None:
            self._wake_lock.acquire()
        self._playback.wake_lock_per_run = False

        self._poll_token = self._scheduler.call_every(self._poll_interval, self.tick)

        logger.info("Scheduler enabled with %d entries", len(self._entries))
        self._status.update("Scheduler enabled. Waiting for a start time.")
        self._event_bus.publish_sync(EventType.SCHEDULER_TOGGLED, True)

    def disable(self) -> None:
        """Stop polling, release the wake lock and stop an active run."""
        if not self.enabled:
            return
        if self._wake_lock is not None:
            self._wake_lock.release()
        self._playback.wake_lock_per_run = True

        self._poll_token.cancel()
        self._poll_token = None

        if self._playback.is_running:
            self._playback.stop_playback()

        logger.info("Scheduler disabled")
        self._status.update("Scheduler disabled. Ready for manual start.")
        self._event_bus.publish_sync(EventType.SCHEDULER_TOGGLED, False)

    def tick(self) -> None:
        """Compare the current minute with the schedule and act at most once per edge."""
        now = self._clock.now()
        minute_key = now.strftime("%Y-%m-%d %H:%M")
        current_time = now.strftime("%H:%M")

        if minute_key != self._fired_minute:
            self._fired_minute = minute_key
            self._fired.clear()

        if self._playback.is_running:
            index = self._match(current_time, STOP)
            if index is not None:
                self._trigger(index, STOP, current_time)
                return

        if not self._playback.is_running:
            index = self._match(current_time, START)
            if index is not None:
                self._trigger(index, START, current_time)

    def _match(self, current_time: str, edge: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if (entry, edge) in self._fired:
                continue
            matches = entry.stops_at(current_time) if edge == STOP else entry.starts_at(current_time)
            if matches:
                return index
        return None

    def _trigger(self, index: int, edge: str, current_time: str) -> None:
        self._fired.add((self._entries[index], edge))
        logger.info("Schedule entry %d %s at %s", index, edge, current_time)
        self._event_bus.publish_sync(EventType.SCHEDULE_TRIGGERED, {
            "entry": index,
            "action": edge,
            "time": current_time,
        })

        if edge == STOP:
            self._status.update(f"Scheduler: Stopping at {current_time}")
            self._playback.stop_playback()
        else:
            self._status.update(f"Scheduler: Starting at {current_time}")
            self._playback.start_playback()
