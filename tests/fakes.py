"""
Test doubles for the playback core ports.

All of them are deterministic: nothing runs on another thread and time only
moves when a test moves it.
"""

from collections import deque
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Set

from models.playback import HandleState


class FakePlayerHandle:
    """Records every command; tests raise notifications explicitly."""

    def __init__(self, slot_id: str, position: int = 0, length: int = 1, fail_on: Set[str] = None):
        self._slot_id = slot_id
        self.position = position
        self.length = length
        self.fail_on = set(fail_on or ())
        self.calls: List[tuple] = []
        self.listener = None
        self.destroyed = False

    @property
    def slot_id(self) -> str:
        return self._slot_id

    def _record(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def count(self, name: str) -> int:
        return self.call_names().count(name)

    # === IPlayerHandle ===

    def set_listener(self, listener) -> None:
        self.listener = listener
        if listener is not None:
            listener.on_ready(self._slot_id)

    def load(self, item_id, kind) -> None:
        self._record("load", item_id, kind)

    def cue(self, item_id, kind) -> None:
        self._record("cue", item_id, kind)

    def play(self) -> None:
        self._record("play")

    def stop(self) -> None:
        self._record("stop")

    def seek_to_start(self) -> None:
        self._record("seek_to_start")

    def jump_to_first_position(self) -> None:
        self._record("jump_to_first_position")

    def current_position(self) -> int:
        return self.position

    def collection_length(self) -> int:
        return self.length

    def destroy(self) -> None:
        self.destroyed = True
        self.listener = None

    # === Notifications ===

    def emit(self, state: HandleState) -> None:
        if self.listener is not None:
            self.listener.on_state_changed(self._slot_id, state)

    def emit_error(self, code: int) -> None:
        if self.listener is not None:
            self.listener.on_error(self._slot_id, code)


class FakeHandleFactory:
    def __init__(self):
        self.handles: Dict[str, FakePlayerHandle] = {}
        self.cleaned_up = False

    def create(self, slot_id: str) -> FakePlayerHandle:
        handle = FakePlayerHandle(slot_id)
        self.handles[slot_id] = handle
        return handle

    def cleanup(self) -> None:
        self.cleaned_up = True


class _ManualTimer:
    def __init__(self, due: float, interval: Optional[float], action: Callable[[], None]):
        self.due = due
        self.interval = interval
        self.action = action
        self.active = True

    def cancel(self) -> None:
        self.active = False


class ManualTaskScheduler:
    """
    Virtual-time task scheduler.

    post() actions run on the next run_pending(); timers run when advance()
    moves the virtual time past their due time, a 0 s timer included.
    """

    def __init__(self):
        self.time = 0.0
        self._timers: List[_ManualTimer] = []
        self._posted = deque()

    def call_later(self, delay_seconds: float, action: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.time + max(0.0, delay_seconds), None, action)
        self._timers.append(timer)
        return timer

    def call_every(self, interval_seconds: float, action: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.time + interval_seconds, interval_seconds, action)
        self._timers.append(timer)
        return timer

    def post(self, action: Callable[[], None]) -> None:
        self._posted.append(action)

    @property
    def active_timers(self) -> List[_ManualTimer]:
        return [t for t in self._timers if t.active]

    def run_pending(self) -> None:
        while self._posted:
            self._posted.popleft()()

    def advance(self, seconds: float) -> None:
        target = self.time + seconds
        self.run_pending()
        while True:
            due = [t for t in self.active_timers if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.time = max(self.time, timer.due)
            if timer.interval is None:
                timer.active = False
            else:
                timer.due += timer.interval
            timer.action()
            self.run_pending()
        self.time = target


class FakeClock:
    """Wall clock that follows a ManualTaskScheduler's virtual time."""

    def __init__(self, start: datetime = None, scheduler: ManualTaskScheduler = None):
        self.start = start or datetime(2024, 1, 1, 12, 0, 0)
        self.scheduler = scheduler

    def now(self) -> datetime:
        elapsed = self.scheduler.time if self.scheduler is not None else 0.0
        return self.start + timedelta(seconds=elapsed)


class FakeWakeLock:
    def __init__(self, supported: bool = True):
        self.is_supported = supported
        self.is_active = False
        self.acquire_count = 0
        self.release_count = 0

    def acquire(self) -> bool:
        self.acquire_count += 1
        if self.is_supported:
            self.is_active = True
        return self.is_active

    def release(self) -> None:
        self.release_count += 1
        self.is_active = False


class FakeRunControl:
    """Stands in for PlaybackService in scheduler tests."""

    def __init__(self, start_succeeds: bool = True):
        self.wake_lock_per_run = True
        self.running = False
        self.start_succeeds = start_succeeds
        self.start_count = 0
        self.stop_count = 0

    @property
    def is_running(self) -> bool:
        return self.running

    def start_playback(self) -> bool:
        self.start_count += 1
        if self.start_succeeds:
            self.running = True
        return self.start_succeeds

    def stop_playback(self) -> bool:
        self.stop_count += 1
        self.running = False
        return True
