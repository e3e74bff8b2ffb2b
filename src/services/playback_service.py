"""
Playback Service Module

Runs the playback state machine against real collaborators: player handles,
the task scheduler, the wake lock, the status line and the event bus.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Callable, Deque, Iterable, List, Optional, Tuple
import logging

from core.event_bus import EventType
from core.player_registry import PlayerRegistry
from models.errors import EmptyQueueError, HandleRemovalError
from models.playback import (
    CancelLoop,
    HandleFailed,
    HandleMissing,
    HandleReady,
    HandleState,
    HandleStateChanged,
    LoadItem,
    LoopTimerElapsed,
    PlayItem,
    ReportError,
    ReportStatus,
    RestartItem,
    RunEnded,
    RunStarted,
    RunState,
    ScheduleLoop,
    StopHandles,
)
from models.queue_item import ItemKind, QueueEntry, QueueItem
from services.playback_state_machine import PlaybackStateMachine
from services.queue_manager import QueueManager

if TYPE_CHECKING:
    from app.protocols import IEventBus
    from core.ports.player import IPlayerHandle
    from core.ports.system import IWakeLock
    from core.ports.timing import ITaskScheduler
    from services.account_service import AccountService
    from services.status_service import StatusService

logger = logging.getLogger(__name__)

# Code reported when a handle command raises instead of emitting an error
HANDLE_COMMAND_FAILED = -1


class PlaybackService:
    """
    Playback Service

    Owns the run. Implements the player listener interface: handle
    notifications may arrive on any thread and are posted to the task
    scheduler's loop, where all transitions run one at a time.

    Example:
        playback = PlaybackService(registry, scheduler, event_bus, status,
                                   entries_provider=queue_store.entries)
        playback.attach_handle(handle)
        playback.start_playback()
        ...
        playback.stop_playback()
    """

    def __init__(
        self,
        registry: PlayerRegistry,
        task_scheduler: "ITaskScheduler",
        event_bus: "IEventBus",
        status: "StatusService",
        entries_provider: Callable[[], Iterable[QueueEntry]],
        queue_manager: Optional[QueueManager] = None,
        state_machine: Optional[PlaybackStateMachine] = None,
        wake_lock: Optional["IWakeLock"] = None,
        accounts: Optional["AccountService"] = None,
    ):
        self._registry = registry
        self._scheduler = task_scheduler
        self._event_bus = event_bus
        self._status = status
        self._entries_provider = entries_provider
        self._queue_manager = queue_manager or QueueManager()
        self._machine = state_machine or PlaybackStateMachine(self._queue_manager)
        self._wake_lock = wake_lock
        self._accounts = accounts

        # False while the scheduler holds the wake lock for its whole lifetime
        self.wake_lock_per_run = True

        self._executing = False
        self._pending: Deque[object] = deque()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._machine.is_running

    @property
    def run(self) -> RunState:
        return self._machine.run

    @property
    def current_item(self) -> Optional[QueueItem]:
        return self._machine.current_item

    @property
    def registry(self) -> PlayerRegistry:
        return self._registry

    # =========================================================================
    # Run control
    # =========================================================================

    def start_playback(self) -> bool:
        """
        Start a fresh run over the current queue rows.

        Returns:
            bool: False only when no row resolves to a playable item.
                  Starting while running is a no-op that returns True.
        """
        if self.is_running:
            return True

        queue = self._queue_manager.build(self._entries_provider())
        try:
            commands = self._machine.start(queue, self._greeting())
        except EmptyQueueError as e:
            logger.warning("Cannot start playback: %s", e)
            self._status.update(f"Error: {e}")
            self._event_bus.publish_sync(EventType.ERROR_OCCURRED, {
                "source": "PlaybackService",
                "error": str(e),
            })
            return False

        if self.wake_lock_per_run:
            self._acquire_wake_lock()
        self._execute(commands)
        return True

    def stop_playback(self) -> bool:
        """Stop the run. Stopping while stopped is a no-op that returns True."""
        self._execute(self._machine.stop())
        return True

    def _greeting(self) -> str:
        account = self._accounts.active_account() if self._accounts else None
        if account is not None:
            return f"Starting queue for {account.email}..."
        return "Starting queue..."

    # =========================================================================
    # Handles
    # =========================================================================

    def attach_handle(self, handle: "IPlayerHandle") -> None:
        """Register a slot's handle and route its notifications here."""
        self._registry.register(handle)
        handle.set_listener(self)

    def remove_handle(self, slot_id: str) -> bool:
        """
        Destroy a slot's handle.

        Raises:
            HandleRemovalError: If the slot is the current item of an active run.
        """
        current = self.current_item
        if self.is_running and current is not None and current.slot_id == slot_id:
            raise HandleRemovalError("Cannot remove active item. Stop first.")

        removed = self._registry.remove(slot_id)
        if removed:
            self._event_bus.publish_sync(EventType.HANDLE_REMOVED, slot_id)
        return removed

    def cue_preview(self, slot_id: str) -> bool:
        """
        Prime a row's handle with its source without playing it.

        Skipped for the current item of an active run.
        """
        current = self.current_item
        if self.is_running and current is not None and current.slot_id == slot_id:
            return False

        handle = self._registry.get(slot_id)
        entry = next((e for e in self._entries_provider() if e.slot_id == slot_id), None)
        if handle is None or entry is None:
            return False

        items = self._queue_manager.build([entry])
        if not items:
            return False

        try:
            handle.cue(items[0].item_id, items[0].kind)
        except Exception as e:
            logger.warning("Preview failed for row %s: %s", slot_id, e)
            return False
        return True

    # =========================================================================
    # Player listener (any thread)
    # =========================================================================

    def on_ready(self, slot_id: str) -> None:
        self._scheduler.post(lambda: self._handle_ready(slot_id))

    def on_state_changed(self, slot_id: str, state: HandleState) -> None:
        # The backend may move to its next track before the posted action runs,
        # so the position belongs to the moment of the notification
        position, length = self._read_position(slot_id, state)
        self._scheduler.post(lambda: self._feed(HandleStateChanged(slot_id, state, position, length)))

    def on_error(self, slot_id: str, code: int) -> None:
        self._scheduler.post(lambda: self._feed(HandleFailed(slot_id, code)))

    def _handle_ready(self, slot_id: str) -> None:
        self._event_bus.publish_sync(EventType.HANDLE_READY, slot_id)
        if not self.is_running:
            self.cue_preview(slot_id)
        self._feed(HandleReady(slot_id))

    def _read_position(self, slot_id: str, state: HandleState) -> Tuple[Optional[int], Optional[int]]:
        if state not in (HandleState.PLAYING, HandleState.ENDED):
            return None, None

        item = self.current_item
        if item is None or item.slot_id != slot_id or item.kind != ItemKind.COLLECTION:
            return None, None

        handle = self._registry.get(slot_id)
        if handle is None:
            return None, None
        try:
            return handle.current_position(), handle.collection_length()
        except Exception as e:
            logger.warning("Cannot read collection position of row %s: %s", slot_id, e)
            return None, None

    # =========================================================================
    # Command execution
    # =========================================================================

    def _feed(self, event: object) -> None:
        self._execute(self._machine.dispatch(event))

    def _execute(self, commands: List[object]) -> None:
        """
        Run commands in order.

        Commands that fail produce follow-up events which are dispatched
        after the current batch. Nested calls only enqueue, so a chain of
        failing rows is walked iteratively.
        """
        self._pending.extend(commands)
        if self._executing:
            return

        self._executing = True
        try:
            while self._pending:
                command = self._pending.popleft()
                for event in self._apply(command):
                    self._pending.extend(self._machine.dispatch(event))
        finally:
            self._executing = False

    def _apply(self, command: object) -> List[object]:
        if isinstance(command, ReportStatus):
            self._status.update(command.message, command.active_slot_id)
        elif isinstance(command, LoadItem):
            self._event_bus.publish_sync(EventType.ITEM_LOADING, command)
            return self._call_handle(command.slot_id, lambda h: h.load(command.item_id, command.kind))
        elif isinstance(command, PlayItem):
            return self._call_handle(command.slot_id, lambda h: h.play())
        elif isinstance(command, RestartItem):
            if command.kind == ItemKind.COLLECTION:
                return self._call_handle(command.slot_id, lambda h: h.jump_to_first_position())
            return self._call_handle(command.slot_id, lambda h: h.seek_to_start())
        elif isinstance(command, ScheduleLoop):
            self._schedule_loop(command)
        elif isinstance(command, CancelLoop):
            self._cancel_loop()
        elif isinstance(command, StopHandles):
            self._stop_handles()
        elif isinstance(command, ReportError):
            self._event_bus.publish_sync(EventType.PLAYBACK_ERROR, {
                "slot_id": command.slot_id,
                "error": command.message,
                "code": command.code,
            })
        elif isinstance(command, RunStarted):
            self._event_bus.publish_sync(EventType.RUN_STARTED, command)
        elif isinstance(command, RunEnded):
            self._on_run_ended(command)
        else:
            logger.warning("Unknown playback command: %r", command)
        return []

    def _call_handle(self, slot_id: str, call: Callable[["IPlayerHandle"], None]) -> List[object]:
        handle = self._registry.get(slot_id)
        if handle is None:
            return [HandleMissing(slot_id)]
        try:
            call(handle)
        except Exception as e:
            logger.error("Player command failed for row %s: %s", slot_id, e)
            return [HandleFailed(slot_id, HANDLE_COMMAND_FAILED)]
        return []

    def _schedule_loop(self, command: ScheduleLoop) -> None:
        # At most one loop timer per run
        self._cancel_loop()

        def fire() -> None:
            run = self._machine.run
            if run.run_id == command.run_id:
                run.pending_loop_timer = None
            self._feed(LoopTimerElapsed(command.run_id, command.slot_id))

        self._machine.run.pending_loop_timer = self._scheduler.call_later(command.delay_seconds, fire)
        self._event_bus.publish_sync(EventType.ITEM_LOOPING, command)

    def _cancel_loop(self) -> None:
        run = self._machine.run
        token, run.pending_loop_timer = run.pending_loop_timer, None
        if token is not None:
            token.cancel()

    def _stop_handles(self) -> None:
        for handle in self._registry.handles():
            try:
                handle.stop()
            except Exception as e:
                logger.debug("Ignoring stop failure for row %s: %s", handle.slot_id, e)

    def _on_run_ended(self, command: RunEnded) -> None:
        if self.wake_lock_per_run:
            self._release_wake_lock()
        event_type = EventType.QUEUE_FINISHED if command.finished else EventType.RUN_STOPPED
        self._event_bus.publish_sync(event_type, command)

    # =========================================================================
    # Wake lock
    # =========================================================================

    def _acquire_wake_lock(self) -> None:
        if self._wake_lock is None:
            return
        if self._wake_lock.acquire():
            self._event_bus.publish_sync(EventType.WAKE_LOCK_CHANGED, True)

    def _release_wake_lock(self) -> None:
        if self._wake_lock is None or not self._wake_lock.is_active:
            return
        self._wake_lock.release()
        self._event_bus.publish_sync(EventType.WAKE_LOCK_CHANGED, False)
