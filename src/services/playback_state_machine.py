"""
Playback State Machine Module

Transition logic of a playback run. Every entry point takes the current
RunState plus one input and returns the commands the caller must execute;
the machine itself performs no I/O.
"""

from __future__ import annotations

from typing import List, Optional
import itertools
import logging

from models.errors import EmptyQueueError
from models.playback import (
    CancelLoop,
    HandleFailed,
    HandleMissing,
    HandleReady,
    HandleState,
    HandleStateChanged,
    LoadItem,
    LoopTimerElapsed,
    PlaybackPhase,
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
from models.queue_item import ItemKind, QueueItem
from services.loop_controller import LoopController, RestartAfter
from services.queue_manager import Finished, QueueManager

logger = logging.getLogger(__name__)

_run_ids = itertools.count(1)


class PlaybackStateMachine:
    """
    Playback State Machine

    Phases: IDLE -> LOADING -> PLAYING -> LOOP_PENDING -> LOADING | IDLE.
    An error is not a phase: it advances straight to the next item's LOADING,
    or to IDLE when the queue is exhausted.

    Events for a slot other than the current item's, or arriving while the run
    is stopped, produce no commands. This filters stale notifications from a
    handle that was skipped or stopped.
    """

    def __init__(
        self,
        queue_manager: Optional[QueueManager] = None,
        loop_controller: Optional[LoopController] = None,
    ):
        self._queue_manager = queue_manager or QueueManager()
        self._loop_controller = loop_controller or LoopController()
        self._run = RunState()

    @property
    def run(self) -> RunState:
        return self._run

    @property
    def is_running(self) -> bool:
        return not self._run.is_stopped

    @property
    def current_item(self) -> Optional[QueueItem]:
        return self._queue_manager.current_item(self._run)

    # =========================================================================
    # Run control
    # =========================================================================

    def start(self, queue: List[QueueItem], greeting: str = "Starting queue...") -> List[object]:
        """
        Begin a fresh run over a queue snapshot.

        Starting while a run is active is a no-op.

        Raises:
            EmptyQueueError: If the queue holds no items; the machine stays idle.
        """
        if not self._run.is_stopped:
            logger.debug("Start ignored, run %d is active", self._run.run_id)
            return []
        if not queue:
            raise EmptyQueueError("No valid sources found.")

        self._run = RunState(
            run_id=next(_run_ids),
            queue=list(queue),
            current_index=-1,
            is_stopped=False,
            phase=PlaybackPhase.LOADING,
        )
        for item in self._run.queue:
            item.current_loop_count = 0

        logger.info("Run %d started with %d items", self._run.run_id, len(queue))
        commands: List[object] = [
            RunStarted(self._run.run_id, len(queue)),
            ReportStatus(greeting),
        ]
        return commands + self._advance()

    def stop(self, finished: bool = False) -> List[object]:
        """
        End the run. Valid from any phase; stopping an idle machine is a no-op.

        The pending loop timer is cancelled before handles are told to stop.
        """
        run = self._run
        if run.is_stopped:
            return []

        run.is_stopped = True
        run.phase = PlaybackPhase.IDLE
        logger.info("Run %d %s", run.run_id, "finished" if finished else "stopped")

        message = "Queue finished." if finished else "Stopped. Ready to start."
        return [
            CancelLoop(),
            StopHandles(),
            ReportStatus(message),
            RunEnded(run.run_id, finished),
        ]

    # =========================================================================
    # Events
    # =========================================================================

    def dispatch(self, event: object) -> List[object]:
        """Apply one inbound event and return the resulting commands."""
        run = self._run
        if run.is_stopped:
            return []
        if isinstance(event, LoopTimerElapsed) and event.run_id != run.run_id:
            return []

        item = self.current_item
        slot_id = getattr(event, "slot_id", None)
        if item is None or slot_id != item.slot_id:
            return []

        if isinstance(event, HandleStateChanged):
            return self._on_state_changed(item, event)
        if isinstance(event, HandleFailed):
            logger.warning("Player error %s in row %s, skipping", event.code, slot_id)
            return [
                ReportError(slot_id, f"Playback error {event.code}", event.code),
                ReportStatus(f"Error in row {slot_id}. Moving to next item."),
                CancelLoop(),
            ] + self._advance()
        if isinstance(event, HandleMissing):
            logger.error("Player not found for row %s. Skipping.", slot_id)
            return [
                ReportError(slot_id, f"Player not found for row {slot_id}"),
                ReportStatus(f"Player not found for row {slot_id}. Skipping."),
            ] + self._advance()
        if isinstance(event, LoopTimerElapsed):
            return self._on_loop_timer(item)
        if isinstance(event, HandleReady):
            return []

        logger.debug("Unhandled event: %r", event)
        return []

    def _on_state_changed(self, item: QueueItem, event: HandleStateChanged) -> List[object]:
        if self._run.phase == PlaybackPhase.LOOP_PENDING:
            # The handle is idle at the end of its item until the loop timer fires
            return []

        if event.state == HandleState.CUED:
            # Cueing only primes the handle
            return [PlayItem(item.slot_id)]

        if event.state == HandleState.PLAYING:
            self._run.phase = PlaybackPhase.PLAYING
            if item.kind == ItemKind.COLLECTION:
                position = (event.position or 0) + 1
                length = event.collection_length or 1
                return [ReportStatus(
                    f"Playing: {item.label} (Track {position}/{length})",
                    item.slot_id,
                )]
            return []

        if event.state == HandleState.ENDED and self._is_cycle_complete(item, event):
            return self._on_cycle_completed(item)

        return []

    @staticmethod
    def _is_cycle_complete(item: QueueItem, event: HandleStateChanged) -> bool:
        if item.kind == ItemKind.SINGLE:
            return True
        if event.position is None or not event.collection_length:
            return False
        return event.position == event.collection_length - 1

    def _on_cycle_completed(self, item: QueueItem) -> List[object]:
        decision = self._loop_controller.on_cycle_completed(item)

        if isinstance(decision, RestartAfter):
            self._run.phase = PlaybackPhase.LOOP_PENDING
            logger.debug(
                "Row %s completed loop %d, restarting in %ds",
                item.slot_id, item.current_loop_count, decision.delay_seconds,
            )
            return [
                ReportStatus(f"Looping in {decision.delay_seconds}s...", item.slot_id),
                ScheduleLoop(self._run.run_id, item.slot_id, decision.delay_seconds),
            ]

        return [ReportStatus("Finished loops. Moving to next...", item.slot_id)] + self._advance()

    def _on_loop_timer(self, item: QueueItem) -> List[object]:
        if self._run.phase != PlaybackPhase.LOOP_PENDING:
            return []
        self._run.phase = PlaybackPhase.LOADING
        return [
            ReportStatus(f"Replaying: {item.label}", item.slot_id),
            RestartItem(item.slot_id, item.kind),
        ]

    def _advance(self) -> List[object]:
        action = self._queue_manager.advance(self._run)
        if isinstance(action, Finished):
            return self.stop(finished=True)

        self._run.phase = PlaybackPhase.LOADING
        item = self.current_item
        return [
            ReportStatus(f"Loading: {item.label}", action.slot_id),
            LoadItem(action.slot_id, action.item_id, action.kind),
        ]
