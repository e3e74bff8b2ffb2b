"""
Playback State Machine Tests

Drives the transition core directly with events and inspects the commands it
returns; no handles or timers are involved.
"""

import pytest

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
    ScheduleLoop,
    StopHandles,
)
from models.queue_item import ItemKind, QueueItem
from services.playback_state_machine import PlaybackStateMachine


def _single(slot_id, loop_limit=1, delay=0):
    return QueueItem(f"id-{slot_id}", ItemKind.SINGLE, slot_id, loop_limit, delay, source=f"src-{slot_id}")


def _collection(slot_id, loop_limit=1, delay=0):
    return QueueItem(f"pl-{slot_id}", ItemKind.COLLECTION, slot_id, loop_limit, delay, source=f"src-{slot_id}")


def _messages(commands):
    return [c.message for c in commands if isinstance(c, ReportStatus)]


def _of_type(commands, cls):
    return [c for c in commands if isinstance(c, cls)]


class TestRunControl:
    """start / stop"""

    def setup_method(self):
        self.machine = PlaybackStateMachine()

    def test_start_loads_first_item(self):
        commands = self.machine.start([_single("a"), _single("b")])

        assert isinstance(commands[0], RunStarted)
        assert commands[0].item_count == 2
        assert _messages(commands) == ["Starting queue...", "Loading: src-a"]
        assert _of_type(commands, LoadItem) == [LoadItem("a", "id-a", ItemKind.SINGLE)]
        assert self.machine.is_running
        assert self.machine.run.phase == PlaybackPhase.LOADING
        assert self.machine.current_item.slot_id == "a"

    def test_start_empty_queue_raises_and_stays_idle(self):
        with pytest.raises(EmptyQueueError):
            self.machine.start([])
        assert not self.machine.is_running
        assert self.machine.run.phase == PlaybackPhase.IDLE

    def test_start_while_running_is_noop(self):
        self.machine.start([_single("a")])
        run_id = self.machine.run.run_id
        assert self.machine.start([_single("b")]) == []
        assert self.machine.run.run_id == run_id

    def test_each_start_gets_new_run_id(self):
        self.machine.start([_single("a")])
        first = self.machine.run.run_id
        self.machine.stop()
        self.machine.start([_single("a")])
        assert self.machine.run.run_id > first

    def test_start_resets_loop_counts(self):
        item = _single("a", loop_limit=3)
        item.current_loop_count = 2
        self.machine.start([item])
        assert self.machine.current_item.current_loop_count == 0

    def test_stop_cancels_timer_before_stopping_handles(self):
        self.machine.start([_single("a")])
        commands = self.machine.stop()

        assert isinstance(commands[0], CancelLoop)
        assert isinstance(commands[1], StopHandles)
        assert _messages(commands) == ["Stopped. Ready to start."]
        assert commands[-1] == RunEnded(self.machine.run.run_id, False)
        assert not self.machine.is_running
        assert self.machine.run.phase == PlaybackPhase.IDLE

    def test_stop_when_idle_is_noop(self):
        assert self.machine.stop() == []


class TestTransitions:
    """Event handling during a run"""

    def setup_method(self):
        self.machine = PlaybackStateMachine()

    def test_cued_requests_play(self):
        self.machine.start([_single("a")])
        commands = self.machine.dispatch(HandleStateChanged("a", HandleState.CUED))
        assert commands == [PlayItem("a")]

    def test_playing_enters_playing_phase(self):
        self.machine.start([_single("a")])
        assert self.machine.dispatch(HandleStateChanged("a", HandleState.PLAYING)) == []
        assert self.machine.run.phase == PlaybackPhase.PLAYING

    def test_ended_with_loops_left_schedules_restart(self):
        self.machine.start([_single("a", loop_limit=2, delay=4)])
        self.machine.dispatch(HandleStateChanged("a", HandleState.PLAYING))
        commands = self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))

        assert _messages(commands) == ["Looping in 4s..."]
        assert _of_type(commands, ScheduleLoop) == [ScheduleLoop(self.machine.run.run_id, "a", 4)]
        assert self.machine.run.phase == PlaybackPhase.LOOP_PENDING

    def test_loop_timer_restarts_item(self):
        self.machine.start([_single("a", loop_limit=2)])
        self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))
        commands = self.machine.dispatch(LoopTimerElapsed(self.machine.run.run_id, "a"))

        assert _messages(commands) == ["Replaying: src-a"]
        assert _of_type(commands, RestartItem) == [RestartItem("a", ItemKind.SINGLE)]
        assert self.machine.run.phase == PlaybackPhase.LOADING

    def test_last_loop_advances(self):
        self.machine.start([_single("a", loop_limit=1), _single("b")])
        commands = self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))

        assert _messages(commands) == ["Finished loops. Moving to next...", "Loading: src-b"]
        assert _of_type(commands, LoadItem) == [LoadItem("b", "id-b", ItemKind.SINGLE)]

    def test_last_item_finishes_queue(self):
        self.machine.start([_single("a")])
        commands = self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))

        assert _messages(commands) == ["Finished loops. Moving to next...", "Queue finished."]
        assert commands[-1] == RunEnded(self.machine.run.run_id, True)
        assert not self.machine.is_running

    def test_events_during_loop_delay_are_ignored(self):
        self.machine.start([_single("a", loop_limit=3, delay=5)])
        self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))

        assert self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED)) == []
        assert self.machine.dispatch(HandleStateChanged("a", HandleState.PLAYING)) == []
        assert self.machine.current_item.current_loop_count == 1
        assert self.machine.run.phase == PlaybackPhase.LOOP_PENDING

    def test_collection_track_status(self):
        self.machine.start([_collection("p")])
        commands = self.machine.dispatch(HandleStateChanged("p", HandleState.PLAYING, 1, 5))
        assert _messages(commands) == ["Playing: src-p (Track 2/5)"]

    def test_collection_ended_before_last_position_is_ignored(self):
        self.machine.start([_collection("p", loop_limit=1)])
        assert self.machine.dispatch(HandleStateChanged("p", HandleState.ENDED, 0, 3)) == []
        assert self.machine.dispatch(HandleStateChanged("p", HandleState.ENDED, None, None)) == []
        assert self.machine.is_running

    def test_collection_ended_at_last_position_completes_cycle(self):
        self.machine.start([_collection("p", loop_limit=2)])
        commands = self.machine.dispatch(HandleStateChanged("p", HandleState.ENDED, 2, 3))
        assert _of_type(commands, ScheduleLoop)

        restart = self.machine.dispatch(LoopTimerElapsed(self.machine.run.run_id, "p"))
        assert _of_type(restart, RestartItem) == [RestartItem("p", ItemKind.COLLECTION)]

    def test_error_skips_to_next_item(self):
        self.machine.start([_single("a"), _single("b")])
        commands = self.machine.dispatch(HandleFailed("a", 150))

        assert _of_type(commands, ReportError)[0].code == 150
        assert _messages(commands) == ["Error in row a. Moving to next item.", "Loading: src-b"]
        assert _of_type(commands, CancelLoop)
        assert self.machine.current_item.slot_id == "b"

    def test_error_on_last_item_finishes_queue(self):
        self.machine.start([_single("a")])
        commands = self.machine.dispatch(HandleFailed("a", 2))
        assert commands[-1] == RunEnded(self.machine.run.run_id, True)

    def test_missing_handle_skips(self):
        self.machine.start([_single("a"), _single("b")])
        commands = self.machine.dispatch(HandleMissing("a"))
        assert _messages(commands) == ["Player not found for row a. Skipping.", "Loading: src-b"]


class TestStaleEvents:
    """Events that must not affect the run"""

    def setup_method(self):
        self.machine = PlaybackStateMachine()

    def test_events_while_stopped(self):
        assert self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED)) == []
        assert self.machine.dispatch(HandleFailed("a", 1)) == []

    def test_events_for_other_slots(self):
        self.machine.start([_single("a"), _single("b")])
        assert self.machine.dispatch(HandleStateChanged("b", HandleState.ENDED)) == []
        assert self.machine.dispatch(HandleFailed("b", 1)) == []
        assert self.machine.current_item.slot_id == "a"

    def test_loop_timer_from_previous_run(self):
        self.machine.start([_single("a", loop_limit=0)])
        old_run = self.machine.run.run_id
        self.machine.stop()
        self.machine.start([_single("a", loop_limit=0)])
        self.machine.dispatch(HandleStateChanged("a", HandleState.ENDED))

        assert self.machine.dispatch(LoopTimerElapsed(old_run, "a")) == []
        assert self.machine.run.phase == PlaybackPhase.LOOP_PENDING

    def test_loop_timer_outside_loop_delay(self):
        self.machine.start([_single("a", loop_limit=0)])
        assert self.machine.dispatch(LoopTimerElapsed(self.machine.run.run_id, "a")) == []

    def test_ready_produces_nothing(self):
        self.machine.start([_single("a")])
        assert self.machine.dispatch(HandleReady("a")) == []
