"""
Queue Manager and Loop Controller Tests
"""

from models.playback import RunState
from models.queue_item import ItemKind, QueueEntry, QueueItem
from services.loop_controller import AdvanceToNext, LoopController, RestartAfter
from services.queue_manager import Finished, PlayNext, QueueManager


VIDEO_A = "https://www.youtube.com/watch?v=AAAAAAAAAAA"
VIDEO_B = "https://www.youtube.com/watch?v=BBBBBBBBBBB"


class TestQueueBuild:
    """Queue snapshot building"""

    def setup_method(self):
        self.manager = QueueManager()

    def test_build_keeps_row_order_and_settings(self):
        entries = [
            QueueEntry(VIDEO_A, loop_limit=2, delay_seconds=3, slot_id="a"),
            QueueEntry(VIDEO_B, loop_limit=0, delay_seconds=0, slot_id="b"),
        ]
        queue = self.manager.build(entries)

        assert [item.slot_id for item in queue] == ["a", "b"]
        assert queue[0].item_id == "AAAAAAAAAAA"
        assert queue[0].loop_limit == 2
        assert queue[0].delay_seconds == 3
        assert queue[1].is_unlimited

    def test_build_drops_unresolvable_rows(self):
        entries = [
            QueueEntry("", slot_id="empty"),
            QueueEntry(VIDEO_A, slot_id="a"),
            QueueEntry("garbage text", slot_id="bad"),
        ]
        queue = self.manager.build(entries)
        assert [item.slot_id for item in queue] == ["a"]

    def test_build_accepts_mappings_and_clamps_delay(self):
        queue = self.manager.build([
            {"source": VIDEO_A, "loop_limit": "3", "delay_seconds": -5, "slot_id": "a"},
            {"source": VIDEO_B, "loop_limit": "many", "slot_id": "b"},
        ])
        assert queue[0].loop_limit == 3
        assert queue[0].delay_seconds == 0
        assert queue[1].loop_limit == 0

    def test_build_empty(self):
        assert self.manager.build([]) == []


class TestQueueAdvance:
    """Moving the run through the queue"""

    def setup_method(self):
        self.manager = QueueManager()
        self.queue = self.manager.build([
            QueueEntry(VIDEO_A, loop_limit=2, slot_id="a"),
            QueueEntry("https://www.youtube.com/playlist?list=PL1", loop_limit=1, slot_id="b"),
        ])

    def test_advance_walks_then_finishes(self):
        run = RunState(queue=self.queue, is_stopped=False)

        first = self.manager.advance(run)
        assert first == PlayNext("a", "AAAAAAAAAAA", ItemKind.SINGLE)
        assert self.manager.current_item(run).slot_id == "a"

        second = self.manager.advance(run)
        assert second == PlayNext("b", "PL1", ItemKind.COLLECTION)

        assert isinstance(self.manager.advance(run), Finished)
        assert self.manager.current_item(run) is None

    def test_advance_resets_loop_count(self):
        self.queue[1].current_loop_count = 7
        run = RunState(queue=self.queue, current_index=0, is_stopped=False)
        self.manager.advance(run)
        assert run.current_item.current_loop_count == 0


class TestLoopController:
    """Loop limit decisions"""

    def setup_method(self):
        self.controller = LoopController()

    def test_limited_item_plays_exactly_limit_times(self):
        item = QueueItem("x", ItemKind.SINGLE, "a", loop_limit=3, delay_seconds=2)

        assert self.controller.on_cycle_completed(item) == RestartAfter(2)
        assert self.controller.on_cycle_completed(item) == RestartAfter(2)
        assert isinstance(self.controller.on_cycle_completed(item), AdvanceToNext)
        assert item.current_loop_count == 3

    def test_limit_one_advances_immediately(self):
        item = QueueItem("x", ItemKind.SINGLE, "a", loop_limit=1)
        assert isinstance(self.controller.on_cycle_completed(item), AdvanceToNext)

    def test_unlimited_never_advances(self):
        for limit in (0, -1):
            item = QueueItem("x", ItemKind.SINGLE, "a", loop_limit=limit)
            decisions = [self.controller.on_cycle_completed(item) for _ in range(50)]
            assert all(isinstance(d, RestartAfter) for d in decisions)
            assert item.current_loop_count == 50
