"""
Loop Controller Module

Decides what happens when the current item completes a cycle.
"""

from dataclasses import dataclass
from typing import Union

from models.queue_item import QueueItem


@dataclass(frozen=True)
class RestartAfter:
    """Replay the same item from its start after a delay"""
    delay_seconds: int


@dataclass(frozen=True)
class AdvanceToNext:
    """The item reached its loop limit"""
    pass


LoopDecision = Union[RestartAfter, AdvanceToNext]


class LoopController:
    """
    Loop Controller

    Counts completed cycles of the current item. A loop limit of 0 or less
    means the item repeats until the run is stopped; otherwise the item plays
    exactly loop_limit times in total.
    """

    def on_cycle_completed(self, item: QueueItem) -> LoopDecision:
        item.current_loop_count += 1

        if item.is_unlimited or item.current_loop_count < item.loop_limit:
            return RestartAfter(delay_seconds=max(0, item.delay_seconds))
        return AdvanceToNext()
