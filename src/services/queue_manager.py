"""
Queue Manager Module

Builds the per-run queue snapshot and moves the run's position through it.
Never touches a player handle.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
import logging

from models.errors import UnresolvedItemError
from models.playback import RunState
from models.queue_item import ItemKind, QueueEntry, QueueItem
from services.source_resolver import SourceResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayNext:
    """The run moved to a new item that should now be loaded"""
    slot_id: str
    item_id: str
    kind: ItemKind


@dataclass(frozen=True)
class Finished:
    """The run moved past the last item"""
    pass


NextAction = Union[PlayNext, Finished]


class QueueManager:
    """
    Queue Manager

    Example:
        manager = QueueManager()
        queue = manager.build(entries)
        run = RunState(queue=queue, is_stopped=False)
        action = manager.advance(run)   # PlayNext for index 0
    """

    def __init__(self, resolver: Optional[SourceResolver] = None):
        self._resolver = resolver or SourceResolver()

    def build(self, entries: Iterable[Union[QueueEntry, dict]]) -> List[QueueItem]:
        """
        Build a queue snapshot from raw rows.

        Rows that cannot be resolved are dropped; the rest of the build continues.

        Args:
            entries: QueueEntry objects or their configuration mappings

        Returns:
            List[QueueItem]: Items in row order (may be empty)
        """
        queue: List[QueueItem] = []
        for raw in entries:
            try:
                entry = raw if isinstance(raw, QueueEntry) else QueueEntry.from_dict(raw)
                resolved = self._resolver.resolve(entry.source)
            except UnresolvedItemError as e:
                logger.info("Skipping row %s: %s", entry.slot_id, e)
                continue
            except (AttributeError, TypeError) as e:
                logger.warning("Skipping malformed queue row %r: %s", raw, e)
                continue

            queue.append(QueueItem(
                item_id=resolved.item_id,
                kind=resolved.kind,
                slot_id=entry.slot_id,
                loop_limit=entry.loop_limit,
                delay_seconds=max(0, entry.delay_seconds),
                source=entry.source,
            ))

        logger.debug("Built queue with %d of its rows", len(queue))
        return queue

    def advance(self, run: RunState) -> NextAction:
        """Move to the next item and reset its loop counter."""
        run.current_index += 1
        if run.current_index >= len(run.queue):
            return Finished()

        item = run.queue[run.current_index]
        item.current_loop_count = 0
        return PlayNext(slot_id=item.slot_id, item_id=item.item_id, kind=item.kind)

    def current_item(self, run: RunState) -> Optional[QueueItem]:
        return run.current_item
