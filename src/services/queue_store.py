"""
Queue Store Module

The user's editable list of queue rows. Playback takes a snapshot of these
rows when a run starts; edits never affect a running snapshot.
"""

from typing import Any, List, Optional, TYPE_CHECKING
import logging

from models.queue_item import QueueEntry

if TYPE_CHECKING:
    from app.protocols import IConfigService

logger = logging.getLogger(__name__)


class QueueStore:
    """
    Queue Store

    Rows are loaded from and saved to the "queue" configuration key.

    Example:
        store = QueueStore(config)
        entry = store.add("https://youtu.be/dQw4w9WgXcQ", loop_limit=2)
        store.update(entry.slot_id, delay_seconds=5)
        store.save()
    """

    CONFIG_KEY = "queue"

    def __init__(self, config: Optional["IConfigService"] = None):
        self._config = config
        self._entries: List[QueueEntry] = []
        self.reload()

    def reload(self) -> None:
        """Replace the rows with the ones stored in configuration"""
        self._entries = []
        if self._config is None:
            return

        rows = self._config.get(self.CONFIG_KEY, []) or []
        if not isinstance(rows, list):
            logger.warning("Ignoring malformed queue configuration: %r", rows)
            return
        for row in rows:
            if isinstance(row, str):
                row = {"source": row}
            if not isinstance(row, dict):
                logger.warning("Ignoring malformed queue row: %r", row)
                continue
            self._entries.append(QueueEntry.from_dict(row))

    def entries(self) -> List[QueueEntry]:
        return list(self._entries)

    def get(self, slot_id: str) -> Optional[QueueEntry]:
        return next((e for e in self._entries if e.slot_id == slot_id), None)

    def add(self, source: str = "", loop_limit: int = 0, delay_seconds: int = 0) -> QueueEntry:
        entry = QueueEntry(source=source.strip(), loop_limit=loop_limit, delay_seconds=delay_seconds)
        self._entries.append(entry)
        return entry

    def update(self, slot_id: str, **fields: Any) -> Optional[QueueEntry]:
        """Change source, loop_limit or delay_seconds of a row"""
        entry = self.get(slot_id)
        if entry is None:
            return None
        for name in ("source", "loop_limit", "delay_seconds"):
            if name in fields:
                setattr(entry, name, fields[name])
        return entry

    def remove(self, slot_id: str) -> bool:
        entry = self.get(slot_id)
        if entry is None:
            return False
        self._entries.remove(entry)
        return True

    def save(self) -> bool:
        if self._config is None:
            return False
        self._config.set(self.CONFIG_KEY, [e.to_dict() for e in self._entries])
        return self._config.save()
