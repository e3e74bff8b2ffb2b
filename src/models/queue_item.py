"""
Queue item data models
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import uuid


class ItemKind(Enum):
    """Kind of media an item refers to"""
    SINGLE = "single"
    COLLECTION = "collection"


def new_slot_id() -> str:
    """Generate a slot id for a new queue row."""
    return f"row-{uuid.uuid4().hex[:12]}"


@dataclass
class QueueEntry:
    """
    Raw queue row as edited by the user and stored in configuration.

    The source is not resolved yet; resolution happens when a run starts.
    """

    source: str = ""
    loop_limit: int = 0
    delay_seconds: int = 0
    slot_id: str = field(default_factory=new_slot_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueEntry":
        """Create from a configuration mapping (missing numbers fall back to 0)."""
        slot_id = data.get("slot_id") or new_slot_id()
        return cls(
            source=str(data.get("source") or "").strip(),
            loop_limit=_to_int(data.get("loop_limit")),
            delay_seconds=_to_int(data.get("delay_seconds")),
            slot_id=str(slot_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "loop_limit": self.loop_limit,
            "delay_seconds": self.delay_seconds,
            "slot_id": self.slot_id,
        }


@dataclass
class QueueItem:
    """
    One resolved, playable row of a run's queue.

    Everything except current_loop_count is fixed once the run's snapshot
    is built; current_loop_count is only meaningful while the item is current.
    """

    item_id: str
    kind: ItemKind
    slot_id: str
    loop_limit: int = 0
    delay_seconds: int = 0
    source: str = ""
    current_loop_count: int = 0

    @property
    def is_unlimited(self) -> bool:
        """Whether the item loops until the run is stopped"""
        return self.loop_limit <= 0

    @property
    def label(self) -> str:
        """Text used in status messages"""
        return self.source or self.item_id


def _to_int(value: Optional[Any]) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
