"""
Status Service Module

Keeps the single current status line and the active queue row, and publishes
them whenever they change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
import logging

from core.event_bus import EventType

if TYPE_CHECKING:
    from app.protocols import IEventBus
    from core.ports.system import IWakeLock

logger = logging.getLogger(__name__)

_STATUS_PREFIX = "Status: "
_WAKE_LOCK_MARKER = " (Screen Lock"


@dataclass(frozen=True)
class StatusSnapshot:
    """What a UI displays: the status line and the highlighted row"""
    message: str
    active_slot_id: Optional[str] = None
    text: str = ""


class StatusService:
    """
    Status Service

    Example:
        status = StatusService(event_bus, wake_lock)
        status.update("Loading: https://youtu.be/...", "row-1")
        status.current.text   # "Status: Loading: https://youtu.be/..."
    """

    def __init__(self, event_bus: "IEventBus", wake_lock: Optional["IWakeLock"] = None):
        self._event_bus = event_bus
        self._wake_lock = wake_lock
        self._current = StatusSnapshot(message="Initializing...", text="Status: Initializing...")

    @property
    def current(self) -> StatusSnapshot:
        return self._current

    def update(self, message: str, active_slot_id: Optional[str] = None) -> StatusSnapshot:
        """Replace the status line and publish it."""
        clean = self._clean(message)
        self._current = StatusSnapshot(
            message=clean,
            active_slot_id=active_slot_id,
            text=f"{_STATUS_PREFIX}{clean}{self._wake_lock_suffix()}",
        )
        logger.info("%s", self._current.text)
        self._event_bus.publish_sync(EventType.STATUS_CHANGED, self._current)
        return self._current

    def refresh(self) -> StatusSnapshot:
        """Re-render the current message, e.g. after the wake lock changed."""
        return self.update(self._current.message, self._current.active_slot_id)

    @staticmethod
    def _clean(message: str) -> str:
        text = message or ""
        if text.startswith(_STATUS_PREFIX):
            text = text[len(_STATUS_PREFIX):]
        return text.split(_WAKE_LOCK_MARKER)[0].strip()

    def _wake_lock_suffix(self) -> str:
        if self._wake_lock is None or not self._wake_lock.is_supported:
            return " (Screen Lock not supported)"
        if self._wake_lock.is_active:
            return " (Screen Lock Active \U0001F512)"
        return ""
