# -*- coding: utf-8 -*-
"""
Loop Player Facade Module

Provides a unified interface for any front end (CLI, GUI) to drive the
playback run, the schedule, the queue rows and the accounts.

Design Principles:
- Front ends should only depend on this Facade, not directly on underlying services.
- The Facade only exposes use-case level methods.
- Manual start/stop is unavailable while the scheduler is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence
import logging

from core.event_bus import EventType
from models.errors import HandleRemovalError
from models.schedule import ScheduleEntry

if TYPE_CHECKING:
    from enum import Enum
    from app.protocols import IConfigService, IEventBus
    from core.ports.player import IPlayerHandleFactory
    from models.account import Account
    from models.queue_item import QueueEntry
    from services.account_service import AccountService
    from services.playback_service import PlaybackService
    from services.queue_store import QueueStore
    from services.schedule_service import ScheduleService
    from services.status_service import StatusService, StatusSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlsState:
    """Which manual controls a front end should enable"""
    start_enabled: bool
    stop_enabled: bool
    scheduler_enabled: bool


class LoopPlayerFacade:
    """Loop Player Facade

    Usage Example:
        facade = container.facade
        facade.subscribe(EventType.STATUS_CHANGED, on_status)
        row = facade.add_row("https://www.youtube.com/watch?v=dQw4w9WgXcQ", loop_limit=3)
        facade.start()
    """

    def __init__(
        self,
        playback: "PlaybackService",
        scheduler: "ScheduleService",
        queue_store: "QueueStore",
        accounts: "AccountService",
        status: "StatusService",
        config: "IConfigService",
        event_bus: "IEventBus",
        handle_factory: Optional["IPlayerHandleFactory"] = None,
    ):
        self._playback = playback
        self._scheduler = scheduler
        self._queue = queue_store
        self._accounts = accounts
        self._status = status
        self._config = config
        self._event_bus = event_bus
        self._handle_factory = handle_factory

        self._sub_ids = [
            event_bus.subscribe(event_type, self._on_run_changed)
            for event_type in (
                EventType.RUN_STARTED,
                EventType.RUN_STOPPED,
                EventType.QUEUE_FINISHED,
                EventType.HANDLE_READY,
                EventType.HANDLE_REMOVED,
            )
        ]

    # =========================================================================
    # Run Control
    # =========================================================================

    def start(self) -> bool:
        """Manual start. Rejected while the scheduler is enabled."""
        if self._scheduler.enabled:
            self._status.update("Scheduler is enabled. Disable it for manual control.")
            return False
        return self._playback.start_playback()

    def stop(self) -> bool:
        """Manual stop. Rejected while the scheduler is enabled."""
        if self._scheduler.enabled:
            self._status.update("Scheduler is enabled. Disable it for manual control.")
            return False
        return self._playback.stop_playback()

    @property
    def is_running(self) -> bool:
        return self._playback.is_running

    @property
    def controls(self) -> ControlsState:
        scheduled = self._scheduler.enabled
        running = self._playback.is_running
        return ControlsState(
            start_enabled=not scheduled and not running and len(self._playback.registry) > 0,
            stop_enabled=not scheduled and running,
            scheduler_enabled=scheduled,
        )

    def _on_run_changed(self, _data: Any) -> None:
        self._publish_controls()

    def _publish_controls(self) -> None:
        self._event_bus.publish_sync(EventType.CONTROLS_CHANGED, self.controls)

    # =========================================================================
    # Scheduler
    # =========================================================================

    @property
    def scheduler_enabled(self) -> bool:
        return self._scheduler.enabled

    def set_scheduler_enabled(self, enabled: bool, persist: bool = False) -> None:
        if enabled == self._scheduler.enabled:
            return
        if enabled:
            self._scheduler.enable()
        else:
            self._scheduler.disable()
        if persist:
            self._config.set("schedule.enabled", enabled)
            self._config.save()
        self._publish_controls()

    def get_schedule(self) -> List[ScheduleEntry]:
        return self._scheduler.entries

    def set_schedule(self, entries: Sequence[ScheduleEntry], persist: bool = True) -> None:
        self._scheduler.set_entries(entries)
        if persist:
            self._config.set("schedule.entries", [e.to_dict() for e in entries])
            self._config.save()

    # =========================================================================
    # Queue Rows
    # =========================================================================

    def get_rows(self) -> List["QueueEntry"]:
        return self._queue.entries()

    def add_row(self, source: str = "", loop_limit: int = 0, delay_seconds: int = 0) -> "QueueEntry":
        """Add a row and create its player handle."""
        entry = self._queue.add(source, loop_limit, delay_seconds)
        if self._handle_factory is not None:
            self._playback.attach_handle(self._handle_factory.create(entry.slot_id))
        self._event_bus.publish_sync(EventType.QUEUE_CHANGED, self._queue.entries())
        return entry

    def update_row(self, slot_id: str, **fields: Any) -> bool:
        """Edit a row; a changed source is cued for preview."""
        entry = self._queue.update(slot_id, **fields)
        if entry is None:
            return False
        if "source" in fields:
            self._playback.cue_preview(slot_id)
        self._event_bus.publish_sync(EventType.QUEUE_CHANGED, self._queue.entries())
        return True

    def remove_row(self, slot_id: str) -> bool:
        """Remove a row and destroy its handle; refused for the playing row."""
        try:
            self._playback.remove_handle(slot_id)
        except HandleRemovalError as e:
            self._status.update(str(e))
            return False

        removed = self._queue.remove(slot_id)
        if removed:
            self._event_bus.publish_sync(EventType.QUEUE_CHANGED, self._queue.entries())
        return removed

    def save_rows(self) -> bool:
        return self._queue.save()

    # =========================================================================
    # Accounts
    # =========================================================================

    def get_accounts(self) -> List["Account"]:
        return self._accounts.get_accounts()

    def save_accounts(self, accounts: Sequence["Account"]) -> bool:
        saved = self._accounts.save_accounts(accounts)
        if saved:
            self._status.update("Accounts saved successfully.")
        else:
            self._status.update("Error: Accounts could not be saved.")
        return saved

    # =========================================================================
    # Events / Status
    # =========================================================================

    @property
    def status(self) -> "StatusSnapshot":
        return self._status.current

    def subscribe(self, event_type: "Enum", callback: Callable[[Any], None]) -> str:
        return self._event_bus.subscribe(event_type, callback)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._event_bus.unsubscribe(subscription_id)

    def shutdown(self) -> None:
        for sub_id in self._sub_ids:
            self._event_bus.unsubscribe(sub_id)
        self._sub_ids.clear()
