# -*- coding: utf-8 -*-
"""
Container Factory Module

Responsible for creating and assembling all application dependencies.

This is the **only** instance creation point (Composition Root) for the application.
All service instance creation should be done here, not within individual services.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

if TYPE_CHECKING:
    from app.container import AppContainer
    from app.protocols import (
        IClock,
        IConfigService,
        IEventBus,
        IPlayerHandleFactory,
        ITaskScheduler,
        IWakeLock,
    )
    from models.schedule import ScheduleEntry

logger = logging.getLogger(__name__)


class AppContainerFactory:
    """Application Container Factory

    Creates and assembles all application dependencies.

    Usage Example:
        # In main.py (a QCoreApplication must exist)
        container = AppContainerFactory.create()

        # In tests (no Qt, no libvlc)
        container = AppContainerFactory.create_for_testing(
            task_scheduler=ManualTaskScheduler(),
            clock=FakeClock(),
            handle_factory=FakeHandleFactory(),
        )
    """

    @staticmethod
    def create(
        config_path: str = "config/default_config.yaml",
        handle_factory: Optional["IPlayerHandleFactory"] = None,
    ) -> "AppContainer":
        """Create Application Container

        Args:
            config_path: Configuration file path
            handle_factory: Player backend override; defaults to the
                            configured "player.backend"

        Returns:
            A configured AppContainer instance

        Raises:
            RuntimeError: If the configured player backend cannot be created
        """
        from core.event_bus import EventBus
        from core.player_factory import PlayerBackendFactory
        from core.system import SystemClock, SystemWakeLock
        from services.config_service import ConfigService
        from ui.qt_task_scheduler import QtTaskScheduler

        logger.info("Creating application container...")

        # === 1. Infrastructure Layer ===
        config = ConfigService(config_path)
        event_bus = EventBus()
        task_scheduler = QtTaskScheduler()

        # === 2. Player Backend ===
        if handle_factory is None:
            backend = config.get("player.backend", "vlc")
            try:
                handle_factory = PlayerBackendFactory.create(backend, config.get("player", {}))
            except RuntimeError as e:
                logger.error("Failed to create player backend: %s", e)
                raise

        container = AppContainerFactory._assemble(
            config=config,
            event_bus=event_bus,
            task_scheduler=task_scheduler,
            clock=SystemClock(),
            wake_lock=SystemWakeLock(),
            handle_factory=handle_factory,
        )
        logger.info("Application container creation complete")
        return container

    @staticmethod
    def create_for_testing(
        task_scheduler: "ITaskScheduler",
        clock: "IClock",
        handle_factory: Optional["IPlayerHandleFactory"] = None,
        wake_lock: Optional["IWakeLock"] = None,
        config_path: Optional[str] = None,
        queue: Optional[Iterable[dict]] = None,
        schedule: Optional[Iterable[dict]] = None,
    ) -> "AppContainer":
        """Create a container for testing

        Uses a pure EventBus and the given fakes, independent of Qt and libvlc.

        Args:
            task_scheduler: Deterministic scheduler
            clock: Controllable clock
            handle_factory: Fake player backend
            wake_lock: Optional fake wake lock
            config_path: Configuration file path (a temporary file)
            queue: Queue rows to put into the configuration before assembly
            schedule: Schedule entries to put into the configuration before assembly
        """
        from core.event_bus import EventBus
        from services.config_service import ConfigService

        config = ConfigService(config_path)
        if queue is not None:
            config.set("queue", list(queue))
        if schedule is not None:
            config.set("schedule.entries", list(schedule))

        return AppContainerFactory._assemble(
            config=config,
            event_bus=EventBus(),
            task_scheduler=task_scheduler,
            clock=clock,
            wake_lock=wake_lock,
            handle_factory=handle_factory,
        )

    @staticmethod
    def _assemble(
        config: "IConfigService",
        event_bus: "IEventBus",
        task_scheduler: "ITaskScheduler",
        clock: "IClock",
        wake_lock: Optional["IWakeLock"],
        handle_factory: Optional["IPlayerHandleFactory"],
    ) -> "AppContainer":
        from app.container import AppContainer
        from core.player_registry import PlayerRegistry
        from services.account_service import AccountService
        from services.loop_player_facade import LoopPlayerFacade
        from services.playback_service import PlaybackService
        from services.queue_manager import QueueManager
        from services.queue_store import QueueStore
        from services.schedule_service import ScheduleService
        from services.source_resolver import SourceResolver
        from services.status_service import StatusService

        # === Service Layer ===
        status = StatusService(event_bus, wake_lock)
        accounts = AccountService(config)
        queue_store = QueueStore(config)
        registry = PlayerRegistry()

        playback = PlaybackService(
            registry=registry,
            task_scheduler=task_scheduler,
            event_bus=event_bus,
            status=status,
            entries_provider=queue_store.entries,
            queue_manager=QueueManager(SourceResolver()),
            wake_lock=wake_lock,
            accounts=accounts,
        )

        scheduler = ScheduleService(
            playback=playback,
            task_scheduler=task_scheduler,
            clock=clock,
            status=status,
            event_bus=event_bus,
            wake_lock=wake_lock,
            entries=_load_schedule(config),
            poll_interval_seconds=float(config.get("schedule.poll_interval_seconds", 1) or 1),
        )

        facade = LoopPlayerFacade(
            playback=playback,
            scheduler=scheduler,
            queue_store=queue_store,
            accounts=accounts,
            status=status,
            config=config,
            event_bus=event_bus,
            handle_factory=handle_factory,
        )

        # === Player Handles for the stored rows ===
        if handle_factory is not None:
            for entry in queue_store.entries():
                playback.attach_handle(handle_factory.create(entry.slot_id))

        return AppContainer(
            config=config,
            event_bus=event_bus,
            facade=facade,
            _playback=playback,
            _scheduler=scheduler,
            _registry=registry,
            _task_scheduler=task_scheduler,
            _wake_lock=wake_lock,
            _handle_factory=handle_factory,
        )


def _load_schedule(config: "IConfigService") -> List["ScheduleEntry"]:
    from models.schedule import ScheduleEntry

    entries = []
    for index, raw in enumerate(config.get("schedule.entries", []) or []):
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed schedule entry %d: %r", index, raw)
            continue
        try:
            entries.append(ScheduleEntry.from_dict(raw))
        except ValueError as e:
            logger.warning("Ignoring schedule entry %d: %s", index, e)
    return entries
