# -*- coding: utf-8 -*-
"""
Application Container Module

Defines the dependency container for the application, holding all service instances centrally.

Design Principles:
- Only the entry point (main.py or a GUI shell) holds the complete AppContainer
- Front-end components access services via the facade
- The run state lives inside the playback service; nothing is looked up globally
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import logging

if TYPE_CHECKING:
    from app.protocols import IConfigService, IEventBus
    from services.loop_player_facade import LoopPlayerFacade

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Application Dependency Container

    Usage Example:
        container = AppContainerFactory.create()
        container.facade.start()
        ...
        container.cleanup()
    """

    # === Public Attributes ===
    config: "IConfigService"
    event_bus: "IEventBus"
    facade: "LoopPlayerFacade"

    # === Internal Service References (Not exposed to front-end components) ===
    _playback: Any = field(default=None, repr=False)
    _scheduler: Any = field(default=None, repr=False)
    _registry: Any = field(default=None, repr=False)
    _task_scheduler: Any = field(default=None, repr=False)
    _wake_lock: Any = field(default=None, repr=False)
    _handle_factory: Any = field(default=None, repr=False)

    def cleanup(self) -> None:
        """Clean up all resources

        Should be called when the application exits. Every step runs even if
        an earlier one fails.
        """
        if self._scheduler is not None and self._scheduler.enabled:
            self._guard("scheduler", self._scheduler.disable)

        if self._playback is not None:
            self._guard("playback", self._playback.stop_playback)

        if self._registry is not None:
            self._guard("players", self._registry.clear)

        if self._handle_factory is not None and hasattr(self._handle_factory, "cleanup"):
            self._guard("player backend", self._handle_factory.cleanup)

        if self._wake_lock is not None:
            self._guard("wake lock", self._wake_lock.release)

        if self.facade is not None:
            self._guard("facade", self.facade.shutdown)

        if self.event_bus is not None and hasattr(self.event_bus, "shutdown"):
            self._guard("event bus", self.event_bus.shutdown)

    @staticmethod
    def _guard(name: str, step) -> None:
        try:
            step()
        except Exception as e:
            logger.warning("Cleanup of %s failed: %s", name, e)
