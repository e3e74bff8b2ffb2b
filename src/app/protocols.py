# -*- coding: utf-8 -*-
"""
Protocols Definition Module

Defines the interface protocols (Protocol) for the application services.
Uses Protocol instead of ABC to support structural subtyping checks.

Design Decisions:
- Default to using Protocol + @runtime_checkable
- Infrastructure interfaces (player handles, timers, clock, wake lock) live in core.ports
- Runtime checks are performed as one-time assertions during container assembly or testing
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

# Re-export infrastructure interfaces from core.ports
from core.ports.player import IPlayerHandle, IPlayerHandleFactory, IPlayerListener
from core.ports.system import IWakeLock
from core.ports.timing import ICancelToken, IClock, ITaskScheduler


# =============================================================================
# Event Bus Protocol
# =============================================================================

@runtime_checkable
class IEventBus(Protocol):
    """Event Bus Interface

    Provides a publish-subscribe pattern event system.
    """

    def subscribe(
        self,
        event_type: Enum,
        callback: Callable[[Any], None]
    ) -> str:
        """Subscribe to an event

        Args:
            event_type: Event type enumeration
            callback: Callback function

        Returns:
            Subscription ID, used to unsubscribe
        """
        ...

    def unsubscribe(self, subscription_id: str) -> bool:
        ...

    def publish(self, event_type: Enum, data: Any = None) -> None:
        """Publish an event from a worker thread"""
        ...

    def publish_sync(
        self,
        event_type: Enum,
        data: Any = None,
        timeout: Optional[float] = None
    ) -> bool:
        """Publish an event in the calling thread

        Returns:
            True if every callback completed
        """
        ...


# =============================================================================
# Configuration Service Protocol
# =============================================================================

@runtime_checkable
class IConfigService(Protocol):
    """Configuration Service Interface"""

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value

        Args:
            key: Configuration key, supports dot-separated nested keys
            default: Default value
        """
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def save(self) -> bool:
        """Persist the configuration; False on failure"""
        ...


# =============================================================================
# Run Control Protocol
# =============================================================================

@runtime_checkable
class IRunControl(Protocol):
    """Start/stop entry points of the playback run

    Both calls are idempotent: starting a running queue or stopping a stopped
    one is a no-op that reports success.
    """

    wake_lock_per_run: bool

    @property
    def is_running(self) -> bool:
        ...

    def start_playback(self) -> bool:
        """Start a fresh run; False when no queue row is playable"""
        ...

    def stop_playback(self) -> bool:
        ...


__all__ = [
    "IEventBus",
    "IConfigService",
    "IRunControl",
    "IPlayerHandle",
    "IPlayerHandleFactory",
    "IPlayerListener",
    "IWakeLock",
    "ICancelToken",
    "IClock",
    "ITaskScheduler",
]
