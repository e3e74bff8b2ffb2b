# -*- coding: utf-8 -*-
"""
Timing Port Interfaces

Clock and cooperative task scheduling used by the playback core.
All scheduled actions run on a single loop thread and never overlap.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class ICancelToken(Protocol):
    """Handle of a scheduled action"""

    @property
    def active(self) -> bool:
        """Whether the action is still going to fire"""
        ...

    def cancel(self) -> None:
        """Cancel the action; cancelling twice is harmless"""
        ...


@runtime_checkable
class ITaskScheduler(Protocol):
    """Cooperative task scheduler"""

    def call_later(self, delay_seconds: float, action: Callable[[], None]) -> ICancelToken:
        """Run action once after delay_seconds.

        A delay of 0 runs on the next loop iteration, never synchronously.
        """
        ...

    def call_every(self, interval_seconds: float, action: Callable[[], None]) -> ICancelToken:
        """Run action repeatedly every interval_seconds until cancelled"""
        ...

    def post(self, action: Callable[[], None]) -> None:
        """Queue action onto the loop thread. Safe to call from any thread."""
        ...


@runtime_checkable
class IClock(Protocol):
    """Wall clock source"""

    def now(self) -> datetime:
        ...
