# -*- coding: utf-8 -*-
"""
Ports Interfaces Package

Defines the interfaces between the playback core and external infrastructure
(player backends, timers, clock, wake lock).

Design Principles:
- Use Protocol to define interfaces, supporting structural subtyping.
- Service layer depends on these interfaces rather than concrete implementations.
- Facilitates replacing with fakes during testing.
"""

from core.ports.player import IPlayerHandle, IPlayerHandleFactory, IPlayerListener
from core.ports.timing import ICancelToken, IClock, ITaskScheduler
from core.ports.system import IWakeLock

__all__ = [
    "IPlayerHandle",
    "IPlayerHandleFactory",
    "IPlayerListener",
    "ICancelToken",
    "IClock",
    "ITaskScheduler",
    "IWakeLock",
]
