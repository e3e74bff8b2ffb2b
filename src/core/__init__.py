"""
Loop Queue Player Core Module
"""

from .event_bus import EventBus, EventType
from .player_registry import PlayerRegistry
from .player_factory import PlayerBackendFactory
from .system import SystemClock, SystemWakeLock

__all__ = [
    'EventBus',
    'EventType',
    'PlayerRegistry',
    'PlayerBackendFactory',
    'SystemClock',
    'SystemWakeLock',
]
