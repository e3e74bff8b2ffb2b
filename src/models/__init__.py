"""
Data Models Module
"""

from .queue_item import ItemKind, QueueEntry, QueueItem
from .schedule import ScheduleEntry
from .account import Account
from .playback import HandleState, PlaybackPhase, RunState

__all__ = [
    'ItemKind',
    'QueueEntry',
    'QueueItem',
    'ScheduleEntry',
    'Account',
    'HandleState',
    'PlaybackPhase',
    'RunState',
]
