"""
Service Layer Module
"""

from .config_service import ConfigService
from .source_resolver import SourceResolver, ResolvedSource
from .queue_manager import QueueManager, PlayNext, Finished
from .loop_controller import LoopController, RestartAfter, AdvanceToNext
from .playback_state_machine import PlaybackStateMachine
from .playback_service import PlaybackService
from .schedule_service import ScheduleService
from .status_service import StatusService, StatusSnapshot
from .queue_store import QueueStore
from .account_service import AccountService
from .loop_player_facade import LoopPlayerFacade, ControlsState

__all__ = [
    'ConfigService',
    'SourceResolver',
    'ResolvedSource',
    'QueueManager',
    'PlayNext',
    'Finished',
    'LoopController',
    'RestartAfter',
    'AdvanceToNext',
    'PlaybackStateMachine',
    'PlaybackService',
    'ScheduleService',
    'StatusService',
    'StatusSnapshot',
    'QueueStore',
    'AccountService',
    'LoopPlayerFacade',
    'ControlsState',
]
