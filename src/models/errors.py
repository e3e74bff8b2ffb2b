"""
Error types raised by the playback core
"""


class LoopPlayerError(RuntimeError):
    """Base class for playback queue errors"""
    pass


class UnresolvedItemError(LoopPlayerError):
    """A queue row's source could not be turned into a playable reference"""

    def __init__(self, source: str, slot_id: str = ""):
        super().__init__(f"Could not resolve source: {source!r}")
        self.source = source
        self.slot_id = slot_id


class EmptyQueueError(LoopPlayerError):
    """Queue build produced no playable items"""
    pass


class HandleMissingError(LoopPlayerError):
    """No live player handle is registered for a slot"""

    def __init__(self, slot_id: str):
        super().__init__(f"Player not found for row {slot_id}")
        self.slot_id = slot_id


class PlaybackError(LoopPlayerError):
    """A player handle reported an error for its current media"""

    def __init__(self, slot_id: str, code: int):
        super().__init__(f"Playback error {code} in row {slot_id}")
        self.slot_id = slot_id
        self.code = code


class HandleRemovalError(LoopPlayerError):
    """Removing a handle was rejected because its row is playing"""
    pass
