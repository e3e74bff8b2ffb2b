# -*- coding: utf-8 -*-
"""
Player Handle Port Interface

Defines the capability interface of a single-item media player bound to one
queue slot, so the playback service does not depend on a specific backend.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from models.playback import HandleState
from models.queue_item import ItemKind


@runtime_checkable
class IPlayerListener(Protocol):
    """Receiver of player handle notifications

    Every notification names the slot of the handle that emitted it.
    Handles may call these from any thread.
    """

    def on_ready(self, slot_id: str) -> None:
        ...

    def on_state_changed(self, slot_id: str, state: HandleState) -> None:
        ...

    def on_error(self, slot_id: str, code: int) -> None:
        ...


@runtime_checkable
class IPlayerHandle(Protocol):
    """Player Handle Interface

    One instance per queue slot. Plays exactly one item (a single media unit
    or a collection) at a time.
    Current implementations: VlcPlayerHandle
    """

    @property
    def slot_id(self) -> str:
        """Slot this handle is bound to"""
        ...

    def set_listener(self, listener: Optional[IPlayerListener]) -> None:
        """Set the notification receiver"""
        ...

    def load(self, item_id: str, kind: ItemKind) -> None:
        """Load an item and start playing it as soon as it is buffered"""
        ...

    def cue(self, item_id: str, kind: ItemKind) -> None:
        """Load an item without playing it; emits CUED when primed"""
        ...

    def play(self) -> None:
        ...

    def stop(self) -> None:
        ...

    def seek_to_start(self) -> None:
        """Restart a single item from position 0"""
        ...

    def jump_to_first_position(self) -> None:
        """Restart a collection from its first entry"""
        ...

    def current_position(self) -> int:
        """Zero-based position within the loaded collection"""
        ...

    def collection_length(self) -> int:
        """Number of entries in the loaded collection (1 when unknown)"""
        ...

    def destroy(self) -> None:
        """Release the backend resources; the handle is unusable afterwards"""
        ...


@runtime_checkable
class IPlayerHandleFactory(Protocol):
    """Creates a handle for a slot"""

    def create(self, slot_id: str) -> IPlayerHandle:
        ...
