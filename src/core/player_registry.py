# -*- coding: utf-8 -*-
"""
Player Registry Module

Holds the live player handle of every queue slot.
"""

from __future__ import annotations

from typing import Dict, List, Optional
import logging

from core.ports.player import IPlayerHandle

logger = logging.getLogger(__name__)


class PlayerRegistry:
    """
    Slot id -> player handle map

    Destroying a handle never raises: teardown must always complete, so
    backend failures are logged and swallowed.
    """

    def __init__(self):
        self._handles: Dict[str, IPlayerHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, slot_id: str) -> bool:
        return slot_id in self._handles

    def register(self, handle: IPlayerHandle) -> None:
        """Register a handle, destroying any handle previously bound to its slot."""
        previous = self._handles.get(handle.slot_id)
        if previous is not None and previous is not handle:
            self._destroy(previous)
        self._handles[handle.slot_id] = handle
        logger.debug("Registered player for row %s", handle.slot_id)

    def get(self, slot_id: str) -> Optional[IPlayerHandle]:
        return self._handles.get(slot_id)

    def remove(self, slot_id: str) -> bool:
        """Destroy and forget a slot's handle. Returns False if there was none."""
        handle = self._handles.pop(slot_id, None)
        if handle is None:
            return False
        self._destroy(handle)
        return True

    def handles(self) -> List[IPlayerHandle]:
        return list(self._handles.values())

    def slot_ids(self) -> List[str]:
        return list(self._handles.keys())

    def clear(self) -> None:
        """Destroy every handle"""
        for slot_id in list(self._handles):
            self.remove(slot_id)

    @staticmethod
    def _destroy(handle: IPlayerHandle) -> None:
        try:
            handle.destroy()
        except Exception as e:
            logger.debug("Ignoring destroy failure for row %s: %s", handle.slot_id, e)
