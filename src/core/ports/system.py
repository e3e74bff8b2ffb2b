# -*- coding: utf-8 -*-
"""
System Port Interfaces
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IWakeLock(Protocol):
    """Keeps the screen/system awake while playback is unattended"""

    @property
    def is_supported(self) -> bool:
        ...

    @property
    def is_active(self) -> bool:
        ...

    def acquire(self) -> bool:
        """Acquire the lock; acquiring while held is a no-op"""
        ...

    def release(self) -> None:
        """Release the lock; releasing while not held is a no-op"""
        ...
