# -*- coding: utf-8 -*-
"""
System Integration Module

Wall clock and platform wake lock used by the scheduler and the playback run.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)


class SystemClock:
    """Local wall clock"""

    def now(self) -> datetime:
        return datetime.now()


class SystemWakeLock:
    """
    Platform wake lock

    - Windows: SetThreadExecutionState (display + system required)
    - macOS: a `caffeinate -d -i` child process
    - Linux: a `systemd-inhibit ... sleep infinity` child process

    The lock is held until release() or process exit. On platforms without a
    mechanism is_supported is False and acquire() returns False.
    """

    _ES_CONTINUOUS = 0x80000000
    _ES_SYSTEM_REQUIRED = 0x00000001
    _ES_DISPLAY_REQUIRED = 0x00000002

    def __init__(self, reason: str = "Unattended queue playback"):
        self._reason = reason
        self._process: Optional[subprocess.Popen] = None
        self._windows_active = False
        self._command = self._inhibit_command()

    @property
    def is_supported(self) -> bool:
        return sys.platform == "win32" or self._command is not None

    @property
    def is_active(self) -> bool:
        if self._windows_active:
            return True
        return self._process is not None and self._process.poll() is None

    def acquire(self) -> bool:
        if self.is_active:
            return True
        if not self.is_supported:
            return False

        try:
            if sys.platform == "win32":
                import ctypes
                flags = self._ES_CONTINUOUS | self._ES_SYSTEM_REQUIRED | self._ES_DISPLAY_REQUIRED
                self._windows_active = bool(ctypes.windll.kernel32.SetThreadExecutionState(flags))
            else:
                self._process = subprocess.Popen(
                    self._command,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
        except (OSError, AttributeError) as e:
            logger.error("Wake Lock Error: %s", e)
            self._process = None
            self._windows_active = False
            return False

        logger.debug("Wake lock acquired")
        return self.is_active

    def release(self) -> None:
        if self._windows_active:
            import ctypes
            ctypes.windll.kernel32.SetThreadExecutionState(self._ES_CONTINUOUS)
            self._windows_active = False

        process, self._process = self._process, None
        if process is not None and process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=2)
            except subprocess.TimeoutExpired:
                process.kill()
            logger.debug("Wake lock released")

    def _inhibit_command(self) -> Optional[List[str]]:
        if sys.platform == "darwin" and shutil.which("caffeinate"):
            return ["caffeinate", "-d", "-i"]
        if sys.platform.startswith("linux") and shutil.which("systemd-inhibit"):
            return [
                "systemd-inhibit",
                "--what=idle:sleep",
                "--who=loop-queue-player",
                f"--why={self._reason}",
                "sleep",
                "infinity",
            ]
        return None
