# -*- coding: utf-8 -*-
"""
Qt Task Scheduler

Runs the playback core's timers and cross-thread callbacks on the Qt main
thread, keeping the core layer free of Qt.

Design Principles:
- Every action runs on the thread that owns the Qt event loop, one at a time.
- Timers are QTimer objects wrapped in cancel tokens.
- post() crosses threads through a queued signal, the same way the event bus
  adapter dispatches callbacks.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QCoreApplication, QObject, Qt, QThread, QTimer, pyqtSignal

logger = logging.getLogger(__name__)


class QtTimerToken:
    """Cancel token of one QTimer"""

    def __init__(self, timer: QTimer, repeating: bool):
        self._timer: Optional[QTimer] = timer
        self._repeating = repeating

    @property
    def active(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def _fired(self) -> None:
        if not self._repeating:
            self.cancel()


class QtTaskScheduler(QObject):
    """Qt Task Scheduler

    Usage Example:
        app = QCoreApplication(sys.argv)
        scheduler = QtTaskScheduler()
        token = scheduler.call_later(5, restart_item)
        token.cancel()
    """

    _post_signal = pyqtSignal(object)

    def __init__(self):
        """Initialize the scheduler.

        Raises:
            RuntimeError: If no Qt application instance is running.
        """
        super().__init__()

        app = QCoreApplication.instance()
        if app is None:
            raise RuntimeError(
                "QtTaskScheduler requires a running QCoreApplication instance. "
                "Please create the application before initializing the scheduler."
            )

        main_thread = app.thread()
        if QThread.currentThread() != main_thread:
            self.moveToThread(main_thread)
            logger.debug("QtTaskScheduler moved to Qt main thread")

        self._post_signal.connect(self._run_action, Qt.ConnectionType.QueuedConnection)

    def call_later(self, delay_seconds: float, action: Callable[[], None]) -> QtTimerToken:
        return self._start_timer(delay_seconds, action, repeating=False)

    def call_every(self, interval_seconds: float, action: Callable[[], None]) -> QtTimerToken:
        return self._start_timer(interval_seconds, action, repeating=True)

    def post(self, action: Callable[[], None]) -> None:
        self._post_signal.emit(action)

    def _start_timer(self, seconds: float, action: Callable[[], None], repeating: bool) -> QtTimerToken:
        timer = QTimer(self)
        timer.setSingleShot(not repeating)
        token = QtTimerToken(timer, repeating)

        def on_timeout() -> None:
            token._fired()
            self._run_action(action)

        timer.timeout.connect(on_timeout)
        # A 0 ms timer fires on the next event loop iteration
        timer.start(max(0, int(seconds * 1000)))
        return token

    def _run_action(self, action: Callable[[], None]) -> None:
        # An exception escaping a Qt slot aborts the process
        try:
            action()
        except Exception:
            logger.exception("Scheduled action failed")
