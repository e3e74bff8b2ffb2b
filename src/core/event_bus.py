# -*- coding: utf-8 -*-
"""
Event Bus Module - Publish-Subscribe Pattern Implementation

Provides loose-coupled communication between the playback core and whatever
presents its status (UI, logs, tests).

Design Notes:
- This is a pure Python implementation, does not depend on any UI framework
- Callbacks run on the publishing thread; Qt code posts onto its loop via
  QtTaskScheduler in ui/qt_task_scheduler.py
- One bus per container; there is no process-wide instance
"""

from typing import Dict, Callable, Any, Optional
from enum import Enum
import threading
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event type enumeration"""

    # Run events
    RUN_STARTED = "run_started"
    RUN_STOPPED = "run_stopped"        # Manual or scheduled stop
    QUEUE_FINISHED = "queue_finished"  # Every item played its loops
    ITEM_LOADING = "item_loading"
    ITEM_LOOPING = "item_looping"
    PLAYBACK_ERROR = "playback_error"

    # Status events
    STATUS_CHANGED = "status_changed"
    CONTROLS_CHANGED = "controls_changed"

    # Player handle events
    HANDLE_READY = "handle_ready"
    HANDLE_REMOVED = "handle_removed"

    # Queue editing events
    QUEUE_CHANGED = "queue_changed"

    # Scheduler events
    SCHEDULER_TOGGLED = "scheduler_toggled"
    SCHEDULE_TRIGGERED = "schedule_triggered"

    # System events
    CONFIG_CHANGED = "config_changed"
    WAKE_LOCK_CHANGED = "wake_lock_changed"
    ERROR_OCCURRED = "error_occurred"


class EventBus:
    """
    Event Bus

    Provides publish-subscribe pattern event system, supports asynchronous event handling.

    Note: This is a pure Python implementation. The playback core only publishes from the
    task scheduler thread, so synchronous subscribers run on that thread too.

    Usage example:
        event_bus = EventBus()

        def on_status(snapshot):
            logger.info("Status: %s", snapshot.message)

        sub_id = event_bus.subscribe(EventType.STATUS_CHANGED, on_status)
        event_bus.publish_sync(EventType.STATUS_CHANGED, snapshot)
        event_bus.unsubscribe(sub_id)
    """

    def __init__(self):
        self._subscribers: Dict[EventType, Dict[str, Callable]] = {}
        self._executor: Optional[ThreadPoolExecutor] = None
        self._sub_lock = threading.Lock()

    def subscribe(
        self,
        event_type: EventType,
        callback: Callable[[Any], None]
    ) -> str:
        """
        Subscribe to event

        Args:
            event_type: Event type
            callback: Callback function, receiving event data as an argument

        Returns:
            str: Subscription ID, used for unsubscription
        """
        subscription_id = str(uuid.uuid4())

        with self._sub_lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = {}
            self._subscribers[event_type][subscription_id] = callback

        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Unsubscribe

        Args:
            subscription_id: The ID returned when subscribing

        Returns:
            bool: Whether the unsubscription was successful
        """
        with self._sub_lock:
            for event_type in self._subscribers:
                if subscription_id in self._subscribers[event_type]:
                    del self._subscribers[event_type][subscription_id]
                    return True
        return False

    def publish(self, event_type: EventType, data: Any = None) -> None:
        """
        Publish event asynchronously

        The callback function will be executed asynchronously in a worker thread.

        Args:
            event_type: Event type
            data: Event data
        """
        with self._sub_lock:
            callbacks = list(self._subscribers.get(event_type, {}).values())
            if callbacks and self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="EventBus")
            executor = self._executor

        for callback in callbacks:
            executor.submit(self._safe_call, callback, data)

    def publish_sync(
        self,
        event_type: EventType,
        data: Any = None,
        timeout: Optional[float] = 5.0,
    ) -> bool:
        """
        Publish event synchronously

        All callbacks will be executed in the current thread, in subscription order.

        Args:
            event_type: Event type
            data: Event data
            timeout: Accepted for interface compatibility; callbacks are not interrupted.

        Returns:
            bool: Always True
        """
        with self._sub_lock:
            callbacks = list(self._subscribers.get(event_type, {}).values())

        for callback in callbacks:
            self._safe_call(callback, data)

        return True

    def _safe_call(self, callback: Callable, data: Any) -> None:
        """Safely call a callback function"""
        try:
            callback(data)
        except Exception as e:
            # Avoid loop: Do not use publish to report error events
            logger.error("Event callback execution error: %s", e)

    def clear(self) -> None:
        """Clear all subscriptions"""
        with self._sub_lock:
            self._subscribers.clear()

    def shutdown(self) -> None:
        """Shutdown the event bus"""
        with self._sub_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
