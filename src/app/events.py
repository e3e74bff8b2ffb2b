# -*- coding: utf-8 -*-
"""
Event Types Module

Re-exports EventType from core.event_bus so front ends subscribe through the
facade without importing the core layer.

Usage Example:
    from app.events import EventType

    facade.subscribe(EventType.STATUS_CHANGED, on_status)
"""

from core.event_bus import EventType

__all__ = ["EventType"]
