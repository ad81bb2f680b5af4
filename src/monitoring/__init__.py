"""
Monitoring for nav2d: typed events, an in-process bus and a JSONL logger.
"""

from .bus import EventBus
from .events import EventType, MonitoringEvent
from .logger import JsonFileLogger, log_event

__all__ = [
    "EventBus",
    "EventType",
    "MonitoringEvent",
    "JsonFileLogger",
    "log_event",
]
