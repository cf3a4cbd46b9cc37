"""
Event infrastructure.
"""

from .wvc_event_bus import (
    WVCEventBus,
    get_wvc_event_bus,
    set_wvc_event_bus,
    reset_wvc_event_bus,
)

__all__ = [
    "WVCEventBus",
    "get_wvc_event_bus",
    "set_wvc_event_bus",
    "reset_wvc_event_bus",
]
