"""
Rivet - Event Layer

Priority-ordered synchronous event bus with identifier-scoped shared
listener pools.

Usage:
    from events import EventManager, SharedEventManager

    shared = SharedEventManager()
    shared.attach("Application", "finish", log_request, priority=-100)

    events = EventManager(identifiers=["Application"], shared_manager=shared)
    events.attach("route", match_route, priority=1)
    events.trigger("route", target=app)
"""

from events.event import Event
from events.listener import (
    AbstractListenerAggregate,
    EventCallback,
    ListenerAggregate,
    ListenerHandle,
    callback_id,
    is_listener_aggregate,
)
from events.manager import WILDCARD, EventManager
from events.result import TriggerResult
from events.shared import SharedEventManager

__all__ = [
    "AbstractListenerAggregate",
    "Event",
    "EventCallback",
    "EventManager",
    "ListenerAggregate",
    "ListenerHandle",
    "SharedEventManager",
    "TriggerResult",
    "WILDCARD",
    "callback_id",
    "is_listener_aggregate",
]
