"""
Rivet - Event Manager

Synchronous, priority-ordered event bus.

Invocation order for a trigger of event ``E``:
    1. local listeners of ``E`` and of the wildcard ``"*"``, by priority
       (highest first), ties in attach order
    2. for each identifier, in declaration order, the shared listeners of
       ``E`` and ``"*"`` for that identifier, ordered the same way

The list is snapshotted before the first listener runs. After every
listener the manager checks whether the event's propagation was stopped
or the ``until`` predicate accepts the listener's return value; either one
ends the trigger. Listener exceptions are not caught here.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Iterable, List, Mapping, Optional, Union

from core.errors import InvalidListenerError
from events.event import Event
from events.listener import EventCallback, ListenerAggregate, ListenerHandle, is_listener_aggregate
from events.result import TriggerResult
from events.shared import SharedEventManager

logger = logging.getLogger("rivet.events")

WILDCARD = "*"

Predicate = Callable[[Any], bool]


class EventManager:
    """
    Event bus owned by one orchestrator.

    Usage:
        events = EventManager(identifiers=["Application"], shared_manager=shared)
        events.attach("route", on_route, priority=100)
        result = events.trigger("route", event, until=lambda r: r is not None)
        if result.stopped:
            ...
    """

    def __init__(
        self,
        identifiers: Optional[Iterable[str]] = None,
        shared_manager: Optional[SharedEventManager] = None,
        event_class: type = Event,
    ) -> None:
        self._listeners: DefaultDict[str, List[ListenerHandle]] = defaultdict(list)
        self._identifiers: List[str] = []
        self.shared_manager = shared_manager
        self.event_class = event_class
        if identifiers:
            self.set_identifiers(identifiers)

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    @property
    def identifiers(self) -> List[str]:
        return list(self._identifiers)

    def set_identifiers(self, identifiers: Iterable[str]) -> None:
        self._identifiers = []
        self.add_identifiers(identifiers)

    def add_identifiers(self, identifiers: Union[str, Iterable[str]]) -> None:
        if isinstance(identifiers, str):
            identifiers = [identifiers]
        for identifier in identifiers:
            if identifier not in self._identifiers:
                self._identifiers.append(identifier)

    # -------------------------------------------------------------------------
    # Attaching
    # -------------------------------------------------------------------------

    def attach(
        self,
        event: Union[str, Iterable[str]],
        callback: EventCallback,
        priority: int = 1,
        listener_id: Optional[str] = None,
    ) -> Union[ListenerHandle, List[ListenerHandle]]:
        """
        Subscribe ``callback`` to ``event`` (or to each name of a list).

        Attaching the same callback twice registers it twice.
        """
        if not callable(callback):
            raise InvalidListenerError(
                f"Listener for '{event}' is not callable: {callback!r}",
                actual_value=callback,
            )
        if not isinstance(event, str):
            return [self.attach(name, callback, priority, listener_id) for name in event]

        handle = ListenerHandle(
            event=event,
            callback=callback,
            priority=priority,
            listener_id=listener_id,
        )
        self._listeners[event].append(handle)
        logger.debug(f"Listener {handle.id} attached to '{event}' priority={priority}")
        return handle

    def attach_aggregate(self, aggregate: ListenerAggregate) -> ListenerAggregate:
        """Let ``aggregate`` subscribe itself through its attach() method."""
        if not is_listener_aggregate(aggregate):
            raise InvalidListenerError(
                f"{type(aggregate).__name__} does not implement attach(events)",
                actual_value=aggregate,
            )
        aggregate.attach(self)
        return aggregate

    def detach(self, handle: ListenerHandle) -> bool:
        handles = self._listeners.get(handle.event)
        if not handles or handle not in handles:
            return False
        handles.remove(handle)
        if not handles:
            del self._listeners[handle.event]
        return True

    def detach_aggregate(self, aggregate: ListenerAggregate) -> None:
        """Call the aggregate's detach(events); attach-only aggregates are left alone."""
        detach = getattr(aggregate, "detach", None)
        if callable(detach):
            detach(self)

    def get_events(self) -> List[str]:
        return list(self._listeners)

    def get_listeners(self, event: str) -> List[ListenerHandle]:
        """Local handles for ``event`` in invocation order."""
        return sorted(self._listeners.get(event, []), key=lambda h: h.sort_key)

    def clear_listeners(self, event: str) -> None:
        self._listeners.pop(event, None)

    # -------------------------------------------------------------------------
    # Triggering
    # -------------------------------------------------------------------------

    def _collect(self, name: str) -> List[ListenerHandle]:
        local = list(self._listeners.get(name, []))
        if name != WILDCARD:
            local.extend(self._listeners.get(WILDCARD, []))
        handles = sorted(local, key=lambda h: h.sort_key)

        if self.shared_manager is not None:
            for identifier in self._identifiers:
                shared = self.shared_manager.get_listeners(identifier, name)
                if name != WILDCARD:
                    shared += self.shared_manager.get_listeners(identifier, WILDCARD)
                handles.extend(sorted(shared, key=lambda h: h.sort_key))
        return handles

    def _prepare_event(
        self,
        event: Union[str, Event],
        target: Any,
        params: Optional[Mapping[str, Any]],
    ) -> Event:
        if isinstance(event, Event):
            if target is not None:
                event.target = target
            if params:
                event.params.update(params)
            return event
        return self.event_class(name=event, target=target, params=params)

    def trigger(
        self,
        event: Union[str, Event],
        target: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        until: Optional[Predicate] = None,
    ) -> TriggerResult:
        """
        Invoke every listener of ``event`` with a shared event object.

        ``event`` is either an event name or an Event instance whose
        ``name`` is used. Returns the collected listener responses.
        """
        evt = self._prepare_event(event, target, params)
        if not evt.name:
            raise ValueError("Cannot trigger an event without a name")

        evt.stop_propagation(False)
        result = TriggerResult()

        for handle in self._collect(evt.name):
            response = handle.callback(evt)
            result.append(response)

            if evt.propagation_is_stopped() or (until is not None and until(response)):
                result.stopped = True
                result.stopped_by = handle.id
                logger.debug(f"Propagation of '{evt.name}' stopped by {handle.id}")
                break

        return result

    def trigger_until(
        self,
        event: Union[str, Event],
        predicate: Predicate,
        target: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> TriggerResult:
        """Trigger ``event``, stopping at the first response ``predicate`` accepts."""
        return self.trigger(event, target=target, params=params, until=predicate)
