"""
Listener handles and the listener aggregate contract.
"""
from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from events.manager import EventManager

EventCallback = Callable[[Any], Any]

# Shared across every manager so handles from local and shared pools
# keep a single, stable attach order.
_attach_sequence = itertools.count()


def next_order() -> int:
    return next(_attach_sequence)


def callback_id(callback: EventCallback) -> str:
    """Readable identifier for a callback, used in TriggerResult.stopped_by."""
    owner = getattr(callback, "__self__", None)
    name = getattr(callback, "__name__", None)
    if owner is not None and name is not None:
        return f"{type(owner).__name__}.{name}"
    qualname = getattr(callback, "__qualname__", None)
    if qualname is not None:
        return qualname
    return type(callback).__name__


@dataclass(frozen=True, eq=False)
class ListenerHandle:
    """Returned by attach(); pass it back to detach()."""

    event: str
    callback: EventCallback
    priority: int = 1
    order: int = field(default_factory=next_order)
    listener_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.listener_id or callback_id(self.callback)

    @property
    def sort_key(self):
        # higher priority first, then attach order
        return (-self.priority, self.order)


@runtime_checkable
class ListenerAggregate(Protocol):
    """
    An object that subscribes itself to one or more events.

    The registry only ever calls ``attach(events)``; which events and
    priorities are used is the listener's own decision. ``detach(events)``
    is optional and only called by ``EventManager.detach_aggregate``.
    """

    def attach(self, events: "EventManager") -> None:
        ...


def is_listener_aggregate(candidate: Any) -> bool:
    """True when ``candidate`` exposes a callable ``attach(events)``."""
    return callable(getattr(candidate, "attach", None))


class AbstractListenerAggregate(ABC):
    """Base aggregate that remembers its handles so detach() is exact."""

    def __init__(self) -> None:
        self.listeners: List[ListenerHandle] = []

    @abstractmethod
    def attach(self, events: "EventManager") -> None:
        """Override to subscribe to events, appending handles to ``self.listeners``."""
        ...

    def detach(self, events: "EventManager") -> None:
        for handle in list(self.listeners):
            if events.detach(handle):
                self.listeners.remove(handle)
