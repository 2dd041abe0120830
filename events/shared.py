"""
Identifier-scoped listener pools.

A SharedEventManager is injected into EventManager instances explicitly.
Listeners attached here against an identifier (for example "Application")
fire for every EventManager that declares that identifier.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import DefaultDict, Dict, List, Optional

from events.listener import EventCallback, ListenerHandle

logger = logging.getLogger("rivet.events.shared")


class SharedEventManager:
    """Identifier -> event name -> listener handles."""

    def __init__(self) -> None:
        self._pools: DefaultDict[str, Dict[str, List[ListenerHandle]]] = defaultdict(dict)

    def attach(
        self,
        identifier: str,
        event: str,
        callback: EventCallback,
        priority: int = 1,
        listener_id: Optional[str] = None,
    ) -> ListenerHandle:
        handle = ListenerHandle(
            event=event,
            callback=callback,
            priority=priority,
            listener_id=listener_id,
        )
        self._pools[identifier].setdefault(event, []).append(handle)
        logger.debug(
            f"Shared listener {handle.id} attached to {identifier}:{event} priority={priority}"
        )
        return handle

    def detach(self, identifier: str, handle: ListenerHandle) -> bool:
        handles = self._pools.get(identifier, {}).get(handle.event)
        if not handles or handle not in handles:
            return False
        handles.remove(handle)
        if not handles:
            del self._pools[identifier][handle.event]
        return True

    def get_listeners(self, identifier: str, event: str) -> List[ListenerHandle]:
        """Handles for ``identifier``/``event`` in invocation order."""
        handles = self._pools.get(identifier, {}).get(event, [])
        return sorted(handles, key=lambda h: h.sort_key)

    def get_events(self, identifier: str) -> List[str]:
        return list(self._pools.get(identifier, {}))

    def clear_listeners(self, identifier: str, event: Optional[str] = None) -> None:
        if identifier not in self._pools:
            return
        if event is None:
            del self._pools[identifier]
        else:
            self._pools[identifier].pop(event, None)
