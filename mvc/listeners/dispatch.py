"""
Resolves the matched controller and dispatches it.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from core.errors import ServiceError
from events.listener import AbstractListenerAggregate
from mvc.controller import ControllerManager, Dispatchable
from mvc.error_kind import ErrorKind
from mvc.mvc_event import MvcEvent

logger = logging.getLogger("rivet.mvc.dispatch")


class DispatchListener(AbstractListenerAggregate):
    """
    Controller resolution outcomes:
        no ``controller`` in the route match -> CONTROLLER_CANNOT_DISPATCH
        name not registered                  -> CONTROLLER_NOT_FOUND
        resolved object has no dispatch()    -> CONTROLLER_INVALID
        controller raised                    -> EXCEPTION
    """

    priority = 1

    def __init__(self, controllers: ControllerManager) -> None:
        super().__init__()
        self.controllers = controllers

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_DISPATCH, self.on_dispatch, self.priority)
        )

    def on_dispatch(self, event: MvcEvent) -> Any:
        route_match = event.route_match
        name = route_match.get_param("controller") if route_match is not None else None
        if not name:
            return self._fail(event, ErrorKind.CONTROLLER_CANNOT_DISPATCH)

        event.controller = name
        if not self.controllers.has(name):
            return self._fail(event, ErrorKind.CONTROLLER_NOT_FOUND)

        try:
            controller = self.controllers.get(name)
        except ServiceError as e:
            return self._fail(event, ErrorKind.CONTROLLER_INVALID, e)

        if not isinstance(controller, Dispatchable):
            return self._fail(event, ErrorKind.CONTROLLER_INVALID)

        try:
            result = controller.dispatch(event)
        except Exception as e:
            logger.exception(f"Controller '{name}' raised {type(e).__name__}")
            return self._fail(event, ErrorKind.EXCEPTION, e)

        event.result = result
        return result

    def _fail(self, event: MvcEvent, kind: ErrorKind, exception: Optional[Exception] = None) -> None:
        logger.info(f"Dispatch failed for controller {event.controller!r}: {kind.value}")
        event.error = kind
        if exception is not None:
            event.exception = exception
        return None
