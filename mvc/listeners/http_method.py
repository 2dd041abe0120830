"""
Rejects requests whose method the application does not accept.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from events.listener import AbstractListenerAggregate
from mvc.http import Response
from mvc.mvc_event import MvcEvent

logger = logging.getLogger("rivet.mvc.http_method")


class HttpMethodListener(AbstractListenerAggregate):
    """
    Runs first on ``route``. A disallowed method gets a 405 response that is
    returned from the listener, which short-circuits the route stage.
    """

    priority = 10000

    def __init__(self, allowed_methods: Optional[Iterable[str]] = None, enabled: bool = True) -> None:
        super().__init__()
        self.allowed_methods: List[str] = [m.upper() for m in (allowed_methods or [])]
        self.enabled = enabled

    def attach(self, events) -> None:
        if not self.enabled:
            return
        self.listeners.append(
            events.attach(MvcEvent.EVENT_ROUTE, self.on_route, self.priority)
        )

    def on_route(self, event: MvcEvent) -> Optional[Response]:
        request = event.request
        if request is None or not self.allowed_methods or request.method in self.allowed_methods:
            return None

        logger.info(f"Method {request.method} not allowed for {request.path}")
        response = event.response if event.response is not None else Response()
        response.status_code = 405
        response.set_header("Allow", ", ".join(self.allowed_methods))
        return response
