"""
Matches the request against the router.
"""
from __future__ import annotations

import logging
from typing import Optional

from events.listener import AbstractListenerAggregate
from mvc.error_kind import ErrorKind
from mvc.mvc_event import MvcEvent
from mvc.router import RouteMatch

logger = logging.getLogger("rivet.mvc.route")


class RouteListener(AbstractListenerAggregate):
    """Sets ``event.route_match`` or tags the event ROUTER_NO_MATCH."""

    priority = 1

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_ROUTE, self.on_route, self.priority)
        )

    def on_route(self, event: MvcEvent) -> Optional[RouteMatch]:
        route_match = event.router.match(event.request)
        if route_match is None:
            logger.info(f"No route matched {event.request.method} {event.request.path}")
            event.error = ErrorKind.ROUTER_NO_MATCH
            return None

        event.route_match = route_match
        return route_match
