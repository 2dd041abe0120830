"""
View layer bootstrap.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from events.listener import AbstractListenerAggregate
from mvc.mvc_event import MvcEvent
from mvc.view.strategies import (
    DefaultRenderingStrategy,
    ExceptionStrategy,
    RouteNotFoundStrategy,
)

logger = logging.getLogger("rivet.mvc.view")


class ViewManager(AbstractListenerAggregate):
    """
    Listens on ``bootstrap`` and wires the rendering strategies into the
    application's event manager.

    Options are read from ``Config["view_manager"]``:
        display_exceptions         include exception details in 500 payloads
        display_not_found_reason   include the error kind in 404 payloads
        not_found_message          404 payload message
        exception_message          500 payload message
    """

    priority = 10000

    def __init__(self) -> None:
        super().__init__()
        self.options: Mapping[str, Any] = {}
        self.strategies: List[AbstractListenerAggregate] = []

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_BOOTSTRAP, self.on_bootstrap, self.priority)
        )

    def detach(self, events) -> None:
        for strategy in self.strategies:
            events.detach_aggregate(strategy)
        self.strategies = []
        super().detach(events)

    def on_bootstrap(self, event: MvcEvent) -> None:
        application = event.application
        config = application.config
        self.options = dict(config.get("view_manager", {}))

        self.strategies = [
            DefaultRenderingStrategy(),
            RouteNotFoundStrategy(
                display_not_found_reason=bool(self.options.get("display_not_found_reason", False)),
                message=self.options.get("not_found_message", "Page not found"),
            ),
            ExceptionStrategy(
                display_exceptions=bool(self.options.get("display_exceptions", False)),
                message=self.options.get("exception_message", "An error occurred"),
            ),
        ]
        for strategy in self.strategies:
            application.events.attach_aggregate(strategy)
        logger.debug(f"View strategies attached: {[type(s).__name__ for s in self.strategies]}")

    def get_strategy(self, cls: type) -> Optional[AbstractListenerAggregate]:
        for strategy in self.strategies:
            if isinstance(strategy, cls):
                return strategy
        return None
