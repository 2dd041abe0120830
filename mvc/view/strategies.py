"""
Rendering strategies attached by the ViewManager.

Error strategies do not write the response body themselves while the
``render`` event is still ahead of them: they put an error payload in
``event.result`` and set the status code, and DefaultRenderingStrategy
turns that payload into content. On ``render.error`` no render event
follows, so the payload is rendered in place.
"""
from __future__ import annotations

import json
import logging
import traceback
from collections.abc import Mapping
from typing import Any, Dict, Optional

from events.listener import AbstractListenerAggregate
from mvc.error_kind import ErrorKind
from mvc.http import Response
from mvc.mvc_event import MvcEvent

logger = logging.getLogger("rivet.mvc.view")

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def render_result(response: Response, result: Any) -> Response:
    """Write ``result`` into ``response`` (JSON for mappings and lists)."""
    if result is None:
        return response
    if isinstance(result, (Mapping, list, tuple)):
        response.content = json.dumps(result, default=str)
        response.set_header("Content-Type", JSON_CONTENT_TYPE)
    else:
        response.content = str(result)
        response.headers.setdefault("Content-Type", TEXT_CONTENT_TYPE)
    return response


class DefaultRenderingStrategy(AbstractListenerAggregate):
    """Renders ``event.result`` into the response on ``render``."""

    priority = -10000

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_RENDER, self.on_render, self.priority)
        )

    def on_render(self, event: MvcEvent) -> Optional[Response]:
        result = event.result
        if isinstance(result, Response) or event.response is None:
            return None
        return render_result(event.response, result)


class RouteNotFoundStrategy(AbstractListenerAggregate):
    """Turns the not-found error kinds into a 404 payload."""

    priority = 1

    def __init__(self, display_not_found_reason: bool = False, message: str = "Page not found") -> None:
        super().__init__()
        self.display_not_found_reason = display_not_found_reason
        self.message = message

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_DISPATCH_ERROR, self.on_dispatch_error, self.priority)
        )

    def on_dispatch_error(self, event: MvcEvent) -> None:
        kind = event.error
        if kind is None or not kind.is_not_found or event.response is None:
            return None

        event.response.status_code = 404
        payload: Dict[str, Any] = {"error": self.message}
        if self.display_not_found_reason:
            payload["reason"] = kind.value
            if event.controller:
                payload["controller"] = event.controller
        event.result = payload
        return None


class ExceptionStrategy(AbstractListenerAggregate):
    """Turns ``ErrorKind.EXCEPTION`` into a 500 payload."""

    priority = 1

    def __init__(self, display_exceptions: bool = False, message: str = "An error occurred") -> None:
        super().__init__()
        self.display_exceptions = display_exceptions
        self.message = message

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_DISPATCH_ERROR, self.on_dispatch_error, self.priority)
        )
        self.listeners.append(
            events.attach(MvcEvent.EVENT_RENDER_ERROR, self.on_render_error, self.priority)
        )

    def on_dispatch_error(self, event: MvcEvent) -> None:
        if event.error != ErrorKind.EXCEPTION or event.response is None:
            return None
        event.response.status_code = 500
        event.result = self._payload(event)
        return None

    def on_render_error(self, event: MvcEvent) -> Optional[Response]:
        if event.response is None:
            return None
        logger.error(f"Rendering failed: {event.exception!r}")
        event.response.status_code = 500
        event.result = self._payload(event)
        return render_result(event.response, event.result)

    def _payload(self, event: MvcEvent) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        exception = event.exception
        if self.display_exceptions and exception is not None:
            payload["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "trace": traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                ),
            }
        return payload
