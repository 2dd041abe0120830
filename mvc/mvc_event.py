"""
Rivet - MVC Lifecycle Event

The per-request lifecycle context. One MvcEvent is created by
Application.bootstrap() and the same instance is passed to every listener
of every lifecycle event for that request.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from core.errors import LifecycleContextError
from events.event import Event
from mvc.error_kind import ErrorKind

if TYPE_CHECKING:
    from mvc.application import Application
    from mvc.http import Request, Response
    from mvc.router import RouteMatch, Router


class MvcEvent(Event):
    """
    Shared state threaded through bootstrap, route, dispatch, render, finish.

    ``request`` and ``router`` are write-once: they are bound during
    bootstrap and may not be replaced afterwards. ``response``, ``error``,
    ``result`` and ``route_match`` are written by listeners.
    """

    EVENT_BOOTSTRAP = "bootstrap"
    EVENT_ROUTE = "route"
    EVENT_DISPATCH = "dispatch"
    EVENT_DISPATCH_ERROR = "dispatch.error"
    EVENT_RENDER = "render"
    EVENT_RENDER_ERROR = "render.error"
    EVENT_FINISH = "finish"

    def __init__(self, name: Optional[str] = None, target: Any = None, params: Any = None) -> None:
        super().__init__(name, target, params)
        self.application: Optional["Application"] = None
        self._request: Optional["Request"] = None
        self._router: Optional["Router"] = None
        self.response: Optional["Response"] = None
        self.route_match: Optional["RouteMatch"] = None
        self.controller: Optional[str] = None
        self.result: Any = None
        self.exception: Optional[BaseException] = None
        self._error: Optional[ErrorKind] = None

    @property
    def request(self) -> Optional["Request"]:
        return self._request

    @request.setter
    def request(self, request: "Request") -> None:
        if self._request is not None and request is not self._request:
            raise LifecycleContextError("The request of a lifecycle context cannot be replaced")
        self._request = request

    @property
    def router(self) -> Optional["Router"]:
        return self._router

    @router.setter
    def router(self, router: "Router") -> None:
        if self._router is not None and router is not self._router:
            raise LifecycleContextError("The router of a lifecycle context cannot be replaced")
        self._router = router

    @property
    def error(self) -> Optional[ErrorKind]:
        return self._error

    @error.setter
    def error(self, kind: Optional[ErrorKind]) -> None:
        self._error = ErrorKind(kind) if kind is not None else None

    def is_error(self) -> bool:
        return self._error is not None

    def clear_error(self) -> None:
        self._error = None
        self.exception = None
