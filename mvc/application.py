"""
Rivet - Application

The request-lifecycle orchestrator.

bootstrap() attaches the default listeners plus any configured ones, builds
the lifecycle context (MvcEvent) and triggers ``bootstrap``. run() then
drives one request through:

    route -> dispatch -> render -> finish

A listener returning a Response from ``route`` or ``dispatch`` ends that
stage early; the response is used as is and only ``finish`` follows. A
listener that tags the context with an ErrorKind (or raises) diverts the
request to ``dispatch.error``, after which ``render`` and ``finish`` run
as usual so the error payload is rendered like any other result.
Exceptions raised while rendering go to ``render.error`` and then
``finish``. Exceptions raised by the error events or ``finish`` propagate.

Usage:
    application = init({
        "modules": ["shop"],
        "service_manager": {"services": {"Request": Request("GET", "/users/7")}},
    })
    response = application.run()
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from config import unique_names
from core.errors import DuplicateServiceError, InvalidListenerError, LifecycleContextError
from di.container import ServiceManager
from events.listener import ListenerAggregate, is_listener_aggregate
from events.manager import EventManager
from events.result import TriggerResult
from mvc.error_kind import ErrorKind
from mvc.http import Request, Response
from mvc.mvc_event import MvcEvent
from mvc.service.config import build_service_config
from observability.logging import LifecycleLogger, LogContext
from observability.metrics import get_metrics
from observability.tracing import create_span, start_lifecycle_span

logger = logging.getLogger("rivet.mvc.application")

DEFAULT_LISTENERS = (
    "RouteListener",
    "DispatchListener",
    "HttpMethodListener",
    "ViewManager",
    "SendResponseListener",
)


class ApplicationState(Enum):
    CONSTRUCTED = "constructed"
    BOOTSTRAPPED = "bootstrapped"
    RUNNING = "running"
    COMPLETED = "completed"


def resolve_and_attach(
    names: Iterable[str],
    events: EventManager,
    services: ServiceManager,
) -> List[ListenerAggregate]:
    """
    Resolve each listener name through the container and attach it.

    Raises:
        ServiceNotFoundError: a name is not registered
        InvalidListenerError: the service is not a listener aggregate
    """
    attached: List[ListenerAggregate] = []
    for name in names:
        listener = services.get(name)
        if not is_listener_aggregate(listener):
            raise InvalidListenerError(
                f"Service '{name}' is not a listener aggregate ({type(listener).__name__})",
                config_key=name,
                actual_value=listener,
            )
        events.attach_aggregate(listener)
        attached.append(listener)
    return attached


def _is_response(value: Any) -> bool:
    return isinstance(value, Response)


class Application:
    """
    Orchestrates the lifecycle of one request.

    Attributes:
        configuration: the ``Config`` mapping the application was built with
        service_manager: container every collaborator is pulled from
        events: the application's own event manager
    """

    def __init__(self, configuration: Mapping[str, Any], service_manager: ServiceManager) -> None:
        self.configuration = configuration
        self.service_manager = service_manager
        self.events: EventManager = service_manager.get("EventManager")
        self.events.add_identifiers(unique_names(["Application", type(self).__name__]))
        self.request: Request = service_manager.get("Request")
        self.response: Response = service_manager.get("Response")
        self.state = ApplicationState.CONSTRUCTED
        self.listeners: List[ListenerAggregate] = []
        self._event: Optional[MvcEvent] = None
        self._lifecycle = LifecycleLogger()
        self._metrics = get_metrics()
        self._started_at: Optional[float] = None

    @property
    def config(self) -> Mapping[str, Any]:
        return self.service_manager.get("Config")

    @property
    def mvc_event(self) -> Optional[MvcEvent]:
        return self._event

    def bootstrap(self, listeners: Sequence[str] = ()) -> "Application":
        """
        Attach listeners and trigger ``bootstrap``.

        ``listeners`` are added after DEFAULT_LISTENERS; a name already in
        the list is attached once. Must be called once per application.
        """
        names = unique_names(DEFAULT_LISTENERS, listeners)

        with create_span("rivet.bootstrap", attributes={"rivet.listeners": names}):
            self.listeners = resolve_and_attach(names, self.events, self.service_manager)

            event = MvcEvent(MvcEvent.EVENT_BOOTSTRAP, target=self)
            event.application = self
            event.request = self.request
            event.response = self.response
            event.router = self.service_manager.get("Router")
            self._event = event

            self.events.trigger(event)

        self.state = ApplicationState.BOOTSTRAPPED
        self._lifecycle.bootstrapped(type(self).__name__, names)
        return self

    def run(self) -> Response:
        """Run the request through the lifecycle and return the final response."""
        if self.state is not ApplicationState.BOOTSTRAPPED or self._event is None:
            raise LifecycleContextError(
                f"run() requires a bootstrapped application (state: {self.state.value})"
            )

        self.state = ApplicationState.RUNNING
        self._started_at = time.perf_counter()
        event = self._event
        attributes = {"http.method": self.request.method, "http.target": self.request.path}

        with LogContext(request_method=self.request.method, request_path=self.request.path):
            with create_span("rivet.run", attributes=attributes) as span:
                response = self._run(event)
                if response is not None:
                    span.set_attribute("http.status_code", response.status_code)
        return response

    def _run(self, event: MvcEvent) -> Response:
        for stage in (MvcEvent.EVENT_ROUTE, MvcEvent.EVENT_DISPATCH):
            try:
                result = self._trigger(stage, event, until=_is_response)
            except Exception as e:
                self._mark_exception(event, e)
                return self._complete_with_error(stage, event)

            if result.stopped and _is_response(result.last()):
                event.response = result.last()
                return self._finish(event, short_circuited=True)

            if event.is_error():
                return self._complete_with_error(stage, event)

        return self._complete_request(event)

    def _trigger(self, name: str, event: MvcEvent, until=None) -> TriggerResult:
        event.name = name
        with start_lifecycle_span(name, event):
            result = self.events.trigger(event, until=until)
        self._lifecycle.stage(name, len(result), result.stopped)
        return result

    def _mark_exception(self, event: MvcEvent, exception: Exception) -> None:
        logger.error(f"Listener raised during '{event.name}': {type(exception).__name__}: {exception}")
        event.exception = exception
        event.error = ErrorKind.EXCEPTION

    def _complete_with_error(self, stage: str, event: MvcEvent) -> Response:
        self._lifecycle.diverted(stage, event.error.value)
        self._metrics.record_error(stage, event.error.value)
        self._trigger(MvcEvent.EVENT_DISPATCH_ERROR, event)
        return self._complete_request(event)

    def _complete_request(self, event: MvcEvent) -> Response:
        try:
            self._trigger(MvcEvent.EVENT_RENDER, event)
        except Exception as e:
            self._mark_exception(event, e)
            self._lifecycle.diverted(MvcEvent.EVENT_RENDER, event.error.value)
            self._metrics.record_error(MvcEvent.EVENT_RENDER, event.error.value)
            self._trigger(MvcEvent.EVENT_RENDER_ERROR, event)
        return self._finish(event)

    def _finish(self, event: MvcEvent, short_circuited: bool = False) -> Response:
        self._trigger(MvcEvent.EVENT_FINISH, event)
        self.state = ApplicationState.COMPLETED
        response = event.response
        status_code = response.status_code if response is not None else None
        self._lifecycle.completed(status_code, short_circuited=short_circuited)
        self._metrics.record_request(
            method=self.request.method,
            status_code=status_code,
            duration=time.perf_counter() - self._started_at,
            short_circuited=short_circuited,
        )
        return response


@dataclass
class ApplicationConfiguration:
    """Typed form of the configuration accepted by init()."""

    service_manager: Dict[str, Any] = field(default_factory=dict)
    listeners: List[str] = field(default_factory=list)
    modules: List[Any] = field(default_factory=list)
    module_listener_options: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "service_manager": dict(self.service_manager),
            "listeners": list(self.listeners),
            "modules": list(self.modules),
            "module_listener_options": dict(self.module_listener_options),
        }


def init(
    configuration: Union[Mapping[str, Any], ApplicationConfiguration, None] = None,
) -> Application:
    """
    Build the container, load modules and return a bootstrapped Application.

    Listener names are ``Config["listeners"]`` (from modules) followed by
    ``configuration["listeners"]``.
    """
    if isinstance(configuration, ApplicationConfiguration):
        configuration = configuration.to_dict()
    configuration = dict(configuration or {})

    services = ServiceManager(build_service_config(configuration.get("service_manager")))
    # reserved even when the service_manager section allows overrides
    if services.has("ApplicationConfig"):
        raise DuplicateServiceError("ApplicationConfig")
    services.set_service("ApplicationConfig", configuration)

    services.get("ModuleManager").load_modules()

    listeners = unique_names(
        services.get("Config").get("listeners", []),
        configuration.get("listeners", []),
    )
    return services.get("Application").bootstrap(listeners)
