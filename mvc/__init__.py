"""
Rivet - MVC

Event-driven request lifecycle: an Application built from a service
container attaches named listeners and drives route, dispatch, render
and finish through its event manager.

Usage:
    from mvc import Request, init

    application = init({
        "service_manager": {"services": {"Request": Request("GET", "/")}},
        "module_listener_options": {"config_overrides": {
            "router": {"routes": {"home": {"route": "/", "defaults": {"controller": "Index"}}}},
            "controllers": {"invokables": {"Index": "shop.controllers:IndexController"}},
        }},
    })
    response = application.run()
"""
from mvc.application import (
    DEFAULT_LISTENERS,
    Application,
    ApplicationConfiguration,
    ApplicationState,
    init,
    resolve_and_attach,
)
from mvc.controller import ActionController, ControllerManager, Dispatchable
from mvc.error_kind import NOT_FOUND_KINDS, ErrorKind
from mvc.http import Request, Response
from mvc.mvc_event import MvcEvent
from mvc.router import Route, RouteMatch, Router

__all__ = [
    "ActionController",
    "Application",
    "ApplicationConfiguration",
    "ApplicationState",
    "ControllerManager",
    "DEFAULT_LISTENERS",
    "Dispatchable",
    "ErrorKind",
    "MvcEvent",
    "NOT_FOUND_KINDS",
    "Request",
    "Response",
    "Route",
    "RouteMatch",
    "Router",
    "init",
    "resolve_and_attach",
]
