"""
Default service configuration of an MVC application.

Entries are dotted import paths so this module can be imported without
pulling in the application or its listeners; they are resolved when the
configuration is applied to a ServiceManager.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Set

from di.config import ServiceManagerConfig

DEFAULT_SERVICE_CONFIG: Dict[str, Dict[str, Any]] = {
    "invokables": {
        "SharedEventManager": "events.shared:SharedEventManager",
        "Request": "mvc.http:Request",
        "Response": "mvc.http:Response",
        "RouteListener": "mvc.listeners.route:RouteListener",
        "ViewManager": "mvc.view.manager:ViewManager",
    },
    "factories": {
        "EventManager": "mvc.service.factories:event_manager_factory",
        "ModuleManager": "mvc.service.factories:module_manager_factory",
        "Application": "mvc.service.factories:application_factory",
        "Config": "mvc.service.factories:config_factory",
        "Router": "mvc.service.factories:router_factory",
        "ControllerManager": "mvc.service.factories:controller_manager_factory",
        "DispatchListener": "mvc.service.factories:dispatch_listener_factory",
        "HttpMethodListener": "mvc.service.factories:http_method_listener_factory",
        "SendResponseListener": "mvc.service.factories:send_response_listener_factory",
    },
    "aliases": {
        "Events": "EventManager",
    },
    "shared": {
        "EventManager": False,
    },
}

# Keys whose entries each define a service name.
_NAMED_KEYS = ("services", "invokables", "factories", "aliases")


def _user_names(overrides: Mapping[str, Any]) -> Set[str]:
    names: Set[str] = set()
    for key in _NAMED_KEYS:
        names.update(overrides.get(key, {}))
    return names


def build_service_config(overrides: Optional[Mapping[str, Any]] = None) -> ServiceManagerConfig:
    """
    Layer a ``service_manager`` section over the defaults.

    A name defined by ``overrides`` under any key replaces the default
    registration of that name, whatever kind it was.
    """
    overrides = dict(overrides or {})
    replaced = _user_names(overrides)

    merged: Dict[str, Any] = {}
    for key, entries in DEFAULT_SERVICE_CONFIG.items():
        if key in _NAMED_KEYS:
            merged[key] = {name: value for name, value in entries.items() if name not in replaced}
        else:
            merged[key] = dict(entries)

    for key, value in overrides.items():
        if isinstance(value, Mapping):
            merged[key] = {**merged.get(key, {}), **value}
        else:
            merged[key] = value

    return ServiceManagerConfig(merged)
