"""
Controller contract and the controller registry.

A controller is any object with ``dispatch(event)``. ActionController
maps the route's ``action`` parameter onto a ``<action>_action`` method.
Controllers are registered under ``Config["controllers"]`` with the same
keys as a service_manager section.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

from di.config import ServiceManagerConfig
from di.container import ServiceManager
from mvc.error_kind import ErrorKind

if TYPE_CHECKING:
    from mvc.mvc_event import MvcEvent


@runtime_checkable
class Dispatchable(Protocol):
    def dispatch(self, event: "MvcEvent") -> Any:
        ...


class ActionController:
    """Dispatches to ``<action>_action(event)``; ``index`` by default."""

    default_action = "index"

    def dispatch(self, event: "MvcEvent") -> Any:
        action = self.default_action
        if event.route_match is not None:
            action = event.route_match.get_param("action", self.default_action)
        method = getattr(self, f"{str(action).replace('-', '_')}_action", None)
        if method is None:
            event.error = ErrorKind.CONTROLLER_CANNOT_DISPATCH
            event.set_param("action", action)
            return None
        return method(event)


class ControllerManager(ServiceManager):
    """Service manager dedicated to controllers. Controllers are not shared."""

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ControllerManager":
        manager = cls()
        section = dict(config.get("controllers", {}))
        manager_config = ServiceManagerConfig(section)
        manager_config.configure(manager)
        for name in section.get("invokables", {}):
            manager.set_shared(name, False)
        for name in section.get("factories", {}):
            manager.set_shared(name, False)
        return manager
