"""
Factories for the default MVC services. Each is called as ``factory(services)``.
"""
from __future__ import annotations

from typing import Any, Dict

from config import get_settings
from di.container import ServiceManager
from events.manager import EventManager
from modules.listeners import DefaultListenerAggregate
from modules.manager import ModuleManager
from mvc.application import Application
from mvc.controller import ControllerManager
from mvc.listeners.dispatch import DispatchListener
from mvc.listeners.http_method import HttpMethodListener
from mvc.listeners.send_response import SendResponseListener
from mvc.router import Router


def event_manager_factory(services: ServiceManager) -> EventManager:
    return EventManager(shared_manager=services.get("SharedEventManager"))


def module_manager_factory(services: ServiceManager) -> ModuleManager:
    configuration = services.get("ApplicationConfig") if services.has("ApplicationConfig") else {}
    options = dict(configuration.get("module_listener_options", {}))

    manager = ModuleManager(
        modules=configuration.get("modules", []),
        events=services.get("EventManager"),
        services=services,
    )
    manager.events.attach_aggregate(DefaultListenerAggregate(options))
    return manager


def application_factory(services: ServiceManager) -> Application:
    return Application(services.get("Config"), services)


def config_factory(services: ServiceManager) -> Dict[str, Any]:
    """
    Configuration merged from the loaded modules.

    Replaced by the merged mapping once modules are loaded; before that it
    is whatever the config listener has merged so far.
    """
    if not services.has("ModuleManager"):
        return {}
    config_listener = services.get("ModuleManager").event.config_listener
    if config_listener is None:
        return {}
    return config_listener.merged_config


def router_factory(services: ServiceManager) -> Router:
    return Router.from_config(services.get("Config"))


def controller_manager_factory(services: ServiceManager) -> ControllerManager:
    return ControllerManager.from_config(services.get("Config"))


def dispatch_listener_factory(services: ServiceManager) -> DispatchListener:
    return DispatchListener(services.get("ControllerManager"))


def http_method_listener_factory(services: ServiceManager) -> HttpMethodListener:
    config = services.get("Config")
    methods = config.get("http_methods") or get_settings().http_methods
    return HttpMethodListener(
        allowed_methods=methods,
        enabled=bool(config.get("http_methods_enabled", True)),
    )


def send_response_listener_factory(services: ServiceManager) -> SendResponseListener:
    sender = services.get("ResponseSender") if services.has("ResponseSender") else None
    return SendResponseListener(sender)
