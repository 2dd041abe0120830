"""
Default module manager listeners.
"""
from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from config import merge_config
from core.errors import ModuleLoadError, RivetConfigError
from di.config import ServiceManagerConfig, import_string
from events.listener import AbstractListenerAggregate
from modules.manager import ModuleEvent

logger = logging.getLogger("rivet.modules")


class ModuleResolverListener(AbstractListenerAggregate):
    """
    Turns a module entry into a module object:
        "shop"             -> shop.Module()
        "shop.api:ApiMod"  -> ApiMod()
        ShopModule         -> ShopModule()
        ShopModule()       -> used as is
    """

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULE_RESOLVE, self.on_resolve)
        )

    def on_resolve(self, event: ModuleEvent) -> Any:
        entry = event.get_param("entry", event.module_name)
        if isinstance(entry, type):
            return self._instantiate(event.module_name, entry)
        if not isinstance(entry, str):
            return entry
        if ":" in entry:
            return self._instantiate(entry, import_string(entry))

        try:
            package = importlib.import_module(entry)
        except ModuleNotFoundError as e:
            if e.name != entry:
                raise ModuleLoadError(
                    f"Module '{entry}' failed to import: {e}", module_name=entry, cause=e
                ) from e
            return None

        module_class = getattr(package, "Module", None)
        if module_class is None:
            return None
        return self._instantiate(entry, module_class)

    @staticmethod
    def _instantiate(name: str, module_class: Any) -> Any:
        if not callable(module_class):
            return module_class
        try:
            return module_class()
        except Exception as e:
            raise ModuleLoadError(
                f"Module '{name}' could not be instantiated: {e}", module_name=name, cause=e
            ) from e


class InitTrigger(AbstractListenerAggregate):
    """Calls ``module.init(module_manager)`` before anything else reads the module."""

    priority = 10000

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULE, self.on_load_module, self.priority)
        )

    def on_load_module(self, event: ModuleEvent) -> None:
        init = getattr(event.module, "init", None)
        if callable(init):
            init(event.target)


class ConfigListener(AbstractListenerAggregate):
    """
    Merges ``module.get_config()`` of every module in load order, then the
    ``config_overrides`` option on top.
    """

    priority = 1000

    def __init__(self, config_overrides: Optional[Mapping] = None) -> None:
        super().__init__()
        self.config_overrides = dict(config_overrides or {})
        self.merged_config: Dict[str, Any] = {}
        self.module_configs: Dict[str, Dict[str, Any]] = {}

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULES, self.on_load_modules, self.priority)
        )
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULE, self.on_load_module, self.priority)
        )
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULES_POST, self.on_load_modules_post, self.priority)
        )

    def on_load_modules(self, event: ModuleEvent) -> None:
        event.config_listener = self

    def on_load_module(self, event: ModuleEvent) -> None:
        get_config = getattr(event.module, "get_config", None)
        if not callable(get_config):
            return
        config = get_config()
        if not isinstance(config, Mapping):
            raise ModuleLoadError(
                f"Module '{event.module_name}' get_config() returned {type(config).__name__}, "
                "expected a mapping",
                module_name=event.module_name,
            )
        self.module_configs[event.module_name] = dict(config)
        self.merged_config = merge_config(self.merged_config, config)

    def on_load_modules_post(self, event: ModuleEvent) -> None:
        if self.config_overrides:
            self.merged_config = merge_config(self.merged_config, self.config_overrides)

    def get_module_config(self, name: str) -> Dict[str, Any]:
        return self.module_configs.get(name, {})


class ServiceListener(AbstractListenerAggregate):
    """
    After all modules are loaded, applies the merged ``service_manager``
    section to the container and registers the merged config as ``Config``.
    Module registrations may replace default services.
    """

    priority = 1

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULES_POST, self.on_load_modules_post, self.priority)
        )

    def on_load_modules_post(self, event: ModuleEvent) -> None:
        services = event.target.services
        if services is None:
            return
        config_listener = event.config_listener
        merged = config_listener.merged_config if config_listener is not None else {}

        section = merged.get("service_manager", {})
        if not isinstance(section, Mapping):
            raise RivetConfigError(
                "Merged 'service_manager' config must be a mapping",
                config_key="service_manager",
                actual_value=section,
            )

        allow_override = services.allow_override
        services.allow_override = True
        try:
            ServiceManagerConfig(section).configure(services)
            services.set_service("Config", merged)
        finally:
            services.allow_override = allow_override
        logger.debug(f"Registered merged config with {len(merged)} top-level key(s)")


class OnBootstrapListener(AbstractListenerAggregate):
    """Subscribes ``module.on_bootstrap(event)`` to the application's bootstrap event."""

    identifier = "Application"

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(ModuleEvent.EVENT_LOAD_MODULE, self.on_load_module)
        )

    def on_load_module(self, event: ModuleEvent) -> None:
        on_bootstrap = getattr(event.module, "on_bootstrap", None)
        if not callable(on_bootstrap):
            return
        shared = event.target.events.shared_manager
        if shared is None:
            logger.warning(
                f"Module '{event.module_name}' has on_bootstrap() but no shared event manager is set"
            )
            return
        shared.attach(self.identifier, "bootstrap", on_bootstrap)


class DefaultListenerAggregate(AbstractListenerAggregate):
    """
    Attaches the resolver, init, config, service and on_bootstrap listeners.

    ``options`` is the ``module_listener_options`` section; only
    ``config_overrides`` is read.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self.options = dict(options or {})
        self.config_listener = ConfigListener(self.options.get("config_overrides"))
        self.aggregates = [
            ModuleResolverListener(),
            InitTrigger(),
            self.config_listener,
            ServiceListener(),
            OnBootstrapListener(),
        ]

    def attach(self, events) -> None:
        for aggregate in self.aggregates:
            events.attach_aggregate(aggregate)

    def detach(self, events) -> None:
        for aggregate in self.aggregates:
            events.detach_aggregate(aggregate)
