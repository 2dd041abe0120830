"""
Rivet - Module Manager

Loads application modules before the listener list is finalised, so a
module can contribute configuration, services, listener names and
bootstrap listeners.

Events, in order:
    loadModules          once, before any module is resolved
    loadModule.resolve   per module; the first non-None response is the module
    loadModule           per module, once it is resolved
    loadModules.post     once, after every module is loaded
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from core.errors import ModuleLoadError
from events.event import Event
from events.manager import EventManager

if TYPE_CHECKING:
    from di.container import ServiceManager
    from modules.listeners import ConfigListener

logger = logging.getLogger("rivet.modules")


class ModuleEvent(Event):
    """Event passed to every module manager listener."""

    EVENT_LOAD_MODULES = "loadModules"
    EVENT_LOAD_MODULE_RESOLVE = "loadModule.resolve"
    EVENT_LOAD_MODULE = "loadModule"
    EVENT_LOAD_MODULES_POST = "loadModules.post"

    def __init__(self, name: Optional[str] = None, target: Any = None, params: Any = None) -> None:
        super().__init__(name, target, params)
        self.module_name: Optional[str] = None
        self.module: Any = None
        self.config_listener: Optional["ConfigListener"] = None


def module_key(entry: Any) -> str:
    """Name a module entry is loaded under: the string itself, or a class name."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, type):
        return entry.__name__
    return type(entry).__name__


class ModuleManager:
    """
    Usage:
        manager = ModuleManager(["shop", "billing"], EventManager(shared_manager=shared))
        manager.events.attach_aggregate(DefaultListenerAggregate())
        manager.load_modules()
        manager.get_module("shop")
    """

    def __init__(
        self,
        modules: Iterable[Any] = (),
        events: Optional[EventManager] = None,
        services: Optional["ServiceManager"] = None,
    ) -> None:
        self.modules: List[Any] = list(modules)
        self.services = services
        self.events = events if events is not None else EventManager()
        self.events.add_identifiers(["ModuleManager", type(self).__name__])
        self.event = ModuleEvent(target=self)
        self._loaded: Dict[str, Any] = {}
        self._modules_loaded = False

    @property
    def loaded_modules(self) -> Dict[str, Any]:
        return dict(self._loaded)

    def get_module(self, name: str) -> Any:
        return self._loaded.get(name)

    def load_modules(self) -> "ModuleManager":
        """Load every configured module. Later calls do nothing."""
        if self._modules_loaded:
            return self

        self.event.name = ModuleEvent.EVENT_LOAD_MODULES
        self.events.trigger(self.event)

        for entry in self.modules:
            self.load_module(entry)

        self.event.name = ModuleEvent.EVENT_LOAD_MODULES_POST
        self.event.module_name = None
        self.event.module = None
        self.events.trigger(self.event)

        self._modules_loaded = True
        logger.info(f"Loaded {len(self._loaded)} module(s): {', '.join(self._loaded)}")
        return self

    def load_module(self, entry: Any) -> Any:
        """Resolve and load one module entry; returns the module object."""
        name = module_key(entry)
        if name in self._loaded:
            return self._loaded[name]

        event = self.event
        event.module_name = name
        event.module = None
        event.set_param("entry", entry)

        event.name = ModuleEvent.EVENT_LOAD_MODULE_RESOLVE
        result = self.events.trigger(event, until=lambda module: module is not None)
        module = result.last() if result.stopped else None
        if module is None:
            raise ModuleLoadError(f"Module '{name}' could not be resolved", module_name=name)

        event.module = module
        event.name = ModuleEvent.EVENT_LOAD_MODULE
        self.events.trigger(event)

        self._loaded[name] = module
        logger.debug(f"Module '{name}' loaded ({type(module).__name__})")
        return module
