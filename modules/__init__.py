"""
Rivet - Modules

Application modules contribute configuration, services and bootstrap
listeners before the application is bootstrapped.

A module is any object; every hook is optional:
    init(module_manager)
    get_config() -> mapping
    on_bootstrap(event)
"""
from modules.listeners import (
    ConfigListener,
    DefaultListenerAggregate,
    InitTrigger,
    ModuleResolverListener,
    OnBootstrapListener,
    ServiceListener,
)
from modules.manager import ModuleEvent, ModuleManager, module_key

__all__ = [
    "ConfigListener",
    "DefaultListenerAggregate",
    "InitTrigger",
    "ModuleEvent",
    "ModuleManager",
    "ModuleResolverListener",
    "OnBootstrapListener",
    "ServiceListener",
    "module_key",
]
