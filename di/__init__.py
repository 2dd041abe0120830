"""
Rivet - Dependency Injection Module

Name-keyed service container used to wire the framework together.
Every collaborator the orchestrator needs (EventManager, Request,
Response, Router, Config, ModuleManager, Application and all listeners)
is looked up here by string name.

Usage:
    from di import ServiceManager, ServiceManagerConfig

    services = ServiceManager(ServiceManagerConfig({
        "invokables": {"Router": "mvc.router:Router"},
        "aliases": {"router": "Router"},
    }))
    router = services.get("router")
"""

from di.container import (
    ServiceDescriptor,
    ServiceLifetime,
    ServiceManager,
)
from di.config import ServiceManagerConfig, import_string

__all__ = [
    "ServiceDescriptor",
    "ServiceLifetime",
    "ServiceManager",
    "ServiceManagerConfig",
    "import_string",
]
