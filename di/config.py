"""
Rivet - Service Manager Configuration

Translates the ``service_manager`` section of an application configuration
into registrations on a ServiceManager.

Recognised keys:
    services:      name -> ready instance
    invokables:    name -> class (or dotted import path)
    factories:     name -> callable(services) (or dotted import path)
    aliases:       alias -> target name
    shared:        name -> bool
    initializers:  list of callable(instance, services)
    allow_override: bool
"""

from __future__ import annotations

import importlib
from typing import Any, Dict, Mapping, Optional

from core.errors import RivetConfigError
from di.container import ServiceManager


def import_string(path: str) -> Any:
    """
    Import an object from ``"package.module:attr"`` or ``"package.module.attr"``.
    """
    if ":" in path:
        module_path, _, attr = path.partition(":")
    else:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise RivetConfigError(f"'{path}' is not an importable path", config_key=path)
    try:
        module = importlib.import_module(module_path)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise RivetConfigError(
            f"Cannot import '{path}': {e}",
            config_key=path,
            cause=e,
        ) from e


def _load(value: Any) -> Any:
    return import_string(value) if isinstance(value, str) else value


class ServiceManagerConfig:
    """Configuration object that knows how to configure a ServiceManager."""

    KEYS = ("services", "invokables", "factories", "aliases", "shared", "initializers", "allow_override")

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.config: Dict[str, Any] = dict(config or {})
        unknown = set(self.config) - set(self.KEYS)
        if unknown:
            raise RivetConfigError(
                f"Unknown service_manager keys: {', '.join(sorted(unknown))}",
                config_key="service_manager",
                actual_value=sorted(unknown),
            )

    def configure(self, services: ServiceManager) -> None:
        """Apply every registration to ``services``."""
        if "allow_override" in self.config:
            services.allow_override = bool(self.config["allow_override"])

        for name, instance in self.config.get("services", {}).items():
            services.set_service(name, instance)

        for name, cls in self.config.get("invokables", {}).items():
            services.set_invokable_class(name, _load(cls))

        for name, factory in self.config.get("factories", {}).items():
            services.set_factory(name, _load(factory))

        for alias, target in self.config.get("aliases", {}).items():
            services.set_alias(alias, target)

        for name, shared in self.config.get("shared", {}).items():
            services.set_shared(name, bool(shared))

        for initializer in self.config.get("initializers", []):
            services.add_initializer(_load(initializer))
