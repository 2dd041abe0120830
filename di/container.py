"""
Rivet - Service Manager

A lightweight IoC container that resolves services by string name.

Features:
- Instance, invokable class, factory and alias registrations
- Shared (singleton) and transient lifetimes
- Initializers run against every created instance
- Circular dependency detection with the full resolution chain
- Registration guard against silently replacing a service
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from core.errors import (
    CircularDependencyError,
    DuplicateServiceError,
    RivetError,
    ServiceNotCreatedError,
    ServiceNotFoundError,
)

logger = logging.getLogger("rivet.di")

Factory = Callable[["ServiceManager"], Any]
Initializer = Callable[[Any, "ServiceManager"], None]


class ServiceLifetime(Enum):
    """Service lifetime options."""

    SINGLETON = "singleton"  # One instance per service manager
    TRANSIENT = "transient"  # New instance every time


@dataclass
class ServiceDescriptor:
    """Describes how a named service is created and managed."""

    name: str
    implementation_type: Optional[Type[Any]] = None
    factory: Optional[Factory] = None
    instance: Any = None
    lifetime: ServiceLifetime = ServiceLifetime.SINGLETON

    @property
    def has_instance(self) -> bool:
        return self.implementation_type is None and self.factory is None


class ServiceManager:
    """
    Name-keyed dependency container.

    Usage:
        services = ServiceManager()

        services.set_service("Config", {"listeners": []})
        services.set_invokable_class("Router", Router)
        services.set_factory("EventManager", lambda sm: EventManager(), shared=False)
        services.set_alias("Events", "EventManager")

        router = services.get("Router")
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        allow_override: bool = False,
    ) -> None:
        self._descriptors: Dict[str, ServiceDescriptor] = {}
        self._aliases: Dict[str, str] = {}
        self._instances: Dict[str, Any] = {}
        self._initializers: List[Initializer] = []
        self._lock = threading.RLock()
        self._resolving: List[str] = []
        self.allow_override = allow_override

        if config is not None:
            config.configure(self)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def _register(self, descriptor: ServiceDescriptor) -> "ServiceManager":
        name = descriptor.name
        if self.has(name) and not self.allow_override:
            raise DuplicateServiceError(name)
        self._aliases.pop(name, None)
        self._instances.pop(name, None)
        self._descriptors[name] = descriptor
        return self

    def set_service(self, name: str, service: Any) -> "ServiceManager":
        """Register an existing instance as a shared service."""
        self._register(ServiceDescriptor(name=name, instance=service))
        self._instances[name] = service
        return self

    def set_invokable_class(
        self,
        name: str,
        implementation_type: Type[Any],
        shared: bool = True,
    ) -> "ServiceManager":
        """Register a class instantiated without arguments."""
        return self._register(
            ServiceDescriptor(
                name=name,
                implementation_type=implementation_type,
                lifetime=ServiceLifetime.SINGLETON if shared else ServiceLifetime.TRANSIENT,
            )
        )

    def set_factory(
        self,
        name: str,
        factory: Factory,
        shared: bool = True,
    ) -> "ServiceManager":
        """Register a factory called with this service manager."""
        return self._register(
            ServiceDescriptor(
                name=name,
                factory=factory,
                lifetime=ServiceLifetime.SINGLETON if shared else ServiceLifetime.TRANSIENT,
            )
        )

    def set_alias(self, alias: str, target: str) -> "ServiceManager":
        """Make ``alias`` resolve to the service registered as ``target``."""
        if alias == target:
            raise CircularDependencyError(alias, [alias])
        if self.has(alias) and not self.allow_override:
            raise DuplicateServiceError(alias)
        self._descriptors.pop(alias, None)
        self._aliases[alias] = target
        return self

    def set_shared(self, name: str, shared: bool) -> "ServiceManager":
        """Change the lifetime of a registered service."""
        descriptor = self._get_descriptor(self.resolve_alias(name))
        descriptor.lifetime = ServiceLifetime.SINGLETON if shared else ServiceLifetime.TRANSIENT
        return self

    def add_initializer(self, initializer: Initializer) -> "ServiceManager":
        """Run ``initializer(instance, services)`` on every created instance."""
        self._initializers.append(initializer)
        return self

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_alias(self, name: str) -> str:
        """Follow alias chains down to a canonical service name."""
        seen = [name]
        while name in self._aliases:
            name = self._aliases[name]
            if name in seen:
                raise CircularDependencyError(name, seen)
            seen.append(name)
        return name

    def _get_descriptor(self, name: str) -> ServiceDescriptor:
        """Get service descriptor or raise error."""
        descriptor = self._descriptors.get(name)
        if descriptor is None:
            raise ServiceNotFoundError(name)
        return descriptor

    def has(self, name: str) -> bool:
        """Check if a service or alias is registered."""
        return name in self._descriptors or name in self._aliases

    def registered_names(self) -> List[str]:
        """Names of all registered services and aliases, in registration order."""
        return [*self._descriptors, *self._aliases]

    def get(self, name: str) -> Any:
        """Resolve a service instance by name."""
        canonical = self.resolve_alias(name)
        descriptor = self._get_descriptor(canonical)

        if descriptor.has_instance:
            return descriptor.instance

        with self._lock:
            if descriptor.lifetime == ServiceLifetime.SINGLETON and canonical in self._instances:
                return self._instances[canonical]

            instance = self._create_instance(descriptor)

            if descriptor.lifetime == ServiceLifetime.SINGLETON:
                self._instances[canonical] = instance
            return instance

    def create(self, name: str) -> Any:
        """Build a fresh instance of ``name`` regardless of its lifetime."""
        descriptor = self._get_descriptor(self.resolve_alias(name))
        if descriptor.has_instance:
            return descriptor.instance
        with self._lock:
            return self._create_instance(descriptor)

    def _create_instance(self, descriptor: ServiceDescriptor) -> Any:
        """Create a service instance, guarding against cycles."""
        name = descriptor.name
        if name in self._resolving:
            raise CircularDependencyError(name, self._resolving)

        self._resolving.append(name)
        try:
            if descriptor.factory is not None:
                instance = descriptor.factory(self)
            else:
                instance = descriptor.implementation_type()
        except RivetError:
            raise
        except Exception as e:
            logger.error(f"Failed to create service '{name}': {e} ({type(e).__name__})")
            raise ServiceNotCreatedError(
                f"Service '{name}' could not be created: {e}",
                service_name=name,
                cause=e,
            ) from e
        finally:
            self._resolving.pop()

        for initializer in self._initializers:
            initializer(instance, self)

        logger.debug(f"Created service '{name}' ({type(instance).__name__})")
        return instance
