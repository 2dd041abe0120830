"""
Rivet - Core Module

Foundational pieces shared by every other package: the error hierarchy
used for wiring failures and the structured error context attached to it.

Usage:
    from core import RivetError, ServiceNotFoundError

    try:
        services.get("Router")
    except ServiceNotFoundError as e:
        logger.error(e.to_dict())
"""

from core.errors import (
    CircularDependencyError,
    DuplicateServiceError,
    ErrorContext,
    ErrorSeverity,
    InvalidListenerError,
    LifecycleContextError,
    ModuleLoadError,
    RivetConfigError,
    RivetError,
    ServiceError,
    ServiceNotCreatedError,
    ServiceNotFoundError,
)

__all__ = [
    "CircularDependencyError",
    "DuplicateServiceError",
    "ErrorContext",
    "ErrorSeverity",
    "InvalidListenerError",
    "LifecycleContextError",
    "ModuleLoadError",
    "RivetConfigError",
    "RivetError",
    "ServiceError",
    "ServiceNotCreatedError",
    "ServiceNotFoundError",
]
