"""
Rivet - Configuration

Centralized settings for the framework runtime plus the helpers used to
merge application and module configuration.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class RivetSettings:
    """Process-level settings read from the environment."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("RIVET_ENV", "development")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("RIVET_LOG_LEVEL", "INFO"))
    log_json: bool = field(default_factory=lambda: os.getenv("RIVET_LOG_FORMAT", "json").lower() == "json")

    # Tracing
    service_name: str = field(default_factory=lambda: os.getenv("OTEL_SERVICE_NAME", "rivet"))
    tracing_enabled: bool = field(
        default_factory=lambda: os.getenv("OTEL_TRACING_ENABLED", "false").lower() == "true"
    )

    # Default HTTP methods accepted by HttpMethodListener
    http_methods: List[str] = field(
        default_factory=lambda: os.getenv(
            "RIVET_HTTP_METHODS", "GET,POST,PUT,PATCH,DELETE,HEAD,OPTIONS"
        ).split(",")
    )


# Singleton settings instance
_settings: Optional[RivetSettings] = None


def get_settings() -> RivetSettings:
    """Get or create settings singleton."""
    global _settings
    if _settings is None:
        _settings = RivetSettings()
    return _settings


def reload_settings() -> RivetSettings:
    """Reload settings from environment."""
    global _settings
    load_dotenv(override=True)
    _settings = RivetSettings()
    return _settings


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration mappings.

    Nested mappings are merged key by key, lists are extended with the
    values they do not already contain, and any other value in ``override``
    replaces the one in ``base``. Neither argument is modified.
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        elif isinstance(current, list) and isinstance(value, (list, tuple)):
            merged[key] = current + [item for item in value if item not in current]
        else:
            merged[key] = value
    return merged


def unique_names(*sources: Optional[Iterable[str]]) -> List[str]:
    """
    Ordered union of name lists.

    Each name appears once, at the position of its first occurrence across
    the sources in the order given.
    """
    seen: Dict[str, None] = {}
    for source in sources:
        for name in source or ():
            seen.setdefault(name, None)
    return list(seen)
