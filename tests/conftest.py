"""
Rivet - Test Configuration

Pytest fixtures and configuration for all tests.
"""
from typing import Any, Dict, List

import pytest

from di.container import ServiceManager
from events.manager import EventManager
from events.shared import SharedEventManager
from mvc.application import init
from mvc.http import Request
from tests.support import HomeController, UsersController


@pytest.fixture
def shared_manager() -> SharedEventManager:
    return SharedEventManager()


@pytest.fixture
def event_manager(shared_manager) -> EventManager:
    return EventManager(identifiers=["Application"], shared_manager=shared_manager)


@pytest.fixture
def services() -> ServiceManager:
    return ServiceManager()


@pytest.fixture
def calls() -> List[str]:
    """Collects listener invocations in order."""
    return []


@pytest.fixture
def app_config() -> Dict[str, Any]:
    """Route and controller configuration for the sample application."""
    return {
        "router": {
            "routes": {
                "home": {"route": "/", "defaults": {"controller": "Home"}},
                "users": {"route": "/users", "defaults": {"controller": "Users", "action": "index"}},
                "user": {
                    "route": "/users/:id",
                    "defaults": {"controller": "Users", "action": "show"},
                    "methods": ["GET"],
                },
                "boom": {"route": "/boom", "defaults": {"controller": "Users", "action": "boom"}},
                "missing": {"route": "/missing", "defaults": {"controller": "Nope"}},
                "orphan": {"route": "/orphan"},
            }
        },
        "controllers": {
            "invokables": {
                "Home": HomeController,
                "Users": UsersController,
            }
        },
        "view_manager": {
            "display_exceptions": True,
            "display_not_found_reason": True,
        },
    }


@pytest.fixture
def make_app(app_config):
    """Factory building a bootstrapped application for a request."""

    def _make(method: str = "GET", path: str = "/", **configuration: Any):
        overrides = configuration.pop("config_overrides", {})
        configuration.setdefault("service_manager", {}).setdefault("services", {})
        configuration["service_manager"]["services"]["Request"] = Request(method, path)
        configuration["module_listener_options"] = {
            "config_overrides": {**app_config, **overrides},
        }
        return init(configuration)

    return _make


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
    config.addinivalue_line("markers", "integration: marks tests that run the full request lifecycle")
