"""
Tests for di/container.py and di/config.py - Service Manager.

Covers:
- instance, invokable, factory and alias registrations
- shared and non-shared lifetimes
- initializers
- duplicate, missing and circular service errors
- configuration from a service_manager mapping
"""
import pytest

from core.errors import (
    CircularDependencyError,
    DuplicateServiceError,
    RivetConfigError,
    ServiceNotCreatedError,
    ServiceNotFoundError,
)
from di import ServiceLifetime, ServiceManager, ServiceManagerConfig, import_string


class Widget:
    def __init__(self):
        self.initialized_by = None


class TestRegistration:
    """Tests for registering and resolving services."""

    def test_set_service_returns_same_instance(self, services):
        config = {"debug": True}
        services.set_service("Config", config)

        assert services.get("Config") is config
        assert services.has("Config")

    def test_invokable_is_shared_by_default(self, services):
        services.set_invokable_class("Widget", Widget)

        assert services.get("Widget") is services.get("Widget")

    def test_non_shared_invokable(self, services):
        services.set_invokable_class("Widget", Widget, shared=False)

        assert services.get("Widget") is not services.get("Widget")

    def test_factory_receives_container(self, services):
        services.set_service("Name", "rivet")
        services.set_factory("Greeting", lambda sm: f"hello {sm.get('Name')}")

        assert services.get("Greeting") == "hello rivet"

    def test_create_bypasses_sharing(self, services):
        services.set_invokable_class("Widget", Widget)
        shared = services.get("Widget")

        assert services.create("Widget") is not shared
        assert services.get("Widget") is shared

    def test_set_shared_changes_lifetime(self, services):
        services.set_invokable_class("Widget", Widget)
        services.set_shared("Widget", False)

        assert services.get("Widget") is not services.get("Widget")

    def test_alias(self, services):
        services.set_invokable_class("Widget", Widget)
        services.set_alias("Gadget", "Widget")

        assert services.get("Gadget") is services.get("Widget")
        assert services.resolve_alias("Gadget") == "Widget"

    def test_registered_names(self, services):
        services.set_service("A", 1)
        services.set_factory("B", lambda sm: 2)
        services.set_alias("C", "A")

        assert services.registered_names() == ["A", "B", "C"]

    def test_initializers_run_on_created_instances(self, services):
        def initializer(instance, sm):
            if isinstance(instance, Widget):
                instance.initialized_by = sm

        services.add_initializer(initializer)
        services.set_invokable_class("Widget", Widget)

        assert services.get("Widget").initialized_by is services


class TestErrors:
    """Tests for container errors."""

    def test_unknown_service(self, services):
        with pytest.raises(ServiceNotFoundError) as exc_info:
            services.get("Missing")

        assert exc_info.value.service_name == "Missing"
        assert isinstance(exc_info.value, LookupError)

    def test_duplicate_registration(self, services):
        services.set_service("Config", {})

        with pytest.raises(DuplicateServiceError):
            services.set_service("Config", {})

    def test_override_allowed(self):
        services = ServiceManager(allow_override=True)
        services.set_service("Config", {"a": 1})
        services.set_service("Config", {"a": 2})

        assert services.get("Config") == {"a": 2}

    def test_circular_dependency(self, services):
        services.set_factory("A", lambda sm: sm.get("B"))
        services.set_factory("B", lambda sm: sm.get("A"))

        with pytest.raises(CircularDependencyError) as exc_info:
            services.get("A")

        assert exc_info.value.chain[:2] == ["A", "B"]

    def test_circular_alias(self, services):
        services.set_alias("A", "B")
        services.set_alias("B", "A")

        with pytest.raises(CircularDependencyError):
            services.get("A")

    def test_failing_factory_wrapped(self, services):
        def factory(sm):
            raise ValueError("bad wiring")

        services.set_factory("Broken", factory)

        with pytest.raises(ServiceNotCreatedError) as exc_info:
            services.get("Broken")

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_resolution_state_cleared_after_failure(self, services):
        attempts = []

        def flaky(sm):
            attempts.append(1)
            if len(attempts) == 1:
                raise ValueError("first time")
            return "ok"

        services.set_factory("Flaky", flaky)
        with pytest.raises(ServiceNotCreatedError):
            services.get("Flaky")

        assert services.get("Flaky") == "ok"


class TestServiceManagerConfig:
    """Tests for configuring a container from a mapping."""

    def test_configure_all_keys(self):
        config = ServiceManagerConfig({
            "services": {"Config": {"x": 1}},
            "invokables": {"Widget": Widget},
            "factories": {"Double": lambda sm: sm.get("Config")["x"] * 2},
            "aliases": {"Gadget": "Widget"},
            "shared": {"Widget": False},
        })
        services = ServiceManager(config)

        assert services.get("Double") == 2
        assert services.get("Gadget") is not services.get("Widget")

    def test_dotted_paths_are_imported(self):
        services = ServiceManager(ServiceManagerConfig({
            "invokables": {
                "Shared": "events.shared:SharedEventManager",
                "Settings": "config.RivetSettings",
            },
        }))

        assert type(services.get("Shared")).__name__ == "SharedEventManager"
        assert services.get("Settings").service_name

    def test_unknown_key_rejected(self):
        with pytest.raises(RivetConfigError):
            ServiceManagerConfig({"invokable": {}})

    def test_import_string_failure(self):
        with pytest.raises(RivetConfigError):
            import_string("events.shared:DoesNotExist")

        with pytest.raises(RivetConfigError):
            import_string("nodots")

    def test_lifetime_enum(self):
        assert ServiceLifetime.SINGLETON.value == "singleton"
        assert ServiceLifetime.TRANSIENT.value == "transient"
