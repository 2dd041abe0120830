"""
Property-Based Tests for Listener Invariants

Tests invocation order, stop conditions and listener-name deduplication.
"""
import pytest
from hypothesis import given, settings, strategies as st

from config import unique_names
from events.manager import EventManager
from events.shared import SharedEventManager
from mvc import DEFAULT_LISTENERS, ErrorKind, MvcEvent, init
from tests.property.strategies import (
    EXTRA_LISTENERS,
    identifier_strategy,
    listener_names_strategy,
    priority_strategy,
)
from tests.support import RecordingListener


def _extra_listener_class(name):
    class Extra(RecordingListener):
        def __init__(self):
            super().__init__([], ["finish"], label=name)

    Extra.__name__ = name
    return Extra


EXTRA_INVOKABLES = {name: _extra_listener_class(name) for name in EXTRA_LISTENERS}


@pytest.mark.property
class TestInvocationOrder:
    """Property-based tests for listener ordering."""

    @given(st.lists(priority_strategy(), min_size=1, max_size=20))
    @settings(max_examples=200)
    def test_priority_descending_then_attach_order(self, priorities):
        """Invocation order is a stable sort on descending priority."""
        events = EventManager()
        calls = []
        for index, priority in enumerate(priorities):
            events.attach("route", lambda e, i=index: calls.append(i), priority=priority)

        events.trigger("route")

        expected = sorted(range(len(priorities)), key=lambda i: -priorities[i])
        assert calls == expected

    @given(
        st.lists(priority_strategy(), max_size=6),
        st.lists(st.tuples(identifier_strategy(), priority_strategy()), max_size=6),
    )
    @settings(max_examples=100)
    def test_local_listeners_precede_shared(self, local, shared_specs):
        """Every local listener runs before any shared listener."""
        shared = SharedEventManager()
        identifiers = unique_names([identifier for identifier, _ in shared_specs])
        events = EventManager(identifiers=identifiers, shared_manager=shared)
        calls = []

        for priority in local:
            events.attach("route", lambda e: calls.append("local"), priority=priority)
        for identifier, priority in shared_specs:
            shared.attach(identifier, "route", lambda e: calls.append("shared"), priority=priority)

        events.trigger("route")

        assert calls == ["local"] * len(local) + ["shared"] * len(shared_specs)

    @given(st.integers(min_value=1, max_value=10))
    @settings(max_examples=30)
    def test_listeners_added_mid_trigger_wait_for_next_trigger(self, count):
        events = EventManager()
        calls = []

        def attach_more(event):
            calls.append("original")
            events.attach("route", lambda e: calls.append("added"))

        for _ in range(count):
            events.attach("route", attach_more)

        events.trigger("route")

        assert calls == ["original"] * count


@pytest.mark.property
class TestStopConditions:
    """Property-based tests for propagation control."""

    @given(st.integers(min_value=1, max_value=15), st.data())
    @settings(max_examples=100)
    def test_stop_propagation_halts_after_stopper(self, count, data):
        stopper = data.draw(st.integers(min_value=0, max_value=count - 1))
        events = EventManager()
        calls = []

        for index in range(count):
            def listener(event, i=index):
                calls.append(i)
                if i == stopper:
                    event.stop_propagation()

            events.attach("route", listener)

        result = events.trigger("route")

        assert calls == list(range(stopper + 1))
        assert result.stopped is True

    @given(st.integers(min_value=1, max_value=15), st.data())
    @settings(max_examples=100)
    def test_error_tag_does_not_stop_the_event(self, count, data):
        """Tagging an error kind mid-event leaves later listeners running."""
        tagger = data.draw(st.integers(min_value=0, max_value=count - 1))
        events = EventManager(event_class=MvcEvent)
        calls = []

        for index in range(count):
            def listener(event, i=index):
                calls.append(i)
                if i == tagger:
                    event.error = ErrorKind.ROUTER_NO_MATCH

            events.attach("route", listener, priority=count - index)

        event = MvcEvent("route")
        result = events.trigger(event)

        assert calls == list(range(count))
        assert result.stopped is False
        assert event.error is ErrorKind.ROUTER_NO_MATCH


@pytest.mark.property
class TestListenerRegistry:
    """Property-based tests for the bootstrap listener union."""

    @given(listener_names_strategy(), listener_names_strategy())
    @settings(max_examples=25, deadline=None)
    def test_attached_listeners_are_first_occurrence_union(self, configured, argument):
        class ConfigModule:
            def get_config(self):
                return {"listeners": list(configured)}

        application = init({
            "modules": [ConfigModule],
            "service_manager": {"invokables": dict(EXTRA_INVOKABLES)},
            "listeners": list(argument),
        })

        names = [type(listener).__name__ for listener in application.listeners]
        assert names == unique_names(DEFAULT_LISTENERS, configured, argument)
        assert len(names) == len(set(names))

    @given(listener_names_strategy())
    @settings(max_examples=25, deadline=None)
    def test_each_default_attached_once(self, argument):
        application = init({
            "service_manager": {"invokables": dict(EXTRA_INVOKABLES)},
            "listeners": list(argument),
        })

        route_ids = [h.id for h in application.events.get_listeners(MvcEvent.EVENT_ROUTE)]
        assert route_ids.count("RouteListener.on_route") == 1
        assert route_ids.count("HttpMethodListener.on_route") == 1
