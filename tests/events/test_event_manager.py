"""
Tests for events/manager.py - Event Manager.

Covers:
- attach/detach and listener aggregates
- priority and attach-order invocation
- shared listeners per identifier and the wildcard event
- stop conditions (stop_propagation and until predicates)
- snapshot semantics for listeners attached mid-trigger
"""
import pytest

from core.errors import InvalidListenerError
from events import (
    AbstractListenerAggregate,
    Event,
    EventManager,
    ListenerAggregate,
    TriggerResult,
)


class TestAttach:
    """Tests for attaching and detaching listeners."""

    def test_attach_returns_handle(self, event_manager):
        """attach() returns a handle that identifies the callback."""

        def on_route(event):
            return None

        handle = event_manager.attach("route", on_route, priority=5)

        assert handle.event == "route"
        assert handle.priority == 5
        assert handle.id == "TestAttach.test_attach_returns_handle.<locals>.on_route"
        assert event_manager.get_listeners("route") == [handle]

    def test_attach_to_list_of_events(self, event_manager):
        """A list of names attaches the callback to each of them."""
        handles = event_manager.attach(["route", "dispatch"], lambda e: None)

        assert [h.event for h in handles] == ["route", "dispatch"]
        assert sorted(event_manager.get_events()) == ["dispatch", "route"]

    def test_non_callable_rejected(self, event_manager):
        """Only callables can be attached."""
        with pytest.raises(InvalidListenerError):
            event_manager.attach("route", "not callable")

    def test_same_callback_attached_twice_fires_twice(self, event_manager, calls):
        """Duplicate registration is allowed at the bus level."""

        def listener(event):
            calls.append("x")

        event_manager.attach("route", listener)
        event_manager.attach("route", listener)
        event_manager.trigger("route")

        assert calls == ["x", "x"]

    def test_detach(self, event_manager, calls):
        """A detached listener no longer fires."""
        handle = event_manager.attach("route", lambda e: calls.append("a"))

        assert event_manager.detach(handle) is True
        assert event_manager.detach(handle) is False
        event_manager.trigger("route")

        assert calls == []
        assert "route" not in event_manager.get_events()

    def test_clear_listeners(self, event_manager, calls):
        event_manager.attach("route", lambda e: calls.append("a"))
        event_manager.clear_listeners("route")
        event_manager.trigger("route")

        assert calls == []


class TestAggregates:
    """Tests for listener aggregates."""

    class Aggregate(AbstractListenerAggregate):
        def __init__(self, calls):
            super().__init__()
            self.calls = calls

        def attach(self, events):
            self.listeners.append(events.attach("route", self.on_route, 10))
            self.listeners.append(events.attach("finish", self.on_finish))

        def on_route(self, event):
            self.calls.append("route")

        def on_finish(self, event):
            self.calls.append("finish")

    def test_attach_aggregate_calls_attach(self, event_manager, calls):
        aggregate = self.Aggregate(calls)
        event_manager.attach_aggregate(aggregate)
        event_manager.trigger("route")
        event_manager.trigger("finish")

        assert isinstance(aggregate, ListenerAggregate)
        assert calls == ["route", "finish"]
        assert len(aggregate.listeners) == 2

    def test_detach_aggregate_removes_only_its_handles(self, event_manager, calls):
        aggregate = self.Aggregate(calls)
        event_manager.attach("route", lambda e: calls.append("other"))
        event_manager.attach_aggregate(aggregate)
        event_manager.detach_aggregate(aggregate)
        event_manager.trigger("route")

        assert calls == ["other"]
        assert aggregate.listeners == []

    def test_object_without_attach_rejected(self, event_manager):
        with pytest.raises(InvalidListenerError):
            event_manager.attach_aggregate(object())

    def test_non_callable_attach_rejected(self, event_manager):
        class NotCallable:
            attach = "route"

        with pytest.raises(InvalidListenerError):
            event_manager.attach_aggregate(NotCallable())

    def test_attach_only_aggregate(self, event_manager, calls):
        class AttachOnly:
            def attach(self, events):
                events.attach("route", lambda e: calls.append("route"))

        aggregate = AttachOnly()
        event_manager.attach_aggregate(aggregate)
        event_manager.detach_aggregate(aggregate)
        event_manager.trigger("route")

        assert isinstance(aggregate, ListenerAggregate)
        assert calls == ["route"]


class TestTriggerOrder:
    """Tests for invocation order."""

    def test_priority_descending(self, event_manager, calls):
        """Higher priority runs first; equal priorities keep attach order."""
        event_manager.attach("route", lambda e: calls.append("p1"), priority=1)
        event_manager.attach("route", lambda e: calls.append("p10"), priority=10)
        event_manager.attach("route", lambda e: calls.append("p5a"), priority=5)
        event_manager.attach("route", lambda e: calls.append("p5b"), priority=5)

        event_manager.trigger("route")

        assert calls == ["p10", "p5a", "p5b", "p1"]

    def test_negative_priorities(self, event_manager, calls):
        event_manager.attach("finish", lambda e: calls.append("late"), priority=-10000)
        event_manager.attach("finish", lambda e: calls.append("default"))

        event_manager.trigger("finish")

        assert calls == ["default", "late"]

    def test_wildcard_listener_sorted_with_local(self, event_manager, calls):
        """'*' listeners are merged with the event's own listeners by priority."""
        event_manager.attach("*", lambda e: calls.append(f"any:{e.name}"), priority=100)
        event_manager.attach("route", lambda e: calls.append("route"), priority=1)

        event_manager.trigger("route")
        event_manager.trigger("dispatch")

        assert calls == ["any:route", "route", "any:dispatch"]

    def test_shared_listeners_run_after_local(self, event_manager, shared_manager, calls):
        """Shared listeners follow local ones regardless of priority."""
        shared_manager.attach("Application", "route", lambda e: calls.append("shared"), priority=1000)
        event_manager.attach("route", lambda e: calls.append("local"), priority=-5)

        event_manager.trigger("route")

        assert calls == ["local", "shared"]

    def test_shared_listeners_follow_identifier_order(self, shared_manager, calls):
        events = EventManager(identifiers=["Second", "First"], shared_manager=shared_manager)
        shared_manager.attach("First", "route", lambda e: calls.append("first"), priority=50)
        shared_manager.attach("Second", "route", lambda e: calls.append("second"), priority=1)

        events.trigger("route")

        assert calls == ["second", "first"]

    def test_shared_listeners_for_other_identifiers_ignored(self, event_manager, shared_manager, calls):
        shared_manager.attach("ModuleManager", "route", lambda e: calls.append("module"))

        event_manager.trigger("route")

        assert calls == []

    def test_listener_attached_during_trigger_runs_next_time(self, event_manager, calls):
        """The listener list is snapshotted when a trigger starts."""

        def late(event):
            calls.append("late")

        def attacher(event):
            calls.append("attacher")
            event_manager.attach("route", late, priority=-1)

        event_manager.attach("route", attacher, priority=10)

        event_manager.trigger("route")
        assert calls == ["attacher"]

        calls.clear()
        event_manager.trigger("route")
        assert calls == ["attacher", "late"]


class TestTriggerResult:
    """Tests for responses and stop conditions."""

    def test_responses_collected_in_order(self, event_manager):
        event_manager.attach("render", lambda e: "b", priority=1)
        event_manager.attach("render", lambda e: "a", priority=2)

        result = event_manager.trigger("render")

        assert isinstance(result, TriggerResult)
        assert list(result) == ["a", "b"]
        assert result.first() == "a"
        assert result.last() == "b"
        assert result.contains("b")
        assert result.stopped is False
        assert result.stopped_by is None

    def test_empty_result(self, event_manager):
        result = event_manager.trigger("nothing")

        assert result.first() is None
        assert result.last() is None

    def test_stop_propagation(self, event_manager, calls):
        def stopper(event):
            calls.append("stopper")
            event.stop_propagation()
            return "stopped here"

        event_manager.attach("route", stopper, priority=10, listener_id="stopper")
        event_manager.attach("route", lambda e: calls.append("after"))

        result = event_manager.trigger("route")

        assert calls == ["stopper"]
        assert result.stopped is True
        assert result.stopped_by == "stopper"
        assert result.last() == "stopped here"

    def test_until_predicate(self, event_manager, calls):
        event_manager.attach("resolve", lambda e: calls.append("none"), priority=3)
        event_manager.attach("resolve", lambda e: "found", priority=2)
        event_manager.attach("resolve", lambda e: calls.append("never"), priority=1)

        result = event_manager.trigger_until("resolve", lambda r: r is not None)

        assert result.stopped is True
        assert result.last() == "found"
        assert calls == ["none"]

    def test_stop_flag_reset_between_triggers(self, event_manager, calls):
        event = Event("route")
        event.stop_propagation()
        event_manager.attach("route", lambda e: calls.append("ran"))

        result = event_manager.trigger(event)

        assert calls == ["ran"]
        assert result.stopped is False

    def test_listener_exception_propagates(self, event_manager, calls):
        def explode(event):
            raise KeyError("boom")

        event_manager.attach("route", explode, priority=10)
        event_manager.attach("route", lambda e: calls.append("after"))

        with pytest.raises(KeyError):
            event_manager.trigger("route")
        assert calls == []


class TestEventObjects:
    """Tests for event preparation."""

    def test_event_instance_is_passed_through(self, event_manager):
        seen = []
        event = Event("dispatch", target="app", params={"a": 1})
        event_manager.attach("dispatch", seen.append)

        event_manager.trigger(event, params={"b": 2})

        assert seen == [event]
        assert event.params == {"a": 1, "b": 2}
        assert event.target == "app"

    def test_name_creates_event_of_configured_class(self, shared_manager):
        class CustomEvent(Event):
            pass

        seen = []
        events = EventManager(event_class=CustomEvent)
        events.attach("route", seen.append)
        events.trigger("route", target="t", params={"k": "v"})

        assert isinstance(seen[0], CustomEvent)
        assert seen[0].target == "t"
        assert seen[0].get_param("k") == "v"

    def test_event_without_name_rejected(self, event_manager):
        with pytest.raises(ValueError):
            event_manager.trigger(Event())


class TestIdentifiers:
    def test_identifiers_deduplicated(self):
        events = EventManager(identifiers=["Application", "Application", "Custom"])
        events.add_identifiers("Custom")
        events.add_identifiers(["Extra"])

        assert events.identifiers == ["Application", "Custom", "Extra"]

    def test_set_identifiers_replaces(self):
        events = EventManager(identifiers=["A"])
        events.set_identifiers(["B"])

        assert events.identifiers == ["B"]
