"""
Shared test doubles for listener and lifecycle tests.
"""
from typing import List

from events.listener import AbstractListenerAggregate
from mvc.controller import ActionController


class RecordingListener(AbstractListenerAggregate):
    """Aggregate that records every event it sees into a shared list."""

    def __init__(self, calls: List[str], events: List[str], priority: int = 1, label: str = "") -> None:
        super().__init__()
        self.calls = calls
        self.event_names = events
        self.priority = priority
        self.label = label

    def attach(self, events) -> None:
        for name in self.event_names:
            self.listeners.append(events.attach(name, self.on_event, self.priority))

    def on_event(self, event) -> None:
        self.calls.append(f"{self.label}:{event.name}" if self.label else event.name)


class UsersController(ActionController):
    def show_action(self, event):
        return {"id": event.route_match.get_param("id"), "name": "Ada"}

    def index_action(self, event):
        return ["Ada", "Grace"]

    def boom_action(self, event):
        raise RuntimeError("controller exploded")


class HomeController:
    def dispatch(self, event):
        return "Welcome"
