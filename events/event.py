"""
Base event object passed by reference to every listener of a trigger.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class Event:
    """
    Named event with a target and a parameter bag.

    Listeners may call ``stop_propagation()`` to halt the remaining
    listeners of the current trigger.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        target: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.name = name
        self.target = target
        self.params: Dict[str, Any] = dict(params or {})
        self._stop_propagation = False

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def set_param(self, name: str, value: Any) -> "Event":
        self.params[name] = value
        return self

    def stop_propagation(self, flag: bool = True) -> None:
        """Ask the event manager to skip the remaining listeners."""
        self._stop_propagation = flag

    def propagation_is_stopped(self) -> bool:
        return self._stop_propagation

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, target={type(self.target).__name__})"
