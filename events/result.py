"""
Collected listener responses of a single trigger call.
"""
from __future__ import annotations

from typing import Any, Optional


class TriggerResult(list):
    """
    Listener return values in invocation order.

    ``stopped`` is True when a listener halted propagation, either through
    ``Event.stop_propagation()`` or by satisfying the trigger's ``until``
    predicate; ``stopped_by`` then names that listener.
    """

    def __init__(self) -> None:
        super().__init__()
        self.stopped: bool = False
        self.stopped_by: Optional[str] = None

    def first(self) -> Any:
        return self[0] if self else None

    def last(self) -> Any:
        return self[-1] if self else None

    def contains(self, value: Any) -> bool:
        return value in self

    def __repr__(self) -> str:
        return f"TriggerResult({list.__repr__(self)}, stopped={self.stopped}, stopped_by={self.stopped_by!r})"
