"""
Closed vocabulary of request-lifecycle failures.

Setting one of these on ``MvcEvent.error`` is how a listener tells the
orchestrator to stop the normal stage sequence and trigger
``dispatch.error`` instead.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Error kinds a listener may tag the lifecycle context with."""

    CONTROLLER_CANNOT_DISPATCH = "error-controller-cannot-dispatch"
    CONTROLLER_NOT_FOUND = "error-controller-not-found"
    CONTROLLER_INVALID = "error-controller-invalid"
    EXCEPTION = "error-exception"
    ROUTER_NO_MATCH = "error-router-no-match"

    @property
    def is_not_found(self) -> bool:
        """Kinds rendered as 404 rather than 500."""
        return self in NOT_FOUND_KINDS


NOT_FOUND_KINDS = frozenset({
    ErrorKind.CONTROLLER_CANNOT_DISPATCH,
    ErrorKind.CONTROLLER_NOT_FOUND,
    ErrorKind.CONTROLLER_INVALID,
    ErrorKind.ROUTER_NO_MATCH,
})
