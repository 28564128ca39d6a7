"""
Inspector Errors - Failures surfaced to the inspector client.

Driver failures are not wrapped: invocation errors and session loss
propagate as whatever exception the underlying client raised.
"""

from typing import Any

from selenium.common.exceptions import InvalidSessionIdException

# JSON Wire Protocol status for "session not found"
SESSION_NOT_FOUND_STATUS = 6


class InspectorError(Exception):
    """Base class for errors raised by the inspector itself."""


class UnknownElementError(InspectorError, KeyError):
    """An element id was referenced that no fetch in this session produced."""

    def __init__(self, element_id: str):
        super().__init__(element_id)
        self.element_id = element_id

    def __str__(self) -> str:
        return f"Element '{self.element_id}' is not in the element cache"


class UnsupportedMethodError(InspectorError, AttributeError):
    """A method name is not in the adapter's method table."""

    def __init__(self, method_name: str, target: str = "driver"):
        super().__init__(method_name)
        self.method_name = method_name
        self.target = target

    def __str__(self) -> str:
        return f"Method '{self.method_name}' is not supported on {self.target}"


def is_session_lost(error: BaseException) -> bool:
    """Check whether an error means the remote session is gone."""
    if isinstance(error, InvalidSessionIdException):
        return True
    status: Any = getattr(error, "status", None)
    return status == SESSION_NOT_FOUND_STATUS
