"""Core module - Driver creation, session wiring and errors."""

from inspector_session.core.errors import InspectorError, UnknownElementError, UnsupportedMethodError
from inspector_session.core.driver_factory import create_driver

__all__ = [
    "create_driver",
    "InspectorError",
    "UnknownElementError",
    "UnsupportedMethodError",
]
