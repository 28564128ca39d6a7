"""Action Layer - Command execution against the remote session."""

from inspector_session.layers.action.method_handler import MethodHandler, CommandResult, ElementCollection
from inspector_session.layers.action.remote import Driver, RemoteElement, SeleniumDriver, SeleniumElement

__all__ = [
    "MethodHandler",
    "CommandResult",
    "ElementCollection",
    "Driver",
    "RemoteElement",
    "SeleniumDriver",
    "SeleniumElement",
]
