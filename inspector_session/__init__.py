"""
Inspector Session - Remote automation session adapter for inspector UIs.

Finds elements, runs commands and re-captures source and screenshot
after each one, naming elements el1, el2, ... and collections
els1, els2, ... so a session reads like a script.
"""

__version__ = "0.1.0"

from inspector_session.layers.action.method_handler import (
    CommandResult,
    ElementCollection,
    MethodHandler,
)
from inspector_session.layers.sense.element_cache import CachedElement
from inspector_session.core.session import InspectorConfig, InspectorSession

__all__ = [
    "MethodHandler",
    "CachedElement",
    "ElementCollection",
    "CommandResult",
    "InspectorConfig",
    "InspectorSession",
    "__version__",
]
