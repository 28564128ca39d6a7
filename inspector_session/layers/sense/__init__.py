"""Sense Layer - Element cache and session snapshots."""

from inspector_session.layers.sense.element_cache import CachedElement, ElementCache
from inspector_session.layers.sense.snapshot import SessionSnapshot, capture_snapshot

__all__ = ["CachedElement", "ElementCache", "SessionSnapshot", "capture_snapshot"]
