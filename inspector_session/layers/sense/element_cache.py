"""
Element Cache - Remote element registry with readable variable names.

Every element the inspector finds is registered under the id the
driver assigned to it. Single elements receive a name (el1, el2, ...)
the first time a command runs against them; collections are named
(els1, els2, ...) as soon as they are fetched.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

SCALAR = "scalar"
COLLECTION_MEMBER = "collection-member"


@dataclass(frozen=True)
class CachedElement:
    """A remote element known to this session."""
    id: str
    handle: Any = field(compare=False, repr=False)
    strategy: str
    selector: str
    kind: str = SCALAR
    display_name: Optional[str] = None
    collection_name: Optional[str] = None
    collection_index: Optional[int] = None

    @property
    def is_scalar(self) -> bool:
        return self.kind == SCALAR

    @property
    def reference(self) -> Optional[str]:
        """Expression naming this element in a generated script."""
        if self.is_scalar:
            return self.display_name
        return f"{self.collection_name}[{self.collection_index}]"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (without the handle)."""
        data = {
            "id": self.id,
            "strategy": self.strategy,
            "selector": self.selector,
            "kind": self.kind,
            "display_name": self.display_name,
        }
        if not self.is_scalar:
            data["collection_name"] = self.collection_name
            data["collection_index"] = self.collection_index
        return data


class ElementCache:
    """
    Id-indexed arena of cached elements plus the two naming counters.

    Entries are immutable; naming produces a new record which replaces
    the old one under the same id. Nothing is ever evicted.

    Example:
        >>> cache = ElementCache()
        >>> entry = cache.add_scalar(handle, "id", "submit")
        >>> cache.assign_name_if_absent(entry.id).display_name
        'el1'
    """

    SCALAR_PREFIX = "el"
    COLLECTION_PREFIX = "els"

    def __init__(self):
        self._entries: Dict[str, CachedElement] = {}
        self.scalar_counter = 1
        self.collection_counter = 1

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CachedElement]:
        return iter(list(self._entries.values()))

    def get(self, element_id: str) -> Optional[CachedElement]:
        return self._entries.get(element_id)

    def find_by_reference(self, reference: str) -> Optional[CachedElement]:
        """
        Look up an element by the name it currently carries (el1, els2[0]).

        Entries whose name was cleared by a restart are skipped, and the
        most recently cached match wins.
        """
        for entry in reversed(list(self._entries.values())):
            if entry.display_name is not None and entry.reference == reference:
                return entry
        return None

    def add_scalar(self, handle: Any, strategy: str, selector: str) -> CachedElement:
        """Register a singly-fetched element. It stays unnamed until used."""
        entry = CachedElement(
            id=handle.value,
            handle=handle,
            strategy=strategy,
            selector=selector,
        )
        self._store(entry)
        return entry

    def add_collection(
        self,
        handles: List[Any],
        strategy: str,
        selector: str,
    ) -> Tuple[str, List[CachedElement]]:
        """
        Register the result of a multi-element lookup.

        The collection name is consumed even when `handles` is empty.

        Returns:
            (collection_name, list of member entries in driver order)
        """
        name = self._next_collection_name()
        members = []
        for index, handle in enumerate(handles):
            entry = CachedElement(
                id=handle.value,
                handle=handle,
                strategy=strategy,
                selector=selector,
                kind=COLLECTION_MEMBER,
                display_name=name,
                collection_name=name,
                collection_index=index,
            )
            self._store(entry)
            members.append(entry)
        return name, members

    def assign_name_if_absent(self, element_id: str) -> CachedElement:
        """
        Give a scalar entry its variable name if it has none yet.

        Collection members and already-named entries are returned as-is.

        Raises:
            KeyError: if the id is not cached
        """
        entry = self._entries[element_id]
        if entry.is_scalar and entry.display_name is None:
            entry = replace(entry, display_name=self._next_scalar_name())
            self._entries[element_id] = entry
        return entry

    def reset_names(self) -> None:
        """Clear every display name and restart both counters at 1."""
        for element_id, entry in self._entries.items():
            if entry.display_name is not None:
                self._entries[element_id] = replace(entry, display_name=None)
        self.scalar_counter = 1
        self.collection_counter = 1

    def _store(self, entry: CachedElement) -> None:
        # Reused ids replace the earlier record; see DESIGN.md
        if entry.id in self._entries:
            logger.debug(f"[ElementCache] Element id {entry.id} was already cached, replacing it")
        self._entries[entry.id] = entry

    def _next_scalar_name(self) -> str:
        name = f"{self.SCALAR_PREFIX}{self.scalar_counter}"
        self.scalar_counter += 1
        return name

    def _next_collection_name(self) -> str:
        name = f"{self.COLLECTION_PREFIX}{self.collection_counter}"
        self.collection_counter += 1
        return name
