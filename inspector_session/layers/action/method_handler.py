"""
Method Handler - Element lookup and command execution for the inspector.

Sits between the inspector client and the remote session. Found
elements are cached under their driver ids and given readable variable
names; every command is followed by a short settle delay and a fresh
source/screenshot snapshot so the client always renders current state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING
import logging
import time

from inspector_session.core.errors import UnknownElementError
from inspector_session.layers.sense.element_cache import CachedElement, ElementCache
from inspector_session.layers.sense.snapshot import SessionSnapshot, capture_snapshot

if TYPE_CHECKING:
    from inspector_session.layers.action.remote import Driver
    from inspector_session.reporters.command_recorder import CommandRecorder

logger = logging.getLogger(__name__)


@dataclass
class ElementCollection:
    """Result of a multi-element lookup."""
    variable_name: str
    strategy: str
    selector: str
    elements: List[CachedElement] = field(default_factory=list)
    variable_type: str = "array"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variable_name": self.variable_name,
            "variable_type": self.variable_type,
            "strategy": self.strategy,
            "selector": self.selector,
            "elements": [el.to_dict() for el in self.elements],
        }


@dataclass
class CommandResult:
    """Outcome of a command: raw result plus the session state after it."""
    method_name: str
    snapshot: SessionSnapshot
    result: Any = None
    element: Optional[CachedElement] = None

    @property
    def display_name(self) -> Optional[str]:
        return self.element.display_name if self.element else None

    def to_dict(self) -> Dict[str, Any]:
        data = self.snapshot.to_dict()
        if self.element:
            data.update(self.element.to_dict())
        data["method_name"] = self.method_name
        data["result"] = self.result
        return data


class MethodHandler:
    """
    Session-scoped adapter between an inspector client and a Driver.

    Not thread-safe: callers must let each call (snapshot included)
    finish before starting the next.

    Example:
        >>> handler = MethodHandler(SeleniumDriver(webdriver))
        >>> button = handler.fetch_element("id", "submit")
        >>> result = handler.execute_element_command(button.id, "click")
        >>> result.display_name
        'el1'
    """

    # Time for the UI to react before the snapshot is taken
    SETTLE_DELAY_MS = 500

    # Driver methods whose output is the snapshot itself
    SNAPSHOT_METHODS = ("source", "screenshot", "getPageSource", "takeScreenshot")

    def __init__(
        self,
        driver: "Driver",
        settle_delay_ms: int = SETTLE_DELAY_MS,
        recorder: Optional["CommandRecorder"] = None,
    ):
        """
        Initialize the method handler.

        Args:
            driver: Driver collaborator for the live session
            settle_delay_ms: Delay between a command and its snapshot
            recorder: Optional CommandRecorder that logs fetches and commands
        """
        self.driver = driver
        self.settle_delay_ms = settle_delay_ms
        self.recorder = recorder
        self.cache = ElementCache()

    def fetch_element(self, strategy: str, selector: str) -> Optional[CachedElement]:
        """
        Find a single element and cache it, unnamed.

        Returns:
            The cached entry, or None when nothing matches
        """
        handle = self.driver.element_or_null(strategy, selector)
        if handle is None:
            logger.info(f"[MethodHandler] No element found for {strategy}={selector!r}")
            return None

        entry = self.cache.add_scalar(handle, strategy, selector)
        logger.info(f"[MethodHandler] Cached element {entry.id} ({strategy}={selector!r})")
        if self.recorder:
            self.recorder.log_fetch(entry)
        return entry

    def fetch_elements(self, strategy: str, selector: str) -> ElementCollection:
        """Find all matching elements and cache them under a new collection name."""
        handles = self.driver.elements(strategy, selector)
        name, members = self.cache.add_collection(handles, strategy, selector)
        collection = ElementCollection(
            variable_name=name,
            strategy=strategy,
            selector=selector,
            elements=members,
        )
        logger.info(f"[MethodHandler] Cached {len(members)} elements as {name} ({strategy}={selector!r})")
        if self.recorder:
            self.recorder.log_collection(collection)
        return collection

    def execute_element_command(
        self,
        element_id: str,
        method_name: str,
        args: Sequence[Any] = (),
    ) -> CommandResult:
        """
        Run a method on a cached element, then snapshot the session.

        The element gets its variable name here if it has none yet.

        Raises:
            UnknownElementError: if no fetch produced `element_id`
        """
        if element_id not in self.cache:
            raise UnknownElementError(element_id)

        entry = self.cache.assign_name_if_absent(element_id)
        logger.info(f"[MethodHandler] {entry.reference}.{method_name}{tuple(args)}")

        try:
            result = entry.handle.invoke(method_name, list(args))
        except Exception as e:
            if self.recorder:
                self.recorder.log_error(f"{entry.reference}.{method_name} failed", e)
            raise

        if self.recorder:
            self.recorder.log_command(method_name, args, element=entry)
        snapshot = self._settle_and_snapshot()
        return CommandResult(
            method_name=method_name,
            snapshot=snapshot,
            result=result,
            element=entry,
        )

    def execute_method(self, method_name: str, args: Sequence[Any] = ()) -> CommandResult:
        """
        Run a session-level method, then snapshot the session.

        `source` and `screenshot` are not invoked separately since the
        snapshot already performs them.
        """
        result: Any = {}
        if method_name not in self.SNAPSHOT_METHODS:
            logger.info(f"[MethodHandler] driver.{method_name}{tuple(args)}")
            try:
                result = self.driver.invoke(method_name, list(args))
            except Exception as e:
                if self.recorder:
                    self.recorder.log_error(f"driver.{method_name} failed", e)
                raise
            if self.recorder:
                self.recorder.log_command(method_name, args)

        snapshot = self._settle_and_snapshot()
        return CommandResult(method_name=method_name, snapshot=snapshot, result=result)

    def restart(self) -> None:
        """Forget all variable names and start again from el1/els1."""
        self.cache.reset_names()
        if self.recorder:
            self.recorder.clear()
        logger.info(f"[MethodHandler] Variable names reset ({len(self.cache)} elements kept)")

    def _settle_and_snapshot(self) -> SessionSnapshot:
        time.sleep(self.settle_delay_ms / 1000)
        return capture_snapshot(self.driver)
