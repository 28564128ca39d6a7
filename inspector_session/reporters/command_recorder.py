"""
Command Recorder - Command logging and script generation.

Captures every lookup and command the inspector performs, using the
same variable names the client shows, and turns them into a readable
Python script for the Appium/Selenium client.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
from datetime import datetime
import json
import logging
import os

from inspector_session.layers.action.remote import SeleniumDriver, SeleniumElement

if TYPE_CHECKING:
    from inspector_session.layers.action.method_handler import ElementCollection
    from inspector_session.layers.sense.element_cache import CachedElement

logger = logging.getLogger(__name__)

COMMAND_LOG_FILE = "command_log.json"
SCRIPT_FILE = "script.py"

# Read as attributes rather than called in generated code
ELEMENT_PROPERTIES = {
    "text": "text",
    "tag_name": "tag_name",
    "location": "location",
    "size": "size",
    "rect": "rect",
    "screenshot": "screenshot_as_base64",
}
DRIVER_PROPERTIES = {
    "title": "title",
    "current_url": "current_url",
    "source": "page_source",
    "contexts": "contexts",
    "orientation": "orientation",
}


@dataclass
class LogEntry:
    """A single entry in the command log."""
    timestamp: datetime
    step: int
    event_type: str  # 'fetch', 'collection', 'command', 'error', 'info'
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "step": self.step,
            "event_type": self.event_type,
            "message": self.message,
            "data": self.data,
        }


class CommandRecorder:
    """
    Records what the inspector did, in terms of variable names.

    Example:
        >>> recorder = CommandRecorder()
        >>> handler = MethodHandler(driver, recorder=recorder)
        >>> el = handler.fetch_element("accessibility id", "Login")
        >>> handler.execute_element_command(el.id, "click")
        >>> print(recorder.generate_script())
        el1 = driver.find_element(by='accessibility id', value='Login')
        el1.click()
    """

    def __init__(
        self,
        output_dir: str = "./inspector_reports",
        run_name: Optional[str] = None,
    ):
        """
        Initialize the command recorder.

        Args:
            output_dir: Directory that receives one sub-directory per run
            run_name: Optional name for this run
        """
        self.output_dir = output_dir
        self.run_name = run_name or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.entries: List[LogEntry] = []
        self.metadata: Dict[str, Any] = {
            "start_time": datetime.now().isoformat(),
            "run_name": self.run_name,
        }

    def log_fetch(self, element: "CachedElement") -> None:
        """Log a single-element lookup."""
        self._append(
            "fetch",
            f"Found {element.id} by {element.strategy}={element.selector!r}",
            element.to_dict(),
        )

    def log_collection(self, collection: "ElementCollection") -> None:
        """Log a multi-element lookup."""
        self._append(
            "collection",
            f"Found {len(collection.elements)} elements as {collection.variable_name}",
            {
                "variable_name": collection.variable_name,
                "strategy": collection.strategy,
                "selector": collection.selector,
                "ids": [el.id for el in collection.elements],
            },
        )

    def log_command(
        self,
        method_name: str,
        args: Sequence[Any] = (),
        element: Optional["CachedElement"] = None,
    ) -> None:
        """Log a successful element or driver command."""
        target = element.reference if element else "driver"
        self._append(
            "command",
            f"{target}.{method_name}",
            {
                "method_name": method_name,
                "args": list(args),
                "element": element.to_dict() if element else None,
            },
        )

    def log_info(self, message: str) -> None:
        self._append("info", message)

    def log_error(self, message: str, exception: Optional[BaseException] = None) -> None:
        self._append("error", message, {"exception": str(exception) if exception else None})

    def clear(self) -> None:
        """Drop everything recorded so far."""
        self.entries = []
        self.metadata["cleared_at"] = datetime.now().isoformat()

    def generate_script(self) -> str:
        """
        Render the recorded commands as Python client code.

        Single elements are declared just before their first command;
        collections are declared where they were fetched. A name that a
        later lookup rebound is declared again before a command that
        still refers to its earlier lookup.
        """
        lines: List[str] = []
        # variable name -> (finder, strategy, selector) it currently holds
        bindings: Dict[str, Tuple[str, str, str]] = {}

        for entry in self.entries:
            if entry.event_type == "collection":
                name = entry.data["variable_name"]
                locator = ("find_elements", entry.data["strategy"], entry.data["selector"])
                lines.append(self._render_declaration(name, locator))
                bindings[name] = locator
            elif entry.event_type == "command":
                element = entry.data.get("element")
                if element:
                    name = self._variable_name(element)
                    finder = "find_element" if element["kind"] == "scalar" else "find_elements"
                    locator = (finder, element["strategy"], element["selector"])
                    if bindings.get(name) != locator:
                        lines.append(self._render_declaration(name, locator))
                        bindings[name] = locator
                lines.append(self._render_command(entry.data))

        return "\n".join(lines) + ("\n" if lines else "")

    def save(self, output_dir: Optional[str] = None) -> str:
        """
        Write the command log and generated script.

        Returns:
            Path to the run directory
        """
        run_dir = os.path.join(output_dir or self.output_dir, self.run_name)
        os.makedirs(run_dir, exist_ok=True)
        self.metadata["end_time"] = datetime.now().isoformat()

        with open(os.path.join(run_dir, COMMAND_LOG_FILE), "w", encoding="utf-8") as f:
            json.dump({
                "metadata": self.metadata,
                "entries": [e.to_dict() for e in self.entries],
            }, f, indent=2, default=str)

        with open(os.path.join(run_dir, SCRIPT_FILE), "w", encoding="utf-8") as f:
            f.write(self.generate_script())

        logger.info(f"[CommandRecorder] Saved {len(self.entries)} entries to {run_dir}")
        return run_dir

    def _append(self, event_type: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.entries.append(LogEntry(
            timestamp=datetime.now(),
            step=len(self.entries),
            event_type=event_type,
            message=message,
            data=data or {},
        ))

    @staticmethod
    def _render_declaration(name: str, locator: Tuple[str, str, str]) -> str:
        finder, strategy, selector = locator
        return f"{name} = driver.{finder}(by={strategy!r}, value={selector!r})"

    @staticmethod
    def _variable_name(element: Dict[str, Any]) -> str:
        if element["kind"] == "scalar":
            return element["display_name"]
        # Members keep their collection after a restart clears display names
        return element["collection_name"]

    @classmethod
    def _render_command(cls, data: Dict[str, Any]) -> str:
        args = ", ".join(repr(a) for a in data.get("args", []))
        element = data.get("element")

        if element:
            method = SeleniumElement.ALIASES.get(data["method_name"], data["method_name"])
            target = cls._variable_name(element)
            if element["kind"] != "scalar":
                target = f"{target}[{element['collection_index']}]"
            if method in ELEMENT_PROPERTIES:
                return f"{target}.{ELEMENT_PROPERTIES[method]}"
            return f"{target}.{method}({args})"

        method = SeleniumDriver.ALIASES.get(data["method_name"], data["method_name"])
        if method in DRIVER_PROPERTIES:
            return f"driver.{DRIVER_PROPERTIES[method]}"
        if method == "screenshot":
            return "driver.get_screenshot_as_base64()"
        if method == "switch_context":
            return f"driver.switch_to.context({args})"
        if method == "set_orientation":
            return f"driver.orientation = {args}"
        return f"driver.{method}({args})"
