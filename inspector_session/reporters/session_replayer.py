"""
Session Replayer - Re-run a recorded inspector session.

Loads the command log written by the CommandRecorder and replays its
lookups and commands through a MethodHandler on a live session.
Element ids differ between sessions, so recorded ids are mapped to the
ids found by re-running the recorded locators.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING
from datetime import datetime
import logging

from inspector_session.core.errors import is_session_lost
from inspector_session.reporters.command_recorder import COMMAND_LOG_FILE, SCRIPT_FILE

if TYPE_CHECKING:
    from inspector_session.layers.action.method_handler import MethodHandler

logger = logging.getLogger(__name__)

REPLAYABLE_EVENTS = ("fetch", "collection", "command")


@dataclass
class ReplayStep:
    """A single step in a recorded session."""
    step_number: int
    timestamp: datetime
    event_type: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def method_name(self) -> Optional[str]:
        return self.data.get("method_name")

    @property
    def element(self) -> Optional[Dict[str, Any]]:
        return self.data.get("element")

    @property
    def target(self) -> str:
        """Variable the step acts on, for display."""
        if self.event_type == "collection":
            return self.data.get("variable_name", "")
        if self.event_type == "fetch":
            return f"{self.data.get('strategy')}={self.data.get('selector')}"
        element = self.element
        if element is None:
            return "driver"
        if element["kind"] == "scalar":
            return element.get("display_name") or element["id"]
        return f"{element['collection_name']}[{element['collection_index']}]"


@dataclass
class ReplaySession:
    """A recorded session loaded from disk."""
    run_id: str
    start_time: datetime
    end_time: Optional[datetime]
    steps: List[ReplayStep] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def total_commands(self) -> int:
        return len([s for s in self.steps if s.event_type == "command"])


class SessionReplayer:
    """
    Replay recorded inspector sessions.

    Example:
        >>> replayer = SessionReplayer("./inspector_reports/20251227_074249")
        >>> session = replayer.load()
        >>> results = replayer.replay(handler)
    """

    def __init__(self, run_dir: str):
        """
        Args:
            run_dir: Directory containing command_log.json
        """
        self.run_dir = run_dir
        self.command_log_path = os.path.join(run_dir, COMMAND_LOG_FILE)
        self.script_path = os.path.join(run_dir, SCRIPT_FILE)
        self.session: Optional[ReplaySession] = None

    def load(self) -> ReplaySession:
        """Load and parse the command log."""
        if not os.path.exists(self.command_log_path):
            raise FileNotFoundError(f"Command log not found: {self.command_log_path}")

        with open(self.command_log_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.session = self._parse_command_log(data)
        logger.info(f"[SessionReplayer] Loaded session with {len(self.session.steps)} steps")
        return self.session

    def read_script(self) -> str:
        """Return the script generated for the recorded run."""
        if not os.path.exists(self.script_path):
            raise FileNotFoundError(f"Script not found: {self.script_path}")
        with open(self.script_path, "r", encoding="utf-8") as f:
            return f.read()

    def _parse_command_log(self, data: Dict[str, Any]) -> ReplaySession:
        metadata = data.get("metadata", {})
        steps = []
        for entry in data.get("entries", []):
            try:
                timestamp = datetime.fromisoformat(entry.get("timestamp", ""))
            except ValueError:
                timestamp = datetime.now()
            steps.append(ReplayStep(
                step_number=entry.get("step", len(steps)),
                timestamp=timestamp,
                event_type=entry.get("event_type", "unknown"),
                message=entry.get("message", ""),
                data=entry.get("data") or {},
            ))

        start_time = _parse_time(metadata.get("start_time")) or (steps[0].timestamp if steps else datetime.now())
        end_time = _parse_time(metadata.get("end_time")) or (steps[-1].timestamp if steps else None)
        return ReplaySession(
            run_id=metadata.get("run_name") or os.path.basename(os.path.normpath(self.run_dir)),
            start_time=start_time,
            end_time=end_time,
            steps=steps,
        )

    def get_replayable_steps(self) -> List[ReplayStep]:
        if not self.session:
            self.load()
        return [s for s in self.session.steps if s.event_type in REPLAYABLE_EVENTS]

    def replay(
        self,
        handler: "MethodHandler",
        callback: Optional[Callable[[ReplayStep, bool], None]] = None,
    ) -> List[Tuple[ReplayStep, bool]]:
        """
        Re-execute the recorded lookups and commands.

        A failing step is reported and the replay continues; losing the
        session ends it.

        Returns:
            List of (step, success) tuples
        """
        id_map: Dict[str, str] = {}
        results = []

        for step in self.get_replayable_steps():
            logger.info(f"[SessionReplayer] Replaying {step.event_type}: {step.message}")
            try:
                success = self._replay_step(handler, step, id_map)
            except Exception as e:
                if is_session_lost(e):
                    raise
                logger.warning(f"[SessionReplayer] Step {step.step_number} failed: {e}")
                success = False

            results.append((step, success))
            if callback:
                callback(step, success)

        return results

    def _replay_step(self, handler: "MethodHandler", step: ReplayStep, id_map: Dict[str, str]) -> bool:
        data = step.data

        if step.event_type == "fetch":
            found = handler.fetch_element(data["strategy"], data["selector"])
            if found is None:
                return False
            id_map[data["id"]] = found.id
            return True

        if step.event_type == "collection":
            collection = handler.fetch_elements(data["strategy"], data["selector"])
            for old_id, member in zip(data.get("ids", []), collection.elements):
                id_map[old_id] = member.id
            return len(collection.elements) == len(data.get("ids", []))

        element = step.element
        if element is None:
            handler.execute_method(step.method_name, data.get("args", []))
            return True

        new_id = id_map.get(element["id"]) or self._relocate(handler, element, id_map)
        if new_id is None:
            logger.warning(f"[SessionReplayer] Could not locate {step.target} in this session")
            return False
        handler.execute_element_command(new_id, step.method_name, data.get("args", []))
        return True

    @staticmethod
    def _relocate(handler: "MethodHandler", element: Dict[str, Any], id_map: Dict[str, str]) -> Optional[str]:
        """Find an element whose lookup happened before the log was cleared."""
        if element["kind"] == "scalar":
            found = handler.fetch_element(element["strategy"], element["selector"])
            new_id = found.id if found else None
        else:
            members = handler.fetch_elements(element["strategy"], element["selector"]).elements
            index = element["collection_index"]
            new_id = members[index].id if index < len(members) else None

        if new_id is not None:
            id_map[element["id"]] = new_id
        return new_id


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
