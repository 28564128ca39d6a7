"""
Inspector Session - Wires a remote driver to the method handler.

Owns the lifetime of one remote automation session together with the
MethodHandler and CommandRecorder that serve it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import json
import logging
import os

from inspector_session.core.driver_factory import create_driver, WebDriverType
from inspector_session.layers.action.method_handler import MethodHandler
from inspector_session.layers.action.remote import SeleniumDriver
from inspector_session.reporters.command_recorder import CommandRecorder

logger = logging.getLogger(__name__)


@dataclass
class InspectorConfig:
    """Configuration for an inspector session."""
    server_url: str = "http://127.0.0.1:4723"
    capabilities: Dict[str, Any] = field(default_factory=dict)
    automation: str = "appium"  # appium, selenium
    headless: bool = False
    settle_delay_ms: int = MethodHandler.SETTLE_DELAY_MS
    report_dir: str = "./inspector_reports"

    @classmethod
    def from_env(cls, **overrides: Any) -> "InspectorConfig":
        """
        Build a config from INSPECTOR_* environment variables.

        Keyword arguments that are not None take precedence.
        """
        values: Dict[str, Any] = {}
        if os.environ.get("INSPECTOR_SERVER_URL"):
            values["server_url"] = os.environ["INSPECTOR_SERVER_URL"]
        if os.environ.get("INSPECTOR_AUTOMATION"):
            values["automation"] = os.environ["INSPECTOR_AUTOMATION"].lower()
        if os.environ.get("INSPECTOR_REPORT_DIR"):
            values["report_dir"] = os.environ["INSPECTOR_REPORT_DIR"]
        if os.environ.get("INSPECTOR_SETTLE_DELAY_MS"):
            values["settle_delay_ms"] = int(os.environ["INSPECTOR_SETTLE_DELAY_MS"])
        if os.environ.get("INSPECTOR_CAPABILITIES"):
            values["capabilities"] = json.loads(os.environ["INSPECTOR_CAPABILITIES"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class InspectorSession:
    """
    One inspector session: remote driver, method handler and recorder.

    The remote session is only opened when first needed.

    Example:
        >>> with InspectorSession(InspectorConfig(capabilities=caps)) as session:
        ...     el = session.handler.fetch_element("accessibility id", "Login")
        ...     session.handler.execute_element_command(el.id, "click")
        ...     session.save()
    """

    def __init__(self, config: Optional[InspectorConfig] = None):
        self.config = config or InspectorConfig()
        self._webdriver: Optional[WebDriverType] = None
        self._handler: Optional[MethodHandler] = None
        self.recorder = CommandRecorder(output_dir=self.config.report_dir)
        self.recorder.metadata.update({
            "server_url": self.config.server_url,
            "automation": self.config.automation,
        })

    @property
    def handler(self) -> MethodHandler:
        """Get the MethodHandler, opening the remote session if needed."""
        if self._handler is None:
            self._initialize()
        return self._handler

    def _initialize(self) -> None:
        self._webdriver = create_driver(
            server_url=self.config.server_url,
            capabilities=self.config.capabilities,
            automation=self.config.automation,
            headless=self.config.headless,
        )
        self._handler = MethodHandler(
            SeleniumDriver(self._webdriver),
            settle_delay_ms=self.config.settle_delay_ms,
            recorder=self.recorder,
        )
        self.recorder.log_info(f"Session {self._webdriver.session_id} started")

    def save(self) -> str:
        """Write the command log and generated script; returns the run directory."""
        return self.recorder.save()

    def close(self) -> None:
        """Quit the remote session if one was opened."""
        if self._webdriver is not None:
            try:
                self._webdriver.quit()
            except Exception as e:
                logger.warning(f"[InspectorSession] Error while quitting driver: {e}")
            self._webdriver = None
            self._handler = None

    def __enter__(self) -> "InspectorSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
