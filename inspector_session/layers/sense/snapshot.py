"""
Session Snapshot - Source and screenshot capture after each command.

The two retrievals are independent: a failure in one is recorded and
the other is still attempted. Losing the session is the exception and
always propagates.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING
import logging

from inspector_session.core.errors import is_session_lost

if TYPE_CHECKING:
    from inspector_session.layers.action.remote import Driver

logger = logging.getLogger(__name__)


@dataclass
class SessionSnapshot:
    """Structural source and screenshot of the session at one moment."""
    source: Optional[str] = None
    source_error: Optional[Exception] = None
    screenshot: Optional[str] = None
    screenshot_error: Optional[Exception] = None

    @property
    def is_complete(self) -> bool:
        return self.source_error is None and self.screenshot_error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "source_error": str(self.source_error) if self.source_error else None,
            "screenshot": self.screenshot,
            "screenshot_error": str(self.screenshot_error) if self.screenshot_error else None,
        }


def capture_snapshot(driver: "Driver") -> SessionSnapshot:
    """
    Fetch the page/app source and a screenshot.

    Args:
        driver: Driver collaborator for the live session

    Returns:
        SessionSnapshot, possibly partial

    Raises:
        The driver's error, unchanged, if the session no longer exists
    """
    snapshot = SessionSnapshot()

    try:
        snapshot.source = driver.source()
    except Exception as e:
        if is_session_lost(e):
            logger.error(f"[Snapshot] Session lost while reading source: {e}")
            raise
        logger.warning(f"[Snapshot] Could not read source: {e}")
        snapshot.source_error = e

    try:
        snapshot.screenshot = driver.take_screenshot()
    except Exception as e:
        if is_session_lost(e):
            logger.error(f"[Snapshot] Session lost while taking screenshot: {e}")
            raise
        logger.warning(f"[Snapshot] Could not take screenshot: {e}")
        snapshot.screenshot_error = e

    return snapshot
