import pytest

from selenium.common.exceptions import InvalidSessionIdException, WebDriverException

from conftest import FakeDriver, StatusError
from inspector_session.core.errors import is_session_lost
from inspector_session.layers.sense.snapshot import SessionSnapshot, capture_snapshot


def test_capture_snapshot_success():
    snapshot = capture_snapshot(FakeDriver(source="<a/>", screenshot="png"))

    assert snapshot.source == "<a/>"
    assert snapshot.screenshot == "png"
    assert snapshot.is_complete


def test_screenshot_attempted_after_source_failure():
    driver = FakeDriver()
    driver.source_error = WebDriverException("boom")

    snapshot = capture_snapshot(driver)

    assert ("take_screenshot",) in driver.calls
    assert snapshot.source is None
    assert snapshot.screenshot == "iVBORw0KGgo="


def test_screenshot_failure_is_recorded():
    driver = FakeDriver()
    driver.screenshot_error = WebDriverException("screen locked")

    snapshot = capture_snapshot(driver)

    assert snapshot.source == "<hierarchy/>"
    assert snapshot.screenshot is None
    assert "screen locked" in snapshot.to_dict()["screenshot_error"]


def test_session_lost_during_screenshot_raises():
    driver = FakeDriver()
    driver.screenshot_error = StatusError("session not found", status=6)

    with pytest.raises(StatusError):
        capture_snapshot(driver)


def test_to_dict_stringifies_errors():
    snapshot = SessionSnapshot(source_error=ValueError("bad xml"), screenshot="png")

    assert snapshot.to_dict() == {
        "source": None,
        "source_error": "bad xml",
        "screenshot": "png",
        "screenshot_error": None,
    }


@pytest.mark.parametrize("error,expected", [
    (InvalidSessionIdException("invalid session id"), True),
    (StatusError("gone", status=6), True),
    (StatusError("stale", status=10), False),
    (WebDriverException("other"), False),
    (RuntimeError("plain"), False),
])
def test_is_session_lost(error, expected):
    assert is_session_lost(error) is expected
