import pytest
from unittest.mock import patch

from inspector_session.core.errors import UnsupportedMethodError
from inspector_session.layers.action.method_handler import MethodHandler
from inspector_session.layers.action.remote import Driver, RemoteElement


class FakeElement(RemoteElement):
    """In-memory remote element that records the methods run on it."""

    def __init__(self, element_id, results=None, failures=None):
        self._id = element_id
        self.results = results or {}
        self.failures = failures or {}
        self.calls = []

    @property
    def value(self):
        return self._id

    def invoke(self, method_name, args=()):
        self.calls.append((method_name, list(args)))
        if method_name in self.failures:
            raise self.failures[method_name]
        return self.results.get(method_name)


class FakeDriver(Driver):
    """In-memory driver keyed by (strategy, selector)."""

    def __init__(self, lookups=None, source="<hierarchy/>", screenshot="iVBORw0KGgo="):
        self.lookups = lookups or {}
        self.page_source = source
        self.screenshot = screenshot
        self.source_error = None
        self.screenshot_error = None
        self.calls = []
        self.results = {}

    def element_or_null(self, strategy, selector):
        self.calls.append(("element_or_null", strategy, selector))
        found = self.lookups.get((strategy, selector), [])
        return found[0] if found else None

    def elements(self, strategy, selector):
        self.calls.append(("elements", strategy, selector))
        return list(self.lookups.get((strategy, selector), []))

    def source(self):
        self.calls.append(("source",))
        if self.source_error:
            raise self.source_error
        return self.page_source

    def take_screenshot(self):
        self.calls.append(("take_screenshot",))
        if self.screenshot_error:
            raise self.screenshot_error
        return self.screenshot

    def invoke(self, method_name, args=()):
        self.calls.append(("invoke", method_name, list(args)))
        if method_name == "unknown_command":
            raise UnsupportedMethodError(method_name)
        return self.results.get(method_name)


class StatusError(Exception):
    """Driver error carrying a JSON Wire Protocol status."""

    def __init__(self, message, status):
        super().__init__(message)
        self.status = status


@pytest.fixture
def fake_driver():
    return FakeDriver(lookups={
        ("id", "submit"): [FakeElement("elem-42", results={"click": True})],
        ("id", "cancel"): [FakeElement("elem-43")],
        ("class name", "row"): [FakeElement("row-1"), FakeElement("row-2"), FakeElement("row-3")],
        ("class name", "empty"): [],
    })


@pytest.fixture
def no_sleep():
    with patch("inspector_session.layers.action.method_handler.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def handler(fake_driver, no_sleep):
    return MethodHandler(fake_driver)
