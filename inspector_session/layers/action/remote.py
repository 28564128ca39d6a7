"""
Remote Driver - The collaborator interface the inspector talks to.

`Driver` and `RemoteElement` describe what the method handler needs
from an automation backend. `SeleniumDriver` implements them on top of
a Selenium or Appium `WebDriver`, exposing a closed table of callable
methods instead of arbitrary attribute access.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, TYPE_CHECKING
import logging

from selenium.common.exceptions import NoSuchElementException

from inspector_session.core.errors import UnsupportedMethodError

if TYPE_CHECKING:
    from selenium.webdriver.remote.webdriver import WebDriver
    from selenium.webdriver.remote.webelement import WebElement

logger = logging.getLogger(__name__)


class RemoteElement(ABC):
    """A handle to an element living in the remote session."""

    @property
    @abstractmethod
    def value(self) -> str:
        """The driver-assigned element id."""

    @abstractmethod
    def invoke(self, method_name: str, args: Sequence[Any] = ()) -> Any:
        """Run a named element method with positional arguments."""


class Driver(ABC):
    """Lookup, invocation and capture operations of one remote session."""

    @abstractmethod
    def element_or_null(self, strategy: str, selector: str) -> Optional[RemoteElement]:
        pass

    @abstractmethod
    def elements(self, strategy: str, selector: str) -> List[RemoteElement]:
        pass

    @abstractmethod
    def source(self) -> str:
        pass

    @abstractmethod
    def take_screenshot(self) -> str:
        """Base64-encoded PNG of the current screen."""

    @abstractmethod
    def invoke(self, method_name: str, args: Sequence[Any] = ()) -> Any:
        """Run a named session-level method with positional arguments."""


MethodTable = Dict[str, Callable[..., Any]]


def _switch_context(driver, name):
    driver.switch_to.context(name)


def _set_orientation(driver, value):
    driver.orientation = value


class SeleniumElement(RemoteElement):
    """RemoteElement backed by a Selenium/Appium `WebElement`."""

    ELEMENT_METHODS: MethodTable = {
        "click": lambda el: el.click(),
        "clear": lambda el: el.clear(),
        "send_keys": lambda el, *value: el.send_keys(*value),
        "submit": lambda el: el.submit(),
        "get_attribute": lambda el, name: el.get_attribute(name),
        "get_property": lambda el, name: el.get_property(name),
        "value_of_css_property": lambda el, name: el.value_of_css_property(name),
        "is_displayed": lambda el: el.is_displayed(),
        "is_enabled": lambda el: el.is_enabled(),
        "is_selected": lambda el: el.is_selected(),
        "text": lambda el: el.text,
        "tag_name": lambda el: el.tag_name,
        "location": lambda el: el.location,
        "size": lambda el: el.size,
        "rect": lambda el: el.rect,
        "screenshot": lambda el: el.screenshot_as_base64,
    }

    # Names used by the JavaScript inspector client
    ALIASES = {
        "sendKeys": "send_keys",
        "getAttribute": "get_attribute",
        "getProperty": "get_property",
        "isDisplayed": "is_displayed",
        "isEnabled": "is_enabled",
        "isSelected": "is_selected",
        "getTagName": "tag_name",
        "getText": "text",
    }

    def __init__(self, element: "WebElement"):
        self._element = element

    @property
    def value(self) -> str:
        return self._element.id

    @property
    def web_element(self) -> "WebElement":
        return self._element

    def invoke(self, method_name: str, args: Sequence[Any] = ()) -> Any:
        name = self.ALIASES.get(method_name, method_name)
        method = self.ELEMENT_METHODS.get(name)
        if method is None:
            raise UnsupportedMethodError(method_name, target="element")
        return method(self._element, *args)

    def __repr__(self) -> str:
        return f"SeleniumElement(id={self.value!r})"


class SeleniumDriver(Driver):
    """
    Driver backed by a Selenium or Appium `WebDriver`.

    Example:
        >>> driver = SeleniumDriver(create_driver(config))
        >>> button = driver.element_or_null("accessibility id", "Login")
        >>> button.invoke("click")
    """

    DRIVER_METHODS: MethodTable = {
        "get": lambda d, url: d.get(url),
        "back": lambda d: d.back(),
        "forward": lambda d: d.forward(),
        "refresh": lambda d: d.refresh(),
        "title": lambda d: d.title,
        "current_url": lambda d: d.current_url,
        "source": lambda d: d.page_source,
        "screenshot": lambda d: d.get_screenshot_as_base64(),
        "execute_script": lambda d, script, *args: d.execute_script(script, *args),
        "get_window_size": lambda d: d.get_window_size(),
        "set_window_size": lambda d, width, height: d.set_window_size(width, height),
        "get_cookies": lambda d: d.get_cookies(),
        "delete_all_cookies": lambda d: d.delete_all_cookies(),
        # Appium session commands
        "hide_keyboard": lambda d, *args: d.hide_keyboard(*args),
        "is_keyboard_shown": lambda d: d.is_keyboard_shown(),
        "background_app": lambda d, seconds: d.background_app(seconds),
        "activate_app": lambda d, app_id: d.activate_app(app_id),
        "terminate_app": lambda d, app_id: d.terminate_app(app_id),
        "contexts": lambda d: d.contexts,
        "switch_context": _switch_context,
        "orientation": lambda d: d.orientation,
        "set_orientation": _set_orientation,
    }

    ALIASES = {
        "getPageSource": "source",
        "takeScreenshot": "screenshot",
        "getWindowSize": "get_window_size",
        "hideKeyboard": "hide_keyboard",
        "isKeyboardShown": "is_keyboard_shown",
        "backgroundApp": "background_app",
        "activateApp": "activate_app",
        "terminateApp": "terminate_app",
        "getOrientation": "orientation",
        "setOrientation": "set_orientation",
    }

    def __init__(self, driver: "WebDriver", extra_methods: Optional[MethodTable] = None):
        """
        Args:
            driver: Selenium or Appium WebDriver with a live session
            extra_methods: Additional session methods, name -> fn(driver, *args)
        """
        self.driver = driver
        self.methods: MethodTable = dict(self.DRIVER_METHODS)
        if extra_methods:
            self.methods.update(extra_methods)

    def element_or_null(self, strategy: str, selector: str) -> Optional[SeleniumElement]:
        try:
            element = self.driver.find_element(strategy, selector)
        except NoSuchElementException:
            logger.debug(f"[SeleniumDriver] No element for {strategy}={selector}")
            return None
        return SeleniumElement(element)

    def elements(self, strategy: str, selector: str) -> List[SeleniumElement]:
        return [SeleniumElement(el) for el in self.driver.find_elements(strategy, selector)]

    def source(self) -> str:
        return self.driver.page_source

    def take_screenshot(self) -> str:
        return self.driver.get_screenshot_as_base64()

    def invoke(self, method_name: str, args: Sequence[Any] = ()) -> Any:
        name = self.ALIASES.get(method_name, method_name)
        method = self.methods.get(name)
        if method is None:
            raise UnsupportedMethodError(method_name, target="driver")
        return method(self.driver, *args)

    def quit(self) -> None:
        self.driver.quit()
