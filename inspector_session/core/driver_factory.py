"""
Driver Factory - Remote session creation for the inspector.

Provides a single interface to open a session on an Appium server
(mobile/desktop apps) or a Selenium Grid/standalone server (browsers).
"""

from typing import Any, Dict, Optional, Union
import logging

from appium import webdriver as appium_webdriver
from appium.options.common.base import AppiumOptions
from selenium import webdriver
from selenium.webdriver.chrome.options import Options as ChromeOptions

logger = logging.getLogger(__name__)

# Type alias for driver - either client returns a remote WebDriver
WebDriverType = Union[appium_webdriver.Remote, webdriver.Remote]

AUTOMATIONS = ("appium", "selenium")


def create_driver(
    server_url: str = "http://127.0.0.1:4723",
    capabilities: Optional[Dict[str, Any]] = None,
    automation: str = "appium",
    headless: bool = False,
) -> WebDriverType:
    """
    Open a remote automation session.

    Args:
        server_url: Appium server or Selenium Grid URL
        capabilities: Session capabilities (e.g. platformName, appium:app)
        automation: 'appium' or 'selenium'
        headless: Run the browser headless (selenium only)

    Returns:
        Remote WebDriver with a live session

    Example:
        >>> driver = create_driver(
        ...     "http://127.0.0.1:4723",
        ...     {"platformName": "Android", "appium:automationName": "UiAutomator2"},
        ... )
    """
    automation = automation.lower()
    capabilities = dict(capabilities or {})

    if automation == "appium":
        driver = _create_appium_driver(server_url, capabilities)
    elif automation == "selenium":
        driver = _create_selenium_driver(server_url, capabilities, headless)
    else:
        raise ValueError(f"Unknown automation '{automation}', expected one of {AUTOMATIONS}")

    logger.info(f"[DriverFactory] Started {automation} session {driver.session_id} on {server_url}")
    return driver


def _create_appium_driver(server_url: str, capabilities: Dict[str, Any]) -> appium_webdriver.Remote:
    """Create an Appium session from raw capabilities."""
    options = AppiumOptions()
    options.load_capabilities(capabilities)
    return appium_webdriver.Remote(command_executor=server_url, options=options)


def _create_selenium_driver(
    server_url: str,
    capabilities: Dict[str, Any],
    headless: bool = False,
) -> webdriver.Remote:
    """Create a remote Chrome session with the usual stability options."""
    options = ChromeOptions()

    if headless:
        options.add_argument("--headless=new")

    options.add_argument("--disable-extensions")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])

    for name, value in capabilities.items():
        options.set_capability(name, value)

    return webdriver.Remote(command_executor=server_url, options=options)
