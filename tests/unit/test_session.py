import pytest
from unittest.mock import MagicMock, patch

from inspector_session.core.session import InspectorConfig, InspectorSession
from inspector_session.layers.action.remote import SeleniumDriver


class TestInspectorConfig:
    """Configuration defaults and environment overrides."""

    def test_defaults(self):
        config = InspectorConfig()
        assert config.server_url == "http://127.0.0.1:4723"
        assert config.automation == "appium"
        assert config.settle_delay_ms == 500
        assert config.capabilities == {}

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("INSPECTOR_SERVER_URL", "http://grid:4444")
        monkeypatch.setenv("INSPECTOR_AUTOMATION", "Selenium")
        monkeypatch.setenv("INSPECTOR_SETTLE_DELAY_MS", "250")
        monkeypatch.setenv("INSPECTOR_CAPABILITIES", '{"browserName": "chrome"}')

        config = InspectorConfig.from_env()

        assert config.server_url == "http://grid:4444"
        assert config.automation == "selenium"
        assert config.settle_delay_ms == 250
        assert config.capabilities == {"browserName": "chrome"}

    def test_explicit_values_override_env(self, monkeypatch):
        monkeypatch.setenv("INSPECTOR_SERVER_URL", "http://grid:4444")

        config = InspectorConfig.from_env(server_url="http://local:4723", report_dir=None)

        assert config.server_url == "http://local:4723"
        assert config.report_dir == "./inspector_reports"


class TestInspectorSession:
    """Lazy driver creation and teardown."""

    @patch("inspector_session.core.session.create_driver")
    def test_handler_opens_session_once(self, mock_create_driver, tmp_path):
        mock_create_driver.return_value = MagicMock(session_id="abc")
        session = InspectorSession(InspectorConfig(report_dir=str(tmp_path), settle_delay_ms=0))

        handler = session.handler
        assert session.handler is handler
        assert isinstance(handler.driver, SeleniumDriver)
        assert handler.settle_delay_ms == 0
        assert handler.recorder is session.recorder
        mock_create_driver.assert_called_once()

    @patch("inspector_session.core.session.create_driver")
    def test_context_manager_quits_driver(self, mock_create_driver, tmp_path):
        webdriver = MagicMock(session_id="abc")
        mock_create_driver.return_value = webdriver

        with InspectorSession(InspectorConfig(report_dir=str(tmp_path))) as session:
            session.handler

        webdriver.quit.assert_called_once_with()

    @patch("inspector_session.core.session.create_driver")
    def test_close_without_session_does_nothing(self, mock_create_driver):
        InspectorSession().close()
        mock_create_driver.assert_not_called()

    @patch("inspector_session.core.session.create_driver")
    def test_quit_errors_are_not_raised(self, mock_create_driver, tmp_path):
        webdriver = MagicMock(session_id="abc")
        webdriver.quit.side_effect = RuntimeError("already gone")
        mock_create_driver.return_value = webdriver
        session = InspectorSession(InspectorConfig(report_dir=str(tmp_path)))
        session.handler

        session.close()

        assert session._handler is None


@patch("inspector_session.core.driver_factory.appium_webdriver.Remote")
def test_create_driver_appium(mock_remote):
    from inspector_session.core.driver_factory import create_driver

    create_driver("http://127.0.0.1:4723", {"platformName": "Android"})

    _, kwargs = mock_remote.call_args
    assert kwargs["command_executor"] == "http://127.0.0.1:4723"
    assert kwargs["options"].to_capabilities()["platformName"] == "Android"


@patch("inspector_session.core.driver_factory.webdriver.Remote")
def test_create_driver_selenium_headless(mock_remote):
    from inspector_session.core.driver_factory import create_driver

    create_driver("http://grid:4444", automation="selenium", headless=True)

    _, kwargs = mock_remote.call_args
    assert "--headless=new" in kwargs["options"].arguments


def test_create_driver_unknown_automation():
    from inspector_session.core.driver_factory import create_driver

    with pytest.raises(ValueError):
        create_driver(automation="playwright")
