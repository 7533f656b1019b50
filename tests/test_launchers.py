"""Tests for Selenium launchers and the activity timeout."""

import time
from unittest.mock import MagicMock

import pytest
from selenium.common.exceptions import WebDriverException

from crossrun.browser import SeleniumLauncher
from crossrun.browser.timeout import ActivityTimeout
from crossrun.errors import BrowserLaunchError


@pytest.fixture
def webdriver(monkeypatch):
    """Replaces selenium.webdriver inside the launcher module."""
    fake = MagicMock()
    driver = fake.Chrome.return_value
    driver.capabilities = {"browserVersion": "120.0", "platformName": "linux"}
    monkeypatch.setattr("crossrun.browser.launchers.webdriver", fake)
    return fake


class TestSeleniumLauncher:

    def test_start_returns_identity(self, webdriver):
        launcher = SeleniumLauncher("ChromeHeadless", "Chrome", "ChromeOptions", "--headless")

        assert launcher.start() == "ChromeHeadless 120.0 (linux)"
        options = webdriver.ChromeOptions.return_value
        options.add_argument.assert_called_once_with("--headless")
        webdriver.Chrome.assert_called_once_with(options=options)

    def test_extra_args(self, webdriver):
        launcher = SeleniumLauncher(
            "Chrome", "Chrome", "ChromeOptions", args=["--no-sandbox", "--lang=en"]
        )
        launcher.start()

        calls = [c.args[0] for c in webdriver.ChromeOptions.return_value.add_argument.call_args_list]
        assert calls == ["--no-sandbox", "--lang=en"]

    def test_start_failure(self, webdriver):
        webdriver.Chrome.side_effect = WebDriverException("chromedriver not found")
        launcher = SeleniumLauncher("Chrome", "Chrome", "ChromeOptions")

        with pytest.raises(BrowserLaunchError, match="Cannot start Chrome"):
            launcher.start()

    def test_open_and_stop(self, webdriver):
        launcher = SeleniumLauncher("Chrome", "Chrome", "ChromeOptions")
        launcher.start()
        launcher.open("http://127.0.0.1:9876/?id=1")
        launcher.stop()

        driver = webdriver.Chrome.return_value
        driver.get.assert_called_once_with("http://127.0.0.1:9876/?id=1")
        driver.quit.assert_called_once_with()

    def test_open_before_start(self, webdriver):
        with pytest.raises(BrowserLaunchError, match="not started"):
            SeleniumLauncher("Chrome", "Chrome", "ChromeOptions").open("http://x")

    def test_stop_errors_are_logged(self, webdriver):
        webdriver.Chrome.return_value.quit.side_effect = WebDriverException("gone")
        launcher = SeleniumLauncher("Chrome", "Chrome", "ChromeOptions")
        launcher.start()

        launcher.stop()
        launcher.stop()

        webdriver.Chrome.return_value.quit.assert_called_once_with()


class TestActivityTimeout:

    def test_unarmed_timer_never_expires(self):
        timeout = ActivityTimeout(0.05)

        assert timeout.idle_for == 0.0
        assert not timeout.expired

    def test_expires_without_activity(self):
        timeout = ActivityTimeout(0.05)
        timeout.touch()
        time.sleep(0.1)

        assert timeout.expired
        assert timeout.idle_for >= 0.05

    def test_touch_restarts_the_idle_period(self):
        timeout = ActivityTimeout(10)
        timeout.touch()
        time.sleep(0.05)
        timeout.touch()

        assert not timeout.expired
        assert timeout.idle_for < 1
