"""Browser launchers driven through Selenium WebDriver."""

import logging
from typing import Optional, Sequence

from selenium import webdriver
from selenium.common.exceptions import WebDriverException

from ..errors import BrowserLaunchError

logger = logging.getLogger(__name__)


class SeleniumLauncher:
    """Starts one browser, opens the test page and quits it afterwards.

    ``driver_class`` and ``options_class`` are attribute names on
    ``selenium.webdriver`` (e.g. ``"Chrome"`` and ``"ChromeOptions"``).
    """

    def __init__(
        self,
        name: str,
        driver_class: str,
        options_class: str,
        headless_arg: Optional[str] = None,
        args: Sequence[str] = (),
    ):
        self.name = name
        self.driver_class = driver_class
        self.options_class = options_class
        self.headless_arg = headless_arg
        self.args = list(args)
        self._driver = None

    def _options(self):
        options = getattr(webdriver, self.options_class)()
        if self.headless_arg:
            options.add_argument(self.headless_arg)
        for arg in self.args:
            options.add_argument(arg)
        return options

    def start(self) -> str:
        """Start the browser.

        Returns:
            Browser identity, e.g. ``"ChromeHeadless 120.0 (linux)"``.

        Raises:
            BrowserLaunchError: If the driver can't start the browser.
        """
        logger.info("Starting browser %s", self.name)
        try:
            self._driver = getattr(webdriver, self.driver_class)(options=self._options())
        except WebDriverException as e:
            raise BrowserLaunchError(f"Cannot start {self.name}: {e.msg}") from e

        capabilities = self._driver.capabilities
        version = capabilities.get("browserVersion", "")
        platform = capabilities.get("platformName", "")
        return f"{self.name} {version} ({platform})"

    def open(self, url: str) -> None:
        """Navigate the started browser to ``url``."""
        if self._driver is None:
            raise BrowserLaunchError(f"{self.name} is not started")
        try:
            self._driver.get(url)
        except WebDriverException as e:
            raise BrowserLaunchError(f"{self.name} failed to open {url}: {e.msg}") from e

    def stop(self) -> None:
        """Quit the browser. Errors are logged, not raised."""
        if self._driver is None:
            return
        try:
            self._driver.quit()
        except WebDriverException as e:
            logger.warning("Failed to stop %s: %s", self.name, e.msg)
        finally:
            self._driver = None
