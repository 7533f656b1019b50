"""Reporters receiving events from the browser test server.

The server calls reporter hooks from its request threads in arrival
order. BridgeReporter replays in-browser console output and errors on
the host's standard streams, grouped under a header per browser.
"""

import json
import threading
from typing import Any, Optional

import click


def normalize_payload(payload: Any) -> str:
    """Make a bridged payload readable.

    Strings arrive serialized with one layer of quoting, which is
    stripped. Anything else is pretty-printed as JSON.
    """
    if isinstance(payload, str):
        return payload[1:-1]
    return json.dumps(payload, indent=2, ensure_ascii=False)


class BaseReporter:
    """Default handling for every server event."""

    def __init__(self, log_level: Optional[str] = None):
        self.log_level = log_level

    def write(self, message: str) -> None:
        click.echo(message)

    def write_error(self, message: str) -> None:
        click.echo(message, err=True)

    def on_run_start(self, browsers: list[str]) -> None:
        pass

    def on_browser_start(self, browser: str) -> None:
        pass

    def on_browser_log(self, browser: str, log: Any, log_type: str = "log") -> None:
        self.write(str(log))

    def on_browser_error(self, browser: str, error: Any) -> None:
        self.write_error(str(error))

    def on_browser_info(self, browser: str, info: Any) -> None:
        pass

    def on_spec_complete(self, browser: str, result: dict[str, Any]) -> None:
        pass

    def on_browser_complete(self, browser: str, success: bool) -> None:
        pass

    def on_run_complete(self, exit_code: int) -> None:
        pass


class BridgeReporter(BaseReporter):
    """Relays browser console and error events to stdout/stderr.

    The first event seen from a browser prints a ``<browser>:`` header.
    With log level ``quiet`` console output and errors are both dropped.
    """

    name = "bridge"

    def __init__(self, log_level: Optional[str] = None):
        super().__init__(log_level)
        self._seen: list[str] = []
        self._lock = threading.Lock()

    def _header(self, browser: str) -> None:
        if browser not in self._seen:
            self._seen.append(browser)
            self.write(f"\n{browser}:")

    def on_browser_log(self, browser: str, log: Any, log_type: str = "log") -> None:
        if self.log_level == "quiet":
            return
        with self._lock:
            self._header(browser)
            self.write(normalize_payload(log))

    def on_browser_error(self, browser: str, error: Any) -> None:
        if self.log_level == "quiet":
            return
        with self._lock:
            self._header(browser)
            self.write_error(normalize_payload(error))
