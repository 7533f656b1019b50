"""Browser test server.

Serves a context page plus the preprocessed files, launches every
configured browser in turn (one at a time) and relays bridge events
from the page to the registered reporters until the browser reports
completion, errors out or goes quiet for too long.

The outcome of the whole run is handed to a single completion callback:
0 when every browser completed with passing results, 1 otherwise.
"""

import json
import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlsplit

import requests

from ..config.loader import deep_merge, load_config_file
from ..errors import BrowserLaunchError, BundlerError, CrossrunError
from .context import render_context_page
from .plugins import PluginRegistry
from .timeout import ActivityTimeout

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9876
DEFAULT_HOSTNAME = "127.0.0.1"

# Milliseconds without any bridge event before a browser is given up
DEFAULT_NO_ACTIVITY_TIMEOUT = 30000

# Seconds between completion checks
POLL_INTERVAL = 0.2


def parse_config(path: str, base: dict[str, Any]) -> dict[str, Any]:
    """Merge a server config file over ``base``; the file wins."""
    return deep_merge(base, load_config_file(path))


@dataclass
class BrowserSession:
    """State of one browser while it runs the tests."""
    id: str
    name: str
    identity: str
    timeout: ActivityTimeout
    done: threading.Event = field(default_factory=threading.Event)
    results: list[dict] = field(default_factory=list)
    error_count: int = 0

    @property
    def success(self) -> bool:
        return (
            self.done.is_set()
            and self.error_count == 0
            and bool(self.results)
            and all(r.get("success") for r in self.results)
        )


class _RequestHandler(BaseHTTPRequestHandler):
    """Serves the context page and files, accepts bridge events."""

    def do_GET(self):
        path = urlsplit(self.path).path
        app = self.server.app

        if path in ("/", "/context.html"):
            page = app.context_page().encode("utf-8")
            self._respond(200, page, "text/html; charset=utf-8")
        elif path in app.served_files:
            body = app.served_files[path].encode("utf-8")
            self._respond(200, body, "application/javascript; charset=utf-8")
        else:
            self._respond(404, b"not found", "text/plain")

    def do_POST(self):
        path = urlsplit(self.path).path
        if not path.startswith("/bridge/"):
            self._respond(404, b"not found", "text/plain")
            return

        session_id = unquote(path[len("/bridge/"):])
        length = int(self.headers.get("Content-Length", 0))
        try:
            message = json.loads(self.rfile.read(length).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self._respond(400, b"malformed event", "text/plain")
            return

        if not isinstance(message, dict):
            self._respond(400, b"malformed event", "text/plain")
            return

        handled = self.server.app.handle_event(
            session_id,
            message.get("type"),
            message.get("payload"),
            message.get("level"),
        )
        self._respond(204 if handled else 404, b"", "text/plain")

    def _respond(self, status: int, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        if body:
            self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class _BridgeHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], app: "Server"):
        self.app = app
        super().__init__(address, _RequestHandler)


class Server:
    """Runs the configured browsers against the served files.

    Config keys used:
        files, preprocessors, plugins, reporters, browsers, basePath,
        port, hostname, concurrency, browserNoActivityTimeout.
    """

    def __init__(self, config: dict[str, Any], on_complete: Callable[[int], None]):
        """Initialize the server.

        Args:
            config: Server configuration (see browser.orchestrator).
            on_complete: Called once with the run's exit code.

        Raises:
            ConfigurationError: If a configured plugin or reporter is unknown.
        """
        self.config = config
        self.on_complete = on_complete
        self.served_files: dict[str, str] = {}
        self._script_urls: list[str] = []
        self._sessions: dict[str, BrowserSession] = {}
        self._lock = threading.Lock()
        self._httpd: Optional[_BridgeHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._port = int(config.get("port", DEFAULT_PORT))
        self._registry = PluginRegistry(config.get("plugins", []))
        self.reporters = [
            self._registry.create("reporter", name, config)
            for name in config.get("reporters", [])
        ]

    @property
    def url(self) -> str:
        hostname = self.config.get("hostname", DEFAULT_HOSTNAME)
        return f"http://{hostname}:{self._port}"

    def context_page(self) -> str:
        return render_context_page(self._script_urls)

    def start(self) -> None:
        """Run all browsers, then call ``on_complete`` with the exit code.

        Session faults (bundling failure, port in use, a browser that
        can't start or dies mid-run) end the run with code 1.
        ``on_complete`` is called even if an unexpected error escapes.
        """
        exit_code = 1
        try:
            exit_code = self._run()
        except (CrossrunError, OSError) as e:
            logger.error("%s", e)
        finally:
            self._stop_http()
            for reporter in self.reporters:
                reporter.on_run_complete(exit_code)
            self.on_complete(exit_code)

    def _run(self) -> int:
        browsers = list(self.config.get("browsers", []))
        launchers = [
            (name, self._registry.create("launcher", name, self.config))
            for name in browsers
        ]

        concurrency = self.config.get("concurrency", 1)
        if concurrency != 1:
            logger.warning("Browsers run one at a time; ignoring concurrency=%s", concurrency)

        self._preprocess()
        self._start_http()
        self._check_served()

        for reporter in self.reporters:
            reporter.on_run_start(browsers)

        results = [self._run_browser(name, launcher) for name, launcher in launchers]
        return 0 if results and all(results) else 1

    def _preprocess(self) -> None:
        """Read every served file and run its preprocessors in order."""
        base_path = self.config.get("basePath") or os.getcwd()
        preprocessors = self.config.get("preprocessors", {})

        for index, file in enumerate(self.config.get("files", [])):
            path = os.path.join(base_path, file)
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            try:
                for name in preprocessors.get(file, []):
                    preprocessor = self._registry.create("preprocessor", name, self.config)
                    content = preprocessor(content, path)
            except BundlerError as e:
                # surfaces in the browser as an uncaught error
                logger.error("%s", e)
                content = f"throw new Error({json.dumps(str(e))});\n"

            url = f"/files/{index}/{os.path.basename(path)}"
            self.served_files[url] = content
            self._script_urls.append(url)

    def _start_http(self) -> None:
        hostname = self.config.get("hostname", DEFAULT_HOSTNAME)
        self._httpd = _BridgeHTTPServer((hostname, self._port), self)
        self._port = self._httpd.server_address[1]
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="crossrun-server",
            daemon=True,
        )
        self._thread.start()
        logger.info("Test server listening on %s", self.url)

    def _check_served(self) -> None:
        """Fetch the context page and every script from the browser-facing URL.

        Raises:
            BrowserLaunchError: If ``hostname`` is not reachable from this
                host or something the page loads is not served.
        """
        session = requests.Session()
        session.trust_env = False

        try:
            for path in ["/", *self._script_urls]:
                try:
                    response = session.get(f"{self.url}{path}", timeout=5)
                except requests.RequestException as e:
                    raise BrowserLaunchError(f"Test server is not reachable at {self.url}: {e}") from e
                if response.status_code != 200:
                    raise BrowserLaunchError(
                        f"Test server answered {response.status_code} for {path}"
                    )
        finally:
            session.close()

    def _stop_http(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._httpd = None
        self._thread = None

    def _run_browser(self, name: str, launcher) -> bool:
        """Run the tests in one browser; True if it passed.

        Any fault while driving the browser fails this browser only.
        """
        timeout = ActivityTimeout(
            self.config.get("browserNoActivityTimeout", DEFAULT_NO_ACTIVITY_TIMEOUT) / 1000
        )

        try:
            identity = launcher.start()
        except Exception as e:
            logger.error("Cannot start %s: %s", name, e)
            return False

        session = BrowserSession(
            id=uuid.uuid4().hex, name=name, identity=identity, timeout=timeout
        )
        with self._lock:
            self._sessions[session.id] = session

        faulted = False
        try:
            timeout.touch()
            launcher.open(f"{self.url}/?id={session.id}")
            while not session.done.wait(POLL_INTERVAL):
                if timeout.expired:
                    logger.error(
                        "%s has not reported any activity in %.0fs, giving up",
                        identity,
                        timeout.timeout,
                    )
                    break
        except Exception as e:
            logger.error("%s failed: %s", identity, e)
            faulted = True
        finally:
            launcher.stop()

        success = session.success and not faulted
        for reporter in self.reporters:
            reporter.on_browser_complete(identity, success)
        return success

    def handle_event(
        self,
        session_id: str,
        event_type: Optional[str],
        payload: Any,
        level: Optional[str] = None,
    ) -> bool:
        """Dispatch one bridge event to the reporters.

        Events are handled one at a time in arrival order. An ``error``
        event fails the browser and ends its run.

        Returns:
            False if the browser or event type is unknown.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.warning("Event from unknown browser %s", session_id)
                return False

            session.timeout.touch()
            identity = session.identity

            if event_type == "start":
                for reporter in self.reporters:
                    reporter.on_browser_start(identity)
            elif event_type == "log":
                for reporter in self.reporters:
                    reporter.on_browser_log(identity, payload, level or "log")
            elif event_type == "error":
                session.error_count += 1
                for reporter in self.reporters:
                    reporter.on_browser_error(identity, payload)
                session.done.set()
            elif event_type == "info":
                for reporter in self.reporters:
                    reporter.on_browser_info(identity, payload)
            elif event_type == "result":
                result = payload if isinstance(payload, dict) else {}
                session.results.append(result)
                for reporter in self.reporters:
                    reporter.on_spec_complete(identity, result)
            elif event_type == "complete":
                session.done.set()
            else:
                logger.warning("Unknown bridge event %r from %s", event_type, identity)
                return False

        return True
