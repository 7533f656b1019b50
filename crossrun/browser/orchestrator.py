"""Browser launch orchestration.

Builds the test server configuration from a RunConfig and drives one
server session with guaranteed cleanup of the build artifacts.
"""

import logging
import os
from typing import Any, Callable, Iterable

from ..adapter import synthesize_adapter
from ..config.schema import (
    DEFAULT_BUILD_DIR,
    RunConfig,
    UnresolvedModule,
    get_log_level,
)
from ..errors import NoBrowsersError, UnsupportedBrowserError
from .artifacts import ADAPTER_FILE, LOADER_FILE, BuildArtifacts
from .plugins import BROWSER_LAUNCHERS
from .server import DEFAULT_NO_ACTIVITY_TIMEOUT, Server

logger = logging.getLogger(__name__)

# Node-only modules replaced by the empty loader when ignored
IGNORED_NODE_PACKAGES = (
    "child_process",
    "cluster",
    "dgram",
    "fs",
    "module",
    "readline",
    "repl",
)


def set_browsers(server_config: dict[str, Any], browsers: Iterable[str]) -> None:
    """Add browsers and their launcher plugins to a server config.

    Raises:
        UnsupportedBrowserError: On the first browser without a launcher.
    """
    plugins = server_config.setdefault("plugins", [])
    names = server_config.setdefault("browsers", [])

    for browser in browsers:
        launcher = BROWSER_LAUNCHERS.get(browser)
        if launcher is None:
            raise UnsupportedBrowserError(browser)
        names.append(browser)
        if launcher not in plugins:
            plugins.append(launcher)


def build_server_config(
    config: RunConfig, build_dir: str = DEFAULT_BUILD_DIR
) -> dict[str, Any]:
    """Build the full test server configuration.

    Args:
        config: Run configuration with resolved files.
        build_dir: Directory holding the adapter and loader.

    Returns:
        Server config dictionary (JSON-serializable).

    Raises:
        UnsupportedBrowserError: If a browser has no launcher.
    """
    level = get_log_level(config.log_level)
    adapter = os.path.abspath(os.path.join(build_dir, ADAPTER_FILE))

    server_config: dict[str, Any] = {
        "basePath": os.getcwd(),
        "files": [adapter],
        "preprocessors": {adapter: ["bundle"]},
        "plugins": ["bundler", "bridge-reporter"],
        "reporters": ["bridge"],
        "browsers": [],
        "port": config.browser.port,
        "autoWatch": False,
        "singleRun": True,
        "concurrency": 1,
        "logLevel": level.server_level,
        # the adapter stays quiet while it waits out exit_timeout
        "browserNoActivityTimeout": (
            DEFAULT_NO_ACTIVITY_TIMEOUT + int(round(config.exit_timeout * 1000))
        ),
        "client": {"logLevel": config.log_level},
        "bundler": {
            "stats": level.bundler_stats,
            "define": {"global": "globalThis"},
        },
    }

    if config.save_adapter:
        server_config["plugins"].append("save-adapter")
        server_config["preprocessors"][adapter].append("save-adapter")
        server_config["saveAdapter"] = os.path.abspath(config.save_adapter)

    if config.unresolved_module == UnresolvedModule.IGNORE.value:
        loader = os.path.abspath(os.path.join(build_dir, LOADER_FILE))
        server_config["bundler"]["alias"] = {
            name: loader for name in IGNORED_NODE_PACKAGES
        }

    set_browsers(server_config, config.browser.browsers)
    return server_config


def run_browser(
    config: RunConfig,
    on_complete: Callable[[int], None],
    server_factory: Callable[..., Any] = Server,
    build_dir: str = DEFAULT_BUILD_DIR,
) -> None:
    """Run one browser session and report its exit code.

    The build artifacts are removed before ``on_complete`` is called,
    whatever the outcome.

    Args:
        config: Fully resolved run configuration.
        on_complete: Receives the session exit code.
        server_factory: ``factory(server_config, done)`` returning an
            object with ``start()``.
        build_dir: Directory for the adapter and loader.

    Raises:
        NoBrowsersError: If no browsers are configured.
        ArtifactError: If the artifacts can't be written.
    """
    server_config = config.browser.server
    if not server_config.get("browsers"):
        raise NoBrowsersError()

    adapter = synthesize_adapter(config, build_dir)
    artifacts = BuildArtifacts(build_dir)
    artifacts.write(adapter)
    logger.info("Adapter file:\n%s", adapter)

    def done(code: int) -> None:
        artifacts.cleanup()
        on_complete(code)

    try:
        server = server_factory(server_config, done)
        server.start()
    finally:
        artifacts.cleanup()
