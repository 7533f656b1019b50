"""Browser module - test server, launchers and orchestration."""

from .artifacts import ADAPTER_FILE, LOADER_FILE, BuildArtifacts
from .launchers import SeleniumLauncher
from .plugins import BROWSER_LAUNCHERS, PLUGINS, PluginRegistry
from .server import Server, parse_config
from .orchestrator import IGNORED_NODE_PACKAGES, build_server_config, run_browser

__all__ = [
    "ADAPTER_FILE",
    "LOADER_FILE",
    "BuildArtifacts",
    "SeleniumLauncher",
    "BROWSER_LAUNCHERS",
    "PLUGINS",
    "PluginRegistry",
    "Server",
    "parse_config",
    "IGNORED_NODE_PACKAGES",
    "build_server_config",
    "run_browser",
]
