"""Run configuration data models.

Defines the canonical RunConfig assembled once per invocation, the raw
CLI options that feed it, and the enumerated option tables.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class UnresolvedModule(str, Enum):
    """Handling of Node-only modules when bundling for a browser."""
    IGNORE = "ignore"
    FAIL = "fail"


@dataclass(frozen=True)
class LogLevel:
    """One entry of the verbosity table."""
    name: str
    rank: int
    logging_level: int
    server_level: str
    bundler_stats: str


# Totally ordered by rank; "default" is an alias of "error"
LOG_LEVELS = {
    "quiet": LogLevel("quiet", 0, logging.CRITICAL + 10, "disable", "none"),
    "default": LogLevel("default", 1, logging.ERROR, "error", "errors-only"),
    "error": LogLevel("error", 1, logging.ERROR, "error", "errors-only"),
    "warn": LogLevel("warn", 2, logging.WARNING, "warn", "minimal"),
    "info": LogLevel("info", 3, logging.INFO, "info", "normal"),
    "debug": LogLevel("debug", 4, logging.DEBUG, "debug", "verbose"),
}

VALID_REPORTERS = {"default", "concise", "tap"}
VALID_UNRESOLVED_MODULES = {e.value for e in UnresolvedModule}

DEFAULT_LOG_LEVEL = "default"
DEFAULT_REPORTER = "default"
DEFAULT_EXIT_TIMEOUT = 5.0
DEFAULT_BROWSER_PORT = 9876

# Where adapter and loader are written during a run
DEFAULT_BUILD_DIR = "build"


def get_log_level(name: Optional[str]) -> LogLevel:
    """Look up a log level, falling back to ``default`` for unknown names."""
    return LOG_LEVELS.get(name or "", LOG_LEVELS[DEFAULT_LOG_LEVEL])


def normalize_log_level(name: Optional[str]) -> str:
    return name if name in LOG_LEVELS else DEFAULT_LOG_LEVEL


def normalize_reporter(name: Optional[str]) -> str:
    """Return a valid reporter name; ``tap-<variant>`` is accepted."""
    if not name:
        return DEFAULT_REPORTER
    if name in VALID_REPORTERS or name.startswith("tap-"):
        return name
    return DEFAULT_REPORTER


def is_log_at_least(level: Optional[str], threshold: str) -> bool:
    """Whether ``level`` is at least as verbose as ``threshold``."""
    return get_log_level(level).rank >= get_log_level(threshold).rank


@dataclass(frozen=True)
class BrowserConfig:
    """Browser sub-configuration."""
    browsers: tuple[str, ...] = ()
    port: int = DEFAULT_BROWSER_PORT
    log_level: Optional[str] = None
    server: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RunConfig:
    """Canonical, merged configuration for one run."""
    files: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    log_level: str = DEFAULT_LOG_LEVEL
    reporter: str = DEFAULT_REPORTER
    run_todo: bool = False
    exit_timeout: float = DEFAULT_EXIT_TIMEOUT
    save_adapter: Optional[str] = None
    unresolved_module: str = UnresolvedModule.IGNORE.value
    browser: BrowserConfig = field(default_factory=BrowserConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (config-file key names)."""
        return {
            "files": list(self.files),
            "exclude": list(self.exclude),
            "logLevel": self.log_level,
            "reporter": self.reporter,
            "runTodo": self.run_todo,
            "exitTimeout": self.exit_timeout,
            "saveAdapter": self.save_adapter,
            "unresolvedModule": self.unresolved_module,
            "browser": {
                "browsers": list(self.browser.browsers),
                "port": self.browser.port,
                "logLevel": self.browser.log_level,
                "server": self.browser.server,
            },
        }


@dataclass
class CliOptions:
    """Options as parsed from the command line.

    ``None`` (or an empty list) means "not given" so that config-file
    values and defaults can take over.
    """
    files: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    browsers: list[str] = field(default_factory=list)
    reporter: Optional[str] = None
    log_level: Optional[str] = None
    run_todo: Optional[bool] = None
    exit_timeout: Optional[float] = None
    save_adapter: Optional[str] = None
    unresolved_module: Optional[str] = None
    browser_port: Optional[int] = None
    config: Optional[str] = None
    karma_config: Optional[str] = None
