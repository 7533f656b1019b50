"""Run configuration resolver.

Builds the canonical RunConfig as a chain of pure steps:

    default -> config file -> CLI flags -> resolved files -> browser

Each step returns a new RunConfig. List options (files, exclude,
browsers) are concatenated in that order; scalar options take the first
non-empty value in the order CLI > config file > default.
"""

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from ..discovery import exclude_files, resolve_files
from ..errors import ConfigFileError, ConfigurationError, NoTestFilesError
from .loader import load_config_file
from .schema import (
    DEFAULT_BUILD_DIR,
    VALID_UNRESOLVED_MODULES,
    CliOptions,
    RunConfig,
    normalize_log_level,
    normalize_reporter,
)

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == ()


def _first(*values: Any) -> Any:
    """First non-empty value, or None."""
    for value in values:
        if not _is_empty(value):
            return value
    return None


def _as_tuple(value: Any, key: str) -> tuple:
    if _is_empty(value):
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ConfigFileError(f"'{key}' must be a list, got {type(value).__name__}")
    return tuple(str(v) for v in value)


def _as_bool(value: Any, key: str) -> bool:
    if _is_empty(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigFileError(f"'{key}' must be true or false, got {value!r}")


def _check_unresolved_module(value: str) -> str:
    if value not in VALID_UNRESOLVED_MODULES:
        raise ConfigurationError(
            f"Invalid unresolved module strategy '{value}'. "
            f"Must be one of: {', '.join(sorted(VALID_UNRESOLVED_MODULES))}"
        )
    return value


def default_config() -> RunConfig:
    """Built-in defaults."""
    return RunConfig()


def apply_file(config: RunConfig, data: Mapping[str, Any]) -> RunConfig:
    """Merge config-file values over ``config``.

    ``logLevel`` falls back to ``browser.logLevel`` when absent.
    """
    browser = data.get("browser") or {}
    if not isinstance(browser, Mapping):
        raise ConfigFileError(f"'browser' must be a mapping, got {type(browser).__name__}")

    log_level = _first(data.get("logLevel"), browser.get("logLevel"), config.log_level)
    port = _first(browser.get("port"), config.browser.port)
    exit_timeout = _first(data.get("exitTimeout"), config.exit_timeout)

    try:
        port = int(port)
        exit_timeout = float(exit_timeout)
    except (TypeError, ValueError) as e:
        raise ConfigFileError(f"Invalid numeric value in config file: {e}") from e

    return replace(
        config,
        files=config.files + _as_tuple(data.get("files"), "files"),
        exclude=config.exclude + _as_tuple(data.get("exclude"), "exclude"),
        log_level=normalize_log_level(log_level),
        reporter=normalize_reporter(_first(data.get("reporter"), config.reporter)),
        run_todo=_as_bool(_first(data.get("runTodo"), config.run_todo), "runTodo"),
        exit_timeout=exit_timeout,
        save_adapter=_first(data.get("saveAdapter"), config.save_adapter),
        unresolved_module=_check_unresolved_module(
            _first(data.get("unresolvedModule"), config.unresolved_module)
        ),
        browser=replace(
            config.browser,
            browsers=config.browser.browsers
            + _as_tuple(browser.get("browsers"), "browser.browsers"),
            port=port,
            log_level=_first(browser.get("logLevel"), config.browser.log_level),
        ),
    )


def apply_cli(config: RunConfig, options: CliOptions) -> RunConfig:
    """Merge command line values over ``config``."""
    return replace(
        config,
        files=config.files + tuple(options.files),
        exclude=config.exclude + tuple(options.exclude),
        log_level=normalize_log_level(_first(options.log_level, config.log_level)),
        reporter=normalize_reporter(_first(options.reporter, config.reporter)),
        run_todo=bool(_first(options.run_todo, config.run_todo)),
        exit_timeout=_first(options.exit_timeout, config.exit_timeout),
        save_adapter=_first(options.save_adapter, config.save_adapter),
        unresolved_module=_check_unresolved_module(
            _first(options.unresolved_module, config.unresolved_module)
        ),
        browser=replace(
            config.browser,
            browsers=config.browser.browsers + tuple(options.browsers),
            port=_first(options.browser_port or None, config.browser.port),
        ),
    )


def resolve_config_files(config: RunConfig) -> RunConfig:
    """Expand ``files`` into test sources and drop excluded ones."""
    files = resolve_files(config.files)
    files = exclude_files(files, config.exclude)
    return replace(config, files=tuple(files))


def apply_browser(
    config: RunConfig,
    server_config_file: Optional[str] = None,
    build_dir: str = DEFAULT_BUILD_DIR,
) -> RunConfig:
    """Build the server configuration for the requested browsers.

    Args:
        config: Config with resolved files.
        server_config_file: Optional JSON/YAML file merged over the
            generated server config (the file takes precedence).
        build_dir: Directory the adapter will be written to.

    Raises:
        UnsupportedBrowserError: If a browser has no launcher.
    """
    from ..browser.orchestrator import build_server_config
    from ..browser.server import parse_config

    server = build_server_config(config, build_dir=build_dir)
    if server_config_file:
        server = parse_config(server_config_file, server)
    return replace(config, browser=replace(config.browser, server=server))


def resolve_run_config(
    options: CliOptions,
    build_dir: str = DEFAULT_BUILD_DIR,
) -> RunConfig:
    """Run the full resolution chain for one invocation.

    Raises:
        ConfigurationError: On missing files, unsupported browsers,
            unreadable config files or an empty file list.
    """
    config = default_config()

    if options.config:
        config = apply_file(config, load_config_file(options.config))

    config = apply_cli(config, options)
    config = resolve_config_files(config)
    config = apply_browser(config, options.karma_config, build_dir=build_dir)

    if not config.files:
        raise NoTestFilesError()

    logger.debug("Resolved %d test file(s)", len(config.files))
    return config
