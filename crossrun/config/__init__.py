"""Config module - run configuration models, loading and resolution."""

from .schema import (
    DEFAULT_BUILD_DIR,
    LOG_LEVELS,
    BrowserConfig,
    CliOptions,
    LogLevel,
    RunConfig,
    UnresolvedModule,
    get_log_level,
    is_log_at_least,
    normalize_log_level,
    normalize_reporter,
)
from .loader import deep_merge, load_config_file
from .resolver import (
    apply_browser,
    apply_cli,
    apply_file,
    default_config,
    resolve_config_files,
    resolve_run_config,
)

__all__ = [
    "DEFAULT_BUILD_DIR",
    "LOG_LEVELS",
    "BrowserConfig",
    "CliOptions",
    "LogLevel",
    "RunConfig",
    "UnresolvedModule",
    "get_log_level",
    "is_log_at_least",
    "normalize_log_level",
    "normalize_reporter",
    "deep_merge",
    "load_config_file",
    "apply_browser",
    "apply_cli",
    "apply_file",
    "default_config",
    "resolve_config_files",
    "resolve_run_config",
]
