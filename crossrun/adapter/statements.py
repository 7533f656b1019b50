"""Adapter statement records.

The adapter is the bootstrap script bundled and executed inside each
browser. It is described as an ordered list of statements; the order is
load-bearing:

1. disable the bridge's automatic start hook
2. install polyfills
3. shim host-process globals (version, stdout)
4. register the completion listener on the runner
5. install the reporter
6. enable todo mode
7. load every test file
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..config.schema import RunConfig

# In-browser test runner module
RUNNER_MODULE = "metatests"

# Polyfills required before any test code runs
POLYFILLS = ("babel-polyfill",)


class StatementKind(str, Enum):
    """Kinds of adapter statements, in render order."""
    DISABLE_START = "disable-start"
    POLYFILL = "polyfill"
    PROCESS_SHIM = "process-shim"
    COMPLETION_LISTENER = "completion-listener"
    REPORTER = "reporter"
    TODO_MODE = "todo-mode"
    LOAD = "load"


@dataclass(frozen=True)
class Statement:
    """A single adapter statement."""
    kind: StatementKind
    args: dict[str, Any] = field(default_factory=dict)


def parse_reporter(reporter: str) -> tuple[str, Optional[str]]:
    """Split ``tap-<variant>`` into ``("tap", variant)``."""
    if reporter == "tap" or reporter.startswith("tap-"):
        variant = reporter[len("tap-"):] if reporter.startswith("tap-") else None
        return "tap", variant or None
    return reporter, None


def _reporter_statement(config: RunConfig) -> Optional[Statement]:
    if config.log_level == "quiet":
        return Statement(StatementKind.REPORTER, {"reporter": None})

    name, variant = parse_reporter(config.reporter)
    if name == "tap":
        return Statement(StatementKind.REPORTER, {"reporter": "tap", "type": variant})
    if name == "concise":
        return Statement(StatementKind.REPORTER, {"reporter": "concise"})
    return None


def require_path(file: str, build_dir: str) -> str:
    """Module path of ``file`` relative to the adapter in ``build_dir``."""
    relative = os.path.relpath(os.path.abspath(file), os.path.abspath(build_dir))
    relative = relative.replace(os.sep, "/")
    if not relative.startswith("."):
        relative = "./" + relative
    return relative


def build_statements(config: RunConfig, build_dir: str) -> list[Statement]:
    """Build the ordered adapter statements for a run.

    Args:
        config: Resolved run configuration.
        build_dir: Directory the adapter is written to; test files are
            required relative to it.

    Returns:
        Statements in execution order.
    """
    statements = [Statement(StatementKind.DISABLE_START)]
    statements.extend(
        Statement(StatementKind.POLYFILL, {"module": module}) for module in POLYFILLS
    )
    statements.append(Statement(StatementKind.PROCESS_SHIM))
    statements.append(Statement(
        StatementKind.COMPLETION_LISTENER,
        {
            "runner": RUNNER_MODULE,
            "timeout_ms": int(round(config.exit_timeout * 1000)),
        },
    ))

    reporter = _reporter_statement(config)
    if reporter is not None:
        statements.append(reporter)

    if config.run_todo:
        statements.append(Statement(StatementKind.TODO_MODE))

    statements.extend(
        Statement(StatementKind.LOAD, {"path": require_path(file, build_dir)})
        for file in config.files
    )
    return statements
