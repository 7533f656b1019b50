"""Adapter module - in-browser bootstrap synthesis."""

from .renderer import AdapterRenderer, synthesize_adapter
from .statements import (
    POLYFILLS,
    RUNNER_MODULE,
    Statement,
    StatementKind,
    build_statements,
    parse_reporter,
    require_path,
)

__all__ = [
    "AdapterRenderer",
    "synthesize_adapter",
    "POLYFILLS",
    "RUNNER_MODULE",
    "Statement",
    "StatementKind",
    "build_statements",
    "parse_reporter",
    "require_path",
]
