"""Runner module - run orchestration."""

from .executor import ExecutionResult, RunExecutor

__all__ = ["ExecutionResult", "RunExecutor"]
