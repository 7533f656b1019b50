"""Bundling preprocessors backed by esbuild.

A preprocessor takes the content of a served file and returns the
content to serve instead:

    preprocessor(content, file_path) -> content

Preprocessors listed for a file run in order, each receiving the
previous one's output.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Optional, Sequence

from ..errors import ArtifactError, BundlerError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("npx", "--no-install", "esbuild")

# Bundler stats level -> esbuild --log-level
STATS_LOG_LEVELS = {
    "none": "silent",
    "errors-only": "error",
    "minimal": "warning",
    "normal": "info",
    "verbose": "debug",
}


class EsbuildPreprocessor:
    """Bundles a CommonJS entry point into a browser IIFE.

    The content is fed on stdin; imports resolve relative to the
    entry's directory. Module aliases redirect Node-only modules to the
    empty stub.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        alias: Optional[dict[str, str]] = None,
        define: Optional[dict[str, str]] = None,
        stats: str = "errors-only",
        base_path: Optional[str] = None,
        timeout: float = 120.0,
    ):
        self.command = list(command)
        self.alias = alias or {}
        self.define = define or {}
        self.log_level = STATS_LOG_LEVELS.get(stats, "error")
        self.base_path = base_path or os.getcwd()
        self.timeout = timeout

    def _alias_target(self, target: str) -> str:
        relative = os.path.relpath(os.path.abspath(target), self.base_path)
        return "./" + relative.replace(os.sep, "/")

    def build_command(self, file_path: str) -> list[str]:
        cmd = self.command + [
            "--bundle",
            "--format=iife",
            "--platform=browser",
            f"--log-level={self.log_level}",
            f"--sourcefile={os.path.basename(file_path)}",
            f"--resolve-dir={os.path.dirname(os.path.abspath(file_path))}",
        ]
        for name, value in self.define.items():
            cmd.append(f"--define:{name}={value}")
        for name, target in self.alias.items():
            cmd.append(f"--alias:{name}={self._alias_target(target)}")
        return cmd

    def __call__(self, content: str, file_path: str) -> str:
        cmd = self.build_command(file_path)
        logger.debug("Bundling %s: %s", file_path, " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                input=content,
                capture_output=True,
                text=True,
                cwd=self.base_path,
                timeout=self.timeout,
            )
        except OSError as e:
            raise BundlerError(f"Failed to start bundler '{cmd[0]}': {e}") from e
        except subprocess.TimeoutExpired as e:
            raise BundlerError(f"Bundler timed out after {self.timeout}s") from e

        if result.stderr:
            logger.info(result.stderr.rstrip())

        if result.returncode != 0:
            raise BundlerError(
                f"Bundling {file_path} failed with code {result.returncode}:\n"
                f"{result.stderr.strip()}"
            )

        return result.stdout


class SaveAdapterPreprocessor:
    """Writes the content it receives to a file and passes it on unchanged."""

    def __init__(self, path: str):
        self.path = Path(path)

    def __call__(self, content: str, file_path: str) -> str:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ArtifactError(f"Failed to save adapter to {self.path}: {e}") from e
        logger.info("Adapter saved: %s", self.path)
        return content


def bundle_factory(config: dict[str, Any]) -> EsbuildPreprocessor:
    """Create the bundling preprocessor from the server config."""
    bundler = config.get("bundler", {})
    return EsbuildPreprocessor(
        command=bundler.get("command", DEFAULT_COMMAND),
        alias=bundler.get("alias"),
        define=bundler.get("define"),
        stats=bundler.get("stats", "errors-only"),
        base_path=config.get("basePath"),
    )


def save_adapter_factory(config: dict[str, Any]) -> SaveAdapterPreprocessor:
    """Create the save-adapter preprocessor from the server config."""
    return SaveAdapterPreprocessor(config["saveAdapter"])
