"""Build artifacts written for a browser run.

The adapter and the empty-module loader live in a build directory that
exists only while a session runs.
"""

import logging
from pathlib import Path
from typing import Union

from ..errors import ArtifactError

logger = logging.getLogger(__name__)

ADAPTER_FILE = "adapter.js"

# Stand-in for Node-only modules when they are ignored
LOADER_FILE = "empty.js"
EMPTY_MODULE = "module.exports = {};\n"


class BuildArtifacts:
    """Creates the build directory and its files, and removes them again.

    Only what this instance created is removed: a pre-existing build
    directory is left in place.
    """

    def __init__(self, build_dir: Union[str, Path]):
        self.build_dir = Path(build_dir)
        self._created_dir = False
        self._files: list[Path] = []

    @property
    def adapter_path(self) -> Path:
        return self.build_dir / ADAPTER_FILE

    @property
    def loader_path(self) -> Path:
        return self.build_dir / LOADER_FILE

    def write(self, adapter_source: str) -> None:
        """Write the loader and the adapter.

        Raises:
            ArtifactError: If the directory or a file can't be written.
                Anything already written is removed first.
        """
        try:
            if not self.build_dir.exists():
                self.build_dir.mkdir(parents=True)
                self._created_dir = True

            for path, content in (
                (self.loader_path, EMPTY_MODULE),
                (self.adapter_path, adapter_source),
            ):
                path.write_text(content, encoding="utf-8")
                self._files.append(path)

        except OSError as e:
            self.cleanup()
            raise ArtifactError(f"Cannot write build artifacts to {self.build_dir}: {e}") from e

        logger.debug("Build artifacts written to %s", self.build_dir)

    def cleanup(self) -> None:
        """Remove created files and directory. Errors are logged only."""
        while self._files:
            path = self._files.pop()
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Failed to remove %s: %s", path, e)

        if self._created_dir:
            self._created_dir = False
            try:
                self.build_dir.rmdir()
            except OSError as e:
                logger.warning("Failed to remove %s: %s", self.build_dir, e)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.cleanup()
