"""Exceptions raised by the orchestration pipeline.

Configuration errors are fatal: the CLI prints them to stderr and exits
with status 1 before any browser session is started.
"""


class CrossrunError(Exception):
    """Base class for all orchestrator errors."""


class ConfigurationError(CrossrunError):
    """Invalid or incomplete run configuration."""


class MissingFileError(ConfigurationError):
    """A test path given on the command line or in the config does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File does not exist: {path}")


class NoTestFilesError(ConfigurationError):
    """File resolution produced an empty list."""

    def __init__(self):
        super().__init__("No test files specified")


class UnsupportedBrowserError(ConfigurationError):
    """A requested browser has no launcher."""

    def __init__(self, browser: str):
        self.browser = browser
        super().__init__(f"crossrun does not support such browser: {browser}")


class NoBrowsersError(ConfigurationError):
    """No browser environments were requested."""

    def __init__(self):
        super().__init__("No browser environments specified")


class ConfigFileError(ConfigurationError):
    """A config file could not be read or parsed."""


class ArtifactError(CrossrunError):
    """Build artifacts could not be written."""


class BundlerError(CrossrunError):
    """The bundler process failed."""


class BrowserLaunchError(CrossrunError):
    """A browser could not be started or driven."""
