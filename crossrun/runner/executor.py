"""Run executor - orchestrates one crossrun invocation.

Coordinates the browser part of the flow:
1. Synthesize the adapter
2. Write build artifacts
3. Start the test server with every browser
4. Collect the exit code from the completion callback
5. Clean up the build artifacts
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..browser.orchestrator import run_browser
from ..browser.server import Server
from ..config.schema import DEFAULT_BUILD_DIR, RunConfig
from ..errors import CrossrunError

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one run."""
    exit_code: int = 1
    duration_ms: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class RunExecutor:
    """Runs the resolved configuration in the configured browsers."""

    def __init__(
        self,
        config: RunConfig,
        server_factory: Callable[..., Any] = Server,
        build_dir: str = DEFAULT_BUILD_DIR,
    ):
        """Initialize run executor.

        Args:
            config: Fully resolved run configuration.
            server_factory: Test server factory, ``factory(config, done)``.
            build_dir: Directory for the adapter and loader.
        """
        self.config = config
        self.server_factory = server_factory
        self.build_dir = build_dir

    def execute(self) -> ExecutionResult:
        """Execute the run.

        Returns:
            ExecutionResult with the exit code. Orchestration errors are
            recorded in ``error`` with exit code 1.
        """
        start_time = time.time()
        result = ExecutionResult()
        codes: list[int] = []

        logger.debug(
            "Final config:\n%s",
            json.dumps(self.config.to_dict(), indent=2, default=str),
        )

        try:
            run_browser(
                self.config,
                codes.append,
                server_factory=self.server_factory,
                build_dir=self.build_dir,
            )
            if codes:
                result.exit_code = codes[0]
            else:
                result.error = "Test session ended without reporting a result"

        except CrossrunError as e:
            result.error = str(e)

        finally:
            result.duration_ms = int((time.time() - start_time) * 1000)

        return result
