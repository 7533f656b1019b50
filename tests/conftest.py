"""
Configuration file for pytest.

Shared fixtures for the crossrun test suite.
"""

import logging
import pathlib

import pytest


class StubServer:
    """Stands in for the browser test server.

    Records the config it was given and reports ``exit_code`` through
    the completion callback when started.
    """

    instances: list["StubServer"] = []

    def __init__(self, config, on_complete, exit_code=0):
        self.config = config
        self.on_complete = on_complete
        self.exit_code = exit_code
        self.build_files_seen: list[str] = []
        self.started = False
        StubServer.instances.append(self)

    def start(self):
        self.started = True
        for path in self.config.get("files", []):
            if pathlib.Path(path).exists():
                self.build_files_seen.append(path)
        self.on_complete(self.exit_code)


@pytest.fixture
def stub_server():
    """Factory class for StubServer; instances are reset per test."""
    StubServer.instances = []
    yield StubServer
    StubServer.instances = []


@pytest.fixture
def failing_server():
    """Server factory whose run reports exit code 1."""
    StubServer.instances = []

    def factory(config, on_complete):
        return StubServer(config, on_complete, exit_code=1)

    yield factory
    StubServer.instances = []


@pytest.fixture
def project(tmp_path, monkeypatch):
    """
    A working directory with a small test tree:

        test/a.js
        test/unit/b.js
        test/unit/notes.txt
        test/x.spec.js
    """
    test_dir = tmp_path / "test"
    (test_dir / "unit").mkdir(parents=True)
    (test_dir / "a.js").write_text("require('metatests');\n")
    (test_dir / "unit" / "b.js").write_text("require('metatests');\n")
    (test_dir / "unit" / "notes.txt").write_text("not a test\n")
    (test_dir / "x.spec.js").write_text("require('metatests');\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
