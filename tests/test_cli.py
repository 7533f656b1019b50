"""End-to-end tests for the crossrun command line."""

import json

import pytest
from click.testing import CliRunner

from crossrun import __version__
from crossrun.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, args, server_factory):
    return runner.invoke(cli, args, obj={"server_factory": server_factory})


class TestCli:

    def test_no_files(self, runner, project, stub_server):
        result = invoke(runner, [], stub_server)

        assert result.exit_code == 1
        assert "No test files specified" in result.output
        assert "Usage:" in result.output
        assert stub_server.instances == []
        assert not (project / "build").exists()

    def test_successful_run(self, runner, project, stub_server):
        result = invoke(runner, ["test/a.js", "--browsers", "ChromeHeadless"], stub_server)

        assert result.exit_code == 0, result.output
        assert "crossrun finished with code 0" in result.output
        assert len(stub_server.instances) == 1
        assert not (project / "build").exists()

    def test_failing_run(self, runner, project, failing_server):
        result = invoke(runner, ["test", "--browsers", "Firefox"], failing_server)

        assert result.exit_code == 1
        assert "crossrun finished with code 1" in result.output

    def test_unsupported_browser(self, runner, project, stub_server):
        result = invoke(runner, ["test", "--browsers", "Chrome,Netscape"], stub_server)

        assert result.exit_code == 1
        assert "crossrun does not support such browser: Netscape" in result.output
        assert stub_server.instances == []
        assert not (project / "build").exists()

    def test_missing_file(self, runner, project, stub_server):
        result = invoke(runner, ["test/nope", "--browsers", "Firefox"], stub_server)

        assert result.exit_code == 1
        assert "File does not exist: test/nope" in result.output
        assert stub_server.instances == []

    def test_no_browsers(self, runner, project, stub_server):
        result = invoke(runner, ["test"], stub_server)

        assert result.exit_code == 1
        assert "No browser environments specified" in result.output
        assert stub_server.instances == []

    def test_options_reach_server_config(self, runner, project, stub_server):
        result = invoke(runner, [
            "test",
            "--exclude", "*.spec,unit",
            "--browsers", "Firefox",
            "--browsers", "ChromeHeadless",
            "-p", "9100",
            "--log-level", "info",
            "--unresolved-module", "fail",
            "--save-adapter", "out/adapter.js",
        ], stub_server)

        assert result.exit_code == 0, result.output
        config = stub_server.instances[0].config
        assert config["browsers"] == ["Firefox", "ChromeHeadless"]
        assert config["port"] == 9100
        assert config["logLevel"] == "info"
        assert "alias" not in config["bundler"]
        assert "save-adapter" in config["plugins"]

    def test_config_file(self, runner, project, stub_server):
        (project / "crossrun.json").write_text(json.dumps({
            "files": ["test"],
            "browser": {"browsers": ["Firefox"], "port": 9200},
        }))

        result = invoke(runner, ["-c", "crossrun.json"], stub_server)

        assert result.exit_code == 0, result.output
        assert stub_server.instances[0].config["port"] == 9200

    def test_quiet_prints_nothing_on_success(self, runner, project, stub_server):
        result = invoke(
            runner,
            ["test", "--browsers", "Firefox", "--log-level", "quiet"],
            stub_server,
        )

        assert result.exit_code == 0
        assert result.output == ""

    def test_invalid_unresolved_module(self, runner, project, stub_server):
        result = invoke(runner, ["test", "--unresolved-module", "maybe"], stub_server)

        assert result.exit_code == 2
        assert stub_server.instances == []

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ["-h"])

        assert result.exit_code == 0
        assert "--exit-timeout" in result.output
        assert "--karma-config" in result.output
