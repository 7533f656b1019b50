"""Tests for config loading and the resolution chain."""

import json
import os

import pytest

from crossrun.config import (
    CliOptions,
    RunConfig,
    apply_cli,
    apply_file,
    deep_merge,
    default_config,
    get_log_level,
    is_log_at_least,
    load_config_file,
    normalize_reporter,
    resolve_run_config,
)
from crossrun.errors import (
    ConfigFileError,
    ConfigurationError,
    MissingFileError,
    NoTestFilesError,
    UnsupportedBrowserError,
)


class TestLogLevels:

    def test_ordering(self):
        assert is_log_at_least("debug", "info")
        assert is_log_at_least("warn", "default")
        assert not is_log_at_least("quiet", "default")

    def test_default_is_alias_of_error(self):
        assert is_log_at_least("default", "error")
        assert is_log_at_least("error", "default")

    def test_unknown_level_falls_back_to_default(self):
        assert get_log_level("verbose").name == "default"

    @pytest.mark.parametrize("name,expected", [
        ("tap", "tap"),
        ("tap-mocha", "tap-mocha"),
        ("concise", "concise"),
        ("fancy", "default"),
        (None, "default"),
    ])
    def test_normalize_reporter(self, name, expected):
        assert normalize_reporter(name) == expected


class TestLoadConfigFile:

    def test_json(self, tmp_path):
        path = tmp_path / "crossrun.json"
        path.write_text(json.dumps({"files": ["test"], "logLevel": "info"}))

        assert load_config_file(path) == {"files": ["test"], "logLevel": "info"}

    @pytest.mark.parametrize("suffix", [".yml", ".yaml"])
    def test_yaml(self, tmp_path, suffix):
        path = tmp_path / f"crossrun{suffix}"
        path.write_text("files:\n  - test\nbrowser:\n  port: 9000\n")

        assert load_config_file(path) == {"files": ["test"], "browser": {"port": 9000}}

    def test_unknown_extension_is_empty(self, tmp_path):
        path = tmp_path / "crossrun.toml"
        path.write_text("files = ['test']\n")

        assert load_config_file(path) == {}

    def test_empty_yaml_is_empty(self, tmp_path):
        path = tmp_path / "crossrun.yml"
        path.write_text("")

        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileError, match="Cannot read config file"):
            load_config_file(tmp_path / "missing.json")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "crossrun.json"
        path.write_text("{not json")

        with pytest.raises(ConfigFileError, match="Malformed"):
            load_config_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "crossrun.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigFileError, match="mapping"):
            load_config_file(path)


class TestDeepMerge:

    def test_override_wins(self):
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_are_merged(self):
        base = {"client": {"logLevel": "info", "args": []}, "port": 1}
        merged = deep_merge(base, {"client": {"logLevel": "debug"}})

        assert merged == {"client": {"logLevel": "debug", "args": []}, "port": 1}
        assert base["client"]["logLevel"] == "info"

    def test_lists_are_replaced(self):
        assert deep_merge({"browsers": ["Chrome"]}, {"browsers": ["Firefox"]}) == {
            "browsers": ["Firefox"]
        }


class TestApplyFile:

    def test_defaults(self):
        config = default_config()
        assert config.log_level == "default"
        assert config.reporter == "default"
        assert config.exit_timeout == 5.0
        assert config.unresolved_module == "ignore"
        assert config.browser.port == 9876

    def test_file_values_override_defaults(self):
        config = apply_file(default_config(), {
            "reporter": "concise",
            "runTodo": True,
            "exitTimeout": 2,
            "browser": {"port": "9000", "browsers": ["Firefox"]},
        })

        assert config.reporter == "concise"
        assert config.run_todo is True
        assert config.exit_timeout == 2.0
        assert config.browser.port == 9000
        assert config.browser.browsers == ("Firefox",)

    def test_log_level_falls_back_to_browser_log_level(self):
        config = apply_file(default_config(), {"browser": {"logLevel": "info"}})
        assert config.log_level == "info"

    def test_top_level_log_level_wins_over_browser_log_level(self):
        config = apply_file(
            default_config(),
            {"logLevel": "warn", "browser": {"logLevel": "info"}},
        )
        assert config.log_level == "warn"

    def test_unknown_log_level_falls_back_to_default(self):
        assert apply_file(default_config(), {"logLevel": "chatty"}).log_level == "default"

    def test_invalid_unresolved_module(self):
        with pytest.raises(ConfigurationError, match="unresolved module"):
            apply_file(default_config(), {"unresolvedModule": "maybe"})

    def test_invalid_port(self):
        with pytest.raises(ConfigFileError):
            apply_file(default_config(), {"browser": {"port": "http"}})

    @pytest.mark.parametrize("value,expected", [("false", False), ("TRUE", True), (False, False)])
    def test_run_todo_strings(self, value, expected):
        config = apply_file(RunConfig(run_todo=True), {"runTodo": value})
        assert config.run_todo is expected

    @pytest.mark.parametrize("value", ["no", 1, [True]])
    def test_run_todo_must_be_boolean(self, value):
        with pytest.raises(ConfigFileError, match="'runTodo' must be true or false"):
            apply_file(default_config(), {"runTodo": value})

    def test_list_option_must_be_list(self):
        with pytest.raises(ConfigFileError, match="'files' must be a list"):
            apply_file(default_config(), {"files": {"a": 1}})


class TestApplyCli:

    def test_cli_overrides_file(self):
        config = apply_file(default_config(), {"reporter": "concise", "logLevel": "info"})
        config = apply_cli(config, CliOptions(reporter="tap", log_level="debug"))

        assert config.reporter == "tap"
        assert config.log_level == "debug"

    def test_lists_are_concatenated_without_dedup(self):
        config = apply_file(default_config(), {
            "files": ["test/a.js"],
            "exclude": ["*.spec"],
            "browser": {"browsers": ["Firefox"]},
        })
        config = apply_cli(config, CliOptions(
            files=["test/a.js", "test/unit"],
            exclude=["unit"],
            browsers=["Firefox", "ChromeHeadless"],
        ))

        assert config.files == ("test/a.js", "test/a.js", "test/unit")
        assert config.exclude == ("*.spec", "unit")
        assert config.browser.browsers == ("Firefox", "Firefox", "ChromeHeadless")

    def test_unset_options_keep_file_values(self):
        config = apply_file(default_config(), {
            "exitTimeout": 1,
            "saveAdapter": "out.js",
            "browser": {"port": 9000},
        })
        config = apply_cli(config, CliOptions())

        assert config.exit_timeout == 1.0
        assert config.save_adapter == "out.js"
        assert config.browser.port == 9000

    def test_port_zero_counts_as_unset(self):
        config = apply_cli(default_config(), CliOptions(browser_port=0))
        assert config.browser.port == 9876

    def test_returns_new_config(self):
        config = default_config()
        apply_cli(config, CliOptions(reporter="tap"))
        assert config == RunConfig()


class TestResolveRunConfig:

    def test_full_chain(self, project):
        (project / "crossrun.yml").write_text(
            "files:\n  - test\n"
            "exclude:\n  - '*.spec'\n"
            "browser:\n  browsers:\n    - ChromeHeadless\n"
        )

        config = resolve_run_config(CliOptions(config="crossrun.yml", exclude=["unit"]))

        assert config.files == (os.path.join("test", "a.js"),)
        assert config.browser.server["browsers"] == ["ChromeHeadless"]
        assert config.browser.server["singleRun"] is True

    def test_no_files(self, project):
        with pytest.raises(NoTestFilesError, match="No test files specified"):
            resolve_run_config(CliOptions())

    def test_everything_excluded(self, project):
        with pytest.raises(NoTestFilesError):
            resolve_run_config(CliOptions(files=["test"], exclude=["test"]))

    def test_missing_file(self, project):
        with pytest.raises(MissingFileError):
            resolve_run_config(CliOptions(files=["nope"]))

    def test_unsupported_browser(self, project):
        with pytest.raises(UnsupportedBrowserError, match="Netscape"):
            resolve_run_config(CliOptions(files=["test"], browsers=["Netscape"]))

    def test_server_config_file_overrides(self, project):
        (project / "server.json").write_text(json.dumps({
            "browserNoActivityTimeout": 1000,
            "client": {"logLevel": "debug"},
        }))

        config = resolve_run_config(CliOptions(
            files=["test"],
            browsers=["Firefox"],
            karma_config="server.json",
        ))
        server = config.browser.server

        assert server["browserNoActivityTimeout"] == 1000
        assert server["client"] == {"logLevel": "debug"}
        assert server["browsers"] == ["Firefox"]

    def test_build_dir_is_not_created(self, project):
        resolve_run_config(CliOptions(files=["test"], browsers=["Firefox"]))
        assert not (project / "build").exists()
