"""Tests for config module."""

import pytest

from loadreplay.config import (
    Config,
    ConfigError,
    _parse_bool,
    load_config,
    load_yaml_config,
    parse_filters,
    validate,
)


class TestParseBool:
    def test_true_values(self):
        for val in ("true", "True", "TRUE", "1", "yes", "YES", True):
            assert _parse_bool(val) is True

    def test_false_values(self):
        for val in ("false", "False", "0", "no", "", False):
            assert _parse_bool(val) is False

    def test_whitespace_stripped(self):
        assert _parse_bool("  true  ") is True


class TestParseFilters:
    def test_comma_separated(self):
        assert parse_filters("/admin,/health") == ("/admin", "/health")

    def test_blank_entries_dropped(self):
        assert parse_filters("") == ()
        assert parse_filters(" /a , ,/b,") == ("/a", "/b")

    def test_list_input(self):
        assert parse_filters(["/a", " /b "]) == ("/a", "/b")

    def test_none(self):
        assert parse_filters(None) == ()


class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.log_file == ""
        assert cfg.concurrency == 2
        assert cfg.filters == ()
        assert cfg.report_interval == 1
        assert cfg.base_url == ""
        assert cfg.keep_cookies is False
        assert cfg.verbose is False
        assert cfg.suppress_errors is False
        assert cfg.repeat is False
        assert cfg.request_timeout == 10.0

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.concurrency = 8

    def test_pool_size_floor(self):
        assert Config(concurrency=2).pool_size == 100
        assert Config(concurrency=250).pool_size == 250


class TestLoadConfigCLI:
    def test_long_flags(self):
        cfg = load_config([
            "--log-file", "/tmp/access.log",
            "--concurrency", "8",
            "--filters", "/admin,/health",
            "--report-interval", "5",
            "--base-url", "http://svc",
            "--keep-cookies",
            "--verbose",
            "--suppress-errors",
            "--repeat",
            "--timeout", "2.5",
        ])
        assert cfg.log_file == "/tmp/access.log"
        assert cfg.concurrency == 8
        assert cfg.filters == ("/admin", "/health")
        assert cfg.report_interval == 5
        assert cfg.base_url == "http://svc"
        assert cfg.keep_cookies is True
        assert cfg.verbose is True
        assert cfg.suppress_errors is True
        assert cfg.repeat is True
        assert cfg.request_timeout == 2.5

    def test_short_flags(self):
        cfg = load_config(["-l", "a.log", "-c", "4", "-f", "/x", "-r", "2", "-b", "http://h", "-k", "-rp"])
        assert cfg.log_file == "a.log"
        assert cfg.concurrency == 4
        assert cfg.filters == ("/x",)
        assert cfg.report_interval == 2
        assert cfg.base_url == "http://h"
        assert cfg.keep_cookies is True
        assert cfg.repeat is True
        assert cfg.verbose is False

    def test_defaults_with_only_log_file(self):
        cfg = load_config(["-l", "a.log"])
        assert cfg == Config(log_file="a.log")

    def test_missing_log_file(self):
        with pytest.raises(ConfigError):
            load_config([])


class TestLoadConfigEnv:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("REPLAY_LOG_FILE", "/env/access.log")
        monkeypatch.setenv("REPLAY_CONCURRENCY", "16")
        monkeypatch.setenv("REPLAY_FILTERS", "/a,/b")
        monkeypatch.setenv("REPLAY_KEEP_COOKIES", "yes")
        cfg = load_config([])
        assert cfg.log_file == "/env/access.log"
        assert cfg.concurrency == 16
        assert cfg.filters == ("/a", "/b")
        assert cfg.keep_cookies is True

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("REPLAY_LOG_FILE", "/env/access.log")
        monkeypatch.setenv("REPLAY_CONCURRENCY", "16")
        cfg = load_config(["-c", "3"])
        assert cfg.log_file == "/env/access.log"
        assert cfg.concurrency == 3

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("REPLAY_LOG_FILE", "a.log")
        monkeypatch.setenv("REPLAY_CONCURRENCY", "many")
        with pytest.raises(ConfigError):
            load_config([])


class TestYamlConfig:
    def test_yaml_file(self, tmp_path):
        f = tmp_path / "replay.yml"
        f.write_text(
            "log_file: /yaml/access.log\n"
            "concurrency: 6\n"
            "filters:\n  - /admin\n  - /static\n"
            "keep_cookies: true\n"
        )
        cfg = load_config(["--config", str(f)])
        assert cfg.log_file == "/yaml/access.log"
        assert cfg.concurrency == 6
        assert cfg.filters == ("/admin", "/static")
        assert cfg.keep_cookies is True

    def test_cli_overrides_yaml(self, tmp_path, monkeypatch):
        f = tmp_path / "replay.yml"
        f.write_text("log_file: /yaml/access.log\nconcurrency: 6\n")
        monkeypatch.setenv("REPLAY_CONCURRENCY", "7")
        cfg = load_config(["--config", str(f), "-l", "cli.log"])
        assert cfg.log_file == "cli.log"
        assert cfg.concurrency == 7

    def test_missing_yaml_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "nope.yml")) == {}

    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_non_mapping(self, tmp_path):
        f = tmp_path / "bad.yml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_yaml_config(str(f))


class TestValidate:
    def test_valid(self):
        validate(Config(log_file="a.log"))

    def test_zero_concurrency(self):
        with pytest.raises(ConfigError):
            validate(Config(log_file="a.log", concurrency=0))

    def test_zero_interval(self):
        with pytest.raises(ConfigError):
            validate(Config(log_file="a.log", report_interval=0))

    def test_negative_timeout(self):
        with pytest.raises(ConfigError):
            validate(Config(log_file="a.log", request_timeout=-1))
