"""Unit tests for configuration loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from config import ConfigError, build_config, env_values, load_config, load_yaml_config

BASE = dict(server="irc.example.org", port=6667, nick="logbot", channel="test")


class TestBuildConfig:
    def test_minimal(self):
        cfg = build_config(BASE)
        assert cfg.server == "irc.example.org"
        assert cfg.log_dir == "."
        assert cfg.history_max == 100
        assert cfg.rotation_interval == 3600
        assert cfg.admins == frozenset()

    @pytest.mark.parametrize("missing", ["server", "port", "nick", "channel"])
    def test_missing_required(self, missing: str):
        values = {k: v for k, v in BASE.items() if k != missing}
        with pytest.raises(ConfigError, match=missing):
            build_config(values)

    def test_later_layers_win_and_none_is_skipped(self):
        cfg = build_config(BASE, {"nick": "other", "log_dir": "/tmp/irc"}, {"nick": None, "log_dir": "-"})
        assert cfg.nick == "other"
        assert cfg.log_dir == "-"

    def test_invalid_port(self):
        with pytest.raises(ConfigError):
            build_config({**BASE, "port": "not-a-port"})


class TestEnvValues:
    def test_reads_prefixed_variables(self):
        values = env_values({
            "IRCLOG_SERVER": "irc.example.org",
            "IRCLOG_PORT": "6697",
            "IRCLOG_ADMINS": "alice, bob",
            "UNRELATED": "x",
        })
        assert values == {"server": "irc.example.org", "port": "6697", "admins": "alice, bob"}

    def test_blank_values_ignored(self):
        assert env_values({"IRCLOG_NICK": "  "}) == {}


class TestYaml:
    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "irclog.yaml"
        path.write_text(
            "server: irc.example.org\nport: 6667\nnick: logbot\nchannel: '#test'\nadmins: [alice, bob]\n",
            encoding="utf-8",
        )
        data = load_yaml_config(path)
        cfg = build_config(data)
        assert cfg.channel == "test"
        assert cfg.admins == frozenset({"alice", "bob"})

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_yaml_config(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_yaml_config(path)


class TestLoadConfig:
    def test_precedence_file_env_cli(self, tmp_path: Path):
        path = tmp_path / "irclog.yaml"
        path.write_text("server: file.example\nport: 1111\nnick: filebot\nchannel: filechan\n", encoding="utf-8")
        cfg = load_config(
            {"nick": "clibot", "port": None},
            config_path=path,
            environ={"IRCLOG_PORT": "2222", "IRCLOG_NICK": "envbot"},
        )
        assert cfg.server == "file.example"
        assert cfg.port == 2222
        assert cfg.nick == "clibot"
        assert cfg.channel == "filechan"
