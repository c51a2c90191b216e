"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py
"""
import json

import pytest

from core.config.runtime import (
    DEFAULT_PROGRAM_ID,
    RuntimeConfig,
    get_default_config,
    load_runtime_config,
    set_default_config,
)


class TestDefaults:

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.distributor.program_id == DEFAULT_PROGRAM_ID
        assert config.distributor.default_capacity == 16
        assert config.distributor.verify_before_submit is True
        assert config.logging.level == "INFO"

    def test_to_dict_round_trip(self):
        config = RuntimeConfig()
        assert RuntimeConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()


class TestEnvOverrides:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DISTRIBUTOR_DEFAULT_CAPACITY", "64")
        monkeypatch.setenv("DISTRIBUTOR_VERIFY_BEFORE_SUBMIT", "false")
        monkeypatch.setenv("DISTRIBUTOR_LOG_LEVEL", "DEBUG")

        config = RuntimeConfig.from_env()

        assert config.distributor.default_capacity == 64
        assert config.distributor.verify_before_submit is False
        assert config.logging.level == "DEBUG"

    def test_env_beats_file(self, monkeypatch, tmp_path):
        path = tmp_path / "distributor.json"
        path.write_text(json.dumps({"distributor": {"default_capacity": 32}, "log_level": "WARNING"}))
        monkeypatch.setenv("DISTRIBUTOR_DEFAULT_CAPACITY", "48")

        config = load_runtime_config(path)

        assert config.distributor.default_capacity == 48
        assert config.logging.level == "WARNING"

    def test_with_env_overrides_copies(self, monkeypatch):
        base = RuntimeConfig()
        monkeypatch.setenv("DISTRIBUTOR_API_PORT", "9001")
        updated = base.with_env_overrides()
        assert updated.api.port == 9001
        assert base.api.port == 8000


class TestFiles:

    def test_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("distributor:\n  token_decimals: 6\nlogging:\n  level: ERROR\n")

        config = load_runtime_config(path)

        assert config.distributor.token_decimals == 6
        assert config.logging.level == "ERROR"

    def test_search_in_cwd(self, monkeypatch, tmp_path):
        (tmp_path / "distributor.json").write_text(json.dumps({"api": {"port": 7000}}))
        monkeypatch.chdir(tmp_path)
        assert load_runtime_config().api.port == 7000

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_runtime_config(tmp_path / "absent.json")


class TestDefaultConfig:

    def test_set_and_get(self):
        previous = get_default_config()
        try:
            config = RuntimeConfig()
            config.distributor.token_decimals = 2
            set_default_config(config)
            assert get_default_config().distributor.token_decimals == 2
        finally:
            set_default_config(previous)
