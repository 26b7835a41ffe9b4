"""Tests for config schema, YAML loading and env override."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from weatherdash.config.loader import config_hash, load_config
from weatherdash.config.schema import DashboardConfig, RetryConfig
from weatherdash.models.common import ErrorKind


class TestDefaults:
    def test_api_defaults(self):
        config = DashboardConfig()
        assert config.api.timeout_seconds == 40.0
        assert config.api.base_url.startswith("https://")

    def test_forecast_retry_policy(self):
        policy = DashboardConfig().fetch.forecast_retry
        assert policy.max_retries == 2
        assert [policy.delay_for(a) for a in range(2)] == [1.0, 2.0]
        assert policy.retry_on == [ErrorKind.TIMEOUT]

    def test_aggregate_is_fire_once(self):
        assert DashboardConfig().fetch.aggregate_retry.max_retries == 0

    def test_extra_keys_rejected(self):
        with pytest.raises(ValidationError):
            DashboardConfig(**{"api": {"base_url": "x", "retries": 3}})

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            DashboardConfig(**{"api": {"timeout_seconds": 0}})


class TestRetryConfig:
    def test_should_retry_only_listed_kinds(self):
        policy = RetryConfig(max_retries=2)
        assert policy.should_retry(ErrorKind.TIMEOUT, 0)
        assert policy.should_retry(ErrorKind.TIMEOUT, 1)
        assert not policy.should_retry(ErrorKind.TIMEOUT, 2)
        assert not policy.should_retry(ErrorKind.NOT_FOUND, 0)


class TestLoadConfig:
    def test_no_path_uses_defaults(self, monkeypatch):
        monkeypatch.delenv("WEATHERDASH_API_BASE_URL", raising=False)
        assert load_config() == DashboardConfig()

    def test_load_from_yaml(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.delenv("WEATHERDASH_API_BASE_URL", raising=False)
        config = load_config(config_yaml_path)
        assert config.api.base_url == "https://yaml.example.com/api"
        assert config.api.timeout_seconds == 15
        assert config.fetch.aggregate_retry.max_retries == 1
        assert config.fetch.forecast_retry.max_retries == 2

    def test_empty_yaml(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("WEATHERDASH_API_BASE_URL", raising=False)
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == DashboardConfig()

    def test_env_overrides_base_url(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.setenv("WEATHERDASH_API_BASE_URL", "http://localhost:8000/api")
        config = load_config(config_yaml_path)
        assert config.api.base_url == "http://localhost:8000/api"
        assert config.api.timeout_seconds == 15

    def test_blank_env_ignored(self, monkeypatch):
        monkeypatch.setenv("WEATHERDASH_API_BASE_URL", "  ")
        assert load_config().api.base_url == DashboardConfig().api.base_url


class TestConfigHash:
    def test_deterministic(self):
        assert config_hash(DashboardConfig()) == config_hash(DashboardConfig())

    def test_different_config_different_hash(self):
        other = DashboardConfig(**{"api": {"timeout_seconds": 10}})
        assert config_hash(DashboardConfig()) != config_hash(other)
