"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from expert_delegator.config import DEFAULT_MODEL, Config, _apply_env_overrides, _apply_toml, load_config
from expert_delegator.effort import DEFAULT_XHIGH_TRIGGERS
from expert_delegator.errors import ConfigurationError
from expert_delegator.models import EffortTier


def test_config_defaults():
	"""Config should have sensible defaults."""
	config = Config()
	assert config.config_dir.is_absolute()
	assert config.data_dir.is_absolute()
	assert config.log_dir == config.data_dir / "logs"
	assert config.resolved_output_root == config.data_dir / "output"
	assert config.model == DEFAULT_MODEL
	assert config.timeout_seconds == 600
	assert config.xhigh_timeout_multiplier == 3
	assert config.codex_command == "codex"
	assert config.kill_on_timeout is True
	assert config.require_git_repo is True


def test_config_env_overrides():
	"""Environment variables should override defaults."""
	config = Config()
	with patch.dict(os.environ, {
		"EXPERT_DELEGATOR_DATA_DIR": "/tmp/test-data",
		"EXPERT_DELEGATOR_CONFIG_DIR": "/tmp/test-config",
		"EXPERT_DELEGATOR_MODEL": "gpt-test",
		"EXPERT_DELEGATOR_TIMEOUT": "30",
		"EXPERT_DELEGATOR_REQUIRE_GIT_REPO": "false",
	}):
		config = _apply_env_overrides(config)
		assert config.data_dir == Path("/tmp/test-data")
		assert config.config_dir == Path("/tmp/test-config")
		# Derived paths should be recomputed
		assert config.log_dir == Path("/tmp/test-data/logs")
		assert config.model == "gpt-test"
		assert config.timeout_seconds == 30.0
		assert config.require_git_repo is False


def test_config_env_timeout_must_be_numeric():
	with patch.dict(os.environ, {"EXPERT_DELEGATOR_TIMEOUT": "ten minutes"}):
		with pytest.raises(ConfigurationError, match="EXPERT_DELEGATOR_TIMEOUT"):
			_apply_env_overrides(Config())


def test_output_root_override(tmp_path: Path):
	config = Config(data_dir=tmp_path, output_root=tmp_path / "runs")
	assert config.resolved_output_root == tmp_path / "runs"


def test_config_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
	)
	assert not config.config_dir.exists()
	assert not config.data_dir.exists()

	config.ensure_dirs()

	assert config.config_dir.exists()
	assert config.data_dir.exists()
	assert config.log_dir.exists()


def test_load_config_creates_dirs(tmp_path: Path):
	"""load_config should create directories."""
	with patch.dict(os.environ, {
		"EXPERT_DELEGATOR_DATA_DIR": str(tmp_path / "data"),
		"EXPERT_DELEGATOR_CONFIG_DIR": str(tmp_path / "config"),
	}):
		config = load_config()
		assert config.data_dir.exists()
		assert config.config_dir.exists()


class TestToml:
	"""config.toml handling."""

	def test_toml_values_applied(self, tmp_path: Path):
		(tmp_path / "config.toml").write_text(
			'model = "gpt-from-toml"\n'
			"timeout_seconds = 120\n"
			'output_language = "Japanese"\n'
			'default_effort = "low"\n'
			'high_triggers = ["deep dive"]\n',
			encoding="utf-8",
		)
		config = _apply_toml(Config(config_dir=tmp_path, data_dir=tmp_path / "data"))
		assert config.model == "gpt-from-toml"
		assert config.timeout_seconds == 120
		assert config.output_language == "Japanese"

		policy = config.effort_policy()
		assert policy.default_tier is EffortTier.LOW
		assert policy.high_triggers == ("deep dive",)
		assert policy.xhigh_triggers == DEFAULT_XHIGH_TRIGGERS

	def test_unknown_keys_ignored(self, tmp_path: Path):
		(tmp_path / "config.toml").write_text('not_a_setting = 1\n', encoding="utf-8")
		config = _apply_toml(Config(config_dir=tmp_path, data_dir=tmp_path / "data"))
		assert not hasattr(config, "not_a_setting")

	def test_invalid_toml(self, tmp_path: Path):
		(tmp_path / "config.toml").write_text("model = [unclosed\n", encoding="utf-8")
		with pytest.raises(ConfigurationError, match="config.toml"):
			_apply_toml(Config(config_dir=tmp_path, data_dir=tmp_path / "data"))

	def test_env_beats_toml(self, tmp_path: Path):
		config_dir = tmp_path / "config"
		config_dir.mkdir()
		(config_dir / "config.toml").write_text('model = "gpt-from-toml"\n', encoding="utf-8")
		with patch.dict(os.environ, {
			"EXPERT_DELEGATOR_CONFIG_DIR": str(config_dir),
			"EXPERT_DELEGATOR_DATA_DIR": str(tmp_path / "data"),
			"EXPERT_DELEGATOR_MODEL": "gpt-from-env",
		}):
			assert load_config().model == "gpt-from-env"


class TestValidate:
	"""Numeric settings are checked before any run."""

	def test_defaults_are_valid(self):
		Config().validate()

	def test_toml_string_timeout_rejected(self, tmp_path: Path):
		config_dir = tmp_path / "config"
		config_dir.mkdir()
		(config_dir / "config.toml").write_text('timeout_seconds = "600"\n', encoding="utf-8")
		with patch.dict(os.environ, {
			"EXPERT_DELEGATOR_CONFIG_DIR": str(config_dir),
			"EXPERT_DELEGATOR_DATA_DIR": str(tmp_path / "data"),
		}):
			with pytest.raises(ConfigurationError, match="timeout_seconds must be a number"):
				load_config()

	def test_multiplier_must_exceed_one(self):
		with pytest.raises(ConfigurationError, match="xhigh_timeout_multiplier"):
			Config(xhigh_timeout_multiplier=1).validate()

	def test_timeout_must_be_positive(self):
		with pytest.raises(ConfigurationError, match="timeout_seconds must be positive"):
			Config(timeout_seconds=0).validate()

	def test_bool_is_not_a_number(self):
		with pytest.raises(ConfigurationError, match="progress_interval"):
			Config(progress_interval=True).validate()


def test_invalid_default_effort():
	config = Config(default_effort="extreme")
	with pytest.raises(ConfigurationError, match="default_effort"):
		config.effort_policy()
