"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import platformdirs

from .effort import DEFAULT_HIGH_TRIGGERS, DEFAULT_XHIGH_TRIGGERS, EffortPolicy
from .errors import ConfigurationError
from .models import EffortTier

APP_NAME = "expert-delegator"
APP_AUTHOR = "expert-delegator"

DEFAULT_MODEL = "gpt-5.2-codex"
DEFAULT_TIMEOUT_SECONDS = 10 * 60
DEFAULT_XHIGH_MULTIPLIER = 3


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)
	default_output_root: Path = field(init=False)

	# User-configurable
	output_root: Optional[Path] = None
	prompts_dir: Optional[Path] = None
	codex_command: str = "codex"
	model: str = DEFAULT_MODEL
	timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
	xhigh_timeout_multiplier: float = DEFAULT_XHIGH_MULTIPLIER
	progress_interval: float = 0.1
	output_language: str = "English"
	default_effort: str = EffortTier.MEDIUM.value
	xhigh_triggers: list[str] = field(default_factory=lambda: list(DEFAULT_XHIGH_TRIGGERS))
	high_triggers: list[str] = field(default_factory=lambda: list(DEFAULT_HIGH_TRIGGERS))
	kill_on_timeout: bool = True
	require_git_repo: bool = True

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"
		self.default_output_root = self.data_dir / "output"

	@property
	def resolved_output_root(self) -> Path:
		return self.output_root or self.default_output_root

	def effort_policy(self) -> EffortPolicy:
		"""Build the effort policy described by this config."""
		try:
			default_tier = EffortTier(self.default_effort)
		except ValueError:
			raise ConfigurationError(f"Invalid default_effort: {self.default_effort}") from None
		return EffortPolicy(
			xhigh_triggers=tuple(self.xhigh_triggers),
			high_triggers=tuple(self.high_triggers),
			default_tier=default_tier,
		)

	def validate(self) -> None:
		"""
		Check numeric settings and the default effort tier.

		Raises:
			ConfigurationError: On a non-numeric or out-of-range value
		"""
		for name in sorted(_FLOAT_FIELDS):
			value = getattr(self, name)
			if isinstance(value, bool) or not isinstance(value, (int, float)):
				raise ConfigurationError(f"{name} must be a number, got {value!r}")
		if self.timeout_seconds <= 0:
			raise ConfigurationError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
		if self.xhigh_timeout_multiplier <= 1:
			raise ConfigurationError(
				f"xhigh_timeout_multiplier must be greater than 1, got {self.xhigh_timeout_multiplier}"
			)
		if self.progress_interval <= 0:
			raise ConfigurationError(f"progress_interval must be positive, got {self.progress_interval}")
		self.effort_policy()

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


_PATH_FIELDS = {"config_dir", "data_dir", "output_root", "prompts_dir"}
_FLOAT_FIELDS = {"timeout_seconds", "xhigh_timeout_multiplier", "progress_interval"}
_BOOL_FIELDS = {"kill_on_timeout", "require_git_repo"}


def _parse_bool(value: str) -> bool:
	return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: Config) -> Config:
	"""Apply EXPERT_DELEGATOR_* environment variable overrides."""
	env_map = {
		"EXPERT_DELEGATOR_CONFIG_DIR": "config_dir",
		"EXPERT_DELEGATOR_DATA_DIR": "data_dir",
		"EXPERT_DELEGATOR_OUTPUT_ROOT": "output_root",
		"EXPERT_DELEGATOR_PROMPTS_DIR": "prompts_dir",
		"EXPERT_DELEGATOR_CODEX_COMMAND": "codex_command",
		"EXPERT_DELEGATOR_MODEL": "model",
		"EXPERT_DELEGATOR_TIMEOUT": "timeout_seconds",
		"EXPERT_DELEGATOR_REQUIRE_GIT_REPO": "require_git_repo",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if not val:
			continue
		if attr in _PATH_FIELDS:
			setattr(config, attr, Path(val))
		elif attr in _FLOAT_FIELDS:
			try:
				setattr(config, attr, float(val))
			except ValueError:
				raise ConfigurationError(f"{env_key} must be a number, got '{val}'") from None
		elif attr in _BOOL_FIELDS:
			setattr(config, attr, _parse_bool(val))
		else:
			setattr(config, attr, val)
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	try:
		with open(toml_path, "rb") as f:
			data = tomllib.load(f)
	except tomllib.TOMLDecodeError as e:
		raise ConfigurationError(f"config.toml parse error in {toml_path}: {e}") from e

	for key, val in data.items():
		if hasattr(config, key):
			if key in _PATH_FIELDS:
				setattr(config, key, Path(os.path.expanduser(val)))
			else:
				setattr(config, key, val)

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# Config dir may itself be overridden from the environment
	env_config_dir = os.getenv("EXPERT_DELEGATOR_CONFIG_DIR")
	if env_config_dir:
		config.config_dir = Path(env_config_dir)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.validate()
	config.ensure_dirs()
	return config
