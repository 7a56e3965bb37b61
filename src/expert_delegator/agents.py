"""
Expert agent catalog and prompt loading.

Agents are selected by explicit id. Trigger phrases are kept on each
profile for listings only; nothing here matches them against tasks.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .errors import ConfigurationError, UnknownAgentError
from .models import AgentProfile, Mode

logger = logging.getLogger(__name__)

BUNDLED_PROMPTS_DIR = Path(__file__).parent / "prompts"


# Predefined profiles

ARCHITECT = AgentProfile(
	id="architect",
	display_name="Architect",
	description="System design expert",
	prompt_source="architect.md",
	default_mode=Mode.IMPLEMENTATION,
	trigger_phrases=("design", "architecture", "structure", "technology selection", "DB design", "API design"),
)

PLAN_REVIEWER = AgentProfile(
	id="plan-reviewer",
	display_name="Plan Reviewer",
	description="Implementation plan validation expert",
	prompt_source="plan-reviewer.md",
	default_mode=Mode.ADVISORY,
	trigger_phrases=("plan", "review", "validate", "check"),
)

SCOPE_ANALYST = AgentProfile(
	id="scope-analyst",
	display_name="Scope Analyst",
	description="Scope and requirements analysis expert",
	prompt_source="scope-analyst.md",
	default_mode=Mode.ADVISORY,
	trigger_phrases=("scope", "requirements", "ambiguous", "improve", "consider"),
)

CODE_REVIEWER = AgentProfile(
	id="code-reviewer",
	display_name="Code Reviewer",
	description="Code review expert",
	prompt_source="code-reviewer.md",
	default_mode=Mode.ADVISORY,
	trigger_phrases=("code review", "PR review", "code check"),
)

SECURITY_ANALYST = AgentProfile(
	id="security-analyst",
	display_name="Security Analyst",
	description="Security analysis expert",
	prompt_source="security-analyst.md",
	default_mode=Mode.ADVISORY,
	trigger_phrases=("security", "vulnerability", "authentication", "authorization", "OWASP"),
)

DEFAULT_PROFILES: tuple[AgentProfile, ...] = (
	ARCHITECT,
	PLAN_REVIEWER,
	SCOPE_ANALYST,
	CODE_REVIEWER,
	SECURITY_ANALYST,
)


class AgentRegistry:
	"""Read-only catalog of agent profiles keyed by id."""

	def __init__(self, profiles: Iterable[AgentProfile]):
		self._profiles: dict[str, AgentProfile] = {}
		for profile in profiles:
			if profile.id in self._profiles:
				raise ValueError(f"Duplicate agent id: {profile.id}")
			self._profiles[profile.id] = profile

	def lookup(self, agent_id: str) -> AgentProfile:
		"""Return the profile for agent_id (case-sensitive exact match)."""
		profile = self._profiles.get(agent_id)
		if profile is None:
			raise UnknownAgentError(agent_id, self.ids())
		return profile

	def ids(self) -> list[str]:
		return list(self._profiles)

	def profiles(self) -> list[AgentProfile]:
		return list(self._profiles.values())

	def __contains__(self, agent_id: object) -> bool:
		return agent_id in self._profiles

	def __iter__(self) -> Iterator[AgentProfile]:
		return iter(self._profiles.values())

	def __len__(self) -> int:
		return len(self._profiles)


def default_registry() -> AgentRegistry:
	"""Build the registry of built-in expert agents."""
	return AgentRegistry(DEFAULT_PROFILES)


class PromptLoader:
	"""Resolves a profile's prompt source to its text."""

	def __init__(self, prompts_dir: Optional[Path] = None):
		self.prompts_dir = Path(prompts_dir) if prompts_dir else BUNDLED_PROMPTS_DIR

	def resolve(self, profile: AgentProfile) -> Path:
		return (self.prompts_dir / profile.prompt_source).resolve()

	def load(self, profile: AgentProfile) -> str:
		"""
		Read the base prompt for a profile.

		Raises:
			ConfigurationError: If the prompt file is missing or unreadable
		"""
		path = self.resolve(profile)
		if not path.is_file():
			raise ConfigurationError(f"Prompt file not found: {path}")
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as e:
			raise ConfigurationError(f"Prompt file unreadable: {path} ({e})") from e
		logger.debug(f"Loaded prompt for {profile.id} from {path} ({len(text)} chars)")
		return text
