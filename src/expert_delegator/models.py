"""
Data model for a single delegation run.

Every value here is created once per run and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import ValidationError


class Mode(str, Enum):
	"""Operating mode granted to the external agent."""
	ADVISORY = "advisory"
	IMPLEMENTATION = "implementation"

	@property
	def allows_file_changes(self) -> bool:
		return self is Mode.IMPLEMENTATION


class EffortTier(str, Enum):
	"""Reasoning-effort tier passed to the external agent."""
	MINIMAL = "minimal"
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	XHIGH = "xhigh"


class EffortSource(str, Enum):
	"""Where an effort tier came from."""
	CLI = "cli"
	AUTO_DETECTED = "auto-detected"
	DEFAULT = "default"


AUTO_EFFORT = "auto"
EFFORT_CHOICES = [tier.value for tier in EffortTier] + [AUTO_EFFORT]
MODE_CHOICES = [mode.value for mode in Mode]


def parse_mode(value: Union[str, Mode]) -> Mode:
	"""Convert a mode string to Mode, raising ValidationError when unknown."""
	if isinstance(value, Mode):
		return value
	try:
		return Mode(value)
	except ValueError:
		raise ValidationError(
			f"Invalid mode '{value}'. Expected one of: {', '.join(MODE_CHOICES)}"
		) from None


@dataclass(frozen=True)
class AgentProfile:
	"""A statically configured expert persona."""
	id: str
	display_name: str
	description: str
	prompt_source: str
	default_mode: Mode
	trigger_phrases: tuple[str, ...] = ()


@dataclass(frozen=True)
class EffortDecision:
	"""Resolved reasoning-effort tier and its origin."""
	tier: EffortTier
	source: EffortSource


@dataclass(frozen=True)
class DelegationRequest:
	"""Validated input for one delegation run."""
	agent_id: str
	task: str
	context: Optional[str] = None
	constraints: Optional[str] = None
	mode_override: Optional[Mode] = None
	effort_override: Optional[str] = None
	output_dir: Optional[Path] = None

	def __post_init__(self) -> None:
		if not self.agent_id or not self.agent_id.strip():
			raise ValidationError("An agent id is required")
		if not self.task or not self.task.strip():
			raise ValidationError("A task is required")
		if self.mode_override is not None:
			object.__setattr__(self, "mode_override", parse_mode(self.mode_override))
		if self.effort_override is not None and self.effort_override not in EFFORT_CHOICES:
			raise ValidationError(
				f"Invalid effort '{self.effort_override}'. "
				f"Expected one of: {', '.join(EFFORT_CHOICES)}"
			)
		if self.output_dir is not None:
			object.__setattr__(self, "output_dir", Path(self.output_dir))


@dataclass(frozen=True)
class AssembledPrompt:
	"""Final prompt document and the context value it embedded."""
	text: str
	context: Optional[str] = None


@dataclass(frozen=True)
class Success:
	"""Terminal outcome of a run that produced a response."""
	response_text: str
	elapsed_ms: int

	@property
	def ok(self) -> bool:
		return True


@dataclass(frozen=True)
class Failure:
	"""Terminal outcome of a run that failed after its output directory existed."""
	error_message: str
	elapsed_ms: Optional[int] = None

	@property
	def ok(self) -> bool:
		return False


RunOutcome = Union[Success, Failure]


@dataclass
class RunReport:
	"""What a finished run hands back to its caller."""
	outcome: RunOutcome
	output_dir: Path
	record: dict = field(default_factory=dict)

	@property
	def exit_code(self) -> int:
		return 0 if self.outcome.ok else 1
