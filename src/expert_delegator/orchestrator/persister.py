"""
Result Persister - Writes run artifacts to the output directory.

A run directory ends up with either response.md + result.json or
error.json, never both.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..errors import PersistenceError
from ..models import (
	AgentProfile,
	DelegationRequest,
	EffortDecision,
	Failure,
	Mode,
	RunOutcome,
	Success,
)
from ..visualizer import Notifier
from ..visualizer.utils import effort_icon, mode_label

logger = logging.getLogger(__name__)

WORKFLOW_TAG = "7-step-delegation"
RESPONSE_FILE = "response.md"
RESULT_FILE = "result.json"
ERROR_FILE = "error.json"


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResultPersister:
	"""Persists the terminal outcome of a run."""

	def __init__(self, output_dir: Path, model: str, notifier: Optional[Notifier] = None):
		self.output_dir = Path(output_dir)
		self.model = model
		self.notifier = notifier or Notifier()

	def ensure_dir(self) -> Path:
		"""Create the output directory if it does not exist."""
		try:
			self.output_dir.mkdir(parents=True, exist_ok=True)
		except OSError as e:
			raise PersistenceError(f"Cannot create output directory {self.output_dir}: {e}") from e
		return self.output_dir

	def save(
		self,
		outcome: RunOutcome,
		request: DelegationRequest,
		profile: Optional[AgentProfile] = None,
		mode: Optional[Mode] = None,
		effort: Optional[EffortDecision] = None,
		context: Optional[str] = None,
	) -> dict:
		"""
		Write the artifacts for a terminal outcome.

		Returns:
			The structured record that was written

		Raises:
			PersistenceError: If any write fails
		"""
		if isinstance(outcome, Success):
			if profile is None or mode is None or effort is None:
				raise ValueError("Success records need profile, mode and effort")
			return self.save_success(outcome, request, profile, mode, effort, context)
		return self.save_failure(outcome, request)

	def save_success(
		self,
		outcome: Success,
		request: DelegationRequest,
		profile: AgentProfile,
		mode: Mode,
		effort: EffortDecision,
		context: Optional[str],
	) -> dict:
		timestamp = _now_iso()
		record = {
			"workflow": WORKFLOW_TAG,
			"agent": profile.id,
			"agentName": profile.display_name,
			"task": request.task,
			"mode": mode.value,
			"reasoningEffort": effort.tier.value,
			"reasoningEffortSource": effort.source.value,
			"context": context or None,
			"constraints": request.constraints or None,
			"response": outcome.response_text,
			"outputDir": str(self.output_dir),
			"model": self.model,
			"timestamp": timestamp,
			"elapsedMs": outcome.elapsed_ms,
		}
		document = render_response(profile, request.task, mode, effort, outcome.response_text, timestamp, self.model)

		response_path = self.output_dir / RESPONSE_FILE
		result_path = self.output_dir / RESULT_FILE
		self.ensure_dir()
		try:
			response_path.write_text(document, encoding="utf-8")
			result_path.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")
		except OSError as e:
			response_path.unlink(missing_ok=True)
			result_path.unlink(missing_ok=True)
			raise PersistenceError(f"Failed to write results to {self.output_dir}: {e}") from e

		# Reused directory: drop a previous failure so only this run's outcome remains
		(self.output_dir / ERROR_FILE).unlink(missing_ok=True)

		logger.info(f"Saved {RESPONSE_FILE} and {RESULT_FILE} to {self.output_dir}")
		self.notifier.saved(response_path)
		self.notifier.saved(result_path)
		return record

	def save_failure(self, outcome: Failure, request: DelegationRequest) -> dict:
		record = {
			"workflow": WORKFLOW_TAG,
			"agent": request.agent_id,
			"task": request.task,
			"error": outcome.error_message,
			"timestamp": _now_iso(),
		}

		error_path = self.output_dir / ERROR_FILE
		self.ensure_dir()
		try:
			for name in (RESPONSE_FILE, RESULT_FILE):
				(self.output_dir / name).unlink(missing_ok=True)
			error_path.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")
		except OSError as e:
			raise PersistenceError(f"Failed to write {ERROR_FILE} to {self.output_dir}: {e}") from e

		logger.info(f"Saved {ERROR_FILE} to {self.output_dir}")
		self.notifier.saved(error_path)
		return record


def render_response(
	profile: AgentProfile,
	task: str,
	mode: Mode,
	effort: EffortDecision,
	response_text: str,
	timestamp: str,
	model: str,
) -> str:
	"""Render the human-readable response document."""
	lines = [
		f"# {profile.display_name} Response",
		"",
		"## Task",
		task,
		"",
		"## Mode",
		mode_label(mode),
		"",
		"## Reasoning Effort",
		f"{effort_icon(effort.tier)} {effort.tier.value} ({effort.source.value})",
		"",
		"---",
		"",
		response_text.rstrip("\n"),
		"",
		"---",
		f"*Generated: {timestamp}*",
		f"*Model: {model}*",
		f"*Agent: {profile.display_name}*",
		f"*Reasoning effort: {effort.tier.value}*",
		"",
	]
	return "\n".join(lines)
