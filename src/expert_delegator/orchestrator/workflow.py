"""
Delegation Workflow - Runs one request through the 7-step workflow.

Steps:
1. Expert identification (registry lookup)
2. Prompt loading
3. Mode selection, then effort detection
4. User notification
5. Prompt construction
6. Expert invocation
7. Response processing (persistence)

Errors before the output directory exists are raised to the caller.
Errors after it exists are persisted as error.json and returned as Failure.
"""

import logging
import re
import time
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from ..agents import AgentRegistry, PromptLoader, default_registry
from ..assembler import PromptAssembler
from ..config import Config
from ..effort import EffortClassifier
from ..models import (
	AgentProfile,
	DelegationRequest,
	EffortSource,
	Failure,
	RunReport,
	Success,
)
from ..visualizer import Notifier
from .invoker import AgentRunner, CodexRunner, ProcessInvoker
from .persister import ERROR_FILE, RESPONSE_FILE, RESULT_FILE, ResultPersister

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]")
TASK_PREFIX_LENGTH = 20


class RunState(str, Enum):
	"""
	Position of a run in the workflow.

	INVOKED marks that the agent was invoked, whether or not it answered;
	a failed invocation goes INVOKED -> PERSISTED_FAILURE.
	"""
	START = "start"
	IDENTIFIED = "identified"
	PROMPT_LOADED = "prompt_loaded"
	MODE_SELECTED = "mode_selected"
	EFFORT_DETECTED = "effort_detected"
	NOTIFIED = "notified"
	PROMPT_ASSEMBLED = "prompt_assembled"
	INVOKED = "invoked"
	PERSISTED_SUCCESS = "persisted_success"
	PERSISTED_FAILURE = "persisted_failure"
	END = "end"


def sanitize_task(task: str, length: int = TASK_PREFIX_LENGTH) -> str:
	"""Replace path-unsafe characters with '-' and keep a short prefix."""
	return _UNSAFE_CHARS.sub("-", task)[:length]


def default_output_dir(
	output_root: Path,
	agent_id: str,
	task: str,
	today: Optional[date] = None,
) -> Path:
	"""Deterministic run directory for (agent, date, task prefix)."""
	today = today or datetime.now(timezone.utc).date()
	return Path(output_root) / f"{agent_id}-{today.strftime('%Y%m%d')}-{sanitize_task(task)}"


def _holds_outcome(path: Path) -> bool:
	return any((path / name).exists() for name in (RESPONSE_FILE, RESULT_FILE, ERROR_FILE))


def unused_output_dir(path: Path) -> Path:
	"""
	Return path, or the first '<path>-N' sibling (N >= 2) without run artifacts.

	Default directories collide when tasks share a prefix on the same day;
	a finished run's artifacts are never overwritten through a default path.
	"""
	candidate = path
	suffix = 2
	while _holds_outcome(candidate):
		candidate = path.with_name(f"{path.name}-{suffix}")
		suffix += 1
	return candidate


class Orchestrator:
	"""
	Owns exactly one delegation run.

	Collaborators are injected; build a fresh instance per run.
	"""

	def __init__(
		self,
		registry: AgentRegistry,
		prompt_loader: PromptLoader,
		classifier: EffortClassifier,
		assembler: PromptAssembler,
		invoker: ProcessInvoker,
		output_root: Path,
		notifier: Optional[Notifier] = None,
	):
		self.registry = registry
		self.prompt_loader = prompt_loader
		self.classifier = classifier
		self.assembler = assembler
		self.invoker = invoker
		self.output_root = Path(output_root)
		self.notifier = notifier or Notifier()

		self.state = RunState.START
		self.history: list[RunState] = [RunState.START]
		self.profile: Optional[AgentProfile] = None

	@classmethod
	def from_config(
		cls,
		config: Config,
		notifier: Optional[Notifier] = None,
		runner: Optional[AgentRunner] = None,
		registry: Optional[AgentRegistry] = None,
	) -> "Orchestrator":
		"""Wire an orchestrator from configuration."""
		config.validate()
		notifier = notifier or Notifier()
		runner = runner or CodexRunner(
			command=config.codex_command,
			kill_on_timeout=config.kill_on_timeout,
		)
		invoker = ProcessInvoker(
			runner=runner,
			model=config.model,
			timeout_seconds=config.timeout_seconds,
			xhigh_timeout_multiplier=config.xhigh_timeout_multiplier,
			progress_interval=config.progress_interval,
			notifier=notifier,
		)
		return cls(
			registry=registry or default_registry(),
			prompt_loader=PromptLoader(config.prompts_dir),
			classifier=EffortClassifier(config.effort_policy()),
			assembler=PromptAssembler(output_language=config.output_language),
			invoker=invoker,
			output_root=config.resolved_output_root,
			notifier=notifier,
		)

	def _advance(self, state: RunState) -> None:
		logger.debug(f"Run state: {self.state.value} -> {state.value}")
		self.state = state
		self.history.append(state)

	def resolve_output_dir(self, request: DelegationRequest) -> Path:
		"""An explicit directory is reused as-is; a default one never clobbers a finished run."""
		if request.output_dir is not None:
			return request.output_dir.resolve()
		path = default_output_dir(self.output_root, request.agent_id, request.task).resolve()
		return unused_output_dir(path)

	async def run(self, request: DelegationRequest) -> RunReport:
		"""
		Run the workflow for one request.

		Returns:
			RunReport with the terminal outcome and the record written

		Raises:
			ValidationError: Unknown agent (nothing is written)
			PersistenceError: If no diagnostic artifact could be written
		"""
		if self.state is not RunState.START:
			raise RuntimeError("Orchestrator instances run exactly once")

		# Step 1: Expert Identification
		try:
			profile = self.registry.lookup(request.agent_id)
		except Exception:
			self._advance(RunState.END)
			raise
		self.profile = profile
		self._advance(RunState.IDENTIFIED)
		self.notifier.step("Step 1: Expert Identification", [
			f"Selected: {profile.display_name}",
			f"Triggers: {', '.join(profile.trigger_phrases)}",
		])

		output_dir = self.resolve_output_dir(request)
		persister = ResultPersister(output_dir, self.invoker.model, self.notifier)
		try:
			persister.ensure_dir()
		except Exception:
			self._advance(RunState.END)
			raise

		start = time.monotonic()
		try:
			report = await self._execute(request, profile, output_dir, persister)
		except Exception as e:
			logger.error(f"Delegation to {profile.id} failed: {e}")
			elapsed_ms = getattr(e, "elapsed_ms", None)
			if elapsed_ms is None:
				elapsed_ms = int((time.monotonic() - start) * 1000)
			failure = Failure(error_message=str(e) or type(e).__name__, elapsed_ms=elapsed_ms)
			self.notifier.failed(failure.error_message)
			try:
				record = persister.save_failure(failure, request)
			except Exception:
				self._advance(RunState.END)
				raise
			self._advance(RunState.PERSISTED_FAILURE)
			self._advance(RunState.END)
			return RunReport(outcome=failure, output_dir=output_dir, record=record)

		self._advance(RunState.END)
		self.notifier.completed()
		return report

	async def _execute(
		self,
		request: DelegationRequest,
		profile: AgentProfile,
		output_dir: Path,
		persister: ResultPersister,
	) -> RunReport:
		# Step 2: Prompt Loading
		base_prompt = self.prompt_loader.load(profile)
		self._advance(RunState.PROMPT_LOADED)
		self.notifier.step("Step 2: Prompt Loading", [
			f"Loaded: {profile.prompt_source}",
			f"Size: {len(base_prompt)} chars",
		])

		# Step 3: Mode Selection
		mode = request.mode_override or profile.default_mode
		self._advance(RunState.MODE_SELECTED)
		self.notifier.step("Step 3: Mode Selection", [f"Mode: {mode.value}"])

		# Step 3.5: Reasoning Effort Detection
		effort = self.classifier.classify(request.task, request.effort_override)
		self._advance(RunState.EFFORT_DETECTED)
		details = [f"Tier: {effort.tier.value}", f"Source: {effort.source.value}"]
		trigger = self.classifier.matched_trigger(request.task)
		if trigger and effort.source is EffortSource.AUTO_DETECTED:
			details.append(f"Trigger: {trigger}")
		self.notifier.step("Step 3.5: Reasoning Effort Detection", details)

		# Step 4: User Notification
		self.notifier.announce(profile, request, mode, effort, output_dir)
		self._advance(RunState.NOTIFIED)

		# Step 5: Prompt Construction
		assembled = self.assembler.build(profile, base_prompt, request, mode)
		self._advance(RunState.PROMPT_ASSEMBLED)
		self.notifier.step("Step 5: Prompt Construction", [
			f"Sections: {', '.join(self.assembler.section_names())}",
			f"Total size: {len(assembled.text)} chars",
		])

		# Step 6: Expert Invocation
		try:
			result = await self.invoker.invoke(assembled.text, mode, effort, output_dir)
		finally:
			self._advance(RunState.INVOKED)

		# Step 7: Response Processing
		self.notifier.step("Step 7: Response Processing")
		outcome = Success(response_text=result.response_text, elapsed_ms=result.elapsed_ms)
		record = persister.save(
			outcome,
			request,
			profile=profile,
			mode=mode,
			effort=effort,
			context=assembled.context,
		)
		self._advance(RunState.PERSISTED_SUCCESS)
		return RunReport(outcome=outcome, output_dir=output_dir, record=record)
