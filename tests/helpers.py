"""Shared fakes and builders for expert-delegator tests."""

import asyncio
from pathlib import Path
from typing import Optional

from expert_delegator.agents import PromptLoader, default_registry
from expert_delegator.assembler import PromptAssembler
from expert_delegator.effort import EffortClassifier
from expert_delegator.errors import ProcessError
from expert_delegator.orchestrator import AgentRunner, Orchestrator, ProcessInvoker, RunOptions
from expert_delegator.visualizer import Notifier

TEST_MODEL = "test-model"


class EchoRunner(AgentRunner):
	"""Returns a fixed response and records what it was asked to run."""

	def __init__(self, response: str = "## Findings\nLooks good."):
		self.response = response
		self.calls: list[tuple[str, RunOptions]] = []

	async def run(self, prompt: str, options: RunOptions) -> str:
		self.calls.append((prompt, options))
		return self.response


class FailingRunner(AgentRunner):
	"""Fails like an agent that exited nonzero."""

	def __init__(self, message: str = "codex exec failed: not logged in"):
		self.message = message

	async def run(self, prompt: str, options: RunOptions) -> str:
		raise ProcessError(self.message, returncode=1)


class HangingRunner(AgentRunner):
	"""Never finishes on its own; records whether it was cancelled."""

	def __init__(self):
		self.cancelled = False

	async def run(self, prompt: str, options: RunOptions) -> str:
		try:
			await asyncio.sleep(3600)
		except asyncio.CancelledError:
			self.cancelled = True
			raise
		return ""


class TempFileSnapshotRunner(AgentRunner):
	"""Records which prompt files exist while the agent is running."""

	def __init__(self, output_dir: Path):
		self.output_dir = output_dir
		self.seen: list[str] = []

	async def run(self, prompt: str, options: RunOptions) -> str:
		self.seen = sorted(p.name for p in self.output_dir.iterdir())
		return "snapshot"


class RecordingNotifier(Notifier):
	"""Captures notifier events by name."""

	def __init__(self):
		self.events: list[str] = []
		self.ticks = 0

	def step(self, title, details=()):
		self.events.append(f"step:{title}")

	def announce(self, profile, request, mode, effort, output_dir):
		self.events.append("announce")

	def invocation_started(self, model, effort, mode, timeout):
		self.events.append("invocation_started")

	def tick(self, elapsed_seconds):
		self.ticks += 1

	def invocation_finished(self, elapsed_ms, effort):
		self.events.append("invocation_finished")

	def invocation_failed(self, message):
		self.events.append("invocation_failed")

	def saved(self, path):
		self.events.append(f"saved:{path.name}")

	def completed(self):
		self.events.append("completed")

	def failed(self, message):
		self.events.append("failed")


def make_invoker(
	runner: AgentRunner,
	timeout_seconds: float = 5,
	progress_interval: float = 0.01,
	notifier: Optional[Notifier] = None,
) -> ProcessInvoker:
	return ProcessInvoker(
		runner=runner,
		model=TEST_MODEL,
		timeout_seconds=timeout_seconds,
		xhigh_timeout_multiplier=3,
		progress_interval=progress_interval,
		notifier=notifier,
	)


def make_orchestrator(
	output_root: Path,
	runner: AgentRunner,
	prompts_dir: Optional[Path] = None,
	timeout_seconds: float = 5,
	notifier: Optional[Notifier] = None,
) -> Orchestrator:
	"""Orchestrator wired with the default catalog and a fake runner."""
	notifier = notifier or Notifier()
	return Orchestrator(
		registry=default_registry(),
		prompt_loader=PromptLoader(prompts_dir),
		classifier=EffortClassifier(),
		assembler=PromptAssembler(),
		invoker=make_invoker(runner, timeout_seconds=timeout_seconds, notifier=notifier),
		output_root=output_root,
		notifier=notifier,
	)
