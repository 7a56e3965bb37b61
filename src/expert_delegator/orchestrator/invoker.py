"""
Process Invoker - Runs the external agent under a time budget.

Handles:
- Writing the audit and temporary prompt files before invocation
- Racing the agent run against the timeout
- Ticking a progress notifier while waiting
- Removing the temporary prompt file on every path
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import InvocationError, InvocationTimeout, PersistenceError, ProcessError
from ..models import EffortDecision, EffortTier, Mode
from ..visualizer import Notifier

logger = logging.getLogger(__name__)

PROMPT_FILE = "delegation-prompt.md"
TEMP_PROMPT_FILE = ".delegation-prompt-temp.md"
SANDBOX_BYPASS_FLAG = "--dangerously-bypass-approvals-and-sandbox"


@dataclass(frozen=True)
class RunOptions:
	"""Options handed to an AgentRunner."""
	mode: Mode
	effort: EffortTier
	model: str

	@property
	def allow_sandbox_bypass(self) -> bool:
		"""Only implementation mode may relax the agent sandbox."""
		return self.mode is Mode.IMPLEMENTATION


@dataclass(frozen=True)
class InvocationResult:
	"""Response text and how long the agent took."""
	response_text: str
	elapsed_ms: int


class AgentRunner:
	"""Capability that runs a prompt through an external agent."""

	async def run(self, prompt: str, options: RunOptions) -> str:
		"""
		Run the prompt and return the agent's response text.

		Raises:
			ProcessError: If the agent fails or cannot be started
		"""
		raise NotImplementedError


class CodexRunner(AgentRunner):
	"""
	Runs `codex exec` as a child process.

	The prompt is passed as a single argv element; no shell is involved.
	"""

	def __init__(
		self,
		command: str = "codex",
		cwd: Optional[str] = None,
		kill_on_timeout: bool = True,
	):
		self.command = command
		self.cwd = cwd
		self.kill_on_timeout = kill_on_timeout

	def build_args(self, prompt: str, options: RunOptions) -> list[str]:
		"""Build the argv for one invocation."""
		args = [self.command, "exec"]
		if options.allow_sandbox_bypass:
			args.append(SANDBOX_BYPASS_FLAG)
		args.extend(["-c", f'reasoning.effort="{options.effort.value}"'])
		args.extend(["--model", options.model])
		args.append(prompt)
		return args

	async def run(self, prompt: str, options: RunOptions) -> str:
		args = self.build_args(prompt, options)
		logger.info(f"Spawning {self.command} exec ({len(prompt)} chars, effort={options.effort.value})")

		try:
			process = await asyncio.create_subprocess_exec(
				*args,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
				cwd=self.cwd,
				env=os.environ.copy(),
			)
		except FileNotFoundError:
			raise ProcessError(f"Agent command not found: {self.command}. Is it installed?") from None
		except OSError as e:
			raise ProcessError(f"Agent command failed to start: {e}") from e

		try:
			stdout, stderr = await process.communicate()
		except asyncio.CancelledError:
			if self.kill_on_timeout and process.returncode is None:
				logger.warning(f"Killing {self.command} (pid {process.pid}) after cancelled wait")
				process.kill()
				await process.wait()
			raise

		stdout_text = stdout.decode("utf-8", errors="replace") if stdout else ""
		stderr_text = stderr.decode("utf-8", errors="replace") if stderr else ""

		if process.returncode != 0:
			error_msg = stderr_text.strip() or f"Exit code {process.returncode}"
			logger.error(f"Agent command error: {error_msg}")
			raise ProcessError(
				f"{self.command} exec failed: {error_msg}",
				returncode=process.returncode,
			)

		logger.info(f"Response received ({len(stdout_text)} chars)")
		return stdout_text


class ProcessInvoker:
	"""
	Invokes an AgentRunner with timeout and progress reporting.

	The runner is injected so tests can substitute fakes.
	"""

	def __init__(
		self,
		runner: AgentRunner,
		model: str,
		timeout_seconds: float = 600,
		xhigh_timeout_multiplier: float = 3,
		progress_interval: float = 0.1,
		notifier: Optional[Notifier] = None,
	):
		"""
		Initialize the invoker.

		Args:
			runner: Capability that runs the external agent
			model: Model identifier passed to the runner
			timeout_seconds: Standard time budget
			xhigh_timeout_multiplier: Budget multiplier for the xhigh tier
			progress_interval: Seconds between progress ticks
			notifier: Receives start, tick and finish events
		"""
		if xhigh_timeout_multiplier <= 1:
			raise ValueError("xhigh_timeout_multiplier must be greater than 1")
		self.runner = runner
		self.model = model
		self.timeout_seconds = timeout_seconds
		self.xhigh_timeout_multiplier = xhigh_timeout_multiplier
		self.progress_interval = progress_interval
		self.notifier = notifier or Notifier()

	def effective_timeout(self, tier: EffortTier) -> float:
		"""Time budget in seconds for an effort tier."""
		if tier is EffortTier.XHIGH:
			return self.timeout_seconds * self.xhigh_timeout_multiplier
		return self.timeout_seconds

	def run_options(self, mode: Mode, effort: EffortDecision) -> RunOptions:
		return RunOptions(mode=mode, effort=effort.tier, model=self.model)

	async def invoke(
		self,
		prompt_text: str,
		mode: Mode,
		effort: EffortDecision,
		output_dir: Path,
	) -> InvocationResult:
		"""
		Run the prompt through the agent.

		Args:
			prompt_text: Assembled prompt
			mode: Resolved operating mode
			effort: Resolved effort decision
			output_dir: Run directory for the prompt files

		Returns:
			InvocationResult with response text and elapsed time

		Raises:
			InvocationTimeout: If the budget is exceeded
			ProcessError: If the agent fails
			PersistenceError: If the prompt files cannot be written
		"""
		temp_path = output_dir / TEMP_PROMPT_FILE
		_write_prompt_files(prompt_text, output_dir, temp_path)

		timeout = self.effective_timeout(effort.tier)
		options = self.run_options(mode, effort)
		self.notifier.invocation_started(self.model, effort, mode, timeout)

		start = time.monotonic()
		ticker = asyncio.create_task(self._tick(start))
		try:
			prompt_content = temp_path.read_text(encoding="utf-8")
			response = await asyncio.wait_for(
				self.runner.run(prompt_content, options),
				timeout=timeout,
			)
		except asyncio.TimeoutError:
			elapsed_ms = _elapsed_ms(start)
			message = f"Agent timed out after {timeout:g} seconds"
			self.notifier.invocation_failed(message)
			raise InvocationTimeout(message, elapsed_ms=elapsed_ms) from None
		except InvocationError as e:
			e.elapsed_ms = _elapsed_ms(start)
			self.notifier.invocation_failed(str(e))
			raise
		except OSError as e:
			elapsed_ms = _elapsed_ms(start)
			self.notifier.invocation_failed(str(e))
			raise ProcessError(f"Agent transport failed: {e}", elapsed_ms=elapsed_ms) from e
		except Exception as e:
			elapsed_ms = _elapsed_ms(start)
			message = f"Agent runner failed: {type(e).__name__}: {e}"
			self.notifier.invocation_failed(message)
			raise ProcessError(message, elapsed_ms=elapsed_ms) from e
		finally:
			ticker.cancel()
			try:
				await ticker
			except asyncio.CancelledError:
				pass
			temp_path.unlink(missing_ok=True)

		elapsed_ms = _elapsed_ms(start)
		self.notifier.invocation_finished(elapsed_ms, effort)
		return InvocationResult(response_text=response, elapsed_ms=elapsed_ms)

	async def _tick(self, start: float) -> None:
		"""Notify progress until cancelled."""
		while True:
			await asyncio.sleep(self.progress_interval)
			self.notifier.tick(time.monotonic() - start)


def _elapsed_ms(start: float) -> int:
	return int((time.monotonic() - start) * 1000)


def _write_prompt_files(prompt_text: str, output_dir: Path, temp_path: Path) -> None:
	try:
		output_dir.mkdir(parents=True, exist_ok=True)
		temp_path.write_text(prompt_text, encoding="utf-8")
		(output_dir / PROMPT_FILE).write_text(prompt_text, encoding="utf-8")
	except OSError as e:
		temp_path.unlink(missing_ok=True)
		raise PersistenceError(f"Failed to write prompt files in {output_dir}: {e}") from e
