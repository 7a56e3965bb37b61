"""CLI for expert-delegator: delegate a task to an expert agent, or list agents."""

import argparse
import asyncio
import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from . import __version__
from .agents import AgentRegistry, default_registry
from .config import Config, load_config
from .errors import DelegatorError, ValidationError
from .logging_config import setup_logging
from .models import EFFORT_CHOICES, MODE_CHOICES, DelegationRequest
from .orchestrator import AgentRunner, Orchestrator
from .visualizer import ConsoleNotifier, render_agent_list

EXAMPLES = """\
examples:
  expert-delegator -a architect -t "Design a microservice split"
  expert-delegator -a architect -t "Large-scale refactoring of billing" -e xhigh
  expert-delegator -a code-reviewer -t "PR review" -f diff.md -m advisory
"""


class _ArgumentParser(argparse.ArgumentParser):
	"""ArgumentParser that exits with status 1 on usage errors."""

	def error(self, message: str) -> None:
		self.print_usage(sys.stderr)
		self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
	parser = _ArgumentParser(
		prog="expert-delegator",
		description="Delegate a task to an expert agent profile through the codex CLI",
		epilog=EXAMPLES,
		formatter_class=argparse.RawDescriptionHelpFormatter,
	)
	parser.add_argument("-a", "--agent", type=str, default=None, help="Expert agent id (required)")
	parser.add_argument("-t", "--task", type=str, default=None, help="Task text (required)")
	parser.add_argument("-x", "--context", type=str, default=None, help="Additional context")
	parser.add_argument("-f", "--context-file", type=Path, default=None, help="Read context from a file")
	parser.add_argument("-c", "--constraints", type=str, default=None, help="Constraints")
	parser.add_argument("-o", "--output", type=Path, default=None, help="Output directory")
	parser.add_argument("-m", "--mode", choices=MODE_CHOICES, default=None, help="Operating mode")
	parser.add_argument(
		"-e",
		"--effort",
		choices=EFFORT_CHOICES,
		default=None,
		help="Reasoning effort (default: auto-detect from the task)",
	)
	parser.add_argument("-l", "--list-agents", action="store_true", help="List expert agents")
	parser.add_argument("--skip-git-check", action="store_true", help="Allow running outside a git repository")
	parser.add_argument("-v", "--verbose", action="store_true", help="Verbose step output")
	parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
	return parser


def is_git_repository(cwd: Optional[Path] = None) -> bool:
	"""Check whether cwd is inside a git work tree."""
	try:
		subprocess.run(
			["git", "rev-parse", "--git-dir"],
			cwd=str(cwd) if cwd else None,
			capture_output=True,
			check=True,
		)
		return True
	except (subprocess.CalledProcessError, FileNotFoundError):
		return False


def read_context(args: argparse.Namespace) -> Optional[str]:
	"""Context file takes precedence over --context text."""
	if args.context_file is not None:
		if not args.context_file.is_file():
			raise ValidationError(f"Context file not found: {args.context_file}")
		try:
			return args.context_file.read_text(encoding="utf-8")
		except OSError as e:
			raise ValidationError(f"Context file unreadable: {args.context_file} ({e})") from e
	return args.context


def build_request(args: argparse.Namespace, registry: AgentRegistry) -> DelegationRequest:
	"""Validate CLI input and build the request."""
	if not args.agent:
		raise ValidationError(f"--agent is required. Available: {', '.join(registry.ids())}")
	registry.lookup(args.agent)
	if not args.task:
		raise ValidationError("--task is required")

	return DelegationRequest(
		agent_id=args.agent,
		task=args.task,
		context=read_context(args),
		constraints=args.constraints,
		mode_override=args.mode,
		effort_override=args.effort,
		output_dir=args.output,
	)


def cmd_delegate(
	args: argparse.Namespace,
	config: Config,
	runner: Optional[AgentRunner] = None,
	console: Optional[Console] = None,
) -> int:
	"""Run one delegation. Returns the process exit code."""
	console = console or Console(stderr=True)
	registry = default_registry()

	try:
		request = build_request(args, registry)
		if config.require_git_repo and not args.skip_git_check and not is_git_repository():
			raise ValidationError("expert-delegator only runs inside a git repository (run 'git init')")

		notifier = ConsoleNotifier(console=console, verbose=args.verbose)
		orchestrator = Orchestrator.from_config(config, notifier=notifier, runner=runner, registry=registry)
		report = asyncio.run(orchestrator.run(request))
	except DelegatorError as e:
		console.print(f"❌ Error: {e}", style="red", markup=False, highlight=False)
		return 1

	if report.outcome.ok:
		print(json.dumps(report.record, indent=2, ensure_ascii=False))
	return report.exit_code


def main(argv: Optional[list[str]] = None) -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args(argv)

	if args.list_agents:
		render_agent_list(default_registry().profiles())
		sys.exit(0)

	try:
		config = load_config()
	except DelegatorError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	setup_logging(level="DEBUG" if args.verbose else None, log_dir=config.log_dir)
	sys.exit(cmd_delegate(args, config))
