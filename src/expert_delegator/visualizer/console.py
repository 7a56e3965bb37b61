"""Rich views for delegation progress and agent listings."""

from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import AgentProfile, DelegationRequest, EffortDecision, EffortTier, Mode
from .utils import (
	SPINNER_FRAMES,
	effort_icon,
	format_duration,
	mode_label,
	source_label,
	truncate,
)


class Notifier:
	"""
	Observability sink for a delegation run.

	The base class ignores every event; it is what tests and library
	callers get when they do not want terminal output.
	"""

	def step(self, title: str, details: Iterable[str] = ()) -> None:
		pass

	def announce(
		self,
		profile: AgentProfile,
		request: DelegationRequest,
		mode: Mode,
		effort: EffortDecision,
		output_dir: Path,
	) -> None:
		pass

	def invocation_started(self, model: str, effort: EffortDecision, mode: Mode, timeout: float) -> None:
		pass

	def tick(self, elapsed_seconds: float) -> None:
		pass

	def invocation_finished(self, elapsed_ms: int, effort: EffortDecision) -> None:
		pass

	def invocation_failed(self, message: str) -> None:
		pass

	def saved(self, path: Path) -> None:
		pass

	def completed(self) -> None:
		pass

	def failed(self, message: str) -> None:
		pass


class ConsoleNotifier(Notifier):
	"""Renders run events to stderr with Rich."""

	def __init__(self, console: Optional[Console] = None, verbose: bool = False):
		self.console = console or Console(stderr=True)
		self.verbose = verbose
		self._live: Optional[Live] = None
		self._frame = 0
		self._effort_hint = ""

	def step(self, title: str, details: Iterable[str] = ()) -> None:
		if not self.verbose:
			return
		self.console.print(f"\n[bold cyan]📍 {title}[/bold cyan]")
		for line in details:
			self.console.print(f"   {escape(line)}")

	def announce(
		self,
		profile: AgentProfile,
		request: DelegationRequest,
		mode: Mode,
		effort: EffortDecision,
		output_dir: Path,
	) -> None:
		lines = [
			f"[bold]📋 Agent:[/bold] {escape(profile.display_name)}",
			f"[bold]📝 Task:[/bold] {escape(truncate(request.task))}",
			f"[bold]🔧 Mode:[/bold] {mode_label(mode)}",
			f"[bold]{effort_icon(effort.tier)} Effort:[/bold] {effort.tier.value}{source_label(effort.source)}",
			f"[bold]🎯 Output:[/bold] {escape(str(output_dir))}",
		]
		self.console.print(Panel("\n".join(lines), title="🎭 Expert Delegator", border_style="cyan"))

	def invocation_started(self, model: str, effort: EffortDecision, mode: Mode, timeout: float) -> None:
		sandbox = "📖 sandbox" if mode is Mode.ADVISORY else "✏️ bypass"
		self.console.print(
			f"[bold]🤖 {escape(model)}[/bold] \\[{effort.tier.value}] \\[{sandbox}] "
			f"[dim](timeout {format_duration(timeout)})[/dim]"
		)
		self._frame = 0
		self._effort_hint = (
			f" [xhigh: up to {format_duration(timeout)}]" if effort.tier is EffortTier.XHIGH else ""
		)
		self._live = Live(console=self.console, auto_refresh=False, transient=True)
		self._live.start()

	def tick(self, elapsed_seconds: float) -> None:
		if self._live is None:
			return
		frame = SPINNER_FRAMES[self._frame % len(SPINNER_FRAMES)]
		self._frame += 1
		self._live.update(
			Text(f"   {frame} agent running... {int(elapsed_seconds)}s elapsed{self._effort_hint}"),
			refresh=True,
		)

	def _stop_live(self) -> None:
		if self._live is not None:
			self._live.stop()
			self._live = None

	def invocation_finished(self, elapsed_ms: int, effort: EffortDecision) -> None:
		self._stop_live()
		self.console.print(
			f"[green]✅ Agent finished ({format_duration(elapsed_ms / 1000)}) \\[{effort.tier.value}][/green]"
		)

	def invocation_failed(self, message: str) -> None:
		self._stop_live()
		self.console.print(Text(f"❌ Agent invocation failed: {truncate(message, 120)}", style="red"))

	def saved(self, path: Path) -> None:
		self.console.print(f"   💾 Saved: {escape(path.name)}")

	def completed(self) -> None:
		self.console.print(Panel("🎉 7-step delegation workflow complete", border_style="green"))

	def failed(self, message: str) -> None:
		self.console.print(Text(f"❌ Error: {message}", style="red"))


def render_agent_list(profiles: Iterable[AgentProfile], console: Optional[Console] = None) -> None:
	"""Render the agent catalog as a table."""
	console = console or Console()

	table = Table(title="Expert agents", show_lines=False)
	table.add_column("", no_wrap=True)
	table.add_column("Agent", style="bold")
	table.add_column("Description")
	table.add_column("Mode")

	for profile in profiles:
		icon = "📖" if profile.default_mode is Mode.ADVISORY else "✏️"
		table.add_row(icon, profile.id, profile.description, profile.default_mode.value)

	console.print(table)
	console.print("[dim]📖 = Advisory (analysis only)  ✏️ = Implementation (may change files)[/dim]")
