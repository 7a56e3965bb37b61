"""Shared formatting helpers for console views."""

from ..models import EffortSource, EffortTier, Mode

EFFORT_ICONS = {
	EffortTier.MINIMAL: "⚡",
	EffortTier.LOW: "🔹",
	EffortTier.MEDIUM: "🔷",
	EffortTier.HIGH: "🔶",
	EffortTier.XHIGH: "🔥",
}

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]


def format_duration(seconds: float) -> str:
	"""Format a duration for display. e.g. '1.2s', '45ms', '2m 3s'."""
	if seconds < 0.001:
		return "<1ms"
	if seconds < 1.0:
		return f"{seconds * 1000:.0f}ms"
	if seconds < 60.0:
		return f"{seconds:.1f}s"
	minutes = int(seconds // 60)
	secs = seconds % 60
	return f"{minutes}m {secs:.0f}s"


def truncate(text: str, max_len: int = 50) -> str:
	"""Shorten text for single-line display."""
	if len(text) <= max_len:
		return text
	return text[:max_len] + "..."


def mode_label(mode: Mode) -> str:
	if mode is Mode.ADVISORY:
		return "📖 Advisory (analysis and proposals only)"
	return "✏️ Implementation (file changes allowed)"


def source_label(source: EffortSource) -> str:
	if source is EffortSource.AUTO_DETECTED:
		return " (auto-detected)"
	if source is EffortSource.CLI:
		return " (cli)"
	return ""


def effort_icon(tier: EffortTier) -> str:
	return EFFORT_ICONS.get(tier, "🔷")
