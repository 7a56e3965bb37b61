"""Visualizer package - Rich terminal views for delegation runs."""

from .console import ConsoleNotifier, Notifier, render_agent_list

__all__ = [
	"ConsoleNotifier",
	"Notifier",
	"render_agent_list",
]
