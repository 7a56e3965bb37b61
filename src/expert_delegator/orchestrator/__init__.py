"""Orchestrator module - Invocation, persistence, and the delegation workflow."""

from .invoker import AgentRunner, CodexRunner, InvocationResult, ProcessInvoker, RunOptions
from .persister import ResultPersister
from .workflow import Orchestrator, RunState, default_output_dir, sanitize_task

__all__ = [
	"AgentRunner",
	"CodexRunner",
	"InvocationResult",
	"ProcessInvoker",
	"RunOptions",
	"ResultPersister",
	"Orchestrator",
	"RunState",
	"default_output_dir",
	"sanitize_task",
]
