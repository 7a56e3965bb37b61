"""Exception hierarchy for the delegation workflow."""

from typing import Iterable, Optional


class DelegatorError(Exception):
	"""Base exception for delegation errors."""
	pass


class ValidationError(DelegatorError):
	"""Raised when request input is missing or invalid."""
	pass


class UnknownAgentError(ValidationError):
	"""Raised when an agent id is not in the catalog."""

	def __init__(self, agent_id: str, valid_ids: Iterable[str]):
		self.agent_id = agent_id
		self.valid_ids = tuple(valid_ids)
		super().__init__(
			f"Unknown agent '{agent_id}'. Available: {', '.join(self.valid_ids)}"
		)


class ConfigurationError(DelegatorError):
	"""Raised when configuration or a prompt source cannot be used."""
	pass


class InvocationError(DelegatorError):
	"""Base exception for external agent invocation failures."""

	def __init__(self, message: str, elapsed_ms: Optional[int] = None):
		super().__init__(message)
		self.elapsed_ms = elapsed_ms


class InvocationTimeout(InvocationError):
	"""Raised when the external agent exceeds its time budget."""
	pass


class ProcessError(InvocationError):
	"""Raised when the external agent exits nonzero or cannot be spawned."""

	def __init__(
		self,
		message: str,
		elapsed_ms: Optional[int] = None,
		returncode: Optional[int] = None,
	):
		super().__init__(message, elapsed_ms)
		self.returncode = returncode


class PersistenceError(DelegatorError):
	"""Raised when run artifacts cannot be written."""
	pass
