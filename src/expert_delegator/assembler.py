"""
Prompt assembly for delegated tasks.

The prompt is an ordered list of sections. Each section builder receives
the mode and may append mode-specific lines after its fixed lines; it never
replaces them, so advisory and implementation prompts differ only by those
appended lines (and the mode line under CONSTRAINTS).
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .models import AgentProfile, AssembledPrompt, DelegationRequest, Mode

NO_CONTEXT = "(none)"
NO_CONSTRAINTS = "none"


@dataclass(frozen=True)
class SectionInput:
	"""Everything a section builder may read."""
	base_prompt: str
	task: str
	context: Optional[str]
	constraints: Optional[str]
	mode: Mode
	output_language: str


@dataclass(frozen=True)
class PromptSection:
	"""A titled block of the prompt."""
	title: str
	build: Callable[[SectionInput], list[str]]


def _task(inp: SectionInput) -> list[str]:
	return [inp.task]


def _expected_outcome(inp: SectionInput) -> list[str]:
	return [
		f"A domain-expert analysis and recommendation for the task, written in {inp.output_language}",
	]


def _context(inp: SectionInput) -> list[str]:
	return [inp.context or NO_CONTEXT]


def _constraints(inp: SectionInput) -> list[str]:
	if inp.mode.allows_file_changes:
		permission = "(files may be changed when needed)"
	else:
		permission = "(analysis and proposals only, file changes forbidden)"
	return [
		inp.constraints or NO_CONSTRAINTS,
		f"Mode: {inp.mode.value} {permission}",
	]


def _must_do(inp: SectionInput) -> list[str]:
	lines = [
		"- Analyze candidly as an expert, without softening findings",
		"- Include concrete proposals and fixes",
		f"- Answer in {inp.output_language}",
	]
	if inp.mode is Mode.ADVISORY:
		lines.append("- Do not modify any files (proposals only)")
	return lines


def _must_not_do(inp: SectionInput) -> list[str]:
	lines = [
		"- Do not end with vague statements",
		"- Do not point out problems without proposing a resolution",
	]
	if inp.mode is Mode.ADVISORY:
		lines.append("- Do not edit files directly")
	return lines


def _output_format(inp: SectionInput) -> list[str]:
	return ["A structured answer in Markdown"]


SECTIONS: tuple[PromptSection, ...] = (
	PromptSection("TASK", _task),
	PromptSection("EXPECTED OUTCOME", _expected_outcome),
	PromptSection("CONTEXT", _context),
	PromptSection("CONSTRAINTS", _constraints),
	PromptSection("MUST DO", _must_do),
	PromptSection("MUST NOT DO", _must_not_do),
	PromptSection("OUTPUT FORMAT", _output_format),
)


class PromptAssembler:
	"""Builds the canonical delegation prompt."""

	def __init__(
		self,
		output_language: str = "English",
		sections: tuple[PromptSection, ...] = SECTIONS,
	):
		self.output_language = output_language
		self.sections = sections

	def section_names(self) -> list[str]:
		return [section.title for section in self.sections]

	def build(
		self,
		profile: AgentProfile,
		base_prompt: str,
		request: DelegationRequest,
		mode: Mode,
	) -> AssembledPrompt:
		"""
		Assemble the prompt document.

		Args:
			profile: Agent bound to the run
			base_prompt: The agent's prompt text
			request: The delegation request
			mode: Resolved operating mode

		Returns:
			AssembledPrompt with the document and the embedded context
		"""
		inp = SectionInput(
			base_prompt=base_prompt,
			task=request.task,
			context=request.context,
			constraints=request.constraints,
			mode=mode,
			output_language=self.output_language,
		)

		parts = [base_prompt.rstrip("\n"), "", "---", ""]
		for section in self.sections:
			parts.append(f"## {section.title}")
			parts.extend(section.build(inp))
			parts.append("")

		return AssembledPrompt(text="\n".join(parts), context=request.context)
