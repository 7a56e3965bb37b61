"""Tests for prompt assembly."""

import pytest

from expert_delegator.agents import ARCHITECT, CODE_REVIEWER
from expert_delegator.assembler import NO_CONTEXT, NO_CONSTRAINTS, PromptAssembler
from expert_delegator.models import DelegationRequest, Mode

BASE_PROMPT = "# Code Reviewer\n\nYou review code.\n"
ADVISORY_MUST_DO = "- Do not modify any files (proposals only)"
ADVISORY_MUST_NOT_DO = "- Do not edit files directly"


@pytest.fixture
def assembler():
	return PromptAssembler()


@pytest.fixture
def request_():
	return DelegationRequest(
		agent_id="code-reviewer",
		task="Review this function for bugs",
		context="def add(a, b): return a - b",
		constraints="Python 3.11 only",
	)


def _section(text: str, title: str) -> str:
	"""Body of a '## title' section."""
	after = text.split(f"## {title}\n", 1)[1]
	return after.split("\n## ", 1)[0]


class TestStructure:
	"""Section layout."""

	def test_sections_in_fixed_order(self, assembler, request_):
		text = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY).text
		positions = [text.index(f"## {name}\n") for name in assembler.section_names()]
		assert positions == sorted(positions)
		assert assembler.section_names() == [
			"TASK",
			"EXPECTED OUTCOME",
			"CONTEXT",
			"CONSTRAINTS",
			"MUST DO",
			"MUST NOT DO",
			"OUTPUT FORMAT",
		]

	def test_base_prompt_comes_first(self, assembler, request_):
		text = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY).text
		assert text.startswith("# Code Reviewer\n\nYou review code.\n\n---\n")
		assert text.index("---") < text.index("## TASK")

	def test_literal_values_embedded(self, assembler, request_):
		assembled = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY)
		assert _section(assembled.text, "TASK").startswith("Review this function for bugs")
		assert _section(assembled.text, "CONTEXT").startswith("def add(a, b): return a - b")
		assert _section(assembled.text, "CONSTRAINTS").startswith("Python 3.11 only")
		assert assembled.context == "def add(a, b): return a - b"

	def test_missing_context_and_constraints_use_markers(self, assembler):
		request = DelegationRequest(agent_id="code-reviewer", task="Check it")
		assembled = assembler.build(CODE_REVIEWER, BASE_PROMPT, request, Mode.ADVISORY)
		assert _section(assembled.text, "CONTEXT").startswith(NO_CONTEXT)
		assert _section(assembled.text, "CONSTRAINTS").startswith(NO_CONSTRAINTS)
		assert assembled.context is None

	def test_output_language_configurable(self, request_):
		text = PromptAssembler(output_language="Japanese").build(
			CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY
		).text
		assert "written in Japanese" in _section(text, "EXPECTED OUTCOME")
		assert "- Answer in Japanese" in _section(text, "MUST DO")


class TestModeClauses:
	"""Advisory-only lines."""

	def test_advisory_has_both_clauses(self, assembler, request_):
		text = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY).text
		assert ADVISORY_MUST_DO in _section(text, "MUST DO")
		assert ADVISORY_MUST_NOT_DO in _section(text, "MUST NOT DO")

	def test_implementation_has_neither_clause(self, assembler, request_):
		text = assembler.build(ARCHITECT, BASE_PROMPT, request_, Mode.IMPLEMENTATION).text
		assert ADVISORY_MUST_DO not in text
		assert ADVISORY_MUST_NOT_DO not in text

	def test_mode_line_under_constraints(self, assembler, request_):
		advisory = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY).text
		implementation = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.IMPLEMENTATION).text
		assert "Mode: advisory" in _section(advisory, "CONSTRAINTS")
		assert "Mode: implementation" in _section(implementation, "CONSTRAINTS")

	def test_modes_differ_only_by_mode_lines(self, assembler, request_):
		"""Removing the mode-specific lines leaves identical boilerplate."""
		advisory = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY).text
		implementation = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.IMPLEMENTATION).text

		def strip(text: str) -> list[str]:
			return [
				line for line in text.splitlines()
				if line not in (ADVISORY_MUST_DO, ADVISORY_MUST_NOT_DO) and not line.startswith("Mode: ")
			]

		assert strip(advisory) == strip(implementation)


class TestDeterminism:
	"""Same inputs, same bytes."""

	def test_build_twice_is_identical(self, assembler, request_):
		first = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY)
		second = assembler.build(CODE_REVIEWER, BASE_PROMPT, request_, Mode.ADVISORY)
		assert first == second
		assert first.text.encode("utf-8") == second.text.encode("utf-8")
