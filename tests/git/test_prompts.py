"""Tests for system prompt assembly."""

from __future__ import annotations

import pytest

from cgen.config.config_schema import DEFAULT_SYSTEM_PROMPT, AppConfigSchema
from cgen.git.prompts import (
	CLOSING_INSTRUCTION,
	CONVENTIONAL_COMMIT_SPEC,
	GITMOJI_SHORTCODE_SPEC,
	GITMOJI_UNICODE_SPEC,
	ONE_LINER_INSTRUCTION,
	apply_commit_template,
	build_system_prompt,
)


@pytest.mark.unit
def test_default_prompt() -> None:
	"""Defaults: base prompt, conventional commits, one-liner, closing."""
	prompt = build_system_prompt(AppConfigSchema())
	assert prompt == "\n\n".join(
		[DEFAULT_SYSTEM_PROMPT, CONVENTIONAL_COMMIT_SPEC, ONE_LINER_INSTRUCTION, CLOSING_INSTRUCTION]
	)


@pytest.mark.unit
@pytest.mark.parametrize(
	("gitmoji_format", "expected", "unexpected"),
	[("unicode", GITMOJI_UNICODE_SPEC, GITMOJI_SHORTCODE_SPEC), ("shortcode", GITMOJI_SHORTCODE_SPEC, GITMOJI_UNICODE_SPEC)],
)
def test_gitmoji(gitmoji_format: str, expected: str, unexpected: str) -> None:
	"""The gitmoji section matches the configured format."""
	prompt = build_system_prompt(AppConfigSchema(use_gitmoji=True, gitmoji_format=gitmoji_format))
	assert expected in prompt
	assert unexpected not in prompt


@pytest.mark.unit
def test_multiline_and_locale() -> None:
	"""Disabling one-liner drops its instruction; non-English locales are requested."""
	prompt = build_system_prompt(AppConfigSchema(one_liner=False, locale="pt-BR", llm_system_prompt="Be terse."))
	assert prompt.startswith("Be terse.")
	assert ONE_LINER_INSTRUCTION not in prompt
	assert "'pt-BR'" in prompt
	assert prompt.endswith(CLOSING_INSTRUCTION)


@pytest.mark.unit
def test_commit_template() -> None:
	"""$msg is replaced by the trimmed message."""
	assert apply_commit_template("$msg", "  feat: x \n") == "feat: x"
	assert apply_commit_template("[JIRA-1] $msg", "fix: y") == "[JIRA-1] fix: y"
	assert apply_commit_template("static", "fix: y") == "static"
