"""System prompt assembly for commit message generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cgen.config.config_schema import AppConfigSchema

MESSAGE_PLACEHOLDER = "$msg"

CONVENTIONAL_COMMIT_SPEC = """\
Follow the Conventional Commits specification:
- Prefix with a type: feat, fix, docs, style, refactor, perf, test, build, ci, chore, revert
- Optionally add a scope in parentheses: feat(parser):
- Follow with a colon and space, then a short description
- Examples: feat: add user login, fix(api): handle null response, docs: update README"""

GITMOJI_UNICODE_SPEC = (
	"Use Gitmoji: start the commit message with a relevant emoji in unicode format.\n"
	"Examples: ⚡️ Improve performance, \U0001f41b Fix bug, ✨ Add new feature, "
	"♻️ Refactor code, \U0001f4dd Update docs, \U0001f3a8 Improve UI"
)

GITMOJI_SHORTCODE_SPEC = (
	"Use Gitmoji: start the commit message with a relevant emoji in :shortcode: format.\n"
	"Examples: :zap: Improve performance, :bug: Fix bug, :sparkles: Add new feature, "
	":recycle: Refactor code, :memo: Update docs, :art: Improve UI"
)

ONE_LINER_INSTRUCTION = "Output ONLY a single line. No body, no footer, no explanations."
CLOSING_INSTRUCTION = "Use present tense. Be concise. Output only the raw commit message, nothing else."


def build_system_prompt(config: AppConfigSchema) -> str:
	"""
	Build the full system prompt from configuration flags.

	Args:
	    config: Resolved configuration

	Returns:
	    Prompt sections joined by blank lines

	"""
	parts = [config.llm_system_prompt, CONVENTIONAL_COMMIT_SPEC]

	if config.use_gitmoji:
		parts.append(GITMOJI_SHORTCODE_SPEC if config.gitmoji_format == "shortcode" else GITMOJI_UNICODE_SPEC)

	if config.one_liner:
		parts.append(ONE_LINER_INSTRUCTION)

	if config.locale != "en":
		parts.append(f"Write the commit message in the '{config.locale}' locale.")

	parts.append(CLOSING_INSTRUCTION)
	return "\n\n".join(parts)


def apply_commit_template(template: str, message: str) -> str:
	"""Substitute the trimmed message for ``$msg`` in the commit template."""
	return template.replace(MESSAGE_PLACEHOLDER, message.strip())
