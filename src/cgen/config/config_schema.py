"""Pydantic schema for the cgen application configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_SYSTEM_PROMPT = (
	"You are to act as an author of a commit message in git. "
	"I'll send you an output of 'git diff --staged' command, and you are to convert "
	"it into a commit message. Follow the Conventional Commits specification."
)
DEFAULT_COMMIT_TEMPLATE = "$msg"
DEFAULT_WARN_STAGED_FILES_THRESHOLD = 20
DEFAULT_REQUEST_TIMEOUT = 60.0


class AppConfigSchema(BaseModel):
	"""Resolved configuration for one cgen run."""

	provider: str = "groq"
	model: str = "llama-3.3-70b-versatile"
	api_key: str = ""
	api_url: str = Field(default="", description="Blank means the provider's built-in URL")
	api_headers: str = Field(default="", description="Blank means the provider's built-in headers")
	locale: str = "en"
	one_liner: bool = True
	commit_template: str = DEFAULT_COMMIT_TEMPLATE
	llm_system_prompt: str = DEFAULT_SYSTEM_PROMPT
	use_gitmoji: bool = False
	gitmoji_format: Literal["unicode", "shortcode"] = "unicode"
	review_commit: bool = False
	suppress_tool_output: bool = False
	warn_staged_files_enabled: bool = True
	warn_staged_files_threshold: int = Field(default=DEFAULT_WARN_STAGED_FILES_THRESHOLD, ge=0)
	fallback_enabled: bool = True
	request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

	@field_validator("gitmoji_format", mode="before")
	@classmethod
	def _normalize_gitmoji_format(cls, value: object) -> object:
		if isinstance(value, str):
			value = value.strip().lower()
			return value if value == "shortcode" else "unicode"
		return value
