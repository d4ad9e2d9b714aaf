"""Built-in LLM provider definitions and resolution of custom overrides."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .errors import UnknownProviderError

logger = logging.getLogger(__name__)


class RequestFormat(Enum):
	"""Wire formats understood by the request formatter."""

	OPENAI_COMPAT = "openai"
	GEMINI = "gemini"
	ANTHROPIC = "anthropic"


DEFAULT_RESPONSE_PATHS: MappingProxyType[RequestFormat, str] = MappingProxyType(
	{
		RequestFormat.OPENAI_COMPAT: "choices.0.message.content",
		RequestFormat.GEMINI: "candidates.0.content.parts.0.text",
		RequestFormat.ANTHROPIC: "content.0.text",
	}
)

BEARER_HEADERS = "Authorization: Bearer $ACR_API_KEY"


@dataclass(frozen=True)
class ProviderDef:
	"""How to talk to one provider."""

	api_url_template: str
	api_headers_template: str
	format: RequestFormat
	response_path: str
	default_model: str = ""


@dataclass(frozen=True)
class PartialProviderConfig:
	"""
	User supplied overrides applied on top of a provider definition.

	``None`` and empty strings both mean "inherit from the built-in definition".

	"""

	api_url: str | None = None
	api_headers: str | None = None
	format: RequestFormat | None = None
	response_path: str | None = None


def _openai_compat(url: str, default_model: str) -> ProviderDef:
	return ProviderDef(
		api_url_template=url,
		api_headers_template=BEARER_HEADERS,
		format=RequestFormat.OPENAI_COMPAT,
		response_path=DEFAULT_RESPONSE_PATHS[RequestFormat.OPENAI_COMPAT],
		default_model=default_model,
	)


BUILTIN_PROVIDERS: MappingProxyType[str, ProviderDef] = MappingProxyType(
	{
		"gemini": ProviderDef(
			api_url_template=(
				"https://generativelanguage.googleapis.com/v1beta/models/$ACR_MODEL:generateContent?key=$ACR_API_KEY"
			),
			api_headers_template="",
			format=RequestFormat.GEMINI,
			response_path=DEFAULT_RESPONSE_PATHS[RequestFormat.GEMINI],
			default_model="gemini-2.0-flash",
		),
		"openai": _openai_compat("https://api.openai.com/v1/chat/completions", "gpt-4o-mini"),
		"anthropic": ProviderDef(
			api_url_template="https://api.anthropic.com/v1/messages",
			api_headers_template="x-api-key: $ACR_API_KEY, anthropic-version: 2023-06-01",
			format=RequestFormat.ANTHROPIC,
			response_path=DEFAULT_RESPONSE_PATHS[RequestFormat.ANTHROPIC],
			default_model="claude-sonnet-4-20250514",
		),
		"groq": _openai_compat("https://api.groq.com/openai/v1/chat/completions", "llama-3.3-70b-versatile"),
		"grok": _openai_compat("https://api.x.ai/v1/chat/completions", "grok-3"),
		"deepseek": _openai_compat("https://api.deepseek.com/v1/chat/completions", "deepseek-chat"),
		"openrouter": _openai_compat("https://openrouter.ai/api/v1/chat/completions", "openai/gpt-4o-mini"),
		"mistral": _openai_compat("https://api.mistral.ai/v1/chat/completions", "mistral-small-latest"),
		"together": _openai_compat(
			"https://api.together.xyz/v1/chat/completions", "meta-llama/Llama-3.3-70B-Instruct-Turbo"
		),
		"fireworks": _openai_compat(
			"https://api.fireworks.ai/inference/v1/chat/completions",
			"accounts/fireworks/models/llama-v3p3-70b-instruct",
		),
		"perplexity": _openai_compat("https://api.perplexity.ai/chat/completions", "sonar"),
	}
)

BUILTIN_PROVIDER_IDS: tuple[str, ...] = tuple(BUILTIN_PROVIDERS)


def is_builtin(provider_id: str) -> bool:
	"""Return True if ``provider_id`` has a built-in definition."""
	return provider_id in BUILTIN_PROVIDERS


def default_model_for(provider_id: str) -> str:
	"""Get the default model of a built-in provider, or an empty string for unknown providers."""
	definition = BUILTIN_PROVIDERS.get(provider_id)
	return definition.default_model if definition else ""


def resolve(provider_id: str, overrides: PartialProviderConfig | None = None) -> ProviderDef:
	"""
	Resolve a provider identifier to a concrete definition.

	Fields set in ``overrides`` replace the built-in values; unset fields are
	inherited. Custom providers must supply an API URL and default to the
	OpenAI-compatible format.

	Args:
	    provider_id: Built-in or custom provider identifier
	    overrides: Optional user overrides

	Returns:
	    The resolved provider definition

	Raises:
	    UnknownProviderError: If the provider is not built-in and no API URL is given

	"""
	overrides = overrides or PartialProviderConfig()
	changes: dict[str, object] = {}
	if overrides.api_url:
		changes["api_url_template"] = overrides.api_url
	if overrides.api_headers:
		changes["api_headers_template"] = overrides.api_headers
	if overrides.format is not None:
		changes["format"] = overrides.format
	if overrides.response_path:
		changes["response_path"] = overrides.response_path

	builtin = BUILTIN_PROVIDERS.get(provider_id)
	if builtin is not None:
		return dataclasses.replace(builtin, **changes)

	if not overrides.api_url:
		raise UnknownProviderError(provider_id)

	request_format = overrides.format or RequestFormat.OPENAI_COMPAT
	logger.debug("Resolving custom provider '%s' with format %s", provider_id, request_format.value)
	return ProviderDef(
		api_url_template=overrides.api_url,
		api_headers_template=overrides.api_headers or "",
		format=request_format,
		response_path=overrides.response_path or DEFAULT_RESPONSE_PATHS[request_format],
	)
