"""LLM provider layer: provider definitions, request formats and ordered fallback."""

from .client import LLMClient
from .errors import (
	AllProvidersExhaustedError,
	AttemptFailure,
	HttpStatusError,
	LLMError,
	ResponsePathError,
	TransportError,
	UnknownProviderError,
)
from .fallback import FallbackOrchestrator, FallbackResult, PromptPayload, RetryPolicy
from .providers import BUILTIN_PROVIDERS, ProviderDef, RequestFormat, default_model_for, resolve

__all__ = [
	"BUILTIN_PROVIDERS",
	"AllProvidersExhaustedError",
	"AttemptFailure",
	"FallbackOrchestrator",
	"FallbackResult",
	"HttpStatusError",
	"LLMClient",
	"LLMError",
	"PromptPayload",
	"ProviderDef",
	"RequestFormat",
	"ResponsePathError",
	"RetryPolicy",
	"TransportError",
	"UnknownProviderError",
	"default_model_for",
	"resolve",
]
