"""Error types for the LLM provider layer."""

from __future__ import annotations

from dataclasses import dataclass


class LLMError(Exception):
	"""Base exception for LLM provider errors."""


class UnknownProviderError(LLMError):
	"""Raised when a provider has no built-in definition and no API URL override."""

	def __init__(self, provider: str) -> None:
		"""
		Initialize the error.

		Args:
		    provider: The provider identifier that could not be resolved

		"""
		self.provider = provider
		super().__init__(f"Unknown provider '{provider}'. Set ACR_API_URL for custom providers.")


class TransportError(LLMError):
	"""Raised on network failures and timeouts."""

	def __init__(self, message: str) -> None:
		"""
		Initialize the error.

		Args:
		    message: Description of the network failure

		"""
		self.message = message
		super().__init__(f"Network error: {message}")


class HttpStatusError(LLMError):
	"""Raised when a provider answers with a non-2xx status."""

	def __init__(self, status_code: int, body: str) -> None:
		"""
		Initialize the error.

		Args:
		    status_code: HTTP status returned by the provider
		    body: Raw response body, kept for diagnostics

		"""
		self.status_code = status_code
		self.body = body
		super().__init__(f"API returned HTTP {status_code}: {body}")


class ResponsePathError(LLMError):
	"""Raised when the response body does not contain text at the expected path."""

	def __init__(self, segment: str, walked: str, reason: str) -> None:
		"""
		Initialize the error.

		Args:
		    segment: The path segment that failed to resolve
		    walked: Dotted path successfully walked before the failure
		    reason: Human readable description of the failure

		"""
		self.segment = segment
		self.walked = walked
		self.reason = reason
		if not segment and not walked:
			super().__init__(f"Failed to extract message: {reason}")
			return
		location = walked or "<root>"
		super().__init__(f"Failed to extract message at segment '{segment}' (after '{location}'): {reason}")


@dataclass(frozen=True)
class AttemptFailure:
	"""One failed provider attempt inside a fallback pass."""

	preset_id: int
	preset_name: str
	reason: str

	def __str__(self) -> str:
		"""Render as ``name (reason)``."""
		return f"{self.preset_name} ({self.reason})"


class AllProvidersExhaustedError(LLMError):
	"""Raised when every preset in the fallback order has failed."""

	def __init__(self, failures: list[AttemptFailure]) -> None:
		"""
		Initialize the error.

		Args:
		    failures: Ordered per-preset failures collected during the pass

		"""
		self.failures = list(failures)
		if self.failures:
			detail = ", ".join(str(failure) for failure in self.failures)
		else:
			detail = "no presets to try"
		super().__init__(f"All LLM providers failed: {detail}")
