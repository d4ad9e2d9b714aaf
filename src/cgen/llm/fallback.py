"""
Ordered fallback across provider presets.

Presets are tried one at a time in the user's declared order. Every
per-attempt error is turned into a recorded failure and the next preset is
tried, until one succeeds or the list runs out.

"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from cgen.presets.models import Preset

from .errors import (
	AllProvidersExhaustedError,
	AttemptFailure,
	HttpStatusError,
	LLMError,
	ResponsePathError,
	TransportError,
)
from .extraction import extract
from .formatting import build_body, parse_headers
from .interpolation import build_variables, interpolate
from .providers import PartialProviderConfig, resolve
from .transport import DEFAULT_TIMEOUT, HttpTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptPayload:
	"""Assembled prompt sent to every preset."""

	system_prompt: str
	user_content: str


@dataclass(frozen=True)
class RetryPolicy:
	"""Decides whether an HTTP status allows moving on to the next preset."""

	non_retryable_statuses: frozenset[int] = field(default_factory=frozenset)

	def is_retryable(self, status_code: int) -> bool:
		"""Return True unless ``status_code`` is explicitly marked non-retryable."""
		return status_code not in self.non_retryable_statuses


@dataclass(frozen=True)
class Success:
	"""A preset produced text."""

	text: str


@dataclass(frozen=True)
class Failure:
	"""A preset attempt failed."""

	reason: str
	is_retryable: bool
	error: LLMError


CallOutcome = Success | Failure


@dataclass(frozen=True)
class FallbackResult:
	"""Generated text plus which preset produced it and what failed before."""

	text: str
	preset_id: int
	preset_name: str
	is_fallback: bool = False
	failures: tuple[AttemptFailure, ...] = ()


def overrides_for(preset: Preset) -> PartialProviderConfig:
	"""Build provider overrides from a preset's URL and header fields."""
	return PartialProviderConfig(api_url=preset.api_url or None, api_headers=preset.api_headers or None)


def describe_error(error: LLMError) -> str:
	"""Short failure reason for the per-preset failure list."""
	if isinstance(error, HttpStatusError):
		return f"HTTP {error.status_code}"
	if isinstance(error, TransportError):
		return f"network error: {error.message}"
	return str(error)


class FallbackOrchestrator:
	"""Sends a prompt to presets in order until one of them answers."""

	def __init__(
		self,
		transport: HttpTransport,
		*,
		fallback_enabled: bool = True,
		retry_policy: RetryPolicy | None = None,
		timeout: float = DEFAULT_TIMEOUT,
		environ: Mapping[str, str] | None = None,
		extra_variables: Mapping[str, str] | None = None,
	) -> None:
		"""
		Initialize the orchestrator.

		Args:
		    transport: HTTP transport used for every attempt
		    fallback_enabled: When False only the first preset is attempted
		    retry_policy: Which HTTP statuses stop the fallback chain
		    timeout: Per-request timeout in seconds
		    environ: Environment for interpolation, defaults to ``os.environ``
		    extra_variables: Call-level interpolation variables such as ``ACR_LOCALE``

		"""
		self.transport = transport
		self.fallback_enabled = fallback_enabled
		self.retry_policy = retry_policy or RetryPolicy()
		self.timeout = timeout
		self._environ = environ
		self._extra_variables = dict(extra_variables or {})

	def attempt(self, preset: Preset, prompt: PromptPayload) -> str:
		"""
		Perform a single request against one preset.

		Args:
		    preset: Preset to call
		    prompt: System prompt and user content

		Returns:
		    The generated text

		Raises:
		    UnknownProviderError: If the preset's provider cannot be resolved
		    TransportError: On network failures and timeouts
		    HttpStatusError: On non-2xx responses
		    ResponsePathError: If the body is not JSON or lacks text at the response path

		"""
		definition = resolve(preset.provider, overrides_for(preset))
		model = preset.model or definition.default_model
		variables = build_variables(
			preset.model_copy(update={"model": model}),
			environ=self._environ,
			extra=self._extra_variables,
		)

		url = interpolate(definition.api_url_template, variables)
		headers = parse_headers(interpolate(definition.api_headers_template, variables))
		body = build_body(definition.format, prompt.system_prompt, prompt.user_content, model)

		logger.debug("Calling preset '%s' (provider=%s, model=%s)", preset.name, preset.provider, model)
		response = self.transport.post(url, headers, body, self.timeout)
		if not response.ok:
			raise HttpStatusError(response.status_code, response.text)

		try:
			data = json.loads(response.text)
		except json.JSONDecodeError as e:
			msg = f"response is not valid JSON: {e}"
			raise ResponsePathError("", "", msg) from e

		return extract(data, definition.response_path)

	def _try(self, preset: Preset, prompt: PromptPayload) -> CallOutcome:
		try:
			return Success(self.attempt(preset, prompt))
		except HttpStatusError as e:
			return Failure(describe_error(e), self.retry_policy.is_retryable(e.status_code), e)
		except LLMError as e:
			return Failure(describe_error(e), True, e)

	def call_with_fallback(self, ordered_presets: Sequence[Preset], prompt: PromptPayload) -> FallbackResult:
		"""
		Try presets in order until one succeeds.

		A preset id seen earlier in the same pass is skipped. With fallback
		disabled only the first preset is tried and its error propagates as is.

		Args:
		    ordered_presets: Presets in attempt order, primary first
		    prompt: System prompt and user content

		Returns:
		    The generated text and the preset that produced it

		Raises:
		    AllProvidersExhaustedError: If every preset failed, or a non-retryable failure stopped the pass
		    LLMError: The first preset's own error when fallback is disabled

		"""
		if not ordered_presets:
			raise AllProvidersExhaustedError([])

		if not self.fallback_enabled:
			primary = ordered_presets[0]
			text = self.attempt(primary, prompt)
			return FallbackResult(text=text, preset_id=primary.id, preset_name=primary.name)

		attempted: set[int] = set()
		failures: list[AttemptFailure] = []
		for index, preset in enumerate(ordered_presets):
			if preset.id in attempted:
				logger.debug("Skipping preset '%s', already attempted in this pass", preset.name)
				continue

			if failures:
				last = failures[-1]
				logger.warning("%s failed (%s), trying: %s", last.preset_name, last.reason, preset.name)

			outcome = self._try(preset, prompt)
			if isinstance(outcome, Success):
				return FallbackResult(
					text=outcome.text,
					preset_id=preset.id,
					preset_name=preset.name,
					is_fallback=index > 0,
					failures=tuple(failures),
				)

			attempted.add(preset.id)
			failures.append(AttemptFailure(preset.id, preset.name, outcome.reason))
			logger.debug("Preset '%s' failed: %s", preset.name, outcome.error)
			if not outcome.is_retryable:
				logger.warning("%s failed with a non-retryable error, not trying further presets", preset.name)
				break

		raise AllProvidersExhaustedError(failures)
