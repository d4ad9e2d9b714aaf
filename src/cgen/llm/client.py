"""LLM client that turns a staged diff into a commit message."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cgen.presets.store import ordered_fallback_presets, primary_preset

from .fallback import FallbackOrchestrator, FallbackResult, PromptPayload, RetryPolicy
from .interpolation import VARIABLE_PREFIX
from .transport import HttpTransport, RequestsTransport

if TYPE_CHECKING:
	from cgen.config.config_schema import AppConfigSchema
	from cgen.presets.models import Preset
	from cgen.presets.store import PresetStore

logger = logging.getLogger(__name__)


class LLMClient:
	"""Builds the preset chain for the active configuration and calls it."""

	__slots__ = ("_transport", "config", "preset_store", "retry_policy")

	def __init__(
		self,
		config: AppConfigSchema,
		preset_store: PresetStore | None = None,
		transport: HttpTransport | None = None,
		retry_policy: RetryPolicy | None = None,
	) -> None:
		"""
		Initialize the LLM client.

		Args:
		    config: Resolved application configuration; its provider settings form the primary preset
		    preset_store: Where fallback presets are read from; no fallback without one
		    transport: HTTP transport, a requests-based one by default
		    retry_policy: Which HTTP statuses stop the fallback chain

		"""
		self.config = config
		self.preset_store = preset_store
		self.retry_policy = retry_policy
		self._transport = transport

	def build_preset_chain(self) -> list[Preset]:
		"""
		Assemble presets in attempt order: the configured provider, then the stored fallback order.

		Fallback presets with the same provider, model, key and URL as the
		primary are left out since they would fail the same way.

		Returns:
		    Presets to attempt, primary first

		"""
		primary = primary_preset(self.config)
		chain = [primary]
		if not self.config.fallback_enabled or self.preset_store is None:
			return chain

		presets_file = self.preset_store.load()
		if not presets_file.fallback.enabled:
			logger.debug("Fallback disabled in presets file")
			return chain

		primary_key = primary.dedup_key()
		for preset in ordered_fallback_presets(presets_file):
			if preset.dedup_key() == primary_key:
				logger.debug("Skipping fallback preset '%s', same as primary", preset.name)
				continue
			chain.append(preset)
		return chain

	def generate_commit_message(self, system_prompt: str, diff: str) -> FallbackResult:
		"""
		Generate a commit message for ``diff``.

		Args:
		    system_prompt: Assembled system prompt
		    diff: Output of ``git diff --staged``

		Returns:
		    The generated text and the preset that produced it

		Raises:
		    LLMError: When no preset produced a message

		"""
		chain = self.build_preset_chain()
		prompt = PromptPayload(system_prompt=system_prompt, user_content=diff)
		extra_variables = {
			f"{VARIABLE_PREFIX}LOCALE": self.config.locale,
		}

		if self._transport is not None:
			return self._orchestrator(self._transport, chain, extra_variables).call_with_fallback(chain, prompt)

		with RequestsTransport() as transport:
			return self._orchestrator(transport, chain, extra_variables).call_with_fallback(chain, prompt)

	def _orchestrator(
		self,
		transport: HttpTransport,
		chain: list[Preset],
		extra_variables: dict[str, str],
	) -> FallbackOrchestrator:
		logger.debug("Attempting %d preset(s): %s", len(chain), ", ".join(preset.name for preset in chain))
		# A lone primary propagates its own error
		return FallbackOrchestrator(
			transport,
			fallback_enabled=len(chain) > 1,
			retry_policy=self.retry_policy,
			timeout=self.config.request_timeout,
			extra_variables=extra_variables,
		)
