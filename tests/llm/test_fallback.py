"""Tests for ordered fallback across presets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
import requests

from cgen.llm.errors import AllProvidersExhaustedError, HttpStatusError, ResponsePathError, TransportError
from cgen.llm.fallback import FallbackOrchestrator, PromptPayload, RetryPolicy
from cgen.llm.transport import HttpResponse, HttpTransport, RequestsTransport
from cgen.presets.models import Preset
from tests.fakes import FakeTransport, openai_reply

PROMPT = PromptPayload(system_prompt="write a commit message", user_content="diff --git a/x b/x")

MakePreset = Callable[..., Preset]


def orchestrator(transport: HttpTransport, **kwargs: object) -> FallbackOrchestrator:
	return FallbackOrchestrator(transport, environ={}, **kwargs)  # type: ignore[arg-type]


@pytest.mark.unit
class TestAttempt:
	"""Test cases for a single attempt."""

	def test_interpolates_url_and_headers(self, make_preset: MakePreset) -> None:
		"""The preset's key and model reach the URL and headers."""
		transport = FakeTransport(
			HttpResponse(200, '{"candidates": [{"content": {"parts": [{"text": "feat: gemini"}]}}]}')
		)
		preset = make_preset(1, provider="gemini", model="gemini-2.0-flash", api_key="g-key")

		text = orchestrator(transport, timeout=5).attempt(preset, PROMPT)

		assert text == "feat: gemini"
		call = transport.calls[0]
		assert call["url"].endswith("/models/gemini-2.0-flash:generateContent?key=g-key")
		assert call["headers"] == []
		assert call["timeout"] == 5

	def test_empty_model_uses_provider_default(self, make_preset: MakePreset) -> None:
		"""A preset without a model gets the provider's default."""
		transport = FakeTransport(openai_reply("fix: x"))
		orchestrator(transport).attempt(make_preset(1, model=""), PROMPT)
		assert transport.calls[0]["body"]["model"] == "gpt-4o-mini"

	def test_custom_url_and_headers(self, make_preset: MakePreset) -> None:
		"""Preset URL and header templates override the provider's."""
		transport = FakeTransport(openai_reply("chore: y"))
		preset = make_preset(
			1,
			provider="local",
			model="llama3",
			api_url="http://localhost:11434/v1/chat/completions",
			api_headers="X-Model: $ACR_MODEL, X-Home: $NOT_SET",
		)
		orchestrator(transport).attempt(preset, PROMPT)
		call = transport.calls[0]
		assert call["url"] == "http://localhost:11434/v1/chat/completions"
		assert call["headers"] == [("X-Model", "llama3"), ("X-Home", "$NOT_SET")]

	def test_http_error(self, make_preset: MakePreset) -> None:
		"""Non-2xx statuses raise HttpStatusError with the body."""
		transport = FakeTransport(HttpResponse(401, "bad key"))
		with pytest.raises(HttpStatusError) as exc_info:
			orchestrator(transport).attempt(make_preset(1), PROMPT)
		assert exc_info.value.status_code == 401
		assert str(exc_info.value) == "API returned HTTP 401: bad key"

	def test_invalid_json(self, make_preset: MakePreset) -> None:
		"""Unparseable bodies are extraction failures."""
		transport = FakeTransport(HttpResponse(200, "<html>"))
		with pytest.raises(ResponsePathError, match="not valid JSON"):
			orchestrator(transport).attempt(make_preset(1), PROMPT)


@pytest.mark.unit
class TestCallWithFallback:
	"""Test cases for call_with_fallback."""

	def test_first_success_is_not_a_fallback(self, make_preset: MakePreset) -> None:
		"""A working primary answers directly."""
		transport = FakeTransport(openai_reply("feat: a"))
		result = orchestrator(transport).call_with_fallback([make_preset(1), make_preset(2)], PROMPT)
		assert result.text == "feat: a"
		assert result.preset_id == 1
		assert not result.is_fallback
		assert result.failures == ()
		assert len(transport.calls) == 1

	def test_third_preset_succeeds_after_two_failures(self, make_preset: MakePreset) -> None:
		"""Failures accumulate in order and the success is attributed to C."""
		transport = FakeTransport(HttpResponse(500, "boom"), TransportError("refused"), openai_reply("fix: c"))
		presets = [make_preset(1, "A"), make_preset(2, "B"), make_preset(3, "C")]

		result = orchestrator(transport).call_with_fallback(presets, PROMPT)

		assert result.text == "fix: c"
		assert result.preset_name == "C"
		assert result.is_fallback
		assert [failure.preset_name for failure in result.failures] == ["A", "B"]
		assert [failure.reason for failure in result.failures] == ["HTTP 500", "network error: refused"]

	def test_all_fail(self, make_preset: MakePreset) -> None:
		"""Exhaustion lists every preset in attempt order."""
		transport = FakeTransport(
			HttpResponse(429, ""),
			HttpResponse(200, '{"choices": []}'),
			TransportError("timeout"),
		)
		presets = [make_preset(1, "A"), make_preset(2, "B"), make_preset(3, "C")]

		with pytest.raises(AllProvidersExhaustedError) as exc_info:
			orchestrator(transport).call_with_fallback(presets, PROMPT)

		failures = exc_info.value.failures
		assert [failure.preset_id for failure in failures] == [1, 2, 3]
		assert str(exc_info.value).startswith("All LLM providers failed: A (HTTP 429), B (")

	def test_unknown_provider_is_a_recorded_failure(self, make_preset: MakePreset) -> None:
		"""Resolution errors move on to the next preset."""
		transport = FakeTransport(openai_reply("docs: b"))
		presets = [make_preset(1, "A", provider="mystery"), make_preset(2, "B")]
		result = orchestrator(transport).call_with_fallback(presets, PROMPT)
		assert result.preset_id == 2
		assert "Unknown provider 'mystery'" in result.failures[0].reason

	def test_disabled_attempts_only_first(self, make_preset: MakePreset) -> None:
		"""With fallback off the first preset's error propagates unchanged."""
		transport = FakeTransport(HttpResponse(503, "down"), openai_reply("unused"))
		presets = [make_preset(1), make_preset(2), make_preset(3)]

		with pytest.raises(HttpStatusError):
			orchestrator(transport, fallback_enabled=False).call_with_fallback(presets, PROMPT)

		assert len(transport.calls) == 1

	def test_disabled_success(self, make_preset: MakePreset) -> None:
		"""With fallback off a working first preset still answers."""
		transport = FakeTransport(openai_reply("feat: only"))
		result = orchestrator(transport, fallback_enabled=False).call_with_fallback([make_preset(7)], PROMPT)
		assert result.preset_id == 7

	def test_duplicate_ids_attempted_once(self, make_preset: MakePreset) -> None:
		"""A repeated preset id is skipped."""
		transport = FakeTransport(HttpResponse(500, ""), HttpResponse(500, ""))
		a = make_preset(1, "A")
		presets = [a, a, make_preset(2, "B"), a]

		with pytest.raises(AllProvidersExhaustedError) as exc_info:
			orchestrator(transport).call_with_fallback(presets, PROMPT)

		assert len(transport.calls) == 2
		assert [failure.preset_id for failure in exc_info.value.failures] == [1, 2]

	def test_empty_list(self) -> None:
		"""Nothing to try is an exhaustion with no failures."""
		with pytest.raises(AllProvidersExhaustedError, match="no presets to try") as exc_info:
			orchestrator(FakeTransport()).call_with_fallback([], PROMPT)
		assert exc_info.value.failures == []

	def test_non_retryable_status_stops_the_pass(self, make_preset: MakePreset) -> None:
		"""Statuses marked non-retryable end the pass early."""
		transport = FakeTransport(HttpResponse(400, "bad request"), openai_reply("unused"))
		policy = RetryPolicy(non_retryable_statuses=frozenset({400}))

		with pytest.raises(AllProvidersExhaustedError) as exc_info:
			orchestrator(transport, retry_policy=policy).call_with_fallback([make_preset(1), make_preset(2)], PROMPT)

		assert len(transport.calls) == 1
		assert len(exc_info.value.failures) == 1

	def test_logs_each_transition(self, make_preset: MakePreset, caplog: pytest.LogCaptureFixture) -> None:
		"""Moving to the next preset is logged as a warning."""
		transport = FakeTransport(HttpResponse(500, ""), openai_reply("feat: b"))
		with caplog.at_level(logging.WARNING, logger="cgen.llm.fallback"):
			orchestrator(transport).call_with_fallback([make_preset(1, "A"), make_preset(2, "B")], PROMPT)
		assert "A failed (HTTP 500), trying: B" in caplog.text

	def test_unencodable_key_moves_to_next_preset(self, make_preset: MakePreset) -> None:
		"""An API key that cannot be sent as a header fails only its own preset."""
		session = MagicMock(spec=requests.Session)
		session.post.side_effect = [
			UnicodeEncodeError("latin-1", "Bearer sk-abc…", 13, 14, "ordinal not in range(256)"),
			MagicMock(status_code=200, text='{"choices": [{"message": {"content": "feat: b"}}]}'),
		]
		presets = [make_preset(1, "A", api_key="sk-abc…"), make_preset(2, "B")]

		result = orchestrator(RequestsTransport(session)).call_with_fallback(presets, PROMPT)

		assert result.preset_name == "B"
		assert result.failures[0].preset_name == "A"
		assert "could not be encoded" in result.failures[0].reason

	def test_single_failing_preset_is_exhaustion(self, make_preset: MakePreset) -> None:
		"""With fallback on, one failing preset still ends in exhaustion."""
		transport = FakeTransport(HttpResponse(500, "boom"))

		with pytest.raises(AllProvidersExhaustedError) as exc_info:
			orchestrator(transport).call_with_fallback([make_preset(1, "A")], PROMPT)

		assert [failure.preset_name for failure in exc_info.value.failures] == ["A"]
