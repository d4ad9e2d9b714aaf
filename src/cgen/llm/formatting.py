"""Request body construction for each provider wire format."""

from __future__ import annotations

from typing import assert_never

from .extraction import JsonValue
from .providers import RequestFormat

MAX_TOKENS = 512
TEMPERATURE = 0


def build_body(request_format: RequestFormat, system_prompt: str, user_content: str, model: str) -> JsonValue:
	"""
	Build the JSON request body for a provider.

	Args:
	    request_format: Wire format of the target provider
	    system_prompt: Instructions for the model
	    user_content: The staged diff (or other user content)
	    model: Model identifier; Gemini carries it in the URL instead

	Returns:
	    The request body as plain JSON data

	"""
	match request_format:
		case RequestFormat.OPENAI_COMPAT:
			return {
				"model": model,
				"messages": [
					{"role": "system", "content": system_prompt},
					{"role": "user", "content": user_content},
				],
				"max_tokens": MAX_TOKENS,
				"temperature": TEMPERATURE,
			}
		case RequestFormat.GEMINI:
			return {
				"system_instruction": {"parts": [{"text": system_prompt}]},
				"contents": [{"role": "user", "parts": [{"text": user_content}]}],
				"generationConfig": {"temperature": TEMPERATURE},
			}
		case RequestFormat.ANTHROPIC:
			return {
				"model": model,
				"system": system_prompt,
				"messages": [{"role": "user", "content": user_content}],
				"max_tokens": MAX_TOKENS,
			}
		case _:
			assert_never(request_format)


def parse_headers(raw: str) -> list[tuple[str, str]]:
	"""
	Parse ``"Key: Value, Key2: Value2"`` into header pairs.

	Pairs without a colon are skipped. Only the first colon separates key and
	value, so values such as URLs survive.

	Args:
	    raw: Header template after interpolation

	Returns:
	    List of ``(key, value)`` pairs in declaration order

	"""
	if not raw.strip():
		return []

	headers = []
	for pair in raw.split(","):
		key, sep, value = pair.strip().partition(":")
		if not sep:
			continue
		headers.append((key.strip(), value.strip()))
	return headers
