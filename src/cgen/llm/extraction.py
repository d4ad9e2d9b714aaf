"""Extraction of generated text from provider responses by dotted path."""

from __future__ import annotations

from typing import TypeAlias

from .errors import ResponsePathError

JsonValue: TypeAlias = dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None


def _is_index(segment: str) -> bool:
	return segment.isascii() and segment.isdigit()


def parse_path(path: str) -> list[str | int]:
	"""
	Split a response path into key and index segments.

	Args:
	    path: Dotted path such as ``choices.0.message.content``

	Returns:
	    Segments, with numeric segments converted to ``int``

	Raises:
	    ResponsePathError: If the path contains an empty segment

	"""
	segments: list[str | int] = []
	walked: list[str] = []
	for raw in path.split("."):
		if not raw:
			raise ResponsePathError(raw, ".".join(walked), "empty path segment")
		segments.append(int(raw) if _is_index(raw) else raw)
		walked.append(raw)
	return segments


def _type_name(value: JsonValue) -> str:
	if value is None:
		return "null"
	if isinstance(value, bool):
		return "boolean"
	if isinstance(value, int | float):
		return "number"
	if isinstance(value, str):
		return "string"
	if isinstance(value, list):
		return "array"
	return "object"


def extract(body: JsonValue, path: str) -> str:
	"""
	Walk ``body`` along ``path`` and return the text found there.

	Integer segments index arrays, other segments look up object keys.

	Args:
	    body: Parsed JSON response
	    path: Dotted response path

	Returns:
	    The string at the end of the path

	Raises:
	    ResponsePathError: If a segment does not resolve or the terminal value is not a string

	"""
	current = body
	walked: list[str] = []
	for segment in parse_path(path):
		location = ".".join(walked)
		if isinstance(segment, int):
			if not isinstance(current, list):
				raise ResponsePathError(str(segment), location, f"expected array, found {_type_name(current)}")
			if segment >= len(current):
				raise ResponsePathError(
					str(segment), location, f"array index {segment} out of range (length {len(current)})"
				)
			current = current[segment]
		else:
			if not isinstance(current, dict):
				raise ResponsePathError(segment, location, f"expected object, found {_type_name(current)}")
			if segment not in current:
				raise ResponsePathError(segment, location, f"key '{segment}' not found")
			current = current[segment]
		walked.append(str(segment))

	if not isinstance(current, str):
		raise ResponsePathError(walked[-1], ".".join(walked[:-1]), f"expected string, found {_type_name(current)}")
	return current
