"""Tests for the requests-based transport."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from cgen.llm.errors import TransportError
from cgen.llm.transport import HttpResponse, RequestsTransport


@pytest.fixture
def session() -> MagicMock:
	"""A mocked requests session."""
	return MagicMock(spec=requests.Session)


@pytest.mark.unit
def test_post_sends_json_with_headers(session: MagicMock) -> None:
	"""Headers are merged with a JSON content type and the body is sent as JSON."""
	session.post.return_value = MagicMock(status_code=200, text='{"ok": true}')
	transport = RequestsTransport(session)

	response = transport.post("https://api.test/v1", [("Authorization", "Bearer k")], {"a": 1}, 12.5)

	assert response == HttpResponse(200, '{"ok": true}')
	session.post.assert_called_once_with(
		"https://api.test/v1",
		headers={"Authorization": "Bearer k", "Content-Type": "application/json"},
		json={"a": 1},
		timeout=12.5,
	)


@pytest.mark.unit
def test_non_2xx_is_returned_not_raised(session: MagicMock) -> None:
	"""Status handling is left to the caller."""
	session.post.return_value = MagicMock(status_code=429, text="slow down")
	response = RequestsTransport(session).post("https://api.test", [], {}, 1)
	assert not response.ok
	assert response.status_code == 429


@pytest.mark.unit
def test_timeout_becomes_transport_error(session: MagicMock) -> None:
	"""Timeouts are network failures."""
	session.post.side_effect = requests.Timeout("read timed out")
	with pytest.raises(TransportError, match="timed out after 60s"):
		RequestsTransport(session).post("https://api.test", [], {}, 60.0)


@pytest.mark.unit
def test_connection_error_becomes_transport_error(session: MagicMock) -> None:
	"""Connection failures are network failures."""
	session.post.side_effect = requests.ConnectionError("connection refused")
	with pytest.raises(TransportError, match="connection refused"):
		RequestsTransport(session).post("https://api.test", [], {}, 1)


@pytest.mark.unit
def test_context_manager_closes_session(session: MagicMock) -> None:
	"""Leaving the context closes the session."""
	with RequestsTransport(session):
		pass
	session.close.assert_called_once()


@pytest.mark.unit
def test_unencodable_header_becomes_transport_error(session: MagicMock) -> None:
	"""A key with characters HTTP headers cannot carry is a network failure."""
	session.post.side_effect = UnicodeEncodeError("latin-1", "Bearer sk-abc…", 13, 14, "ordinal not in range(256)")
	with pytest.raises(TransportError, match="could not be encoded"):
		RequestsTransport(session).post("https://api.test", [("Authorization", "Bearer sk-abc…")], {}, 1)
