"""HTTP transport used to send provider requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self

import requests

from .errors import TransportError

if TYPE_CHECKING:
	from types import TracebackType

	from .extraction import JsonValue

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class HttpResponse:
	"""Status and raw body of a provider response."""

	status_code: int
	text: str

	@property
	def ok(self) -> bool:
		"""Whether the status is 2xx."""
		return 200 <= self.status_code < 300  # noqa: PLR2004


class HttpTransport(Protocol):
	"""Anything able to POST a JSON body and return the raw response."""

	def post(self, url: str, headers: list[tuple[str, str]], body: JsonValue, timeout: float) -> HttpResponse:
		"""Send a POST request; raise TransportError on network failure."""
		...


class RequestsTransport:
	"""Transport backed by a ``requests.Session``."""

	def __init__(self, session: requests.Session | None = None) -> None:
		"""
		Initialize the transport.

		Args:
		    session: Optional session to reuse; one is created otherwise

		"""
		self._session = session or requests.Session()

	def post(self, url: str, headers: list[tuple[str, str]], body: JsonValue, timeout: float) -> HttpResponse:
		"""
		POST ``body`` as JSON to ``url``.

		Args:
		    url: Fully interpolated request URL
		    headers: Header pairs; ``Content-Type`` is always set to JSON
		    body: JSON request body
		    timeout: Seconds to wait for the provider

		Returns:
		    The response status and body text

		Raises:
		    TransportError: On connection failures and timeouts

		"""
		request_headers = dict(headers)
		request_headers["Content-Type"] = "application/json"
		try:
			response = self._session.post(url, headers=request_headers, json=body, timeout=timeout)
		except requests.Timeout as e:
			msg = f"request timed out after {timeout:g}s"
			raise TransportError(msg) from e
		except requests.RequestException as e:
			raise TransportError(str(e)) from e
		except UnicodeError as e:
			msg = f"request could not be encoded: {e}"
			raise TransportError(msg) from e

		logger.debug("Provider responded with HTTP %d", response.status_code)
		return HttpResponse(status_code=response.status_code, text=response.text)

	def close(self) -> None:
		"""Close the underlying session."""
		self._session.close()

	def __enter__(self) -> Self:
		"""Enter the runtime context."""
		return self

	def __exit__(
		self,
		exc_type: type[BaseException] | None,
		exc_val: BaseException | None,
		exc_tb: TracebackType | None,
	) -> None:
		"""Close the session on exit."""
		self.close()
