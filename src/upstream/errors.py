"""Errors raised by calls to external HTTP dependencies."""

from __future__ import annotations


class UpstreamError(Exception):
    """Base class for every failure of an outbound dependency call."""


class TransportError(UpstreamError):
    """The request could not complete (DNS, connection refused, timeout)."""


class UpstreamStatusError(UpstreamError):
    """The dependency answered with a non-2xx status."""

    def __init__(
        self, status_code: int, body: object = None, message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.message = message
        text = f"Upstream request failed with status {status_code}"
        super().__init__(f"{text}: {message}" if message else text)


class UpstreamLogicalError(UpstreamError):
    """A 2xx response that carries a domain ``error`` field."""


class MalformedResponseError(UpstreamError):
    """A response is missing fields the caller depends on."""
