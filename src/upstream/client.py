"""Generic JSON-over-HTTP client shared by every outbound dependency."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from src.upstream.errors import (
    MalformedResponseError,
    TransportError,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

_SECRET_PARAM_RE = re.compile(r"(access_token=)[^&\s'\"]+")
_HTTP_LIBRARY_LOGGERS = ("httpx", "httpcore")


class SecretParamFilter(logging.Filter):
    """Masks ``access_token`` query values in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PARAM_RE.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def install_log_redaction() -> None:
    """Attach SecretParamFilter to the HTTP library loggers once."""
    for name in _HTTP_LIBRARY_LOGGERS:
        lib_logger = logging.getLogger(name)
        if not any(isinstance(f, SecretParamFilter) for f in lib_logger.filters):
            lib_logger.addFilter(SecretParamFilter())


install_log_redaction()


class JsonApiClient:
    """Fetch-and-parse wrapper around a shared ``httpx.AsyncClient``.

    Performs no retries and no domain validation: callers decide what a
    logical failure looks like in the parsed body.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._http = http_client
        self._timeout = timeout

    async def call(
        self,
        url: str,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and return the parsed JSON body.

        Raises TransportError, UpstreamStatusError or MalformedResponseError.
        """
        logger.debug("Outbound %s %s", method, url)
        try:
            resp = await self._http.request(
                method,
                url,
                headers=headers,
                json=body,
                params=params,
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None
            if resp.is_success:
                raise MalformedResponseError(
                    f"{method} {url} returned a non-JSON body",
                ) from None

        if not resp.is_success:
            raise UpstreamStatusError(resp.status_code, data)
        return data
