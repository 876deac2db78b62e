"""Messenger Send API client that delivers text replies to end users."""

from __future__ import annotations

import asyncio
import logging

from src.models import DeliveryReceipt, OutboundReply
from src.upstream.client import JsonApiClient
from src.upstream.errors import UpstreamLogicalError, UpstreamStatusError

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"
_BACKOFF_CAP_SECONDS = 30


class SendApiClient:
    """Posts ``me/messages`` requests on behalf of the page."""

    def __init__(
        self,
        api: JsonApiClient,
        page_access_token: str,
        graph_api_version: str = "v12.0",
        max_retries: int = 0,
        base_url: str = GRAPH_API_BASE,
    ) -> None:
        self._api = api
        self._token = page_access_token
        self._url = f"{base_url.rstrip('/')}/{graph_api_version}/me/messages"
        self._max_retries = max_retries

    async def send_text(self, recipient_id: str, text: str) -> DeliveryReceipt:
        return await self.send(OutboundReply(recipient_id=recipient_id, text=text))

    async def send(self, reply: OutboundReply) -> DeliveryReceipt:
        """Deliver one reply.

        Retries only on 429/5xx, and only when max_retries > 0. A non-2xx
        platform error (``{"error": {"message": ...}}``) is raised as
        UpstreamStatusError carrying both the status and the message.
        """
        for attempt in range(self._max_retries + 1):
            try:
                data = await self._api.call(
                    self._url,
                    method="POST",
                    headers={"Content-Type": "application/json"},
                    body=reply.to_send_api_body(),
                    params={"access_token": self._token},
                )
            except UpstreamStatusError as exc:
                if attempt < self._max_retries and self._should_retry(exc.status_code):
                    delay = min(2 ** attempt, _BACKOFF_CAP_SECONDS)
                    logger.info(
                        "Send API returned %d; retrying in %ss", exc.status_code, delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                message = _platform_error_message(exc.body)
                if message:
                    raise UpstreamStatusError(
                        exc.status_code, exc.body, message=message,
                    ) from exc
                raise
            break

        if isinstance(data, dict) and data.get("error"):
            raise UpstreamLogicalError(_platform_error_message(data) or "Send API error")

        receipt = DeliveryReceipt(
            message_id=_as_str(data, "message_id"),
            recipient_id=_as_str(data, "recipient_id"),
        )
        logger.info(
            "Successfully sent message with id %s to recipient %s",
            receipt.message_id, receipt.recipient_id,
        )
        return receipt

    @staticmethod
    def _should_retry(status_code: int) -> bool:
        return status_code == 429 or status_code >= 500


def _platform_error_message(body: object) -> str | None:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    return str(error) if error else None


def _as_str(data: object, key: str) -> str | None:
    if isinstance(data, dict) and data.get(key) is not None:
        return str(data[key])
    return None
