"""Webhook ingress: validates a Messenger batch and fans it out."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from src.messenger.events import extract_events, is_page_payload
from src.relay.dispatcher import DispatchOutcome, MessageDispatcher

logger = logging.getLogger(__name__)

EVENT_RECEIVED = "EVENT_RECEIVED"


@dataclass
class WebhookAck:
    status_code: int
    body: str = ""
    outcomes: list[DispatchOutcome] = field(default_factory=list)


class WebhookIngress:
    """Runs one dispatcher pipeline per event and acknowledges the batch.

    The ack waits for every pipeline to settle but never depends on how
    they ended.
    """

    def __init__(self, dispatcher: MessageDispatcher) -> None:
        self._dispatcher = dispatcher

    async def handle(self, payload: Any) -> WebhookAck:
        if not is_page_payload(payload):
            logger.info("Ignoring webhook payload that is not a page object")
            return WebhookAck(status_code=404)

        events = extract_events(payload)
        logger.info("Received webhook batch with %d event(s)", len(events))

        results = await asyncio.gather(
            *(self._dispatcher.dispatch(event) for event in events),
            return_exceptions=True,
        )

        outcomes: list[DispatchOutcome] = []
        for event, result in zip(events, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Unexpected error while dispatching event from %s",
                    getattr(event, "sender_id", None),
                    exc_info=result,
                )
                continue
            outcomes.append(result)

        return WebhookAck(status_code=200, body=EVENT_RECEIVED, outcomes=outcomes)
