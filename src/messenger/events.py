"""Inbound Messenger webhook events.

The webhook body nests events as ``entry[].messaging[]``. Each messaging
item is classified into exactly one variant here; malformed items become
UnknownEvent instead of raising, so one bad event never breaks a batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

PAGE_OBJECT = "page"


@dataclass(frozen=True)
class MessageEvent:
    """A user message carrying non-empty text."""

    sender_id: str
    text: str


@dataclass(frozen=True)
class PostbackEvent:
    sender_id: str
    payload: Any


@dataclass(frozen=True)
class UnknownEvent:
    sender_id: str | None
    reason: str


InboundEvent = MessageEvent | PostbackEvent | UnknownEvent


def is_page_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("object") == PAGE_OBJECT


def parse_event(item: Any) -> InboundEvent:
    """Classify a single ``messaging`` item."""
    if not isinstance(item, dict):
        return UnknownEvent(sender_id=None, reason="not an object")

    sender = item.get("sender")
    sender_id = sender.get("id") if isinstance(sender, dict) else None
    if sender_id is None or sender_id == "":
        return UnknownEvent(sender_id=None, reason="missing sender id")
    sender_id = str(sender_id)

    message = item.get("message")
    if isinstance(message, dict):
        # Copies of the page's own replies.
        if message.get("is_echo"):
            return UnknownEvent(sender_id=sender_id, reason="echo")
        text = message.get("text")
        if isinstance(text, str) and text.strip():
            return MessageEvent(sender_id=sender_id, text=text)
        return UnknownEvent(sender_id=sender_id, reason="message without text")

    if "postback" in item and item["postback"] is not None:
        return PostbackEvent(sender_id=sender_id, payload=item["postback"])

    return UnknownEvent(sender_id=sender_id, reason="no message or postback")


def extract_events(payload: dict[str, Any]) -> list[InboundEvent]:
    """Flatten ``entry[].messaging[]`` into a list of events."""
    entries = payload.get("entry", [])
    if not isinstance(entries, list):
        logger.warning("Webhook 'entry' is not a list; ignoring batch")
        return []

    events: list[InboundEvent] = []
    for entry in entries:
        messaging = entry.get("messaging", []) if isinstance(entry, dict) else None
        if not isinstance(messaging, list):
            logger.warning("Webhook entry without a 'messaging' list; skipping")
            continue
        events.extend(parse_event(item) for item in messaging)
    return events
