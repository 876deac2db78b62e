"""Reply pipeline for the Messenger relay.

This package sequences the work for each inbound webhook batch:
- Fan-out of events with an unconditional acknowledgment
- Document-QA lookup, optional LLM rewrite, and Send API delivery
- Keep-alive pings for the upstream host
"""

from src.relay.composer import compose_rewrite_prompt
from src.relay.dispatcher import (
    DispatchOutcome,
    DispatchState,
    MessageDispatcher,
    PipelineStage,
)
from src.relay.ingress import EVENT_RECEIVED, WebhookAck, WebhookIngress
from src.relay.keepalive import KeepAlive

__all__ = [
    # Components
    "KeepAlive",
    "MessageDispatcher",
    "WebhookIngress",
    # Result types
    "DispatchOutcome",
    "DispatchState",
    "PipelineStage",
    "WebhookAck",
    # Helpers
    "EVENT_RECEIVED",
    "compose_rewrite_prompt",
]
