"""Per-event reply pipeline.

One inbound message goes through:

1. Document-QA query
2. Optional LLM rewrite of the answer
3. Delivery through the Messenger Send API

Upstream failures end the pipeline in FAILED and are logged (and written to
the audit log when configured); they are never raised to the caller, so a
failing event cannot affect the rest of its batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from src.messenger.events import InboundEvent, MessageEvent, PostbackEvent
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.relay.composer import compose_rewrite_prompt
from src.upstream.errors import UpstreamError

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.messenger.send_api import SendApiClient
    from src.upstream.completion import CompletionClient
    from src.upstream.document_qa import DocumentQAClient

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    RECEIVED = "received"
    QA_QUERIED = "qa_queried"
    REWRITE_QUERIED = "rewrite_queried"
    REPLY_READY = "reply_ready"
    SENT = "sent"
    FAILED = "failed"
    IGNORED = "ignored"


class PipelineStage(str, Enum):
    DOCUMENT_QA = "document_qa"
    REWRITE = "rewrite"
    SEND = "send"


@dataclass
class DispatchOutcome:
    """Terminal result of one event's pipeline."""

    sender_id: str | None
    state: DispatchState
    failed_stage: PipelineStage | None = None
    error: str | None = None
    fallback_sent: bool = False


class MessageDispatcher:
    """Turns one inbound event into at most one outbound reply."""

    def __init__(
        self,
        qa_client: DocumentQAClient,
        sender: SendApiClient,
        completion_client: CompletionClient | None = None,
        rewrite_enabled: bool = True,
        fallback_reply_text: str | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        if rewrite_enabled and completion_client is None:
            raise ValueError("rewrite_enabled requires a completion client")
        self._qa = qa_client
        self._sender = sender
        self._completion = completion_client
        self._rewrite_enabled = rewrite_enabled
        self._fallback_text = fallback_reply_text
        self._audit = audit_logger

    async def dispatch(self, event: InboundEvent) -> DispatchOutcome:
        if isinstance(event, PostbackEvent):
            logger.info("Received postback from %s: %r", event.sender_id, event.payload)
            return DispatchOutcome(sender_id=event.sender_id, state=DispatchState.IGNORED)
        if not isinstance(event, MessageEvent):
            logger.info("Skipping event from %s: %s", event.sender_id, event.reason)
            return DispatchOutcome(sender_id=event.sender_id, state=DispatchState.IGNORED)

        logger.info("Received message from %s", event.sender_id)
        stage = PipelineStage.DOCUMENT_QA
        try:
            qa_result = await self._qa.query(event.text)
            if not qa_result.result_text:
                logger.info("Document-QA returned no answer for %s; not replying", event.sender_id)
                return DispatchOutcome(sender_id=event.sender_id, state=DispatchState.IGNORED)

            if self._rewrite_enabled:
                stage = PipelineStage.REWRITE
                prompt = compose_rewrite_prompt(event.text, qa_result.result_text)
                reply_text = await self._completion.complete(prompt)  # type: ignore[union-attr]
                state = DispatchState.REWRITE_QUERIED
            else:
                reply_text = qa_result.result_text
                state = DispatchState.REPLY_READY
        except UpstreamError as exc:
            return await self._fail_before_send(event, stage, exc)

        logger.debug("Reply for %s ready after %s", event.sender_id, state.value)
        try:
            receipt = await self._sender.send_text(event.sender_id, reply_text)
        except UpstreamError as exc:
            self._record_failure(event, PipelineStage.SEND, exc)
            return DispatchOutcome(
                sender_id=event.sender_id,
                state=DispatchState.FAILED,
                failed_stage=PipelineStage.SEND,
                error=str(exc),
            )

        if self._audit:
            self._audit.log(AuditEvent(
                event_type=AuditEventType.DELIVERY_SENT,
                sender_id=event.sender_id,
                action="send_reply",
                result="success",
                risk_level=RiskLevel.INFO,
                details={"message_id": receipt.message_id},
            ))
        return DispatchOutcome(sender_id=event.sender_id, state=DispatchState.SENT)

    async def _fail_before_send(
        self, event: MessageEvent, stage: PipelineStage, exc: UpstreamError,
    ) -> DispatchOutcome:
        self._record_failure(event, stage, exc)
        outcome = DispatchOutcome(
            sender_id=event.sender_id,
            state=DispatchState.FAILED,
            failed_stage=stage,
            error=str(exc),
        )
        if not self._fallback_text:
            return outcome

        try:
            await self._sender.send_text(event.sender_id, self._fallback_text)
        except UpstreamError as send_exc:
            logger.warning("Fallback reply to %s failed: %s", event.sender_id, send_exc)
        else:
            outcome.fallback_sent = True
        return outcome

    def _record_failure(
        self, event: MessageEvent, stage: PipelineStage, exc: UpstreamError,
    ) -> None:
        logger.warning(
            "Pipeline for %s failed at %s: %s: %s",
            event.sender_id, stage.value, type(exc).__name__, exc,
        )
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=AuditEventType.PIPELINE_FAILED,
                sender_id=event.sender_id,
                action=stage.value,
                result="failure",
                risk_level=RiskLevel.MEDIUM,
                details={
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                    "status_code": getattr(exc, "status_code", None),
                    "text": event.text,
                },
            ))
