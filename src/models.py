"""Shared Pydantic data models for the Messenger relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class AuditEventType(str, Enum):
    WEBHOOK_VERIFIED = "webhook_verified"
    WEBHOOK_REJECTED = "webhook_rejected"
    SIGNATURE_REJECTED = "signature_rejected"
    DELIVERY_SENT = "delivery_sent"
    PIPELINE_FAILED = "pipeline_failed"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Relay Models ---


class QAResult(BaseModel):
    """Answer returned by the document-QA service for one query."""

    model_config = ConfigDict(frozen=True)

    result_text: str | None = None
    error_text: str | None = None


class OutboundReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipient_id: str = Field(min_length=1)
    text: str

    def to_send_api_body(self) -> dict[str, object]:
        return {
            "recipient": {"id": self.recipient_id},
            "message": {"text": self.text},
        }


class DeliveryReceipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    message_id: str | None = None
    recipient_id: str | None = None


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    sender_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
