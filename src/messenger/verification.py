"""Messenger webhook verification.

Covers the GET subscription handshake (``hub.mode`` / ``hub.verify_token`` /
``hub.challenge``) and, when an app secret is configured, the
``X-Hub-Signature-256`` HMAC on POST bodies.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

SUBSCRIBE_MODE = "subscribe"
SIGNATURE_HEADER = "x-hub-signature-256"


@dataclass(frozen=True)
class VerificationResult:
    status_code: int
    content: str = ""

    @property
    def verified(self) -> bool:
        return self.status_code == 200


class WebhookVerifier:
    """Answers the platform's subscription handshake."""

    def __init__(self, verify_token: str, app_secret: str | None = None) -> None:
        self._verify_token = verify_token
        self._app_secret = app_secret

    def verify(
        self, mode: str | None, token: str | None, challenge: str | None,
    ) -> VerificationResult:
        """200 with the challenge on a valid subscribe, 403 on mismatch, 400 if absent."""
        if not mode or not token:
            return VerificationResult(status_code=400)

        token_ok = bool(self._verify_token) and hmac.compare_digest(
            token.encode(), self._verify_token.encode(),
        )
        if mode == SUBSCRIBE_MODE and token_ok:
            return VerificationResult(status_code=200, content=challenge or "")
        return VerificationResult(status_code=403)

    @property
    def signature_required(self) -> bool:
        return bool(self._app_secret)

    def verify_signature(self, headers: dict[str, str], body: bytes) -> bool:
        """Check ``sha256=<hex>`` against an HMAC of the raw body.

        Always True when no app secret is configured.
        """
        if not self._app_secret:
            return True
        signature = headers.get(SIGNATURE_HEADER, "")
        if not signature.startswith("sha256="):
            return False
        expected = hmac.new(
            self._app_secret.encode(), body, hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(signature[7:], expected)
