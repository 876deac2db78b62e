"""Shared test fixtures for the Messenger relay."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from src.audit.logger import AuditLogger
from src.config import RelaySettings

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> RelaySettings:
    """Factory for RelaySettings with test-friendly defaults."""
    defaults: dict[str, Any] = {
        "page_access_token": "page-token",
        "verify_token": "verify-secret",
        "document_qa_url": "http://qa.test",
        "llm_api_url": "http://llm.test/v1/chat/completions",
        "llm_api_key": "llm-key",
        "llm_model": "test-model",
    }
    defaults.update(kwargs)
    return RelaySettings(**defaults)


def make_messaging(
    sender_id: str = "user-1", text: str | None = "hello", postback: Any = None,
) -> dict[str, Any]:
    item: dict[str, Any] = {"sender": {"id": sender_id}, "recipient": {"id": "page-1"}}
    if text is not None:
        item["message"] = {"mid": f"m-{sender_id}", "text": text}
    if postback is not None:
        item["postback"] = postback
    return item


def make_page_payload(*messaging: dict[str, Any]) -> dict[str, Any]:
    """Webhook body with one entry holding the given messaging items."""
    return {
        "object": "page",
        "entry": [{"id": "page-1", "time": 1700000000, "messaging": list(messaging)}],
    }


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


class FakeUpstreams:
    """Routes outbound calls by host and records every request.

    ``qa``, ``llm`` and ``send`` are handlers returning an httpx.Response;
    tests replace them to simulate failures.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.qa: Handler = lambda req: httpx.Response(
            200, json={"result": "Paris is the capital of France."},
        )
        self.llm: Handler = lambda req: httpx.Response(
            200, json={"choices": [{"message": {"content": "Paris."}}]},
        )
        self.send: Handler = lambda req: httpx.Response(
            200, json={"message_id": "mid.1", "recipient_id": "user-1"},
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "qa.test":
            return self.qa(request)
        if host == "llm.test":
            return self.llm(request)
        if host == "graph.facebook.com":
            return self.send(request)
        return httpx.Response(404)

    def to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def mock_http_client(upstreams: FakeUpstreams) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstreams))
