"""FastAPI application exposing the Messenger webhook."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from src.audit.logger import AuditLogger
from src.config import RelaySettings
from src.messenger.send_api import SendApiClient
from src.messenger.verification import WebhookVerifier
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.relay.dispatcher import MessageDispatcher
from src.relay.ingress import WebhookIngress
from src.relay.keepalive import KeepAlive
from src.upstream.client import JsonApiClient
from src.upstream.completion import CompletionClient
from src.upstream.document_qa import DocumentQAClient

logger = logging.getLogger(__name__)

HEALTH_STATUS = "Chatbot server is running successfully!"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = RelaySettings.from_env()
    audit_logger = (
        AuditLogger.from_env(settings.audit_log_path) if settings.audit_log_path else None
    )
    return create_app(settings, audit_logger=audit_logger)


def build_dispatcher(
    settings: RelaySettings,
    http_client: httpx.AsyncClient,
    audit_logger: AuditLogger | None = None,
) -> MessageDispatcher:
    """Wire the upstream clients around one shared connection pool."""
    api = JsonApiClient(http_client, timeout=settings.http_timeout_seconds)
    completion: CompletionClient | None = None
    if settings.rewrite_enabled:
        completion = CompletionClient(
            api,
            url=settings.llm_api_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            referer=settings.llm_referer,
            app_title=settings.llm_app_title,
        )
    return MessageDispatcher(
        qa_client=DocumentQAClient(api, settings.document_qa_url),
        sender=SendApiClient(
            api,
            page_access_token=settings.page_access_token,
            graph_api_version=settings.graph_api_version,
            max_retries=settings.send_max_retries,
        ),
        completion_client=completion,
        rewrite_enabled=settings.rewrite_enabled,
        fallback_reply_text=settings.fallback_reply_text,
        audit_logger=audit_logger,
    )


def create_app(
    settings: RelaySettings,
    http_client: httpx.AsyncClient | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the relay app.

    When ``http_client`` is given the caller owns it; otherwise the app
    creates one and closes it on shutdown.
    """
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(verify=True)

    verifier = WebhookVerifier(settings.verify_token, settings.app_secret)
    ingress = WebhookIngress(build_dispatcher(settings, client, audit_logger))
    keep_alive = (
        KeepAlive(client, settings.keep_alive_url, settings.keep_alive_interval_seconds)
        if settings.keep_alive_url
        else None
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if keep_alive:
            keep_alive.start()
        try:
            yield
        finally:
            if keep_alive:
                await keep_alive.stop()
            if owns_client:
                await client.aclose()
            logger.info("Server closed")

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.settings = settings
    app.state.ingress = ingress
    app.state.keep_alive = keep_alive

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"status": HEALTH_STATUS}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/webhook")
    async def verify_webhook(request: Request) -> PlainTextResponse:
        params = request.query_params
        result = verifier.verify(
            params.get("hub.mode"),
            params.get("hub.verify_token"),
            params.get("hub.challenge"),
        )
        if result.verified:
            logger.info("WEBHOOK_VERIFIED")
            _audit(audit_logger, request, AuditEventType.WEBHOOK_VERIFIED, "success")
            return PlainTextResponse(result.content, status_code=200)

        if result.status_code == 403:
            logger.warning("Webhook verification rejected: token mismatch")
            _audit(audit_logger, request, AuditEventType.WEBHOOK_REJECTED, "rejected")
            return PlainTextResponse("Forbidden", status_code=403)
        return PlainTextResponse("Bad Request", status_code=result.status_code)

    @app.post("/webhook")
    async def receive_webhook(request: Request) -> PlainTextResponse:
        body = await request.body()
        if not verifier.verify_signature(dict(request.headers), body):
            logger.warning("Rejected webhook POST with invalid signature")
            _audit(audit_logger, request, AuditEventType.SIGNATURE_REJECTED, "rejected")
            return PlainTextResponse("Invalid signature", status_code=401)

        try:
            payload = json.loads(body) if body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        ack = await ingress.handle(payload)
        if ack.status_code != 200:
            return PlainTextResponse("Not Found", status_code=ack.status_code)
        return PlainTextResponse(ack.body, status_code=200)

    return app


def _audit(
    audit_logger: AuditLogger | None,
    request: Request,
    event_type: AuditEventType,
    result: str,
) -> None:
    if not audit_logger:
        return
    audit_logger.log(AuditEvent(
        event_type=event_type,
        source_ip=request.client.host if request.client else None,
        action=f"{request.method} {request.url.path}",
        result=result,
        risk_level=RiskLevel.INFO if result == "success" else RiskLevel.HIGH,
    ))
