"""Runtime settings for the relay, read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DOCUMENT_QA_URL = "https://book-business-custom-chatbot.onrender.com"
DEFAULT_LLM_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_LLM_MODEL = "deepseek/deepseek-r1:free"
DEFAULT_GRAPH_API_VERSION = "v12.0"
DEFAULT_PORT = 2000

_TRUTHY = {"1", "true", "yes", "on"}
_SECRET_FIELDS = ("page_access_token", "verify_token", "app_secret", "llm_api_key")


class RelaySettings(BaseModel):
    """Process-wide configuration. Read-only once the app is built."""

    model_config = ConfigDict(frozen=True)

    page_access_token: str = ""
    verify_token: str = ""
    app_secret: str | None = None
    graph_api_version: str = DEFAULT_GRAPH_API_VERSION

    document_qa_url: str = DEFAULT_DOCUMENT_QA_URL

    llm_api_url: str = DEFAULT_LLM_API_URL
    llm_api_key: str = ""
    llm_model: str = DEFAULT_LLM_MODEL
    llm_referer: str = "http://localhost:2000"
    llm_app_title: str = "Chatbot"

    rewrite_enabled: bool = True
    fallback_reply_text: str | None = None
    send_max_retries: int = Field(default=0, ge=0, le=10)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    keep_alive_url: str | None = None
    keep_alive_interval_seconds: float = Field(default=10.0, gt=0)

    audit_log_path: str | None = None

    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelaySettings:
        """Build settings from the process environment (or the given mapping).

        Missing secrets are not an error here: the calls that need them fail
        when they are made.
        """
        env = os.environ if environ is None else environ
        page_token = env.get("FACEBOOK_PAGE_ACCESS_TOKEN", "")
        return cls(
            page_access_token=page_token,
            verify_token=env.get("FACEBOOK_VERIFY_TOKEN") or page_token,
            app_secret=env.get("FACEBOOK_APP_SECRET") or None,
            graph_api_version=env.get("GRAPH_API_VERSION", DEFAULT_GRAPH_API_VERSION),
            document_qa_url=env.get("DOCUMENT_QA_URL", DEFAULT_DOCUMENT_QA_URL),
            llm_api_url=env.get("LLM_API_URL", DEFAULT_LLM_API_URL),
            llm_api_key=env.get("OPENROUTER_API_KEY", ""),
            llm_model=env.get("LLM_MODEL", DEFAULT_LLM_MODEL),
            llm_referer=env.get("LLM_REFERER", "http://localhost:2000"),
            llm_app_title=env.get("LLM_APP_TITLE", "Chatbot"),
            rewrite_enabled=env.get("REWRITE_ENABLED", "true").strip().lower() in _TRUTHY,
            fallback_reply_text=env.get("FALLBACK_REPLY_TEXT") or None,
            send_max_retries=int(env.get("SEND_MAX_RETRIES", "0")),
            http_timeout_seconds=float(env.get("HTTP_TIMEOUT_SECONDS", "30")),
            keep_alive_url=env.get("KEEP_ALIVE_URL") or None,
            keep_alive_interval_seconds=float(env.get("KEEP_ALIVE_INTERVAL_SECONDS", "10")),
            audit_log_path=env.get("AUDIT_LOG_PATH") or None,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", str(DEFAULT_PORT))),
        )

    def redacted(self) -> dict[str, object]:
        """Settings as a dict with secrets masked, for display."""
        data = self.model_dump()
        for name in _SECRET_FIELDS:
            if data.get(name):
                data[name] = "***"
        return data
