"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.config import (
    DEFAULT_DOCUMENT_QA_URL,
    DEFAULT_GRAPH_API_VERSION,
    DEFAULT_LLM_MODEL,
    RelaySettings,
)


def test_defaults_from_empty_environment() -> None:
    settings = RelaySettings.from_env({})
    assert settings.port == 2000
    assert settings.document_qa_url == DEFAULT_DOCUMENT_QA_URL
    assert settings.llm_model == DEFAULT_LLM_MODEL
    assert settings.graph_api_version == DEFAULT_GRAPH_API_VERSION
    assert settings.rewrite_enabled is True
    assert settings.send_max_retries == 0
    assert settings.http_timeout_seconds == 30.0
    assert settings.keep_alive_url is None
    assert settings.fallback_reply_text is None


def test_reads_secrets_and_port() -> None:
    settings = RelaySettings.from_env({
        "FACEBOOK_PAGE_ACCESS_TOKEN": "page",
        "FACEBOOK_VERIFY_TOKEN": "verify",
        "OPENROUTER_API_KEY": "sk",
        "PORT": "8080",
    })
    assert settings.page_access_token == "page"
    assert settings.verify_token == "verify"
    assert settings.llm_api_key == "sk"
    assert settings.port == 8080


def test_verify_token_defaults_to_page_token() -> None:
    settings = RelaySettings.from_env({"FACEBOOK_PAGE_ACCESS_TOKEN": "page"})
    assert settings.verify_token == "page"


@pytest.mark.parametrize("raw,expected", [
    ("true", True), ("1", True), ("YES", True), ("false", False), ("0", False), ("off", False),
])
def test_rewrite_flag_parsing(raw: str, expected: bool) -> None:
    assert RelaySettings.from_env({"REWRITE_ENABLED": raw}).rewrite_enabled is expected


def test_keep_alive_and_fallback() -> None:
    settings = RelaySettings.from_env({
        "KEEP_ALIVE_URL": "https://qa.example.com",
        "KEEP_ALIVE_INTERVAL_SECONDS": "30",
        "FALLBACK_REPLY_TEXT": "Sorry!",
    })
    assert settings.keep_alive_url == "https://qa.example.com"
    assert settings.keep_alive_interval_seconds == 30.0
    assert settings.fallback_reply_text == "Sorry!"


def test_non_positive_timeout_rejected() -> None:
    with pytest.raises(ValidationError):
        RelaySettings.from_env({"HTTP_TIMEOUT_SECONDS": "0"})


def test_settings_are_frozen() -> None:
    settings = RelaySettings()
    with pytest.raises(ValidationError):
        settings.port = 1  # type: ignore[misc]


def test_redacted_masks_secrets() -> None:
    settings = RelaySettings(page_access_token="page", llm_api_key="sk", verify_token="v")
    data = settings.redacted()
    assert data["page_access_token"] == "***"
    assert data["llm_api_key"] == "***"
    assert data["verify_token"] == "***"
    assert data["app_secret"] is None
    assert data["port"] == 2000
