"""Client for the OpenAI-compatible chat-completion endpoint."""

from __future__ import annotations

from typing import Any

from src.upstream.client import JsonApiClient
from src.upstream.errors import MalformedResponseError

FALLBACK_COMPLETION_TEXT = "I can not help you right now."


class CompletionClient:
    """Single-turn chat completion with bearer auth."""

    def __init__(
        self,
        api: JsonApiClient,
        url: str,
        api_key: str,
        model: str,
        referer: str = "http://localhost:2000",
        app_title: str = "Chatbot",
    ) -> None:
        self._api = api
        self._url = url
        self._api_key = api_key
        self._model = model
        self._referer = referer
        self._app_title = app_title

    def to_request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def complete(self, prompt: str) -> str:
        """Return the assistant content of the first choice.

        Missing ``choices`` raises MalformedResponseError; a choice without
        usable content yields FALLBACK_COMPLETION_TEXT.
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": self._referer,
            "X-Title": self._app_title,
            "Content-Type": "application/json",
        }
        data = await self._api.call(
            self._url, method="POST", headers=headers, body=self.to_request(prompt),
        )
        return extract_content(data)


def extract_content(data: Any) -> str:
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        raise MalformedResponseError("Completion response has no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        return FALLBACK_COMPLETION_TEXT
    return content
