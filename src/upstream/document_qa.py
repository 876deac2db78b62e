"""Client for the external document-QA service."""

from __future__ import annotations

import logging

from src.models import QAResult
from src.upstream.client import JsonApiClient
from src.upstream.errors import MalformedResponseError, UpstreamLogicalError

logger = logging.getLogger(__name__)


class DocumentQAClient:
    """Asks the document-QA service a question against its fixed corpus."""

    def __init__(self, api: JsonApiClient, base_url: str) -> None:
        self._api = api
        self._query_url = f"{base_url.rstrip('/')}/query"

    async def query(self, text: str) -> QAResult:
        """POST ``{query: text}`` and return the answer.

        An ``error`` field in a 2xx body raises UpstreamLogicalError.
        """
        data = await self._api.call(
            self._query_url,
            method="POST",
            headers={"Content-Type": "application/json"},
            body={"query": text},
        )
        if not isinstance(data, dict):
            raise MalformedResponseError("Document-QA response is not a JSON object")

        error = data.get("error")
        if error:
            raise UpstreamLogicalError(str(error))

        result = data.get("result")
        logger.debug("Document-QA answered (%d chars)", len(result or ""))
        return QAResult(result_text=str(result) if result else None)
