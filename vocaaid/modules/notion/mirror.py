"""Remote mirror of the word list in a Notion database.

The core only depends on the ``RemoteMirror`` protocol. ``NotionMirror``
talks to the Notion REST API with httpx; ``OfflineMirror`` stands in when no
Notion credentials are configured so the rest of the service keeps working.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from vocaaid.core.config import NotionSettings
from vocaaid.core.errors import MissingRemoteReferenceError, TransportError
from vocaaid.core.logging import get_logger
from vocaaid.modules.notion.schema import page_to_word, word_to_properties
from vocaaid.modules.vocabulary.models import Dataset, Word
from vocaaid.modules.vocabulary.mutators import generate_id

logger = get_logger(__name__)


class RemoteMirror(Protocol):
    async def fetch_all(self) -> list[Word]: ...

    async def create(self, word: Word) -> str: ...

    async def update(self, word: Word) -> None: ...

    async def delete(self, remote_id: str) -> None: ...

    async def push_all(self, dataset: Dataset) -> dict[str, str]:
        """Create or update every word; returns ids of newly created pages."""
        ...


class NotionMirror:
    """Notion-backed mirror.

    Pass ``client`` to reuse a configured ``httpx.AsyncClient`` (tests use a
    ``MockTransport``); otherwise a short-lived client is opened per call.
    """

    PAGE_SIZE = 100

    def __init__(
        self,
        *,
        token: str,
        database_id: str,
        api_url: str = "https://api.notion.com/v1",
        version: str = "2022-06-28",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.database_id = database_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Notion-Version": version,
            "Content-Type": "application/json",
        }
        self._client = client

    async def _request(
        self, method: str, path: str, payload: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        url = f"{self.api_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, headers=self.headers, json=payload
                )
                response.raise_for_status()
                return response.json()
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, url, headers=self.headers, json=payload
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise TransportError(f"Notion {method} {path} failed: {e}") from e

    async def fetch_all(self) -> list[Word]:
        words: list[Word] = []
        cursor: Optional[str] = None
        while True:
            body: dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor
            data = await self._request(
                "POST", f"/databases/{self.database_id}/query", body
            )
            for page in data.get("results", []):
                if page.get("archived"):
                    continue
                words.append(page_to_word(page))
            if not data.get("has_more") or not data.get("next_cursor"):
                break
            cursor = data["next_cursor"]
        logger.info(f"Fetched {len(words)} words from Notion")
        return words

    async def create(self, word: Word) -> str:
        data = await self._request(
            "POST",
            "/pages",
            {
                "parent": {"database_id": self.database_id},
                "properties": word_to_properties(word),
            },
        )
        return data["id"]

    async def update(self, word: Word) -> None:
        if not word.remote_id:
            raise MissingRemoteReferenceError()
        await self._request(
            "PATCH", f"/pages/{word.remote_id}", {"properties": word_to_properties(word)}
        )

    async def delete(self, remote_id: str) -> None:
        if not remote_id:
            raise MissingRemoteReferenceError()
        # Notion has no hard delete for pages; archiving hides them from queries
        await self._request("PATCH", f"/pages/{remote_id}", {"archived": True})

    async def push_all(self, dataset: Dataset) -> dict[str, str]:
        created: dict[str, str] = {}
        try:
            for word in dataset.words:
                if word.remote_id:
                    await self.update(word)
                else:
                    created[word.id] = await self.create(word)
        except TransportError as e:
            logger.warning(f"Push stopped after {len(created)} new pages: {e.message}")
            raise TransportError(e.message, created=created) from e
        logger.info(
            f"Pushed {len(dataset.words)} words to Notion ({len(created)} new pages)"
        )
        return created


class OfflineMirror:
    """Mirror used when Notion is not configured: accepts calls, stores nothing."""

    async def fetch_all(self) -> list[Word]:
        logger.info("Notion is not configured; nothing to fetch")
        return []

    async def create(self, word: Word) -> str:
        logger.info("Notion is not configured; issuing a local reference", extra={"word_id": word.id})
        return f"local-{generate_id()}"

    async def update(self, word: Word) -> None:
        if not word.remote_id:
            raise MissingRemoteReferenceError()
        logger.info("Notion is not configured; update skipped", extra={"word_id": word.id})

    async def delete(self, remote_id: str) -> None:
        if not remote_id:
            raise MissingRemoteReferenceError()
        logger.info(f"Notion is not configured; delete of {remote_id} skipped")

    async def push_all(self, dataset: Dataset) -> dict[str, str]:
        logger.info(
            f"Notion is not configured; skipped pushing {len(dataset.words)} words"
        )
        return {}


def build_mirror(notion: NotionSettings) -> RemoteMirror:
    if notion.is_configured:
        return NotionMirror(
            token=notion.token or "",
            database_id=notion.database_id or "",
            api_url=notion.api_url,
            version=notion.version,
            timeout=notion.timeout,
        )
    return OfflineMirror()
