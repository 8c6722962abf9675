"""Hoarder API client.

Wraps the two bookmark-store endpoints the relay uses:
    GET  /bookmarks/{id}            - fetch a bookmark
    POST /bookmarks/{id}/summarize  - ask Hoarder's AI to summarize it

Both return the bookmark JSON. Authentication is a static bearer token.
"""

import logging
from urllib.parse import quote

import httpx

from src.core.bookmark import EnrichedBookmark
from src.core.http_client import get_client, request_json

logger = logging.getLogger(__name__)

SERVICE_NAME = "Hoarder API"


class HoarderClient:
    """Async client for the Hoarder bookmark API.

    Methods raise RemoteCallError / ParseError; deciding whether a failure
    degrades the post or skips the event is the caller's job.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API base, e.g. https://hoarder.example.com/api/v1
            api_token: Hoarder API key
            client: Optional httpx client; the shared client is used otherwise
        """
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._api_token}",
        }

    def _bookmark_url(self, bookmark_id: str) -> str:
        return f"{self.base_url}/bookmarks/{quote(bookmark_id, safe='')}"

    async def _http(self) -> httpx.AsyncClient:
        return self._client or await get_client()

    async def get_bookmark(self, bookmark_id: str) -> EnrichedBookmark:
        """Fetch a bookmark.

        Raises:
            RemoteCallError: On a non-2xx status or a transport error.
            ParseError: If the payload is not a usable bookmark.
        """
        data = await request_json(
            await self._http(),
            "GET",
            self._bookmark_url(bookmark_id),
            service=SERVICE_NAME,
            headers=self._headers(),
        )
        return EnrichedBookmark.from_api(data, bookmark_id)

    async def summarize_bookmark(self, bookmark_id: str) -> EnrichedBookmark:
        """Trigger AI summarization and return the updated bookmark.

        Raises:
            RemoteCallError: On a non-2xx status or a transport error.
            ParseError: If the payload is not a usable bookmark.
        """
        logger.info("Requesting AI summarization for bookmark %s", bookmark_id)
        data = await request_json(
            await self._http(),
            "POST",
            f"{self._bookmark_url(bookmark_id)}/summarize",
            service=SERVICE_NAME,
            headers=self._headers(),
        )
        return EnrichedBookmark.from_api(data, bookmark_id)
