"""HTTP page fetcher adapter.

Implements the core PageFetcherPort. Network errors propagate so the
provenance checker can fall back to URL-only scoring.
"""

from __future__ import annotations

from typing import Optional

import httpx


class HttpPageFetcher:
    """Fetch page bodies with the shared client."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_text(self, url: str) -> Optional[str]:
        response = await self._client.get(url, follow_redirects=True)
        if not response.is_success:
            return None
        return response.text
