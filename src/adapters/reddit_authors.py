"""Reddit post author resolution adapter.

Implements the core AuthorResolverPort using Reddit's public JSON listings.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

LOGGER = logging.getLogger(__name__)

_POST_ID_RE = re.compile(r"/comments/([a-z0-9]+)", re.IGNORECASE)


def post_id_from_url(url: str) -> Optional[str]:
    """Return the base36 post id from a permalink, if present."""

    found = _POST_ID_RE.search(url)
    return found.group(1).lower() if found else None


class RedditAuthorResolver:
    """Look up who submitted a Reddit post."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = "https://www.reddit.com") -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    def _endpoint(self, post_id: str) -> str:
        return f"{self._base_url}/comments/{post_id}.json"

    async def resolve_author(self, permalink_url: str) -> Optional[str]:
        post_id = post_id_from_url(permalink_url)
        if not post_id:
            return None

        try:
            response = await self._client.get(self._endpoint(post_id), params={"raw_json": 1})
            response.raise_for_status()
            listing = response.json()
            author = listing[0]["data"]["children"][0]["data"]["author"]
        except httpx.HTTPError as exc:
            LOGGER.info("Could not resolve author of t3_%s: %s", post_id, exc.__class__.__name__)
            return None
        except (ValueError, KeyError, IndexError, TypeError):
            LOGGER.info("Unexpected listing shape for t3_%s", post_id)
            return None
        return author if isinstance(author, str) and author else None
