"""HTTP client factory for repostscope.

One AsyncClient is shared by every adapter so connection pooling and the
user agent are configured in a single place.
"""

from __future__ import annotations

import logging
import os

import httpx
from dotenv import load_dotenv

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; repostscope/0.1; reverse image provenance checker)"


def load_api_key() -> str:
    """Read GOOGLE_VISION_KEY via python-dotenv to keep secrets out of the repo."""

    load_dotenv()
    api_key = os.getenv("GOOGLE_VISION_KEY")

    # Fail fast on missing credentials rather than sending anonymous requests.
    if not api_key:
        raise RuntimeError("Missing GOOGLE_VISION_KEY in environment")
    return api_key


def build_http_client(user_agent: str = DEFAULT_USER_AGENT, timeout_seconds: float = 30.0) -> httpx.AsyncClient:
    """Create the shared async HTTP client."""

    logging.getLogger(__name__).info("Initializing HTTP client")

    return httpx.AsyncClient(
        headers={"User-Agent": user_agent},
        timeout=httpx.Timeout(timeout_seconds),
    )
