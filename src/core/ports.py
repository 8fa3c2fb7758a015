"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the reverse image search provider,
author resolution, and page fetching so the core can be reused with
different backends.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class WebDetectionPort(Protocol):
    """Reverse image search provider."""

    async def fetch_web_detection(self, image_url: str) -> Optional[Mapping[str, Any]]:
        """Return a payload with ``pagesWithMatchingImages`` or None on failure."""
        ...


class AuthorResolverPort(Protocol):
    """Resolves who posted the content a permalink points at."""

    async def resolve_author(self, permalink_url: str) -> Optional[str]:
        ...


class PageFetcherPort(Protocol):
    """Fetches page bodies for provenance checks."""

    async def fetch_text(self, url: str) -> Optional[str]:
        """Return the body on success, None for non-2xx; may raise on network errors."""
        ...
