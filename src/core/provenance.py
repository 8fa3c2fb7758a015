"""Content provenance checks (core domain).

Estimates whether a URL belongs to a given author. Known social hosts get a
single best-effort page fetch; every other host is judged on the URL alone.
"""

from __future__ import annotations

import asyncio
import html
import logging
import re
from enum import Enum
from typing import Dict, Iterable

from core.config import ProvenanceConfig
from core.confidence import score_identity
from core.ports import PageFetcherPort
from core.urls import host_matches, hostname

LOGGER = logging.getLogger(__name__)

# Only the page summary is read, never the full document.
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_DESCRIPTION_RE = re.compile(
    r"<meta\s+name=[\"']description[\"']\s+content=[\"'](.*?)[\"']", re.IGNORECASE | re.DOTALL
)
_OG_TITLE_RE = re.compile(
    r"<meta\s+property=[\"']og:title[\"']\s+content=[\"'](.*?)[\"']", re.IGNORECASE | re.DOTALL
)


class CheckStrategy(str, Enum):
    FETCH_AND_SCORE = "fetch_and_score"
    URL_ONLY = "url_only"


def strategy_for(url: str, config: ProvenanceConfig) -> CheckStrategy:
    """Pick the check strategy from the URL's host suffix."""

    try:
        host = hostname(url)
    except ValueError:
        return CheckStrategy.URL_ONLY
    if host_matches(host, config.social_domains):
        return CheckStrategy.FETCH_AND_SCORE
    return CheckStrategy.URL_ONLY


def extract_page_summary(document: str) -> str:
    """Join the title, meta description, and og:title of an HTML document."""

    parts = []
    for pattern in (_TITLE_RE, _DESCRIPTION_RE, _OG_TITLE_RE):
        found = pattern.search(document)
        parts.append(html.unescape(found.group(1)).strip() if found else "")
    return " ".join(parts)


async def _fetch_and_score(
    url: str,
    identity: str,
    fetcher: PageFetcherPort,
    config: ProvenanceConfig,
) -> int:
    url_score = score_identity(identity, url)
    if url_score >= 100:
        return url_score

    try:
        document = await asyncio.wait_for(fetcher.fetch_text(url), config.fetch_timeout_seconds)
    except Exception as exc:
        LOGGER.debug("Fetch failed for %s (%s), using URL score", url, exc)
        return url_score
    if not document:
        return url_score

    content_score = score_identity(identity, extract_page_summary(document))
    return max(url_score, content_score)


async def check_url(
    url: str,
    identity: str,
    fetcher: PageFetcherPort,
    config: ProvenanceConfig,
) -> int:
    """Return 0-100 confidence that ``url`` belongs to ``identity``."""

    if strategy_for(url, config) is CheckStrategy.FETCH_AND_SCORE:
        return await _fetch_and_score(url, identity, fetcher, config)
    return score_identity(identity, url)


async def check_urls(
    urls: Iterable[str],
    identity: str,
    fetcher: PageFetcherPort,
    config: ProvenanceConfig,
) -> Dict[str, int]:
    """Check several URLs concurrently; a slow fetch never blocks the rest."""

    unique = list(dict.fromkeys(urls))
    scores = await asyncio.gather(*(check_url(url, identity, fetcher, config) for url in unique))
    return dict(zip(unique, scores))
