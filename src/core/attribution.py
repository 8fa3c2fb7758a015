"""Author attribution passes (core domain).

Both passes run after classification and shrink each result's evidence in
place. Removals here lower ``cleaned_count`` (and so the score) while
``original_count`` stays put.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from core.config import AttributionConfig, ProvenanceConfig
from core.models import MatchResult
from core.ports import AuthorResolverPort, PageFetcherPort
from core.provenance import CheckStrategy, check_urls, strategy_for
from core.urls import is_reddit_permalink

LOGGER = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _is_permalink(url: str) -> bool:
    try:
        return is_reddit_permalink(url)
    except ValueError:
        return False


def _same_author(left: str, right: str) -> bool:
    # Reddit usernames are case-insensitive.
    return left.casefold() == right.casefold()


class ResolverThrottle:
    """Serializes author lookups and spaces them by a fixed delay.

    One instance stands for one lookup channel: every pass that shares it
    queues behind the same lock, so the spacing holds across concurrent
    scans. Failed lookups are logged and read as unresolved.
    """

    def __init__(self, resolver: AuthorResolverPort, delay_seconds: float, sleep: Sleep = asyncio.sleep) -> None:
        self._resolver = resolver
        self._delay = delay_seconds
        self._sleep = sleep
        self._calls = 0
        self._lock: Optional[asyncio.Lock] = None

    async def resolve_author(self, url: str) -> Optional[str]:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._calls and self._delay > 0:
                await self._sleep(self._delay)
            self._calls += 1
            try:
                return await self._resolver.resolve_author(url)
            except Exception:
                LOGGER.warning("Author resolution failed for %s", url, exc_info=True)
                return None


def as_throttle(
    resolver: AuthorResolverPort,
    config: Optional[AttributionConfig] = None,
    sleep: Sleep = asyncio.sleep,
) -> ResolverThrottle:
    """Wrap ``resolver`` unless it is already a throttle."""

    if isinstance(resolver, ResolverThrottle):
        return resolver
    config = config or AttributionConfig()
    return ResolverThrottle(resolver, config.resolve_delay_seconds, sleep)


async def attribute_and_filter(
    identity: str,
    results: Iterable[MatchResult],
    resolver: AuthorResolverPort,
    config: Optional[AttributionConfig] = None,
    sleep: Sleep = asyncio.sleep,
) -> int:
    """Remove permalinks authored by ``identity``; return how many went.

    Lookups go through ``resolver`` as-is when it is a ``ResolverThrottle``,
    so callers that share one keep a single paced channel.
    Unresolvable permalinks stay as evidence. A permalink whose author was
    deleted marks its result as unverifiable, unless the submitting author
    is deleted too.
    """

    config = config or AttributionConfig()
    throttled = as_throttle(resolver, config, sleep)
    identity_deleted = _same_author(identity, config.deleted_author)
    removed = 0

    for result in results:
        to_remove: List[str] = []
        for url in result.matches:
            if not _is_permalink(url):
                continue
            author = await throttled.resolve_author(url)
            if not author:
                continue
            if _same_author(author, identity):
                to_remove.append(url)
            elif not identity_deleted and _same_author(author, config.deleted_author):
                LOGGER.info("Matched post %s has a deleted author", url)
                result.mark_author_unverifiable()
        if to_remove:
            removed += result.remove_matches(to_remove)
            LOGGER.info(
                "Removed %s self-authored match(es) from image %s",
                len(to_remove),
                result.gallery_index,
            )

    return removed


async def filter_social_links(
    identity: str,
    results: Iterable[MatchResult],
    fetcher: PageFetcherPort,
    config: Optional[ProvenanceConfig] = None,
) -> int:
    """Remove social media links that belong to ``identity``; return how many went."""

    config = config or ProvenanceConfig()
    results = list(results)
    social_urls = [
        url
        for result in results
        for url in result.matches
        if strategy_for(url, config) is CheckStrategy.FETCH_AND_SCORE
    ]
    if not social_urls:
        return 0

    scores = await check_urls(social_urls, identity, fetcher, config)
    owned = {url for url, score in scores.items() if score >= config.match_threshold}
    if not owned:
        return 0

    removed = 0
    for result in results:
        count = result.remove_matches(owned)
        if count:
            LOGGER.info("Removed %s social link(s) owned by OP from image %s", count, result.gallery_index)
        removed += count
    return removed
