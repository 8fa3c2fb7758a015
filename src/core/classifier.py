"""Reverse image search match classification (core domain).

Turns one image's candidate pages into an ordered, de-duplicated list of
evidence URLs. Each page walks a fixed sequence:

1) Self-exclusion: the author's name appears in the page URL
2) Scraper-site exclusion: off-Reddit page whose full matches are Reddit media
3) URL normalization (permalink, listing, social group, external)
4) Priority assignment, first applicable tier wins:
   1. full match on a Reddit permalink
   2. full match on an external page
   3. full match on a Reddit listing (direct media only)
   4. partial match on a Reddit permalink, unless sidebar noise
   5. partial match on an external page
   6. partial match on a Reddit listing (direct media only)

Tiers 1-2 are primary evidence. Tiers 3-6 are only used when no primary
evidence exists, and mark the result as partial-only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set, Tuple

from core.models import CandidatePage, Classification, MatchResult
from core.urls import (
    UrlKind,
    classify_url,
    hostname,
    is_direct_media,
    is_reddit_host,
    is_reddit_media,
    is_reddit_permalink,
    is_thumbnail_asset,
    registrable_host,
)

LOGGER = logging.getLogger(__name__)

PRIMARY_PRIORITIES = (1, 2)


@dataclass(frozen=True)
class Evidence:
    """A single evidence URL with the tier that produced it."""

    url: str
    priority: int


def identity_variants(identity: str) -> Set[str]:
    """Forms of the author's name that count as self-references in a URL."""

    lowered = identity.strip().lower()
    if not lowered:
        return set()
    variants = {
        lowered,
        lowered.replace("-", "").replace("_", ""),
        lowered.replace("_", "-"),
    }
    return {variant for variant in variants if variant}


def _is_self_reference(url: str, variants: Set[str]) -> bool:
    lowered = url.lower()
    return any(variant in lowered for variant in variants)


def _is_scraper_mirror(page: CandidatePage) -> bool:
    """Off-Reddit pages that only match on Reddit CDN links.

    These sites hotlink Reddit media while displaying unrelated content.
    """

    if is_reddit_host(hostname(page.url)) or not page.has_full_match:
        return False
    return all(is_reddit_media(url) for url in page.full_matching_images)


def _direct_media(urls: Iterable[str]) -> List[str]:
    return [url for url in urls if is_direct_media(url)]


def _preferred_external_url(page_url: str, full_matches: Sequence[str]) -> str:
    """Prefer a direct image on the same site over the HTML page."""

    if is_direct_media(page_url):
        return page_url
    site = registrable_host(hostname(page_url))
    for url in full_matches:
        if is_direct_media(url) and registrable_host(hostname(url)) == site:
            return url
    return page_url


def _is_sidebar_noise(partial_matches: Sequence[str]) -> bool:
    """Partial matches on a Reddit post that come from the page chrome."""

    if all(is_thumbnail_asset(url) for url in partial_matches):
        return True
    return all(is_direct_media(url) for url in partial_matches)


def _classify_page(
    page: CandidatePage,
    variants: Set[str],
    seen_groups: Set[str],
) -> List[Evidence]:
    """Return the evidence one page contributes (possibly none)."""

    if variants and _is_self_reference(page.url, variants):
        LOGGER.debug("Skipping self-referencing page: %s", page.url)
        return []

    if _is_scraper_mirror(page):
        LOGGER.debug("Skipping Reddit media mirror: %s", page.url)
        return []

    kind, url = classify_url(page.url)
    if kind is UrlKind.UNSUPPORTED:
        return []
    if kind is UrlKind.SOCIAL_GROUP:
        # Many posts from one group collapse into a single piece of evidence.
        if url in seen_groups:
            return []
        seen_groups.add(url)
        kind = UrlKind.EXTERNAL

    if page.has_full_match:
        if kind is UrlKind.REDDIT_PERMALINK:
            return [Evidence(url, 1)]
        if kind is UrlKind.EXTERNAL:
            return [Evidence(_preferred_external_url(url, page.full_matching_images), 2)]
        if kind is UrlKind.REDDIT_LISTING:
            # The listing itself cannot be attributed without the submission.
            return [Evidence(media, 3) for media in _direct_media(page.full_matching_images)]

    if page.has_partial_match:
        if kind is UrlKind.REDDIT_PERMALINK:
            if _is_sidebar_noise(page.partial_matching_images):
                LOGGER.debug("Skipping sidebar noise on %s", url)
                return []
            return [Evidence(url, 4)]
        if kind is UrlKind.EXTERNAL:
            return [Evidence(url, 5)]
        if kind is UrlKind.REDDIT_LISTING:
            return [Evidence(media, 6) for media in _direct_media(page.partial_matching_images)]

    return []


def _ordered_unique(evidence: Iterable[Evidence]) -> Tuple[str, ...]:
    ordered = sorted(evidence, key=lambda item: item.priority)
    return tuple(dict.fromkeys(item.url for item in ordered))


def _only_direct_images(urls: Sequence[str]) -> bool:
    if not urls:
        return False
    for url in urls:
        try:
            if is_reddit_permalink(url) or not is_direct_media(url):
                return False
        except ValueError:
            return False
    return True


def classify_pages(pages: Iterable[CandidatePage], identity: str) -> Classification:
    """Classify one image's candidate pages into evidence.

    A page with a malformed URL is logged and skipped; the rest are still
    classified. No state survives between calls.
    """

    variants = identity_variants(identity)
    seen_groups: Set[str] = set()
    primary: List[Evidence] = []
    secondary: List[Evidence] = []

    for page in pages:
        try:
            evidence = _classify_page(page, variants, seen_groups)
        except ValueError as exc:
            LOGGER.info("Skipping page with malformed URL %r: %s", page.url, exc)
            continue
        for item in evidence:
            if item.priority in PRIMARY_PRIORITIES:
                primary.append(item)
            else:
                secondary.append(item)

    if primary:
        return Classification(evidence_urls=_ordered_unique(primary))

    if not secondary:
        return Classification()

    urls = _ordered_unique(secondary)
    LOGGER.debug("Only partial matches found (%s urls)", len(urls))
    return Classification(
        evidence_urls=urls,
        only_partial_evidence=True,
        only_direct_image_evidence=_only_direct_images(urls),
    )


def build_match_result(pages: Iterable[CandidatePage], identity: str, gallery_index: int) -> MatchResult:
    """Classify pages and wrap the evidence for one gallery image."""

    return MatchResult.from_classification(classify_pages(pages, identity), gallery_index)
