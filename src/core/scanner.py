"""Core post scanning pipeline.

This module is integration-agnostic. It only relies on ports for reverse
image search, author resolution, and page fetching.

The pipeline runs in a strict order:
1) Reverse image search every submitted image (concurrently)
2) Classify each response into a MatchResult
3) Drop permalinks the submitting author posted themselves
4) Drop social links that belong to the submitting author
5) Summarize into a ScanReport
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.attribution import as_throttle, attribute_and_filter, filter_social_links
from core.classifier import build_match_result
from core.config import AttributionConfig, ProvenanceConfig, ScanConfig
from core.models import MatchResult, parse_web_detection
from core.ports import AuthorResolverPort, PageFetcherPort, WebDetectionPort
from core.summary import max_score, total_match_count, verdict_for

LOGGER = logging.getLogger(__name__)


async def build_matches(
    identity: str,
    image_urls: Sequence[str],
    web_detection: WebDetectionPort,
    config: Optional[ScanConfig] = None,
) -> List[MatchResult]:
    """Search every image and classify the responses.

    Images whose search fails are left out; the rest keep their 1-based
    gallery position.
    """

    config = config or ScanConfig()
    semaphore = asyncio.Semaphore(max(1, config.max_concurrency))

    async def _search(index: int, image_url: str) -> Optional[MatchResult]:
        async with semaphore:
            try:
                payload = await web_detection.fetch_web_detection(image_url)
            except Exception:
                LOGGER.warning("Web detection raised for image %s", index, exc_info=True)
                return None
        if payload is None:
            LOGGER.warning("No web detection result for image %s (%s)", index, image_url)
            return None
        return build_match_result(parse_web_detection(payload), identity, index)

    built = await asyncio.gather(
        *(_search(index, url) for index, url in enumerate(image_urls, start=1))
    )
    return [result for result in built if result is not None]


@dataclass(frozen=True)
class ScanReport:
    """Final evidence for one post."""

    results: List[MatchResult]
    total_matches: int
    max_score: int
    verdict: str


class PostScanner:
    """Orchestrates search, classification, and attribution for one post.

    The author resolver is wrapped once, so every scan run on this instance
    shares the same paced lookup channel.
    """

    def __init__(
        self,
        web_detection: WebDetectionPort,
        resolver: AuthorResolverPort,
        fetcher: PageFetcherPort,
        scan_config: Optional[ScanConfig] = None,
        attribution_config: Optional[AttributionConfig] = None,
        provenance_config: Optional[ProvenanceConfig] = None,
        min_confidence: int = 50,
    ) -> None:
        self._web_detection = web_detection
        self._fetcher = fetcher
        self._scan_config = scan_config or ScanConfig()
        self._attribution_config = attribution_config or AttributionConfig()
        self._resolver = as_throttle(resolver, self._attribution_config)
        self._provenance_config = provenance_config or ProvenanceConfig()
        self._min_confidence = min_confidence

    async def scan(self, identity: str, image_urls: Sequence[str]) -> ScanReport:
        """Run the full pipeline for one post's images."""

        results = await build_matches(identity, image_urls, self._web_detection, self._scan_config)
        LOGGER.info("%s of %s image(s) searched", len(results), len(image_urls))

        await attribute_and_filter(
            identity,
            results,
            self._resolver,
            self._attribution_config,
        )
        await filter_social_links(identity, results, self._fetcher, self._provenance_config)

        score = max_score(results)
        return ScanReport(
            results=results,
            total_matches=total_match_count(results),
            max_score=score,
            verdict=verdict_for(score, self._min_confidence),
        )
