"""Post-level summaries over per-image match results (core domain)."""

from __future__ import annotations

import re
from typing import Iterable, List

from core.models import MatchResult

VERDICT_ORIGINAL = "original"
VERDICT_POTENTIAL = "potential"
VERDICT_PROBABLE = "probable"

_SUPPORTED_IMAGE_RE = re.compile(r"\.(jpeg|jpg|png)$", re.IGNORECASE)


def select_image_urls(urls: Iterable[str]) -> List[str]:
    """Keep only submitted image URLs the search provider handles well."""

    return [url for url in urls if _SUPPORTED_IMAGE_RE.search(url)]


def total_match_count(results: Iterable[MatchResult]) -> int:
    return sum(result.num_matches for result in results)


def max_score(results: Iterable[MatchResult]) -> int:
    return max((result.score for result in results), default=0)


def verdict_for(score: int, min_confidence: int) -> str:
    """Bucket a post score: 0 is original, below the threshold is potential."""

    if score <= 0:
        return VERDICT_ORIGINAL
    if score < min_confidence:
        return VERDICT_POTENTIAL
    return VERDICT_PROBABLE
