"""Core domain models.

These types are shared across the core and adapters to avoid tight coupling
to any provider-specific payloads.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from core.urls import parse_url

LOGGER = logging.getLogger(__name__)

# Confidence reductions, applied in this order.
PARTIAL_EVIDENCE_DIVISOR = 2.0
DIRECT_IMAGE_EVIDENCE_DIVISOR = 2.1
UNVERIFIABLE_AUTHOR_DIVISOR = 2.0


def _is_absolute(url: str) -> bool:
    try:
        parse_url(url)
    except ValueError:
        return False
    return True


def _image_urls(records: Any) -> Tuple[str, ...]:
    """Flatten a list of ``{"url": ...}`` records (or bare strings) to URLs.

    Records without an absolute URL are dropped.
    """

    if not records:
        return ()
    urls: List[str] = []
    for record in records:
        url = record.get("url") if isinstance(record, Mapping) else record
        if isinstance(url, str) and url and _is_absolute(url):
            urls.append(url)
    return tuple(urls)


@dataclass(frozen=True)
class CandidatePage:
    """One reverse image search hit: a page and the images it matched on."""

    url: str
    page_title: Optional[str] = None
    full_matching_images: Tuple[str, ...] = ()
    partial_matching_images: Tuple[str, ...] = ()

    @property
    def has_full_match(self) -> bool:
        return bool(self.full_matching_images)

    @property
    def has_partial_match(self) -> bool:
        return bool(self.partial_matching_images)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CandidatePage":
        """Validate one ``pagesWithMatchingImages`` entry."""

        url = payload.get("url")
        if not isinstance(url, str) or not url:
            raise ValueError("Candidate page has no url")
        title = payload.get("pageTitle")
        return cls(
            url=url,
            page_title=title if isinstance(title, str) else None,
            full_matching_images=_image_urls(payload.get("fullMatchingImages")),
            partial_matching_images=_image_urls(payload.get("partialMatchingImages")),
        )


def parse_web_detection(payload: Optional[Mapping[str, Any]]) -> List[CandidatePage]:
    """Build candidate pages from a web detection payload, skipping bad entries."""

    if not payload:
        return []
    pages: List[CandidatePage] = []
    for entry in payload.get("pagesWithMatchingImages") or []:
        if not isinstance(entry, Mapping):
            LOGGER.info("Skipping non-object candidate page: %r", entry)
            continue
        try:
            pages.append(CandidatePage.from_payload(entry))
        except ValueError as exc:
            LOGGER.info("Skipping candidate page: %s", exc)
    return pages


@dataclass(frozen=True)
class Classification:
    """Evidence produced by classifying one image's candidate pages."""

    evidence_urls: Tuple[str, ...] = ()
    only_partial_evidence: bool = False
    only_direct_image_evidence: bool = False


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class MatchResult:
    """Evidence and confidence for one submitted image.

    ``original_count`` is frozen at construction; removals only ever lower
    ``cleaned_count``. The score is recomputed from current state on read.
    """

    gallery_index: int
    evidence_urls: List[str] = field(default_factory=list)
    only_partial_evidence: bool = False
    only_direct_image_evidence: bool = False
    author_unverifiable: bool = False
    _original_count: int = field(init=False, repr=False)
    _cleaned_count: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.evidence_urls = list(dict.fromkeys(self.evidence_urls))
        self._original_count = len(self.evidence_urls)
        self._cleaned_count = self._original_count

    @classmethod
    def from_classification(cls, classification: Classification, gallery_index: int) -> "MatchResult":
        return cls(
            gallery_index=gallery_index,
            evidence_urls=list(classification.evidence_urls),
            only_partial_evidence=classification.only_partial_evidence,
            only_direct_image_evidence=classification.only_direct_image_evidence,
        )

    @property
    def original_count(self) -> int:
        return self._original_count

    @property
    def cleaned_count(self) -> int:
        return self._cleaned_count

    @property
    def num_matches(self) -> int:
        return self._cleaned_count

    @property
    def matches(self) -> List[str]:
        return list(self.evidence_urls)

    def mark_author_unverifiable(self) -> None:
        self.author_unverifiable = True

    def remove_matches(self, urls: Iterable[str]) -> int:
        """Drop the given URLs from the evidence and return how many went."""

        to_remove = set(urls)
        before = len(self.evidence_urls)
        self.evidence_urls = [url for url in self.evidence_urls if url not in to_remove]
        self._cleaned_count = len(self.evidence_urls)
        return before - self._cleaned_count

    @property
    def score(self) -> int:
        """Percentage of the original evidence still standing, reduced by
        the confidence modifiers. No evidence scores 0."""

        if self._original_count == 0:
            return 0

        removed = self._original_count - self._cleaned_count
        score: float = _round_half_up((1 - removed / self._original_count) * 100)
        if self.only_partial_evidence:
            score /= PARTIAL_EVIDENCE_DIVISOR
        if self.only_direct_image_evidence:
            score /= DIRECT_IMAGE_EVIDENCE_DIVISOR
        if self.author_unverifiable:
            score /= UNVERIFIABLE_AUTHOR_DIVISOR
        return _round_half_up(score)
