"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProvenanceConfig:
    """Settings for checking whether a social link belongs to the author."""

    social_domains: tuple[str, ...] = ("facebook.com", "instagram.com", "pinterest.com")
    fetch_timeout_seconds: float = 10.0
    match_threshold: int = 90


@dataclass(frozen=True)
class AttributionConfig:
    """Settings for the author resolution pass."""

    # ~100 resolutions per minute
    resolve_delay_seconds: float = 0.65
    deleted_author: str = "[deleted]"


@dataclass(frozen=True)
class ScanConfig:
    """Settings for the per-image reverse image search fan-out."""

    max_concurrency: int = 5
