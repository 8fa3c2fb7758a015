from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from core.attribution import ResolverThrottle
from core.config import AttributionConfig, ScanConfig
from core.scanner import PostScanner, build_matches

OWN_POST = "https://www.reddit.com/r/pics/comments/own111/mine/"
OTHER_POST = "https://www.reddit.com/r/pics/comments/oth222/theirs/"


def _full(url: str) -> dict:
    return {"url": url, "fullMatchingImages": [{"url": "https://i.redd.it/x.jpg"}]}


class FakeWebDetection:
    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def fetch_web_detection(self, image_url: str) -> Optional[Mapping[str, Any]]:
        self.calls.append(image_url)
        response = self.responses.get(image_url)
        if isinstance(response, Exception):
            raise response
        return response


class FakeResolver:
    def __init__(self, authors: dict[str, str]) -> None:
        self.authors = authors

    async def resolve_author(self, permalink_url: str) -> Optional[str]:
        return self.authors.get(permalink_url)


class FakeFetcher:
    async def fetch_text(self, url: str) -> Optional[str]:
        return None


def test_failed_searches_are_excluded_and_indexes_kept() -> None:
    provider = FakeWebDetection(
        {
            "img1.jpg": {"pagesWithMatchingImages": [_full(OTHER_POST)]},
            "img2.jpg": None,
            "img3.jpg": {"pagesWithMatchingImages": [_full(OWN_POST)]},
            "img4.jpg": RuntimeError("quota exceeded"),
        }
    )

    results = asyncio.run(
        build_matches("someone", ["img1.jpg", "img2.jpg", "img3.jpg", "img4.jpg"], provider, ScanConfig(max_concurrency=2))
    )

    assert [result.gallery_index for result in results] == [1, 3]
    assert results[0].matches == [OTHER_POST]
    assert results[1].matches == [OWN_POST]
    assert sorted(provider.calls) == ["img1.jpg", "img2.jpg", "img3.jpg", "img4.jpg"]


def test_images_without_hits_still_produce_a_result() -> None:
    provider = FakeWebDetection({"img1.jpg": {}})

    results = asyncio.run(build_matches("someone", ["img1.jpg"], provider))

    assert len(results) == 1
    assert results[0].original_count == 0
    assert results[0].score == 0


def test_indexes_do_not_leak_between_runs() -> None:
    provider = FakeWebDetection({"img1.jpg": {"pagesWithMatchingImages": [_full(OTHER_POST)]}})

    first = asyncio.run(build_matches("someone", ["img1.jpg"], provider))
    second = asyncio.run(build_matches("someone", ["img1.jpg"], provider))

    assert first[0].gallery_index == second[0].gallery_index == 1


def test_scan_removes_own_posts_and_summarizes() -> None:
    provider = FakeWebDetection(
        {
            "img1.jpg": {"pagesWithMatchingImages": [_full(OWN_POST), _full(OTHER_POST)]},
            "img2.jpg": {"pagesWithMatchingImages": []},
        }
    )
    scanner = PostScanner(
        web_detection=provider,
        resolver=FakeResolver({OWN_POST: "OriginalUser", OTHER_POST: "Stranger"}),
        fetcher=FakeFetcher(),
        attribution_config=AttributionConfig(resolve_delay_seconds=0),
        min_confidence=51,
    )

    report = asyncio.run(scanner.scan("OriginalUser", ["img1.jpg", "img2.jpg"]))

    assert [result.gallery_index for result in report.results] == [1, 2]
    assert report.results[0].matches == [OTHER_POST]
    assert report.results[0].original_count == 2
    assert report.total_matches == 1
    assert report.max_score == 50
    assert report.verdict == "potential"


def test_scan_of_original_content() -> None:
    scanner = PostScanner(
        web_detection=FakeWebDetection({"img1.jpg": {"pagesWithMatchingImages": [_full(OWN_POST)]}}),
        resolver=FakeResolver({OWN_POST: "OriginalUser"}),
        fetcher=FakeFetcher(),
        attribution_config=AttributionConfig(resolve_delay_seconds=0),
    )

    report = asyncio.run(scanner.scan("OriginalUser", ["img1.jpg"]))

    assert report.total_matches == 0
    assert report.max_score == 0
    assert report.verdict == "original"


def test_concurrent_scans_share_the_resolver_pacing() -> None:
    provider = FakeWebDetection(
        {
            "img1.jpg": {"pagesWithMatchingImages": [_full(OWN_POST)]},
            "img2.jpg": {"pagesWithMatchingImages": [_full(OTHER_POST)]},
        }
    )
    delays: list[float] = []

    async def record_sleep(delay: float) -> None:
        delays.append(delay)

    scanner = PostScanner(
        web_detection=provider,
        resolver=ResolverThrottle(FakeResolver({}), 0.65, record_sleep),
        fetcher=FakeFetcher(),
    )

    async def run_both() -> None:
        await asyncio.gather(scanner.scan("first", ["img1.jpg"]), scanner.scan("second", ["img2.jpg"]))

    asyncio.run(run_both())

    assert delays == [0.65]
