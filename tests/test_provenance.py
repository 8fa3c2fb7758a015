from __future__ import annotations

import asyncio
from typing import Optional

from core.config import ProvenanceConfig
from core.provenance import CheckStrategy, check_url, check_urls, extract_page_summary, strategy_for

CONFIG = ProvenanceConfig()


class FakeFetcher:
    def __init__(self, document: Optional[str] = None, error: Optional[Exception] = None, delay: float = 0) -> None:
        self.document = document
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def fetch_text(self, url: str) -> Optional[str]:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.document


def test_strategy_is_selected_by_host_suffix() -> None:
    assert strategy_for("https://www.instagram.com/p/abc/", CONFIG) is CheckStrategy.FETCH_AND_SCORE
    assert strategy_for("https://m.facebook.com/photo/1", CONFIG) is CheckStrategy.FETCH_AND_SCORE
    assert strategy_for("https://notfacebook.com/photo/1", CONFIG) is CheckStrategy.URL_ONLY
    assert strategy_for("not a url", CONFIG) is CheckStrategy.URL_ONLY


def test_perfect_url_score_skips_the_fetch() -> None:
    fetcher = FakeFetcher(document="<title>irrelevant</title>")

    score = asyncio.run(check_url("https://www.instagram.com/coolcat/", "coolcat", fetcher, CONFIG))

    assert score == 100
    assert fetcher.calls == []


def test_page_summary_raises_the_score() -> None:
    fetcher = FakeFetcher(document="<html><head><title>Photo by coolcat on Instagram</title></head></html>")

    score = asyncio.run(check_url("https://www.instagram.com/p/abc/", "coolcat", fetcher, CONFIG))

    assert score == 100
    assert fetcher.calls == ["https://www.instagram.com/p/abc/"]


def test_fetch_failure_falls_back_to_url_score() -> None:
    fetcher = FakeFetcher(error=RuntimeError("connection reset"))

    score = asyncio.run(check_url("https://www.pinterest.com/pin/cool-123/", "CoolCat", fetcher, CONFIG))

    assert score == 50


def test_non_success_response_falls_back_to_url_score() -> None:
    fetcher = FakeFetcher(document=None)
    score = asyncio.run(check_url("https://www.pinterest.com/pin/123/", "CoolCat", fetcher, CONFIG))
    assert score == 0


def test_slow_fetch_times_out() -> None:
    fetcher = FakeFetcher(document="<title>coolcat</title>", delay=5)
    config = ProvenanceConfig(fetch_timeout_seconds=0.01)

    score = asyncio.run(check_url("https://www.facebook.com/photo/1", "coolcat", fetcher, config))

    assert score == 0


def test_other_hosts_are_never_fetched() -> None:
    fetcher = FakeFetcher(document="<title>coolcat</title>")

    score = asyncio.run(check_url("https://example.com/cool_cat/1", "coolcat", fetcher, CONFIG))

    assert score == 90
    assert fetcher.calls == []


def test_extract_page_summary_reads_title_and_meta_tags() -> None:
    document = (
        "<html><head>\n<title>\n  Cats &amp; Dogs\n</title>"
        '<meta name="description" content="Posted by blue_fox">'
        "<meta property='og:title' content='Weekend photos'>"
        "</head><body>ignored body text</body></html>"
    )

    summary = extract_page_summary(document)

    assert summary == "Cats & Dogs Posted by blue_fox Weekend photos"
    assert "ignored" not in summary


def test_check_urls_returns_a_score_per_url() -> None:
    fetcher = FakeFetcher(document="<title>nothing</title>")
    urls = ["https://www.instagram.com/coolcat/", "https://example.com/x", "https://example.com/x"]

    scores = asyncio.run(check_urls(urls, "coolcat", fetcher, CONFIG))

    assert scores == {"https://www.instagram.com/coolcat/": 100, "https://example.com/x": 0}
