"""Application entry point for the repostscope scanner."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import re
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.google_vision import GoogleVisionWebDetection
from adapters.http_fetcher import HttpPageFetcher
from adapters.reddit_authors import RedditAuthorResolver
from client import DEFAULT_USER_AGENT, build_http_client, load_api_key
from core.config import AttributionConfig, ProvenanceConfig, ScanConfig
from core.scanner import PostScanner, ScanReport
from core.summary import select_image_urls

NAME = "REPOSTSCOPE"
FONT = "tarty-1"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MASK = "***"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _SecretMaskFilter(logging.Filter):
    """Masks secret values and sensitive query parameters in log messages.

    httpx logs every request URL, and Vision requests carry the API key as
    ``?key=...``. The key is masked even when it was never loaded from the
    environment (for example when passed in by a wrapper script).
    """

    def __init__(self, values: list[str], query_params: list[str]) -> None:
        super().__init__()
        self._values = sorted({value for value in values if value}, key=len, reverse=True)
        self._param_re = (
            re.compile(r"([?&](?:%s)=)[^&\s\"']+" % "|".join(re.escape(name) for name in query_params))
            if query_params
            else None
        )

    def mask(self, message: str) -> str:
        for value in self._values:
            message = message.replace(value, MASK)
        if self._param_re is not None:
            message = self._param_re.sub(r"\1" + MASK, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        masked = self.mask(record.getMessage())
        record.msg = masked
        record.args = None
        return True


def _secret_mask_filter(redact_cfg: dict) -> Optional[_SecretMaskFilter]:
    if not redact_cfg.get("enabled", False):
        return None
    values = [os.getenv(name, "") for name in redact_cfg.get("patterns", [])]
    return _SecretMaskFilter(values, list(redact_cfg.get("query_params", [])))


def _rotating_file_handler(file_cfg: dict) -> logging.Handler:
    path = file_cfg.get("path", "logs/repostscope.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _build_log_handlers(config: dict) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_rotating_file_handler(file_cfg))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    mask_filter = _secret_mask_filter(config.get("redact", {}))
    for handler in handlers:
        handler.setFormatter(formatter)
        if mask_filter is not None:
            handler.addFilter(mask_filter)
    return handlers


def _configure_logging(config: Optional[dict] = None) -> None:
    config = settings.LOGGING if config is None else config
    if not config or not config.get("enabled", False):
        return

    load_dotenv()
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    handlers = _build_log_handlers(config)
    if handlers:
        logging.basicConfig(level=level, handlers=handlers)


def _print_report(report: ScanReport, num_images: int) -> None:
    for result in report.results:
        flags = []
        if result.only_partial_evidence:
            flags.append("partial-only")
        if result.only_direct_image_evidence:
            flags.append("direct-images-only")
        if result.author_unverifiable:
            flags.append("author-unverifiable")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"Image [{result.gallery_index}/{num_images}]: "
            f"{result.num_matches}/{result.original_count} matches, score {result.score}%{suffix}"
        )
        for url in result.matches:
            print(f"    {url}")

    print(
        f"Total matches: {report.total_matches} | "
        f"Confidence: {report.max_score}% | Verdict: {report.verdict}"
    )


async def _scan_post(author: str, image_urls: list[str]) -> ScanReport:
    api_key = load_api_key()
    client = build_http_client(settings.USER_AGENT or DEFAULT_USER_AGENT, settings.HTTP_TIMEOUT_SECONDS)
    try:
        scanner = PostScanner(
            web_detection=GoogleVisionWebDetection(client, api_key, settings.VISION_MAX_RESULTS),
            resolver=RedditAuthorResolver(client),
            fetcher=HttpPageFetcher(client),
            scan_config=ScanConfig(max_concurrency=settings.MAX_CONCURRENCY),
            attribution_config=AttributionConfig(
                resolve_delay_seconds=settings.RESOLVE_DELAY_SECONDS,
                deleted_author=settings.DELETED_AUTHOR,
            ),
            provenance_config=ProvenanceConfig(
                social_domains=settings.SOCIAL_DOMAINS,
                fetch_timeout_seconds=settings.FETCH_TIMEOUT_SECONDS,
                match_threshold=settings.SOCIAL_MATCH_THRESHOLD,
            ),
            min_confidence=settings.MIN_CONFIDENCE,
        )
        return await scanner.scan(author, image_urls)
    finally:
        await client.aclose()


def _scan(author: str, urls: list[str]) -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    image_urls = select_image_urls(urls)
    skipped = len(urls) - len(image_urls)
    if skipped:
        logger.info("Skipping %s non-image URL(s)", skipped)
    if not image_urls:
        raise SystemExit("No .jpeg/.jpg/.png image URLs to scan")

    logger.info("Scanning %s image(s) posted by %s", len(image_urls), author)
    report = asyncio.run(_scan_post(author, image_urls))
    _print_report(report, len(image_urls))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="repostscope")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Check a post's images for earlier copies")
    scan_parser.add_argument("--author", required=True, help="Username of the submitting author")
    scan_parser.add_argument("urls", nargs="+", help="Image URLs in gallery order")

    args = parser.parse_args(argv)
    if args.command == "scan":
        _scan(args.author, args.urls)


if __name__ == "__main__":
    main()
