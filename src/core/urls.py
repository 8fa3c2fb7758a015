"""URL classification helpers (core domain).

All helpers raise ValueError for URLs that cannot be parsed into a scheme and
host, so callers can skip a single bad entry without special casing.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Tuple
from urllib.parse import SplitResult, urlsplit

REDDIT_DOMAINS = ("reddit.com", "redd.it", "redditmedia.com")

# Hosts that only ever serve raw media for Reddit posts.
REDDIT_MEDIA_HOSTS = ("i.redd.it", "v.redd.it", "preview.redd.it", "external-preview.redd.it")

# Sidebar thumbnails, subreddit styles, and emoji assets.
THUMBNAIL_HOST_SUFFIXES = (
    "thumbs.redditmedia.com",
    "styles.redditmedia.com",
    "emoji.redditmedia.com",
    "redditstatic.com",
)

DIRECT_MEDIA_HOSTS = REDDIT_MEDIA_HOSTS + ("i.imgur.com",)
DIRECT_MEDIA_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".gifv",
    ".webp",
    ".bmp",
    ".mp4",
)

SOCIAL_GROUP_DOMAIN = "facebook.com"


class UrlKind(str, Enum):
    """The role a candidate page URL plays as evidence."""

    REDDIT_PERMALINK = "reddit_permalink"
    REDDIT_LISTING = "reddit_listing"
    SOCIAL_GROUP = "social_group"
    EXTERNAL = "external"
    UNSUPPORTED = "unsupported"


def parse_url(url: str) -> SplitResult:
    """Split a URL, rejecting anything without a scheme and a host."""

    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Not an absolute URL: {url!r}")
    return parts


def hostname(url: str) -> str:
    return parse_url(url).hostname or ""


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """Return True when host equals or is a subdomain of any domain."""

    host = host.lower()
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


def registrable_host(host: str) -> str:
    """Approximate the registrable domain with the last two labels."""

    labels = host.lower().split(".")
    return ".".join(labels[-2:])


def is_reddit_host(host: str) -> bool:
    return host_matches(host, REDDIT_DOMAINS)


def is_reddit_media(url: str) -> bool:
    """Direct media served from Reddit's own CDNs."""

    host = hostname(url)
    return host in REDDIT_MEDIA_HOSTS or host.endswith(".redditmedia.com")


def is_thumbnail_asset(url: str) -> bool:
    return host_matches(hostname(url), THUMBNAIL_HOST_SUFFIXES)


def is_direct_media(url: str) -> bool:
    """Return True for URLs that point straight at an image or video file."""

    parts = parse_url(url)
    if parts.hostname in DIRECT_MEDIA_HOSTS:
        return True
    return parts.path.lower().endswith(DIRECT_MEDIA_EXTENSIONS)


def is_reddit_permalink(url: str) -> bool:
    """A Reddit post URL: comments path and no query string.

    Query strings are rejected because Reddit mints translated copies of a
    post with ``?tl=<lang>``.
    """

    parts = parse_url(url)
    return (
        is_reddit_host(parts.hostname or "")
        and "comments" in parts.path
        and not parts.query
    )


def normalize_social_group(url: str) -> Optional[str]:
    """Collapse a Facebook group post URL down to the group URL."""

    parts = parse_url(url)
    if not host_matches(parts.hostname or "", (SOCIAL_GROUP_DOMAIN,)):
        return None
    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < 2 or segments[0].lower() != "groups":
        return None
    return f"https://www.facebook.com/groups/{segments[1]}/"


def classify_url(url: str) -> Tuple[UrlKind, str]:
    """Classify a candidate page URL and return (kind, normalized_url)."""

    parts = parse_url(url)
    host = parts.hostname or ""
    if is_reddit_host(host):
        if is_reddit_permalink(url):
            return UrlKind.REDDIT_PERMALINK, url
        return UrlKind.REDDIT_LISTING, url

    group_url = normalize_social_group(url)
    if group_url:
        return UrlKind.SOCIAL_GROUP, group_url

    if parts.scheme.lower() == "https":
        return UrlKind.EXTERNAL, url
    return UrlKind.UNSUPPORTED, url
