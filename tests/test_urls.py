from __future__ import annotations

import pytest

from core.urls import (
    UrlKind,
    classify_url,
    host_matches,
    is_direct_media,
    is_reddit_permalink,
    normalize_social_group,
    parse_url,
)


def test_reddit_permalink_requires_comments_and_no_query() -> None:
    assert is_reddit_permalink("https://www.reddit.com/r/pics/comments/abc123/title/")
    assert not is_reddit_permalink("https://www.reddit.com/r/pics/comments/abc123/title/?tl=fr")
    assert not is_reddit_permalink("https://www.reddit.com/r/pics/")
    assert not is_reddit_permalink("https://example.com/comments/abc123/")


def test_classify_url_kinds() -> None:
    permalink = "https://old.reddit.com/r/pics/comments/abc123/title/"
    assert classify_url(permalink) == (UrlKind.REDDIT_PERMALINK, permalink)
    assert classify_url("https://www.reddit.com/r/pics/")[0] is UrlKind.REDDIT_LISTING
    assert classify_url("https://www.reddit.com/user/someone/")[0] is UrlKind.REDDIT_LISTING
    assert classify_url("https://example.com/post")[0] is UrlKind.EXTERNAL
    assert classify_url("http://example.com/post")[0] is UrlKind.UNSUPPORTED


def test_social_group_posts_collapse_to_group() -> None:
    url = "https://m.facebook.com/groups/catlovers/posts/123456/"
    assert normalize_social_group(url) == "https://www.facebook.com/groups/catlovers/"
    assert classify_url(url) == (UrlKind.SOCIAL_GROUP, "https://www.facebook.com/groups/catlovers/")
    assert normalize_social_group("https://www.facebook.com/someone/photos/1") is None


def test_direct_media_detection() -> None:
    assert is_direct_media("https://i.redd.it/abc")
    assert is_direct_media("https://example.com/images/cat.JPG")
    assert is_direct_media("https://preview.redd.it/abc.png?width=640&format=png")
    assert not is_direct_media("https://example.com/gallery/cat")


def test_host_matches_needs_label_boundary() -> None:
    assert host_matches("m.facebook.com", ("facebook.com",))
    assert host_matches("facebook.com", ("facebook.com",))
    assert not host_matches("notfacebook.com", ("facebook.com",))


@pytest.mark.parametrize("url", ["not a url", "http://[broken/", "/relative/path"])
def test_parse_url_rejects_malformed(url: str) -> None:
    with pytest.raises(ValueError):
        parse_url(url)
