"""
Tests for PermalinkService feed links derived from other links.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from permastruct.adapters.memory_store import InMemoryEntityStore
from permastruct.components.hooks import HookRegistry
from permastruct.components.permalinks import PermalinkService
from permastruct.rules.models import Rules


@pytest.fixture
def service(
    site_store: InMemoryEntityStore, hooks: HookRegistry, rules: Rules
) -> PermalinkService:
    return PermalinkService(site_store, hooks, rules)


@pytest.fixture
def plain(
    site_store: InMemoryEntityStore, make_rules: Callable[..., Rules]
) -> PermalinkService:
    return PermalinkService(site_store, HookRegistry(), make_rules(structure=""))


class TestPostCommentsFeed:
    """Test per-post comment feeds."""

    def test_default_feed(self, service: PermalinkService) -> None:
        assert service.post_comments_feed_link(100) == (
            "https://example.com/2024/03/hello-world/feed/"
        )

    def test_named_feed(self, service: PermalinkService) -> None:
        assert service.post_comments_feed_link(100, "atom") == (
            "https://example.com/2024/03/hello-world/feed/atom/"
        )

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.post_comments_feed_link(100) == "https://example.com/?feed=rss2&p=100"
        assert plain.post_comments_feed_link(200) == "https://example.com/?feed=rss2&page_id=200"

    def test_front_page_uses_page_path(
        self,
        site_store: InMemoryEntityStore,
        make_rules: Callable[..., Rules],
    ) -> None:
        rules = make_rules(show_on_front="page", page_on_front=200)
        service = PermalinkService(site_store, HookRegistry(), rules)
        assert service.post_comments_feed_link(200) == "https://example.com/about/feed/"

    def test_unknown_post(self, service: PermalinkService) -> None:
        assert service.post_comments_feed_link(9999) is None


class TestAuthorFeed:
    """Test author feeds."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.author_feed_link(1) == "https://example.com/author/jane/feed/"
        assert service.author_feed_link(1, "atom") == "https://example.com/author/jane/feed/atom/"

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.author_feed_link(1) == "https://example.com/?feed=rss2&author=1"

    def test_unknown_author(self, service: PermalinkService) -> None:
        assert service.author_feed_link(404) is None


class TestTermFeed:
    """Test term feeds and their per-taxonomy hooks."""

    def test_category(self, service: PermalinkService) -> None:
        assert service.term_feed_link(3) == "https://example.com/category/news/local/feed/"

    def test_query_fallbacks(self, plain: PermalinkService) -> None:
        assert plain.term_feed_link(3) == "https://example.com/?feed=rss2&cat=3"
        assert plain.term_feed_link(10, "post_tag") == "https://example.com/?feed=rss2&tag=python"
        assert plain.term_feed_link(20, "genre", "atom") == (
            "https://example.com/?feed=atom&genre=fantasy"
        )

    def test_hooks_by_taxonomy(self, service: PermalinkService, hooks: HookRegistry) -> None:
        hooks.add_filter("category_feed_link", lambda url, feed: "category")
        hooks.add_filter("tag_feed_link", lambda url, feed: "tag")
        hooks.add_filter("taxonomy_feed_link", lambda url, feed, taxonomy: taxonomy)

        assert service.term_feed_link(3) == "category"
        assert service.term_feed_link(10, "post_tag") == "tag"
        assert service.term_feed_link(20, "genre") == "genre"

    def test_unknown_term(self, service: PermalinkService) -> None:
        assert service.term_feed_link(999) is None


class TestSearchFeed:
    """Test search result feeds."""

    def test_posts(self, service: PermalinkService) -> None:
        assert service.search_feed_link("hello") == "https://example.com/search/hello/feed/rss2/"

    def test_comments(self, service: PermalinkService) -> None:
        assert service.search_comments_feed_link("hello") == (
            "https://example.com/search/hello/feed/rss2/?withcomments=1"
        )

    def test_query_fallbacks(self, plain: PermalinkService) -> None:
        assert plain.search_feed_link("hello") == "https://example.com/?s=hello&feed=rss2"
        assert plain.search_comments_feed_link("hello") == (
            "https://example.com/?s=hello&feed=comments-rss2"
        )

    def test_hook_gets_target(self, service: PermalinkService, hooks: HookRegistry) -> None:
        targets: list[str] = []

        def spy(url: str, feed: str, target: str) -> str:
            targets.append(target)
            return url

        hooks.add_filter("search_feed_link", spy)
        service.search_comments_feed_link("x")

        assert targets == ["posts", "comments"]


class TestPostTypeArchiveFeed:
    """Test post type archive feeds."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.post_type_archive_feed_link("book") == "https://example.com/books/feed/"
        assert service.post_type_archive_feed_link("book", "atom") == (
            "https://example.com/books/feed/atom/"
        )

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.post_type_archive_feed_link("book") == (
            "https://example.com/?post_type=book&feed=rss2"
        )

    def test_no_archive(self, service: PermalinkService) -> None:
        assert service.post_type_archive_feed_link("post") is None
