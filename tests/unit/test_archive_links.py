"""
Tests for PermalinkService.archive_link over every archive kind.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from permastruct.adapters.clock import FixedClock
from permastruct.adapters.memory_store import InMemoryEntityStore
from permastruct.components.hooks import HookRegistry
from permastruct.components.permalinks import (
    AuthorArchive,
    DayArchive,
    FeedArchive,
    MonthArchive,
    PermalinkService,
    PostTypeArchive,
    SearchArchive,
    TermArchive,
    YearArchive,
)
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
    """Service for a site without pretty permalinks."""
    return PermalinkService(site_store, HookRegistry(), make_rules(structure=""))


class TestDateArchives:
    """Test year, month and day links."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.archive_link(YearArchive(2024)) == "https://example.com/2024/"
        assert service.archive_link(MonthArchive(2024, 3)) == "https://example.com/2024/03/"
        assert service.archive_link(DayArchive(2024, 3, 5)) == "https://example.com/2024/03/05/"

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.archive_link(YearArchive(2024)) == "https://example.com/?m=2024"
        assert plain.archive_link(MonthArchive(2024, 3)) == "https://example.com/?m=202403"
        assert plain.archive_link(DayArchive(2024, 3, 5)) == "https://example.com/?m=20240305"

    def test_missing_parts_use_clock_in_site_timezone(
        self,
        site_store: InMemoryEntityStore,
        make_rules: Callable[..., Rules],
    ) -> None:
        clock = FixedClock(datetime(2025, 12, 31, 23, 30, tzinfo=UTC))
        service = PermalinkService(
            site_store, HookRegistry(), make_rules(timezone="Asia/Tokyo"), time_port=clock
        )

        assert service.archive_link(YearArchive()) == "https://example.com/2026/"
        assert service.archive_link(MonthArchive(year=2024)) == "https://example.com/2024/01/"
        assert service.archive_link(DayArchive()) == "https://example.com/2026/01/01/"

    def test_dates_under_date_prefix(
        self,
        site_store: InMemoryEntityStore,
        make_rules: Callable[..., Rules],
    ) -> None:
        rules = make_rules(structure="/%post_id%/%postname%/")
        service = PermalinkService(site_store, HookRegistry(), rules)
        assert service.archive_link(MonthArchive(2024, 3)) == "https://example.com/date/2024/03/"

    def test_hooks(self, service: PermalinkService, hooks: HookRegistry) -> None:
        hooks.add_filter("year_link", lambda url, year: f"{url}?y={year}")
        hooks.add_filter("day_link", lambda url, y, m, d: f"{url}?d={d}")

        assert service.archive_link(YearArchive(2024)) == "https://example.com/2024/?y=2024"
        assert service.archive_link(DayArchive(2024, 3, 5)) == "https://example.com/2024/03/05/?d=5"


class TestSearchArchive:
    """Test search links."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.archive_link(SearchArchive("hello world")) == (
            "https://example.com/search/hello+world/"
        )

    def test_slashes_stay_raw(self, service: PermalinkService) -> None:
        assert service.archive_link(SearchArchive("a/b")) == "https://example.com/search/a/b/"

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.archive_link(SearchArchive("hello world")) == (
            "https://example.com/?s=hello+world"
        )


class TestFeedArchive:
    """Test site feed links."""

    @pytest.mark.parametrize(
        "feed, expected",
        [
            ("", "https://example.com/feed/"),
            ("rss2", "https://example.com/feed/"),
            ("atom", "https://example.com/feed/atom/"),
            ("comments_rss2", "https://example.com/comments/feed/"),
            ("comments_atom", "https://example.com/comments/feed/atom/"),
        ],
    )
    def test_pretty(self, service: PermalinkService, feed: str, expected: str) -> None:
        assert service.archive_link(FeedArchive(feed)) == expected

    @pytest.mark.parametrize(
        "feed, expected",
        [
            ("", "https://example.com/?feed=rss2"),
            ("atom", "https://example.com/?feed=atom"),
            ("comments_atom", "https://example.com/?feed=comments-atom"),
        ],
    )
    def test_query_fallback(self, plain: PermalinkService, feed: str, expected: str) -> None:
        assert plain.archive_link(FeedArchive(feed)) == expected


class TestTermArchive:
    """Test category, tag and custom taxonomy links."""

    def test_hierarchical_category(self, service: PermalinkService) -> None:
        assert service.archive_link(TermArchive(3)) == "https://example.com/category/news/local/"

    def test_tag(self, service: PermalinkService) -> None:
        assert service.archive_link(TermArchive(10, "post_tag")) == "https://example.com/tag/python/"

    def test_custom_taxonomy(self, service: PermalinkService) -> None:
        assert service.archive_link(TermArchive(20, "genre")) == "https://example.com/genre/fantasy/"

    def test_query_fallbacks(self, plain: PermalinkService) -> None:
        assert plain.archive_link(TermArchive(3)) == "https://example.com/?cat=3"
        assert plain.archive_link(TermArchive(10, "post_tag")) == "https://example.com/?tag=python"
        assert plain.archive_link(TermArchive(20, "genre")) == "https://example.com/?genre=fantasy"

    def test_unknown_term_or_taxonomy_is_none(self, service: PermalinkService) -> None:
        assert service.archive_link(TermArchive(999)) is None
        assert service.archive_link(TermArchive(3, "post_tag")) is None
        assert service.archive_link(TermArchive(3, "nope")) is None

    def test_category_filter_runs_before_term_filter(
        self, service: PermalinkService, hooks: HookRegistry
    ) -> None:
        order: list[str] = []

        def category(url: str, term_id: int) -> str:
            order.append("category_link")
            return url

        def term(url: str, term: object, taxonomy: str) -> str:
            order.append(f"term_link:{taxonomy}")
            return url

        hooks.add_filter("category_link", category)
        hooks.add_filter("term_link", term)
        service.archive_link(TermArchive(3))

        assert order == ["category_link", "term_link:category"]


class TestAuthorArchive:
    """Test author links."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.archive_link(AuthorArchive(1)) == "https://example.com/author/jane/"

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.archive_link(AuthorArchive(1)) == "https://example.com/?author=1"

    def test_unknown_author_is_none(self, service: PermalinkService) -> None:
        assert service.archive_link(AuthorArchive(404)) is None

    def test_hook(self, service: PermalinkService, hooks: HookRegistry) -> None:
        hooks.add_filter("author_link", lambda url, author_id, nicename: url + nicename)
        assert service.archive_link(AuthorArchive(1)) == "https://example.com/author/jane/jane"


class TestPostTypeArchive:
    """Test post type archive links."""

    def test_pretty(self, service: PermalinkService) -> None:
        assert service.archive_link(PostTypeArchive("book")) == "https://example.com/books/"

    def test_query_fallback(self, plain: PermalinkService) -> None:
        assert plain.archive_link(PostTypeArchive("book")) == "https://example.com/?post_type=book"

    def test_no_archive_is_none(self, service: PermalinkService) -> None:
        assert service.archive_link(PostTypeArchive("post")) is None
        assert service.archive_link(PostTypeArchive("movie")) is None

    def test_named_archive_slug(
        self,
        site_store: InMemoryEntityStore,
        make_rules: Callable[..., Rules],
    ) -> None:
        rules = make_rules(structure="/blog/%postname%/")
        book = rules.post_type("book")
        assert book is not None
        rules = rules.model_copy(
            update={
                "post_types": [
                    pt if pt.name != "book" else book.model_copy(update={"has_archive": "library"})
                    for pt in rules.post_types
                ]
            }
        )
        service = PermalinkService(site_store, HookRegistry(), rules)

        assert service.archive_link(PostTypeArchive("book")) == "https://example.com/blog/library/"


class TestUnknownKind:
    """Test dispatch on an unsupported kind."""

    def test_raises_value_error(self, service: PermalinkService) -> None:
        with pytest.raises(ValueError):
            service.archive_link("year")  # type: ignore[arg-type]
