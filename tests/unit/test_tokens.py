"""
Tests for rewrite token resolution.
"""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from permastruct.components.permalinks import ResolutionContext, replace_tokens, resolve_tokens
from permastruct.domain.entities import Post


@pytest.fixture
def post() -> Post:
    return Post(
        id=42,
        slug="hello-world",
        published_at=datetime(2024, 3, 5, 4, 7, 9, tzinfo=UTC),
    )


class TestResolveTokens:
    """Test post token substitution."""

    def test_date_parts_are_zero_padded(self, post: Post) -> None:
        pattern = "/%year%/%monthnum%/%day%/%hour%/%minute%/%second%/"
        assert resolve_tokens(pattern, post, ResolutionContext()) == "/2024/03/05/04/07/09/"

    def test_name_and_id(self, post: Post) -> None:
        assert resolve_tokens("/%post_id%/%postname%", post, ResolutionContext()) == (
            "/42/hello-world"
        )

    def test_dates_use_site_timezone(self) -> None:
        # 23:30 UTC on 31 March is 00:30 BST on 1 April.
        late = Post(id=1, slug="late", published_at=datetime(2024, 3, 31, 23, 30, tzinfo=UTC))
        ctx = ResolutionContext(timezone=ZoneInfo("Europe/London"))

        assert resolve_tokens("/%year%/%monthnum%/%day%/", late, ctx) == "/2024/04/01/"

    def test_naive_timestamps_are_utc(self) -> None:
        naive = Post(id=1, slug="n", published_at=datetime(2024, 1, 2, 3, 4, 5))
        assert resolve_tokens("%hour%", naive, ResolutionContext()) == "03"

    def test_category_and_author_come_from_context(self, post: Post) -> None:
        ctx = ResolutionContext(category_path="news/local", author_nicename="jane")
        assert resolve_tokens("/%category%/%author%/", post, ctx) == "/news/local/jane/"

    def test_pagename_uses_page_uri(self, post: Post) -> None:
        ctx = ResolutionContext(page_uri="about/team")
        assert resolve_tokens("/%pagename%", post, ctx) == "/about/team"
        assert resolve_tokens("/%pagename%", post, ResolutionContext()) == "/hello-world"

    def test_leave_name_keeps_name_tokens(self, post: Post) -> None:
        ctx = ResolutionContext(leave_name=True)
        assert resolve_tokens("/%year%/%postname%/", post, ctx) == "/2024/%postname%/"

    def test_unknown_tokens_pass_through(self, post: Post) -> None:
        assert resolve_tokens("/%year%/%custom%/", post, ResolutionContext()) == (
            "/2024/%custom%/"
        )

    def test_pattern_without_tokens_is_unchanged(self, post: Post) -> None:
        assert resolve_tokens("/static/path", post, ResolutionContext()) == "/static/path"

    def test_post_without_id_raises(self) -> None:
        with pytest.raises(ValueError):
            resolve_tokens("/%postname%", Post(id=0, slug="x"), ResolutionContext())

    def test_is_deterministic(self, post: Post) -> None:
        ctx = ResolutionContext(category_path="news")
        pattern = "/%category%/%year%/%postname%/"
        assert resolve_tokens(pattern, post, ctx) == resolve_tokens(pattern, post, ctx)


class TestReplaceTokens:
    """Test single-pass replacement."""

    def test_replacement_values_are_not_rescanned(self) -> None:
        assert replace_tokens("/%a%/%b%", {"%a%": "%b%", "%b%": "x"}) == "/%b%/x"

    def test_no_percent_sign_short_circuits(self) -> None:
        assert replace_tokens("/plain/", {"%a%": "x"}) == "/plain/"
