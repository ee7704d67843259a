from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from permastruct.adapters.memory_store import InMemoryEntityStore
from permastruct.components.hooks import HookRegistry
from permastruct.domain.entities import Author, Post, Term
from permastruct.rules.models import Rules

DATE_STRUCTURE = "/%year%/%monthnum%/%postname%/"


def build_rules(structure: str = DATE_STRUCTURE, **site: Any) -> Rules:
    """Rules for a site at https://example.com with one custom type and taxonomy."""
    return Rules.model_validate(
        {
            "site": {"base_url": "https://example.com", "timezone": "UTC", **site},
            "permalinks": {"structure": structure},
            "post_types": [
                {
                    "name": "book",
                    "query_var": "book",
                    "has_archive": True,
                    "rewrite": {"slug": "books", "with_front": True, "feeds": True},
                }
            ],
            "taxonomies": [
                {"name": "category", "query_var": "cat", "hierarchical": True},
                {"name": "post_tag", "query_var": "tag"},
                {
                    "name": "genre",
                    "query_var": "genre",
                    "rewrite_slug": "genre",
                    "object_types": ["book"],
                },
            ],
        }
    )


@pytest.fixture
def rules() -> Rules:
    return build_rules()


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def site_store() -> InMemoryEntityStore:
    """
    Small site:
    - post 100 "hello-world" in category news/local, tagged python
    - draft post 101, pages 200 (about) and 201 (about/team)
    - attachments 300 (photo), 301 (numeric slug) under post 100, 302 orphan
    - book 400 "dune" in genre fantasy
    """
    store = InMemoryEntityStore()
    store.add_author(Author(id=1, nicename="jane", display_name="Jane"))

    store.add_term(Term(id=1, slug="uncategorized", taxonomy="category"))
    store.add_term(Term(id=2, slug="news", taxonomy="category"))
    store.add_term(Term(id=3, slug="local", taxonomy="category", parent_id=2))
    store.add_term(Term(id=10, slug="python", taxonomy="post_tag"))
    store.add_term(Term(id=20, slug="fantasy", taxonomy="genre"))

    published = datetime(2024, 3, 5, 14, 7, 9, tzinfo=UTC)
    store.add_post(
        Post(id=100, slug="hello-world", published_at=published, author_id=1, title="Hello")
    )
    store.attach(100, 3, 10)
    store.add_post(
        Post(id=101, slug="draft-post", status="draft", published_at=published, author_id=1)
    )
    store.add_post(Post(id=200, slug="about", post_type="page", published_at=published))
    store.add_post(
        Post(id=201, slug="team", post_type="page", parent_id=200, published_at=published)
    )
    store.add_post(
        Post(id=300, slug="photo", post_type="attachment", status="inherit", parent_id=100)
    )
    store.add_post(
        Post(id=301, slug="1234", post_type="attachment", status="inherit", parent_id=100)
    )
    store.add_post(Post(id=302, slug="orphan", post_type="attachment", status="inherit"))
    store.add_post(Post(id=400, slug="dune", post_type="book", published_at=published))
    store.attach(400, 20)
    return store


@pytest.fixture
def make_rules() -> Callable[..., Rules]:
    """Factory fixture: make_rules(structure=..., **site_fields) -> Rules."""
    return build_rules
