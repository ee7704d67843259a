"""
Adjacency component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol

from permastruct.domain.entities import Author, Post, Term
from permastruct.domain.queries import EntityQuery


class AdjacencyStorePort(Protocol):
    """Entity store operations used for adjacency lookups."""

    def get_post(self, post_id: int) -> Post | None:
        """Get post by ID."""
        ...

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None:
        """Get term by ID."""
        ...

    def get_terms_for_post(self, post_id: int, taxonomy: str) -> list[Term]:
        """Terms attached to a post in one taxonomy."""
        ...

    def get_author(self, author_id: int) -> Author | None:
        """Get author by ID."""
        ...

    def query_entities(self, query: EntityQuery) -> list[Post]:
        """Run a filtered, ordered, limited post query."""
        ...


class AdjacencyCachePort(Protocol):
    """Lookaside cache for adjacency results."""

    def get(self, key: str, bucket: str = "default") -> Any | None:
        """Cached value, or None when absent."""
        ...

    def set(self, key: str, value: Any, bucket: str = "default") -> None:
        """Store a value."""
        ...
