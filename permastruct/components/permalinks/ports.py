"""
Permalinks component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from permastruct.domain.entities import Author, Post, Term


class PermalinkStorePort(Protocol):
    """Read-only view of the entity store needed to build links."""

    def get_post(self, post_id: int) -> Post | None:
        """Get post by ID."""
        ...

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None:
        """Get term by ID, optionally restricted to a taxonomy."""
        ...

    def get_terms_for_post(self, post_id: int, taxonomy: str) -> list[Term]:
        """Terms attached to a post in one taxonomy."""
        ...

    def get_author(self, author_id: int) -> Author | None:
        """Get author by ID."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
