from datetime import datetime
from typing import Any, Protocol

from permastruct.domain.entities import Author, Post, Term
from permastruct.domain.queries import EntityQuery


class EntityStorePort(Protocol):
    def get_post(self, post_id: int) -> Post | None:
        ...

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None:
        ...

    def get_terms_for_post(self, post_id: int, taxonomy: str) -> list[Term]:
        ...

    def get_author(self, author_id: int) -> Author | None:
        ...

    def query_entities(self, query: EntityQuery) -> list[Post]:
        ...


class CachePort(Protocol):
    """Shared key-value cache; implementations handle their own locking and eviction."""

    def get(self, key: str, bucket: str = "default") -> Any | None:
        ...

    def set(self, key: str, value: Any, bucket: str = "default") -> None:
        ...


class ClockPort(Protocol):
    def now_utc(self) -> datetime:
        ...
