"""
In-memory entity store.

Holds posts, terms, relationships and authors in dicts and answers
EntityQuery with the same semantics as the SQLite store. Used for tests
and for sites small enough to load at startup.
"""

from __future__ import annotations

from permastruct.domain.entities import Author, Post, Term
from permastruct.domain.queries import EntityQuery


class InMemoryEntityStore:
    """Dict-backed implementation of EntityStorePort."""

    def __init__(self) -> None:
        self.posts: dict[int, Post] = {}
        self.terms: dict[int, Term] = {}
        self.authors: dict[int, Author] = {}
        self.relationships: dict[int, set[int]] = {}

    # --- Writes ---

    def add_post(self, post: Post) -> Post:
        self.posts[post.id] = post
        return post

    def add_term(self, term: Term) -> Term:
        self.terms[term.id] = term
        return term

    def add_author(self, author: Author) -> Author:
        self.authors[author.id] = author
        return author

    def attach(self, post_id: int, *term_ids: int) -> None:
        self.relationships.setdefault(post_id, set()).update(term_ids)

    # --- Reads ---

    def get_post(self, post_id: int) -> Post | None:
        return self.posts.get(post_id)

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None:
        term = self.terms.get(term_id)
        if term is None or (taxonomy is not None and term.taxonomy != taxonomy):
            return None
        return term

    def get_terms_for_post(self, post_id: int, taxonomy: str) -> list[Term]:
        ids = self.relationships.get(post_id, set())
        terms = [self.terms[i] for i in ids if i in self.terms]
        return sorted((t for t in terms if t.taxonomy == taxonomy), key=lambda t: t.id)

    def get_author(self, author_id: int) -> Author | None:
        return self.authors.get(author_id)

    def _matches(self, post: Post, query: EntityQuery) -> bool:
        if post.post_type != query.post_type:
            return False
        if query.published_before is not None and not post.published_at < query.published_before:
            return False
        if query.published_after is not None and not post.published_at > query.published_after:
            return False

        term_ids = self.relationships.get(post.id, set())

        if query.taxonomy is not None:
            in_taxonomy = {
                i for i in term_ids if i in self.terms and self.terms[i].taxonomy == query.taxonomy
            }
            if query.include_term_ids:
                in_taxonomy &= set(query.include_term_ids)
            if not in_taxonomy:
                return False

        if term_ids & set(query.exclude_term_ids):
            return False

        if post.status in query.statuses:
            return True
        return (
            query.owner_id is not None
            and post.author_id == query.owner_id
            and post.status in query.owner_statuses
        )

    def query_entities(self, query: EntityQuery) -> list[Post]:
        matches = [p for p in self.posts.values() if self._matches(p, query)]
        # Stable sorts: id ascending breaks timestamp ties in both directions.
        matches.sort(key=lambda p: p.id)
        matches.sort(key=lambda p: p.published_at, reverse=query.order == "desc")
        if query.limit is not None:
            matches = matches[: query.limit]
        return matches
