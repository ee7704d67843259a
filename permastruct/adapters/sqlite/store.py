"""
SQLite entity store.

Implements EntityStorePort over the tables created by
migrations/0001_site_content.sql. Timestamps are stored as UTC text with
second precision so lexical order equals chronological order.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any

from permastruct.domain.entities import Author, Post, Term
from permastruct.domain.queries import EntityQuery

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def format_ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_ts(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def _placeholders(values: tuple[Any, ...]) -> str:
    return ", ".join("?" for _ in values)


def build_query_sql(query: EntityQuery) -> tuple[str, list[Any]]:
    """Translate an EntityQuery into SQL and parameters."""
    where = ["p.post_type = ?"]
    params: list[Any] = [query.post_type]

    if query.published_before is not None:
        where.append("p.published_at < ?")
        params.append(format_ts(query.published_before))
    if query.published_after is not None:
        where.append("p.published_at > ?")
        params.append(format_ts(query.published_after))

    if query.taxonomy is not None:
        clause = (
            "EXISTS (SELECT 1 FROM term_relationships tr "
            "JOIN terms t ON t.id = tr.term_id "
            "WHERE tr.post_id = p.id AND t.taxonomy = ?"
        )
        params.append(query.taxonomy)
        if query.include_term_ids:
            clause += f" AND t.id IN ({_placeholders(query.include_term_ids)})"
            params.extend(query.include_term_ids)
        where.append(clause + ")")

    if query.exclude_term_ids:
        where.append(
            "p.id NOT IN (SELECT post_id FROM term_relationships "
            f"WHERE term_id IN ({_placeholders(query.exclude_term_ids)}))"
        )
        params.extend(query.exclude_term_ids)

    status_clause = f"p.status IN ({_placeholders(query.statuses)})"
    params.extend(query.statuses)
    if query.owner_id is not None and query.owner_statuses:
        status_clause += (
            f" OR (p.author_id = ? AND p.status IN ({_placeholders(query.owner_statuses)}))"
        )
        params.append(query.owner_id)
        params.extend(query.owner_statuses)
    where.append(f"({status_clause})")

    direction = "DESC" if query.order == "desc" else "ASC"
    sql = (
        "SELECT p.* FROM posts p WHERE "
        + " AND ".join(where)
        + f" ORDER BY p.published_at {direction}, p.id ASC"
    )
    if query.limit is not None:
        sql += " LIMIT ?"
        params.append(query.limit)

    return sql, params


class SQLiteEntityStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # --- Writes ---

    def save_post(self, post: Post) -> Post:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO posts (
                    id, slug, post_type, status, published_at,
                    author_id, parent_id, title
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    slug=excluded.slug,
                    post_type=excluded.post_type,
                    status=excluded.status,
                    published_at=excluded.published_at,
                    author_id=excluded.author_id,
                    parent_id=excluded.parent_id,
                    title=excluded.title
                """,
                (
                    post.id,
                    post.slug,
                    post.post_type,
                    post.status,
                    format_ts(post.published_at),
                    post.author_id,
                    post.parent_id,
                    post.title,
                ),
            )
            conn.commit()
            return post
        finally:
            conn.close()

    def save_term(self, term: Term) -> Term:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO terms (id, slug, taxonomy, name, parent_id)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    slug=excluded.slug,
                    taxonomy=excluded.taxonomy,
                    name=excluded.name,
                    parent_id=excluded.parent_id
                """,
                (term.id, term.slug, term.taxonomy, term.name, term.parent_id),
            )
            conn.commit()
            return term
        finally:
            conn.close()

    def save_author(self, author: Author) -> Author:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (id, nicename, display_name) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    nicename=excluded.nicename,
                    display_name=excluded.display_name
                """,
                (author.id, author.nicename, author.display_name),
            )
            conn.commit()
            return author
        finally:
            conn.close()

    def attach(self, post_id: int, *term_ids: int) -> None:
        conn = self._get_conn()
        try:
            conn.executemany(
                "INSERT OR IGNORE INTO term_relationships (post_id, term_id) VALUES (?, ?)",
                [(post_id, term_id) for term_id in term_ids],
            )
            conn.commit()
        finally:
            conn.close()

    # --- Reads ---

    def get_post(self, post_id: int) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()
            return self._map_post(row) if row else None
        finally:
            conn.close()

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None:
        conn = self._get_conn()
        try:
            if taxonomy is None:
                row = conn.execute("SELECT * FROM terms WHERE id = ?", (term_id,)).fetchone()
            else:
                row = conn.execute(
                    "SELECT * FROM terms WHERE id = ? AND taxonomy = ?", (term_id, taxonomy)
                ).fetchone()
            return self._map_term(row) if row else None
        finally:
            conn.close()

    def get_terms_for_post(self, post_id: int, taxonomy: str) -> list[Term]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT t.* FROM terms t
                JOIN term_relationships tr ON tr.term_id = t.id
                WHERE tr.post_id = ? AND t.taxonomy = ?
                ORDER BY t.id ASC
                """,
                (post_id, taxonomy),
            ).fetchall()
            return [self._map_term(r) for r in rows]
        finally:
            conn.close()

    def get_author(self, author_id: int) -> Author | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (author_id,)).fetchone()
            if not row:
                return None
            return Author(id=row["id"], nicename=row["nicename"], display_name=row["display_name"])
        finally:
            conn.close()

    def query_entities(self, query: EntityQuery) -> list[Post]:
        sql, params = build_query_sql(query)
        logger.debug("query_entities: %s %s", sql, params)
        conn = self._get_conn()
        try:
            rows = conn.execute(sql, params).fetchall()
            return [self._map_post(r) for r in rows]
        finally:
            conn.close()

    def _map_post(self, row: dict[str, Any]) -> Post:
        return Post(
            id=row["id"],
            slug=row["slug"],
            post_type=row["post_type"],
            status=row["status"],
            published_at=parse_ts(row["published_at"]),
            author_id=row["author_id"],
            parent_id=row["parent_id"],
            title=row["title"],
        )

    def _map_term(self, row: dict[str, Any]) -> Term:
        return Term(
            id=row["id"],
            slug=row["slug"],
            taxonomy=row["taxonomy"],
            name=row["name"],
            parent_id=row["parent_id"],
        )
