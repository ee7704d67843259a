"""
Adjacency component input/output models.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from permastruct.domain.entities import Post, Viewer

Direction = Literal["previous", "next"]

DIRECTIONS: tuple[str, ...] = ("previous", "next")


def parse_excluded_terms(value: Iterable[int] | str | None) -> frozenset[int]:
    """
    Normalize an excluded-term list.

    Accepts an iterable of ids or the legacy string forms "1,2,3" and
    "1 and 2 and 3". Non-numeric pieces are ignored.
    """
    if value is None:
        return frozenset()

    if isinstance(value, str):
        separator = " and " if " and " in value else ","
        pieces = [p.strip() for p in value.split(separator)]
        return frozenset(int(p) for p in pieces if re.fullmatch(r"\d+", p))

    return frozenset(int(v) for v in value)


# --- Validation Error ---


@dataclass(frozen=True)
class AdjacencyError:
    """Adjacency lookup error."""

    code: str
    message: str
    field: str | None = None


# --- Constraints ---


@dataclass(frozen=True)
class AdjacencyConstraints:
    """Term constraints shared by adjacent and boundary lookups."""

    in_same_term: bool = False
    excluded_term_ids: frozenset[int] | str = frozenset()
    taxonomy: str = "category"

    @property
    def excluded(self) -> frozenset[int]:
        return parse_excluded_terms(self.excluded_term_ids)


# --- Input Models ---


@dataclass(frozen=True)
class AdjacentPostInput:
    """Input for finding the previous or next post."""

    post_id: int
    direction: Direction = "previous"
    constraints: AdjacencyConstraints = field(default_factory=AdjacencyConstraints)
    viewer: Viewer | None = None


@dataclass(frozen=True)
class BoundaryPostInput:
    """Input for finding the first or last post."""

    post_id: int
    start: bool = True
    constraints: AdjacencyConstraints = field(default_factory=AdjacencyConstraints)


# --- Output Models ---


@dataclass(frozen=True)
class AdjacentPostOutput:
    """Output containing the adjacent (or boundary) post, if any."""

    post: Post | None
    url: str | None = None
    errors: list[AdjacencyError] = field(default_factory=list)
    success: bool = True
