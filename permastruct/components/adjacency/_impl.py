"""
AdjacencyService - Previous/next and first/last post lookups.

Finds the post immediately before or after a given post in publication
order, optionally restricted to the terms the post shares, and renders the
anchor and <link rel> markup for it.

Key behaviors:
- Strict timestamp comparison; ties resolve by ascending id
- Anonymous viewers only see published posts; logged-in viewers also see
  private posts (all of them with the read-private capability, otherwise
  only their own)
- Results are cached per query in the configured bucket, including
  "no result" (stored as ""), so identical lookups hit the store once
- Store errors propagate and leave the cache untouched
"""

from __future__ import annotations

import hashlib
import html
import json
import logging
from zoneinfo import ZoneInfo

from permastruct.components.hooks import HooksPort
from permastruct.components.permalinks import PermalinkService
from permastruct.domain.entities import PRIVATE_STATUSES, Post, Viewer
from permastruct.domain.queries import EntityQuery
from permastruct.rules.models import Rules

from .models import AdjacencyConstraints, Direction
from .ports import AdjacencyCachePort, AdjacencyStorePort

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "adjacent_post_"

DEFAULT_FORMATS = {
    "previous": "&laquo; %link",
    "next": "%link &raquo;",
}

FALLBACK_TITLES = {
    "previous": "Previous Post",
    "next": "Next Post",
}


def adjacency_cache_key(query: EntityQuery) -> str:
    """Cache key for a query: prefix plus md5 of its canonical JSON."""
    payload = json.dumps(query.model_dump(mode="json"), sort_keys=True)
    return CACHE_KEY_PREFIX + hashlib.md5(payload.encode("utf-8")).hexdigest()


def visibility_for(viewer: Viewer | None) -> dict[str, object]:
    """EntityQuery status fields for a viewer."""
    if viewer is None:
        return {"statuses": ("publish",)}
    if viewer.can_read_private:
        return {"statuses": ("publish", *PRIVATE_STATUSES)}
    return {
        "statuses": ("publish",),
        "owner_id": viewer.user_id,
        "owner_statuses": PRIVATE_STATUSES,
    }


class AdjacencyService:
    """
    Adjacent-entity query service.

    The cache is shared across requests; the store is only consulted on a
    cache miss.
    """

    def __init__(
        self,
        store: AdjacencyStorePort,
        cache: AdjacencyCachePort,
        hooks: HooksPort,
        rules: Rules,
        permalinks: PermalinkService | None = None,
    ) -> None:
        """Initialize service."""
        self._store = store
        self._cache = cache
        self._hooks = hooks
        self._rules = rules
        self._bucket = rules.cache.adjacency_bucket
        self._tz = ZoneInfo(rules.site.timezone)
        self._permalinks = permalinks or PermalinkService(store, hooks, rules)

    @property
    def permalinks(self) -> PermalinkService:
        return self._permalinks

    def _resolve(self, current: Post | int | None) -> Post | None:
        if isinstance(current, Post):
            return current
        if not current:
            return None
        return self._store.get_post(int(current))

    def _post_term_ids(self, post: Post, taxonomy: str) -> set[int]:
        return {t.id for t in self._store.get_terms_for_post(post.id, taxonomy)}

    def build_query(
        self,
        current: Post,
        direction: Direction,
        constraints: AdjacencyConstraints,
        viewer: Viewer | None = None,
    ) -> EntityQuery | None:
        """
        Build the filtered query for an adjacent lookup.

        Returns None when the constraints cannot match anything.
        """
        taxonomy = self._rules.taxonomy(constraints.taxonomy)
        if taxonomy is None:
            logger.debug("Unknown taxonomy %r for adjacency", constraints.taxonomy)
            return None

        excluded = self._hooks.apply_filters(
            f"get_{direction}_post_excluded_terms", constraints.excluded
        )
        excluded = frozenset(int(t) for t in excluded)

        include: tuple[int, ...] = ()
        if constraints.in_same_term:
            if current.post_type not in taxonomy.object_types:
                return None
            terms = self._post_term_ids(current, taxonomy.name) - excluded
            if not terms:
                return None
            include = tuple(sorted(terms))

        query = EntityQuery(
            post_type=current.post_type,
            published_before=current.published_at if direction == "previous" else None,
            published_after=current.published_at if direction == "next" else None,
            taxonomy=taxonomy.name if constraints.in_same_term or excluded else None,
            include_term_ids=include,
            exclude_term_ids=tuple(sorted(excluded)),
            order="desc" if direction == "previous" else "asc",
            limit=1,
            **visibility_for(viewer),
        )

        return self._hooks.apply_filters(
            f"get_{direction}_post_query", query, constraints.in_same_term, excluded
        )

    def find_adjacent(
        self,
        current: Post | int | None,
        direction: Direction = "previous",
        constraints: AdjacencyConstraints | None = None,
        viewer: Viewer | None = None,
    ) -> Post | None:
        """Previous or next post relative to current, or None."""
        if direction not in ("previous", "next"):
            raise ValueError(f"direction must be 'previous' or 'next', got {direction!r}")

        post = self._resolve(current)
        if post is None:
            return None

        query = self.build_query(post, direction, constraints or AdjacencyConstraints(), viewer)
        if query is None:
            return None

        key = adjacency_cache_key(query)
        cached = self._cache.get(key, self._bucket)
        if cached is not None:
            logger.debug("Adjacency cache hit: %s", key)
            if cached == "":
                return None
            return self._store.get_post(int(cached))

        logger.debug("Adjacency cache miss: %s", key)
        results = self._store.query_entities(query)
        found = results[0] if results else None
        self._cache.set(key, found.id if found else "", self._bucket)
        return found

    def find_boundary(
        self,
        current: Post | int | None,
        start: bool = True,
        constraints: AdjacencyConstraints | None = None,
    ) -> Post | None:
        """
        First (start=True) or last published post of current's type.

        Attachments have no boundary posts.
        """
        post = self._resolve(current)
        if post is None or post.post_type == "attachment":
            return None

        constraints = constraints or AdjacencyConstraints()
        taxonomy = self._rules.taxonomy(constraints.taxonomy)
        if taxonomy is None:
            return None

        term_ids: set[int] = set()
        if constraints.in_same_term:
            term_ids = self._post_term_ids(post, taxonomy.name)

        query = EntityQuery(
            post_type=post.post_type,
            taxonomy=taxonomy.name if term_ids else None,
            include_term_ids=tuple(sorted(term_ids)),
            exclude_term_ids=tuple(sorted(constraints.excluded - term_ids)),
            order="asc" if start else "desc",
            limit=1,
        )

        results = self._store.query_entities(query)
        return results[0] if results else None

    def _adjacent_for_markup(
        self,
        current: Post | int | None,
        direction: Direction,
        constraints: AdjacencyConstraints | None,
        viewer: Viewer | None,
    ) -> Post | None:
        # The previous post of an attachment is its parent.
        post = self._resolve(current)
        if direction == "previous" and post is not None and post.post_type == "attachment":
            return self._store.get_post(post.parent_id) if post.parent_id else None
        return self.find_adjacent(post, direction, constraints, viewer)

    def _title_and_date(self, post: Post, direction: Direction) -> tuple[str, str]:
        title = post.title or FALLBACK_TITLES[direction]
        title = self._hooks.apply_filters("the_title", title, post.id)
        date = post.published_at.astimezone(self._tz).strftime(self._rules.site.date_format)
        return title, date

    def adjacent_post_link(
        self,
        current: Post | int | None,
        direction: Direction = "previous",
        format: str | None = None,
        link: str = "%title",
        constraints: AdjacencyConstraints | None = None,
        viewer: Viewer | None = None,
    ) -> str:
        """
        Anchor markup for the adjacent post.

        format wraps the anchor via its %link placeholder; link is the anchor
        text with %title and %date placeholders. For an attachment the previous
        link points at its parent post. Empty string when there is no adjacent
        post.
        """
        format = format if format is not None else DEFAULT_FORMATS[direction]
        adjacent = self._adjacent_for_markup(current, direction, constraints, viewer)

        if adjacent is None:
            output = ""
        else:
            title, date = self._title_and_date(adjacent, direction)
            rel = "prev" if direction == "previous" else "next"
            href = self._permalinks.post_link(adjacent) or ""
            inner = link.replace("%title", html.escape(title)).replace("%date", date)
            anchor = f'<a href="{html.escape(href)}" rel="{rel}">{inner}</a>'
            output = format.replace("%link", anchor)

        return self._hooks.apply_filters(
            f"{direction}_post_link", output, format, link, adjacent, direction
        )

    def adjacent_rel_link(
        self,
        current: Post | int | None,
        direction: Direction = "previous",
        title: str = "%title",
        constraints: AdjacencyConstraints | None = None,
        viewer: Viewer | None = None,
    ) -> str:
        """
        <link rel="prev|next"> markup for the adjacent post.

        For an attachment the previous link points at its parent post.
        Empty string when there is no adjacent post.
        """
        adjacent = self._adjacent_for_markup(current, direction, constraints, viewer)

        if adjacent is None:
            return ""

        post_title, date = self._title_and_date(adjacent, direction)
        text = title.replace("%title", post_title).replace("%date", date)
        rel = "prev" if direction == "previous" else "next"
        href = self._permalinks.post_link(adjacent) or ""
        markup = (
            f"<link rel='{rel}' title='{html.escape(text, quote=True)}' "
            f"href='{href}' />\n"
        )

        return self._hooks.apply_filters(f"{direction}_post_rel_link", markup)


# --- Factory ---


def create_adjacency_service(
    store: AdjacencyStorePort,
    cache: AdjacencyCachePort,
    hooks: HooksPort,
    rules: Rules,
) -> AdjacencyService:
    """Create an AdjacencyService."""
    return AdjacencyService(store=store, cache=cache, hooks=hooks, rules=rules)
