"""
RewriteStructures - Per-archive rewrite patterns derived from the site structure.

The site configures one post structure (e.g. "/%year%/%monthnum%/%postname%/").
Every other archive pattern (date, page, search, feed, term, author, custom
post types) is derived from it the way the host rewrite engine does, unless
the rules file overrides a pattern explicitly.

Key behaviors:
- Empty structure means pretty permalinks are off; every pattern is ""
- "front" is the literal prefix before the first token
- Date archives move under "<front>date/" when %post_id% sits among the
  first three tokens, so date and post URLs never collide
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from permastruct.rules.models import Rules

TOKEN_RE = re.compile(r"%[^%/]+?%")

ARCHIVE_TYPES = (
    "date",
    "year",
    "month",
    "day",
    "page",
    "search",
    "feed",
    "comment_feed",
    "category",
    "post_tag",
    "author",
)


def _collapse_slashes(pattern: str) -> str:
    return re.sub(r"/+", "/", pattern)


@dataclass(frozen=True)
class RewriteStructures:
    """Resolved rewrite patterns for one site configuration."""

    structure: str = ""
    front: str = "/"
    root: str = "/"
    patterns: Mapping[str, str] = field(default_factory=dict)
    extra: Mapping[str, str] = field(default_factory=dict)

    @property
    def using_permalinks(self) -> bool:
        return bool(self.structure)

    @property
    def using_index_permalinks(self) -> bool:
        return self.using_permalinks and self.root != "/"

    def get(self, archive_type: str) -> str:
        """Pattern for an archive type, "" when unset."""
        return self.patterns.get(archive_type, "")

    def extra_structure(self, name: str) -> str:
        """Pattern for a custom post type or taxonomy, "" when unset."""
        return self.extra.get(name, "")

    @classmethod
    def from_rules(cls, rules: Rules) -> RewriteStructures:
        """Derive all patterns from the rules file."""
        pl = rules.permalinks
        structure = pl.structure

        if not structure:
            return cls(
                structure="",
                patterns=MappingProxyType(dict(pl.overrides)),
            )

        index_prefix = "/" + pl.index
        using_index = structure.lstrip("/").startswith(pl.index)
        root = index_prefix + "/" if using_index else "/"

        first_token = structure.find("%")
        front = structure[:first_token] if first_token >= 0 else root
        if not front.startswith("/"):
            front = "/" + front

        date_front = front
        for position, token in enumerate(TOKEN_RE.findall(structure), start=1):
            if position > 3:
                break
            if token == "%post_id%":
                date_front = front + "date/"
                break

        date = _collapse_slashes(date_front + "%year%/%monthnum%/%day%")
        patterns: dict[str, str] = {
            "date": date,
            "year": _collapse_slashes(date.replace("%monthnum%", "").replace("%day%", "")),
            "month": _collapse_slashes(date.replace("%day%", "")),
            "day": date,
            "page": root + "%pagename%",
            "search": _collapse_slashes(f"{root}{pl.search_base}/%search%"),
            "feed": _collapse_slashes(f"{root}{pl.feed_base}/%feed%"),
            "comment_feed": _collapse_slashes(
                f"{root}{pl.comments_base}/{pl.feed_base}/%feed%"
            ),
            "category": _collapse_slashes(f"{front}{pl.category_base}/%category%"),
            "post_tag": _collapse_slashes(f"{front}{pl.tag_base}/%post_tag%"),
            "author": _collapse_slashes(f"{front}{pl.author_base}/%author%"),
        }

        extra: dict[str, str] = {}
        for pt in rules.post_types:
            if pt.builtin or pt.rewrite is None:
                continue
            prefix = front if pt.rewrite.with_front else root
            extra[pt.name] = _collapse_slashes(f"{prefix}{pt.rewrite.slug}/%{pt.name}%")

        for tx in rules.taxonomies:
            if tx.name in ("category", "post_tag"):
                continue
            slug = tx.rewrite_slug or tx.name
            extra[tx.name] = _collapse_slashes(f"{front}{slug}/%{tx.name}%")

        for key, value in pl.overrides.items():
            if key in ARCHIVE_TYPES:
                patterns[key] = value
            else:
                extra[key] = value

        return cls(
            structure=structure,
            front=front,
            root=root,
            patterns=MappingProxyType(patterns),
            extra=MappingProxyType(extra),
        )
