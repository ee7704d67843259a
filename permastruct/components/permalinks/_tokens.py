"""
Token resolution for rewrite patterns.

Pure functions: everything that would need a lookup (category path, author
nicename, ancestor page path, site timezone) arrives precomputed on the
ResolutionContext, so the same inputs always give the same output.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, tzinfo

from permastruct.domain.entities import Post

from ._structures import TOKEN_RE

POST_TOKENS = (
    "%year%",
    "%monthnum%",
    "%day%",
    "%hour%",
    "%minute%",
    "%second%",
    "%postname%",
    "%post_id%",
    "%category%",
    "%author%",
    "%pagename%",
)

NAME_TOKENS = frozenset({"%postname%", "%pagename%"})


@dataclass(frozen=True)
class ResolutionContext:
    """Inputs to one resolution call besides the pattern and the post."""

    timezone: tzinfo = UTC
    category_path: str = ""
    author_nicename: str = ""
    page_uri: str | None = None
    leave_name: bool = False  # keep %postname% / %pagename% in the output


def replace_tokens(pattern: str, values: Mapping[str, str]) -> str:
    """Replace every known token in one pass; unknown tokens stay as they are."""
    if "%" not in pattern:
        return pattern
    return TOKEN_RE.sub(lambda m: values.get(m.group(0), m.group(0)), pattern)


def post_token_values(post: Post, context: ResolutionContext) -> dict[str, str]:
    """Values for the post tokens, date parts in the site timezone."""
    local = post.published_at.astimezone(context.timezone)
    values = {
        "%year%": f"{local.year:04d}",
        "%monthnum%": f"{local.month:02d}",
        "%day%": f"{local.day:02d}",
        "%hour%": f"{local.hour:02d}",
        "%minute%": f"{local.minute:02d}",
        "%second%": f"{local.second:02d}",
        "%postname%": post.slug,
        "%post_id%": str(post.id),
        "%category%": context.category_path,
        "%author%": context.author_nicename,
        "%pagename%": context.page_uri if context.page_uri is not None else post.slug,
    }
    if context.leave_name:
        for token in NAME_TOKENS:
            values.pop(token)
    return values


def resolve_tokens(pattern: str, post: Post, context: ResolutionContext) -> str:
    """
    Substitute post tokens in pattern.

    Raises ValueError when the post has no identifier.
    """
    if post.id <= 0:
        raise ValueError("Cannot resolve a permalink for a post without an id")
    return replace_tokens(pattern, post_token_values(post, context))
