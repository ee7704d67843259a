"""
Permalinks component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from permastruct.domain.entities import Post

# --- Validation Error ---


@dataclass(frozen=True)
class LinkError:
    """Link resolution error."""

    code: str
    message: str
    field: str | None = None


# --- Archive Kinds ---


@dataclass(frozen=True)
class YearArchive:
    """Year archive; None means the current year."""

    year: int | None = None


@dataclass(frozen=True)
class MonthArchive:
    year: int | None = None
    month: int | None = None


@dataclass(frozen=True)
class DayArchive:
    year: int | None = None
    month: int | None = None
    day: int | None = None


@dataclass(frozen=True)
class SearchArchive:
    query: str


@dataclass(frozen=True)
class FeedArchive:
    """Site feed; "" means the default feed, "comments_<type>" the comments feed."""

    feed: str = ""


@dataclass(frozen=True)
class TermArchive:
    term_id: int
    taxonomy: str = "category"


@dataclass(frozen=True)
class AuthorArchive:
    author_id: int


@dataclass(frozen=True)
class PostTypeArchive:
    post_type: str


ArchiveKind = (
    YearArchive
    | MonthArchive
    | DayArchive
    | SearchArchive
    | FeedArchive
    | TermArchive
    | AuthorArchive
    | PostTypeArchive
)


# --- Input Models ---


@dataclass(frozen=True)
class PostLinkInput:
    """Input for resolving a post permalink."""

    post_id: int | None = None
    post: Post | None = None
    leave_name: bool = False
    sample: bool = False


@dataclass(frozen=True)
class ArchiveLinkInput:
    """Input for resolving an archive link."""

    kind: ArchiveKind


@dataclass(frozen=True)
class FeedLinkInput:
    """
    Input for a derived feed link.

    source selects the owner of the feed: "post_comments", "author", "term",
    "search", "search_comments" or "post_type".
    """

    source: str
    feed: str = ""
    post_id: int | None = None
    author_id: int | None = None
    term_id: int | None = None
    taxonomy: str = "category"
    search: str = ""
    post_type: str | None = None


@dataclass(frozen=True)
class PagenumLinkInput:
    """Input for a paginated listing link."""

    request_path: str
    pagenum: int = 1


# --- Output Models ---


@dataclass(frozen=True)
class LinkOutput:
    """Output containing a resolved URL."""

    url: str | None
    errors: list[LinkError] = field(default_factory=list)
    success: bool = True
