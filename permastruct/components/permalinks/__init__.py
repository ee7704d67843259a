"""
Permalinks component - Canonical URLs for posts, archives and feeds.
"""

from ._assembler import (
    LinkAssembler,
    add_query_arg,
    join_url,
    normalize,
    remove_query_arg,
    trailingslashit,
    untrailingslashit,
)
from ._impl import PermalinkService, create_permalink_service
from ._structures import RewriteStructures
from ._tokens import ResolutionContext, replace_tokens, resolve_tokens
from .component import (
    run,
    run_archive_link,
    run_feed_link,
    run_pagenum_link,
    run_post_link,
)
from .models import (
    ArchiveKind,
    ArchiveLinkInput,
    AuthorArchive,
    DayArchive,
    FeedArchive,
    FeedLinkInput,
    LinkError,
    LinkOutput,
    MonthArchive,
    PagenumLinkInput,
    PostLinkInput,
    PostTypeArchive,
    SearchArchive,
    TermArchive,
    YearArchive,
)
from .ports import PermalinkStorePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_archive_link",
    "run_feed_link",
    "run_pagenum_link",
    "run_post_link",
    # Input models
    "ArchiveLinkInput",
    "FeedLinkInput",
    "PagenumLinkInput",
    "PostLinkInput",
    # Archive kinds
    "ArchiveKind",
    "AuthorArchive",
    "DayArchive",
    "FeedArchive",
    "MonthArchive",
    "PostTypeArchive",
    "SearchArchive",
    "TermArchive",
    "YearArchive",
    # Output models
    "LinkError",
    "LinkOutput",
    # Ports
    "PermalinkStorePort",
    "TimePort",
    # _impl re-exports
    "LinkAssembler",
    "PermalinkService",
    "ResolutionContext",
    "RewriteStructures",
    "add_query_arg",
    "create_permalink_service",
    "join_url",
    "normalize",
    "remove_query_arg",
    "replace_tokens",
    "resolve_tokens",
    "trailingslashit",
    "untrailingslashit",
]
