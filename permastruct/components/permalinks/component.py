"""
Permalinks component - Canonical URLs for posts, archives and feeds.

Wraps PermalinkService in the component input/output contract: every
entry point returns a LinkOutput, with "not_found", "invalid_input" or
"unknown_archive_kind" errors instead of a bare None.
"""

from __future__ import annotations

from permastruct.components.hooks import HooksPort
from permastruct.rules.models import Rules

from ._impl import PermalinkService
from .models import (
    ArchiveLinkInput,
    FeedLinkInput,
    LinkError,
    LinkOutput,
    PagenumLinkInput,
    PostLinkInput,
)
from .ports import PermalinkStorePort, TimePort

FEED_SOURCES = (
    "post_comments",
    "author",
    "term",
    "search",
    "search_comments",
    "post_type",
)


def _failure(code: str, message: str, field: str | None = None) -> LinkOutput:
    return LinkOutput(
        url=None,
        errors=[LinkError(code=code, message=message, field=field)],
        success=False,
    )


def _result(url: str | None, message: str) -> LinkOutput:
    if url is None:
        return _failure("not_found", message)
    return LinkOutput(url=url, errors=[], success=True)


def _create_service(
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None,
) -> PermalinkService:
    return PermalinkService(store=store, hooks=hooks, rules=rules, time_port=time_port)


# --- Component Entry Points ---


def run_post_link(
    inp: PostLinkInput,
    *,
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> LinkOutput:
    """
    Resolve the permalink of a post, page, attachment or custom post.

    Args:
        inp: Input carrying either a post_id or a Post.
        store: Entity store port.
        hooks: Filter registry.
        rules: Site rules.
        time_port: Optional clock.

    Returns:
        LinkOutput with the URL or errors.
    """
    if inp.post is None and not inp.post_id:
        return _failure("invalid_input", "Either post_id or post must be provided", "post_id")

    service = _create_service(store, hooks, rules, time_port)
    url = service.post_link(
        inp.post if inp.post is not None else inp.post_id,
        leave_name=inp.leave_name,
        sample=inp.sample,
    )
    return _result(url, f"Post {inp.post_id or getattr(inp.post, 'id', None)} not found")


def run_archive_link(
    inp: ArchiveLinkInput,
    *,
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> LinkOutput:
    """
    Resolve an archive link (date, search, feed, term, author, post type).

    Args:
        inp: Input carrying the archive kind.
        store: Entity store port.
        hooks: Filter registry.
        rules: Site rules.
        time_port: Optional clock for date archives without explicit parts.

    Returns:
        LinkOutput with the URL or errors.
    """
    service = _create_service(store, hooks, rules, time_port)

    try:
        url = service.archive_link(inp.kind)
    except ValueError as e:
        return _failure("unknown_archive_kind", str(e), "kind")

    return _result(url, f"No archive for {inp.kind!r}")


def run_feed_link(
    inp: FeedLinkInput,
    *,
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> LinkOutput:
    """
    Resolve a feed link derived from another link.

    Args:
        inp: Input naming the feed source and its subject.
        store: Entity store port.
        hooks: Filter registry.
        rules: Site rules.
        time_port: Optional clock.

    Returns:
        LinkOutput with the URL or errors.
    """
    service = _create_service(store, hooks, rules, time_port)

    if inp.source == "post_comments":
        if not inp.post_id:
            return _failure("invalid_input", "post_id is required", "post_id")
        url = service.post_comments_feed_link(inp.post_id, inp.feed)
    elif inp.source == "author":
        if not inp.author_id:
            return _failure("invalid_input", "author_id is required", "author_id")
        url = service.author_feed_link(inp.author_id, inp.feed)
    elif inp.source == "term":
        if not inp.term_id:
            return _failure("invalid_input", "term_id is required", "term_id")
        url = service.term_feed_link(inp.term_id, inp.taxonomy, inp.feed)
    elif inp.source == "search":
        url = service.search_feed_link(inp.search, inp.feed)
    elif inp.source == "search_comments":
        url = service.search_comments_feed_link(inp.search, inp.feed)
    elif inp.source == "post_type":
        if not inp.post_type:
            return _failure("invalid_input", "post_type is required", "post_type")
        url = service.post_type_archive_feed_link(inp.post_type, inp.feed)
    else:
        return _failure(
            "invalid_input",
            f"source must be one of: {', '.join(FEED_SOURCES)}",
            "source",
        )

    return _result(url, f"No {inp.source} feed for the given subject")


def run_pagenum_link(
    inp: PagenumLinkInput,
    *,
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> LinkOutput:
    """
    Resolve the link to one page of a paginated listing.

    Args:
        inp: Input with the current request path and page number.
        store: Entity store port.
        hooks: Filter registry.
        rules: Site rules.
        time_port: Optional clock.

    Returns:
        LinkOutput with the URL or errors.
    """
    if inp.pagenum < 1:
        return _failure("invalid_input", "pagenum must be at least 1", "pagenum")

    service = _create_service(store, hooks, rules, time_port)
    return _result(service.pagenum_link(inp.request_path, inp.pagenum), "")


def run(
    inp: PostLinkInput | ArchiveLinkInput | FeedLinkInput | PagenumLinkInput,
    *,
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> LinkOutput:
    """
    Main entry point for the permalinks component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, PostLinkInput):
        return run_post_link(inp, store=store, hooks=hooks, rules=rules, time_port=time_port)
    elif isinstance(inp, ArchiveLinkInput):
        return run_archive_link(inp, store=store, hooks=hooks, rules=rules, time_port=time_port)
    elif isinstance(inp, FeedLinkInput):
        return run_feed_link(inp, store=store, hooks=hooks, rules=rules, time_port=time_port)
    elif isinstance(inp, PagenumLinkInput):
        return run_pagenum_link(inp, store=store, hooks=hooks, rules=rules, time_port=time_port)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
