"""
Link resolution API.

Read-only endpoints that resolve permalinks, archive links, feed links and
pagination links. Unknown subjects answer 404; malformed input 400.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from permastruct.api.deps import get_clock, get_hooks, get_rules, get_store
from permastruct.components.hooks import HookRegistry
from permastruct.components.permalinks import (
    ArchiveKind,
    ArchiveLinkInput,
    AuthorArchive,
    DayArchive,
    FeedArchive,
    FeedLinkInput,
    LinkOutput,
    MonthArchive,
    PagenumLinkInput,
    PostLinkInput,
    PostTypeArchive,
    SearchArchive,
    TermArchive,
    YearArchive,
    create_permalink_service,
    run_archive_link,
    run_feed_link,
    run_pagenum_link,
    run_post_link,
)
from permastruct.ports.store import ClockPort, EntityStorePort
from permastruct.rules.models import Rules

router = APIRouter()


class LinkResponse(BaseModel):
    url: str


class Ports:
    """Bundle of the ports every link endpoint needs."""

    def __init__(
        self,
        store: EntityStorePort = Depends(get_store),
        hooks: HookRegistry = Depends(get_hooks),
        rules: Rules = Depends(get_rules),
        clock: ClockPort = Depends(get_clock),
    ) -> None:
        self.store = store
        self.hooks = hooks
        self.rules = rules
        self.clock = clock


def to_response(output: LinkOutput) -> LinkResponse:
    """Map a component output to a response, raising on errors."""
    if output.success and output.url is not None:
        return LinkResponse(url=output.url)

    error = output.errors[0] if output.errors else None
    if error is not None and error.code == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error.message if error else "Link could not be resolved",
    )


def _archive(kind: ArchiveKind, ports: Ports) -> LinkResponse:
    output = run_archive_link(
        ArchiveLinkInput(kind=kind),
        store=ports.store,
        hooks=ports.hooks,
        rules=ports.rules,
        time_port=ports.clock,
    )
    return to_response(output)


def _feed(inp: FeedLinkInput, ports: Ports) -> LinkResponse:
    output = run_feed_link(
        inp, store=ports.store, hooks=ports.hooks, rules=ports.rules, time_port=ports.clock
    )
    return to_response(output)


# --- Posts ---


@router.get("/posts/{post_id}", response_model=LinkResponse)
def post_link(
    post_id: int,
    leave_name: bool = False,
    sample: bool = False,
    ports: Ports = Depends(),
) -> LinkResponse:
    output = run_post_link(
        PostLinkInput(post_id=post_id, leave_name=leave_name, sample=sample),
        store=ports.store,
        hooks=ports.hooks,
        rules=ports.rules,
        time_port=ports.clock,
    )
    return to_response(output)


@router.get("/posts/{post_id}/comments-page/{pagenum}", response_model=LinkResponse)
def comments_page_link(
    post_id: int,
    pagenum: int,
    max_page: int = 0,
    ports: Ports = Depends(),
) -> LinkResponse:
    service = create_permalink_service(ports.store, ports.hooks, ports.rules, ports.clock)
    url = service.comments_pagenum_link(post_id, pagenum, max_page)
    if url is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return LinkResponse(url=url)


# --- Archives ---


@router.get("/archives/date/{year}", response_model=LinkResponse)
def year_link(year: int, ports: Ports = Depends()) -> LinkResponse:
    return _archive(YearArchive(year=year), ports)


@router.get("/archives/date/{year}/{month}", response_model=LinkResponse)
def month_link(year: int, month: int, ports: Ports = Depends()) -> LinkResponse:
    return _archive(MonthArchive(year=year, month=month), ports)


@router.get("/archives/date/{year}/{month}/{day}", response_model=LinkResponse)
def day_link(year: int, month: int, day: int, ports: Ports = Depends()) -> LinkResponse:
    return _archive(DayArchive(year=year, month=month, day=day), ports)


@router.get("/archives/search", response_model=LinkResponse)
def search_link(q: str = Query(..., min_length=1), ports: Ports = Depends()) -> LinkResponse:
    return _archive(SearchArchive(query=q), ports)


@router.get("/archives/feed", response_model=LinkResponse)
def feed_link(feed: str = "", ports: Ports = Depends()) -> LinkResponse:
    return _archive(FeedArchive(feed=feed), ports)


@router.get("/archives/terms/{taxonomy}/{term_id}", response_model=LinkResponse)
def term_link(taxonomy: str, term_id: int, ports: Ports = Depends()) -> LinkResponse:
    return _archive(TermArchive(term_id=term_id, taxonomy=taxonomy), ports)


@router.get("/archives/authors/{author_id}", response_model=LinkResponse)
def author_link(author_id: int, ports: Ports = Depends()) -> LinkResponse:
    return _archive(AuthorArchive(author_id=author_id), ports)


@router.get("/archives/types/{post_type}", response_model=LinkResponse)
def post_type_archive_link(post_type: str, ports: Ports = Depends()) -> LinkResponse:
    return _archive(PostTypeArchive(post_type=post_type), ports)


# --- Feeds ---


@router.get("/feeds/posts/{post_id}/comments", response_model=LinkResponse)
def post_comments_feed_link(post_id: int, feed: str = "", ports: Ports = Depends()) -> LinkResponse:
    return _feed(FeedLinkInput(source="post_comments", post_id=post_id, feed=feed), ports)


@router.get("/feeds/authors/{author_id}", response_model=LinkResponse)
def author_feed_link(author_id: int, feed: str = "", ports: Ports = Depends()) -> LinkResponse:
    return _feed(FeedLinkInput(source="author", author_id=author_id, feed=feed), ports)


@router.get("/feeds/terms/{taxonomy}/{term_id}", response_model=LinkResponse)
def term_feed_link(
    taxonomy: str, term_id: int, feed: str = "", ports: Ports = Depends()
) -> LinkResponse:
    return _feed(
        FeedLinkInput(source="term", term_id=term_id, taxonomy=taxonomy, feed=feed), ports
    )


@router.get("/feeds/search", response_model=LinkResponse)
def search_feed_link(
    q: str = "",
    feed: str = "",
    target: Literal["posts", "comments"] = "posts",
    ports: Ports = Depends(),
) -> LinkResponse:
    source = "search" if target == "posts" else "search_comments"
    return _feed(FeedLinkInput(source=source, search=q, feed=feed), ports)


@router.get("/feeds/types/{post_type}", response_model=LinkResponse)
def post_type_archive_feed_link(
    post_type: str, feed: str = "", ports: Ports = Depends()
) -> LinkResponse:
    return _feed(FeedLinkInput(source="post_type", post_type=post_type, feed=feed), ports)


# --- Pagination ---


@router.get("/pagination", response_model=LinkResponse)
def pagenum_link(
    path: str = "/",
    page: int = 1,
    ports: Ports = Depends(),
) -> LinkResponse:
    output = run_pagenum_link(
        PagenumLinkInput(request_path=path, pagenum=page),
        store=ports.store,
        hooks=ports.hooks,
        rules=ports.rules,
        time_port=ports.clock,
    )
    return to_response(output)
