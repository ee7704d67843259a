"""
PermalinkService - Canonical URLs for posts, pages, archives and feeds.

Collapses the host's catalogue of link functions into a handful of
operations: post_link (dispatching on post type), archive_link (dispatching
on an archive-kind variant), the derived feed links and pagination links.

Key behaviors:
- Pretty links come from the rewrite structures; an empty site structure
  falls back to query-string links everywhere
- Drafts, pending and scheduled posts get ?p=<id> unless a sample link is
  requested
- Pages resolve %pagename% to the ancestor-joined slug path
- Unknown posts, terms, authors and post types give None, never an exception
- Every returned URL has passed through its named filter chain
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from urllib.parse import quote_plus, urlsplit
from zoneinfo import ZoneInfo

from permastruct.components.hooks import HooksPort
from permastruct.domain.entities import UNPUBLISHED_PAGE_STATUSES, Post, Term
from permastruct.rules.models import Rules

from ._assembler import (
    LinkAssembler,
    add_query_arg,
    remove_query_arg,
    trailingslashit,
)
from ._structures import RewriteStructures
from ._tokens import ResolutionContext, replace_tokens, resolve_tokens
from .models import (
    ArchiveKind,
    AuthorArchive,
    DayArchive,
    FeedArchive,
    MonthArchive,
    PostTypeArchive,
    SearchArchive,
    TermArchive,
    YearArchive,
)
from .ports import PermalinkStorePort, TimePort

logger = logging.getLogger(__name__)

# Term taxonomies with a dedicated archive pattern and query var.
_TERM_PATTERNS = {"category": "category", "post_tag": "post_tag"}


class PermalinkService:
    """
    Permalink service.

    Builds every public URL of the site from the rules file, the entity
    store and the injected hook registry.
    """

    def __init__(
        self,
        store: PermalinkStorePort,
        hooks: HooksPort,
        rules: Rules,
        structures: RewriteStructures | None = None,
        time_port: TimePort | None = None,
    ) -> None:
        """Initialize service."""
        self._store = store
        self._hooks = hooks
        self._rules = rules
        self._site = rules.site
        self._structures = structures or RewriteStructures.from_rules(rules)
        self._assembler = LinkAssembler(
            hooks,
            base_url=rules.site.base_url,
            use_trailing_slashes=rules.site.use_trailing_slashes,
        )
        self._tz = ZoneInfo(rules.site.timezone)
        self._time_port = time_port

    @property
    def structures(self) -> RewriteStructures:
        return self._structures

    @property
    def assembler(self) -> LinkAssembler:
        return self._assembler

    # --- Helpers ---

    def _now_local(self) -> datetime:
        """Current time in the site timezone, via the injected port when present."""
        now = self._time_port.now_utc() if self._time_port else datetime.now(UTC)
        return now.astimezone(self._tz)

    def _pattern(self, archive_type: str) -> str:
        if not self._structures.using_permalinks:
            return ""
        return self._structures.get(archive_type)

    def _resolve_post(self, post: Post | int | None) -> Post | None:
        if isinstance(post, Post):
            return post if post.id > 0 else None
        if not post:
            return None
        return self._store.get_post(int(post))

    def _default_feed(self, feed: str) -> str:
        return feed or self._site.default_feed

    def _is_front_page(self, post: Post) -> bool:
        return self._site.show_on_front == "page" and post.id == self._site.page_on_front

    def page_uri(self, post: Post) -> str:
        """Slug path of a hierarchical post, ancestors first."""
        slugs = [post.slug]
        seen = {post.id}
        parent_id = post.parent_id

        while parent_id and parent_id not in seen:
            seen.add(parent_id)
            parent = self._store.get_post(parent_id)
            if parent is None:
                break
            slugs.append(parent.slug)
            parent_id = parent.parent_id

        return "/".join(reversed(slugs))

    def term_path(self, term: Term) -> str:
        """Slug path of a hierarchical term, ancestors first."""
        slugs = [term.slug]
        seen = {term.id}
        parent_id = term.parent_id

        while parent_id and parent_id not in seen:
            seen.add(parent_id)
            parent = self._store.get_term(parent_id, term.taxonomy)
            if parent is None:
                break
            slugs.append(parent.slug)
            parent_id = parent.parent_id

        return "/".join(reversed(slugs))

    def _category_path(self, post: Post) -> str:
        terms = sorted(self._store.get_terms_for_post(post.id, "category"), key=lambda t: t.id)

        category = ""
        if terms:
            chosen = self._hooks.apply_filters("post_link_category", terms[0], terms, post)
            category = self.term_path(chosen)

        if not category:
            default = self._store.get_term(self._site.default_category_id, "category")
            category = default.slug if default else ""

        return category

    def _context_for(
        self,
        pattern: str,
        post: Post,
        leave_name: bool,
    ) -> ResolutionContext:
        category_path = ""
        if "%category%" in pattern:
            category_path = self._category_path(post)

        author_nicename = ""
        if "%author%" in pattern:
            author = self._store.get_author(post.author_id)
            author_nicename = author.nicename if author else ""

        return ResolutionContext(
            timezone=self._tz,
            category_path=category_path,
            author_nicename=author_nicename,
            leave_name=leave_name,
        )

    # --- Posts ---

    def post_link(
        self,
        post: Post | int | None,
        leave_name: bool = False,
        sample: bool = False,
    ) -> str | None:
        """
        Permalink for any post.

        Dispatches to page_link, attachment_link or post_type_link by type.
        Returns None if the post does not exist.
        """
        resolved = self._resolve_post(post)
        if resolved is None:
            return None

        if resolved.post_type == "page":
            return self.page_link(resolved, leave_name, sample)
        if resolved.post_type == "attachment":
            return self.attachment_link(resolved, leave_name)

        post_type = self._rules.post_type(resolved.post_type)
        if post_type is not None and not post_type.builtin:
            return self.post_type_link(resolved, leave_name, sample)

        structure = self._hooks.apply_filters(
            "pre_post_link", self._structures.structure, resolved, leave_name
        )

        if structure and (not resolved.is_unpublished or sample):
            context = self._context_for(structure, resolved, leave_name)
            path = resolve_tokens(structure, resolved, context)
            return self._assembler.assemble(
                None, path, "single", "post_link", resolved, leave_name
            )

        logger.debug("Query-string permalink for post %s (%s)", resolved.id, resolved.status)
        return self._assembler.finish(
            self._assembler.home_url(f"?p={resolved.id}"), "post_link", resolved, leave_name
        )

    def page_link(
        self,
        post: Post | int | None,
        leave_name: bool = False,
        sample: bool = False,
    ) -> str | None:
        """Permalink for a page; the static front page is the home URL."""
        resolved = self._resolve_post(post)
        if resolved is None:
            return None

        if self._is_front_page(resolved):
            link = self._assembler.home_url("/")
        else:
            link = self._page_link(resolved, leave_name, sample)

        return self._hooks.apply_filters("page_link", link, resolved.id, sample)

    def _page_link(self, post: Post, leave_name: bool, sample: bool) -> str:
        """Page permalink ignoring the static front page setting."""
        pattern = self._pattern("page")
        draft_or_pending = post.status in UNPUBLISHED_PAGE_STATUSES

        if pattern and (not draft_or_pending or sample):
            context = ResolutionContext(
                timezone=self._tz,
                page_uri=self.page_uri(post),
                leave_name=leave_name,
            )
            link = self._assembler.assemble(None, resolve_tokens(pattern, post, context), "page")
        else:
            link = self._assembler.home_url(f"?page_id={post.id}")

        return self._hooks.apply_filters("_get_page_link", link, post.id)

    def attachment_link(
        self,
        post: Post | int | None,
        leave_name: bool = False,
    ) -> str | None:
        """Permalink for an attachment, nested under its parent when possible."""
        resolved = self._resolve_post(post)
        if resolved is None:
            return None

        parent = None
        if resolved.parent_id > 0 and resolved.parent_id != resolved.id:
            parent = self._store.get_post(resolved.parent_id)

        link: str | None = None
        if self._structures.using_permalinks and parent is not None:
            if parent.post_type == "page":
                parent_link = self._page_link(parent, False, False)
            else:
                parent_link = self.post_link(parent)

            # <permalink>/<int>/ is a paged URL, so numeric names get a marker
            if resolved.slug.isdigit() or "%category%" in self._structures.structure:
                name = "attachment/" + resolved.slug
            else:
                name = resolved.slug

            if parent_link and "?" not in parent_link:
                link = self._assembler.user_trailingslashit(
                    trailingslashit(parent_link) + "%postname%"
                )
                if not leave_name:
                    link = link.replace("%postname%", name)

        if not link:
            link = self._assembler.home_url(f"/?attachment_id={resolved.id}")

        return self._hooks.apply_filters("attachment_link", link, resolved.id)

    def post_type_link(
        self,
        post: Post | int | None,
        leave_name: bool = False,
        sample: bool = False,
    ) -> str | None:
        """Permalink for a custom post type."""
        resolved = self._resolve_post(post)
        if resolved is None:
            return None

        post_type = self._rules.post_type(resolved.post_type)
        pattern = ""
        if self._structures.using_permalinks:
            pattern = self._structures.extra_structure(resolved.post_type)

        draft_or_pending = resolved.is_unpublished
        slug = resolved.slug
        if post_type is not None and post_type.hierarchical:
            slug = self.page_uri(resolved)

        if pattern and (not draft_or_pending or sample):
            if not leave_name:
                pattern = replace_tokens(pattern, {f"%{resolved.post_type}%": slug})
            link = self._assembler.assemble(None, pattern, "single")
        elif post_type is not None and post_type.query_var and not draft_or_pending:
            link = self._assembler.home_url(add_query_arg("", {post_type.query_var: slug}))
        else:
            link = self._assembler.home_url(
                add_query_arg("", {"post_type": resolved.post_type, "p": resolved.id})
            )

        return self._hooks.apply_filters(
            "post_type_link", link, resolved, leave_name, sample
        )

    # --- Archives ---

    def archive_link(self, kind: ArchiveKind) -> str | None:
        """
        Link for an archive listing.

        Returns None when the archive's subject (term, author, post type)
        does not exist.
        """
        if isinstance(kind, YearArchive):
            return self._year_link(kind)
        elif isinstance(kind, MonthArchive):
            return self._month_link(kind)
        elif isinstance(kind, DayArchive):
            return self._day_link(kind)
        elif isinstance(kind, SearchArchive):
            return self.search_link(kind.query)
        elif isinstance(kind, FeedArchive):
            return self.feed_link(kind.feed)
        elif isinstance(kind, TermArchive):
            return self.term_link(kind.term_id, kind.taxonomy)
        elif isinstance(kind, AuthorArchive):
            return self.author_link(kind.author_id)
        elif isinstance(kind, PostTypeArchive):
            return self.post_type_archive_link(kind.post_type)
        else:
            raise ValueError(f"Unknown archive kind: {type(kind)}")

    def _year_link(self, kind: YearArchive) -> str:
        year = kind.year or self._now_local().year
        pattern = self._pattern("year")

        if pattern:
            path = replace_tokens(pattern, {"%year%": str(year)})
            return self._assembler.assemble(None, path, "year", "year_link", year)

        return self._assembler.finish(
            self._assembler.home_url(f"?m={year}"), "year_link", year
        )

    def _month_link(self, kind: MonthArchive) -> str:
        now = self._now_local()
        year = kind.year or now.year
        month = kind.month or now.month
        pattern = self._pattern("month")

        if pattern:
            path = replace_tokens(pattern, {"%year%": str(year), "%monthnum%": f"{month:02d}"})
            return self._assembler.assemble(None, path, "month", "month_link", year, month)

        return self._assembler.finish(
            self._assembler.home_url(f"?m={year}{month:02d}"), "month_link", year, month
        )

    def _day_link(self, kind: DayArchive) -> str:
        now = self._now_local()
        year = kind.year or now.year
        month = kind.month or now.month
        day = kind.day or now.day
        pattern = self._pattern("day")

        if pattern:
            path = replace_tokens(
                pattern,
                {"%year%": str(year), "%monthnum%": f"{month:02d}", "%day%": f"{day:02d}"},
            )
            return self._assembler.assemble(None, path, "day", "day_link", year, month, day)

        return self._assembler.finish(
            self._assembler.home_url(f"?m={year}{month:02d}{day:02d}"),
            "day_link",
            year,
            month,
            day,
        )

    def search_link(self, query: str) -> str:
        """Link for a search results page."""
        pattern = self._pattern("search")

        if not pattern:
            link = self._assembler.home_url("?s=" + quote_plus(query))
            return self._assembler.finish(link, "search_link", query)

        # An encoded slash is not valid within a path segment; send it raw.
        search = quote_plus(query).replace("%2F", "/")
        path = replace_tokens(pattern, {"%search%": search})
        return self._assembler.assemble(None, path, "search", "search_link", search)

    def feed_link(self, feed: str = "") -> str:
        """Link for a site feed ("comments_<type>" selects the comments feed)."""
        pattern = self._pattern("feed")

        if pattern:
            if "comments_" in feed:
                feed = feed.replace("comments_", "")
                pattern = self._pattern("comment_feed")

            if feed == self._site.default_feed:
                feed = ""

            path = re.sub(r"/+", "/", "/" + replace_tokens(pattern, {"%feed%": feed}))
            return self._assembler.assemble(None, path, "feed", "feed_link", feed)

        feed = self._default_feed(feed)
        if "comments_" in feed:
            feed = feed.replace("comments_", "comments-")

        return self._assembler.finish(
            self._assembler.home_url(f"?feed={feed}"), "feed_link", feed
        )

    def term_link(self, term_id: int, taxonomy: str = "category") -> str | None:
        """Link for a term archive."""
        taxonomy_rules = self._rules.taxonomy(taxonomy)
        if taxonomy_rules is None:
            return None

        term = self._store.get_term(term_id, taxonomy)
        if term is None:
            return None

        if taxonomy in _TERM_PATTERNS:
            pattern = self._pattern(_TERM_PATTERNS[taxonomy])
        elif self._structures.using_permalinks:
            pattern = self._structures.extra_structure(taxonomy)
        else:
            pattern = ""

        if not pattern:
            if taxonomy == "category":
                query = {"cat": term.id}
            elif taxonomy_rules.query_var:
                query = {taxonomy_rules.query_var: term.slug}
            else:
                query = {"taxonomy": taxonomy, "term": term.slug}
            link = self._assembler.home_url(add_query_arg("", query))
        else:
            slug = self.term_path(term) if taxonomy_rules.hierarchical else term.slug
            token = "%category%" if taxonomy == "category" else f"%{taxonomy}%"
            path = replace_tokens(pattern, {token: slug})
            link = self._assembler.assemble(None, path, "category")

        if taxonomy == "category":
            link = self._hooks.apply_filters("category_link", link, term.id)
        elif taxonomy == "post_tag":
            link = self._hooks.apply_filters("tag_link", link, term.id)

        return self._hooks.apply_filters("term_link", link, term, taxonomy)

    def author_link(self, author_id: int) -> str | None:
        """Link for an author's post archive."""
        author = self._store.get_author(author_id)
        if author is None:
            return None

        pattern = self._pattern("author")
        if pattern:
            path = replace_tokens(pattern, {"%author%": author.nicename})
            return self._assembler.assemble(
                None, path, "author", "author_link", author.id, author.nicename
            )

        return self._assembler.finish(
            self._assembler.home_url(f"?author={author.id}"),
            "author_link",
            author.id,
            author.nicename,
        )

    def post_type_archive_link(self, post_type: str) -> str | None:
        """Link for a post type archive; None if the type has no archive."""
        type_rules = self._rules.post_type(post_type)
        if type_rules is None or not type_rules.has_archive:
            return None

        if self._structures.using_permalinks and type_rules.rewrite is not None:
            if type_rules.has_archive is True:
                struct = type_rules.rewrite.slug
            else:
                struct = str(type_rules.has_archive)

            prefix = self._structures.front if type_rules.rewrite.with_front else self._structures.root
            return self._assembler.assemble(
                None,
                prefix + struct,
                "post_type_archive",
                "post_type_archive_link",
                post_type,
            )

        return self._assembler.finish(
            self._assembler.home_url(f"?post_type={post_type}"),
            "post_type_archive_link",
            post_type,
        )

    # --- Feeds ---

    def _feed_suffix(self, feed: str) -> str:
        if feed == self._site.default_feed:
            return "feed"
        return f"feed/{feed}"

    def post_comments_feed_link(self, post: Post | int | None, feed: str = "") -> str | None:
        """Comments feed for one post."""
        resolved = self._resolve_post(post)
        if resolved is None:
            return None

        feed = self._default_feed(feed)

        if self._structures.using_permalinks:
            if self._is_front_page(resolved):
                url = self._page_link(resolved, False, False)
            else:
                url = self.post_link(resolved) or ""

            url = trailingslashit(url) + "feed"
            if feed != self._site.default_feed:
                url += f"/{feed}"
            url = self._assembler.user_trailingslashit(url, "single_feed")
        else:
            key = "page_id" if resolved.post_type == "page" else "p"
            url = add_query_arg(self._assembler.home_url("/"), {"feed": feed, key: resolved.id})

        return self._hooks.apply_filters("post_comments_feed_link", url)

    def author_feed_link(self, author_id: int, feed: str = "") -> str | None:
        """Feed of all posts by one author."""
        feed = self._default_feed(feed)

        if not self._structures.using_permalinks:
            link = self._assembler.home_url(
                add_query_arg("", {"feed": feed, "author": int(author_id)})
            )
        else:
            author_url = self.author_link(author_id)
            if author_url is None:
                return None
            link = trailingslashit(author_url) + self._assembler.user_trailingslashit(
                self._feed_suffix(feed), "feed"
            )

        return self._hooks.apply_filters("author_feed_link", link, feed)

    def term_feed_link(
        self,
        term_id: int,
        taxonomy: str = "category",
        feed: str = "",
    ) -> str | None:
        """Feed of all posts in one term."""
        term = self._store.get_term(term_id, taxonomy)
        taxonomy_rules = self._rules.taxonomy(taxonomy)
        if term is None or taxonomy_rules is None:
            return None

        feed = self._default_feed(feed)

        if not self._structures.using_permalinks:
            if taxonomy == "category":
                query = {"feed": feed, "cat": term.id}
            elif taxonomy == "post_tag":
                query = {"feed": feed, "tag": term.slug}
            else:
                query = {"feed": feed, taxonomy_rules.query_var or taxonomy: term.slug}
            link = self._assembler.home_url(add_query_arg("", query))
        else:
            term_url = self.term_link(term_id, taxonomy)
            if term_url is None:
                return None
            link = trailingslashit(term_url) + self._assembler.user_trailingslashit(
                self._feed_suffix(feed), "feed"
            )

        if taxonomy == "category":
            return self._hooks.apply_filters("category_feed_link", link, feed)
        if taxonomy == "post_tag":
            return self._hooks.apply_filters("tag_feed_link", link, feed)
        return self._hooks.apply_filters("taxonomy_feed_link", link, feed, taxonomy)

    def search_feed_link(self, query: str = "", feed: str = "") -> str:
        """Feed of search results."""
        link = self.search_link(query)
        feed = self._default_feed(feed)

        if not self._pattern("search"):
            link = add_query_arg(link, {"feed": feed})
        else:
            link = trailingslashit(link) + f"feed/{feed}/"

        return self._hooks.apply_filters("search_feed_link", link, feed, "posts")

    def search_comments_feed_link(self, query: str = "", feed: str = "") -> str:
        """Comments feed of search results."""
        feed = self._default_feed(feed)
        link = self.search_feed_link(query, feed)

        if not self._pattern("search"):
            link = add_query_arg(link, {"feed": "comments-" + feed})
        else:
            link = add_query_arg(link, {"withcomments": 1})

        return self._hooks.apply_filters("search_feed_link", link, feed, "comments")

    def post_type_archive_feed_link(self, post_type: str, feed: str = "") -> str | None:
        """Feed of a post type archive."""
        feed = self._default_feed(feed)

        link = self.post_type_archive_link(post_type)
        if link is None:
            return None

        type_rules = self._rules.post_type(post_type)
        rewrite = type_rules.rewrite if type_rules else None
        if self._structures.using_permalinks and rewrite is not None and rewrite.feeds:
            link = trailingslashit(link) + "feed/"
            if feed != self._site.default_feed:
                link += f"{feed}/"
        else:
            link = add_query_arg(link, {"feed": feed})

        return self._hooks.apply_filters("post_type_archive_feed_link", link, feed)

    # --- Pagination ---

    def pagenum_link(self, request_path: str, pagenum: int = 1) -> str:
        """
        Link to page `pagenum` of the listing at request_path.

        request_path is the current request URI (path plus query string).
        """
        pagenum = int(pagenum)
        request = remove_query_arg(request_path, "paged")

        home_root = urlsplit(self._site.base_url).path.rstrip("/")
        if home_root:
            request = re.sub("^" + re.escape(home_root), "", request, flags=re.IGNORECASE)
        request = request.lstrip("/")

        base = trailingslashit(self._site.base_url)

        if not self._structures.using_permalinks:
            if pagenum > 1:
                result = add_query_arg(base + request, {"paged": pagenum})
            else:
                result = base + request
        else:
            request, sep, query = request.partition("?")
            query_string = sep + query

            pagination_base = self._rules.permalinks.pagination_base
            index = self._rules.permalinks.index
            request = re.sub(re.escape(pagination_base) + r"/\d+/?$", "", request)
            request = re.sub("^" + re.escape(index), "", request, flags=re.IGNORECASE)
            request = request.lstrip("/")

            if self._structures.using_index_permalinks and (pagenum > 1 or request):
                base += index + "/"

            if pagenum > 1:
                if request:
                    request = trailingslashit(request)
                request += self._assembler.user_trailingslashit(
                    f"{pagination_base}/{pagenum}", "paged"
                )

            result = base + request + query_string

        return self._hooks.apply_filters("get_pagenum_link", result)

    def next_posts_page_link(
        self,
        request_path: str,
        paged: int = 1,
        max_page: int = 0,
    ) -> str | None:
        """Link to the next listing page, or None past max_page."""
        next_page = (paged or 1) + 1
        if not max_page or max_page >= next_page:
            return self.pagenum_link(request_path, next_page)
        return None

    def previous_posts_page_link(self, request_path: str, paged: int = 1) -> str:
        """Link to the previous listing page (never below page 1)."""
        return self.pagenum_link(request_path, max((paged or 1) - 1, 1))

    def comments_pagenum_link(
        self,
        post: Post | int | None,
        pagenum: int = 1,
        max_page: int = 0,
        default_page: str | None = None,
    ) -> str | None:
        """
        Link to one page of a post's comments, anchored at #comments.

        default_page ("newest" or "oldest") overrides the site setting.
        """
        result = self.post_link(post)
        if result is None:
            return None

        pagenum = int(pagenum)
        if (default_page or self._site.default_comments_page) == "newest":
            paged = pagenum != max_page
        else:
            paged = pagenum > 1

        if paged:
            if self._structures.using_permalinks:
                base = self._rules.permalinks.comments_pagination_base
                result = self._assembler.user_trailingslashit(
                    trailingslashit(result) + f"{base}-{pagenum}", "commentpaged"
                )
            else:
                result = add_query_arg(result, {"cpage": pagenum})

        result += "#comments"
        return self._hooks.apply_filters("get_comments_pagenum_link", result)


# --- Factory ---


def create_permalink_service(
    store: PermalinkStorePort,
    hooks: HooksPort,
    rules: Rules,
    time_port: TimePort | None = None,
) -> PermalinkService:
    """Create a PermalinkService."""
    return PermalinkService(
        store=store,
        hooks=hooks,
        rules=rules,
        time_port=time_port,
    )
