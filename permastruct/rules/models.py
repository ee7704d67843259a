from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SiteRules(BaseModel):
    base_url: str = "https://example.com"
    timezone: str = "UTC"
    use_trailing_slashes: bool = True
    default_category_id: int = 1
    default_feed: str = "rss2"
    show_on_front: Literal["posts", "page"] = "posts"
    page_on_front: int | None = None
    date_format: str = "%B %d, %Y"
    default_comments_page: Literal["newest", "oldest"] = "newest"

class PermalinkRules(BaseModel):
    structure: str = ""
    category_base: str = "category"
    tag_base: str = "tag"
    author_base: str = "author"
    search_base: str = "search"
    comments_base: str = "comments"
    pagination_base: str = "page"
    comments_pagination_base: str = "comment-page"
    feed_base: str = "feed"
    index: str = "index.php"
    overrides: dict[str, str] = Field(default_factory=dict)

class PostTypeRewrite(BaseModel):
    slug: str
    with_front: bool = True
    feeds: bool = False

class PostTypeRules(BaseModel):
    name: str
    hierarchical: bool = False
    query_var: str | None = None
    has_archive: bool | str = False
    rewrite: PostTypeRewrite | None = None
    builtin: bool = False

class TaxonomyRules(BaseModel):
    name: str
    query_var: str | None = None
    rewrite_slug: str | None = None
    hierarchical: bool = False
    object_types: list[str] = Field(default_factory=lambda: ["post"])

class CacheRules(BaseModel):
    adjacency_bucket: str = "counts"

def _default_post_types() -> list[PostTypeRules]:
    return [
        PostTypeRules(name="post", builtin=True),
        PostTypeRules(name="page", hierarchical=True, builtin=True),
        PostTypeRules(name="attachment", builtin=True),
    ]

def _default_taxonomies() -> list[TaxonomyRules]:
    return [
        TaxonomyRules(name="category", query_var="cat", hierarchical=True),
        TaxonomyRules(name="post_tag", query_var="tag"),
    ]

class Rules(BaseModel):
    site: SiteRules = Field(default_factory=SiteRules)
    permalinks: PermalinkRules = Field(default_factory=PermalinkRules)
    post_types: list[PostTypeRules] = Field(default_factory=_default_post_types)
    taxonomies: list[TaxonomyRules] = Field(default_factory=_default_taxonomies)
    cache: CacheRules = Field(default_factory=CacheRules)

    model_config = ConfigDict(frozen=True)

    @field_validator("post_types")
    @classmethod
    def _ensure_builtin_types(cls, value: list[PostTypeRules]) -> list[PostTypeRules]:
        names = {pt.name for pt in value}
        missing = [pt for pt in _default_post_types() if pt.name not in names]
        return missing + value

    def post_type(self, name: str) -> PostTypeRules | None:
        return next((pt for pt in self.post_types if pt.name == name), None)

    def taxonomy(self, name: str) -> TaxonomyRules | None:
        return next((tx for tx in self.taxonomies if tx.name == name), None)
