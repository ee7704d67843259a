from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums / Literals ---
PostStatus = Literal[
    "publish", "draft", "pending", "auto-draft", "future", "private", "trash", "inherit"
]

# Statuses that never get a pretty permalink unless a sample link is asked for.
UNPUBLISHED_STATUSES: frozenset[str] = frozenset({"draft", "pending", "auto-draft", "future"})
# Pages only fall back for these (scheduled pages keep their path).
UNPUBLISHED_PAGE_STATUSES: frozenset[str] = frozenset({"draft", "pending", "auto-draft"})
PRIVATE_STATUSES: tuple[str, ...] = ("private",)

# --- Content ---

class Post(BaseModel):
    id: int
    slug: str = ""
    post_type: str = "post"
    status: PostStatus = "publish"
    published_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    author_id: int = 0
    parent_id: int = 0
    title: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("published_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from the store are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_unpublished(self) -> bool:
        return self.status in UNPUBLISHED_STATUSES

class Term(BaseModel):
    id: int
    slug: str
    taxonomy: str = "category"
    name: str = ""
    parent_id: int = 0

    model_config = ConfigDict(frozen=True)

# --- Users ---

class Author(BaseModel):
    id: int
    nicename: str
    display_name: str = ""

    model_config = ConfigDict(frozen=True)

class Viewer(BaseModel):
    """Authenticated visitor; anonymous requests pass None instead."""

    user_id: int
    can_read_private: bool = False

    model_config = ConfigDict(frozen=True)
