from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

SortOrder = Literal["asc", "desc"]

class EntityQuery(BaseModel):
    """
    Filter/order/limit handed to the entity store.

    A post matches when:
    - its post_type equals post_type
    - published_at is strictly inside (published_after, published_before)
    - taxonomy set: it has at least one term in that taxonomy, restricted
      to include_term_ids when those are given
    - it carries none of exclude_term_ids (any taxonomy)
    - its status is in statuses, or it belongs to owner_id and its status
      is in owner_statuses
    Results are ordered by published_at (then id ascending) and truncated to
    limit when limit is set.
    """

    post_type: str = "post"
    published_before: datetime | None = None
    published_after: datetime | None = None
    taxonomy: str | None = None
    include_term_ids: tuple[int, ...] = ()
    exclude_term_ids: tuple[int, ...] = ()
    statuses: tuple[str, ...] = ("publish",)
    owner_id: int | None = None
    owner_statuses: tuple[str, ...] = ()
    order: SortOrder = "asc"
    limit: int | None = 1

    model_config = ConfigDict(frozen=True)
