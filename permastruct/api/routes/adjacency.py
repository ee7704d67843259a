"""
Adjacent post API.

Previous/next and first/last post lookups for anonymous visitors.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from permastruct.api.deps import get_cache, get_hooks, get_rules, get_store
from permastruct.components.adjacency import (
    AdjacencyConstraints,
    AdjacentPostInput,
    AdjacentPostOutput,
    BoundaryPostInput,
    run_adjacent,
    run_boundary,
)
from permastruct.components.hooks import HookRegistry
from permastruct.ports.store import CachePort, EntityStorePort
from permastruct.rules.models import Rules

router = APIRouter()


class AdjacentPostResponse(BaseModel):
    """Neighbouring post; id and url are null when there is none."""

    id: int | None
    title: str | None
    url: str | None


def to_response(output: AdjacentPostOutput) -> AdjacentPostResponse:
    if not output.success:
        error = output.errors[0]
        code = (
            status.HTTP_404_NOT_FOUND if error.code == "not_found" else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=error.message)

    post = output.post
    return AdjacentPostResponse(
        id=post.id if post else None,
        title=post.title if post else None,
        url=output.url,
    )


@router.get("/posts/{post_id}/{direction}", response_model=AdjacentPostResponse)
def adjacent_post(
    post_id: int,
    direction: Literal["previous", "next"],
    in_same_term: bool = False,
    excluded_terms: str = "",
    taxonomy: str = "category",
    store: EntityStorePort = Depends(get_store),
    cache: CachePort = Depends(get_cache),
    hooks: HookRegistry = Depends(get_hooks),
    rules: Rules = Depends(get_rules),
) -> AdjacentPostResponse:
    constraints = AdjacencyConstraints(
        in_same_term=in_same_term,
        excluded_term_ids=excluded_terms,
        taxonomy=taxonomy,
    )
    output = run_adjacent(
        AdjacentPostInput(post_id=post_id, direction=direction, constraints=constraints),
        store=store,
        cache=cache,
        hooks=hooks,
        rules=rules,
    )
    return to_response(output)


@router.get("/posts/{post_id}/boundary/{end}", response_model=AdjacentPostResponse)
def boundary_post(
    post_id: int,
    end: Literal["first", "last"],
    in_same_term: bool = False,
    excluded_terms: str = "",
    taxonomy: str = "category",
    store: EntityStorePort = Depends(get_store),
    cache: CachePort = Depends(get_cache),
    hooks: HookRegistry = Depends(get_hooks),
    rules: Rules = Depends(get_rules),
) -> AdjacentPostResponse:
    constraints = AdjacencyConstraints(
        in_same_term=in_same_term,
        excluded_term_ids=excluded_terms,
        taxonomy=taxonomy,
    )
    output = run_boundary(
        BoundaryPostInput(post_id=post_id, start=end == "first", constraints=constraints),
        store=store,
        cache=cache,
        hooks=hooks,
        rules=rules,
    )
    return to_response(output)
