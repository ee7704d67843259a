"""
Adjacency component - Previous/next and boundary post lookups.

Entry points wrap AdjacencyService results in AdjacentPostOutput, with the
adjacent post's permalink alongside the post itself.
"""

from __future__ import annotations

from permastruct.components.hooks import HooksPort
from permastruct.rules.models import Rules

from ._impl import AdjacencyService
from .models import (
    DIRECTIONS,
    AdjacencyError,
    AdjacentPostInput,
    AdjacentPostOutput,
    BoundaryPostInput,
)
from .ports import AdjacencyCachePort, AdjacencyStorePort


def _not_found(post_id: int) -> AdjacentPostOutput:
    return AdjacentPostOutput(
        post=None,
        errors=[
            AdjacencyError(
                code="not_found",
                message=f"Post {post_id} not found",
                field="post_id",
            )
        ],
        success=False,
    )


# --- Component Entry Points ---


def run_adjacent(
    inp: AdjacentPostInput,
    *,
    store: AdjacencyStorePort,
    cache: AdjacencyCachePort,
    hooks: HooksPort,
    rules: Rules,
) -> AdjacentPostOutput:
    """
    Find the previous or next post.

    A missing neighbour is a successful lookup with post None; a missing
    current post is a not_found error.

    Args:
        inp: Input with the current post id, direction and constraints.
        store: Entity store port.
        cache: Adjacency cache port.
        hooks: Filter registry.
        rules: Site rules.

    Returns:
        AdjacentPostOutput with the post and its URL.
    """
    if inp.direction not in DIRECTIONS:
        return AdjacentPostOutput(
            post=None,
            errors=[
                AdjacencyError(
                    code="invalid_input",
                    message="direction must be 'previous' or 'next'",
                    field="direction",
                )
            ],
            success=False,
        )

    current = store.get_post(inp.post_id)
    if current is None:
        return _not_found(inp.post_id)

    service = AdjacencyService(store=store, cache=cache, hooks=hooks, rules=rules)
    adjacent = service.find_adjacent(current, inp.direction, inp.constraints, inp.viewer)

    return AdjacentPostOutput(
        post=adjacent,
        url=service.permalinks.post_link(adjacent) if adjacent else None,
        errors=[],
        success=True,
    )


def run_boundary(
    inp: BoundaryPostInput,
    *,
    store: AdjacencyStorePort,
    cache: AdjacencyCachePort,
    hooks: HooksPort,
    rules: Rules,
) -> AdjacentPostOutput:
    """
    Find the first or last post of the current post's type.

    Args:
        inp: Input with the current post id and which end to find.
        store: Entity store port.
        cache: Adjacency cache port.
        hooks: Filter registry.
        rules: Site rules.

    Returns:
        AdjacentPostOutput with the post and its URL.
    """
    current = store.get_post(inp.post_id)
    if current is None:
        return _not_found(inp.post_id)

    service = AdjacencyService(store=store, cache=cache, hooks=hooks, rules=rules)
    boundary = service.find_boundary(current, inp.start, inp.constraints)

    return AdjacentPostOutput(
        post=boundary,
        url=service.permalinks.post_link(boundary) if boundary else None,
        errors=[],
        success=True,
    )


def run(
    inp: AdjacentPostInput | BoundaryPostInput,
    *,
    store: AdjacencyStorePort,
    cache: AdjacencyCachePort,
    hooks: HooksPort,
    rules: Rules,
) -> AdjacentPostOutput:
    """
    Main entry point for the adjacency component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, AdjacentPostInput):
        return run_adjacent(inp, store=store, cache=cache, hooks=hooks, rules=rules)
    elif isinstance(inp, BoundaryPostInput):
        return run_boundary(inp, store=store, cache=cache, hooks=hooks, rules=rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
