"""
Adjacency component - Previous/next and boundary post lookups.
"""

from ._impl import (
    AdjacencyService,
    adjacency_cache_key,
    create_adjacency_service,
    visibility_for,
)
from .component import run, run_adjacent, run_boundary
from .models import (
    AdjacencyConstraints,
    AdjacencyError,
    AdjacentPostInput,
    AdjacentPostOutput,
    BoundaryPostInput,
    Direction,
    parse_excluded_terms,
)
from .ports import AdjacencyCachePort, AdjacencyStorePort

__all__ = [
    # Entry points
    "run",
    "run_adjacent",
    "run_boundary",
    # Input models
    "AdjacencyConstraints",
    "AdjacentPostInput",
    "BoundaryPostInput",
    "Direction",
    # Output models
    "AdjacencyError",
    "AdjacentPostOutput",
    # Ports
    "AdjacencyCachePort",
    "AdjacencyStorePort",
    # _impl re-exports
    "AdjacencyService",
    "adjacency_cache_key",
    "create_adjacency_service",
    "parse_excluded_terms",
    "visibility_for",
]
