"""
core — records, geometric predicates and invariant verification.

Public API:
    from binpack3d.core.models import BoxSize, PlacedBox, FreeRegion, SupportedRegion
    from binpack3d.core.geometry import disjoint, is_contained_in, is_contained_in_free
    from binpack3d.core.validator import DisjointCollection, InvariantViolation
"""

from binpack3d.core.models import (
    INSUFFICIENT_SPACE,
    BoxSize,
    FreeRegion,
    PlacedBox,
    SupportedRegion,
)
from binpack3d.core.geometry import (
    disjoint,
    intersects,
    is_contained_in,
    is_contained_in_free,
    overlaps_xy,
    within_bounds,
)
from binpack3d.core.validator import (
    DegenerateRegionError,
    DisjointCollection,
    InvariantViolation,
    OutOfBoundsError,
    OverlapError,
    SupportSpanError,
)

__all__ = [
    "INSUFFICIENT_SPACE", "BoxSize", "FreeRegion", "PlacedBox", "SupportedRegion",
    "disjoint", "intersects", "is_contained_in", "is_contained_in_free",
    "overlaps_xy", "within_bounds",
    "DisjointCollection", "InvariantViolation", "OutOfBoundsError",
    "OverlapError", "DegenerateRegionError", "SupportSpanError",
]
