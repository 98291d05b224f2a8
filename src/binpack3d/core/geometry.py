"""
Geometric predicates shared by the packers.

Every function here is pure and duck-typed: it accepts any record with
``x, y, z, width, height, depth`` attributes (PlacedBox, FreeRegion,
SupportedRegion).  Touching faces never count as an overlap.
"""


def disjoint(a, b) -> bool:
    """Separating-axis test: True if the two boxes share no volume."""
    return (
        a.x + a.width <= b.x or b.x + b.width <= a.x
        or a.y + a.height <= b.y or b.y + b.height <= a.y
        or a.z + a.depth <= b.z or b.z + b.depth <= a.z
    )


def intersects(a, b) -> bool:
    """True if the two boxes share a non-zero volume."""
    return not disjoint(a, b)


def overlaps_xy(a, b) -> bool:
    """True if the x/y projections of the two boxes overlap strictly."""
    return (
        a.x < b.x + b.width and b.x < a.x + a.width
        and a.y < b.y + b.height and b.y < a.y + a.height
    )


def is_contained_in(a, b) -> bool:
    """True if ``a`` lies entirely inside ``b`` on all three axes."""
    return (
        a.x >= b.x and a.y >= b.y and a.z >= b.z
        and a.x + a.width <= b.x + b.width
        and a.y + a.height <= b.y + b.height
        and a.z + a.depth <= b.z + b.depth
    )


def is_contained_in_free(a, b) -> bool:
    """
    Containment test used when pruning MaxRects free regions.

    The x/y test is ordinary containment.  Along z the test is one-sided:
    ``a`` must start at or above ``b``'s floor and reach at least as high
    as ``b``'s top.  Free regions grow upward from distinct floors, so a
    region sitting on a higher floor over the same footprint is the one
    that gets dropped.
    """
    return (
        a.x >= b.x and a.y >= b.y
        and a.x + a.width <= b.x + b.width
        and a.y + a.height <= b.y + b.height
        and a.z >= b.z and a.z + a.depth >= b.z + b.depth
    )


def within_bounds(box, width: float, height: float, depth: float) -> bool:
    """True if ``box`` lies inside [0, width) × [0, height) × [0, depth)."""
    return (
        box.x >= 0 and box.y >= 0 and box.z >= 0
        and box.x + box.width <= width
        and box.y + box.height <= height
        and box.z + box.depth <= depth
    )


def has_positive_extent(box) -> bool:
    return box.width > 0 and box.height > 0 and box.depth > 0
