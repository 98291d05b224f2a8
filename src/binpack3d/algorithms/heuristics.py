"""
Scoring and split heuristics for region-based packers.

Free-region choice
    Each rule scores placing a box of extents (w, h, d) into a free region
    of extents (W, H, D); the packer keeps the lowest score.  The WORST_*
    rules are the negation of their BEST_* counterpart, so they select
    exactly what the BEST_* rule would avoid.

        BEST_AREA_FIT        W·H·D − w·h·d          (smallest leftover volume)
        BEST_SHORT_SIDE_FIT  min(|W−w|, |H−h|, |D−d|)
        BEST_LONG_SIDE_FIT   max(|W−w|, |H−h|, |D−d|)

Guillotine split
    Placing a box in the corner of a region leaves an L-shaped footprint
    that one straight cut divides into a "bottom" and a "right" part.  A
    horizontal cut gives the bottom part the full region width; a vertical
    cut gives the right part the full region height.

References:
    Jylänki, J. (2010).
    "A Thousand Ways to Pack the Bin — A Practical Approach to
    Two-Dimensional Rectangle Bin Packing."
"""

from enum import Enum


class FreeRectChoiceHeuristic(Enum):
    BEST_AREA_FIT = "baf"
    BEST_SHORT_SIDE_FIT = "bssf"
    BEST_LONG_SIDE_FIT = "blsf"
    WORST_AREA_FIT = "waf"
    WORST_SHORT_SIDE_FIT = "wssf"
    WORST_LONG_SIDE_FIT = "wlsf"


class GuillotineSplitHeuristic(Enum):
    SHORTER_LEFTOVER_AXIS = "slas"
    LONGER_LEFTOVER_AXIS = "llas"
    MINIMIZE_AREA = "minas"
    MAXIMIZE_AREA = "maxas"
    SHORTER_AXIS = "sas"
    LONGER_AXIS = "las"


# ─────────────────────────────────────────────────────────────────────────────
# Region scores (lower is better)
# ─────────────────────────────────────────────────────────────────────────────

def score_best_area_fit(width, height, depth, region) -> float:
    return region.width * region.height * region.depth - width * height * depth


def score_best_short_side_fit(width, height, depth, region) -> float:
    return min(
        abs(region.width - width),
        abs(region.height - height),
        abs(region.depth - depth),
    )


def score_best_long_side_fit(width, height, depth, region) -> float:
    return max(
        abs(region.width - width),
        abs(region.height - height),
        abs(region.depth - depth),
    )


def score_worst_area_fit(width, height, depth, region) -> float:
    return -score_best_area_fit(width, height, depth, region)


def score_worst_short_side_fit(width, height, depth, region) -> float:
    return -score_best_short_side_fit(width, height, depth, region)


def score_worst_long_side_fit(width, height, depth, region) -> float:
    return -score_best_long_side_fit(width, height, depth, region)


_SCORERS = {
    FreeRectChoiceHeuristic.BEST_AREA_FIT: score_best_area_fit,
    FreeRectChoiceHeuristic.BEST_SHORT_SIDE_FIT: score_best_short_side_fit,
    FreeRectChoiceHeuristic.BEST_LONG_SIDE_FIT: score_best_long_side_fit,
    FreeRectChoiceHeuristic.WORST_AREA_FIT: score_worst_area_fit,
    FreeRectChoiceHeuristic.WORST_SHORT_SIDE_FIT: score_worst_short_side_fit,
    FreeRectChoiceHeuristic.WORST_LONG_SIDE_FIT: score_worst_long_side_fit,
}


def score_by_heuristic(
    width: float,
    height: float,
    depth: float,
    region,
    choice: FreeRectChoiceHeuristic,
) -> float:
    """Score an unrotated box against ``region`` with the given rule."""
    try:
        scorer = _SCORERS[choice]
    except KeyError:
        raise ValueError(f"Unknown free-region choice heuristic: {choice!r}") from None
    return scorer(width, height, depth, region)


# ─────────────────────────────────────────────────────────────────────────────
# Split axis
# ─────────────────────────────────────────────────────────────────────────────

def split_horizontally(region, placed, method: GuillotineSplitHeuristic) -> bool:
    """
    Decide the guillotine cut for the leftover L-shape.

    Args:
        region: The free region the box was placed into.
        placed: The placed box (occupying the region's minimum corner).
        method: Split rule.

    Returns:
        True for a horizontal cut (bottom part spans the full region
        width), False for a vertical cut.
    """
    w = region.width - placed.width
    h = region.height - placed.height

    if method is GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS:
        return w <= h
    if method is GuillotineSplitHeuristic.LONGER_LEFTOVER_AXIS:
        return w > h
    if method is GuillotineSplitHeuristic.MINIMIZE_AREA:
        # One big and one small leftover.
        return placed.width * h > w * placed.height
    if method is GuillotineSplitHeuristic.MAXIMIZE_AREA:
        # Two evenly sized leftovers.
        return placed.width * h <= w * placed.height
    if method is GuillotineSplitHeuristic.SHORTER_AXIS:
        return region.width <= region.height
    if method is GuillotineSplitHeuristic.LONGER_AXIS:
        return region.width > region.height
    raise ValueError(f"Unknown guillotine split heuristic: {method!r}")
