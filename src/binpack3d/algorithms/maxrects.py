"""
Support-aware MaxRects packer for 3D bin packing.

Algorithm overview:
    The empty space is described by maximal free regions which may
    overlap each other.  Every region carries a *support span*: the part
    of its footprint that rests on the floor or on the top face of a box
    at the region's z.  A box is only accepted where enough of its base
    lies over that span, which keeps stacks physically plausible.

    Placement (bottom-left rule):
      1. Visit regions in (y, z, x) order — most bottom, then most back,
         then most left.
      2. A region admits a box if it is large enough, the box placed at
         the support origin stays inside the region, and the support span
         covers at least ``support_threshold`` of the box's width and of
         its height.
      3. A candidate whose footprint overlaps a placed box and whose z is
         below that box's top is "blocked" and skipped.
      4. The first admissible, unblocked candidate wins (upright first,
         then flipped if allowed).

    After a placement every region intersecting the new box is replaced
    by up to six slabs around it.  The slab above the box gets the box's
    footprint as its support span: the box is the new resting surface.
    Regions lying wholly inside another region are then pruned.

Support and occupancy are both judged on the x/y base, so
``occupancy()`` here is a base-area ratio, not a volume ratio.
"""

from dataclasses import replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from binpack3d.algorithms.base_packer import BasePacker, register_packer
from binpack3d.core.geometry import (
    has_positive_extent,
    intersects,
    is_contained_in,
    is_contained_in_free,
    overlaps_xy,
)
from binpack3d.core.models import INSUFFICIENT_SPACE, BoxSize, PlacedBox, SupportedRegion
from binpack3d.core.validator import verify_regions
from binpack3d.monitoring.trace import Tracer


# Fraction of the box's width and height that must lie over support.
DEFAULT_SUPPORT_THRESHOLD: float = 0.8


class MaxRectsHeuristic(Enum):
    BOTTOM_LEFT = "bl"


# ─────────────────────────────────────────────────────────────────────────────
# Region helpers
# ─────────────────────────────────────────────────────────────────────────────

def clip_support(region: SupportedRegion) -> SupportedRegion:
    """Clamp the support span into the region's footprint (may become empty)."""
    x0 = min(max(region.support_x0, region.x), region.x_max)
    x1 = min(max(region.support_x1, x0), region.x_max)
    y0 = min(max(region.support_y0, region.y), region.y_max)
    y1 = min(max(region.support_y1, y0), region.y_max)
    return replace(region, support_x0=x0, support_x1=x1, support_y0=y0, support_y1=y1)


def is_blocked(used: PlacedBox, candidate: PlacedBox) -> bool:
    """
    True if ``used`` occupies the column of ``candidate``: their footprints
    overlap and the candidate starts below the used box's top.
    """
    return overlaps_xy(candidate, used) and candidate.z < used.z_max


def is_redundant(a: SupportedRegion, b: SupportedRegion) -> bool:
    """
    True if pruning may drop ``a`` in favour of ``b``.

    ``a`` must pass the one-sided ``is_contained_in_free`` test and also
    lie wholly inside ``b``, so together ``a`` must end at ``b``'s top.
    A taller region over a lower, shorter one is kept: dropping it would
    lose the free space above ``b``.
    """
    return is_contained_in_free(a, b) and is_contained_in(a, b)


def prune_free_regions(
    regions: Iterable[SupportedRegion],
) -> Tuple[List[SupportedRegion], int]:
    """
    Drop every region made redundant by another (see ``is_redundant``).

    The union of free space is unchanged.  Of two identical regions the
    later one survives.  Removal is done by collecting indices first and
    rebuilding the list afterwards.

    Returns:
        (surviving regions, number removed)
    """
    current = list(regions)
    removed: set = set()
    for i in range(len(current)):
        if i in removed:
            continue
        for j in range(i + 1, len(current)):
            if j in removed:
                continue
            if is_redundant(current[i], current[j]):
                removed.add(i)
                break
            if is_redundant(current[j], current[i]):
                removed.add(j)
    return [r for k, r in enumerate(current) if k not in removed], len(removed)


# ─────────────────────────────────────────────────────────────────────────────
# Packer
# ─────────────────────────────────────────────────────────────────────────────

@register_packer
class MaxRectsPacker(BasePacker):
    """
    MaxRects 3D packer with support spans.

    Attributes:
        name:              Registry identifier ("maxrects").
        allow_flip:        Whether width and height may be swapped.
        support_threshold: Minimum supported fraction of the box's width
                           and of its height, in [0, 1].
    """

    name: str = "maxrects"

    def __init__(
        self,
        width: float,
        height: float,
        depth: float,
        allow_flip: bool = True,
        support_threshold: float = DEFAULT_SUPPORT_THRESHOLD,
        verify: bool = False,
        tracer: Optional[Tracer] = None,
    ) -> None:
        super().__init__(verify=verify, tracer=tracer)
        if not 0.0 <= support_threshold <= 1.0:
            raise ValueError(
                f"support_threshold must lie in [0, 1], got {support_threshold}"
            )
        self.support_threshold = support_threshold
        self.allow_flip = allow_flip
        self.free_regions: List[SupportedRegion] = []
        self.init(width, height, depth, allow_flip)

    def init(self, width: float, height: float, depth: float, allow_flip: bool = True) -> None:
        """Reset to an empty bin; the whole floor is support."""
        self._reset(width, height, depth)
        self.allow_flip = allow_flip
        self.free_regions = [
            SupportedRegion(0, 0, 0, width, height, depth, 0, width, 0, height)
        ]

    # ── Insertion ────────────────────────────────────────────────────────

    def insert(
        self,
        width: float,
        height: float,
        depth: float,
        rule: MaxRectsHeuristic = MaxRectsHeuristic.BOTTOM_LEFT,
    ) -> PlacedBox:
        """
        Place a single box with the given rule.

        Returns:
            The placement, or ``INSUFFICIENT_SPACE`` with the packer
            unchanged (the free-region order included).
        """
        if rule is not MaxRectsHeuristic.BOTTOM_LEFT:
            raise ValueError(f"Unsupported MaxRects rule: {rule!r}")

        ordered = sorted(self.free_regions, key=lambda r: (r.y, r.z, r.x))
        node = self.find_position_bottom_left(width, height, depth, ordered)
        if node is None:
            self.tracer.emit("insufficient_space", request=BoxSize(width, height, depth))
            return INSUFFICIENT_SPACE

        self._check_placement(node)

        untouched: List[SupportedRegion] = []
        children: List[SupportedRegion] = []
        for region in ordered:
            pieces = self.split_free_node(region, node)
            if pieces is None:
                untouched.append(region)
            else:
                children.extend(pieces)

        remaining, removed = prune_free_regions(untouched + children)
        if removed:
            self.tracer.emit("prune", removed=removed, free=len(remaining))

        if self.verify:
            verify_regions(remaining, self.bin_width, self.bin_height, self.bin_depth)

        self.free_regions = remaining
        self._commit_placement(node)
        return node

    def find_position_bottom_left(
        self,
        width: float,
        height: float,
        depth: float,
        regions: List[SupportedRegion],
    ) -> Optional[PlacedBox]:
        """
        First admissible, unblocked placement over ``regions`` in order.

        Returns:
            The candidate placement or None.
        """
        orientations = [(width, height, False)]
        if self.allow_flip:
            orientations.append((height, width, True))

        for i, region in enumerate(regions):
            self.tracer.emit("free_region", index=i, region=region)
            for w, h, flipped in orientations:
                if not self.admits(region, w, h, depth):
                    continue
                node = PlacedBox(region.support_x0, region.support_y0, region.z, w, h, depth)
                if any(is_blocked(used, node) for used in self.used_boxes):
                    self.tracer.emit("blocked", index=i, flipped=flipped, node=node)
                    continue
                self.tracer.emit("candidate", index=i, flipped=flipped, node=node)
                return node
        return None

    def admits(self, region: SupportedRegion, width: float, height: float, depth: float) -> bool:
        """Size, containment and support test for an unrotated box."""
        th = self.support_threshold
        return (
            region.width >= width and region.height >= height and region.depth >= depth
            and region.support_x0 + width <= region.x_max
            and region.support_y0 + height <= region.y_max
            and region.support_width >= width * th
            and region.support_height >= height * th
        )

    # ── Splitting & pruning ──────────────────────────────────────────────

    def split_free_node(
        self,
        region: SupportedRegion,
        used: PlacedBox,
    ) -> Optional[List[SupportedRegion]]:
        """
        Carve ``used`` out of ``region``.

        Returns:
            None if the two do not intersect (the region stays as it is),
            otherwise the list of slabs that replace it — possibly empty.
        """
        if not intersects(region, used):
            return None

        pieces: List[SupportedRegion] = []

        # Slab before the box along y.
        if region.y < used.y < region.y_max:
            pieces.append(replace(
                region, height=used.y - region.y,
                support_y1=min(region.support_y1, used.y),
            ))

        # Slab beyond the box along y.
        if used.y_max < region.y_max:
            pieces.append(replace(
                region, y=used.y_max, height=region.y_max - used.y_max,
                support_y0=max(region.support_y0, used.y_max),
            ))

        # Slab before the box along x.
        if region.x < used.x < region.x_max:
            pieces.append(replace(
                region, width=used.x - region.x,
                support_x1=min(region.support_x1, used.x),
            ))

        # Slab beyond the box along x.
        if used.x_max < region.x_max:
            pieces.append(replace(
                region, x=used.x_max, width=region.x_max - used.x_max,
                support_x0=max(region.support_x0, used.x_max),
            ))

        # Slab under the box.
        if region.z < used.z < region.z_max:
            pieces.append(replace(region, depth=used.z - region.z))

        # Slab on top of the box: the box's top face becomes the support.
        if used.z_max < region.z_max:
            pieces.append(replace(
                region, z=used.z_max, depth=region.z_max - used.z_max,
                support_x0=used.x, support_x1=used.x_max,
                support_y0=used.y, support_y1=used.y_max,
            ))

        children = [clip_support(p) for p in pieces if has_positive_extent(p)]
        self.tracer.emit("split", region=region, children=children)
        return children

    def prune_free_list(self) -> int:
        """
        Remove redundant free regions in place.

        Returns:
            Number of regions removed.
        """
        self.free_regions, removed = prune_free_regions(self.free_regions)
        if removed:
            self.tracer.emit("prune", removed=removed, free=len(self.free_regions))
        return removed

    # ── Queries ──────────────────────────────────────────────────────────

    def occupancy(self) -> float:
        """
        Used base area / bin base area, depth ignored.

        Stacked boxes each count their full base, so the raw ratio can pass
        1.0 in a tall bin; it is capped there.
        """
        if not self.used_boxes:
            return 0.0
        used_area = sum(b.base_area for b in self.used_boxes)
        return min(1.0, used_area / (self.bin_width * self.bin_height))
