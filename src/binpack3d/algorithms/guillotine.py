"""
Guillotine packer for 3D bin packing.

Algorithm overview:
    The bin's empty space is kept as a list of pairwise-disjoint free
    regions, starting with one region that spans the whole bin.  A box is
    always placed in the minimum corner of a single free region, and that
    region is then cut into at most three children:

        up      — the column directly above the box (same footprint)
        bottom  — the strip beyond the box along y
        right   — the strip beyond the box along x

    The bottom/right pair comes from one straight ("guillotine") cut of
    the L-shaped leftover footprint, so the children never overlap and
    their volumes add up to the region's volume minus the box.

    Region choice:
      1. A region the box fills exactly (upright or flipped) wins at once.
      2. Otherwise every fitting (region, orientation) pair is scored with
         a FreeRectChoiceHeuristic and the lowest score wins.  Ties keep
         the first pair found; regions are visited in (z, y, x) order.

    An optional merge step re-joins neighbouring free regions that share a
    full face, which counters the fragmentation the cuts produce.

References:
    Jylänki, J. (2010).
    "A Thousand Ways to Pack the Bin — A Practical Approach to
    Two-Dimensional Rectangle Bin Packing."
"""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from binpack3d.algorithms.base_packer import BasePacker, register_packer
from binpack3d.algorithms.heuristics import (
    FreeRectChoiceHeuristic,
    GuillotineSplitHeuristic,
    score_by_heuristic,
    split_horizontally,
)
from binpack3d.core.geometry import disjoint, has_positive_extent
from binpack3d.core.models import INSUFFICIENT_SPACE, BoxSize, FreeRegion, PlacedBox
from binpack3d.core.validator import (
    OverlapError,
    verify_pairwise_disjoint,
    verify_regions,
)
from binpack3d.monitoring.trace import Tracer


# ─────────────────────────────────────────────────────────────────────────────
# Free-list merging
# ─────────────────────────────────────────────────────────────────────────────

def merge_pair(a: FreeRegion, b: FreeRegion) -> Optional[FreeRegion]:
    """
    Join two free regions that share a full face.

    Returns:
        The enlarged region (keeping ``a``'s identity), or None if the two
        regions are not face-adjacent with matching cross-sections.
    """
    # Same x/z cross-section, adjacent along y.
    if a.x == b.x and a.width == b.width and a.z == b.z and a.depth == b.depth:
        if a.y == b.y + b.height:
            return replace(a, y=b.y, height=a.height + b.height)
        if a.y + a.height == b.y:
            return replace(a, height=a.height + b.height)

    # Same y/z cross-section, adjacent along x.
    if a.y == b.y and a.height == b.height and a.z == b.z and a.depth == b.depth:
        if a.x == b.x + b.width:
            return replace(a, x=b.x, width=a.width + b.width)
        if a.x + a.width == b.x:
            return replace(a, width=a.width + b.width)

    # Same footprint, stacked along z.
    if a.x == b.x and a.width == b.width and a.y == b.y and a.height == b.height:
        if a.z == b.z + b.depth:
            return replace(a, z=b.z, depth=a.depth + b.depth)
        if a.z + a.depth == b.z:
            return replace(a, depth=a.depth + b.depth)

    return None


def merge_free_regions(regions: Iterable[FreeRegion]) -> Tuple[List[FreeRegion], int]:
    """
    Coalesce face-adjacent free regions until no pair can be joined.

    Each pass is Θ(n²) over the pairs; passes repeat because a region
    enlarged late in a pass may now match one it was already compared
    with.  The result is a fixed point: merging it again changes nothing.

    Returns:
        (merged region list, number of merges performed)
    """
    current = list(regions)
    total = 0
    while True:
        consumed: set = set()
        for i in range(len(current)):
            if i in consumed:
                continue
            for j in range(i + 1, len(current)):
                if j in consumed:
                    continue
                merged = merge_pair(current[i], current[j])
                if merged is not None:
                    current[i] = merged
                    consumed.add(j)
        if not consumed:
            return current, total
        total += len(consumed)
        current = [r for k, r in enumerate(current) if k not in consumed]


# ─────────────────────────────────────────────────────────────────────────────
# Packer
# ─────────────────────────────────────────────────────────────────────────────

@register_packer
class GuillotinePacker(BasePacker):
    """
    Guillotine-cut 3D bin packer.

    Boxes may be rotated about z (width and height swapped); depth is
    never swapped.  Occupancy is measured by volume.

    Attributes:
        name: Registry identifier ("guillotine").
    """

    name: str = "guillotine"

    def __init__(
        self,
        width: float,
        height: float,
        depth: float,
        verify: bool = False,
        tracer: Optional[Tracer] = None,
    ) -> None:
        super().__init__(verify=verify, tracer=tracer)
        self.free_regions: List[FreeRegion] = []
        self.init(width, height, depth)

    def init(self, width: float, height: float, depth: float) -> None:
        """Reset to an empty bin: one free region spanning everything."""
        self._reset(width, height, depth)
        self.free_regions = [FreeRegion(0, 0, 0, width, height, depth)]

    # ── Insertion ────────────────────────────────────────────────────────

    def insert(
        self,
        width: float,
        height: float,
        depth: float,
        merge: bool = True,
        choice: FreeRectChoiceHeuristic = FreeRectChoiceHeuristic.BEST_AREA_FIT,
        split: GuillotineSplitHeuristic = GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS,
    ) -> PlacedBox:
        """
        Place a single box.

        Args:
            width, height, depth: Requested extents.
            merge:  Run ``merge_free_list()`` after the split.
            choice: Rule for picking the free region.
            split:  Rule for cutting the leftover footprint.

        Returns:
            The placement, or ``INSUFFICIENT_SPACE`` with the packer
            unchanged.
        """
        request = BoxSize(width, height, depth)
        found = self._find_position([request], choice)
        if found is None:
            self.tracer.emit("insufficient_space", request=request)
            return INSUFFICIENT_SPACE

        region_index, _, node = found
        self._place(region_index, node, merge, split)
        return node

    def insert_many(
        self,
        sizes: Sequence,
        merge: bool = True,
        choice: FreeRectChoiceHeuristic = FreeRectChoiceHeuristic.BEST_AREA_FIT,
        split: GuillotineSplitHeuristic = GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS,
    ) -> Tuple[List[PlacedBox], List[BoxSize]]:
        """
        Batch insertion: pack a whole list of requests.

        At every step all (free region, pending request, orientation)
        combinations compete, so the packing order is chosen by the
        heuristic rather than by the input order.

        Args:
            sizes: BoxSize records or (width, height, depth) tuples.
                   The caller's sequence is not modified.

        Returns:
            (placements in packing order, requests that never fitted)
        """
        pending = [s if isinstance(s, BoxSize) else BoxSize(*s) for s in sizes]
        placed: List[PlacedBox] = []

        while pending:
            found = self._find_position(pending, choice)
            if found is None:
                break
            region_index, request_index, node = found
            self._place(region_index, node, merge, split)
            placed.append(node)
            pending = pending[:request_index] + pending[request_index + 1:]

        if pending:
            self.tracer.emit("insufficient_space", unplaced=len(pending))
        return placed, pending

    def _position_order(self) -> List[int]:
        """Free-region indices sorted by (z, y, x), lowest corner first."""
        return sorted(
            range(len(self.free_regions)),
            key=lambda i: (
                self.free_regions[i].z, self.free_regions[i].y, self.free_regions[i].x,
            ),
        )

    def _find_position(
        self,
        requests: List[BoxSize],
        choice: FreeRectChoiceHeuristic,
    ) -> Optional[Tuple[int, int, PlacedBox]]:
        """
        Pick the (free region, request, orientation) to pack next.

        Returns:
            (free-region index, request index, placement) or None.
        """
        best: Optional[Tuple[int, int, PlacedBox]] = None
        best_score = float("inf")

        for i in self._position_order():
            region = self.free_regions[i]
            for j, req in enumerate(requests):
                w, h, d = req.width, req.height, req.depth

                # Exact fits short-circuit the whole search.
                if region.matches(w, h, d):
                    self.tracer.emit("candidate", region=i, request=j, exact=True, flipped=False)
                    return i, j, PlacedBox(region.x, region.y, region.z, w, h, d)
                if region.matches(h, w, d):
                    self.tracer.emit("candidate", region=i, request=j, exact=True, flipped=True)
                    return i, j, PlacedBox(region.x, region.y, region.z, h, w, d)

                for ow, oh, flipped in ((w, h, False), (h, w, True)):
                    if not region.fits(ow, oh, d):
                        continue
                    score = score_by_heuristic(ow, oh, d, region, choice)
                    self.tracer.emit(
                        "candidate", region=i, request=j, flipped=flipped, score=score,
                    )
                    if score < best_score:
                        best_score = score
                        best = (i, j, PlacedBox(region.x, region.y, region.z, ow, oh, d))

        return best

    def _place(
        self,
        region_index: int,
        node: PlacedBox,
        merge: bool,
        split: GuillotineSplitHeuristic,
    ) -> None:
        """Consume a free region for ``node`` and commit the new state."""
        self._check_placement(node)

        region = self.free_regions[region_index]
        children = self.split_free_region_by_heuristic(region, node, split)
        remaining = [r for k, r in enumerate(self.free_regions) if k != region_index]
        remaining.extend(children)

        if merge:
            remaining, merges = merge_free_regions(remaining)
            if merges:
                self.tracer.emit("merge", merges=merges, free=len(remaining))

        if self.verify:
            self._check_free_regions(remaining, node)

        self.free_regions = remaining
        self._commit_placement(node)

    # ── Splitting ────────────────────────────────────────────────────────

    def split_free_region_by_heuristic(
        self,
        region: FreeRegion,
        placed: PlacedBox,
        method: GuillotineSplitHeuristic,
    ) -> List[FreeRegion]:
        """Choose the cut axis with ``method`` and split ``region``."""
        return self.split_free_region_along_axis(
            region, placed, split_horizontally(region, placed, method),
        )

    def split_free_region_along_axis(
        self,
        region: FreeRegion,
        placed: PlacedBox,
        split_horizontal: bool,
    ) -> List[FreeRegion]:
        """
        Cut the space left in ``region`` around ``placed``.

        ``placed`` must sit in the region's minimum corner.  Children with
        a non-positive extent are dropped.

        Returns:
            Up to three disjoint children, in (up, bottom, right) order.
        """
        up = FreeRegion(
            region.x, region.y, region.z + placed.depth,
            placed.width, placed.height, region.depth - placed.depth,
        )
        bottom = FreeRegion(
            region.x, region.y + placed.height, region.z,
            region.width if split_horizontal else placed.width,
            region.height - placed.height,
            region.depth,
        )
        right = FreeRegion(
            region.x + placed.width, region.y, region.z,
            region.width - placed.width,
            placed.height if split_horizontal else region.height,
            region.depth,
        )

        children = [r for r in (up, bottom, right) if has_positive_extent(r)]
        self.tracer.emit(
            "split", region=region, horizontal=split_horizontal, children=children,
        )
        return children

    def merge_free_list(self) -> int:
        """
        Merge face-adjacent free regions in place.

        Returns:
            Number of merges performed; 0 on a second consecutive call.
        """
        self.free_regions, merges = merge_free_regions(self.free_regions)
        if self.verify:
            verify_pairwise_disjoint(self.free_regions)
        if merges:
            self.tracer.emit("merge", merges=merges, free=len(self.free_regions))
        return merges

    # ── Queries ──────────────────────────────────────────────────────────

    def occupancy(self) -> float:
        """Used volume / bin volume."""
        if not self.used_boxes:
            return 0.0
        return self.used_volume() / self.bin_volume

    # ── Verification ─────────────────────────────────────────────────────

    def _check_free_regions(self, regions: List[FreeRegion], node: PlacedBox) -> None:
        verify_regions(regions, self.bin_width, self.bin_height, self.bin_depth)
        verify_pairwise_disjoint(regions)
        for r in regions:
            if not disjoint(r, node) or not self._placed.disjoint(r):
                raise OverlapError(f"Free region {r} overlaps a placed box")
