"""
Invariant verification — the opt-in checked mode of the packers.

Nothing in this module runs on the packing hot path unless a packer is
built with ``verify=True``.  When it is, every accepted placement is
checked *before* the packer commits it, so a violation leaves the packer
state exactly as it was and surfaces as an exception.

Checks:
  1. Degenerate — no stored box or region has a non-positive extent
  2. Bounds     — every placement lies inside the bin
  3. Overlap    — placements are pairwise disjoint (DisjointCollection)
  4. Support    — a region's support span lies inside its own x/y span
  5. Free list  — Guillotine free regions are pairwise disjoint
"""

from typing import Iterable, List

import numpy as np

from binpack3d.core.geometry import disjoint, has_positive_extent, within_bounds


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class InvariantViolation(Exception):
    """Base class for packer invariant violations (programming errors)."""


class OutOfBoundsError(InvariantViolation):
    """A box or region extends outside the bin."""


class OverlapError(InvariantViolation):
    """A placement shares volume with an already-placed box."""


class DegenerateRegionError(InvariantViolation):
    """A stored box or region has a zero or negative extent."""


class SupportSpanError(InvariantViolation):
    """A support span reaches outside its region's footprint."""


# ─────────────────────────────────────────────────────────────────────────────
# Disjoint collection
# ─────────────────────────────────────────────────────────────────────────────

class DisjointCollection:
    """
    A growable set of pairwise-disjoint boxes.

    Members are stored as rows ``[x, y, z, width, height, depth]`` of a
    numpy array, so the overlap test against all members is one
    vectorised separating-axis check.  ``add`` is O(n) per call.

    Degenerate boxes (zero extent on any axis) are always accepted and
    never stored.
    """

    __slots__ = ("_rows",)

    def __init__(self) -> None:
        self._rows: np.ndarray = np.empty((0, 6), dtype=np.float64)

    def __len__(self) -> int:
        return self._rows.shape[0]

    @staticmethod
    def _is_degenerate(box) -> bool:
        return box.width == 0 or box.height == 0 or box.depth == 0

    def disjoint(self, box) -> bool:
        """True if ``box`` shares no volume with any member."""
        if self._is_degenerate(box) or len(self) == 0:
            return True
        r = self._rows
        separated = (
            (box.x + box.width <= r[:, 0]) | (r[:, 0] + r[:, 3] <= box.x)
            | (box.y + box.height <= r[:, 1]) | (r[:, 1] + r[:, 4] <= box.y)
            | (box.z + box.depth <= r[:, 2]) | (r[:, 2] + r[:, 5] <= box.z)
        )
        return bool(np.all(separated))

    def add(self, box) -> bool:
        """
        Insert ``box`` if it is disjoint from every member.

        Returns:
            False (and inserts nothing) if ``box`` overlaps a member,
            True otherwise.
        """
        if self._is_degenerate(box):
            return True
        if not self.disjoint(box):
            return False
        row = np.array(
            [[box.x, box.y, box.z, box.width, box.height, box.depth]],
            dtype=np.float64,
        )
        self._rows = np.vstack([self._rows, row])
        return True

    def clear(self) -> None:
        self._rows = np.empty((0, 6), dtype=np.float64)

    def copy(self) -> "DisjointCollection":
        clone = DisjointCollection()
        clone._rows = self._rows.copy()
        return clone


# ─────────────────────────────────────────────────────────────────────────────
# Checks
# ─────────────────────────────────────────────────────────────────────────────

def verify_placement(
    box,
    placed: DisjointCollection,
    bin_width: float,
    bin_height: float,
    bin_depth: float,
) -> bool:
    """
    Validate a proposed placement against the bin and the placed set.

    Does not insert into ``placed``; the caller adds the box once its own
    state change is ready to commit.

    Raises:
        DegenerateRegionError: non-positive extent.
        OutOfBoundsError:      box extends outside the bin.
        OverlapError:          box shares volume with a placed box.
    """
    if not has_positive_extent(box):
        raise DegenerateRegionError(f"Placement has a non-positive extent: {box}")
    if not within_bounds(box, bin_width, bin_height, bin_depth):
        raise OutOfBoundsError(
            f"Placement {box} exceeds bin {bin_width}x{bin_height}x{bin_depth}"
        )
    if not placed.disjoint(box):
        raise OverlapError(f"Placement {box} overlaps an already placed box")
    return True


def verify_regions(
    regions: Iterable,
    bin_width: float,
    bin_height: float,
    bin_depth: float,
) -> bool:
    """
    Check stored free regions for positive extents, bounds and (where the
    region carries one) a support span inside its footprint.
    """
    for r in regions:
        if not has_positive_extent(r):
            raise DegenerateRegionError(f"Stored free region is degenerate: {r}")
        if not within_bounds(r, bin_width, bin_height, bin_depth):
            raise OutOfBoundsError(f"Free region {r} exceeds the bin")
        if hasattr(r, "support_x0"):
            if not (r.x <= r.support_x0 <= r.support_x1 <= r.x + r.width
                    and r.y <= r.support_y0 <= r.support_y1 <= r.y + r.height):
                raise SupportSpanError(f"Support span outside footprint: {r!r}")
    return True


def verify_pairwise_disjoint(regions: List) -> bool:
    """Raise OverlapError if any two of ``regions`` share volume."""
    for i in range(len(regions)):
        for j in range(i + 1, len(regions)):
            if not disjoint(regions[i], regions[j]):
                raise OverlapError(
                    f"Free regions overlap: {regions[i]} and {regions[j]}"
                )
    return True
