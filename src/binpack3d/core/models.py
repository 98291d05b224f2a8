"""
Core data models for the 3D bin packers.

All packers and helpers import their record types from here so the
geometry, algorithm and monitoring layers agree on one vocabulary.

Classes:
    BoxSize          — a requested box (extents only, not yet placed)
    PlacedBox        — an accepted placement inside the bin
    FreeRegion       — a candidate empty sub-volume (Guillotine packer)
    SupportedRegion  — a free region plus its support span (MaxRects packer)

Axes: x runs along the bin width, y along the bin height and z along the
bin depth.  Boxes stack upward along z, so "support" is always judged in
the x/y plane at a region's z.
"""

from dataclasses import dataclass


# ─────────────────────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BoxSize:
    """
    A box placement request.

    Attributes:
        width:  X-axis extent.
        height: Y-axis extent.
        depth:  Z-axis extent (never swapped by a rotation).
    """
    width: float
    height: float
    depth: float

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    def flipped(self) -> "BoxSize":
        """The same request rotated 90° about z (width and height swapped)."""
        return BoxSize(self.height, self.width, self.depth)


# ─────────────────────────────────────────────────────────────────────────────
# Placements
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlacedBox:
    """
    A single accepted placement.

    Frozen so packers can hand their used list out without risk of the
    caller mutating packer state.  The origin (x, y, z) is the box's
    minimum corner.

    A placement with zero extents is the failure sentinel, see
    ``INSUFFICIENT_SPACE``.
    """
    x: float
    y: float
    z: float
    width: float
    height: float
    depth: float

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    @property
    def base_area(self) -> float:
        return self.width * self.height

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    @property
    def z_max(self) -> float:
        return self.z + self.depth

    @property
    def is_empty(self) -> bool:
        """True for the failure sentinel (no space was found)."""
        return self.width == 0 or self.height == 0 or self.depth == 0

    def size(self) -> BoxSize:
        return BoxSize(self.width, self.height, self.depth)

    def to_dict(self) -> dict:
        return {
            "position": [self.x, self.y, self.z],
            "dims": [self.width, self.height, self.depth],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlacedBox":
        return cls(
            x=d["position"][0], y=d["position"][1], z=d["position"][2],
            width=d["dims"][0], height=d["dims"][1], depth=d["dims"][2],
        )


# Returned by every packer when no free region admits a request.
INSUFFICIENT_SPACE = PlacedBox(0, 0, 0, 0, 0, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Free space
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FreeRegion:
    """
    An axis-aligned empty sub-volume in which a box could still be placed.

    Attributes:
        x, y, z:               Minimum corner.
        width, height, depth:  Extents along x, y and z.
    """
    x: float
    y: float
    z: float
    width: float
    height: float
    depth: float

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    @property
    def z_max(self) -> float:
        return self.z + self.depth

    @property
    def is_degenerate(self) -> bool:
        """Zero or negative extent on some axis; never stored by a packer."""
        return self.width <= 0 or self.height <= 0 or self.depth <= 0

    def fits(self, width: float, height: float, depth: float) -> bool:
        """Does a box of the given extents fit without rotation?"""
        return width <= self.width and height <= self.height and depth <= self.depth

    def matches(self, width: float, height: float, depth: float) -> bool:
        """Does a box of the given extents fill this region exactly?"""
        return width == self.width and height == self.height and depth == self.depth


@dataclass(frozen=True)
class SupportedRegion(FreeRegion):
    """
    A free region annotated with its support span.

    The support span [support_x0, support_x1) × [support_y0, support_y1)
    is the part of the region's footprint that rests on the floor or on
    the top face of a previously placed box at height ``z``.  It always
    lies inside the region's own x/y span; an empty span (x0 == x1 or
    y0 == y1) means nothing is known to hold a box up here.
    """
    support_x0: float
    support_x1: float
    support_y0: float
    support_y1: float

    @property
    def support_width(self) -> float:
        return self.support_x1 - self.support_x0

    @property
    def support_height(self) -> float:
        return self.support_y1 - self.support_y0

    def __repr__(self) -> str:
        return (
            f"SupportedRegion(origin=({self.x},{self.y},{self.z}), "
            f"size=({self.width},{self.height},{self.depth}), "
            f"support=x[{self.support_x0},{self.support_x1}) "
            f"y[{self.support_y0},{self.support_y1}))"
        )
