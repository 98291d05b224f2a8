"""
Packer interface — abstract base class and registry for all bin packers.

A packer owns one bin.  It is (re)initialised with ``init(width, height,
depth, ...)``, then fed boxes one at a time through ``insert(...)``.
Each insert is an atomic state transition: either the free and used sets
both move to their new state, or nothing changes and the
``INSUFFICIENT_SPACE`` sentinel comes back.

Creating a packer
~~~~~~~~~~~~~~~~~
1. Subclass ``BasePacker`` and set ``name``
2. Implement ``init()``, ``insert()`` and ``occupancy()``
3. Decorate with ``@register_packer``
4. Import the module in ``algorithms/__init__.py``

Packers are not thread-safe.  Use one instance per worker, or serialise
calls on a shared instance externally.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from binpack3d.core.models import PlacedBox
from binpack3d.core.validator import DisjointCollection, verify_placement
from binpack3d.monitoring.trace import NullTracer, Tracer


class BasePacker(ABC):
    """
    Shared state and bookkeeping for a single-bin packer.

    Attributes:
        bin_width, bin_height, bin_depth: Bin extents along x, y and z.
        used_boxes:   Accepted placements in insertion order.
        free_regions: Candidate empty sub-volumes (packer-specific type).
        verify:       Run the invariant checks on every placement.
        tracer:       Sink for search/split trace events.
    """

    name: str = "unnamed"

    def __init__(self, verify: bool = False, tracer: Optional[Tracer] = None) -> None:
        self.bin_width: float = 0
        self.bin_height: float = 0
        self.bin_depth: float = 0
        self.used_boxes: List[PlacedBox] = []
        self.free_regions: list = []
        self.verify = verify
        self.tracer: Tracer = tracer if tracer is not None else NullTracer()
        self._placed = DisjointCollection()

    def _reset(self, width: float, height: float, depth: float) -> None:
        if width <= 0 or height <= 0 or depth <= 0:
            raise ValueError(
                f"Bin extents must be positive, got {width}x{height}x{depth}"
            )
        self.bin_width = width
        self.bin_height = height
        self.bin_depth = depth
        self.used_boxes = []
        self._placed.clear()

    @abstractmethod
    def init(self, width: float, height: float, depth: float, *args, **kwargs) -> None:
        """(Re)initialise to an empty bin of the given size."""
        ...

    @abstractmethod
    def insert(self, width: float, height: float, depth: float, *args, **kwargs) -> PlacedBox:
        """
        Place one box.

        Returns:
            The accepted ``PlacedBox``, or ``INSUFFICIENT_SPACE`` if no free
            region admits the box.  Never raises for lack of space.
        """
        ...

    @abstractmethod
    def occupancy(self) -> float:
        """Fraction of the bin consumed, in [0, 1]."""
        ...

    # ── Shared helpers ───────────────────────────────────────────────────

    @property
    def bin_volume(self) -> float:
        return self.bin_width * self.bin_height * self.bin_depth

    def used_volume(self) -> float:
        return sum(b.volume for b in self.used_boxes)

    def _check_placement(self, box: PlacedBox) -> None:
        """Verification-mode check, run before any state is committed."""
        if self.verify:
            verify_placement(
                box, self._placed, self.bin_width, self.bin_height, self.bin_depth,
            )

    def _commit_placement(self, box: PlacedBox) -> None:
        self.used_boxes.append(box)
        if self.verify:
            self._placed.add(box)
        if self.tracer.enabled:
            self.tracer.emit("placed", box=box, occupancy=round(self.occupancy(), 6))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(bin={self.bin_width}x{self.bin_height}x{self.bin_depth}, "
            f"boxes={len(self.used_boxes)}, free={len(self.free_regions)}, "
            f"occupancy={self.occupancy():.1%})"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────

PACKER_REGISTRY: Dict[str, Type[BasePacker]] = {}


def register_packer(cls: Type[BasePacker]) -> Type[BasePacker]:
    """Class decorator — registers a packer in the global registry."""
    PACKER_REGISTRY[cls.name] = cls
    return cls


def get_packer(name: str, *args, **kwargs) -> BasePacker:
    """Look up a packer by name and return a new instance."""
    if name not in PACKER_REGISTRY:
        available = ", ".join(sorted(PACKER_REGISTRY.keys()))
        raise ValueError(f"Unknown packer '{name}'.  Available: [{available}]")
    return PACKER_REGISTRY[name](*args, **kwargs)
