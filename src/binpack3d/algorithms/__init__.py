"""
algorithms — the packing engines.

Importing this package registers every packer in ``PACKER_REGISTRY``.

Public API:
    from binpack3d.algorithms import get_packer
    packer = get_packer("guillotine", 1500, 1500, 800)
    packer = get_packer("maxrects", 1500, 1500, 800, allow_flip=True)
"""

from binpack3d.algorithms.base_packer import (
    PACKER_REGISTRY,
    BasePacker,
    get_packer,
    register_packer,
)
from binpack3d.algorithms.heuristics import (
    FreeRectChoiceHeuristic,
    GuillotineSplitHeuristic,
)
from binpack3d.algorithms.guillotine import GuillotinePacker
from binpack3d.algorithms.maxrects import MaxRectsHeuristic, MaxRectsPacker

__all__ = [
    "PACKER_REGISTRY", "BasePacker", "get_packer", "register_packer",
    "FreeRectChoiceHeuristic", "GuillotineSplitHeuristic",
    "GuillotinePacker", "MaxRectsHeuristic", "MaxRectsPacker",
]
