"""
binpack3d — online 3D box packing with Guillotine and support-aware MaxRects packers.

Public API:
    from binpack3d import GuillotinePacker, MaxRectsPacker, INSUFFICIENT_SPACE
    from binpack3d.core.validator import DisjointCollection
    from binpack3d.monitoring.trace import StepTracer
    from binpack3d.runner.manifest import load_manifest
"""

from binpack3d.core.models import (
    INSUFFICIENT_SPACE,
    BoxSize,
    FreeRegion,
    PlacedBox,
    SupportedRegion,
)
from binpack3d.algorithms import (
    FreeRectChoiceHeuristic,
    GuillotinePacker,
    GuillotineSplitHeuristic,
    MaxRectsHeuristic,
    MaxRectsPacker,
    get_packer,
)

__version__ = "0.1.0"

__all__ = [
    "INSUFFICIENT_SPACE", "BoxSize", "FreeRegion", "PlacedBox", "SupportedRegion",
    "FreeRectChoiceHeuristic", "GuillotineSplitHeuristic", "MaxRectsHeuristic",
    "GuillotinePacker", "MaxRectsPacker", "get_packer",
]
