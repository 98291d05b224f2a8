"""Shared fixtures for the binpack3d test suite."""

import os
import sys

import pytest

# Ensure src/ is on the path when the package is not installed
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from binpack3d.algorithms.guillotine import GuillotinePacker
from binpack3d.algorithms.maxrects import MaxRectsPacker
from binpack3d.monitoring.trace import StepTracer


# Standard test bin and box, in millimetres.
BIN_DIMS = (1500, 1500, 800)
STANDARD_BOX = (510, 290, 210)


@pytest.fixture
def tracer():
    """Recording tracer (silent)."""
    return StepTracer(verbose=False)


@pytest.fixture
def guillotine():
    """Fresh Guillotine packer on the standard bin, with verification on."""
    return GuillotinePacker(*BIN_DIMS, verify=True)


@pytest.fixture
def maxrects():
    """Fresh MaxRects packer on the standard bin, with verification on."""
    return MaxRectsPacker(*BIN_DIMS, verify=True)


def assert_pairwise_disjoint(boxes):
    """Fail if any two placements share volume."""
    from binpack3d.core.geometry import disjoint

    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            assert disjoint(boxes[i], boxes[j]), (
                f"Placements overlap: {boxes[i]} and {boxes[j]}"
            )


def assert_inside_bin(boxes, width, height, depth):
    """Fail if any placement leaves the bin."""
    from binpack3d.core.geometry import within_bounds

    for b in boxes:
        assert within_bounds(b, width, height, depth), f"{b} leaves the bin"
