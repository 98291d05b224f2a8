"""Request generation and ordering for packing runs."""

from typing import Callable, List, Optional

import numpy as np

from binpack3d.core.models import BoxSize


def generate_boxes(
    count: int = 50,
    seed: Optional[int] = None,
    min_dim: int = 100,
    max_dim: int = 600,
) -> List[BoxSize]:
    """
    Generate random box requests.

    Args:
        count: Number of requests to generate
        seed: Random seed for reproducibility (default: None)
        min_dim, max_dim: Inclusive bounds for every extent

    Returns:
        List of BoxSize with integer extents
    """
    rng = np.random.default_rng(seed)
    dims = rng.integers(min_dim, max_dim, size=(count, 3), endpoint=True)
    return [BoxSize(int(w), int(h), int(d)) for w, h, d in dims]


def as_given_order(boxes: List[BoxSize]) -> List[BoxSize]:
    """Return the requests unchanged (as a copy)."""
    return list(boxes)


def random_order(boxes: List[BoxSize], seed: Optional[int] = None) -> List[BoxSize]:
    """
    Return the requests in random order.

    Returns:
        Shuffled copy of boxes
    """
    rng = np.random.default_rng(seed)
    return [boxes[i] for i in rng.permutation(len(boxes))]


def volume_sorted_order(boxes: List[BoxSize]) -> List[BoxSize]:
    """Largest volume first."""
    return sorted(boxes, key=lambda b: b.volume, reverse=True)


def footprint_sorted_order(boxes: List[BoxSize]) -> List[BoxSize]:
    """Largest base area first; good for stacking with support checks."""
    return sorted(boxes, key=lambda b: (b.width * b.height, b.depth), reverse=True)


# Map of ordering strategy names to functions
ORDERING_STRATEGIES: dict[str, Callable[[List[BoxSize]], List[BoxSize]]] = {
    "as_given": as_given_order,
    "random": random_order,
    "volume_sorted": volume_sorted_order,
    "footprint_sorted": footprint_sorted_order,
}


def get_ordering_strategy(name: str) -> Callable[[List[BoxSize]], List[BoxSize]]:
    """
    Get an ordering strategy function by name.

    Raises:
        ValueError: If strategy name is not recognized
    """
    if name not in ORDERING_STRATEGIES:
        raise ValueError(
            f"Unknown ordering strategy: {name}. "
            f"Available: {list(ORDERING_STRATEGIES.keys())}"
        )
    return ORDERING_STRATEGIES[name]
