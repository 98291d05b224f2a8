"""Manifest loading, request datasets and the packing run driver."""

from binpack3d.runner.dataset import (
    ORDERING_STRATEGIES,
    footprint_sorted_order,
    generate_boxes,
    get_ordering_strategy,
    random_order,
    volume_sorted_order,
)
from binpack3d.runner.manifest import (
    BinSpec,
    BoxRequest,
    GeneratedBoxes,
    PackerSettings,
    PackingManifest,
    build_packer,
    load_manifest,
)
from binpack3d.runner.experiment import PackingRunner, StepRecord, main

__all__ = [
    "ORDERING_STRATEGIES", "generate_boxes", "get_ordering_strategy",
    "random_order", "volume_sorted_order", "footprint_sorted_order",
    "BinSpec", "BoxRequest", "GeneratedBoxes", "PackerSettings", "PackingManifest",
    "build_packer", "load_manifest",
    "PackingRunner", "StepRecord", "main",
]
