"""
Packing manifests — validated run configuration loaded from YAML.

A manifest names the bin, the packer and its options, and the box
requests to feed it (an explicit list, a generated dataset, or both).

Example manifest::

    bin: {width: 1500, height: 1500, depth: 800}
    packer:
      algorithm: guillotine
      choice: WORST_LONG_SIDE_FIT
      split: SHORTER_LEFTOVER_AXIS
    ordering: volume_sorted
    boxes:
      - {width: 510, height: 290, depth: 210, quantity: 12}
      - {width: 480, height: 230, depth: 190, quantity: 10}

``ordering: random`` shuffles with ``seed``, or with ``generate.seed`` when
no top-level seed is given.
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from binpack3d.algorithms import PACKER_REGISTRY, get_packer
from binpack3d.algorithms.base_packer import BasePacker
from binpack3d.algorithms.heuristics import FreeRectChoiceHeuristic, GuillotineSplitHeuristic
from binpack3d.algorithms.maxrects import DEFAULT_SUPPORT_THRESHOLD
from binpack3d.core.models import BoxSize
from binpack3d.monitoring.trace import Tracer
from binpack3d.runner.dataset import ORDERING_STRATEGIES, generate_boxes, random_order


def _enum_by_name(enum_cls, value):
    """Accept enum members by name ("WORST_AREA_FIT") as well as by value."""
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls[value.upper()]
    return value


class BinSpec(BaseModel):
    """Bin extents along x, y and z."""

    width: float = Field(gt=0)
    height: float = Field(gt=0)
    depth: float = Field(gt=0)


class PackerSettings(BaseModel):
    """Packer selection and options."""

    algorithm: str = "maxrects"
    allow_flip: bool = True
    support_threshold: float = Field(DEFAULT_SUPPORT_THRESHOLD, ge=0.0, le=1.0)
    merge: bool = True
    choice: FreeRectChoiceHeuristic = FreeRectChoiceHeuristic.BEST_AREA_FIT
    split: GuillotineSplitHeuristic = GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS
    verify: bool = False
    verbose: bool = False

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, v: str) -> str:
        if v not in PACKER_REGISTRY:
            available = ", ".join(sorted(PACKER_REGISTRY))
            raise ValueError(f"unknown packer '{v}' (available: {available})")
        return v

    @field_validator("choice", mode="before")
    @classmethod
    def _choice_by_name(cls, v):
        return _enum_by_name(FreeRectChoiceHeuristic, v)

    @field_validator("split", mode="before")
    @classmethod
    def _split_by_name(cls, v):
        return _enum_by_name(GuillotineSplitHeuristic, v)

    def insert_kwargs(self) -> dict:
        """Per-call options of the selected packer's ``insert``."""
        if self.algorithm == "guillotine":
            return {"merge": self.merge, "choice": self.choice, "split": self.split}
        return {}


class BoxRequest(BaseModel):
    """One line of the request list; ``quantity`` repeats it."""

    id: Optional[int] = None
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    depth: float = Field(gt=0)
    quantity: int = Field(1, ge=1)

    def size(self) -> BoxSize:
        return BoxSize(self.width, self.height, self.depth)


class GeneratedBoxes(BaseModel):
    """Parameters for a random request list (see ``generate_boxes``)."""

    count: int = Field(ge=1)
    seed: Optional[int] = None
    min_dim: int = Field(100, gt=0)
    max_dim: int = Field(600, gt=0)

    @model_validator(mode="after")
    def _ordered_bounds(self) -> "GeneratedBoxes":
        if self.min_dim > self.max_dim:
            raise ValueError("min_dim must not exceed max_dim")
        return self


class PackingManifest(BaseModel):
    """A complete packing run description."""

    bin: BinSpec
    packer: PackerSettings = Field(default_factory=PackerSettings)
    boxes: List[BoxRequest] = Field(default_factory=list)
    generate: Optional[GeneratedBoxes] = None
    ordering: Optional[str] = None
    seed: Optional[int] = None

    @field_validator("ordering")
    @classmethod
    def _known_ordering(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ORDERING_STRATEGIES:
            raise ValueError(
                f"unknown ordering '{v}' (available: {', '.join(ORDERING_STRATEGIES)})"
            )
        return v

    def requests(self) -> List[BoxSize]:
        """All requests in feed order: explicit boxes, then generated ones."""
        sizes: List[BoxSize] = []
        for req in self.boxes:
            sizes.extend([req.size()] * req.quantity)
        if self.generate is not None:
            g = self.generate
            sizes.extend(generate_boxes(g.count, seed=g.seed, min_dim=g.min_dim, max_dim=g.max_dim))
        if self.ordering == "random":
            sizes = random_order(sizes, seed=self.ordering_seed())
        elif self.ordering is not None:
            sizes = ORDERING_STRATEGIES[self.ordering](sizes)
        return sizes

    def ordering_seed(self) -> Optional[int]:
        """Seed for ``ordering: random``: ``seed``, else the generator's seed."""
        if self.seed is not None:
            return self.seed
        return self.generate.seed if self.generate is not None else None


def load_manifest(path: Union[str, Path]) -> PackingManifest:
    """
    Read and validate a YAML manifest.

    Raises:
        FileNotFoundError: the file does not exist.
        pydantic.ValidationError: the content is not a valid manifest.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return PackingManifest.model_validate(data)


def build_packer(manifest: PackingManifest, tracer: Optional[Tracer] = None) -> BasePacker:
    """Instantiate the manifest's packer on an empty bin."""
    s = manifest.packer
    b = manifest.bin
    extra = {}
    if s.algorithm == "maxrects":
        extra = {"allow_flip": s.allow_flip, "support_threshold": s.support_threshold}
    return get_packer(
        s.algorithm, b.width, b.height, b.depth, verify=s.verify, tracer=tracer, **extra,
    )
