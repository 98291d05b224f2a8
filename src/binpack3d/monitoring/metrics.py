"""Metrics tracking and export for packing runs.

Provides dataclasses for tracking per-bin and per-run metrics and
utilities for exporting results to JSON and CSV formats.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BinMetrics:
    """Metrics for a single packed bin.

    Attributes:
        bin_id: Identifier of the bin within its run.
        algorithm: Packer name used for this bin.
        boxes_placed: Number of boxes successfully placed.
        boxes_rejected: Number of requests that came back as insufficient space.
        occupancy: The packer's own occupancy ratio (0-1).
        volume_used: Total volume of the placed boxes.
        volume_total: Bin volume.
        closed_at: Timestamp when the bin was finished.
    """

    bin_id: int
    algorithm: str
    boxes_placed: int
    boxes_rejected: int
    occupancy: float
    volume_used: float
    volume_total: float
    closed_at: datetime = field(default_factory=_utcnow)

    @property
    def fill_rate(self) -> float:
        """Volumetric fill rate, independent of the packer's occupancy metric."""
        if self.volume_total == 0:
            return 0.0
        return self.volume_used / self.volume_total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with ISO timestamp.

        Example:
            >>> bm = BinMetrics(0, "guillotine", 25, 3, 0.71, 710.0, 1000.0)
            >>> bm.to_dict()["boxes_placed"]
            25
        """
        d = asdict(self)
        d["closed_at"] = self.closed_at.isoformat()
        return d


@dataclass
class RunMetrics:
    """Aggregate metrics for a whole packing run.

    Attributes:
        run_id: Unique identifier for the run.
        algorithm: Packer name used.
        total_bins: Number of bins recorded.
        total_boxes: Total number of boxes placed.
        total_rejected: Total number of rejected requests.
        avg_occupancy: Mean occupancy across bins.
        median_occupancy: Median occupancy across bins.
        min_occupancy: Minimum occupancy across bins.
        max_occupancy: Maximum occupancy across bins.
        runtime_seconds: Total runtime in seconds.
        started_at: Run start timestamp.
        completed_at: Run completion timestamp (None while running).
        bin_metrics: Per-bin metrics.
    """

    run_id: str
    algorithm: str
    total_bins: int = 0
    total_boxes: int = 0
    total_rejected: int = 0
    avg_occupancy: float = 0.0
    median_occupancy: float = 0.0
    min_occupancy: float = 0.0
    max_occupancy: float = 0.0
    runtime_seconds: float = 0.0
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    bin_metrics: list[BinMetrics] = field(default_factory=list)

    def add_bin(self, metrics: BinMetrics) -> None:
        """Add one bin's metrics to the run.

        Example:
            >>> rm = RunMetrics("run_001", "maxrects")
            >>> rm.add_bin(BinMetrics(0, "maxrects", 25, 0, 0.8, 1.0, 2.0))
            >>> rm.total_boxes
            25
        """
        self.bin_metrics.append(metrics)
        self.total_bins += 1
        self.total_boxes += metrics.boxes_placed
        self.total_rejected += metrics.boxes_rejected
        self._recalculate_stats()

    def mark_complete(self) -> None:
        """Mark the run as complete and compute the runtime."""
        self.completed_at = _utcnow()
        self.runtime_seconds = (self.completed_at - self.started_at).total_seconds()

    def _recalculate_stats(self) -> None:
        if not self.bin_metrics:
            return
        occ = np.array([b.occupancy for b in self.bin_metrics], dtype=np.float64)
        self.avg_occupancy = float(np.mean(occ))
        self.median_occupancy = float(np.median(occ))
        self.min_occupancy = float(np.min(occ))
        self.max_occupancy = float(np.max(occ))

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["started_at"] = self.started_at.isoformat()
        d["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        d["bin_metrics"] = [b.to_dict() for b in self.bin_metrics]
        return d

    def to_summary_dict(self) -> dict[str, Any]:
        """Aggregate metrics only (no per-bin list)."""
        d = self.to_dict()
        del d["bin_metrics"]
        return d


CSV_FIELDS = [
    "bin_id", "algorithm", "boxes_placed", "boxes_rejected",
    "occupancy", "volume_used", "volume_total", "closed_at",
]


def export_to_json(metrics: RunMetrics, output_path: Path | str, include_bins: bool = True) -> None:
    """Export run metrics to a JSON file.

    Args:
        metrics: RunMetrics instance to export.
        output_path: Path to output JSON file.
        include_bins: If True, include per-bin metrics. If False, summary only.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = metrics.to_dict() if include_bins else metrics.to_summary_dict()

    with output_path.open("w") as f:
        json.dump(data, f, indent=2)


def export_to_csv(metrics: RunMetrics, output_path: Path | str) -> None:
    """Export per-bin metrics to a CSV file (header only when empty)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for b in metrics.bin_metrics:
            writer.writerow(b.to_dict())


def print_summary(metrics: RunMetrics) -> str:
    """Generate a human-readable summary of run metrics.

    Example:
        >>> rm = RunMetrics("run_001", "guillotine")
        >>> "Run: run_001" in print_summary(rm)
        True
    """
    lines = [
        "=" * 60,
        f"Run: {metrics.run_id}",
        f"Algorithm: {metrics.algorithm}",
        "=" * 60,
        f"Bins: {metrics.total_bins}",
        f"Boxes placed: {metrics.total_boxes}",
        f"Boxes rejected: {metrics.total_rejected}",
        "",
        "Occupancy:",
        f"  Average: {metrics.avg_occupancy:.2%}",
        f"  Median:  {metrics.median_occupancy:.2%}",
        f"  Min:     {metrics.min_occupancy:.2%}",
        f"  Max:     {metrics.max_occupancy:.2%}",
        "",
        f"Runtime: {metrics.runtime_seconds:.3f} seconds",
        f"Started:   {metrics.started_at.isoformat()}",
        f"Completed: {metrics.completed_at.isoformat() if metrics.completed_at else 'In Progress'}",
        "=" * 60,
    ]
    return "\n".join(lines)
