"""Packing run driver: feeds a manifest's requests to a packer and records the outcome."""

from __future__ import annotations

import argparse
import asyncio
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from binpack3d.algorithms.base_packer import BasePacker
from binpack3d.core.models import BoxSize, PlacedBox
from binpack3d.monitoring.metrics import (
    BinMetrics,
    RunMetrics,
    export_to_csv,
    export_to_json,
    print_summary,
)
from binpack3d.monitoring.telegram_notifier import (
    format_bin_summary,
    format_final_summary,
    format_run_start,
    send_telegram,
)
from binpack3d.monitoring.trace import NullTracer, StepTracer, Tracer
from binpack3d.runner.manifest import PackingManifest, build_packer, load_manifest


@dataclass(frozen=True)
class StepRecord:
    """Outcome of one request.  ``placement`` is None when the box was rejected."""

    step: int
    request: BoxSize
    placement: PlacedBox | None
    occupancy_after: float
    elapsed_ms: float

    @property
    def success(self) -> bool:
        return self.placement is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "request": [self.request.width, self.request.height, self.request.depth],
            "placement": self.placement.to_dict() if self.placement else None,
            "occupancy_after": self.occupancy_after,
            "elapsed_ms": self.elapsed_ms,
        }


class PackingRunner:
    """
    Orchestrates one packing run described by a manifest.

    Builds the packer, feeds it every request in order, collects
    per-step records and run metrics, and optionally saves results and
    sends Telegram updates.
    """

    def __init__(
        self,
        manifest: PackingManifest,
        results_dir: Path | str | None = None,
        send_telegram_updates: bool = False,
        tracer: Tracer | None = None,
    ):
        """
        Initialize the runner.

        Args:
            manifest: Validated run description
            results_dir: Directory to save results (default: None, nothing saved)
            send_telegram_updates: Whether to send Telegram notifications
            tracer: Trace sink for the packer (default: a printing StepTracer
                when the manifest is verbose, otherwise a NullTracer)
        """
        self.manifest = manifest
        self.algorithm = manifest.packer.algorithm
        self.results_dir = Path(results_dir) if results_dir is not None else None
        self.send_telegram_updates = send_telegram_updates
        if tracer is None:
            tracer = StepTracer(verbose=True) if manifest.packer.verbose else NullTracer()
        self.tracer = tracer
        self.steps: list[StepRecord] = []

    def pack(self, requests: Sequence[BoxSize] | None = None) -> BasePacker:
        """
        Feed requests one at a time into a fresh packer.

        Args:
            requests: Requests to feed (default: the manifest's request list)

        Returns:
            The packer in its final state; ``self.steps`` holds one record per request
        """
        if requests is None:
            requests = self.manifest.requests()
        packer = build_packer(self.manifest, tracer=self.tracer)
        insert_kwargs = self.manifest.packer.insert_kwargs()

        self.steps = []
        for i, req in enumerate(requests):
            t0 = time.perf_counter()
            placed = packer.insert(req.width, req.height, req.depth, **insert_kwargs)
            elapsed_ms = (time.perf_counter() - t0) * 1000.0

            self.steps.append(StepRecord(
                step=i,
                request=req,
                placement=None if placed.is_empty else placed,
                occupancy_after=packer.occupancy(),
                elapsed_ms=elapsed_ms,
            ))
        return packer

    async def run(self, run_id: str | None = None) -> RunMetrics:
        """
        Run the manifest end to end.

        Returns:
            RunMetrics with the single bin's results

        Flow:
            1. Send start notification
            2. Pack every request
            3. Record bin metrics and mark the run complete
            4. Save results and send the final summary
        """
        if run_id is None:
            run_id = f"run_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        metrics = RunMetrics(run_id=run_id, algorithm=self.algorithm)

        requests = self.manifest.requests()
        b = self.manifest.bin

        if self.send_telegram_updates:
            await send_telegram(format_run_start(
                algorithm=self.algorithm,
                boxes=len(requests),
                bin_dims=(b.width, b.height, b.depth),
            ))

        packer = self.pack(requests)
        bin_metric = self._create_bin_metric(packer, bin_id=0)
        metrics.add_bin(bin_metric)
        metrics.mark_complete()

        if self.results_dir is not None:
            self._save_results(metrics)

        if self.send_telegram_updates:
            await send_telegram(format_bin_summary(
                bin_id=bin_metric.bin_id,
                boxes_placed=bin_metric.boxes_placed,
                boxes_rejected=bin_metric.boxes_rejected,
                occupancy=bin_metric.occupancy,
                algorithm=self.algorithm,
            ))
            await send_telegram(format_final_summary(
                total_bins=metrics.total_bins,
                total_boxes=metrics.total_boxes,
                avg_occupancy=metrics.avg_occupancy,
                runtime_seconds=metrics.runtime_seconds,
            ))

        return metrics

    def _create_bin_metric(self, packer: BasePacker, bin_id: int) -> BinMetrics:
        rejected = sum(1 for s in self.steps if not s.success)
        return BinMetrics(
            bin_id=bin_id,
            algorithm=self.algorithm,
            boxes_placed=len(packer.used_boxes),
            boxes_rejected=rejected,
            occupancy=packer.occupancy(),
            volume_used=packer.used_volume(),
            volume_total=packer.bin_volume,
        )

    def _save_results(self, metrics: RunMetrics) -> None:
        """
        Save metrics to JSON and CSV, and the step log to ``<run_id>_steps.json``.
        """
        assert self.results_dir is not None
        json_path = self.results_dir / f"{metrics.run_id}.json"
        csv_path = self.results_dir / f"{metrics.run_id}_bins.csv"
        steps_path = self.results_dir / f"{metrics.run_id}_steps.json"

        export_to_json(metrics, json_path)
        export_to_csv(metrics, csv_path)
        with steps_path.open("w") as f:
            json.dump([s.to_dict() for s in self.steps], f, indent=2)

        print(f"Saved results to {json_path}, {csv_path} and {steps_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a 3D box packing manifest")
    parser.add_argument("manifest", type=Path, help="Path to the YAML manifest")
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="Directory to save results (default: don't save)",
    )
    parser.add_argument(
        "--notify",
        action="store_true",
        help="Send Telegram notifications (needs TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print every traced packer step",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Console entry point (``binpack3d-run``).

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    manifest = load_manifest(args.manifest)
    if args.verbose:
        manifest.packer.verbose = True

    runner = PackingRunner(
        manifest,
        results_dir=args.results_dir,
        send_telegram_updates=args.notify,
    )
    metrics = asyncio.run(runner.run())
    print(print_summary(metrics))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
