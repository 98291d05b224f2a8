"""
Tests for manifests, request datasets and the packing run driver.

Run with:
    python -m pytest tests/test_runner.py -v
"""

import json

import pytest
import yaml
from pydantic import ValidationError

from binpack3d.algorithms.guillotine import GuillotinePacker
from binpack3d.algorithms.heuristics import (
    FreeRectChoiceHeuristic,
    GuillotineSplitHeuristic,
)
from binpack3d.algorithms.maxrects import MaxRectsPacker
from binpack3d.core.models import BoxSize
from binpack3d.monitoring.trace import NullTracer, StepTracer
from binpack3d.runner.dataset import (
    ORDERING_STRATEGIES,
    footprint_sorted_order,
    generate_boxes,
    get_ordering_strategy,
    random_order,
    volume_sorted_order,
)
from binpack3d.runner.experiment import PackingRunner, StepRecord, main
from binpack3d.runner.manifest import (
    PackerSettings,
    PackingManifest,
    build_packer,
    load_manifest,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def guillotine_manifest_data():
    """Four 500x500 boxes fill a 1000x1000x100 bin; the fifth is rejected."""
    return {
        "bin": {"width": 1000, "height": 1000, "depth": 100},
        "packer": {
            "algorithm": "guillotine",
            "choice": "WORST_LONG_SIDE_FIT",
            "split": "slas",
            "verify": True,
        },
        "boxes": [{"width": 500, "height": 500, "depth": 100, "quantity": 5}],
    }


@pytest.fixture
def manifest_file(tmp_path, guillotine_manifest_data):
    path = tmp_path / "manifest.yaml"
    path.write_text(yaml.safe_dump(guillotine_manifest_data))
    return path


@pytest.fixture(autouse=True)
def no_telegram(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)


# ---------------------------------------------------------------------------
# 1. Datasets
# ---------------------------------------------------------------------------

class TestDataset:
    def test_generation_is_deterministic(self):
        assert generate_boxes(20, seed=7) == generate_boxes(20, seed=7)

    def test_extents_in_range(self):
        boxes = generate_boxes(200, seed=3, min_dim=10, max_dim=20)
        assert len(boxes) == 200
        for b in boxes:
            for v in (b.width, b.height, b.depth):
                assert isinstance(v, int)
                assert 10 <= v <= 20

    def test_random_order_is_a_permutation(self):
        boxes = generate_boxes(30, seed=1)
        shuffled = random_order(boxes, seed=2)
        assert sorted(shuffled, key=repr) == sorted(boxes, key=repr)
        assert random_order(boxes, seed=2) == shuffled

    def test_volume_sorted(self):
        boxes = [BoxSize(1, 1, 1), BoxSize(3, 3, 3), BoxSize(2, 2, 2)]
        assert [b.width for b in volume_sorted_order(boxes)] == [3, 2, 1]

    def test_footprint_sorted(self):
        boxes = [BoxSize(1, 1, 50), BoxSize(4, 4, 1), BoxSize(2, 2, 9)]
        assert [b.width for b in footprint_sorted_order(boxes)] == [4, 2, 1]

    def test_lookup(self):
        assert get_ordering_strategy("volume_sorted") is volume_sorted_order
        assert set(ORDERING_STRATEGIES) >= {"as_given", "random", "volume_sorted"}
        with pytest.raises(ValueError, match="Unknown ordering strategy"):
            get_ordering_strategy("tallest_first")


# ---------------------------------------------------------------------------
# 2. Manifests
# ---------------------------------------------------------------------------

class TestManifest:
    def test_load(self, manifest_file):
        m = load_manifest(manifest_file)
        assert m.packer.algorithm == "guillotine"
        assert m.packer.choice is FreeRectChoiceHeuristic.WORST_LONG_SIDE_FIT
        assert m.packer.split is GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS
        assert len(m.requests()) == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "nope.yaml")

    def test_defaults(self):
        m = PackingManifest.model_validate({"bin": {"width": 1, "height": 1, "depth": 1}})
        assert m.packer.algorithm == "maxrects"
        assert m.packer.support_threshold == 0.8
        assert m.requests() == []

    @pytest.mark.parametrize("patch", [
        {"bin": {"width": 0, "height": 1, "depth": 1}},
        {"packer": {"algorithm": "skyline"}},
        {"packer": {"support_threshold": 1.2}},
        {"packer": {"choice": "best_fit_ever"}},
        {"boxes": [{"width": 1, "height": -1, "depth": 1}]},
        {"boxes": [{"width": 1, "height": 1, "depth": 1, "quantity": 0}]},
        {"ordering": "tallest_first"},
        {"generate": {"count": 5, "min_dim": 50, "max_dim": 10}},
    ])
    def test_invalid(self, guillotine_manifest_data, patch):
        data = {**guillotine_manifest_data, **patch}
        with pytest.raises(ValidationError):
            PackingManifest.model_validate(data)

    def test_generated_and_ordered_requests(self, guillotine_manifest_data):
        data = {
            **guillotine_manifest_data,
            "generate": {"count": 10, "seed": 5},
            "ordering": "volume_sorted",
        }
        sizes = PackingManifest.model_validate(data).requests()
        assert len(sizes) == 15
        volumes = [s.volume for s in sizes]
        assert volumes == sorted(volumes, reverse=True)

    def test_random_ordering_follows_generator_seed(self, guillotine_manifest_data):
        data = {
            **guillotine_manifest_data,
            "generate": {"count": 20, "seed": 5},
            "ordering": "random",
        }
        m = PackingManifest.model_validate(data)
        assert m.ordering_seed() == 5
        unordered = PackingManifest.model_validate({**data, "ordering": None}).requests()
        assert m.requests() == random_order(unordered, seed=5)
        assert PackingManifest.model_validate(data).requests() == m.requests()

    def test_explicit_seed_overrides_generator_seed(self, guillotine_manifest_data):
        data = {
            **guillotine_manifest_data,
            "generate": {"count": 20, "seed": 5},
            "ordering": "random",
            "seed": 9,
        }
        m = PackingManifest.model_validate(data)
        assert m.ordering_seed() == 9
        unordered = PackingManifest.model_validate({**data, "ordering": None}).requests()
        assert m.requests() == random_order(unordered, seed=9)

    def test_insert_kwargs(self):
        assert PackerSettings(algorithm="maxrects").insert_kwargs() == {}
        kw = PackerSettings(algorithm="guillotine", merge=False).insert_kwargs()
        assert kw["merge"] is False
        assert kw["choice"] is FreeRectChoiceHeuristic.BEST_AREA_FIT

    def test_build_packer(self, guillotine_manifest_data):
        m = PackingManifest.model_validate(guillotine_manifest_data)
        packer = build_packer(m)
        assert isinstance(packer, GuillotinePacker)
        assert packer.verify is True

        data = {**guillotine_manifest_data,
                "packer": {"algorithm": "maxrects", "support_threshold": 0.6, "allow_flip": False}}
        packer = build_packer(PackingManifest.model_validate(data))
        assert isinstance(packer, MaxRectsPacker)
        assert packer.support_threshold == 0.6
        assert packer.allow_flip is False


# ---------------------------------------------------------------------------
# 3. Runner
# ---------------------------------------------------------------------------

class TestRunner:
    def test_quiet_run_keeps_no_trace(self, manifest_file):
        runner = PackingRunner(load_manifest(manifest_file))
        runner.pack()
        assert isinstance(runner.tracer, NullTracer)

    def test_verbose_run_traces(self, guillotine_manifest_data, capsys):
        data = {**guillotine_manifest_data,
                "packer": {**guillotine_manifest_data["packer"], "verbose": True}}
        runner = PackingRunner(PackingManifest.model_validate(data))
        runner.pack()
        assert isinstance(runner.tracer, StepTracer)
        assert len(runner.tracer.events("placed")) == 4
        assert "placed" in capsys.readouterr().out

    def test_injected_tracer_used(self, manifest_file):
        tracer = StepTracer()
        runner = PackingRunner(load_manifest(manifest_file), tracer=tracer)
        runner.pack()
        assert runner.tracer is tracer
        assert len(tracer.events("placed")) == 4

    def test_pack_records_every_step(self, manifest_file):
        runner = PackingRunner(load_manifest(manifest_file))
        packer = runner.pack()
        assert len(runner.steps) == 5
        assert all(isinstance(s, StepRecord) for s in runner.steps)
        assert [s.success for s in runner.steps] == [True, True, True, True, False]
        assert runner.steps[-1].placement is None
        assert packer.occupancy() == pytest.approx(1.0)

    def test_step_record_dict(self):
        rec = StepRecord(0, BoxSize(1, 2, 3), None, 0.0, 0.1)
        assert rec.to_dict()["placement"] is None
        assert rec.to_dict()["request"] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_run_collects_metrics_and_saves(self, manifest_file, tmp_path):
        results = tmp_path / "results"
        runner = PackingRunner(
            load_manifest(manifest_file),
            results_dir=results,
            send_telegram_updates=True,
        )
        metrics = await runner.run(run_id="run_test")

        assert metrics.total_bins == 1
        assert metrics.total_boxes == 4
        assert metrics.total_rejected == 1
        assert metrics.avg_occupancy == pytest.approx(1.0)
        assert metrics.completed_at is not None

        assert (results / "run_test.json").exists()
        assert (results / "run_test_bins.csv").exists()
        steps = json.loads((results / "run_test_steps.json").read_text())
        assert len(steps) == 5
        assert steps[0]["placement"] == {"position": [0, 0, 0], "dims": [500, 500, 100]}

    @pytest.mark.asyncio
    async def test_maxrects_run(self):
        m = PackingManifest.model_validate({
            "bin": {"width": 1500, "height": 1500, "depth": 800},
            "packer": {"algorithm": "maxrects", "verify": True},
            "generate": {"count": 40, "seed": 11, "min_dim": 100, "max_dim": 500},
            "ordering": "footprint_sorted",
        })
        metrics = await PackingRunner(m).run()
        assert metrics.total_boxes + metrics.total_rejected == 40
        assert 0.0 < metrics.avg_occupancy <= 1.0

    def test_main(self, manifest_file, tmp_path, capsys):
        assert main([str(manifest_file), "--results-dir", str(tmp_path / "out")]) == 0
        out = capsys.readouterr().out
        assert "Boxes placed: 4" in out
        assert "Boxes rejected: 1" in out
