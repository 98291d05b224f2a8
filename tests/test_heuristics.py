"""
Tests for the free-region scoring rules and the guillotine split rules.

Run with:
    python -m pytest tests/test_heuristics.py -v
"""

import pytest

from binpack3d.algorithms.heuristics import (
    FreeRectChoiceHeuristic,
    GuillotineSplitHeuristic,
    score_best_area_fit,
    score_best_long_side_fit,
    score_best_short_side_fit,
    score_by_heuristic,
    split_horizontally,
)
from binpack3d.core.models import FreeRegion, PlacedBox


REGION = FreeRegion(0, 0, 0, 100, 50, 40)


class TestScores:
    def test_best_area_fit_is_leftover_volume(self):
        assert score_best_area_fit(10, 10, 10, REGION) == 100 * 50 * 40 - 1000

    def test_short_and_long_side(self):
        # Leftovers: 90, 30, 20
        assert score_best_short_side_fit(10, 20, 20, REGION) == 20
        assert score_best_long_side_fit(10, 20, 20, REGION) == 90

    @pytest.mark.parametrize("best, worst", [
        (FreeRectChoiceHeuristic.BEST_AREA_FIT, FreeRectChoiceHeuristic.WORST_AREA_FIT),
        (FreeRectChoiceHeuristic.BEST_SHORT_SIDE_FIT, FreeRectChoiceHeuristic.WORST_SHORT_SIDE_FIT),
        (FreeRectChoiceHeuristic.BEST_LONG_SIDE_FIT, FreeRectChoiceHeuristic.WORST_LONG_SIDE_FIT),
    ])
    def test_worst_is_negated_best(self, best, worst):
        b = score_by_heuristic(30, 20, 10, REGION, best)
        w = score_by_heuristic(30, 20, 10, REGION, worst)
        assert w == -b

    def test_exact_fit_scores_zero(self):
        for choice in FreeRectChoiceHeuristic:
            assert score_by_heuristic(100, 50, 40, REGION, choice) == 0

    def test_unknown_choice_raises(self):
        with pytest.raises(ValueError, match="choice heuristic"):
            score_by_heuristic(1, 1, 1, REGION, "baf")


class TestSplitRules:
    # Placing 30x20 in a 100x50 region leaves w=70 along x and h=30 along y.
    PLACED = PlacedBox(0, 0, 0, 30, 20, 40)

    @pytest.mark.parametrize("method, expected", [
        (GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS, False),
        (GuillotineSplitHeuristic.LONGER_LEFTOVER_AXIS, True),
        (GuillotineSplitHeuristic.MINIMIZE_AREA, False),
        (GuillotineSplitHeuristic.MAXIMIZE_AREA, True),
        (GuillotineSplitHeuristic.SHORTER_AXIS, False),
        (GuillotineSplitHeuristic.LONGER_AXIS, True),
    ])
    def test_cut_direction(self, method, expected):
        assert split_horizontally(REGION, self.PLACED, method) is expected

    def test_equal_leftovers_cut_horizontally(self):
        region = FreeRegion(0, 0, 0, 50, 50, 10)
        placed = PlacedBox(0, 0, 0, 20, 20, 10)
        assert split_horizontally(region, placed, GuillotineSplitHeuristic.SHORTER_LEFTOVER_AXIS)

    def test_unknown_method_raises(self):
        with pytest.raises(ValueError, match="split heuristic"):
            split_horizontally(REGION, self.PLACED, "slas")
