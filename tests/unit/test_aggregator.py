"""
Unit tests for scoring/aggregator.py

Tests ScoreAggregator percentage, verdict bands and flag pooling.
"""

import pytest

from flowgrid.core.enums import Severity
from flowgrid.scoring.aggregator import ScoreAggregator, verdict_for
from flowgrid.scoring.factors import Flag, ScoreFactor


def _factor(name, score, max_score, flags=None):
    return ScoreFactor(name=name, label=name.title(), score=score, max_score=max_score, flags=flags or [])


class TestVerdicts:
    """Test verdict bands."""

    @pytest.mark.parametrize("percentage,prefix", [
        (100, "Excellent"),
        (90, "Excellent"),
        (89, "Good"),
        (80, "Good"),
        (79, "Fair"),
        (60, "Fair"),
        (59, "Needs work"),
        (0, "Needs work"),
    ])
    def test_bands(self, percentage, prefix):
        assert verdict_for(percentage).startswith(prefix)


class TestScoreAggregator:
    """Test ScoreAggregator."""

    def test_totals(self):
        result = ScoreAggregator().aggregate([
            _factor("closeness", 20, 20),
            _factor("safety", 7, 15),
        ])
        assert result.total == 27
        assert result.max_total == 35
        assert result.percentage == 77
        assert result.verdict.startswith("Fair")

    def test_percentage_rounds_half_up(self):
        result = ScoreAggregator().aggregate([_factor("a", 1, 8)])
        assert result.percentage == 13

    def test_zero_max_total(self):
        result = ScoreAggregator().aggregate([_factor("a", 0, 0)])
        assert result.percentage == 0
        assert result.verdict.startswith("Needs work")

    def test_no_factors(self):
        result = ScoreAggregator().aggregate([])
        assert result.total == 0
        assert result.percentage == 0
        assert result.factors == []

    def test_flags_pooled_in_factor_order(self):
        low = Flag(id="x", severity=Severity.LOW, message="x")
        high = Flag(id="y", severity=Severity.HIGH, message="y")
        result = ScoreAggregator().aggregate([
            _factor("first", 1, 2, [low]),
            _factor("second", 1, 2, [high]),
        ])
        assert [f.id for f in result.flags] == ["x", "y"]

    def test_idempotent(self):
        factors = [_factor("a", 3, 5), _factor("b", 9, 10)]
        aggregator = ScoreAggregator()
        assert aggregator.aggregate(factors).to_dict() == aggregator.aggregate(factors).to_dict()

    def test_factor_lookup(self):
        result = ScoreAggregator().aggregate([_factor("a", 3, 5)])
        assert result.factor("a").score == 3
        assert result.factor("missing") is None

    def test_default_display(self):
        assert _factor("a", 3, 5).to_dict()["display"] == "3/5"
