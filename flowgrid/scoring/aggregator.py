"""
flowgrid/scoring/aggregator.py - Score aggregation

Reduces factor scores to one LayoutScore. Stateless: identical factors
always give an identical result.
"""

from __future__ import annotations
from typing import List, Sequence
import logging

from flowgrid.geometry.grid import round_half_up

from .factors import LayoutScore, ScoreFactor

__all__ = [
    'VERDICT_BANDS',
    'verdict_for',
    'ScoreAggregator',
]

logger = logging.getLogger(__name__)


# Lower bound (inclusive) -> verdict, checked top-down
VERDICT_BANDS = (
    (90, "Excellent: this layout is well optimized"),
    (80, "Good: minor improvements possible"),
    (60, "Fair: review the suggestions below"),
    (0, "Needs work: several issues to address"),
)


def verdict_for(percentage: int) -> str:
    for floor, verdict in VERDICT_BANDS:
        if percentage >= floor:
            return verdict
    return VERDICT_BANDS[-1][1]


class ScoreAggregator:
    """Combines factors into a LayoutScore."""

    def aggregate(self, factors: Sequence[ScoreFactor]) -> LayoutScore:
        factors: List[ScoreFactor] = list(factors)
        total = sum(f.score for f in factors)
        max_total = sum(f.max_score for f in factors)
        percentage = round_half_up(100 * total / max_total) if max_total > 0 else 0

        score = LayoutScore(
            percentage=percentage,
            total=total,
            max_total=max_total,
            factors=factors,
            verdict=verdict_for(percentage),
        )
        logger.debug(
            f"Aggregated {len(factors)} factors: {total}/{max_total} ({percentage}%), "
            f"{len(score.flags)} flag(s)"
        )
        return score
