"""
flowgrid/scoring/relationships.py - Closeness scoring

Compares each rated activity pair's placed-zone distance with the
threshold for its rating.

Thresholds, in grid cells between zone centres:
    MUST_BE_CLOSE   pass when d <= 5
    PREFER_CLOSE    pass when d <= 8
    KEEP_APART      pass when d >= 10
    DOES_NOT_MATTER not scored
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import ClosenessRating, Severity
from flowgrid.core.relationships import scorable_pairs
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.geometry.grid import distance, round_half_up

from .factors import Flag, ScoreFactor
from .findings import ClosenessViolation

__all__ = [
    'PairEvaluation',
    'RelationshipScorer',
]

logger = logging.getLogger(__name__)

_VIOLATION_SEVERITY = {
    ClosenessRating.MUST_BE_CLOSE: Severity.HIGH,
    ClosenessRating.KEEP_APART: Severity.MEDIUM,
    ClosenessRating.PREFER_CLOSE: Severity.LOW,
}

_RECOMMENDATIONS = {
    ClosenessRating.MUST_BE_CLOSE: "Move these zones next to each other.",
    ClosenessRating.PREFER_CLOSE: "Move these zones closer together if space allows.",
    ClosenessRating.KEEP_APART: "Separate these zones further.",
}


@dataclass(frozen=True)
class PairEvaluation:
    """Result for one placed, rated activity pair."""
    activity_a_id: str
    activity_b_id: str
    rating: ClosenessRating
    distance: int
    threshold: int
    passed: bool
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_a_id": self.activity_a_id,
            "activity_b_id": self.activity_b_id,
            "rating": self.rating.value,
            "distance": self.distance,
            "threshold": self.threshold,
            "passed": self.passed,
            "weight": self.weight,
        }


class RelationshipScorer:
    """Scores closeness preferences against placed zones."""

    NAME = "closeness"
    LABEL = "Closeness Compliance: Are related zones near each other?"

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def threshold(self, rating: ClosenessRating) -> Optional[int]:
        if rating == ClosenessRating.MUST_BE_CLOSE:
            return self.config.must_be_close_max
        if rating == ClosenessRating.PREFER_CLOSE:
            return self.config.prefer_close_max
        if rating == ClosenessRating.KEEP_APART:
            return self.config.keep_apart_min
        return None

    def passes(self, rating: ClosenessRating, d: int) -> bool:
        """Does distance d satisfy the rating?"""
        limit = self.threshold(rating)
        if limit is None:
            return True
        if rating == ClosenessRating.KEEP_APART:
            return d >= limit
        return d <= limit

    def evaluate_pairs(self, snapshot: LayoutSnapshot) -> List[PairEvaluation]:
        """
        Evaluate every scorable pair that has both zones placed and a
        rating other than DOES_NOT_MATTER.
        """
        index = snapshot.relationship_index()
        results = []

        for a, b in scorable_pairs(snapshot.activities):
            rating = index.rating(a.id, b.id)
            if rating == ClosenessRating.DOES_NOT_MATTER:
                continue
            zone_a = snapshot.zone_for(a.id)
            zone_b = snapshot.zone_for(b.id)
            if zone_a is None or zone_b is None:
                continue

            d = distance(zone_a.rect, zone_b.rect)
            results.append(PairEvaluation(
                activity_a_id=a.id,
                activity_b_id=b.id,
                rating=rating,
                distance=d,
                threshold=self.threshold(rating),
                passed=self.passes(rating, d),
                weight=self.config.rating_weights.get(rating, 0.0),
            ))

        logger.debug(f"Evaluated {len(results)} placed closeness pairs")
        return results

    def score(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        max_score = self.config.budget(self.NAME)
        evaluations = self.evaluate_pairs(snapshot)

        applicable = sum(e.weight for e in evaluations)
        passing = sum(e.weight for e in evaluations if e.passed)
        score = round_half_up(max_score * passing / applicable) if applicable > 0 else max_score

        details = []
        flags = []
        for e in evaluations:
            if e.passed:
                continue
            a = snapshot.activity(e.activity_a_id)
            b = snapshot.activity(e.activity_b_id)
            violation = ClosenessViolation(
                activity_a_id=e.activity_a_id,
                activity_b_id=e.activity_b_id,
                activity_a_name=a.name,
                activity_b_name=b.name,
                rating=e.rating,
                distance=e.distance,
                threshold=e.threshold,
            )
            details.append(violation)
            flags.append(Flag(
                id=f"closeness-{e.activity_a_id}-{e.activity_b_id}",
                severity=_VIOLATION_SEVERITY[e.rating],
                message=_violation_message(violation),
                recommendation=_RECOMMENDATIONS[e.rating],
                points_deduction=int(e.weight),
            ))

        violations = len(details)
        return ScoreFactor(
            name=self.NAME,
            label=self.LABEL,
            score=score,
            max_score=max_score,
            display=(
                f"{violations} relationship violation(s)" if violations
                else "All relationships satisfied"
            ),
            details=details,
            flags=flags,
            suggestion=(
                "Adjust zone placement to satisfy closeness relationships" if violations
                else "Closeness relationships are well satisfied"
            ),
        )


def _violation_message(v: ClosenessViolation) -> str:
    if v.rating == ClosenessRating.KEEP_APART:
        return (
            f"{v.activity_a_name} and {v.activity_b_name} should be kept apart "
            f"(only {v.distance} squares apart)"
        )
    phrase = "must be close" if v.rating == ClosenessRating.MUST_BE_CLOSE else "prefer close"
    return f"{v.activity_a_name} and {v.activity_b_name} {phrase} ({v.distance} squares apart)"
