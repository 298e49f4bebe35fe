"""
flowgrid/scoring/pipeline.py - Layout scoring pipeline

score_layout() is a pure function of a LayoutSnapshot. It runs every
factor scorer in a fixed order and aggregates the results. The
snapshot's dismissed flags are not consulted here.
"""

from __future__ import annotations
from typing import List, Optional
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.snapshot import LayoutSnapshot

from .aggregator import ScoreAggregator
from .corridors import PathClearanceScorer
from .factors import LayoutScore, ScoreFactor
from .flow import DeparturePriorityScorer, FlowDistanceScorer
from .relationships import RelationshipScorer
from .safety import SafetyRuleEngine
from .space import SpaceUtilizationScorer

__all__ = [
    'FACTOR_ORDER',
    'score_factors',
    'score_layout',
]

logger = logging.getLogger(__name__)

FACTOR_ORDER = (
    "flow_distance",
    "closeness",
    "departure_priority",
    "space_utilization",
    "path_clearance",
    "buffer_capacity",
    "safety",
)


def score_factors(
    snapshot: LayoutSnapshot,
    config: Optional[ScoringConfig] = None,
) -> List[ScoreFactor]:
    """Every factor for the snapshot, in FACTOR_ORDER."""
    config = config or DEFAULT_CONFIG
    utilization, buffer = SpaceUtilizationScorer(config).score(snapshot)

    by_name = {
        "flow_distance": FlowDistanceScorer(config).score(snapshot),
        "closeness": RelationshipScorer(config).score(snapshot),
        "departure_priority": DeparturePriorityScorer(config).score(snapshot),
        "space_utilization": utilization,
        "path_clearance": PathClearanceScorer(config).score(snapshot),
        "buffer_capacity": buffer,
        "safety": SafetyRuleEngine(config).score(snapshot),
    }
    return [by_name[name] for name in FACTOR_ORDER]


def score_layout(
    snapshot: LayoutSnapshot,
    config: Optional[ScoringConfig] = None,
) -> LayoutScore:
    """
    Score a layout.

    Args:
        snapshot: Immutable layout contents
        config: Scoring parameters (defaults to DEFAULT_CONFIG)

    Returns:
        LayoutScore with factors in FACTOR_ORDER
    """
    result = ScoreAggregator().aggregate(score_factors(snapshot, config))
    logger.info(
        f"Layout scored {result.percentage}% ({result.total}/{result.max_total}), "
        f"{len(result.flags)} flag(s)"
    )
    return result
