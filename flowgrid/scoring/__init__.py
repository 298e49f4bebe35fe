"""
flowgrid/scoring - Layout scoring.

Factor scorers, the safety rule engine, aggregation and presentation
helpers. score_layout() is the entry point.
"""

# Records
from .findings import (
    Finding,
    ClosenessViolation,
    SizeMismatch,
    LaneSizing,
    AreaShare,
    UtilizationSummary,
    SafetyFinding,
    CorridorFinding,
    DepartureFinding,
    FlowRoute,
)
from .factors import Flag, ScoreFactor, LayoutScore

# Scorers
from .relationships import PairEvaluation, RelationshipScorer
from .space import (
    SpaceUtilizationScorer,
    available_squares,
    staging_budget,
    suggested_squares,
    suggested_rect,
    evaluate_lane_fit,
)
from .corridors import PathClearanceScorer
from .flow import FlowDistanceScorer, DeparturePriorityScorer
from .safety import SafetyRuleEngine, SafetyReport, RuleResult, SAFETY_RULES

# Aggregation
from .aggregator import ScoreAggregator, verdict_for
from .pipeline import FACTOR_ORDER, score_factors, score_layout

# Presentation
from .rendering import render_finding, render_details, resolve_flags, active_flags, sort_flags

__all__ = [
    # Records
    'Finding',
    'ClosenessViolation',
    'SizeMismatch',
    'LaneSizing',
    'AreaShare',
    'UtilizationSummary',
    'SafetyFinding',
    'CorridorFinding',
    'DepartureFinding',
    'FlowRoute',
    'Flag',
    'ScoreFactor',
    'LayoutScore',
    # Scorers
    'PairEvaluation',
    'RelationshipScorer',
    'SpaceUtilizationScorer',
    'available_squares',
    'staging_budget',
    'suggested_squares',
    'suggested_rect',
    'evaluate_lane_fit',
    'PathClearanceScorer',
    'FlowDistanceScorer',
    'DeparturePriorityScorer',
    'SafetyRuleEngine',
    'SafetyReport',
    'RuleResult',
    'SAFETY_RULES',
    # Aggregation
    'ScoreAggregator',
    'verdict_for',
    'FACTOR_ORDER',
    'score_factors',
    'score_layout',
    # Presentation
    'render_finding',
    'render_details',
    'resolve_flags',
    'active_flags',
    'sort_flags',
]
