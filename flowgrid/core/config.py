"""
flowgrid/core/config.py - Scoring configuration

Thresholds, weights and point budgets used by the scorers, with
environment overrides for tuning without code changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict
import os
import logging

from flowgrid.errors import ConfigurationError

from .enums import ClosenessRating

logger = logging.getLogger(__name__)


# =============================================================================
# FACTOR BUDGETS
# =============================================================================

DEFAULT_FACTOR_BUDGETS: Dict[str, int] = {
    "flow_distance": 20,
    "closeness": 20,
    "departure_priority": 15,
    "space_utilization": 15,
    "path_clearance": 15,
    "buffer_capacity": 15,
    "safety": 15,
}


# =============================================================================
# SCORING CONFIG
# =============================================================================

@dataclass
class ScoringConfig:
    """Tunable scoring parameters."""

    # Closeness thresholds (grid cells, centre distance)
    must_be_close_max: int = 5
    prefer_close_max: int = 8
    keep_apart_min: int = 10

    # Relative weight of each rating in the closeness factor
    rating_weights: Dict[ClosenessRating, float] = field(default_factory=lambda: {
        ClosenessRating.MUST_BE_CLOSE: 3.0,
        ClosenessRating.PREFER_CLOSE: 1.0,
        ClosenessRating.KEEP_APART: 2.0,
    })

    # Staging lane sizing
    staging_fraction: float = 0.6
    target_aspect_ratio: float = 1.3
    min_lane_dimension: int = 2
    size_mismatch_tolerance_pct: float = 10.0

    # Corridors
    min_forklift_width: int = 2
    departure_slack_cells: float = 3.0

    # Safety
    speed_run_cells: int = 5

    # Point budget per factor
    factor_budgets: Dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_FACTOR_BUDGETS)
    )

    def __post_init__(self):
        """Validate configuration."""
        if not 0.0 < self.staging_fraction <= 1.0:
            raise ConfigurationError(
                f"staging_fraction must be in (0, 1], got {self.staging_fraction}"
            )
        if self.target_aspect_ratio <= 0:
            raise ConfigurationError(
                f"target_aspect_ratio must be positive, got {self.target_aspect_ratio}"
            )
        if self.min_lane_dimension < 1:
            raise ConfigurationError(
                f"min_lane_dimension must be at least 1, got {self.min_lane_dimension}"
            )
        if not self.must_be_close_max <= self.prefer_close_max < self.keep_apart_min:
            raise ConfigurationError(
                "closeness thresholds must satisfy must_be_close <= prefer_close < keep_apart"
            )
        negative = [name for name, pts in self.factor_budgets.items() if pts < 0]
        if negative:
            raise ConfigurationError(f"negative factor budgets: {', '.join(negative)}")

    def budget(self, factor_name: str) -> int:
        """Point budget for a factor (0 if unknown)."""
        return self.factor_budgets.get(factor_name, 0)

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Create configuration from FLOWGRID_* environment variables."""
        try:
            config = cls(
                must_be_close_max=int(os.getenv("FLOWGRID_MUST_BE_CLOSE_MAX", "5")),
                prefer_close_max=int(os.getenv("FLOWGRID_PREFER_CLOSE_MAX", "8")),
                keep_apart_min=int(os.getenv("FLOWGRID_KEEP_APART_MIN", "10")),
                staging_fraction=float(os.getenv("FLOWGRID_STAGING_FRACTION", "0.6")),
                target_aspect_ratio=float(os.getenv("FLOWGRID_TARGET_ASPECT", "1.3")),
                size_mismatch_tolerance_pct=float(os.getenv("FLOWGRID_SIZE_TOLERANCE_PCT", "10")),
                min_forklift_width=int(os.getenv("FLOWGRID_MIN_FORKLIFT_WIDTH", "2")),
                speed_run_cells=int(os.getenv("FLOWGRID_SPEED_RUN_CELLS", "5")),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid FLOWGRID_* value: {e}") from e

        logger.debug(f"Loaded scoring config from environment: {config}")
        return config


DEFAULT_CONFIG = ScoringConfig()
