"""
flowgrid/core/volumes.py - Volume share derivation

Each activity's percentage is its share of total typical volume across
all activities. Recomputed whenever any volume row changes.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping
import logging

from .models import VolumeTiming

logger = logging.getLogger(__name__)


def recompute_volume_percentages(rows: Iterable[VolumeTiming]) -> List[VolumeTiming]:
    """
    Return the rows with percentage set to their share of typical volume.

    Rows with zero typical volume get 0. When total volume is 0 every
    row gets 0. Percentages are left unrounded, so nonzero rows sum to
    100 up to float error.
    """
    rows = list(rows)
    total = sum(max(r.typical_volume_per_shift, 0.0) for r in rows)

    if total <= 0:
        return [replace(r, percentage=0.0) for r in rows]

    return [
        replace(r, percentage=max(r.typical_volume_per_shift, 0.0) / total * 100.0)
        for r in rows
    ]


def volume_share_by_activity(rows: Iterable[VolumeTiming]) -> Dict[str, float]:
    """activity_id -> percentage."""
    return {r.activity_id: r.percentage for r in rows}


def volume_percentage(shares: Mapping[str, float], activity_id: str) -> float:
    """Share for an activity; missing rows count as 0."""
    return shares.get(activity_id, 0.0)
