"""
flowgrid/scoring/factors.py - Score records

Flag, ScoreFactor and LayoutScore. These carry no dismissal state;
whether a flag is dismissed is resolved against user state when the
score is rendered.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flowgrid.core.enums import Severity

from .findings import Finding

__all__ = [
    'Flag',
    'ScoreFactor',
    'LayoutScore',
]


@dataclass(frozen=True)
class Flag:
    """
    Actionable issue raised by a factor.

    Attributes:
        id: Stable id, also the dismissal key
        severity: HIGH, MEDIUM or LOW
        message: What is wrong
        recommendation: How to fix it
        points_deduction: Points the issue costs its factor
        is_dismissed: Set only on rendered copies
    """
    id: str
    severity: Severity
    message: str
    recommendation: str = ""
    points_deduction: int = 0
    is_dismissed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "message": self.message,
            "recommendation": self.recommendation,
            "points_deduction": self.points_deduction,
            "is_dismissed": self.is_dismissed,
        }


@dataclass
class ScoreFactor:
    """One independently computed contribution to the layout score."""
    name: str
    label: str
    score: int
    max_score: int
    display: str = ""
    details: List[Finding] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "score": self.score,
            "max_score": self.max_score,
            "display": self.display or f"{self.score}/{self.max_score}",
            "details": [d.to_dict() for d in self.details],
            "flags": [f.to_dict() for f in self.flags],
            "suggestion": self.suggestion,
        }


@dataclass
class LayoutScore:
    """Aggregated score for a layout."""
    percentage: int
    total: int
    max_total: int
    factors: List[ScoreFactor] = field(default_factory=list)
    verdict: str = ""

    @property
    def flags(self) -> List[Flag]:
        """Flags pooled across factors, in factor order."""
        return [flag for factor in self.factors for flag in factor.flags]

    def factor(self, name: str) -> Optional[ScoreFactor]:
        for f in self.factors:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "total": self.total,
            "max_total": self.max_total,
            "verdict": self.verdict,
            "factors": [f.to_dict() for f in self.factors],
        }
