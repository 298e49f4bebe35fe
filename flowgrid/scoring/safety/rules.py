"""
flowgrid/scoring/safety/rules.py - Safety rule catalogue

Rule definitions and the library that holds them. Rule scores are
max_score minus deduction per finding, floored at 0; the seven rule
maxima sum to the safety factor budget.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
import re

from flowgrid.core.enums import Severity

__all__ = [
    'SafetyCategory',
    'SafetyRule',
    'SafetyRuleLibrary',
    'SAFETY_RULES',
    'slugify',
]


class SafetyCategory(Enum):
    """Groups of safety rules."""
    TRAFFIC = "traffic"     # Pedestrian and forklift interaction
    ACCESS = "access"       # Walkable routes between work locations
    EGRESS = "egress"       # Emergency exit routes


def slugify(name: str) -> str:
    """'Blind Corner at Crossing' -> 'blind-corner-at-crossing'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@dataclass(frozen=True)
class SafetyRule:
    """Single safety rule definition."""

    rule_id: str
    name: str
    description: str
    category: SafetyCategory
    severity: Severity
    max_score: int
    deduction: int
    recommendation: str = ""

    @property
    def dismissal_id(self) -> str:
        """Flag id under which the rule's findings are dismissed."""
        return f"safety-{slugify(self.name)}"

    def score_for(self, finding_count: int) -> int:
        return max(0, self.max_score - self.deduction * finding_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "severity": self.severity.value,
            "max_score": self.max_score,
            "deduction": self.deduction,
            "dismissal_id": self.dismissal_id,
        }


class SafetyRuleLibrary:
    """Repository of safety rules, kept in registration order."""

    def __init__(self, load_defaults: bool = True):
        self._rules: Dict[str, SafetyRule] = {}
        self._by_category: Dict[SafetyCategory, List[str]] = {}

        if load_defaults:
            self._load_default_rules()

    def register(self, rule: SafetyRule) -> None:
        """Register a rule in the library."""
        self._rules[rule.rule_id] = rule

        if rule.category not in self._by_category:
            self._by_category[rule.category] = []
        self._by_category[rule.category].append(rule.rule_id)

    def get(self, rule_id: str) -> Optional[SafetyRule]:
        return self._rules.get(rule_id)

    def get_by_category(self, category: SafetyCategory) -> List[SafetyRule]:
        rule_ids = self._by_category.get(category, [])
        return [self._rules[rid] for rid in rule_ids]

    def get_all_rules(self) -> List[SafetyRule]:
        return list(self._rules.values())

    @property
    def max_total(self) -> int:
        return sum(r.max_score for r in self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def _load_default_rules(self) -> None:
        self.register(SafetyRule(
            rule_id="crossing",
            name="Pedestrian Forklift Crossing",
            description="Pedestrian walkways must not intersect forklift paths unmarked.",
            category=SafetyCategory.TRAFFIC,
            severity=Severity.HIGH,
            max_score=3,
            deduction=3,
            recommendation=(
                "Install stop signs for equipment and yield signs for pedestrians. "
                "Mark the crossing with yellow and black floor stripes."
            ),
        ))

        self.register(SafetyRule(
            rule_id="separation",
            name="Pedestrian Forklift Separation",
            description="Walkways running beside forklift paths need a barrier.",
            category=SafetyCategory.TRAFFIC,
            severity=Severity.MEDIUM,
            max_score=2,
            deduction=1,
            recommendation="Install steel guardrails or mark the edge with 4-inch yellow safety tape.",
        ))

        self.register(SafetyRule(
            rule_id="blind-corner",
            name="Blind Corner at Crossing",
            description="Obstacles beside a crossing block line of sight.",
            category=SafetyCategory.TRAFFIC,
            severity=Severity.HIGH,
            max_score=2,
            deduction=2,
            recommendation="Install a convex safety mirror or a proximity sensor.",
        ))

        self.register(SafetyRule(
            rule_id="speed",
            name="Forklift Approach Speed",
            description="Long straight forklift approaches into a crossing build speed.",
            category=SafetyCategory.TRAFFIC,
            severity=Severity.MEDIUM,
            max_score=2,
            deduction=1,
            recommendation="Add SLOW floor decals or speed bumps before the crossing.",
        ))

        self.register(SafetyRule(
            rule_id="ped-access-work",
            name="Pedestrian Access to Work Areas",
            description="Workers reach each work area from a personnel door without crossing forklift paths.",
            category=SafetyCategory.ACCESS,
            severity=Severity.MEDIUM,
            max_score=2,
            deduction=1,
            recommendation="Add a pedestrian walkway around the forklift path, or a marked crossing.",
        ))

        self.register(SafetyRule(
            rule_id="ped-access-staging",
            name="Pedestrian Access Between Staging Lanes",
            description="Workers move between staging lanes without entering forklift paths.",
            category=SafetyCategory.ACCESS,
            severity=Severity.LOW,
            max_score=1,
            deduction=1,
            recommendation="Add a pedestrian walkway connecting the staging lanes.",
        ))

        self.register(SafetyRule(
            rule_id="egress",
            name="Emergency Egress",
            description="Every zone has a walkable route to an emergency or personnel exit.",
            category=SafetyCategory.EGRESS,
            severity=Severity.HIGH,
            max_score=3,
            deduction=3,
            recommendation="Add a pedestrian walkway or a marked crossing toward the nearest exit.",
        ))


# Default catalogue
SAFETY_RULES = SafetyRuleLibrary()
