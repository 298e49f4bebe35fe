"""
flowgrid/scoring/safety/engine.py - Safety rule engine

Runs every catalogued rule against the classified floor and reduces the
results to the safety factor.

Rule scores always reflect the true findings. Dismissing a rule's flag
hides it at render time and never changes these numbers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from flowgrid.core.config import DEFAULT_CONFIG, ScoringConfig
from flowgrid.core.enums import RuleStatus, Severity
from flowgrid.core.snapshot import LayoutSnapshot
from flowgrid.geometry.grid import round_half_up

from ..factors import Flag, ScoreFactor
from ..findings import SafetyFinding
from .checkers import SafetyContext, get_checker
from .rules import SAFETY_RULES, SafetyRule, SafetyRuleLibrary

__all__ = [
    'RuleResult',
    'SafetyReport',
    'SafetyRuleEngine',
]

logger = logging.getLogger(__name__)


@dataclass
class RuleResult:
    """Evaluation of one safety rule."""

    rule: SafetyRule
    score: int
    max_score: int
    status: RuleStatus
    message: str
    findings: List[SafetyFinding] = field(default_factory=list)

    @property
    def locations(self) -> List[tuple]:
        """Every cell named by a finding, in finding order."""
        return [cell for f in self.findings for cell in f.cells]

    @property
    def dismissal_id(self) -> str:
        return self.rule.dismissal_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule.rule_id,
            "name": self.rule.name,
            "score": self.score,
            "max_score": self.max_score,
            "status": self.status.value,
            "message": self.message,
            "locations": [list(c) for c in self.locations],
            "findings": [f.to_dict() for f in self.findings],
            "dismissal_id": self.dismissal_id,
        }


@dataclass
class SafetyReport:
    """All rule results for one layout."""

    results: List[RuleResult] = field(default_factory=list)
    pass_count: int = 0
    partial_count: int = 0
    fail_count: int = 0

    @property
    def total_score(self) -> int:
        return sum(r.score for r in self.results)

    @property
    def max_score(self) -> int:
        return sum(r.max_score for r in self.results)

    @property
    def findings(self) -> List[SafetyFinding]:
        return [f for r in self.results for f in r.findings]

    def get(self, rule_id: str) -> Optional[RuleResult]:
        for r in self.results:
            if r.rule.rule_id == rule_id:
                return r
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total_score": self.total_score,
                "max_score": self.max_score,
                "pass_count": self.pass_count,
                "partial_count": self.partial_count,
                "fail_count": self.fail_count,
            },
            "results": [r.to_dict() for r in self.results],
        }


class SafetyRuleEngine:
    """
    Evaluates the safety rule catalogue.

    Usage:
        engine = SafetyRuleEngine()
        report = engine.evaluate(snapshot)
        factor = engine.score(snapshot)
    """

    NAME = "safety"
    LABEL = "Safety: Are people and equipment safe?"

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        rule_library: Optional[SafetyRuleLibrary] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.rule_library = rule_library or SAFETY_RULES

    def evaluate(self, snapshot: LayoutSnapshot) -> SafetyReport:
        context = SafetyContext(snapshot, self.config)
        report = SafetyReport()

        for rule in self.rule_library.get_all_rules():
            checker = get_checker(rule.rule_id)
            if checker is None:
                logger.warning(f"No checker registered for safety rule {rule.rule_id}")
                continue

            findings = checker.check(rule, context)
            result = self._build_result(rule, findings)
            report.results.append(result)

            if result.status == RuleStatus.PASS:
                report.pass_count += 1
            elif result.status == RuleStatus.PARTIAL:
                report.partial_count += 1
            else:
                report.fail_count += 1

            logger.debug(f"Safety rule {rule.rule_id}: {len(findings)} finding(s), score {result.score}")

        return report

    def _build_result(self, rule: SafetyRule, findings: List[SafetyFinding]) -> RuleResult:
        score = rule.score_for(len(findings))

        if not findings:
            status = RuleStatus.PASS
            message = f"{rule.name}: no issues found"
        elif score == 0:
            status = RuleStatus.FAIL
            message = f"{rule.name}: {len(findings)} issue(s)"
        else:
            status = RuleStatus.PARTIAL
            message = f"{rule.name}: {len(findings)} issue(s)"

        return RuleResult(
            rule=rule,
            score=score,
            max_score=rule.max_score,
            status=status,
            message=message,
            findings=list(findings),
        )

    def score(self, snapshot: LayoutSnapshot) -> ScoreFactor:
        report = self.evaluate(snapshot)
        max_score = self.config.budget(self.NAME)

        if report.max_score > 0:
            score = round_half_up(max_score * report.total_score / report.max_score)
        else:
            score = max_score

        flags = []
        for result in report.results:
            if result.status == RuleStatus.PASS:
                continue
            first = result.findings[0]
            extra = len(result.findings) - 1
            flags.append(Flag(
                id=result.dismissal_id,
                severity=result.rule.severity,
                message=first.message + (f" (+{extra} more)" if extra else ""),
                recommendation=result.rule.recommendation,
                points_deduction=result.max_score - result.score,
            ))

        critical = sum(
            1 for r in report.results
            if r.status != RuleStatus.PASS and r.rule.severity == Severity.HIGH
        )
        warnings = report.partial_count + report.fail_count - critical

        if critical:
            display = f"{critical} critical, {warnings} warning"
            suggestion = "Address critical safety issues first"
        elif warnings:
            display = f"{warnings} warning, {report.pass_count} good"
            suggestion = "Review warnings and consider improvements"
        else:
            display = "All safety checks passed"
            suggestion = "Safety design is excellent"

        return ScoreFactor(
            name=self.NAME,
            label=self.LABEL,
            score=score,
            max_score=max_score,
            display=display,
            details=report.findings,
            flags=flags,
            suggestion=suggestion,
        )
