"""
flowgrid/scoring/safety - Safety rule engine.
"""

from .rules import (
    SafetyCategory,
    SafetyRule,
    SafetyRuleLibrary,
    SAFETY_RULES,
    slugify,
)
from .checkers import (
    SafetyContext,
    RuleChecker,
    get_checker,
)
from .engine import (
    RuleResult,
    SafetyReport,
    SafetyRuleEngine,
)

__all__ = [
    # Rules
    'SafetyCategory',
    'SafetyRule',
    'SafetyRuleLibrary',
    'SAFETY_RULES',
    'slugify',
    # Checkers
    'SafetyContext',
    'RuleChecker',
    'get_checker',
    # Engine
    'RuleResult',
    'SafetyReport',
    'SafetyRuleEngine',
]
