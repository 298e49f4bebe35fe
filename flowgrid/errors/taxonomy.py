"""
flowgrid/errors/taxonomy.py - Error taxonomy

Structured exception types raised by the layout core. The scoring
pipeline itself never raises on missing or partial data; these errors
come from configuration and from the state container when an edit is
rejected.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR CATEGORIES
# =============================================================================

class ErrorCategory(Enum):
    """Categories of layout errors."""
    CONFIGURATION = "configuration"   # Bad grid or scoring settings
    PLACEMENT = "placement"           # Rejected geometric edit
    ENTITY = "entity"                 # Unknown or duplicate entity id
    INPUT = "input"                   # Malformed snapshot data


# =============================================================================
# BASE ERROR CLASS
# =============================================================================

class FlowGridError(Exception):
    """
    Base class for layout errors.

    Carries an error code for programmatic handling, a recovery hint
    for the user, and a details dict for debugging.
    """

    code: str = "FG_000"
    category: ErrorCategory = ErrorCategory.INPUT

    def __init__(
        self,
        message: str = "",
        *,
        recovery_hint: str = "",
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Layout error"
        self.recovery_hint = recovery_hint
        self.details = details or {}
        self.details.update(kwargs)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a plain dictionary."""
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "recovery_hint": self.recovery_hint,
            "details": self.details,
        }

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.recovery_hint:
            parts.append(f"Hint: {self.recovery_hint}")
        return " ".join(parts)


# =============================================================================
# SPECIFIC ERROR TYPES
# =============================================================================

class GridConfigurationError(FlowGridError):
    """Invalid facility or cell size settings."""

    code = "FG_001"
    category = ErrorCategory.CONFIGURATION

    def __init__(self, param: str, value: Any, **kwargs):
        super().__init__(
            message=f"Grid setting '{param}' has invalid value {value!r}",
            recovery_hint=f"Set {param} to a positive number.",
            param=param,
            value=value,
            **kwargs,
        )


class ConfigurationError(FlowGridError):
    """Invalid scoring configuration."""

    code = "FG_002"
    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            recovery_hint="Check FLOWGRID_* environment variables.",
            **kwargs,
        )


class PlacementError(FlowGridError):
    """A zone or object edit failed placement validation."""

    code = "FG_010"
    category = ErrorCategory.PLACEMENT

    def __init__(
        self,
        entity_id: str,
        reasons: List[str],
        blocked_cells: Optional[List[Tuple[int, int]]] = None,
        **kwargs,
    ):
        self.entity_id = entity_id
        self.reasons = list(reasons)
        self.blocked_cells = list(blocked_cells or [])
        summary = "; ".join(self.reasons) if self.reasons else "invalid placement"
        super().__init__(
            message=f"Cannot place {entity_id}: {summary}",
            recovery_hint="Keep the rectangle inside the grid and off permanent cells.",
            entity_id=entity_id,
            reasons=self.reasons,
            blocked_cells=self.blocked_cells,
            **kwargs,
        )


class InvalidRotationError(FlowGridError):
    """Rotation is not a multiple of 90 degrees."""

    code = "FG_011"
    category = ErrorCategory.PLACEMENT

    def __init__(self, rotation: Any, **kwargs):
        super().__init__(
            message=f"Rotation {rotation!r} is not one of 0, 90, 180, 270",
            recovery_hint="Rotate objects in quarter turns.",
            rotation=rotation,
            **kwargs,
        )


class EntityNotFoundError(FlowGridError):
    """Referenced entity does not exist."""

    code = "FG_020"
    category = ErrorCategory.ENTITY

    def __init__(self, entity_type: str, entity_id: str, **kwargs):
        super().__init__(
            message=f"{entity_type} '{entity_id}' not found",
            entity_type=entity_type,
            entity_id=entity_id,
            **kwargs,
        )


class DuplicateEntityError(FlowGridError):
    """An entity with the same id already exists."""

    code = "FG_021"
    category = ErrorCategory.ENTITY

    def __init__(self, entity_type: str, entity_id: str, **kwargs):
        super().__init__(
            message=f"{entity_type} '{entity_id}' already exists",
            recovery_hint="Use update operations to change existing entities.",
            entity_type=entity_type,
            entity_id=entity_id,
            **kwargs,
        )


class SnapshotFormatError(FlowGridError):
    """Snapshot data could not be parsed."""

    code = "FG_030"
    category = ErrorCategory.INPUT

    def __init__(self, field_name: str, reason: str, **kwargs):
        super().__init__(
            message=f"Snapshot field '{field_name}' is malformed: {reason}",
            field_name=field_name,
            reason=reason,
            **kwargs,
        )
