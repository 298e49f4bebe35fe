"""
errors/ - Error taxonomy

Structured exception types for the layout core.
"""

from .taxonomy import (
    ErrorCategory,
    FlowGridError,
    GridConfigurationError,
    ConfigurationError,
    PlacementError,
    InvalidRotationError,
    EntityNotFoundError,
    DuplicateEntityError,
    SnapshotFormatError,
)

__all__ = [
    "ErrorCategory",
    "FlowGridError",
    "GridConfigurationError",
    "ConfigurationError",
    "PlacementError",
    "InvalidRotationError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "SnapshotFormatError",
]
