"""
flowgrid/placement - Placement validation.
"""

from .validator import PlacementCheck, PlacementValidator

__all__ = [
    'PlacementCheck',
    'PlacementValidator',
]
