"""
flowgrid/core/relationships.py - Activity relationship index

Relationships are stored under a canonical pair key (smaller id first),
so (a, b) and (b, a) always resolve to the same record.
"""

from __future__ import annotations
from dataclasses import replace
from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

from .enums import ClosenessRating
from .models import Activity, ActivityRelationship

logger = logging.getLogger(__name__)

PairKey = Tuple[str, str]


def pair_key(activity_a_id: str, activity_b_id: str) -> PairKey:
    """Canonical key for an unordered activity pair."""
    if activity_a_id <= activity_b_id:
        return activity_a_id, activity_b_id
    return activity_b_id, activity_a_id


def normalize(rel: ActivityRelationship) -> ActivityRelationship:
    """Return the relationship with its ids in canonical order."""
    a, b = pair_key(rel.activity_a_id, rel.activity_b_id)
    if (a, b) == (rel.activity_a_id, rel.activity_b_id):
        return rel
    return replace(rel, activity_a_id=a, activity_b_id=b)


class RelationshipIndex:
    """
    Lookup of relationships by unordered pair.

    A later record for the same pair replaces an earlier one.
    """

    def __init__(self, relationships: Iterable[ActivityRelationship] = ()):
        self._by_pair: Dict[PairKey, ActivityRelationship] = {}
        for rel in relationships:
            self.put(rel)

    def put(self, rel: ActivityRelationship) -> ActivityRelationship:
        rel = normalize(rel)
        self._by_pair[(rel.activity_a_id, rel.activity_b_id)] = rel
        return rel

    def remove(self, activity_a_id: str, activity_b_id: str) -> Optional[ActivityRelationship]:
        return self._by_pair.pop(pair_key(activity_a_id, activity_b_id), None)

    def get(self, activity_a_id: str, activity_b_id: str) -> Optional[ActivityRelationship]:
        return self._by_pair.get(pair_key(activity_a_id, activity_b_id))

    def rating(self, activity_a_id: str, activity_b_id: str) -> ClosenessRating:
        """Rating for a pair; a missing record means DOES_NOT_MATTER."""
        rel = self.get(activity_a_id, activity_b_id)
        return rel.rating if rel else ClosenessRating.DOES_NOT_MATTER

    def involving(self, activity_id: str) -> List[ActivityRelationship]:
        return [
            rel for rel in self._by_pair.values()
            if activity_id in (rel.activity_a_id, rel.activity_b_id)
        ]

    def __iter__(self) -> Iterator[ActivityRelationship]:
        for key in sorted(self._by_pair):
            yield self._by_pair[key]

    def __len__(self) -> int:
        return len(self._by_pair)

    def __contains__(self, key: PairKey) -> bool:
        return pair_key(*key) in self._by_pair


# =============================================================================
# PAIR ENUMERATION
# =============================================================================

def scorable_pairs(activities: Sequence[Activity]) -> List[Tuple[Activity, Activity]]:
    """
    All unordered activity pairs except staging lane to staging lane.

    Pairs come out in canonical id order for deterministic output.
    """
    ordered = sorted(activities, key=lambda a: a.id)
    return [
        (a, b) for a, b in combinations(ordered, 2)
        if not (a.is_staging_lane and b.is_staging_lane)
    ]


def rating_progress(
    activities: Sequence[Activity],
    relationships: Iterable[ActivityRelationship],
) -> Tuple[int, int]:
    """
    Completion of the closeness rating step.

    Returns:
        (rated, total) over scorable pairs, where rated counts pairs
        that have an explicit relationship record
    """
    index = relationships if isinstance(relationships, RelationshipIndex) else RelationshipIndex(relationships)
    pairs = scorable_pairs(activities)
    rated = sum(1 for a, b in pairs if index.get(a.id, b.id) is not None)
    return rated, len(pairs)


# =============================================================================
# SEQUENCE SUGGESTIONS
# =============================================================================

def suggest_rating(activity_a: Activity, activity_b: Activity) -> Optional[ClosenessRating]:
    """
    Default rating derived from process sequence.

    Adjacent steps must be close, steps two apart prefer close, anything
    else does not matter. None when either activity has no sequence.
    """
    if activity_a.sequence_order is None or activity_b.sequence_order is None:
        return None

    seq_distance = abs(activity_a.sequence_order - activity_b.sequence_order)
    if seq_distance == 1:
        return ClosenessRating.MUST_BE_CLOSE
    if seq_distance == 2:
        return ClosenessRating.PREFER_CLOSE
    return ClosenessRating.DOES_NOT_MATTER


def apply_sequence_suggestions(
    activities: Sequence[Activity],
    relationships: Iterable[ActivityRelationship],
) -> List[ActivityRelationship]:
    """
    Pre-populate ratings from sequence order.

    Existing ratings other than DOES_NOT_MATTER are never overridden.
    Suggestions of DOES_NOT_MATTER add no record.

    Returns:
        Full relationship list in canonical pair order
    """
    index = RelationshipIndex(relationships)
    added = 0

    for a, b in scorable_pairs(activities):
        suggestion = suggest_rating(a, b)
        if suggestion is None or suggestion == ClosenessRating.DOES_NOT_MATTER:
            continue
        existing = index.get(a.id, b.id)
        if existing is not None and existing.rating != ClosenessRating.DOES_NOT_MATTER:
            continue
        if existing is not None:
            index.put(replace(existing, rating=suggestion))
        else:
            index.put(ActivityRelationship(
                activity_a_id=a.id,
                activity_b_id=b.id,
                rating=suggestion,
                reason="sequential-process",
            ))
        added += 1

    logger.debug(f"Applied {added} sequence-derived closeness suggestions")
    return list(index)
