"""
Top-N ranking for reaction-time leaderboards.

Lower values rank higher. Ties keep submission order because the sort is
stable and new entries are appended last. Merging is pure: the input document
is left untouched and the same inputs always give the same result.
"""

import math
from numbers import Real
from typing import Optional

from ..config import leaderboard
from ..errors import ValidationError
from ..models.data import LeaderboardDocument, MergeResult, ScoreEntry


def validate_value(value, min_value: float, max_value: float) -> None:
    """Reject a score outside the accepted range before it reaches the store"""
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise ValidationError(f"Invalid reaction time {value!r}. Must be a number.")
    if value < min_value or value > max_value:
        raise ValidationError(
            f"Invalid reaction time. Must be between {min_value:g}-{max_value:g}ms."
        )


def merge(current: LeaderboardDocument, version: Optional[str], new_entry: ScoreEntry,
          capacity: int, min_value: float = leaderboard.min_value,
          max_value: float = leaderboard.max_value) -> MergeResult:
    if capacity < 1:
        raise ValidationError(f"Leaderboard capacity must be positive, got {capacity}")
    validate_value(new_entry.value, min_value, max_value)

    previous_best = min((e.value for e in current.entries), default=None)
    is_new_record = previous_best is None or new_entry.value <= previous_best

    ranked = sorted([*current.entries, new_entry], key=lambda e: e.value)[:capacity]

    rank = None
    for position, entry in enumerate(ranked, start=1):
        if entry is new_entry:
            rank = position
            break

    document = current.model_copy(update={
        'entries': ranked,
        'last_updated': new_entry.timestamp,
    })
    return MergeResult(document, version, new_entry, is_new_record, rank)
