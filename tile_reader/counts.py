"""
Remaining-Count Engine

Subtracts the observed tiles from the baseline counts. Every cycle recomputes
from scratch; the baseline table is only ever copied.

Counts are not clamped. A negative count means more copies of a tile were seen
than exist, i.e. a node was counted twice or misread, and is left visible.
"""

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple
import numpy as np

from .observation import ObservedTile
from .suits import NUMBERED_SUITS, RED_FIVE_RANK, Suit, make_notation, suit_of


RemainingCounts = Dict[str, int]
SuitRemainingCounts = Dict[str, int]


def remaining_from_observed(
    baseline: Mapping[str, int],
    observed: Iterable[ObservedTile],
) -> RemainingCounts:
    """Copy the baseline and take one off per observed tile"""
    remaining = dict(baseline)
    for tile in observed:
        remaining[tile.notation] -= 1
    return remaining


def suit_counts(remaining: Mapping[str, int]) -> SuitRemainingCounts:
    """
    Total remaining tiles per numbered suit, red five included.

    Honors have no suit total and are left out.
    """
    totals = {suit.code: 0 for suit in NUMBERED_SUITS}
    for notation, count in remaining.items():
        suit = suit_of(notation)
        if not suit.is_numbered:
            continue
        totals[suit.code] += count
    return totals


def reconcile(
    baseline: Mapping[str, int],
    observed: Iterable[ObservedTile],
) -> Tuple[RemainingCounts, SuitRemainingCounts]:
    """
    Compute the remaining counts for one set of observations.

    Args:
        baseline: Count of every tile type in the full set
        observed: Tiles currently visible on the board

    Returns:
        (remaining count per notation, remaining count per numbered suit)
    """
    remaining = remaining_from_observed(baseline, observed)
    return remaining, suit_counts(remaining)


def negative_counts(remaining: Mapping[str, int]) -> Dict[str, int]:
    """Notations seen more often than they exist"""
    return {notation: count for notation, count in remaining.items() if count < 0}


def combined_five(remaining: Mapping[str, int], suit: Suit) -> int:
    """Remaining 5s of a numbered suit, red five included"""
    return remaining[make_notation(5, suit)] + remaining[make_notation(RED_FIVE_RANK, suit)]


def to_count_array(remaining: Mapping[str, int], order: Sequence[str]) -> np.ndarray:
    """
    Convert counts to an array following the given notation order.

    Useful for totals and for feeding the counts to numeric code.
    """
    counts = np.zeros(len(order), dtype=np.int16)
    for i, notation in enumerate(order):
        counts[i] = remaining.get(notation, 0)
    return counts


class TileCountTracker:
    """
    Holds the baseline counts and reconciles observations against them.

    Keeps no state between calls, so one tracker can serve any number of
    cycles and threads.
    """

    def __init__(self, baseline: Mapping[str, int]):
        self._baseline = baseline

    @property
    def baseline(self) -> Mapping[str, int]:
        return self._baseline

    def remaining_from_observed(self, observed: Iterable[ObservedTile]) -> RemainingCounts:
        return remaining_from_observed(self._baseline, observed)

    def reconcile(self, observed: Iterable[ObservedTile]) -> Tuple[RemainingCounts, SuitRemainingCounts]:
        return reconcile(self._baseline, observed)

    def total_remaining(self, remaining: Mapping[str, int]) -> int:
        order: List[str] = list(self._baseline)
        return int(to_count_array(remaining, order).sum())

    def __repr__(self) -> str:
        return f"TileCountTracker({len(self._baseline)} tile types)"
