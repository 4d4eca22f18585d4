"""
Suit Taxonomy

The four suits of the 136-tile set and the ranks valid within each:
- Man (characters) 1-9, red five written 0m
- Pin (dots) 1-9, red five written 0p
- Sou (bamboo) 1-9, red five written 0s
- Honor (winds 1-4, dragons 5-7), no red tile
"""

from enum import IntEnum
from typing import Tuple


RED_FIVE_RANK = 0
COPIES_PER_TYPE = 4


class Suit(IntEnum):
    """Tile suits, in display order"""
    MAN = 0    # m - Characters
    PIN = 1    # p - Dots
    SOU = 2    # s - Bamboo
    HONOR = 3  # z - Winds and dragons

    @property
    def code(self) -> str:
        """Single character suit code used in tile notation"""
        return _SUIT_CODES[self]

    @property
    def is_numbered(self) -> bool:
        """Man, Pin and Sou carry ranks 1-9 and count towards suit totals"""
        return self != Suit.HONOR

    @property
    def has_red_five(self) -> bool:
        return self.is_numbered

    @property
    def ranks(self) -> Tuple[int, ...]:
        """Standard ranks of this suit (the red five rank 0 is not included)"""
        if self.is_numbered:
            return tuple(range(1, 10))
        return tuple(range(1, 8))

    def is_valid_rank(self, rank: int) -> bool:
        if rank == RED_FIVE_RANK:
            return self.has_red_five
        return rank in self.ranks

    @classmethod
    def from_code(cls, code: str) -> 'Suit':
        """
        Look up a suit from its notation code.

        Args:
            code: One of 'm', 'p', 's', 'z'

        Raises:
            ValueError: If the code is not a suit code
        """
        for suit, suit_code in _SUIT_CODES.items():
            if suit_code == code:
                return suit
        raise ValueError(f"Unknown suit code: {code!r}")


_SUIT_CODES = {
    Suit.MAN: "m",
    Suit.PIN: "p",
    Suit.SOU: "s",
    Suit.HONOR: "z",
}

NUMBERED_SUITS = (Suit.MAN, Suit.PIN, Suit.SOU)

# Named honor ranks
EAST, SOUTH, WEST, NORTH = 1, 2, 3, 4
WHITE_DRAGON, GREEN_DRAGON, RED_DRAGON = 5, 6, 7
WIND_RANKS = (EAST, SOUTH, WEST, NORTH)
DRAGON_RANKS = (WHITE_DRAGON, GREEN_DRAGON, RED_DRAGON)


def make_notation(rank: int, suit: Suit) -> str:
    """Build the notation string for a rank and suit, e.g. (5, PIN) -> '5p'"""
    if not suit.is_valid_rank(rank):
        raise ValueError(f"Rank {rank} is not valid for suit {suit.name}")
    return f"{rank}{suit.code}"


def parse_notation(notation: str) -> Tuple[int, Suit]:
    """
    Split a tile notation into rank and suit.

    Args:
        notation: String like '1m', '0p' (red five), '7z'

    Returns:
        (rank, suit)

    Raises:
        ValueError: If the notation is malformed or the rank is invalid for the suit
    """
    if not isinstance(notation, str) or len(notation) != 2 or not notation[0].isdigit():
        raise ValueError(f"Cannot parse tile notation: {notation!r}")
    rank = int(notation[0])
    suit = Suit.from_code(notation[1])
    if not suit.is_valid_rank(rank):
        raise ValueError(f"Rank {rank} is not valid for suit {suit.name}: {notation!r}")
    return rank, suit


def suit_of(notation: str) -> Suit:
    """Suit of a notation"""
    return parse_notation(notation)[1]


def is_red_five(notation: str) -> bool:
    return parse_notation(notation)[0] == RED_FIVE_RANK
