"""
Text rendering of remaining counts.

Layout follows the tracker window: Man, Pin and Sou side by side for ranks
1-9 with the suit totals in a fourth column, then a winds row and a dragons
row. The 5 row shows normal and red fives together, marked with '*' while a
red five is still unseen. Negative counts are marked with '!'.
"""

from typing import Iterable, List, Mapping

from .config import TexturePathStyle
from .counts import combined_five
from .observation import ObservedTile
from .suits import DRAGON_RANKS, NUMBERED_SUITS, RED_FIVE_RANK, WIND_RANKS, Suit, make_notation
from .textures import TileRegistry


HONOR_NAMES = {
    1: "East", 2: "South", 3: "West", 4: "North",
    5: "White", 6: "Green", 7: "Red",
}

# Row of the suit total column for each suit
SUIT_TOTAL_ROWS = {3: Suit.MAN, 5: Suit.PIN, 7: Suit.SOU}

CELL_WIDTH = 10


def _cell(label: str, count: int, red_remaining: bool = False, negative: bool = False) -> str:
    marker = "!" if negative or count < 0 else ("*" if red_remaining else "")
    return f"{label} x{count}{marker}".ljust(CELL_WIDTH)


def render_remaining(remaining: Mapping[str, int], suit_remaining: Mapping[str, int]) -> str:
    """
    Render remaining counts as a text table.

    Args:
        remaining: Remaining count per notation
        suit_remaining: Remaining count per numbered suit code

    Returns:
        Multi-line string
    """
    lines: List[str] = []
    for rank in range(1, 10):
        cells = []
        for suit in NUMBERED_SUITS:
            notation = make_notation(rank, suit)
            if rank == 5:
                red = remaining[make_notation(RED_FIVE_RANK, suit)]
                # Either entry can go negative while their sum does not
                negative = red < 0 or remaining[notation] < 0
                cells.append(_cell(notation, combined_five(remaining, suit), red > 0, negative))
            else:
                cells.append(_cell(notation, remaining[notation]))
        if rank in SUIT_TOTAL_ROWS:
            code = SUIT_TOTAL_ROWS[rank].code
            cells.append(_cell(f"[{code}]", suit_remaining[code]))
        lines.append(" ".join(cells).rstrip())

    lines.append("")
    for ranks in (WIND_RANKS, DRAGON_RANKS):
        cells = [
            _cell(HONOR_NAMES[rank], remaining[make_notation(rank, Suit.HONOR)])
            for rank in ranks
        ]
        lines.append(" ".join(cells).rstrip())
    return "\n".join(lines)


def render_observed(observed: Iterable[ObservedTile], registry: TileRegistry) -> str:
    """List observed tiles with the texture path each one is drawn from"""
    lines = []
    for tile in observed:
        path = registry.table.texture_path(tile.texture.texture_id, TexturePathStyle.HIGH_RES)
        lines.append(f"{tile}  {path}")
    return "\n".join(lines)
