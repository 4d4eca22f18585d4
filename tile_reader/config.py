"""
Tile Reader Configuration

Texture tables and reader settings, expressed as dataclass presets.

The host asset system numbers the tile icons sequentially inside the
ui/icon/076000 directory. Each suit starts at a fixed offset, the three red
fives sit right after the honors, and every icon ships in a base and a
high-resolution variant.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from .suits import Suit


class TexturePathStyle(IntEnum):
    """The two recognized forms of a tile icon path"""
    HIGH_RES = 0  # ui/icon/076000/076041_hr1.tex
    BASE = 1      # ui/icon/076000/076041.tex


@dataclass(frozen=True)
class TextureTable:
    """
    Layout of tile icon textures in the host asset system.

    Texture id for rank r of a suit is ``offset + r`` zero-padded to
    ``id_width`` digits. Red fives have their own fixed ids.
    """

    name: str = "Default"

    # Directory holding the tile icons
    icon_directory: str = "ui/icon/076000"

    # Texture id of rank 1 is offset + 1
    suit_offsets: Dict[Suit, int] = field(default_factory=dict)

    # Red five texture ids, numbered suits only
    red_five_ids: Dict[Suit, str] = field(default_factory=dict)

    id_width: int = 6

    high_res_suffix: str = "_hr1"
    extension: str = ".tex"

    def texture_id(self, suit: Suit, rank: int) -> str:
        """Texture id of a standard rank (1-9 or 1-7)"""
        if suit not in self.suit_offsets:
            raise ValueError(f"Texture table {self.name} has no offset for {suit.name}")
        return str(self.suit_offsets[suit] + rank).zfill(self.id_width)

    def texture_path(self, texture_id: str, style: TexturePathStyle = TexturePathStyle.BASE) -> str:
        """Full asset path of a texture id in the given style"""
        suffix = self.high_res_suffix if style == TexturePathStyle.HIGH_RES else ""
        return f"{self.icon_directory}/{texture_id}{suffix}{self.extension}"

    def path_style(self, texture_path: Any) -> Optional[TexturePathStyle]:
        """
        Recognize a tile icon path.

        Returns:
            The path style, or None if the path is not a tile icon path
        """
        if not isinstance(texture_path, str) or not texture_path:
            return None
        prefix = f"{self.icon_directory}/"
        if not texture_path.startswith(prefix) or not texture_path.endswith(self.extension):
            return None
        stem = texture_path[len(prefix):-len(self.extension)]
        if "/" in stem:
            return None
        if stem.endswith(self.high_res_suffix):
            stem = stem[:-len(self.high_res_suffix)]
            style = TexturePathStyle.HIGH_RES
        else:
            style = TexturePathStyle.BASE
        if len(stem) != self.id_width or not stem.isdigit():
            return None
        return style

    def __repr__(self) -> str:
        return f"TextureTable({self.name})"


STANDARD_TEXTURES = TextureTable(
    name="Standard",
    icon_directory="ui/icon/076000",
    suit_offsets={
        Suit.MAN: 76040,
        Suit.PIN: 76049,
        Suit.SOU: 76058,
        Suit.HONOR: 76067,
    },
    red_five_ids={
        Suit.MAN: "076075",
        Suit.PIN: "076076",
        Suit.SOU: "076077",
    },
    id_width=6,
    high_res_suffix="_hr1",
    extension=".tex",
)


@dataclass(frozen=True)
class ReaderConfig:
    """Settings of a reader session"""

    textures: TextureTable = STANDARD_TEXTURES

    # Log the duration of every cycle at DEBUG level
    log_timings: bool = False

    # Name given to the background worker thread
    worker_name: str = "tile-reader-cycle"

    def __repr__(self) -> str:
        return f"ReaderConfig({self.textures.name}, log_timings={self.log_timings})"


DEFAULT_CONFIG = ReaderConfig()


def texture_table_summary(table: TextureTable) -> Tuple[str, ...]:
    """Human readable lines describing a texture table"""
    lines = [f"{table.name}: {table.icon_directory}"]
    for suit, offset in sorted(table.suit_offsets.items()):
        first = table.texture_id(suit, 1)
        last = table.texture_id(suit, suit.ranks[-1])
        lines.append(f"  {suit.name:<5} {first}-{last} (offset {offset})")
    for suit, texture_id in sorted(table.red_five_ids.items()):
        lines.append(f"  0{suit.code}    {texture_id}")
    return tuple(lines)
