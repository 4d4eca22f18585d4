"""
Tile Identity Registry

Maps the host's tile icon texture ids to tile notation and back, and holds the
baseline count of every tile type in the 136-tile set:
- 1-9 of Man, Pin and Sou: 4 copies each, except the 5 which has 3
- Red 5 of Man, Pin and Sou (0m, 0p, 0s): 1 copy each
- 7 honors: 4 copies each

Total: 37 tile types, 136 tiles. The registry is built once and never mutated.
"""

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple
import logging

from .config import STANDARD_TEXTURES, TextureTable
from .suits import COPIES_PER_TYPE, NUMBERED_SUITS, RED_FIVE_RANK, Suit, make_notation, suit_of


logger = logging.getLogger(__name__)

NUM_TILE_TYPES = 37
NUM_TILES = 136


class TileReaderError(Exception):
    """Base class for tile reader errors"""


class UnknownTexture(TileReaderError, KeyError):
    """A tile icon path resolved to a texture id the registry does not know"""

    def __init__(self, texture_path: str, texture_id: str):
        super().__init__(f"Unknown tile texture {texture_id!r} (from {texture_path!r})")
        self.texture_path = texture_path
        self.texture_id = texture_id

    def __str__(self) -> str:
        return self.args[0]


class DuplicateTextureId(TileReaderError, ValueError):
    """Two tile types would share a texture id (or a notation) while building the registry"""


@dataclass(frozen=True)
class TileTexture:
    """
    A tile type as drawn by the host.

    Attributes:
        texture_id: Opaque id of the icon texture, e.g. '076041'
        notation: Tile notation, e.g. '1m'
    """
    texture_id: str
    notation: str

    def __str__(self) -> str:
        return f"{self.notation} ({self.texture_id})"


def normalize_texture_path(texture_path: str) -> str:
    """
    Reduce a texture path to its bare texture id.

    'ui/icon/076000/076041_hr1.tex' -> '076041'
    """
    name = texture_path.rsplit("/", 1)[-1]
    if "." in name:
        name = name.split(".", 1)[0]
    return name.split("_", 1)[0]


class TileRegistry:
    """
    Bidirectional texture id <-> notation lookup plus baseline counts.

    Build with build_registry(); the two maps are mutual inverses and every
    mapping exposed is read-only.
    """

    def __init__(self, table: TextureTable):
        self.table = table
        self._by_notation: Dict[str, TileTexture] = {}
        self._by_texture_id: Dict[str, TileTexture] = {}
        self._baseline: Dict[str, int] = {}

    def _add(self, texture_id: str, notation: str, count: int) -> None:
        """Register one tile type. Only called while building."""
        if texture_id in self._by_texture_id:
            existing = self._by_texture_id[texture_id]
            raise DuplicateTextureId(
                f"Texture id {texture_id} already maps to {existing.notation}, cannot map it to {notation}"
            )
        if notation in self._by_notation:
            raise DuplicateTextureId(f"Notation {notation} is already registered")

        texture = TileTexture(texture_id, notation)
        self._by_texture_id[texture_id] = texture
        self._by_notation[notation] = texture
        self._baseline[notation] = count

    def _freeze(self) -> None:
        self.notation_to_texture: Mapping[str, TileTexture] = MappingProxyType(self._by_notation)
        self.texture_to_notation: Mapping[str, str] = MappingProxyType(
            {texture_id: texture.notation for texture_id, texture in self._by_texture_id.items()}
        )
        self.baseline_counts: Mapping[str, int] = MappingProxyType(self._baseline)

    @property
    def notations(self) -> List[str]:
        """All notations in registration order (m, p, s, z, then the red fives)"""
        return list(self._by_notation)

    def texture_for_notation(self, notation: str) -> TileTexture:
        return self._by_notation[notation]

    def notation_for_texture(self, texture_id: str) -> str:
        return self._by_texture_id[texture_id].notation

    def resolve(self, texture_path: str) -> TileTexture:
        """
        Look up the tile type drawn by a texture path.

        Args:
            texture_path: Full or bare texture path; directory, extension and
                variant suffix are stripped before the lookup

        Returns:
            The shared TileTexture for that id

        Raises:
            UnknownTexture: If the id is not a known tile texture
        """
        texture_id = normalize_texture_path(texture_path)
        texture = self._by_texture_id.get(texture_id)
        if texture is None:
            raise UnknownTexture(texture_path, texture_id)
        return texture

    def suit_total(self, suit: Suit) -> int:
        """Baseline number of physical tiles in a suit"""
        return sum(
            count for notation, count in self._baseline.items()
            if suit_of(notation) == suit
        )

    def __len__(self) -> int:
        return len(self._by_notation)

    def __contains__(self, key: object) -> bool:
        return key in self._by_notation or key in self._by_texture_id

    def __iter__(self) -> Iterator[TileTexture]:
        return iter(self._by_notation.values())

    def __repr__(self) -> str:
        return f"TileRegistry({self.table.name}, {len(self)} tile types)"


def build_registry(table: TextureTable = STANDARD_TEXTURES) -> TileRegistry:
    """
    Build the tile registry from a texture table.

    Args:
        table: Texture id layout of the host assets

    Returns:
        A fully populated, read-only TileRegistry

    Raises:
        DuplicateTextureId: If the table assigns one texture id to two tile types
        ValueError: If the table is missing a suit
    """
    registry = TileRegistry(table)

    for suit in Suit:
        for rank in suit.ranks:
            # Honors have no red tile, so all four copies keep their rank
            if suit.has_red_five and rank == 5:
                count = COPIES_PER_TYPE - 1
            else:
                count = COPIES_PER_TYPE
            registry._add(table.texture_id(suit, rank), make_notation(rank, suit), count)

    for suit in NUMBERED_SUITS:
        if suit not in table.red_five_ids:
            raise ValueError(f"Texture table {table.name} has no red five for {suit.name}")
        registry._add(table.red_five_ids[suit], make_notation(RED_FIVE_RANK, suit), 1)

    registry._freeze()
    logger.debug(f"Built {registry!r} covering {sum(registry.baseline_counts.values())} tiles")
    return registry


@lru_cache(maxsize=None)
def default_registry() -> TileRegistry:
    """The registry of the standard texture table, built on first use"""
    return build_registry(STANDARD_TEXTURES)


def build(table: TextureTable = STANDARD_TEXTURES) -> Tuple[
    Mapping[str, TileTexture], Mapping[str, str], Mapping[str, int]
]:
    """
    Build the registry and return its three tables.

    Returns:
        (notation_to_texture, texture_to_notation, baseline_counts)
    """
    registry = build_registry(table)
    return registry.notation_to_texture, registry.texture_to_notation, registry.baseline_counts
