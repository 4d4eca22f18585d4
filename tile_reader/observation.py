"""
Observation Classifier

Turns a raw texture path read from a UI node into an ObservedTile tagged with
the board area it was seen in.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .textures import TileRegistry, TileTexture


class BoardArea(IntEnum):
    """Board areas where tiles are visible, in aggregation order"""
    PLAYER_HAND = 0
    PLAYER_DISCARD = 1
    RIGHT_DISCARD = 2
    FAR_DISCARD = 3
    LEFT_DISCARD = 4
    PLAYER_MELD_GROUP = 5
    RIGHT_MELD_GROUP = 6
    FAR_MELD_GROUP = 7
    LEFT_MELD_GROUP = 8

    @property
    def is_hand(self) -> bool:
        return self == BoardArea.PLAYER_HAND

    @property
    def is_discard(self) -> bool:
        return BoardArea.PLAYER_DISCARD <= self <= BoardArea.LEFT_DISCARD

    @property
    def is_meld(self) -> bool:
        return self >= BoardArea.PLAYER_MELD_GROUP

    @property
    def key(self) -> str:
        """Lower case name, as used in board snapshots"""
        return self.name.lower()

    @classmethod
    def from_key(cls, key: str) -> 'BoardArea':
        try:
            return cls[key.upper()]
        except KeyError:
            raise ValueError(f"Unknown board area: {key!r}") from None


class TileSource(IntEnum):
    """
    Where a single tile node sits, as far as counting is concerned.

    A discard that another player called is still drawn in the discard pile,
    but the same physical tile is also drawn inside that player's meld group.
    It is tagged CALLED_DISCARD and never counted from the pile.
    """
    HAND = 0
    DISCARD = 1
    CALLED_DISCARD = 2
    MELD = 3

    @property
    def is_counted(self) -> bool:
        return self != TileSource.CALLED_DISCARD

    @classmethod
    def for_area(cls, area: BoardArea, melded: bool = False) -> 'TileSource':
        """
        Tag a tile node from its area and melded flag.

        Raises:
            ValueError: If melded is set for an area other than a discard pile
        """
        if area.is_discard:
            return cls.CALLED_DISCARD if melded else cls.DISCARD
        if melded:
            raise ValueError(f"Only discard tiles can be flagged as melded, got {area.name}")
        if area.is_hand:
            return cls.HAND
        return cls.MELD


@dataclass(frozen=True)
class ObservedTile:
    """
    One physical tile seen on the board during a cycle.

    Attributes:
        area: Board area the tile was seen in
        texture: Shared tile type from the registry
        immediately_discarded: Discarded straight after being drawn (tsumogiri)
    """
    area: BoardArea
    texture: TileTexture
    immediately_discarded: bool = False

    @property
    def notation(self) -> str:
        return self.texture.notation

    def __str__(self) -> str:
        marker = " (tsumogiri)" if self.immediately_discarded else ""
        return f"{self.area.name}: {self.texture}{marker}"


def classify_source(
    registry: TileRegistry,
    raw_path: Optional[str],
    area: BoardArea,
    source: TileSource,
    immediately_discarded: bool = False,
) -> Optional[ObservedTile]:
    """
    Classify one tile node.

    Args:
        registry: Tile registry to resolve textures through
        raw_path: Texture path read from the node
        area: Board area of the node
        source: Counting tag of the node
        immediately_discarded: Tsumogiri marker of a discard node

    Returns:
        An ObservedTile, or None if the path is not a tile icon or the tile
        is counted elsewhere

    Raises:
        UnknownTexture: If the path looks like a tile icon but is not a known tile
    """
    if registry.table.path_style(raw_path) is None:
        return None
    texture = registry.resolve(raw_path)
    if not source.is_counted:
        return None
    return ObservedTile(area, texture, immediately_discarded)


def classify(
    registry: TileRegistry,
    raw_path: Optional[str],
    area: BoardArea,
    melded: bool = False,
) -> Optional[ObservedTile]:
    """Classify one tile node from its area and melded flag (see classify_source)"""
    return classify_source(registry, raw_path, area, TileSource.for_area(area, melded))
