"""
Mahjong Tile Reader
Tracks the tiles visible in the Mahjong minigame UI and how many of each remain unseen.
"""

from .suits import Suit, parse_notation, make_notation, suit_of
from .config import TextureTable, TexturePathStyle, ReaderConfig, STANDARD_TEXTURES, DEFAULT_CONFIG
from .textures import (
    TileTexture,
    TileRegistry,
    TileReaderError,
    UnknownTexture,
    DuplicateTextureId,
    build_registry,
    default_registry,
)
from .observation import BoardArea, TileSource, ObservedTile, classify
from .aggregator import BoardAreaPointers, DiscardTilePath, ObservationAggregator
from .counts import TileCountTracker, reconcile, negative_counts
from .session import ReaderSession, SessionState, CountSnapshot

__version__ = "0.1.0"
__all__ = [
    "Suit",
    "parse_notation",
    "make_notation",
    "suit_of",
    "TextureTable",
    "TexturePathStyle",
    "ReaderConfig",
    "STANDARD_TEXTURES",
    "DEFAULT_CONFIG",
    "TileTexture",
    "TileRegistry",
    "TileReaderError",
    "UnknownTexture",
    "DuplicateTextureId",
    "build_registry",
    "default_registry",
    "BoardArea",
    "TileSource",
    "ObservedTile",
    "classify",
    "BoardAreaPointers",
    "DiscardTilePath",
    "ObservationAggregator",
    "TileCountTracker",
    "reconcile",
    "negative_counts",
    "ReaderSession",
    "SessionState",
    "CountSnapshot",
]
