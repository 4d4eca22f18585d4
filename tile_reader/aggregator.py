"""
Observation Aggregator

Collects the tiles visible in every board area into one list. Element
references are opaque: only the node crawler knows how to read them.

Hand and discard nodes hold one tile each. Meld group nodes bundle the
2-4 tiles of one call, so they go through multi-tile extraction.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional
import logging

from .observation import BoardArea, ObservedTile, TileSource, classify_source
from .textures import TileRegistry, UnknownTexture


logger = logging.getLogger(__name__)


class DiscardTilePath(NamedTuple):
    """Texture path of a single tile node plus the flags of its discard slot"""
    raw_path: str
    melded: bool = False
    immediately_discarded: bool = False


@dataclass
class BoardAreaPointers:
    """
    Element references of every board area, in on-screen order.

    Filled by the node crawler while it walks the UI tree.
    """
    areas: Dict[BoardArea, List[Any]] = field(
        default_factory=lambda: {area: [] for area in BoardArea}
    )

    def refs(self, area: BoardArea) -> List[Any]:
        return self.areas.setdefault(area, [])

    def track(self, area: BoardArea, ref: Any) -> None:
        self.refs(area).append(ref)

    def wipe(self) -> None:
        for area in BoardArea:
            self.areas[area] = []

    def total(self) -> int:
        """Number of tracked references over all areas"""
        return sum(len(refs) for refs in self.areas.values())

    def copy(self) -> 'BoardAreaPointers':
        return BoardAreaPointers({area: list(refs) for area, refs in self.areas.items()})

    def __repr__(self) -> str:
        return f"BoardAreaPointers({self.total()} refs)"


class ObservationAggregator:
    """
    Reads every tracked node through the crawler and classifies its tiles.

    The crawler must provide extract_single_tile_path(ref) and
    extract_multi_tile_paths(ref), see crawlers.NodeCrawlerInterface.
    """

    def __init__(self, registry: TileRegistry, crawler):
        self.registry = registry
        self.crawler = crawler

    def aggregate(self, pointers: BoardAreaPointers) -> List[ObservedTile]:
        """
        Collect the observed tiles of all board areas.

        A node that cannot be read or classified is logged and skipped; the
        rest of the board is still collected.

        Args:
            pointers: Element references per board area

        Returns:
            Observed tiles, area by area in BoardArea order
        """
        observed: List[ObservedTile] = []
        for area in BoardArea:
            for ref in pointers.refs(area):
                if area.is_meld:
                    observed.extend(self._observe_meld_group(area, ref))
                else:
                    tile = self._observe_single(area, ref)
                    if tile is not None:
                        observed.append(tile)
        return observed

    def _observe_single(self, area: BoardArea, ref: Any) -> Optional[ObservedTile]:
        try:
            extracted = self.crawler.extract_single_tile_path(ref)
        except Exception as e:
            logger.warning(f"Could not read {area.name} node {ref!r}: {e}")
            return None
        if extracted is None:
            return None

        try:
            slot = DiscardTilePath(*extracted)
            source = TileSource.for_area(area, slot.melded)
            return classify_source(
                self.registry, slot.raw_path, area, source, slot.immediately_discarded
            )
        except (UnknownTexture, ValueError, TypeError) as e:
            logger.warning(f"Skipping {area.name} node {ref!r}: {e}")
            return None

    def _observe_meld_group(self, area: BoardArea, ref: Any) -> List[ObservedTile]:
        try:
            raw_paths = self.crawler.extract_multi_tile_paths(ref)
        except Exception as e:
            logger.warning(f"Could not read {area.name} group {ref!r}: {e}")
            return []
        if not raw_paths:
            return []

        tiles = []
        for raw_path in raw_paths:
            try:
                tile = classify_source(self.registry, raw_path, area, TileSource.MELD)
            except UnknownTexture as e:
                logger.warning(f"Skipping tile in {area.name} group {ref!r}: {e}")
                continue
            if tile is not None:
                tiles.append(tile)
        return tiles
