"""
Node Crawler Interface

Boundary between the tile reader and whatever walks the host's UI tree.

The reader never looks inside an element reference. A crawler hands out the
references of every board area and, on request, reads the texture paths off
one reference:
1. Hand and discard nodes: one texture path, plus the discard slot flags
2. Meld group nodes: the texture paths of every tile in the group

SnapshotNodeCrawler serves a recorded board snapshot instead of a live tree.
Useful for replaying a board and for testing without the host application.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
import json
import logging
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from tile_reader.aggregator import BoardAreaPointers, DiscardTilePath
from tile_reader.observation import BoardArea


logger = logging.getLogger(__name__)


class NodeCrawlerInterface(ABC):
    """
    Abstract interface to the host UI tree.

    Implementations are called from the reader's worker thread.
    """

    @abstractmethod
    def get_board_area_pointers(self) -> BoardAreaPointers:
        """
        Get the element references of every board area.

        Returns:
            References per area, in on-screen order
        """
        pass

    @abstractmethod
    def extract_single_tile_path(self, ref: Any) -> Optional[DiscardTilePath]:
        """
        Read the texture path of a hand or discard node.

        Args:
            ref: Element reference from get_board_area_pointers

        Returns:
            The texture path and slot flags, or None if the node shows no tile
        """
        pass

    @abstractmethod
    def extract_multi_tile_paths(self, ref: Any) -> Optional[List[str]]:
        """
        Read the texture paths of every tile in a meld group node.

        Args:
            ref: Element reference from get_board_area_pointers

        Returns:
            Texture paths, or None if the group shows no tiles
        """
        pass


class SnapshotNodeCrawler(NodeCrawlerInterface):
    """
    Crawler over a recorded board snapshot.

    A snapshot maps board area keys to their entries:
        {
            "player_hand": ["ui/icon/076000/076041_hr1.tex", ...],
            "right_discard": [
                "ui/icon/076000/076050_hr1.tex",
                {"path": "ui/icon/076000/076051_hr1.tex", "melded": true},
                {"path": "ui/icon/076000/076052.tex", "tsumogiri": true},
            ],
            "far_meld_group": [["ui/icon/076000/076068.tex", ...], ...],
        }

    Element references are (area, index) pairs.
    """

    def __init__(self, snapshot: Optional[Dict[str, List[Any]]] = None):
        self.pointers = BoardAreaPointers()
        self._entries: Dict[BoardArea, List[Any]] = {area: [] for area in BoardArea}
        if snapshot:
            self.load(snapshot)

    @classmethod
    def from_json_file(cls, path) -> 'SnapshotNodeCrawler':
        with open(path, encoding="utf-8") as f:
            snapshot = json.load(f)
        if not isinstance(snapshot, dict):
            raise ValueError(f"Board snapshot must be a JSON object, got {type(snapshot).__name__}")
        return cls(snapshot)

    def load(self, snapshot: Dict[str, List[Any]]) -> None:
        """
        Replace the board with a new snapshot and track all of its nodes.

        Raises:
            ValueError: If the snapshot names an unknown board area
        """
        entries = {area: [] for area in BoardArea}
        for key, area_entries in snapshot.items():
            entries[BoardArea.from_key(key)] = list(area_entries or [])

        self._entries = entries
        self.pointers.wipe()
        for area, area_entries in entries.items():
            for index in range(len(area_entries)):
                self.pointers.track(area, (area, index))
        logger.debug(f"Loaded board snapshot with {self.pointers.total()} nodes")

    def get_board_area_pointers(self) -> BoardAreaPointers:
        return self.pointers.copy()

    def _entry(self, ref: Tuple[BoardArea, int]) -> Any:
        area, index = ref
        return self._entries[area][index]

    def extract_single_tile_path(self, ref: Tuple[BoardArea, int]) -> Optional[DiscardTilePath]:
        entry = self._entry(ref)
        if isinstance(entry, str):
            return DiscardTilePath(entry)
        if isinstance(entry, dict) and isinstance(entry.get("path"), str):
            return DiscardTilePath(
                entry["path"],
                melded=bool(entry.get("melded", False)),
                immediately_discarded=bool(entry.get("tsumogiri", False)),
            )
        return None

    def extract_multi_tile_paths(self, ref: Tuple[BoardArea, int]) -> Optional[List[str]]:
        entry = self._entry(ref)
        if not isinstance(entry, list):
            return None
        return [path for path in entry if isinstance(path, str)]

    def __repr__(self) -> str:
        return f"SnapshotNodeCrawler({self.pointers.total()} nodes)"
