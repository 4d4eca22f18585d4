"""
Tests for the tile registry, classification and remaining counts
"""

import pytest
import numpy as np
import logging
import random

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tile_reader.suits import (
    Suit, NUMBERED_SUITS, parse_notation, make_notation, suit_of, is_red_five
)
from tile_reader.config import STANDARD_TEXTURES, TextureTable, TexturePathStyle
from tile_reader.textures import (
    UnknownTexture, DuplicateTextureId, NUM_TILES, NUM_TILE_TYPES,
    build_registry, build, default_registry, normalize_texture_path,
)
from tile_reader.observation import BoardArea, TileSource, ObservedTile, classify
from tile_reader.aggregator import BoardAreaPointers, DiscardTilePath, ObservationAggregator
from tile_reader.counts import (
    TileCountTracker, reconcile, negative_counts, combined_five, to_count_array, suit_counts
)
from tile_reader.display import render_remaining, render_observed
from crawlers import SnapshotNodeCrawler


def hr(texture_id: str) -> str:
    """High resolution icon path of a texture id"""
    return f"ui/icon/076000/{texture_id}_hr1.tex"


def base(texture_id: str) -> str:
    return f"ui/icon/076000/{texture_id}.tex"


@pytest.fixture(scope="module")
def registry():
    return build_registry()


def observe(registry, notations, area=BoardArea.PLAYER_HAND):
    """Observed tiles for a list of notations"""
    return [ObservedTile(area, registry.texture_for_notation(n)) for n in notations]


class TestSuits:
    """Test suit taxonomy and notation"""

    def test_suit_codes(self):
        """Test suit codes round trip"""
        assert [s.code for s in Suit] == ["m", "p", "s", "z"]
        for suit in Suit:
            assert Suit.from_code(suit.code) == suit

        with pytest.raises(ValueError):
            Suit.from_code("x")

    def test_ranks(self):
        """Test valid ranks per suit"""
        assert Suit.MAN.ranks == tuple(range(1, 10))
        assert Suit.HONOR.ranks == tuple(range(1, 8))

        assert Suit.PIN.is_valid_rank(0)
        assert not Suit.HONOR.is_valid_rank(0)
        assert not Suit.HONOR.is_valid_rank(8)

    def test_parse_notation(self):
        """Test parsing tile notation"""
        assert parse_notation("1m") == (1, Suit.MAN)
        assert parse_notation("0p") == (0, Suit.PIN)
        assert parse_notation("7z") == (7, Suit.HONOR)
        assert suit_of("9s") == Suit.SOU
        assert is_red_five("0s")
        assert not is_red_five("5s")

    @pytest.mark.parametrize("notation", ["0z", "8z", "10m", "5x", "m5", "", "5"])
    def test_invalid_notation(self, notation):
        """Test malformed notation raises error"""
        with pytest.raises(ValueError):
            parse_notation(notation)

    def test_make_notation(self):
        assert make_notation(5, Suit.SOU) == "5s"
        with pytest.raises(ValueError):
            make_notation(0, Suit.HONOR)


class TestRegistry:
    """Test the tile identity registry"""

    def test_tile_type_count(self, registry):
        """Test 37 tile types covering 136 tiles"""
        assert len(registry) == NUM_TILE_TYPES
        assert sum(registry.baseline_counts.values()) == NUM_TILES

    def test_bijection(self, registry):
        """Test the two lookups are inverses"""
        for notation, texture in registry.notation_to_texture.items():
            assert registry.texture_to_notation[texture.texture_id] == notation
        for texture_id, notation in registry.texture_to_notation.items():
            assert registry.notation_to_texture[notation].texture_id == texture_id
            assert registry.notation_for_texture(texture_id) == notation
        assert len(registry.texture_to_notation) == len(registry.notation_to_texture)

    def test_suit_totals(self, registry):
        """Test baseline sums per suit"""
        for suit in NUMBERED_SUITS:
            assert registry.suit_total(suit) == 36
        assert registry.suit_total(Suit.HONOR) == 28

    def test_baseline_counts(self, registry):
        """Test red fives take one copy from the 5s"""
        counts = registry.baseline_counts
        assert counts["1m"] == 4
        assert counts["5m"] == 3
        assert counts["0m"] == 1
        assert counts["5p"] == 3
        assert counts["0s"] == 1
        assert counts["5z"] == 4
        assert counts["7z"] == 4

    def test_texture_ids(self, registry):
        """Test texture ids follow the icon numbering"""
        assert registry.texture_for_notation("1m").texture_id == "076041"
        assert registry.texture_for_notation("9m").texture_id == "076049"
        assert registry.texture_for_notation("1p").texture_id == "076050"
        assert registry.texture_for_notation("1s").texture_id == "076059"
        assert registry.texture_for_notation("1z").texture_id == "076068"
        assert registry.texture_for_notation("7z").texture_id == "076074"
        assert registry.texture_for_notation("0m").texture_id == "076075"
        assert registry.texture_for_notation("0p").texture_id == "076076"
        assert registry.texture_for_notation("0s").texture_id == "076077"

    def test_read_only(self, registry):
        """Test exposed maps cannot be modified"""
        with pytest.raises(TypeError):
            registry.baseline_counts["1m"] = 0
        with pytest.raises(TypeError):
            registry.notation_to_texture["1m"] = None

    def test_shared_textures(self, registry):
        """Test resolving returns the registry's own TileTexture"""
        texture = registry.resolve(hr("076041"))
        assert texture is registry.texture_for_notation("1m")
        assert registry.resolve(base("076041")) is texture

    def test_build_is_deterministic(self):
        """Test two builds give equal tables"""
        a = build()
        b = build()
        assert dict(a[0]) == dict(b[0])
        assert dict(a[1]) == dict(b[1])
        assert dict(a[2]) == dict(b[2])

    def test_default_registry_built_once(self):
        assert default_registry() is default_registry()

    def test_contains(self, registry):
        assert "5p" in registry
        assert "076054" in registry
        assert "8z" not in registry

    def test_duplicate_offsets(self):
        """Test overlapping suit offsets refuse to build"""
        table = TextureTable(
            name="Overlapping",
            suit_offsets={
                Suit.MAN: 76040,
                Suit.PIN: 76045,  # overlaps 6m-9m
                Suit.SOU: 76058,
                Suit.HONOR: 76067,
            },
            red_five_ids=dict(STANDARD_TEXTURES.red_five_ids),
        )
        with pytest.raises(DuplicateTextureId):
            build_registry(table)

    def test_duplicate_red_five(self):
        """Test a red five reusing a tile id refuses to build"""
        red_five_ids = dict(STANDARD_TEXTURES.red_five_ids)
        red_five_ids[Suit.PIN] = "076045"
        table = TextureTable(
            name="Bad red",
            suit_offsets=dict(STANDARD_TEXTURES.suit_offsets),
            red_five_ids=red_five_ids,
        )
        with pytest.raises(DuplicateTextureId):
            build_registry(table)

    def test_missing_suit(self):
        table = TextureTable(name="Empty")
        with pytest.raises(ValueError):
            build_registry(table)


class TestResolve:
    """Test texture path resolution"""

    def test_normalize(self):
        assert normalize_texture_path(hr("076041")) == "076041"
        assert normalize_texture_path(base("076041")) == "076041"
        assert normalize_texture_path("076041") == "076041"

    def test_unknown_texture(self, registry):
        """Test unknown ids raise UnknownTexture"""
        with pytest.raises(UnknownTexture) as exc_info:
            registry.resolve(hr("076099"))
        assert exc_info.value.texture_id == "076099"
        assert "076099" in str(exc_info.value)

    def test_path_styles(self):
        """Test recognized icon path forms"""
        table = STANDARD_TEXTURES
        assert table.path_style(hr("076041")) == TexturePathStyle.HIGH_RES
        assert table.path_style(base("076041")) == TexturePathStyle.BASE
        assert table.path_style("ui/uld/emj_frame_hr1.tex") is None
        assert table.path_style("ui/icon/076000/sub/076041.tex") is None
        assert table.path_style("ui/icon/076000/076041.png") is None
        assert table.path_style("") is None
        assert table.path_style(None) is None
        assert table.path_style(42) is None

    def test_texture_path_builder(self):
        assert STANDARD_TEXTURES.texture_path("076041") == base("076041")
        assert STANDARD_TEXTURES.texture_path("076041", TexturePathStyle.HIGH_RES) == hr("076041")


class TestClassifier:
    """Test observation classification"""

    def test_hand_tile(self, registry):
        tile = classify(registry, hr("076045"), BoardArea.PLAYER_HAND)
        assert tile is not None
        assert tile.notation == "5m"
        assert tile.area == BoardArea.PLAYER_HAND

    def test_non_tile_path(self, registry):
        """Test non tile paths give no observation"""
        assert classify(registry, "ui/uld/emj_frame_hr1.tex", BoardArea.PLAYER_HAND) is None
        assert classify(registry, None, BoardArea.RIGHT_DISCARD) is None

    def test_unknown_tile_path(self, registry):
        """Test a tile icon path with an unknown id raises"""
        with pytest.raises(UnknownTexture):
            classify(registry, hr("076000"), BoardArea.PLAYER_HAND)

    def test_melded_discard_excluded(self, registry):
        """Test a called discard is not counted from the pile"""
        path = hr("076050")
        assert classify(registry, path, BoardArea.LEFT_DISCARD, melded=True) is None
        tile = classify(registry, path, BoardArea.LEFT_DISCARD, melded=False)
        assert tile is not None
        assert tile.notation == "1p"

    def test_tile_source(self):
        """Test melded flag is only legal on discard piles"""
        assert TileSource.for_area(BoardArea.FAR_DISCARD, True) == TileSource.CALLED_DISCARD
        assert TileSource.for_area(BoardArea.FAR_DISCARD) == TileSource.DISCARD
        assert TileSource.for_area(BoardArea.PLAYER_HAND) == TileSource.HAND
        assert TileSource.for_area(BoardArea.LEFT_MELD_GROUP) == TileSource.MELD
        with pytest.raises(ValueError):
            TileSource.for_area(BoardArea.PLAYER_HAND, True)
        with pytest.raises(ValueError):
            classify(default_registry(), hr("076041"), BoardArea.RIGHT_MELD_GROUP, melded=True)

    def test_board_areas(self):
        """Test area kinds and order"""
        assert [a for a in BoardArea if a.is_discard] == [
            BoardArea.PLAYER_DISCARD, BoardArea.RIGHT_DISCARD,
            BoardArea.FAR_DISCARD, BoardArea.LEFT_DISCARD,
        ]
        assert len([a for a in BoardArea if a.is_meld]) == 4
        assert BoardArea.from_key("far_meld_group") == BoardArea.FAR_MELD_GROUP
        with pytest.raises(ValueError):
            BoardArea.from_key("wall")


class TestAggregator:
    """Test collecting observations over the board"""

    def test_empty_board(self, registry):
        crawler = SnapshotNodeCrawler()
        aggregator = ObservationAggregator(registry, crawler)
        assert aggregator.aggregate(crawler.get_board_area_pointers()) == []

    def test_area_order(self, registry):
        """Test tiles come out area by area in the fixed order"""
        crawler = SnapshotNodeCrawler({
            "left_meld_group": [[hr("076068"), hr("076068"), hr("076068")]],
            "far_discard": [hr("076050")],
            "player_hand": [hr("076041"), hr("076042")],
        })
        aggregator = ObservationAggregator(registry, crawler)
        observed = aggregator.aggregate(crawler.get_board_area_pointers())

        assert [t.notation for t in observed] == ["1m", "2m", "1p", "1z", "1z", "1z"]
        assert [t.area for t in observed] == [
            BoardArea.PLAYER_HAND, BoardArea.PLAYER_HAND, BoardArea.FAR_DISCARD,
            BoardArea.LEFT_MELD_GROUP, BoardArea.LEFT_MELD_GROUP, BoardArea.LEFT_MELD_GROUP,
        ]

    def test_discard_flags(self, registry):
        """Test melded discards are skipped and tsumogiri is carried"""
        crawler = SnapshotNodeCrawler({
            "right_discard": [
                {"path": hr("076050"), "melded": True},
                {"path": hr("076051"), "tsumogiri": True},
            ],
        })
        aggregator = ObservationAggregator(registry, crawler)
        observed = aggregator.aggregate(crawler.get_board_area_pointers())

        assert len(observed) == 1
        assert observed[0].notation == "2p"
        assert observed[0].immediately_discarded

    def test_bad_nodes_are_isolated(self, registry, caplog):
        """Test one bad node does not drop the rest of the board"""
        crawler = SnapshotNodeCrawler({
            "player_hand": [hr("076041"), hr("076099"), 42, None, hr("076043")],
            "far_meld_group": [[hr("076099"), hr("076054")], "not a group"],
        })
        aggregator = ObservationAggregator(registry, crawler)
        with caplog.at_level(logging.WARNING):
            observed = aggregator.aggregate(crawler.get_board_area_pointers())

        assert [t.notation for t in observed] == ["1m", "3m", "5p"]
        assert "076099" in caplog.text

    def test_non_string_paths_are_isolated(self, registry):
        """Test malformed paths from a crawler are not tiles"""

        class MalformedCrawler(SnapshotNodeCrawler):
            def extract_single_tile_path(self, ref):
                if ref == (BoardArea.PLAYER_HAND, 0):
                    return (42, False)
                return super().extract_single_tile_path(ref)

            def extract_multi_tile_paths(self, ref):
                return [42, hr("076041")]

        crawler = MalformedCrawler({
            "player_hand": [hr("076042"), hr("076043")],
            "right_meld_group": [[hr("076041")]],
        })
        aggregator = ObservationAggregator(registry, crawler)
        observed = aggregator.aggregate(crawler.get_board_area_pointers())
        assert [t.notation for t in observed] == ["3m", "1m"]

    def test_crawler_failure_is_isolated(self, registry):
        """Test a crawler error on one node is treated as no observation"""

        class FlakyCrawler(SnapshotNodeCrawler):
            def extract_single_tile_path(self, ref):
                if ref == (BoardArea.PLAYER_HAND, 1):
                    raise RuntimeError("stale node")
                return super().extract_single_tile_path(ref)

        crawler = FlakyCrawler({"player_hand": [hr("076041"), hr("076042"), hr("076043")]})
        aggregator = ObservationAggregator(registry, crawler)
        observed = aggregator.aggregate(crawler.get_board_area_pointers())
        assert [t.notation for t in observed] == ["1m", "3m"]

    def test_plain_tuple_extraction(self, registry):
        """Test crawlers may return a plain (path, melded) tuple"""

        class TupleCrawler(SnapshotNodeCrawler):
            def extract_single_tile_path(self, ref):
                slot = super().extract_single_tile_path(ref)
                return (slot.raw_path, slot.melded)

        crawler = TupleCrawler({"player_discard": [hr("076041"), {"path": hr("076042"), "melded": True}]})
        aggregator = ObservationAggregator(registry, crawler)
        observed = aggregator.aggregate(crawler.get_board_area_pointers())
        assert [t.notation for t in observed] == ["1m"]

    def test_pointers(self):
        pointers = BoardAreaPointers()
        pointers.track(BoardArea.PLAYER_HAND, "a")
        pointers.track(BoardArea.LEFT_DISCARD, "b")
        assert pointers.total() == 2

        copied = pointers.copy()
        pointers.wipe()
        assert pointers.total() == 0
        assert copied.refs(BoardArea.LEFT_DISCARD) == ["b"]

    def test_discard_tile_path_defaults(self):
        slot = DiscardTilePath(hr("076041"))
        assert not slot.melded
        assert not slot.immediately_discarded


class TestCounts:
    """Test the remaining-count engine"""

    def test_no_observations(self, registry):
        """Test reconciling nothing gives the baseline"""
        remaining, suits = reconcile(registry.baseline_counts, [])
        assert remaining == dict(registry.baseline_counts)
        assert suits == {"m": 36, "p": 36, "s": 36}

    def test_baseline_not_mutated(self, registry):
        before = dict(registry.baseline_counts)
        reconcile(registry.baseline_counts, observe(registry, ["1m", "1m", "7z"]))
        assert dict(registry.baseline_counts) == before

    def test_order_independent(self, registry):
        """Test any permutation gives the same counts"""
        observed = observe(registry, ["1m", "2m", "2m", "0p", "5p", "7z", "9s", "1z"])
        expected = reconcile(registry.baseline_counts, observed)

        rng = random.Random(7)
        for _ in range(5):
            shuffled = list(observed)
            rng.shuffle(shuffled)
            assert reconcile(registry.baseline_counts, shuffled) == expected

    def test_all_fives_seen(self, registry):
        """Test seeing every 5m empties 5m, 0m and drops the suit by 4"""
        observed = observe(registry, ["5m", "5m", "5m", "0m"])
        remaining, suits = reconcile(registry.baseline_counts, observed)

        assert remaining["5m"] == 0
        assert remaining["0m"] == 0
        assert suits["m"] == 36 - 4
        assert suits["p"] == 36
        assert combined_five(remaining, Suit.MAN) == 0

    def test_honors_excluded_from_suits(self, registry):
        observed = observe(registry, ["1z", "2z", "7z"])
        remaining, suits = reconcile(registry.baseline_counts, observed)
        assert "z" not in suits
        assert suits == {"m": 36, "p": 36, "s": 36}
        assert remaining["1z"] == 3

    def test_negative_counts_kept(self, registry):
        """Test over-counting is not clamped"""
        observed = observe(registry, ["0s", "0s"])
        remaining, suits = reconcile(registry.baseline_counts, observed)

        assert remaining["0s"] == -1
        assert suits["s"] == 34
        assert negative_counts(remaining) == {"0s": -1}

    def test_no_state_between_calls(self, registry):
        """Test disjoint observations are each counted from the baseline"""
        tracker = TileCountTracker(registry.baseline_counts)
        first, _ = tracker.reconcile(observe(registry, ["1m", "1m"]))
        second, second_suits = tracker.reconcile(observe(registry, ["9p"]))

        assert first["1m"] == 2
        assert second["1m"] == 4
        assert second["9p"] == 3
        assert second_suits == {"m": 36, "p": 35, "s": 36}

    def test_count_array(self, registry):
        tracker = TileCountTracker(registry.baseline_counts)
        remaining = tracker.remaining_from_observed(observe(registry, ["3s", "4z"]))

        counts = to_count_array(remaining, registry.notations)
        assert counts.shape == (NUM_TILE_TYPES,)
        assert counts.dtype == np.int16
        assert counts[registry.notations.index("3s")] == 3
        assert tracker.total_remaining(remaining) == NUM_TILES - 2

    def test_suit_counts_of_remaining(self, registry):
        remaining = dict(registry.baseline_counts)
        remaining["0p"] = 0
        assert suit_counts(remaining)["p"] == 35


class TestDisplay:
    """Test text rendering"""

    def test_baseline_table(self, registry):
        remaining, suits = reconcile(registry.baseline_counts, [])
        text = render_remaining(remaining, suits)
        lines = text.splitlines()

        assert lines[0].startswith("1m x4")
        assert "5m x4*" in lines[4]
        assert "[m] x36" in lines[2]
        assert "[p] x36" in lines[4]
        assert "[s] x36" in lines[6]
        assert "East x4" in text
        assert "Red x4" in text
        assert "!" not in text

    def test_red_five_gone(self, registry):
        remaining, suits = reconcile(registry.baseline_counts, observe(registry, ["0p"]))
        five_row = render_remaining(remaining, suits).splitlines()[4]
        assert "5p x3" in five_row
        assert "5p x3*" not in five_row
        assert "5m x4*" in five_row

    def test_negative_flagged(self, registry):
        remaining, suits = reconcile(registry.baseline_counts, observe(registry, ["1z"] * 5))
        assert "East x-1!" in render_remaining(remaining, suits)

    def test_negative_red_five_flagged(self, registry):
        """Test a red five below zero is flagged even though the 5 row sum is not"""
        remaining, suits = reconcile(registry.baseline_counts, observe(registry, ["0m", "0m"]))
        assert remaining["0m"] == -1
        five_row = render_remaining(remaining, suits).splitlines()[4]
        assert "5m x2!" in five_row
        assert "5p x4*" in five_row

    def test_negative_five_flagged_with_red_left(self, registry):
        remaining, suits = reconcile(registry.baseline_counts, observe(registry, ["5s"] * 4))
        five_row = render_remaining(remaining, suits).splitlines()[4]
        assert "5s x0!" in five_row

    def test_observed_listing(self, registry):
        observed = observe(registry, ["2s"], BoardArea.FAR_DISCARD)
        text = render_observed(observed, registry)
        assert "FAR_DISCARD" in text
        assert hr("076060") in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
