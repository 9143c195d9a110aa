"""Tests for Tile and the pip/ordinal mapping."""

import pytest

from domino_ai.game.dominoes.tile import Tile, all_tiles, pips_to_ordinal
from domino_ai.game.dominoes.types import MAX_PIPS, set_size


class TestOrdinal:
    def test_first_tiles(self) -> None:
        assert Tile(0).pips == (0, 0)
        assert Tile(1).pips == (0, 1)
        assert Tile(2).pips == (1, 1)
        assert Tile(5).pips == (2, 2)

    def test_double_six_set_bounds(self) -> None:
        assert Tile(21).pips == (0, 6)
        assert Tile(27).pips == (6, 6)

    def test_bijection(self) -> None:
        seen = set()
        for ordinal in range(set_size(MAX_PIPS)):
            lo, hi = Tile(ordinal).pips
            assert lo <= hi
            assert pips_to_ordinal(lo, hi) == ordinal
            seen.add((lo, hi))
        assert len(seen) == 253

    def test_out_of_range_ordinal(self) -> None:
        with pytest.raises(ValueError):
            Tile(253)
        with pytest.raises(ValueError):
            Tile(-1)

    def test_out_of_range_pips(self) -> None:
        with pytest.raises(ValueError):
            Tile.from_pips(3, 22)


class TestCanonicalForm:
    def test_order_independent(self) -> None:
        assert Tile.from_pips(5, 3) == Tile.from_pips(3, 5)
        assert Tile.from_pips(5, 3).pips == (3, 5)

    def test_str(self) -> None:
        assert str(Tile.from_pips(5, 3)) == "3|5"
        assert str(Tile.from_pips(6, 6)) == "6|6"
        assert str(Tile.from_pips(0, 1)) == "0|1"


class TestProperties:
    def test_is_double(self) -> None:
        assert Tile.from_pips(0, 0).is_double
        assert Tile.from_pips(6, 6).is_double
        assert not Tile.from_pips(1, 2).is_double

    def test_score(self) -> None:
        assert Tile.from_pips(0, 0).score() == 0
        assert Tile.from_pips(3, 5).score() == 8
        assert Tile.from_pips(6, 6).score() == 12

    def test_other(self) -> None:
        tile = Tile.from_pips(2, 5)
        assert tile.other(2) == 5
        assert tile.other(5) == 2
        assert Tile.from_pips(4, 4).other(4) == 4
        with pytest.raises(ValueError):
            tile.other(3)

    def test_matches(self) -> None:
        tile = Tile.from_pips(2, 5)
        assert tile.matches(Tile.from_pips(5, 6)) == (5, 2)
        assert tile.matches(Tile.from_pips(1, 2)) == (2, 5)
        assert tile.matches(Tile.from_pips(0, 1)) is None

    def test_ordering_and_hash(self) -> None:
        assert Tile.from_pips(1, 2) < Tile.from_pips(2, 3)
        table = {Tile.from_pips(1, 2): "first", Tile.from_pips(3, 4): "second"}
        assert table[Tile.from_pips(2, 1)] == "first"


def test_all_tiles() -> None:
    tiles = all_tiles(2)
    assert [t.pips for t in tiles] == [(0, 0), (0, 1), (1, 1), (0, 2), (1, 2), (2, 2)]
    assert len(all_tiles(6)) == 28
