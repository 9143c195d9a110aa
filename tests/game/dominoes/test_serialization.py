"""Tests for the structural form (serialize/deserialize) of LayoutTree."""

from __future__ import annotations

import json
import random

import pytest

from domino_ai.game.dominoes.layout import LayoutStructureError, LayoutTree
from domino_ai.game.dominoes.tile import Tile, all_tiles


def _t(a: int, b: int) -> Tile:
    return Tile.from_pips(a, b)


def _random_layout(rng: random.Random, max_pips: int = 6) -> LayoutTree:
    """Play random legal attachments until no tile fits."""
    layout = LayoutTree(max_pips)
    doubles = [t for t in all_tiles(max_pips) if t.is_double]
    root = rng.choice(doubles)
    layout.attach(root)
    remaining = [t for t in all_tiles(max_pips) if t != root]
    rng.shuffle(remaining)
    progress = True
    while progress:
        progress = False
        for tile in list(remaining):
            candidates = set()
            for v in set(tile.pips):
                candidates |= layout.nodes_with_open_end(v)
            if candidates:
                layout.attach(tile, rng.choice(sorted(candidates)))
                remaining.remove(tile)
                progress = True
    return layout


def _assert_same_index(a: LayoutTree, b: LayoutTree) -> None:
    assert a.max_pips == b.max_pips
    for v in range(a.max_pips + 1):
        assert a.open_end_count(v) == b.open_end_count(v), f"value {v}"
        assert a.nodes_with_open_end(v) == b.nodes_with_open_end(v), f"value {v}"


class TestSerialize:
    def test_empty(self) -> None:
        assert LayoutTree().serialize() == {"nodes": [], "max_pips": 6}

    def test_structure(self) -> None:
        layout = LayoutTree()
        layout.attach(_t(6, 6))
        layout.attach(_t(3, 6), 0)
        data = layout.serialize()
        assert data["max_pips"] == 6
        assert data["nodes"][0] == {"tile": (6, 6), "children": [1]}
        assert data["nodes"][1] == {"tile": (3, 6), "parent": 0, "children": []}

    def test_open_ends_are_not_persisted(self) -> None:
        layout = LayoutTree.from_text("3|3=(3|2,3|5)")
        text = layout.to_json()
        assert "open" not in text
        assert json.loads(text)["nodes"][0]["tile"] == [3, 3]


class TestRoundTrip:
    def test_simple(self) -> None:
        layout = LayoutTree.from_text("6|6=(6|3-3|3=(3|1,3|5-5|2),6|4)")
        restored = LayoutTree.deserialize(layout.serialize())
        assert restored == layout
        _assert_same_index(restored, layout)

    def test_json(self) -> None:
        layout = LayoutTree.from_text("5|5=(5|2-2|2=(2|0,2|4),5|1)")
        restored = LayoutTree.from_json(layout.to_json())
        assert restored.nodes == layout.nodes
        _assert_same_index(restored, layout)

    def test_empty(self) -> None:
        restored = LayoutTree.deserialize(LayoutTree(9).serialize())
        assert restored.is_empty()
        assert restored.max_pips == 9

    def test_random_layouts(self) -> None:
        rng = random.Random(7)
        for _ in range(25):
            layout = _random_layout(rng)
            restored = LayoutTree.deserialize(layout.serialize())
            assert restored.nodes == layout.nodes
            _assert_same_index(restored, layout)

    @pytest.mark.slow
    def test_random_large_sets(self) -> None:
        rng = random.Random(11)
        for _ in range(20):
            layout = _random_layout(rng, max_pips=12)
            _assert_same_index(LayoutTree.from_json(layout.to_json()), layout)

    def test_non_canonical_tiles_accepted(self) -> None:
        data = {
            "nodes": [
                {"tile": [4, 4], "children": [1]},
                {"tile": [6, 4], "parent": 0, "children": []},
            ],
            "max_pips": 6,
        }
        layout = LayoutTree.deserialize(data)
        assert layout.nodes[1].tile == _t(4, 6)
        assert layout.open_end_count(4) == 1
        assert layout.open_end_count(6) == 1


def _node(tile: list[int], parent: int | None = None, children: list[int] | None = None) -> dict:
    node: dict = {"tile": tile, "children": children or []}
    if parent is not None:
        node["parent"] = parent
    return node


class TestStructureErrors:
    def test_schema_error(self) -> None:
        with pytest.raises(LayoutStructureError) as info:
            LayoutTree.deserialize({"nodes": [{"tile": [1]}], "max_pips": 6})
        assert info.value.node_index is None

    def test_missing_max_pips(self) -> None:
        with pytest.raises(LayoutStructureError):
            LayoutTree.deserialize({"nodes": []})

    def test_bad_json(self) -> None:
        with pytest.raises(LayoutStructureError):
            LayoutTree.from_json("{not json")

    def test_pips_above_max(self) -> None:
        with pytest.raises(LayoutStructureError, match="maximum") as info:
            LayoutTree.deserialize({"nodes": [_node([9, 9])], "max_pips": 6})
        assert info.value.node_index == 0

    def test_root_double_with_three_children(self) -> None:
        data = {
            "nodes": [
                _node([3, 3], children=[1, 2, 3]),
                _node([3, 0], 0),
                _node([3, 1], 0),
                _node([3, 2], 0),
            ],
            "max_pips": 6,
        }
        with pytest.raises(LayoutStructureError, match="more than 2 children") as info:
            LayoutTree.deserialize(data)
        assert info.value.node_index == 0

    def test_non_double_with_two_children(self) -> None:
        data = {
            "nodes": [
                _node([3, 3], children=[1]),
                _node([3, 4], 0, [2, 3]),
                _node([4, 5], 1),
                _node([4, 6], 1),
            ],
            "max_pips": 6,
        }
        with pytest.raises(LayoutStructureError, match="more than 1 child") as info:
            LayoutTree.deserialize(data)
        assert info.value.node_index == 1

    def test_non_double_root(self) -> None:
        with pytest.raises(LayoutStructureError, match="double"):
            LayoutTree.deserialize({"nodes": [_node([1, 2])], "max_pips": 6})

    def test_unconnected_tiles(self) -> None:
        data = {"nodes": [_node([3, 3], children=[1]), _node([1, 2], 0)], "max_pips": 6}
        with pytest.raises(LayoutStructureError, match="not connected"):
            LayoutTree.deserialize(data)

    def test_same_end_connected_twice(self) -> None:
        # 3|4 は親とも子とも 3 でつながっている
        data = {
            "nodes": [
                _node([3, 3], children=[1]),
                _node([3, 4], 0, [2]),
                _node([3, 5], 1),
            ],
            "max_pips": 6,
        }
        with pytest.raises(LayoutStructureError, match="connected twice") as info:
            LayoutTree.deserialize(data)
        assert info.value.node_index == 1

    def test_parent_child_mismatch(self) -> None:
        data = {"nodes": [_node([3, 3]), _node([3, 4], 0)], "max_pips": 6}
        with pytest.raises(LayoutStructureError, match="child") as info:
            LayoutTree.deserialize(data)
        assert info.value.node_index == 1

    def test_child_out_of_range(self) -> None:
        data = {"nodes": [_node([3, 3], children=[5])], "max_pips": 6}
        with pytest.raises(LayoutStructureError):
            LayoutTree.deserialize(data)

    def test_second_root(self) -> None:
        data = {"nodes": [_node([3, 3]), _node([4, 4])], "max_pips": 6}
        with pytest.raises(LayoutStructureError, match="parent") as info:
            LayoutTree.deserialize(data)
        assert info.value.node_index == 1

    def test_is_value_error(self) -> None:
        assert issubclass(LayoutStructureError, ValueError)
