"""Layout of placed tiles.

場に出た牌の配置（レイアウト）。

レイアウトは一列ではなく木構造になる。ダブルは親と最大2つの子、
合わせて3方向に接続できるため、そこで枝分かれする。

ノードはリスト（アリーナ）に追加順で格納し、親子関係は添字で表す:
- nodes[0] がルート（最初に置いた牌。必ずダブル）
- ノードは削除されない（レイアウトは増える一方）

開いている端（まだ牌をつなげられる目）は派生データとして持つ:
- _open:       ノード添字 → 開いている目のリスト（ダブルは同じ目が2つ入ることがある）
- _end_counts: 目ごとの開いている端の総数

派生データは attach() で差分更新するか、deserialize() で接続関係だけから作り直す。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from domino_ai.game.dominoes.parser import LayoutParseError, TileTree, parse
from domino_ai.game.dominoes.schema import LayoutModel, LayoutNodeModel
from domino_ai.game.dominoes.tile import Tile
from domino_ai.game.dominoes.types import DEFAULT_MAX_PIPS, check_max_pips


class LayoutStructureError(ValueError):
    """Raised when persisted layout data is structurally inconsistent.

    読み込んだデータの接続関係が壊れているときに送出する。
    node_index は問題のあったノード（スキーマ自体の不正なら None）。
    """

    def __init__(self, message: str, node_index: int | None = None) -> None:
        prefix = "Invalid layout" if node_index is None else f"Invalid layout node {node_index}"
        super().__init__(f"{prefix}: {message}")
        self.message = message
        self.node_index = node_index


@dataclass
class LayoutNode:
    """A single placed tile.

    parent が None なのはルートだけ。children は接続した順に並ぶ。
    """

    tile: Tile
    parent: int | None = None
    children: list[int] = field(default_factory=list)


class LayoutTree:
    """The branching layout of placed tiles with an index of open ends."""

    def __init__(self, max_pips: int = DEFAULT_MAX_PIPS) -> None:
        self._max_pips = check_max_pips(max_pips)
        self._nodes: list[LayoutNode] = []
        self._open: dict[int, list[int]] = {}
        self._end_counts: list[int] = [0] * (max_pips + 1)  # 目は 0..max_pips

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------

    @property
    def max_pips(self) -> int:
        return self._max_pips

    @property
    def nodes(self) -> tuple[LayoutNode, ...]:
        """配置済みのノードのコピー（添字 = ノード番号）。

        変更しても元のレイアウトには影響しない。
        """
        return tuple(LayoutNode(n.tile, n.parent, list(n.children)) for n in self._nodes)

    @property
    def end_counts(self) -> tuple[int, ...]:
        """目ごとの開いている端の数。"""
        return tuple(self._end_counts)

    def __len__(self) -> int:
        return len(self._nodes)

    def is_empty(self) -> bool:
        return not self._nodes

    def open_end_count(self, value: int) -> int:
        """Return the number of open ends showing ``value``.

        目 ``value`` の開いている端の数を返す（O(1)）。
        """
        self._check_value(value)
        return self._end_counts[value]

    def nodes_with_open_end(self, value: int) -> set[int]:
        """Return the indices of nodes with an open end showing ``value``."""
        self._check_value(value)
        if self._end_counts[value] == 0:
            return set()  # その目の端がなければ索引を見るまでもない
        return {index for index, ends in self._open.items() if value in ends}

    def open_ends(self, index: int) -> tuple[int, ...]:
        """ノード ``index`` の開いている目（空き端がなければ空）。"""
        if not 0 <= index < len(self._nodes):
            raise ValueError(f"Node {index} does not exist")
        return tuple(self._open.get(index, ()))

    # ------------------------------------------------------------------
    # 配置
    # ------------------------------------------------------------------

    def attach(self, tile: Tile, parent: int | None = None) -> tuple[int, int]:
        """Attach a tile to the layout.

        牌をレイアウトに置く。

        parent が None なら最初の牌（ダブルのみ、レイアウトが空のとき）。
        それ以外は parent ノードの開いている端のうち、牌と同じ目の端に接続する。

        Returns (new open value, number of open ends created).
        ダブルなら同じ目の端が2つ、それ以外は1つ開く。
        呼び出し側はこの戻り値を使ってフィンガープリントを更新する。

        Raises ValueError if the parent does not exist or has no matching
        open end, or if the first tile is not a double.
        """
        lo, hi = tile.pips
        if hi > self._max_pips:
            raise ValueError(f"{tile} exceeds the maximum pip value {self._max_pips}")

        if parent is None:
            if self._nodes:
                raise ValueError("Layout is not empty: a parent node is required")
            if not tile.is_double:
                raise ValueError(f"First tile must be a double, got {tile}")
            self._nodes.append(LayoutNode(tile))
            # 最初のダブルは両端とも開いている
            self._add_open(0, lo, 2)
            return lo, 2

        if not self._nodes:
            raise ValueError("Layout is empty: the first tile cannot have a parent")
        if not 0 <= parent < len(self._nodes):
            raise ValueError(f"Parent node {parent} does not exist")
        ends = self._open.get(parent)
        if not ends:
            raise ValueError(f"Parent node {parent} has no open ends")

        if lo in ends:
            matched, open_value = lo, hi
        elif hi in ends:
            matched, open_value = hi, lo
        else:
            raise ValueError(
                f"{tile} cannot attach to node {parent} (open ends: {sorted(ends)})"
            )

        index = len(self._nodes)
        self._nodes.append(LayoutNode(tile, parent=parent))
        self._nodes[parent].children.append(index)

        # 親の端を1つ閉じる（ダブルの親は同じ目が複数あるので1つだけ消す）
        self._remove_open(parent, matched)
        created = 2 if tile.is_double else 1
        self._add_open(index, open_value, created)
        return open_value, created

    def copy(self) -> LayoutTree:
        """Return an independent copy (cheap: plain data only)."""
        clone = LayoutTree(self._max_pips)
        clone._nodes = [LayoutNode(n.tile, n.parent, list(n.children)) for n in self._nodes]
        clone._open = {index: list(ends) for index, ends in self._open.items()}
        clone._end_counts = list(self._end_counts)
        return clone

    # ------------------------------------------------------------------
    # テキスト表現
    # ------------------------------------------------------------------

    def to_text(self) -> str:
        """Render the layout as a layout string.

        レイアウトを文字列にする。各牌は接続側の目を先に書く。
        - 子が1つ: ``6|6-6|3-3|1``
        - 子が2つ以上: ``3|3=(3|2,3|5)``
        空のレイアウトは空文字列。
        """
        if not self._nodes:
            return ""
        root = self._nodes[0].tile
        if not root.is_double:
            raise ValueError(f"First node must be a double, got {root}")
        return self._format_node(0, root.pips[0])

    def _format_node(self, index: int, entry: int) -> str:
        node = self._nodes[index]
        exit_value = node.tile.other(entry)
        text = f"{entry}|{exit_value}"
        if len(node.children) == 1:
            text += "-" + self._format_node(node.children[0], exit_value)
        elif node.children:
            branches = ",".join(self._format_node(child, exit_value) for child in node.children)
            text += f"=({branches})"
        return text

    @classmethod
    def from_text(cls, text: str, max_pips: int = DEFAULT_MAX_PIPS) -> LayoutTree:
        """Parse a layout string into a LayoutTree.

        文字列からレイアウトを組み立てる。ノード番号は先行順（pre-order）で振る。
        空白だけの文字列は空のレイアウトになる。

        Raises LayoutParseError (message + position) on any invalid input;
        a partially built tree is never returned.
        """
        layout = cls(max_pips)
        if not text.strip():
            return layout

        tree = parse(text, max_pips)
        if not tree.tile.is_double:
            raise LayoutParseError(f"First tile must be a double, got {tree.tile}", tree.position or 0)
        layout.attach(tree.tile)

        # 先行順で attach していく（スタックには子を逆順に積む）
        stack = [(0, child) for child in reversed(tree.children)]
        while stack:
            parent, branch = stack.pop()
            if not layout._open.get(parent):
                raise LayoutParseError(
                    f"{layout._nodes[parent].tile} has no open end left for {branch.tile}",
                    branch.position or 0,
                )
            index = len(layout._nodes)
            layout.attach(branch.tile, parent)
            stack.extend((index, child) for child in reversed(branch.children))
        return layout

    def to_tile_tree(self) -> TileTree | None:
        """Return the layout as a generic parent/child tree (None if empty)."""
        if not self._nodes:
            return None
        views = [TileTree(node.tile) for node in self._nodes]
        for node, view in zip(self._nodes, views):
            view.children = [views[child] for child in node.children]
        return views[0]

    def __eq__(self, other: object) -> bool:
        # 木の形（牌と子の順序）で比べる。ノード番号の振り方は問わない
        if not isinstance(other, LayoutTree):
            return NotImplemented
        return self._max_pips == other._max_pips and self.to_tile_tree() == other.to_tile_tree()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"LayoutTree({self.to_text()!r}, max_pips={self._max_pips})"

    # ------------------------------------------------------------------
    # 構造的な直列化
    # ------------------------------------------------------------------

    def serialize(self) -> dict[str, Any]:
        """Return the structural form: nodes and the maximum pip value.

        開いている端の索引は保存しない（読み込み時に作り直す）。
        """
        return self._to_model().model_dump(exclude_none=True)

    def to_json(self) -> str:
        return self._to_model().model_dump_json(exclude_none=True)

    def _to_model(self) -> LayoutModel:
        return LayoutModel(
            nodes=[
                LayoutNodeModel(tile=node.tile.pips, parent=node.parent, children=list(node.children))
                for node in self._nodes
            ],
            max_pips=self._max_pips,
        )

    @classmethod
    def deserialize(cls, data: Mapping[str, Any] | LayoutModel) -> LayoutTree:
        """Rebuild a layout from its structural form.

        構造データからレイアウトを復元する。
        データは信頼できない前提で検証し、不整合があれば LayoutStructureError を送出する。
        """
        if isinstance(data, LayoutModel):
            return cls._from_model(data)
        try:
            model = LayoutModel.model_validate(data)
        except ValidationError as exc:
            raise LayoutStructureError(str(exc)) from exc
        return cls._from_model(model)

    @classmethod
    def from_json(cls, text: str | bytes) -> LayoutTree:
        try:
            model = LayoutModel.model_validate_json(text)
        except ValidationError as exc:
            raise LayoutStructureError(str(exc)) from exc
        return cls._from_model(model)

    @classmethod
    def _from_model(cls, model: LayoutModel) -> LayoutTree:
        layout = cls(model.max_pips)
        for index, node in enumerate(model.nodes):
            a, b = node.tile
            if b > model.max_pips:
                raise LayoutStructureError(
                    f"tile {a}|{b} exceeds the maximum pip value {model.max_pips}", index
                )
            layout._nodes.append(LayoutNode(Tile.from_pips(a, b), node.parent, list(node.children)))
        layout._check_links()
        layout._rebuild_open_ends()
        return layout

    def _check_links(self) -> None:
        """親子の添字が互いに一致していることを確かめる。"""
        count = len(self._nodes)
        for index, node in enumerate(self._nodes):
            if index == 0:
                if node.parent is not None:
                    raise LayoutStructureError("the root node cannot have a parent", index)
            elif node.parent is None:
                raise LayoutStructureError("only the first node may omit its parent", index)
            elif not node.parent < index:
                # 親は必ず先に置かれている（循環を防ぐ）
                raise LayoutStructureError(f"parent {node.parent} must precede the node", index)
            elif index not in self._nodes[node.parent].children:
                raise LayoutStructureError(f"parent {node.parent} does not list the node as a child", index)

            if len(set(node.children)) != len(node.children):
                raise LayoutStructureError("duplicate child index", index)
            for child in node.children:
                if not index < child < count or self._nodes[child].parent != index:
                    raise LayoutStructureError(f"child {child} does not name the node as its parent", index)

    def _rebuild_open_ends(self) -> None:
        """Rebuild the open-end index and totals from connectivity alone.

        接続関係だけから開いている端を作り直す。

        各ノードについて、親・子との接続で使われた目を数え、
        使われていない目を開いている端とする:
        - ルートのダブル: 親の消費なし、子は最大2つ（空き端は 2 - 子の数）
        - それ以外のダブル: 親の消費が1つ、子は最大2つ（空き端は 3 - 接続数）
        - ダブル以外: 両側の目がそれぞれ最大1回だけ接続できる
        """
        self._open.clear()
        self._end_counts = [0] * (self._max_pips + 1)

        for index, node in enumerate(self._nodes):
            lo, hi = node.tile.pips
            links = [self._nodes[node.parent].tile] if node.parent is not None else []
            links.extend(self._nodes[child].tile for child in node.children)
            for linked in links:
                if node.tile.matches(linked) is None:
                    raise LayoutStructureError(f"{node.tile} is not connected to {linked}", index)

            if len(node.children) > 2:
                raise LayoutStructureError(f"{node.tile} has more than 2 children", index)

            if node.tile.is_double:
                capacity = 3 if node.parent is not None else 2
                self._add_open(index, lo, capacity - len(links))
                continue

            if node.parent is None:
                raise LayoutStructureError(f"first tile must be a double, got {node.tile}", index)
            if len(node.children) > 1:
                raise LayoutStructureError(f"non-double {node.tile} has more than 1 child", index)

            used = {lo: 0, hi: 0}
            for linked in links:
                matched, _ = node.tile.matches(linked)  # type: ignore[misc]
                used[matched] += 1
            for value, times in used.items():
                if times > 1:
                    raise LayoutStructureError(f"the {value} end of {node.tile} is connected twice", index)
                if times == 0:
                    self._add_open(index, value, 1)

    # ------------------------------------------------------------------
    # 内部ヘルパ
    # ------------------------------------------------------------------

    def _add_open(self, index: int, value: int, count: int) -> None:
        if count <= 0:
            return
        self._open.setdefault(index, []).extend([value] * count)
        self._end_counts[value] += count

    def _remove_open(self, index: int, value: int) -> None:
        # ダブルは同じ目が複数入っているので、1つだけ取り除く
        ends = self._open[index]
        ends.remove(value)
        if not ends:
            del self._open[index]
        self._end_counts[value] -= 1

    def _check_value(self, value: int) -> None:
        if not 0 <= value <= self._max_pips:
            raise ValueError(f"End value must be in 0-{self._max_pips}, got {value}")
