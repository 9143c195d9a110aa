"""Layout + fingerprint pair for dominoes.

レイアウトとフィンガープリントを対で持つ局面。
LayoutTree を変更するたびに、対応する StateFingerprint の更新を
同じ場所で行うための参照実装（attach → フィンガープリント更新の約束事）。

手札・山札・得点はここでは扱わない。
牌を引く操作はフィンガープリントに影響しない（手札は相手から見えない情報のため）。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from domino_ai.game.dominoes.config import DOUBLE_SIX_CONFIG, Configuration
from domino_ai.game.dominoes.layout import LayoutTree
from domino_ai.game.dominoes.tile import Tile
from domino_ai.game.dominoes.types import Player
from domino_ai.game.dominoes.zobrist import StateFingerprint


@dataclass(frozen=True)  # イミュータブル: play() は新しいオブジェクトを返す
class LayoutState:
    """Immutable (layout, fingerprint, turn) triple.

    不変条件: fingerprint == StateFingerprint.from_scratch(layout, turn)
    """

    layout: LayoutTree = field(default_factory=LayoutTree)
    fingerprint: StateFingerprint = field(default_factory=StateFingerprint)
    turn: Player = Player.FIRST

    @classmethod
    def initial(
        cls,
        config: Configuration = DOUBLE_SIX_CONFIG,
        first: Player = Player.FIRST,
    ) -> LayoutState:
        """空のレイアウトから始まる局面。"""
        layout = LayoutTree(config.max_pips)
        return cls(layout, StateFingerprint.from_scratch(layout, first), first)

    def play(self, tile: Tile, parent: int | None = None) -> LayoutState:
        """Place a tile and return the new state.

        牌を置いた新しい局面を返す。元の局面は変更しない。

        フィンガープリントの更新:
        1. add_tile: 置いた牌
        2. change_end_count: 親の端が1つ閉じたぶん（最初の牌ではなし）
        3. change_end_count: 新しく開いた端のぶん
        4. turn: 手番交代
        """
        layout = self.layout.copy()
        fingerprint = self.fingerprint.copy()

        open_value, created = layout.attach(tile, parent)
        fingerprint.add_tile(tile)

        if parent is not None:
            consumed = tile.other(open_value)
            remaining = layout.open_end_count(consumed)
            if consumed == open_value:
                # 閉じた端と開いた端が同じ目: 開いたぶんを除いた途中の数に戻す
                remaining -= created
            fingerprint.change_end_count(consumed, remaining + 1, remaining)

        new_count = layout.open_end_count(open_value)
        fingerprint.change_end_count(open_value, new_count - created, new_count)
        fingerprint.turn()

        return LayoutState(layout, fingerprint, self.turn.opponent)

    def pass_turn(self) -> LayoutState:
        """Pass without playing (only the turn changes)."""
        return LayoutState(self.layout.copy(), self.fingerprint.copy().turn(), self.turn.opponent)

    def __hash__(self) -> int:
        # フィンガープリントをそのまま局面のキーとして使う
        return hash(self.fingerprint.value)
