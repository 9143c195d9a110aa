"""Zobrist fingerprint of a dominoes state.

局面のフィンガープリント（Zobrist ハッシュ）。

局面を次の3要素の組として表し、要素ごとに固定の64ビット乱数を XOR で重ねる:
1. レイアウトに置かれた牌       → 牌ごとの乱数
2. 目ごとの開いている端の数     → (目, 数) ごとの乱数（数 0 は 0 に固定）
3. 手番                         → 手番交代の乱数1つ

XOR は可換かつ自己逆元なので、
- 同じ局面はどんな手順でたどり着いても同じ値になる
- 牌を置く・端の数を変える・手番を替える、を差分で更新できる
- 同じ操作を2回行うと元の値に戻る

64ビットなら100万局面での衝突確率は約 2.7e-8。
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING

from domino_ai.game.dominoes.tile import Tile
from domino_ai.game.dominoes.types import MAX_PIPS

if TYPE_CHECKING:
    from domino_ai.game.dominoes.layout import LayoutTree

# 開始局面の値
START = 0
# 未定義・無効な局面を表す番兵（全ビット1）
UNDEFINED = (1 << 64) - 1

# テーブルの大きさ: 個々の設定の最大値より大きめに取っておく
TILE_SLOTS = 256            # 牌の序数 0..255
VALUE_SLOTS = MAX_PIPS + 1  # 目 0..21
COUNT_SLOTS = MAX_PIPS + 3  # 端の数 0..23（ダブルで同じ目が2つ開くぶんの余裕）

# 乱数の種。固定なので実行のたびに同じテーブルになる
ZOBRIST_SEED = 1


@dataclass(frozen=True)
class ZobristTable:
    """Random constants for every state fact.

    状態の要素ごとの乱数表。生成後は変更しない（タプルで保持）。
    """

    tile_values: tuple[int, ...]
    end_values: tuple[tuple[int, ...], ...]
    turn_value: int

    @classmethod
    def generate(cls, seed: int = ZOBRIST_SEED) -> ZobristTable:
        """Build a table from a seeded generator (reproducible)."""
        rng = random.Random(seed)
        tile_values = tuple(rng.getrandbits(64) for _ in range(TILE_SLOTS))
        # 端の数 0 は「その目の端がない」状態で、開始局面と同じく値を動かさない
        end_values = tuple(
            (0,) + tuple(rng.getrandbits(64) for _ in range(1, COUNT_SLOTS))
            for _ in range(VALUE_SLOTS)
        )
        turn_value = rng.getrandbits(64)
        return cls(tile_values, end_values, turn_value)

    def tile(self, ordinal: int) -> int:
        if not 0 <= ordinal < TILE_SLOTS:
            raise ValueError(f"Tile ordinal must be < {TILE_SLOTS}, got {ordinal}")
        return self.tile_values[ordinal]

    def end(self, value: int, count: int) -> int:
        if not 0 <= value < VALUE_SLOTS:
            raise ValueError(f"End value must be < {VALUE_SLOTS}, got {value}")
        if not 0 <= count < COUNT_SLOTS:
            raise ValueError(f"End count must be < {COUNT_SLOTS}, got {count}")
        return self.end_values[value][count]


@lru_cache(maxsize=None)
def zobrist_table() -> ZobristTable:
    """Return the process-wide table, building it on first use.

    プロセス全体で共有する乱数表。初回呼び出し時に生成し、以後は読み取り専用。
    """
    return ZobristTable.generate()


@dataclass
class StateFingerprint:
    """Incrementally maintained 64-bit fingerprint of a game state.

    局面のフィンガープリント。更新メソッドは self を返すのでつなげて書ける:

        fp = StateFingerprint()
        fp.add_tile(Tile.from_pips(6, 6)).change_end_count(6, 0, 2).turn()

    注意: 更新内容が実際の局面と合っているかは検証しない。
    レイアウトの変更と対になる呼び出しは呼び出し側の責任（LayoutState.play を参照）。
    """

    value: int = START
    table: ZobristTable = field(default_factory=zobrist_table, repr=False, compare=False)

    @classmethod
    def undefined(cls) -> StateFingerprint:
        return cls(UNDEFINED)

    @classmethod
    def from_scratch(
        cls,
        layout: LayoutTree,
        turn: int = 0,
        table: ZobristTable | None = None,
    ) -> StateFingerprint:
        """Compute the fingerprint of a layout and turn from scratch.

        レイアウトと手番から値を一から計算する。差分更新の結果と必ず一致する。
        turn は 0 か 1（二人対戦のみ）。
        """
        if turn not in (0, 1):
            raise ValueError(f"turn must be 0 or 1 (two players only), got {turn}")
        table = table or zobrist_table()

        value = START
        for node in layout.nodes:
            value ^= table.tile(node.tile.ordinal)
        for end_value, count in enumerate(layout.end_counts):
            value ^= table.end(end_value, count)  # 数 0 の定数は 0 なので影響しない
        if turn:
            value ^= table.turn_value
        return cls(value, table)

    def add_tile(self, tile: Tile | int) -> StateFingerprint:
        """Toggle a tile placed in the layout."""
        ordinal = tile.ordinal if isinstance(tile, Tile) else tile
        self.value ^= self.table.tile(ordinal)
        return self

    def change_end_count(self, value: int, old: int, new: int) -> StateFingerprint:
        """Replace the open-end count of ``value`` from ``old`` to ``new``.

        古い数の定数を打ち消してから新しい数の定数を重ねる。
        そのため +1 を3回行っても +3 を1回行っても同じ値になる。
        """
        if old == new:
            raise ValueError(f"old and new end counts are equal ({old}) for value {value}")
        self.value ^= self.table.end(value, old)
        self.value ^= self.table.end(value, new)
        return self

    def turn(self) -> StateFingerprint:
        """Toggle whose turn it is.

        二人対戦なので手番の乱数は1つで足りる（2回 XOR すると戻る）。
        """
        self.value ^= self.table.turn_value
        return self

    def is_undefined(self) -> bool:
        return self.value == UNDEFINED

    def copy(self) -> StateFingerprint:
        return StateFingerprint(self.value, self.table)

    def __int__(self) -> int:
        return self.value
