"""Types and constants for dominoes.

ドミノの基本型・定数定義。
牌（タイル）は 0〜MAX_PIPS の目を2つ持ち、両方が同じ目の牌を「ダブル」と呼ぶ。
"""

from __future__ import annotations

from enum import IntEnum, unique

# 対応する最大の目（ダブル21セット、253枚）
MAX_PIPS = 21
# 標準のダブル6セット（28枚）
DEFAULT_MAX_PIPS = 6


def set_size(max_pips: int) -> int:
    """Number of tiles in a double-``max_pips`` set.

    ダブルNセットの牌の枚数。(N+1)(N+2)/2 枚。
    """
    return (max_pips + 1) * (max_pips + 2) // 2


def check_max_pips(max_pips: int) -> int:
    """Validate a configured maximum pip value and return it."""
    if not 0 <= max_pips <= MAX_PIPS:
        raise ValueError(f"max_pips must be in 0-{MAX_PIPS}, got {max_pips}")
    return max_pips


@unique
class Player(IntEnum):
    """Player identifiers.

    二人対戦のみ対応。フィンガープリントの手番ビットは SECOND のとき立つ。
    """

    FIRST = 0   # 先手
    SECOND = 1  # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。0↔1 の切り替え。"""
        return Player(1 - self.value)


@unique
class Variation(IntEnum):
    """Game variations.

    ルールのバリエーション。レイアウトの扱いはどれも同じで、
    得点計算や配牌枚数だけが異なる。
    """

    TRADITIONAL = 0
    ALL_FIVES = 1
    ALL_SEVENS = 2
    BERGEN = 3
    BLIND = 4
    FIVE_UP = 5

    @property
    def label(self) -> str:
        """表示用の名前。"""
        return VARIATION_LABELS[self]


VARIATION_LABELS: dict[Variation, str] = {
    Variation.TRADITIONAL: "Traditional",
    Variation.ALL_FIVES: "All Fives",
    Variation.ALL_SEVENS: "All Sevens",
    Variation.BERGEN: "Bergen",
    Variation.BLIND: "Blind",
    Variation.FIVE_UP: "Five Up",
}
