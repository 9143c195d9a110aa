"""Tile representation for dominoes.

牌のデータ構造。牌は「序数（ordinal）」という小さな整数1つで表す。
(lo, hi) の目の組（lo <= hi）と序数は1対1に対応する:

    ordinal = hi * (hi + 1) / 2 + lo

    0: 0|0
    1: 0|1   2: 1|1
    3: 0|2   4: 1|2   5: 2|2
    ...

序数は密なので、フィンガープリントの乱数テーブルの添字にそのまま使える。
"""

from __future__ import annotations

from dataclasses import dataclass

from domino_ai.game.dominoes.types import MAX_PIPS, set_size

# 序数 → (lo, hi) の対応表（ダブル21までの全253枚）
_PIPS: tuple[tuple[int, int], ...] = tuple(
    (lo, hi) for hi in range(MAX_PIPS + 1) for lo in range(hi + 1)
)


def pips_to_ordinal(a: int, b: int) -> int:
    """Return the ordinal of the tile with pips ``a`` and ``b`` (any order).

    目の組を序数に変換する。順序は問わない（内部で正規化する）。
    """
    lo, hi = (a, b) if a <= b else (b, a)
    if lo < 0 or hi > MAX_PIPS:
        raise ValueError(f"Pip values out of range (0-{MAX_PIPS}): {a}|{b}")
    return hi * (hi + 1) // 2 + lo


@dataclass(frozen=True, order=True)  # イミュータブル・序数で大小比較できる
class Tile:
    """A domino tile identified by its ordinal.

    1枚の牌。序数だけを持つ値オブジェクト。
    目の組は常に正規形 (lo, hi) で返す。
    """

    ordinal: int

    def __post_init__(self) -> None:
        if not 0 <= self.ordinal < len(_PIPS):
            raise ValueError(f"Tile ordinal out of range: {self.ordinal}")

    @classmethod
    def from_pips(cls, a: int, b: int) -> Tile:
        """Create a tile from two pip values given in any order.

        目の組から牌を作る。``Tile.from_pips(5, 3) == Tile.from_pips(3, 5)``
        """
        return cls(pips_to_ordinal(a, b))

    @property
    def pips(self) -> tuple[int, int]:
        """正規形の目の組 (lo, hi)。"""
        return _PIPS[self.ordinal]

    @property
    def is_double(self) -> bool:
        lo, hi = _PIPS[self.ordinal]
        return lo == hi

    def score(self) -> int:
        """Sum of both pip values."""
        lo, hi = _PIPS[self.ordinal]
        return lo + hi

    def has(self, value: int) -> bool:
        return value in _PIPS[self.ordinal]

    def other(self, value: int) -> int:
        """Return the pip opposite ``value``.

        ``value`` の反対側の目を返す。ダブルなら同じ値。
        """
        lo, hi = _PIPS[self.ordinal]
        if value == lo:
            return hi
        if value == hi:
            return lo
        raise ValueError(f"{self} has no {value}")

    def matches(self, other: Tile) -> tuple[int, int] | None:
        """Return ``(matching value, other value)`` on this tile, or None.

        ``other`` と共通する目があれば、(共通の目, こちら側の残りの目) を返す。
        通常のセットでは結果が曖昧になることはない。
        """
        lo, hi = _PIPS[self.ordinal]
        if other.has(lo):
            return lo, hi
        if other.has(hi):
            return hi, lo
        return None

    def __str__(self) -> str:
        lo, hi = _PIPS[self.ordinal]
        return f"{lo}|{hi}"


def all_tiles(max_pips: int) -> list[Tile]:
    """Return every tile of a double-``max_pips`` set in ordinal order."""
    return [Tile(ordinal) for ordinal in range(set_size(max_pips))]
