"""Game configuration for dominoes.

対局設定の定義。
セットの大きさ（最大の目）・人数・バリエーションによって
配牌枚数や牌の総数が変わるため、設定クラスで管理する。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from domino_ai.game.dominoes.tile import Tile, all_tiles
from domino_ai.game.dominoes.types import (
    DEFAULT_MAX_PIPS,
    Variation,
    check_max_pips,
    set_size,
)


def default_starting_hand_size(num_players: int, variation: Variation) -> int:
    """Return the usual starting hand size for a player count and variation.

    人数とバリエーションから標準の配牌枚数を返す。
    """
    if variation == Variation.BERGEN:
        return 6
    if variation == Variation.BLIND:
        if num_players == 2:
            return 8
        if num_players == 3:
            return 7
        return 6 if num_players <= 8 else 5
    if num_players == 2:
        return 7
    if num_players <= 4:
        return 6
    return 5 if num_players <= 8 else 4


@dataclass(frozen=True)
class Configuration:
    """Settings for one dominoes game.

    Attributes:
        max_pips:           セットの最大の目（ダブル6なら 6）。レイアウトの値域を決める
        num_players:        プレイヤー数（2人以上）
        variation:          ルールのバリエーション
        starting_hand_size: 配牌枚数。None なら人数とバリエーションから決める
    """

    max_pips: int = DEFAULT_MAX_PIPS
    num_players: int = 2
    variation: Variation = Variation.TRADITIONAL
    starting_hand_size: int | None = field(default=None)

    def __post_init__(self) -> None:
        check_max_pips(self.max_pips)
        if self.num_players < 2:
            raise ValueError("Must have at least 2 players")
        if self.starting_hand_size is None:
            # frozen なので object.__setattr__ で既定値を埋める
            object.__setattr__(
                self,
                "starting_hand_size",
                default_starting_hand_size(self.num_players, self.variation),
            )
        elif self.starting_hand_size < 0:
            raise ValueError(f"starting_hand_size must be >= 0, got {self.starting_hand_size}")

    @property
    def set_size(self) -> int:
        """牌の総数（ダブル6: 28, ダブル9: 55）。"""
        return set_size(self.max_pips)

    def tiles(self) -> list[Tile]:
        """All tiles of the set in ordinal order."""
        return all_tiles(self.max_pips)


# 二人対戦・ダブル6の標準設定
DOUBLE_SIX_CONFIG = Configuration()

# 二人対戦・ダブル9のオールファイブ
DOUBLE_NINE_CONFIG = Configuration(max_pips=9, variation=Variation.ALL_FIVES)
