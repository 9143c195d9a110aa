"""Schemas for the structural (persisted) form of a layout.

レイアウトの永続化形式のスキーマ。
保存するのはノードごとの {牌, 親, 子} と最大の目だけで、
開いている端の索引は読み込み時に接続関係から作り直す。

    {"nodes": [{"tile": [6, 6], "children": [1]},
               {"tile": [3, 6], "parent": 0, "children": []}],
     "max_pips": 6}
"""

from __future__ import annotations

from pydantic import BaseModel, Field, NonNegativeInt, field_validator

from domino_ai.game.dominoes.types import MAX_PIPS


class LayoutNodeModel(BaseModel):
    """1ノード分のスキーマ。ルートは parent を持たない。"""

    tile: tuple[NonNegativeInt, NonNegativeInt]
    parent: NonNegativeInt | None = None
    children: list[NonNegativeInt] = Field(default_factory=list)

    @field_validator("tile")
    @classmethod
    def _canonical(cls, tile: tuple[int, int]) -> tuple[int, int]:
        # 非正規形 [5, 3] も受け付けて (3, 5) にそろえる
        a, b = tile
        return (a, b) if a <= b else (b, a)


class LayoutModel(BaseModel):
    """レイアウト全体のスキーマ。"""

    nodes: list[LayoutNodeModel] = Field(default_factory=list)
    max_pips: int = Field(ge=0, le=MAX_PIPS)
