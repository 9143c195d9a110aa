"""Tensor encoding of a layout for neural-network input.

レイアウトをニューラルネットワーク入力用のテンソルに変換する。
"""

from __future__ import annotations

import torch

from domino_ai.game.dominoes.layout import LayoutTree

NUM_PLANES = 3


def to_tensor_planes(layout: LayoutTree, turn: int = 0) -> torch.Tensor:
    """Convert a layout to tensor planes.

    形状は (3, N, N)、N = max_pips + 1。

    Planes（チャンネル）の構成:
    ch.0: 置かれた牌（a|b なら [a, b] と [b, a] の両方に 1）
    ch.1: 開いている端の数（行 v 全体に open_end_count(v) を設定）
    ch.2: 手番インジケータ（turn == 0 なら全1、そうでなければ全0）
    """
    n = layout.max_pips + 1
    planes = torch.zeros(NUM_PLANES, n, n)

    for node in layout.nodes:
        a, b = node.tile.pips
        planes[0, a, b] = 1.0
        planes[0, b, a] = 1.0  # 対称に置く

    for value, count in enumerate(layout.end_counts):
        if count > 0:
            planes[1, value, :] = float(count)

    if turn == 0:
        planes[2, :, :] = 1.0

    return planes
