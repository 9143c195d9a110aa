"""Terminal display for dominoes layouts.

レイアウトをターミナルに表示するためのモジュール。
"""

from __future__ import annotations

from domino_ai.game.dominoes.layout import LayoutTree


def layout_to_str(layout: LayoutTree) -> str:
    """Convert a layout to an indented tree, one node per line.

    レイアウトを字下げした木として文字列にする。

    Example output for ``6|6-6|3``:
        #0 6|6  open: 6
          #1 3|6  open: 3

    - 先頭の #n はノード番号
    - 深さ1つにつき2文字字下げ
    - open: に続くのはそのノードの開いている目（なければ "-"）
    """
    if layout.is_empty():
        return "(empty layout)"

    nodes = layout.nodes
    lines: list[str] = []
    stack = [(0, 0)]  # (ノード番号, 深さ)
    while stack:
        index, depth = stack.pop()
        ends = layout.open_ends(index)
        open_str = " ".join(str(v) for v in ends) if ends else "-"
        lines.append(f"{'  ' * depth}#{index} {nodes[index].tile}  open: {open_str}")
        # 子を逆順に積んで、表示は接続順にする
        stack.extend((child, depth + 1) for child in reversed(nodes[index].children))

    return "\n".join(lines)


def end_counts_to_str(layout: LayoutTree) -> str:
    """目ごとの開いている端の数を "v:count" で並べる（0 の目は省く）。"""
    parts = [f"{v}:{c}" for v, c in enumerate(layout.end_counts) if c > 0]
    return " ".join(parts) if parts else "-"
