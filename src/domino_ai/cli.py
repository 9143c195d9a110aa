"""CLI entry point for domino-ai: inspect a layout string.

レイアウト文字列を読み込んで、正規形・開いている端・フィンガープリントを表示する。

起動方法: `uv run domino-cli "6|6=(6|3-3|1,6|5)"`
"""

from __future__ import annotations

import argparse
import sys

from domino_ai.game.dominoes.display import end_counts_to_str, layout_to_str
from domino_ai.game.dominoes.layout import LayoutTree
from domino_ai.game.dominoes.parser import LayoutParseError
from domino_ai.game.dominoes.types import DEFAULT_MAX_PIPS, MAX_PIPS
from domino_ai.game.dominoes.zobrist import StateFingerprint


def _format_error(text: str, error: LayoutParseError) -> str:
    """Show the input with a caret under the error position.

    例:
        1|2-3|4
            ^
        Parse error at position 4: Invalid connection: ...
    """
    return f"{text}\n{' ' * error.position}^\n{error}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="domino-cli", description="Inspect a dominoes layout string.")
    parser.add_argument("layout", help='layout string, e.g. "3|3=(3|2,3|5)"')
    parser.add_argument(
        "--max-pips",
        type=int,
        default=DEFAULT_MAX_PIPS,
        choices=range(MAX_PIPS + 1),
        metavar="N",
        help=f"highest pip value of the set (0-{MAX_PIPS}, default {DEFAULT_MAX_PIPS})",
    )
    parser.add_argument("--turn", type=int, default=0, choices=(0, 1), help="player to move")
    parser.add_argument("--json", action="store_true", help="also print the structural JSON form")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse the layout given on the command line and print a summary.

    コマンドラインのレイアウトをパースして要約を表示する。
    パースに失敗したら位置を示して終了コード 1 を返す。
    """
    args = _build_parser().parse_args(argv)

    try:
        layout = LayoutTree.from_text(args.layout, max_pips=args.max_pips)
    except LayoutParseError as exc:
        print(_format_error(args.layout, exc), file=sys.stderr)
        return 1

    fingerprint = StateFingerprint.from_scratch(layout, args.turn)

    print(f"Layout:      {layout.to_text()}")
    print(f"Tiles:       {len(layout)}")
    print(f"Open ends:   {end_counts_to_str(layout)}")
    print(f"Fingerprint: {fingerprint.value:016x}")
    print()
    print(layout_to_str(layout))
    if args.json:
        print()
        print(layout.to_json())
    return 0


if __name__ == "__main__":
    sys.exit(main())
