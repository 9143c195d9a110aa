"""Parser for layout strings.

レイアウト文字列を汎用の親子ツリー（TileTree）に変換する。

Layout string syntax:

    <layout> ::= <chain>
    <chain>  ::= <tile> | <tile> "-" <chain> | <double> | <double> "=" "(" <group> ")"
    <group>  ::= <chain> | <chain> "," <chain> | <chain> "," <chain> "," <chain>
    <tile>   ::= <number> "|" <number>

- "-" でつなぐとき、後ろの牌の左の目は前の牌の右の目（開いている端）と一致すること
- ダブルの後ろは "=" とカッコ書きのグループのみ。各チェーンの先頭の牌はダブルの目で始まる
- ダブル以外の牌の後ろは "-" のみ
- 牌は "5|3" のように非正規の順序で書いてもよい（正規化される）
- 空白は無視する

Examples:
    "5|6"
    "1|2-2|3"
    "3|3=(3|4-4|5,3|6)"
    "6|6-6|3-3|3=(3|1,3|5-5|2)"

ここで扱うのは文法と目のつながりだけ。ルートがダブルであることや、
ダブルの空き端の数は LayoutTree.from_text() が組み立て時に検証する。
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from domino_ai.game.dominoes.tile import Tile
from domino_ai.game.dominoes.types import MAX_PIPS

# "x|y"（目の前後に空白があってもよい。数字は ASCII のみ）
_TILE_RE = re.compile(r"([0-9]+)\s*\|\s*([0-9]+)")

# 1つのグループに並べられるチェーンの最大数（ダブルの接続は最大3方向）
MAX_GROUP_CHAINS = 3


class LayoutParseError(ValueError):
    """Raised when a layout string cannot be parsed.

    どこで何が悪かったかを持つ。position は入力文字列中の0始まりの文字位置。
    """

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"Parse error at position {position}: {message}")
        self.message = message
        self.position = position


@dataclass
class TileTree:
    """A generic parent/child tree of tiles.

    開いている端の索引を持たない、素の親子ツリー。
    子の順序は入力どおりに保たれ、等価比較にも反映される。
    position はパース元の文字位置（比較には使わない）。
    """

    tile: Tile
    children: list[TileTree] = field(default_factory=list)
    position: int | None = field(default=None, compare=False)

    def walk(self) -> Iterator[TileTree]:
        """Yield this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


class _Parser:
    def __init__(self, text: str, max_pips: int) -> None:
        self.text = text
        self.pos = 0
        self.max_pips = max_pips

    def error(self, message: str, position: int | None = None) -> LayoutParseError:
        return LayoutParseError(message, self.pos if position is None else position)

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def next_is(self, char: str) -> bool:
        return self.pos < len(self.text) and self.text[self.pos] == char

    def consume(self, char: str) -> bool:
        if self.next_is(char):
            self.pos += 1
            return True
        return False

    def parse_chain(self, entry: int | None) -> TileTree:
        self.skip_whitespace()
        position = self.pos
        tile, exit_value = self.parse_tile(entry)
        node = TileTree(tile, position=position)
        self.skip_whitespace()

        if tile.is_double:
            if self.next_is("-"):
                raise self.error(f"{tile} followed by '-'. Doubles must be followed by '='")
            if self.consume("="):
                node.children.extend(self.parse_group(exit_value))
        else:
            if self.next_is("="):
                raise self.error(f"{tile} followed by '='. Only doubles can be followed by '='")
            if self.consume("-"):
                node.children.append(self.parse_chain(exit_value))
        return node

    def parse_group(self, entry: int) -> list[TileTree]:
        self.skip_whitespace()
        if not self.consume("("):
            raise self.error("Expected '(' to start group")

        chains: list[TileTree] = []
        while True:
            if len(chains) == MAX_GROUP_CHAINS:
                raise self.error(f"A group holds at most {MAX_GROUP_CHAINS} chains")
            chains.append(self.parse_chain(entry))
            self.skip_whitespace()
            if self.consume(","):
                continue
            if self.consume(")"):
                return chains
            raise self.error("Expected ',' or ')' in group")

    def parse_tile(self, entry: int | None) -> tuple[Tile, int]:
        """Parse "x|y" and return the tile and its exit value y.

        x|y を読んで牌と、次の牌がつながる側の目 y を返す。
        """
        match = _TILE_RE.match(self.text, self.pos)
        if match is None:
            raise self.error(f"Expected tile in format 'x|y' where x,y are 0-{self.max_pips}")

        first = self.parse_number(match.group(1), match.start(1))
        second = self.parse_number(match.group(2), match.start(2))
        if entry is not None and first != entry:
            raise self.error(
                f"Invalid connection: tile {first}|{second} first number ({first}) "
                f"must match the preceding end ({entry})"
            )
        self.pos = match.end()
        return Tile.from_pips(first, second), second

    def parse_number(self, digits: str, position: int) -> int:
        # 桁数で先に弾く（巨大な数字列を int に変換しない）
        if len(digits.lstrip("0")) > len(str(self.max_pips)) or int(digits) > self.max_pips:
            raise self.error(f"Number '{digits}' is out of range (0-{self.max_pips})", position)
        return int(digits)


def parse(text: str, max_pips: int = MAX_PIPS) -> TileTree:
    """Parse a layout string into a TileTree.

    レイアウト文字列をパースして TileTree を返す。
    不正な入力では LayoutParseError を送出し、途中までのツリーは返さない。
    """
    parser = _Parser(text, max_pips)
    tree = parser.parse_chain(None)
    parser.skip_whitespace()
    if parser.pos < len(text):
        raise parser.error("Unexpected characters after layout")
    return tree
