"""Dominoes layout and state fingerprint."""

from domino_ai.game.dominoes.config import DOUBLE_NINE_CONFIG, DOUBLE_SIX_CONFIG, Configuration
from domino_ai.game.dominoes.display import layout_to_str
from domino_ai.game.dominoes.layout import LayoutNode, LayoutStructureError, LayoutTree
from domino_ai.game.dominoes.parser import LayoutParseError, TileTree, parse
from domino_ai.game.dominoes.state import LayoutState
from domino_ai.game.dominoes.tile import Tile
from domino_ai.game.dominoes.types import MAX_PIPS, Player, Variation
from domino_ai.game.dominoes.zobrist import StateFingerprint, zobrist_table

__all__ = [
    "Configuration",
    "DOUBLE_NINE_CONFIG",
    "DOUBLE_SIX_CONFIG",
    "LayoutNode",
    "LayoutParseError",
    "LayoutState",
    "LayoutStructureError",
    "LayoutTree",
    "MAX_PIPS",
    "Player",
    "StateFingerprint",
    "Tile",
    "TileTree",
    "Variation",
    "layout_to_str",
    "parse",
    "zobrist_table",
]
