"""Board geometry, tile bags, number tokens and the mode catalog."""

from .board import BoardState
from .hexgrid import Axial, BoardLayout, Cell, Terrain, axial_to_pixel, generate_layout
from .modes import GAME_MODES, GameMode, ModeValidation, get_game_mode, validate_game_mode
from .numbers import (
    CLASSIC_NUMBER_TOKENS,
    HOT_TOKEN_NUMBERS,
    assign_numbers,
    hot_adjacency_conflicts,
    validate_hot_token_spacing,
)
from .tiles import TileBag, TileCount, build_bag, normalize_tile_counts

__all__ = [
    "Axial",
    "BoardLayout",
    "BoardState",
    "CLASSIC_NUMBER_TOKENS",
    "Cell",
    "GAME_MODES",
    "GameMode",
    "HOT_TOKEN_NUMBERS",
    "ModeValidation",
    "Terrain",
    "TileBag",
    "TileCount",
    "assign_numbers",
    "axial_to_pixel",
    "build_bag",
    "generate_layout",
    "get_game_mode",
    "hot_adjacency_conflicts",
    "normalize_tile_counts",
    "validate_game_mode",
    "validate_hot_token_spacing",
]
