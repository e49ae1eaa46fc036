from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from .hexgrid import BoardLayout, Terrain
from .tiles import TileCount, normalize_tile_counts


@dataclass(frozen=True)
class GameMode:
    id: str
    name: str
    description: str
    map_size: int
    max_players: int
    features: Tuple[str, ...] = ()
    tile_counts: Mapping[Terrain, int] = field(default_factory=dict)

    def total_tiles(self) -> int:
        return int(sum(self.tile_counts.values()))

    def counts(self) -> TileCount:
        return normalize_tile_counts(self.tile_counts)


@dataclass(frozen=True)
class ModeValidation:
    is_valid: bool
    message: str


def _counts(
    field_: int,
    forest: int,
    pasture: int,
    hill: int,
    mountain: int,
    desert: int,
    gold: int = 0,
) -> Dict[Terrain, int]:
    return {
        Terrain.FIELD: field_,
        Terrain.FOREST: forest,
        Terrain.PASTURE: pasture,
        Terrain.HILL: hill,
        Terrain.MOUNTAIN: mountain,
        Terrain.DESERT: desert,
        Terrain.WATER: 0,
        Terrain.GOLD: gold,
    }


GAME_MODES: Tuple[GameMode, ...] = (
    GameMode(
        id="base-3-4",
        name="Base Game (3-4 Players)",
        description="The classic Catan island experience.",
        map_size=2,
        max_players=4,
        features=("19 Land Tiles", "Balanced Resources", "Classic Gameplay"),
        tile_counts=_counts(4, 4, 4, 3, 3, 1),
    ),
    GameMode(
        id="base-5-6",
        name="Base Game (5-6 Players)",
        description="Extended island for more settlers.",
        map_size=3,
        max_players=6,
        features=("37 Land Tiles", "Larger Island", "More Resources"),
        tile_counts=_counts(6, 6, 6, 5, 5, 2),
    ),
    GameMode(
        id="tetris-mode",
        name="Tetris Mode - Endless",
        description="Plenty of tiles for endless building fun.",
        map_size=3,
        max_players=4,
        features=("Oversized Bag", "Endless Gameplay", "Stack and Build"),
        tile_counts=_counts(50, 50, 50, 40, 40, 10, gold=10),
    ),
    GameMode(
        id="seafarers-heading-for-new-shores",
        name="Seafarers: New Shores",
        description="Discover uncharted islands across the sea.",
        map_size=4,
        max_players=4,
        features=("Multiple Islands", "Ships", "Gold Hexes", "Sea Routes"),
        tile_counts=_counts(5, 5, 5, 4, 4, 2, gold=2),
    ),
    GameMode(
        id="seafarers-fog-islands",
        name="Seafarers: Fog Islands",
        description="Navigate through mysterious fog to find new lands.",
        map_size=4,
        max_players=4,
        features=("Hidden Tiles", "Exploration", "Fog Banks", "Gold Discovery"),
        tile_counts=_counts(4, 4, 4, 3, 3, 1, gold=3),
    ),
    GameMode(
        id="cities-knights-3-4",
        name="Cities & Knights (3-4 Players)",
        description="Defend Catan from barbarian invasions.",
        map_size=2,
        max_players=4,
        features=("Knights", "City Walls", "Progress Cards", "Barbarians"),
        tile_counts=_counts(4, 4, 4, 3, 3, 1),
    ),
    GameMode(
        id="explorers-pirates",
        name="Explorers & Pirates",
        description="Set sail for adventure and discovery.",
        map_size=5,
        max_players=4,
        features=("Missions", "Pirate Lairs", "Fish", "Spices", "Harbor Settlement"),
        tile_counts=_counts(3, 3, 4, 2, 2, 1, gold=5),
    ),
)

_MODES_BY_ID: Dict[str, GameMode] = {mode.id: mode for mode in GAME_MODES}

DEFAULT_MODE_ID = "base-3-4"


def get_game_mode(mode_id: str) -> GameMode:
    normalized = str(mode_id).strip().lower()
    if normalized not in _MODES_BY_ID:
        known = ", ".join(sorted(_MODES_BY_ID))
        raise KeyError(f"Unknown game mode {mode_id!r}. Known modes: {known}.")
    return _MODES_BY_ID[normalized]


def expected_land_cells(map_size: int) -> int:
    return BoardLayout(map_size).land_count


def validate_game_mode(mode: GameMode) -> ModeValidation:
    """Report whether the mode's bag can fill its island.

    A shortfall is not fatal: play ends when the bag runs dry and the
    remaining cells stay empty.
    """
    expected = expected_land_cells(mode.map_size)
    total_tiles = sum(normalize_tile_counts(mode.tile_counts).values())
    if total_tiles < expected:
        return ModeValidation(
            is_valid=False,
            message=f"Not enough tiles! Need {expected} tiles but only have {total_tiles}",
        )
    return ModeValidation(is_valid=True, message="Valid configuration")
