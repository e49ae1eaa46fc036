from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

Point = Tuple[float, float]

CANONICAL_LAND_COUNTS: Dict[int, int] = {2: 19, 3: 37, 4: 61}

AXIAL_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, -1),
    (-1, 1),
)


class Terrain(str, Enum):
    FOREST = "forest"
    FIELD = "field"
    MOUNTAIN = "mountain"
    PASTURE = "pasture"
    HILL = "hill"
    DESERT = "desert"
    WATER = "water"
    GOLD = "gold"


@dataclass(frozen=True, order=True)
class Axial:
    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def neighbors(self) -> Tuple["Axial", ...]:
        return tuple(Axial(self.q + dq, self.r + dr) for dq, dr in AXIAL_DIRECTIONS)

    def distance_to(self, other: "Axial") -> int:
        return max(abs(self.q - other.q), abs(self.r - other.r), abs(self.s - other.s))


@dataclass(frozen=True)
class Cell:
    coord: Axial
    is_water: bool = False

    @property
    def q(self) -> int:
        return self.coord.q

    @property
    def r(self) -> int:
        return self.coord.r

    @property
    def terrain(self) -> Optional[Terrain]:
        """Pre-assigned terrain; only ocean cells carry one before play."""
        return Terrain.WATER if self.is_water else None


def generate_layout(size: int, *, with_ocean: bool = False) -> FrozenSet[Cell]:
    """Enumerate the island for ``size``.

    Land is every ``(q, r)`` with ``max(|q|, |r|, |q + r|) <= size``. Sizes 2, 3
    and 4 give the 19, 37 and 61 cell boards; other sizes use the same formula.
    ``with_ocean`` adds the surrounding ring as water cells.
    """
    if int(size) != size or size < 0:
        raise ValueError(f"Map size must be a non-negative integer, received {size!r}.")
    radius = int(size)

    cells = {Cell(coord=Axial(q, r)) for q, r in _generate_axial_coords(radius)}
    if with_ocean:
        cells.update(
            Cell(coord=Axial(q, r), is_water=True)
            for q, r in _generate_axial_coords(radius + 1)
            if max(abs(q), abs(r), abs(q + r)) == radius + 1
        )
    return frozenset(cells)


class BoardLayout:
    """Immutable view over a generated island with the column queries gravity needs."""

    def __init__(self, size: int, *, with_ocean: bool = False) -> None:
        self.size = int(size)
        self.with_ocean = bool(with_ocean)
        self.cells = generate_layout(size, with_ocean=with_ocean)
        self._land = frozenset(cell.coord for cell in self.cells if not cell.is_water)
        self._water = frozenset(cell.coord for cell in self.cells if cell.is_water)

        columns: Dict[int, List[Cell]] = {}
        for cell in self.cells:
            if cell.is_water:
                continue
            columns.setdefault(cell.q, []).append(cell)
        self._columns: Dict[int, Tuple[Cell, ...]] = {
            column: tuple(sorted(column_cells, key=lambda item: item.r))
            for column, column_cells in columns.items()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardLayout):
            return NotImplemented
        return self.cells == other.cells

    def __hash__(self) -> int:
        return hash(self.cells)

    def __repr__(self) -> str:
        return f"BoardLayout(size={self.size}, land={self.land_count}, water={len(self._water)})"

    @property
    def land_count(self) -> int:
        return len(self._land)

    def land_cells(self) -> List[Cell]:
        return sorted((cell for cell in self.cells if not cell.is_water), key=lambda cell: (cell.r, cell.q))

    def water_cells(self) -> List[Cell]:
        return sorted((cell for cell in self.cells if cell.is_water), key=lambda cell: (cell.r, cell.q))

    def land_coords(self) -> FrozenSet[Axial]:
        return self._land

    def is_land(self, coord: Axial) -> bool:
        return coord in self._land

    def is_water(self, coord: Axial) -> bool:
        return coord in self._water

    def columns(self) -> FrozenSet[int]:
        return frozenset(self._columns)

    def has_column(self, column: int) -> bool:
        return column in self._columns

    def cells_in_column(self, column: int) -> Tuple[Cell, ...]:
        return self._columns.get(column, ())

    def top_row(self, column: int) -> int:
        cells = self._columns.get(column)
        if not cells:
            raise KeyError(f"Column {column} has no land cells.")
        return cells[0].r

    def bottom_row(self, column: int) -> int:
        cells = self._columns.get(column)
        if not cells:
            raise KeyError(f"Column {column} has no land cells.")
        return cells[-1].r

    def board_top_row(self) -> int:
        return min(coord.r for coord in self._land)


def axial_to_pixel(coord: Axial, size: float = 35.0) -> Point:
    """Flat-top pixel centre, matching how columns stack visually."""
    x = size * (1.5 * coord.q)
    y = size * (math.sqrt(3) / 2 * coord.q + math.sqrt(3) * coord.r)
    return (x, y)


def _generate_axial_coords(radius: int) -> List[Tuple[int, int]]:
    coords: List[Tuple[int, int]] = []
    for q in range(-radius, radius + 1):
        r_min = max(-radius, -q - radius)
        r_max = min(radius, -q + radius)
        for r in range(r_min, r_max + 1):
            coords.append((q, r))
    coords.sort(key=lambda item: (item[1], item[0]))
    return coords
