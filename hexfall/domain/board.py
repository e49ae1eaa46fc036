from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .hexgrid import Axial, BoardLayout, Terrain

NUMBERLESS_TERRAINS = frozenset({Terrain.DESERT, Terrain.WATER})


@dataclass
class BoardState:
    """Occupied land cells of one game, keyed by axial coordinate."""

    layout: BoardLayout
    _tiles: Dict[Axial, Terrain] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, coord: object) -> bool:
        return coord in self._tiles

    def __iter__(self) -> Iterator[Axial]:
        return iter(sorted(self._tiles, key=lambda coord: (coord.r, coord.q)))

    def get(self, coord: Axial) -> Optional[Terrain]:
        return self._tiles.get(coord)

    def items(self) -> List[Tuple[Axial, Terrain]]:
        return [(coord, self._tiles[coord]) for coord in self]

    def is_occupied(self, coord: Axial) -> bool:
        return coord in self._tiles

    def is_open(self, coord: Axial) -> bool:
        return self.layout.is_land(coord) and coord not in self._tiles

    def open_cells(self) -> List[Axial]:
        return [cell.coord for cell in self.layout.land_cells() if cell.coord not in self._tiles]

    def is_full(self) -> bool:
        return len(self._tiles) >= self.layout.land_count

    def place(self, coord: Axial, terrain: Terrain) -> None:
        if not self.layout.is_land(coord):
            raise ValueError(f"{coord} is not a land cell of this board.")
        if coord in self._tiles:
            raise ValueError(f"{coord} already holds {self._tiles[coord].value}.")
        self._tiles[coord] = Terrain(terrain)

    def column_occupancy(self, column: int) -> List[int]:
        return sorted(coord.r for coord in self._tiles if coord.q == column)

    def eligible_coords(self) -> List[Axial]:
        """Occupied cells that take a number token (gold included)."""
        return [coord for coord in self if self._tiles[coord] not in NUMBERLESS_TERRAINS]

    def terrain_counts(self) -> Dict[Terrain, int]:
        counts = {terrain: 0 for terrain in Terrain}
        for terrain in self._tiles.values():
            counts[terrain] += 1
        return counts

    def clear(self) -> None:
        self._tiles.clear()
