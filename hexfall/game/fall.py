from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from hexfall.domain.board import BoardState
from hexfall.domain.hexgrid import Axial, BoardLayout, Terrain
from hexfall.domain.tiles import TileBag

SPAWN_CLEARANCE = 2
ROTATION_STEP = 60

TilePlacedCallback = Callable[[Terrain, Axial], None]
BoardDoneCallback = Callable[[], None]


class FallPhase(str, Enum):
    IDLE = "idle"
    FALLING = "falling"
    DONE = "done"


class DropOutcome(str, Enum):
    IGNORED = "ignored"
    MOVED = "moved"
    PLACED = "placed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class FallingTile:
    column: int
    row: int
    terrain: Terrain
    rotation: int = 0

    @property
    def coord(self) -> Axial:
        return Axial(self.column, self.row)


class FallEngine:
    """
    Gravity for the single tile in play.

    Every column is a stack: a tile always comes to rest directly above the
    highest occupied cell of its column, or on the column's bottom cell when
    the column is empty. Neighbouring columns never influence the resting row.
    """

    def __init__(
        self,
        layout: BoardLayout,
        board: BoardState,
        bag: TileBag,
        *,
        rng: random.Random | None = None,
        on_placed: TilePlacedCallback | None = None,
        on_done: BoardDoneCallback | None = None,
    ) -> None:
        self.layout = layout
        self.board = board
        self.bag = bag
        self.phase = FallPhase.IDLE
        self.tile: Optional[FallingTile] = None
        self._rng = rng if rng is not None else random.Random()
        self._on_placed = on_placed
        self._on_done = on_done
        self._columns = sorted(layout.columns())

    def begin(self) -> None:
        if self.phase is not FallPhase.IDLE:
            return
        if self.bag.current is None or self.board.is_full():
            self._finish()
            return
        self.spawn()

    def spawn(self) -> FallingTile | None:
        terrain = self.bag.current
        if terrain is None or not self._columns:
            self._finish()
            return None
        column = self._rng.choice(self._columns)
        self.tile = FallingTile(
            column=column,
            row=self.layout.top_row(column) - SPAWN_CLEARANCE,
            terrain=terrain,
            rotation=0,
        )
        self.phase = FallPhase.FALLING
        return self.tile

    def resting_row(self, column: int) -> int:
        cells = self.layout.cells_in_column(column)
        if not cells:
            raise KeyError(f"Column {column} has no land cells.")
        for cell in cells:
            if self.board.is_occupied(cell.coord):
                return cell.r - 1
        return cells[-1].r

    def tick(self) -> DropOutcome:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return DropOutcome.IGNORED
        resting = self.resting_row(self.tile.column)
        candidate = self.tile.row + 1
        if candidate >= resting:
            return self.commit(Axial(self.tile.column, resting))
        self.tile = replace(self.tile, row=candidate)
        return DropOutcome.MOVED

    def hard_drop(self) -> DropOutcome:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return DropOutcome.IGNORED
        return self.commit(Axial(self.tile.column, self.resting_row(self.tile.column)))

    def move(self, delta: int) -> bool:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return False
        column = self.tile.column + int(delta)
        if not self.layout.has_column(column):
            return False
        if self.tile.row >= self.layout.board_top_row():
            if not self.board.is_open(Axial(column, self.tile.row)):
                return False
        self.tile = replace(self.tile, column=column)
        return True

    def move_left(self) -> bool:
        return self.move(-1)

    def move_right(self) -> bool:
        return self.move(1)

    def move_to(self, coord: Axial) -> DropOutcome:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return DropOutcome.IGNORED
        if not self.layout.is_land(coord):
            return DropOutcome.IGNORED
        if self.board.is_occupied(coord):
            self.spawn()
            return DropOutcome.BLOCKED
        self.tile = replace(self.tile, column=coord.q, row=coord.r)
        return DropOutcome.MOVED

    def rotate(self) -> bool:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return False
        self.tile = replace(self.tile, rotation=(self.tile.rotation + ROTATION_STEP) % 360)
        return True

    def commit(self, coord: Axial) -> DropOutcome:
        if self.phase is not FallPhase.FALLING or self.tile is None:
            return DropOutcome.IGNORED
        if not self.board.is_open(coord):
            # Columns only fill from the top; a blocked tile goes back up, it is never lost.
            self.spawn()
            return DropOutcome.BLOCKED

        terrain = self.tile.terrain
        self.board.place(coord, terrain)
        self.tile = None
        if self._on_placed is not None:
            self._on_placed(terrain, coord)

        if self.bag.advance() is None or self.board.is_full():
            self._finish()
        else:
            self.spawn()
        return DropOutcome.PLACED

    def reset(self) -> None:
        self.phase = FallPhase.IDLE
        self.tile = None

    def _finish(self) -> None:
        if self.phase is FallPhase.DONE:
            return
        self.tile = None
        self.phase = FallPhase.DONE
        if self._on_done is not None:
            self._on_done()
