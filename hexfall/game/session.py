from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from hexfall.domain.board import BoardState
from hexfall.domain.hexgrid import Axial, BoardLayout, Terrain
from hexfall.domain.modes import GameMode, get_game_mode
from hexfall.domain.numbers import assign_numbers
from hexfall.domain.tiles import TileBag, normalize_tile_counts

from .fall import DropOutcome, FallEngine, FallingTile, FallPhase
from .scheduler import ManualScheduler, Scheduler
from .speed import SpeedPolicy

logger = logging.getLogger(__name__)

EVENT_LOG_LIMIT = 120

TilePlacedListener = Callable[[Terrain], None]
SnapshotListener = Callable[["SessionSnapshot"], None]


class SessionPhase(str, Enum):
    SETUP = "setup"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class SessionConfig:
    tile_counts: Mapping[Terrain, int]
    map_size: int = 2
    with_ocean: bool = False
    seed: Optional[int] = None
    speed: SpeedPolicy = field(default_factory=SpeedPolicy)
    mode_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tile_counts", normalize_tile_counts(self.tile_counts))
        if isinstance(self.map_size, bool) or not isinstance(self.map_size, int) or self.map_size < 0:
            raise ValueError(f"map_size must be a non-negative integer, received {self.map_size!r}.")

    @classmethod
    def from_mode(
        cls,
        mode: GameMode | str,
        *,
        seed: Optional[int] = None,
        with_ocean: bool = False,
        speed: SpeedPolicy | None = None,
    ) -> "SessionConfig":
        game_mode = mode if isinstance(mode, GameMode) else get_game_mode(mode)
        return cls(
            tile_counts=game_mode.counts(),
            map_size=game_mode.map_size,
            with_ocean=with_ocean,
            seed=seed,
            speed=speed if speed is not None else SpeedPolicy(),
            mode_id=game_mode.id,
        )

    def total_tiles(self) -> int:
        return int(sum(self.tile_counts.values()))


@dataclass(frozen=True)
class CellView:
    q: int
    r: int
    terrain: Optional[Terrain]
    number: Optional[int]
    is_water: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "q": self.q,
            "r": self.r,
            "terrain": self.terrain.value if self.terrain is not None else None,
            "number": self.number,
            "is_water": self.is_water,
        }


@dataclass(frozen=True)
class SessionSnapshot:
    phase: SessionPhase
    current_tile: Optional[Terrain]
    next_tile: Optional[Terrain]
    upcoming_preview: Tuple[Terrain, ...]
    remaining_counts: Mapping[Terrain, int]
    board_cells: Tuple[CellView, ...]
    falling_tile: Optional[FallingTile]
    numbers: Mapping[Axial, int]
    finished: bool
    drop_interval_ms: int

    def occupied_cells(self) -> List[CellView]:
        return [cell for cell in self.board_cells if cell.terrain is not None and not cell.is_water]

    def to_dict(self) -> Dict[str, Any]:
        falling = None
        if self.falling_tile is not None:
            falling = {
                "q": self.falling_tile.column,
                "r": self.falling_tile.row,
                "terrain": self.falling_tile.terrain.value,
                "rotation": self.falling_tile.rotation,
            }
        return {
            "phase": self.phase.value,
            "current_tile": self.current_tile.value if self.current_tile is not None else None,
            "next_tile": self.next_tile.value if self.next_tile is not None else None,
            "upcoming_preview": [terrain.value for terrain in self.upcoming_preview],
            "remaining_counts": {terrain.value: count for terrain, count in self.remaining_counts.items()},
            "board_cells": [cell.to_dict() for cell in self.board_cells],
            "falling_tile": falling,
            "finished": self.finished,
            "drop_interval_ms": self.drop_interval_ms,
        }


class GameSession:
    """
    Lifecycle owner for one falling-tile game.

    Input commands and timer callbacks share one lock, so a tick and a key
    press never interleave. Timers carry the epoch they were scheduled in;
    pause, resume, reset and finish move the epoch on, which turns any
    callback still in flight into a no-op.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        on_tile_placed: TilePlacedListener | None = None,
    ) -> None:
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.event_log: list[str] = []
        self._lock = threading.RLock()
        self._tile_listeners: list[TilePlacedListener] = []
        self._snapshot_listeners: list[SnapshotListener] = []
        if on_tile_placed is not None:
            self._tile_listeners.append(on_tile_placed)
        self._epoch = 0
        self._drop_handle: Any = None
        self._ramp_handle: Any = None
        self._config = config
        self._build(config)

    # ── state ─────────────────────────────────────────────────────────

    def _build(self, config: SessionConfig | None) -> None:
        self.phase = SessionPhase.SETUP
        self._numbers: Dict[Axial, int] | None = None
        self._soft_drop = False
        self._elapsed_ms = 0.0
        self._resumed_at_ms = 0.0
        self._rng = random.Random(config.seed if config is not None else None)
        if config is None:
            self.layout: BoardLayout | None = None
            self.board: BoardState | None = None
            self.bag = TileBag(self._rng)
            self.engine: FallEngine | None = None
            return
        self.layout = BoardLayout(config.map_size, with_ocean=config.with_ocean)
        self.board = BoardState(self.layout)
        self.bag = TileBag(self._rng)
        self.engine = FallEngine(
            self.layout,
            self.board,
            self.bag,
            rng=self._rng,
            on_placed=self._handle_tile_placed,
            on_done=self._handle_board_done,
        )

    @property
    def config(self) -> SessionConfig | None:
        return self._config

    @property
    def numbers(self) -> Dict[Axial, int]:
        return dict(self._numbers or {})

    @property
    def is_finished(self) -> bool:
        return self.phase is SessionPhase.FINISHED

    @property
    def soft_drop_active(self) -> bool:
        return self._soft_drop

    def add_tile_placed_listener(self, listener: TilePlacedListener) -> None:
        self._tile_listeners.append(listener)

    def add_listener(self, listener: SnapshotListener) -> None:
        self._snapshot_listeners.append(listener)

    def elapsed_running_ms(self) -> float:
        elapsed = self._elapsed_ms
        if self.phase is SessionPhase.RUNNING:
            elapsed += max(0.0, self.scheduler.now_ms() - self._resumed_at_ms)
        return elapsed

    def drop_interval_ms(self) -> int:
        speed = self._config.speed if self._config is not None else SpeedPolicy()
        return speed.interval_for(self.elapsed_running_ms(), soft_drop=self._soft_drop)

    # ── lifecycle ─────────────────────────────────────────────────────

    def start(self, config: SessionConfig | None = None) -> bool:
        with self._lock:
            if config is not None:
                if self.phase is not SessionPhase.SETUP:
                    return False
                self._config = config
                self._build(config)
            if self._config is None or self.engine is None:
                raise ValueError("No game configuration selected.")
            if self.phase is not SessionPhase.SETUP:
                return False

            self.bag.fill(self._config.tile_counts)
            self.phase = SessionPhase.RUNNING
            self._elapsed_ms = 0.0
            self._resumed_at_ms = self.scheduler.now_ms()
            self._record_event(
                f"started size {self._config.map_size} board with {self.bag.total} tiles"
            )
            logger.debug("session started: %s", self._config)
            self.engine.begin()
            if self.phase is SessionPhase.RUNNING:
                self._restart_timers()
            self._notify()
            return True

    def pause(self) -> bool:
        with self._lock:
            if self.phase is not SessionPhase.RUNNING:
                return False
            self._elapsed_ms = self.elapsed_running_ms()
            self.phase = SessionPhase.PAUSED
            self._cancel_timers()
            self._record_event("paused")
            logger.debug("session paused at %.0f ms", self._elapsed_ms)
            self._notify()
            return True

    def resume(self) -> bool:
        with self._lock:
            if self.phase is not SessionPhase.PAUSED:
                return False
            self._resumed_at_ms = self.scheduler.now_ms()
            self.phase = SessionPhase.RUNNING
            self._restart_timers()
            self._record_event("resumed")
            logger.debug("session resumed")
            self._notify()
            return True

    def toggle_pause(self) -> bool:
        with self._lock:
            if self.phase is SessionPhase.PAUSED:
                return self.resume()
            return self.pause()

    def reset(self) -> bool:
        with self._lock:
            self._cancel_timers()
            self._build(self._config)
            self._record_event("reset")
            logger.debug("session reset")
            self._notify()
            return True

    # ── input ─────────────────────────────────────────────────────────

    def move_left(self) -> bool:
        return self._forward(lambda engine: engine.move_left(), False)

    def move_right(self) -> bool:
        return self._forward(lambda engine: engine.move_right(), False)

    def rotate(self) -> bool:
        return self._forward(lambda engine: engine.rotate(), False)

    def hard_drop(self) -> DropOutcome:
        return self._forward(lambda engine: engine.hard_drop(), DropOutcome.IGNORED)

    def click_cell(self, q: int, r: int) -> DropOutcome:
        return self._forward(lambda engine: engine.move_to(Axial(int(q), int(r))), DropOutcome.IGNORED)

    def soft_drop_on(self) -> bool:
        with self._lock:
            if self.phase is not SessionPhase.RUNNING or self._soft_drop:
                return False
            self._soft_drop = True
            self._restart_timers()
            self._notify()
            return True

    def soft_drop_off(self) -> bool:
        with self._lock:
            if not self._soft_drop:
                return False
            self._soft_drop = False
            if self.phase is SessionPhase.RUNNING:
                self._restart_timers()
            self._notify()
            return True

    def tick(self) -> DropOutcome:
        """Apply one auto-drop step immediately, as the drop timer would."""
        return self._forward(lambda engine: engine.tick(), DropOutcome.IGNORED)

    def _forward(self, action: Callable[[FallEngine], Any], ignored: Any) -> Any:
        with self._lock:
            if self.phase is not SessionPhase.RUNNING or self.engine is None:
                return ignored
            result = action(self.engine)
            if result is DropOutcome.BLOCKED:
                self._record_event(f"blocked, respawned in column {self._falling_column()}")
            self._notify()
            return result

    # ── timers ────────────────────────────────────────────────────────

    def _restart_timers(self) -> None:
        self._cancel_timers()
        epoch = self._epoch
        speed = self._config.speed if self._config is not None else SpeedPolicy()
        self._drop_handle = self.scheduler.call_later(
            self.drop_interval_ms(), lambda: self._on_drop_timer(epoch)
        )
        self._ramp_handle = self.scheduler.call_later(
            speed.next_ramp_in(self.elapsed_running_ms()), lambda: self._on_ramp_timer(epoch)
        )

    def _cancel_timers(self) -> None:
        self._epoch += 1
        for handle in (self._drop_handle, self._ramp_handle):
            if handle is not None:
                self.scheduler.cancel(handle)
        self._drop_handle = None
        self._ramp_handle = None

    def _on_drop_timer(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self.phase is not SessionPhase.RUNNING or self.engine is None:
                return
            self._drop_handle = None
            outcome = self.engine.tick()
            if outcome is DropOutcome.BLOCKED:
                self._record_event(f"blocked, respawned in column {self._falling_column()}")
            if self.phase is SessionPhase.RUNNING and epoch == self._epoch:
                self._drop_handle = self.scheduler.call_later(
                    self.drop_interval_ms(), lambda: self._on_drop_timer(epoch)
                )
            self._notify()

    def _on_ramp_timer(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self.phase is not SessionPhase.RUNNING or self._config is None:
                return
            speed = self._config.speed
            elapsed = self.elapsed_running_ms()
            self._record_event(f"drop interval now {speed.interval_for(elapsed)} ms")
            self._ramp_handle = self.scheduler.call_later(
                speed.next_ramp_in(elapsed), lambda: self._on_ramp_timer(epoch)
            )

    # ── engine hooks ──────────────────────────────────────────────────

    def _handle_tile_placed(self, terrain: Terrain, coord: Axial) -> None:
        self._record_event(f"placed {terrain.value} at ({coord.q}, {coord.r})")
        for listener in list(self._tile_listeners):
            listener(terrain)

    def _handle_board_done(self) -> None:
        if self._numbers is not None or self.board is None or self._config is None:
            return
        self._numbers = assign_numbers(self.board, self._config.map_size, self._rng)
        self._elapsed_ms = self.elapsed_running_ms()
        self.phase = SessionPhase.FINISHED
        self._cancel_timers()
        self._record_event(
            f"island complete: {len(self.board)} tiles, {len(self._numbers)} numbers"
        )
        logger.debug("session finished with %d tiles placed", len(self.board))

    # ── snapshots ─────────────────────────────────────────────────────

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            numbers = dict(self._numbers or {})
            cells: list[CellView] = []
            if self.layout is not None and self.board is not None:
                for cell in sorted(self.layout.cells, key=lambda item: (item.r, item.q)):
                    terrain = self.board.get(cell.coord) if not cell.is_water else Terrain.WATER
                    cells.append(
                        CellView(
                            q=cell.q,
                            r=cell.r,
                            terrain=terrain,
                            number=numbers.get(cell.coord),
                            is_water=cell.is_water,
                        )
                    )
            falling = None
            if self.engine is not None and self.engine.phase is FallPhase.FALLING:
                falling = self.engine.tile
            return SessionSnapshot(
                phase=self.phase,
                current_tile=self.bag.current,
                next_tile=self.bag.next,
                upcoming_preview=tuple(self.bag.upcoming()),
                remaining_counts=self.bag.remaining_counts(),
                board_cells=tuple(cells),
                falling_tile=falling,
                numbers=numbers,
                finished=self.phase is SessionPhase.FINISHED,
                drop_interval_ms=self.drop_interval_ms(),
            )

    def _notify(self) -> None:
        if not self._snapshot_listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._snapshot_listeners):
            listener(snapshot)

    def _falling_column(self) -> Optional[int]:
        if self.engine is None or self.engine.tile is None:
            return None
        return self.engine.tile.column

    def _record_event(self, text: str) -> None:
        self.event_log.append(text)
        if len(self.event_log) > EVENT_LOG_LIMIT:
            self.event_log = self.event_log[-EVENT_LOG_LIMIT:]
