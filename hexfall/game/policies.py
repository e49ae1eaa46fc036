from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Mapping, Protocol

from .session import GameSession, SessionPhase

DEFAULT_MAX_STEPS = 20_000


class InputPolicy(Protocol):
    def act(self, session: GameSession) -> None:
        ...


class HardDropPolicy:
    """Drops every tile straight down wherever it spawned."""

    def act(self, session: GameSession) -> None:
        session.hard_drop()


class TargetOpenColumnPolicy:
    """Clicks the resting cell of a random column that still has room, then drops."""

    def __init__(self, *, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def act(self, session: GameSession) -> None:
        engine = session.engine
        board = session.board
        if engine is None or board is None:
            return
        open_columns = sorted({coord.q for coord in board.open_cells()})
        if open_columns:
            column = self._rng.choice(open_columns)
            session.click_cell(column, engine.resting_row(column))
        session.hard_drop()


@dataclass
class WeightedRandomPolicy:
    """
    Key-masher: random moves and rotations mixed with timer ticks and the
    occasional hard drop.
    """

    weights_by_input: Mapping[str, int] = field(
        default_factory=lambda: {
            "move_left": 3,
            "move_right": 3,
            "rotate": 1,
            "tick": 6,
            "hard_drop": 1,
        }
    )
    seed: int | None = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def act(self, session: GameSession) -> None:
        handlers: dict[str, Callable[[], object]] = {
            "move_left": session.move_left,
            "move_right": session.move_right,
            "rotate": session.rotate,
            "tick": session.tick,
            "hard_drop": session.hard_drop,
        }
        names = [name for name in handlers if self.weights_by_input.get(name, 0) > 0]
        if not names:
            raise ValueError("WeightedRandomPolicy needs at least one positive weight.")
        weights = [int(self.weights_by_input[name]) for name in names]
        choice = self._rng.choices(names, weights=weights, k=1)[0]
        handlers[choice]()


def play_session(
    session: GameSession,
    policy: InputPolicy,
    *,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> int:
    """Feed policy inputs until the session leaves ``RUNNING``; returns steps taken."""
    steps = 0
    while session.phase is SessionPhase.RUNNING and steps < max(1, int(max_steps)):
        policy.act(session)
        steps += 1
    return steps
