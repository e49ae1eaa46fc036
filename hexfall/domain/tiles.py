from __future__ import annotations

import random
from typing import Dict, List, Mapping, Optional

from .hexgrid import Terrain

TileCount = Dict[Terrain, int]

PREVIEW_LENGTH = 3


def empty_tile_counts() -> TileCount:
    return {terrain: 0 for terrain in Terrain}


def normalize_tile_counts(raw: Mapping[Terrain | str, int] | None) -> TileCount:
    """Validate a tile composition and fill in missing terrains with zero."""
    counts = empty_tile_counts()
    if raw is None:
        return counts
    for key, amount in raw.items():
        try:
            terrain = Terrain(key)
        except ValueError as exc:
            raise ValueError(f"Unknown terrain kind: {key!r}.") from exc
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"Tile count for {terrain.value} must be an integer, received {amount!r}.")
        if amount < 0:
            raise ValueError(f"Tile count for {terrain.value} must be >= 0, received {amount}.")
        counts[terrain] = int(amount)
    return counts


def build_bag(counts: Mapping[Terrain | str, int], rng: random.Random) -> List[Terrain]:
    bag: List[Terrain] = []
    for terrain, amount in normalize_tile_counts(counts).items():
        bag.extend([terrain] * amount)
    rng.shuffle(bag)
    return bag


class TileBag:
    """Shuffled tile queue consumed from the front.

    ``current`` is the tile in play and stays in the queue until it has been
    committed to the board; ``advance`` then consumes it.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._queue: List[Terrain] = []
        self._remaining: TileCount = empty_tile_counts()
        self._total = 0

    def fill(self, counts: Mapping[Terrain | str, int]) -> None:
        normalized = normalize_tile_counts(counts)
        self._queue = build_bag(normalized, self._rng)
        self._remaining = dict(normalized)
        self._total = len(self._queue)

    @property
    def total(self) -> int:
        return self._total

    @property
    def current(self) -> Optional[Terrain]:
        return self._queue[0] if self._queue else None

    @property
    def next(self) -> Optional[Terrain]:
        return self._queue[1] if len(self._queue) > 1 else None

    def upcoming(self, limit: int = PREVIEW_LENGTH) -> List[Terrain]:
        return list(self._queue[2 : 2 + max(0, int(limit))])

    def queue(self) -> List[Terrain]:
        return list(self._queue)

    def advance(self) -> Optional[Terrain]:
        """Consume the committed current tile and return the new current one."""
        if not self._queue:
            return None
        placed = self._queue.pop(0)
        self._remaining[placed] = max(0, self._remaining[placed] - 1)
        return self.current

    def remaining_counts(self) -> TileCount:
        return dict(self._remaining)

    def remaining_total(self) -> int:
        return len(self._queue)

    def has_more_tiles(self) -> bool:
        return len(self._queue) > 1

    def is_empty(self) -> bool:
        return not self.has_more_tiles()

    def is_exhausted(self) -> bool:
        return not self._queue

    def reset(self) -> None:
        self._queue = []
        self._remaining = empty_tile_counts()
        self._total = 0
