from __future__ import annotations

import itertools
import random
from collections import Counter
from typing import Dict, List, Mapping, Sequence

from .board import BoardState
from .hexgrid import Axial

NUMBER_TOKEN_VALUES = (2, 3, 4, 5, 6, 8, 9, 10, 11, 12)
HOT_TOKEN_NUMBERS = frozenset({6, 8})
HOT_PLACEMENT_ATTEMPTS = 100

CLASSIC_NUMBER_TOKENS = [2, 3, 3, 4, 4, 5, 5, 6, 6, 8, 8, 9, 9, 10, 10, 11, 11, 12]


def _expand(multiplicities: Mapping[int, int]) -> List[int]:
    tokens: List[int] = []
    for value, count in sorted(multiplicities.items()):
        tokens.extend([value] * count)
    return tokens


# Larger boards are approximations built around the 6/8 peak, not official tables.
EXTENDED_NUMBER_TOKENS = _expand({2: 2, 3: 3, 4: 4, 5: 4, 6: 4, 8: 4, 9: 4, 10: 4, 11: 3, 12: 3})
LARGE_NUMBER_TOKENS = _expand({2: 3, 3: 5, 4: 6, 5: 7, 6: 7, 8: 7, 9: 7, 10: 6, 11: 6, 12: 5})

CANONICAL_NUMBER_TOKENS: Dict[int, List[int]] = {
    2: CLASSIC_NUMBER_TOKENS,
    3: EXTENDED_NUMBER_TOKENS,
    4: LARGE_NUMBER_TOKENS,
}

# Interleaved so that every prefix of the cycle stays roughly balanced.
BALANCED_CYCLE = (5, 9, 6, 8, 4, 10, 3, 11, 2, 12, 5, 9, 6, 8, 4, 10, 3, 11)
FALLBACK_TOKENS = (3, 4, 5, 9, 10, 11)


def token_distribution(size: int, count: int, rng: random.Random) -> List[int]:
    """Pick the multiset of tokens for ``count`` eligible cells on a ``size`` board."""
    count = max(0, int(count))
    table = CANONICAL_NUMBER_TOKENS.get(int(size))
    if table is None:
        return list(itertools.islice(itertools.cycle(BALANCED_CYCLE), count))
    if len(table) > count:
        return rng.sample(table, count)
    return list(table)


def assign_numbers(
    board: BoardState,
    size: int,
    rng: random.Random,
    *,
    attempts: int = HOT_PLACEMENT_ATTEMPTS,
) -> Dict[Axial, int]:
    """Place number tokens on every eligible cell of a finished board.

    Hot tokens (6 and 8) go first and avoid touching each other where the
    board allows it; a token that cannot be separated is placed anyway. The
    remaining tokens are shuffled onto what is left, and any cell the
    distribution could not cover receives a fallback value.
    """
    eligible = board.eligible_coords()
    table = CANONICAL_NUMBER_TOKENS.get(int(size), list(BALANCED_CYCLE))
    tokens = token_distribution(size, len(eligible), rng)
    hot_tokens = [token for token in tokens if token in HOT_TOKEN_NUMBERS]
    other_tokens = [token for token in tokens if token not in HOT_TOKEN_NUMBERS]

    assigned: Dict[Axial, int] = {}
    open_cells = list(eligible)

    for token in hot_tokens:
        if not open_cells:
            break
        cell = _pick_hot_cell(open_cells, assigned, rng, attempts)
        assigned[cell] = token
        open_cells.remove(cell)

    rng.shuffle(other_tokens)
    for cell, token in zip(list(open_cells), other_tokens):
        assigned[cell] = token
        open_cells.remove(cell)

    if open_cells:
        leftovers = list((Counter(table) - Counter(assigned.values())).elements())
        spare = [token for token in leftovers if token not in HOT_TOKEN_NUMBERS] or leftovers
        rng.shuffle(spare)
        for cell in open_cells:
            assigned[cell] = spare.pop() if spare else rng.choice(FALLBACK_TOKENS)

    return assigned


def _pick_hot_cell(
    open_cells: Sequence[Axial],
    assigned: Mapping[Axial, int],
    rng: random.Random,
    attempts: int,
) -> Axial:
    for _ in range(max(0, int(attempts))):
        candidate = rng.choice(open_cells)
        if not _touches_hot(candidate, assigned):
            return candidate
    separated = [cell for cell in open_cells if not _touches_hot(cell, assigned)]
    if separated:
        return rng.choice(separated)
    return rng.choice(open_cells)


def _touches_hot(coord: Axial, assigned: Mapping[Axial, int]) -> bool:
    return any(assigned.get(neighbor) in HOT_TOKEN_NUMBERS for neighbor in coord.neighbors())


def hot_adjacency_conflicts(numbers: Mapping[Axial, int]) -> int:
    """Count hot-token cells that have at least one hot neighbour."""
    return sum(
        1
        for coord, value in numbers.items()
        if value in HOT_TOKEN_NUMBERS and _touches_hot(coord, numbers)
    )


def validate_hot_token_spacing(numbers: Mapping[Axial, int]) -> bool:
    return hot_adjacency_conflicts(numbers) == 0
