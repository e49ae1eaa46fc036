from __future__ import annotations

from dataclasses import dataclass
from typing import List

import click
from rich.console import Console
from rich.table import Table

from hexfall.domain.modes import DEFAULT_MODE_ID, GAME_MODES, get_game_mode, validate_game_mode
from hexfall.domain.numbers import hot_adjacency_conflicts
from hexfall.game.policies import (
    HardDropPolicy,
    InputPolicy,
    TargetOpenColumnPolicy,
    WeightedRandomPolicy,
    play_session,
)
from hexfall.game.scheduler import ManualScheduler
from hexfall.game.session import GameSession, SessionConfig, SessionSnapshot
from hexfall.game.tally import ResourceCard, ResourceTally

POLICY_CHOICES = ("target", "drop", "random")


@dataclass(frozen=True)
class SimulationResult:
    game_index: int
    seed: int
    steps: int
    snapshot: SessionSnapshot
    tally: ResourceTally

    @property
    def tiles_placed(self) -> int:
        return len(self.snapshot.occupied_cells())

    @property
    def empty_cells(self) -> int:
        return sum(1 for cell in self.snapshot.board_cells if cell.terrain is None)


def _make_policy(name: str, seed: int) -> InputPolicy:
    if name == "drop":
        return HardDropPolicy()
    if name == "random":
        return WeightedRandomPolicy(seed=seed)
    return TargetOpenColumnPolicy(seed=seed)


def run_simulation(
    mode_id: str,
    *,
    games: int,
    seed_start: int,
    policy_name: str,
    with_ocean: bool = False,
) -> List[SimulationResult]:
    mode = get_game_mode(mode_id)
    results: List[SimulationResult] = []
    for game_index in range(games):
        seed = seed_start + game_index
        tally = ResourceTally()
        session = GameSession(scheduler=ManualScheduler(), on_tile_placed=tally)
        session.start(SessionConfig.from_mode(mode, seed=seed, with_ocean=with_ocean))
        steps = play_session(session, _make_policy(policy_name, seed))
        results.append(
            SimulationResult(
                game_index=game_index,
                seed=seed,
                steps=steps,
                snapshot=session.snapshot(),
                tally=tally,
            )
        )
    return results


def _summary_table(results: List[SimulationResult]) -> Table:
    table = Table(title="Hexfall simulation")
    table.add_column("Game", justify="right")
    table.add_column("Seed", justify="right")
    table.add_column("Phase")
    table.add_column("Inputs", justify="right")
    table.add_column("Tiles", justify="right")
    table.add_column("Empty", justify="right")
    table.add_column("Numbers", justify="right")
    table.add_column("Hot conflicts", justify="right")
    for resource in ResourceCard:
        table.add_column(resource.value.title(), justify="right")

    for result in results:
        snapshot = result.snapshot
        table.add_row(
            str(result.game_index + 1),
            str(result.seed),
            snapshot.phase.value,
            str(result.steps),
            str(result.tiles_placed),
            str(result.empty_cells),
            str(len(snapshot.numbers)),
            str(hot_adjacency_conflicts(snapshot.numbers)),
            *(str(result.tally.counts[resource]) for resource in ResourceCard),
        )
    return table


def _board_table(snapshot: SessionSnapshot) -> Table:
    table = Table(title="Final island")
    table.add_column("q", justify="right")
    table.add_column("r", justify="right")
    table.add_column("Terrain")
    table.add_column("Number", justify="right")
    for cell in snapshot.board_cells:
        table.add_row(
            str(cell.q),
            str(cell.r),
            cell.terrain.value if cell.terrain is not None else "-",
            str(cell.number) if cell.number is not None else "",
        )
    return table


@click.group()
def main() -> None:
    """Headless tools for the hexfall falling-tile core."""


@main.command("modes")
def list_modes() -> None:
    """List the built-in game modes and whether their bags fill the island."""
    console = Console()
    table = Table(title="Game modes")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Tiles", justify="right")
    table.add_column("Check")
    for mode in GAME_MODES:
        validation = validate_game_mode(mode)
        style = "green" if validation.is_valid else "yellow"
        table.add_row(
            mode.id,
            mode.name,
            str(mode.map_size),
            str(mode.total_tiles()),
            f"[{style}]{validation.message}[/{style}]",
        )
    console.print(table)


@main.command("simulate")
@click.option(
    "--mode",
    "mode_id",
    default=DEFAULT_MODE_ID,
    show_default=True,
    type=click.Choice([mode.id for mode in GAME_MODES], case_sensitive=False),
    help="Game mode supplying map size and tile bag.",
)
@click.option(
    "--games",
    default=1,
    show_default=True,
    type=click.IntRange(1, None),
    help="Number of sessions to play.",
)
@click.option(
    "--seed",
    "seed_start",
    default=0,
    show_default=True,
    type=int,
    help="Seed of the first session; later sessions count upward.",
)
@click.option(
    "--policy",
    "policy_name",
    default="target",
    show_default=True,
    type=click.Choice(POLICY_CHOICES, case_sensitive=False),
    help="Scripted input: aim at open columns, hard-drop in place, or mash keys.",
)
@click.option(
    "--ocean/--no-ocean",
    default=False,
    show_default=True,
    help="Surround the island with a ring of water cells.",
)
@click.option(
    "--show-board/--no-show-board",
    default=False,
    show_default=True,
    help="Print the cells of the last finished island.",
)
def simulate(
    mode_id: str,
    games: int,
    seed_start: int,
    policy_name: str,
    ocean: bool,
    show_board: bool,
) -> None:
    """Play sessions on a virtual clock and summarize the finished islands."""
    console = Console()
    mode = get_game_mode(mode_id)
    validation = validate_game_mode(mode)
    if not validation.is_valid:
        console.print(f"[yellow]{validation.message}[/yellow]")

    results = run_simulation(
        mode.id,
        games=games,
        seed_start=seed_start,
        policy_name=policy_name.lower(),
        with_ocean=ocean,
    )
    console.print(_summary_table(results))
    if show_board and results:
        console.print(_board_table(results[-1].snapshot))


if __name__ == "__main__":
    main()
