from click.testing import CliRunner

from hexfall.cli import main, run_simulation
from hexfall.game.session import SessionPhase


def test_modes_lists_every_mode() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["modes"])
    assert result.exit_code == 0
    assert "Game modes" in result.output


def test_simulate_prints_summary_and_board() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["simulate", "--games", "2", "--seed", "3", "--show-board"])
    assert result.exit_code == 0
    assert "Hexfall simulation" in result.output
    assert "Final island" in result.output


def test_simulate_rejects_unknown_mode() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["simulate", "--mode", "catan-in-space"])
    assert result.exit_code != 0


def test_run_simulation_fills_the_classic_island() -> None:
    results = run_simulation("base-3-4", games=2, seed_start=10, policy_name="target")
    assert [result.seed for result in results] == [10, 11]
    for result in results:
        assert result.snapshot.phase is SessionPhase.FINISHED
        assert result.tiles_placed == 19
        assert result.empty_cells == 0
        assert result.tally.tiles_seen == 19


def test_run_simulation_reports_shortfall() -> None:
    (result,) = run_simulation("explorers-pirates", games=1, seed_start=0, policy_name="drop")
    assert result.snapshot.finished
    assert result.tiles_placed == 20
    assert result.empty_cells == 71
