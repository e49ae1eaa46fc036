import unittest

from hexfall.domain.hexgrid import Terrain
from hexfall.domain.numbers import CLASSIC_NUMBER_TOKENS
from hexfall.game.fall import DropOutcome
from hexfall.game.scheduler import ManualScheduler, TkScheduler
from hexfall.game.session import GameSession, SessionConfig, SessionPhase


def _session(mode_id="base-3-4", seed=3, **kwargs):
    scheduler = ManualScheduler()
    config = SessionConfig.from_mode(mode_id, seed=seed, **kwargs)
    return GameSession(config, scheduler=scheduler), scheduler


class _FakeWidget:
    def __init__(self) -> None:
        self.callbacks = {}
        self.cancelled = []
        self._next_id = 0

    def after(self, delay_ms, callback):
        self._next_id += 1
        handle = f"after#{self._next_id}"
        self.callbacks[handle] = callback
        return handle

    def after_cancel(self, handle) -> None:
        self.cancelled.append(handle)


class ClassicGameTests(unittest.TestCase):
    def test_filling_every_cell_finishes_with_classic_numbers(self) -> None:
        session, _ = _session()
        self.assertTrue(session.start())
        coords = sorted(session.layout.land_coords(), key=lambda coord: (coord.q, -coord.r))
        for coord in coords:
            self.assertEqual(session.click_cell(coord.q, coord.r), DropOutcome.MOVED)
            self.assertEqual(session.hard_drop(), DropOutcome.PLACED)

        snapshot = session.snapshot()
        self.assertTrue(snapshot.finished)
        self.assertIs(snapshot.phase, SessionPhase.FINISHED)
        self.assertEqual(len(snapshot.occupied_cells()), 19)
        self.assertTrue(all(count == 0 for count in snapshot.remaining_counts.values()))
        self.assertIsNone(snapshot.falling_tile)
        self.assertEqual(sorted(snapshot.numbers.values()), sorted(CLASSIC_NUMBER_TOKENS))
        for cell in snapshot.board_cells:
            if cell.terrain is Terrain.DESERT:
                self.assertIsNone(cell.number)
            else:
                self.assertIsNotNone(cell.number)

    def test_finished_session_ignores_input_and_restart(self) -> None:
        session, scheduler = _session(seed=9)
        session.start()
        for coord in sorted(session.layout.land_coords(), key=lambda coord: (coord.q, -coord.r)):
            session.click_cell(coord.q, coord.r)
            session.hard_drop()
        self.assertTrue(session.is_finished)
        numbers = session.numbers

        self.assertFalse(session.move_left())
        self.assertEqual(session.hard_drop(), DropOutcome.IGNORED)
        self.assertFalse(session.start())
        self.assertFalse(session.pause())
        self.assertEqual(scheduler.pending_count(), 0)
        self.assertEqual(session.numbers, numbers)

    def test_start_without_configuration_is_an_error(self) -> None:
        with self.assertRaises(ValueError):
            GameSession(scheduler=ManualScheduler()).start()


class LifecycleTests(unittest.TestCase):
    def test_inputs_are_ignored_outside_running(self) -> None:
        session, _ = _session()
        self.assertIs(session.phase, SessionPhase.SETUP)
        self.assertFalse(session.move_left())
        self.assertFalse(session.rotate())
        self.assertEqual(session.hard_drop(), DropOutcome.IGNORED)
        self.assertEqual(session.click_cell(0, 0), DropOutcome.IGNORED)
        self.assertFalse(session.soft_drop_on())
        self.assertFalse(session.pause())
        self.assertFalse(session.resume())

    def test_pause_freezes_the_falling_tile(self) -> None:
        session, scheduler = _session()
        session.start()
        scheduler.advance(2_500)
        tile = session.snapshot().falling_tile

        self.assertTrue(session.pause())
        self.assertEqual(scheduler.pending_count(), 0)
        self.assertFalse(session.move_left())
        self.assertEqual(scheduler.advance(10_000), 0)
        self.assertEqual(session.snapshot().falling_tile, tile)

        self.assertTrue(session.resume())
        self.assertIs(session.phase, SessionPhase.RUNNING)
        self.assertEqual(session.snapshot().falling_tile, tile)
        self.assertEqual(scheduler.pending_count(), 2)

    def test_toggle_pause_flips_between_states(self) -> None:
        session, _ = _session()
        session.start()
        self.assertTrue(session.toggle_pause())
        self.assertIs(session.phase, SessionPhase.PAUSED)
        self.assertTrue(session.toggle_pause())
        self.assertIs(session.phase, SessionPhase.RUNNING)

    def test_reset_matches_a_fresh_session_and_replays(self) -> None:
        session, scheduler = _session(seed=21)
        session.start()
        scheduler.advance(4_000)
        session.hard_drop()
        self.assertTrue(session.reset())
        self.assertIs(session.phase, SessionPhase.SETUP)
        self.assertEqual(scheduler.pending_count(), 0)

        fresh = GameSession(session.config, scheduler=ManualScheduler(scheduler.now_ms()))
        self.assertEqual(session.snapshot().to_dict(), fresh.snapshot().to_dict())

        session.start()
        fresh.start()
        self.assertEqual(session.snapshot().to_dict(), fresh.snapshot().to_dict())
        session.hard_drop()
        fresh.hard_drop()
        self.assertEqual(session.snapshot().to_dict(), fresh.snapshot().to_dict())

    def test_start_can_take_a_new_configuration_in_setup(self) -> None:
        session = GameSession(scheduler=ManualScheduler())
        config = SessionConfig.from_mode("cities-knights-3-4", seed=4)
        self.assertTrue(session.start(config))
        self.assertIs(session.config, config)
        self.assertEqual(session.bag.total, 19)


class TimerTests(unittest.TestCase):
    def test_drop_timer_moves_the_tile_each_interval(self) -> None:
        session, scheduler = _session()
        session.start()
        row = session.snapshot().falling_tile.row
        scheduler.advance(999)
        self.assertEqual(session.snapshot().falling_tile.row, row)
        scheduler.advance(1)
        self.assertEqual(session.snapshot().falling_tile.row, row + 1)

    def test_soft_drop_shortens_the_interval(self) -> None:
        session, scheduler = _session()
        session.start()
        row = session.snapshot().falling_tile.row
        self.assertTrue(session.soft_drop_on())
        self.assertTrue(session.soft_drop_active)
        self.assertEqual(session.snapshot().drop_interval_ms, 100)
        scheduler.advance(100)
        self.assertEqual(session.snapshot().falling_tile.row, row + 1)

        self.assertTrue(session.soft_drop_off())
        self.assertEqual(session.snapshot().drop_interval_ms, 1_000)
        self.assertFalse(session.soft_drop_off())

    def test_speed_ramps_with_running_time_only(self) -> None:
        session, scheduler = _session("tetris-mode", seed=5)
        session.start()
        scheduler.advance(20_000)
        self.assertEqual(session.drop_interval_ms(), 980)
        self.assertIn("drop interval now 980 ms", session.event_log)

        session.pause()
        scheduler.advance(60_000)
        self.assertEqual(session.elapsed_running_ms(), 20_000)
        session.resume()
        self.assertEqual(session.drop_interval_ms(), 980)
        scheduler.advance(19_999)
        self.assertEqual(session.drop_interval_ms(), 980)
        scheduler.advance(1)
        self.assertEqual(session.drop_interval_ms(), 960)

    def test_timers_alone_finish_a_short_game(self) -> None:
        scheduler = ManualScheduler()
        config = SessionConfig(tile_counts={"field": 2}, map_size=2, seed=12)
        session = GameSession(config, scheduler=scheduler)
        session.start()
        scheduler.advance(60_000)
        self.assertTrue(session.is_finished)
        self.assertEqual(len(session.snapshot().occupied_cells()), 2)
        self.assertEqual(len(session.numbers), 2)
        self.assertEqual(scheduler.pending_count(), 0)

    def test_stale_tk_callback_is_a_no_op(self) -> None:
        widget = _FakeWidget()
        config = SessionConfig.from_mode("base-3-4", seed=2)
        session = GameSession(config, scheduler=TkScheduler(widget))
        session.start()
        self.assertEqual(len(widget.callbacks), 2)
        handles = list(widget.callbacks)
        tile = session.snapshot().falling_tile

        session.pause()
        self.assertEqual(sorted(widget.cancelled), sorted(handles))

        session.resume()
        widget.callbacks[handles[0]]()
        self.assertEqual(session.snapshot().falling_tile, tile)


class EventTests(unittest.TestCase):
    def test_listeners_see_placements_and_snapshots(self) -> None:
        session, _ = _session()
        placed = []
        snapshots = []
        session.add_tile_placed_listener(placed.append)
        session.add_listener(snapshots.append)
        session.start()
        terrain = session.snapshot().current_tile
        self.assertEqual(session.hard_drop(), DropOutcome.PLACED)
        self.assertEqual(placed, [terrain])
        self.assertGreaterEqual(len(snapshots), 2)
        self.assertEqual(len(snapshots[-1].occupied_cells()), 1)
        self.assertTrue(any(entry.startswith(f"placed {terrain.value} at") for entry in session.event_log))

    def test_shortfall_leaves_empty_cells(self) -> None:
        config = SessionConfig(tile_counts={Terrain.FOREST: 5}, map_size=2, seed=1)
        session = GameSession(config, scheduler=ManualScheduler())
        session.start()
        while session.phase is SessionPhase.RUNNING:
            session.hard_drop()
        snapshot = session.snapshot()
        self.assertTrue(snapshot.finished)
        self.assertEqual(len(snapshot.occupied_cells()), 5)
        self.assertEqual(sum(1 for cell in snapshot.board_cells if cell.terrain is None), 14)
        self.assertEqual(len(snapshot.numbers), 5)

    def test_ocean_cells_show_as_water(self) -> None:
        session, _ = _session(seed=2, with_ocean=True)
        snapshot = session.snapshot()
        water = [cell for cell in snapshot.board_cells if cell.is_water]
        self.assertEqual(len(snapshot.board_cells), 37)
        self.assertEqual(len(water), 18)
        self.assertTrue(all(cell.terrain is Terrain.WATER for cell in water))
        self.assertEqual(snapshot.occupied_cells(), [])

    def test_config_rejects_bad_input(self) -> None:
        with self.assertRaises(ValueError):
            SessionConfig(tile_counts={"forest": -2})
        with self.assertRaises(ValueError):
            SessionConfig(tile_counts={"forest": 2}, map_size=-1)
        with self.assertRaises(KeyError):
            SessionConfig.from_mode("no-such-mode")


if __name__ == "__main__":
    unittest.main()
