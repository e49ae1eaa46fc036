import unittest

from hexfall.domain.hexgrid import Terrain
from hexfall.domain.modes import (
    DEFAULT_MODE_ID,
    GAME_MODES,
    expected_land_cells,
    get_game_mode,
    validate_game_mode,
)
from hexfall.game.session import SessionConfig


class GameModeTests(unittest.TestCase):
    def test_mode_ids_are_unique(self) -> None:
        ids = [mode.id for mode in GAME_MODES]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertIn(DEFAULT_MODE_ID, ids)

    def test_lookup_normalizes_and_rejects_unknown_ids(self) -> None:
        self.assertEqual(get_game_mode("  Base-3-4 ").id, "base-3-4")
        with self.assertRaises(KeyError):
            get_game_mode("catan-in-space")

    def test_expected_land_cells_follow_map_size(self) -> None:
        self.assertEqual(expected_land_cells(2), 19)
        self.assertEqual(expected_land_cells(3), 37)
        self.assertEqual(expected_land_cells(4), 61)

    def test_validation_reports_short_bags(self) -> None:
        base = validate_game_mode(get_game_mode("base-3-4"))
        self.assertTrue(base.is_valid)
        self.assertEqual(base.message, "Valid configuration")

        pirates = validate_game_mode(get_game_mode("explorers-pirates"))
        self.assertFalse(pirates.is_valid)
        self.assertEqual(pirates.message, "Not enough tiles! Need 91 tiles but only have 20")

    def test_tetris_mode_has_an_oversized_bag(self) -> None:
        mode = get_game_mode("tetris-mode")
        self.assertGreater(mode.total_tiles(), expected_land_cells(mode.map_size))
        self.assertTrue(validate_game_mode(mode).is_valid)

    def test_mode_becomes_a_session_config(self) -> None:
        config = SessionConfig.from_mode("seafarers-fog-islands", seed=8)
        self.assertEqual(config.map_size, 4)
        self.assertEqual(config.mode_id, "seafarers-fog-islands")
        self.assertEqual(config.seed, 8)
        self.assertEqual(config.tile_counts[Terrain.GOLD], 3)
        self.assertEqual(config.total_tiles(), 22)


if __name__ == "__main__":
    unittest.main()
