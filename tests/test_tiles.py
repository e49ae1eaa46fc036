import random
import unittest

from hexfall.domain.hexgrid import Terrain
from hexfall.domain.tiles import TileBag, build_bag, normalize_tile_counts

CLASSIC_COUNTS = {
    Terrain.FIELD: 4,
    Terrain.FOREST: 4,
    Terrain.PASTURE: 4,
    Terrain.HILL: 3,
    Terrain.MOUNTAIN: 3,
    Terrain.DESERT: 1,
}


def _expanded(counts):
    tiles = []
    for terrain, amount in counts.items():
        tiles.extend([terrain] * amount)
    return sorted(tiles)


class BuildBagTests(unittest.TestCase):
    def test_bag_is_a_permutation_of_the_counts(self) -> None:
        variants = [
            CLASSIC_COUNTS,
            {Terrain.GOLD: 3, Terrain.WATER: 2},
            {Terrain.FOREST: 50, Terrain.FIELD: 50, Terrain.DESERT: 10},
            {},
        ]
        for seed, counts in enumerate(variants):
            bag = build_bag(counts, random.Random(seed))
            self.assertEqual(len(bag), sum(counts.values()))
            self.assertEqual(sorted(bag), _expanded(counts))

    def test_shuffle_depends_on_seed(self) -> None:
        first = build_bag(CLASSIC_COUNTS, random.Random(1))
        second = build_bag(CLASSIC_COUNTS, random.Random(1))
        third = build_bag(CLASSIC_COUNTS, random.Random(2))
        self.assertEqual(first, second)
        self.assertNotEqual(first, third)

    def test_string_keys_are_accepted(self) -> None:
        counts = normalize_tile_counts({"forest": 2, "gold": 1})
        self.assertEqual(counts[Terrain.FOREST], 2)
        self.assertEqual(counts[Terrain.GOLD], 1)
        self.assertEqual(counts[Terrain.DESERT], 0)
        self.assertEqual(set(counts), set(Terrain))

    def test_malformed_counts_are_rejected(self) -> None:
        for raw in ({"forest": -1}, {"lava": 2}, {"field": 1.5}, {"hill": True}):
            with self.assertRaises(ValueError, msg=f"{raw}"):
                normalize_tile_counts(raw)


class TileBagTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bag = TileBag(random.Random(11))
        self.bag.fill(CLASSIC_COUNTS)

    def test_window_shows_current_next_and_three_more(self) -> None:
        queue = self.bag.queue()
        self.assertEqual(self.bag.current, queue[0])
        self.assertEqual(self.bag.next, queue[1])
        self.assertEqual(self.bag.upcoming(), queue[2:5])

    def test_advance_decrements_the_committed_tile_once(self) -> None:
        placed = self.bag.current
        before = self.bag.remaining_counts()
        following = self.bag.next
        self.assertEqual(self.bag.advance(), following)
        after = self.bag.remaining_counts()
        self.assertEqual(after[placed], before[placed] - 1)
        for terrain in Terrain:
            if terrain is not placed:
                self.assertEqual(after[terrain], before[terrain])

    def test_remaining_plus_committed_equals_total(self) -> None:
        committed = 0
        while not self.bag.is_exhausted():
            self.assertEqual(self.bag.remaining_total() + committed, self.bag.total)
            self.assertEqual(sum(self.bag.remaining_counts().values()), self.bag.remaining_total())
            self.bag.advance()
            committed += 1
        self.assertEqual(committed, 19)
        self.assertTrue(all(count == 0 for count in self.bag.remaining_counts().values()))

    def test_last_tile_is_still_playable_when_bag_reports_empty(self) -> None:
        for _ in range(18):
            self.bag.advance()
        self.assertTrue(self.bag.is_empty())
        self.assertFalse(self.bag.has_more_tiles())
        self.assertIsNotNone(self.bag.current)
        self.assertIsNone(self.bag.next)
        self.assertFalse(self.bag.is_exhausted())
        self.assertIsNone(self.bag.advance())
        self.assertTrue(self.bag.is_exhausted())
        self.assertIsNone(self.bag.advance())

    def test_reset_clears_everything(self) -> None:
        self.bag.advance()
        self.bag.reset()
        self.assertIsNone(self.bag.current)
        self.assertIsNone(self.bag.next)
        self.assertEqual(self.bag.upcoming(), [])
        self.assertEqual(self.bag.total, 0)
        self.assertTrue(all(count == 0 for count in self.bag.remaining_counts().values()))


if __name__ == "__main__":
    unittest.main()
