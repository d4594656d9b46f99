"""Tests for universe.py

These test aren't meant to be especially thorough. The intention is to
document and provide basic sanity checks / regression tests for fundamental
behaviors.
"""

import unittest
from unittest import mock

import numpy as np

from errors import HostAllocationError
from kernel import ALIVE, BORDER, DEAD
import universe


class TestMakeUniverse(unittest.TestCase):
    """Validate the layout of freshly built universes."""
    def test_border_frame(self):
        world_size = 8
        grid = universe.as_grid(
            universe.make_universe(world_size, seed=42), world_size)
        self.assertEqual(grid.shape, (10, 10))
        self.assertTrue(np.all(grid[0, :] == BORDER))
        self.assertTrue(np.all(grid[-1, :] == BORDER))
        self.assertTrue(np.all(grid[:, 0] == BORDER))
        self.assertTrue(np.all(grid[:, -1] == BORDER))

    def test_interior_is_alive_or_dead(self):
        world_size = 8
        inner = universe.interior(
            universe.make_universe(world_size, seed=42), world_size)
        self.assertTrue(np.all((inner == ALIVE) | (inner == DEAD)))

    def test_coin_flip(self):
        """Roughly half of the interior starts out alive."""
        world_size = 200
        live = universe.count_live(universe.make_universe(world_size, seed=0))
        self.assertAlmostEqual(live / world_size ** 2, 0.5, delta=0.02)

    def test_same_seed(self):
        np.testing.assert_array_equal(
            universe.make_universe(16, seed=5),
            universe.make_universe(16, seed=5))

    def test_different_seed(self):
        self.assertFalse(np.array_equal(
            universe.make_universe(16, seed=5),
            universe.make_universe(16, seed=6)))

    def test_empty_universe(self):
        world_size = 4
        empty = universe.make_empty_universe(world_size)
        self.assertEqual(universe.count_live(empty), 0)
        self.assertTrue(np.all(universe.interior(empty, world_size) == DEAD))

    def test_host_allocation_error(self):
        with mock.patch('numpy.empty', side_effect=MemoryError()):
            with self.assertRaises(HostAllocationError):
                universe.make_universe(8)

    def test_seeding_out_of_memory(self):
        """Running out of memory while drawing the interior is reported."""
        rng = mock.Mock()
        rng.integers.side_effect = MemoryError()
        with mock.patch.object(universe.np.random, 'default_rng',
                               return_value=rng):
            with self.assertRaises(HostAllocationError) as context:
                universe.make_universe(8, seed=1)
        self.assertIsInstance(context.exception.__cause__, MemoryError)


class TestHelpers(unittest.TestCase):
    def test_border_mask(self):
        world_size = 6
        mask = universe.border_mask(world_size)
        self.assertEqual(mask.size, 64)
        self.assertEqual(np.count_nonzero(mask), 4 * world_size + 4)
        np.testing.assert_array_equal(
            mask, universe.make_empty_universe(world_size) == BORDER)

    def test_place_pattern(self):
        world_size = 5
        data = universe.make_empty_universe(world_size)
        universe.place_pattern(data, world_size, [[1, 0], [0, 1]], (3, 3))
        inner = universe.interior(data, world_size)
        self.assertEqual(inner[3, 3], ALIVE)
        self.assertEqual(inner[3, 4], DEAD)
        self.assertEqual(inner[4, 4], ALIVE)
        self.assertEqual(universe.count_live(data), 2)

    def test_place_pattern_out_of_bounds(self):
        world_size = 5
        data = universe.make_empty_universe(world_size)
        with self.assertRaises(ValueError):
            universe.place_pattern(data, world_size, np.ones((2, 2)), (4, 0))
        with self.assertRaises(ValueError):
            universe.place_pattern(data, world_size, [[1]], (-1, 0))


class TestReferenceStep(unittest.TestCase):
    def test_blinker(self):
        world_size = 5
        horizontal = universe.make_empty_universe(world_size)
        universe.place_pattern(horizontal, world_size, [[1, 1, 1]], (2, 1))
        vertical = universe.make_empty_universe(world_size)
        universe.place_pattern(vertical, world_size, [[1], [1], [1]], (1, 2))
        np.testing.assert_array_equal(
            universe.reference_step(horizontal, world_size), vertical)

    def test_does_not_modify_argument(self):
        world_size = 6
        data = universe.make_universe(world_size, seed=1)
        before = data.copy()
        universe.reference_step(data, world_size)
        np.testing.assert_array_equal(data, before)


if __name__ == '__main__':
    unittest.main()
