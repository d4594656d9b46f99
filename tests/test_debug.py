"""Tests for debug.py and benchmark.py"""

import io
import unittest
from unittest import mock

import matplotlib.pyplot as plt
import numpy as np

import benchmark
import config
from config import SimulationConfig
import debug
from errors import LaunchError
from log import GRAYSCALE
from simulation import UniverseSimulator
import universe


def small_config(world_size, num_steps):
    return SimulationConfig(
        world_size=world_size, num_steps=num_steps, threads_per_block=16,
        blocks_per_grid=2, seed=42)


class TestRenderText(unittest.TestCase):
    def test_empty(self):
        empty = universe.make_empty_universe(2)
        self.assertEqual(debug.render_text(empty, 2),
                         '++++\n+..+\n+..+\n++++')

    def test_live_cells(self):
        data = universe.make_empty_universe(3)
        universe.place_pattern(data, 3, [[1, 1, 1]], (1, 0))
        lines = debug.render_text(data, 3).split('\n')
        self.assertEqual(lines[2], '+###+')


class TestWatch(unittest.TestCase):
    def test_blinker(self):
        world_size = 3
        row = universe.make_empty_universe(world_size)
        universe.place_pattern(row, world_size, [[1, 1, 1]], (1, 0))
        output = io.StringIO()
        with mock.patch.object(debug.time, 'sleep') as sleep:
            final = debug.watch(small_config(world_size, 2), row, output)
        np.testing.assert_array_equal(final, row)
        text = output.getvalue()
        for title in ('Generation 0', 'Generation 1', 'Generation 2'):
            self.assertIn(title, text)
        self.assertIn('+.#.+', text)
        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(debug.PACING_DELAY)

    def test_watcher_without_delay(self):
        simulator = UniverseSimulator(small_config(4, 3))
        output = io.StringIO()
        watcher = debug.GenerationWatcher(simulator, output, delay=0)
        simulator.run()
        self.assertEqual(watcher.generations_shown, 3)


class TestPlotGeneration(unittest.TestCase):
    def tearDown(self):
        plt.close('all')

    def test_plot(self):
        world_size = 4
        data = universe.make_universe(world_size, seed=42)
        fig = plt.figure()
        axis = fig.add_subplot(1, 1, 1)
        image = debug.plot_generation(data, world_size, axis, 'first')
        self.assertEqual(axis.get_title(), 'first')
        np.testing.assert_array_equal(
            image.get_array(), GRAYSCALE[universe.as_grid(data, world_size)])


class TestBenchmark(unittest.TestCase):
    def test_run_benchmark(self):
        final, elapsed_time = benchmark.run_benchmark(small_config(6, 2))
        expected = universe.make_universe(6, seed=42)
        for _ in range(2):
            expected = universe.reference_step(expected, 6)
        np.testing.assert_array_equal(final, expected)
        self.assertGreaterEqual(elapsed_time, 0)

    def test_main(self):
        with mock.patch.object(config, 'default_config',
                               return_value=small_config(4, 1)), \
                mock.patch('sys.stdout', new_callable=io.StringIO) as stdout:
            self.assertEqual(benchmark.main(), 0)
        lines = stdout.getvalue().splitlines()
        self.assertEqual(len(lines), 1)
        self.assertRegex(lines[0], r'^Elapsed time: [0-9.]+ seconds$')

    def test_main_failure(self):
        with mock.patch.object(config, 'default_config',
                               return_value=small_config(4, 1)), \
                mock.patch.object(UniverseSimulator, 'run',
                                  side_effect=LaunchError('device lost')), \
                mock.patch('sys.stderr', new_callable=io.StringIO) as stderr:
            self.assertEqual(benchmark.main(), 1)
        self.assertIn('device lost', stderr.getvalue())


if __name__ == '__main__':
    unittest.main()
