"""Time a fixed number of Game of Life generations on the GPU.

Run this module directly to benchmark the default configuration (see the
config module). It prints a single line with the wall-clock time spent in
the generation loop. There are no command line flags; to benchmark something
else, change the constants in config.py or call run_benchmark with your own
SimulationConfig.
"""

import sys

import config
from errors import LifeError
from simulation import UniverseSimulator
from universe import make_universe


def run_benchmark(simulation_config, logger=None):
    """Run one benchmark and return (final universe, elapsed seconds).

    Only the generation loop is timed, including the per-step transfers it
    makes. Building the initial universe on the host and allocating and
    releasing device buffers happen outside the clock.
    """
    universe = make_universe(
        simulation_config.world_size, simulation_config.seed)
    simulator = UniverseSimulator(simulation_config, logger=logger)
    final_universe = simulator.run(universe)
    return final_universe, simulator.elapsed_time


def main():
    try:
        _, elapsed_time = run_benchmark(config.default_config())
    except LifeError as err:
        print(f'Benchmark failed: {err}', file=sys.stderr)
        return 1
    print(f'Elapsed time: {elapsed_time:.6f} seconds')
    return 0


if __name__ == '__main__':
    sys.exit(main())
