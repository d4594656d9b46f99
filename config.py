'''Configuration objects for benchmark runs.

Every parameter of a run (how big the world is, how many generations to
compute, and how the work is spread across the GPU) lives in a single
immutable SimulationConfig. Construct one with the settings you want, or call
default_config for the standard benchmark, and pass it to the simulator.
'''

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from device import LaunchConfig

# The size of one side of the simulated world, not counting the border.
WORLD_SIZE = 2048

# The number of generations computed in one benchmark run.
NUM_STEPS = 100

# Threads per block and blocks per grid for each kernel launch. Together they
# determine the size of the worker pool. Worlds with more cells than workers
# are covered by having each worker stride through several cells.
THREADS_PER_BLOCK = 256
BLOCKS_PER_GRID = 1024

# Seed for the random interior, so benchmark runs are repeatable.
SEED = 42


class StagingMode(Enum):
    '''How generations move between host and device memory.
    '''
    # Copy the full universe to the device before every step and back again
    # after it. The host copy is authoritative between steps.
    COPY_EACH_STEP = 1
    # Keep both generations on the device and swap their roles each step.
    # The universe is copied in once at the start and out once at the end.
    RESIDENT = 2


@dataclass(frozen=True)
class SimulationConfig:
    '''All the settings for one benchmark run.
    '''
    world_size: int = WORLD_SIZE
    num_steps: int = NUM_STEPS
    threads_per_block: int = THREADS_PER_BLOCK
    blocks_per_grid: int = BLOCKS_PER_GRID
    seed: Optional[int] = SEED
    staging_mode: StagingMode = StagingMode.COPY_EACH_STEP

    def __post_init__(self):
        if self.world_size < 1:
            raise ValueError(
                f'world_size must be positive, got {self.world_size}')
        if self.num_steps < 0:
            raise ValueError(
                f'num_steps must not be negative, got {self.num_steps}')
        if self.threads_per_block < 1 or self.blocks_per_grid < 1:
            raise ValueError(
                'threads_per_block and blocks_per_grid must be positive, got '
                f'{self.threads_per_block} and {self.blocks_per_grid}')

    @property
    def launch_config(self):
        '''The worker pool shape used for every kernel launch.'''
        return LaunchConfig(self.blocks_per_grid, self.threads_per_block)

    @property
    def num_workers(self):
        return self.blocks_per_grid * self.threads_per_block


def default_config():
    '''Returns the configuration for the standard benchmark run.'''
    return SimulationConfig()
