"""Run a Game of Life universe forward a fixed number of generations.

This module holds the UniverseSimulator class, which drives the kernel
module. It owns the device buffers for a run, moves generations between host
and device, and launches the step kernel once per generation. Each launch
waits for the previous generation to be completely finished, since every cell
of generation i + 1 depends on its neighbors in generation i, and the GPU has
no way to synchronize all of its threads within a single kernel launch.
"""

import contextlib
import time

import numpy as np
import tqdm

from config import StagingMode
from device import ComputeDevice
from errors import HostAllocationError
import kernel
from kernel import BORDER
from universe import border_mask, make_universe, universe_width

# Updating the CLI is relatively slow, so don't update the progress bar more
# often than once every second.
PROGRESS_UPDATE_INTERVAL = 1


class UniverseSimulator:
    """Computes generation after generation of one universe on the GPU.

    To use, construct a UniverseSimulator with a SimulationConfig and call
    run. Optionally pass a Logger to collect stats and video, or set
    inspect_generation_callback to a function taking (step, universe) to look
    at each generation as it's computed (see the debug module).
    """
    def __init__(self, config, device=None, logger=None, progress=False):
        self.config = config
        self.device = device if device is not None else ComputeDevice()
        self.logger = logger
        self.progress = progress
        self.inspect_generation_callback = None
        # Wall-clock seconds spent in the generation loop of the last run.
        self.elapsed_time = None

    def run(self, universe=None):
        """Compute config.num_steps generations starting from universe.

        Parameters
        ----------
        universe : np.ndarray of np.uint8, optional
            The first generation. This array is not modified. If omitted, a
            random universe is built from the config's world size and seed.

        Returns
        -------
        np.ndarray of np.uint8
            The final generation.
        """
        config = self.config
        if universe is None:
            universe = make_universe(config.world_size, config.seed)
        _check_universe(universe, config.world_size)
        # The host-side copy of the universe. Between steps this is the
        # authoritative state of the simulation.
        try:
            host_universe = universe.copy()
        except MemoryError as err:
            raise HostAllocationError(
                f'Not enough memory to copy a universe of '
                f'{universe.nbytes} bytes.') from err
        if self.logger:
            self.logger.log_run(config, host_universe)

        progress_bar = None
        if self.progress:
            progress_bar = tqdm.tqdm(
                total=config.num_steps,
                mininterval=PROGRESS_UPDATE_INTERVAL,
                bar_format=('{n_fmt}/{total_fmt} |{bar}| '
                            'Elapsed: {elapsed} | '
                            'Remaining: {remaining}'))

        # Both buffers are released on the way out of this block, even if
        # a device call fails partway through the run.
        with contextlib.ExitStack() as stack:
            if progress_bar is not None:
                stack.callback(progress_bar.close)
            current = stack.enter_context(
                self.device.allocate(host_universe.nbytes))
            following = stack.enter_context(
                self.device.allocate(host_universe.nbytes))
            if config.staging_mode == StagingMode.COPY_EACH_STEP:
                self._run_copy_each_step(
                    host_universe, current, following, progress_bar)
            else:
                self._run_resident(
                    host_universe, current, following, progress_bar)
        return host_universe

    def _run_copy_each_step(self, host_universe, current, following,
                            progress_bar):
        # Every step sends the whole universe to the GPU and brings the whole
        # result back, so the host copy is always up to date.
        width = universe_width(self.config.world_size)
        launch_config = self.config.launch_config
        start_time = time.perf_counter()
        for step in range(self.config.num_steps):
            self.device.copy_in(current, host_universe)
            kernel.step_universe(
                self.device, current, following, width, launch_config)
            self.device.copy_out(host_universe, following)
            self._after_step(step, host_universe, start_time, progress_bar)
        self.elapsed_time = time.perf_counter() - start_time

    def _run_resident(self, host_universe, current, following, progress_bar):
        # Both generations stay on the GPU, trading roles after each step.
        # The host copy is only refreshed when someone wants to look at it.
        width = universe_width(self.config.world_size)
        launch_config = self.config.launch_config
        wants_frames = self._wants_frames()
        start_time = time.perf_counter()
        self.device.copy_in(current, host_universe)
        for step in range(self.config.num_steps):
            kernel.step_universe(
                self.device, current, following, width, launch_config)
            current, following = following, current
            if wants_frames:
                self.device.copy_out(host_universe, current)
                self._after_step(
                    step, host_universe, start_time, progress_bar)
            else:
                self._after_step(step, None, start_time, progress_bar)
        self.device.copy_out(host_universe, current)
        self.elapsed_time = time.perf_counter() - start_time

    def _wants_frames(self):
        return (self.inspect_generation_callback is not None or
                (self.logger is not None and self.logger.wants_frames))

    def _after_step(self, step, host_universe, start_time, progress_bar):
        if self.logger:
            self.logger.log_generation(
                step, host_universe, time.perf_counter() - start_time)
        if (self.inspect_generation_callback is not None and
                host_universe is not None):
            self.inspect_generation_callback(step, host_universe)
        if progress_bar is not None:
            progress_bar.update()


def _check_universe(universe, world_size):
    # The kernel reads neighbors without bounds checks, which is only safe
    # for a flat byte array with an intact border frame.
    expected_size = universe_width(world_size) ** 2
    if universe.ndim != 1 or universe.dtype != np.uint8:
        raise ValueError(
            f'Universe must be a flat array of uint8, got shape '
            f'{universe.shape} and dtype {universe.dtype}.')
    if universe.size != expected_size:
        raise ValueError(
            f'Universe has {universe.size} cells, but a world of size '
            f'{world_size} needs {expected_size}.')
    if not np.all(universe[border_mask(world_size)] == BORDER):
        raise ValueError('Universe is missing part of its border frame.')


def simulate(config, universe=None, logger=None):
    """Run one universe with config and return its final generation.

    A convenience wrapper around UniverseSimulator for the common case.
    """
    return UniverseSimulator(config, logger=logger).run(universe)
