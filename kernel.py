"""CUDA kernel for advancing a Game of Life universe one generation.

This code is the inner loop of the benchmark. It's transpiled on demand using
Numba, then executes on an NVidia GPU with one worker per cell (or, for big
worlds, one worker per handful of cells). Everything decorated with cuda.jit
below is basically C code written in a subset of Python syntax, so keep it
simple: plain integer arithmetic, no Python objects.

The rule and neighbor count are written as ordinary Python functions and then
compiled as device functions for the kernel. That keeps them callable on host
numpy arrays, which is how the tests check them directly.
"""

from enum import IntEnum

from numba import cuda


# Memory model for this kernel:
#
#   B B B B B B
#   B . . . . B
#   B . . . . B     B = BORDER, . = interior cell (ALIVE or DEAD)
#   B . . . . B
#   B . . . . B
#   B B B B B B
#
# A universe is a world of WORLD_SIZE x WORLD_SIZE interior cells surrounded
# by a frame of BORDER cells one cell thick, stored as a flat row-major array
# of bytes. The frame means every interior cell has eight real neighbors in
# memory, so counting neighbors never needs a bounds check or wraparound. The
# border cells themselves are never counted, only copied.


class CellState(IntEnum):
    """The three possible values of a cell, one byte each."""
    DEAD = 0
    ALIVE = 1
    BORDER = 2


# Plain int copies of the states. Numba freezes module globals into the
# compiled code as constants.
DEAD = int(CellState.DEAD)
ALIVE = int(CellState.ALIVE)
BORDER = int(CellState.BORDER)

# The low bit of a cell's value is set only for ALIVE cells. Masking with this
# turns a cell into its contribution to a neighbor count with no branching.
LIVE_BIT = 1


def count_neighbors(universe, index, width):
    """Count the ALIVE cells among the eight neighbors of an interior cell.

    Parameters
    ----------
    universe : array of np.uint8
        A flat universe, including its border frame.
    index : int
        The flat index of the cell whose neighbors to count. This must not be
        a border cell, since border cells are missing neighbors.
    width : int
        The length of one row of the universe, including both border cells.

    Returns
    -------
    int
        A number from 0 to 8.
    """
    above = index - width
    below = index + width
    return ((universe[above - 1] & LIVE_BIT) +
            (universe[above] & LIVE_BIT) +
            (universe[above + 1] & LIVE_BIT) +
            (universe[index - 1] & LIVE_BIT) +
            (universe[index + 1] & LIVE_BIT) +
            (universe[below - 1] & LIVE_BIT) +
            (universe[below] & LIVE_BIT) +
            (universe[below + 1] & LIVE_BIT))


def next_cell_state(state, neighbors):
    """The B3/S23 rule: the next state of an interior cell."""
    if neighbors == 3 or (neighbors == 2 and state == ALIVE):
        return ALIVE
    return DEAD


_device_count_neighbors = cuda.jit(device=True)(count_neighbors)
_device_next_cell_state = cuda.jit(device=True)(next_cell_state)


@cuda.jit
def _step_kernel(current, following, width):
    # Each worker starts at its own position in the launch grid and then hops
    # forward by the total number of workers until it runs off the end of the
    # universe. Every cell is visited by exactly one worker.
    start = cuda.grid(1)
    stride = cuda.gridsize(1)
    for index in range(start, current.size, stride):
        state = current[index]
        if state == BORDER:
            following[index] = BORDER
        else:
            neighbors = _device_count_neighbors(current, index, width)
            following[index] = _device_next_cell_state(state, neighbors)


def step_universe(device, current, following, width, launch_config):
    """Compute the generation after current and store it in following.

    Blocks until the kernel is done, so following holds the complete next
    generation when this returns.

    Parameters
    ----------
    device : ComputeDevice
        The device that owns both buffers.
    current : DeviceBuffer
        The current generation. This is only read from.
    following : DeviceBuffer
        Where to write the next generation. Its previous contents are ignored.
    width : int
        The length of one row of the universe, including both border cells.
    launch_config : LaunchConfig
        The worker pool to spread the cells over.
    """
    # Reading and writing the same buffer would let a cell see neighbors that
    # were already updated this generation.
    if current is following:
        raise ValueError(
            'Cannot step a universe in place; use two distinct buffers.')
    if current.size != following.size:
        raise ValueError(
            f'Buffer sizes differ: {current.size} != {following.size}')
    device.dispatch(_step_kernel, launch_config, current, following, width)
