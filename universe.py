"""Building and inspecting Game of Life universes on the host.

A universe is a flat numpy array of bytes holding a square world of
world_size x world_size interior cells inside a one-cell-thick border frame
(see the diagram in the kernel module). The functions in this module create
universes, give convenient 2D views of them, and provide a plain numpy
implementation of one generation for checking the GPU kernel against.
"""

import numpy as np

from errors import HostAllocationError
from kernel import ALIVE, BORDER, DEAD


def universe_width(world_size):
    """The length of one row of a universe, including both border cells."""
    return world_size + 2


def _allocate(world_size):
    width = universe_width(world_size)
    try:
        universe = np.empty(width * width, np.uint8)
    except MemoryError as err:
        raise HostAllocationError(
            f'Not enough memory for a {width}x{width} universe.') from err
    grid = universe.reshape(width, width)
    grid[0, :] = BORDER
    grid[-1, :] = BORDER
    grid[:, 0] = BORDER
    grid[:, -1] = BORDER
    return universe


def make_universe(world_size, seed=None):
    """Build a new universe with a randomized interior.

    Each interior cell is ALIVE or DEAD with equal probability, independent of
    all the others.

    Parameters
    ----------
    world_size : int
        The number of interior cells along one side of the world.
    seed : int, optional
        Seed for the random number generator. Two universes built with the
        same seed and size are identical.

    Returns
    -------
    np.ndarray of np.uint8
        A flat array of universe_width(world_size) ** 2 cells.
    """
    universe = _allocate(world_size)
    rng = np.random.default_rng(seed)
    # ALIVE is 1 and DEAD is 0, so a uniform draw of bytes from {0, 1} is a
    # fair coin flip per cell without any wider intermediate array.
    try:
        interior(universe, world_size)[:] = rng.integers(
            DEAD, ALIVE + 1, (world_size, world_size), dtype=np.uint8)
    except MemoryError as err:
        raise HostAllocationError(
            f'Not enough memory to seed a {world_size}x{world_size} '
            'interior.') from err
    return universe


def make_empty_universe(world_size):
    """Build a new universe where every interior cell is DEAD."""
    universe = _allocate(world_size)
    interior(universe, world_size)[:] = DEAD
    return universe


def as_grid(universe, world_size):
    """A 2D view of the full universe, border included."""
    width = universe_width(world_size)
    return universe.reshape(width, width)


def interior(universe, world_size):
    """A 2D view of just the interior cells of universe.

    Writes to the view modify the universe.
    """
    return as_grid(universe, world_size)[1:-1, 1:-1]


def border_mask(world_size):
    """A flat boolean array that is True at every border position."""
    mask = np.ones(universe_width(world_size) ** 2, dtype=bool)
    interior(mask, world_size)[:] = False
    return mask


def place_pattern(universe, world_size, pattern, position):
    """Draw a pattern into the interior of universe.

    Parameters
    ----------
    universe : np.ndarray of np.uint8
        The universe to modify.
    world_size : int
        The interior size of universe.
    pattern : array-like
        A 2D array of 0s and 1s, where 1 means ALIVE.
    position : tuple of int
        The interior (row, col) of the pattern's top left corner.
    """
    pattern = np.asarray(pattern)
    row, col = position
    height, width = pattern.shape
    if (row < 0 or col < 0 or
            row + height > world_size or col + width > world_size):
        raise ValueError(
            f'A {height}x{width} pattern at {position} does not fit in a '
            f'world of size {world_size}.')
    interior(universe, world_size)[row:row + height, col:col + width] = (
        np.where(pattern, ALIVE, DEAD))


def count_live(universe):
    """The number of ALIVE cells in universe."""
    return int(np.count_nonzero(universe == ALIVE))


def reference_step(universe, world_size):
    """Compute the next generation of universe using numpy on the host.

    This is much slower than the GPU kernel but simple enough to trust, so it
    serves as a reference to verify the kernel's output.

    Returns
    -------
    np.ndarray of np.uint8
        A new flat universe. The argument is not modified.
    """
    grid = as_grid(universe, world_size)
    live = (grid == ALIVE).astype(np.uint8)
    # Add up shifted copies of the live cells to get the neighbor count for
    # each interior cell.
    neighbors = np.zeros((world_size, world_size), np.uint8)
    for row_off in (0, 1, 2):
        for col_off in (0, 1, 2):
            if (row_off, col_off) == (1, 1):
                continue
            neighbors += live[row_off:row_off + world_size,
                              col_off:col_off + world_size]
    alive_now = live[1:-1, 1:-1] == 1
    alive_next = (neighbors == 3) | ((neighbors == 2) & alive_now)
    result = universe.copy()
    interior(result, world_size)[:] = np.where(alive_next, ALIVE, DEAD)
    return result
