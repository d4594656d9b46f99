"""Tools for watching a universe evolve, one generation at a time.

None of this is used when benchmarking. Copying every generation back to the
host and printing it is many times slower than computing it.
"""

import sys
import time

import matplotlib.pyplot as plt

from kernel import ALIVE, BORDER, DEAD
from log import GRAYSCALE
from simulation import UniverseSimulator
from universe import as_grid, make_universe

# Characters used to print each cell state.
CELL_CHARS = {ALIVE: '#', DEAD: '.', BORDER: '+'}

# How long to pause after printing each generation, in seconds.
PACING_DELAY = 1.0


def render_text(universe, world_size):
    """Render a universe, border included, as lines of text."""
    return '\n'.join(
        ''.join(CELL_CHARS[cell] for cell in row)
        for row in as_grid(universe, world_size))


def plot_generation(universe, world_size, axis=None, title=None):
    """Draw a universe as a grayscale image with matplotlib.

    Parameters
    ----------
    universe : np.ndarray of np.uint8
        The universe to draw.
    world_size : int
        The interior size of universe.
    axis : matplotlib.axes.Axes, optional
        Where to draw. Defaults to the current axes.
    title : str, optional
        A title to show above the image.

    Returns
    -------
    matplotlib.image.AxesImage
    """
    if axis is None:
        axis = plt.gca()
    if title:
        axis.set_title(title)
    axis.tick_params(bottom=False, left=False,
                     labelbottom=False, labelleft=False)
    return axis.imshow(GRAYSCALE[as_grid(universe, world_size)],
                       cmap='gray', vmin=0, vmax=255)


class GenerationWatcher:
    """Prints each generation of a UniverseSimulator as it is computed.

    To use this class, pass a UniverseSimulator to the constructor, then call
    the simulator's run method as usual. After every generation, the watcher
    prints it to output and waits for delay seconds so a person can follow
    along.
    """
    def __init__(self, simulator, output=None, delay=PACING_DELAY):
        self.simulator = simulator
        self.output = output if output is not None else sys.stdout
        self.delay = delay
        self.generations_shown = 0
        simulator.inspect_generation_callback = self._on_generation

    def show(self, title, universe):
        print(title, file=self.output)
        print(render_text(universe, self.simulator.config.world_size),
              file=self.output)
        self.output.flush()

    def _on_generation(self, step, universe):
        self.show(f'Generation {step + 1}', universe)
        self.generations_shown += 1
        if self.delay > 0:
            time.sleep(self.delay)


def watch(config, universe=None, output=None, delay=PACING_DELAY):
    """Run config while printing every generation, including the first.

    Returns
    -------
    np.ndarray of np.uint8
        The final generation, same as UniverseSimulator.run.
    """
    simulator = UniverseSimulator(config)
    watcher = GenerationWatcher(simulator, output, delay)
    if universe is None:
        universe = make_universe(config.world_size, config.seed)
    watcher.show('Generation 0', universe)
    return simulator.run(universe)
