'''Capture statistics and videos of benchmark runs.
'''
import numpy as np
import pandas as pd
from PIL import Image

from kernel import ALIVE, BORDER, DEAD
from universe import as_grid, count_live

# When exporting a video, scale it up by this much to make it easier to see.
IMAGE_SCALE_FACTOR = 4
# Playback speed of exported animated gifs.
MILLISECONDS_PER_FRAME = 100

# Grayscale value used to draw each cell state, indexed by cell value.
GRAYSCALE = np.zeros(3, np.uint8)
GRAYSCALE[ALIVE] = 0
GRAYSCALE[DEAD] = 255
GRAYSCALE[BORDER] = 128

STATS_COLUMNS = ('world_size', 'step', 'live_cells', 'elapsed_time')


def to_image(universe, world_size, scale=1):
    '''Render a universe (border included) as a grayscale PIL Image.
    '''
    pixels = GRAYSCALE[as_grid(universe, world_size)]
    if scale > 1:
        # Scale up without interpolation, since we want to see every cell.
        pixels = pixels.repeat(scale, 0).repeat(scale, 1)
    return Image.fromarray(pixels)


class Logger:
    '''A class to collect log events and export them to the filesystem.

    The general model here is to construct a Logger object for a batch of
    runs you want to compare and hand it to each UniverseSimulator. The
    simulator calls the log* methods as it goes, which record events. Calling
    an export* method will dump the requested log object(s) to the
    filesystem.

    Recording video means copying every generation back from the GPU, which
    costs far more than the computation itself. Leave record_video off when
    timing runs.
    '''
    def __init__(self, record_video=False):
        self.record_video = record_video
        self.world_size = None
        self.stats = []
        self.frames = []

    @property
    def wants_frames(self):
        '''Whether the simulator needs to copy each generation to the host.
        '''
        return self.record_video

    def export_stats(self, filename):
        '''Export a CSV file of all the stats recorded by this logger.
        '''
        self.stats_frame().to_csv(filename, index=False)

    def export_video(self, filename):
        '''Export an animated gif of the frames from the most recent run.
        '''
        if not self.frames:
            return
        images = [
            to_image(frame, self.world_size, IMAGE_SCALE_FACTOR)
            for frame in self.frames
        ]
        # Set durations for every frame. Note, this is important, since Pillow
        # will automatically drop repeated frames otherwise.
        images[0].save(
            filename, save_all=True, append_images=images[1:], loop=0,
            duration=[MILLISECONDS_PER_FRAME] * len(images))

    def stats_frame(self):
        '''All the stats recorded so far as a pandas DataFrame.
        '''
        return pd.DataFrame(self.stats, columns=STATS_COLUMNS)

    def log_run(self, config, universe):
        '''Log the beginning of a new run, starting from universe.
        '''
        self.world_size = config.world_size
        # Videos are only kept for one run at a time, so export them before
        # starting the next.
        self.frames.clear()
        self.log_frame(universe)

    def log_generation(self, step, universe, elapsed_time):
        '''Log the completion of one generation.

        The universe is only inspected if it's not None. That lets the
        simulator skip copying it back from the GPU when nobody needs it.
        '''
        live_cells = None if universe is None else count_live(universe)
        self.stats.append(
            (self.world_size, step, live_cells, elapsed_time))
        if universe is not None:
            self.log_frame(universe)

    def log_frame(self, universe):
        '''Log one generation to export as video.
        '''
        if self.record_video:
            self.frames.append(universe.copy())
