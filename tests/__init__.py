"""Test setup shared by every test module.

These tests run the GPU kernels on Numba's CUDA simulator so they work on
machines without an NVidia GPU. To run them on real hardware instead, set
NUMBA_ENABLE_CUDASIM=0 in the environment. This has to happen before Numba is
first imported, which is why it lives here.
"""

import os

os.environ.setdefault('NUMBA_ENABLE_CUDASIM', '1')
os.environ.setdefault('MPLBACKEND', 'Agg')
