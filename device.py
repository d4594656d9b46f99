"""Managed memory and kernel dispatch for the GPU.

Everything this project does on the GPU goes through a ComputeDevice: it
allocates buffers, copies universes to and from them, and launches kernels.
The point of routing it all through one place is error handling. Numba reports
driver problems with a handful of different exception types (and the CUDA
simulator with yet others), so this module translates every failure into one
of the exceptions in the errors module, tagged with what we were trying to do
when it happened.

Device memory is owned by DeviceBuffer objects. A DeviceBuffer is a context
manager that releases its memory on exit, whether the block finished normally
or a fatal error is on its way up the stack:

    with device.allocate(universe.nbytes) as buffer:
        device.copy_in(buffer, universe)
        ...
"""

from collections import namedtuple

from numba import cuda
import numpy as np

from errors import AllocationError, LaunchError, TransferError

# The shape of the worker pool for one kernel launch. The pool has
# blocks_per_grid * threads_per_block workers in total.
LaunchConfig = namedtuple(
    'LaunchConfig', ['blocks_per_grid', 'threads_per_block'])


class DeviceBuffer:
    """A block of device memory holding one byte per cell.

    DeviceBuffers are created by ComputeDevice.allocate and exclusively own
    their device memory until they are released. Once released, any attempt
    to use the buffer is an error.
    """
    def __init__(self, device, array):
        self._device = device
        self._array = array
        self.size = array.size

    @property
    def released(self):
        return self._array is None

    @property
    def array(self):
        """The underlying numba device array."""
        if self._array is None:
            raise ValueError('DeviceBuffer used after it was released.')
        return self._array

    def release(self):
        """Give this buffer's memory back to the device.

        Releasing a buffer more than once has no further effect.
        """
        if self._array is None:
            return
        # Numba frees device memory once the last reference to the array is
        # gone, so dropping ours is all it takes.
        self._array = None
        self._device.live_buffers -= 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()


class ComputeDevice:
    """The gateway to the GPU for allocation, transfers, and kernel launches.

    All calls block until the device has finished the requested work, so when
    a method returns without raising, its effects are complete.
    """
    def __init__(self):
        # The number of DeviceBuffers allocated and not yet released.
        self.live_buffers = 0
        self._last_error = None

    def allocate(self, byte_size):
        """Allocate byte_size bytes of device memory.

        Parameters
        ----------
        byte_size : int
            The number of bytes (that is, cells) to allocate.

        Returns
        -------
        DeviceBuffer
            A buffer that owns the new memory. Use it as a context manager or
            call free when done with it.
        """
        try:
            array = cuda.device_array(byte_size, np.uint8)
        except Exception as err:
            raise AllocationError(
                f'Failed to allocate {byte_size} bytes of device memory: '
                f'{err}') from err
        self.live_buffers += 1
        return DeviceBuffer(self, array)

    def free(self, buffer):
        """Release the memory held by buffer."""
        buffer.release()

    def copy_in(self, buffer, host_array):
        """Copy host_array into the device memory held by buffer."""
        self._check_transfer(buffer, host_array, 'to')
        try:
            buffer.array.copy_to_device(host_array)
        except Exception as err:
            raise TransferError(
                f'Failed to copy {host_array.nbytes} bytes to the device: '
                f'{err}') from err

    def copy_out(self, host_array, buffer):
        """Copy the device memory held by buffer into host_array."""
        self._check_transfer(buffer, host_array, 'from')
        try:
            buffer.array.copy_to_host(host_array)
        except Exception as err:
            raise TransferError(
                f'Failed to copy {host_array.nbytes} bytes from the device: '
                f'{err}') from err

    def dispatch(self, kernel, launch_config, *args):
        """Launch kernel over the worker pool described by launch_config.

        Any DeviceBuffer in args is passed to the kernel as its underlying
        device array. This method waits for the kernel to finish, so faults
        that the device reports asynchronously are raised here too.
        """
        try:
            args = [
                arg.array if isinstance(arg, DeviceBuffer) else arg
                for arg in args
            ]
            kernel[
                launch_config.blocks_per_grid,
                launch_config.threads_per_block
            ](*args)
        except Exception as err:
            self._last_error = str(err)
            raise LaunchError(f'Kernel launch failed: {err}') from err
        self.synchronize()

    def synchronize(self):
        """Block until all submitted work is done.

        Raises LaunchError if the device reports a fault from a kernel that
        was already launched.
        """
        try:
            cuda.synchronize()
        except Exception as err:
            self._last_error = str(err)
            raise LaunchError(f'Kernel execution failed: {err}') from err

    def last_error(self):
        """Returns the diagnostic for the most recent launch fault, if any."""
        return self._last_error

    # Sanity checks shared by copy_in and copy_out. These catch mistakes that
    # the driver would otherwise report with less helpful messages.
    def _check_transfer(self, buffer, host_array, direction):
        if buffer.released:
            raise TransferError(
                f'Cannot copy {direction} a released device buffer.')
        if host_array.nbytes != buffer.size:
            raise TransferError(
                f'Cannot copy {direction} the device: host array has '
                f'{host_array.nbytes} bytes but the device buffer has '
                f'{buffer.size}.')
