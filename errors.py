"""Exceptions raised when a benchmark run cannot continue.

None of these are recoverable within a run. Every generation depends on the
complete state of the one before it, so a single failed allocation, transfer,
or kernel launch invalidates everything that would come after it. Callers are
expected to let these propagate up to the entry point, which reports the
message and exits with a non-zero status.
"""


class LifeError(Exception):
    """Base class for all fatal errors in this project."""


class HostAllocationError(LifeError):
    """System memory ran out while building the initial universe."""


class ComputeError(LifeError):
    """Base class for failures reported by the compute device."""


class AllocationError(ComputeError):
    """Device memory could not be allocated."""


class TransferError(ComputeError):
    """Copying data between host and device failed."""


class LaunchError(ComputeError):
    """A kernel failed to launch, or faulted while running."""
