"""Abstract execution strategy."""

from abc import ABC, abstractmethod
from contextlib import contextmanager


def split_range(lo: int, hi: int, block: int):
    """Split ``[lo, hi)`` into consecutive blocks of at most ``block`` entries."""
    if block <= 0:
        raise ValueError(f"Block size must be positive, got {block}")
    return [(start, min(start + block, hi)) for start in range(lo, hi, block)]


class ExecutionStrategy(ABC):
    """Scheduling model under which the diffusion kernels run.

    A strategy never changes *what* a kernel computes, only how its index
    range is partitioned and dispatched. Kernels receive their block bounds
    as trailing arguments, so any partition of the range yields the same
    result as long as the write sets of the blocks are disjoint.

    Every dispatch method returns only once the sweep is complete from the
    host's point of view, except for strategies that queue work
    asynchronously (see ``OffloadStrategy``); those honour ordering between
    dispatches and expose the barrier through ``synchronize()``.
    """

    name = None

    @abstractmethod
    def for_each(self, kernel, rows, cols, *args):
        """Run ``kernel(*args, j0, j1, i0, i1)`` over a partition of ``rows x cols``."""
        pass

    @abstractmethod
    def for_each_1d(self, kernel, span, *args):
        """Run ``kernel(*args, lo, hi)`` over a partition of ``span``."""
        pass

    @abstractmethod
    def reduce_sum(self, kernel, rows, cols, *args) -> float:
        """Sum the values returned by ``kernel`` over a partition of ``rows x cols``."""
        pass

    def synchronize(self):
        """Block until every dispatched kernel has finished."""

    @contextmanager
    def data_region(self, copy=(), copyin=()):
        """Make arrays resident where the kernels run.

        Yields
        ------
        copy_handles, copyin_handles : list, list
            Arrays the kernels should be given in place of the host arrays.
            ``copy`` arrays are written back to the host when the region
            exits normally; ``copyin`` arrays are read-only inputs.
        """
        yield list(copy), list(copyin)

    def close(self):
        """Release worker resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        return f"{type(self).__name__}()"
