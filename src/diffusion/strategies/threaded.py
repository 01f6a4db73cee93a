"""Fork-join parallelism over blocked 2D ranges.

The kernels are compiled with ``nogil=True``, so the worker threads run them
concurrently. Each dispatch forks one task per tile and joins on all of
them before returning, which places a full barrier at every phase boundary.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait

from .base import ExecutionStrategy, split_range

log = logging.getLogger(__name__)


class ThreadedStrategy(ExecutionStrategy):
    """Thread-pool strategy tiling the index range into ``by x bx`` blocks.

    Parameters
    ----------
    workers : int, optional
        Number of worker threads. Defaults to the CPU count.
    bx, by : int
        Tile width (columns) and height (rows).
    """

    name = "threaded"

    def __init__(self, workers: int = None, bx: int = 32, by: int = 32):
        if bx <= 0 or by <= 0:
            raise ValueError(f"Tile sizes must be positive, got bx={bx}, by={by}")
        self.workers = workers or os.cpu_count() or 1
        self.bx = bx
        self.by = by
        self._pool = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="diffusion"
        )
        log.info(f"Thread pool with {self.workers} workers, tiles {self.by}x{self.bx}")

    def _join(self, futures):
        wait(futures)
        # Re-raise the first worker failure on the calling thread
        return [f.result() for f in futures]

    def for_each(self, kernel, rows, cols, *args):
        futures = [
            self._pool.submit(kernel, *args, j0, j1, i0, i1)
            for j0, j1 in split_range(rows[0], rows[1], self.by)
            for i0, i1 in split_range(cols[0], cols[1], self.bx)
        ]
        self._join(futures)

    def for_each_1d(self, kernel, span, *args):
        block = max(self.bx, self.by)
        futures = [
            self._pool.submit(kernel, *args, lo, hi)
            for lo, hi in split_range(span[0], span[1], block)
        ]
        self._join(futures)

    def reduce_sum(self, kernel, rows, cols, *args) -> float:
        futures = [
            self._pool.submit(kernel, *args, j0, j1, i0, i1)
            for j0, j1 in split_range(rows[0], rows[1], self.by)
            for i0, i1 in split_range(cols[0], cols[1], self.bx)
        ]
        # Partial sums are added in tile order, independent of completion order
        return float(sum(self._join(futures)))

    def close(self):
        self._pool.shutdown(wait=True)

    def __repr__(self):
        return f"ThreadedStrategy(workers={self.workers}, bx={self.bx}, by={self.by})"
