"""Bulk data-parallel offload.

Models an accelerator with its own memory and an in-order command queue:

- ``data_region`` copies host arrays into device-resident buffers and copies
  results back when the region closes.
- Each sweep is one launch covering the whole index range. Launches are
  queued asynchronously on a single worker, so they execute in submission
  order; the host only waits at ``synchronize()`` or when it needs a value
  back (``reduce_sum``).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

import numpy as np

from .base import ExecutionStrategy

log = logging.getLogger(__name__)


class OffloadStrategy(ExecutionStrategy):
    """Whole-range kernel launches on device-resident copies of the data."""

    name = "offload"

    def __init__(self):
        self._queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix="device")
        self._pending = []
        self.launches = 0
        self.bytes_to_device = 0
        self.bytes_to_host = 0

    def _launch(self, kernel, *args):
        self.launches += 1
        future = self._queue.submit(kernel, *args)
        self._pending.append(future)
        return future

    def for_each(self, kernel, rows, cols, *args):
        self._launch(kernel, *args, rows[0], rows[1], cols[0], cols[1])

    def for_each_1d(self, kernel, span, *args):
        self._launch(kernel, *args, span[0], span[1])

    def reduce_sum(self, kernel, rows, cols, *args) -> float:
        future = self._launch(kernel, *args, rows[0], rows[1], cols[0], cols[1])
        self.synchronize()
        return float(future.result())

    def synchronize(self):
        pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def to_device(self, host: np.ndarray) -> np.ndarray:
        """Allocate a device buffer holding a copy of ``host``."""
        self.bytes_to_device += host.nbytes
        return np.array(host, copy=True, order="C")

    def to_host(self, device: np.ndarray, host: np.ndarray):
        """Copy a device buffer back into ``host``."""
        self.synchronize()
        self.bytes_to_host += device.nbytes
        np.copyto(host, device)

    @contextmanager
    def data_region(self, copy=(), copyin=()):
        copy_dev = [self.to_device(a) for a in copy]
        copyin_dev = [self.to_device(a) for a in copyin]
        yield copy_dev, copyin_dev
        for host, device in zip(copy, copy_dev):
            self.to_host(device, host)

    def close(self):
        self.synchronize()
        self._queue.shutdown(wait=True)
        log.debug(
            f"Device queue closed after {self.launches} launches, "
            f"{self.bytes_to_device} B in, {self.bytes_to_host} B out"
        )
