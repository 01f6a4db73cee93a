"""Single path of control: every sweep is one block on the calling thread."""

from .base import ExecutionStrategy


class SerialStrategy(ExecutionStrategy):
    """Run each kernel once over its whole index range."""

    name = "serial"

    def for_each(self, kernel, rows, cols, *args):
        kernel(*args, rows[0], rows[1], cols[0], cols[1])

    def for_each_1d(self, kernel, span, *args):
        kernel(*args, span[0], span[1])

    def reduce_sum(self, kernel, rows, cols, *args) -> float:
        return float(kernel(*args, rows[0], rows[1], cols[0], cols[1]))
