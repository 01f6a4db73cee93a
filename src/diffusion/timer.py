"""Per-phase wall-clock accounting."""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field

PHASES = ("convolution", "step", "io", "validation")


def now() -> float:
    """Monotonic clock reading in seconds."""
    return time.perf_counter()


@dataclass
class Stopwatch:
    """Accumulated seconds per phase plus total run time since ``start()``.

    Accumulators are never reset by the solver; a fresh run gets a fresh
    Stopwatch.
    """

    convolution: float = 0.0
    step: float = 0.0
    io: float = 0.0
    validation: float = 0.0
    _origin: float = field(default_factory=now, repr=False)

    def start(self):
        """Restart the run clock (phase accumulators are kept)."""
        self._origin = now()

    def elapsed(self) -> float:
        """Seconds since ``start()`` (or construction)."""
        return now() - self._origin

    def add(self, phase: str, seconds: float):
        if phase not in PHASES:
            raise ValueError(f"Unknown phase: {phase}. Use one of {PHASES}")
        setattr(self, phase, getattr(self, phase) + seconds)

    @contextmanager
    def phase(self, name: str):
        """Time the enclosed block and add it to phase ``name``."""
        if name not in PHASES:
            raise ValueError(f"Unknown phase: {name}. Use one of {PHASES}")
        start_time = now()
        try:
            yield
        finally:
            self.add(name, now() - start_time)

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in PHASES}
