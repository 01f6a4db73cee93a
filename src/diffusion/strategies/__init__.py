"""Execution strategies for the diffusion kernels.

Strategy Hierarchy:
-------------------
ExecutionStrategy (abstract base - dispatch primitives)
├── SerialStrategy (single block on the calling thread)
├── ThreadedStrategy (fork-join thread pool over tiles)
└── OffloadStrategy (device-resident data, in-order launch queue)
"""

from .base import ExecutionStrategy, split_range
from .offload import OffloadStrategy
from .serial import SerialStrategy
from .threaded import ThreadedStrategy

STRATEGIES = {
    SerialStrategy.name: SerialStrategy,
    ThreadedStrategy.name: ThreadedStrategy,
    OffloadStrategy.name: OffloadStrategy,
}


def create_strategy(name: str = "serial", **kwargs) -> ExecutionStrategy:
    """Create an execution strategy by name ("serial", "threaded" or "offload")."""
    try:
        cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown strategy: {name}. Use one of {sorted(STRATEGIES)}"
        ) from None
    return cls(**kwargs)


__all__ = [
    "ExecutionStrategy",
    "SerialStrategy",
    "ThreadedStrategy",
    "OffloadStrategy",
    "STRATEGIES",
    "create_strategy",
    "split_range",
]
