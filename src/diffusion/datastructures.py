"""Data structures for solver configuration and results.

Structure:
- BoundaryValues: Boundary-value table (fixed for the run)
- DiffusionParameters: Input configuration (logged to MLflow at start)
- RunLogRecord: One validation checkpoint
- Metrics: Output results (logged to MLflow at end)
- TimeSeries: Checkpoint history
"""

from dataclasses import dataclass, asdict, fields
from typing import List

import numpy as np
import pandas as pd


# ========================================================
# Boundary Values
# ========================================================


@dataclass(frozen=True)
class BoundaryValues:
    """Boundary-value table ``bc[2][2]``.

    ``bc[0][0]`` bottom (background), ``bc[0][1]`` top,
    ``bc[1][0]`` left source, ``bc[1][1]`` right source.

    ``top`` is carried for the table layout only: no boundary condition or
    analytical term reads it. It only widens ``bounds`` (the image colour range).
    """

    bottom: float = 0.0
    top: float = 0.0
    left: float = 1.0
    right: float = 1.0

    @property
    def background(self) -> float:
        return self.bottom

    def as_table(self) -> np.ndarray:
        return np.array([[self.bottom, self.top], [self.left, self.right]])

    @classmethod
    def from_table(cls, table):
        (bottom, top), (left, right) = table
        return cls(float(bottom), float(top), float(left), float(right))

    @property
    def bounds(self):
        """(min, max) over all four values."""
        values = (self.bottom, self.top, self.left, self.right)
        return min(values), max(values)


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class DiffusionParameters:
    """Solver parameters - input configuration for a benchmark run."""

    nx: int = 512
    ny: int = 512
    nm: int = 3
    dx: float = 0.5
    dy: float = 0.5
    D: float = 0.00625
    linStab: float = 0.1
    steps: int = 100000
    checks: int = 10000
    stencil: str = "five_point"
    erf_approximation: str = "exact"  # "exact" or "series"
    source_geometry: str = "segment"  # "segment" or "axis"
    bc_bottom: float = 0.0
    bc_top: float = 0.0  # unused by the solver, see BoundaryValues
    bc_left: float = 1.0
    bc_right: float = 1.0

    @property
    def dt(self) -> float:
        """Time step at ``linStab`` times the explicit-Euler stability limit."""
        h = min(self.dx, self.dy)
        return self.linStab * h * h / (4.0 * self.D)

    @property
    def boundary_values(self) -> BoundaryValues:
        return BoundaryValues(self.bc_bottom, self.bc_top, self.bc_left, self.bc_right)

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        params = asdict(self)
        params["dt"] = self.dt
        return params


# ========================================================
# Run Log (one record per validation checkpoint)
# ========================================================


@dataclass
class RunLogRecord:
    """Checkpoint record, fields in run-log column order."""

    step: int
    sim_time: float
    rss: float
    conv_time: float
    step_time: float
    io_time: float
    soln_time: float
    run_time: float

    CSV_HEADER = ("iter", "sim_time", "wrss", "conv_time", "step_time",
                  "IO_time", "soln_time", "run_time")

    def as_tuple(self):
        return tuple(getattr(self, f.name) for f in fields(self))


# ========================================================
# Metrics (Output Results)
# ========================================================


@dataclass
class Metrics:
    """Solver metrics - output results computed during/after solving."""

    steps: int = 0
    sim_time: float = 0.0
    final_rss: float = float("inf")
    wall_time_seconds: float = 0.0
    conv_seconds: float = 0.0
    step_seconds: float = 0.0
    io_seconds: float = 0.0
    soln_seconds: float = 0.0
    strategy: str = ""

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        return {k: float(v) for k, v in asdict(self).items() if k != "strategy"}


# ========================================================
# Time Series (Checkpoint History)
# ========================================================


@dataclass
class TimeSeries:
    """Validation history (one record per checkpoint)."""

    records: List[RunLogRecord]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with run-log column names."""
        return pd.DataFrame(
            [r.as_tuple() for r in self.records], columns=list(RunLogRecord.CSV_HEADER)
        )

    def __len__(self):
        return len(self.records)
