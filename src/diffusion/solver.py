"""Benchmark driver for the semi-infinite diffusion problem."""

import logging
from pathlib import Path

import mlflow
import numpy as np

from .analytical import ERF_MODES, GEOMETRIES, check_solution
from .boundaries import apply_initial_conditions
from .datastructures import DiffusionParameters, Metrics, RunLogRecord, TimeSeries
from .discretization import solve_diffusion_equation
from .mesh import Mesh
from .output import write_csv, write_png, write_runlog_csv
from .strategies import ExecutionStrategy, SerialStrategy, create_strategy
from .timer import Stopwatch

log = logging.getLogger(__name__)


class DiffusionSolver:
    """Explicit finite-difference diffusion solver with analytical validation.

    Handles:
    - Parameter management (input configuration)
    - Mesh allocation and initial conditions
    - Stepping loop in chunks of ``checks`` steps with RSS checkpoints
    - Per-phase timing, run-log records and MLflow logging

    Parameters
    ----------
    params : DiffusionParameters, optional
        Parameters object. If not provided, kwargs are used to create params.
    strategy : ExecutionStrategy or str, optional
        Scheduling model (instance or name). Defaults to serial.
    image_dir : str or Path, optional
        When given, a PNG of the field is written there at every checkpoint
        (including the initial field) as ``diffusion.{step:07d}.png``, timed
        as I/O.
    **kwargs
        Configuration parameters passed to DiffusionParameters if params is None.
    """

    Parameters = DiffusionParameters

    def __init__(self, params=None, strategy=None, image_dir=None, **kwargs):
        if params is None:
            params = self.Parameters(**kwargs)
        if params.erf_approximation not in ERF_MODES:
            raise ValueError(
                f"Unknown erf_approximation: {params.erf_approximation}. "
                f"Use one of {sorted(ERF_MODES)}"
            )
        if params.source_geometry not in GEOMETRIES:
            raise ValueError(
                f"Unknown source_geometry: {params.source_geometry}. "
                f"Use one of {sorted(GEOMETRIES)}"
            )
        if params.checks <= 0:
            raise ValueError(f"checks must be positive, got {params.checks}")

        if strategy is None:
            strategy = SerialStrategy()
        elif isinstance(strategy, str):
            strategy = create_strategy(strategy)
        if not isinstance(strategy, ExecutionStrategy):
            raise TypeError(f"Expected an ExecutionStrategy, got {type(strategy).__name__}")

        self.params = params
        self.strategy = strategy
        self.bc = params.boundary_values
        self.mesh = Mesh(
            nx=params.nx,
            ny=params.ny,
            nm=params.nm,
            dx=params.dx,
            dy=params.dy,
            bc=self.bc,
            stencil=params.stencil,
        )
        self.dt = params.dt
        self.image_dir = Path(image_dir) if image_dir is not None else None
        self.images = []

        # Simulation state
        self.step_count = 0
        self.elapsed = 0.0
        self.rss = 0.0

        self.stopwatch = Stopwatch()
        self.metrics = Metrics(strategy=strategy.name)
        self.time_series = TimeSeries([])

    @property
    def conc(self) -> np.ndarray:
        """Latest concentration field."""
        return self.mesh.old

    def _record(self) -> RunLogRecord:
        sw = self.stopwatch
        record = RunLogRecord(
            step=self.step_count,
            sim_time=self.elapsed,
            rss=self.rss,
            conv_time=sw.convolution,
            step_time=sw.step,
            io_time=sw.io,
            soln_time=sw.validation,
            run_time=sw.elapsed(),
        )
        self.time_series.records.append(record)
        log.info(
            f"Step {record.step}: t={record.sim_time:.4f}, rss={record.rss:.6e}, "
            f"conv={record.conv_time:.3f}s, step={record.step_time:.3f}s"
        )

        if mlflow.active_run():
            with sw.phase("io"):
                mlflow.log_metrics(
                    {
                        "sim_time": record.sim_time,
                        "rss": record.rss,
                        "conv_time": record.conv_time,
                        "step_time": record.step_time,
                    },
                    step=record.step,
                )
        return record

    def _validate(self):
        with self.stopwatch.phase("validation"):
            self.rss = check_solution(
                self.mesh.old,
                self.mesh,
                self.elapsed,
                self.params.D,
                self.bc,
                self.strategy,
                erf_approximation=self.params.erf_approximation,
                source_geometry=self.params.source_geometry,
            )

    def _write_image(self):
        if self.image_dir is None:
            return
        lo, hi = self.bc.bounds
        with self.stopwatch.phase("io"):
            path = write_png(
                self.conc, self.image_dir / f"diffusion.{self.step_count:07d}.png", lo, hi
            )
        self.images.append(path)

    def initialize(self):
        """Apply initial conditions, validate them and record checkpoint 0."""
        self.stopwatch.start()
        with self.stopwatch.phase("step"):
            apply_initial_conditions(self.mesh.old, self.mesh.nm, self.bc, self.strategy)
            self.strategy.synchronize()
        self.step_count = 0
        self.elapsed = 0.0
        self.images = []
        self._validate()
        self._write_image()
        self._record()

    def advance(self, n_steps: int) -> RunLogRecord:
        """Take ``n_steps`` time steps, then validate against the analytical solution."""
        self.elapsed = solve_diffusion_equation(
            self.mesh,
            self.params.D,
            self.dt,
            n_steps,
            self.elapsed,
            self.stopwatch,
            self.strategy,
        )
        self.step_count += n_steps

        self._validate()
        self._write_image()
        return self._record()

    def solve(self, steps: int = None, checks: int = None):
        """Run the benchmark.

        Stores results in solver attributes:
        - self.time_series : one RunLogRecord per checkpoint
        - self.metrics : Metrics dataclass with totals

        Parameters
        ----------
        steps : int, optional
            Total number of time steps. If None, uses params.steps.
        checks : int, optional
            Steps between checkpoints. If None, uses params.checks.
        """
        steps = self.params.steps if steps is None else steps
        checks = self.params.checks if checks is None else checks

        log.info(
            f"Solving {self.params.nx}x{self.params.ny} (nm={self.params.nm}) "
            f"with {self.strategy!r}: dt={self.dt:.4g}, {steps} steps"
        )
        self.initialize()
        while self.step_count < steps:
            self.advance(min(checks, steps - self.step_count))

        self._store_results()
        log.info(
            f"Solver finished in {self.metrics.wall_time_seconds:.2f} seconds, "
            f"final rss={self.rss:.6e}"
        )
        return self.metrics

    def _store_results(self):
        sw = self.stopwatch
        self.metrics = Metrics(
            steps=self.step_count,
            sim_time=self.elapsed,
            final_rss=self.rss,
            wall_time_seconds=sw.elapsed(),
            conv_seconds=sw.convolution,
            step_seconds=sw.step,
            io_seconds=sw.io,
            soln_seconds=sw.validation,
            strategy=self.strategy.name,
        )

    def save(self, directory, image: bool = True):
        """Write ``runlog.csv``, the final field CSV and (optionally) a PNG.

        Returns
        -------
        dict
            Written file paths keyed by "runlog", "field" and "image".
        """
        directory = Path(directory)
        paths = {}
        with self.stopwatch.phase("io"):
            paths["runlog"] = write_runlog_csv(self.time_series.records, directory / "runlog.csv")
            paths["field"] = write_csv(
                self.conc, self.mesh.dx, self.mesh.dy,
                directory / f"diffusion.{self.step_count:07d}.csv",
            )
            if image and self.images:
                # Final field already written at the last checkpoint
                paths["image"] = self.images[-1]
            elif image:
                lo, hi = self.bc.bounds
                paths["image"] = write_png(
                    self.conc, directory / f"diffusion.{self.step_count:07d}.png", lo, hi
                )
        return paths

    def close(self):
        self.strategy.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
