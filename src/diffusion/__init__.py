"""Semi-infinite diffusion benchmark.

Explicit finite-difference solution of the 2D diffusion equation with two
half-wall sources, validated against a superposition of analytical
line-source solutions, runnable under interchangeable execution strategies.

Component Hierarchy:
--------------------
DiffusionSolver (driver - stepping loop, checkpoints, logging)
├── boundaries (fixed-value and no-flux conditions)
├── discretization (stencil convolution + explicit Euler)
├── analytical (RSS against the analytical solution)
└── strategies (serial / threaded / offload scheduling)
"""

from .analytical import analytical_field, check_solution, reference_field
from .boundaries import apply_boundary_conditions, apply_initial_conditions
from .datastructures import (
    BoundaryValues,
    DiffusionParameters,
    Metrics,
    RunLogRecord,
    TimeSeries,
)
from .discretization import compute_convolution, integrate_step, solve_diffusion_equation
from .mesh import Mesh, MeshAllocationError
from .solver import DiffusionSolver
from .stencils import build_mask
from .strategies import (
    ExecutionStrategy,
    OffloadStrategy,
    SerialStrategy,
    ThreadedStrategy,
    create_strategy,
)
from .timer import Stopwatch

__all__ = [
    # Driver
    "DiffusionSolver",
    # Configuration and results
    "BoundaryValues",
    "DiffusionParameters",
    "Metrics",
    "RunLogRecord",
    "TimeSeries",
    # Mesh
    "Mesh",
    "MeshAllocationError",
    "build_mask",
    # Core operations
    "apply_initial_conditions",
    "apply_boundary_conditions",
    "compute_convolution",
    "integrate_step",
    "solve_diffusion_equation",
    "check_solution",
    "analytical_field",
    "reference_field",
    "Stopwatch",
    # Strategies
    "ExecutionStrategy",
    "SerialStrategy",
    "ThreadedStrategy",
    "OffloadStrategy",
    "create_strategy",
]
