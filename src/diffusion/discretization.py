"""Explicit finite-difference discretization of the diffusion equation.

    dc/dt = D * laplacian(c)

The Laplacian is the correlation of the field with a stencil mask; time is
advanced with explicit Euler. The time step must satisfy

    dt <= linStab * min(dx, dy)^2 / (4 D),  linStab < 1

This is not checked: larger steps make the scheme diverge.
"""

import logging

from .boundaries import apply_boundary_conditions
from .kernels import convolve_block, euler_block
from .mesh import Mesh
from .strategies import ExecutionStrategy, SerialStrategy
from .timer import Stopwatch

log = logging.getLogger(__name__)

_SERIAL = SerialStrategy()


def _interior(conc, nm):
    ny, nx = conc.shape
    h = nm // 2
    return (h, ny - h), (h, nx - h)


def compute_convolution(conc_old, conc_lap, mask, nm: int,
                        strategy: ExecutionStrategy = None):
    """Write the discrete Laplacian of ``conc_old`` into the interior of ``conc_lap``.

    ``conc_old`` must have its halo populated (boundary conditions applied),
    otherwise interior cells next to the halo are wrong.
    """
    strategy = strategy or _SERIAL
    rows, cols = _interior(conc_old, nm)
    strategy.for_each(convolve_block, rows, cols, conc_old, conc_lap, mask, nm)


def integrate_step(conc_old, conc_new, conc_lap, nm: int, D: float, dt: float,
                   strategy: ExecutionStrategy = None):
    """Explicit Euler update of the interior: ``new = old + dt * D * lap``."""
    strategy = strategy or _SERIAL
    rows, cols = _interior(conc_old, nm)
    strategy.for_each(euler_block, rows, cols, conc_old, conc_new, conc_lap, D, dt)


def solve_diffusion_equation(mesh: Mesh, D: float, dt: float, checks: int,
                             elapsed: float, stopwatch: Stopwatch,
                             strategy: ExecutionStrategy = None) -> float:
    """Advance the mesh by ``checks`` time steps.

    Each step applies boundary conditions to the old buffer, convolves it
    into ``mesh.lap``, integrates into the new buffer and swaps the buffer
    roles. Convolution and integration are timed separately.

    Parameters
    ----------
    mesh : Mesh
        Mesh whose buffers are advanced. On return ``mesh.old`` holds the
        latest field.
    D : float
        Diffusivity.
    dt : float
        Time step (caller guarantees stability).
    checks : int
        Number of steps.
    elapsed : float
        Simulated time before the first step.
    stopwatch : Stopwatch
        Accumulates "convolution" and "step" time.
    strategy : ExecutionStrategy, optional
        Scheduling model. Defaults to serial.

    Returns
    -------
    float
        Simulated time after the last step.
    """
    strategy = strategy or _SERIAL
    nm = mesh.nm

    region = strategy.data_region(copy=mesh.buffers + [mesh.lap], copyin=[mesh.mask])
    with region as (device_buffers, device_inputs):
        buf_a, buf_b, conc_lap = device_buffers
        mask = device_inputs[0]
        slots = (buf_a, buf_b)
        for _ in range(checks):
            conc_old = slots[mesh.active]
            conc_new = slots[1 - mesh.active]

            apply_boundary_conditions(conc_old, nm, mesh.bc, strategy)
            strategy.synchronize()

            with stopwatch.phase("convolution"):
                compute_convolution(conc_old, conc_lap, mask, nm, strategy)
                strategy.synchronize()

            with stopwatch.phase("step"):
                integrate_step(conc_old, conc_new, conc_lap, nm, D, dt, strategy)
                strategy.synchronize()
                elapsed += dt

            mesh.swap()

    return elapsed
