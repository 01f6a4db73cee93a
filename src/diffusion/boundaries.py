"""Initial and boundary conditions for the two half-wall source problem.

Fixed-value regions:
- Left half-wall: rows [0, ny/2), columns [0, 1 + h) hold the left source value.
- Right half-wall: rows [ny/2, ny), columns [nx - 1 - h, nx) hold the right source value.

No-flux condition: halo cells are filled from the inside out, so every halo
cell equals its nearest interior neighbour along the axis it borders.
"""

from .datastructures import BoundaryValues
from .kernels import extend_columns, extend_rows, fill_block
from .strategies import ExecutionStrategy, SerialStrategy

_SERIAL = SerialStrategy()


def _apply_fixed_values(conc, nm: int, bc: BoundaryValues, strategy: ExecutionStrategy):
    ny, nx = conc.shape
    h = nm // 2
    # Disjoint regions: order does not matter
    strategy.for_each(fill_block, (0, ny // 2), (0, 1 + h), conc, bc.left)
    strategy.for_each(fill_block, (ny // 2, ny), (nx - 1 - h, nx), conc, bc.right)


def apply_initial_conditions(conc, nm: int, bc: BoundaryValues,
                             strategy: ExecutionStrategy = None):
    """Fill ``conc`` with the background value, then set both half-walls."""
    strategy = strategy or _SERIAL
    ny, nx = conc.shape
    strategy.for_each(fill_block, (0, ny), (0, nx), conc, bc.background)
    _apply_fixed_values(conc, nm, bc, strategy)


def apply_boundary_conditions(conc, nm: int, bc: BoundaryValues,
                              strategy: ExecutionStrategy = None):
    """Enforce fixed-value and no-flux boundary conditions on ``conc`` in place.

    The halo extension reads cells written by the previous offset, so
    offsets run strictly in increasing order; only the sweep along the
    perpendicular axis within one offset is handed to the strategy.
    """
    strategy = strategy or _SERIAL
    ny, nx = conc.shape
    h = nm // 2

    _apply_fixed_values(conc, nm, bc, strategy)

    for offset in range(h):
        ilo = h - offset
        ihi = nx - 1 - h + offset
        strategy.for_each_1d(extend_columns, (0, ny), conc, ilo, ihi)

    for offset in range(h):
        jlo = h - offset
        jhi = ny - 1 - h + offset
        strategy.for_each_1d(extend_rows, (0, nx), conc, jlo, jhi)
