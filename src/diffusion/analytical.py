"""Analytical comparison for the two half-wall source problem.

Each half-wall is treated as a semi-infinite line source held at a fixed
concentration. Far from boundary reflections, the field is approximated by
superposing the two 1D solutions

    c(r, t) = c_source * (1 - erf(r / sqrt(4 D t)))

where r is the shortest distance from the cell to the source segment.

Error function strategies:
- "exact":  library erf.
- "series": Maclaurin series through z^9, saturating to 1 for z >= 1.5.
            Maximum absolute error is about 0.056 (just below the cutoff);
            below 1e-5 for z <= 0.5. The truncated series overshoots 1 just
            below the cutoff (about 1.022 at z -> 1.5), so 1 - erf and the
            analytical concentration dip slightly below zero there.

Source geometries:
- "segment": point-to-segment distance (reference formulation).
- "axis":    horizontal distance beside the wall, distance to the wall tip
             elsewhere. Slightly off near the lower/upper segment ends; do
             not use for accuracy-sensitive comparisons.

At elapsed == 0 the field is the initial condition: the source value on the
interior cells of each fixed-value half-wall, zero elsewhere.
"""

import numpy as np
from scipy.special import erf

from .datastructures import BoundaryValues
from .kernels import (
    ERF_EXACT,
    ERF_SERIES,
    GEOMETRY_AXIS,
    GEOMETRY_SEGMENT,
    analytical_block,
    residual_block,
)
from .mesh import Mesh
from .strategies import ExecutionStrategy, SerialStrategy

ERF_MODES = {"exact": ERF_EXACT, "series": ERF_SERIES}
GEOMETRIES = {"segment": GEOMETRY_SEGMENT, "axis": GEOMETRY_AXIS}

_SERIAL = SerialStrategy()


def _mode(table: dict, key: str, what: str) -> int:
    try:
        return table[key]
    except KeyError:
        raise ValueError(f"Unknown {what}: {key}. Use one of {sorted(table)}") from None


def check_solution(conc, mesh: Mesh, elapsed: float, D: float,
                   bc: BoundaryValues = None, strategy: ExecutionStrategy = None,
                   erf_approximation: str = "exact",
                   source_geometry: str = "segment") -> float:
    """Residual sum of squares between ``conc`` and the analytical field.

    The sum runs over interior cells and is normalized by their count.
    ``conc`` is only read.
    """
    strategy = strategy or _SERIAL
    bc = bc if bc is not None else mesh.bc
    erf_mode = _mode(ERF_MODES, erf_approximation, "erf approximation")
    geometry = _mode(GEOMETRIES, source_geometry, "source geometry")

    total = strategy.reduce_sum(
        residual_block,
        mesh.interior_rows,
        mesh.interior_cols,
        conc,
        mesh.nm,
        mesh.dx,
        mesh.dy,
        float(elapsed),
        D,
        bc.left,
        bc.right,
        erf_mode,
        geometry,
    )
    return total / mesh.n_interior


def analytical_field(mesh: Mesh, elapsed: float, D: float, bc: BoundaryValues = None,
                     strategy: ExecutionStrategy = None,
                     erf_approximation: str = "exact",
                     source_geometry: str = "segment") -> np.ndarray:
    """Analytical concentration on the interior; halo cells are NaN."""
    strategy = strategy or _SERIAL
    bc = bc if bc is not None else mesh.bc
    out = np.full(mesh.shape, np.nan)
    strategy.for_each(
        analytical_block,
        mesh.interior_rows,
        mesh.interior_cols,
        out,
        mesh.nm,
        mesh.dx,
        mesh.dy,
        float(elapsed),
        D,
        bc.left,
        bc.right,
        _mode(ERF_MODES, erf_approximation, "erf approximation"),
        _mode(GEOMETRIES, source_geometry, "source geometry"),
    )
    strategy.synchronize()
    return out


def segment_distance(px, py, ax, ay, bx, by):
    """Vectorized shortest distance from points P to the segment AB."""
    abx, aby = bx - ax, by - ay
    length2 = abx * abx + aby * aby
    if length2 == 0.0:
        return np.hypot(px - ax, py - ay)
    t = np.clip(((px - ax) * abx + (py - ay) * aby) / length2, 0.0, 1.0)
    return np.hypot(px - (ax + t * abx), py - (ay + t * aby))


def reference_field(mesh: Mesh, elapsed: float, D: float,
                    bc: BoundaryValues = None) -> np.ndarray:
    """Array-level evaluation of the segment-distance solution with ``scipy.special.erf``.

    Independent of the kernels; used to cross-check them.
    """
    bc = bc if bc is not None else mesh.bc
    h, nx, ny = mesh.halo, mesh.nx, mesh.ny
    x, y = mesh.coordinates()
    r_left = segment_distance(x, y, mesh.dx * h, mesh.dy * h, mesh.dx * h, mesh.dy * (ny // 2))
    r_right = segment_distance(
        x, y,
        mesh.dx * (nx - 1 - h), mesh.dy * (ny // 2),
        mesh.dx * (nx - 1 - h), mesh.dy * (ny - 1 - h),
    )
    if elapsed <= 0:
        # Source value on each half-wall, matching the fixed-value regions
        rows = np.arange(ny)[:, None]
        on_left = (r_left == 0) & (rows < ny // 2)
        on_right = (r_right == 0) & (rows >= ny // 2)
        field = bc.left * on_left + bc.right * on_right
    else:
        scale = np.sqrt(4.0 * D * elapsed)
        field = bc.left * (1.0 - erf(r_left / scale)) + bc.right * (1.0 - erf(r_right / scale))

    out = np.full(mesh.shape, np.nan)
    out[mesh.interior] = field[mesh.interior]
    return out
