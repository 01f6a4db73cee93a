"""Block kernels shared by every execution strategy.

Each kernel works on a half-open block ``[j0, j1) x [i0, i1)`` (or a 1D span
``[lo, hi)``) so that a strategy can hand out any partition of the index
range. The block bounds are always the trailing arguments.

Arrays are indexed ``conc[j, i]`` (row = y, column = x).
"""

import math

from numba import njit

ERF_EXACT = 0
ERF_SERIES = 1

GEOMETRY_SEGMENT = 0
GEOMETRY_AXIS = 1

# Maclaurin series of erf is truncated after the z^9 term and saturates above this
SERIES_CUTOFF = 1.5


# ----------------------------------------------------------------------------
# Boundary conditions
# ----------------------------------------------------------------------------


@njit(cache=True, nogil=True)
def fill_block(conc, value, j0, j1, i0, i1):
    """Set every cell of the block to ``value``."""
    for j in range(j0, j1):
        for i in range(i0, i1):
            conc[j, i] = value


@njit(cache=True, nogil=True)
def extend_columns(conc, ilo, ihi, lo, hi):
    """Copy columns ``ilo`` -> ``ilo-1`` and ``ihi`` -> ``ihi+1`` for rows in [lo, hi)."""
    for j in range(lo, hi):
        conc[j, ilo - 1] = conc[j, ilo]
        conc[j, ihi + 1] = conc[j, ihi]


@njit(cache=True, nogil=True)
def extend_rows(conc, jlo, jhi, lo, hi):
    """Copy rows ``jlo`` -> ``jlo-1`` and ``jhi`` -> ``jhi+1`` for columns in [lo, hi)."""
    for i in range(lo, hi):
        conc[jlo - 1, i] = conc[jlo, i]
        conc[jhi + 1, i] = conc[jhi, i]


# ----------------------------------------------------------------------------
# Discretization
# ----------------------------------------------------------------------------


@njit(cache=True, nogil=True)
def convolve_block(conc_old, conc_lap, mask, nm, j0, j1, i0, i1):
    """Correlate ``conc_old`` with the stencil mask, writing into ``conc_lap``."""
    h = nm // 2
    for j in range(j0, j1):
        for i in range(i0, i1):
            value = 0.0
            for mj in range(-h, h + 1):
                for mi in range(-h, h + 1):
                    value += mask[mj + h, mi + h] * conc_old[j + mj, i + mi]
            conc_lap[j, i] = value


@njit(cache=True, nogil=True)
def euler_block(conc_old, conc_new, conc_lap, D, dt, j0, j1, i0, i1):
    """Explicit Euler update ``new = old + dt * D * lap``."""
    for j in range(j0, j1):
        for i in range(i0, i1):
            conc_new[j, i] = conc_old[j, i] + dt * D * conc_lap[j, i]


# ----------------------------------------------------------------------------
# Analytical solution
# ----------------------------------------------------------------------------


@njit(cache=True, nogil=True)
def series_erf(z):
    """Maclaurin series of erf(z) through z^9, saturating to 1 for z >= 1.5."""
    if z >= SERIES_CUTOFF:
        return 1.0
    z2 = z * z
    poly = 1.0 + z2 * (-1.0 / 3.0 + z2 * (1.0 / 10.0 + z2 * (-1.0 / 42.0 + z2 / 216.0)))
    return 2.0 * z * poly / math.sqrt(math.pi)


@njit(cache=True, nogil=True)
def distance_point_to_segment(ax, ay, bx, by, px, py):
    """Shortest Euclidean distance from point P to the segment AB."""
    abx = bx - ax
    aby = by - ay
    length2 = abx * abx + aby * aby
    if length2 == 0.0:
        return math.sqrt((px - ax) ** 2 + (py - ay) ** 2)
    t = ((px - ax) * abx + (py - ay) * aby) / length2
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0
    qx = ax + t * abx
    qy = ay + t * aby
    return math.sqrt((px - qx) ** 2 + (py - qy) ** 2)


@njit(cache=True, nogil=True)
def analytical_value(r, elapsed, D, source, erf_mode):
    """Concentration at distance ``r`` from a semi-infinite source after ``elapsed``."""
    if elapsed <= 0.0:
        return source if r == 0.0 else 0.0
    z = r / math.sqrt(4.0 * D * elapsed)
    if erf_mode == ERF_SERIES:
        return source * (1.0 - series_erf(z))
    return source * (1.0 - math.erf(z))


@njit(cache=True, nogil=True)
def source_distances(i, j, nx, ny, nm, dx, dy, geometry):
    """Distances from cell (i, j) to the left and right half-wall sources."""
    h = nm // 2
    half = ny // 2
    if geometry == GEOMETRY_AXIS:
        if j < half:
            r_left = dx * (i - h)
        else:
            r_left = math.sqrt((dx * (i - h)) ** 2 + (dy * (j - half)) ** 2)
        if j >= half:
            r_right = dx * (nx - 1 - h - i)
        else:
            r_right = math.sqrt((dx * (nx - 1 - h - i)) ** 2 + (dy * (half - j)) ** 2)
        return r_left, r_right

    r_left = distance_point_to_segment(
        dx * h, dy * h, dx * h, dy * half, dx * i, dy * j
    )
    r_right = distance_point_to_segment(
        dx * (nx - 1 - h), dy * half, dx * (nx - 1 - h), dy * (ny - 1 - h), dx * i, dy * j
    )
    return r_left, r_right


@njit(cache=True, nogil=True)
def wall_value(i, j, nx, ny, nm, left, right):
    """Initial-condition value of an interior cell: the source on its half-wall, else 0.

    Matches the fixed-value regions: the left wall holds rows [0, ny/2), the
    right wall rows [ny/2, ny). The segment endpoint at row ny/2 belongs to
    the right wall only.
    """
    h = nm // 2
    half = ny // 2
    if i == h and j < half:
        return left
    if i == nx - 1 - h and j >= half:
        return right
    return 0.0


@njit(cache=True, nogil=True)
def superposed_value(i, j, nx, ny, nm, dx, dy, elapsed, D, left, right, erf_mode, geometry):
    """Sum of both source contributions at cell (i, j)."""
    if elapsed <= 0.0:
        return wall_value(i, j, nx, ny, nm, left, right)
    r_left, r_right = source_distances(i, j, nx, ny, nm, dx, dy, geometry)
    return analytical_value(r_left, elapsed, D, left, erf_mode) + analytical_value(
        r_right, elapsed, D, right, erf_mode
    )


@njit(cache=True, nogil=True)
def residual_block(conc, nm, dx, dy, elapsed, D, left, right, erf_mode, geometry,
                   j0, j1, i0, i1):
    """Sum of squared differences between analytical and numerical values."""
    ny, nx = conc.shape
    total = 0.0
    for j in range(j0, j1):
        for i in range(i0, i1):
            ca = superposed_value(
                i, j, nx, ny, nm, dx, dy, elapsed, D, left, right, erf_mode, geometry
            )
            diff = ca - conc[j, i]
            total += diff * diff
    return total


@njit(cache=True, nogil=True)
def analytical_block(out, nm, dx, dy, elapsed, D, left, right, erf_mode, geometry,
                     j0, j1, i0, i1):
    """Write the superposed analytical field into ``out``."""
    ny, nx = out.shape
    for j in range(j0, j1):
        for i in range(i0, i1):
            out[j, i] = superposed_value(
                i, j, nx, ny, nm, dx, dy, elapsed, D, left, right, erf_mode, geometry
            )
