"""Discrete Laplacian stencil masks.

Masks are ``nm x nm`` tables with the stencil centred; entries outside the
stencil's footprint are zero. Row index is y (``mask[0]`` is ``j-h``),
column index is x.
"""

import numpy as np

STENCILS = ("five_point", "nine_point", "fourth_order")


def five_point_laplacian(dx: float, dy: float, M: np.ndarray, c: int):
    """Second-order five-point Laplacian around centre ``c``."""
    M[c - 1, c] = 1.0 / (dy * dy)  # up
    M[c, c - 1] = 1.0 / (dx * dx)  # left
    M[c, c] = -2.0 * (dx * dx + dy * dy) / (dx * dx * dy * dy)  # middle
    M[c, c + 1] = 1.0 / (dx * dx)  # right
    M[c + 1, c] = 1.0 / (dy * dy)  # down


def nine_point_laplacian(dx: float, dy: float, M: np.ndarray, c: int):
    """Isotropic nine-point Laplacian around centre ``c``."""
    M[c - 1, c - 1] = 1.0 / (6.0 * dx * dy)
    M[c - 1, c] = 4.0 / (6.0 * dy * dy)
    M[c - 1, c + 1] = 1.0 / (6.0 * dx * dy)

    M[c, c - 1] = 4.0 / (6.0 * dx * dx)
    M[c, c] = -10.0 * (dx * dx + dy * dy) / (6.0 * dx * dx * dy * dy)
    M[c, c + 1] = 4.0 / (6.0 * dx * dx)

    M[c + 1, c - 1] = 1.0 / (6.0 * dx * dy)
    M[c + 1, c] = 4.0 / (6.0 * dy * dy)
    M[c + 1, c + 1] = 1.0 / (6.0 * dx * dy)


def fourth_order_laplacian(dx: float, dy: float, M: np.ndarray, c: int):
    """Fourth-order accurate cross stencil (two cells each way) around ``c``."""
    weights = np.array([-1.0, 16.0, -30.0, 16.0, -1.0]) / 12.0
    M[c, c - 2 : c + 3] += weights / (dx * dx)
    M[c - 2 : c + 3, c] += weights / (dy * dy)


_BUILDERS = {
    "five_point": (five_point_laplacian, 3),
    "nine_point": (nine_point_laplacian, 3),
    "fourth_order": (fourth_order_laplacian, 5),
}


def build_mask(dx: float, dy: float, nm: int = 3, kind: str = "five_point") -> np.ndarray:
    """Build an ``nm x nm`` Laplacian mask.

    Parameters
    ----------
    dx, dy : float
        Cell spacings.
    nm : int
        Mask width (odd). Must be at least the stencil's own width.
    kind : str
        "five_point", "nine_point" or "fourth_order".

    Returns
    -------
    np.ndarray
        Mask of shape ``(nm, nm)``.
    """
    if kind not in _BUILDERS:
        raise ValueError(f"Unknown stencil: {kind}. Use one of {STENCILS}")
    builder, width = _BUILDERS[kind]
    if nm % 2 == 0 or nm < width:
        raise ValueError(f"Stencil '{kind}' needs an odd mask width >= {width}, got nm={nm}")

    mask = np.zeros((nm, nm), dtype=np.float64)
    builder(dx, dy, mask, nm // 2)
    return mask
