"""
Mesh: halo-padded concentration buffers on a uniform 2D grid.

Indexing Conventions:
- Buffers have shape (ny, nx) and are indexed ``conc[j, i]`` (row = y, column = x).
- The halo is ``h = nm // 2`` cells wide on every edge.
- Interior cells satisfy ``h <= i < nx - h`` and ``h <= j < ny - h``; only these
  are written by the convolution and the time integrator.
- Physical coordinates of cell (i, j) are ``(dx * i, dy * j)``.

Buffer Roles:
- ``buffers`` holds two equally shaped slots. ``active`` names the slot holding
  the current ("old") field; the other slot receives the next ("new") field.
- ``swap()`` flips ``active``. Data is never copied between slots.
- ``lap`` is scratch space for the discrete Laplacian.
"""

import numpy as np

from .datastructures import BoundaryValues
from .stencils import build_mask


class MeshAllocationError(MemoryError):
    """Raised when the mesh buffers cannot be allocated."""


class Mesh:
    def __init__(
        self,
        nx: int,
        ny: int,
        nm: int = 3,
        dx: float = 0.5,
        dy: float = 0.5,
        mask: np.ndarray = None,
        bc: BoundaryValues = None,
        stencil: str = "five_point",
    ):
        if nm < 1 or nm % 2 == 0:
            raise ValueError(f"Mask width nm must be odd and positive, got {nm}")
        h = nm // 2
        # At least one interior cell plus the fixed-value walls
        if nx < 2 * h + 2 or ny < 2 * h + 2:
            raise ValueError(f"Grid {nx}x{ny} is too small for a halo of width {h}")
        if dx <= 0 or dy <= 0:
            raise ValueError(f"Cell spacing must be positive, got dx={dx}, dy={dy}")

        # --- Geometry ---
        self.nx = nx
        self.ny = ny
        self.nm = nm
        self.dx = dx
        self.dy = dy

        # --- Stencil ---
        if mask is None:
            mask = build_mask(dx, dy, nm, stencil)
        mask = np.array(mask, dtype=np.float64)
        if mask.shape != (nm, nm):
            raise ValueError(f"Mask shape {mask.shape} does not match nm={nm}")
        self.mask = mask
        self.mask.setflags(write=False)

        # --- BCs ---
        self.bc = bc if bc is not None else BoundaryValues()

        # --- Buffers ---
        try:
            self.buffers = [
                np.zeros((ny, nx), dtype=np.float64),
                np.zeros((ny, nx), dtype=np.float64),
            ]
            self.lap = np.zeros((ny, nx), dtype=np.float64)
        except MemoryError as exc:
            raise MeshAllocationError(
                f"Unable to allocate three {ny}x{nx} buffers"
            ) from exc
        self.active = 0

    @property
    def halo(self) -> int:
        return self.nm // 2

    @property
    def shape(self):
        return (self.ny, self.nx)

    @property
    def interior_rows(self):
        return (self.halo, self.ny - self.halo)

    @property
    def interior_cols(self):
        return (self.halo, self.nx - self.halo)

    @property
    def interior(self):
        """Slice pair selecting the interior of a buffer."""
        h = self.halo
        return (slice(h, self.ny - h), slice(h, self.nx - h))

    @property
    def n_interior(self) -> int:
        return (self.nx - 2 * self.halo) * (self.ny - 2 * self.halo)

    @property
    def old(self) -> np.ndarray:
        return self.buffers[self.active]

    @property
    def new(self) -> np.ndarray:
        return self.buffers[1 - self.active]

    def swap(self):
        """Exchange the old/new roles of the two buffers."""
        self.active = 1 - self.active

    def coordinates(self):
        """Physical coordinates (x, y) of every cell, each of shape (ny, nx)."""
        x = self.dx * np.arange(self.nx)
        y = self.dy * np.arange(self.ny)
        return np.meshgrid(x, y, indexing="xy")

    def stable_dt(self, D: float, lin_stab: float) -> float:
        """Time step ``lin_stab * min(dx, dy)^2 / (4 D)``."""
        h = min(self.dx, self.dy)
        return lin_stab * h * h / (4.0 * D)

    def __repr__(self):
        return (
            f"Mesh(nx={self.nx}, ny={self.ny}, nm={self.nm}, "
            f"dx={self.dx}, dy={self.dy}, active={self.active})"
        )
