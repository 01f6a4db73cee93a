"""Tests for initial and boundary conditions.

Checks, under every execution strategy:
1. Half-wall regions hold their source values
2. Halo cells satisfy the no-flux rule
3. Boundary application is idempotent
"""

import numpy as np
import pytest

from diffusion import (
    BoundaryValues,
    Mesh,
    apply_boundary_conditions,
    apply_initial_conditions,
)


def assert_no_flux(conc, nm):
    """Every halo cell equals the nearest interior cell along its axis."""
    ny, nx = conc.shape
    h = nm // 2
    for k in range(h):
        np.testing.assert_array_equal(conc[:, k], conc[:, h])
        np.testing.assert_array_equal(conc[:, nx - 1 - k], conc[:, nx - 1 - h])
        np.testing.assert_array_equal(conc[k, :], conc[h, :])
        np.testing.assert_array_equal(conc[ny - 1 - k, :], conc[ny - 1 - h, :])


def assert_fixed_values(conc, nm, bc):
    ny, nx = conc.shape
    h = nm // 2
    assert np.all(conc[: ny // 2, : 1 + h] == bc.left)
    assert np.all(conc[ny // 2 :, nx - 1 - h :] == bc.right)


class TestInitialConditions:
    def test_background_and_walls(self, small_mesh, bc, strategy):
        conc = small_mesh.old
        apply_initial_conditions(conc, small_mesh.nm, bc, strategy)
        strategy.synchronize()

        assert_fixed_values(conc, small_mesh.nm, bc)
        # Everything outside the two walls is background
        outside = np.ones_like(conc, dtype=bool)
        outside[:5, :2] = False
        outside[5:, 8:] = False
        assert np.all(conc[outside] == bc.background)

    def test_overwrites_previous_content(self, small_mesh, bc):
        conc = small_mesh.old
        conc[:] = 7.0
        apply_initial_conditions(conc, small_mesh.nm, bc)
        assert conc.max() == 1.0


class TestBoundaryConditions:
    @pytest.mark.parametrize("nm", [3, 5, 7])
    def test_no_flux_and_fixed_values(self, nm, strategy):
        bc = BoundaryValues(bottom=0.0, top=0.0, left=0.75, right=0.25)
        mesh = Mesh(nx=23, ny=17, nm=nm, dx=0.5, dy=0.5, bc=bc)
        rng = np.random.default_rng(nm)
        conc = mesh.old
        conc[:] = rng.random(conc.shape)

        apply_boundary_conditions(conc, nm, bc, strategy)
        strategy.synchronize()

        assert_no_flux(conc, nm)
        assert_fixed_values(conc, nm, bc)

    def test_idempotent(self, medium_mesh, bc, strategy):
        rng = np.random.default_rng(1)
        conc = medium_mesh.old
        conc[:] = rng.random(conc.shape)

        apply_boundary_conditions(conc, medium_mesh.nm, bc, strategy)
        strategy.synchronize()
        once = conc.copy()
        apply_boundary_conditions(conc, medium_mesh.nm, bc, strategy)
        strategy.synchronize()

        np.testing.assert_array_equal(conc, once)

    def test_interior_untouched_outside_walls(self, medium_mesh, bc):
        rng = np.random.default_rng(2)
        conc = medium_mesh.old
        conc[:] = rng.random(conc.shape)
        before = conc.copy()

        apply_boundary_conditions(conc, medium_mesh.nm, bc)

        h = medium_mesh.halo
        # Interior columns strictly between the two walls are never written
        np.testing.assert_array_equal(conc[h:-h, h + 1 : -h - 1], before[h:-h, h + 1 : -h - 1])

    def test_zero_halo_applies_fixed_values_only(self, bc):
        mesh = Mesh(nx=6, ny=6, nm=1, mask=np.zeros((1, 1)), bc=bc)
        conc = mesh.old
        conc[:] = 0.5

        apply_boundary_conditions(conc, 1, bc)

        assert np.all(conc[:3, 0] == 1.0)
        assert np.all(conc[3:, 5] == 1.0)
        assert np.all(conc[:, 1:5] == 0.5)
        assert np.all(conc[3:, 0] == 0.5)

    def test_reference_corners(self, small_mesh, bc):
        """10x10 scenario: (0,0) lies in the left wall, (9,9) in the right wall."""
        conc = small_mesh.old
        apply_initial_conditions(conc, small_mesh.nm, bc)
        apply_boundary_conditions(conc, small_mesh.nm, bc)

        assert conc[0, 0] == 1.0
        assert conc[9, 9] == 1.0
        assert conc[9, 0] == 0.0
        assert conc[0, 9] == 0.0


class TestBoundaryValues:
    def test_table_layout(self):
        bc = BoundaryValues(bottom=0.1, top=0.2, left=0.8, right=0.9)
        table = bc.as_table()
        assert table[0][0] == 0.1  # background
        assert table[0][1] == 0.2
        assert table[1][0] == 0.8  # left source
        assert table[1][1] == 0.9  # right source
        assert BoundaryValues.from_table(table) == bc

    def test_bounds(self):
        assert BoundaryValues(bottom=0.5, top=0.0, left=2.0, right=1.0).bounds == (0.0, 2.0)

    def test_immutable(self, bc):
        with pytest.raises(AttributeError):
            bc.left = 3.0

    def test_top_value_only_widens_bounds(self, small_mesh, strategy):
        fields = []
        for top in (0.0, 5.0):
            bc = BoundaryValues(bottom=0.0, top=top, left=1.0, right=1.0)
            conc = np.zeros(small_mesh.shape)
            apply_initial_conditions(conc, small_mesh.nm, bc, strategy)
            apply_boundary_conditions(conc, small_mesh.nm, bc, strategy)
            strategy.synchronize()
            fields.append(conc)
        np.testing.assert_array_equal(fields[0], fields[1])
        assert BoundaryValues(top=5.0).bounds == (0.0, 5.0)
