"""Tests for the stencil convolution and explicit Euler integration."""

import numpy as np
import pytest

from diffusion import (
    BoundaryValues,
    Mesh,
    Stopwatch,
    apply_boundary_conditions,
    apply_initial_conditions,
    compute_convolution,
    integrate_step,
    solve_diffusion_equation,
)
from diffusion.stencils import build_mask


class TestConvolution:
    def test_constant_field_has_zero_laplacian(self, medium_mesh, strategy):
        conc = medium_mesh.old
        conc[:] = 3.7
        lap = medium_mesh.lap

        compute_convolution(conc, lap, medium_mesh.mask, medium_mesh.nm, strategy)
        strategy.synchronize()

        assert np.all(lap[medium_mesh.interior] == 0.0)

    @pytest.mark.parametrize("kind", ["nine_point", "fourth_order"])
    def test_constant_field_other_stencils(self, kind):
        mask = build_mask(0.3, 0.3, nm=5, kind=kind)
        conc = np.full((12, 14), 2.0)
        lap = np.zeros_like(conc)

        compute_convolution(conc, lap, mask, 5)

        np.testing.assert_allclose(lap[2:-2, 2:-2], 0.0, atol=1e-10)

    def test_linear_in_input(self, medium_mesh, strategy):
        rng = np.random.default_rng(0)
        a = rng.random(medium_mesh.shape)
        b = rng.random(medium_mesh.shape)
        lap_a, lap_b, lap_ab = (np.zeros(medium_mesh.shape) for _ in range(3))
        mask, nm = medium_mesh.mask, medium_mesh.nm

        compute_convolution(a, lap_a, mask, nm, strategy)
        compute_convolution(b, lap_b, mask, nm, strategy)
        compute_convolution(a + b, lap_ab, mask, nm, strategy)
        strategy.synchronize()

        np.testing.assert_allclose(lap_ab, lap_a + lap_b, rtol=1e-12, atol=1e-10)

    def test_quadratic_field(self):
        """The five-point stencil is exact for c = x^2 + y^2 (Laplacian 4)."""
        mesh = Mesh(nx=12, ny=9, nm=3, dx=0.5, dy=0.5)
        x, y = mesh.coordinates()
        conc = x**2 + y**2

        compute_convolution(conc, mesh.lap, mesh.mask, mesh.nm)

        np.testing.assert_allclose(mesh.lap[mesh.interior], 4.0, rtol=1e-12)

    def test_writes_interior_only(self, small_mesh):
        conc = np.random.default_rng(3).random(small_mesh.shape)
        lap = np.full(small_mesh.shape, -99.0)

        compute_convolution(conc, lap, small_mesh.mask, small_mesh.nm)

        assert np.all(lap[0, :] == -99.0) and np.all(lap[:, -1] == -99.0)
        assert np.all(lap[small_mesh.interior] != -99.0)


class TestIntegration:
    def test_explicit_euler_update(self, small_mesh, strategy):
        rng = np.random.default_rng(4)
        old = rng.random(small_mesh.shape)
        lap = rng.random(small_mesh.shape)
        new = np.zeros(small_mesh.shape)
        D, dt = 0.5, 0.1

        integrate_step(old, new, lap, small_mesh.nm, D, dt, strategy)
        strategy.synchronize()

        expected = old + dt * D * lap
        interior = small_mesh.interior
        np.testing.assert_array_equal(new[interior], expected[interior])
        assert np.all(new[0, :] == 0.0)


class TestSolveDiffusionEquation:
    def _prepare(self, mesh):
        apply_initial_conditions(mesh.old, mesh.nm, mesh.bc)
        apply_boundary_conditions(mesh.old, mesh.nm, mesh.bc)

    def test_first_step_reference_scenario(self, small_mesh, small_params, strategy):
        """After one step, cells more than one stencil radius from a source stay 0."""
        self._prepare(small_mesh)
        D = small_params["D"]
        dt = small_mesh.stable_dt(D, small_params["linStab"])
        sw = Stopwatch()

        elapsed = solve_diffusion_equation(small_mesh, D, dt, 1, 0.0, sw, strategy)

        conc = small_mesh.old
        assert elapsed == pytest.approx(dt)
        assert small_mesh.active == 1
        assert np.all(conc[1:9, 3:7] == 0.0)
        # Flux has entered next to the left wall
        assert conc[2, 2] > 0.0
        assert conc[7, 7] > 0.0

    def test_elapsed_and_buffer_toggle(self, small_mesh):
        self._prepare(small_mesh)
        sw = Stopwatch()

        elapsed = solve_diffusion_equation(small_mesh, 0.00625, 1.0, 4, 10.0, sw)

        assert elapsed == pytest.approx(14.0)
        assert small_mesh.active == 0
        assert sw.convolution > 0.0 and sw.step > 0.0
        assert sw.io == 0.0 and sw.validation == 0.0

    @pytest.mark.parametrize("kind", ["five_point", "nine_point"])
    def test_maximum_principle(self, kind, strategy):
        bc = BoundaryValues(bottom=0.0, top=0.0, left=1.0, right=1.0)
        mesh = Mesh(nx=24, ny=20, nm=3, dx=0.5, dy=0.5, bc=bc, stencil=kind)
        self._prepare(mesh)
        D = 0.00625
        dt = mesh.stable_dt(D, 0.9)

        solve_diffusion_equation(mesh, D, dt, 300, 0.0, Stopwatch(), strategy)

        lo, hi = bc.bounds
        interior = mesh.old[mesh.interior]
        # Convex update: bounded up to round-off
        assert interior.min() >= lo - 1e-12
        assert interior.max() <= hi + 1e-12

    def test_offload_leaves_host_buffers_consistent(self, small_mesh):
        """Results come back to the host buffers when the data region closes."""
        from diffusion import OffloadStrategy, SerialStrategy

        reference = Mesh(nx=10, ny=10, nm=3, dx=0.5, dy=0.5, bc=small_mesh.bc)
        self._prepare(small_mesh)
        self._prepare(reference)

        with OffloadStrategy() as offload:
            solve_diffusion_equation(small_mesh, 0.00625, 1.0, 5, 0.0, Stopwatch(), offload)
            assert offload.bytes_to_host == offload.bytes_to_device - small_mesh.mask.nbytes
        solve_diffusion_equation(reference, 0.00625, 1.0, 5, 0.0, Stopwatch(), SerialStrategy())

        np.testing.assert_array_equal(small_mesh.old, reference.old)
        np.testing.assert_array_equal(small_mesh.new, reference.new)
