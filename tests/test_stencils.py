"""Tests for Laplacian stencil masks."""

import numpy as np
import pytest

from diffusion.stencils import STENCILS, build_mask


class TestFivePoint:
    """Five-point Laplacian coefficients."""

    @pytest.mark.parametrize("h", [0.5, 0.25, 1.0])
    def test_uniform_spacing_coefficients(self, h):
        """Neighbours are 1/h^2 and the centre is -4/h^2."""
        M = build_mask(h, h, nm=3, kind="five_point")

        assert M[0, 1] == pytest.approx(1.0 / h**2)  # up
        assert M[2, 1] == pytest.approx(1.0 / h**2)  # down
        assert M[1, 0] == pytest.approx(1.0 / h**2)  # left
        assert M[1, 2] == pytest.approx(1.0 / h**2)  # right
        assert M[1, 1] == pytest.approx(-4.0 / h**2)
        # Corners unused
        assert M[0, 0] == M[0, 2] == M[2, 0] == M[2, 2] == 0.0

    def test_anisotropic_spacing(self):
        """x-neighbours scale with dx, y-neighbours with dy."""
        dx, dy = 0.5, 0.25
        M = build_mask(dx, dy, nm=3)

        assert M[1, 0] == pytest.approx(1.0 / dx**2)
        assert M[0, 1] == pytest.approx(1.0 / dy**2)
        assert M[1, 1] == pytest.approx(-2.0 / dx**2 - 2.0 / dy**2)

    def test_embedded_in_wider_mask(self):
        """With nm=5 the stencil sits in the centre, zero padded."""
        M5 = build_mask(0.5, 0.5, nm=5)
        M3 = build_mask(0.5, 0.5, nm=3)

        assert M5.shape == (5, 5)
        np.testing.assert_array_equal(M5[1:4, 1:4], M3)
        assert np.all(M5[0, :] == 0.0) and np.all(M5[:, 4] == 0.0)


class TestMaskProperties:
    """Shape and consistency checks common to all stencils."""

    @pytest.mark.parametrize("kind", STENCILS)
    def test_coefficients_sum_to_zero(self, kind):
        M = build_mask(0.5, 0.5, nm=5, kind=kind)
        assert np.sum(M) == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("kind", STENCILS)
    def test_symmetric(self, kind):
        """Masks are symmetric, so correlation equals convolution."""
        M = build_mask(0.5, 0.5, nm=5, kind=kind)
        np.testing.assert_allclose(M, M[::-1, ::-1])

    def test_fourth_order_needs_wide_mask(self):
        with pytest.raises(ValueError):
            build_mask(0.5, 0.5, nm=3, kind="fourth_order")

    def test_even_width_rejected(self):
        with pytest.raises(ValueError):
            build_mask(0.5, 0.5, nm=4)

    def test_unknown_stencil(self):
        with pytest.raises(ValueError, match="Unknown stencil"):
            build_mask(0.5, 0.5, nm=3, kind="seven_point")
