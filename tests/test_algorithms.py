"""Tests for sampling kernels."""

import numpy as np
import pytest

from dicsubset.algorithms.interpolation import (
    bilinear_point,
    bicubic_point,
    biquintic_point,
    gather_exact,
    interpolate_bilinear_batch,
    interpolate_bicubic_batch,
    interpolate_biquintic_batch,
    form_bcoef,
    padded_bcoef,
    _quintic_bspline,
)


@pytest.fixture
def grid():
    np.random.seed(7)
    return np.random.rand(30, 40)


class TestGatherExact:
    """Tests for integer gathering."""

    def test_values(self, grid):
        xs = np.array([0, 39, 5, 12], dtype=np.int64)
        ys = np.array([0, 29, 17, 3], dtype=np.int64)

        values = gather_exact(grid, xs, ys)

        assert np.array_equal(values, grid[ys, xs])

    def test_out_of_range_is_nan(self, grid):
        xs = np.array([-1, 40, 3, 3], dtype=np.int64)
        ys = np.array([0, 0, -1, 30], dtype=np.int64)

        assert np.all(np.isnan(gather_exact(grid, xs, ys)))

    def test_empty(self, grid):
        empty = np.array([], dtype=np.int64)
        assert gather_exact(grid, empty, empty).shape == (0,)


class TestBilinear:
    """Tests for bilinear interpolation."""

    def test_integer_points(self, grid):
        assert bilinear_point(grid, 7.0, 11.0) == grid[11, 7]

    def test_weights(self, grid):
        value = bilinear_point(grid, 7.25, 11.75)
        expected = (
            grid[11, 7] * 0.75 * 0.25 + grid[11, 8] * 0.25 * 0.25
            + grid[12, 7] * 0.75 * 0.75 + grid[12, 8] * 0.25 * 0.75
        )
        assert value == pytest.approx(expected, abs=1e-12)

    def test_domain(self, grid):
        assert not np.isnan(bilinear_point(grid, -0.99, 0.0))
        assert np.isnan(bilinear_point(grid, -1.0, 0.0))
        assert not np.isnan(bilinear_point(grid, 39.99, 29.99))
        assert np.isnan(bilinear_point(grid, 40.0, 0.0))
        assert np.isnan(bilinear_point(grid, 0.0, np.inf))

    def test_corner_clamp(self, grid):
        assert bilinear_point(grid, 39.5, 29.5) == pytest.approx(grid[29, 39])

    def test_batch_matches_point(self, grid):
        xs = np.array([1.2, 20.7, 38.1])
        ys = np.array([3.3, 15.5, 28.9])

        values = interpolate_bilinear_batch(grid, xs, ys)

        for i in range(3):
            assert values[i] == bilinear_point(grid, xs[i], ys[i])


class TestBicubic:
    """Tests for Keys cubic convolution."""

    def test_integer_points(self, grid):
        assert bicubic_point(grid, 3.0, 4.0) == grid[4, 3]

    def test_reproduces_quadratic(self):
        """Keys convolution with a = -0.5 is exact for quadratics in the interior."""
        yy, xx = np.mgrid[0:20, 0:20].astype(np.float64)
        data = 0.01 * xx ** 2 + 0.02 * xx * yy - 0.03 * yy + 1.0

        x, y = 9.4, 10.65
        expected = 0.01 * x ** 2 + 0.02 * x * y - 0.03 * y + 1.0
        assert bicubic_point(data, x, y) == pytest.approx(expected, abs=1e-10)

    def test_constant_at_edge(self):
        data = np.full((10, 10), 0.3)
        assert bicubic_point(data, -0.5, 9.5) == pytest.approx(0.3)

    def test_batch_out_of_domain(self, grid):
        values = interpolate_bicubic_batch(grid, np.array([1.5, -2.0]), np.array([1.5, 1.5]))
        assert not np.isnan(values[0])
        assert np.isnan(values[1])


class TestBiquintic:
    """Tests for biquintic B-spline interpolation."""

    def test_form_bcoef(self):
        """Test B-spline coefficient calculation."""
        data = np.random.rand(20, 20).astype(np.float64)

        bcoef = form_bcoef(data)

        assert bcoef.shape == data.shape
        assert bcoef.dtype == np.float64

    def test_form_bcoef_empty(self):
        data = np.array([], dtype=np.float64).reshape(0, 0)
        assert form_bcoef(data).size == 0

    def test_form_bcoef_small_array(self):
        """Test B-spline with too small array."""
        data = np.random.rand(3, 3).astype(np.float64)

        with pytest.raises(ValueError):
            form_bcoef(data)

    def test_constant_coefficients(self):
        """The quintic kernel sums to one, so a constant has constant coefficients."""
        bcoef = form_bcoef(np.full((12, 12), 2.0))
        assert np.allclose(bcoef, 2.0)

    def test_padded_shape(self, grid):
        assert padded_bcoef(grid, 5).shape == (40, 50)

    def test_reproduces_samples(self, grid):
        """Summing the basis at a sample point recovers the sample."""
        border = 20
        bcoef = padded_bcoef(grid, border)

        ix, iy = 15 + border, 12 + border
        value = 0.0
        for j in range(-2, 3):
            for i in range(-2, 3):
                value += bcoef[iy + j, ix + i] * _quintic_bspline(float(i)) * _quintic_bspline(float(j))

        assert value == pytest.approx(grid[12, 15], abs=1e-10)

    def test_smooth_field(self):
        """A smooth field is reproduced closely between samples."""
        yy, xx = np.mgrid[0:50, 0:50].astype(np.float64)
        data = np.sin(xx / 6.0) * np.cos(yy / 7.0)
        border = 20
        bcoef = padded_bcoef(data, border)

        x, y = 24.3, 25.8
        value = biquintic_point(data, bcoef, border, x, y)

        assert value == pytest.approx(np.sin(x / 6.0) * np.cos(y / 7.0), abs=1e-4)

    def test_batch(self, grid):
        border = 3
        bcoef = padded_bcoef(grid, border)
        xs = np.array([0.0, 10.5, -0.9, 39.9, 40.0])
        ys = np.array([0.0, 10.5, 5.0, 29.9, 5.0])

        values = interpolate_biquintic_batch(grid, bcoef, border, xs, ys)

        assert values[0] == grid[0, 0]
        assert np.all(np.isfinite(values[:4]))
        assert np.isnan(values[4])
