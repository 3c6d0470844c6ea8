"""Tests for the kernel generators."""

import numpy as np
import pytest

from ConvKernels import (
    InvalidParameterError,
    box_kernel_1d,
    box_kernel_2d,
    gaussian_kernel_1d,
    gaussian_kernel_2d,
    kernel_radius,
    sobel_kernel,
)

SIGMAS = [0.1, 0.5, 0.84089642, 1.0, 2.3, 5.0]


class TestGaussianKernel1D:
    def test_known_values(self) -> None:
        expect = [0.00081721, 0.02804152, 0.23392642, 0.47442967,
                  0.23392642, 0.02804152, 0.00081721]
        row, _ = gaussian_kernel_1d(0.84089642)
        assert row.shape == (1, 7)
        np.testing.assert_allclose(row[0], expect, atol=1e-8)

    @pytest.mark.parametrize("sigma", SIGMAS)
    def test_sums_to_one(self, sigma: float) -> None:
        row, col = gaussian_kernel_1d(sigma)
        assert row.sum() == pytest.approx(1.0, abs=1e-8)
        assert col.sum() == pytest.approx(1.0, abs=1e-8)

    @pytest.mark.parametrize("sigma", SIGMAS)
    def test_symmetric(self, sigma: float) -> None:
        row, _ = gaussian_kernel_1d(sigma)
        np.testing.assert_array_equal(row[0], row[0][::-1])

    def test_column_is_transpose(self) -> None:
        row, col = gaussian_kernel_1d(2.0)
        assert col.shape == (row.shape[1], 1)
        np.testing.assert_array_equal(col, row.T)

    @pytest.mark.parametrize("sigma,radius", [(0.3, 3), (1.0, 3), (1.5, 6), (3.0, 9)])
    def test_radius_rule(self, sigma: float, radius: int) -> None:
        assert kernel_radius(sigma) == radius
        row, _ = gaussian_kernel_1d(sigma)
        assert row.shape[1] == 2 * radius + 1

    @pytest.mark.parametrize("sigma", [0.0, -1.0, float("nan")])
    def test_invalid_sigma_raises(self, sigma: float) -> None:
        with pytest.raises(InvalidParameterError, match="sigma should be > 0"):
            gaussian_kernel_1d(sigma)

    def test_infinite_sigma_raises(self) -> None:
        with pytest.raises(InvalidParameterError, match="sigma should be finite"):
            gaussian_kernel_1d(float("inf"))
        with pytest.raises(InvalidParameterError, match="sigma should be finite"):
            kernel_radius(float("inf"))


class TestGaussianKernel2D:
    def test_known_values(self) -> None:
        kernel = gaussian_kernel_2d(0.84089642)
        assert kernel.shape == (7, 7)
        assert kernel[3, 3] == pytest.approx(0.22508351, abs=1e-8)
        assert kernel[0, 0] == pytest.approx(0.00000066, abs=1e-8)
        assert kernel[2, 3] == pytest.approx(0.11098163, abs=1e-8)
        assert kernel[1, 2] == pytest.approx(0.00655965, abs=1e-8)

    @pytest.mark.parametrize("sigma", SIGMAS)
    def test_sums_to_one(self, sigma: float) -> None:
        assert gaussian_kernel_2d(sigma).sum() == pytest.approx(1.0, abs=1e-8)

    @pytest.mark.parametrize("sigma", SIGMAS)
    def test_symmetric(self, sigma: float) -> None:
        kernel = gaussian_kernel_2d(sigma)
        np.testing.assert_array_equal(kernel, kernel.T)

    @pytest.mark.parametrize("sigma", SIGMAS)
    def test_outer_product_of_1d(self, sigma: float) -> None:
        row, col = gaussian_kernel_1d(sigma)
        np.testing.assert_allclose(col @ row, gaussian_kernel_2d(sigma), atol=1e-12)

    @pytest.mark.parametrize("sigma", [0.0, -0.5])
    def test_invalid_sigma_raises(self, sigma: float) -> None:
        with pytest.raises(InvalidParameterError, match="sigma should be > 0"):
            gaussian_kernel_2d(sigma)

    def test_infinite_sigma_raises(self) -> None:
        with pytest.raises(InvalidParameterError, match="sigma should be finite"):
            gaussian_kernel_2d(float("inf"))


class TestBoxKernel:
    @pytest.mark.parametrize("radius", [0, 1, 2, 5])
    def test_1d_weights(self, radius: int) -> None:
        row, col = box_kernel_1d(radius)
        count = 2 * radius + 1
        assert row.shape == (1, count)
        assert col.shape == (count, 1)
        assert np.all(row == 1.0 / count)
        assert np.all(col == 1.0 / count)

    @pytest.mark.parametrize("radius", [0, 1, 2, 5])
    def test_2d_weights(self, radius: int) -> None:
        kernel = box_kernel_2d(radius)
        count = (2 * radius + 1) ** 2
        assert kernel.shape == (2 * radius + 1, 2 * radius + 1)
        assert np.all(kernel == 1.0 / count)
        assert kernel.sum() == pytest.approx(1.0)

    @pytest.mark.parametrize("radius", [-1, 1.5, "2", True])
    def test_invalid_radius_raises(self, radius) -> None:
        with pytest.raises(InvalidParameterError, match="radius"):
            box_kernel_1d(radius)
        with pytest.raises(InvalidParameterError, match="radius"):
            box_kernel_2d(radius)

    def test_numpy_integer_radius(self) -> None:
        row, _ = box_kernel_1d(np.int64(2))
        assert row.shape == (1, 5)


class TestSobelKernel:
    def test_fixed_matrices(self) -> None:
        kx, ky = sobel_kernel()
        np.testing.assert_array_equal(kx, [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]])
        np.testing.assert_array_equal(ky, [[1, 2, 1], [0, 0, 0], [-1, -2, -1]])
        assert kx.dtype == np.float64
        assert kx.sum() == 0
        assert ky.sum() == 0

    def test_returns_fresh_copies(self) -> None:
        kx, _ = sobel_kernel()
        kx[0, 0] = 100
        kx2, _ = sobel_kernel()
        assert kx2[0, 0] == -1

    def test_invalid_parameter_is_value_error(self) -> None:
        assert issubclass(InvalidParameterError, ValueError)
