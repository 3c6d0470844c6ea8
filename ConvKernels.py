#!/usr/bin/env python3
"""
Kernel presets and generators for the convolution filters.

Blur kernels are normalized to sum to 1 so they preserve overall brightness.
Sobel kernels are fixed integer gradients and are left unnormalized.
"""
import math
import numbers

import numpy as np


class InvalidParameterError(ValueError):
    """Raised when a filter parameter cannot produce a kernel."""


# Sobel presets (correlation order: kernel[i][j] samples source (x+j-1, y+i-1))
KERNEL_SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=float)
KERNEL_SOBEL_Y = np.array([[1, 2, 1], [0, 0, 0], [-1, -2, -1]], dtype=float)


def _check_sigma(sigma):
    if not sigma > 0:
        raise InvalidParameterError("sigma should be > 0")
    if not math.isfinite(sigma):
        raise InvalidParameterError(f"sigma should be finite, got {sigma}")


def _check_radius(radius):
    if isinstance(radius, bool) or not isinstance(radius, numbers.Integral):
        raise InvalidParameterError(f"radius should be a non-negative integer, got {radius!r}")
    if radius < 0:
        raise InvalidParameterError(f"radius should be >= 0, got {radius}")


def kernel_radius(sigma):
    """Half-width of the Gaussian kernel: 3 * ceil(sigma) covers >99% of the mass."""
    _check_sigma(sigma)
    return int(math.ceil(sigma)) * 3


def gaussian_kernel_1d(sigma):
    """Return the normalized (row, column) Gaussian kernels for a separable blur."""
    radius = kernel_radius(sigma)
    x = np.arange(-radius, radius + 1, dtype=float)

    row = np.exp(-(x ** 2) / (2.0 * sigma ** 2))

    # Normalize the kernel values to have a sum of 1
    row = (row / row.sum()).reshape(1, -1)
    return row, row.T.copy()


def gaussian_kernel_2d(sigma):
    """Return the normalized full 2D Gaussian kernel."""
    radius = kernel_radius(sigma)
    x = np.arange(-radius, radius + 1, dtype=float)
    xx, yy = np.meshgrid(x, x)

    kernel = np.exp(-(xx ** 2 + yy ** 2) / (2.0 * sigma ** 2))

    return kernel / kernel.sum()


def box_kernel_1d(radius):
    """Return the (row, column) box kernels, every weight 1 / (2r+1)."""
    _check_radius(radius)
    size = 2 * radius + 1
    row = np.full((1, size), 1.0 / size)
    return row, row.T.copy()


def box_kernel_2d(radius):
    """Return the square box kernel, every weight 1 / (2r+1)^2."""
    _check_radius(radius)
    size = 2 * radius + 1
    return np.full((size, size), 1.0 / (size * size))


def sobel_kernel():
    """Return fresh copies of the horizontal and vertical Sobel kernels."""
    return KERNEL_SOBEL_X.copy(), KERNEL_SOBEL_Y.copy()
