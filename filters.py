#!/usr/bin/env python3
"""
Blur and edge detection filters built on the convolution back-ends.

Every filter takes an ``Image`` (read/write buffer pair) and leaves its
result in ``image.buf_write``. ``convolve`` selects the execution back-end;
any callable with the ConvSeq.convolve signature works.
"""
import functools

import numpy as np

import ConvParallel
import ConvParallelAdvanced
import ConvSeq
from ConvKernels import (box_kernel_1d, box_kernel_2d, gaussian_kernel_1d,
                         gaussian_kernel_2d, sobel_kernel)
from pixel_buffer import BufferShapeError, SampleDepth

BACKENDS = {
    'sequential': ConvSeq.convolve,
    'threads': ConvParallel.convolve,
    'processes': ConvParallelAdvanced.convolve,
}

# Rec. 601 luma weights for R, G, B
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def get_backend(name, n_jobs=None):
    """Return the convolve callable registered under ``name``."""
    try:
        convolve = BACKENDS[name]
    except KeyError:
        choices = ", ".join(sorted(BACKENDS))
        raise ValueError(f"Unknown backend {name!r}, choose one of: {choices}") from None
    if n_jobs is None:
        return convolve
    return functools.partial(convolve, n_jobs=n_jobs)


def _pass(image, kernel, convolve, destination=None):
    if destination is None:
        destination = image.buf_write
    convolve(image.buf_read, destination, image.width, image.height, image.channels, kernel)


def _separable(image, row_kernel, col_kernel, convolve):
    # Blur along the x-axis
    _pass(image, row_kernel, convolve)

    # Use the previous buffer as source for the second pass
    image.commit()

    # Blur along the y-axis
    _pass(image, col_kernel, convolve)


def box_blur_1d(image, radius, convolve=ConvSeq.convolve):
    row_kernel, col_kernel = box_kernel_1d(radius)
    _separable(image, row_kernel, col_kernel, convolve)


def box_blur_2d(image, radius, convolve=ConvSeq.convolve):
    _pass(image, box_kernel_2d(radius), convolve)


def gaussian_blur_1d(image, sigma, convolve=ConvSeq.convolve):
    row_kernel, col_kernel = gaussian_kernel_1d(sigma)
    _separable(image, row_kernel, col_kernel, convolve)


def gaussian_blur_2d(image, sigma, convolve=ConvSeq.convolve):
    _pass(image, gaussian_kernel_2d(sigma), convolve)


def _check_color(channels):
    if channels < 3:
        raise BufferShapeError(f"Luma conversion needs at least 3 channels, got {channels}")


def to_luma(buffer, channels):
    """Overwrite R, G and B of every pixel in ``buffer`` with its luma, in place."""
    _check_color(channels)
    depth = SampleDepth.from_dtype(buffer.dtype)
    pixels = buffer.reshape(-1, channels)

    rgb = depth.to_float(pixels[:, :3])
    y = depth.from_float(rgb @ np.array(LUMA_WEIGHTS))

    pixels[:, :3] = y[:, np.newaxis]


def gradient_magnitude(gx, gy, out):
    """Write clamp(sqrt(gx^2 + gy^2)) elementwise into ``out``."""
    depth = SampleDepth.from_dtype(out.dtype)
    fx = depth.to_float(gx)
    fy = depth.to_float(gy)
    out[...] = depth.from_float(np.sqrt(fx ** 2 + fy ** 2))


def sobel_2d(image, sigma=None, convolve=ConvSeq.convolve):
    """Sobel edge magnitude, with an optional Gaussian pre-blur."""
    _check_color(image.channels)

    # Apply Gaussian blur if a sigma is passed
    if sigma is not None:
        gaussian_blur_1d(image, sigma, convolve)

        # Write the result to the read buffer for the gradient passes
        image.commit()

    kernel_x, kernel_y = sobel_kernel()

    # Change color to luma
    to_luma(image.buf_read, image.channels)

    # Find the gradient along the x-axis
    _pass(image, kernel_x, convolve)

    # One buffer is required for each gradient
    tmp = np.empty_like(image.buf_read)

    # Find the gradient along the y-axis
    _pass(image, kernel_y, convolve, destination=tmp)

    # Apply Pythagorean theorem to both buffers for the gradient magnitude
    gradient_magnitude(image.buf_write, tmp, image.buf_write)


FILTERS = {
    'box_blur_1d': box_blur_1d,
    'box_blur_2d': box_blur_2d,
    'gaussian_blur_1d': gaussian_blur_1d,
    'gaussian_blur_2d': gaussian_blur_2d,
    'sobel_2d': sobel_2d,
}
