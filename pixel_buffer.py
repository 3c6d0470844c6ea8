#!/usr/bin/env python3
"""
Flat pixel buffers and the sample conversion contract.

A buffer is a one-dimensional, row-major numpy array of unsigned samples
with length width * height * channels. Filters read from ``buf_read`` and
write to ``buf_write``; the two never share storage during a pass.
"""
from dataclasses import dataclass

import numpy as np

# Values that land this close below an integer are stored as that integer,
# so float rounding in the accumulator never costs a whole sample level.
TRUNCATION_TOLERANCE = 1e-6


class BufferShapeError(ValueError):
    """Raised when a buffer does not match its declared shape."""


class SampleDepth:
    """Convert samples to float for accumulation and back with clamp + truncate."""

    _DTYPES = {8: np.uint8, 16: np.uint16}

    def __init__(self, bits=8):
        if bits not in self._DTYPES:
            raise TypeError(f"Unsupported channel depth: {bits} bits")
        self.bits = bits
        self.dtype = np.dtype(self._DTYPES[bits])
        self.max_value = float(2 ** bits - 1)

    @classmethod
    def from_dtype(cls, dtype):
        dtype = np.dtype(dtype)
        if dtype.kind != 'u':
            raise TypeError(f"Unsupported sample type: {dtype}")
        return cls(dtype.itemsize * 8)

    def to_float(self, samples):
        return np.asarray(samples, dtype=np.float64)

    def from_float(self, values):
        # Clamp to the representable range, then truncate toward zero
        clamped = np.clip(np.asarray(values, dtype=np.float64) + TRUNCATION_TOLERANCE,
                          0.0, self.max_value)
        return np.floor(clamped).astype(self.dtype)

    def __repr__(self):
        return f"SampleDepth(bits={self.bits})"


def check_buffer(buf, width, height, channels, name="buffer"):
    if buf.ndim != 1:
        raise BufferShapeError(f"{name} must be one-dimensional, got shape {buf.shape}")
    if not buf.flags.c_contiguous:
        raise BufferShapeError(f"{name} must be contiguous")
    expected = width * height * channels
    if buf.size != expected:
        raise BufferShapeError(
            f"{name} has {buf.size} samples, expected {width}x{height}x{channels} = {expected}")


def check_buffers(source, destination, width, height, channels):
    """Validate a source/destination pair against the declared image shape."""
    if width < 0 or height < 0 or channels < 1:
        raise BufferShapeError(f"Invalid image shape {width}x{height}x{channels}")
    check_buffer(source, width, height, channels, "source")
    check_buffer(destination, width, height, channels, "destination")
    if source.dtype != destination.dtype:
        raise BufferShapeError(
            f"source ({source.dtype}) and destination ({destination.dtype}) sample types differ")
    return SampleDepth.from_dtype(destination.dtype)


@dataclass
class Image:
    """A read/write buffer pair describing one image being filtered."""
    buf_read: np.ndarray
    buf_write: np.ndarray
    width: int
    height: int
    channels: int

    def __post_init__(self):
        check_buffers(self.buf_read, self.buf_write, self.width, self.height, self.channels)

    @classmethod
    def from_array(cls, arr):
        """Build an Image from an (h, w, c) or (h, w) array; both buffers start as copies."""
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise BufferShapeError(f"Expected an (h, w, c) array, got shape {arr.shape}")
        h, w, c = arr.shape
        flat = np.ascontiguousarray(arr).reshape(-1)
        return cls(flat.copy(), flat.copy(), w, h, c)

    def commit(self):
        """Copy the last pass output into the read buffer for the next pass."""
        np.copyto(self.buf_read, self.buf_write)

    def result(self):
        """The write buffer as an (h, w, c) view."""
        return self.buf_write.reshape(self.height, self.width, self.channels)
