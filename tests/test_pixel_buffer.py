"""Tests for the Image buffer pair and the sample conversion contract."""

import numpy as np
import pytest

from pixel_buffer import BufferShapeError, Image, SampleDepth, check_buffers


class TestSampleDepth:
    def test_from_dtype(self) -> None:
        assert SampleDepth.from_dtype(np.uint8).bits == 8
        assert SampleDepth.from_dtype(np.uint16).max_value == 65535.0

    @pytest.mark.parametrize("dtype", [np.float32, np.int16, np.uint64])
    def test_unsupported_dtype(self, dtype) -> None:
        with pytest.raises(TypeError):
            SampleDepth.from_dtype(dtype)

    def test_round_trip_8bit(self) -> None:
        depth = SampleDepth(8)
        samples = np.arange(256, dtype=np.uint8)
        np.testing.assert_array_equal(depth.from_float(depth.to_float(samples)), samples)

    def test_clamps_low(self) -> None:
        values = [-0.0, -0.25, -0.5, -1.0, -1.5, -2.0, -1100.0]
        out = SampleDepth(8).from_float(values)
        assert out.dtype == np.uint8
        assert np.all(out == 0)

    def test_clamps_high(self) -> None:
        values = [255.0, 255.25, 255.5, 256.0, 300.0, 2000.0, 5000.0]
        assert np.all(SampleDepth(8).from_float(values) == 255)
        assert np.all(SampleDepth(16).from_float([70000.0]) == 65535)

    def test_truncates(self) -> None:
        out = SampleDepth(8).from_float([0.9, 1.5, 84.7, 254.99])
        np.testing.assert_array_equal(out, [0, 1, 84, 254])

    def test_absorbs_float_rounding(self) -> None:
        # 85 computed through thirds lands just below the integer
        assert SampleDepth(8).from_float([84.99999999999999])[0] == 85


class TestCheckBuffers:
    def test_returns_depth(self) -> None:
        buf = np.zeros(12, dtype=np.uint16)
        depth = check_buffers(buf, buf.copy(), 2, 2, 3)
        assert depth.bits == 16

    def test_length_mismatch(self) -> None:
        with pytest.raises(BufferShapeError, match="source has 11 samples"):
            check_buffers(np.zeros(11, np.uint8), np.zeros(12, np.uint8), 2, 2, 3)
        with pytest.raises(BufferShapeError, match="destination"):
            check_buffers(np.zeros(12, np.uint8), np.zeros(9, np.uint8), 2, 2, 3)

    def test_not_flat(self) -> None:
        with pytest.raises(BufferShapeError, match="one-dimensional"):
            check_buffers(np.zeros((2, 6), np.uint8), np.zeros(12, np.uint8), 2, 2, 3)

    def test_dtype_mismatch(self) -> None:
        with pytest.raises(BufferShapeError, match="sample types differ"):
            check_buffers(np.zeros(12, np.uint8), np.zeros(12, np.uint16), 2, 2, 3)

    def test_non_contiguous(self) -> None:
        strided = np.zeros(24, np.uint8)[::2]
        with pytest.raises(BufferShapeError, match="contiguous"):
            check_buffers(strided, np.zeros(12, np.uint8), 2, 2, 3)


class TestImage:
    def test_from_array(self) -> None:
        arr = np.arange(24, dtype=np.uint8).reshape(2, 4, 3)
        image = Image.from_array(arr)
        assert (image.width, image.height, image.channels) == (4, 2, 3)
        np.testing.assert_array_equal(image.buf_read, arr.reshape(-1))
        assert not np.shares_memory(image.buf_read, image.buf_write)
        assert not np.shares_memory(image.buf_read, arr)

    def test_from_grayscale_array(self) -> None:
        image = Image.from_array(np.zeros((3, 5), dtype=np.uint8))
        assert image.channels == 1

    def test_rejects_bad_shape(self) -> None:
        with pytest.raises(BufferShapeError):
            Image(np.zeros(10, np.uint8), np.zeros(10, np.uint8), 2, 2, 3)

    def test_commit_copies_write_into_read(self) -> None:
        image = Image.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
        image.buf_write[:] = 7
        image.commit()
        assert np.all(image.buf_read == 7)
        assert not np.shares_memory(image.buf_read, image.buf_write)

    def test_result_is_view(self) -> None:
        image = Image.from_array(np.zeros((2, 3, 4), dtype=np.uint8))
        result = image.result()
        assert result.shape == (2, 3, 4)
        assert np.shares_memory(result, image.buf_write)
