"""
Tests for thumbnail_enhancer.buffer module.
"""

import numpy as np
import pytest

from thumbnail_enhancer import InvalidBufferError, PixelBuffer, Rectangle
from thumbnail_enhancer.buffer import ensure_buffer, round_half_up


class TestPixelBuffer:
    """Tests for PixelBuffer construction and invariants."""

    def test_from_samples(self):
        """Samples are laid out row-major RGBA."""
        samples = bytes(range(2 * 3 * 4))
        buffer = PixelBuffer.from_samples(2, 3, samples)

        assert buffer.width == 2
        assert buffer.height == 3
        assert buffer.samples == samples
        assert len(buffer.samples) == buffer.width * buffer.height * 4
        # Pixel (x=1, y=2) starts at ((2 * 2) + 1) * 4
        assert list(buffer.pixels[2, 1]) == [20, 21, 22, 23]

    def test_from_samples_rejects_wrong_length(self):
        """Sample count must match the dimensions."""
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_samples(4, 4, bytes(10))

    def test_invalid_array_shape(self):
        """Only (h, w, 4) uint8 arrays are accepted directly."""
        with pytest.raises(InvalidBufferError):
            PixelBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
        with pytest.raises(InvalidBufferError):
            PixelBuffer(np.zeros((4, 4, 4), dtype=np.float32))

    def test_invalid_buffer_is_value_error(self):
        """Invariant violations can be caught as ValueError."""
        with pytest.raises(ValueError):
            PixelBuffer.from_samples(1, 1, bytes(3))

    def test_from_array_rgb(self):
        """RGB arrays gain an opaque alpha channel."""
        image = np.full((5, 7, 3), (10, 20, 30), dtype=np.uint8)
        buffer = PixelBuffer.from_array(image)

        assert buffer.size == (7, 5)
        assert list(buffer.pixels[0, 0]) == [10, 20, 30, 255]

    def test_from_array_bgr(self):
        """BGR arrays are reordered to RGB."""
        image = np.full((2, 2, 3), (10, 20, 30), dtype=np.uint8)
        buffer = PixelBuffer.from_array(image, bgr=True)

        assert list(buffer.pixels[1, 1]) == [30, 20, 10, 255]

    def test_from_array_grayscale(self):
        """Grayscale arrays are replicated into the color channels."""
        image = np.full((3, 3), 77, dtype=np.uint8)
        buffer = PixelBuffer.from_array(image)

        assert list(buffer.pixels[2, 2]) == [77, 77, 77, 255]

    def test_copy_is_independent(self, random_buffer):
        """Copies never share memory with the original."""
        clone = random_buffer.copy()
        clone.pixels[:] = 0

        assert not np.shares_memory(clone.pixels, random_buffer.pixels)
        assert random_buffer.pixels.any()

    def test_crop(self, random_buffer):
        """Crop copies the requested region."""
        rect = Rectangle(2, 3, 5, 4)
        cropped = random_buffer.crop(rect)

        assert cropped.size == (5, 4)
        assert np.array_equal(cropped.pixels, random_buffer.pixels[3:7, 2:7])
        assert not np.shares_memory(cropped.pixels, random_buffer.pixels)

    def test_crop_outside_raises(self, random_buffer):
        """Rectangles reaching past the image are rejected."""
        with pytest.raises(InvalidBufferError):
            random_buffer.crop(Rectangle(10, 0, 10, 5))

    def test_equality(self, random_buffer):
        """Buffers compare by dimensions and content."""
        assert random_buffer == random_buffer.copy()
        assert random_buffer != PixelBuffer.new(16, 12)

    def test_ensure_buffer(self, random_buffer):
        """PixelBuffers pass through, arrays are converted."""
        assert ensure_buffer(random_buffer) is random_buffer
        assert ensure_buffer(np.zeros((2, 3, 3), dtype=np.uint8)).size == (3, 2)


class TestRectangle:
    """Tests for Rectangle helpers."""

    def test_degenerate(self):
        assert Rectangle(0, 0, 0, 10).is_degenerate
        assert Rectangle(0, 0, 10, 0).is_degenerate
        assert not Rectangle(0, 0, 1, 1).is_degenerate

    def test_fits(self):
        assert Rectangle(2, 2, 8, 8).fits(10, 10)
        assert not Rectangle(3, 2, 8, 8).fits(10, 10)


def test_round_half_up():
    """Halves round up and results are clamped to 0..255."""
    values = np.array([0.5, 1.49, 2.5, -3.0, 254.5, 300.0])
    assert list(round_half_up(values)) == [1, 1, 3, 0, 255, 255]
