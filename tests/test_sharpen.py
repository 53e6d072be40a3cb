"""
Tests for thumbnail_enhancer.sharpen module.
"""

import numpy as np
import pytest

from thumbnail_enhancer import GENTLE_KERNEL, STRONG_KERNEL, PixelBuffer, SharpeningFilter, sharpen
from thumbnail_enhancer.buffer import BLOCK_ROWS
from thumbnail_enhancer.sharpen import get_kernel, integer_weights

from conftest import solid_buffer


def reference_sharpen(pixels, weights, divisor):
    """Straightforward 3x3 convolution over the interior, in exact integers"""
    result = pixels.copy()
    height, width = pixels.shape[:2]
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            for c in range(3):
                total = 0
                for ky in range(-1, 2):
                    for kx in range(-1, 2):
                        total += int(pixels[y + ky, x + kx, c]) * weights[ky + 1][kx + 1]
                # Halves round up
                result[y, x, c] = min(255, max(0, (2 * total + divisor) // (2 * divisor)))
    return result


def gentle_cross(center, up, left, right, down):
    """3x3 buffer with the given center and edge neighbors, corners zero"""
    pixels = np.zeros((3, 3, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255
    pixels[1, 1, :3] = center
    pixels[0, 1, :3] = up
    pixels[1, 0, :3] = left
    pixels[1, 2, :3] = right
    pixels[2, 1, :3] = down
    return PixelBuffer(pixels)


class TestKernels:
    """Tests for kernel presets."""

    def test_kernels_sum_to_one(self):
        assert STRONG_KERNEL.sum() == pytest.approx(1.0)
        assert GENTLE_KERNEL.sum() == pytest.approx(1.0)

    def test_get_kernel(self):
        assert get_kernel('strong') is STRONG_KERNEL
        assert get_kernel('gentle') is GENTLE_KERNEL
        with pytest.raises(ValueError):
            get_kernel('blur')
        with pytest.raises(ValueError):
            get_kernel(np.ones((5, 5)))


class TestSharpeningFilter:
    """Tests for SharpeningFilter.apply."""

    @pytest.mark.parametrize("kernel", ['strong', 'gentle'])
    def test_flat_image_unchanged(self, kernel):
        """Kernels summing to one leave uniform regions alone."""
        buffer = solid_buffer(12, 9, color=(37, 140, 222))
        before = buffer.copy()

        sharpen(buffer, kernel)

        assert buffer == before

    @pytest.mark.parametrize("kernel", ['strong', 'gentle'])
    def test_border_ring_untouched(self, random_buffer, kernel):
        """The one-pixel outer ring keeps its original values."""
        before = random_buffer.pixels.copy()

        sharpen(random_buffer, kernel)

        after = random_buffer.pixels
        assert np.array_equal(after[0], before[0])
        assert np.array_equal(after[-1], before[-1])
        assert np.array_equal(after[:, 0], before[:, 0])
        assert np.array_equal(after[:, -1], before[:, -1])

    @pytest.mark.parametrize("weights, divisor, kernel", [
        ([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], 1, 'strong'),
        ([[0, -3, 0], [-3, 22, -3], [0, -3, 0]], 10, 'gentle'),
    ])
    def test_matches_reference_convolution(self, random_buffer, weights, divisor, kernel):
        """Interior pixels are computed from unmodified neighbors."""
        expected = reference_sharpen(random_buffer.pixels, weights, divisor)

        SharpeningFilter(kernel).apply(random_buffer)

        assert np.array_equal(random_buffer.pixels, expected)

    def test_gentle_matches_reference_across_blocks(self):
        """Row blocks read the original rows above them, not sharpened ones."""
        rng = np.random.default_rng(11)
        pixels = rng.integers(0, 256, size=(BLOCK_ROWS * 2 + 5, 6, 4), dtype=np.uint8)
        buffer = PixelBuffer(pixels.copy())
        expected = reference_sharpen(pixels, [[0, -3, 0], [-3, 22, -3], [0, -3, 0]], 10)

        sharpen(buffer, 'gentle')

        assert np.array_equal(buffer.pixels, expected)

    @pytest.mark.parametrize("center, neighbors, expected", [
        # 2.2*5 - 0.3*35 = 0.5
        (5, (8, 9, 9, 9), 1),
        # 2.2*100 - 0.3*(4*75 + 5) = 128.5
        (100, (75, 75, 75, 80), 129),
        # 2.2*10 - 0.3*(4*70 + 5) = -63.5, clamped
        (10, (70, 70, 70, 75), 0),
    ])
    def test_gentle_ties_round_up(self, center, neighbors, expected):
        """Exact halves from fractional weights round up."""
        buffer = gentle_cross(center, *neighbors)

        sharpen(buffer, 'gentle')

        assert list(buffer.pixels[1, 1, :3]) == [expected] * 3

    def test_integer_weights(self):
        weights, divisor = integer_weights(GENTLE_KERNEL)

        assert divisor == 10
        assert weights.tolist() == [[0, -3, 0], [-3, 22, -3], [0, -3, 0]]
        assert integer_weights(STRONG_KERNEL)[1] == 1

    def test_kernel_with_too_many_decimals(self):
        kernel = np.zeros((3, 3))
        kernel[1, 1] = 1.00005

        with pytest.raises(ValueError):
            SharpeningFilter(kernel)

    def test_strong_kernel_value(self):
        """Center 100 with neighbors 80: 5*100 - 4*80 = 180."""
        buffer = solid_buffer(3, 3, color=(80, 80, 80))
        buffer.pixels[1, 1, :3] = 100

        sharpen(buffer, 'strong')

        assert list(buffer.pixels[1, 1, :3]) == [180, 180, 180]

    def test_gentle_kernel_value(self):
        """Center 100 with neighbors 80: 2.2*100 - 1.2*80 = 124."""
        buffer = solid_buffer(3, 3, color=(80, 80, 80))
        buffer.pixels[1, 1, :3] = 100

        sharpen(buffer, 'gentle')

        assert list(buffer.pixels[1, 1, :3]) == [124, 124, 124]

    def test_output_is_clamped(self):
        """Overshoot is clamped to the 0..255 range."""
        buffer = solid_buffer(3, 3, color=(200, 0, 0))
        buffer.pixels[1, 1, :3] = (250, 10, 0)
        buffer.pixels[0, 1, 1] = 255

        sharpen(buffer, 'strong')

        # R: 1250 - 800, G: 50 - 255, B: 0
        assert list(buffer.pixels[1, 1, :3]) == [255, 0, 0]

    def test_alpha_untouched(self, random_buffer):
        before = random_buffer.alpha.copy()

        sharpen(random_buffer)

        assert np.array_equal(random_buffer.alpha, before)

    @pytest.mark.parametrize("size", [(2, 5), (5, 2), (1, 1)])
    def test_tiny_images_unchanged(self, size):
        """Images without interior pixels are left as they are."""
        rng = np.random.default_rng(3)
        pixels = rng.integers(0, 256, size=(size[1], size[0], 4), dtype=np.uint8)
        buffer = PixelBuffer(pixels.copy())

        sharpen(buffer)

        assert np.array_equal(buffer.pixels, pixels)
