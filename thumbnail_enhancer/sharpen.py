"""
Sharpening Module
3x3 convolution sharpening over the color channels
"""

import logging
from typing import Tuple, Union

import cv2
import numpy as np

from .buffer import BLOCK_ROWS, PixelBuffer

logger = logging.getLogger(__name__)

STRONG_KERNEL = np.array([
    [0, -1, 0],
    [-1, 5, -1],
    [0, -1, 0],
], dtype=np.float64)

GENTLE_KERNEL = np.array([
    [0, -0.3, 0],
    [-0.3, 2.2, -0.3],
    [0, -0.3, 0],
], dtype=np.float64)

KERNELS = {
    'strong': STRONG_KERNEL,
    'gentle': GENTLE_KERNEL,
}

# Kernel weights may carry at most this many decimal places
MAX_DECIMALS = 3


def get_kernel(kernel: Union[str, np.ndarray]) -> np.ndarray:
    """Resolve a kernel name ('strong', 'gentle') or validate a 3x3 array"""
    if isinstance(kernel, str):
        try:
            return KERNELS[kernel]
        except KeyError:
            raise ValueError(f"unknown kernel '{kernel}', expected one of {sorted(KERNELS)}") from None
    kernel = np.asarray(kernel, dtype=np.float64)
    if kernel.shape != (3, 3):
        raise ValueError(f'kernel must be 3x3, got shape {kernel.shape}')
    return kernel


def integer_weights(kernel: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Express a decimal kernel as integer weights over a power-of-ten divisor

    GENTLE_KERNEL becomes [[0, -3, 0], [-3, 22, -3], [0, -3, 0]] / 10, so
    half-way sums can be detected and rounded up exactly.

    Raises:
        ValueError: If a weight has more than MAX_DECIMALS decimal places
    """
    for decimals in range(MAX_DECIMALS + 1):
        divisor = 10 ** decimals
        scaled = kernel * divisor
        weights = np.round(scaled)
        if np.allclose(scaled, weights, rtol=0.0, atol=1e-9):
            return weights, divisor
    raise ValueError(f'kernel weights need at most {MAX_DECIMALS} decimal places')


class SharpeningFilter:
    """Convolution sharpen that leaves alpha and the outer pixel ring alone"""

    def __init__(self, kernel: Union[str, np.ndarray] = 'strong'):
        self.kernel = get_kernel(kernel)
        self.weights, self.divisor = integer_weights(self.kernel)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Sharpen buffer in place

        Every interior pixel is computed from the unmodified input, clamped and
        rounded half-up, then copied back. Pixels on the one-pixel border lack
        a full neighborhood and keep their values.

        Rows are handled in BLOCK_ROWS blocks. Each block reads one halo row
        above and below; the halo row above is kept from before the previous
        block was written back.
        """
        width, height = buffer.width, buffer.height
        if width < 3 or height < 3:
            logger.debug(f"Skipping sharpen on {width}x{height}: no interior pixels")
            return buffer

        rgb = buffer.rgb
        above = rgb[0].astype(np.float64)
        for start in range(1, height - 1, BLOCK_ROWS):
            stop = min(start + BLOCK_ROWS, height - 1)
            window = np.concatenate([above[None], rgb[start:stop + 1].astype(np.float64)])
            above = window[-2]
            rgb[start:stop, 1:-1] = self._filter_block(window)

        logger.debug(f"Sharpened {width}x{height}")
        return buffer

    def _filter_block(self, window: np.ndarray) -> np.ndarray:
        """Sharpened interior of window, as uint8 of shape (rows - 2, cols - 2, 3)"""
        # Integer samples times integer weights: float64 sums are exact
        sums = cv2.filter2D(window, -1, self.weights, borderType=cv2.BORDER_REPLICATE)
        sums = sums[1:-1, 1:-1].astype(np.int64)
        # floor(sums / divisor + 0.5) without leaving integers
        rounded = (2 * sums + self.divisor) // (2 * self.divisor)
        return np.clip(rounded, 0, 255).astype(np.uint8)


def sharpen(buffer: PixelBuffer, kernel: Union[str, np.ndarray] = 'strong') -> PixelBuffer:
    """Convenience wrapper around SharpeningFilter.apply"""
    return SharpeningFilter(kernel).apply(buffer)
