"""
Resampling Module
Aspect-preserving fit toward a target resolution and high-quality resizing
"""

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np
from skimage.transform import resize as sk_resize
from skimage.util import img_as_ubyte

from .buffer import PixelBuffer
from .config import PROCESSING_CONFIG
from .exceptions import AllocationFailure

logger = logging.getLogger(__name__)

BACKENDS = ('opencv', 'scikit')


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_target_size(source_width: int, source_height: int,
                        target_width: int, target_height: int,
                        upscale: bool = True) -> Tuple[int, int]:
    """
    Compute output dimensions for a source fitted toward a target box

    Sources that already cover the box in both dimensions, and every source
    when upscaling is disabled, keep their own dimensions. Otherwise the source
    is fitted by width, falling back to a fit by height when the fitted height
    would overflow the box.

    Args:
        source_width: Width of the (cropped) source
        source_height: Height of the (cropped) source
        target_width: Width of the target box
        target_height: Height of the target box
        upscale: Allow enlarging sources that are smaller than the box

    Returns:
        (width, height) of the output
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f'invalid source size {source_width}x{source_height}')
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f'invalid target size {target_width}x{target_height}')

    if not upscale or (source_width >= target_width and source_height >= target_height):
        return source_width, source_height

    aspect = source_width / source_height
    final_width = target_width
    final_height = _round(target_width / aspect)
    if final_height > target_height:
        final_height = target_height
        final_width = _round(target_height * aspect)

    return max(1, min(final_width, target_width)), max(1, min(final_height, target_height))


class Resampler:
    """Resize pixel buffers toward a target resolution"""

    def __init__(self, upscale: Optional[bool] = None, backend: Optional[str] = None):
        """
        Args:
            upscale: Allow enlarging small sources (default: from env or True)
            backend: 'opencv' or 'scikit' (default: from env or 'opencv')
        """
        self.upscale = upscale if upscale is not None else PROCESSING_CONFIG['upscale']
        self.backend = backend or PROCESSING_CONFIG['resample_backend']
        if self.backend not in BACKENDS:
            raise ValueError(f"unknown resample backend '{self.backend}', expected one of {BACKENDS}")

    def resample(self, buffer: PixelBuffer, target_width: int, target_height: int) -> PixelBuffer:
        """
        Fit a buffer toward target_width x target_height

        Returns:
            The same buffer when no resize is needed, otherwise a new buffer
        """
        width, height = compute_target_size(
            buffer.width, buffer.height, target_width, target_height, self.upscale
        )
        if (width, height) == buffer.size:
            logger.debug(f"Pass-through at {width}x{height} for target {target_width}x{target_height}")
            return buffer

        logger.debug(f"Resampling {buffer.width}x{buffer.height} -> {width}x{height} ({self.backend})")
        try:
            if self.backend == 'scikit':
                pixels = self._resize_scikit(buffer.pixels, width, height)
            else:
                pixels = self._resize_opencv(buffer.pixels, width, height)
        except MemoryError as exc:
            raise AllocationFailure(f'cannot allocate {width}x{height} buffer') from exc
        return PixelBuffer(pixels)

    @staticmethod
    def _resize_opencv(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        # Bicubic when enlarging, pixel-area averaging when shrinking
        enlarging = width * height > pixels.shape[1] * pixels.shape[0]
        interpolation = cv2.INTER_CUBIC if enlarging else cv2.INTER_AREA
        return cv2.resize(pixels, (width, height), interpolation=interpolation)

    @staticmethod
    def _resize_scikit(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        resized = sk_resize(
            pixels,
            (height, width, pixels.shape[2]),
            order=3,
            mode='edge',
            anti_aliasing=True,
            preserve_range=False,
        )
        return img_as_ubyte(np.clip(resized, 0.0, 1.0))


def resample(buffer: PixelBuffer, target_width: int, target_height: int,
             upscale: bool = True, backend: Optional[str] = None) -> PixelBuffer:
    """Convenience wrapper around Resampler.resample"""
    return Resampler(upscale=upscale, backend=backend).resample(buffer, target_width, target_height)
