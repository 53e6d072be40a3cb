"""
Border Detection Module
Finds letterbox/pillarbox bars so they can be cropped before enhancement
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .buffer import PixelBuffer, Rectangle
from .config import BORDER_CONFIG
from .exceptions import DegenerateCrop

logger = logging.getLogger(__name__)


class BorderDetector:
    """Detect uniform dark margins around an image"""

    def __init__(self, threshold: Optional[int] = None):
        """
        Initialize border detector

        Args:
            threshold: A pixel is "black" when R, G and B are all <= threshold
                       (default: from env or 30)
        """
        threshold = threshold if threshold is not None else BORDER_CONFIG['threshold']
        if not 0 <= threshold <= 255:
            raise ValueError(f'threshold must be within 0..255, got {threshold}')
        self.threshold = int(threshold)

    def detect(self, buffer: PixelBuffer) -> Rectangle:
        """
        Locate the content region with black bars excluded

        Rows are swept from the top and bottom first. The column sweeps only
        look at rows between the horizontal bars so a letterboxed frame does
        not hide its pillarbox bars. Every sweep stops at the first line that
        contains a non-black pixel.

        Args:
            buffer: Decoded source image

        Returns:
            Rectangle of the content. Zero area when the whole image is black.
        """
        width, height = buffer.width, buffer.height
        rgb = buffer.rgb

        top = 0
        while top < height and self._is_dark(rgb[top]):
            top += 1

        bottom = 0
        while bottom < height - top and self._is_dark(rgb[height - 1 - bottom]):
            bottom += 1

        band = rgb[top:height - bottom]

        left = 0
        while left < width and self._is_dark(band[:, left]):
            left += 1

        right = 0
        while right < width - left and self._is_dark(band[:, width - 1 - right]):
            right += 1

        rect = Rectangle(
            x=left,
            y=top,
            width=width - left - right,
            height=height - top - bottom,
        )
        logger.debug(f"Borders top={top} bottom={bottom} left={left} right={right} "
                     f"for {width}x{height} image")
        return rect

    def _is_dark(self, line: np.ndarray) -> bool:
        """True if every pixel of a row or column is at or below the threshold"""
        return bool((line <= self.threshold).all())

    def crop(self, buffer: PixelBuffer) -> Tuple[PixelBuffer, Rectangle]:
        """
        Crop black bars off a buffer

        A degenerate region (image entirely black) falls back to the full image.

        Returns:
            (cropped copy, rectangle that was used)
        """
        rect = self.detect(buffer)
        if rect.is_degenerate:
            logger.debug(f"{DegenerateCrop.reason}; keeping full {buffer.width}x{buffer.height} frame")
            rect = buffer.full_rect()
        return buffer.crop(rect), rect


def detect_borders(buffer: PixelBuffer, threshold: Optional[int] = None) -> Rectangle:
    """Convenience wrapper around BorderDetector.detect"""
    return BorderDetector(threshold).detect(buffer)


def crop_borders(buffer: PixelBuffer,
                 threshold: Optional[int] = None) -> Tuple[PixelBuffer, Rectangle]:
    """Convenience wrapper around BorderDetector.crop"""
    return BorderDetector(threshold).crop(buffer)
