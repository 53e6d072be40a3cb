"""
Color Adjustment Module
Brightness, contrast and saturation correction applied in place
"""

import logging
import math
from typing import Optional

import numpy as np

from .analysis import adaptive_factors, analyze_colors
from .buffer import BLOCK_ROWS, PixelBuffer, round_half_up

logger = logging.getLogger(__name__)


def check_factor(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value < 0:
        raise ValueError(f'{name} must be a finite, non-negative number, got {value}')


def boost_saturation(rgb: np.ndarray, factor: float) -> np.ndarray:
    """
    Scale HSL saturation of float RGB values (0-255 scale), capped at 1.0

    Hue and lightness are kept; RGB is rebuilt through the six hue sectors.
    Gray pixels (max == min) have no hue and are returned unchanged.

    Args:
        rgb: Float array of shape (..., 3)
        factor: Saturation multiplier

    Returns:
        New float array of the same shape
    """
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    cmax = rgb.max(axis=-1)
    cmin = rgb.min(axis=-1)
    delta = cmax - cmin
    total = cmax + cmin
    lightness = total / 2.0
    chromatic = delta > 0

    # Denominators are only zero for gray pixels, which are masked out below
    safe_delta = np.where(chromatic, delta, 1.0)
    denominator = np.where(lightness > 127.5, 510.0 - total, total)
    denominator = np.where(chromatic, denominator, 1.0)
    saturation = np.minimum(1.0, (delta / denominator) * factor)

    hue = np.where(
        cmax == r, np.mod((g - b) / safe_delta, 6.0),
        np.where(cmax == g, (b - r) / safe_delta + 2.0, (r - g) / safe_delta + 4.0)
    )

    chroma = (255.0 - np.abs(2.0 * lightness - 255.0)) * saturation
    x = chroma * (1.0 - np.abs(np.mod(hue, 2.0) - 1.0))
    m = lightness - chroma / 2.0
    zero = np.zeros_like(chroma)

    sector = np.floor(hue).astype(np.int64) % 6
    red = np.select([sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
                    [chroma, x, zero, zero, x], chroma)
    green = np.select([sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
                      [x, chroma, chroma, x, zero], zero)
    blue = np.select([sector == 0, sector == 1, sector == 2, sector == 3, sector == 4],
                     [zero, zero, x, chroma, chroma], x)

    rebuilt = np.stack([red + m, green + m, blue + m], axis=-1)
    return np.where(chromatic[..., None], rebuilt, rgb)


class ColorAdjuster:
    """Brightness/contrast/saturation correction"""

    def __init__(self, brightness_factor: float = 1.0, contrast_factor: float = 1.0,
                 saturation_factor: Optional[float] = None):
        """
        Args:
            brightness_factor: Channel multiplier (1.1 = +10%)
            contrast_factor: Stretch around mid-gray 128
            saturation_factor: Optional HSL saturation multiplier
        """
        check_factor('brightness_factor', brightness_factor)
        check_factor('contrast_factor', contrast_factor)
        check_factor('saturation_factor', saturation_factor)
        self.brightness_factor = float(brightness_factor)
        self.contrast_factor = float(contrast_factor)
        self.saturation_factor = float(saturation_factor) if saturation_factor is not None else None

    @classmethod
    def from_profile(cls, profile, buffer: Optional[PixelBuffer] = None) -> 'ColorAdjuster':
        """
        Build an adjuster for an enhancement profile

        Adaptive profiles derive brightness and contrast from the buffer's
        mean luminance, so the buffer is required for them.
        """
        if profile.adaptive:
            if buffer is None:
                raise ValueError('adaptive profiles need the buffer to analyze')
            brightness, contrast = adaptive_factors(analyze_colors(buffer))
            return cls(brightness, contrast, profile.saturation_factor)
        return cls(profile.brightness_factor, profile.contrast_factor, profile.saturation_factor)

    def transform(self, rgb: np.ndarray) -> np.ndarray:
        """
        Apply the correction to float RGB values without rounding

        Order is fixed: brightness, contrast on the brightened values, then
        saturation on the contrast-adjusted values.
        """
        values = np.clip(rgb * self.brightness_factor, 0.0, 255.0)
        values = np.clip((values - 128.0) * self.contrast_factor + 128.0, 0.0, 255.0)
        if self.saturation_factor is not None:
            values = boost_saturation(values, self.saturation_factor)
        return values

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Adjust the RGB channels of buffer in place; alpha is untouched"""
        rgb = buffer.rgb
        for start in range(0, buffer.height, BLOCK_ROWS):
            block = rgb[start:start + BLOCK_ROWS]
            adjusted = self.transform(block.astype(np.float64))
            round_half_up(adjusted, out=block)
        logger.debug(
            f"Adjusted colors brightness={self.brightness_factor} contrast={self.contrast_factor} "
            f"saturation={self.saturation_factor} on {buffer.width}x{buffer.height}"
        )
        return buffer


def adjust_colors(buffer: PixelBuffer, brightness_factor: float, contrast_factor: float,
                  saturation_factor: Optional[float] = None) -> PixelBuffer:
    """Convenience wrapper around ColorAdjuster.apply"""
    return ColorAdjuster(brightness_factor, contrast_factor, saturation_factor).apply(buffer)
