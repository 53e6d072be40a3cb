"""
Color Analysis Module
Measures image luminance to pick adaptive enhancement factors
"""

from typing import Dict, Optional, Tuple

import numpy as np

from .buffer import PixelBuffer
from .config import ENHANCEMENT_CONFIG

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def analyze_colors(buffer: PixelBuffer, config: Optional[Dict] = None) -> Dict:
    """
    Analyze the brightness of an image

    Args:
        buffer: Image to analyze
        config: Threshold overrides (default: ENHANCEMENT_CONFIG)

    Returns:
        dict with:
        - average_brightness: Mean BT.601 luminance (0-255)
        - needs_brightness_boost: Image is darker than the dark threshold
        - needs_contrast_boost: Luminance sits in the mid range
    """
    config = config or ENHANCEMENT_CONFIG
    if buffer.is_empty:
        average = 0.0
    else:
        # Mean of per-channel means equals the mean luminance and avoids a full float copy
        channel_means = buffer.rgb.reshape(-1, 3).mean(axis=0)
        average = float(np.dot(channel_means, LUMA_WEIGHTS))

    low = config['adaptive_contrast_low']
    high = config['adaptive_contrast_high']
    return {
        'average_brightness': average,
        'needs_brightness_boost': average < config['adaptive_dark_threshold'],
        'needs_contrast_boost': low < average < high,
    }


def adaptive_factors(analysis: Dict, config: Optional[Dict] = None) -> Tuple[float, float]:
    """Map an analyze_colors() result to (brightness_factor, contrast_factor)"""
    config = config or ENHANCEMENT_CONFIG
    brightness = (config['adaptive_brightness_boost'] if analysis['needs_brightness_boost']
                  else config['adaptive_brightness_normal'])
    contrast = (config['adaptive_contrast_boost'] if analysis['needs_contrast_boost']
                else config['adaptive_contrast_normal'])
    return brightness, contrast
