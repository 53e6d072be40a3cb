"""
Configuration Module
Loads configuration from environment variables with sensible defaults
"""

import os

from dotenv import load_dotenv

load_dotenv()


def get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_env_int(key: str, default: int) -> int:
    """Get int value from environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_bool(key: str, default: bool) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def get_env_str(key: str, default: str, choices=None) -> str:
    """Get string value from environment variable, optionally restricted to choices"""
    value = os.getenv(key)
    if value is None:
        return default
    value = value.strip().lower()
    if choices is not None and value not in choices:
        return default
    return value


# Border Detection Configuration
BORDER_CONFIG = {
    # Channels at or below this value count as "black"
    'threshold': max(0, min(255, get_env_int('BORDER_THRESHOLD', 30))),
}

# Enhancement Configuration
ENHANCEMENT_CONFIG = {
    'enabled': get_env_bool('ENHANCEMENT_ENABLED', True),
    'mode': get_env_str('ENHANCEMENT_MODE', 'exclusive', choices=('exclusive', 'tiered')),
    'profile': get_env_str('ENHANCEMENT_PROFILE', 'pro', choices=('pro', 'gentle', 'adaptive')),
    # Adaptive profile: luminance thresholds and multipliers
    'adaptive_dark_threshold': get_env_float('ADAPTIVE_DARK_THRESHOLD', 100.0),
    'adaptive_contrast_low': get_env_float('ADAPTIVE_CONTRAST_LOW', 50.0),
    'adaptive_contrast_high': get_env_float('ADAPTIVE_CONTRAST_HIGH', 200.0),
    'adaptive_brightness_boost': get_env_float('ADAPTIVE_BRIGHTNESS_BOOST', 1.2),
    'adaptive_brightness_normal': get_env_float('ADAPTIVE_BRIGHTNESS_NORMAL', 1.05),
    'adaptive_contrast_boost': get_env_float('ADAPTIVE_CONTRAST_BOOST', 1.15),
    'adaptive_contrast_normal': get_env_float('ADAPTIVE_CONTRAST_NORMAL', 1.1),
}

# Processing Configuration
PROCESSING_CONFIG = {
    'upscale': get_env_bool('UPSCALE', True),
    'resample_backend': get_env_str('RESAMPLE_BACKEND', 'opencv', choices=('opencv', 'scikit')),
    'jpeg_quality_standard': max(1, min(100, get_env_int('JPEG_QUALITY_STANDARD', 92))),
    'jpeg_quality_pro': max(1, min(100, get_env_int('JPEG_QUALITY_PRO', 95))),
    'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
}
