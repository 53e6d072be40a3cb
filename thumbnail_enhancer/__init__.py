"""
Thumbnail Enhancer
Extracts resolution variants of an image with black-bar removal, aspect-preserving
upscaling and a deterministic color/sharpening enhancement pass.

Usage:
    from thumbnail_enhancer import VariantPipeline, DEFAULT_VARIANTS, load_image

    pipeline = VariantPipeline()
    manifest = pipeline.run(load_image('thumbnail.jpg'), DEFAULT_VARIANTS)
"""

from .borders import BorderDetector, crop_borders, detect_borders
from .buffer import PixelBuffer, Rectangle
from .codec import JpegEncoder, decode_image, encode_jpeg, load_image
from .color import ColorAdjuster, adjust_colors
from .exceptions import (
    AllocationFailure,
    DecodeFailure,
    DegenerateCrop,
    EncodeFailure,
    InvalidBufferError,
    ProcessingError,
)
from .pipeline import PipelineManifest, VariantPipeline, VariantResult
from .profiles import ADAPTIVE, BASIC, GENTLE, PLAIN, PRO, EnhancementProfile, get_profile
from .resample import Resampler, compute_target_size, resample
from .sharpen import GENTLE_KERNEL, STRONG_KERNEL, SharpeningFilter, sharpen
from .variants import DEFAULT_VARIANTS, Tier, VariantSpec

__version__ = '1.0.0'
__all__ = [
    'PixelBuffer',
    'Rectangle',
    'BorderDetector',
    'detect_borders',
    'crop_borders',
    'Resampler',
    'compute_target_size',
    'resample',
    'ColorAdjuster',
    'adjust_colors',
    'SharpeningFilter',
    'sharpen',
    'STRONG_KERNEL',
    'GENTLE_KERNEL',
    'EnhancementProfile',
    'PRO',
    'GENTLE',
    'ADAPTIVE',
    'BASIC',
    'PLAIN',
    'get_profile',
    'VariantSpec',
    'Tier',
    'DEFAULT_VARIANTS',
    'VariantPipeline',
    'VariantResult',
    'PipelineManifest',
    'JpegEncoder',
    'decode_image',
    'encode_jpeg',
    'load_image',
    'ProcessingError',
    'DecodeFailure',
    'DegenerateCrop',
    'AllocationFailure',
    'EncodeFailure',
    'InvalidBufferError',
]
