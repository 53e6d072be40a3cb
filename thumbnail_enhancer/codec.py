"""
Codec Module
Decodes source images into pixel buffers and encodes finished variants
"""

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .buffer import PixelBuffer
from .config import PROCESSING_CONFIG
from .exceptions import AllocationFailure, DecodeFailure, EncodeFailure
from .variants import Tier, VariantSpec


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decode encoded image bytes (JPEG, PNG, WebP...) into an RGBA buffer

    Raises:
        DecodeFailure: If the bytes are empty or not a readable image
    """
    if not data:
        raise DecodeFailure('source image is empty')
    try:
        with Image.open(io.BytesIO(data)) as pil_image:
            rgba = pil_image.convert('RGBA')
            return PixelBuffer(np.array(rgba, dtype=np.uint8))
    except MemoryError as exc:
        raise AllocationFailure('cannot allocate decoded image') from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeFailure(f'source image could not be decoded: {exc}') from exc


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """Read and decode an image file"""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeFailure(f'cannot read {path}: {exc}') from exc
    return decode_image(data)


def encode_jpeg(buffer: PixelBuffer, quality: int = 95) -> bytes:
    """
    Encode a buffer as JPEG; alpha is discarded

    Args:
        buffer: Image to encode
        quality: JPEG quality 1-100

    Returns:
        Encoded bytes

    Raises:
        EncodeFailure: If Pillow cannot encode the buffer
    """
    if buffer.is_empty:
        raise EncodeFailure('cannot encode an empty image')
    try:
        pil_image = Image.fromarray(buffer.to_array(keep_alpha=False))
        byte_io = io.BytesIO()
        pil_image.save(byte_io, format='JPEG', quality=int(quality))
        return byte_io.getvalue()
    except (OSError, ValueError) as exc:
        raise EncodeFailure(f'JPEG encoding failed: {exc}') from exc


class JpegEncoder:
    """Encode variants at a tier-dependent JPEG quality"""

    def __init__(self, quality_standard: Optional[int] = None, quality_pro: Optional[int] = None):
        self.qualities = {
            Tier.STANDARD: quality_standard or PROCESSING_CONFIG['jpeg_quality_standard'],
            Tier.PRO: quality_pro or PROCESSING_CONFIG['jpeg_quality_pro'],
        }

    def quality_for(self, variant: VariantSpec) -> int:
        return self.qualities[variant.tier]

    def __call__(self, buffer: PixelBuffer, variant: VariantSpec) -> bytes:
        return encode_jpeg(buffer, self.quality_for(variant))
