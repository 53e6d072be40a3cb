"""
Pytest configuration and fixtures for Thumbnail Enhancer tests
"""

import io

import cv2
import numpy as np
import pytest
from PIL import Image

from thumbnail_enhancer import PixelBuffer, Tier, VariantSpec


def solid_buffer(width, height, color=(120, 120, 120), alpha=255):
    """Create a single-color RGBA buffer"""
    return PixelBuffer.new(width, height, fill=(*color, alpha))


def png_bytes(buffer):
    """Encode a buffer as PNG bytes"""
    byte_io = io.BytesIO()
    Image.fromarray(buffer.pixels).save(byte_io, format='PNG')
    return byte_io.getvalue()


@pytest.fixture
def letterboxed_frame():
    """1280x720 frame with 40-row black bands at the top and bottom"""
    image = np.zeros((720, 1280, 3), dtype=np.uint8)
    cv2.rectangle(image, (0, 40), (1279, 679), (90, 140, 200), -1)
    cv2.circle(image, (640, 360), 120, (240, 200, 40), -1)
    return PixelBuffer.from_array(image)


@pytest.fixture
def small_frame():
    """64x48 frame with 4-row black bands and some content"""
    image = np.zeros((48, 64, 3), dtype=np.uint8)
    cv2.rectangle(image, (0, 4), (63, 43), (100, 150, 200), -1)
    cv2.rectangle(image, (20, 15), (40, 30), (230, 60, 30), -1)
    return PixelBuffer.from_array(image)


@pytest.fixture
def random_buffer():
    """Deterministic noisy 16x12 RGBA buffer"""
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    return PixelBuffer(pixels)


@pytest.fixture
def small_variants():
    """Three small variants mixing tiers"""
    return [
        VariantSpec('Pro 256', 256, 144, Tier.PRO),
        VariantSpec('Standard 128', 128, 72, Tier.STANDARD),
        VariantSpec('Tiny 32', 32, 18, Tier.STANDARD, remove_border=False),
    ]
