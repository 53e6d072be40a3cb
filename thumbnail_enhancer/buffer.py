"""
Pixel Buffer Module
RGBA pixel storage shared by every processing stage
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from .exceptions import AllocationFailure, InvalidBufferError

CHANNELS = 4

# Rows processed per scratch block; bounds scratch memory on 8K frames
BLOCK_ROWS = 256


@dataclass(frozen=True)
class Rectangle:
    """Crop region in pixel coordinates"""
    x: int
    y: int
    width: int
    height: int

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def fits(self, width: int, height: int) -> bool:
        """True if the rectangle lies inside a width x height image"""
        return (
            self.x >= 0 and self.y >= 0 and
            self.width >= 0 and self.height >= 0 and
            self.x + self.width <= width and
            self.y + self.height <= height
        )

    def as_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


class PixelBuffer:
    """
    Interleaved RGBA image, row-major with the origin at the top-left.

    Samples live in a single uint8 array of shape (height, width, 4). Width and
    height are read from that shape, so dimensions and sample count can only
    change together.
    """

    __slots__ = ('_pixels',)

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray) or pixels.dtype != np.uint8:
            raise InvalidBufferError('pixels must be a uint8 numpy array')
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise InvalidBufferError(f'expected shape (height, width, 4), got {pixels.shape}')
        self._pixels = np.ascontiguousarray(pixels)

    @classmethod
    def from_samples(cls, width: int, height: int, samples) -> 'PixelBuffer':
        """
        Build a buffer from flat RGBA samples

        Args:
            width: Image width in pixels
            height: Image height in pixels
            samples: bytes-like or sequence of ints, length width*height*4

        Returns:
            New PixelBuffer owning a copy of the samples

        Raises:
            InvalidBufferError: If the sample count does not match the dimensions
        """
        if width < 0 or height < 0:
            raise InvalidBufferError(f'negative dimensions {width}x{height}')
        if isinstance(samples, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(samples, dtype=np.uint8)
        else:
            flat = np.asarray(samples, dtype=np.uint8).ravel()
        expected = width * height * CHANNELS
        if flat.size != expected:
            raise InvalidBufferError(
                f'{width}x{height} needs {expected} samples, got {flat.size}'
            )
        try:
            return cls(flat.reshape(height, width, CHANNELS).copy())
        except MemoryError as exc:
            raise AllocationFailure(f'cannot allocate {width}x{height} buffer') from exc

    @classmethod
    def from_array(cls, image: np.ndarray, bgr: bool = False) -> 'PixelBuffer':
        """
        Build a buffer from a grayscale, RGB or RGBA numpy image

        Args:
            image: uint8 array of shape (h, w), (h, w, 3) or (h, w, 4)
            bgr: Channel order is BGR/BGRA (OpenCV) instead of RGB/RGBA

        Returns:
            New PixelBuffer in RGBA order
        """
        image = np.asarray(image)
        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.ndim == 3 and image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA if bgr else cv2.COLOR_RGB2RGBA)
        elif image.ndim == 3 and image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA) if bgr else image.copy()
        else:
            raise InvalidBufferError(f'unsupported image shape {image.shape}')
        return cls(rgba)

    @classmethod
    def new(cls, width: int, height: int,
            fill: Sequence[int] = (0, 0, 0, 255)) -> 'PixelBuffer':
        """Allocate a buffer filled with a single RGBA color"""
        if width < 0 or height < 0:
            raise InvalidBufferError(f'negative dimensions {width}x{height}')
        try:
            pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        except MemoryError as exc:
            raise AllocationFailure(f'cannot allocate {width}x{height} buffer') from exc
        pixels[:] = np.asarray(fill, dtype=np.uint8)
        return cls(pixels)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """The (height, width, 4) sample array; writes go straight to the buffer"""
        return self._pixels

    @property
    def rgb(self) -> np.ndarray:
        """View of the color channels, alpha excluded"""
        return self._pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[:, :, 3]

    @property
    def samples(self) -> bytes:
        return self._pixels.tobytes()

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def full_rect(self) -> Rectangle:
        return Rectangle(0, 0, self.width, self.height)

    def copy(self) -> 'PixelBuffer':
        try:
            return PixelBuffer(self._pixels.copy())
        except MemoryError as exc:
            raise AllocationFailure(
                f'cannot allocate {self.width}x{self.height} buffer'
            ) from exc

    def crop(self, rect: Rectangle) -> 'PixelBuffer':
        """
        Copy a sub-region into a new, independent buffer

        Raises:
            InvalidBufferError: If the rectangle does not fit inside the buffer
        """
        if not rect.fits(self.width, self.height):
            raise InvalidBufferError(
                f'crop {rect.as_dict()} outside {self.width}x{self.height} image'
            )
        region = self._pixels[rect.y:rect.y + rect.height, rect.x:rect.x + rect.width]
        try:
            return PixelBuffer(region.copy())
        except MemoryError as exc:
            raise AllocationFailure(
                f'cannot allocate {rect.width}x{rect.height} buffer'
            ) from exc

    def to_array(self, bgr: bool = False, keep_alpha: bool = True) -> np.ndarray:
        """Export as a numpy image, optionally in OpenCV channel order"""
        if keep_alpha:
            return cv2.cvtColor(self._pixels, cv2.COLOR_RGBA2BGRA) if bgr else self._pixels.copy()
        return cv2.cvtColor(self._pixels, cv2.COLOR_RGBA2BGR if bgr else cv2.COLOR_RGBA2RGB)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and np.array_equal(self._pixels, other._pixels)

    __hash__ = None

    def __repr__(self) -> str:
        return f'PixelBuffer({self.width}x{self.height})'


def ensure_buffer(image, bgr: bool = False) -> PixelBuffer:
    """Accept either a PixelBuffer or a numpy image"""
    if isinstance(image, PixelBuffer):
        return image
    return PixelBuffer.from_array(image, bgr=bgr)


def round_half_up(values: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Round to nearest integer with halves going up, clamped to the uint8 range"""
    values = np.asarray(values)
    if not np.issubdtype(values.dtype, np.floating):
        values = values.astype(np.float64)
    rounded = np.floor(values + 0.5)
    np.clip(rounded, 0, 255, out=rounded)
    if out is not None:
        out[...] = rounded
        return out
    return rounded.astype(np.uint8)
