"""Immutable decoded image handle.

A Surface owns a private RGBA Pillow image. Pixel access always goes through
copies so a surface can be shared between the model, the renderer and worker
threads without aliasing.
"""

import io

import numpy as np
from PIL import Image


class Surface:
    """Read-only RGBA pixel buffer with integer width and height."""

    def __init__(self, image: Image.Image):
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        else:
            image = image.copy()
        self._image = image

    @classmethod
    def blank(cls, width: int, height: int, color=(0, 0, 0, 0)) -> 'Surface':
        """Create a surface filled with a single RGBA color"""
        if width < 0 or height < 0:
            raise ValueError(f"Invalid surface size {width}x{height}")
        return cls(Image.new('RGBA', (width, height), color))

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> 'Surface':
        """Create a surface from an HxWx4 uint8 array

        Raises:
            ValueError: If the array is not an RGBA pixel buffer
        """
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected HxWx4 pixel array, got shape {pixels.shape}")
        height, width = pixels.shape[:2]
        if width == 0 or height == 0:
            return cls.blank(width, height)
        return cls(Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)))

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple:
        return self._image.size

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def read_pixels(self) -> np.ndarray:
        """Return a fresh HxWx4 uint8 copy of the pixel buffer"""
        if self.is_empty:
            return np.zeros((self.height, self.width, 4), dtype=np.uint8)
        return np.array(self._image, dtype=np.uint8)

    def with_pixels(self, pixels: np.ndarray) -> 'Surface':
        """Return a new surface of the same size holding the given pixels"""
        if pixels.shape[:2] != (self.height, self.width):
            raise ValueError(
                f"Pixel buffer {pixels.shape[1]}x{pixels.shape[0]} does not match "
                f"surface {self.width}x{self.height}"
            )
        return Surface.from_array(pixels)

    def to_image(self) -> Image.Image:
        """Return a Pillow copy of the surface"""
        return self._image.copy()

    def encode_png(self) -> bytes:
        """Encode the surface as PNG bytes"""
        if self.is_empty:
            raise ValueError("Cannot encode an empty surface")
        buffer = io.BytesIO()
        self._image.save(buffer, format='PNG')
        return buffer.getvalue()

    def __eq__(self, other):
        if not isinstance(other, Surface):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.read_pixels(), other.read_pixels())

    __hash__ = None

    def __repr__(self):
        return f"Surface({self.width}x{self.height})"
