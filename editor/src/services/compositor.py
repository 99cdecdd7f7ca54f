"""Compositing Service.

Renders the composite of one background and one transformed foreground into
a RenderTarget, the drawable surface the rest of the application reads pixels
back from for display, export and generative rendering.

Render pipeline:
    1. Clear the target to transparent black
    2. Background stretched to fill the target, or the placeholder
    3. Foreground drawn through translate(pivot) -> rotate -> scale, centered
       on the pivot, with the transform opacity applied to that draw only
"""

import logging

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from models.surface import Surface
from utils.transform_math import (
    foreground_matrix, is_invertible, snap_near_integers, transformed_bounds,
    translation_matrix
)
from constants import (
    PLACEHOLDER_GRADIENT_TOP, PLACEHOLDER_GRADIENT_BOTTOM,
    PLACEHOLDER_GRID_SIZE, PLACEHOLDER_GRID_COLOR,
    PLACEHOLDER_TEXT_PRIMARY, PLACEHOLDER_TEXT_SECONDARY
)

logger = logging.getLogger(__name__)

# Bilinear matches how a 2D canvas smooths a transformed image
DEFAULT_RESAMPLE = Image.Resampling.BILINEAR


class RenderTarget:
    """Mutable RGBA drawing surface.

    Provides clear, stretched and transformed image draws, plus pixel
    read-back and PNG encoding. Everything draws with source-over alpha
    compositing.
    """

    def __init__(self, width: int, height: int):
        self._image = None
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple:
        return self._image.size

    def resize(self, width: int, height: int):
        """Change target dimensions. Contents are cleared."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid render target size {width}x{height}")
        self._image = Image.new('RGBA', (int(width), int(height)), (0, 0, 0, 0))

    def clear(self):
        """Reset every pixel to transparent black"""
        self._image.paste((0, 0, 0, 0), (0, 0, self.width, self.height))

    def fill_placeholder(self):
        """Draw the deterministic empty-canvas art: gradient, grid and hint text"""
        width, height = self.size

        # Vertical gradient
        t = np.linspace(0.0, 1.0, height)[:, None] if height > 1 else np.zeros((1, 1))
        top = np.array(PLACEHOLDER_GRADIENT_TOP, dtype=np.float64)
        bottom = np.array(PLACEHOLDER_GRADIENT_BOTTOM, dtype=np.float64)
        rows = top + (bottom - top) * t
        rgb = np.repeat(rows[:, None, :], width, axis=1).reshape(height, width, 3)

        # Faint grid lines
        grid_rgb = np.array(PLACEHOLDER_GRID_COLOR[:3], dtype=np.float64)
        grid_alpha = PLACEHOLDER_GRID_COLOR[3] / 255.0
        rgb[:, ::PLACEHOLDER_GRID_SIZE] = rgb[:, ::PLACEHOLDER_GRID_SIZE] * (1 - grid_alpha) + grid_rgb * grid_alpha
        rgb[::PLACEHOLDER_GRID_SIZE, :] = rgb[::PLACEHOLDER_GRID_SIZE, :] * (1 - grid_alpha) + grid_rgb * grid_alpha

        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[..., :3] = np.clip(np.round(rgb), 0, 255).astype(np.uint8)
        pixels[..., 3] = 255
        self._image = Image.fromarray(pixels)

        # Instructions
        draw = ImageDraw.Draw(self._image)
        font = ImageFont.load_default()
        self._draw_centered_text(draw, PLACEHOLDER_TEXT_PRIMARY, font, height / 2 - 25, (0x64, 0x74, 0x8b, 255))
        self._draw_centered_text(draw, PLACEHOLDER_TEXT_SECONDARY, font, height / 2 + 20, (0x47, 0x55, 0x69, 255))

    def _draw_centered_text(self, draw, text, font, center_y, fill):
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x = (self.width - (right - left)) / 2 - left
        y = center_y - (bottom - top) / 2 - top
        draw.text((x, y), text, font=font, fill=fill)

    def draw_stretched(self, surface: Surface, resample=DEFAULT_RESAMPLE):
        """Draw a surface scaled to exactly fill the target, ignoring aspect ratio"""
        if surface.is_empty:
            return
        image = surface.to_image()
        if image.size != self.size:
            image = image.resize(self.size, resample)
        self._image.alpha_composite(image)

    def draw_transformed(self, surface: Surface, matrix, opacity: float = 1.0, resample=DEFAULT_RESAMPLE):
        """Draw a surface through an affine image-to-target matrix

        Only the target region covered by the transformed surface is
        resampled. Opacity scales the drawn alpha for this call only.

        Args:
            surface: Image to draw
            matrix: 3x3 affine matrix mapping surface pixels to target pixels
            opacity: Alpha multiplier in [0, 1]
            resample: Pillow resampling filter
        """
        if surface.is_empty or opacity <= 0:
            return
        if not is_invertible(matrix):
            logger.debug("Skipping draw with degenerate transform")
            return

        min_x, min_y, max_x, max_y = transformed_bounds(matrix, surface.width, surface.height)
        x0 = max(0, int(np.floor(min_x)))
        y0 = max(0, int(np.floor(min_y)))
        x1 = min(self.width, int(np.ceil(max_x)))
        y1 = min(self.height, int(np.ceil(max_y)))
        if x1 <= x0 or y1 <= y0:
            return

        # Pillow samples output -> input, so hand it the inverse for the clipped region
        inverse = snap_near_integers(np.linalg.inv(matrix) @ translation_matrix(x0, y0))
        coeffs = tuple(float(v) for v in inverse[:2].reshape(-1))
        layer = surface.to_image().transform(
            (x1 - x0, y1 - y0),
            Image.Transform.AFFINE,
            coeffs,
            resample=resample,
            fillcolor=(0, 0, 0, 0),
        )

        if opacity < 1.0:
            pixels = np.array(layer, dtype=np.uint8)
            alpha = pixels[..., 3].astype(np.float64) * opacity
            pixels[..., 3] = np.clip(np.round(alpha), 0, 255).astype(np.uint8)
            layer = Image.fromarray(pixels)

        self._image.alpha_composite(layer, dest=(x0, y0))

    def read_pixels(self) -> np.ndarray:
        """Return a copy of the target as an HxWx4 uint8 array"""
        return np.array(self._image, dtype=np.uint8)

    def write_pixels(self, pixels: np.ndarray):
        """Replace the target contents with an HxWx4 uint8 array of the same size"""
        if pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel buffer shape {pixels.shape} does not match target {self.width}x{self.height}"
            )
        self._image = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))

    def snapshot(self) -> Surface:
        """Return the current contents as an immutable Surface"""
        return Surface(self._image)

    def encode_png(self) -> bytes:
        return self.snapshot().encode_png()


class Compositor:
    """Draws background and transformed foreground into a RenderTarget.

    Surfaces are assumed valid; loaders reject undecodable input before it
    reaches the compositor.
    """

    def __init__(self, resample=DEFAULT_RESAMPLE):
        self.resample = resample

    def render(self, target: RenderTarget, background, foreground, transform):
        """Render the full composite into target

        Args:
            target: RenderTarget to draw into
            background: Surface or None (placeholder drawn when None)
            foreground: Surface or None (skipped when None)
            transform: Transform for the foreground
        """
        target.clear()

        if background is not None:
            target.draw_stretched(background, self.resample)
        else:
            target.fill_placeholder()

        if foreground is None:
            return

        matrix = foreground_matrix(
            transform, foreground.width, foreground.height,
            target.width, target.height
        )
        target.draw_transformed(foreground, matrix, transform.opacity, self.resample)


def render_composite(background, foreground, transform, size, resample=DEFAULT_RESAMPLE) -> Surface:
    """Render a composite into a fresh target of the given size

    Returns:
        Surface with the rendered composite
    """
    target = RenderTarget(*size)
    Compositor(resample).render(target, background, foreground, transform)
    return target.snapshot()
