"""
Shared fixtures for LayerMaster tests.

Provides solid-color surfaces, encoded image bytes and compositions that
render with nearest-neighbour sampling so pixels can be compared exactly.
"""
import io
import sys
import os
import pytest

import numpy as np
from PIL import Image

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widget tests run without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def encode(image, fmt='PNG'):
    """Encode a Pillow image to bytes"""
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def checker_pixels(width, height):
    """Deterministic RGBA pattern with a distinct value per pixel"""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = (np.arange(width)[None, :] * 37) % 200
    pixels[..., 1] = (np.arange(height)[:, None] * 53) % 200
    pixels[..., 2] = 90
    pixels[..., 3] = 255
    return pixels


@pytest.fixture
def solid():
    """Factory for single-color surfaces"""
    from models.surface import Surface

    def make(width, height, color):
        return Surface.blank(width, height, color)
    return make


@pytest.fixture
def png_bytes():
    """Factory for PNG-encoded solid images"""
    def make(width=6, height=4, color=RED):
        return encode(Image.new('RGBA', (width, height), color))
    return make


@pytest.fixture
def nearest_compositor():
    from services.compositor import Compositor
    return Compositor(Image.Resampling.NEAREST)


@pytest.fixture
def composition(nearest_compositor):
    """Composition with a small viewport and exact sampling"""
    from models.composition import Composition
    return Composition(compositor=nearest_compositor, max_width=100, max_height=100)


@pytest.fixture
def loaded_composition(composition, solid):
    """Composition with a blue 100x100 background and a red 10x10 object"""
    composition.load_background(solid(100, 100, BLUE))
    composition.load_foreground(solid(10, 10, RED))
    return composition
