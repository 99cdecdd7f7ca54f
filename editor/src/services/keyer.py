"""Near-white transparency keying.

Approximates transparency for objects photographed on a white backdrop: every
pixel whose red, green and blue channels are all above the threshold gets its
alpha forced to 0. The cutoff is hard, with no soft edge.
"""

import logging

import numpy as np

from constants import KEY_THRESHOLD
from models.surface import Surface

logger = logging.getLogger(__name__)


def white_mask(pixels: np.ndarray, threshold: int = KEY_THRESHOLD) -> np.ndarray:
    """Classify pixels as near-white.

    Args:
        pixels: HxWx4 uint8 RGBA array
        threshold: Channel value each of R, G and B must strictly exceed

    Returns:
        HxW boolean mask, True where the pixel is keyed
    """
    rgb = pixels[..., :3]
    return np.all(rgb > threshold, axis=-1)


def key_out_near_white(surface: Surface, threshold: int = KEY_THRESHOLD) -> Surface:
    """Return a copy of surface with near-white pixels made fully transparent.

    Only the alpha channel of matching pixels changes; RGB and every
    non-matching pixel are left untouched. The classifier ignores alpha, so
    keying an already keyed surface gives the same result.

    Args:
        surface: Source surface (never mutated)
        threshold: Keying threshold, 240 by default

    Returns:
        New Surface of identical dimensions
    """
    if surface.is_empty:
        return Surface.blank(surface.width, surface.height)

    pixels = surface.read_pixels()
    mask = white_mask(pixels, threshold)
    pixels[..., 3][mask] = 0

    logger.debug(
        "Keyed %d of %d pixels (threshold %d)",
        int(mask.sum()), mask.size, threshold
    )
    return surface.with_pixels(pixels)
