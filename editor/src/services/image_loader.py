"""
LayerMaster - Image Loading Service

Decodes user-supplied image bytes into Surfaces. Anything Pillow can open is
accepted (PNG and JPEG at minimum); EXIF orientation is applied so photos
show upright.
"""

import io
import logging
import os

from PIL import Image, ImageOps, UnidentifiedImageError

from models.surface import Surface

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when image bytes are malformed or in an unsupported format"""


def decode_image(data: bytes) -> Surface:
    """Decode encoded image bytes into an RGBA Surface

    Args:
        data: Raw encoded image bytes

    Returns:
        Decoded Surface

    Raises:
        DecodeError: If the bytes cannot be decoded as an image
    """
    if not data:
        raise DecodeError("No image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            surface = Surface(img.convert('RGBA'))
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Unsupported or unsafe image: {e}") from e
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Malformed image data: {e}") from e

    if surface.is_empty:
        raise DecodeError("Image has no pixels")

    logger.debug("Decoded %dx%d image", surface.width, surface.height)
    return surface


def load_image_file(path) -> Surface:
    """Read and decode an image file

    Args:
        path: Path to the image file

    Returns:
        Decoded Surface

    Raises:
        DecodeError: If the file cannot be read or decoded
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise DecodeError(f"Cannot read {os.path.basename(str(path))}: {e}") from e

    surface = decode_image(data)
    logger.info("Loaded %s (%dx%d)", path, surface.width, surface.height)
    return surface
