"""
LayerMaster - File Operations Service

This module handles writing composites and generated renders to disk.
Separates file operations from UI logic.
"""

import logging
import os

from constants import MANUAL_EXPORT_FILENAME, AI_EXPORT_FILENAME
from services.image_loader import decode_image

logger = logging.getLogger(__name__)


def ensure_png_extension(filename):
    """Append .png unless the filename already ends with it (case-insensitive)"""
    if not filename.lower().endswith('.png'):
        filename += '.png'
    return filename


def default_export_path(directory, filename=MANUAL_EXPORT_FILENAME):
    """Join a directory with one of the deterministic export filenames"""
    return os.path.join(directory or '', filename)


def export_composite_png(surface, filename):
    """Save the current composite as PNG

    Args:
        surface: Composite Surface (e.g. Composition.snapshot())
        filename: Destination path; .png is appended when missing

    Returns:
        The path actually written

    Raises:
        OSError: If the file cannot be written
    """
    filename = ensure_png_extension(filename)
    _write_bytes(filename, surface.encode_png())
    logger.info("Composite exported to %s", filename)
    return filename


def save_generated_image(png_bytes, filename=AI_EXPORT_FILENAME):
    """Save a generated render as PNG

    Args:
        png_bytes: PNG bytes returned by the render service
        filename: Destination path; .png is appended when missing

    Returns:
        The path actually written

    Raises:
        DecodeError: If png_bytes is not an image
        OSError: If the file cannot be written
    """
    filename = ensure_png_extension(filename)
    # Re-encode so the file is always a real PNG
    _write_bytes(filename, decode_image(png_bytes).encode_png())
    logger.info("Generated render saved to %s", filename)
    return filename


def _write_bytes(filename, data):
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, 'wb') as f:
        f.write(data)
