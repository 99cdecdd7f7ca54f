"""
LayerMaster - Transform Math Utilities

This module provides the coordinate-space math behind foreground placement:
3x3 affine matrices, the foreground local-to-canvas matrix, bounding boxes
and canvas/widget size fitting.

These pure math functions have no UI dependencies. Canvas space is y-down,
so a positive rotation turns clockwise on screen.
"""

import math

import numpy as np


def translation_matrix(tx, ty):
    """3x3 affine matrix translating by (tx, ty)"""
    return np.array([
        [1.0, 0.0, tx],
        [0.0, 1.0, ty],
        [0.0, 0.0, 1.0],
    ])


def snap_near_integers(matrix, tolerance=1e-9):
    """Round entries within tolerance of a whole number to that number

    Quarter-turn rotations must sample exact pixel centers; cos(90) is 6e-17.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    rounded = np.round(matrix)
    return np.where(np.abs(matrix - rounded) <= tolerance, rounded, matrix)


def rotation_matrix(degrees):
    """3x3 affine matrix rotating by degrees (clockwise in y-down space)"""
    rad = math.radians(degrees)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    return snap_near_integers([
        [cos_r, -sin_r, 0.0],
        [sin_r, cos_r, 0.0],
        [0.0, 0.0, 1.0],
    ])


def scale_matrix(sx, sy=None):
    """3x3 affine matrix scaling by (sx, sy); uniform when sy is omitted"""
    if sy is None:
        sy = sx
    return np.array([
        [sx, 0.0, 0.0],
        [0.0, sy, 0.0],
        [0.0, 0.0, 1.0],
    ])


def foreground_matrix(transform, fg_width, fg_height, canvas_width, canvas_height):
    """Build the matrix mapping foreground image pixels to canvas pixels

    Composition order is fixed: translate to the pivot, rotate, scale, then
    offset by half the image size so the image center sits on the pivot.

    Args:
        transform: Transform with x, y, scale and rotation
        fg_width: Foreground width in image pixels
        fg_height: Foreground height in image pixels
        canvas_width: Target width in pixels
        canvas_height: Target height in pixels

    Returns:
        3x3 numpy affine matrix
    """
    pivot_x = canvas_width / 2 + transform.x
    pivot_y = canvas_height / 2 + transform.y
    return (
        translation_matrix(pivot_x, pivot_y)
        @ rotation_matrix(transform.rotation)
        @ scale_matrix(transform.scale)
        @ translation_matrix(-fg_width / 2, -fg_height / 2)
    )


def is_invertible(matrix, eps=1e-12):
    """Check that an affine matrix has a non-degenerate linear part"""
    return abs(np.linalg.det(matrix[:2, :2])) > eps


def transform_point(matrix, x, y):
    """Apply a 3x3 affine matrix to a point

    Returns:
        Tuple of (x, y)
    """
    px, py, _ = matrix @ np.array([x, y, 1.0])
    return float(px), float(py)


def transformed_corners(matrix, width, height):
    """Map the corners of a width x height rectangle through a matrix

    Returns:
        List of (x, y) in order top-left, top-right, bottom-right, bottom-left
    """
    corners = [(0.0, 0.0), (width, 0.0), (width, height), (0.0, height)]
    return [transform_point(matrix, cx, cy) for cx, cy in corners]


def transformed_bounds(matrix, width, height):
    """Calculate the axis-aligned bounding box of a transformed rectangle

    Returns:
        Tuple of (min_x, min_y, max_x, max_y)
    """
    points = transformed_corners(matrix, width, height)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def fit_canvas_size(image_width, image_height, max_width, max_height):
    """Fit a canvas with the image's aspect ratio inside a viewport cap

    Width starts at max_width; if the resulting height is too tall the
    height is capped and width follows the aspect ratio.

    Args:
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        max_width: Viewport width cap
        max_height: Viewport height cap

    Returns:
        Tuple of (width, height) in whole pixels, each at least 1

    Raises:
        ValueError: If the image has no area
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Cannot fit canvas to {image_width}x{image_height} image")

    aspect = image_width / image_height
    width = max_width
    height = width / aspect
    if height > max_height:
        height = max_height
        width = height * aspect

    return max(1, int(round(width))), max(1, int(round(height)))


def fit_rect(content_width, content_height, area_width, area_height, allow_upscale=False):
    """Center content inside an area, scaled down to fit

    Returns:
        Tuple of (offset_x, offset_y, scale)
    """
    if content_width <= 0 or content_height <= 0:
        return 0.0, 0.0, 1.0

    scale = min(area_width / content_width, area_height / content_height)
    if not allow_upscale:
        scale = min(scale, 1.0)
    scale = max(scale, 1e-6)

    offset_x = (area_width - content_width * scale) / 2
    offset_y = (area_height - content_height * scale) / 2
    return offset_x, offset_y, scale


def widget_to_canvas(wx, wy, offset_x, offset_y, scale):
    """Convert widget pixel coordinates to canvas pixel coordinates

    Inverse of the fit_rect placement used to display the canvas.
    """
    return (wx - offset_x) / scale, (wy - offset_y) / scale
