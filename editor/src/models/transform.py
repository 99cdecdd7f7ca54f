"""Transform data structures for coordinate and state representation."""
from dataclasses import dataclass, fields, replace

from constants import (
    DEFAULT_POSITION_X, DEFAULT_POSITION_Y, DEFAULT_SCALE,
    DEFAULT_ROTATION, DEFAULT_OPACITY, DEFAULT_REMOVE_WHITE
)


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y coordinate pair across different spaces:
    - Canvas pixels (top-left origin)
    - Offsets from canvas center
    - Pointer positions
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


@dataclass
class Transform:
    """Foreground placement: offset, scale, rotation, opacity and keying flag.

    x/y are offsets from the canvas center in output pixels. Rotation is in
    degrees, clockwise on screen. Opacity multiplies the alpha of the whole
    foreground draw.
    """
    x: float = DEFAULT_POSITION_X
    y: float = DEFAULT_POSITION_Y
    scale: float = DEFAULT_SCALE
    rotation: float = DEFAULT_ROTATION
    opacity: float = DEFAULT_OPACITY
    remove_white: bool = DEFAULT_REMOVE_WHITE

    @classmethod
    def defaults(cls) -> 'Transform':
        return cls()

    @classmethod
    def field_names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    def reset_placement(self):
        """Reset position, scale and rotation. Opacity and keying are kept."""
        self.x = DEFAULT_POSITION_X
        self.y = DEFAULT_POSITION_Y
        self.scale = DEFAULT_SCALE
        self.rotation = DEFAULT_ROTATION

    def copy(self) -> 'Transform':
        return replace(self)

    @property
    def position(self) -> Vec2:
        return Vec2(self.x, self.y)
