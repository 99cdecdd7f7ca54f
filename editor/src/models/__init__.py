"""
LayerMaster - Data Models

This module contains the data model classes for the compositing state.
This is the MODEL in MVC architecture.

Public API: Import Surface, Transform, Vec2 and DragContext from models.
The Composition model renders through services, so it is imported from
models.composition directly.
"""

from .surface import Surface
from .transform import Transform, Vec2
from .drag_context import DragContext

__all__ = [
    'DragContext',
    'Surface',
    'Transform',
    'Vec2',
]
