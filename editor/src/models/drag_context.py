"""Drag context dataclass for foreground dragging.

Present while a drag is in progress, None when idle.
"""

from dataclasses import dataclass

from models.transform import Vec2


@dataclass
class DragContext:
    """Pointer anchor for an in-progress foreground drag.

    start is the pointer position minus the foreground offset at press time,
    so the offset during the drag is always pointer - start.
    """
    start: Vec2
