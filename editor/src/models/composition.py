"""
LayerMaster - Composition Data Model

THE MODEL in the MVC architecture. Owns the authoritative compositing state.

This class handles:
- The two image slots (background and foreground) and the processed
  (keyed or passthrough) foreground
- The foreground Transform and its edits
- Drag state (Idle / Dragging)
- Canvas sizing from the background aspect ratio
- Re-rendering the composite into its RenderTarget on every change
- Load sequencing so a stale decode never overwrites a newer load
- The generative-render busy flag

The Composition model is INDEPENDENT of UI:
- No Qt imports
- No file dialogs or message boxes

Controllers call methods on this model.
Views register a listener and read render_target / snapshot().

Usage:
    composition = Composition()
    composition.load_background(decode_image(place_bytes))
    composition.load_foreground(decode_image(object_bytes))
    composition.set_remove_white(True)
    composition.set_transform_field('rotation', 45)

    composition.begin_drag(100, 100)
    composition.drag_to(150, 130)
    composition.end_drag()

    png = composition.snapshot().encode_png()
"""

import logging
from collections import namedtuple

from models.drag_context import DragContext
from models.surface import Surface
from models.transform import Transform, Vec2
from services.compositor import Compositor, RenderTarget
from services.keyer import key_out_near_white
from utils.transform_math import fit_canvas_size, foreground_matrix, transformed_corners
from constants import (
    DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT,
    VIEWPORT_MAX_WIDTH, VIEWPORT_MAX_HEIGHT
)

SLOT_BACKGROUND = 'background'
SLOT_FOREGROUND = 'foreground'
SLOTS = (SLOT_BACKGROUND, SLOT_FOREGROUND)

LoadTicket = namedtuple('LoadTicket', ['slot', 'sequence'])


class GenerationInProgressError(RuntimeError):
    """Raised when a generative render is requested while one is pending"""


class MissingLayersError(ValueError):
    """Raised when a generative render is requested without both images"""


class Composition:
    """Background + foreground compositing state with mutation API

    Every mutation that changes what is drawn re-renders the composite and
    notifies listeners with this composition.

    Properties:
        background: Surface or None
        foreground: Raw foreground Surface or None
        processed_foreground: Keyed derivative of foreground when remove_white
            is on, the raw foreground itself when off, None without foreground
        transform: Current Transform
        drag_context: DragContext while dragging, else None
        render_target: RenderTarget holding the latest composite
    """

    def __init__(self, compositor: Compositor = None,
                 max_width: int = VIEWPORT_MAX_WIDTH, max_height: int = VIEWPORT_MAX_HEIGHT):
        self._logger = logging.getLogger('Composition')

        self.background = None
        self.foreground = None
        self.processed_foreground = None
        self.transform = Transform.defaults()
        self.drag_context = None
        self.is_generating = False

        self.max_width = max_width
        self.max_height = max_height
        self.compositor = compositor or Compositor()
        self.render_target = RenderTarget(DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT)

        # Newest load sequence per slot; completions for anything else are stale
        self._load_sequence = 0
        self._pending_loads = {}

        self._listeners = []

        self.render()

    # ========================================
    # Listeners
    # ========================================

    def add_listener(self, callback):
        """Register callback(composition), called after every change"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self):
        for callback in list(self._listeners):
            callback(self)

    # ========================================
    # Queries
    # ========================================

    @property
    def canvas_size(self) -> tuple:
        return self.render_target.size

    @property
    def is_dragging(self) -> bool:
        return self.drag_context is not None

    @property
    def foreground_for_draw(self):
        """Processed foreground if available, else the raw foreground"""
        if self.processed_foreground is not None:
            return self.processed_foreground
        return self.foreground

    @property
    def has_foreground(self) -> bool:
        return self.foreground is not None

    @property
    def has_images(self) -> bool:
        """True once both background and foreground are loaded"""
        return self.background is not None and self.foreground is not None

    def foreground_corners(self):
        """Canvas-space corners of the transformed foreground, or None

        Returns:
            List of four (x, y) points: top-left, top-right, bottom-right, bottom-left
        """
        fg = self.foreground_for_draw
        if fg is None:
            return None
        width, height = self.canvas_size
        matrix = foreground_matrix(self.transform, fg.width, fg.height, width, height)
        return transformed_corners(matrix, fg.width, fg.height)

    # ========================================
    # Rendering
    # ========================================

    def render(self):
        """Redraw the composite and notify listeners"""
        self.compositor.render(
            self.render_target,
            self.background,
            self.foreground_for_draw,
            self.transform
        )
        self._notify_listeners()

    def snapshot(self) -> Surface:
        """Immutable copy of the current composite"""
        return self.render_target.snapshot()

    # ========================================
    # Image Slots
    # ========================================

    def load_background(self, surface: Surface):
        """Replace the background and refit the canvas to its aspect ratio

        Transform and foreground are untouched.

        Raises:
            ValueError: If surface is missing or has no pixels
        """
        self._require_surface(surface)
        self.background = surface
        width, height = fit_canvas_size(surface.width, surface.height, self.max_width, self.max_height)
        self.render_target.resize(width, height)
        self._logger.info("Background %dx%d loaded, canvas %dx%d",
                          surface.width, surface.height, width, height)
        self.render()

    def load_foreground(self, surface: Surface):
        """Replace the foreground and reset its placement

        Position, scale and rotation return to defaults. Opacity and the
        remove_white flag persist; keying is re-applied to the new image
        when remove_white is on.

        Raises:
            ValueError: If surface is missing or has no pixels
        """
        self._require_surface(surface)
        self.foreground = surface
        self.processed_foreground = None
        self.drag_context = None
        self.transform.reset_placement()
        self._update_processed_foreground()
        self._logger.info("Foreground %dx%d loaded", surface.width, surface.height)
        self.render()

    def _update_processed_foreground(self):
        """Recompute processed_foreground from the current raw foreground"""
        if self.foreground is None:
            self.processed_foreground = None
        elif self.transform.remove_white:
            self.processed_foreground = key_out_near_white(self.foreground)
        else:
            self.processed_foreground = self.foreground

    @staticmethod
    def _require_surface(surface):
        if surface is None or surface.is_empty:
            raise ValueError("Cannot load an empty image")

    # ========================================
    # Transform Edits
    # ========================================

    def set_remove_white(self, flag: bool):
        """Toggle near-white keying and rebuild the processed foreground

        Raises:
            TypeError: If flag is not a bool (strings like "false" are rejected)
        """
        if not isinstance(flag, bool):
            raise TypeError(f"remove_white must be a bool, got {type(flag).__name__}")
        self.transform.remove_white = flag
        self._update_processed_foreground()
        self.render()

    def set_transform_field(self, field: str, value):
        """Overwrite one transform field and re-render

        Values are not clamped; widgets impose their own ranges.

        Raises:
            KeyError: If field is not a Transform field
            TypeError: If remove_white is given a non-bool value
        """
        if field not in Transform.field_names():
            raise KeyError(f"Unknown transform field: {field}")
        if field == 'remove_white':
            self.set_remove_white(value)
            return
        setattr(self.transform, field, float(value))
        self.render()

    # ========================================
    # Dragging
    # ========================================

    def begin_drag(self, pointer_x: float, pointer_y: float):
        """Idle -> Dragging. No-op without a foreground."""
        if self.foreground is None:
            return
        self.drag_context = DragContext(
            start=Vec2(pointer_x - self.transform.x, pointer_y - self.transform.y)
        )

    def drag_to(self, pointer_x: float, pointer_y: float):
        """Move the foreground so it follows the pointer. No-op when idle."""
        if self.drag_context is None:
            return
        start = self.drag_context.start
        self.transform.x = pointer_x - start.x
        self.transform.y = pointer_y - start.y
        self.render()

    def end_drag(self):
        """Dragging -> Idle (release, pointer leave or cancel)"""
        self.drag_context = None

    # ========================================
    # Load Sequencing
    # ========================================

    def begin_load(self, slot: str) -> LoadTicket:
        """Issue a ticket for an image decode that is about to start

        Raises:
            ValueError: If slot is not 'background' or 'foreground'
        """
        if slot not in SLOTS:
            raise ValueError(f"Unknown image slot: {slot}")
        self._load_sequence += 1
        ticket = LoadTicket(slot, self._load_sequence)
        self._pending_loads[slot] = ticket.sequence
        return ticket

    def is_current_load(self, ticket: LoadTicket) -> bool:
        return self._pending_loads.get(ticket.slot) == ticket.sequence

    def complete_load(self, ticket: LoadTicket, surface: Surface) -> bool:
        """Apply a finished decode if it is still the newest for its slot

        Returns:
            True if applied, False if the ticket was stale and discarded

        Raises:
            ValueError: If surface has no pixels; the ticket stays pending
        """
        if not self.is_current_load(ticket):
            self._logger.info("Discarding stale %s load #%d", ticket.slot, ticket.sequence)
            return False

        self._require_surface(surface)
        del self._pending_loads[ticket.slot]
        if ticket.slot == SLOT_BACKGROUND:
            self.load_background(surface)
        else:
            self.load_foreground(surface)
        return True

    def fail_load(self, ticket: LoadTicket, error=None) -> bool:
        """Drop a failed decode. Composition state is left untouched.

        Returns:
            True if the failed ticket was the newest for its slot
        """
        if not self.is_current_load(ticket):
            return False
        del self._pending_loads[ticket.slot]
        self._logger.warning("Loading %s failed: %s", ticket.slot, error)
        return True

    # ========================================
    # Generative Render Flag
    # ========================================

    def begin_generation(self) -> Surface:
        """Mark a generative render as pending and snapshot the composite

        Local editing keeps working while the render is pending.

        Raises:
            GenerationInProgressError: If a render is already pending
            MissingLayersError: If background or foreground is missing
        """
        if self.is_generating:
            raise GenerationInProgressError("A realistic render is already in progress")
        if not self.has_images:
            raise MissingLayersError("Load a background and an object before generating a render")
        self.is_generating = True
        self._notify_listeners()
        return self.snapshot()

    def end_generation(self):
        """Return the generation flag to idle"""
        self.is_generating = False
        self._notify_listeners()
