"""
Tests for the Composition model.

Covers:
- Canvas sizing on background load
- Foreground load placement reset (opacity / keying persist)
- Remove-white toggling and processed foreground derivation
- Drag state machine
- Last-load-wins sequencing
- Generation busy flag
- Listener notifications
"""
import numpy as np
import pytest

from conftest import RED, BLUE, WHITE
from models.composition import (
    Composition, GenerationInProgressError, MissingLayersError, LoadTicket
)
from models.surface import Surface
from services.compositor import render_composite


def object_on_white(size=10, inner=4, color=RED):
    """White square with a colored square in its center"""
    pixels = np.full((size, size, 4), 255, dtype=np.uint8)
    start = (size - inner) // 2
    pixels[start:start + inner, start:start + inner] = color
    return Surface.from_array(pixels)


# ══════════════════════════════════════════════════════════════════════════
# Initial state and canvas sizing
# ══════════════════════════════════════════════════════════════════════════

class TestInitialState:

    def test_defaults(self, composition):
        assert composition.background is None
        assert composition.foreground is None
        assert composition.processed_foreground is None
        assert composition.canvas_size == (800, 600)
        assert not composition.is_dragging
        assert not composition.is_generating
        assert not composition.has_images

    def test_placeholder_rendered_on_construction(self, composition):
        assert (composition.snapshot().read_pixels()[..., 3] == 255).all()

    def test_default_viewport(self):
        composition = Composition()
        composition.load_background(Surface.blank(1920, 1080, BLUE))
        assert composition.canvas_size == (1000, 562)


class TestBackgroundLoad:

    def test_canvas_follows_aspect_ratio(self, composition, solid):
        composition.load_background(solid(40, 20, BLUE))
        assert composition.canvas_size == (100, 50)

    def test_tall_background(self, composition, solid):
        composition.load_background(solid(20, 40, BLUE))
        assert composition.canvas_size == (50, 100)

    def test_transform_untouched(self, loaded_composition, solid):
        loaded_composition.set_transform_field('x', 12)
        loaded_composition.set_transform_field('opacity', 0.4)
        loaded_composition.load_background(solid(30, 30, RED))
        assert loaded_composition.transform.x == 12
        assert loaded_composition.transform.opacity == 0.4
        assert loaded_composition.foreground is not None

    def test_empty_background_rejected(self, composition):
        with pytest.raises(ValueError):
            composition.load_background(Surface.blank(0, 0))
        assert composition.background is None


# ══════════════════════════════════════════════════════════════════════════
# Foreground load and keying
# ══════════════════════════════════════════════════════════════════════════

class TestForegroundLoad:

    def test_placement_reset(self, loaded_composition, solid):
        c = loaded_composition
        c.set_transform_field('x', 30)
        c.set_transform_field('y', -8)
        c.set_transform_field('scale', 2)
        c.set_transform_field('rotation', 90)
        c.load_foreground(solid(6, 6, RED))
        t = c.transform
        assert (t.x, t.y, t.scale, t.rotation) == (0.0, 0.0, 0.5, 0.0)

    def test_opacity_and_keying_persist(self, loaded_composition):
        c = loaded_composition
        c.set_transform_field('opacity', 0.25)
        c.set_remove_white(True)
        c.load_foreground(object_on_white())
        assert c.transform.opacity == 0.25
        assert c.transform.remove_white is True
        # New foreground is keyed straight away
        assert c.processed_foreground.read_pixels()[0, 0, 3] == 0

    def test_processed_is_raw_when_keying_off(self, loaded_composition):
        assert loaded_composition.processed_foreground is loaded_composition.foreground

    def test_load_cancels_drag(self, loaded_composition, solid):
        loaded_composition.begin_drag(50, 50)
        loaded_composition.load_foreground(solid(4, 4, RED))
        assert not loaded_composition.is_dragging


class TestRemoveWhite:

    def test_toggle_without_foreground(self, composition):
        composition.set_remove_white(True)
        assert composition.transform.remove_white is True
        assert composition.processed_foreground is None

    def test_toggle_keys_and_restores(self, loaded_composition):
        c = loaded_composition
        c.load_foreground(object_on_white())
        c.set_remove_white(True)
        keyed = c.processed_foreground.read_pixels()
        assert keyed[0, 0, 3] == 0
        assert keyed[5, 5].tolist() == list(RED)
        # Raw foreground keeps its white pixels
        assert c.foreground.read_pixels()[0, 0, 3] == 255

        c.set_remove_white(False)
        assert c.processed_foreground is c.foreground

    def test_set_transform_field_routes_remove_white(self, loaded_composition):
        loaded_composition.load_foreground(object_on_white())
        loaded_composition.set_transform_field('remove_white', True)
        assert loaded_composition.processed_foreground.read_pixels()[0, 0, 3] == 0

    @pytest.mark.parametrize("value", ["false", 1, None])
    def test_remove_white_requires_bool(self, loaded_composition, value):
        with pytest.raises(TypeError):
            loaded_composition.set_transform_field('remove_white', value)
        assert loaded_composition.transform.remove_white is False

    def test_white_keyed_end_to_end(self, composition, solid):
        """Red object on white, keyed, scale 1: only the red center covers the background"""
        composition.load_background(solid(100, 100, BLUE))
        composition.load_foreground(object_on_white(size=10, inner=4))
        composition.set_transform_field('scale', 1)
        composition.set_remove_white(True)

        pixels = composition.snapshot().read_pixels()
        # Object spans 45..54; red center 48..51
        assert (pixels[48:52, 48:52] == RED).all()
        assert (pixels[45:48, 45:55] == BLUE).all()
        assert (pixels[45:55, 45:48] == BLUE).all()

    def test_white_visible_when_not_keyed(self, composition, solid):
        composition.load_background(solid(100, 100, BLUE))
        composition.load_foreground(object_on_white(size=10, inner=4))
        composition.set_transform_field('scale', 1)
        pixels = composition.snapshot().read_pixels()
        assert pixels[45, 45].tolist() == list(WHITE)


# ══════════════════════════════════════════════════════════════════════════
# Transform edits
# ══════════════════════════════════════════════════════════════════════════

class TestTransformEdits:

    def test_unknown_field(self, composition):
        with pytest.raises(KeyError):
            composition.set_transform_field('skew', 1)

    def test_values_not_clamped(self, loaded_composition):
        loaded_composition.set_transform_field('scale', 12)
        loaded_composition.set_transform_field('opacity', -1)
        assert loaded_composition.transform.scale == 12
        assert loaded_composition.transform.opacity == -1

    def test_render_matches_stateless_compositor(self, loaded_composition, nearest_compositor):
        c = loaded_composition
        c.set_transform_field('rotation', 30)
        c.set_transform_field('x', -20)
        expected = render_composite(
            c.background, c.foreground_for_draw, c.transform, c.canvas_size,
            nearest_compositor.resample
        )
        assert c.snapshot() == expected

    def test_foreground_corners(self, loaded_composition):
        corners = loaded_composition.foreground_corners()
        # 10x10 object at scale 0.5 centered on a 100x100 canvas
        np.testing.assert_allclose(corners, [(47.5, 47.5), (52.5, 47.5), (52.5, 52.5), (47.5, 52.5)])

    def test_no_corners_without_foreground(self, composition):
        assert composition.foreground_corners() is None


# ══════════════════════════════════════════════════════════════════════════
# Dragging
# ══════════════════════════════════════════════════════════════════════════

class TestDragging:

    def test_drag_moves_by_pointer_delta(self, loaded_composition):
        c = loaded_composition
        c.begin_drag(10, 5)
        assert c.is_dragging
        assert tuple(c.drag_context.start) == (10, 5)
        c.drag_to(60, 35)
        assert (c.transform.x, c.transform.y) == (50, 30)

    def test_drag_keeps_grab_offset(self, loaded_composition):
        c = loaded_composition
        c.set_transform_field('x', 20)
        c.set_transform_field('y', 10)
        c.begin_drag(70, 60)
        c.drag_to(70, 60)
        assert (c.transform.x, c.transform.y) == (20, 10)
        c.drag_to(75, 50)
        assert (c.transform.x, c.transform.y) == (25, 0)

    def test_move_while_idle_is_noop(self, loaded_composition):
        loaded_composition.drag_to(99, 99)
        assert (loaded_composition.transform.x, loaded_composition.transform.y) == (0, 0)

    def test_end_drag_returns_to_idle(self, loaded_composition):
        c = loaded_composition
        c.begin_drag(0, 0)
        c.end_drag()
        assert not c.is_dragging
        c.drag_to(40, 40)
        assert c.transform.x == 0

    def test_no_drag_without_foreground(self, composition):
        composition.begin_drag(10, 10)
        assert not composition.is_dragging

    def test_drag_rerenders(self, loaded_composition):
        before = loaded_composition.snapshot()
        loaded_composition.begin_drag(50, 50)
        loaded_composition.drag_to(80, 50)
        assert loaded_composition.snapshot() != before


# ══════════════════════════════════════════════════════════════════════════
# Load sequencing
# ══════════════════════════════════════════════════════════════════════════

class TestLoadSequencing:

    def test_tickets_are_ordered(self, composition):
        first = composition.begin_load('background')
        second = composition.begin_load('background')
        assert isinstance(first, LoadTicket)
        assert second.sequence > first.sequence
        assert not composition.is_current_load(first)
        assert composition.is_current_load(second)

    def test_unknown_slot(self, composition):
        with pytest.raises(ValueError):
            composition.begin_load('overlay')

    def test_late_stale_result_is_discarded(self, composition, solid):
        first = composition.begin_load('background')
        second = composition.begin_load('background')
        newest = solid(40, 20, BLUE)

        assert composition.complete_load(second, newest) is True
        assert composition.complete_load(first, solid(20, 40, RED)) is False
        assert composition.background is newest
        assert composition.canvas_size == (100, 50)

    def test_early_stale_result_is_discarded(self, composition, solid):
        first = composition.begin_load('foreground')
        second = composition.begin_load('foreground')
        newest = solid(8, 8, BLUE)

        assert composition.complete_load(first, solid(4, 4, RED)) is False
        assert composition.foreground is None
        assert composition.complete_load(second, newest) is True
        assert composition.foreground is newest

    def test_slots_are_independent(self, composition, solid):
        background_ticket = composition.begin_load('background')
        foreground_ticket = composition.begin_load('foreground')
        assert composition.complete_load(foreground_ticket, solid(4, 4, RED))
        assert composition.complete_load(background_ticket, solid(10, 10, BLUE))
        assert composition.has_images

    def test_failed_load_leaves_state(self, loaded_composition, solid):
        c = loaded_composition
        background = c.background
        snapshot = c.snapshot()
        ticket = c.begin_load('background')
        assert c.fail_load(ticket, "corrupt") is True
        assert c.background is background
        assert c.snapshot() == snapshot
        assert not c.is_current_load(ticket)

    def test_failed_stale_load_reports_false(self, composition):
        first = composition.begin_load('background')
        composition.begin_load('background')
        assert composition.fail_load(first, "corrupt") is False

    def test_empty_result_keeps_ticket_pending(self, composition):
        ticket = composition.begin_load('foreground')
        with pytest.raises(ValueError):
            composition.complete_load(ticket, Surface.blank(0, 0))
        assert composition.is_current_load(ticket)
        assert composition.fail_load(ticket, "empty") is True
        assert composition.foreground is None

    def test_ticket_used_once(self, composition, solid):
        ticket = composition.begin_load('background')
        assert composition.complete_load(ticket, solid(10, 10, BLUE))
        assert composition.complete_load(ticket, solid(10, 10, RED)) is False


# ══════════════════════════════════════════════════════════════════════════
# Generation flag
# ══════════════════════════════════════════════════════════════════════════

class TestGeneration:

    def test_requires_both_images(self, composition, solid):
        with pytest.raises(MissingLayersError):
            composition.begin_generation()
        composition.load_background(solid(10, 10, BLUE))
        with pytest.raises(MissingLayersError):
            composition.begin_generation()
        assert not composition.is_generating

    def test_begin_returns_snapshot(self, loaded_composition):
        snapshot = loaded_composition.begin_generation()
        assert loaded_composition.is_generating
        assert snapshot == loaded_composition.snapshot()

    def test_reentrant_request_rejected(self, loaded_composition):
        loaded_composition.begin_generation()
        with pytest.raises(GenerationInProgressError):
            loaded_composition.begin_generation()

    def test_end_returns_to_idle(self, loaded_composition):
        loaded_composition.begin_generation()
        loaded_composition.end_generation()
        assert not loaded_composition.is_generating
        loaded_composition.begin_generation()

    def test_editing_while_generating(self, loaded_composition):
        snapshot = loaded_composition.begin_generation()
        loaded_composition.set_transform_field('x', 25)
        assert loaded_composition.transform.x == 25
        # The submitted snapshot is unaffected by later edits
        assert snapshot != loaded_composition.snapshot()


# ══════════════════════════════════════════════════════════════════════════
# Listeners
# ══════════════════════════════════════════════════════════════════════════

class TestListeners:

    def test_notified_on_change(self, composition, solid):
        calls = []
        composition.add_listener(calls.append)
        composition.load_background(solid(10, 10, BLUE))
        composition.set_transform_field('opacity', 0.5)
        assert calls == [composition, composition]

    def test_listener_added_once(self, composition):
        calls = []
        composition.add_listener(calls.append)
        composition.add_listener(calls.append)
        composition.render()
        assert len(calls) == 1

    def test_remove_listener(self, composition):
        calls = []
        composition.add_listener(calls.append)
        composition.remove_listener(calls.append)
        composition.render()
        assert calls == []
