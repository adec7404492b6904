"""Tests for the interaction controller."""

from unittest.mock import Mock

import pytest

from py_mapcanvas.core.exceptions import InvalidMapSizeError
from py_mapcanvas.core.view import ViewState
from py_mapcanvas.ui.controller import DragState, InteractionController


def make_map(width=400, height=300):
    """Mock map whose view operations drive a real ViewState."""
    view = ViewState()
    fantasy_map = Mock()
    fantasy_map.width = width
    fantasy_map.height = height
    fantasy_map.view = view
    fantasy_map.pan_by.side_effect = view.pan_by
    fantasy_map.zoom_at.side_effect = view.zoom_at
    fantasy_map.reset_view.side_effect = view.reset
    return fantasy_map


class TestPointerDrag:
    """Test the idle/dragging state machine."""

    def setup_method(self):
        self.map = make_map()
        self.controller = InteractionController(self.map)

    def test_move_without_press_does_nothing(self):
        assert not self.controller.pointer_move(50, 50)
        self.map.pan_by.assert_not_called()

    def test_drag_pans_by_delta(self):
        self.controller.pointer_down(100, 100)
        assert self.controller.state is DragState.DRAGGING
        assert self.controller.pointer_move(110, 95)
        assert self.controller.pointer_move(130, 95)
        assert (self.map.view.pan_x, self.map.view.pan_y) == (30, -5)

        self.controller.pointer_up()
        assert self.controller.state is DragState.IDLE
        assert not self.controller.pointer_move(200, 200)
        assert self.map.pan_by.call_count == 2


class TestZoom:
    """Test wheel, button and pinch zoom."""

    def setup_method(self):
        self.map = make_map()
        self.controller = InteractionController(self.map)

    def test_wheel_up_zooms_in_around_cursor(self):
        world = self.map.view.screen_to_world(120, 60)
        zoom = self.controller.wheel(120, 60, -100)
        assert zoom == pytest.approx(1.1)
        assert self.map.view.screen_to_world(120, 60) == pytest.approx(world)

    def test_wheel_down_zooms_out(self):
        assert self.controller.wheel(0, 0, 200) == pytest.approx(0.8)

    def test_zoom_clamped(self):
        for _ in range(100):
            self.controller.wheel(10, 10, -500)
        assert self.map.view.zoom == 4.0
        for _ in range(100):
            self.controller.wheel(10, 10, 500)
        assert self.map.view.zoom == 0.5

    def test_buttons_zoom_about_center(self):
        center = self.map.view.screen_to_world(200, 150)
        assert self.controller.zoom_in() == pytest.approx(1.2)
        assert self.map.view.screen_to_world(200, 150) == pytest.approx(center)
        assert self.controller.zoom_out() == pytest.approx(1.0)

    def test_reset(self):
        self.controller.wheel(10, 10, -300)
        self.controller.reset_view()
        assert self.map.view == ViewState()

    def test_pinch(self):
        """Spreading two fingers zooms by the distance ratio around their midpoint."""
        self.controller.touch_start([(100, 100), (200, 100)])
        assert self.controller.state is DragState.IDLE
        self.controller.touch_move([(50, 100), (250, 100)])
        assert self.map.view.zoom == pytest.approx(2.0)
        self.map.zoom_at.assert_called_with(150, 100, pytest.approx(2.0))
        self.controller.touch_end()
        assert self.controller.last_touch_distance == 0.0

    def test_single_touch_drags(self):
        self.controller.touch_start([(10, 10)])
        self.controller.touch_move([(25, 40)])
        assert (self.map.view.pan_x, self.map.view.pan_y) == (15, 30)
        self.controller.touch_end()
        assert self.controller.state is DragState.IDLE


class TestConfigurationTriggers:
    """Test map configuration calls."""

    def setup_method(self):
        self.map = make_map()
        self.controller = InteractionController(self.map)

    def test_resize_rejected(self):
        self.map.set_size.side_effect = InvalidMapSizeError("abc", 10, "sizes must be integers")
        assert not self.controller.resize("abc", 10)

    def test_resize_accepted(self):
        assert self.controller.resize("640", "480")
        self.map.set_size.assert_called_once_with("640", "480")

    def test_new_map(self):
        self.controller.new_map()
        self.map.regenerate.assert_called_once_with(None)

    def test_cycle_render_mode(self):
        self.map.render_mode.value = "voronoi"
        assert self.controller.cycle_render_mode() == "voronoi"
        self.map.cycle_render_mode.assert_called_once()

    def test_toggle_terrain(self):
        self.map.set_terrain_visible.return_value = False
        assert not self.controller.toggle_terrain("water", False)
        self.map.set_terrain_visible.assert_called_once_with("water", False)
