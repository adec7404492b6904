"""Tests for the matplotlib viewer."""

from unittest.mock import Mock

import matplotlib.pyplot as plt
import numpy as np
import pytest

from py_mapcanvas.core.exceptions import HostUnavailableError
from py_mapcanvas.core.map_object import FantasyMap
from py_mapcanvas.core.point_field import PointFieldOptions
from py_mapcanvas.ui.viewer import CHECKBOX_ORDER, MapViewer, check_host
from py_mapcanvas.utils.random import make_rng


class TestViewer:
    """Test widget wiring on a non-interactive backend."""

    def setup_method(self):
        self.map = FantasyMap(
            160, 120, seed=8, rng=make_rng(0), point_options=PointFieldOptions(point_count=500)
        )
        self.viewer = MapViewer(self.map)
        self.viewer.build()

    def teardown_method(self):
        plt.close("all")

    def event(self, **kwargs):
        defaults = {"inaxes": self.viewer.ax, "button": 1, "xdata": 10.0, "ydata": 10.0, "step": 0}
        defaults.update(kwargs)
        return Mock(**defaults)

    def test_check_host_rejects_agg(self):
        with pytest.raises(HostUnavailableError):
            check_host()
        with pytest.raises(HostUnavailableError):
            self.viewer.show()

    def test_widgets_built(self):
        for key in ("mode", "new", "zoom_in", "zoom_out", "reset", "terrain", "width", "height", "resize"):
            assert key in self.viewer.widgets
        assert self.viewer.widgets["terrain"].get_status() == [True] * 5
        assert self.map.on_render == self.viewer.refresh

    def test_drag_events_pan(self):
        self.viewer._on_press(self.event(xdata=20.0, ydata=20.0))
        self.viewer._on_motion(self.event(xdata=35.0, ydata=10.0))
        self.viewer._on_release(self.event())
        assert (self.map.view.pan_x, self.map.view.pan_y) == (15.0, -10.0)
        np.testing.assert_array_equal(self.viewer.image.get_array(), np.asarray(self.map.frame))

    def test_events_outside_axes_ignored(self):
        self.viewer._on_press(self.event(inaxes=None))
        self.viewer._on_motion(self.event(xdata=50.0))
        assert self.map.view.pan_x == 0.0

    def test_scroll_zooms(self):
        self.viewer._on_scroll(self.event(step=1))
        assert self.map.view.zoom == pytest.approx(1.1)

    def test_terrain_checkbox(self):
        checks = self.viewer.widgets["terrain"]
        checks.set_active(1)
        assert not self.map.visibility.is_visible(CHECKBOX_ORDER[1])

    def test_rejected_toggle_restores_checkbox(self):
        checks = self.viewer.widgets["terrain"]
        for position in range(4):
            checks.set_active(position)
        # Water is the last visible category
        checks.set_active(4)
        assert checks.get_status()[4]
        assert self.map.visibility.is_visible("water")

    def test_resize_button(self):
        self.viewer.widgets["width"].set_val("140")
        self.viewer.widgets["height"].set_val("100")
        self.viewer._on_resize(None)
        assert (self.map.width, self.map.height) == (140, 100)

        self.viewer.widgets["width"].set_val("x")
        self.viewer._on_resize(None)
        assert self.map.width == 140
