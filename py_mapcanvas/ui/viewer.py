"""
Interactive matplotlib viewer.

Shows the rendered frame in a figure and forwards mouse input and widget
clicks to an ``InteractionController``.
"""

from typing import Optional

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import structlog
from matplotlib.widgets import Button, CheckButtons, TextBox
from PIL import Image

from .controller import InteractionController
from ..core.exceptions import HostUnavailableError
from ..core.map_object import FantasyMap
from ..core.terrain import TERRAIN_NAMES, TerrainType

logger = structlog.get_logger()

NON_INTERACTIVE_BACKENDS = {"agg", "cairo", "pdf", "pgf", "ps", "svg", "template"}

# Wheel "pixels" per matplotlib scroll step
SCROLL_DELTA = 100

CHECKBOX_ORDER = [
    TerrainType.SNOW,
    TerrainType.ROCKY,
    TerrainType.GRASSLAND,
    TerrainType.DRY_PLAINS,
    TerrainType.WATER,
]


def check_host() -> None:
    """
    Make sure an interactive matplotlib backend is available.

    Raises:
        HostUnavailableError: when only file-output backends can be used
    """
    backend = matplotlib.get_backend().lower()
    if backend in NON_INTERACTIVE_BACKENDS:
        logger.error("No interactive matplotlib backend available", backend=backend)
        raise HostUnavailableError(
            f"matplotlib backend '{backend}' cannot display an interactive window"
        )


class MapViewer:
    """matplotlib host for a FantasyMap."""

    def __init__(self, fantasy_map: FantasyMap, controller: Optional[InteractionController] = None):
        self.map = fantasy_map
        self.controller = controller or InteractionController(fantasy_map)
        self.figure = None
        self.ax = None
        self.image = None
        self.widgets = {}
        self._syncing_checks = False

    def build(self):
        """Create the figure, image artist and widgets."""
        self.figure = plt.figure(figsize=(10, 8))
        self.ax = self.figure.add_axes([0.02, 0.12, 0.78, 0.86])
        self.ax.set_axis_off()
        self.image = self.ax.imshow(np.asarray(self.map.frame), interpolation="nearest")

        self._add_button("mode", [0.02, 0.02, 0.12, 0.06], "Mode", lambda _: self.controller.cycle_render_mode())
        self._add_button("new", [0.15, 0.02, 0.12, 0.06], "New map", lambda _: self.controller.new_map())
        self._add_button("zoom_in", [0.28, 0.02, 0.06, 0.06], "+", lambda _: self.controller.zoom_in())
        self._add_button("zoom_out", [0.35, 0.02, 0.06, 0.06], "-", lambda _: self.controller.zoom_out())
        self._add_button("reset", [0.42, 0.02, 0.10, 0.06], "Reset", lambda _: self.controller.reset_view())

        labels = [TERRAIN_NAMES[t] for t in CHECKBOX_ORDER]
        checks_ax = self.figure.add_axes([0.82, 0.55, 0.16, 0.25])
        checks = CheckButtons(
            checks_ax, labels, [self.map.visibility.is_visible(t) for t in CHECKBOX_ORDER]
        )
        checks.on_clicked(self._on_check)
        self.widgets["terrain"] = checks

        width_box = TextBox(self.figure.add_axes([0.86, 0.40, 0.12, 0.05]), "W ", initial=str(self.map.width))
        height_box = TextBox(self.figure.add_axes([0.86, 0.33, 0.12, 0.05]), "H ", initial=str(self.map.height))
        self.widgets["width"] = width_box
        self.widgets["height"] = height_box
        self._add_button("resize", [0.86, 0.26, 0.12, 0.05], "Resize", self._on_resize)

        canvas = self.figure.canvas
        canvas.mpl_connect("button_press_event", self._on_press)
        canvas.mpl_connect("motion_notify_event", self._on_motion)
        canvas.mpl_connect("button_release_event", self._on_release)
        canvas.mpl_connect("scroll_event", self._on_scroll)

        self.map.on_render = self.refresh
        return self.figure

    def _add_button(self, key, rect, label, callback) -> None:
        button = Button(self.figure.add_axes(rect), label)
        button.on_clicked(callback)
        self.widgets[key] = button

    def show(self) -> None:
        check_host()
        if self.figure is None:
            self.build()
        logger.info("Opening map viewer", width=self.map.width, height=self.map.height)
        plt.show()

    def refresh(self, frame: Image.Image) -> None:
        """Display a newly rendered frame."""
        if self.image is None:
            return
        self.image.set_data(np.asarray(frame))
        self.image.set_extent((-0.5, frame.width - 0.5, frame.height - 0.5, -0.5))
        self.figure.canvas.draw_idle()

    # Event handlers

    def _on_press(self, event) -> None:
        if event.inaxes is not self.ax or event.button != 1 or event.xdata is None:
            return
        self.controller.pointer_down(event.xdata, event.ydata)

    def _on_motion(self, event) -> None:
        if event.inaxes is not self.ax or event.xdata is None:
            return
        self.controller.pointer_move(event.xdata, event.ydata)

    def _on_release(self, event) -> None:
        self.controller.pointer_up()

    def _on_scroll(self, event) -> None:
        if event.inaxes is not self.ax or event.xdata is None:
            return
        self.controller.wheel(event.xdata, event.ydata, -event.step * SCROLL_DELTA)

    def _on_check(self, label: str) -> None:
        if self._syncing_checks:
            return
        position = [TERRAIN_NAMES[t] for t in CHECKBOX_ORDER].index(label)
        terrain_type = CHECKBOX_ORDER[position]
        enabled = self.widgets["terrain"].get_status()[position]

        if not self.controller.toggle_terrain(terrain_type, enabled):
            # Rejected: put the box back
            self._syncing_checks = True
            try:
                self.widgets["terrain"].set_active(position)
            finally:
                self._syncing_checks = False

    def _on_resize(self, _event) -> None:
        self.controller.resize(self.widgets["width"].text, self.widgets["height"].text)
