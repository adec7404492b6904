"""
Input handling for the map canvas.

Translates pointer, wheel, touch and button input into operations on a
``FantasyMap``. Coordinates are canvas pixels. The controller is toolkit
independent; hosts forward their events to it.
"""

import math
from enum import Enum
from typing import Optional, Sequence, Tuple

import structlog

from ..core.exceptions import InvalidMapSizeError
from ..core.map_object import FantasyMap
from ..core.view import MAX_ZOOM, MIN_ZOOM

logger = structlog.get_logger()

WHEEL_SENSITIVITY = 0.001
BUTTON_ZOOM_STEP = 1.2

Touch = Tuple[float, float]


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class InteractionController:
    """Pan/zoom state machine and configuration triggers for one map."""

    def __init__(self, fantasy_map: FantasyMap):
        self.map = fantasy_map
        self.state = DragState.IDLE
        self.last_x = 0.0
        self.last_y = 0.0
        self.last_touch_distance = 0.0

    @property
    def dragging(self) -> bool:
        return self.state is DragState.DRAGGING

    # Pointer

    def pointer_down(self, x: float, y: float) -> None:
        self.state = DragState.DRAGGING
        self.last_x, self.last_y = x, y

    def pointer_move(self, x: float, y: float) -> bool:
        """Pan by the cursor delta while dragging; returns True if the view changed."""
        if not self.dragging:
            return False
        dx, dy = x - self.last_x, y - self.last_y
        self.last_x, self.last_y = x, y
        self.map.pan_by(dx, dy)
        return True

    def pointer_up(self) -> None:
        self.state = DragState.IDLE

    # Zoom

    def zoom_at(self, x: float, y: float, level: float) -> float:
        level = max(MIN_ZOOM, min(MAX_ZOOM, level))
        self.map.zoom_at(x, y, level)
        return self.map.view.zoom

    def wheel(self, x: float, y: float, delta_y: float) -> float:
        """Zoom around the cursor; negative ``delta_y`` zooms in."""
        factor = 1 - delta_y * WHEEL_SENSITIVITY
        return self.zoom_at(x, y, self.map.view.zoom * factor)

    def zoom_in(self) -> float:
        return self.zoom_at(self.map.width / 2, self.map.height / 2, self.map.view.zoom * BUTTON_ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.zoom_at(self.map.width / 2, self.map.height / 2, self.map.view.zoom / BUTTON_ZOOM_STEP)

    def reset_view(self) -> None:
        self.map.reset_view()

    # Touch

    def touch_start(self, touches: Sequence[Touch]) -> None:
        if len(touches) == 1:
            self.pointer_down(*touches[0])
        elif len(touches) == 2:
            self.state = DragState.IDLE
            self.last_touch_distance = math.dist(touches[0], touches[1])

    def touch_move(self, touches: Sequence[Touch]) -> None:
        if len(touches) == 1 and self.dragging:
            self.pointer_move(*touches[0])
        elif len(touches) == 2:
            distance = math.dist(touches[0], touches[1])
            center_x = (touches[0][0] + touches[1][0]) / 2
            center_y = (touches[0][1] + touches[1][1]) / 2
            if self.last_touch_distance > 0:
                scale = distance / self.last_touch_distance
                self.zoom_at(center_x, center_y, self.map.view.zoom * scale)
            self.last_touch_distance = distance

    def touch_end(self) -> None:
        self.state = DragState.IDLE
        self.last_touch_distance = 0.0

    # Configuration

    def new_map(self, seed: Optional[int] = None) -> None:
        self.map.regenerate(seed)

    def resize(self, width, height) -> bool:
        """
        Resize and regenerate.

        Returns:
            False when the size was rejected; the current map is kept
        """
        try:
            self.map.set_size(width, height)
        except InvalidMapSizeError as e:
            logger.error("Resize rejected", width=width, height=height, reason=e.reason)
            return False
        return True

    def cycle_render_mode(self) -> str:
        self.map.cycle_render_mode()
        return self.map.render_mode.value

    def toggle_terrain(self, terrain_type, enabled: bool) -> bool:
        return self.map.set_terrain_visible(terrain_type, enabled)
