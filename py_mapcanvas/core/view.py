"""Pan and zoom state of the visible canvas."""

from dataclasses import dataclass
from typing import Tuple

MIN_ZOOM = 0.5
MAX_ZOOM = 4.0


def clamp_zoom(level: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, float(level)))


@dataclass
class ViewState:
    """
    Affine view transform: ``screen = world * zoom + pan``.

    Independent of terrain data; changing it only changes how the render
    cache is blitted.
    """

    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self):
        self.zoom = clamp_zoom(self.zoom)

    def set_pan(self, x: float, y: float) -> None:
        self.pan_x = float(x)
        self.pan_y = float(y)

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def set_zoom(self, level: float) -> float:
        """Set the zoom level, clamped; returns the applied level."""
        self.zoom = clamp_zoom(level)
        return self.zoom

    def zoom_at(self, anchor_x: float, anchor_y: float, level: float) -> float:
        """
        Zoom so the world point under ``(anchor_x, anchor_y)`` stays put.

        Returns:
            The applied (clamped) zoom level
        """
        world_x, world_y = self.screen_to_world(anchor_x, anchor_y)
        self.zoom = clamp_zoom(level)
        self.pan_x = anchor_x - world_x * self.zoom
        self.pan_y = anchor_y - world_y * self.zoom
        return self.zoom

    def reset(self) -> None:
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.zoom = 1.0

    def screen_to_world(self, x: float, y: float) -> Tuple[float, float]:
        return (x - self.pan_x) / self.zoom, (y - self.pan_y) / self.zoom

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.zoom + self.pan_x, y * self.zoom + self.pan_y

    def inverse_affine(self) -> Tuple[float, float, float, float, float, float]:
        """Screen-to-world coefficients in PIL ``Image.transform`` order."""
        inv = 1.0 / self.zoom
        return (inv, 0.0, -self.pan_x * inv, 0.0, inv, -self.pan_y * inv)
