"""
Compositing of settlements onto the terrain cache and of the cache onto the
visible canvas.

Settlement markers and paths are drawn on a 2 px cell grid so they match the
pixel render mode. The visible frame is a water backdrop with the cache
blitted under the pan/zoom transform using nearest-neighbour sampling.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import structlog
from PIL import Image, ImageDraw, ImageFont

from .name_generator import SettlementTier
from .settlements import Settlement, SettlementLayout
from .terrain import WATER_COLOR
from .view import ViewState

logger = structlog.get_logger()

LABEL_FONT_SIZE = 12
LABEL_BACKGROUND = (255, 255, 255, 178)  # white at 0.7 alpha


@dataclass(frozen=True)
class GlyphStyle:
    """Marker appearance of a settlement tier."""

    size: int
    border: str
    fill: str
    path: str


GLYPH_STYLES = {
    SettlementTier.CITY: GlyphStyle(size=12, border="#8B0000", fill="#CD5C5C", path="#6B3E26"),
    SettlementTier.VILLAGE: GlyphStyle(size=10, border="#00008B", fill="#4169E1", path="#8B7355"),
}


def bresenham(x0: int, y0: int, x1: int, y1: int) -> Iterator[Tuple[int, int]]:
    """Integer cells on the line from ``(x0, y0)`` to ``(x1, y1)``, both ends included."""
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def load_label_font(size: int = LABEL_FONT_SIZE):
    try:
        return ImageFont.truetype("DejaVuSans-Bold.ttf", size)
    except OSError:
        return ImageFont.load_default(size=size)


class Compositor:
    """Draws overlays into the render cache and blits it to the canvas."""

    def __init__(self, cell_size: int = 2, font=None):
        self.cell_size = cell_size
        self.font = font or load_label_font()

    def compose(self, terrain: Image.Image, layout: SettlementLayout) -> Image.Image:
        """
        Overlay paths and settlements on a terrain image.

        Returns:
            New RGB image; ``terrain`` is left untouched
        """
        image = terrain.convert("RGBA")
        self.draw_paths(image, layout)
        self.draw_settlements(image, layout)
        return image.convert("RGB")

    def _fill_cell(self, draw: ImageDraw.ImageDraw, px: int, py: int, color: str) -> None:
        draw.rectangle((px, py, px + self.cell_size - 1, py + self.cell_size - 1), fill=color)

    def draw_path(self, image: Image.Image, positions: Sequence[Tuple[float, float]], color: str) -> int:
        """
        Stepped line through ``positions`` in order.

        Returns:
            Number of cells painted
        """
        draw = ImageDraw.Draw(image)
        cell = self.cell_size
        painted = 0
        for (x0, y0), (x1, y1) in zip(positions, positions[1:]):
            start = (int(x0 // cell), int(y0 // cell))
            end = (int(x1 // cell), int(y1 // cell))
            for cx, cy in bresenham(*start, *end):
                self._fill_cell(draw, cx * cell, cy * cell, color)
                painted += 1
        return painted

    def draw_paths(self, image: Image.Image, layout: SettlementLayout) -> None:
        for tier, settlements in (
            (SettlementTier.CITY, layout.cities),
            (SettlementTier.VILLAGE, layout.villages),
        ):
            if len(settlements) < 2:
                continue
            self.draw_path(image, [s.position for s in settlements], GLYPH_STYLES[tier].path)

    def draw_settlements(self, image: Image.Image, layout: SettlementLayout) -> None:
        for settlement in layout.cities:
            self.draw_settlement(image, settlement)
        for settlement in layout.villages:
            self.draw_settlement(image, settlement)

    def draw_settlement(self, image: Image.Image, settlement: Settlement) -> bool:
        """
        Bordered square marker with a name label.

        Returns:
            False when the settlement lies off the canvas and nothing was drawn
        """
        width, height = image.size
        x, y = settlement.x, settlement.y
        if not (0 <= x <= width and 0 <= y <= height):
            return False

        style = GLYPH_STYLES[settlement.tier]
        cell = self.cell_size
        size = style.size
        start_x = math.floor(x - size / 2)
        start_y = math.floor(y - size / 2)
        draw = ImageDraw.Draw(image)

        for px in range(start_x, start_x + size, cell):
            for py in range(start_y, start_y + size, cell):
                on_border = (
                    px == start_x
                    or px >= start_x + size - cell
                    or py == start_y
                    or py >= start_y + size - cell
                )
                self._fill_cell(draw, px, py, style.border if on_border else style.fill)

        self.draw_label(image, x, y, settlement.name, style.border)
        return True

    def draw_label(self, image: Image.Image, x: float, y: float, text: str, color: str) -> None:
        """Name centered above a marker, on a translucent white box."""
        if not text:
            return
        text_width = ImageDraw.Draw(image).textlength(text, font=self.font)

        overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle(
            (x - text_width / 2 - 4, y - 24, x + text_width / 2 + 4, y - 8),
            fill=LABEL_BACKGROUND,
        )
        image.alpha_composite(overlay)
        ImageDraw.Draw(image).text((x, y - 16), text, fill=color, font=self.font, anchor="mm")

    def render_view(
        self, cache: Image.Image, view: ViewState, size: Optional[Tuple[int, int]] = None
    ) -> Image.Image:
        """
        Produce the visible frame.

        Clears to a water backdrop covering the whole viewport, then blits the
        cache under the view transform without smoothing.
        """
        size = size or cache.size
        frame = Image.new("RGB", size, WATER_COLOR)
        blit = cache.convert("RGBA").transform(
            size,
            Image.Transform.AFFINE,
            view.inverse_affine(),
            resample=Image.Resampling.NEAREST,
            fillcolor=(0, 0, 0, 0),
        )
        frame.paste(blit, (0, 0), blit)
        return frame
