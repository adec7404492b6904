"""
Terrain rasterization into the off-screen render cache.

Three interchangeable strategies paint the terrain of a point field:

- pixel: a 2 px grid colored by the nearest sample point
- voronoi: every sample point's Voronoi cell filled with its color
- smooth: a coarse noise height map drawn as Bezier-edged gradient patches

Each strategy starts from a canvas filled with water. Categories switched off
in the visibility config are painted with a randomly chosen visible category;
the generator used for that is injectable.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from PIL import Image, ImageDraw

from .noise import NoiseSampler
from .point_field import PointField
from .spatial_index import SpatialIndex
from .terrain import (
    TERRAIN_COLORS,
    TERRAIN_RGB,
    WATER_COLOR,
    TerrainType,
    TerrainVisibility,
    classify_elevation,
    hex_to_rgb,
)
from ..utils.random import get_rng

logger = structlog.get_logger()


class RenderMode(str, Enum):
    """Terrain drawing strategies."""

    PIXEL = "pixel"
    VORONOI = "voronoi"
    SMOOTH = "smooth"

    def next(self) -> "RenderMode":
        """Following mode in the pixel -> voronoi -> smooth cycle."""
        modes = list(RenderMode)
        return modes[(modes.index(self) + 1) % len(modes)]


# Octaves of the smooth mode height map, sampled at grid indices:
# (i / 3, j / 3), (1.5 i, 1.5 j) and (3 i, 3 j)
SMOOTH_OCTAVES: Sequence[Tuple[float, float]] = ((3.0, 0.5), (1 / 1.5, 0.25), (1 / 3.0, 0.125))

# (edge color, middle color) of each land gradient brush
GRADIENT_STOPS: Dict[TerrainType, Tuple[str, str]] = {
    TerrainType.DRY_PLAINS: ("#8B4513", "#A0522D"),
    TerrainType.GRASSLAND: ("#4CAF50", "#45A049"),
    TerrainType.ROCKY: ("#A9A9A9", "#808080"),
    TerrainType.SNOW: ("#FFFFFF", "#F0F0F0"),
}


@dataclass
class RasterOptions:
    """Rasterization options."""

    pixel_size: int = 2  # Cell size of the pixel mode grid
    smooth_resolution: int = 8  # Height map cells per side in smooth mode
    smooth_padding_ratio: float = 0.1  # Smooth mode padding, as a share of width
    smooth_fade_scale: float = 1.2
    bezier_steps: int = 24  # Segments used to flatten each Bezier edge


def cubic_bezier(p0, p1, p2, p3, steps: int) -> np.ndarray:
    """Points along a cubic Bezier curve, both ends included."""
    t = np.linspace(0.0, 1.0, steps + 1)[:, None]
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    return (
        (1 - t) ** 3 * p0
        + 3 * (1 - t) ** 2 * t * p1
        + 3 * (1 - t) * t**2 * p2
        + t**3 * p3
    )


def linear_gradient(
    size: Tuple[int, int],
    offset: Tuple[float, float],
    extent: Tuple[float, float],
    edge: str,
    middle: str,
) -> Image.Image:
    """
    Diagonal gradient image running ``edge -> middle -> edge``.

    The gradient axis goes from (0, 0) to ``extent`` in a frame where image
    pixel (0, 0) sits at ``offset``.
    """
    width, height = size
    ex, ey = extent
    fx = np.arange(width, dtype=np.float64) + offset[0]
    fy = np.arange(height, dtype=np.float64) + offset[1]
    t = (fy[:, None] * ey + fx[None, :] * ex) / (ex * ex + ey * ey)
    t = np.clip(t, 0.0, 1.0)
    # Distance from the middle stop, 0 at t=0.5 and 1 at either end
    s = np.abs(t - 0.5) * 2.0

    edge_rgb = np.array(hex_to_rgb(edge), dtype=np.float64)
    middle_rgb = np.array(hex_to_rgb(middle), dtype=np.float64)
    rgb = middle_rgb + (edge_rgb - middle_rgb) * s[:, :, None]
    return Image.fromarray(np.round(rgb).astype(np.uint8), "RGB")


class TerrainRasterizer:
    """Paints terrain into a canvas-sized RGB image."""

    def __init__(
        self, options: Optional[RasterOptions] = None, rng: Optional[np.random.Generator] = None
    ):
        self.options = options or RasterOptions()
        self.rng = rng if rng is not None else get_rng()

    def render(
        self,
        field: PointField,
        index: SpatialIndex,
        noise: NoiseSampler,
        mode: RenderMode,
        visibility: TerrainVisibility,
    ) -> Image.Image:
        """
        Render terrain with the selected strategy.

        Args:
            field: Point field to draw
            index: Spatial index built over ``field.points``
            noise: The map's noise sampler (used by smooth mode)
            mode: Render mode
            visibility: Per-category visibility

        Returns:
            New RGB image of the canvas size
        """
        mode = RenderMode(mode)
        logger.info(
            "Rasterizing terrain",
            mode=mode.value,
            width=field.width,
            height=field.height,
            hidden=[TerrainType(t).name.lower() for t in visibility.hidden_types()],
        )

        image = Image.new("RGB", (field.width, field.height), WATER_COLOR)
        if mode is RenderMode.PIXEL:
            self.render_pixel(image, field, index, visibility)
        elif mode is RenderMode.VORONOI:
            self.render_voronoi(image, field, index, visibility)
        else:
            self.render_smooth(image, field, noise, visibility)
        return image

    def substitute_type(self, visibility: TerrainVisibility, land_only: bool = False) -> Optional[TerrainType]:
        """Random visible category, or None when there is none to pick."""
        candidates = visibility.visible_types(include_water=not land_only)
        if not candidates:
            return None
        return candidates[int(self.rng.integers(0, len(candidates)))]

    def render_pixel(
        self,
        image: Image.Image,
        field: PointField,
        index: SpatialIndex,
        visibility: TerrainVisibility,
    ) -> None:
        size = self.options.pixel_size
        width, height = image.size

        # Grid anchored at the padded origin; only cells starting on the canvas are painted
        xs = np.arange(-field.padding, width + field.padding, size)
        ys = np.arange(-field.padding, height + field.padding, size)
        xs = xs[(xs >= 0) & (xs < width)]
        ys = ys[(ys >= 0) & (ys < height)]
        if len(xs) == 0 or len(ys) == 0:
            return

        cx, cy = np.meshgrid(xs + size / 2, ys + size / 2)
        nearest = index.find_nearest_many(cx, cy)
        cell_terrain = field.terrain[nearest]
        rgb = TERRAIN_RGB[cell_terrain]

        visible = np.array([visibility.is_visible(t) for t in TerrainType])
        hidden = ~visible[cell_terrain]
        if hidden.any():
            candidates = np.array(visibility.visible_types(), dtype=np.int8)
            picks = self.rng.integers(0, len(candidates), int(hidden.sum()))
            rgb[hidden] = TERRAIN_RGB[candidates[picks]]

        block = np.repeat(np.repeat(rgb, size, axis=0), size, axis=1)
        x0 = int(math.floor(xs[0]))
        y0 = int(math.floor(ys[0]))
        w = min(block.shape[1], width - x0)
        h = min(block.shape[0], height - y0)

        canvas = np.array(image)
        canvas[y0 : y0 + h, x0 : x0 + w] = block[:h, :w]
        image.paste(Image.fromarray(canvas, "RGB"))

    def render_voronoi(
        self,
        image: Image.Image,
        field: PointField,
        index: SpatialIndex,
        visibility: TerrainVisibility,
    ) -> None:
        draw = ImageDraw.Draw(image)
        bounds = field.padded_bounds
        drawn = 0

        for i, terrain_type in enumerate(field.terrain):
            polygon = index.cell_boundary(i, bounds)
            if len(polygon) < 3:
                continue
            terrain_type = TerrainType(int(terrain_type))
            if not visibility.is_visible(terrain_type):
                terrain_type = self.substitute_type(visibility)
            draw.polygon([tuple(p) for p in polygon], fill=TERRAIN_COLORS[terrain_type])
            drawn += 1

        logger.debug("Voronoi cells drawn", cells=drawn)

    def smooth_height_map(self, width: int, height: int, noise: NoiseSampler) -> np.ndarray:
        """
        Coarse height map for smooth mode, indexed ``[x, y]``.

        Samples noise at the grid indices themselves, independent of the
        point field, with its own edge fade.
        """
        res = self.options.smooth_resolution
        padding = width * self.options.smooth_padding_ratio
        grid = (width + padding * 2) / res

        height_map = np.zeros((res + 2, res + 2))
        for x in range(res + 2):
            for y in range(res + 2):
                nx = (x * grid - padding) / width - 0.5
                ny = (y * grid - padding) / height - 0.5
                distance = math.sqrt(nx * nx + ny * ny) / math.sqrt(0.5)
                fade = max(0.0, 1.0 - distance * self.options.smooth_fade_scale)
                height_map[x, y] = noise.layered(x, y, SMOOTH_OCTAVES) * fade
        return height_map

    def render_smooth(
        self,
        image: Image.Image,
        field: PointField,
        noise: NoiseSampler,
        visibility: TerrainVisibility,
    ) -> None:
        width, height = image.size
        res = self.options.smooth_resolution
        padding = width * self.options.smooth_padding_ratio
        total = (width + padding * 2, height + padding * 2)
        grid = total[0] / res

        height_map = self.smooth_height_map(width, height, noise)
        brushes: Dict[TerrainType, Image.Image] = {}
        patches = 0

        for x in range(res + 1):
            for y in range(res + 1):
                terrain_type = classify_elevation(height_map[x, y])
                # Water keeps the base fill
                if terrain_type == TerrainType.WATER:
                    continue
                if not visibility.is_visible(terrain_type):
                    terrain_type = self.substitute_type(visibility, land_only=True)
                    if terrain_type is None:
                        continue

                if terrain_type not in brushes:
                    edge, middle = GRADIENT_STOPS[terrain_type]
                    brushes[terrain_type] = linear_gradient(
                        image.size, (padding, padding), total, edge, middle
                    )

                start = (x * grid, y * grid)
                end = ((x + 1) * grid, (y + 1) * grid)
                control = ((x + 0.5) * grid, (y + 0.5) * grid)
                curve = cubic_bezier(
                    start,
                    (control[0], start[1]),
                    (end[0], control[1]),
                    end,
                    self.options.bezier_steps,
                )
                curve -= padding

                mask = Image.new("L", image.size, 0)
                ImageDraw.Draw(mask).polygon([tuple(p) for p in curve], fill=255)
                image.paste(brushes[terrain_type], (0, 0), mask)
                patches += 1

        logger.debug("Smooth patches drawn", patches=patches)


def describe_modes() -> List[str]:
    return [mode.value for mode in RenderMode]
