"""
The map object: owner of all map state and the operations a host UI calls.

Full regeneration (new map, resize) rebuilds the point field, settlements and
render cache; render mode and visibility changes rebuild only the cache; pan
and zoom only re-blit the cache. A regeneration builds its whole snapshot
and cache before swapping them in, so a failed or interrupted build leaves
the previous map intact.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
import structlog
from PIL import Image

from .compositor import Compositor
from .exceptions import InvalidMapSizeError
from .noise import NoiseSampler
from .point_field import PointField, PointFieldOptions, generate_point_field
from .rasterizer import RasterOptions, RenderMode, TerrainRasterizer
from .settlements import SettlementLayout, SettlementOptions, SettlementPlacer
from .spatial_index import SpatialIndex
from .terrain import TERRAIN_NAMES, TerrainVisibility, parse_terrain_type
from .view import ViewState
from ..config import settings
from ..utils.random import make_rng, new_seed

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class MapSnapshot:
    """Everything generated for one map, swapped in as a unit."""

    seed: int
    field: PointField
    index: SpatialIndex
    noise: NoiseSampler
    settlements: SettlementLayout


@dataclass(frozen=True, eq=False)
class RenderCache:
    """Composited terrain and settlements, tagged with the inputs it was built from."""

    image: Image.Image
    key: Tuple


def validate_size(
    width,
    height,
    min_size: Optional[int] = None,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Parse and check a requested map size.

    Accepts ints and integer strings (as typed into a size box).

    Raises:
        InvalidMapSizeError: if either value is not an integer or out of range
    """
    min_size = settings.min_map_size if min_size is None else min_size
    max_width = settings.max_map_width if max_width is None else max_width
    max_height = settings.max_map_height if max_height is None else max_height

    parsed = []
    for value in (width, height):
        if isinstance(value, bool):
            raise InvalidMapSizeError(width, height, "sizes must be integers")
        try:
            number = int(str(value).strip())
        except ValueError:
            raise InvalidMapSizeError(width, height, "sizes must be integers") from None
        parsed.append(number)

    w, h = parsed
    if w < min_size or h < min_size:
        raise InvalidMapSizeError(width, height, f"sizes must be at least {min_size}")
    if w > max_width or h > max_height:
        raise InvalidMapSizeError(width, height, f"size limit is {max_width}x{max_height}")
    return w, h


class FantasyMap:
    """Procedural fantasy map with an off-screen render cache and a view transform."""

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: Optional[int] = None,
        render_mode=None,
        rng: Optional[np.random.Generator] = None,
        point_options: Optional[PointFieldOptions] = None,
        settlement_options: Optional[SettlementOptions] = None,
        raster_options: Optional[RasterOptions] = None,
        on_render: Optional[Callable[[Image.Image], None]] = None,
    ):
        """
        Args:
            width, height: Canvas size; defaults come from settings
            seed: Seed of the first map; later regenerations draw new seeds from ``rng``
            render_mode: Initial render mode
            rng: Generator for new map seeds and render-time substitution
            point_options: Point field options
            settlement_options: Settlement placement options
            raster_options: Rasterization options
            on_render: Called with every rendered frame
        """
        self.width, self.height = validate_size(
            settings.default_width if width is None else width,
            settings.default_height if height is None else height,
        )
        self.rng = rng if rng is not None else make_rng(settings.seed)
        self.point_options = point_options or PointFieldOptions(point_count=settings.point_count)
        self.settlement_options = settlement_options or SettlementOptions()
        self.rasterizer = TerrainRasterizer(raster_options, rng=self.rng)
        self.compositor = Compositor(cell_size=self.rasterizer.options.pixel_size)
        self.on_render = on_render

        self.render_mode = RenderMode(render_mode or settings.render_mode)
        self.view = ViewState()
        self.visibility = TerrainVisibility()

        self.snapshot: Optional[MapSnapshot] = None
        self.cache: Optional[RenderCache] = None
        self.frame: Optional[Image.Image] = None

        self.regenerate(seed=seed if seed is not None else settings.seed)

    # Accessors

    @property
    def points(self) -> np.ndarray:
        return self.snapshot.field.points

    @property
    def terrain(self) -> np.ndarray:
        return self.snapshot.field.terrain

    @property
    def colors(self):
        return self.snapshot.field.colors

    @property
    def settlements(self) -> SettlementLayout:
        return self.snapshot.settlements

    @property
    def seed(self) -> int:
        return self.snapshot.seed

    # Generation

    def _build_snapshot(self, width: int, height: int, seed: int) -> MapSnapshot:
        field = generate_point_field(width, height, self.point_options, seed=seed)
        index = SpatialIndex(field.points)
        placement_rng = make_rng([seed, 1])
        settlements = SettlementPlacer(
            field, index, self.settlement_options, rng=placement_rng
        ).generate()
        return MapSnapshot(
            seed=seed,
            field=field,
            index=index,
            noise=NoiseSampler(seed),
            settlements=settlements,
        )

    def _cache_key(self, snapshot: MapSnapshot) -> Tuple:
        return (id(snapshot), self.render_mode, self.visibility.key())

    def _build_cache(self, snapshot: MapSnapshot) -> RenderCache:
        terrain = self.rasterizer.render(
            snapshot.field, snapshot.index, snapshot.noise, self.render_mode, self.visibility
        )
        image = self.compositor.compose(terrain, snapshot.settlements)
        return RenderCache(image=image, key=self._cache_key(snapshot))

    def regenerate(self, seed: Optional[int] = None) -> Image.Image:
        """
        Build a brand new map (points, terrain, settlements, cache) and render it.

        Args:
            seed: Seed for the new map; drawn from the map's generator when None
        """
        return self._regenerate(self.width, self.height, seed)

    def _regenerate(self, width: int, height: int, seed: Optional[int]) -> Image.Image:
        seed = new_seed(self.rng) if seed is None else int(seed)
        logger.info("Regenerating map", width=width, height=height, seed=seed)

        snapshot = self._build_snapshot(width, height, seed)
        cache = self._build_cache(snapshot)

        self.width, self.height = width, height
        self.snapshot = snapshot
        self.cache = cache

        logger.info(
            "Map regenerated",
            seed=seed,
            cities=len(snapshot.settlements.cities),
            villages=len(snapshot.settlements.villages),
        )
        return self.render()

    def rebuild_cache(self) -> None:
        """Rebuild the render cache if its inputs changed."""
        key = self._cache_key(self.snapshot)
        if self.cache is not None and self.cache.key == key:
            return
        self.cache = self._build_cache(self.snapshot)

    # Host operations

    def set_size(self, width, height) -> Image.Image:
        """
        Resize the canvas and regenerate the map.

        Raises:
            InvalidMapSizeError: before any state is touched
        """
        width, height = validate_size(width, height)
        logger.info("Resizing map", width=width, height=height)
        return self._regenerate(width, height, None)

    def set_pan(self, x: float, y: float) -> Image.Image:
        self.view.set_pan(x, y)
        return self.render()

    def pan_by(self, dx: float, dy: float) -> Image.Image:
        self.view.pan_by(dx, dy)
        return self.render()

    def set_zoom(self, level: float) -> Image.Image:
        self.view.set_zoom(level)
        return self.render()

    def zoom_at(self, x: float, y: float, level: float) -> Image.Image:
        """Zoom keeping the world point under screen ``(x, y)`` fixed."""
        self.view.zoom_at(x, y, level)
        return self.render()

    def reset_view(self) -> Image.Image:
        self.view.reset()
        return self.render()

    def set_render_mode(self, mode) -> Image.Image:
        self.render_mode = RenderMode(mode)
        logger.info("Render mode changed", mode=self.render_mode.value)
        self.rebuild_cache()
        return self.render()

    def cycle_render_mode(self) -> Image.Image:
        """Switch pixel -> voronoi -> smooth -> pixel."""
        return self.set_render_mode(self.render_mode.next())

    def set_terrain_visible(self, terrain_type, enabled: bool) -> bool:
        """
        Show or hide a terrain category.

        Returns:
            False when the change was rejected (hiding the last visible category)
        """
        terrain_type = parse_terrain_type(terrain_type)
        if self.visibility.is_visible(terrain_type) == bool(enabled):
            return True
        if not self.visibility.set_visible(terrain_type, enabled):
            return False

        logger.info("Terrain visibility changed", terrain=TERRAIN_NAMES[terrain_type], visible=bool(enabled))
        self.rebuild_cache()
        self.render()
        return True

    def render(self) -> Image.Image:
        """Blit the render cache to a new frame under the current view."""
        self.frame = self.compositor.render_view(self.cache.image, self.view, (self.width, self.height))
        if self.on_render is not None:
            self.on_render(self.frame)
        return self.frame
