"""
Core map generation and rendering functionality.
"""

from .map_object import FantasyMap, validate_size
from .noise import NoiseSampler
from .point_field import PointField, PointFieldOptions, generate_point_field
from .rasterizer import RasterOptions, RenderMode, TerrainRasterizer
from .settlements import Settlement, SettlementLayout, SettlementOptions, SettlementPlacer
from .spatial_index import SpatialIndex
from .terrain import TerrainType, TerrainVisibility
from .view import ViewState

__all__ = ['FantasyMap', 'validate_size', 'NoiseSampler', 'PointField', 'PointFieldOptions',
           'generate_point_field', 'RasterOptions', 'RenderMode', 'TerrainRasterizer',
           'Settlement', 'SettlementLayout', 'SettlementOptions', 'SettlementPlacer',
           'SpatialIndex', 'TerrainType', 'TerrainVisibility', 'ViewState']
