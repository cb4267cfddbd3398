"""Tile pyramid computation for slippy map viewports.

Works out which tiles cover a map view at a single zoom level, the
geographic extent of each tile, and the four children of any tile.
"""
from .geo import GeoExtent, Tile, TileIndex, scale_to_zoom, zoom_to_scale
from .projection import MercatorProjection, forward, inverse
from .tiler import (
    Tiler,
    TilerConfig,
    TileGrid,
    Viewport,
    generate_tiles,
    near_null_island,
    subdivide,
    tile_grid,
    tiles_to_geojson,
)
