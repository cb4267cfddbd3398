"""Tile pyramid computation for a map viewport.

Given the state of a map projection (scale, translation and pixel size)
this module works out which slippy tiles cover the viewport at a single
integer zoom level, computes each tile's geographic extent, and splits
tiles into their four children at the next zoom level.

Every function here is a pure computation. ``Tiler`` is a small builder
holding an immutable ``TilerConfig`` and ``Viewport`` for callers that
prefer chained accessors.

Examples
--------
>>> from tilepyramid import MercatorProjection, Tiler
>>> projection = MercatorProjection.from_view((10.7, 59.9), 9.4, (800, 600))
>>> tiles = Tiler().margin(1).generate(projection)
>>> tiles[0].index.z
9
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from .geo import GeoExtent, Tile, TileIndex
from .projection import forward, inverse
from . import config
settings = config.settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TilerConfig:
    """Tiler configuration.

    Parameters
    ----------
    tile_size : int, optional
        Tile edge in pixels, by default 256.
    zoom_extent : tuple of int, optional
        Lowest and highest zoom level to return, by default (0, 20).
        Negative levels are clamped to 0.
    margin : int, optional
        Number of extra tile rings around the viewport, by default 0.
        Negative values are clamped to 0.
    skip_null_island : bool, optional
        Drop tiles around (0, 0) at zoom 7 and above, by default False.
    """

    tile_size: int = 256
    zoom_extent: Tuple[int, int] = (0, 20)
    margin: int = 0
    skip_null_island: bool = False

    def __post_init__(self):
        lo, hi = self.zoom_extent
        object.__setattr__(self, "zoom_extent", (max(0, int(lo)), max(0, int(hi))))
        object.__setattr__(self, "margin", max(0, int(self.margin)))
        object.__setattr__(self, "skip_null_island", bool(self.skip_null_island))

    @classmethod
    def from_settings(cls, source=None) -> "TilerConfig":
        """Build a configuration from Dynaconf settings.

        Parameters
        ----------
        source : Dynaconf or mapping, optional
            Settings to read. Defaults to ``tilepyramid.config.settings``.
        """
        source = settings if source is None else source
        return cls(
            tile_size=source.get("tile_size", 256),
            zoom_extent=tuple(source.get("zoom_extent", (0, 20))),
            margin=source.get("margin", 0),
            skip_null_island=source.get("skip_null_island", False),
        )


@dataclass(frozen=True)
class Viewport:
    """Projection state as seen by the tile grid.

    Parameters
    ----------
    size : tuple of float
        Viewport (width, height) in pixels.
    scale : float
        Width of the whole world in pixels.
    translate : tuple of float
        Pixel position of the projection origin (lon/lat 0, 0).
    """

    size: Tuple[float, float] = (256, 256)
    scale: float = 256
    translate: Tuple[float, float] = (128, 128)

    @classmethod
    def from_projection(cls, projection) -> "Viewport":
        return cls(
            size=tuple(projection.clip_extent()[1]),
            scale=projection.scale() * 2 * math.pi,
            translate=tuple(projection.translate()),
        )


class TileGrid(NamedTuple):
    """Tile indices covering a viewport.

    ``origin`` is the viewport's top-left corner in tile units and ``k``
    the size of one tile in viewport pixels.
    """

    indices: List[TileIndex]
    origin: Tuple[float, float]
    k: float
    zoom: Optional[int]


def _clamp(num, lo, hi):
    return max(lo, min(num, hi))


def near_null_island(index: TileIndex) -> bool:
    """Return True if the tile lies in the square around (0, 0) at zoom >= 7.

    The square is ``2**(z - 6)`` tiles wide and centered on the grid
    center ``2**(z - 1)``, so it covers the same ground at every zoom.
    """
    x, y, z = index
    if z >= 7:
        center = 2 ** (z - 1)
        width = 2 ** (z - 6)
        lo = center - width // 2
        hi = center + width // 2 - 1
        return lo <= x <= hi and lo <= y <= hi
    return False


def tile_grid(viewport: Viewport, tiler_config: TilerConfig = None) -> TileGrid:
    """Compute the tile indices covering a viewport.

    The zoom is the continuous zoom of ``viewport.scale`` rounded to the
    nearest integer and clamped to ``zoom_extent``. Columns and rows are
    widened by ``margin`` and clamped to the world.

    Tiles inside the viewport come first, in reverse row-major order,
    followed by the margin tiles in row-major order.

    Parameters
    ----------
    viewport : Viewport
        Current projection state.
    tiler_config : TilerConfig, optional
        Tiler configuration, by default ``TilerConfig()``.

    Returns
    -------
    TileGrid
        The indices with the grid origin and tile pixel size. Empty when
        the scale or tile size is not a positive finite number.
    """
    tiler_config = tiler_config or TilerConfig()
    ts = tiler_config.tile_size
    scale = viewport.scale
    if not (math.isfinite(scale) and math.isfinite(ts) and scale > 0 and ts > 0):
        logger.debug("Degenerate scale %r or tile size %r, no tiles", scale, ts)
        return TileGrid([], (math.nan, math.nan), math.nan, None)

    z = math.log2(scale / ts)
    zmin, zmax = tiler_config.zoom_extent
    # round half up, not half to even
    z0 = _clamp(math.floor(z + 0.5), zmin, zmax)
    tile_max = 2 ** z0 - 1
    k = 2 ** (z - z0) * ts
    origin = (
        (viewport.translate[0] - scale / 2) / k,
        (viewport.translate[1] - scale / 2) / k,
    )
    width, height = viewport.size
    bounds = (-origin[0], width / k - origin[0], -origin[1], height / k - origin[1])
    if not all(math.isfinite(b) for b in bounds):
        logger.debug("Non-finite viewport bounds %r, no tiles", bounds)
        return TileGrid([], origin, k, z0)

    m = tiler_config.margin
    cols = range(
        _clamp(math.floor(bounds[0]) - m, 0, tile_max + 1),
        _clamp(math.ceil(bounds[1]) + m, 0, tile_max + 1),
    )
    rows = range(
        _clamp(math.floor(bounds[2]) - m, 0, tile_max + 1),
        _clamp(math.ceil(bounds[3]) + m, 0, tile_max + 1),
    )
    logger.debug("Zoom %.3f -> %d, cols %r, rows %r", z, z0, cols, rows)

    interior = []
    outer = []
    for i, y in enumerate(rows):
        for j, x in enumerate(cols):
            index = TileIndex(x, y, z0)
            if m <= i <= len(rows) - m and m <= j <= len(cols) - m:
                interior.append(index)
            else:
                outer.append(index)
    interior.reverse()
    return TileGrid(interior + outer, origin, k, z0)


def generate_tiles(projection, tiler_config: TilerConfig = None) -> List[Tile]:
    """Return the tiles covering the current view of ``projection``.

    Parameters
    ----------
    projection : MercatorProjection
        Any object with ``scale()``, ``translate()``, ``clip_extent()``
        and ``invert(point)``.
    tiler_config : TilerConfig, optional
        Tiler configuration, by default ``TilerConfig()``.

    Returns
    -------
    list of Tile
        Tiles in priority order, viewport tiles before margin tiles.
    """
    tiler_config = tiler_config or TilerConfig()
    grid = tile_grid(Viewport.from_projection(projection), tiler_config)
    ts = grid.k
    scale = projection.scale()
    translate = projection.translate()
    origin = (scale * math.pi - translate[0], scale * math.pi - translate[1])

    tiles = []
    for index in grid.indices:
        if tiler_config.skip_null_island and near_null_island(index):
            continue
        x = index.x * ts - origin[0]
        y = index.y * ts - origin[1]
        extent = GeoExtent(
            projection.invert((x, y + ts)),
            projection.invert((x + ts, y)),
        )
        tiles.append(Tile(index, extent))

    logger.debug("Generated %d tiles at zoom %s (%d skipped near null island)",
                 len(tiles), grid.zoom, len(grid.indices) - len(tiles))
    return tiles


def subdivide(tile: Tile) -> List[Tile]:
    """Split a tile into its four children at the next zoom level.

    The extent is bisected in spherical Mercator space, not in degrees,
    so the children line up with the pixel grid of the next zoom level.
    Tile rows and columns count from the top left while the extent is
    geographic, so the top children get the northern half.

    Parameters
    ----------
    tile : Tile
        Tile to split. Only its index and extent are used.

    Returns
    -------
    list of Tile
        Children in top-left, bottom-left, top-right, bottom-right order.
    """
    (lon0, lat0), (lon1, lat1) = tile.extent.min, tile.extent.max
    px, py = forward(np.array([lon0, lon1]), np.array([lat0, lat1]))
    steps = np.array([0.0, 0.5, 1.0])
    lons, _ = inverse(px[0] + (px[1] - px[0]) * steps, 0.0)
    _, lats = inverse(0.0, py[0] + (py[1] - py[0]) * steps)
    lons = [float(v) for v in lons]
    lats = [float(v) for v in lats]

    top_left, bottom_left, top_right, bottom_right = tile.index.children()
    return [
        Tile(top_left, GeoExtent((lons[0], lats[1]), (lons[1], lats[2]))),
        Tile(bottom_left, GeoExtent((lons[0], lats[0]), (lons[1], lats[1]))),
        Tile(top_right, GeoExtent((lons[1], lats[1]), (lons[2], lats[2]))),
        Tile(bottom_right, GeoExtent((lons[1], lats[0]), (lons[2], lats[1]))),
    ]


def tiles_to_geojson(tiles: List[Tile]) -> dict:
    """Render tiles as a GeoJSON FeatureCollection for debugging."""
    features = [
        {
            "type": "Feature",
            "properties": {
                "id": tile.id,
                "name": tile.id
            },
            "geometry": {
                "type": "Polygon",
                "coordinates": [tile.extent.polygon()]
            }
        }
        for tile in tiles
    ]
    return {
        "type": "FeatureCollection",
        "features": features
    }


class Tiler:
    """Builder around ``TilerConfig`` and ``Viewport``.

    Accessors return the current value when called without an argument.
    Called with a value they store an updated copy of the configuration
    or viewport and return the tiler, so calls can be chained::

        tiles = Tiler().tile_size(512).margin(1).generate(projection)

    The stored values are immutable; ``config`` and ``viewport`` can be
    handed to ``tile_grid`` or ``generate_tiles`` directly. A tiler must
    not be modified while another thread is generating with it.
    """

    def __init__(self, tiler_config: TilerConfig = None, viewport: Viewport = None):
        self._config = tiler_config or TilerConfig()
        self._viewport = viewport or Viewport()

    @property
    def config(self) -> TilerConfig:
        return self._config

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def _config_value(self, name, val):
        if val is None:
            return getattr(self._config, name)
        self._config = replace(self._config, **{name: val})
        return self

    def _viewport_value(self, name, val):
        if val is None:
            return getattr(self._viewport, name)
        self._viewport = replace(self._viewport, **{name: val})
        return self

    def tile_size(self, val=None):
        return self._config_value("tile_size", val)

    def zoom_extent(self, val=None):
        return self._config_value("zoom_extent", val)

    # number of rows/columns beyond those covering the viewport
    def margin(self, val=None):
        return self._config_value("margin", val)

    def skip_null_island(self, val=None):
        return self._config_value("skip_null_island", val)

    def size(self, val=None):
        return self._viewport_value("size", None if val is None else tuple(val))

    def scale(self, val=None):
        return self._viewport_value("scale", val)

    def translate(self, val=None):
        return self._viewport_value("translate", None if val is None else tuple(val))

    def grid(self) -> TileGrid:
        """Tile indices for the stored viewport."""
        return tile_grid(self._viewport, self._config)

    def generate(self, projection) -> List[Tile]:
        """Tiles covering ``projection``; also stores its viewport."""
        self._viewport = Viewport.from_projection(projection)
        return generate_tiles(projection, self._config)

    def geojson(self, projection) -> dict:
        """Debug FeatureCollection of the tiles covering ``projection``."""
        return tiles_to_geojson(self.generate(projection))
