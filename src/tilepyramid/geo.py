"""Geometric value types for the tile pyramid.

This module holds the small immutable values shared by the tile grid
generator and the subdivider: tile indices, geographic extents and the
tile descriptors built from them, plus the conversion between projection
scale and continuous zoom.
"""
import math
from dataclasses import dataclass
from typing import List, Tuple

import mercantile

LonLat = Tuple[float, float]


def scale_to_zoom(k: float, tile_size: int = 256) -> float:
    """Convert a projection scale to a continuous zoom level.

    Parameters
    ----------
    k : float
        Projection scale in pixels per radian.
    tile_size : int, optional
        Tile edge in pixels, by default 256.

    Returns
    -------
    float
        Continuous zoom. Zoom 0 renders the whole world in one tile of
        ``tile_size`` pixels.
    """
    return math.log2(k * 2 * math.pi / tile_size)


def zoom_to_scale(z: float, tile_size: int = 256) -> float:
    """Convert a continuous zoom level to a projection scale (pixels per radian)."""
    return tile_size * 2 ** z / (2 * math.pi)


@dataclass(frozen=True)
class TileIndex:
    """Slippy tile coordinate; x grows eastward, y grows southward."""

    x: int
    y: int
    z: int

    @property
    def id(self) -> str:
        return f"{self.x},{self.y},{self.z}"

    @property
    def quadkey(self) -> str:
        return mercantile.quadkey(self.x, self.y, self.z)

    def parent(self) -> "TileIndex":
        """Return the index containing this tile at ``z - 1``."""
        p = mercantile.parent(self.x, self.y, self.z)
        return TileIndex(p.x, p.y, p.z)

    def children(self) -> List["TileIndex"]:
        """Return the four indices at ``z + 1``.

        Order is top-left, bottom-left, top-right, bottom-right.
        """
        x, y, z = 2 * self.x, 2 * self.y, self.z + 1
        return [
            TileIndex(x, y, z),
            TileIndex(x, y + 1, z),
            TileIndex(x + 1, y, z),
            TileIndex(x + 1, y + 1, z),
        ]

    def __iter__(self):
        return iter((self.x, self.y, self.z))


@dataclass(frozen=True)
class GeoExtent:
    """Axis-aligned longitude/latitude rectangle.

    The two corners may be passed in any order; construction normalizes
    them so ``min`` is the south-west and ``max`` the north-east corner.

    Parameters
    ----------
    min : tuple of float
        One corner as (lon, lat).
    max : tuple of float, optional
        The opposite corner. Defaults to ``min`` (a point extent).
    """

    min: LonLat
    max: LonLat = None

    def __post_init__(self):
        a = self.min
        b = self.max if self.max is not None else self.min
        lo = (float(min(a[0], b[0])), float(min(a[1], b[1])))
        hi = (float(max(a[0], b[0])), float(max(a[1], b[1])))
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    def center(self) -> LonLat:
        return ((self.min[0] + self.max[0]) / 2, (self.min[1] + self.max[1]) / 2)

    def bbox(self) -> Tuple[float, float, float, float]:
        return (self.min[0], self.min[1], self.max[0], self.max[1])

    def polygon(self) -> List[List[float]]:
        """Return the extent as a closed ring, counter-clockwise from ``min``."""
        return [
            [self.min[0], self.min[1]],
            [self.min[0], self.max[1]],
            [self.max[0], self.max[1]],
            [self.max[0], self.min[1]],
            [self.min[0], self.min[1]],
        ]

    def contains(self, other: "GeoExtent") -> bool:
        return (other.min[0] >= self.min[0] and other.min[1] >= self.min[1]
                and other.max[0] <= self.max[0] and other.max[1] <= self.max[1])

    def intersects(self, other: "GeoExtent") -> bool:
        return (other.min[0] <= self.max[0] and other.min[1] <= self.max[1]
                and other.max[0] >= self.min[0] and other.max[1] >= self.min[1])

    def extend(self, other: "GeoExtent") -> "GeoExtent":
        """Return the smallest extent covering both extents."""
        return GeoExtent(
            (min(self.min[0], other.min[0]), min(self.min[1], other.min[1])),
            (max(self.max[0], other.max[0]), max(self.max[1], other.max[1])),
        )

    def approx_equal(self, other: "GeoExtent", tol: float = 1e-9) -> bool:
        return all(abs(a - b) <= tol for a, b in zip(self.bbox(), other.bbox()))


@dataclass(frozen=True)
class Tile:
    """Tile descriptor: an index together with its geographic extent."""

    index: TileIndex
    extent: GeoExtent

    @property
    def id(self) -> str:
        return self.index.id

    @classmethod
    def from_mercantile(cls, x: int, y: int, z: int) -> "Tile":
        """Build a descriptor with the canonical Web Mercator bounds of a tile."""
        b = mercantile.bounds(x, y, z)
        return cls(TileIndex(x, y, z), GeoExtent((b.west, b.south), (b.east, b.north)))
