"""Spherical Mercator projection helpers.

``forward`` and ``inverse`` are the raw projection on the unit sphere:
longitude/latitude in degrees map to projected units where the world spans
``[-pi, pi]`` on both axes. They are independent of any viewport and serve
as the linearizing transform for tile subdivision.

``MercatorProjection`` wraps the raw projection with a scale, a pixel
translation and a clip extent, the way an interactive map exposes its
current view. Pixel y grows downward.
"""
import math
from typing import Tuple

import numpy as np

from .geo import LonLat, zoom_to_scale

Point = Tuple[float, float]


def forward(lon, lat):
    """Project longitude/latitude to raw spherical Mercator.

    Parameters
    ----------
    lon : float or numpy.ndarray
        Longitude in degrees.
    lat : float or numpy.ndarray
        Latitude in degrees.

    Returns
    -------
    tuple
        (x, y) in projected units, y positive northward.
    """
    lam = np.radians(lon)
    phi = np.radians(lat)
    return lam, np.log(np.tan((np.pi / 2 + phi) / 2))


def inverse(x, y):
    """Invert raw spherical Mercator back to longitude/latitude in degrees."""
    return np.degrees(x), np.degrees(2 * np.arctan(np.exp(y)) - np.pi / 2)


class MercatorProjection:
    """A Mercator projection bound to a viewport.

    Accessors follow the chained getter/setter style: called without an
    argument they return the current value, with an argument they set it
    and return the projection.

    Parameters
    ----------
    scale : float, optional
        Pixels per radian. Defaults to one 256 pixel tile for the world.
    translate : tuple of float, optional
        Pixel position of longitude/latitude (0, 0).
    clip_extent : tuple, optional
        Viewport pixel bounds as ((x0, y0), (x1, y1)).
    """

    def __init__(self, scale: float = 256 / (2 * math.pi),
                 translate: Point = (128.0, 128.0),
                 clip_extent=((0, 0), (256, 256))):
        self._scale = scale
        self._translate = tuple(translate)
        self._clip_extent = (tuple(clip_extent[0]), tuple(clip_extent[1]))

    @classmethod
    def from_view(cls, center: LonLat, zoom: float, size: Point,
                  tile_size: int = 256) -> "MercatorProjection":
        """Build a projection centered on a location at a continuous zoom.

        Parameters
        ----------
        center : tuple of float
            (lon, lat) shown at the middle of the viewport.
        zoom : float
            Continuous zoom level.
        size : tuple of float
            Viewport (width, height) in pixels.
        tile_size : int, optional
            Tile edge the zoom is calibrated against, by default 256.
        """
        k = zoom_to_scale(zoom, tile_size)
        x, y = forward(center[0], center[1])
        translate = (size[0] / 2 - k * float(x), size[1] / 2 + k * float(y))
        return cls(k, translate, ((0, 0), tuple(size)))

    def scale(self, val=None):
        if val is None:
            return self._scale
        self._scale = val
        return self

    def translate(self, val=None):
        if val is None:
            return self._translate
        self._translate = tuple(val)
        return self

    def clip_extent(self, val=None):
        if val is None:
            return self._clip_extent
        self._clip_extent = (tuple(val[0]), tuple(val[1]))
        return self

    def project(self, point: LonLat) -> Point:
        """Map (lon, lat) in degrees to a pixel position."""
        x, y = forward(point[0], point[1])
        return (float(self._translate[0] + self._scale * x),
                float(self._translate[1] - self._scale * y))

    def invert(self, point: Point) -> LonLat:
        """Map a pixel position back to (lon, lat) in degrees."""
        x = (point[0] - self._translate[0]) / self._scale
        y = (self._translate[1] - point[1]) / self._scale
        lon, lat = inverse(x, y)
        return float(lon), float(lat)

    def __repr__(self):
        return (f"MercatorProjection(scale={self._scale!r}, "
                f"translate={self._translate!r}, clip_extent={self._clip_extent!r})")
