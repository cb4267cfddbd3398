"""Shared pytest fixtures for tilepyramid tests."""

import math

import pytest

from tilepyramid import MercatorProjection, Tile


@pytest.fixture
def world_projection():
    """Provide a projection showing the whole world in one 256px viewport."""
    return MercatorProjection(
        scale=256 / (2 * math.pi),
        translate=(128, 128),
        clip_extent=((0, 0), (256, 256)),
    )


@pytest.fixture
def city_projection():
    """Provide an 800x600 view over Oslo at a fractional zoom."""
    return MercatorProjection.from_view((10.75, 59.91), 10.3, (800, 600))


@pytest.fixture
def null_island_projection():
    """Provide a 512x512 view centered on (0, 0) at zoom 8.2."""
    return MercatorProjection.from_view((0.0, 0.0), 8.2, (512, 512))


@pytest.fixture
def world_tile():
    """Provide the zoom 0 tile with full Web Mercator bounds."""
    return Tile.from_mercantile(0, 0, 0)
