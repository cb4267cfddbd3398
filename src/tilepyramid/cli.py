"""Command-line interface for tilepyramid.

This module provides CLI commands for listing the tiles that cover a map
view and for subdividing tiles, using the Typer framework.
"""
import json
import logging
from dataclasses import replace
from typing import Optional

import typer

from . import config
from .geo import Tile
from .projection import MercatorProjection
from .tiler import TilerConfig, generate_tiles, subdivide as subdivide_tile, tiles_to_geojson

app = typer.Typer(help="Tile pyramid calculations for slippy map viewports.")


def _tile_dict(tile):
    return {
        "id": tile.id,
        "xyz": list(tile.index),
        "extent": [list(tile.extent.min), list(tile.extent.max)],
    }


@app.callback()
def main(
    env: str = typer.Option("DEFAULT", help="Settings environment to use."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
):
    """Compute which slippy tiles cover a map view and split tiles into children."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    if env != "DEFAULT":
        config.change_env(env)


@app.command()
def tiles(
    lon: float = typer.Option(0.0, help="Longitude at the center of the view."),
    lat: float = typer.Option(0.0, help="Latitude at the center of the view."),
    zoom: float = typer.Option(0.0, help="Continuous zoom level of the view."),
    width: int = typer.Option(256, help="Viewport width in pixels."),
    height: int = typer.Option(256, help="Viewport height in pixels."),
    tile_size: Optional[int] = typer.Option(None, help="Tile edge in pixels."),
    margin: Optional[int] = typer.Option(None, help="Extra tile rings around the view."),
    skip_null_island: Optional[bool] = typer.Option(
        None, "--skip-null-island/--keep-null-island",
        help="Drop tiles around (0, 0) at zoom 7 and above."),
    geojson: bool = typer.Option(False, "--geojson", help="Print a GeoJSON FeatureCollection."),
):
    """List the tiles covering a view, one tile id per line."""
    if not -90 < lat < 90:
        raise typer.BadParameter("latitude must be between -90 and 90", param_hint="--lat")
    tiler_config = TilerConfig.from_settings(config.settings)
    overrides = {}
    if tile_size is not None:
        if tile_size <= 0:
            raise typer.BadParameter("tile size must be positive", param_hint="--tile-size")
        overrides["tile_size"] = tile_size
    if margin is not None:
        overrides["margin"] = margin
    if skip_null_island is not None:
        overrides["skip_null_island"] = skip_null_island
    tiler_config = replace(tiler_config, **overrides)

    projection = MercatorProjection.from_view(
        (lon, lat), zoom, (width, height), tiler_config.tile_size)
    result = generate_tiles(projection, tiler_config)
    if geojson:
        typer.echo(json.dumps(tiles_to_geojson(result), indent=2))
    else:
        for tile in result:
            typer.echo(tile.id)


@app.command()
def subdivide(
    x: int = typer.Argument(..., help="Tile column."),
    y: int = typer.Argument(..., help="Tile row."),
    z: int = typer.Argument(..., help="Zoom level."),
):
    """Print the four children of tile X Y Z as JSON."""
    if z < 0 or not (0 <= x < 2 ** z and 0 <= y < 2 ** z):
        raise typer.BadParameter(f"{x},{y},{z} is not a valid tile index")
    children = subdivide_tile(Tile.from_mercantile(x, y, z))
    typer.echo(json.dumps([_tile_dict(t) for t in children], indent=2))
