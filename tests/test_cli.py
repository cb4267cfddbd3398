"""Tests for the tilepyramid.cli module."""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from tilepyramid.cli import app


runner = CliRunner()


class TestTilesCommand:
    """Tests for the tiles CLI command."""

    def test_world_view(self):
        """Default options should list the zoom 0 tile."""
        result = runner.invoke(app, ["tiles"])

        assert result.exit_code == 0
        assert result.output.split() == ["0,0,0"]

    def test_zoom_one_view(self):
        """A 512px view at zoom 1 should list all four zoom 1 tiles."""
        result = runner.invoke(app, ["tiles", "--zoom", "1", "--width", "512", "--height", "512"])

        assert result.exit_code == 0
        assert set(result.output.split()) == {"0,0,1", "1,0,1", "0,1,1", "1,1,1"}

    def test_geojson_output(self):
        """--geojson should print a FeatureCollection."""
        result = runner.invoke(app, ["tiles", "--geojson"])

        assert result.exit_code == 0
        collection = json.loads(result.output)
        assert collection["type"] == "FeatureCollection"
        assert collection["features"][0]["properties"]["id"] == "0,0,0"

    def test_skip_null_island_flag(self):
        """--skip-null-island should drop tiles around (0, 0)."""
        args = ["tiles", "--zoom", "8.2", "--width", "512", "--height", "512"]
        kept = runner.invoke(app, args + ["--keep-null-island"])
        skipped = runner.invoke(app, args + ["--skip-null-island"])

        assert kept.exit_code == 0
        assert skipped.exit_code == 0
        assert kept.output.split()
        assert skipped.output.split() == []

    def test_margin_option(self):
        """--margin should widen the tile set."""
        args = ["tiles", "--lon", "10.75", "--lat", "59.91", "--zoom", "10.3",
                "--width", "800", "--height", "600"]
        base = runner.invoke(app, args).output.split()
        wider = runner.invoke(app, args + ["--margin", "1"]).output.split()

        assert set(base) < set(wider)

    def test_rejects_invalid_latitude(self):
        """A latitude outside (-90, 90) should be a usage error."""
        result = runner.invoke(app, ["tiles", "--lat", "95"])

        assert result.exit_code != 0

    def test_rejects_invalid_tile_size(self):
        """A non-positive tile size should be a usage error."""
        result = runner.invoke(app, ["tiles", "--tile-size", "0"])

        assert result.exit_code != 0


class TestSubdivideCommand:
    """Tests for the subdivide CLI command."""

    def test_world_tile(self):
        """subdivide 0 0 0 should print the four zoom 1 children."""
        result = runner.invoke(app, ["subdivide", "0", "0", "0"])

        assert result.exit_code == 0
        children = json.loads(result.output)
        assert [c["id"] for c in children] == ["0,0,1", "0,1,1", "1,0,1", "1,1,1"]
        assert children[0]["xyz"] == [0, 0, 1]
        assert len(children[0]["extent"]) == 2

    def test_rejects_out_of_range_index(self):
        """An index outside the zoom level's grid should be a usage error."""
        result = runner.invoke(app, ["subdivide", "5", "0", "1"])

        assert result.exit_code != 0


class TestCallback:
    """Tests for the CLI callback."""

    @patch('tilepyramid.config.change_env')
    def test_changes_env_when_not_default(self, mock_change_env):
        """--env should switch the settings environment."""
        result = runner.invoke(app, ["--env", "production", "tiles"])

        mock_change_env.assert_called_once_with("production")
        assert result.exit_code == 0

    @patch('tilepyramid.config.change_env')
    def test_skips_env_change_for_default(self, mock_change_env):
        """The default environment should not be switched."""
        result = runner.invoke(app, ["tiles"])

        mock_change_env.assert_not_called()
        assert result.exit_code == 0

    def test_help_lists_commands(self):
        """--help should list available commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "tiles" in result.output
        assert "subdivide" in result.output
