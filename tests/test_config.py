"""Tests for the tilepyramid.config module."""

from unittest.mock import patch

from dynaconf import Dynaconf

from tilepyramid import config
from tilepyramid.tiler import TilerConfig


class TestSettings:
    """Tests for the module settings object."""

    def test_is_dynaconf(self):
        """settings should be a Dynaconf instance."""
        assert isinstance(config.settings, Dynaconf)

    def test_searches_standard_locations(self):
        """Global, user and current directory settings files should be searched."""
        names = [str(p) for p in config.settings_files]
        assert any(n.startswith(str(config.GLOB_DIR)) for n in names)
        assert any(n.startswith(str(config.USER_DIR)) for n in names)
        assert any(n.startswith(str(config.CURR_DIR)) for n in names)

    def test_change_env(self):
        """change_env should switch and reload the settings."""
        with patch.object(config, 'settings') as mock_settings:
            config.change_env("production")

            mock_settings.setenv.assert_called_once_with("production")
            mock_settings.reload.assert_called_once()


class TestTilerConfigFromFile:
    """Tests for reading tiler configuration from a settings file."""

    def test_reads_toml_environment(self, tmp_path):
        """Keys in the default environment should reach TilerConfig."""
        settings_file = tmp_path / "settings.toml"
        settings_file.write_text(
            "[default]\n"
            "tile_size = 512\n"
            "zoom_extent = [1, 12]\n"
            "margin = 2\n"
            "skip_null_island = true\n"
        )
        settings = Dynaconf(settings_files=[settings_file], environments=True)

        tiler_config = TilerConfig.from_settings(settings)

        assert tiler_config == TilerConfig(512, (1, 12), 2, True)

    def test_missing_keys_use_defaults(self, tmp_path):
        """An empty settings file should give the default configuration."""
        settings = Dynaconf(settings_files=[tmp_path / "absent.toml"], environments=True)

        assert TilerConfig.from_settings(settings) == TilerConfig()
