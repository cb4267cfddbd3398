"""Configuration management for tilepyramid.

Settings are loaded with Dynaconf from multiple locations in order of
increasing priority:

1. Global settings (/etc/tilepyramid/)
2. User settings (~/.config/tilepyramid/)
3. Current directory settings (./)
4. Environment variable specified file (TILEPYRAMID_SETTINGS_FILE_FOR_DYNACONF)

Individual keys can also be set with ``TILEPYRAMID_`` prefixed environment
variables, e.g. ``TILEPYRAMID_MARGIN=1``.

Recognized keys are ``tile_size``, ``zoom_extent``, ``margin`` and
``skip_null_island``; see ``tilepyramid.tiler.TilerConfig.from_settings``.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib

from dynaconf import Dynaconf

USER_DIR = pathlib.Path("~/.config/tilepyramid").expanduser()
GLOB_DIR = pathlib.Path("/etc/tilepyramid/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("TILEPYRAMID_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="TILEPYRAMID",
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()
