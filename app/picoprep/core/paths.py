"""Locations of picoprep's own files.

Only the settings file and theme live here, under the XDG config directory
(``$XDG_CONFIG_HOME/picoprep`` or ``~/.config/picoprep``). Everything
picoprep provisions goes where the settings say.
"""

import os
from pathlib import Path

APP_NAME = "picoprep"


def get_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / APP_NAME


def get_config_path() -> Path:
    """Return the default settings file, which need not exist."""
    return get_config_dir() / "config.toml"
