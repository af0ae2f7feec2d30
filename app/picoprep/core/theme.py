"""Console colors.

The bundled data/theme.toml holds the defaults. A ``[colors]`` table in
~/.config/picoprep/theme.toml may override any subset of them.
"""

import logging
import string
import tomllib
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from picoprep.core.paths import get_config_dir

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Hex colors (#RGB or #RRGGBB) for each output role."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    banner: str = "#c1ff62"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("color must be a string")
        color = value.strip()
        digits = color.removeprefix("#")
        if (
            color == digits
            or len(digits) not in (3, 6)
            or not all(c in string.hexdigits for c in digits)
        ):
            raise ValueError(f"'{value}' is not a #RGB or #RRGGBB color")
        return color


def get_user_theme_path() -> Path:
    return get_config_dir() / "theme.toml"


def _read_colors(text: str, source: str) -> dict[str, object]:
    try:
        colors = tomllib.loads(text).get("colors", {})
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring %s: %s", source, e)
        return {}
    if not isinstance(colors, dict):
        logger.warning("Ignoring %s: 'colors' is not a table", source)
        return {}
    return colors


def load_theme() -> ThemeColors:
    """Merge user overrides over the bundled colors.

    An unreadable or invalid user theme is ignored with a warning; the
    bundled defaults are used instead.
    """
    bundled = resources.files("picoprep.data").joinpath("theme.toml").read_text()
    colors = _read_colors(bundled, "bundled theme")

    user_path = get_user_theme_path()
    overrides: dict[str, object] = {}
    if user_path.is_file():
        try:
            overrides = _read_colors(user_path.read_text(), str(user_path))
        except OSError as e:
            logger.warning("Could not read %s: %s", user_path, e)

    try:
        return ThemeColors(**{**colors, **overrides})
    except ValidationError as e:
        logger.warning("Invalid theme in %s, using defaults: %s", user_path, e)
        return ThemeColors(**colors)


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the named styles the console output refers to."""
    c = colors or load_theme()
    return Theme(
        {
            "text": c.text,
            "muted": c.muted,
            "header": c.header,
            "bold_header": f"bold {c.header}",
            "border": c.border,
            "banner": f"bold {c.banner}",
            "success": c.success,
            "warning": c.warning,
            "error": f"bold {c.error}",
            "info": c.info,
        }
    )


_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the Rich theme, loading it on first use."""
    global _theme
    if _theme is None:
        _theme = get_rich_theme()
    return _theme
