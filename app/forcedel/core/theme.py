"""Console colors for forcedel.

Colors come from the bundled ``data/theme.toml``; a user ``theme.toml``
in the config directory may override any subset of them.
"""

import logging
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError
from rich.theme import Theme

from forcedel.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

HexColor = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$")]


class ThemeColors(BaseModel):
    """Colors for run output, keyed by what they mark."""

    model_config = ConfigDict(extra="forbid")

    path: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    info: HexColor = "#0ec1c8"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"

    # Per-entry outcomes
    deleted: HexColor = "#03b971"
    forced: HexColor = "#faf870"
    failed: HexColor = "#f53263"

    def to_rich_theme(self) -> Theme:
        """Build the Rich styles used by the CLI."""
        return Theme(
            {
                "muted": self.muted,
                "dim": self.muted,
                "header": self.header,
                "bold_header": f"bold {self.header}",
                "border": self.border,
                "info": self.info,
                "success": self.success,
                "warning": self.warning,
                "error": f"bold {self.error}",
                "deleted": self.deleted,
                "forced": self.forced,
                "failed": f"bold {self.failed}",
                "entry.path": f"bold {self.path}",
                "entry.size": self.info,
            }
        )


def read_colors(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    A missing or unreadable file yields no colors; a broken one is logged.

    Args:
        path: Theme TOML file.

    Returns:
        Color names mapped to their raw values.
    """
    try:
        with open(path, "rb") as f:
            table = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return {}
    return {name: value for name, value in table.items() if isinstance(value, str)}


def load_colors() -> ThemeColors:
    """Merge the user's overrides onto the bundled colors.

    Returns:
        Validated colors, or the built-in defaults if validation fails.
    """
    bundled = read_colors(Path(str(resources.files("forcedel.data").joinpath("theme.toml"))))
    overrides = read_colors(get_user_theme_path())
    try:
        return ThemeColors(**{**bundled, **overrides})
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


@cache
def get_theme() -> Theme:
    """Get the Rich theme, loaded once per process."""
    return load_colors().to_rich_theme()
