"""Unit tests for console colors."""

from pathlib import Path
from unittest.mock import patch

import pytest
from forcedel.core.theme import ThemeColors, get_theme, load_colors, read_colors
from pydantic import ValidationError
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors model."""

    def test_outcome_colors(self) -> None:
        """Each entry outcome has its own default color."""
        colors = ThemeColors()

        assert colors.deleted == "#03b971"
        assert colors.forced == "#faf870"
        assert colors.failed == "#f53263"

    @pytest.mark.parametrize("value", ["#abc", "#A1b2C3", "  #faf870 "])
    def test_accepts_hex(self, value: str) -> None:
        """Short and long hex codes are accepted, surrounding blanks stripped."""
        assert ThemeColors(forced=value).forced == value.strip()

    @pytest.mark.parametrize("value", ["faf870", "#ff", "#gggggg", "yellow"])
    def test_rejects_non_hex(self, value: str) -> None:
        """Anything but #RGB or #RRGGBB is refused."""
        with pytest.raises(ValidationError):
            ThemeColors(failed=value)

    def test_unknown_key_rejected(self) -> None:
        """Typos in a theme file do not pass silently."""
        with pytest.raises(ValidationError):
            ThemeColors(deletd="#000000")  # type: ignore[call-arg]

    def test_rich_styles_for_outcomes(self) -> None:
        """Failures are bold; deleted and forced use their plain colors."""
        styles = ThemeColors(forced="#123456").to_rich_theme().styles

        assert styles["failed"].bold is True
        assert styles["deleted"].bold is not True
        assert styles["forced"].color is not None
        assert styles["forced"].color.name == "#123456"
        assert styles["entry.path"].bold is True


class TestReadColors:
    """Tests for read_colors function."""

    def test_reads_colors_table(self, tmp_path: Path) -> None:
        """String values of the [colors] table are returned."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\nforced = "#000000"\ndeleted = 3\n')

        assert read_colors(theme_file) == {"forced": "#000000"}

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file contributes nothing."""
        assert read_colors(tmp_path / "absent.toml") == {}

    def test_broken_toml(self, tmp_path: Path) -> None:
        """A file that is not TOML contributes nothing."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("[colors\nfailed =")

        assert read_colors(theme_file) == {}

    def test_colors_not_a_table(self, tmp_path: Path) -> None:
        """A scalar colors key is ignored."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('colors = "red"\n')

        assert read_colors(theme_file) == {}


class TestLoadColors:
    """Tests for load_colors function."""

    def test_bundled_matches_defaults(self, tmp_path: Path) -> None:
        """Without overrides the bundled file yields the model defaults."""
        with patch("forcedel.core.theme.get_user_theme_path", return_value=tmp_path / "none.toml"):
            assert load_colors() == ThemeColors()

    def test_partial_user_override(self, tmp_path: Path) -> None:
        """A user file can change just the failure color."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nfailed = "#ff0000"\n')

        with patch("forcedel.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_colors()

        assert colors.failed == "#ff0000"
        assert colors.deleted == ThemeColors().deleted

    def test_invalid_override_uses_defaults(self, tmp_path: Path) -> None:
        """An invalid user color falls back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nforced = "yellow"\n')

        with patch("forcedel.core.theme.get_user_theme_path", return_value=user_theme):
            assert load_colors() == ThemeColors()


def test_get_theme_is_cached() -> None:
    """The Rich theme is built once and reused."""
    assert isinstance(get_theme(), Theme)
    assert get_theme() is get_theme()
