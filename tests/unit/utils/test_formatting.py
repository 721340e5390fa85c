"""Unit tests for console formatting utilities."""

import pytest
from forcedel.utils.formatting import format_size


class TestFormatSize:
    """Tests for format_size function."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (1023, "1023 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (5 * 1024**2, "5.0 MB"),
            (3 * 1024**3, "3.0 GB"),
            (2 * 1024**4, "2.0 TB"),
            (4096 * 1024**4, "4096.0 TB"),
        ],
    )
    def test_units(self, size: int, expected: str) -> None:
        """Sizes are scaled to the largest fitting unit."""
        assert format_size(size) == expected

    def test_unknown_size(self) -> None:
        """An unknown size is shown as a dash."""
        assert format_size(None) == "-"
