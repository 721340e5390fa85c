"""Unit tests for progress models."""

import pytest
from forcedel.models.progress import ProgressEvent, ProgressKind, RunState


class TestProgressEvent:
    """Tests for ProgressEvent dataclass."""

    def test_create_event(self) -> None:
        """ProgressEvent stores its fields."""
        event = ProgressEvent(50, "Deleted: /t/a", ProgressKind.DELETED, path="/t/a")

        assert event.percent == 50
        assert event.path == "/t/a"
        assert event.is_terminal is False

    @pytest.mark.parametrize("percent", [-1, 101])
    def test_percent_out_of_range_raises(self, percent: int) -> None:
        """Percent must be within 0..100."""
        with pytest.raises(ValueError, match="between 0 and 100"):
            ProgressEvent(percent, "x", ProgressKind.DELETED)

    def test_terminal_kinds(self) -> None:
        """Only COMPLETE and CANCELLED end the stream."""
        terminal = {kind for kind in ProgressKind if kind.is_terminal}
        assert terminal == {ProgressKind.COMPLETE, ProgressKind.CANCELLED}

    def test_complete_event_is_terminal(self) -> None:
        """A completion event reports is_terminal."""
        assert ProgressEvent(100, "Deletion complete.", ProgressKind.COMPLETE).is_terminal


class TestRunState:
    """Tests for RunState enum."""

    def test_values(self) -> None:
        """RunState covers the engine lifecycle."""
        assert [s.value for s in RunState] == ["idle", "enumerating", "deleting", "completed"]
