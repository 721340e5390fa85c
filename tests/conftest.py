"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from forcedel.engine.remover import ForcedRemovalResult
from forcedel.models.progress import ProgressEvent


class RecordingForcedRemover:
    """Forced remover double that records calls.

    When ``succeed`` is True the entry is really removed, the way a
    privileged command would do it; otherwise the attempt fails.
    """

    def __init__(self, succeed: bool = True, available: bool = True) -> None:
        self.succeed = succeed
        self.available = available
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return self.available

    def remove(self, path: str) -> ForcedRemovalResult:
        self.calls.append(path)
        if not self.succeed:
            return ForcedRemovalResult(success=False, reason="access denied")
        if os.path.isdir(path) and not os.path.islink(path):
            os.rmdir(path)
        else:
            os.unlink(path)
        return ForcedRemovalResult(success=True)


@pytest.fixture(autouse=True)
def isolated_xdg_dirs(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and state directories at a throwaway location."""
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, object]], Path]:
    """Build a directory tree from a nested dict.

    Keys are names; a dict value is a subdirectory, a str value is file
    content. Returns the root directory ("tree" under tmp_path).
    """

    def _build(layout: dict[str, object], root: Path | None = None) -> Path:
        root = root or tmp_path / "tree"
        root.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            if isinstance(value, dict):
                _build(value, root / name)
            else:
                (root / name).write_text(str(value))
        return root

    return _build


@pytest.fixture
def sample_tree(make_tree: Callable[[dict[str, object]], Path]) -> Path:
    """A small tree: 4 files and 3 directories including the root."""
    return make_tree(
        {
            "a.txt": "alpha",
            "sub": {
                "b.txt": "bravo!",
                "deeper": {"c.txt": "c"},
            },
            "z.txt": "zulu",
        }
    )


@pytest.fixture
def recorded_events() -> tuple[list[ProgressEvent], Callable[[ProgressEvent], None]]:
    """A list and a progress callback that appends to it."""
    events: list[ProgressEvent] = []
    return events, events.append


@pytest.fixture
def succeeding_remover() -> RecordingForcedRemover:
    """Forced remover that removes the entry."""
    return RecordingForcedRemover(succeed=True)


@pytest.fixture
def failing_remover() -> RecordingForcedRemover:
    """Forced remover that always fails."""
    return RecordingForcedRemover(succeed=False)
