"""State management for run history.

This module provides the StateManager class for persisting and querying
deletion run history in a JSONL file format.
"""

import json
import logging
from pathlib import Path
from typing import Any

from forcedel.core.paths import ensure_state_dir, get_state_dir
from forcedel.models.history import HistoryEntry, create_history_entry
from forcedel.models.result import RunResult

logger = logging.getLogger(__name__)


class StateManager:
    """Manages run history in a JSONL file.

    Storage location: ~/.local/state/forcedel/history.jsonl

    The history file uses JSON Lines format where each line is a complete
    JSON object representing a HistoryEntry. This format allows for
    efficient append-only writes and easy parsing.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/forcedel
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record(self, entry: HistoryEntry) -> None:
        """Append an entry to the history file.

        Creates file and parent directories if they don't exist.

        Args:
            entry: The history entry to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        line = entry.to_json_line()

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()

    def record_run(
        self,
        result: RunResult,
        metadata: dict[str, Any] | None = None,
    ) -> HistoryEntry:
        """Build a history entry from a finished run and record it.

        Args:
            result: The finished (non dry-run) run.
            metadata: Optional additional context (command, etc.).

        Returns:
            The recorded HistoryEntry.

        Raises:
            ValueError: If the result is from a dry run.
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        entry = create_history_entry(result, metadata=metadata)
        self.record(entry)
        logger.debug("Recorded run %s for %s to history", entry.id, entry.root)
        return entry

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """Read history entries, newest first.

        Args:
            limit: Maximum number of entries to return.
                  If None, returns all entries.

        Returns:
            List of HistoryEntry, newest first.
            Returns empty list if file doesn't exist.
        """
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                    logger.warning(
                        "Skipping corrupt history line %d: %s",
                        line_num,
                        str(e),
                    )
                    continue

        entries.reverse()

        if limit is not None:
            return entries[:limit]

        return entries
