"""History entry model for recorded deletion runs.

Each completed (or cancelled) run is appended to a JSON Lines history
file so there is an audit record of what was removed. The history is
append-only and is never used to resume a run.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from forcedel.models.result import RunResult


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single deletion run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601 format with timezone).
        root: Root path that was deleted.
        total: Number of entries in the plan.
        deleted: Number of entries removed.
        forced: Number of entries removed via the forced-removal fallback.
        failed_paths: Paths that could not be removed.
        bytes_freed: Sum of captured sizes of removed entries.
        cancelled: Whether the run was cancelled.
        metadata: Additional context (command, etc.).
    """

    id: str
    timestamp: str
    root: str
    total: int
    deleted: int
    forced: int = 0
    failed_paths: tuple[str, ...] = ()
    bytes_freed: int = 0
    cancelled: bool = False
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.root:
            msg = "History entry root cannot be empty"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """True if nothing failed and the run was not cancelled."""
        return not self.failed_paths and not self.cancelled

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history entry.
        """
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "root": self.root,
            "total": self.total,
            "deleted": self.deleted,
            "forced": self.forced,
            "failed_paths": list(self.failed_paths),
            "bytes_freed": self.bytes_freed,
            "cancelled": self.cancelled,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing entry data.

        Returns:
            HistoryEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            root=data["root"],
            total=int(data["total"]),
            deleted=int(data["deleted"]),
            forced=int(data.get("forced", 0)),
            failed_paths=tuple(data.get("failed_paths", [])),
            bytes_freed=int(data.get("bytes_freed", 0)),
            cancelled=bool(data.get("cancelled", False)),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Deserialize from JSON line.

        Args:
            line: Single JSON line (with or without trailing whitespace).

        Returns:
            HistoryEntry instance.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_history_entry(
    result: RunResult,
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a HistoryEntry from a finished run.

    Automatically generates a unique ID and current timestamp.

    Args:
        result: The finished run.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.

    Raises:
        ValueError: If the result is from a dry run.
    """
    if result.dry_run:
        msg = "Dry runs are not recorded to history"
        raise ValueError(msg)

    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=result.finished_at or datetime.now(UTC).isoformat(),
        root=result.root,
        total=result.total,
        deleted=len(result.succeeded),
        forced=result.forced_count,
        failed_paths=tuple(f.path for f in result.failed),
        bytes_freed=result.bytes_freed,
        cancelled=result.cancelled,
        metadata=metadata or {},
    )
