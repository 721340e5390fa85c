"""Run outcome models.

RunResult is the post-mortem record of one engine run: what was
removed (with the size captured before removal), what failed and why,
and whether the run was cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from forcedel.models.entry import Entry


class FailureStage(str, Enum):
    """Stage at which an entry failed.

    Attributes:
        ENUMERATE: The entry could not be listed while building the plan.
        DELETE: Both direct and forced removal failed.
    """

    ENUMERATE = "enumerate"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class DeletedEntry:
    """An entry that was successfully removed.

    Attributes:
        entry: The removed entry.
        size_bytes: Size captured before removal, None if it could not be read.
            Directories always record 0.
        forced: True if the entry was only removed by the fallback path.
    """

    entry: Entry
    size_bytes: int | None
    forced: bool = False

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def path(self) -> str:
        return self.entry.path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "name": self.name,
            "path": self.path,
            "kind": self.entry.kind.value,
            "size_bytes": self.size_bytes,
            "forced": self.forced,
        }


@dataclass(frozen=True, slots=True)
class FailedEntry:
    """An entry that could not be removed (or listed).

    Attributes:
        entry: The entry that failed.
        reason: Human-readable failure reason.
        stage: Whether the failure happened while enumerating or deleting.
    """

    entry: Entry
    reason: str
    stage: FailureStage = FailureStage.DELETE

    def __post_init__(self) -> None:
        """Validate failure data after initialization."""
        if not self.reason:
            msg = "Failure reason cannot be empty"
            raise ValueError(msg)

    @property
    def path(self) -> str:
        return self.entry.path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "path": self.path,
            "kind": self.entry.kind.value,
            "reason": self.reason,
            "stage": self.stage.value,
        }


@dataclass(frozen=True, slots=True)
class RunResult:
    """Aggregate outcome of one engine run.

    Attributes:
        root: Root path the run was started for.
        succeeded: Removed entries, in processing order.
        failed: Failed entries; enumeration failures come first.
        forced_count: Entries removed only via the forced-removal fallback.
        cancelled: True if the run stopped early on request.
        total: Number of entries in the plan.
        dry_run: True if nothing was actually removed.
        started_at: ISO 8601 timestamp of the run start.
        finished_at: ISO 8601 timestamp of the run end.
    """

    root: str
    succeeded: tuple[DeletedEntry, ...] = ()
    failed: tuple[FailedEntry, ...] = ()
    forced_count: int = 0
    cancelled: bool = False
    total: int = 0
    dry_run: bool = False
    started_at: str | None = None
    finished_at: str | None = None

    @property
    def processed_count(self) -> int:
        """Number of plan entries that reached an outcome."""
        return len(self.succeeded) + sum(
            1 for f in self.failed if f.stage == FailureStage.DELETE
        )

    @property
    def unprocessed_count(self) -> int:
        """Number of plan entries skipped because of cancellation."""
        return self.total - self.processed_count

    @property
    def bytes_freed(self) -> int:
        """Sum of captured sizes; entries with unknown size count as 0."""
        return sum(d.size_bytes or 0 for d in self.succeeded)

    @property
    def success(self) -> bool:
        """True if every entry was removed and the run was not cancelled."""
        return not self.failed and not self.cancelled

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "root": self.root,
            "total": self.total,
            "succeeded": [d.to_dict() for d in self.succeeded],
            "failed": [f.to_dict() for f in self.failed],
            "forced_count": self.forced_count,
            "bytes_freed": self.bytes_freed,
            "cancelled": self.cancelled,
            "dry_run": self.dry_run,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }
