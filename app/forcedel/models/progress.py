"""Progress event and run state models."""

from dataclasses import dataclass
from enum import Enum


class RunState(str, Enum):
    """Lifecycle state of a DeletionEngine.

    Attributes:
        IDLE: No run has started.
        ENUMERATING: Building the deletion plan.
        DELETING: Processing plan entries.
        COMPLETED: The last run finished (completed, failed or cancelled).
    """

    IDLE = "idle"
    ENUMERATING = "enumerating"
    DELETING = "deleting"
    COMPLETED = "completed"


class ProgressKind(str, Enum):
    """What a progress event reports.

    Attributes:
        DELETED: Entry removed directly.
        FORCED: Entry removed by the forced-removal fallback.
        ERROR: Entry could not be removed.
        COMPLETE: Terminal event, run finished.
        CANCELLED: Terminal event, run stopped on request.
    """

    DELETED = "deleted"
    FORCED = "forced"
    ERROR = "error"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ProgressKind.COMPLETE, ProgressKind.CANCELLED)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Immutable progress notification published by the engine.

    Attributes:
        percent: Overall completion, 0-100, non-decreasing within a run.
        message: Human-readable description of the outcome.
        kind: Event type.
        path: Entry path the event refers to, None for terminal events.
    """

    percent: int
    message: str
    kind: ProgressKind
    path: str | None = None

    def __post_init__(self) -> None:
        """Validate event data after initialization."""
        if not (0 <= self.percent <= 100):
            msg = f"Percent must be between 0 and 100, got {self.percent}"
            raise ValueError(msg)

    @property
    def is_terminal(self) -> bool:
        """Check if this event ends the run's event stream."""
        return self.kind.is_terminal
