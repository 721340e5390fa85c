"""Data models for forcedel.

This module exports the core data structures used throughout the application.
"""

from forcedel.models.entry import DeletionPlan, Entry, EntryKind
from forcedel.models.history import HistoryEntry, create_history_entry
from forcedel.models.progress import ProgressEvent, ProgressKind, RunState
from forcedel.models.result import DeletedEntry, FailedEntry, FailureStage, RunResult

__all__ = [
    "DeletedEntry",
    "DeletionPlan",
    "Entry",
    "EntryKind",
    "FailedEntry",
    "FailureStage",
    "HistoryEntry",
    "ProgressEvent",
    "ProgressKind",
    "RunResult",
    "RunState",
    "create_history_entry",
]
