"""Filesystem entry and deletion plan models.

An Entry is one node discovered while enumerating a subtree. A
DeletionPlan is the post-order sequence of entries for a single run:
every directory appears after all of its children.
"""

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forcedel.models.result import FailedEntry


class EntryKind(str, Enum):
    """Type of filesystem entry.

    Attributes:
        FILE: Regular file (or any non-directory, non-link node).
        DIRECTORY: Directory that is traversed and removed after its children.
        SYMLINK: Symbolic link. Never traversed; the link itself is removed.
    """

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem node scheduled for removal.

    Attributes:
        path: Absolute path of the entry.
        kind: Entry type (file, directory, symlink).
    """

    path: str
    kind: EntryKind

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Entry path cannot be empty"
            raise ValueError(msg)
        if not os.path.isabs(self.path):
            msg = f"Entry path must be absolute, got {self.path!r}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Final path component."""
        return os.path.basename(self.path.rstrip(os.sep)) or self.path

    @property
    def is_dir(self) -> bool:
        """Check if this entry is a (non-link) directory."""
        return self.kind == EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class DeletionPlan:
    """Ordered, post-order sequence of entries for one run.

    Attributes:
        root: Absolute root path the plan was enumerated from.
        entries: Entries in deletion order (children before parents).
        enumeration_failures: Subtree members that could not be listed
            and were therefore excluded from ``entries``.
    """

    root: str
    entries: tuple[Entry, ...]
    enumeration_failures: tuple["FailedEntry", ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    @property
    def file_count(self) -> int:
        """Number of non-directory entries in the plan."""
        return sum(1 for e in self.entries if not e.is_dir)

    @property
    def directory_count(self) -> int:
        """Number of directory entries in the plan."""
        return sum(1 for e in self.entries if e.is_dir)
