"""Subtree enumeration into a post-order deletion plan.

The walk never follows symbolic links: a link is planned as a single
entry and removing it removes the link, not its target. This keeps a
run confined to the root even when the tree links elsewhere.
"""

import logging
import os
from dataclasses import dataclass, field

from forcedel.engine.errors import EnumerationError, NotFoundError
from forcedel.models.entry import DeletionPlan, Entry, EntryKind
from forcedel.models.result import FailedEntry, FailureStage

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Frame:
    """A directory being walked, with its not-yet-visited children."""

    entry: Entry
    children: list[Entry] = field(default_factory=list)
    index: int = 0


def absolute_root(root: str | os.PathLike[str]) -> str:
    """Make a root path absolute without resolving symlinks.

    ``os.path.realpath`` would replace a symlink root by its target, which
    would delete the target tree instead of the link.

    Args:
        root: Path supplied by the caller.

    Returns:
        Normalized absolute path.
    """
    return os.path.normpath(os.path.abspath(os.fspath(root)))


def classify(path: str) -> EntryKind:
    """Determine the entry kind of an existing path without following links.

    Args:
        path: Path to inspect.

    Returns:
        EntryKind of the path.

    Raises:
        OSError: If the path cannot be stat'ed.
    """
    if os.path.islink(path):
        return EntryKind.SYMLINK
    if os.path.isdir(path):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


def _kind_of(dir_entry: os.DirEntry[str]) -> EntryKind:
    if dir_entry.is_symlink():
        return EntryKind.SYMLINK
    if dir_entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


def _list_children(directory: Entry) -> list[Entry]:
    """List the direct children of a directory, sorted by name.

    Raises:
        EnumerationError: If the directory cannot be listed.
    """
    try:
        with os.scandir(directory.path) as it:
            children = [Entry(path=d.path, kind=_kind_of(d)) for d in it]
    except OSError as e:
        msg = f"Cannot list directory: {e.strerror or e}"
        raise EnumerationError(msg, path=directory.path) from e
    children.sort(key=lambda e: e.name)
    return children


def enumerate_tree(root: str | os.PathLike[str]) -> DeletionPlan:
    """Enumerate a subtree into a post-order deletion plan.

    A plain file (or symlink) root yields a single-entry plan. For a
    directory, files are appended as they are visited and each directory
    is appended only after all of its children.

    A directory that cannot be listed is recorded as an enumeration
    failure and left out of the plan along with its contents; the walk
    continues with its siblings.

    Args:
        root: Path to enumerate.

    Returns:
        DeletionPlan for the subtree.

    Raises:
        NotFoundError: If the root does not exist.
    """
    root_path = absolute_root(root)

    if not os.path.lexists(root_path):
        raise NotFoundError(f"Path does not exist: {root_path}", path=root_path)

    root_entry = Entry(path=root_path, kind=classify(root_path))
    if not root_entry.is_dir:
        return DeletionPlan(root=root_path, entries=(root_entry,))

    entries: list[Entry] = []
    failures: list[FailedEntry] = []

    def _open(directory: Entry) -> _Frame | None:
        try:
            return _Frame(entry=directory, children=_list_children(directory))
        except EnumerationError as e:
            logger.warning("Skipping %s: %s", directory.path, e)
            failures.append(
                FailedEntry(entry=directory, reason=str(e), stage=FailureStage.ENUMERATE)
            )
            return None

    first = _open(root_entry)
    stack: list[_Frame] = [first] if first is not None else []

    while stack:
        frame = stack[-1]
        if frame.index >= len(frame.children):
            stack.pop()
            entries.append(frame.entry)
            continue

        child = frame.children[frame.index]
        frame.index += 1

        if child.is_dir:
            sub = _open(child)
            if sub is not None:
                stack.append(sub)
        else:
            entries.append(child)

    logger.debug(
        "Enumerated %s: %d entries, %d unlistable",
        root_path,
        len(entries),
        len(failures),
    )
    return DeletionPlan(
        root=root_path,
        entries=tuple(entries),
        enumeration_failures=tuple(failures),
    )
