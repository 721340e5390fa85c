"""Best-effort permission normalization before deletion.

Many "access denied" failures come from a read-only or hidden/system
flag, an immutable flag, a deny ACE, or a parent directory without write
permission, rather than from real ownership problems. The normalizer
strips those obstacles for a single entry without deleting anything.

Every step is independent and optional: a step whose capability is
missing on the host is skipped, and a step that fails is logged at DEBUG
and ignored. ``normalize`` never raises.
"""

import logging
import os
import stat
import subprocess
from collections.abc import Callable

from forcedel.engine.errors import NormalizationFailure
from forcedel.models.entry import Entry, EntryKind
from forcedel.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

# Well-known SID of the "Everyone" group, independent of the OS language.
EVERYONE_SID = "S-1-1-0"

# Standard access rights: DELETE and WRITE_DAC (modify the entry's own ACL).
DELETE = 0x00010000
WRITE_DAC = 0x00040000
EVERYONE_DELETE_RIGHTS = DELETE | WRITE_DAC

ACCESS_ALLOWED_ACE_TYPE = 0
ACCESS_DENIED_ACE_TYPE = 1
ACL_REVISION_DS = 4

# chflags(2) bits that block unlink/rmdir or hide the entry.
_BLOCKING_FLAGS = (
    getattr(stat, "UF_IMMUTABLE", 0)
    | getattr(stat, "UF_APPEND", 0)
    | getattr(stat, "UF_HIDDEN", 0)
    | getattr(stat, "SF_IMMUTABLE", 0)
    | getattr(stat, "SF_APPEND", 0)
)

_COMMAND_TIMEOUT = 30.0

NormalizationStep = Callable[[Entry], None]


def clear_readonly(entry: Entry) -> None:
    """Give the owner write access (and read/execute on directories).

    On Windows ``os.chmod`` with S_IWRITE clears the read-only attribute.
    Symlinks are skipped: changing their mode would change the target.
    """
    if entry.kind == EntryKind.SYMLINK:
        return

    st = os.lstat(entry.path)
    if IS_WINDOWS:
        if not st.st_mode & stat.S_IWRITE:
            os.chmod(entry.path, stat.S_IWRITE)
        return

    wanted = stat.S_IWUSR
    if entry.is_dir:
        wanted |= stat.S_IRUSR | stat.S_IXUSR
    mode = stat.S_IMODE(st.st_mode)
    if mode & wanted != wanted:
        os.chmod(entry.path, mode | wanted)


def clear_flags(entry: Entry) -> None:
    """Clear hidden, system, immutable and append-only flags.

    Uses ``chflags`` where the host has it (BSD, macOS) and ``attrib`` on
    Windows. Hosts with neither are skipped.
    """
    if IS_WINDOWS:
        if not command_exists("attrib"):
            return
        result = run_command(
            ["attrib", "-R", "-H", "-S", entry.path],
            timeout=_COMMAND_TIMEOUT,
        )
        if not result.success:
            msg = result.stderr.strip() or result.stdout.strip() or "attrib failed"
            raise NormalizationFailure(msg, path=entry.path)
        return

    lchflags = getattr(os, "lchflags", None)
    if lchflags is None and entry.kind == EntryKind.SYMLINK:
        # Plain chflags would change the link's target.
        return
    chflags = lchflags or getattr(os, "chflags", None)
    if chflags is None or not _BLOCKING_FLAGS:
        return

    flags = getattr(os.lstat(entry.path), "st_flags", 0)
    if flags & _BLOCKING_FLAGS:
        chflags(entry.path, flags & ~_BLOCKING_FLAGS)


def grant_delete_access(entry: Entry) -> None:
    """Put an Everyone delete/write-ACL allow ACE at the head of the DACL.

    The new ACE goes first so it takes precedence over explicit deny ACEs;
    the existing ACEs follow unchanged and in their original order. A NULL
    DACL already allows everything and is left alone.

    Only Windows hosts with pywin32 have this capability; elsewhere deletion
    rights live in the parent directory's mode, handled by :func:`open_parent`.
    """
    if not IS_WINDOWS:
        return
    try:
        import pywintypes
        import win32security
    except ImportError:
        logger.debug("pywin32 not available, ACL step skipped")
        return

    info = win32security.DACL_SECURITY_INFORMATION
    try:
        descriptor = win32security.GetFileSecurity(entry.path, info)
        dacl = descriptor.GetSecurityDescriptorDacl()
        if dacl is None:
            return

        new_dacl = win32security.ACL()
        everyone = win32security.ConvertStringSidToSid(EVERYONE_SID)
        new_dacl.AddAccessAllowedAce(ACL_REVISION_DS, EVERYONE_DELETE_RIGHTS, everyone)

        for index in range(dacl.GetAceCount()):
            (ace_type, ace_flags), mask, *rest = dacl.GetAce(index)
            if ace_type == ACCESS_ALLOWED_ACE_TYPE:
                new_dacl.AddAccessAllowedAceEx(ACL_REVISION_DS, ace_flags, mask, rest[-1])
            elif ace_type == ACCESS_DENIED_ACE_TYPE:
                new_dacl.AddAccessDeniedAceEx(ACL_REVISION_DS, ace_flags, mask, rest[-1])
            else:
                # Object and callback ACEs cannot be copied; keep the DACL intact.
                raise NormalizationFailure(f"Unsupported ACE type {ace_type}", path=entry.path)

        descriptor.SetSecurityDescriptorDacl(1, new_dacl, 0)
        win32security.SetFileSecurity(entry.path, info, descriptor)
    except pywintypes.error as e:
        raise NormalizationFailure(e.strerror, path=entry.path) from e


def open_parent(entry: Entry) -> None:
    """Give the owner write/execute access to the entry's parent directory.

    On POSIX hosts unlinking needs write permission on the containing
    directory, not on the entry itself.
    """
    if IS_WINDOWS:
        return

    parent = os.path.dirname(entry.path)
    if not parent or parent == entry.path:
        return

    mode = stat.S_IMODE(os.stat(parent).st_mode)
    wanted = stat.S_IWUSR | stat.S_IXUSR
    if mode & wanted != wanted:
        os.chmod(parent, mode | wanted)


DEFAULT_STEPS: tuple[NormalizationStep, ...] = (
    clear_flags,
    clear_readonly,
    grant_delete_access,
    open_parent,
)


class PermissionNormalizer:
    """Strips attributes and permissions that would block deletion.

    Attributes:
        steps: Independent normalization steps, applied in order.
    """

    def __init__(self, steps: tuple[NormalizationStep, ...] | None = None) -> None:
        """Initialize the normalizer.

        Args:
            steps: Override the default step list (mainly for tests).
        """
        self.steps = steps if steps is not None else DEFAULT_STEPS

    def normalize(self, entry: Entry, root: str | None = None) -> None:
        """Apply every step to the entry, ignoring individual failures.

        Args:
            entry: Entry about to be removed.
            root: Root of the run. The root's own parent lies outside the
                tree, so :func:`open_parent` is not applied to the root.
        """
        for step in self.steps:
            if step is open_parent and entry.path == root:
                continue
            try:
                step(entry)
            except (OSError, ValueError, subprocess.SubprocessError, NormalizationFailure) as e:
                logger.debug("Normalization step %s failed for %s: %s", step.__name__, entry.path, e)
