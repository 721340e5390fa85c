"""Audit trail for deletion runs.

One line per processed entry and one summary line per run go to the
``forcedel.audit`` logger. The logger does not propagate, so audit lines
never mix with diagnostic output; the CLI attaches a file handler.
"""

import logging
from logging import FileHandler
from pathlib import Path

from forcedel.models.result import DeletedEntry, FailedEntry, RunResult

AUDIT_LOGGER_NAME = "forcedel.audit"
AUDIT_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

DetailRow = tuple[str, str, int | None]

_audit = logging.getLogger(AUDIT_LOGGER_NAME)
_audit.addHandler(logging.NullHandler())
_audit.propagate = False


def get_audit_logger() -> logging.Logger:
    """Return the audit logger instance."""
    return _audit


def attach_audit_file(path: Path) -> FileHandler:
    """Append audit lines to a file.

    Args:
        path: Audit log file. Parent directories are created.

    Returns:
        The installed handler, for removal with :func:`detach_audit_handler`.

    Raises:
        OSError: If the file cannot be opened.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(AUDIT_FORMAT))
    audit = get_audit_logger()
    audit.setLevel(logging.INFO)
    audit.addHandler(handler)
    return handler


def detach_audit_handler(handler: logging.Handler) -> None:
    """Remove and close a handler installed by :func:`attach_audit_file`."""
    get_audit_logger().removeHandler(handler)
    handler.close()


def _size_text(size_bytes: int | None) -> str:
    return "unknown" if size_bytes is None else str(size_bytes)


def audit_deleted(deleted: DeletedEntry, dry_run: bool = False) -> None:
    """Log a removed entry."""
    if dry_run:
        action = "DRY_RUN"
    else:
        action = "FORCED" if deleted.forced else "DELETED"
    get_audit_logger().info(
        "%s | %s | kind=%s | size=%s",
        action,
        deleted.path,
        deleted.entry.kind.value,
        _size_text(deleted.size_bytes),
    )


def audit_failed(failed: FailedEntry) -> None:
    """Log an entry that could not be removed or listed."""
    get_audit_logger().warning(
        "FAILED | %s | stage=%s | reason=%s",
        failed.path,
        failed.stage.value,
        failed.reason,
    )


def audit_run(result: RunResult) -> None:
    """Log the summary line of a finished run."""
    if result.cancelled:
        mode = "CANCELLED"
    elif result.dry_run:
        mode = "DRY_RUN"
    else:
        mode = "COMPLETE"
    get_audit_logger().info(
        "%s | root=%s | total=%d | deleted=%d | forced=%d | failed=%d | bytes=%d",
        mode,
        result.root,
        result.total,
        len(result.succeeded),
        result.forced_count,
        len(result.failed),
        result.bytes_freed,
    )


def detail_rows(result: RunResult) -> list[DetailRow]:
    """Build the (name, path, size) rows of the post-mortem detail report.

    Args:
        result: A finished run.

    Returns:
        One row per removed entry, in removal order.
    """
    return [(d.name, d.path, d.size_bytes) for d in result.succeeded]
