"""Deletion engine: enumerate, normalize, remove, fall back, report.

A run processes its plan strictly sequentially, children before
parents. Each entry gets at most two removal attempts: one direct
unlink/rmdir and, if that fails, one forced removal through the
injected ForcedRemover. A failing entry is recorded and the run moves
on; only a missing root (NotFoundError) or a concurrent run
(BusyError) stops a run from starting.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from forcedel.core.config import EngineConfig
from forcedel.engine import audit
from forcedel.engine.enumerator import absolute_root, enumerate_tree
from forcedel.engine.errors import (
    BusyError,
    DeletionFailure,
    FallbackFailure,
    NotFoundError,
)
from forcedel.engine.normalizer import PermissionNormalizer
from forcedel.engine.remover import CommandForcedRemover, ForcedRemover, NullForcedRemover
from forcedel.models.entry import DeletionPlan, Entry, EntryKind
from forcedel.models.progress import ProgressEvent, ProgressKind, RunState
from forcedel.models.result import DeletedEntry, FailedEntry, RunResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def build_forced_remover(config: EngineConfig) -> ForcedRemover:
    """Create the forced remover selected by a configuration.

    Args:
        config: Engine configuration.

    Returns:
        A CommandForcedRemover, or a NullForcedRemover when the fallback is off.
    """
    if not config.force_fallback:
        return NullForcedRemover()
    return CommandForcedRemover(
        command=config.force_command,
        timeout=config.force_timeout_seconds,
    )


class DeletionEngine:
    """Drives deletion runs for one caller.

    Only one run (or enumeration) may be active per instance; a second
    request while one is active raises BusyError.

    Attributes:
        normalizer: Permission normalizer applied before each removal.
        forced_remover: Fallback used when direct removal fails.
        config: Engine configuration.
        dry_run: If True, report what would be removed without touching
            the filesystem.
    """

    def __init__(
        self,
        normalizer: PermissionNormalizer | None = None,
        forced_remover: ForcedRemover | None = None,
        config: EngineConfig | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            normalizer: Normalizer override. Defaults to PermissionNormalizer().
            forced_remover: Fallback override. Defaults to the one selected
                by the configuration.
            config: Engine configuration. Defaults to EngineConfig().
            dry_run: Report without removing anything.
        """
        self.config = config or EngineConfig()
        self.normalizer = normalizer or PermissionNormalizer()
        self.forced_remover = forced_remover or build_forced_remover(self.config)
        self.dry_run = dry_run

        self._lock = threading.Lock()
        self._active = False
        self._state = RunState.IDLE
        self._cancel = threading.Event()

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> RunState:
        """Current lifecycle state."""
        with self._lock:
            return self._state

    @property
    def busy(self) -> bool:
        """Check if a run or enumeration is active."""
        with self._lock:
            return self._active

    def _set_state(self, state: RunState) -> None:
        with self._lock:
            self._state = state

    def _acquire(self) -> None:
        with self._lock:
            if self._active:
                raise BusyError("A deletion run is already active on this engine")
            self._active = True
            self._cancel.clear()

    def _release(self) -> None:
        with self._lock:
            self._active = False

    @contextmanager
    def _claim(self) -> Iterator[None]:
        self._acquire()
        try:
            yield
        finally:
            self._release()

    def cancel(self) -> None:
        """Request cancellation of the active run.

        The request is honoured between entries; the entry being processed
        is always finished first. Has no effect when nothing is running.
        """
        if self.busy:
            logger.info("Cancellation requested")
            self._cancel.set()

    # -- public operations ---------------------------------------------------

    def enumerate(self, root: str | os.PathLike[str]) -> DeletionPlan:
        """Enumerate a subtree into a post-order deletion plan.

        Args:
            root: File or directory to plan for.

        Returns:
            DeletionPlan for the subtree.

        Raises:
            NotFoundError: If the root does not exist.
            BusyError: If a run is active.
        """
        with self._claim():
            plan = self._enumerate(root)
            self._set_state(RunState.IDLE)
            return plan

    def run(
        self,
        plan: DeletionPlan,
        on_progress: ProgressCallback | None = None,
    ) -> RunResult:
        """Process a plan on the calling thread.

        Args:
            plan: Plan produced by :meth:`enumerate`.
            on_progress: Called with each ProgressEvent, in order.

        Returns:
            The completed RunResult.

        Raises:
            BusyError: If a run is active.
        """
        with self._claim():
            return self._run(plan, on_progress)

    def delete(
        self,
        root: str | os.PathLike[str],
        on_progress: ProgressCallback | None = None,
    ) -> RunResult:
        """Enumerate and process a subtree on the calling thread.

        Args:
            root: File or directory to delete.
            on_progress: Called with each ProgressEvent, in order.

        Returns:
            The completed RunResult.

        Raises:
            NotFoundError: If the root does not exist. No event is emitted.
            BusyError: If a run is active.
        """
        with self._claim():
            plan = self._enumerate(root)
            return self._run(plan, on_progress)

    def start(
        self,
        root: str | os.PathLike[str],
        on_progress: ProgressCallback | None = None,
    ) -> RunHandle:
        """Start a run on a dedicated worker thread.

        The root is validated synchronously, so NotFoundError and BusyError
        are raised here, before any event is published.

        Args:
            root: File or directory to delete.
            on_progress: Subscriber registered before the worker starts,
                so it sees every event. Called on the worker thread.

        Returns:
            RunHandle to observe, cancel and await the run.

        Raises:
            NotFoundError: If the root does not exist.
            BusyError: If a run is active.
        """
        root_path = absolute_root(root)
        self._acquire()
        if not os.path.lexists(root_path):
            self._release()
            raise NotFoundError(f"Path does not exist: {root_path}", path=root_path)

        handle = RunHandle(self)
        if on_progress is not None:
            handle.subscribe(on_progress)

        worker = threading.Thread(
            target=handle._work,
            args=(root_path,),
            name="forcedel-worker",
            daemon=True,
        )
        handle._thread = worker
        worker.start()
        return handle

    # -- internals -----------------------------------------------------------

    def _enumerate(self, root: str | os.PathLike[str]) -> DeletionPlan:
        self._set_state(RunState.ENUMERATING)
        try:
            return enumerate_tree(root)
        except NotFoundError:
            self._set_state(RunState.IDLE)
            raise

    def _run(self, plan: DeletionPlan, on_progress: ProgressCallback | None) -> RunResult:
        self._set_state(RunState.DELETING)
        started_at = _now()

        def emit(event: ProgressEvent) -> None:
            if on_progress is None:
                return
            try:
                on_progress(event)
            except Exception:
                logger.exception("Progress callback failed")

        succeeded: list[DeletedEntry] = []
        failed: list[FailedEntry] = list(plan.enumeration_failures)
        for failure in plan.enumeration_failures:
            audit.audit_failed(failure)

        total = len(plan)
        completed = 0
        forced = 0
        cancelled = False

        logger.info("Deleting %s (%d entries)", plan.root, total)

        for entry in plan.entries:
            if self._cancel.is_set():
                cancelled = True
                break

            outcome = self._process(entry, plan.root)
            completed += 1
            percent = 100 * completed // total

            if isinstance(outcome, DeletedEntry):
                succeeded.append(outcome)
                audit.audit_deleted(outcome, dry_run=self.dry_run)
                if outcome.forced:
                    forced += 1
                    kind, message = ProgressKind.FORCED, f"Force-deleted: {entry.path}"
                elif self.dry_run:
                    kind, message = ProgressKind.DELETED, f"Would delete: {entry.path}"
                else:
                    kind, message = ProgressKind.DELETED, f"Deleted: {entry.path}"
            else:
                failed.append(outcome)
                audit.audit_failed(outcome)
                kind, message = ProgressKind.ERROR, f"Error deleting {entry.path}: {outcome.reason}"

            emit(ProgressEvent(percent=percent, message=message, kind=kind, path=entry.path))

        result = RunResult(
            root=plan.root,
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            forced_count=forced,
            cancelled=cancelled,
            total=total,
            dry_run=self.dry_run,
            started_at=started_at,
            finished_at=_now(),
        )
        audit.audit_run(result)

        if cancelled:
            percent = 100 * completed // total if total else 0
            logger.info("Run cancelled after %d of %d entries", completed, total)
            emit(
                ProgressEvent(
                    percent,
                    f"Cancelled after {completed} of {total} entries.",
                    ProgressKind.CANCELLED,
                )
            )
        else:
            logger.info(
                "Run complete: %d deleted (%d forced), %d failed",
                len(succeeded),
                forced,
                len(failed),
            )
            emit(ProgressEvent(100, "Deletion complete.", ProgressKind.COMPLETE))

        self._set_state(RunState.COMPLETED)
        return result

    def _process(self, entry: Entry, root: str) -> DeletedEntry | FailedEntry:
        """Normalize, remove and, if needed, force-remove one entry."""
        size = _capture_size(entry)

        if self.dry_run:
            return DeletedEntry(entry=entry, size_bytes=size)

        if self.config.normalize:
            self.normalizer.normalize(entry, root=root)

        try:
            _remove_direct(entry)
            return DeletedEntry(entry=entry, size_bytes=size)
        except DeletionFailure as direct:
            logger.debug("Direct removal failed for %s: %s", entry.path, direct)
            try:
                self._force(entry, direct)
            except FallbackFailure as e:
                return FailedEntry(entry=entry, reason=str(e))
            return DeletedEntry(entry=entry, size_bytes=size, forced=True)

    def _force(self, entry: Entry, direct: DeletionFailure) -> None:
        """Run the forced-removal fallback.

        Raises:
            FallbackFailure: If the fallback is unavailable or fails.
        """
        if not self.forced_remover.is_available():
            msg = f"{direct}; forced removal unavailable"
            raise FallbackFailure(msg, path=entry.path)

        result = self.forced_remover.remove(entry.path)
        if not result.success:
            msg = f"{direct}; forced removal failed: {result.reason or 'unknown error'}"
            raise FallbackFailure(msg, path=entry.path)


def _capture_size(entry: Entry) -> int | None:
    """Read an entry's size while it still exists.

    Directories record 0. A size that cannot be read is unknown (None)
    and does not stop the entry from being processed.
    """
    if entry.is_dir:
        return 0
    try:
        return os.lstat(entry.path).st_size
    except OSError as e:
        logger.debug("Cannot read size of %s: %s", entry.path, e)
        return None


def _remove_direct(entry: Entry) -> None:
    """Unlink a file or link, or remove an empty directory.

    An entry that has already disappeared counts as removed.

    Raises:
        DeletionFailure: If the entry still exists and cannot be removed.
    """
    try:
        if entry.is_dir:
            os.rmdir(entry.path)
        elif entry.kind == EntryKind.SYMLINK and os.name == "nt" and os.path.isdir(entry.path):
            # Directory links/junctions on Windows are removed with rmdir.
            os.rmdir(entry.path)
        else:
            os.unlink(entry.path)
    except FileNotFoundError:
        logger.debug("Already gone: %s", entry.path)
    except OSError as e:
        raise DeletionFailure(e.strerror or str(e), path=entry.path) from e


class RunHandle:
    """Observer-side view of a run executing on a worker thread.

    Events are published in processing order to every subscriber (called
    on the worker thread) and to an internal queue drained by
    :meth:`events`. A subscriber added after the run started only sees
    later events.
    """

    _DONE = object()

    def __init__(self, engine: DeletionEngine) -> None:
        self._engine = engine
        self._queue: queue.Queue[object] = queue.Queue()
        self._subscribers: list[ProgressCallback] = []
        self._subscribers_lock = threading.Lock()
        self._finished = threading.Event()
        self._thread: threading.Thread | None = None
        self._result: RunResult | None = None
        self._error: BaseException | None = None

    def subscribe(self, callback: ProgressCallback) -> None:
        """Register a callback for subsequent events."""
        with self._subscribers_lock:
            self._subscribers.append(callback)

    def cancel(self) -> None:
        """Request cancellation; honoured between entries."""
        self._engine.cancel()

    @property
    def done(self) -> bool:
        """Check if the run has terminated."""
        return self._finished.is_set()

    @property
    def result(self) -> RunResult | None:
        """The final result, or None while the run is active."""
        return self._result

    def events(self, timeout: float | None = None) -> Iterator[ProgressEvent]:
        """Yield events in emission order until the run terminates.

        Args:
            timeout: Maximum seconds to wait for each next event.

        Raises:
            queue.Empty: If no event arrives within the timeout.
        """
        while True:
            item = self._queue.get(timeout=timeout)
            if item is self._DONE:
                return
            assert isinstance(item, ProgressEvent)
            yield item

    def wait(self, timeout: float | None = None) -> RunResult:
        """Block until the run terminates and return its result.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            The final RunResult.

        Raises:
            TimeoutError: If the run is still active after the timeout.
        """
        if not self._finished.wait(timeout):
            raise TimeoutError("Deletion run did not finish in time")
        if self._thread is not None:
            self._thread.join()
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result

    def _publish(self, event: ProgressEvent) -> None:
        self._queue.put(event)
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Progress subscriber failed")

    def _work(self, root: str) -> None:
        engine = self._engine
        try:
            plan = engine._enumerate(root)
            self._result = engine._run(plan, self._publish)
        except Exception as e:
            logger.exception("Deletion worker failed")
            self._error = e
            engine._set_state(RunState.COMPLETED)
        finally:
            engine._release()
            self._finished.set()
            self._queue.put(self._DONE)
