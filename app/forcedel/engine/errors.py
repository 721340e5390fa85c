"""Exception hierarchy for the deletion engine.

Only NotFoundError and BusyError escape the engine's public operations.
The remaining types describe per-entry failures; they are raised and
caught inside the engine and surface only as RunResult failures (or, for
NormalizationFailure, as a debug log line).
"""


class ForceDeleteError(Exception):
    """Base exception for deletion engine errors.

    Attributes:
        path: Filesystem path the error refers to, if any.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(ForceDeleteError):
    """Raised when the root path of a run does not exist."""


class BusyError(ForceDeleteError):
    """Raised when a run is requested while another one is active."""


class EnumerationError(ForceDeleteError):
    """A subtree member could not be listed during enumeration."""


class NormalizationFailure(ForceDeleteError):
    """A best-effort attribute/ACL change failed. Never propagated."""


class DeletionFailure(ForceDeleteError):
    """Direct removal of an entry failed; triggers the fallback."""


class FallbackFailure(ForceDeleteError):
    """Both direct and forced removal of an entry failed."""
