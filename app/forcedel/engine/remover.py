"""Forced removal of a single stubborn entry via a host command.

The engine only calls a ForcedRemover after direct removal failed. The
concrete CommandForcedRemover runs one external command per entry and
waits for it; any non-zero exit, timeout, missing executable, or a path
that still exists afterwards counts as a failure.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Protocol

from forcedel.core.config import DEFAULT_FORCE_TIMEOUT, PATH_PLACEHOLDER
from forcedel.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# Non-interactive sudo: fails immediately instead of prompting from the worker.
# rm -d removes a file, a link, or an empty directory, and nothing else.
POSIX_FORCE_COMMAND = ["sudo", "-n", "rm", "-f", "-d", "--", PATH_PLACEHOLDER]
WINDOWS_FORCE_FILE_COMMAND = ["cmd", "/c", "del", "/f", "/q", "/a", PATH_PLACEHOLDER]
WINDOWS_FORCE_DIR_COMMAND = ["cmd", "/c", "rmdir", "/q", PATH_PLACEHOLDER]


@dataclass(frozen=True, slots=True)
class ForcedRemovalResult:
    """Outcome of one forced removal attempt.

    Attributes:
        success: Whether the entry is gone.
        reason: Failure reason, None on success.
    """

    success: bool
    reason: str | None = None


class ForcedRemover(Protocol):
    """Capability to remove one filesystem entry with elevated force."""

    def is_available(self) -> bool:
        """Check if the mechanism can be used on this host."""
        ...

    def remove(self, path: str) -> ForcedRemovalResult:
        """Remove exactly one entry, blocking until the attempt finishes."""
        ...


def default_force_command(is_dir: bool = False) -> list[str]:
    """Get the host's default forced-removal command template.

    Args:
        is_dir: Whether the target is a directory (matters on Windows only).

    Returns:
        Command template containing the path placeholder.
    """
    if os.name == "nt":
        return list(WINDOWS_FORCE_DIR_COMMAND if is_dir else WINDOWS_FORCE_FILE_COMMAND)
    return list(POSIX_FORCE_COMMAND)


class CommandForcedRemover:
    """Removes an entry by running an external privileged command.

    Attributes:
        command: Command template, or None for the host default.
        timeout: Seconds to wait for the command.
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout: float = DEFAULT_FORCE_TIMEOUT,
    ) -> None:
        """Initialize the remover.

        Args:
            command: Command template with a ``{path}`` placeholder.
                If None, the host default is used.
            timeout: Maximum time in seconds to wait for one removal.
        """
        self.command = command
        self.timeout = timeout

    def build_args(self, path: str) -> list[str]:
        """Substitute the target path into the command template.

        Args:
            path: Entry to remove.

        Returns:
            Argument list ready to execute.
        """
        template = self.command or default_force_command(os.path.isdir(path))
        return [arg.replace(PATH_PLACEHOLDER, path) for arg in template]

    def is_available(self) -> bool:
        """Check if the command's executable is on PATH."""
        template = self.command or default_force_command()
        return command_exists(template[0])

    def remove(self, path: str) -> ForcedRemovalResult:
        """Run the forced-removal command for one path.

        Args:
            path: Entry to remove.

        Returns:
            ForcedRemovalResult describing the outcome.
        """
        args = self.build_args(path)
        if not command_exists(args[0]):
            return ForcedRemovalResult(success=False, reason=f"'{args[0]}' not found on PATH")

        logger.info("Forced removal: %s", " ".join(args))
        try:
            result = run_command(args, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return ForcedRemovalResult(
                success=False,
                reason=f"'{args[0]}' timed out after {self.timeout:g}s",
            )
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            return ForcedRemovalResult(success=False, reason=f"Cannot run '{args[0]}': {e}")

        if not result.success:
            reason = result.stderr.strip() or f"'{args[0]}' exited with code {result.returncode}"
            return ForcedRemovalResult(success=False, reason=reason)

        # Some tools (Windows del) exit 0 without removing anything.
        if os.path.lexists(path):
            return ForcedRemovalResult(
                success=False,
                reason=f"'{args[0]}' reported success but the path still exists",
            )

        return ForcedRemovalResult(success=True)


class NullForcedRemover:
    """Forced removal that is never available (fallback disabled)."""

    def is_available(self) -> bool:
        return False

    def remove(self, path: str) -> ForcedRemovalResult:
        return ForcedRemovalResult(success=False, reason="forced removal is disabled")
