"""Deletion engine.

This package provides subtree enumeration, permission normalization,
forced-removal fallback and the DeletionEngine that ties them together.
"""

from forcedel.engine.engine import DeletionEngine, RunHandle, build_forced_remover
from forcedel.engine.enumerator import enumerate_tree
from forcedel.engine.errors import (
    BusyError,
    DeletionFailure,
    EnumerationError,
    FallbackFailure,
    ForceDeleteError,
    NormalizationFailure,
    NotFoundError,
)
from forcedel.engine.normalizer import PermissionNormalizer
from forcedel.engine.remover import (
    CommandForcedRemover,
    ForcedRemovalResult,
    ForcedRemover,
    NullForcedRemover,
)

__all__ = [
    "BusyError",
    "CommandForcedRemover",
    "DeletionEngine",
    "DeletionFailure",
    "EnumerationError",
    "FallbackFailure",
    "ForceDeleteError",
    "ForcedRemovalResult",
    "ForcedRemover",
    "NormalizationFailure",
    "NotFoundError",
    "NullForcedRemover",
    "PermissionNormalizer",
    "RunHandle",
    "build_forced_remover",
    "enumerate_tree",
]
