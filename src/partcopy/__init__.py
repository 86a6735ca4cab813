"""partcopy - copy large objects with concurrent server-side part copies."""

from partcopy.copier import MultipartCopier
from partcopy.errors import (
    AbortIncomplete,
    AbortRequestFailed,
    CleanupOutcome,
    CompletionFailed,
    CopyError,
    InvalidArgument,
    InvalidCollaborator,
    MultipartCopyAborted,
    PartCopyFailed,
    SessionInitiationFailed,
)
from partcopy.models import CopyRequest

__version__ = "0.1.0"

__all__ = [
    "AbortIncomplete",
    "AbortRequestFailed",
    "CleanupOutcome",
    "CompletionFailed",
    "CopyError",
    "CopyRequest",
    "InvalidArgument",
    "InvalidCollaborator",
    "MultipartCopier",
    "MultipartCopyAborted",
    "PartCopyFailed",
    "SessionInitiationFailed",
]
