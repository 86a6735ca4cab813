"""Error definitions for partcopy.

Every failure surfaced by :class:`partcopy.copier.MultipartCopier` is one of
the ``CopyError`` subclasses below. The cleanup outcomes (``AbortRequestFailed``,
``AbortIncomplete``, ``MultipartCopyAborted``) replace the error that triggered
the cleanup; that original error stays reachable through ``cause``.
"""

from __future__ import annotations

from typing import Any


class CopyError(Exception):
    """A multipart copy error with a stable code and diagnostic details.

    Attributes:
        code: Machine-readable error code (e.g. "PartCopyFailed").
        message: Human-readable error description.
        details: Extra context for logging and callers (upload id, parts, ...).
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the copy error.

        Args:
            code: Error code.
            message: Error description.
            details: Optional extra fields.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


# -- Configuration and input --------------------------------------------------


class InvalidCollaborator(CopyError):
    """The store client or logger handed to the copier is unusable."""

    def __init__(self, message: str = "Invalid collaborator received") -> None:
        super().__init__(code="InvalidCollaborator", message=message)


class InvalidArgument(CopyError):
    """An invalid argument was provided in a copy request."""

    def __init__(self, message: str = "Invalid Argument") -> None:
        super().__init__(code="InvalidArgument", message=message)


# -- Stage failures -----------------------------------------------------------


class SessionInitiationFailed(CopyError):
    """The multipart session could not be created. Nothing needs cleanup."""

    def __init__(self, error: BaseException, context: Any = None) -> None:
        super().__init__(
            code="SessionInitiationFailed",
            message="multipart copy failed to initiate",
            details={"context": context, "error": error},
        )
        self.error = error


class PartCopyFailed(CopyError):
    """One or more part copies failed.

    Attributes:
        failures: ``(part_number, error)`` pairs in part order.
    """

    def __init__(
        self,
        upload_id: str,
        failures: list[tuple[int, BaseException]],
    ) -> None:
        numbers = ", ".join(str(n) for n, _ in failures)
        super().__init__(
            code="PartCopyFailed",
            message=f"copy of part(s) {numbers} failed",
            details={"upload_id": upload_id, "part_numbers": [n for n, _ in failures]},
        )
        self.failures = failures


class CompletionFailed(CopyError):
    """The store rejected the complete-multipart-upload call."""

    def __init__(self, upload_id: str, error: BaseException) -> None:
        super().__init__(
            code="CompletionFailed",
            message="Multipart upload failed",
            details={"upload_id": upload_id, "error": error},
        )
        self.error = error


# -- Cleanup outcomes ---------------------------------------------------------


class CleanupOutcome(CopyError):
    """Base class for the outcome of the abort/cleanup stage.

    Attributes:
        cause: The stage failure that triggered cleanup.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any],
        cause: CopyError | None = None,
    ) -> None:
        super().__init__(code=code, message=message, details=details)
        self.cause = cause


class AbortRequestFailed(CleanupOutcome):
    """The abort call itself failed. The session state on the store is unknown."""

    def __init__(
        self,
        session: dict[str, str],
        error: BaseException,
        cause: CopyError | None = None,
    ) -> None:
        super().__init__(
            code="AbortRequestFailed",
            message="abort multipart copy failed",
            details={**session, "error": error},
            cause=cause,
        )
        self.error = error


class AbortIncomplete(CleanupOutcome):
    """Abort succeeded but the store still lists parts for the session.

    Attributes:
        parts: The residual parts reported by the store.
    """

    def __init__(
        self,
        session: dict[str, str],
        parts: list[dict[str, Any]],
        cause: CopyError | None = None,
    ) -> None:
        super().__init__(
            code="AbortIncomplete",
            message="Abort procedure passed but copy parts were not removed",
            details={**session, "parts": parts},
            cause=cause,
        )
        self.parts = parts


class MultipartCopyAborted(CleanupOutcome):
    """Cleanup after a failed copy succeeded and no parts remain."""

    def __init__(
        self,
        session: dict[str, str],
        cause: CopyError | None = None,
    ) -> None:
        super().__init__(
            code="MultipartCopyAborted",
            message="multipart copy aborted",
            details=dict(session),
            cause=cause,
        )
