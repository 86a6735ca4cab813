"""Multipart store protocol for partcopy."""

from typing import Any, Protocol, runtime_checkable

from partcopy.errors import InvalidCollaborator

STORE_OPERATIONS = (
    "create_multipart_upload",
    "upload_part_copy",
    "complete_multipart_upload",
    "abort_multipart_upload",
    "list_parts",
)


@runtime_checkable
class MultipartStore(Protocol):
    """Protocol defining the object store operations a multipart copy needs.

    Parameters and responses follow the S3 API shapes (``Bucket``, ``Key``,
    ``UploadId``, ...), so an aiobotocore S3 client wrapper and the in-memory
    store can be used interchangeably. Transport retries and authentication
    belong to the implementation.
    """

    async def create_multipart_upload(self, **params: Any) -> dict[str, Any]:
        """Open a multipart session.

        Args:
            **params: ``Bucket``, ``Key`` and optional object directives
                (``ACL``, ``Expires``, ``ContentType``, ``Metadata``, ...).

        Returns:
            A response containing ``UploadId``.
        """
        ...

    async def upload_part_copy(self, **params: Any) -> dict[str, Any]:
        """Copy a byte range of an existing object into a session part.

        Args:
            **params: ``Bucket``, ``Key``, ``UploadId``, ``PartNumber``,
                ``CopySource`` (percent-encoded ``bucket/key``) and
                ``CopySourceRange`` (``bytes=start-end``).

        Returns:
            A response containing ``CopyPartResult.ETag``.
        """
        ...

    async def complete_multipart_upload(self, **params: Any) -> dict[str, Any]:
        """Assemble the session parts into the final object.

        Args:
            **params: ``Bucket``, ``Key``, ``UploadId`` and
                ``MultipartUpload={"Parts": [{"ETag", "PartNumber"}, ...]}``.
        """
        ...

    async def abort_multipart_upload(self, **params: Any) -> dict[str, Any]:
        """Cancel a session and release its parts."""
        ...

    async def list_parts(self, **params: Any) -> dict[str, Any]:
        """List the parts still held by a session.

        Returns:
            A response containing ``Parts`` (empty when nothing remains).
        """
        ...


def check_store(store: Any) -> None:
    """Verify that ``store`` exposes every multipart operation.

    Raises:
        InvalidCollaborator: If the store is missing or an operation is not callable.
    """
    if store is None:
        raise InvalidCollaborator("Invalid store client received: None")

    missing = [name for name in STORE_OPERATIONS if not callable(getattr(store, name, None))]
    if missing:
        raise InvalidCollaborator(
            f"Invalid store client received: missing {', '.join(missing)}"
        )


def check_logger(logger: Any) -> None:
    """Verify that ``logger`` exposes callable ``info`` and ``error``.

    Raises:
        InvalidCollaborator: If either method is missing.
    """
    if not (callable(getattr(logger, "info", None)) and callable(getattr(logger, "error", None))):
        raise InvalidCollaborator("Invalid logger object received")
