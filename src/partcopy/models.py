"""Data model types for partcopy.

These dataclasses describe a single multipart copy: the request, the byte
ranges it is split into, the store session that groups the parts, and the
per-part results that make up the completion manifest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_COPY_PART_SIZE_BYTES = 50_000_000  # 50 MB
DEFAULT_COPIED_OBJECT_PERMISSIONS = "private"


@dataclass(frozen=True)
class CopyRequest:
    """A request to copy one object into another location part by part.

    Attributes:
        source_bucket: Bucket holding the source object.
        object_key: Key of the source object.
        destination_bucket: Bucket receiving the copy.
        copied_object_name: Key of the copy.
        object_size: Size of the source object in bytes.
        copy_part_size_bytes: Desired part size; planner default when None.
        copied_object_permissions: Canned ACL for the copy ("private" when None).
        expiration_period: Expires value for the copy.
        server_side_encryption: ServerSideEncryption directive (e.g. "AES256").
        content_type: Content-Type of the copy.
        content_disposition: Content-Disposition of the copy.
        content_encoding: Content-Encoding of the copy.
        content_language: Content-Language of the copy.
        cache_control: Cache-Control of the copy.
        storage_class: Storage class of the copy (e.g. "STANDARD").
        metadata: User metadata attached to the copy.
        request_context: Opaque token carried into every log record.
    """

    source_bucket: str
    object_key: str
    destination_bucket: str
    copied_object_name: str
    object_size: int
    copy_part_size_bytes: int | None = None
    copied_object_permissions: str | None = None
    expiration_period: Any = None
    server_side_encryption: str | None = None
    content_type: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    content_language: str | None = None
    cache_control: str | None = None
    storage_class: str | None = None
    metadata: dict[str, str] | None = None
    request_context: Any = field(default=None, compare=False)

    def directives(self, default_acl: str = DEFAULT_COPIED_OBJECT_PERMISSIONS) -> dict[str, Any]:
        """Return the CreateMultipartUpload directives that were actually supplied.

        ACL always appears (falling back to ``default_acl``); every other
        directive is omitted when unset.
        """
        params: dict[str, Any] = {
            "ACL": self.copied_object_permissions or default_acl,
        }
        optional = (
            ("Expires", self.expiration_period),
            ("ServerSideEncryption", self.server_side_encryption),
            ("ContentType", self.content_type),
            ("ContentDisposition", self.content_disposition),
            ("ContentEncoding", self.content_encoding),
            ("ContentLanguage", self.content_language),
            ("CacheControl", self.cache_control),
            ("Metadata", self.metadata),
            ("StorageClass", self.storage_class),
        )
        for name, value in optional:
            if value:
                params[name] = value
        return params


@dataclass(frozen=True)
class PartitionRange:
    """An inclusive byte range of the source object.

    Attributes:
        part_number: 1-based part number.
        start: First byte offset.
        end: Last byte offset (inclusive).
    """

    part_number: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def header(self) -> str:
        """Format the range for the CopySourceRange parameter."""
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class UploadSession:
    """A store-side multipart session for the destination object.

    Attributes:
        bucket: Destination bucket.
        key: Destination key.
        upload_id: Opaque session identifier issued by the store.
    """

    bucket: str
    key: str
    upload_id: str

    def params(self) -> dict[str, str]:
        """Return the Bucket/Key/UploadId parameters shared by every session call."""
        return {"Bucket": self.bucket, "Key": self.key, "UploadId": self.upload_id}


@dataclass(frozen=True)
class PartResult:
    """One entry of the completion manifest."""

    part_number: int
    etag: str

    def to_dict(self) -> dict[str, Any]:
        return {"ETag": self.etag, "PartNumber": self.part_number}


@dataclass(frozen=True)
class CompletionManifest:
    """Ordered part list required by the store to finish a session."""

    parts: tuple[PartResult, ...] = ()

    def __len__(self) -> int:
        return len(self.parts)

    def to_dict(self) -> dict[str, Any]:
        """Render as the MultipartUpload parameter of CompleteMultipartUpload."""
        return {"Parts": [part.to_dict() for part in self.parts]}
