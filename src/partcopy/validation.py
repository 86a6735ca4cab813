"""Input validation helpers for partcopy.

These functions enforce S3 naming and size rules on a ``CopyRequest`` before
any store call is made, so a malformed request never opens a session.

Each function raises ``InvalidArgument`` on invalid input.
"""

import re

from partcopy.errors import InvalidArgument
from partcopy.models import CopyRequest

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# S3 bucket naming rules:
#   - 3-63 characters
#   - lowercase letters, digits, hyphens, periods and underscores (legacy)
#   - must start and end with a letter or digit
#   - must not be formatted as an IP address
#   - no consecutive periods ("..") allowed

_BUCKET_RE = re.compile(r"^[a-z0-9][a-z0-9._\-]{1,61}[a-z0-9]$")
_IP_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")

_MAX_KEY_BYTES = 1024


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_bucket_name(name: str, field: str = "bucket") -> None:
    """Validate an S3 bucket name.

    Args:
        name: The candidate bucket name.
        field: Request field name used in the error message.

    Raises:
        InvalidArgument: If the name violates an S3 bucket naming rule.
    """
    if not isinstance(name, str) or not name:
        raise InvalidArgument(f"{field} is required")

    if not _BUCKET_RE.match(name) or _IP_RE.match(name) or ".." in name:
        raise InvalidArgument(f"{field} is not a valid bucket name: {name!r}")


def validate_object_key(key: str, field: str = "key") -> None:
    """Validate an S3 object key.

    Raises:
        InvalidArgument: If the key is empty or exceeds 1024 bytes when UTF-8 encoded.
    """
    if not isinstance(key, str) or not key:
        raise InvalidArgument(f"{field} is required")

    if len(key.encode("utf-8")) > _MAX_KEY_BYTES:
        raise InvalidArgument(f"{field} is too long")


def validate_size(value: int, field: str) -> None:
    """Validate a byte count as a positive integer.

    Raises:
        InvalidArgument: If the value is not an int or is not positive.
    """
    # bool is an int subclass; True is not a size
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{field} must be a positive integer")
    if value <= 0:
        raise InvalidArgument(f"{field} must be a positive integer")


def validate_copy_request(request: CopyRequest, part_size: int) -> None:
    """Validate a copy request against the part size it will be planned with.

    Args:
        request: The copy request.
        part_size: The effective part size in bytes.

    Raises:
        InvalidArgument: If any field is malformed.
    """
    validate_bucket_name(request.source_bucket, "source_bucket")
    validate_bucket_name(request.destination_bucket, "destination_bucket")
    validate_object_key(request.object_key, "object_key")
    validate_object_key(request.copied_object_name, "copied_object_name")
    validate_size(request.object_size, "object_size")
    validate_size(part_size, "copy_part_size_bytes")

    if request.metadata is not None and not isinstance(request.metadata, dict):
        raise InvalidArgument("metadata must be a mapping of strings")
