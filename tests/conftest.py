"""Shared pytest fixtures for partcopy tests.

The store client is an ``AsyncMock`` per operation so tests can script
responses and failures and assert the exact S3 parameters that were sent.
The logger is a ``MagicMock`` exposing ``info``/``error``.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from partcopy.copier import MultipartCopier
from partcopy.models import CopyRequest

UPLOAD_ID = "1a2b3c4d"
ETAG = "1a1b2s3d2f1e2g3sfsgdsg"
REQUEST_CONTEXT = "request_context"


def client_error(code: str, message: str = "error", operation: str = "TestOperation") -> ClientError:
    """Create a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def copy_part_response(etag: str = ETAG) -> dict:
    return {"CopyPartResult": {"ETag": etag, "LastModified": "2024-01-01T00:00:00.000Z"}}


def make_store() -> MagicMock:
    """A store whose five operations succeed with canned S3 responses."""
    store = MagicMock()
    store.create_multipart_upload = AsyncMock(return_value={"UploadId": UPLOAD_ID})
    store.upload_part_copy = AsyncMock(return_value=copy_part_response())
    store.complete_multipart_upload = AsyncMock(
        return_value={"Bucket": "destination_bucket", "Key": "copied_object_name", "ETag": '"abc-2"'}
    )
    store.abort_multipart_upload = AsyncMock(return_value={})
    store.list_parts = AsyncMock(return_value={"Parts": []})
    return store


@pytest.fixture
def store() -> MagicMock:
    return make_store()


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def copier(store, logger) -> MultipartCopier:
    copier = MultipartCopier(store, logger)
    logger.reset_mock()
    return copier


@pytest.fixture
def full_request() -> CopyRequest:
    """A request setting every optional directive."""
    return CopyRequest(
        source_bucket="source_bucket",
        object_key="object_key",
        destination_bucket="destination_bucket",
        copied_object_name="copied_object_name",
        object_size=70_000_000,
        copy_part_size_bytes=50_000_000,
        copied_object_permissions="copied_object_permissions",
        expiration_period=100000,
        server_side_encryption="AES256",
        content_type="application/json",
        content_disposition='filename="copied_object_name.json"',
        content_encoding="gzip",
        content_language="en-US",
        cache_control="max-age=60",
        storage_class="STANDARD",
        metadata={"some-key": "some-value"},
        request_context=REQUEST_CONTEXT,
    )


@pytest.fixture
def partial_request() -> CopyRequest:
    """A request with only the mandatory fields."""
    return CopyRequest(
        source_bucket="source_bucket",
        object_key="object_key",
        destination_bucket="destination_bucket",
        copied_object_name="copied_object_name",
        object_size=100_000_000,
        request_context=REQUEST_CONTEXT,
    )
