"""Unit tests for the aiobotocore-backed multipart store.

All tests use mocked aiobotocore; no real AWS credentials or network
access required. The mock S3 client is injected directly onto
store._client to bypass session creation.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from partcopy.config import StorageConfig
from partcopy.store import create_store
from partcopy.store.aws import S3MultipartStore, decode_copy_source
from partcopy.store.base import check_store
from partcopy.store.memory import MemoryMultipartStore

from conftest import client_error


def _make_store(**kwargs) -> S3MultipartStore:
    """Create an S3MultipartStore with a mock client (skip init)."""
    store = S3MultipartStore(**kwargs)
    store._client = AsyncMock()
    store._client_ctx = AsyncMock()
    return store


class _Pages:
    """Async iterator standing in for an aiobotocore paginator result."""

    def __init__(self, pages, error=None):
        self._pages = list(pages)
        self._error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._pages:
            return self._pages.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration


def _paginator(pages, error=None):
    paginator = MagicMock()
    paginator.paginate = MagicMock(return_value=_Pages(pages, error))
    return paginator


class TestDecodeCopySource:
    """Tests for decode_copy_source()."""

    def test_plain(self):
        assert decode_copy_source("bucket%2Fkey") == {"Bucket": "bucket", "Key": "key"}

    def test_reserved_characters(self):
        assert decode_copy_source("source_bucket%2F%2B%3F%3D%2F%26_-.txt") == {
            "Bucket": "source_bucket",
            "Key": "+?=/&_-.txt",
        }

    def test_dict_passthrough(self):
        source = {"Bucket": "b", "Key": "k"}
        assert decode_copy_source(source) is source


class TestInit:
    """Tests for init() and close()."""

    async def test_init_creates_client(self):
        with patch("partcopy.store.aws.AioSession") as mock_session_cls:
            mock_client = AsyncMock()
            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=mock_client)
            mock_ctx.__aexit__ = AsyncMock(return_value=False)
            mock_session_cls.return_value.create_client.return_value = mock_ctx

            store = S3MultipartStore(region="us-west-2", endpoint_url="http://localhost:9000")
            await store.init()

            mock_session_cls.return_value.create_client.assert_called_once_with(
                "s3", region_name="us-west-2", endpoint_url="http://localhost:9000"
            )
            mock_client.list_buckets.assert_not_awaited()
            await store.close()

    async def test_init_verify_raises_on_bad_credentials(self):
        with patch("partcopy.store.aws.AioSession") as mock_session_cls:
            mock_client = AsyncMock()
            mock_client.list_buckets = AsyncMock(side_effect=client_error("InvalidAccessKeyId"))
            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=mock_client)
            mock_ctx.__aexit__ = AsyncMock(return_value=False)
            mock_session_cls.return_value.create_client.return_value = mock_ctx

            store = S3MultipartStore()
            with pytest.raises(ValueError, match="Failed to initiate s3 connection"):
                await store.init(verify=True)
            assert store._client is None

    async def test_explicit_credentials(self):
        with patch("partcopy.store.aws.AioSession") as mock_session_cls:
            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=AsyncMock())
            mock_session_cls.return_value.create_client.return_value = mock_ctx

            store = S3MultipartStore(access_key_id="AK", secret_access_key="SK")
            await store.init()

            mock_session_cls.return_value.set_credentials.assert_called_once_with("AK", "SK")

    async def test_close_exits_context(self):
        store = _make_store()
        ctx_ref = store._client_ctx
        await store.close()
        ctx_ref.__aexit__.assert_awaited_once()
        assert store._client is None
        assert store._client_ctx is None

    async def test_close_noop_when_not_initialized(self):
        store = S3MultipartStore()
        await store.close()  # Should not raise


class TestOperations:
    """Tests for the forwarded multipart operations."""

    def test_satisfies_store_probe(self):
        check_store(S3MultipartStore())

    async def test_create_forwards_params(self):
        store = _make_store()
        store._client.create_multipart_upload = AsyncMock(return_value={"UploadId": "u1"})

        resp = await store.create_multipart_upload(Bucket="b", Key="k", ACL="private")

        assert resp == {"UploadId": "u1"}
        store._client.create_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", ACL="private"
        )

    async def test_upload_part_copy_decodes_source(self):
        store = _make_store()
        await store.upload_part_copy(
            Bucket="b",
            Key="k",
            UploadId="u1",
            PartNumber=1,
            CopySource="src%2Fdir%2Fa%2Bb.txt",
            CopySourceRange="bytes=0-9",
        )
        store._client.upload_part_copy.assert_awaited_once_with(
            Bucket="b",
            Key="k",
            UploadId="u1",
            PartNumber=1,
            CopySource={"Bucket": "src", "Key": "dir/a+b.txt"},
            CopySourceRange="bytes=0-9",
        )

    async def test_complete_and_abort_forward(self):
        store = _make_store()
        manifest = {"Parts": [{"ETag": "e", "PartNumber": 1}]}
        await store.complete_multipart_upload(Bucket="b", Key="k", UploadId="u1", MultipartUpload=manifest)
        await store.abort_multipart_upload(Bucket="b", Key="k", UploadId="u1")

        store._client.complete_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", UploadId="u1", MultipartUpload=manifest
        )
        store._client.abort_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", UploadId="u1"
        )

    async def test_list_parts_collects_pages(self):
        store = _make_store()
        store._client.get_paginator = MagicMock(
            return_value=_paginator(
                [{"Parts": [{"PartNumber": 1}]}, {"Parts": [{"PartNumber": 2}]}, {}]
            )
        )

        resp = await store.list_parts(Bucket="b", Key="k", UploadId="u1")

        assert resp == {"Parts": [{"PartNumber": 1}, {"PartNumber": 2}]}
        store._client.get_paginator.assert_called_once_with("list_parts")

    async def test_list_parts_no_such_upload_is_empty(self):
        store = _make_store()
        store._client.get_paginator = MagicMock(
            return_value=_paginator([], error=client_error("NoSuchUpload"))
        )
        assert await store.list_parts(Bucket="b", Key="k", UploadId="u1") == {"Parts": []}

    async def test_list_parts_other_error_propagates(self):
        store = _make_store()
        store._client.get_paginator = MagicMock(
            return_value=_paginator([], error=client_error("AccessDenied"))
        )
        with pytest.raises(ClientError):
            await store.list_parts(Bucket="b", Key="k", UploadId="u1")


class TestCreateStore:
    """Tests for create_store()."""

    def test_aws(self):
        store = create_store(StorageConfig(backend="aws", region="eu-west-1", use_path_style=True))
        assert isinstance(store, S3MultipartStore)
        assert store.region == "eu-west-1"
        assert store.use_path_style is True

    def test_memory(self):
        assert isinstance(create_store(StorageConfig(backend="memory")), MemoryMultipartStore)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            create_store(StorageConfig(backend="ftp"))
