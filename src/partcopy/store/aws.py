"""AWS S3 multipart store for partcopy.

Wraps an aiobotocore S3 client behind the ``MultipartStore`` protocol.

Credentials are resolved via the standard AWS credential chain
(env vars, ~/.aws/credentials, IAM role, etc.) unless explicit keys are
configured.
"""

import logging
from typing import Any
from urllib.parse import unquote

from aiobotocore.session import AioSession
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def decode_copy_source(copy_source: str | dict[str, str]) -> dict[str, str]:
    """Convert a percent-encoded ``bucket/key`` path into botocore's dict form.

    botocore quotes ``CopySource`` itself, so the already-encoded string
    is decoded here to avoid sending it double-encoded. Bucket names never
    contain ``/``, so the first separator splits bucket from key.
    """
    if isinstance(copy_source, dict):
        return copy_source
    bucket, _, key = unquote(copy_source).partition("/")
    return {"Bucket": bucket, "Key": key}


class S3MultipartStore:
    """Multipart store backed by a real (or S3-compatible) endpoint.

    Attributes:
        region: The AWS region for the client.
        endpoint_url: Custom endpoint (e.g. a local S3-compatible server).
        use_path_style: Force path-style addressing.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str = "",
        use_path_style: bool = False,
        access_key_id: str = "",
        secret_access_key: str = "",
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.use_path_style = use_path_style
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._session = AioSession()
        self._client = None
        self._client_ctx = None

    async def init(self, verify: bool = False) -> None:
        """Create the aiobotocore S3 client.

        Args:
            verify: Issue a ListBuckets call to prove the credentials work.

        Raises:
            ValueError: If verification is requested and the call fails.
        """
        client_kwargs: dict = {"region_name": self.region}
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url
        if self.use_path_style:
            from botocore.config import Config as BotoConfig
            client_kwargs["config"] = BotoConfig(s3={"addressing_style": "path"})

        # Use explicit credentials if provided, otherwise fall back to chain
        if self.access_key_id and self.secret_access_key:
            session = AioSession()
            session.set_credentials(self.access_key_id, self.secret_access_key)
            self._session = session
        self._client_ctx = self._session.create_client("s3", **client_kwargs)
        self._client = await self._client_ctx.__aenter__()

        if verify:
            try:
                await self._client.list_buckets()
            except ClientError as e:
                await self.close()
                raise ValueError(f"Failed to initiate s3 connection: {_error_code(e)}") from e

        logger.info(
            "S3 multipart store initialized: region=%s endpoint='%s'",
            self.region,
            self.endpoint_url,
        )

    async def close(self) -> None:
        """Close the aiobotocore client session."""
        if self._client_ctx is not None:
            await self._client_ctx.__aexit__(None, None, None)
            self._client = None
            self._client_ctx = None

    async def __aenter__(self) -> "S3MultipartStore":
        await self.init()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def create_multipart_upload(self, **params: Any) -> dict[str, Any]:
        return await self._client.create_multipart_upload(**params)

    async def upload_part_copy(self, **params: Any) -> dict[str, Any]:
        params["CopySource"] = decode_copy_source(params["CopySource"])
        return await self._client.upload_part_copy(**params)

    async def complete_multipart_upload(self, **params: Any) -> dict[str, Any]:
        return await self._client.complete_multipart_upload(**params)

    async def abort_multipart_upload(self, **params: Any) -> dict[str, Any]:
        return await self._client.abort_multipart_upload(**params)

    async def list_parts(self, **params: Any) -> dict[str, Any]:
        """List every part of a session, following pagination.

        S3 forgets an upload once it is aborted, so ``NoSuchUpload`` is
        reported as an empty part list.
        """
        parts: list[dict[str, Any]] = []
        paginator = self._client.get_paginator("list_parts")
        try:
            async for page in paginator.paginate(**params):
                parts.extend(page.get("Parts", []))
        except ClientError as e:
            if _error_code(e) == "NoSuchUpload":
                return {"Parts": []}
            raise
        return {"Parts": parts}
