"""In-memory multipart store for partcopy.

Implements the ``MultipartStore`` protocol over Python dictionaries. It
behaves like S3 where the copier can observe it (range checks, minimum part
size on completion, ETags, ``ClientError`` codes) and lets tests inject
faults into any operation.
"""

import hashlib
import uuid
from typing import Any
from urllib.parse import unquote

from botocore.exceptions import ClientError

_RANGE_PREFIX = "bytes="


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def _etag(data: bytes) -> str:
    return f'"{hashlib.md5(data).hexdigest()}"'


class MemoryMultipartStore:
    """Multipart store that holds objects, sessions and parts in memory.

    Objects are keyed by (bucket, key). Open sessions are keyed by upload id
    and parts by (upload_id, part_number).

    Attributes:
        min_part_size: Smallest size accepted for a non-final part at completion.
        retain_parts_on_abort: Keep parts after abort (simulates a store that
            did not release them).
        calls: Operation names in the order they were invoked.
    """

    def __init__(self, min_part_size: int = 5_000_000, retain_parts_on_abort: bool = False) -> None:
        self.min_part_size = min_part_size
        self.retain_parts_on_abort = retain_parts_on_abort
        self.calls: list[str] = []

        # Object storage: (bucket, key) -> (data, etag, directives)
        self._objects: dict[tuple[str, str], tuple[bytes, str, dict[str, Any]]] = {}
        # Open sessions: upload_id -> (bucket, key, directives)
        self._uploads: dict[str, tuple[str, str, dict[str, Any]]] = {}
        # Aborted sessions whose parts may linger
        self._aborted: set[str] = set()
        # Part storage: (upload_id, part_number) -> (data, etag)
        self._parts: dict[tuple[str, int], tuple[bytes, str]] = {}
        # Injected faults: (operation, part_number or None) -> exception
        self._faults: dict[tuple[str, int | None], BaseException] = {}

    def inject_fault(
        self,
        operation: str,
        error: BaseException,
        part_number: int | None = None,
    ) -> None:
        """Make ``operation`` raise ``error`` (optionally only for one part number)."""
        self._faults[(operation, part_number)] = error

    def _check_fault(self, operation: str, part_number: int | None = None) -> None:
        self.calls.append(operation)
        error = self._faults.get((operation, part_number)) or self._faults.get((operation, None))
        if error is not None:
            raise error

    def _require_upload(self, upload_id: str, bucket: str, key: str, operation: str) -> None:
        upload = self._uploads.get(upload_id)
        if upload is None or upload[:2] != (bucket, key):
            raise _client_error(
                "NoSuchUpload", "The specified multipart upload does not exist.", operation
            )

    # -- Object helpers ------------------------------------------------------

    def put_object(self, bucket: str, key: str, data: bytes) -> str:
        """Store an object directly. Returns its quoted ETag."""
        etag = _etag(data)
        self._objects[(bucket, key)] = (data, etag, {})
        return etag

    def get_object(self, bucket: str, key: str) -> bytes:
        """Return an object's bytes.

        Raises:
            ClientError: ``NoSuchKey`` if the object does not exist.
        """
        try:
            return self._objects[(bucket, key)][0]
        except KeyError:
            raise _client_error("NoSuchKey", "The specified key does not exist.", "GetObject")

    def get_directives(self, bucket: str, key: str) -> dict[str, Any]:
        """Return the directives the object was created with."""
        return dict(self._objects[(bucket, key)][2])

    def pending_uploads(self) -> list[str]:
        """Upload ids of sessions that are neither completed nor aborted."""
        return list(self._uploads)

    def stored_parts(self, upload_id: str) -> list[int]:
        return sorted(pn for uid, pn in self._parts if uid == upload_id)

    # -- MultipartStore protocol --------------------------------------------

    async def create_multipart_upload(self, **params: Any) -> dict[str, Any]:
        self._check_fault("create_multipart_upload")
        bucket, key = params.pop("Bucket"), params.pop("Key")
        upload_id = uuid.uuid4().hex
        self._uploads[upload_id] = (bucket, key, params)
        return {"Bucket": bucket, "Key": key, "UploadId": upload_id}

    async def upload_part_copy(self, **params: Any) -> dict[str, Any]:
        part_number = params["PartNumber"]
        self._check_fault("upload_part_copy", part_number)
        self._require_upload(params["UploadId"], params["Bucket"], params["Key"], "UploadPartCopy")

        src_bucket, _, src_key = unquote(params["CopySource"]).partition("/")
        data = self.get_object(src_bucket, src_key)

        copy_range = params.get("CopySourceRange")
        if copy_range:
            start_str, _, end_str = copy_range[len(_RANGE_PREFIX):].partition("-")
            start, end = int(start_str), int(end_str)
            if start > end or end >= len(data):
                raise _client_error(
                    "InvalidArgument",
                    f"Range specified is not valid for source object of size: {len(data)}",
                    "UploadPartCopy",
                )
            data = data[start:end + 1]

        etag = _etag(data)
        self._parts[(params["UploadId"], part_number)] = (data, etag)
        return {"CopyPartResult": {"ETag": etag, "LastModified": "1970-01-01T00:00:00Z"}}

    async def complete_multipart_upload(self, **params: Any) -> dict[str, Any]:
        self._check_fault("complete_multipart_upload")
        upload_id, bucket, key = params["UploadId"], params["Bucket"], params["Key"]
        self._require_upload(upload_id, bucket, key, "CompleteMultipartUpload")

        requested = params["MultipartUpload"]["Parts"]
        chunks: list[bytes] = []
        md5s: list[bytes] = []
        for index, part in enumerate(requested):
            stored = self._parts.get((upload_id, part["PartNumber"]))
            if stored is None or stored[1] != part["ETag"]:
                raise _client_error(
                    "InvalidPart",
                    "One or more of the specified parts could not be found.",
                    "CompleteMultipartUpload",
                )
            if index < len(requested) - 1 and len(stored[0]) < self.min_part_size:
                raise _client_error(
                    "EntityTooSmall",
                    "Your proposed upload is smaller than the minimum allowed object size.",
                    "CompleteMultipartUpload",
                )
            chunks.append(stored[0])
            md5s.append(bytes.fromhex(stored[1].strip('"')))

        directives = self._uploads.pop(upload_id)[2]
        self._drop_parts(upload_id)
        etag = f'"{hashlib.md5(b"".join(md5s)).hexdigest()}-{len(requested)}"'
        self._objects[(bucket, key)] = (b"".join(chunks), etag, directives)
        return {
            "Location": f"/{bucket}/{key}",
            "Bucket": bucket,
            "Key": key,
            "ETag": etag,
        }

    async def abort_multipart_upload(self, **params: Any) -> dict[str, Any]:
        self._check_fault("abort_multipart_upload")
        upload_id = params["UploadId"]
        self._require_upload(upload_id, params["Bucket"], params["Key"], "AbortMultipartUpload")
        del self._uploads[upload_id]
        self._aborted.add(upload_id)
        if not self.retain_parts_on_abort:
            self._drop_parts(upload_id)
        return {}

    async def list_parts(self, **params: Any) -> dict[str, Any]:
        self._check_fault("list_parts")
        upload_id = params["UploadId"]
        if upload_id not in self._aborted:
            self._require_upload(upload_id, params["Bucket"], params["Key"], "ListParts")
        parts = []
        for pn in self.stored_parts(upload_id):
            data, etag = self._parts[(upload_id, pn)]
            parts.append({"PartNumber": pn, "ETag": etag, "Size": len(data)})
        return {"Parts": parts}

    def _drop_parts(self, upload_id: str) -> None:
        for part_key in [k for k in self._parts if k[0] == upload_id]:
            del self._parts[part_key]
