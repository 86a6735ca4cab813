"""Multipart copy orchestration for partcopy.

A copy runs through these stages:

    Idle -> SessionOpen -> PartsInFlight -> Completing -> Done
    PartsInFlight | Completing -> Aborting -> Done

1. CreateMultipartUpload opens a session on the destination object.
2. The source is split into byte ranges and every range is copied with
   UploadPartCopy concurrently. All parts settle before the outcome is judged.
3. The ETags are assembled, in submission order, into the manifest sent with
   CompleteMultipartUpload.

If the part copies or the completion fail, the session is aborted and the
store is asked to list any remaining parts. The outcome of that cleanup, not
the failure that triggered it, is what the caller receives.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, NoReturn

from partcopy import metrics
from partcopy.errors import (
    AbortIncomplete,
    AbortRequestFailed,
    CompletionFailed,
    CopyError,
    MultipartCopyAborted,
    PartCopyFailed,
    SessionInitiationFailed,
)
from partcopy.manifest import build_manifest, encode_copy_source
from partcopy.models import (
    DEFAULT_COPIED_OBJECT_PERMISSIONS,
    DEFAULT_COPY_PART_SIZE_BYTES,
    CompletionManifest,
    CopyRequest,
    PartitionRange,
    UploadSession,
)
from partcopy.planner import MIN_PART_SIZE_BYTES, calculate_partitions
from partcopy.store.base import MultipartStore, check_logger, check_store
from partcopy.validation import validate_copy_request, validate_size


class MultipartCopier:
    """Copies objects between store locations using server-side part copies.

    Attributes:
        store: The multipart store client.
        logger: Receives ``info``/``error`` calls with structured ``extra`` fields.
        part_size: Part size used when a request does not set one.
        min_part_size: Smallest trailing range emitted as its own part.
        max_concurrency: Upper bound on in-flight part copies (None = unbounded).
        default_acl: ACL applied when a request does not set one.
    """

    def __init__(
        self,
        store: MultipartStore,
        logger: Any = None,
        *,
        part_size: int = DEFAULT_COPY_PART_SIZE_BYTES,
        min_part_size: int = MIN_PART_SIZE_BYTES,
        max_concurrency: int | None = None,
        default_acl: str = DEFAULT_COPIED_OBJECT_PERMISSIONS,
    ) -> None:
        """Validate the collaborators and settings.

        Raises:
            InvalidCollaborator: If the store or logger lacks a required method.
            InvalidArgument: If a size or the concurrency limit is not positive.
        """
        check_store(store)
        if logger is None:
            logger = logging.getLogger(__name__)
        check_logger(logger)
        validate_size(part_size, "part_size")
        validate_size(min_part_size, "min_part_size")
        if max_concurrency is not None:
            validate_size(max_concurrency, "max_concurrency")

        self.store = store
        self.logger = logger
        self.part_size = part_size
        self.min_part_size = min_part_size
        self.max_concurrency = max_concurrency
        self.default_acl = default_acl

        self.logger.info("S3 client initialized successfully")

    async def copy_object(
        self, request: CopyRequest, timeout: float | None = None
    ) -> dict[str, Any]:
        """Copy ``request``'s source object to its destination.

        Args:
            request: What to copy and how the copy should be created.
            timeout: Seconds to wait for the part copies; parts still running
                after that are cancelled and the session is aborted.

        Returns:
            The store's CompleteMultipartUpload response.

        Raises:
            InvalidArgument: The request is malformed; nothing was sent.
            SessionInitiationFailed: The session could not be opened.
            MultipartCopyAborted: A stage failed and cleanup succeeded.
            AbortIncomplete: A stage failed and parts survived the abort.
            AbortRequestFailed: A stage failed and the abort itself failed.
            asyncio.CancelledError: The calling task was cancelled once the
                session was open; in-flight parts are cancelled and the
                session is aborted before this propagates.
        """
        part_size = request.copy_part_size_bytes or self.part_size
        try:
            validate_copy_request(request, part_size)
            partitions = calculate_partitions(
                request.object_size, part_size, self.min_part_size
            )
            session = await self.initiate(request)
        except CopyError as e:
            metrics.record_copy(e.code)
            raise

        try:
            copy_results = await self.copy_parts(request, session, partitions, timeout)
            self.logger.info(
                "copied all parts successfully",
                extra={"context": request.request_context, "upload_id": session.upload_id,
                       "response": copy_results},
            )
            result = await self.complete(request, session, build_manifest(copy_results))
        except (PartCopyFailed, CompletionFailed) as e:
            try:
                await self.abort(request, session, e)
            except CopyError as outcome:
                metrics.record_copy(outcome.code)
                raise
        except asyncio.CancelledError:
            self.logger.error(
                "multipart copy cancelled",
                extra={"context": request.request_context, "upload_id": session.upload_id},
            )
            try:
                await self.abort(request, session)
            except CopyError as outcome:
                # abort() has already logged how cleanup went
                metrics.record_copy(outcome.code)
            raise

        metrics.record_copy("success")
        return result

    async def initiate(self, request: CopyRequest) -> UploadSession:
        """Open the multipart session with the request's directives.

        Raises:
            SessionInitiationFailed: If the store rejects the request or returns
                no UploadId.
        """
        params = {
            "Bucket": request.destination_bucket,
            "Key": request.copied_object_name,
            **request.directives(self.default_acl),
        }
        try:
            result = await self.store.create_multipart_upload(**params)
            if not result.get("UploadId"):
                raise ValueError("CreateMultipartUpload response has no UploadId")
        except Exception as e:
            self.logger.error(
                "multipart copy failed to initiate",
                extra={"context": request.request_context, "stage": "initiate", "error": e},
            )
            raise SessionInitiationFailed(e, request.request_context) from e

        self.logger.info(
            "multipart copy initiated successfully",
            extra={"context": request.request_context, "stage": "initiate", "response": result},
        )
        return UploadSession(
            bucket=request.destination_bucket,
            key=request.copied_object_name,
            upload_id=result["UploadId"],
        )

    async def copy_part(
        self,
        request: CopyRequest,
        session: UploadSession,
        partition: PartitionRange,
        copy_source: str | None = None,
    ) -> dict[str, Any]:
        """Copy one byte range into the session. Failures are logged and re-raised."""
        if copy_source is None:
            copy_source = encode_copy_source(request.source_bucket, request.object_key)
        params = {
            "Bucket": session.bucket,
            "CopySource": copy_source,
            "CopySourceRange": partition.header(),
            "Key": session.key,
            "PartNumber": partition.part_number,
            "UploadId": session.upload_id,
        }
        try:
            result = await self.store.upload_part_copy(**params)
            if not (result.get("CopyPartResult") or {}).get("ETag"):
                raise ValueError(
                    f"UploadPartCopy response for part {partition.part_number} has no ETag"
                )
        except Exception as e:
            metrics.record_part("failed")
            self.logger.error(
                "CopyPart %d Failed", partition.part_number,
                extra={"context": request.request_context, "stage": "copy_part",
                       "upload_id": session.upload_id,
                       "part_number": partition.part_number, "error": e},
            )
            raise

        metrics.record_part("succeeded", partition.size)
        self.logger.info(
            "CopyPart %d succeeded", partition.part_number,
            extra={"context": request.request_context, "stage": "copy_part",
                   "upload_id": session.upload_id,
                   "part_number": partition.part_number, "response": result},
        )
        return result

    async def copy_parts(
        self,
        request: CopyRequest,
        session: UploadSession,
        partitions: list[PartitionRange],
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """Copy every partition concurrently and return results in partition order.

        Every part settles (succeeds, fails, or is cancelled at ``timeout``)
        before any failure is reported.

        Raises:
            PartCopyFailed: If any part failed, listing all failed part numbers.
        """
        copy_source = encode_copy_source(request.source_bucket, request.object_key)
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run(partition: PartitionRange) -> dict[str, Any]:
            if semaphore is None:
                return await self.copy_part(request, session, partition, copy_source)
            async with semaphore:
                return await self.copy_part(request, session, partition, copy_source)

        tasks = [asyncio.ensure_future(run(partition)) for partition in partitions]
        try:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for task in pending:
            task.cancel()
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        failures: list[tuple[int, BaseException]] = []
        for partition, outcome in zip(partitions, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                outcome = asyncio.TimeoutError(
                    f"part {partition.part_number} did not finish within {timeout}s"
                )
                metrics.record_part("cancelled")
                self.logger.error(
                    "CopyPart %d Failed", partition.part_number,
                    extra={"context": request.request_context, "stage": "copy_part",
                           "upload_id": session.upload_id,
                           "part_number": partition.part_number, "error": outcome},
                )
            if isinstance(outcome, BaseException):
                failures.append((partition.part_number, outcome))

        if failures:
            raise PartCopyFailed(session.upload_id, failures)
        return list(outcomes)

    async def complete(
        self,
        request: CopyRequest,
        session: UploadSession,
        manifest: CompletionManifest,
    ) -> dict[str, Any]:
        """Finish the session with the manifest.

        Raises:
            CompletionFailed: If the store rejects the completion.
        """
        try:
            result = await self.store.complete_multipart_upload(
                **session.params(), MultipartUpload=manifest.to_dict()
            )
        except Exception as e:
            self.logger.error(
                "Multipart upload failed",
                extra={"context": request.request_context, "stage": "complete",
                       "upload_id": session.upload_id, "error": e},
            )
            raise CompletionFailed(session.upload_id, e) from e

        self.logger.info(
            "multipart copy completed successfully",
            extra={"context": request.request_context, "stage": "complete",
                   "upload_id": session.upload_id, "response": result},
        )
        return result

    async def abort(
        self,
        request: CopyRequest,
        session: UploadSession,
        cause: CopyError | None = None,
    ) -> NoReturn:
        """Abort the session and verify that no parts remain.

        Always raises; the exception describes how cleanup went and carries
        ``cause`` for the caller to inspect.

        Raises:
            AbortRequestFailed: The abort (or the verification listing) failed.
            AbortIncomplete: The store still lists parts after the abort.
            MultipartCopyAborted: Cleanup succeeded.
        """
        params = session.params()
        try:
            await self.store.abort_multipart_upload(**params)
            parts_list = await self.store.list_parts(**params)
        except Exception as e:
            self.logger.error(
                "abort multipart copy failed",
                extra={"context": request.request_context, "stage": "abort",
                       "upload_id": session.upload_id, "error": e},
            )
            raise AbortRequestFailed(params, e, cause) from cause

        parts = parts_list.get("Parts") or []
        if parts:
            self.logger.error(
                "abort multipart copy failed, copy parts were not removed",
                extra={"context": request.request_context, "stage": "abort",
                       "upload_id": session.upload_id, "parts": parts_list},
            )
            raise AbortIncomplete(params, parts, cause) from cause

        self.logger.info(
            "multipart copy aborted successfully",
            extra={"context": request.request_context, "stage": "abort",
                   "upload_id": session.upload_id, "response": parts_list},
        )
        raise MultipartCopyAborted(params, cause) from cause
