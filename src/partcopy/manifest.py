"""Helpers shaping part-copy requests and results for the store."""

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from partcopy.models import CompletionManifest, PartResult

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_copy_source(bucket: str, key: str) -> str:
    """Percent-encode ``bucket/key`` as a single URI component.

    The separator is escaped too (``%2F``), so reserved characters in the key
    cannot be mistaken for path structure.
    """
    return quote(f"{bucket}/{key}", safe=_URI_COMPONENT_SAFE)


def build_manifest(copy_results: Sequence[dict[str, Any]]) -> CompletionManifest:
    """Turn raw UploadPartCopy responses into a completion manifest.

    ``copy_results`` must be in submission order. Part numbers are assigned
    from position; only the ETag of each response is kept.
    """
    return CompletionManifest(
        parts=tuple(
            PartResult(part_number=index, etag=result["CopyPartResult"]["ETag"])
            for index, result in enumerate(copy_results, 1)
        )
    )
