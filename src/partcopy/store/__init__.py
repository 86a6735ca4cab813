"""Multipart store clients for partcopy."""

from typing import TYPE_CHECKING

from partcopy.store.base import MultipartStore, check_logger, check_store

if TYPE_CHECKING:
    from partcopy.config import StorageConfig

__all__ = [
    "check_logger",
    "check_store",
    "create_store",
    "MultipartStore",
]


def create_store(config: "StorageConfig") -> MultipartStore:
    """Create a store client based on configuration.

    The returned AWS store still needs ``await store.init()`` before use.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = config.backend

    if backend == "aws":
        from partcopy.store.aws import S3MultipartStore

        return S3MultipartStore(
            region=config.region,
            endpoint_url=config.endpoint_url,
            use_path_style=config.use_path_style,
            access_key_id=config.access_key_id,
            secret_access_key=config.secret_access_key,
        )

    elif backend == "memory":
        from partcopy.store.memory import MemoryMultipartStore

        return MemoryMultipartStore()

    else:
        raise ValueError(f"Unknown storage backend: {backend}")
