"""Configuration loading and Pydantic models for partcopy."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from partcopy.models import DEFAULT_COPIED_OBJECT_PERMISSIONS, DEFAULT_COPY_PART_SIZE_BYTES
from partcopy.planner import MIN_PART_SIZE_BYTES


class CopyConfig(BaseModel):
    """Multipart copy tuning."""

    part_size: int = Field(default=DEFAULT_COPY_PART_SIZE_BYTES, gt=0)
    min_part_size: int = Field(default=MIN_PART_SIZE_BYTES, gt=0)
    max_concurrency: int | None = Field(default=None, gt=0)
    default_acl: str = DEFAULT_COPIED_OBJECT_PERMISSIONS
    timeout: float | None = Field(default=None, gt=0)


class StorageConfig(BaseModel):
    """Object store client configuration."""

    backend: str = "aws"
    region: str = "us-east-1"
    endpoint_url: str = ""
    use_path_style: bool = False
    access_key_id: str = ""
    secret_access_key: str = ""


class LoggingConfig(BaseModel):
    """Log output configuration."""

    level: str = "INFO"
    format: str = "text"


class PartCopyConfig(BaseModel):
    """Top-level partcopy configuration."""

    multipart: CopyConfig = Field(default_factory=CopyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _parse_multipart(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the multipart section from YAML data into a dict for Pydantic.

    Accepts ``part_size_bytes`` / ``min_part_size_bytes`` as aliases.
    """
    if data is None:
        return {}
    result: dict[str, Any] = {}
    for name in ("part_size", "min_part_size"):
        value = data.get(name, data.get(f"{name}_bytes"))
        if value is not None:
            result[name] = value
    for name in ("max_concurrency", "default_acl", "timeout"):
        if data.get(name) is not None:
            result[name] = data[name]
    return result


def _parse_storage(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the storage section from YAML data.

    Handles nested structure: storage.aws.region -> region, etc.
    """
    if data is None:
        return {}

    result: dict[str, Any] = {"backend": data.get("backend", "aws")}

    aws_section = data.get("aws")
    if isinstance(aws_section, dict):
        result["region"] = aws_section.get("region", "us-east-1")
        result["endpoint_url"] = aws_section.get("endpoint_url", "")
        result["use_path_style"] = aws_section.get("use_path_style", False)
        result["access_key_id"] = aws_section.get("access_key_id", "")
        result["secret_access_key"] = aws_section.get("secret_access_key", "")

    return result


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def load_config(path: Path) -> PartCopyConfig:
    """Load a PartCopyConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated PartCopyConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value is out of range.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return PartCopyConfig(
        multipart=CopyConfig(**_parse_multipart(raw.get("multipart"))),
        storage=StorageConfig(**_parse_storage(raw.get("storage"))),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
    )
