"""Tests for partcopy configuration loading."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from partcopy.config import CopyConfig, PartCopyConfig, load_config


def _write_config(data) -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        f.flush()
        return Path(f.name)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_example_config(self):
        """Loading the example config file populates all fields."""
        config = load_config(Path(__file__).resolve().parent.parent / "partcopy.example.yaml")
        assert config.multipart.part_size == 50_000_000
        assert config.multipart.min_part_size == 5_000_000
        assert config.multipart.max_concurrency == 16
        assert config.multipart.default_acl == "private"
        assert config.storage.backend == "aws"
        assert config.storage.region == "us-east-1"
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"

    def test_load_minimal_config(self):
        """Loading an empty YAML uses defaults for all fields."""
        config = load_config(_write_config({}))
        assert config.multipart.part_size == 50_000_000
        assert config.multipart.max_concurrency is None
        assert config.multipart.timeout is None
        assert config.storage.backend == "aws"

    def test_part_size_bytes_alias(self):
        config = load_config(_write_config({"multipart": {"part_size_bytes": 8_000_000}}))
        assert config.multipart.part_size == 8_000_000

    def test_nested_storage_aws(self):
        data = {
            "storage": {
                "backend": "aws",
                "aws": {
                    "region": "eu-central-1",
                    "endpoint_url": "http://localhost:9000",
                    "use_path_style": True,
                },
            }
        }
        config = load_config(_write_config(data))
        assert config.storage.region == "eu-central-1"
        assert config.storage.endpoint_url == "http://localhost:9000"
        assert config.storage.use_path_style is True

    def test_logging_section(self):
        config = load_config(_write_config({"logging": {"level": "DEBUG", "format": "json"}}))
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_non_positive_part_size_rejected(self):
        with pytest.raises(ValidationError):
            load_config(_write_config({"multipart": {"part_size": 0}}))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_defaults_instance(self):
        config = PartCopyConfig()
        assert config.multipart == CopyConfig()
        assert config.storage.region == "us-east-1"
