"""Tests for the partcopy CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from partcopy.cli import main, parse_args, run_copy
from partcopy.config import PartCopyConfig
from partcopy.errors import MultipartCopyAborted, PartCopyFailed
from partcopy.models import CopyRequest
from partcopy.store.memory import MemoryMultipartStore

REQUIRED = [
    "--source-bucket", "src-bucket",
    "--source-key", "dir/object.bin",
    "--destination-bucket", "dst-bucket",
    "--destination-key", "copy.bin",
    "--size", "100",
]


class TestParseArgs:
    """Tests for parse_args()."""

    def test_required_only(self):
        args = parse_args(REQUIRED)
        assert args.source_bucket == "src-bucket"
        assert args.size == 100
        assert args.config is None
        assert args.part_size is None
        assert args.log_format is None

    def test_overrides(self):
        args = parse_args(REQUIRED + ["--part-size", "30", "--max-concurrency", "4", "--log-format", "json"])
        assert args.part_size == 30
        assert args.max_concurrency == 4
        assert args.log_format == "json"

    def test_missing_required(self):
        with pytest.raises(SystemExit):
            parse_args(["--source-bucket", "src-bucket"])


class TestRunCopy:
    """Tests for run_copy() against the in-memory store."""

    async def test_copies_object(self):
        store = MemoryMultipartStore(min_part_size=16)
        store.put_object("src-bucket", "dir/object.bin", bytes(range(100)))
        config = PartCopyConfig()
        config.multipart.part_size = 30
        config.multipart.min_part_size = 16

        request = CopyRequest(
            source_bucket="src-bucket",
            object_key="dir/object.bin",
            destination_bucket="dst-bucket",
            copied_object_name="copy.bin",
            object_size=100,
        )
        with patch("partcopy.cli.create_store", return_value=store):
            result = await run_copy(config, request)

        assert result["Key"] == "copy.bin"
        assert store.get_object("dst-bucket", "copy.bin") == bytes(range(100))


class TestMain:
    """Tests for main()."""

    def test_prints_result(self, capsys):
        with patch("partcopy.cli.run_copy", new=AsyncMock(return_value={"ETag": '"x-2"'})) as run, \
                patch("partcopy.cli.configure_logging"), patch("partcopy.cli.init_metrics"):
            main(REQUIRED + ["--part-size", "30", "--acl", "public-read"])

        config, request = run.await_args.args
        assert config.multipart.part_size == 30
        assert request.copied_object_permissions == "public-read"
        assert request.request_context == "cli"
        assert json.loads(capsys.readouterr().out) == {"ETag": '"x-2"'}

    def test_exits_on_copy_error(self):
        cause = PartCopyFailed("u1", [])
        error = MultipartCopyAborted({"Bucket": "b", "Key": "k", "UploadId": "u1"}, cause)
        with patch("partcopy.cli.run_copy", new=AsyncMock(side_effect=error)), \
                patch("partcopy.cli.configure_logging"), patch("partcopy.cli.init_metrics"):
            with pytest.raises(SystemExit) as exc_info:
                main(REQUIRED)
        assert exc_info.value.code == 1

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(REQUIRED + ["--config", str(tmp_path / "missing.yaml")])
        assert exc_info.value.code == 1
