"""Tests for the bucket-cleaner command line entry point."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from bucket_cleaner import main as cli
from bucket_cleaner.infra.storage.s3_client import S3StorageClient


@pytest.fixture
def logging_calls(monkeypatch):
    calls: list[tuple[str, str]] = []
    monkeypatch.setattr(
        cli, "setup_logging", lambda level, fmt: calls.append((level, fmt))
    )
    return calls


@pytest.fixture
def mock_s3(logging_calls):
    mock_client = MagicMock()
    mock_client.list_multipart_uploads.return_value = {}
    mock_client.list_objects_v2.return_value = {}
    with patch.object(S3StorageClient, "_build_client", return_value=mock_client):
        yield mock_client


@pytest.fixture(autouse=True)
def info_logs(caplog):
    caplog.set_level(logging.INFO)
    return caplog


class TestMain:
    def test_empty_bucket_exits_zero(self, r2_environment, mock_s3, info_logs):
        assert cli.main([]) == 0

        mock_s3.delete_objects.assert_not_called()
        mock_s3.abort_multipart_upload.assert_not_called()
        assert "Bucket cleaned successfully!" in info_logs.messages

    def test_deletes_objects_and_aborts_uploads(self, r2_environment, mock_s3):
        mock_s3.list_multipart_uploads.return_value = {
            "Uploads": [{"Key": "big.bin", "UploadId": "u-1"}]
        }
        mock_s3.list_objects_v2.return_value = {
            "Contents": [{"Key": "a.txt"}, {"Key": "b.txt"}]
        }
        mock_s3.delete_objects.return_value = {"Deleted": []}

        assert cli.main([]) == 0

        mock_s3.abort_multipart_upload.assert_called_once_with(
            Bucket="test-bucket", Key="big.bin", UploadId="u-1"
        )
        mock_s3.delete_objects.assert_called_once_with(
            Bucket="test-bucket",
            Delete={"Objects": [{"Key": "a.txt"}, {"Key": "b.txt"}]},
        )

    def test_missing_configuration_exits_one(self, logging_calls, info_logs):
        with patch.object(S3StorageClient, "_build_client") as build_client:
            assert cli.main([]) == 1

        build_client.assert_not_called()
        assert logging_calls == [("INFO", "plain")]
        errors = [r for r in info_logs.records if r.levelno == logging.ERROR]
        assert errors and "R2_BUCKET" in errors[0].getMessage()

    def test_transport_failure_exits_one(self, r2_environment, mock_s3, info_logs):
        mock_s3.list_objects_v2.side_effect = Exception("connection reset")

        assert cli.main([]) == 1

        errors = [r for r in info_logs.records if r.levelno == logging.ERROR]
        assert errors[-1].getMessage() == "Error cleaning bucket"
        assert errors[-1].exc_info is not None
        assert "Bucket cleaned successfully!" not in info_logs.messages

    def test_partial_abort_failure_still_succeeds(
        self, r2_environment, mock_s3, info_logs
    ):
        mock_s3.list_multipart_uploads.return_value = {
            "Uploads": [
                {"Key": "a.bin", "UploadId": "u-1"},
                {"Key": "b.bin", "UploadId": "u-2"},
            ]
        }
        mock_s3.abort_multipart_upload.side_effect = [Exception("denied"), {}]

        assert cli.main([]) == 0

        assert mock_s3.abort_multipart_upload.call_count == 2
        assert "1 of 2 multipart uploads could not be aborted" in info_logs.messages

    def test_writes_metrics_textfile(
        self, r2_environment, mock_s3, monkeypatch, tmp_path
    ):
        target = tmp_path / "bucket_cleaner.prom"
        monkeypatch.setenv("METRICS_TEXTFILE", str(target))
        mock_s3.list_objects_v2.side_effect = Exception("connection reset")

        assert cli.main([]) == 1

        assert "bucket_cleaner_objects_deleted_total" in target.read_text()

    def test_unwritable_metrics_textfile_keeps_success(
        self, r2_environment, mock_s3, monkeypatch, tmp_path, info_logs
    ):
        target = tmp_path / "missing-dir" / "bucket_cleaner.prom"
        monkeypatch.setenv("METRICS_TEXTFILE", str(target))

        assert cli.main([]) == 0

        assert not target.exists()
        warnings = [r for r in info_logs.records if r.levelno == logging.WARNING]
        assert "Could not write metrics" in warnings[-1].getMessage()
        assert "Bucket cleaned successfully!" in info_logs.messages

    def test_unwritable_metrics_textfile_keeps_failure(
        self, r2_environment, mock_s3, monkeypatch, tmp_path, info_logs
    ):
        target = tmp_path / "missing-dir" / "bucket_cleaner.prom"
        monkeypatch.setenv("METRICS_TEXTFILE", str(target))
        mock_s3.list_objects_v2.side_effect = Exception("connection reset")

        assert cli.main([]) == 1

        errors = [r for r in info_logs.records if r.levelno == logging.ERROR]
        assert errors[-1].getMessage() == "Error cleaning bucket"

    def test_command_line_overrides_logging(
        self, r2_environment, mock_s3, logging_calls, monkeypatch
    ):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert cli.main(["--log-format", "json"]) == 0
        assert logging_calls == [("WARNING", "json")]

        cli.get_settings.cache_clear()
        logging_calls.clear()
        assert cli.main(["--log-level", "debug"]) == 0
        assert logging_calls == [("DEBUG", "plain")]

    def test_env_file_option(self, mock_s3, tmp_path):
        env_file = tmp_path / "staging.env"
        env_file.write_text(
            "R2_BUCKET=staging\nR2_ACCOUNT_ID=acct\n"
            "R2_ACCESS_KEY_ID=k\nR2_SECRET_ACCESS_KEY=s\n",
            encoding="utf-8",
        )

        assert cli.main(["--env-file", str(env_file)]) == 0

        mock_s3.list_objects_v2.assert_called_once_with(Bucket="staging")

    def test_rejects_unknown_log_format(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--log-format", "xml"])
        assert excinfo.value.code == 2
