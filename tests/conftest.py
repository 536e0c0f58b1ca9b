"""Shared pytest fixtures for test files."""

from __future__ import annotations

from unittest import mock

import pytest

from r2_upload.config import UploadConfig
from tests.r2_upload_test_utils import SIGNED_URL_BASE


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Skip pacing and retry delays."""
    patched = mock.Mock()
    monkeypatch.setattr("r2_upload.multipart.time.sleep", patched)
    monkeypatch.setattr("r2_upload.engine.time.sleep", patched)
    return patched


def _signed_url(_operation, Params, ExpiresIn):  # pylint: disable=invalid-name
    return f"{SIGNED_URL_BASE}/{Params['Bucket']}/{Params['Key']}?exp={ExpiresIn}"


@pytest.fixture(name="fake_s3")
def fixture_fake_s3():
    """MagicMock standing in for a boto3 S3 client."""
    s3 = mock.MagicMock()
    s3.create_multipart_upload.return_value = {"UploadId": "upload-1"}
    s3.upload_part.side_effect = lambda **kwargs: {"ETag": f'"etag-{kwargs["PartNumber"]}"'}
    s3.complete_multipart_upload.return_value = {}
    s3.put_object.return_value = {"ETag": '"put-etag"'}
    s3.generate_presigned_url.side_effect = _signed_url
    return s3


@pytest.fixture(name="source_dir")
def fixture_source_dir(tmp_path):
    """Empty source directory to populate per test."""
    source = tmp_path / "dist"
    source.mkdir()
    return source


@pytest.fixture(name="make_config")
def fixture_make_config(source_dir):
    """Factory for UploadConfig with test credentials and overridable fields."""

    def _make(**overrides) -> UploadConfig:
        values = {
            "account_id": "acct",
            "access_key_id": "key",
            "secret_access_key": "secret",
            "bucket": "bucket",
            "source_dir": str(source_dir),
        }
        values.update(overrides)
        return UploadConfig(**values)

    return _make
