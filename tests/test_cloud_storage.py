"""
Tests for CloudStorageManager and GCS config helpers.
"""
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as gcs_exceptions

from recordings.models import FileSource
from recordings.services.error_handling import CloudStorageError, ErrorCategory, LocalFileMissingError
from recordings.storage.cloud_storage import (
    CloudStorageManager,
    create_gcs_manager_from_config,
    validate_credentials_dict,
)
from tests.fixtures.cloud_fixtures import MOCK_GCS_CREDENTIALS, make_blob


class TestValidateCredentials:
    def test_valid_credentials(self):
        validate_credentials_dict(MOCK_GCS_CREDENTIALS)

    def test_empty_credentials(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_credentials_dict({})

    def test_missing_fields(self):
        partial = {k: v for k, v in MOCK_GCS_CREDENTIALS.items() if k != "private_key"}
        with pytest.raises(ValueError, match="private_key"):
            validate_credentials_dict(partial)


class TestCloudStorageManagerInit:
    def test_default_credentials(self, mock_gcs_client):
        with patch("recordings.storage.cloud_storage.storage.Client", return_value=mock_gcs_client) as client_cls:
            manager = CloudStorageManager(bucket_name="test-bucket")

        client_cls.assert_called_once_with(credentials=None)
        mock_gcs_client.bucket.assert_called_once_with("test-bucket")
        assert manager.prefix == "recordings"

    def test_credentials_from_dict(self, mock_gcs_client):
        with patch("recordings.storage.cloud_storage.storage.Client", return_value=mock_gcs_client), \
                patch("recordings.storage.cloud_storage.service_account.Credentials") as creds_cls:
            manager = CloudStorageManager(bucket_name="test-bucket", credentials_dict=MOCK_GCS_CREDENTIALS)

        creds_cls.from_service_account_info.assert_called_once_with(MOCK_GCS_CREDENTIALS)
        assert manager.credentials is creds_cls.from_service_account_info.return_value

    def test_credentials_from_file(self, mock_gcs_client, tmp_path):
        key_file = tmp_path / "key.json"
        with patch("recordings.storage.cloud_storage.storage.Client", return_value=mock_gcs_client), \
                patch("recordings.storage.cloud_storage.service_account.Credentials") as creds_cls:
            CloudStorageManager(bucket_name="test-bucket", credentials_path=key_file)

        creds_cls.from_service_account_file.assert_called_once_with(str(key_file))

    def test_invalid_credentials_dict(self, mock_gcs_client):
        with patch("recordings.storage.cloud_storage.storage.Client", return_value=mock_gcs_client):
            with pytest.raises(ValueError):
                CloudStorageManager(bucket_name="test-bucket", credentials_dict={"type": "service_account"})


class TestListObjects:
    def test_lists_records_under_prefix(self, gcs_manager, mock_gcs_client):
        mock_gcs_client.list_blobs.return_value = [
            make_blob("recordings/", size=0),
            make_blob("recordings/Alice(1234567890)_a.mp3", size=48000),
            make_blob("recordings/b.mp3", size=None),
        ]

        records = gcs_manager.list_objects()

        mock_gcs_client.list_blobs.assert_called_once_with("test-bucket", prefix="recordings/")
        assert [r.name for r in records] == ["Alice(1234567890)_a.mp3", "b.mp3"]
        first = records[0]
        assert first.source == FileSource.CLOUD
        assert first.size == 48000
        assert first.path == "recordings/Alice(1234567890)_a.mp3"
        assert first.url.endswith("recordings/Alice(1234567890)_a.mp3")
        assert first.created_at.year == 2025
        assert first.modified_at is None
        assert records[1].size == 0

    def test_custom_prefix(self, gcs_manager, mock_gcs_client):
        gcs_manager.list_objects(prefix="/archive/")
        mock_gcs_client.list_blobs.assert_called_once_with("test-bucket", prefix="archive/")

    def test_listing_error_wrapped(self, gcs_manager, mock_gcs_client):
        mock_gcs_client.list_blobs.side_effect = gcs_exceptions.Forbidden("no access")

        with pytest.raises(CloudStorageError) as exc_info:
            gcs_manager.list_objects()

        assert exc_info.value.category == ErrorCategory.PERMISSION


class TestUpload:
    def test_upload_returns_public_url(self, gcs_manager, mock_gcs_client, tmp_path):
        local_file = tmp_path / "a.mp3"
        local_file.write_bytes(b"\x00" * 100)
        blob = mock_gcs_client.bucket.return_value.blob.return_value

        url = gcs_manager.upload(local_file, "a.mp3")

        mock_gcs_client.bucket.return_value.blob.assert_called_once_with("recordings/a.mp3")
        blob.upload_from_filename.assert_called_once_with(str(local_file))
        assert url == blob.public_url

    def test_missing_local_file(self, gcs_manager, mock_gcs_client, tmp_path):
        with pytest.raises(LocalFileMissingError):
            gcs_manager.upload(tmp_path / "gone.mp3", "gone.mp3")

        mock_gcs_client.bucket.return_value.blob.assert_not_called()

    def test_file_removed_during_upload(self, gcs_manager, mock_gcs_client, tmp_path):
        local_file = tmp_path / "a.mp3"
        local_file.write_bytes(b"x")
        blob = mock_gcs_client.bucket.return_value.blob.return_value
        blob.upload_from_filename.side_effect = FileNotFoundError(str(local_file))

        with pytest.raises(LocalFileMissingError):
            gcs_manager.upload(local_file, "a.mp3")

    def test_server_error_wrapped(self, gcs_manager, mock_gcs_client, tmp_path):
        local_file = tmp_path / "a.mp3"
        local_file.write_bytes(b"x")
        blob = mock_gcs_client.bucket.return_value.blob.return_value
        blob.upload_from_filename.side_effect = gcs_exceptions.ServiceUnavailable("try later")

        with pytest.raises(CloudStorageError) as exc_info:
            gcs_manager.upload(local_file, "a.mp3")

        assert exc_info.value.category == ErrorCategory.SERVER


class TestExistsAndDelete:
    def test_file_exists(self, gcs_manager, mock_gcs_client):
        assert gcs_manager.file_exists("a.mp3") is True
        mock_gcs_client.bucket.return_value.blob.assert_called_with("recordings/a.mp3")

    def test_file_exists_error(self, gcs_manager, mock_gcs_client):
        mock_gcs_client.bucket.return_value.blob.return_value.exists.side_effect = Exception("boom")
        assert gcs_manager.file_exists("a.mp3") is False

    def test_delete_existing(self, gcs_manager, mock_gcs_client):
        blob = mock_gcs_client.bucket.return_value.blob.return_value

        assert gcs_manager.delete("recordings/a.mp3") is True
        blob.delete.assert_called_once()

    def test_delete_missing(self, gcs_manager, mock_gcs_client):
        blob = mock_gcs_client.bucket.return_value.blob.return_value
        blob.exists.return_value = False

        assert gcs_manager.delete("recordings/a.mp3") is False
        blob.delete.assert_not_called()

    def test_delete_error(self, gcs_manager, mock_gcs_client):
        blob = mock_gcs_client.bucket.return_value.blob.return_value
        blob.delete.side_effect = gcs_exceptions.Forbidden("no")

        assert gcs_manager.delete("recordings/a.mp3") is False


class TestCreateFromConfig:
    @pytest.mark.parametrize("config", [None, {}, {"prefix": "recordings"}])
    def test_unconfigured(self, config):
        assert create_gcs_manager_from_config(config) is None

    def test_creates_manager(self, mock_gcs_client):
        with patch("recordings.storage.cloud_storage.storage.Client", return_value=mock_gcs_client):
            manager = create_gcs_manager_from_config({"bucket_name": "test-bucket", "prefix": "calls"})

        assert isinstance(manager, CloudStorageManager)
        assert manager.object_path("a.mp3") == "calls/a.mp3"

    def test_construction_error_returns_none(self):
        logger = MagicMock()
        with patch("recordings.storage.cloud_storage.storage.Client", side_effect=Exception("no auth")):
            assert create_gcs_manager_from_config({"bucket_name": "test-bucket"}, logger) is None
        logger.error.assert_called_once()
