"""Google Cloud Storage manager for mirrored recordings."""

import logging
from pathlib import Path
from typing import Optional, List, Dict, Any

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage
from google.oauth2 import service_account

from config.storage import StorageConfig
from recordings.models import FileRecord, FileSource
from recordings.services.error_handling import (
    CloudStorageError,
    LocalFileMissingError,
    categorize_error,
)


def validate_credentials_dict(credentials_dict: Dict[str, Any]) -> None:
    """Validate credentials dictionary shape."""
    if not credentials_dict:
        raise ValueError("credentials_dict cannot be empty")

    missing = StorageConfig.REQUIRED_CREDENTIAL_FIELDS - set(credentials_dict.keys())
    if missing:
        raise ValueError(
            f"GCS credentials missing required fields: {sorted(missing)}. "
            f"Expected fields: {sorted(StorageConfig.REQUIRED_CREDENTIAL_FIELDS)}"
        )


class CloudStorageManager:
    """
    Manages listing, upload and deletion of recordings in a GCS bucket.

    All recordings live under a single prefix (``recordings/`` by default);
    object names below the prefix are the local file names.
    """

    def __init__(
        self,
        bucket_name: str,
        prefix: str = StorageConfig.CLOUD_PREFIX,
        credentials_dict: Optional[Dict[str, Any]] = None,
        credentials_path: Optional[Path] = None,
        logger_obj: Optional[logging.Logger] = None
    ):
        """
        Initialize GCS manager.

        Args:
            bucket_name: Name of the GCS bucket
            prefix: Object prefix holding the recordings
            credentials_dict: Service account credentials as dict
            credentials_path: Path to service account JSON file
            logger_obj: Logger instance
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.logger = logger_obj or logging.getLogger(__name__)

        if credentials_dict:
            validate_credentials_dict(credentials_dict)
            self.credentials = service_account.Credentials.from_service_account_info(
                credentials_dict
            )
        elif credentials_path:
            self.credentials = service_account.Credentials.from_service_account_file(
                str(credentials_path)
            )
        else:
            # Use default credentials (from environment)
            self.credentials = None

        self.client = storage.Client(credentials=self.credentials)
        self.bucket = self.client.bucket(bucket_name)

        self.logger.info(f"Initialized CloudStorageManager for bucket: {bucket_name}/{self.prefix}")

    def object_path(self, object_name: str) -> str:
        return StorageConfig.object_path(object_name, self.prefix)

    def list_objects(self, prefix: Optional[str] = None) -> List[FileRecord]:
        """
        List recordings stored under a prefix.

        Args:
            prefix: Prefix to list (defaults to the manager's prefix)

        Returns:
            FileRecords for every object, directory markers skipped

        Raises:
            CloudStorageError: If the listing fails
        """
        list_prefix = self.prefix if prefix is None else prefix.strip("/")
        if list_prefix:
            list_prefix = f"{list_prefix}/"

        try:
            records = []
            for blob in self.client.list_blobs(self.bucket_name, prefix=list_prefix):
                if blob.name.endswith('/'):
                    continue
                records.append(
                    FileRecord(
                        name=blob.name.split('/')[-1],
                        source=FileSource.CLOUD,
                        size=blob.size or 0,
                        path=blob.name,
                        url=blob.public_url,
                        created_at=blob.time_created,
                    )
                )
            return records
        except gcs_exceptions.GoogleAPICallError as e:
            self.logger.error(f"Error listing objects with prefix {list_prefix}: {e}", exc_info=True)
            raise CloudStorageError(f"Listing failed: {e}", categorize_error(e)) from e

    def upload(self, local_path: Path, object_name: str) -> str:
        """
        Upload a single local file under the recordings prefix.

        Args:
            local_path: Path to local file
            object_name: Object name below the prefix

        Returns:
            URL of the uploaded object

        Raises:
            LocalFileMissingError: If the local file does not exist at call time
            CloudStorageError: If the upload fails
        """
        local_path = Path(local_path)
        if not local_path.exists():
            self.logger.warning(f"File not found for upload: {local_path}")
            raise LocalFileMissingError(str(local_path))

        gcs_path = self.object_path(object_name)
        try:
            blob = self.bucket.blob(gcs_path)
            blob.upload_from_filename(str(local_path))
        except FileNotFoundError as e:
            raise LocalFileMissingError(str(local_path)) from e
        except gcs_exceptions.GoogleAPICallError as e:
            self.logger.error(f"Error uploading {local_path}: {e}", exc_info=True)
            raise CloudStorageError(f"Upload failed: {e}", categorize_error(e)) from e

        self.logger.info(f"Uploaded {local_path.name} to gs://{self.bucket_name}/{gcs_path}")
        return blob.public_url

    def file_exists(self, object_name: str) -> bool:
        """Check if a recording exists in the bucket."""
        gcs_path = self.object_path(object_name)
        try:
            blob = self.bucket.blob(gcs_path)
            return bool(blob.exists())
        except Exception as e:
            self.logger.error(f"Error checking file existence {gcs_path}: {e}", exc_info=True)
            return False

    def delete(self, object_path: str) -> bool:
        """
        Delete an object from GCS.

        Args:
            object_path: Full path to the object in the bucket

        Returns:
            True if successful, False otherwise
        """
        try:
            blob = self.bucket.blob(object_path)
            if blob.exists():
                blob.delete()
                self.logger.info(f"Deleted gs://{self.bucket_name}/{object_path}")
                return True
            else:
                self.logger.warning(f"File not found for deletion: {object_path}")
                return False
        except Exception as e:
            self.logger.error(f"Error deleting {object_path}: {e}", exc_info=True)
            return False


def create_gcs_manager_from_config(
    config: Optional[Dict[str, Any]],
    logger_obj: Optional[logging.Logger] = None
) -> Optional[CloudStorageManager]:
    """
    Create CloudStorageManager from a configuration dictionary.

    The config dict should have:
    - 'bucket_name': GCS bucket name (required)
    - 'prefix': Object prefix for recordings (optional)
    - 'credentials': Dict with service account credentials (optional)
    - 'credentials_path': Path to credentials JSON file (optional)

    Args:
        config: Configuration dictionary
        logger_obj: Optional logger instance

    Returns:
        CloudStorageManager instance or None if config is missing or invalid
    """
    logger = logger_obj or logging.getLogger(__name__)

    if not config:
        logger.info("Cloud storage not configured")
        return None

    try:
        bucket_name = config.get('bucket_name')
        if not bucket_name:
            logger.info("GCS bucket name not configured")
            return None

        credentials_path = config.get('credentials_path')
        if credentials_path:
            credentials_path = Path(credentials_path)

        return CloudStorageManager(
            bucket_name=bucket_name,
            prefix=config.get('prefix', StorageConfig.CLOUD_PREFIX),
            credentials_dict=config.get('credentials'),
            credentials_path=credentials_path,
            logger_obj=logger
        )

    except Exception as e:
        logger.error(f"Error creating GCS manager from config: {e}", exc_info=True)
        return None
