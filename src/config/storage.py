"""Cloud storage configuration for the recordings bucket."""

from __future__ import annotations

import base64
import json
import logging
import os
from typing import Any, Mapping, Optional


class StorageConfig:
    """Cloud storage configuration and settings."""

    # Object prefix holding the mirrored recordings
    CLOUD_PREFIX = "recordings"

    # Environment variables
    BUCKET_ENV = "RECSYNC_GCS_BUCKET"
    PREFIX_ENV = "RECSYNC_GCS_PREFIX"
    CREDENTIALS_BASE64_ENV = "RECSYNC_GCS_CREDENTIALS_BASE64"
    CREDENTIALS_JSON_ENV = "RECSYNC_GCS_CREDENTIALS_JSON"
    CREDENTIALS_PATH_ENV = "GOOGLE_APPLICATION_CREDENTIALS"

    REQUIRED_CREDENTIAL_FIELDS = {"type", "project_id", "private_key", "client_email"}

    @classmethod
    def object_path(cls, object_name: str, prefix: Optional[str] = None) -> str:
        """Get the full object path for a recording name."""
        prefix = cls.CLOUD_PREFIX if prefix is None else prefix
        prefix = prefix.strip("/")
        return f"{prefix}/{object_name}" if prefix else object_name


def load_cloud_config(
    environ: Optional[Mapping[str, str]] = None,
    logger_obj: Optional[logging.Logger] = None,
) -> dict[str, Any] | None:
    """
    Build the generic cloud config dict from environment variables.

    Returns None when no bucket is configured, which disables cloud sync.
    """
    env = os.environ if environ is None else environ
    logger = logger_obj or logging.getLogger(__name__)

    bucket_name = env.get(StorageConfig.BUCKET_ENV)
    if not bucket_name:
        logger.info("GCS bucket name not configured")
        return None

    config: dict[str, Any] = {
        "bucket_name": bucket_name,
        "prefix": env.get(StorageConfig.PREFIX_ENV, StorageConfig.CLOUD_PREFIX),
    }

    if env.get(StorageConfig.CREDENTIALS_BASE64_ENV):
        try:
            decoded = base64.b64decode(env[StorageConfig.CREDENTIALS_BASE64_ENV]).decode("utf-8")
            config["credentials"] = json.loads(decoded)
            logger.info("Loaded GCP credentials from base64 environment variable")
        except Exception as exc:
            logger.error(f"Failed to parse base64 credentials: {exc}")
            return None
    elif env.get(StorageConfig.CREDENTIALS_JSON_ENV):
        try:
            config["credentials"] = json.loads(env[StorageConfig.CREDENTIALS_JSON_ENV])
            logger.info("Loaded GCP credentials from JSON environment variable")
        except json.JSONDecodeError as exc:
            logger.error(f"Failed to parse credentials JSON: {exc}")
            return None
    elif env.get(StorageConfig.CREDENTIALS_PATH_ENV):
        config["credentials_path"] = env[StorageConfig.CREDENTIALS_PATH_ENV]
    else:
        logger.info("No explicit GCP credentials, using application default credentials")

    return config
