"""Application-wide settings and configuration."""

import logging
import os
from pathlib import Path
from typing import Optional


class Settings:
    """Centralized application settings."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = PROJECT_ROOT / "data"
    LOGS_DIR = PROJECT_ROOT / "logs"

    # Recordings location (Android default call-recorder folder)
    DEFAULT_RECORDINGS_DIR = Path("/storage/emulated/0/Recordings")
    CONTACTS_FILE = DATA_DIR / "contacts.csv"

    # Reconciliation settings
    SYNC_INTERVAL_SECONDS = 30
    MIN_SYNC_INTERVAL_SECONDS = 5

    # Fixed-bitrate assumption used to estimate duration from file size
    BYTES_PER_SECOND = 8000

    AUDIO_EXTENSIONS = (".mp3", ".wav", ".m4a", ".aac", ".3gp", ".amr")

    # Grouping labels
    UNKNOWN_KEY = "unknown"
    UNKNOWN_CONTACT = "Unknown"
    UNNAMED_CONTACT = "Unknown Contact"

    # Environment overrides
    RECORDINGS_DIR_ENV = "RECSYNC_RECORDINGS_DIR"
    SYNC_INTERVAL_ENV = "RECSYNC_SYNC_INTERVAL"
    CONTACTS_FILE_ENV = "RECSYNC_CONTACTS_FILE"

    @classmethod
    def ensure_directories(cls) -> None:
        """Ensure all required directories exist."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_recordings_dir(cls, custom_path: Optional[Path] = None) -> Path:
        """Get the recordings directory, with optional override."""
        if custom_path:
            return Path(custom_path)
        env_value = os.environ.get(cls.RECORDINGS_DIR_ENV)
        return Path(env_value) if env_value else cls.DEFAULT_RECORDINGS_DIR

    @classmethod
    def get_contacts_file(cls, custom_path: Optional[Path] = None) -> Path:
        """Get the contacts export path, with optional override."""
        if custom_path:
            return Path(custom_path)
        env_value = os.environ.get(cls.CONTACTS_FILE_ENV)
        return Path(env_value) if env_value else cls.CONTACTS_FILE

    @classmethod
    def get_sync_interval(cls, custom_interval: Optional[float] = None) -> float:
        """
        Get the reconciliation interval in seconds.

        Values below MIN_SYNC_INTERVAL_SECONDS are raised to the minimum.
        """
        interval = custom_interval
        if interval is None:
            env_value = os.environ.get(cls.SYNC_INTERVAL_ENV)
            interval = float(env_value) if env_value else cls.SYNC_INTERVAL_SECONDS

        if interval <= 0:
            raise ValueError(f"Sync interval must be positive, got {interval}")

        if interval < cls.MIN_SYNC_INTERVAL_SECONDS:
            logging.getLogger(__name__).warning(
                f"Sync interval {interval}s below minimum, using {cls.MIN_SYNC_INTERVAL_SECONDS}s"
            )
            return float(cls.MIN_SYNC_INTERVAL_SECONDS)
        return float(interval)
