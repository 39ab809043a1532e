"""Dependency injection container for the application."""

from pathlib import Path
from typing import Optional
import logging

from config.settings import Settings
from config.storage import load_cloud_config
from recordings.services.contact_directory import ContactDirectory, CsvContactSource
from recordings.services.reconciliation_service import ReconciliationService
from recordings.services.sync_types import SyncSession
from recordings.storage.cloud_storage import CloudStorageManager, create_gcs_manager_from_config
from recordings.storage.local_storage import LocalFileStore
from utils.logger_setup import setup_logging


class DependencyContainer:
    """Container for managing application dependencies for one session."""

    def __init__(
        self,
        recordings_dir: Optional[Path] = None,
        contacts_file: Optional[Path] = None,
        interval_seconds: Optional[float] = None,
        logger_name: str = "recsync",
        log_level: int = logging.INFO,
    ):
        self.recordings_dir = Settings.get_recordings_dir(recordings_dir)
        self.contacts_file = Settings.get_contacts_file(contacts_file)
        self.interval_seconds = interval_seconds
        self.logger = setup_logging(logger_name, log_level=log_level)

        self._cloud_store: Optional[CloudStorageManager] = None
        self._cloud_checked = False
        self._local_store: Optional[LocalFileStore] = None
        self._session: Optional[SyncSession] = None
        self._reconciliation_service: Optional[ReconciliationService] = None

    @property
    def local_store(self) -> LocalFileStore:
        if self._local_store is None:
            self._local_store = LocalFileStore(self.logger)
        return self._local_store

    @property
    def cloud_store(self) -> Optional[CloudStorageManager]:
        """Get or create the cloud store; None when no bucket is configured."""
        if not self._cloud_checked:
            self._cloud_checked = True
            self._cloud_store = create_gcs_manager_from_config(
                load_cloud_config(logger_obj=self.logger), self.logger
            )
        return self._cloud_store

    @property
    def cloud_enabled(self) -> bool:
        return self.cloud_store is not None

    @property
    def session(self) -> SyncSession:
        """Get or create the session state, loading contacts once."""
        if self._session is None:
            contacts = ContactDirectory(CsvContactSource(self.contacts_file, self.logger), self.logger)
            contacts.load()
            self._session = SyncSession(contacts=contacts)
        return self._session

    @property
    def reconciliation_service(self) -> Optional[ReconciliationService]:
        if self._reconciliation_service is None and self.cloud_enabled:
            self._reconciliation_service = ReconciliationService(
                local_store=self.local_store,
                cloud_store=self.cloud_store,
                session=self.session,
                recordings_dir=self.recordings_dir,
                interval_seconds=self.interval_seconds,
                logger_obj=self.logger,
            )
        return self._reconciliation_service
