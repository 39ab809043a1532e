"""Recordings layer: models, storage adapters and sync services."""

from .models import ContactGroup, FileRecord, FileSource, FilterSpec, PlaybackState
from .services.reconciliation_service import ReconciliationService
from .storage.cloud_storage import CloudStorageManager
from .storage.local_storage import LocalFileStore

__all__ = [
    "ContactGroup",
    "FileRecord",
    "FileSource",
    "FilterSpec",
    "PlaybackState",
    "ReconciliationService",
    "CloudStorageManager",
    "LocalFileStore",
]
