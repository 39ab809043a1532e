"""Service layer for grouping, filtering, reconciliation and playback."""

from .contact_directory import ContactDirectory, CsvContactSource
from .filter_service import estimate_duration_seconds, filter_groups
from .grouping_service import group_files_by_contact
from .playback_service import PlaybackCoordinator
from .reconciliation_service import ReconciliationService
from .sync_types import SyncSession, TickReport, UploadLedger, UploadOutcome

__all__ = [
    "ContactDirectory",
    "CsvContactSource",
    "estimate_duration_seconds",
    "filter_groups",
    "group_files_by_contact",
    "PlaybackCoordinator",
    "ReconciliationService",
    "SyncSession",
    "TickReport",
    "UploadLedger",
    "UploadOutcome",
]
