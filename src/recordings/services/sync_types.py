"""Typed contracts for local/cloud reconciliation flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from recordings.models import FileRecord
from recordings.services.contact_directory import ContactDirectory
from recordings.services.error_handling import ErrorCategory


class UploadStatus(str, Enum):
    """Outcome of one per-file upload step."""

    UPLOADED = "uploaded"
    ALREADY_UPLOADED = "already_uploaded"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"


class TickStatus(str, Enum):
    """Outcome of a reconciliation tick or refresh."""

    COMPLETED = "completed"
    SKIPPED_BUSY = "skipped_busy"
    FAILED = "failed"


class UploadLedger:
    """Set of object names known to exist in the cloud store."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = set(names)

    def rebuild(self, names: Iterable[str]) -> None:
        self._names = set(names)

    def add(self, name: str) -> None:
        self._names.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def names(self) -> frozenset[str]:
        return frozenset(self._names)


@dataclass
class SyncSession:
    """
    Session-scoped state shared by reconciliation and grouping.

    Only the reconciliation engine writes the ledger and file lists; only the
    contact directory writes its own mapping.
    """

    contacts: ContactDirectory
    ledger: UploadLedger = field(default_factory=UploadLedger)
    local_files: List[FileRecord] = field(default_factory=list)
    cloud_files: List[FileRecord] = field(default_factory=list)
    last_synced_at: Optional[datetime] = None

    def is_uploaded(self, name: str) -> bool:
        return name in self.ledger


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading (or skipping) one local file."""

    name: str
    status: UploadStatus
    url: Optional[str] = None
    category: Optional[ErrorCategory] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (UploadStatus.UPLOADED, UploadStatus.ALREADY_UPLOADED)


@dataclass(frozen=True)
class SyncSnapshot:
    """Refreshed listings published to grouping consumers."""

    local_files: tuple[FileRecord, ...]
    cloud_files: tuple[FileRecord, ...]
    uploaded_names: frozenset[str]


@dataclass
class TickReport:
    """Result report for a reconciliation tick or manual refresh."""

    status: TickStatus
    started_at: datetime
    finished_at: Optional[datetime] = None
    local_root_missing: bool = False
    local_count: int = 0
    cloud_count: int = 0
    outcomes: List[UploadOutcome] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def uploaded(self) -> List[str]:
        return [o.name for o in self.outcomes if o.status == UploadStatus.UPLOADED]

    @property
    def failures(self) -> List[UploadOutcome]:
        return [o for o in self.outcomes if o.status == UploadStatus.FAILED]

    @property
    def success(self) -> bool:
        return self.status == TickStatus.COMPLETED and not self.failures
