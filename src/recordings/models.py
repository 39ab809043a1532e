"""Dataclasses describing recordings, contacts and playback state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class FileSource(str, Enum):
    """Where a file record was listed from."""

    LOCAL = "local"
    CLOUD = "cloud"


@dataclass(frozen=True)
class FileRecord:
    """
    One physical or cloud-stored audio file.

    Local records carry ``modified_at`` (file mtime); cloud records carry
    ``created_at`` (object creation time). The two are kept apart because
    they can disagree for the same logical recording.
    """

    name: str
    source: FileSource
    size: int = 0
    path: Optional[str] = None
    url: Optional[str] = None
    modified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def locator(self) -> Optional[str]:
        """Opaque locator handed to the audio player."""
        if self.source == FileSource.CLOUD:
            return self.url or self.path
        return self.path or self.url

    @property
    def timestamp(self) -> Optional[datetime]:
        """Date used by month/day filters for this record's source."""
        if self.source == FileSource.CLOUD:
            return self.created_at
        return self.modified_at


@dataclass(frozen=True)
class ParsedFilename:
    """Caller identity recovered from a recording file name."""

    phone: Optional[str] = None
    name_hint: Optional[str] = None


@dataclass(frozen=True)
class Contact:
    """A device contact with its raw phone numbers."""

    display_name: Optional[str] = None
    given_name: Optional[str] = None
    phone_numbers: tuple[str, ...] = ()

    @property
    def label(self) -> Optional[str]:
        return self.display_name or self.given_name or None


@dataclass
class ContactGroup:
    """Recordings attributed to one caller identity."""

    contact_name: str
    phone: Optional[str]
    files: List[FileRecord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.phone or "unknown"


@dataclass(frozen=True)
class FilterSpec:
    """
    Filter criteria applied as a conjunction; unset fields impose no constraint.

    Args:
        contact_name: Exact match against ContactGroup.contact_name
        month: Month of the record date (1-12)
        day: Day of month of the record date (1-31)
        min_duration_seconds: Minimum estimated duration in seconds
    """

    contact_name: Optional[str] = None
    month: Optional[int] = None
    day: Optional[int] = None
    min_duration_seconds: Optional[int] = None

    def __post_init__(self) -> None:
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if self.day is not None and not 1 <= self.day <= 31:
            raise ValueError(f"day must be between 1 and 31, got {self.day}")
        if self.min_duration_seconds is not None and self.min_duration_seconds < 0:
            raise ValueError(
                f"min_duration_seconds must be non-negative, got {self.min_duration_seconds}"
            )

    def is_empty(self) -> bool:
        return (
            not self.contact_name
            and self.month is None
            and self.day is None
            and self.min_duration_seconds is None
        )


@dataclass
class PlaybackState:
    """Current track and transport state of the player."""

    current_track: Optional[FileRecord] = None
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0

    def reset(self, track: Optional[FileRecord] = None) -> None:
        self.current_track = track
        self.is_playing = False
        self.current_time = 0.0
        self.duration = 0.0
