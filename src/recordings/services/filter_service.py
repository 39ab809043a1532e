"""Multi-criterion filtering over grouped recordings."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from config.settings import Settings
from recordings.models import ContactGroup, FileRecord, FilterSpec
from utils.formatting import coerce_timestamp


def estimate_duration_seconds(size_bytes: Optional[int], bytes_per_second: int = Settings.BYTES_PER_SECOND) -> int:
    """
    Approximate recording duration from file size.

    Assumes a fixed 64 kbit/s bitrate (8000 bytes per second); this is not
    a measured audio duration.
    """
    if not size_bytes or size_bytes < 0:
        return 0
    return int(size_bytes) // bytes_per_second


def _record_date(record: FileRecord):
    return coerce_timestamp(record.timestamp)


def _matches_month(record: FileRecord, month: int) -> bool:
    record_date = _record_date(record)
    return record_date is not None and record_date.month == month


def _matches_day(record: FileRecord, day: int) -> bool:
    record_date = _record_date(record)
    return record_date is not None and record_date.day == day


def _matches_min_duration(record: FileRecord, min_duration_seconds: int) -> bool:
    return estimate_duration_seconds(record.size) >= min_duration_seconds


def _file_predicates(spec: FilterSpec) -> List[Callable[[FileRecord], bool]]:
    predicates: List[Callable[[FileRecord], bool]] = []
    if spec.month is not None:
        predicates.append(lambda record: _matches_month(record, spec.month))
    if spec.day is not None:
        predicates.append(lambda record: _matches_day(record, spec.day))
    if spec.min_duration_seconds is not None:
        predicates.append(lambda record: _matches_min_duration(record, spec.min_duration_seconds))
    return predicates


def filter_groups(groups: Sequence[ContactGroup], spec: Optional[FilterSpec] = None) -> List[ContactGroup]:
    """
    Apply every set criterion of ``spec`` to ``groups``.

    Groups left without files are dropped. Input groups are not mutated and
    input order is preserved.
    """
    if spec is None or spec.is_empty():
        return [
            ContactGroup(group.contact_name, group.phone, list(group.files))
            for group in groups
            if group.files
        ]

    predicates = _file_predicates(spec)
    filtered: List[ContactGroup] = []

    for group in groups:
        if spec.contact_name and group.contact_name != spec.contact_name:
            continue

        files = [record for record in group.files if all(check(record) for check in predicates)]
        if files:
            filtered.append(ContactGroup(group.contact_name, group.phone, files))

    return filtered
