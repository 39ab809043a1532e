"""Group recordings into per-contact collections."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Optional

from config.settings import Settings
from recordings.models import ContactGroup, FileRecord
from recordings.services.filename_parser import parse_filename

Resolver = Callable[[str], Optional[str]]

# A hint made only of dialling characters is the number itself, not a label
_NUMBER_ONLY = re.compile(r"^[\d\s+\-]+$")


def _is_meaningful_hint(hint: Optional[str]) -> bool:
    return bool(hint) and not _NUMBER_ONLY.match(hint)


def resolve_contact_name(
    phone: Optional[str],
    name_hint: Optional[str],
    resolver: Optional[Resolver] = None,
) -> str:
    """
    Pick the display name for a recording.

    Priority: filename hint, directory lookup, raw phone, "Unknown".
    """
    if _is_meaningful_hint(name_hint):
        return name_hint
    if phone:
        if resolver is not None:
            resolved = resolver(phone)
            if resolved:
                return resolved
        return phone
    return Settings.UNKNOWN_CONTACT


def group_files_by_contact(
    files: Iterable[FileRecord],
    resolver: Optional[Resolver] = None,
) -> List[ContactGroup]:
    """
    Partition files into contact groups keyed by normalized phone number.

    The first file seen for a key fixes the group's name and phone; later
    files with the same key only append, even when their name hint differs.
    Groups are returned sorted by contact name (case-sensitive, stable).
    """
    grouped: Dict[str, ContactGroup] = {}

    for file in files:
        parsed = parse_filename(file.name)
        key = parsed.phone or Settings.UNKNOWN_KEY

        group = grouped.get(key)
        if group is None:
            group = ContactGroup(
                contact_name=resolve_contact_name(parsed.phone, parsed.name_hint, resolver),
                phone=parsed.phone,
            )
            grouped[key] = group

        group.files.append(file)

    return sorted(grouped.values(), key=lambda group: group.contact_name)
