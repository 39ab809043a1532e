"""Device contact directory with phone-number lookup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import pandas as pd

from config.settings import Settings
from recordings.models import Contact
from recordings.services.error_handling import ContactPermissionError
from recordings.services.filename_parser import normalize_phone


class ContactSource(Protocol):
    """Anything that can bulk-load the device contacts."""

    def load_all(self) -> List[Contact]:
        ...


class CsvContactSource:
    """
    Contact source backed by a CSV contacts export.

    Expected columns: ``display_name``, ``given_name``, ``phone_numbers``
    (several numbers separated by ``;``). A missing or unreadable export is
    reported as ContactPermissionError, the same way a denied permission is.
    """

    PHONE_SEPARATOR = ";"

    def __init__(self, path: Path, logger_obj: Optional[logging.Logger] = None):
        self.path = Path(path)
        self.logger = logger_obj or logging.getLogger(__name__)

    def load_all(self) -> List[Contact]:
        if not self.path.exists():
            raise ContactPermissionError(f"Contacts export not found: {self.path}")

        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as exc:
            raise ContactPermissionError(f"Cannot read contacts export {self.path}: {exc}") from exc

        if df.empty:
            return []

        for column in ("display_name", "given_name", "phone_numbers"):
            if column not in df.columns:
                df[column] = ""

        contacts = []
        for row in df.itertuples(index=False):
            numbers = tuple(
                number.strip()
                for number in str(row.phone_numbers).split(self.PHONE_SEPARATOR)
                if number.strip()
            )
            contacts.append(
                Contact(
                    display_name=row.display_name.strip() or None,
                    given_name=row.given_name.strip() or None,
                    phone_numbers=numbers,
                )
            )
        return contacts


class ContactDirectory:
    """
    Phone-number to contact-name mapping, loaded once per session.

    When the source is unavailable the directory stays empty and every
    lookup returns None.
    """

    def __init__(self, source: ContactSource, logger_obj: Optional[logging.Logger] = None):
        self.source = source
        self.logger = logger_obj or logging.getLogger(__name__)
        self.contacts: List[Contact] = []
        self._contact_map: Dict[str, str] = {}
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self, force: bool = False) -> bool:
        """
        Load contacts from the source and rebuild the phone mapping.

        Returns:
            True if contacts were loaded, False on permission denial or error
        """
        if self._loaded and not force:
            return True

        try:
            contacts = self.source.load_all()
        except ContactPermissionError as exc:
            self.logger.warning(f"Contact permission denied: {exc}")
            self._reset()
            return False
        except Exception as exc:
            self.logger.error(f"Error loading contacts: {exc}", exc_info=True)
            self._reset()
            return False

        contact_map: Dict[str, str] = {}
        for contact in contacts:
            label = contact.label or Settings.UNNAMED_CONTACT
            for number in contact.phone_numbers:
                clean_number = normalize_phone(number)
                if clean_number:
                    contact_map[clean_number] = label

        self.contacts = list(contacts)
        self._contact_map = contact_map
        self._loaded = True
        self.logger.info(f"Loaded {len(self.contacts)} contacts ({len(contact_map)} numbers)")
        return True

    def _reset(self) -> None:
        self.contacts = []
        self._contact_map = {}
        # Denial still counts as loaded for this session
        self._loaded = True

    def resolve(self, phone: Optional[str]) -> Optional[str]:
        clean_number = normalize_phone(phone)
        if clean_number is None:
            return None
        return self._contact_map.get(clean_number)

    def contact_names(self) -> List[str]:
        """Unique contact names in directory order, for the contact filter."""
        names: List[str] = []
        seen = set()
        for contact in self.contacts:
            label = contact.label
            if label and label not in seen:
                seen.add(label)
                names.append(label)
        return names

    def __len__(self) -> int:
        return len(self._contact_map)
