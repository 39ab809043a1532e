"""Caller identity extraction from call-recording file names.

Recorders name files like ``Sonu Pantry(00919971696793)_20250821182137.mp3``
or ``00911244999799(00911244999799)_20250821152845.mp3``: an optional caller
label, the dialled number in parentheses, then a timestamp.
"""

from __future__ import annotations

import re
from typing import Optional

from recordings.models import ParsedFilename

PHONE_DIGITS = 10

_PARENTHESIZED_PHONE = re.compile(r"\((\d{10,})\)")
# Bare caller number prefix, e.g. "1234567890_b.mp3"
_LEADING_PHONE = re.compile(r"^\+?(\d{10,})_")
_NAME_HINT = re.compile(r"^([^(]+)\(")
_NON_DIGITS = re.compile(r"\D")


def normalize_phone(number: Optional[str]) -> Optional[str]:
    """Strip non-digits and keep the last 10 digits; None when no digits remain."""
    if not number:
        return None
    digits = _NON_DIGITS.sub("", str(number))
    if not digits:
        return None
    return digits[-PHONE_DIGITS:]


def extract_phone(filename: str) -> Optional[str]:
    match = _PARENTHESIZED_PHONE.search(filename)
    if match is None:
        match = _LEADING_PHONE.match(filename)
    return normalize_phone(match.group(1)) if match else None


def extract_name_hint(filename: str) -> Optional[str]:
    match = _NAME_HINT.match(filename)
    if match is None:
        return None
    hint = match.group(1).strip()
    if not hint or hint == filename:
        return None
    return hint


def parse_filename(filename: Optional[str]) -> ParsedFilename:
    """
    Recover phone number and name hint from a recording file name.

    Never raises: anything unparsable yields an empty ParsedFilename.
    """
    if not isinstance(filename, str) or not filename:
        return ParsedFilename()
    return ParsedFilename(phone=extract_phone(filename), name_hint=extract_name_hint(filename))
