"""
Phone number normalization.

Every phone number is reduced to one canonical string before it touches the
database: ``"+" + country code + local number``. Send and verify both go
through ``normalize_phone`` so the two never disagree about a record key.
"""

from __future__ import annotations

import re

from app.config import PHONE_COUNTRY_CODE, PHONE_LOCAL_LENGTH
from app.errors import InvalidPhoneFormat

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str) -> str:
    """
    Return the canonical form of *raw* or raise InvalidPhoneFormat.

    Accepted shapes (after stripping everything that is not a digit):
      • local number            99119911      → +97699119911
      • country code, no plus   97699119911   → +97699119911
      • already canonical       +97699119911  → +97699119911
    """
    digits = _NON_DIGITS.sub("", raw or "")

    if len(digits) == PHONE_LOCAL_LENGTH:
        return f"+{PHONE_COUNTRY_CODE}{digits}"

    if (
        len(digits) == len(PHONE_COUNTRY_CODE) + PHONE_LOCAL_LENGTH
        and digits.startswith(PHONE_COUNTRY_CODE)
    ):
        return f"+{digits}"

    raise InvalidPhoneFormat()


def mask_phone(phone: str, visible_digits: int = 2) -> str:
    """Hide all but the last few digits, for log lines."""
    if not phone:
        return ""
    if len(phone) <= visible_digits:
        return phone
    return "*" * (len(phone) - visible_digits) + phone[-visible_digits:]
