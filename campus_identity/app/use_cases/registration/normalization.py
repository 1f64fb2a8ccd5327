"""Canonical forms for registration input"""

import re
from typing import Optional

from campus_identity.domain.entities import Gender, MaritalStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sentence_case(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        return ""
    return value[0].upper() + value[1:].lower()


def upper(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def normalize_gender(value: Optional[str]) -> Gender:
    try:
        return Gender(upper(value))
    except ValueError:
        return Gender.OTHER


def normalize_marital_status(value: Optional[str]) -> MaritalStatus:
    try:
        return MaritalStatus(upper(value))
    except ValueError:
        return MaritalStatus.SINGLE


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None
