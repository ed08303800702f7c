"""Shared validation utilities"""

import html
import re
from typing import Optional

US_STATE_CODES = {
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC", "PR", "GU", "VI", "AS", "MP",
}

MAX_NOTE_LENGTH = 1000


def validate_us_zip(zipcode: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a US ZIP code.

    Args:
        zipcode: ZIP or ZIP+4 in any common format

    Returns:
        "12345" or "12345-6789"

    Raises:
        ValueError: If the ZIP code is malformed
    """
    if not zipcode:
        return zipcode

    digits = re.sub(r"\D", "", zipcode)

    if len(digits) == 5:
        return digits
    if len(digits) == 9:
        return f"{digits[:5]}-{digits[5:]}"

    raise ValueError("ZIP code must be 5 digits (or ZIP+4)")


def validate_state_code(state: Optional[str]) -> Optional[str]:
    """Normalize a two-letter US state/territory code"""
    if not state:
        return state

    code = state.strip().upper()
    if code not in US_STATE_CODES:
        raise ValueError(f"Unknown state code: {state}")
    return code


def validate_name(value: Optional[str]) -> Optional[str]:
    """Strip a person name and reject blank values"""
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name cannot be blank")
    if len(value) > 100:
        raise ValueError("Name must be at most 100 characters")
    return value


def sanitize_note(value: Optional[str]) -> Optional[str]:
    """
    Clean a free-text note that ends up printed on a card.
    Strips whitespace, enforces the length limit and escapes HTML special characters.
    Returns None for empty notes.
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if len(value) > MAX_NOTE_LENGTH:
        raise ValueError(f"Note exceeds maximum length of {MAX_NOTE_LENGTH} characters")
    return html.escape(value, quote=True)
