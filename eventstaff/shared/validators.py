"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

E164_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z0-9]{10}[0-9A-Z]Z[0-9A-Z]$")


def validate_e164_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate an international phone number and normalize it to E.164.

    Args:
        phone: Phone number, optionally with a leading "+" and separators

    Returns:
        Phone number in E.164 format (+XXXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    compact = re.sub(r"[\s\-()]", "", phone)
    if not E164_PATTERN.match(compact):
        raise ValueError("Please enter a valid phone number with country code")

    return compact if compact.startswith("+") else f"+{compact}"


def validate_indian_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a 10-digit Indian mobile number and normalize it to E.164 (+91XXXXXXXXXX).

    Raises:
        ValueError: If phone number is not 10 digits
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Accept numbers already carrying the country code
    if digits.startswith("91") and len(digits) == 12:
        digits = digits[2:]

    if len(digits) != 10:
        raise ValueError("Please enter a valid 10-digit phone number")

    return f"+91{digits}"


def validate_gstin(gstin: Optional[str]) -> Optional[str]:
    """Validate a 15-character GSTIN, returning it upper-cased"""
    if not gstin:
        return gstin

    value = gstin.strip().upper()
    if not GSTIN_PATTERN.match(value):
        raise ValueError("Invalid GST number")
    return value


def validate_iso_date(value: str) -> str:
    """Validate a YYYY-MM-DD date string"""
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError) as e:
        raise ValueError("Date must be in YYYY-MM-DD format") from e
