"""Shared validation utilities"""

import re
from typing import Optional

from ..models import PAYMENT_METHODS

GENERAL_PHONE_PATTERN = re.compile(r"^(\+[1-9]\d{0,3})?\d{9,15}$")
RWANDA_INTERNATIONAL_PATTERN = re.compile(r"^\+2507\d{8}$")
RWANDA_LOCAL_PATTERN = re.compile(r"^07\d{8}$")


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a phone number.

    Numbers are accepted in international form (+<country><digits>) or as
    9-15 local digits. Rwandan numbers get the stricter check: +2507XXXXXXXX
    or 07XXXXXXXX.

    Returns:
        The phone number with spaces removed

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    cleaned = re.sub(r"[\s-]", "", phone)

    if cleaned.startswith("+250"):
        if not RWANDA_INTERNATIONAL_PATTERN.match(cleaned):
            raise ValueError("Invalid Rwanda phone number. Use +2507XXXXXXXX")
        return cleaned

    if cleaned.startswith("07"):
        if not RWANDA_LOCAL_PATTERN.match(cleaned):
            raise ValueError("Invalid Rwanda phone number. Use 07XXXXXXXX")
        return cleaned

    if not GENERAL_PHONE_PATTERN.match(cleaned):
        raise ValueError("Invalid phone number format")

    return cleaned


def to_international_phone(phone: str, country_code: str = "250") -> str:
    """Convert a local 0XXXXXXXXX number to +<country_code>XXXXXXXXX for SMS/WhatsApp APIs"""
    cleaned = re.sub(r"[\s-]", "", phone)
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith(country_code):
        return f"+{cleaned}"
    if cleaned.startswith("0"):
        return f"+{country_code}{cleaned[1:]}"
    return f"+{country_code}{cleaned}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def normalize_payment_method(method: Optional[str]) -> str:
    """Upper-case a payment method, unknown values fall back to CASH"""
    normalized = (method or "").strip().upper()
    return normalized if normalized in PAYMENT_METHODS else "CASH"
