"""Shared validation utilities"""

import re
from datetime import datetime, time
from typing import Optional

LICENSE_PLATE_PATTERN = re.compile(r"^[0-9]{2}\s?[A-Z]{1,3}\s?[0-9]{2,4}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def normalize_license_plate(plate: str) -> str:
    """Comparison form of a plate: no whitespace, upper case"""
    return re.sub(r"\s+", "", plate or "").upper()


def validate_license_plate(plate: Optional[str]) -> str:
    """
    Validate a licence plate such as ``34 ABC 123``.

    Returns:
        The plate upper-cased with surrounding whitespace removed

    Raises:
        ValueError: If the plate is missing or malformed
    """
    if not plate or not plate.strip():
        raise ValueError("License plate is required")

    plate = plate.strip().upper()
    if not 5 <= len(plate) <= 15:
        raise ValueError("License plate must be between 5 and 15 characters")
    if not LICENSE_PLATE_PATTERN.match(plate):
        raise ValueError("Invalid license plate format (e.g. 34 ABC 123)")
    return plate


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a phone number, keeping the caller's formatting.

    Raises:
        ValueError: If the number has stray characters or a wrong digit count
    """
    if not phone:
        return phone

    phone = phone.strip()
    if not re.match(r"^\+?[0-9\s\-()]+$", phone):
        raise ValueError("Phone number may only contain digits, spaces, dashes and parentheses")

    digits = re.sub(r"\D", "", phone)
    if not 10 <= len(digits) <= 15:
        raise ValueError("Phone number must have between 10 and 15 digits")
    return phone


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def parse_slot_time(value: str) -> time:
    """Parse an ``HH:MM`` time of day"""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError as e:
        raise ValueError(f"Invalid time format '{value}', expected HH:MM") from e
