"""
Shared field validators for the create schemas
"""
import re
from typing import Optional
from urllib.parse import urlparse

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\+\-\(\)]+$")


def check_url(value: Optional[str], label: str = "URL") -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid {label}")
    return value


def check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value

