"""
Text utilities for slugs, keywords and matching
"""
import re
from typing import Iterable, Optional

SLUG_MAX_LENGTH = 100


def create_slug(title: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Derive a URL slug from a title.

    >>> create_slug("Hello, World! 2024")
    'hello-world-2024'
    """
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip()[:max_length]


def contains_any(value: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test against several keywords"""
    lowered = value.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


def first_matching(values: Iterable[str], keywords: Iterable[str]) -> Optional[str]:
    """First value containing any of the keywords"""
    keywords = list(keywords)
    for value in values:
        if contains_any(value, keywords):
            return value
    return None
