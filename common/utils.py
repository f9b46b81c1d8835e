"""
Common utilities for Kiosky API.
"""
import re

DOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


def normalize_key(value):
    """Trim and lower-case a user supplied identifier (domain, slug, email)."""
    if value is None:
        return None
    return str(value).strip().lower()


def is_valid_domain(value):
    """Letters, digits and inner hyphens only, checked after normalization."""
    return bool(value) and DOMAIN_PATTERN.match(value) is not None
