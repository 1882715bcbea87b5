from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# US: 12345 or 12345-6789. Canada: A1A 1A1, any letter case.
_US_ZIP = re.compile(r"\d{5}(-\d{4})?", re.ASCII)
_CA_POSTAL = re.compile(r"[A-Z]\d[A-Z] \d[A-Z]\d", re.ASCII | re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9 \-]")

BLANK_MESSAGE = "Zip code cannot be blank"
INVALID_FORMAT_MESSAGE = "Invalid zip code format"


class InvalidZipCode(ValueError):
    """Raised when a zip code is blank or malformed."""


def _is_blank(zip_code: str | None) -> bool:
    return zip_code is None or not zip_code.strip()


def is_valid_zip_code(zip_code: str | None) -> bool:
    if _is_blank(zip_code):
        return False
    return bool(_US_ZIP.fullmatch(zip_code) or _CA_POSTAL.fullmatch(zip_code))


def normalize_zip_code(zip_code: str) -> str:
    return zip_code.upper()


def sanitize_zip_code(raw: str) -> str:
    sanitized = _UNSAFE_CHARS.sub("", raw.strip())
    if sanitized != raw:
        logger.warning("Input sanitization: zip_code=%r -> %r", raw, sanitized)
    return sanitized


def validate_zip_code(zip_code: str | None) -> str:
    """Return the canonical form of ``zip_code`` or raise :class:`InvalidZipCode`."""
    if _is_blank(zip_code):
        raise InvalidZipCode(BLANK_MESSAGE)
    if not is_valid_zip_code(zip_code):
        raise InvalidZipCode(INVALID_FORMAT_MESSAGE)
    return normalize_zip_code(zip_code)
