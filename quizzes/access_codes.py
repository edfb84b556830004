"""
Quiz Access Codes
=================

Participants join a quiz by typing a short code made of uppercase letters
and digits. Codes are case-insensitive on input and stored uppercase.
"""

import secrets
import string
from typing import Callable

from loguru import logger

ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_LENGTH = 6
MAX_GENERATION_ATTEMPTS = 50


class AccessCodeError(RuntimeError):
    pass


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


def generate_unique_access_code(exists: Callable[[str], bool],
                                max_attempts: int = MAX_GENERATION_ATTEMPTS,
                                length: int = ACCESS_CODE_LENGTH) -> str:
    """
    Draws codes until ``exists`` reports one as unused. Raises
    AccessCodeError after ``max_attempts`` collisions.
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_access_code(length)
        if not exists(code):
            return code
        logger.debug(f"Access code collision on try {attempt}")

    raise AccessCodeError(f"Could not find an unused access code after {max_attempts} tries")


def normalize_access_code(code: str, length: int = ACCESS_CODE_LENGTH) -> str:
    """Strips and uppercases a typed code, rejecting anything malformed."""
    normalized = (code or "").strip().upper()
    if len(normalized) != length or any(ch not in ACCESS_CODE_ALPHABET for ch in normalized):
        raise AccessCodeError(f"Access code must be {length} letters or digits")
    return normalized
