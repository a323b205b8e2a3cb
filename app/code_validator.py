"""Participant code validation.

A code is 5 decimal digits followed by one uppercase letter. The letter is a
checksum: the sum of the digits modulo 26, counted from 'A'.

    >>> checksum_letter("12345")
    'P'
    >>> is_valid_code("12345P")
    True
"""

import re
from typing import Any

CODE_PATTERN = re.compile(r"^\d{5}[A-Z]$")
CODE_LENGTH = 6

INVALID_CODE_MESSAGE = (
    "Invalid code. It must be 5 digits followed by 1 uppercase letter "
    "derived from a checksum (e.g., 12345P)."
)


def checksum_letter(digits: str) -> str:
    """Return the checksum letter for a string of decimal digits."""
    remainder = sum(int(d) for d in digits) % 26
    return chr(ord("A") + remainder)


def is_valid_code(code: Any) -> bool:
    """Return True iff ``code`` has the expected shape and checksum letter.

    Never raises: malformed input is simply reported as invalid.
    """
    if not isinstance(code, str):
        return False
    # re's $ also matches before a trailing newline
    if len(code) != CODE_LENGTH or not CODE_PATTERN.match(code):
        return False
    # \d accepts non-ASCII digits too
    if not code[:5].isascii():
        return False

    return code[5] == checksum_letter(code[:5])


def normalize_code(raw: str) -> str:
    """Trim and uppercase user input the way the form field does."""
    return (raw or "").strip().upper()
