"""
Text utilities for comparing spreadsheet headers.

Used by the header mapper and the upload parser.
"""

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(header: str) -> str:
    """
    Normalize a header for similarity comparison.

    Lowercases, then drops every character that is not an ASCII letter or digit:
    - "First Name" → "firstname"
    - "first_name" → "firstname"
    - "Also Known As (AKA)" → "alsoknownasaka"
    - "Prénom" → "prnom"

    Args:
        header: Header text as it appears in the upload

    Returns:
        Normalized string, possibly empty
    """
    return _NON_ALNUM.sub("", header.lower())


def clean_cell(value: Optional[str]) -> str:
    """
    Clean a cell value read from an upload.

    Strips surrounding whitespace and returns "" for None. Length limits are
    checked on the record, so nothing is cut here.
    """
    if value is None:
        return ""

    return str(value).strip()
