"""Extraction of the code body from a raw backend answer."""

from __future__ import annotations

CODE_DELIMITER = "---"

# The body starts one character past the delimiter (its trailing newline).
_BODY_OFFSET = 4


def extract_code(raw_response: str) -> str:
    """Return the code segment that follows the first ``---`` delimiter.

    When the delimiter is missing, ``str.find`` returns ``-1`` and the slice
    starts at index 3 of the original text. Callers rely on this fallback, so
    it is kept as is: ``extract_code("no delimiter here") == "delimiter here"``.
    """
    start = raw_response.find(CODE_DELIMITER) + _BODY_OFFSET
    return raw_response[start:].strip()
