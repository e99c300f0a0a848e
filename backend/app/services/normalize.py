"""
Normalization of incoming student data.

Both stores call normalize_student_data() before touching their
collection, so validation outcomes are identical whichever backend is
active. The semester has gone by three names over time; this is the only
place that knows about them.
"""

from typing import Any, Mapping

from app.errors import ValidationError

# Checked in order; the first non-blank value wins
SEMESTER_KEYS = ("sem", "semester", "class")

REQUIRED_FIELDS_MESSAGE = "Name, USN, and sem are required"

# Width of the students.usn column
USN_MAX_LENGTH = 64
USN_TOO_LONG_MESSAGE = f"USN must be at most {USN_MAX_LENGTH} characters"


def clean_text(value: Any) -> str:
    """
    Turn a raw field value into trimmed text.

    None becomes an empty string; numbers (a semester is often sent as 3)
    are converted with str().
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def resolve_semester(data: Mapping[str, Any]) -> str:
    """Return the semester from whichever accepted key carries it."""
    for key in SEMESTER_KEYS:
        value = clean_text(data.get(key))
        if value:
            return value
    return ""


def normalize_student_data(data: Mapping[str, Any]) -> dict:
    """
    Validate and canonicalize student fields.

    Args:
        data: Mapping with name, usn and one of sem/semester/class

    Returns:
        Dict with exactly the keys name, usn and sem

    Raises:
        ValidationError: if any of the three fields is missing or blank,
            or the USN is longer than USN_MAX_LENGTH
    """
    fields = {
        "name": clean_text(data.get("name")),
        "usn": clean_text(data.get("usn")),
        "sem": resolve_semester(data),
    }
    if not all(fields.values()):
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    if len(fields["usn"]) > USN_MAX_LENGTH:
        raise ValidationError(USN_TOO_LONG_MESSAGE)
    return fields


def name_matches(name: str, fragment: str) -> bool:
    """Case-insensitive substring test used by the in-memory filter."""
    return fragment.casefold() in name.casefold()
