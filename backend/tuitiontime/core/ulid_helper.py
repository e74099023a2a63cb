"""ULID helpers. Every primary key in the schema is a 26 character ULID string."""

import ulid

ULID_LENGTH = 26


def generate_ulid() -> str:
    return str(ulid.ULID())


def is_valid_ulid(value: str) -> bool:
    """True when ``value`` parses as a ULID (used to collapse ids in metric labels)."""
    if not value or len(value) != ULID_LENGTH:
        return False
    try:
        ulid.ULID.from_str(value)
    except ValueError:
        return False
    return True
