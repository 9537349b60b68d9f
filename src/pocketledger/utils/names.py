"""Name normalization helpers for categories and payees."""

import re
from typing import Iterable, Optional, Protocol, TypeVar


class NamedRecord(Protocol):
    name: str
    display_name: str


RecordT = TypeVar("RecordT", bound=NamedRecord)


def slugify(display_name: str) -> str:
    """Derive the machine name of a category or payee from its display name.

    Lowercases, drops everything except letters, digits, spaces and hyphens,
    turns whitespace into hyphens and collapses repeated hyphens.

    Examples:
        "Food & Dining" -> "food-dining"
        "  Amazon  India " -> "amazon-india"
    """
    slug = display_name.strip().lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def find_by_name(records: Iterable[RecordT], name: str) -> Optional[RecordT]:
    """Find a record whose display name or slug matches ``name`` case-insensitively."""
    wanted = name.strip().lower()
    if not wanted:
        return None
    for record in records:
        if record.display_name.lower() == wanted or record.name.lower() == wanted:
            return record
    return None
