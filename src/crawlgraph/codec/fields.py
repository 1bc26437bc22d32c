"""Shared field writers and readers used by every record kind."""

from __future__ import annotations

from typing import Iterable, Optional, Set

from crawlgraph.codec.document import Document, FieldName


def write_optional(document: Document, name: FieldName, value: Optional[str]) -> None:
    """Write ``value`` unless it is None or empty."""
    if value:
        document.add(name, value)


def write_int(document: Document, name: FieldName, value: int) -> None:
    document.add(name, str(int(value)))


def write_bool(document: Document, name: FieldName, value: bool) -> None:
    document.add(name, "true" if value else "false")


def write_many(document: Document, name: FieldName, values: Optional[Iterable[str]]) -> None:
    """Write one entry per element, in iteration order."""
    if values is None:
        return
    for value in values:
        document.add(name, value)


def stamp_dates(document: Document, creation_date: Optional[str], now: int) -> None:
    """Set the creation date (kept if supplied) and the modification date (always now)."""
    current = str(now)
    document.add(FieldName.DATECREA, creation_date or current)
    document.add(FieldName.DATEMODIF, current)


def read_int(document: Document, name: FieldName) -> int:
    value = document.get(name)
    if value is None or not value.strip():
        return 0
    return int(value)


def read_bool(document: Document, name: FieldName) -> bool:
    value = document.get(name)
    return value is not None and value.strip().lower() == "true"


def read_set(document: Document, name: FieldName) -> Set[str]:
    return set(document.get_all(name))
