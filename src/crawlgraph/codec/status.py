"""Web entity status values."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Status(str, Enum):
    UNDECIDED = "UNDECIDED"
    IN = "IN"
    OUT = "OUT"
    DISCOVERED = "DISCOVERED"


def normalize_status(value: Optional[str]) -> str:
    """Return the canonical status name for ``value``, or DISCOVERED.

    Matching is case-insensitive; empty and unknown values fall back to
    DISCOVERED so documents written with a bad status stay readable.
    """
    if value:
        candidate = value.upper()
        for status in Status:
            if status.value == candidate:
                return status.value
    return Status.DISCOVERED.value
