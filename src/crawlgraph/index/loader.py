"""Record loading pipeline: encode records and persist the documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from crawlgraph.codec.records import RecordCodec
from crawlgraph.errors import RecordContractError
from crawlgraph.index.storage import SQLiteDocumentStore, document_key
from crawlgraph.models import Record, record_kind

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadStats:
    inserted: int = 0
    updated: int = 0
    refused: int = 0
    failed: int = 0
    keys: List[str] = field(default_factory=list)

    def increment(self, status: str, key: Optional[str] = None) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        elif status == "refused":
            self.refused += 1
        else:
            self.failed += 1
        if key:
            self.keys.append(key)

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.refused + self.failed


class RecordLoader:
    """Coordinates record encoding and persistence."""

    def __init__(self, store: SQLiteDocumentStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()

    def load(self, records: Iterable[Record]) -> LoadStats:
        """Encode and write every record. Bad records never stop the batch."""
        stats = LoadStats()
        for record in records:
            try:
                status, key = self.load_one(record)
            except RecordContractError as exc:
                LOGGER.error("Rejected record %r: %s", record, exc)
                status, key = "failed", None
            except Exception as exc:
                LOGGER.error("Failed to load record %r: %s", record, exc)
                status, key = "failed", None
            stats.increment(status, key)
        return stats

    def load_one(self, record: Record) -> Tuple[str, Optional[str]]:
        """Encode and write a single record.

        Returns:
            (status, key) where status is 'inserted', 'updated' or 'refused'.
            If refused, key is None. Contract errors propagate.
        """
        document = self.codec.encode(record)
        if document is None:
            LOGGER.info("Skipping refused %s record", record_kind(record).value)
            return "refused", None

        status = self.store.write(document)
        return status, document_key(document)
