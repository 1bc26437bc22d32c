"""Read records back out of the document store."""

from __future__ import annotations

from typing import List, Optional

from crawlgraph.codec.records import RecordCodec
from crawlgraph.index.storage import SQLiteDocumentStore
from crawlgraph.models import Record, RecordKind


class RecordReader:
    """High-level API to fetch and decode stored records."""

    def __init__(self, store: SQLiteDocumentStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()

    def records(self, kind: RecordKind, *, limit: int | None = None) -> List[Record]:
        documents = self.store.documents_by_type(kind, limit=limit)
        return [self.codec.decode(document, kind) for document in documents]

    def get(self, record_id: str) -> Optional[Record]:
        document = self.store.get(record_id)
        if document is None:
            return None
        return self.codec.decode(document)
