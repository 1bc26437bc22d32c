"""Record codec: typed crawl records to flat store documents and back."""

from __future__ import annotations

from typing import Optional

from crawlgraph.codec.document import Document, FieldName
from crawlgraph.codec.records import (
    DEFAULT_WEBENTITY_CREATION_RULE,
    DEFAULT_WEBENTITY_NAME,
    RecordCodec,
)
from crawlgraph.codec.status import Status, normalize_status
from crawlgraph.models import Record, RecordKind

_default_codec = RecordCodec()


def encode(record: Record) -> Optional[Document]:
    """Encode ``record`` with the process-wide codec."""
    return _default_codec.encode(record)


def decode(document: Document, kind: RecordKind | str | None = None) -> Record:
    """Decode ``document`` with the process-wide codec."""
    return _default_codec.decode(document, kind)


__all__ = [
    "DEFAULT_WEBENTITY_CREATION_RULE",
    "DEFAULT_WEBENTITY_NAME",
    "Document",
    "FieldName",
    "RecordCodec",
    "Status",
    "decode",
    "encode",
    "normalize_status",
]
