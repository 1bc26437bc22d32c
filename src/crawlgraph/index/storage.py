"""SQLite document store holding flat multi-valued documents."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from crawlgraph.codec.document import Document, FieldName
from crawlgraph.models import RecordKind


def document_key(document: Document) -> Optional[str]:
    """Return the value a document is keyed by: its ID, else its LRU."""
    return document.get(FieldName.ID) or document.get(FieldName.LRU)


class SQLiteDocumentStore:
    """Persistence layer for codec documents.

    Each document is one row in ``documents`` plus one row per field entry
    in ``fields``, so repeated fields keep their order and cardinality.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.execute("PRAGMA foreign_keys=ON;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    kind TEXT NOT NULL,
                    key TEXT NOT NULL,
                    stored_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(kind, key)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS fields (
                    id INTEGER PRIMARY KEY,
                    document_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    value TEXT NOT NULL,
                    FOREIGN KEY(document_id) REFERENCES documents(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_fields_document_id
                    ON fields(document_id)
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_documents_key
                    ON documents(key)
                """
            )

    def write(self, document: Document) -> str:
        """Persist a document, replacing any stored one with the same kind and key.

        Returns:
            'inserted' or 'updated'.
        """
        kind = document.get(FieldName.TYPE)
        if not kind:
            raise ValueError("Document has no TYPE field")
        key = document_key(document)
        if not key:
            raise ValueError(f"{kind} document has neither ID nor LRU")

        with self.transaction() as conn:
            existing = conn.execute(
                "SELECT id FROM documents WHERE kind = ? AND key = ?",
                (kind, key),
            ).fetchone()
            if existing:
                conn.execute("DELETE FROM fields WHERE document_id = ?", (existing["id"],))
                conn.execute("DELETE FROM documents WHERE id = ?", (existing["id"],))

            doc_id = conn.execute(
                "INSERT INTO documents(kind, key) VALUES (?, ?)",
                (kind, key),
            ).lastrowid
            conn.executemany(
                """
                INSERT INTO fields(document_id, position, name, value)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (doc_id, position, name.value, value)
                    for position, (name, value) in enumerate(document)
                ],
            )
        return "updated" if existing else "inserted"

    def _load(self, doc_id: int) -> Document:
        rows = self._conn.execute(
            "SELECT name, value FROM fields WHERE document_id = ? ORDER BY position",
            (doc_id,),
        ).fetchall()
        return Document.from_pairs((row["name"], row["value"]) for row in rows)

    def get(self, record_id: str) -> Optional[Document]:
        """Return the document keyed by ``record_id``, whatever its kind."""
        row = self._conn.execute(
            "SELECT id FROM documents WHERE key = ? ORDER BY id LIMIT 1",
            (record_id,),
        ).fetchone()
        if row is None:
            return None
        return self._load(row["id"])

    def documents_by_type(self, kind: RecordKind, *, limit: int | None = None) -> List[Document]:
        query = "SELECT id FROM documents WHERE kind = ? ORDER BY id"
        params: tuple = (RecordKind(kind).value,)
        if limit is not None:
            query += " LIMIT ?"
            params += (limit,)
        rows = self._conn.execute(query, params).fetchall()
        return [self._load(row["id"]) for row in rows]

    def delete(self, kind: RecordKind, key: str) -> bool:
        """Delete one document. Returns True if something was removed."""
        with self.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM documents WHERE kind = ? AND key = ?",
                (RecordKind(kind).value, key),
            )
        return cursor.rowcount > 0

    def count_by_type(self) -> Dict[str, int]:
        rows = self._conn.execute(
            "SELECT kind, COUNT(*) AS total FROM documents GROUP BY kind ORDER BY kind"
        ).fetchall()
        return {row["kind"]: row["total"] for row in rows}
