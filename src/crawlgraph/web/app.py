"""FastAPI application exposing the crawlgraph store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from crawlgraph.config import AppConfig
from crawlgraph.errors import RecordContractError
from crawlgraph.index.loader import RecordLoader
from crawlgraph.index.reader import RecordReader
from crawlgraph.index.storage import SQLiteDocumentStore
from crawlgraph.models import RECORD_TYPES, RecordKind

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="crawlgraph API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class RecordPayload(BaseModel):
    record: Dict[str, Any]
    db: Path | None = None


def _resolve_db_path(db: Path | None) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _parse_kind(kind: str) -> RecordKind:
    try:
        return RecordKind.parse(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown record kind: {kind}")


def _open_existing(db: Path | None) -> SQLiteDocumentStore:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail=f"Database not found at {resolved_db}")
    return SQLiteDocumentStore(resolved_db)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/stats")
async def get_stats(db: Path | None = None) -> dict[str, Any]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {"counts": {kind.value: 0 for kind in RecordKind}}

    store = SQLiteDocumentStore(resolved_db)
    try:
        counts = store.count_by_type()
    finally:
        store.close()
    return {"counts": {kind.value: counts.get(kind.value, 0) for kind in RecordKind}}


@app.get("/records/{kind}")
async def list_records(kind: str, db: Path | None = None, limit: int | None = None) -> dict[str, Any]:
    """List decoded records of one kind."""
    record_kind = _parse_kind(kind)
    if limit is None:
        limit = AppConfig().page_size
    limit = max(1, min(limit, 1000))

    store = _open_existing(db)
    try:
        records = RecordReader(store).records(record_kind, limit=limit)
    finally:
        store.close()
    return {"kind": record_kind.value, "records": [record.to_dict() for record in records]}


@app.post("/records/{kind}")
async def write_record(kind: str, payload: RecordPayload) -> dict[str, Any]:
    """Encode one record and write it to the store."""
    record_kind = _parse_kind(kind)
    try:
        record = RECORD_TYPES[record_kind].from_dict(payload.record)
    except (ValidationError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid record: {exc}")

    resolved_db = _resolve_db_path(payload.db)
    _ensure_db_parent(resolved_db)
    store = SQLiteDocumentStore(resolved_db)
    try:
        status, key = RecordLoader(store).load_one(record)
    except RecordContractError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    finally:
        store.close()

    if status == "refused":
        raise HTTPException(
            status_code=422,
            detail=f"{record_kind.value} record is missing a required field and was not stored",
        )
    LOGGER.info("Stored %s record %s (%s)", record_kind.value, key, status)
    return {"status": status, "kind": record_kind.value, "key": key}


@app.get("/documents/{record_id:path}")
async def get_document(record_id: str, db: Path | None = None) -> dict[str, Any]:
    """Return the raw stored fields of one document."""
    store = _open_existing(db)
    try:
        document = store.get(record_id)
    finally:
        store.close()

    if document is None:
        raise HTTPException(status_code=404, detail=f"Document {record_id} not found")
    return {"fields": document.to_dict()}


@app.delete("/documents/{kind}/{key:path}")
async def delete_document(kind: str, key: str, db: Path | None = None) -> dict[str, Any]:
    record_kind = _parse_kind(kind)
    store = _open_existing(db)
    try:
        deleted = store.delete(record_kind, key)
    finally:
        store.close()

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Document {key} not found")
    return {"status": "ok", "deleted": key}
