"""Utility helpers for reading record files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator

RECORD_SUFFIXES = {".json", ".jsonl"}


def iter_record_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield JSON and JSON-lines paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_record_paths(
                sorted(child for child in item.rglob("*") if child.is_file())
            )
        elif item.is_file() and item.suffix.lower() in RECORD_SUFFIXES:
            yield item


def read_record_dicts(path: Path) -> Iterator[Dict[str, Any]]:
    """Yield record dicts from a ``.jsonl`` file or a ``.json`` array/object."""
    if path.suffix.lower() == ".jsonl":
        with path.open("r", encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"{path}:{line_no}: invalid JSON ({exc.msg})") from exc
        return

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        yield from data
    else:
        yield data
