"""Flat multi-valued document handed to the document store."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from crawlgraph.models import RecordKind


class FieldName(str, Enum):
    """Names of fields in the store. Not every document has all of them."""

    ID = "ID"
    TYPE = "TYPE"
    LRU = "LRU"
    URL = "URL"
    CRAWLERTS = "CRAWLERTS"
    DEPTH = "DEPTH"
    ERROR = "ERROR"
    HTTPSTATUS = "HTTPSTATUS"
    STATUS = "STATUS"
    FULLPREC = "FULLPREC"
    IS_NODE = "IS_NODE"
    TAG = "TAG"
    REGEXP = "REGEXP"
    NAME = "NAME"
    HOMEPAGE = "HOMEPAGE"
    STARTPAGE = "STARTPAGE"
    SOURCE = "SOURCE"
    TARGET = "TARGET"
    WEIGHT = "WEIGHT"
    DATECREA = "DATECREA"
    DATEMODIF = "DATEMODIF"


class Document:
    """Ordered multimap of field name to string values.

    Repeated names hold multi-valued fields. Absent and empty-string values
    are indistinguishable to decode.
    """

    __slots__ = ("_fields",)

    def __init__(self, pairs: Iterable[Tuple[FieldName, str]] = ()) -> None:
        self._fields: List[Tuple[FieldName, str]] = []
        for name, value in pairs:
            self.add(name, value)

    def add(self, name: FieldName | str, value: str) -> None:
        if value is None:
            raise ValueError(f"Field {name} cannot hold None")
        self._fields.append((FieldName(name), str(value)))

    def get(self, name: FieldName | str) -> Optional[str]:
        name = FieldName(name)
        for field_name, value in self._fields:
            if field_name is name:
                return value
        return None

    def get_all(self, name: FieldName | str) -> List[str]:
        name = FieldName(name)
        return [value for field_name, value in self._fields if field_name is name]

    @property
    def kind(self) -> Optional[RecordKind]:
        value = self.get(FieldName.TYPE)
        if value is None:
            return None
        try:
            return RecordKind(value)
        except ValueError:
            return None

    @property
    def fields(self) -> List[Tuple[FieldName, str]]:
        return list(self._fields)

    def __iter__(self) -> Iterator[Tuple[FieldName, str]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"Document({self.to_dict()!r})"

    def to_dict(self) -> Dict[str, List[str]]:
        data: Dict[str, List[str]] = {}
        for name, value in self._fields:
            data.setdefault(name.value, []).append(value)
        return data

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "Document":
        return cls((FieldName(name), value) for name, value in pairs)

    @classmethod
    def from_dict(cls, data: Dict[str, Iterable[str]]) -> "Document":
        return cls(
            (FieldName(name), value) for name, values in data.items() for value in values
        )
