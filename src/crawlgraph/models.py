"""Core crawlgraph record models.

Seven record kinds share one flat document schema in the store. In memory
each kind is its own dataclass carrying only its own fields; the
discriminator is computed from the class, never stored on the instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, Optional, Set, Type, Union

from pydantic import TypeAdapter

Tags = Dict[str, Dict[str, Set[str]]]


class RecordKind(str, Enum):
    """Values stored in the ``TYPE`` field of every document."""

    PAGE_ITEM = "PAGE_ITEM"
    NODE_LINK = "NODE_LINK"
    PRECISION_EXCEPTION = "PRECISION_EXCEPTION"
    WEBENTITY = "WEBENTITY"
    WEBENTITY_NODE_LINK = "WEBENTITY_NODE_LINK"
    WEBENTITY_LINK = "WEBENTITY_LINK"
    WEBENTITY_CREATION_RULE = "WEBENTITY_CREATION_RULE"

    @classmethod
    def parse(cls, value: str) -> "RecordKind":
        """Look up a kind by name, accepting any case and dashes."""
        return cls(value.strip().upper().replace("-", "_"))


@lru_cache(maxsize=None)
def _adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def _tags_to_json(tags: Tags) -> Dict[str, Dict[str, list]]:
    return {
        namespace: {key: sorted(values) for key, values in keys.items()}
        for namespace, keys in tags.items()
    }


class _RecordMixin:
    __slots__ = ()

    kind: ClassVar[RecordKind]
    has_identity: ClassVar[bool] = True
    has_timestamps: ClassVar[bool] = True
    set_fields: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Build a record from JSON-friendly data (lists for sets).

        Raises:
            ValueError: unknown field names.
            pydantic.ValidationError: values of the wrong type, such as a
                bare string for a set or a non-numeric depth.
        """
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown fields for {cls.kind.value}: {sorted(unknown)}")
        return _adapter(cls).validate_python(data)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if f.name in self.set_fields:
                value = sorted(value)
            elif f.name == "tags":
                value = _tags_to_json(value)
            data[f.name] = value
        return data


@dataclass(slots=True)
class PageItem(_RecordMixin):
    """A crawled page, keyed by its LRU."""

    kind: ClassVar[RecordKind] = RecordKind.PAGE_ITEM
    set_fields: ClassVar[tuple[str, ...]] = ("sources",)

    lru: Optional[str] = None
    url: Optional[str] = None
    id: Optional[str] = None
    crawler_timestamp: Optional[str] = None
    depth: int = 0
    error_code: Optional[str] = None
    http_status_code: int = 0
    is_node: bool = False
    is_full_precision: bool = False
    sources: Set[str] = field(default_factory=set)
    tags: Tags = field(default_factory=dict)
    creation_date: Optional[str] = None
    last_modification_date: Optional[str] = None


@dataclass(slots=True)
class WebEntity(_RecordMixin):
    """A group of LRU prefixes standing for one site or actor."""

    kind: ClassVar[RecordKind] = RecordKind.WEBENTITY
    set_fields: ClassVar[tuple[str, ...]] = ("lrus", "startpages")

    id: Optional[str] = None
    name: Optional[str] = None
    lrus: Set[str] = field(default_factory=set)
    status: Optional[str] = None
    homepage: Optional[str] = None
    startpages: Set[str] = field(default_factory=set)
    tags: Tags = field(default_factory=dict)
    creation_date: Optional[str] = None
    last_modification_date: Optional[str] = None


@dataclass(slots=True)
class NodeLink(_RecordMixin):
    """A hyperlink between two pages."""

    kind: ClassVar[RecordKind] = RecordKind.NODE_LINK

    source_lru: Optional[str] = None
    target_lru: Optional[str] = None
    weight: int = 0
    id: Optional[str] = None
    creation_date: Optional[str] = None
    last_modification_date: Optional[str] = None


@dataclass(slots=True)
class WebEntityLink(_RecordMixin):
    """An aggregated link between two web entities."""

    kind: ClassVar[RecordKind] = RecordKind.WEBENTITY_LINK

    source_id: Optional[str] = None
    target_id: Optional[str] = None
    weight: int = 0
    id: Optional[str] = None
    creation_date: Optional[str] = None
    last_modification_date: Optional[str] = None


@dataclass(slots=True)
class WebEntityNodeLink(_RecordMixin):
    """A link from a web entity to a page. Carries no timestamps."""

    kind: ClassVar[RecordKind] = RecordKind.WEBENTITY_NODE_LINK
    has_timestamps: ClassVar[bool] = False

    source_id: Optional[str] = None
    target_lru: Optional[str] = None
    weight: int = 0
    id: Optional[str] = None


@dataclass(slots=True)
class WebEntityCreationRule(_RecordMixin):
    """Rule telling the crawler how to cut new web entities under an LRU prefix."""

    kind: ClassVar[RecordKind] = RecordKind.WEBENTITY_CREATION_RULE

    lru: Optional[str] = None
    regexp: Optional[str] = None
    id: Optional[str] = None
    creation_date: Optional[str] = None
    last_modification_date: Optional[str] = None


@dataclass(slots=True)
class PrecisionException(_RecordMixin):
    """An LRU crawled at full precision. The LRU is its own identity."""

    kind: ClassVar[RecordKind] = RecordKind.PRECISION_EXCEPTION
    has_identity: ClassVar[bool] = False
    has_timestamps: ClassVar[bool] = False

    lru: Optional[str] = None


Record = Union[
    PageItem,
    WebEntity,
    NodeLink,
    WebEntityLink,
    WebEntityNodeLink,
    WebEntityCreationRule,
    PrecisionException,
]

RECORD_TYPES: Dict[RecordKind, Type[Any]] = {
    cls.kind: cls
    for cls in (
        PageItem,
        WebEntity,
        NodeLink,
        WebEntityLink,
        WebEntityNodeLink,
        WebEntityCreationRule,
        PrecisionException,
    )
}


def record_kind(record: Record) -> RecordKind:
    """Return the discriminator for a record instance."""
    return type(record).kind


def record_key(record: Record) -> Optional[str]:
    """Return the value a record is keyed by in the store."""
    if record.has_identity:
        return record.id  # type: ignore[union-attr]
    return record.lru  # type: ignore[union-attr]
