"""Conversion between records and store documents.

Encode writes the ``TYPE`` discriminator, assigns identity, writes every
present field and stamps dates for the kinds that carry them. A record
missing a field it is keyed or linked by is refused: encode logs a warning
and returns ``None`` so batch callers can skip it. Caller mistakes (no
record at all, a creation rule with nothing to match) raise
:class:`RecordContractError`.

Decode is plain field extraction. Absent numbers read as 0, absent flags as
False, repeated fields are collected into sets.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from crawlgraph.codec.document import Document, FieldName
from crawlgraph.codec.fields import (
    read_bool,
    read_int,
    read_set,
    stamp_dates,
    write_bool,
    write_int,
    write_many,
    write_optional,
)
from crawlgraph.codec.identity import Clock, IdFactory, SystemClock, random_id
from crawlgraph.codec.status import normalize_status
from crawlgraph.codec.tags import decode_tags, encode_tags
from crawlgraph.errors import RecordContractError, UnknownRecordKindError
from crawlgraph.models import (
    RECORD_TYPES,
    NodeLink,
    PageItem,
    PrecisionException,
    Record,
    RecordKind,
    WebEntity,
    WebEntityCreationRule,
    WebEntityLink,
    WebEntityNodeLink,
)
from crawlgraph.utils.lru import revert_lru

LOGGER = logging.getLogger(__name__)

DEFAULT_WEBENTITY_NAME = "OUTSIDE WEB"
DEFAULT_WEBENTITY_CREATION_RULE = "DEFAULT_WEBENTITY_CREATION_RULE"


class RecordCodec:
    """Encode records into documents and decode them back.

    The codec keeps no state besides its id source and clock, so one
    instance can be shared between threads.
    """

    def __init__(self, *, clock: Clock | None = None, id_factory: IdFactory | None = None) -> None:
        self.clock = clock or SystemClock()
        self.id_factory = id_factory or random_id
        self._encoders: Dict[RecordKind, Callable[..., Optional[Document]]] = {
            RecordKind.PAGE_ITEM: self._encode_page_item,
            RecordKind.WEBENTITY: self._encode_webentity,
            RecordKind.NODE_LINK: self._encode_node_link,
            RecordKind.WEBENTITY_LINK: self._encode_webentity_link,
            RecordKind.WEBENTITY_NODE_LINK: self._encode_webentity_node_link,
            RecordKind.WEBENTITY_CREATION_RULE: self._encode_creation_rule,
            RecordKind.PRECISION_EXCEPTION: self._encode_precision_exception,
        }
        self._decoders: Dict[RecordKind, Callable[[Document], Record]] = {
            RecordKind.PAGE_ITEM: self._decode_page_item,
            RecordKind.WEBENTITY: self._decode_webentity,
            RecordKind.NODE_LINK: self._decode_node_link,
            RecordKind.WEBENTITY_LINK: self._decode_webentity_link,
            RecordKind.WEBENTITY_NODE_LINK: self._decode_webentity_node_link,
            RecordKind.WEBENTITY_CREATION_RULE: self._decode_creation_rule,
            RecordKind.PRECISION_EXCEPTION: self._decode_precision_exception,
        }

    # ------------------------------------------------------------------
    # encode
    # ------------------------------------------------------------------

    def encode(self, record: Record) -> Optional[Document]:
        """Return the document for ``record``, or None if it is refused."""
        if record is None:
            raise RecordContractError("Cannot encode a missing record")
        kind = getattr(type(record), "kind", None)
        if RECORD_TYPES.get(kind) is not type(record):
            raise UnknownRecordKindError(type(record).__name__)
        return self._encoders[kind](record)

    def _new_document(self, kind: RecordKind) -> Document:
        document = Document()
        document.add(FieldName.TYPE, kind.value)
        return document

    def _encode_page_item(self, page: PageItem) -> Optional[Document]:
        if not page.lru:
            LOGGER.warning("Refusing to encode PageItem without LRU")
            return None

        document = self._new_document(page.kind)
        document.add(FieldName.ID, self.id_factory())
        document.add(FieldName.LRU, page.lru)
        document.add(FieldName.URL, page.url or revert_lru(page.lru))
        write_optional(document, FieldName.CRAWLERTS, page.crawler_timestamp)
        write_int(document, FieldName.DEPTH, page.depth)
        write_optional(document, FieldName.ERROR, page.error_code)
        write_int(document, FieldName.HTTPSTATUS, page.http_status_code)
        write_bool(document, FieldName.IS_NODE, page.is_node)
        write_bool(document, FieldName.FULLPREC, page.is_full_precision)
        write_many(document, FieldName.SOURCE, page.sources)
        encode_tags(document, page.tags)
        stamp_dates(document, page.creation_date, self.clock())
        return document

    def _encode_webentity(self, entity: WebEntity) -> Document:
        document = self._new_document(entity.kind)
        entity_id = entity.id or self.id_factory()
        LOGGER.debug("Encoding web entity %s", entity_id)
        document.add(FieldName.ID, entity_id)
        document.add(FieldName.NAME, entity.name or DEFAULT_WEBENTITY_NAME)
        write_many(document, FieldName.LRU, entity.lrus)
        document.add(FieldName.STATUS, normalize_status(entity.status))
        write_optional(document, FieldName.HOMEPAGE, entity.homepage)
        write_many(document, FieldName.STARTPAGE, entity.startpages)
        encode_tags(document, entity.tags)
        stamp_dates(document, entity.creation_date, self.clock())
        return document

    def _encode_node_link(self, link: NodeLink) -> Optional[Document]:
        if not link.source_lru or not link.target_lru:
            LOGGER.warning("Refusing to encode NodeLink without source or target LRU")
            return None

        document = self._new_document(link.kind)
        document.add(FieldName.ID, self.id_factory())
        document.add(FieldName.SOURCE, link.source_lru)
        document.add(FieldName.TARGET, link.target_lru)
        write_int(document, FieldName.WEIGHT, link.weight)
        stamp_dates(document, link.creation_date, self.clock())
        return document

    def _encode_webentity_link(self, link: WebEntityLink) -> Optional[Document]:
        if not link.source_id or not link.target_id:
            LOGGER.warning("Refusing to encode WebEntityLink without source or target")
            return None

        document = self._new_document(link.kind)
        document.add(FieldName.ID, link.id or self.id_factory())
        document.add(FieldName.SOURCE, link.source_id)
        document.add(FieldName.TARGET, link.target_id)
        write_int(document, FieldName.WEIGHT, link.weight)
        stamp_dates(document, link.creation_date, self.clock())
        return document

    def _encode_webentity_node_link(self, link: WebEntityNodeLink) -> Optional[Document]:
        if not link.source_id or not link.target_lru:
            LOGGER.warning("Refusing to encode WebEntityNodeLink without source or target")
            return None

        # No dates on this kind.
        document = self._new_document(link.kind)
        document.add(FieldName.ID, link.id or self.id_factory())
        document.add(FieldName.SOURCE, link.source_id)
        document.add(FieldName.TARGET, link.target_lru)
        write_int(document, FieldName.WEIGHT, link.weight)
        return document

    def _encode_creation_rule(self, rule: WebEntityCreationRule) -> Document:
        if rule.lru is None and rule.regexp is None:
            raise RecordContractError("WebEntityCreationRule needs an LRU or a regexp")

        document = self._new_document(rule.kind)
        document.add(FieldName.ID, self.id_factory())
        document.add(FieldName.LRU, rule.lru or DEFAULT_WEBENTITY_CREATION_RULE)
        if rule.regexp is not None:
            document.add(FieldName.REGEXP, rule.regexp)
        stamp_dates(document, rule.creation_date, self.clock())
        return document

    def _encode_precision_exception(self, exception: PrecisionException) -> Optional[Document]:
        if exception.lru is None:
            LOGGER.warning("Refusing to encode PrecisionException without LRU")
            return None

        document = self._new_document(exception.kind)
        document.add(FieldName.LRU, exception.lru)
        return document

    # ------------------------------------------------------------------
    # decode
    # ------------------------------------------------------------------

    def decode(self, document: Document, kind: RecordKind | str | None = None) -> Record:
        """Rebuild a record from ``document``.

        ``kind`` defaults to the document's own ``TYPE`` field.
        """
        if document is None:
            raise RecordContractError("Cannot decode a missing document")
        resolved = _resolve_kind(document, kind)
        return self._decoders[resolved](document)

    def _decode_page_item(self, document: Document) -> PageItem:
        return PageItem(
            id=document.get(FieldName.ID),
            lru=document.get(FieldName.LRU),
            url=document.get(FieldName.URL),
            crawler_timestamp=document.get(FieldName.CRAWLERTS),
            depth=read_int(document, FieldName.DEPTH),
            error_code=document.get(FieldName.ERROR),
            http_status_code=read_int(document, FieldName.HTTPSTATUS),
            is_node=read_bool(document, FieldName.IS_NODE),
            is_full_precision=read_bool(document, FieldName.FULLPREC),
            sources=read_set(document, FieldName.SOURCE),
            tags=decode_tags(document.get_all(FieldName.TAG)),
            creation_date=document.get(FieldName.DATECREA),
            last_modification_date=document.get(FieldName.DATEMODIF),
        )

    def _decode_webentity(self, document: Document) -> WebEntity:
        entity = WebEntity(
            id=document.get(FieldName.ID),
            name=document.get(FieldName.NAME),
            lrus=read_set(document, FieldName.LRU),
            status=normalize_status(document.get(FieldName.STATUS)),
            homepage=document.get(FieldName.HOMEPAGE),
            startpages=read_set(document, FieldName.STARTPAGE),
            tags=decode_tags(document.get_all(FieldName.TAG)),
            creation_date=document.get(FieldName.DATECREA),
            last_modification_date=document.get(FieldName.DATEMODIF),
        )
        LOGGER.debug("Decoded web entity %s with %d LRUs", entity.id, len(entity.lrus))
        return entity

    def _decode_node_link(self, document: Document) -> NodeLink:
        return NodeLink(
            id=document.get(FieldName.ID),
            source_lru=document.get(FieldName.SOURCE),
            target_lru=document.get(FieldName.TARGET),
            weight=read_int(document, FieldName.WEIGHT),
            creation_date=document.get(FieldName.DATECREA),
            last_modification_date=document.get(FieldName.DATEMODIF),
        )

    def _decode_webentity_link(self, document: Document) -> WebEntityLink:
        return WebEntityLink(
            id=document.get(FieldName.ID),
            source_id=document.get(FieldName.SOURCE),
            target_id=document.get(FieldName.TARGET),
            weight=read_int(document, FieldName.WEIGHT),
            creation_date=document.get(FieldName.DATECREA),
            last_modification_date=document.get(FieldName.DATEMODIF),
        )

    def _decode_webentity_node_link(self, document: Document) -> WebEntityNodeLink:
        return WebEntityNodeLink(
            id=document.get(FieldName.ID),
            source_id=document.get(FieldName.SOURCE),
            target_lru=document.get(FieldName.TARGET),
            weight=read_int(document, FieldName.WEIGHT),
        )

    def _decode_creation_rule(self, document: Document) -> WebEntityCreationRule:
        return WebEntityCreationRule(
            id=document.get(FieldName.ID),
            lru=document.get(FieldName.LRU),
            regexp=document.get(FieldName.REGEXP),
            creation_date=document.get(FieldName.DATECREA),
            last_modification_date=document.get(FieldName.DATEMODIF),
        )

    def _decode_precision_exception(self, document: Document) -> PrecisionException:
        return PrecisionException(lru=document.get(FieldName.LRU))


def _resolve_kind(document: Document, kind: RecordKind | str | None) -> RecordKind:
    if kind is None:
        resolved = document.kind
        if resolved is None:
            raise UnknownRecordKindError(document.get(FieldName.TYPE))
        return resolved
    if isinstance(kind, RecordKind):
        return kind
    try:
        return RecordKind.parse(kind)
    except (AttributeError, ValueError) as exc:
        raise UnknownRecordKindError(kind) from exc
