"""Tests for RecordCodec encode/decode."""

from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from crawlgraph import codec as codec_module
from crawlgraph.codec.document import Document, FieldName
from crawlgraph.codec.records import (
    DEFAULT_WEBENTITY_CREATION_RULE,
    DEFAULT_WEBENTITY_NAME,
    RecordCodec,
)
from crawlgraph.errors import RecordContractError, UnknownRecordKindError
from crawlgraph.models import (
    NodeLink,
    PageItem,
    PrecisionException,
    RecordKind,
    WebEntity,
    WebEntityCreationRule,
    WebEntityLink,
    WebEntityNodeLink,
)


def _page(**overrides) -> PageItem:
    values = dict(
        lru="s:http|h:com|h:example|p:about|",
        url="http://example.com/about",
        crawler_timestamp="1400000000",
        depth=2,
        error_code="timeout",
        http_status_code=200,
        is_node=True,
        is_full_precision=True,
        sources={"crawl", "link"},
        tags={"USER": {"lang": {"en", "fr"}}},
        creation_date="1000",
    )
    values.update(overrides)
    return PageItem(**values)


class TestRoundTrip:
    """Decode(Encode(r)) returns r apart from generated ids and modification dates."""

    def test_page_item(self, codec: RecordCodec) -> None:
        page = _page()

        decoded = codec.decode(codec.encode(page), RecordKind.PAGE_ITEM)

        assert decoded == replace(
            page, id=decoded.id, last_modification_date=decoded.last_modification_date
        )

    def test_webentity(self, codec: RecordCodec) -> None:
        entity = WebEntity(
            id="we-1",
            name="Example",
            lrus={"s:http|h:com|h:example|", "s:https|h:com|h:example|"},
            status="IN",
            homepage="http://example.com",
            startpages={"http://example.com", "http://example.com/news"},
            tags={"USER": {"type": {"media"}}, "CORE": {"depth": {"2"}}},
            creation_date="1000",
        )

        decoded = codec.decode(codec.encode(entity))

        assert decoded == replace(entity, last_modification_date=decoded.last_modification_date)

    def test_node_link(self, codec: RecordCodec) -> None:
        link = NodeLink(source_lru="s:http|h:com|h:a|", target_lru="s:http|h:com|h:b|", weight=3, creation_date="5")

        decoded = codec.decode(codec.encode(link))

        assert decoded == replace(
            link, id=decoded.id, last_modification_date=decoded.last_modification_date
        )

    def test_webentity_link(self, codec: RecordCodec) -> None:
        link = WebEntityLink(id="l-1", source_id="we-1", target_id="we-2", weight=7, creation_date="5")

        decoded = codec.decode(codec.encode(link))

        assert decoded == replace(link, last_modification_date=decoded.last_modification_date)

    def test_webentity_node_link(self, codec: RecordCodec) -> None:
        link = WebEntityNodeLink(id="wnl-1", source_id="we-1", target_lru="s:http|h:com|h:a|", weight=4)

        assert codec.decode(codec.encode(link)) == link

    def test_creation_rule(self, codec: RecordCodec) -> None:
        rule = WebEntityCreationRule(lru="s:http|h:com|", regexp="(s:[a-zA-Z]+\\|(h:[^|]+\\|)+)", creation_date="9")

        decoded = codec.decode(codec.encode(rule))

        assert decoded == replace(
            rule, id=decoded.id, last_modification_date=decoded.last_modification_date
        )

    def test_precision_exception(self, codec: RecordCodec) -> None:
        exception = PrecisionException(lru="s:http|h:com|h:example|")

        assert codec.decode(codec.encode(exception)) == exception

    def test_module_level_helpers(self) -> None:
        entity = WebEntity(id="we-9", name="x", status="out", creation_date="1")

        decoded = codec_module.decode(codec_module.encode(entity))

        assert decoded.id == "we-9"
        assert decoded.status == "OUT"


class TestIdentity:
    """Identity assignment per kind."""

    def test_supplied_id_is_stable(self, codec: RecordCodec) -> None:
        for record in (
            WebEntity(id="we-1"),
            WebEntityLink(id="l-1", source_id="a", target_id="b"),
            WebEntityNodeLink(id="n-1", source_id="a", target_lru="b"),
        ):
            first = codec.encode(record).get(FieldName.ID)
            second = codec.encode(record).get(FieldName.ID)
            assert first == second == record.id

    def test_missing_id_generated_each_time(self, codec: RecordCodec) -> None:
        for record in (
            WebEntity(),
            WebEntityLink(source_id="a", target_id="b"),
            WebEntityNodeLink(source_id="a", target_lru="b"),
        ):
            first = codec.encode(record).get(FieldName.ID)
            second = codec.encode(record).get(FieldName.ID)
            assert first and second
            assert first != second

    def test_always_new_kinds_ignore_supplied_id(self, codec: RecordCodec) -> None:
        for record in (
            PageItem(lru="x", id="keep-me"),
            NodeLink(source_lru="a", target_lru="b", id="keep-me"),
            WebEntityCreationRule(lru="x", id="keep-me"),
        ):
            assert codec.encode(record).get(FieldName.ID) != "keep-me"

    def test_precision_exception_has_no_id(self, codec: RecordCodec) -> None:
        document = codec.encode(PrecisionException(lru="x"))

        assert document.get(FieldName.ID) is None
        assert document.get(FieldName.LRU) == "x"

    def test_default_ids_are_uuids(self) -> None:
        document = RecordCodec().encode(WebEntity())

        assert len(document.get(FieldName.ID)) == 36


class TestRefusal:
    """Records missing key fields produce no document."""

    @pytest.mark.parametrize(
        "record",
        [
            NodeLink(source_lru="s:http|", target_lru=""),
            NodeLink(source_lru=None, target_lru="s:http|"),
            WebEntityLink(source_id="", target_id="we-2"),
            WebEntityLink(source_id="we-1", target_id=None),
            WebEntityNodeLink(source_id="we-1", target_lru=""),
            WebEntityNodeLink(source_id=None, target_lru="x"),
            PageItem(lru=""),
            PageItem(lru=None),
            PrecisionException(lru=None),
        ],
    )
    def test_refused(self, codec: RecordCodec, record, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert codec.encode(record) is None
        assert "Refusing to encode" in caplog.text

    def test_precision_exception_empty_lru_accepted(self, codec: RecordCodec) -> None:
        assert codec.encode(PrecisionException(lru="")) is not None


class TestContractErrors:
    """Caller mistakes raise."""

    def test_none_record(self, codec: RecordCodec) -> None:
        with pytest.raises(RecordContractError):
            codec.encode(None)  # type: ignore[arg-type]

    def test_not_a_record(self, codec: RecordCodec) -> None:
        with pytest.raises(UnknownRecordKindError):
            codec.encode({"lru": "x"})  # type: ignore[arg-type]

    def test_none_document(self, codec: RecordCodec) -> None:
        with pytest.raises(RecordContractError):
            codec.decode(None)  # type: ignore[arg-type]

    def test_unknown_kind(self, codec: RecordCodec) -> None:
        with pytest.raises(UnknownRecordKindError):
            codec.decode(Document(), "NOT_A_KIND")

    def test_document_without_type(self, codec: RecordCodec) -> None:
        with pytest.raises(UnknownRecordKindError):
            codec.decode(Document([(FieldName.LRU, "x")]))

    def test_unknown_kind_is_value_error(self) -> None:
        assert issubclass(UnknownRecordKindError, ValueError)


class TestCreationRule:
    """WebEntityCreationRule validation and defaults."""

    def test_both_null_raises(self, codec: RecordCodec) -> None:
        with pytest.raises(RecordContractError, match="LRU or a regexp"):
            codec.encode(WebEntityCreationRule())

    def test_pattern_only_uses_default_lru(self, codec: RecordCodec) -> None:
        rule = WebEntityCreationRule(regexp="(s:[a-zA-Z]+\\|)")

        decoded = codec.decode(codec.encode(rule))

        assert decoded.lru == DEFAULT_WEBENTITY_CREATION_RULE
        assert decoded.regexp == rule.regexp

    def test_blank_lru_uses_default(self, codec: RecordCodec) -> None:
        document = codec.encode(WebEntityCreationRule(lru=""))

        assert document.get(FieldName.LRU) == DEFAULT_WEBENTITY_CREATION_RULE
        assert document.get(FieldName.REGEXP) is None


class TestDates:
    """Creation and modification date stamping."""

    def test_creation_kept_modification_advances(self, codec: RecordCodec) -> None:
        entity = WebEntity(id="we-1", creation_date="1000")

        first = codec.encode(entity)
        second = codec.encode(entity)

        assert first.get(FieldName.DATECREA) == second.get(FieldName.DATECREA) == "1000"
        assert int(second.get(FieldName.DATEMODIF)) > int(first.get(FieldName.DATEMODIF))

    def test_creation_defaults_to_now(self, codec: RecordCodec, clock) -> None:
        document = codec.encode(NodeLink(source_lru="a", target_lru="b"))

        assert document.get(FieldName.DATECREA) == document.get(FieldName.DATEMODIF)
        assert int(document.get(FieldName.DATEMODIF)) == clock.now - clock.step

    def test_system_clock_non_decreasing(self) -> None:
        real = RecordCodec()
        entity = WebEntity(id="we-1", creation_date="1")

        first = int(real.encode(entity).get(FieldName.DATEMODIF))
        second = int(real.encode(entity).get(FieldName.DATEMODIF))

        assert second >= first

    @pytest.mark.parametrize(
        "record",
        [
            WebEntityNodeLink(source_id="a", target_lru="b", id="x"),
            PrecisionException(lru="x"),
        ],
    )
    def test_kinds_without_dates(self, codec: RecordCodec, record) -> None:
        document = codec.encode(record)

        assert document.get(FieldName.DATECREA) is None
        assert document.get(FieldName.DATEMODIF) is None


class TestPageItemEncoding:
    """PageItem field details."""

    def test_url_derived_from_lru(self, codec: RecordCodec) -> None:
        page = PageItem(lru="s:http|h:com|h:example|h:www|p:docs|")

        document = codec.encode(page)

        assert document.get(FieldName.URL) == "http://www.example.com/docs"
        assert page.url is None

    def test_sources_repeated(self, codec: RecordCodec) -> None:
        document = codec.encode(_page(sources={"a", "b", "c"}))

        assert sorted(document.get_all(FieldName.SOURCE)) == ["a", "b", "c"]

    def test_optional_strings_omitted(self, codec: RecordCodec) -> None:
        document = codec.encode(PageItem(lru="x", error_code="", crawler_timestamp=None))

        assert document.get(FieldName.ERROR) is None
        assert document.get(FieldName.CRAWLERTS) is None

    def test_scalars_always_written(self, codec: RecordCodec) -> None:
        document = codec.encode(PageItem(lru="x"))

        assert document.get(FieldName.DEPTH) == "0"
        assert document.get(FieldName.HTTPSTATUS) == "0"
        assert document.get(FieldName.IS_NODE) == "false"
        assert document.get(FieldName.FULLPREC) == "false"

    def test_discriminator_written(self, codec: RecordCodec) -> None:
        assert codec.encode(PageItem(lru="x")).kind is RecordKind.PAGE_ITEM


class TestWebEntityEncoding:
    """WebEntity field details."""

    def test_default_name(self, codec: RecordCodec) -> None:
        document = codec.encode(WebEntity())

        assert document.get(FieldName.NAME) == DEFAULT_WEBENTITY_NAME

    def test_status_normalized_on_encode(self, codec: RecordCodec) -> None:
        assert codec.encode(WebEntity(status="in")).get(FieldName.STATUS) == "IN"
        assert codec.encode(WebEntity(status="bogus")).get(FieldName.STATUS) == "DISCOVERED"
        assert codec.encode(WebEntity()).get(FieldName.STATUS) == "DISCOVERED"

    def test_lrus_repeated(self, codec: RecordCodec) -> None:
        document = codec.encode(WebEntity(lrus={"a", "b"}))

        assert sorted(document.get_all(FieldName.LRU)) == ["a", "b"]


class TestDecodeDefaults:
    """Absent optional fields decode to defaults."""

    def test_page_item_defaults(self, codec: RecordCodec) -> None:
        page = codec.decode(Document([(FieldName.TYPE, "PAGE_ITEM"), (FieldName.LRU, "x")]))

        assert page.depth == 0
        assert page.http_status_code == 0
        assert page.is_node is False
        assert page.is_full_precision is False
        assert page.sources == set()
        assert page.tags == {}
        assert page.url is None

    def test_blank_numbers_are_zero(self, codec: RecordCodec) -> None:
        link = codec.decode(
            Document([(FieldName.TYPE, "NODE_LINK"), (FieldName.WEIGHT, " ")])
        )

        assert link.weight == 0

    def test_invalid_status_reads_as_discovered(self, codec: RecordCodec) -> None:
        document = Document([(FieldName.TYPE, "WEBENTITY"), (FieldName.STATUS, "weird")])

        assert codec.decode(document).status == "DISCOVERED"

    def test_duplicate_values_collapse(self, codec: RecordCodec) -> None:
        document = Document(
            [
                (FieldName.TYPE, "WEBENTITY"),
                (FieldName.LRU, "a"),
                (FieldName.LRU, "a"),
                (FieldName.STARTPAGE, "p"),
            ]
        )

        entity = codec.decode(document)

        assert entity.lrus == {"a"}
        assert entity.startpages == {"p"}

    def test_explicit_kind_wins(self, codec: RecordCodec) -> None:
        document = codec.encode(WebEntityLink(id="l", source_id="a", target_id="b", weight=2))

        as_node_link = codec.decode(document, "webentity_node_link")

        assert isinstance(as_node_link, WebEntityNodeLink)
        assert as_node_link.target_lru == "b"
        assert as_node_link.weight == 2
