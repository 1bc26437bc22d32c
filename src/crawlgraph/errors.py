"""Exceptions raised by crawlgraph."""

from __future__ import annotations


class CrawlgraphError(Exception):
    """Base class for crawlgraph errors."""


class RecordContractError(CrawlgraphError, ValueError):
    """The caller handed the codec something it must never receive.

    Raised for a missing record or document and for a creation rule with
    neither an LRU nor a pattern. Results must not be stored.
    """


class UnknownRecordKindError(RecordContractError):
    """The discriminator does not name a known record kind."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"Unknown record kind: {kind!r}")
        self.kind = kind
