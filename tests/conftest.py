"""Shared fixtures."""

from __future__ import annotations

import itertools

import pytest

from crawlgraph.codec.records import RecordCodec
from crawlgraph.index.storage import SQLiteDocumentStore


class StepClock:
    """Deterministic clock advancing by ``step`` milliseconds per read."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def codec(clock: StepClock) -> RecordCodec:
    counter = itertools.count(1)
    return RecordCodec(clock=clock, id_factory=lambda: f"id-{next(counter)}")


@pytest.fixture
def store(tmp_path):
    """Create a temporary document store."""
    store = SQLiteDocumentStore(tmp_path / "test.db")
    yield store
    store.close()
