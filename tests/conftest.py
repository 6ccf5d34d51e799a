"""Shared test fixtures for rowhook."""

from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime, timezone

import pytest

from rowhook.config.manager import ConfigManager
from rowhook.triggers.models import RowsBatch

BATCH_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop ROWHOOK_* variables and the config singleton around every test."""
    for key in list(os.environ):
        if key.startswith("ROWHOOK_"):
            monkeypatch.delenv(key, raising=False)
    ConfigManager._reset_for_tests()
    yield
    ConfigManager._reset_for_tests()


@pytest.fixture
def make_batch():
    """Factory for raw batches as the stream adapter would deliver them."""

    def _make(
        path: str = "shop.orders",
        kind: str = "writerows",
        rows: list[dict] | None = None,
        timestamp: datetime = BATCH_TIME,
    ) -> RowsBatch:
        schema, _, table = path.partition(".")
        return RowsBatch(
            schema=schema,
            table=table,
            kind=kind,
            timestamp=timestamp,
            rows=tuple(rows if rows is not None else [{"id": 1}]),
            table_id=42,
        )

    return _make
